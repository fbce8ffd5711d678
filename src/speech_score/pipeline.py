import time
from pathlib import Path
from typing import Callable, Optional

import numpy as np

from speech_score.asr.ctc import decode_greedy
from speech_score.asr.inference import run_inference
from speech_score.asr.session import ModelInfo, ModelSession
from speech_score.asr.vocab import Vocabulary
from speech_score.audio.features import audio_stats, standardize
from speech_score.audio.resample import to_mono_16k
from speech_score.audio.wav import parse_wav
from speech_score.log import get_logger
from speech_score.metrics import evaluate
from speech_score.models import TranscriptionResult

logger = get_logger(__name__)

ProgressCallback = Callable[[str, int], None]


def preprocess_wav(data: bytes) -> np.ndarray:
    """WAV bytes -> standardized mono 16kHz float32 features."""
    raw = parse_wav(data)
    signal = to_mono_16k(raw)
    logger.debug(f"[PRE] raw: samples={len(signal)} {audio_stats(signal)}")
    features = standardize(signal)
    logger.debug(f"[PRE] standardized: {audio_stats(features)}")
    return features


class SpeechEvaluator:
    """Runs WAV -> text -> CER/WER with one model session and one vocabulary.

    Holds no per-call state, so one instance can serve many recordings. Calls
    into the model are not serialized here; see EvaluationWorker for that.
    """

    def __init__(self, session: ModelSession, vocab: Vocabulary, input_name: str, output_name: str):
        self.session = session
        self.vocab = vocab
        self.input_name = input_name
        self.output_name = output_name

    @classmethod
    def from_model_info(cls, info: ModelInfo, vocab: Vocabulary) -> "SpeechEvaluator":
        return cls(info.session, vocab, info.input_name, info.output_name)

    def transcribe(self, data: bytes) -> str:
        features = preprocess_wav(data)
        logits = run_inference(self.session, features, self.input_name, self.output_name)
        return decode_greedy(logits, self.vocab)

    def process(
        self,
        source: bytes | str | Path,
        reference: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> TranscriptionResult:
        def progress(stage: str, percent: int):
            if on_progress:
                on_progress(stage, percent)

        if isinstance(source, (str, Path)):
            logger.info(f"[PIPELINE] Processing {source}")
            data = Path(source).read_bytes()
        else:
            data = source
        if reference is not None:
            logger.info(f"[PIPELINE] Reference: {reference}")

        timings = {}
        started = time.time()

        progress("preprocessing", 0)
        t0 = time.time()
        features = preprocess_wav(data)
        timings["preprocessing"] = time.time() - t0
        progress("preprocessing", 100)
        logger.info(f"[PIPELINE] Preprocessed {len(features)} samples")

        progress("inference", 0)
        t0 = time.time()
        logits = run_inference(self.session, features, self.input_name, self.output_name)
        timings["inference"] = time.time() - t0
        progress("inference", 100)

        progress("decoding", 0)
        t0 = time.time()
        text = decode_greedy(logits, self.vocab)
        timings["decoding"] = time.time() - t0
        progress("decoding", 100)
        logger.info(f"[PIPELINE] Recognized: {text!r}")

        metrics = None
        if reference is not None:
            progress("metrics", 0)
            t0 = time.time()
            metrics = evaluate(reference, text)
            timings["evaluation"] = time.time() - t0
            progress("metrics", 100)
            logger.info(
                f"[PIPELINE] CER={metrics.cer * 100:.1f}% WER={metrics.wer * 100:.1f}% "
                f"(char accuracy {metrics.cer_accuracy:.1f}%)"
            )

        result = TranscriptionResult(
            text=text,
            sample_count=len(features),
            processing_time=time.time() - started,
            timings=timings,
            metrics=metrics,
            reference=reference,
        )
        logger.info(f"[PIPELINE] Done in {result.processing_time:.2f}s")
        return result
