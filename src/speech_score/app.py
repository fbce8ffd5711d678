import sys
import json
import queue
import argparse

from speech_score.config import cfg
from speech_score.errors import SpeechScoreError
from speech_score.log import get_logger, set_console_level
from speech_score.asr.session import load_model
from speech_score.asr.vocab import Vocabulary
from speech_score.pipeline import SpeechEvaluator
from speech_score.worker import EvaluationWorker, JobResult

logger = get_logger(__name__)

_ERROR_MESSAGES = {
    "format": "The recording is not a readable 16/32-bit PCM WAV file.",
    "normalization": "The recording could not be normalized (corrupt or invalid samples).",
    "inference": "Speech recognition failed while running the model.",
    "vocabulary": "The vocabulary file is missing, malformed, or lacks required tokens.",
    "model": "The speech model could not be loaded.",
}

def describe_error(error: Exception) -> str:
    if isinstance(error, SpeechScoreError):
        return f"{_ERROR_MESSAGES.get(error.kind, 'Processing failed.')} ({error})"
    if isinstance(error, OSError):
        return f"Could not read the recording. ({error})"
    return f"Unexpected error: {error}"

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="speech-score",
        description="Transcribe WAV recordings and score them against an expected sentence.",
    )
    parser.add_argument("wav", nargs="+", help="WAV file(s) to transcribe")
    parser.add_argument("-r", "--reference", help="Expected sentence; enables CER/WER scoring")
    parser.add_argument("--model", default=cfg.model_path, help="ONNX model path (env SPEECH_MODEL_PATH)")
    parser.add_argument("--vocab", default=cfg.vocab_path, help="vocab.json path (env SPEECH_VOCAB_PATH)")
    parser.add_argument("--json", action="store_true", help="Print one JSON object per file")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug statistics")
    return parser

def print_result(item: JobResult, as_json: bool):
    if as_json:
        payload = {"file": str(item.source)}
        if item.ok:
            payload.update(item.result.to_dict())
        else:
            payload["error"] = {"kind": getattr(item.error, "kind", "error"), "message": str(item.error)}
        print(json.dumps(payload, ensure_ascii=False))
        return

    print(f"== {item.source}")
    if not item.ok:
        print(f"   ERROR: {describe_error(item.error)}")
        return

    result = item.result
    if result.is_empty:
        print("   (no speech detected)")
    else:
        print(f"   Text: {result.text}")
    if result.metrics is not None:
        print(f"   CER: {result.metrics.cer * 100:.1f}%  WER: {result.metrics.wer * 100:.1f}%")
    print(f"   Time: {result.processing_time:.2f}s")

def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    if args.verbose:
        set_console_level("DEBUG")

    if not args.vocab:
        print("No vocabulary configured (set SPEECH_VOCAB_PATH or pass --vocab)", file=sys.stderr)
        return 2

    # 1. Load shared, read-only state once
    try:
        vocab = Vocabulary.from_file(args.vocab)
        model = load_model(args.model)
    except SpeechScoreError as e:
        print(describe_error(e), file=sys.stderr)
        return 2

    # 2. Worker thread owns all model calls
    evaluator = SpeechEvaluator.from_model_info(model, vocab)
    worker = EvaluationWorker(evaluator)
    worker.start()

    for path in args.wav:
        worker.submit(path, reference=args.reference)

    # 3. Collect results in submission order
    failures = 0
    try:
        for _ in args.wav:
            while True:
                try:
                    item = worker.results.get(timeout=1.0)
                    break
                except queue.Empty:
                    continue
            if not item.ok:
                failures += 1
            print_result(item, args.json)
    except KeyboardInterrupt:
        logger.warning("[APP] Interrupted")
        failures += 1
    finally:
        worker.stop()

    return 1 if failures else 0

if __name__ == "__main__":
    sys.exit(main())
