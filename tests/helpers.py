import struct
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from speech_score.asr.vocab import Vocabulary

VOCAB_MAPPING = {
    "[PAD]": 0,
    "[UNK]": 1,
    "|": 2,
    "A": 3,
    "B": 4,
    "안": 5,
    "녕": 6,
}


def make_vocab() -> Vocabulary:
    return Vocabulary.from_mapping(VOCAB_MAPPING, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")


def make_wav(
    samples: np.ndarray,
    sample_rate: int = 16000,
    bits: int = 16,
    extra_chunks: Sequence[Tuple[bytes, bytes]] = (),
    declared_data_size: Optional[int] = None,
) -> bytes:
    """Build a PCM WAV: canonical RIFF/WAVE/fmt header, optional extra chunks, then data.

    ``samples`` is 1-D (mono) or [frames, channels] integer PCM.
    """
    samples = np.asarray(samples)
    channels = 1 if samples.ndim == 1 else samples.shape[1]
    dtype = {16: "<i2", 32: "<i4"}.get(bits, "<i2")
    payload = samples.astype(dtype).tobytes()

    block_align = channels * bits // 8
    fmt = struct.pack("<HHIIHH", 1, channels, sample_rate, sample_rate * block_align, block_align, bits)

    body = b"WAVE" + b"fmt " + struct.pack("<I", len(fmt)) + fmt
    for chunk_id, chunk_payload in extra_chunks:
        body += chunk_id + struct.pack("<I", len(chunk_payload)) + chunk_payload
    size = len(payload) if declared_data_size is None else declared_data_size
    body += b"data" + struct.pack("<I", size) + payload
    return b"RIFF" + struct.pack("<I", len(body)) + body


def one_hot_logits(ids: Sequence[int], vocab_size: int = len(VOCAB_MAPPING)) -> np.ndarray:
    """[1, T, V] logits whose per-frame arg-max is ``ids``."""
    logits = np.full((1, len(ids), vocab_size), -5.0, dtype=np.float32)
    for t, token_id in enumerate(ids):
        logits[0, t, token_id] = 5.0
    return logits


class FakeSession:
    """In-memory ModelSession: records inputs, returns canned outputs."""

    def __init__(self, outputs: Optional[Dict[str, np.ndarray]] = None, error: Optional[Exception] = None,
                 output_name: str = "logits", ids: Optional[List[int]] = None):
        self.outputs = outputs
        self.error = error
        self.output_name = output_name
        self.ids = ids if ids is not None else [3, 3, 2, 4]
        self.calls: List[Dict[str, np.ndarray]] = []

    def run(self, inputs):
        self.calls.append(inputs)
        if self.error is not None:
            raise self.error
        if self.outputs is not None:
            return self.outputs
        return {self.output_name: one_hot_logits(self.ids)}


def sine(frequency: float, sample_rate: int, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    t = np.arange(int(sample_rate * seconds)) / sample_rate
    return amplitude * np.sin(2 * np.pi * frequency * t)


def to_int16(signal: np.ndarray) -> np.ndarray:
    return np.clip(np.round(signal * 32767), -32768, 32767).astype(np.int16)
