from dataclasses import dataclass, field
from typing import Dict, Optional
import numpy as np

@dataclass(frozen=True)
class WavHeader:
    channel_count: int
    sample_rate: int
    bits_per_sample: int     # 16 | 32
    data_byte_offset: int    # first payload byte of the "data" chunk
    data_byte_length: int

    @property
    def block_align(self) -> int:
        return self.channel_count * (self.bits_per_sample // 8)

    @property
    def frame_count(self) -> int:
        return self.data_byte_length // self.block_align

@dataclass
class RawPcmBuffer:
    header: WavHeader
    samples: np.ndarray      # interleaved int16 / int32

@dataclass
class AudioStats:
    min: float
    max: float
    mean: float
    variance: float
    rms: float

    def __str__(self) -> str:
        return (f"min={self.min:.6f} max={self.max:.6f} mean={self.mean:.6f} "
                f"var={self.variance:.6f} rms={self.rms:.6f}")

@dataclass(frozen=True)
class EvaluationMetrics:
    cer: float               # 0..1, lower is better
    wer: float

    @property
    def cer_accuracy(self) -> float:
        return (1.0 - self.cer) * 100.0

    @property
    def wer_accuracy(self) -> float:
        return (1.0 - self.wer) * 100.0

@dataclass
class TranscriptionResult:
    text: str                # "" means no speech detected
    sample_count: int        # samples fed to the model (16kHz)
    processing_time: float   # seconds, whole pipeline
    timings: Dict[str, float] = field(default_factory=dict)
    metrics: Optional[EvaluationMetrics] = None
    reference: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.text

    def to_dict(self) -> dict:
        data = {
            "text": self.text,
            "sample_count": self.sample_count,
            "processing_time": round(self.processing_time, 4),
            "timings": {k: round(v, 4) for k, v in self.timings.items()},
        }
        if self.reference is not None:
            data["reference"] = self.reference
        if self.metrics is not None:
            data["cer"] = self.metrics.cer
            data["wer"] = self.metrics.wer
        return data
