import math
import numpy as np

from speech_score.config import cfg
from speech_score.log import get_logger
from speech_score.models import RawPcmBuffer

logger = get_logger(__name__)

# Full-scale divisors: int16 -> [-1, 1), int32 -> [-1, 1)
_FULL_SCALE = {16: 32768.0, 32: 2147483648.0}


def pcm_to_float(samples: np.ndarray, bits_per_sample: int) -> np.ndarray:
    """Scale signed integer PCM to float64 in [-1.0, 1.0]."""
    return samples.astype(np.float64) / _FULL_SCALE[bits_per_sample]


def downmix(samples: np.ndarray, channel_count: int) -> np.ndarray:
    """Average interleaved channels into one; mono passes through."""
    if channel_count <= 1:
        return samples
    return samples.reshape(-1, channel_count).mean(axis=1)


def resample_linear(signal: np.ndarray, source_rate: int, target_rate: int) -> np.ndarray:
    """
    Linear-interpolation resampler.

    Output length is floor(n / ratio) with ratio = source_rate / target_rate.
    Each output sample blends input[k] and input[k + 1] at the fractional
    source position; the last input sample is reused when k + 1 runs past
    the end.
    """
    if source_rate == target_rate:
        return signal

    ratio = source_rate / target_rate
    n_in = len(signal)
    n_out = math.floor(n_in / ratio)
    if n_out <= 0:
        return np.zeros(0, dtype=signal.dtype)

    src_pos = np.arange(n_out, dtype=np.float64) * ratio
    src_index = np.floor(src_pos).astype(np.int64)
    t = src_pos - src_index

    next_index = np.minimum(src_index + 1, n_in - 1)
    has_next = (src_index + 1) < n_in

    current = signal[src_index]
    following = signal[next_index]
    out = np.where(has_next, current * (1.0 - t) + following * t, current)

    logger.debug(f"[RESAMPLE] {source_rate}Hz -> {target_rate}Hz: {n_in} -> {n_out} samples")
    return out


def to_mono_16k(raw: RawPcmBuffer) -> np.ndarray:
    """Convert a parsed PCM buffer to a mono float32 signal at the model rate."""
    header = raw.header
    signal = pcm_to_float(raw.samples, header.bits_per_sample)
    signal = downmix(signal, header.channel_count)
    signal = resample_linear(signal, header.sample_rate, cfg.target_rate)
    return signal.astype(np.float32)
