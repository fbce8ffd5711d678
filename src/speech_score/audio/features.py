import numpy as np

from speech_score.errors import NonFiniteValueError
from speech_score.log import get_logger
from speech_score.models import AudioStats

logger = get_logger(__name__)

# Same epsilon as the wav2vec2 feature extractor; near-silent input blows up without it.
NORM_EPSILON = 1e-7


def audio_stats(signal: np.ndarray) -> AudioStats:
    if len(signal) == 0:
        return AudioStats(min=0.0, max=0.0, mean=0.0, variance=0.0, rms=0.0)
    x = signal.astype(np.float64)
    mean = float(np.mean(x))
    mean_sq = float(np.mean(x ** 2))
    return AudioStats(
        min=float(np.min(x)),
        max=float(np.max(x)),
        mean=mean,
        variance=mean_sq - mean * mean,
        rms=float(np.sqrt(mean_sq)),
    )


def standardize(signal: np.ndarray) -> np.ndarray:
    """
    Zero-mean / unit-variance scaling for the acoustic model.

    std is sqrt(population variance + NORM_EPSILON). Raises
    NonFiniteValueError if any output value is NaN or infinite, so corrupt
    input never reaches inference.
    """
    n = len(signal)
    if n == 0:
        return np.zeros(0, dtype=np.float32)

    x = signal.astype(np.float64)
    mean = np.sum(x) / n
    centered = x - mean
    variance = np.sum(centered ** 2) / n
    std = np.sqrt(variance + NORM_EPSILON)
    normalized = centered / std

    logger.debug(f"[NORM] mean={mean:.6f} variance={variance:.6f} std(eps)={std:.6f}")

    finite = np.isfinite(normalized)
    if not finite.all():
        bad = int(np.argmin(finite))
        logger.error(f"[NORM] Invalid value at index {bad}: {normalized[bad]}")
        raise NonFiniteValueError(bad, float(normalized[bad]))

    return normalized.astype(np.float32)
