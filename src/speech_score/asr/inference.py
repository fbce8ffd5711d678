import time
import numpy as np

from speech_score.asr.session import ModelSession
from speech_score.errors import InferenceError, UnexpectedShapeError
from speech_score.log import get_logger

logger = get_logger(__name__)


def run_inference(
    session: ModelSession,
    features: np.ndarray,
    input_name: str,
    output_name: str,
) -> np.ndarray:
    """
    Run the acoustic model once and return logits shaped [1, time, vocab].

    The input tensor is always float32 [1, n], whatever precision the model
    was exported with; coercing to a narrower type is the runtime's job.
    Blocks for the duration of the model call.
    """
    input_tensor = np.ascontiguousarray(features, dtype=np.float32).reshape(1, -1)
    logger.debug(f"[ASR] Input {input_name}: float32 {list(input_tensor.shape)}")

    start = time.time()
    try:
        outputs = session.run({input_name: input_tensor})
    except Exception as e:
        raise InferenceError(f"Model run failed: {e}") from e
    elapsed = time.time() - start
    logger.info(f"[ASR] Inference finished in {elapsed:.2f}s")

    if output_name not in outputs:
        raise InferenceError(f"Model returned no output named {output_name!r} (got {sorted(outputs)})")

    logits = np.asarray(outputs[output_name])
    if logits.ndim != 3:
        raise UnexpectedShapeError(logits.shape)

    if logits.size:
        logger.debug(
            f"[ASR] Logits {list(logits.shape)} {logits.dtype}: "
            f"min={float(logits.min()):.4f} max={float(logits.max()):.4f} mean={float(logits.mean()):.4f}"
        )
    return logits.astype(np.float32, copy=False)
