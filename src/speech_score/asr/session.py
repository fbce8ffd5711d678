import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Protocol

import numpy as np
import onnxruntime

from speech_score.config import cfg
from speech_score.errors import ModelLoadError
from speech_score.log import get_logger

logger = get_logger(__name__)


class ModelSession(Protocol):
    """The single capability the pipeline needs from an inference runtime."""

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]: ...


class OnnxModelSession:
    """ModelSession over an onnxruntime.InferenceSession."""

    def __init__(self, session: onnxruntime.InferenceSession):
        self.session = session
        self.output_names = [o.name for o in session.get_outputs()]

    def run(self, inputs: Dict[str, np.ndarray]) -> Dict[str, np.ndarray]:
        outputs = self.session.run(self.output_names, inputs)
        return dict(zip(self.output_names, outputs))


@dataclass
class ModelInfo:
    session: ModelSession
    input_name: str
    output_name: str
    model_path: str


def _session_options() -> onnxruntime.SessionOptions:
    opts = onnxruntime.SessionOptions()
    opts.graph_optimization_level = onnxruntime.GraphOptimizationLevel.ORT_ENABLE_ALL
    opts.execution_mode = onnxruntime.ExecutionMode.ORT_SEQUENTIAL
    opts.enable_cpu_mem_arena = True
    opts.enable_mem_pattern = True
    opts.log_severity_level = cfg.ort_log_severity
    opts.log_verbosity_level = 0
    if cfg.ort_intra_op_threads > 0:
        opts.intra_op_num_threads = cfg.ort_intra_op_threads
    return opts


def load_model(model_path: str | Path | None = None) -> ModelInfo:
    """Create the inference session and discover its tensor names."""
    model_path = model_path or cfg.model_path
    if not model_path:
        raise ModelLoadError("No model path configured (set SPEECH_MODEL_PATH or pass --model)")
    model_path = str(model_path)
    if not Path(model_path).is_file():
        raise ModelLoadError(f"Model file not found: {model_path}")

    size_mb = Path(model_path).stat().st_size / 1024 / 1024
    logger.info(f"[MODEL] Loading {model_path} ({size_mb:.2f}MB) on {cfg.ort_providers}...")
    start = time.time()
    try:
        session = onnxruntime.InferenceSession(
            model_path,
            sess_options=_session_options(),
            providers=cfg.ort_providers,
        )
    except Exception as e:
        raise ModelLoadError(f"Failed to load model {model_path}: {e}") from e
    logger.info(f"[MODEL] Loaded in {time.time() - start:.2f}s")

    inputs = session.get_inputs()
    outputs = session.get_outputs()
    for meta in inputs:
        logger.debug(f"[MODEL] input  {meta.name}: {meta.type} {meta.shape}")
    for meta in outputs:
        logger.debug(f"[MODEL] output {meta.name}: {meta.type} {meta.shape}")

    input_name = inputs[0].name if inputs else cfg.default_input_name
    output_name = outputs[0].name if outputs else cfg.default_output_name
    logger.info(f"[MODEL] input={input_name} output={output_name}")

    return ModelInfo(
        session=OnnxModelSession(session),
        input_name=input_name,
        output_name=output_name,
        model_path=model_path,
    )
