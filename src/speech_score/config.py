from dataclasses import dataclass, field
import os
from dotenv import load_dotenv

load_dotenv()


def _env_list(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    # --- Model / Vocab ---
    model_path: str | None = os.getenv("SPEECH_MODEL_PATH", None)
    vocab_path: str | None = os.getenv("SPEECH_VOCAB_PATH", None)
    default_input_name: str = "input_values"
    default_output_name: str = "logits"

    # --- Special tokens ---
    pad_token: str = os.getenv("PAD_TOKEN", "[PAD]")
    unk_token: str = os.getenv("UNK_TOKEN", "[UNK]")
    blank_token: str = os.getenv("BLANK_TOKEN", "|")  # word boundary, decoded as a space

    # --- Audio ---
    target_rate: int = 16000

    # --- ONNX Runtime ---
    ort_providers: list[str] = field(default_factory=lambda: _env_list("ORT_PROVIDERS", "CPUExecutionProvider"))
    ort_intra_op_threads: int = int(os.getenv("ORT_INTRA_OP_THREADS", "0"))  # 0 = runtime default
    ort_log_severity: int = 3

    # --- Logging ---
    log_level: str = os.getenv("SPEECH_LOG_LEVEL", "INFO")
    log_file: str | None = os.getenv("SPEECH_LOG_FILE", None)

# Global instance
cfg = Config()
