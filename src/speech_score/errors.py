"""Error types raised by the speech-score pipeline.

Every stage either returns a valid value or raises one of these. The
``kind`` attribute groups errors by stage so a caller can map each group to
its own message; the underlying cause, if any, is chained as ``__cause__``.
"""


class SpeechScoreError(Exception):
    kind = "error"


# --- Container decoding ---

class FormatError(SpeechScoreError):
    """The input is not a WAV container this decoder can read."""
    kind = "format"


class NotRiffError(FormatError):
    def __init__(self, magic: bytes):
        self.magic = magic
        super().__init__(f"Not a RIFF container (magic={magic!r})")


class TruncatedHeaderError(FormatError):
    def __init__(self, size: int):
        self.size = size
        super().__init__(f"WAV header truncated ({size} bytes)")


class UnsupportedBitDepthError(FormatError):
    def __init__(self, bits_per_sample: int):
        self.bits_per_sample = bits_per_sample
        super().__init__(f"Unsupported bit depth: {bits_per_sample}-bit (only 16 and 32 are supported)")


class MissingDataChunkError(FormatError):
    def __init__(self):
        super().__init__("No 'data' chunk found in WAV container")


# --- Standardization ---

class NormalizationError(SpeechScoreError):
    kind = "normalization"


class NonFiniteValueError(NormalizationError):
    def __init__(self, index: int, value: float):
        self.index = index
        self.value = value
        super().__init__(f"Non-finite value after standardization at index {index}: {value}")


# --- Inference ---

class InferenceError(SpeechScoreError):
    kind = "inference"


class UnexpectedShapeError(InferenceError):
    def __init__(self, shape: tuple):
        self.shape = tuple(shape)
        super().__init__(f"Expected logits of rank 3 [1, time, vocab], got shape {list(self.shape)}")


# --- Startup ---

class VocabularyError(SpeechScoreError):
    kind = "vocabulary"


class ModelLoadError(SpeechScoreError):
    kind = "model"
