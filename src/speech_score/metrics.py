"""Character and word error rates between a reference and a hypothesis.

Both rates are Levenshtein distance divided by the reference length and
capped at 1.0. An empty reference scores 0.0 whatever the hypothesis is.
"""
import jiwer

from speech_score.log import get_logger
from speech_score.models import EvaluationMetrics

logger = get_logger(__name__)


def _edit_count(output) -> int:
    return output.substitutions + output.deletions + output.insertions


def calculate_cer(reference: str, hypothesis: str) -> float:
    ref_chars = "".join(reference.split())
    hyp_chars = "".join(hypothesis.split())

    if not ref_chars:
        return 0.0

    if not hyp_chars:
        # nothing recognized: every reference character is a deletion
        distance = len(ref_chars)
    else:
        distance = _edit_count(jiwer.process_characters(ref_chars, hyp_chars))

    cer = min(distance / len(ref_chars), 1.0)
    logger.debug(f"[CER] ref={ref_chars!r} hyp={hyp_chars!r} distance={distance} cer={cer:.3f}")
    return cer


def calculate_wer(reference: str, hypothesis: str) -> float:
    ref_words = reference.split()
    hyp_words = hypothesis.split()

    if not ref_words:
        return 0.0

    if not hyp_words:
        distance = len(ref_words)
    else:
        distance = _edit_count(jiwer.process_words(" ".join(ref_words), " ".join(hyp_words)))

    wer = min(distance / len(ref_words), 1.0)
    logger.debug(f"[WER] ref={ref_words} hyp={hyp_words} distance={distance} wer={wer:.3f}")
    return wer


def evaluate(reference: str, hypothesis: str) -> EvaluationMetrics:
    return EvaluationMetrics(
        cer=calculate_cer(reference, hypothesis),
        wer=calculate_wer(reference, hypothesis),
    )
