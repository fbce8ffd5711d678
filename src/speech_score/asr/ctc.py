import re
from collections import Counter
from typing import List, Tuple

import numpy as np

from speech_score.asr.vocab import Vocabulary
from speech_score.log import get_logger

logger = get_logger(__name__)

_WHITESPACE_RUN = re.compile(r"\s+")


def argmax_ids(logits: np.ndarray) -> np.ndarray:
    """Best token id per frame of a [1, time, vocab] (or [time, vocab]) tensor.

    Exact ties go to the lowest id.
    """
    frames = logits[0] if logits.ndim == 3 else logits
    if frames.shape[0] == 0:
        return np.zeros(0, dtype=np.int64)
    # np.argmax would pick the first NaN; a NaN score never wins
    frames = np.where(np.isnan(frames), -np.inf, frames)
    return np.argmax(frames, axis=-1)


def collapse_ids(ids, vocab: Vocabulary) -> List[str]:
    """Greedy CTC collapse of a per-frame id sequence into text fragments."""
    fragments: List[str] = []
    previous = None

    for token_id in ids:
        token_id = int(token_id)

        if token_id == vocab.pad_id:
            previous = token_id
            continue

        if token_id == previous:
            continue

        token_text = vocab.id_to_token(token_id)
        if token_text is not None and token_text != vocab.unk_token:
            if token_text == vocab.blank_token:
                fragments.append(" ")
            else:
                fragments.append(token_text)

        previous = token_id

    return fragments


def join_fragments(fragments: List[str]) -> str:
    return _WHITESPACE_RUN.sub(" ", "".join(fragments)).strip()


def token_histogram(ids, vocab: Vocabulary, top: int = 10) -> List[Tuple[int, str, int, float]]:
    """Most frequent frame-level ids as (id, token, count, percent of frames)."""
    total = len(ids)
    if total == 0:
        return []
    counts = Counter(int(i) for i in ids)
    return [
        (token_id, vocab.id_to_token(token_id) or vocab.unk_token, count, count / total * 100.0)
        for token_id, count in counts.most_common(top)
    ]


def decode_greedy(logits: np.ndarray, vocab: Vocabulary) -> str:
    """
    Turn [1, time, vocab] logits into text.

    Per frame: take the arg-max id. Pad frames emit nothing but still reset
    the repeat tracker; a repeat of the previous id emits nothing; unknown
    or unmapped ids emit nothing; the blank token emits a space; anything
    else emits its token text. Whitespace runs collapse to one space.

    An empty string means no speech was recognized. It is a valid result.
    """
    ids = argmax_ids(logits)
    logger.debug(f"[CTC] frames={len(ids)} vocab={logits.shape[-1]} pad={vocab.pad_id} blank={vocab.blank_id}")

    for token_id, token, count, percent in token_histogram(ids, vocab):
        logger.debug(f"[CTC]   {token_id} {token!r}: {count} ({percent:.1f}%)")

    fragments = collapse_ids(ids, vocab)
    if not fragments:
        logger.warning("[CTC] No tokens decoded (silence, all-pad frames, or unrecognized input)")
        return ""

    text = join_fragments(fragments)
    logger.debug(f"[CTC] {len(fragments)} fragments -> {text!r}")
    return text
