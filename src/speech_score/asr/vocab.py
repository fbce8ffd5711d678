import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from speech_score.config import cfg
from speech_score.errors import VocabularyError
from speech_score.log import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class Vocabulary:
    """Token <-> id mapping for the CTC output layer.

    Built once at startup and shared read-only. ``blank_token`` is the
    word-boundary symbol that decodes to a space; ``pad_token`` is the CTC
    "no output" symbol.
    """
    token_to_id: Mapping[str, int]
    id_to_token_map: Mapping[int, str] = field(repr=False)
    pad_id: int
    unk_id: int
    blank_id: int
    pad_token: str
    unk_token: str
    blank_token: str

    @property
    def size(self) -> int:
        return len(self.token_to_id)

    def id_to_token(self, token_id: int) -> Optional[str]:
        return self.id_to_token_map.get(token_id)

    def token_id(self, token: str) -> Optional[int]:
        return self.token_to_id.get(token)

    @classmethod
    def from_mapping(
        cls,
        mapping: Mapping[str, int],
        pad_token: str | None = None,
        unk_token: str | None = None,
        blank_token: str | None = None,
    ) -> "Vocabulary":
        pad_token = cfg.pad_token if pad_token is None else pad_token
        unk_token = cfg.unk_token if unk_token is None else unk_token
        blank_token = cfg.blank_token if blank_token is None else blank_token

        token_to_id: Dict[str, int] = {}
        id_to_token: Dict[int, str] = {}
        for token, token_id in mapping.items():
            # bool is an int subclass; "true": 1 is a malformed file, not id 1
            if isinstance(token_id, bool) or not isinstance(token_id, int) or token_id < 0:
                raise VocabularyError(f"Token {token!r} has invalid id {token_id!r}")
            if token_id in id_to_token:
                raise VocabularyError(
                    f"Id {token_id} assigned to both {id_to_token[token_id]!r} and {token!r}"
                )
            token_to_id[token] = token_id
            id_to_token[token_id] = token

        missing = [t for t in (pad_token, unk_token, blank_token) if t not in token_to_id]
        if missing:
            raise VocabularyError(f"Vocabulary is missing required tokens: {missing}")

        vocab = cls(
            token_to_id=MappingProxyType(token_to_id),
            id_to_token_map=MappingProxyType(id_to_token),
            pad_id=token_to_id[pad_token],
            unk_id=token_to_id[unk_token],
            blank_id=token_to_id[blank_token],
            pad_token=pad_token,
            unk_token=unk_token,
            blank_token=blank_token,
        )
        logger.info(
            f"[VOCAB] {vocab.size} tokens, {pad_token}={vocab.pad_id} "
            f"{unk_token}={vocab.unk_id} {blank_token!r}={vocab.blank_id}"
        )
        return vocab

    @classmethod
    def from_file(cls, path: str | Path, **tokens) -> "Vocabulary":
        try:
            with open(path, "r", encoding="utf-8") as f:
                mapping = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise VocabularyError(f"Failed to read vocabulary {path}: {e}") from e

        if not isinstance(mapping, dict):
            raise VocabularyError(f"Vocabulary {path} must be a JSON object of token -> id")
        return cls.from_mapping(mapping, **tokens)
