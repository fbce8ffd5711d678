import json
import tempfile
import unittest
from pathlib import Path

from speech_score.asr.vocab import Vocabulary
from speech_score.errors import VocabularyError
from helpers import VOCAB_MAPPING


class TestVocabulary(unittest.TestCase):
    def test_from_mapping(self):
        vocab = Vocabulary.from_mapping(VOCAB_MAPPING, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")
        self.assertEqual(vocab.size, 7)
        self.assertEqual((vocab.pad_id, vocab.unk_id, vocab.blank_id), (0, 1, 2))
        self.assertEqual(vocab.id_to_token(5), "안")
        self.assertEqual(vocab.token_id("녕"), 6)
        self.assertIsNone(vocab.id_to_token(99))

    def test_maps_are_read_only(self):
        source = dict(VOCAB_MAPPING)
        vocab = Vocabulary.from_mapping(source, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")
        with self.assertRaises(TypeError):
            vocab.token_to_id["x"] = 9
        with self.assertRaises(TypeError):
            vocab.id_to_token_map[9] = "x"
        source["x"] = 9
        self.assertIsNone(vocab.token_id("x"))
        self.assertEqual(vocab.size, 7)

    def test_defaults_come_from_config(self):
        from speech_score.config import cfg
        vocab = Vocabulary.from_mapping({cfg.pad_token: 10, cfg.unk_token: 11, cfg.blank_token: 12, "a": 0})
        self.assertEqual(vocab.pad_id, 10)
        self.assertEqual(vocab.blank_token, cfg.blank_token)

    def test_missing_required_token(self):
        mapping = {k: v for k, v in VOCAB_MAPPING.items() if k != "|"}
        with self.assertRaises(VocabularyError) as ctx:
            Vocabulary.from_mapping(mapping, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")
        self.assertIn("|", str(ctx.exception))
        self.assertEqual(ctx.exception.kind, "vocabulary")

    def test_invalid_ids(self):
        for bad in (-1, "3", 1.5, True, None):
            mapping = dict(VOCAB_MAPPING, Z=bad)
            with self.assertRaises(VocabularyError, msg=repr(bad)):
                Vocabulary.from_mapping(mapping, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")

    def test_duplicate_id(self):
        mapping = dict(VOCAB_MAPPING, Z=3)
        with self.assertRaises(VocabularyError):
            Vocabulary.from_mapping(mapping, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")

    def test_from_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = Path(tmp) / "vocab.json"
            path.write_text(json.dumps(VOCAB_MAPPING, ensure_ascii=False), encoding="utf-8")
            vocab = Vocabulary.from_file(path, pad_token="[PAD]", unk_token="[UNK]", blank_token="|")
        self.assertEqual(vocab.token_id("안"), 5)

    def test_from_file_errors(self):
        with tempfile.TemporaryDirectory() as tmp:
            missing = Path(tmp) / "nope.json"
            with self.assertRaises(VocabularyError):
                Vocabulary.from_file(missing)

            broken = Path(tmp) / "broken.json"
            broken.write_text("{not json", encoding="utf-8")
            with self.assertRaises(VocabularyError):
                Vocabulary.from_file(broken)

            array = Path(tmp) / "array.json"
            array.write_text("[1, 2, 3]", encoding="utf-8")
            with self.assertRaises(VocabularyError):
                Vocabulary.from_file(array)


if __name__ == '__main__':
    unittest.main()
