"""Shared fixtures: a tiny WordPiece vocabulary, a BIO label map, a canned
sequence labeler, synthetic 16-bit WAV files and Pillow images."""

from __future__ import annotations
import json
import struct
import wave
from typing import Dict, List, Sequence

import numpy as np
import pytest
from PIL import Image

from redactkit.ner.decoder import LabelDecoder
from redactkit.ner.labeler import SequenceLabeler
from redactkit.ner.recognizer import EntityRecognizer
from redactkit.plugins.wordpiece import WordPieceTokenizer

VOCAB = [
    "[PAD]", "[UNK]", "[CLS]", "[SEP]",
    "my", "name", "is", "ravi", "kumar", "and", "i", "live", "in", "pune",
    "call", "me", "at", "email", "un", "##aff", "##able", "play", "##ing",
]

ID2LABEL = {0: "O", 1: "B-PER", 2: "I-PER", 3: "B-LOC", 4: "I-LOC"}

class StaticLabeler(SequenceLabeler):
    """Scores that put all mass on a preset label id per token position."""

    def __init__(self, label_ids: Sequence[int], num_labels: int = len(ID2LABEL)):
        self.label_ids = list(label_ids)
        self.num_labels = num_labels
        self.calls: List[Dict[str, np.ndarray]] = []

    def score(self, input_ids, attention_mask, token_type_ids):
        self.calls.append({"input_ids": input_ids, "attention_mask": attention_mask})
        seq_len = input_ids.shape[1]
        scores = np.zeros((seq_len, self.num_labels), dtype=np.float32)
        for i in range(seq_len):
            lid = self.label_ids[i] if i < len(self.label_ids) else 0
            scores[i, lid] = 1.0
        return scores

@pytest.fixture
def vocab() -> Dict[str, int]:
    return {tok: i for i, tok in enumerate(VOCAB)}

@pytest.fixture
def vocab_file(tmp_path):
    p = tmp_path / "vocab.txt"
    p.write_text("\n".join(VOCAB) + "\n", encoding="utf-8")
    return p

@pytest.fixture
def tokenizer(vocab) -> WordPieceTokenizer:
    return WordPieceTokenizer(vocab, max_tokens=32)

@pytest.fixture
def decoder() -> LabelDecoder:
    return LabelDecoder(ID2LABEL)

@pytest.fixture
def label_config(tmp_path):
    p = tmp_path / "config.json"
    p.write_text(json.dumps({"id2label": {str(k): v for k, v in ID2LABEL.items()}}), encoding="utf-8")
    return p

@pytest.fixture
def make_recognizer(tokenizer, decoder):
    def _make(label_ids: Sequence[int]) -> EntityRecognizer:
        return EntityRecognizer(tokenizer, StaticLabeler(label_ids), decoder, max_length=32)
    return _make

def write_wav(path, seconds: float = 1.5, rate: int = 16000, channels: int = 1, value: int = 1000) -> None:
    """Constant non-zero 16-bit PCM so muted regions are easy to spot."""
    frames = int(seconds * rate)
    sample = struct.pack("<h", value) * channels
    with wave.open(str(path), "wb") as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(2)
        wf.setframerate(rate)
        wf.writeframes(sample * frames)

def read_samples(path) -> np.ndarray:
    with wave.open(str(path), "rb") as wf:
        data = wf.readframes(wf.getnframes())
        channels = wf.getnchannels()
    return np.frombuffer(data, dtype="<i2").reshape(-1, channels)

@pytest.fixture
def wav_file(tmp_path):
    p = tmp_path / "clip.wav"
    write_wav(p)
    return p

@pytest.fixture
def checker_image() -> Image.Image:
    """64x48 RGB checkerboard of 4px squares."""
    yy, xx = np.mgrid[0:48, 0:64]
    board = (((yy // 4) + (xx // 4)) % 2 * 255).astype(np.uint8)
    return Image.fromarray(np.stack([board, board, board], axis=-1))
