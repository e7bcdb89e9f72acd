"""Optical text recognizers.

The image redactor only consumes `RecognizedWord`s; anything that can turn a
Pillow image into words with boxes can be plugged in.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List
import logging

from ..errors import ModelUnavailable
from ..pipeline.context import RecognizedWord, Rect

log = logging.getLogger("redactkit.image.recognizer")

DEFAULT_MIN_CONFIDENCE = 0.7

class TextRecognizer(ABC):
    @abstractmethod
    def recognize(self, image) -> List[RecognizedWord]:
        """Words found in `image`, in reading order."""
        raise NotImplementedError

class TesseractRecognizer(TextRecognizer):
    """Tesseract via pytesseract (install the `ocr` extra)."""

    def __init__(self, lang: str = "eng", min_confidence: float = DEFAULT_MIN_CONFIDENCE, config: str = ""):
        try:
            import pytesseract
        except ImportError as e:
            raise ModelUnavailable("pytesseract is not installed; install redactkit[ocr]") from e
        self._tess = pytesseract
        self.lang = lang
        self.min_confidence = min_confidence
        self.config = config

    def recognize(self, image) -> List[RecognizedWord]:
        try:
            data = self._tess.image_to_data(
                image, lang=self.lang, config=self.config, output_type=self._tess.Output.DICT
            )
        except self._tess.TesseractNotFoundError as e:
            raise ModelUnavailable(f"tesseract binary not found: {e}") from e

        words = []
        for i, text in enumerate(data["text"]):
            text = (text or "").strip()
            conf = float(data["conf"][i]) / 100.0  # -1 for non-word boxes
            if not text or conf < self.min_confidence:
                continue
            left, top = int(data["left"][i]), int(data["top"][i])
            box = Rect(left, top, left + int(data["width"][i]), top + int(data["height"][i]))
            words.append(RecognizedWord(text=text, confidence=conf, box=box))
        log.info(f"Recognized {len(words)} words (min_confidence={self.min_confidence})")
        return words
