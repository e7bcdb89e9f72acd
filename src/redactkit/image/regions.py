"""Discover rectangles to blur from recognized words.

Three sources feed one deduplicated set of rectangles:
- direct value match: a word that looks like a PII value and is not itself
  a label
- label adjacency: the 1 or 2 words right after a label ("Name", "DOB",
  "ID Number", ...) on the same line and close enough horizontally
- region rules: document-type heuristics that add fixed proportional areas
  (e.g. the QR code on an Aadhaar card)

Words are expected in reading order, as OCR engines return them.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Sequence, Tuple
import logging
import re

from ..pipeline.context import RecognizedWord, Rect

log = logging.getLogger("redactkit.image.regions")

VALUE_PATTERN = re.compile(
    r"""
      \b(?:confidential|secret|private|pii)\b
    | [a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,63}     # email
    | \b\d{4,5}[-.\s]?\d{6,7}\b                            # 01234 567890
    | \b(?:Tel|Phone|Mobile):\s?\d[\d\s-]*\d\b
    | \b\d{4}[-.\s]\d{4}[-.\s]\d{4}\b                      # aadhaar 4-4-4
    | \b[A-Z]{2,4}\s?\d{6,10}\s?\w*\b                      # licence / voter / passport ids
    | \b[A-Z]{3}[PABCFGHLJT][A-Z]\d{4}[A-Z]\b              # PAN
    | \b\d{1,2}[-./]\d{1,2}[-./]\d{2,4}\b                  # dd/mm/yyyy
    | \b\d{4,6}\b                                          # PIN
    | \*{4,}
    """,
    re.IGNORECASE | re.VERBOSE,
)

# always redacted, even when the word also reads as a label
DEFINITE_VALUE_PATTERNS = [
    re.compile(r"\d{4}[-.\s]\d{4}[-.\s]\d{4}"),
    re.compile(r"[A-Z]{2,4}\s?\d{6,10}\s?\w*"),
    re.compile(r"[A-Z]{3}[PABCFGHLJT][A-Z]\d{4}[A-Z]"),
    re.compile(r"\*{4,}"),
]

LABEL_PATTERN = re.compile(
    r"\b(?:Name|ID Number|ID|Number|No|Issued|Expires|DOB|Date of Birth|Username|User Name|Email"
    r"|Tel|Phone|Mobile|Password|PIN|SSN|Aadhaa?r|Voter ID|Passport No|HH/ Name)\s*[:/]?\s*",
    re.IGNORECASE,
)

# labels whose value usually spans two words ("Ravi Kumar", "AB 1234567")
MULTI_WORD_LABEL_HINTS = ("name", "id number", "id", "no", "num", "passport", "aadhar", "aadhaar")

STOP_WORDS = frozenset({
    "and", "or", "of", "a", "the", "is", "are", "was", "were",
    "for", "in", "on", ":", "/", "as", "to", "from",
})

LINE_TOLERANCE = 0.75  # x label height
MAX_GAP = 2.0          # x label width

def is_label(text: str) -> bool:
    return LABEL_PATTERN.fullmatch(text.strip()) is not None

def is_value(text: str) -> bool:
    t = text.strip()
    if VALUE_PATTERN.search(t) and not is_label(t):
        return True
    return any(p.fullmatch(t) for p in DEFINITE_VALUE_PATTERNS)

def words_after_label(text: str) -> int:
    t = text.strip().lower()
    return 2 if any(h in t for h in MULTI_WORD_LABEL_HINTS) else 1

def is_adjacent(label: Rect, word: Rect) -> bool:
    """Same line (centre delta) and a bounded gap to the right of the label."""
    y_delta = abs(label.center_y - word.center_y)
    x_gap = word.left - label.right
    return y_delta < label.height * LINE_TOLERANCE and x_gap < label.width * MAX_GAP

class RegionRule(ABC):
    """A document-type heuristic that adds fixed regions."""
    name: str = "rule"

    @abstractmethod
    def regions(self, words: Sequence[RecognizedWord], width: int, height: int) -> List[Rect]:
        raise NotImplementedError

class AadhaarQrRegion(RegionRule):
    """Bottom-right area where the QR code sits on an Aadhaar card."""
    name = "aadhaar_qr"
    triggers = ("आधार", "aadhar", "aadhaar")
    left_frac = 0.65
    top_frac = 0.60
    min_side = 50

    def matches(self, words: Sequence[RecognizedWord]) -> bool:
        return any(t in w.text.lower() for w in words for t in self.triggers)

    def regions(self, words: Sequence[RecognizedWord], width: int, height: int) -> List[Rect]:
        if not self.matches(words):
            return []
        area = Rect(int(width * self.left_frac), int(height * self.top_frac), width, height)
        if area.width > self.min_side and area.height > self.min_side:
            log.info(f"Adding {self.name} region {area.as_box()}")
            return [area]
        return []

DEFAULT_REGION_RULES: List[RegionRule] = [AadhaarQrRegion()]

def value_regions(words: Sequence[RecognizedWord]) -> List[Rect]:
    out = []
    for w in words:
        if is_value(w.text):
            log.debug(f"Value match: {w.text!r}")
            out.append(w.box)
    return out

def label_regions(words: Sequence[RecognizedWord]) -> List[Rect]:
    out = []
    for i, label in enumerate(words):
        if not LABEL_PATTERN.search(label.text.strip()):
            continue
        for nxt in words[i + 1:i + 1 + words_after_label(label.text)]:
            if not is_adjacent(label.box, nxt.box):
                continue
            t = nxt.text.strip().lower()
            if t in STOP_WORDS or is_label(t):
                continue
            log.debug(f"Word after label {label.text!r}: {nxt.text!r}")
            out.append(nxt.box)
    return out

def find_regions(
    words: Sequence[RecognizedWord],
    image_size: Tuple[int, int],
    rules: Optional[Iterable[RegionRule]] = None,
) -> List[Rect]:
    """Rectangles to blur, deduplicated, in discovery order."""
    width, height = image_size
    found = value_regions(words) + label_regions(words)
    for rule in (DEFAULT_REGION_RULES if rules is None else rules):
        found.extend(rule.regions(words, width, height))
    regions = list(dict.fromkeys(found))
    log.info(f"Found {len(regions)} regions from {len(words)} words")
    return regions
