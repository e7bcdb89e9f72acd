"""Core data model.

Every record here is an immutable value produced fresh per call. Offsets are
always *character* offsets into one specific reference string (half-open),
never byte offsets.

Design goal:
- keep these records stable so the text, audio and image projectors can
  share them without conversions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Pattern, Sequence
import re
import threading

import numpy as np

from ..errors import Cancelled

CLS_TOKEN = "[CLS]"
SEP_TOKEN = "[SEP]"
UNK_TOKEN = "[UNK]"
PAD_TOKEN = "[PAD]"


@dataclass(frozen=True)
class Entity:
    label: str
    text: str
    start: int   # inclusive
    end: int     # exclusive

    @property
    def span(self) -> tuple[int, int]:
        return (self.start, self.end)

    def __len__(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class Token:
    surface: str
    id: int
    span_start: int
    span_end: int

    @property
    def is_special(self) -> bool:
        return self.surface in (CLS_TOKEN, SEP_TOKEN, PAD_TOKEN)


@dataclass(frozen=True)
class TokenizedInput:
    """Sub-tokens of one text plus their spans in that (untokenized) text."""
    text: str
    tokens: Sequence[Token]

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def input_ids(self) -> List[int]:
        return [t.id for t in self.tokens]

    @property
    def attention_mask(self) -> List[int]:
        return [1] * len(self.tokens)

    @property
    def token_type_ids(self) -> List[int]:
        return [0] * len(self.tokens)

    def to_model_inputs(self, max_length: int, pad_id: int = 0) -> dict:
        """Fixed-length int64 arrays shaped (1, max_length) for the labeling model."""
        n = min(len(self.tokens), max_length)
        input_ids = np.full((1, max_length), pad_id, dtype=np.int64)
        attention_mask = np.zeros((1, max_length), dtype=np.int64)
        token_type_ids = np.zeros((1, max_length), dtype=np.int64)
        input_ids[0, :n] = self.input_ids[:n]
        attention_mask[0, :n] = 1
        return {
            "input_ids": input_ids,
            "attention_mask": attention_mask,
            "token_type_ids": token_type_ids,
        }


class TagPrefix(str, Enum):
    BEGIN = "B"
    INSIDE = "I"
    OUTSIDE = "O"


@dataclass(frozen=True)
class LabelTag:
    prefix: TagPrefix
    type: Optional[str] = None

    @classmethod
    def parse(cls, raw: str) -> "LabelTag":
        """'B-EMAIL' -> (BEGIN, 'EMAIL'); 'O' or anything unrecognised -> OUTSIDE."""
        head, sep, tail = raw.partition("-")
        if sep and tail:
            if head == "B":
                return cls(TagPrefix.BEGIN, tail)
            if head == "I":
                return cls(TagPrefix.INSIDE, tail)
        return cls(TagPrefix.OUTSIDE, None)


@dataclass(frozen=True)
class TimedWord:
    surface: str
    start_sec: float
    end_sec: float


@dataclass(frozen=True)
class TimeRange:
    start_ms: int
    end_ms: int

    def __post_init__(self):
        if self.start_ms > self.end_ms:
            a, b = self.end_ms, self.start_ms
            object.__setattr__(self, "start_ms", a)
            object.__setattr__(self, "end_ms", b)

    @property
    def duration_ms(self) -> int:
        return self.end_ms - self.start_ms


@dataclass(frozen=True)
class Rect:
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def center_y(self) -> float:
        return (self.top + self.bottom) / 2.0

    def clamp(self, width: int, height: int) -> "Rect":
        """Clamp to image bounds, keeping at least a 1x1 area."""
        left = min(max(self.left, 0), width - 1)
        top = min(max(self.top, 0), height - 1)
        right = min(max(self.right, left + 1), width)
        bottom = min(max(self.bottom, top + 1), height)
        return Rect(left, top, right, bottom)

    def as_box(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)


@dataclass(frozen=True)
class RecognizedWord:
    text: str
    confidence: float
    box: Rect


@dataclass(frozen=True)
class PiiRegexRule:
    label: str
    pattern: str
    value_group: Optional[int] = None
    ignore_case: bool = False
    _compiled: Pattern = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        flags = re.IGNORECASE if self.ignore_case else 0
        object.__setattr__(self, "_compiled", re.compile(self.pattern, flags))

    @property
    def regex(self) -> Pattern:
        return self._compiled


class CancelToken:
    """Cooperative cancellation flag, checked at chunk / row granularity."""

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled("operation cancelled")


def check_cancel(cancel: Optional[CancelToken]) -> None:
    if cancel is not None:
        cancel.raise_if_cancelled()
