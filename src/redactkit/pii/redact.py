"""Text redaction.

Span-based, applied right-to-left (descending start). Two modes:
- mask: keep first/last character, mask the middle; length preserving
- tag:  replace the whole span with `[LABEL]`

Length-preserving masks make overlapping spans harmless. Tags change
lengths, so in tag mode a span reaching into an already-replaced region is
skipped.
"""

from __future__ import annotations
from typing import Iterable
import logging

from ..errors import BoundsError
from ..pipeline.context import Entity
from .fusion import order_for_redaction

log = logging.getLogger("redactkit.pii.redact")

MODES = ("mask", "tag")

def mask_span(s: str, mask_char: str = "*") -> str:
    n = len(s)
    if n == 0:
        return ""
    if n == 1:
        return mask_char
    if n == 2:
        return s[0] + mask_char
    return s[0] + mask_char * (n - 2) + s[-1]

def tag_for(label: str) -> str:
    return f"[{label}]"

def check_bounds(e: Entity, text_len: int) -> None:
    if e.start < 0 or e.start > e.end or e.end > text_len:
        raise BoundsError(f"{e.label} [{e.start}, {e.end}) out of bounds for text_len={text_len}")

def redact_text(text: str, entities: Iterable[Entity], mode: str = "mask", mask_char: str = "*") -> str:
    if mode not in MODES:
        raise ValueError(f"Unknown redaction mode: {mode}. Expected one of {MODES}")
    if len(mask_char) != 1:
        raise ValueError("mask_char must be a single character")

    out = text
    boundary = len(text)
    for e in order_for_redaction(entities):
        try:
            check_bounds(e, len(text))
        except BoundsError as exc:
            log.warning(f"Skipping entity: {exc}")
            continue
        if mode == "tag":
            if e.start == e.end:
                continue
            if e.end > boundary:
                log.info(f"Skipping {e.label} [{e.start}, {e.end}): overlaps an already tagged span")
                continue
            out = out[:e.start] + tag_for(e.label) + out[e.end:]
            boundary = e.start
        else:
            out = out[:e.start] + mask_span(out[e.start:e.end], mask_char) + out[e.end:]
    return out
