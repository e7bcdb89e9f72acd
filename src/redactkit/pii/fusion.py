"""Span fusion.

Decoder (NER) entities and pattern entities are concatenated into one list:
- exact duplicate (start, end) pairs collapse to the first one seen, so the
  NER label wins over a regex label for the same span
- partial overlaps follow the `overlap` policy:
    keep     both spans survive; the redactor applies them right-to-left
    longest  longest span wins, ties to the earlier start, then first seen

Output is ascending by (start, end); `order_for_redaction` gives the
descending order the redactor needs.
"""

from __future__ import annotations
from itertools import chain
from typing import Iterable, List, Sequence, Set, Tuple
import logging

from ..pipeline.context import Entity

log = logging.getLogger("redactkit.pii.fusion")

OVERLAP_POLICIES = ("keep", "longest")

def _overlaps(a: Entity, b: Entity) -> bool:
    return a.start < b.end and b.start < a.end

def _longest_wins(entities: Sequence[Entity]) -> List[Entity]:
    ranked = sorted(enumerate(entities), key=lambda ie: (-(ie[1].end - ie[1].start), ie[1].start, ie[0]))
    kept: List[Entity] = []
    for _, e in ranked:
        if any(_overlaps(e, k) for k in kept):
            log.debug(f"Dropping {e.label} [{e.start}, {e.end}) overlapped by a longer span")
            continue
        kept.append(e)
    return kept

def fuse(
    decoder_entities: Iterable[Entity],
    pattern_entities: Iterable[Entity],
    overlap: str = "keep",
) -> List[Entity]:
    if overlap not in OVERLAP_POLICIES:
        raise ValueError(f"Unknown overlap policy: {overlap}. Expected one of {OVERLAP_POLICIES}")

    seen: Set[Tuple[int, int]] = set()
    merged: List[Entity] = []
    for e in chain(decoder_entities, pattern_entities):
        if e.span in seen:
            continue
        seen.add(e.span)
        merged.append(e)

    if overlap == "longest":
        merged = _longest_wins(merged)

    return sorted(merged, key=lambda e: (e.start, e.end))

def order_for_redaction(entities: Iterable[Entity]) -> List[Entity]:
    """Descending by start so earlier replacements never shift pending offsets."""
    return sorted(entities, key=lambda e: (e.start, e.end), reverse=True)
