"""Audio time projection.

Entity offsets are defined against the transcript text, i.e. the word
surfaces joined by single spaces. One cursor walk gives every word its
character span:

    word_start = cursor
    cursor += len(word) + 1      # joining space

An entity maps to [start_word.start, end_word.end] where start_word is the
first word containing entity.start and end_word is the first word ending at
or after entity.end. Entities with no covering word are dropped and logged.
"""

from __future__ import annotations
from typing import Iterable, List, Optional, Sequence, Tuple
import logging

from ..errors import AlignmentMiss
from ..pipeline.context import Entity, TimeRange, TimedWord

log = logging.getLogger("redactkit.audio.projector")

def transcript_text(words: Sequence[TimedWord]) -> str:
    return " ".join(w.surface for w in words)

def word_spans(words: Sequence[TimedWord]) -> List[Tuple[int, int]]:
    spans = []
    cursor = 0
    for w in words:
        spans.append((cursor, cursor + len(w.surface)))
        cursor += len(w.surface) + 1
    return spans

def sec_to_ms(sec: float) -> int:
    return int(round(sec * 1000))

def project_entity(words: Sequence[TimedWord], spans: Sequence[Tuple[int, int]], entity: Entity) -> TimeRange:
    start_word: Optional[TimedWord] = None
    end_word: Optional[TimedWord] = None
    for w, (ws, we) in zip(words, spans):
        if start_word is None and ws <= entity.start < we:
            start_word = w
        if ws < entity.end <= we:
            end_word = w
            if start_word is not None:
                break
    if start_word is None or end_word is None:
        raise AlignmentMiss(f"no word covers {entity.label} [{entity.start}, {entity.end})")
    return TimeRange(sec_to_ms(start_word.start_sec), sec_to_ms(end_word.end_sec))

def merge_ranges(ranges: Iterable[TimeRange]) -> List[TimeRange]:
    """Sort by start and merge ranges that overlap or touch."""
    ordered = sorted(ranges, key=lambda r: (r.start_ms, r.end_ms))
    if not ordered:
        return []
    merged: List[TimeRange] = []
    cur_start, cur_end = ordered[0].start_ms, ordered[0].end_ms
    for r in ordered[1:]:
        if r.start_ms <= cur_end:
            cur_end = max(cur_end, r.end_ms)
        else:
            merged.append(TimeRange(cur_start, cur_end))
            cur_start, cur_end = r.start_ms, r.end_ms
    merged.append(TimeRange(cur_start, cur_end))
    return merged

def project(words: Sequence[TimedWord], entities: Iterable[Entity]) -> List[TimeRange]:
    spans = word_spans(words)
    ranges: List[TimeRange] = []
    for e in entities:
        try:
            r = project_entity(words, spans, e)
        except AlignmentMiss as exc:
            log.warning(f"Could not map PII entity to word timestamps: {exc}")
            continue
        log.debug(f"Mapped {e.label} [{e.start}, {e.end}) to {r.start_ms}-{r.end_ms} ms")
        ranges.append(r)
    return merge_ranges(ranges)
