"""Regex pattern matcher.

Every rule runs over the full text on its own; earlier matches never hide
later ones (overlaps are resolved in fusion, not here). A rule with
`value_group` reports that capture group's span, otherwise the full match.
"""

from __future__ import annotations
from typing import Iterable, List

from ..pipeline.context import Entity, PiiRegexRule

def match_rule(text: str, rule: PiiRegexRule) -> List[Entity]:
    out: List[Entity] = []
    for m in rule.regex.finditer(text):
        if rule.value_group is not None:
            a, b = m.span(rule.value_group)
        else:
            a, b = m.span()
        # unmatched optional group -> (-1, -1); empty match -> nothing to redact
        if a < 0 or a >= b:
            continue
        out.append(Entity(label=rule.label, text=text[a:b], start=a, end=b))
    return out

def match(text: str, rules: Iterable[PiiRegexRule]) -> List[Entity]:
    found: List[Entity] = []
    for rule in rules:
        found.extend(match_rule(text, rule))
    return sorted(found, key=lambda e: (e.start, e.end))
