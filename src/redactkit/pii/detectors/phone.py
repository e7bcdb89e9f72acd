from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

# Simple phone heuristic (international/India-ish). Tune per region.
# Must start and end on a digit so surrounding whitespace is never swallowed.
PHONE_RULE = PiiRegexRule(
    label="PHONE",
    pattern=r"(?<![\d+])(?<!\d[\s-])(?:\+\d{1,3}[\s-]?)?\d(?:[\s-]?\d){9,11}(?!\d)(?![\s-]\d)",
)

class PhoneDetector(RegexDetector):
    name = "phone"
    rules = (PHONE_RULE,)
