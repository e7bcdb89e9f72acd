from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

PASSPORT_RULES = (
    # Indian format: letter, 7 digits (first and last non-zero)
    PiiRegexRule(label="PASSPORT", pattern=r"\b[A-PR-WY][1-9]\d\s?\d{4}[1-9]\b"),
    # "Passport No: X1234567" in any national format
    PiiRegexRule(
        label="PASSPORT",
        pattern=r"\bpassport\s*(?:no\.?|number|#)?\s*[:\-]?\s*([A-Z0-9]{6,9})\b",
        value_group=1,
        ignore_case=True,
    ),
)

class PassportDetector(RegexDetector):
    name = "passport"
    rules = PASSPORT_RULES
