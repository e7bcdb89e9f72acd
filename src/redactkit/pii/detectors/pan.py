from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

# PAN: AAA + holder type + surname initial + 4 digits + check letter
PAN_RULE = PiiRegexRule(
    label="PAN",
    pattern=r"\b[A-Z]{3}[PABCFGHLJT][A-Z]\d{4}[A-Z]\b",
)

class PANDetector(RegexDetector):
    name = "pan"
    rules = (PAN_RULE,)
