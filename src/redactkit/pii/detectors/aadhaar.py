from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

# Aadhaar: 12 digits often grouped as 4-4-4; not part of a longer digit run
AADHAAR_RULE = PiiRegexRule(
    label="AADHAAR",
    pattern=r"(?<!\d)(?<!\d[\s-])(?:\d{4}[\s-]?){2}\d{4}(?!\d)(?![\s-]\d)",
)

class AadhaarDetector(RegexDetector):
    name = "aadhaar"
    rules = (AADHAAR_RULE,)
