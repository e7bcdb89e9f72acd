from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

SSN_RULE = PiiRegexRule(
    label="SSN",
    pattern=r"(?<!\d)\d{3}-\d{2}-\d{4}(?!\d)",
)

class SSNDetector(RegexDetector):
    name = "ssn"
    rules = (SSN_RULE,)
