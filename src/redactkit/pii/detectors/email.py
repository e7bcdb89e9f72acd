from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

EMAIL_RULE = PiiRegexRule(
    label="EMAIL",
    pattern=r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b",
)

class EmailDetector(RegexDetector):
    name = "email"
    rules = (EMAIL_RULE,)
