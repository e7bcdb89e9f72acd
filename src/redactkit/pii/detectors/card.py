from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

_EDGE_L = r"(?<!\d)(?<!\d[\s-])"
_EDGE_R = r"(?!\d)(?![\s-]\d)"

CARD_RULES = (
    # 16 digits, optionally grouped 4-4-4-4
    PiiRegexRule(label="CARD", pattern=_EDGE_L + r"(?:\d{4}[\s-]?){3}\d{4}" + _EDGE_R),
    # Amex 4-6-5
    PiiRegexRule(label="CARD", pattern=_EDGE_L + r"\d{4}[\s-]?\d{6}[\s-]?\d{5}" + _EDGE_R),
)

class CardDetector(RegexDetector):
    name = "card"
    rules = CARD_RULES
