from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

# IFSC: 4-letter bank code, literal 0, 6-char branch code
IFSC_RULE = PiiRegexRule(
    label="IFSC",
    pattern=r"\b[A-Z]{4}0[A-Z0-9]{6}\b",
)

class IFSCDetector(RegexDetector):
    name = "ifsc"
    rules = (IFSC_RULE,)
