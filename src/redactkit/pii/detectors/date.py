from __future__ import annotations
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

_MONTH = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)

DATE_RULES = (
    # 01/02/1990, 1-2-90, 01.02.1990
    PiiRegexRule(label="DATE", pattern=r"\b\d{1,2}[-./]\d{1,2}[-./]\d{2,4}\b"),
    # 1990-02-01
    PiiRegexRule(label="DATE", pattern=r"\b\d{4}-\d{2}-\d{2}\b"),
    # 1st January 1990, 01 Jan, 1990
    PiiRegexRule(
        label="DATE",
        pattern=r"\b\d{1,2}(?:st|nd|rd|th)?\s+" + _MONTH + r"\.?,?\s+\d{2,4}\b",
        ignore_case=True,
    ),
    # January 1, 1990
    PiiRegexRule(
        label="DATE",
        pattern=r"\b" + _MONTH + r"\.?\s+\d{1,2}(?:st|nd|rd|th)?,?\s+\d{4}\b",
        ignore_case=True,
    ),
)

class DateDetector(RegexDetector):
    name = "date"
    rules = DATE_RULES
