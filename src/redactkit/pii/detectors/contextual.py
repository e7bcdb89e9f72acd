"""'label: value' pairs.

The label text anchors the match; only the value (up to the next field
delimiter: newline , ; |) is reported.
"""

from __future__ import annotations
from typing import Sequence
from ...pipeline.context import PiiRegexRule
from ..base import RegexDetector

_VALUE = r"\s*[:\-]\s*([^\s,;|][^\n,;|]*?)\s*(?=$|[\n,;|])"

def labelled_value_rule(label: str, keys: Sequence[str]) -> PiiRegexRule:
    alternatives = "|".join(keys)
    return PiiRegexRule(
        label=label,
        pattern=r"\b(?:" + alternatives + r")" + _VALUE,
        value_group=1,
        ignore_case=True,
    )

CONTEXTUAL_RULES = (
    labelled_value_rule("NAME", [r"name", r"full name", r"father'?s name", r"mother'?s name", r"guardian"]),
    labelled_value_rule("DOB", [r"dob", r"d\.o\.b\.?", r"date of birth", r"birth date"]),
    labelled_value_rule("ADDRESS", [r"address", r"addr\.?", r"residence"]),
    labelled_value_rule("ACCOUNT", [r"account\s+(?:no\.?|number)", r"a/c\s*no\.?", r"acct\.?\s*no\.?"]),
    labelled_value_rule("ID", [r"customer id", r"employee id", r"voter id", r"licen[cs]e\s+no\.?", r"policy\s+no\.?", r"id\s+(?:no\.?|number)"]),
    labelled_value_rule("CREDENTIAL", [r"username", r"user name", r"password", r"pin"]),
)

class ContextualDetector(RegexDetector):
    name = "contextual"
    rules = CONTEXTUAL_RULES
