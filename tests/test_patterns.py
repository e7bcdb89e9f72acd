"""Tests for regex detectors, the registry and rule loading."""
import pytest

import redactkit.pii  # noqa: F401
from redactkit.pii.matcher import match, match_rule
from redactkit.pii.registry import default_rules, detect_all, get_detectors, list_detectors, load_rules, rule_from_dict
from redactkit.pipeline.context import PiiRegexRule

def _found(text, names=None):
    return [(e.label, e.text) for e in detect_all(text, names)]

class TestMatcher:

    def test_phone_and_email_spans(self):
        text = "Call 9876543210 or email a@b.com"
        rules = [PiiRegexRule("PHONE", r"\d{10}"), PiiRegexRule("EMAIL", r"[\w.]+@[\w.]+\.\w+")]
        ents = match(text, rules)
        assert [(e.label, e.start, e.end) for e in ents] == [("PHONE", 5, 15), ("EMAIL", 25, 32)]
        assert [text[e.start:e.end] for e in ents] == ["9876543210", "a@b.com"]

    def test_value_group(self):
        rule = PiiRegexRule("PIN", r"pin\s*:\s*(\d{4})", value_group=1, ignore_case=True)
        ents = match_rule("PIN: 4321", rule)
        assert [(e.text, e.start, e.end) for e in ents] == [("4321", 5, 9)]

    def test_unmatched_optional_group_is_skipped(self):
        rule = PiiRegexRule("X", r"a(b)?", value_group=1)
        assert [e.text for e in match_rule("a ab", rule)] == ["b"]

    def test_overlaps_are_all_reported(self):
        rules = [PiiRegexRule("A", r"\d{4}"), PiiRegexRule("B", r"\d{6}")]
        assert len(match("123456", rules)) == 2

class TestBuiltinDetectors:

    def test_registered_on_import(self):
        names = list_detectors()
        for n in ("aadhaar", "email", "phone", "ssn", "pan", "passport", "ifsc", "card", "date", "contextual"):
            assert n in names

    def test_phone(self):
        assert _found("Call 9876543210 now", ["phone"]) == [("PHONE", "9876543210")]
        assert _found("Call +91 98765 43210.", ["phone"]) == [("PHONE", "+91 98765 43210")]

    def test_phone_does_not_swallow_trailing_space(self):
        ents = detect_all("ph 98765 43210 ok", ["phone"])
        assert ents[0].text == "98765 43210"

    def test_aadhaar(self):
        assert _found("UID 1234 5678 9012.", ["aadhaar"]) == [("AADHAAR", "1234 5678 9012")]

    def test_card_is_not_split_into_aadhaar(self):
        assert _found("card 4111 1111 1111 1111", ["aadhaar"]) == []
        assert _found("card 4111 1111 1111 1111", ["card"]) == [("CARD", "4111 1111 1111 1111")]

    def test_email(self):
        assert _found("mail ravi.k@example.co.in today", ["email"]) == [("EMAIL", "ravi.k@example.co.in")]

    def test_pan_and_ifsc(self):
        assert _found("PAN ABCPE1234F", ["pan"]) == [("PAN", "ABCPE1234F")]
        assert _found("IFSC SBIN0001234", ["ifsc"]) == [("IFSC", "SBIN0001234")]

    def test_ssn(self):
        assert _found("ssn 123-45-6789", ["ssn"]) == [("SSN", "123-45-6789")]

    def test_dates(self):
        found = _found("born 12/05/1990, joined 3rd March 2015", ["date"])
        assert ("DATE", "12/05/1990") in found
        assert ("DATE", "3rd March 2015") in found

    def test_contextual_value_only(self):
        found = _found("Name: Ravi Kumar, DOB - 01 Jan 1990", ["contextual"])
        assert ("NAME", "Ravi Kumar") in found
        assert ("DOB", "01 Jan 1990") in found

    def test_unknown_detector(self):
        with pytest.raises(ValueError):
            get_detectors(["nope"])

    def test_default_rules_follow_selection(self):
        assert [r.label for r in default_rules(["ssn"])] == ["SSN"]

class TestRuleLoading:

    def test_rule_from_dict(self):
        r = rule_from_dict({"label": "EMP", "pattern": r"EMP-\d+", "ignore_case": True})
        assert r.regex.search("emp-42")

    def test_missing_keys(self):
        with pytest.raises(ValueError):
            rule_from_dict({"label": "X"})

    def test_bad_pattern(self):
        with pytest.raises(ValueError):
            rule_from_dict({"label": "X", "pattern": "(unclosed"})

    def test_load_rules_yaml(self, tmp_path):
        p = tmp_path / "rules.yaml"
        p.write_text(
            "rules:\n"
            "  - label: EMP\n"
            "    pattern: 'EMP-\\d{6}'\n"
            "  - label: UPI\n"
            "    pattern: 'upi\\s*:\\s*(\\S+)'\n"
            "    value_group: 1\n",
            encoding="utf-8",
        )
        rules = load_rules(str(p))
        assert [r.label for r in rules] == ["EMP", "UPI"]
        assert rules[1].value_group == 1
