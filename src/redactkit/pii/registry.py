"""PII detector registry.

Teams can add new detectors by:
1) implementing PIIDetector in `redactkit.pii.detectors.*` (or external package)
2) calling `register_detector(detector)` at startup
3) or listing extra regex rules in a YAML file loaded with `load_rules`

Built-in detectors are auto-registered on import via redactkit.pii.__init__.
The registry is filled once at startup and only read afterwards.
"""

from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
import re

from ..pipeline.context import Entity, PiiRegexRule
from ..policies.loader import load_yaml
from .base import PIIDetector, RegexDetector

_DETECTORS: List[PIIDetector] = []

def register_detector(detector: PIIDetector) -> None:
    """Register a PII detector. Duplicate names are ignored."""
    existing_names = [d.name for d in _DETECTORS]
    if detector.name not in existing_names:
        _DETECTORS.append(detector)

def list_detectors() -> List[str]:
    return [d.name for d in _DETECTORS]

def get_detectors(names: Optional[Iterable[str]] = None) -> List[PIIDetector]:
    """Registered detectors, optionally restricted (and ordered) by name."""
    if names is None:
        return list(_DETECTORS)
    by_name = {d.name: d for d in _DETECTORS}
    out = []
    for n in names:
        if n not in by_name:
            raise ValueError(f"Unknown detector: {n}. Register it in redactkit.pii.registry")
        out.append(by_name[n])
    return out

def default_rules(names: Optional[Iterable[str]] = None) -> List[PiiRegexRule]:
    """Flatten the regex rules of the selected regex-backed detectors."""
    rules: List[PiiRegexRule] = []
    for d in get_detectors(names):
        if isinstance(d, RegexDetector):
            rules.extend(d.rules)
    return rules

def detect_all(text: str, names: Optional[Iterable[str]] = None) -> List[Entity]:
    """Run the selected registered detectors on text."""
    found: List[Entity] = []
    for d in get_detectors(names):
        found.extend(d.detect(text))
    return sorted(found, key=lambda e: (e.start, e.end))

def rule_from_dict(item: Dict[str, Any]) -> PiiRegexRule:
    if "label" not in item or "pattern" not in item:
        raise ValueError(f"rule needs 'label' and 'pattern': {item}")
    vg = item.get("value_group")
    try:
        return PiiRegexRule(
            label=str(item["label"]),
            pattern=str(item["pattern"]),
            value_group=int(vg) if vg is not None else None,
            ignore_case=bool(item.get("ignore_case", False)),
        )
    except re.error as e:
        raise ValueError(f"invalid pattern for rule {item['label']!r}: {e}") from e

def load_rules(path: str) -> List[PiiRegexRule]:
    """Load extra rules from YAML: either a list or {rules: [...]}."""
    data = load_yaml(path)
    items = data.get("rules", []) if isinstance(data, dict) else data
    return [rule_from_dict(it) for it in (items or [])]
