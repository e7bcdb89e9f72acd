"""Redaction policy.

Policy YAML example:
```yaml
mode: mask              # mask | tag
mask_char: "*"
overlap: longest        # keep | longest
detectors: null         # null = every registered detector, or a list of names
labels: []              # only redact these labels (empty = all)
extra_rules: []         # inline rules or a path to a rules YAML
blur_radius: 20
confidence_threshold: 0.7
max_tokens: 512
model_dir: null         # vocab.txt + config.json + model.onnx
```
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import os

from ..pipeline.context import Entity, PiiRegexRule
from ..pii.fusion import OVERLAP_POLICIES
from ..pii.redact import MODES
from .loader import load_yaml

@dataclass
class RedactionPolicy:
    mode: str = "mask"
    mask_char: str = "*"
    overlap: str = "longest"
    detectors: Optional[List[str]] = None
    labels: List[str] = field(default_factory=list)
    extra_rules: List[PiiRegexRule] = field(default_factory=list)
    blur_radius: int = 20
    confidence_threshold: float = 0.7
    max_tokens: int = 512
    model_dir: Optional[str] = None

    def __post_init__(self):
        if self.mode not in MODES:
            raise ValueError(f"policy.mode must be one of {MODES}, got {self.mode!r}")
        if self.overlap not in OVERLAP_POLICIES:
            raise ValueError(f"policy.overlap must be one of {OVERLAP_POLICIES}, got {self.overlap!r}")
        if self.blur_radius < 0:
            raise ValueError("policy.blur_radius must be >= 0")

    @classmethod
    def from_dict(cls, d: Dict[str, Any], base_dir: Optional[str] = None) -> "RedactionPolicy":
        from ..pii.registry import load_rules, rule_from_dict

        extra: List[PiiRegexRule] = []
        raw_rules = d.get("extra_rules") or []
        if isinstance(raw_rules, str):
            raw_rules = [raw_rules]
        for item in raw_rules:
            if isinstance(item, str):
                path = item if os.path.isabs(item) or base_dir is None else os.path.join(base_dir, item)
                extra.extend(load_rules(path))
            else:
                extra.append(rule_from_dict(item))

        detectors = d.get("detectors")
        return cls(
            mode=str(d.get("mode", "mask")).lower(),
            mask_char=str(d.get("mask_char", "*")),
            overlap=str(d.get("overlap", "longest")).lower(),
            detectors=list(detectors) if detectors is not None else None,
            labels=[str(x) for x in d.get("labels", []) or []],
            extra_rules=extra,
            blur_radius=int(d.get("blur_radius", 20)),
            confidence_threshold=float(d.get("confidence_threshold", 0.7)),
            max_tokens=int(d.get("max_tokens", 512)),
            model_dir=d.get("model_dir"),
        )

    @classmethod
    def from_yaml(cls, path: str) -> "RedactionPolicy":
        return cls.from_dict(load_yaml(path), base_dir=os.path.dirname(os.path.abspath(path)))

    def selects(self, entity: Entity) -> bool:
        return not self.labels or entity.label in self.labels
