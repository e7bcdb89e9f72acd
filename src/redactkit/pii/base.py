"""PII detection primitives.

We separate:
- Detection: find labeled character spans (Entity) in one reference string
- Fusion: merge detector + NER output into one entity list (fusion.py)
- Projection: apply that list to text, audio or image carriers

Detectors never resolve overlaps; they report everything they see.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..pipeline.context import Entity, PiiRegexRule
from .matcher import match

class PIIDetector(ABC):
    name: str

    @abstractmethod
    def detect(self, text: str) -> List[Entity]:
        raise NotImplementedError

class RegexDetector(PIIDetector):
    """Detector backed by one or more PiiRegexRule entries."""
    name = "regex"
    rules: Sequence[PiiRegexRule] = ()

    def __init__(self, rules: Optional[Sequence[PiiRegexRule]] = None, name: Optional[str] = None):
        if rules is not None:
            self.rules = tuple(rules)
        if name is not None:
            self.name = name

    def detect(self, text: str) -> List[Entity]:
        return match(text, self.rules)
