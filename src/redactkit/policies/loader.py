"""Policy loader.

Redaction policies are YAML files with simple keys (see configs/policy.yaml).
Keeping policies in YAML allows:
- easy review by legal/compliance
- versioned configuration across runs
- non-engineers to propose new rules safely

Model configs (label maps) ship as JSON next to the model and are read
with `load_json`.
"""

from __future__ import annotations
from typing import Any, Dict
import json
import yaml

def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}

def load_json(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f) or {}
