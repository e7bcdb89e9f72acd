"""Run ID resolution: explicit or generated from a timestamp.

Generated ids look like `<prefix>_<YYYY>_<HHMMSS>` (UTC) and are safe for
file names.
"""

from __future__ import annotations
import re
from datetime import datetime, timezone
from typing import Optional

def _timestamp_digits(prefix: int = 4, suffix: int = 6) -> tuple[str, str]:
    """Compact timestamp YYYYMMDDHHMMSS; return (first prefix digits, last suffix digits)."""
    ts = datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S")
    return ts[:prefix], ts[-suffix:] if suffix else ""

def generate_run_id(prefix: str = "redact", separator: str = "_") -> str:
    name = re.sub(r"[^\w\-]", "_", prefix) or "run"
    pre, suf = _timestamp_digits()
    return separator.join(p for p in (name, pre, suf) if p)

def resolve_run_id(explicit: Optional[str], prefix: str = "redact") -> str:
    if explicit is not None and str(explicit).strip():
        return str(explicit).strip()
    return generate_run_id(prefix)
