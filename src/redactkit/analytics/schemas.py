"""Analytics event schemas.

One event per pipeline call (a text, a clip or an image). Events go to
Parquet with a fixed schema so files from different runs concatenate.

Entity text never reaches an event; only labels and counts do.
"""

from __future__ import annotations
from collections import Counter
from typing import Any, Dict
import time

import pyarrow as pa

EVENT_SCHEMA = pa.schema([
    ("run_id", pa.string()),
    ("modality", pa.string()),
    ("source", pa.string()),
    ("timestamp_ms", pa.int64()),
    ("ok", pa.bool_()),
    ("error_kind", pa.string()),
    ("entities", pa.int64()),
    ("label_counts", pa.map_(pa.string(), pa.int64())),
    ("ranges_muted", pa.int64()),
    ("ms_muted", pa.int64()),
    ("regions_blurred", pa.int64()),
    ("duration_ms", pa.float64()),
])

AGGREGATE_SCHEMA = pa.schema([
    ("run_id", pa.string()),
    ("date", pa.string()),
    ("modality", pa.string()),
    ("calls", pa.int64()),
    ("failures", pa.int64()),
    ("entities", pa.int64()),
    ("ranges_muted", pa.int64()),
    ("regions_blurred", pa.int64()),
    ("duration_ms_p50", pa.float64()),
    ("duration_ms_p90", pa.float64()),
    ("duration_ms_p99", pa.float64()),
])

def make_event(
    *,
    run_id: str,
    modality: str,
    source: str,
    result: Any,
    duration_ms: float = 0.0,
) -> Dict[str, Any]:
    """Event row from a TextResult / AudioResult / ImageResult."""
    entities = getattr(result, "entities", None) or []
    ranges = getattr(result, "ranges", None) or []
    if not getattr(result, "muted", True):
        ranges = []
    regions = getattr(result, "regions", None) or []
    error = getattr(result, "error", None)
    return {
        "run_id": run_id,
        "modality": modality,
        "source": source,
        "timestamp_ms": int(time.time() * 1000),
        "ok": bool(result.ok),
        "error_kind": error.kind if error is not None else None,
        "entities": len(entities),
        "label_counts": sorted(Counter(e.label for e in entities).items()),
        "ranges_muted": len(ranges),
        "ms_muted": sum(r.duration_ms for r in ranges),
        "regions_blurred": len(regions),
        "duration_ms": float(duration_ms),
    }
