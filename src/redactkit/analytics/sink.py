"""Analytics sink.

Two storage layers under `<out_dir>/analytics/`:
1) Raw events (append-only Parquet): `events/modality=.../date=.../events.parquet`
2) Aggregates (append-only Parquet): `aggregates/daily_aggregates.parquet`

Aggregates carry call/failure/entity counters plus p50/p90/p99 of the
per-call duration, computed with numpy when the run flushes.
"""

from __future__ import annotations
from datetime import datetime, timezone
from typing import Any, Dict, List
import logging
import os

import numpy as np
import pyarrow as pa
import pyarrow.parquet as pq

from .schemas import AGGREGATE_SCHEMA, EVENT_SCHEMA

log = logging.getLogger("redactkit.analytics")

def _percentiles(xs: List[float], ps=(50, 90, 99)) -> Dict[str, float]:
    if not xs:
        return {f"p{p}": None for p in ps}
    arr = np.array(xs, dtype=np.float64)
    return {f"p{p}": float(np.percentile(arr, p)) for p in ps}

class AnalyticsSink:
    def __init__(self, out_dir: str, run_id: str):
        self.out_dir = out_dir
        self.run_id = run_id
        self.events_dir = os.path.join(out_dir, "analytics", "events")
        self.aggs_dir = os.path.join(out_dir, "analytics", "aggregates")
        os.makedirs(self.events_dir, exist_ok=True)
        os.makedirs(self.aggs_dir, exist_ok=True)

        # key=(date, modality) -> counters + duration samples; flushed at end of run
        self._agg: Dict[tuple, Dict[str, Any]] = {}

    def emit(self, event: Dict[str, Any]) -> None:
        modality = event["modality"]
        date = datetime.fromtimestamp(event["timestamp_ms"] / 1000, tz=timezone.utc).date().isoformat()

        p = os.path.join(self.events_dir, f"modality={modality}", f"date={date}", "events.parquet")
        os.makedirs(os.path.dirname(p), exist_ok=True)
        self._append_parquet(p, [event], EVENT_SCHEMA)

        cur = self._agg.setdefault((date, modality), {
            "date": date, "modality": modality,
            "calls": 0, "failures": 0, "entities": 0, "ranges_muted": 0, "regions_blurred": 0,
            "durations": [],
        })
        cur["calls"] += 1
        cur["failures"] += 0 if event["ok"] else 1
        cur["entities"] += int(event.get("entities", 0))
        cur["ranges_muted"] += int(event.get("ranges_muted", 0))
        cur["regions_blurred"] += int(event.get("regions_blurred", 0))
        cur["durations"].append(float(event.get("duration_ms", 0.0)))

    def flush_aggregates(self) -> None:
        if not self._agg:
            return
        rows = []
        for cur in self._agg.values():
            row = {k: v for k, v in cur.items() if k != "durations"}
            row["run_id"] = self.run_id
            for pk, pv in _percentiles(cur["durations"]).items():
                row[f"duration_ms_{pk}"] = pv
            rows.append(row)
        p = os.path.join(self.aggs_dir, "daily_aggregates.parquet")
        self._append_parquet(p, rows, AGGREGATE_SCHEMA)
        log.info(f"Flushed {len(rows)} aggregate rows to {p}")
        self._agg.clear()

    def _append_parquet(self, path: str, rows: List[Dict[str, Any]], schema: pa.Schema) -> None:
        table = pa.Table.from_pylist(rows, schema=schema)
        if os.path.exists(path):
            if os.path.getsize(path) == 0:
                # empty file left by an interrupted write; start fresh
                os.remove(path)
            else:
                existing = pq.read_table(path).cast(schema)
                table = pa.concat_tables([existing, table])
        pq.write_table(table, path, compression="zstd")

def read_aggregates(out_dir: str) -> List[Dict[str, Any]]:
    """Rows of `daily_aggregates.parquet` under `out_dir`, oldest first."""
    p = os.path.join(out_dir, "analytics", "aggregates", "daily_aggregates.parquet")
    if not os.path.exists(p):
        return []
    return pq.read_table(p).to_pylist()
