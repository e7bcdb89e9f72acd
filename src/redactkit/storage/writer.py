"""Output writers.

We keep writers simple and robust:
- redacted outputs are written to a temp file next to the destination and
  published with an atomic rename only when the whole write succeeded, so a
  failed or cancelled call never leaves a half-written file behind
- `append_jsonl` for per-call audit rows (append-only)
- `write_manifest` for the run summary at the end
"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, BinaryIO
import json
import logging
import os
import tempfile

log = logging.getLogger("redactkit.storage.writer")

@contextmanager
def atomic_output(path: str, mode: str = "wb") -> Iterator[BinaryIO]:
    """Yield a temp file handle; rename it onto `path` only on clean exit."""
    out_dir = os.path.dirname(os.path.abspath(path))
    os.makedirs(out_dir, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(prefix=".redactkit-", suffix=".tmp", dir=out_dir)
    kwargs = {} if "b" in mode else {"encoding": "utf-8"}
    try:
        with os.fdopen(fd, mode, **kwargs) as f:
            yield f
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        log.debug(f"Discarded partial output for {path}")
        raise

def append_jsonl(path: str, rows: List[Dict[str, Any]]) -> None:
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)
    with open(path, "a", encoding="utf-8") as f:
        for r in rows:
            f.write(json.dumps(r, ensure_ascii=False) + "\n")

def write_manifest(path: str, manifest: Dict[str, Any]) -> None:
    with atomic_output(path, mode="w") as f:
        json.dump(manifest, f, indent=2, ensure_ascii=False)
