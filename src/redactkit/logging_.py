"""Logging utilities.

Standard `logging` with one plain format for file and console:

- Logs go to: `<log_dir>/<run_id>.log` when a log directory is given
- Also prints to stderr.

Modules log through named loggers (`redactkit.<area>`). Detected entity text
is only ever logged at DEBUG; INFO and above carry labels, counts and offsets.
"""

from __future__ import annotations
import logging
import os
from typing import Optional, Union

FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATEFMT = "%Y-%m-%dT%H:%M:%S"

def setup_logging(log_dir: Optional[str], run_id: str, level: Union[int, str] = logging.INFO) -> Optional[str]:
    """
    Configure the root logger once per process.

    Args:
        log_dir: Directory for `<run_id>.log` (None = console only)
        run_id: Run identifier
        level: Root log level

    Returns the log file path, if any.
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)
    for h in list(root.handlers):
        if getattr(h, "_redactkit", False):
            root.removeHandler(h)
            h.close()

    fmt = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)
    handlers = []

    log_path = None
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        log_path = os.path.join(log_dir, f"{run_id}.log")
        handlers.append(logging.FileHandler(log_path, encoding="utf-8"))

    handlers.append(logging.StreamHandler())

    for h in handlers:
        h.setFormatter(fmt)
        h._redactkit = True
        root.addHandler(h)
    return log_path
