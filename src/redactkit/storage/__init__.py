"""Output storage helpers."""

from .writer import atomic_output, append_jsonl, write_manifest

__all__ = [
    "atomic_output",
    "append_jsonl",
    "write_manifest",
]
