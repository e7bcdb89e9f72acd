"""Error taxonomy.

Two propagation levels:
- per-item (one entity, one word, one chunk): log and skip, keep going
- per-call (unsupported format, collaborator down, cancelled): converted to a
  failure result at the pipeline boundary (`redactkit.pipeline.build`)

Nothing here is meant to crash the process.
"""

from __future__ import annotations


class RedactKitError(Exception):
    """Base class for all redactkit errors."""

    kind = "error"


class InputFormatError(RedactKitError):
    """Unsupported container, codec or bit depth. Fatal for the call."""

    kind = "input_format"


class AlignmentMiss(RedactKitError):
    """An entity could not be projected onto a word / time range."""

    kind = "alignment_miss"


class BoundsError(RedactKitError):
    """Entity or rectangle outside its reference bounds."""

    kind = "bounds"


class ModelUnavailable(RedactKitError):
    """Label-scoring or recognition collaborator failed to initialize."""

    kind = "model_unavailable"


class Cancelled(RedactKitError):
    """Cooperative cancellation was requested mid-call."""

    kind = "cancelled"
