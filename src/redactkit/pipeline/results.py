"""Call results.

Every pipeline call returns one of these instead of raising: `ok` tells the
caller whether the call succeeded, `error` carries a descriptive failure,
and `message` reports partial success (e.g. text redacted but nothing to
mute in the audio).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List, Optional

from ..errors import RedactKitError
from .context import Entity, Rect, TimeRange

@dataclass(frozen=True)
class ErrorInfo:
    kind: str
    message: str

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ErrorInfo":
        kind = exc.kind if isinstance(exc, RedactKitError) else type(exc).__name__
        return cls(kind=kind, message=str(exc))

@dataclass
class Result:
    ok: bool = True
    error: Optional[ErrorInfo] = None
    message: str = ""

@dataclass
class TextResult(Result):
    text: str = ""
    entities: List[Entity] = field(default_factory=list)

@dataclass
class MuteResult(Result):
    output_path: Optional[str] = None
    ranges: List[TimeRange] = field(default_factory=list)
    bytes_zeroed: int = 0

@dataclass
class AudioResult(Result):
    transcript: str = ""
    entities: List[Entity] = field(default_factory=list)
    ranges: List[TimeRange] = field(default_factory=list)
    output_path: Optional[str] = None
    muted: bool = False

@dataclass
class ImageResult(Result):
    image: Any = None  # PIL.Image.Image
    regions: List[Rect] = field(default_factory=list)

def failure(result_cls, exc: BaseException, **kwargs):
    return result_cls(ok=False, error=ErrorInfo.from_exception(exc), message=str(exc), **kwargs)
