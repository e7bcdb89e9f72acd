"""Caller-side lifecycle of a redaction job.

The pipeline itself is stateless per call; a UI or batch driver that wants
to show progress tracks it with these states:

    Loading -> Ready -> Processing -> Done | Failed

`Done` and `Failed` can `start` the next item or `reset` to Ready; the
full table is `TRANSITIONS`.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Tuple, Type, Union

class PipelineEvent(str, Enum):
    LOADED = "loaded"
    START = "start"
    FINISH = "finish"
    FAIL = "fail"
    RESET = "reset"

@dataclass(frozen=True)
class Loading:
    pass

@dataclass(frozen=True)
class Ready:
    pass

@dataclass(frozen=True)
class Processing:
    item: str = ""

@dataclass(frozen=True)
class Done:
    result: Any = None

@dataclass(frozen=True)
class Failed:
    message: str = ""

PipelineState = Union[Loading, Ready, Processing, Done, Failed]

TRANSITIONS: Dict[Tuple[Type, PipelineEvent], Type] = {
    (Loading, PipelineEvent.LOADED): Ready,
    (Loading, PipelineEvent.FAIL): Failed,
    (Ready, PipelineEvent.START): Processing,
    (Processing, PipelineEvent.FINISH): Done,
    (Processing, PipelineEvent.FAIL): Failed,
    (Done, PipelineEvent.START): Processing,
    (Done, PipelineEvent.RESET): Ready,
    (Failed, PipelineEvent.START): Processing,
    (Failed, PipelineEvent.RESET): Ready,
}

def advance(state: PipelineState, event: Union[PipelineEvent, str], *, item: str = "", result: Any = None, message: str = "") -> PipelineState:
    """Next state, or ValueError if `event` is not allowed in `state`."""
    event = PipelineEvent(event)
    target = TRANSITIONS.get((type(state), event))
    if target is None:
        raise ValueError(f"illegal transition: {type(state).__name__} --{event.value}-->")
    if target is Processing:
        return Processing(item=item)
    if target is Done:
        return Done(result=result)
    if target is Failed:
        return Failed(message=message)
    return target()

def settle(state: PipelineState, result: Any) -> PipelineState:
    """Finish or fail a Processing state from a call result (`ok`, `message`)."""
    if getattr(result, "ok", False):
        return advance(state, PipelineEvent.FINISH, result=result)
    return advance(state, PipelineEvent.FAIL, message=getattr(result, "message", "") or "failed")
