"""Lifecycle events describing the progress of one asynchronous attempt."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from donations_app.core.exceptions import GatewayError

T = TypeVar("T")


class EventState(str, enum.Enum):
    IDLE = "idle"
    LOADING = "loading"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class LifecycleEvent(Generic[T]):
    """Tagged union over ``idle``, ``loading``, ``done(data)`` and ``error(cause)``.

    ``attempt`` numbers the submit that produced the event so subscribers can
    tell a replayed event apart from a fresh one. Idle events use attempt 0.
    """

    state: EventState
    data: Optional[T] = None
    cause: Optional[GatewayError] = None
    attempt: int = 0

    @classmethod
    def idle(cls) -> "LifecycleEvent[T]":
        return cls(state=EventState.IDLE)

    @classmethod
    def loading(cls, attempt: int) -> "LifecycleEvent[T]":
        return cls(state=EventState.LOADING, attempt=attempt)

    @classmethod
    def done(cls, data: T, attempt: int) -> "LifecycleEvent[T]":
        return cls(state=EventState.DONE, data=data, attempt=attempt)

    @classmethod
    def error(cls, cause: GatewayError, attempt: int) -> "LifecycleEvent[T]":
        return cls(state=EventState.ERROR, cause=cause, attempt=attempt)

    @property
    def is_loading(self) -> bool:
        return self.state is EventState.LOADING

    @property
    def is_terminal(self) -> bool:
        return self.state in (EventState.DONE, EventState.ERROR)
