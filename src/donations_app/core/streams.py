"""Broadcast lifecycle stream with replay of the latest event."""

from __future__ import annotations

import asyncio
import logging
import threading
from typing import Any, Callable, Generic, List, Optional, TypeVar

from donations_app.core.exceptions import StreamClosedError
from donations_app.models.events import LifecycleEvent

T = TypeVar("T")
Listener = Callable[[LifecycleEvent[T]], None]

_CLOSED = object()


def _running_loop() -> Optional[asyncio.AbstractEventLoop]:
    try:
        return asyncio.get_running_loop()
    except RuntimeError:
        return None


class Subscription(Generic[T]):
    """Async iterator over one subscriber's private event queue.

    Items published from another thread are handed to the loop the
    subscription was created on.
    """

    def __init__(self, stream: "LifecycleStream[T]") -> None:
        self._stream = stream
        self._queue: asyncio.Queue = asyncio.Queue()
        self._loop = _running_loop()
        self._finished = False

    def _push(self, item: Any) -> None:
        loop = self._loop
        if loop is None or loop is _running_loop() or loop.is_closed():
            self._queue.put_nowait(item)
        else:
            loop.call_soon_threadsafe(self._queue.put_nowait, item)

    def __aiter__(self) -> "Subscription[T]":
        return self

    async def __anext__(self) -> LifecycleEvent[T]:
        if self._finished:
            raise StopAsyncIteration
        item = await self._queue.get()
        if item is _CLOSED:
            self._finished = True
            raise StopAsyncIteration
        return item

    def pending(self) -> List[LifecycleEvent[T]]:
        """Drain events already queued without waiting for new ones."""

        events: List[LifecycleEvent[T]] = []
        while not self._finished:
            try:
                item = self._queue.get_nowait()
            except asyncio.QueueEmpty:
                break
            if item is _CLOSED:
                self._finished = True
                break
            events.append(item)
        return events

    def cancel(self) -> None:
        self._stream._detach(self)
        self._push(_CLOSED)


class LifecycleStream(Generic[T]):
    """Fan-out of lifecycle events to listeners and async subscribers.

    Late subscribers receive the current event first (replay-last-value) and
    then only future events. Each async subscriber owns an unbounded queue so
    a slow consumer never holds back the others. Publishing may happen on a
    different thread than listening; callbacks run on the publishing thread.
    """

    def __init__(self, initial: LifecycleEvent[T] | None = None, *, name: str = "lifecycle") -> None:
        self.name = name
        self._current: LifecycleEvent[T] = initial or LifecycleEvent.idle()
        self._listeners: List[Listener] = []
        self._subscriptions: List[Subscription[T]] = []
        self._closed = False
        self._lock = threading.RLock()
        self._logger = logging.getLogger(f"donations.streams.{name}")

    @property
    def current(self) -> LifecycleEvent[T]:
        return self._current

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners) + len(self._subscriptions)

    # ------------------------------------------------------------------ subscription
    def listen(self, listener: Listener, *, replay: bool = True) -> Callable[[], None]:
        """Register a synchronous listener and return its unsubscribe callable."""

        with self._lock:
            if self._closed:
                raise StreamClosedError("Cannot listen to a closed stream")
            self._listeners.append(listener)
            current = self._current
        if replay:
            self._deliver(listener, current)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def subscribe(self, *, replay: bool = True) -> Subscription[T]:
        subscription: Subscription[T] = Subscription(self)
        with self._lock:
            if replay:
                subscription._push(self._current)
            if self._closed:
                subscription._push(_CLOSED)
            else:
                self._subscriptions.append(subscription)
        return subscription

    def _detach(self, subscription: Subscription[T]) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    # ------------------------------------------------------------------ publishing
    def publish(self, event: LifecycleEvent[T]) -> None:
        with self._lock:
            if self._closed:
                raise StreamClosedError(f"Cannot publish {event.state.value} to a closed stream")
            self._current = event
            subscriptions = list(self._subscriptions)
            listeners = list(self._listeners)
        for subscription in subscriptions:
            subscription._push(event)
        for listener in listeners:
            self._deliver(listener, event)

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._listeners.clear()
            subscriptions, self._subscriptions = self._subscriptions, []
        for subscription in subscriptions:
            subscription._push(_CLOSED)

    def _deliver(self, listener: Listener, event: LifecycleEvent[T]) -> None:
        try:
            listener(event)
        except Exception:
            self._logger.exception("Lifecycle listener failed", extra={"state": event.state.value})
