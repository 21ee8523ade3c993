"""Attempt bookkeeping shared by controllers that publish lifecycle events."""

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar, Union

from donations_app.core import exceptions
from donations_app.core.loop import BackgroundLoop
from donations_app.core.streams import LifecycleStream
from donations_app.models.events import EventState, LifecycleEvent
from donations_app.services.logging import StructuredLogger
from donations_app.services.telemetry import telemetry_span

T = TypeVar("T")
Handle = Union[asyncio.Task, concurrent.futures.Future]


class OperationRunner(Generic[T]):
    """Run one asynchronous attempt at a time and publish its lifecycle.

    ``start`` publishes ``loading`` synchronously and returns without waiting
    for the work. The work runs on ``loop`` when one is given, otherwise on
    the caller's running event loop, otherwise on a background loop owned by
    the runner. Results are only published when they belong to the latest
    attempt and the runner has not been disposed; anything else is dropped.
    """

    def __init__(
        self,
        name: str,
        logger: StructuredLogger,
        *,
        timeout: Optional[float] = None,
        loop: Optional[BackgroundLoop] = None,
    ) -> None:
        self.name = name
        self._logger = logger
        self._timeout = timeout
        self._loop = loop
        self._owns_loop = False
        self.stream: LifecycleStream[T] = LifecycleStream(LifecycleEvent.idle(), name=name)
        self._attempt = 0
        self._task: Optional[Handle] = None
        self._disposed = False
        self._lock = threading.RLock()

    # ------------------------------------------------------------------ accessors
    @property
    def current(self) -> LifecycleEvent[T]:
        return self.stream.current

    @property
    def is_loading(self) -> bool:
        return self.stream.current.state is EventState.LOADING

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------ lifecycle
    def ensure_active(self) -> None:
        if self._disposed:
            raise exceptions.ControllerDisposedError(f"{self.name} controller has been disposed")

    def start(self, work: Callable[[], Awaitable[T]], **fields: Any) -> bool:
        """Begin a new attempt unless one is already loading."""

        with self._lock:
            self.ensure_active()
            if self.is_loading:
                self._logger.warning(f"{self.name}.ignored", attempt=self._attempt, reason="in_flight", **fields)
                return False
            self._attempt += 1
            attempt = self._attempt
            self.stream.publish(LifecycleEvent.loading(attempt))
            self._task = self._spawn(self._run(attempt, work, fields))
        return True

    def _spawn(self, coroutine: Awaitable[None]) -> Handle:
        if self._loop is None:
            try:
                return asyncio.get_running_loop().create_task(coroutine)
            except RuntimeError:
                self._loop = BackgroundLoop(name=f"{self.name}-loop")
                self._owns_loop = True
        return self._loop.submit(coroutine)

    async def _run(self, attempt: int, work: Callable[[], Awaitable[T]], fields: dict) -> None:
        try:
            with telemetry_span(self._logger, self.name, attempt=attempt, **fields):
                if self._timeout is None:
                    result = await work()
                else:
                    result = await asyncio.wait_for(work(), timeout=self._timeout)
        except asyncio.CancelledError:
            self._logger.info(f"{self.name}.cancelled", attempt=attempt)
            raise
        except Exception as error:  # noqa: BLE001 - every failure becomes an error event
            cause = exceptions.GatewayError.from_exception(error)
            self._settle(LifecycleEvent.error(cause, attempt))
            return
        self._settle(LifecycleEvent.done(result, attempt))

    def _settle(self, event: LifecycleEvent[T]) -> None:
        with self._lock:
            if self._disposed or event.attempt != self._attempt:
                self._logger.info(
                    f"{self.name}.dropped",
                    attempt=event.attempt,
                    state=event.state.value,
                    disposed=self._disposed,
                )
                return
            if event.state is EventState.ERROR and event.cause is not None:
                self._logger.error(
                    f"{self.name}.failed",
                    attempt=event.attempt,
                    code=event.cause.code,
                    status_code=event.cause.status_code,
                )
            else:
                self._logger.info(f"{self.name}.{event.state.value}", attempt=event.attempt)
            self.stream.publish(event)

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            if self._task is not None and not self._task.done():
                self._task.cancel()
            self._task = None
            self.stream.close()
            self._logger.info(f"{self.name}.disposed", attempt=self._attempt)
        if self._owns_loop and self._loop is not None:
            self._loop.stop()
