"""Long-lived asyncio loop running on a daemon thread.

Solara event handlers run on worker threads without an event loop. Every
attempt a controller schedules from such a thread lands on one
``BackgroundLoop``, so loop-bound resources (the shared ``httpx`` connection
pool in particular) outlive a single call.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import contextlib
import logging
import threading
from typing import Any, Awaitable, Optional

from solara.server import kernel_context

logger = logging.getLogger("donations.loop")


def _current_kernel_context():
    if kernel_context.has_current_context():
        return kernel_context.get_current_context()
    return None


class BackgroundLoop:
    """Start lazily, accept coroutines from any thread, stop once."""

    def __init__(self, name: str = "donations-loop") -> None:
        self.name = name
        # reactive state written from the loop thread must land in the
        # kernel that created the loop
        self._context = _current_kernel_context()
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self._stopped = False

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def in_loop_thread(self) -> bool:
        return self._thread is not None and threading.current_thread() is self._thread

    def start(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._stopped:
                raise RuntimeError(f"{self.name} has been stopped")
            if self._loop is None:
                loop = asyncio.new_event_loop()
                ready = threading.Event()
                thread = threading.Thread(target=self._serve, args=(loop, ready), name=self.name, daemon=True)
                thread.start()
                ready.wait()
                self._loop, self._thread = loop, thread
                logger.debug("loop.started", extra={"loop_name": self.name})
            return self._loop

    def _serve(self, loop: asyncio.AbstractEventLoop, ready: threading.Event) -> None:
        asyncio.set_event_loop(loop)
        with self._context if self._context is not None else contextlib.nullcontext():
            loop.call_soon(ready.set)
            try:
                loop.run_forever()
            finally:
                pending = asyncio.all_tasks(loop)
                for task in pending:
                    task.cancel()
                if pending:
                    loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
                loop.run_until_complete(loop.shutdown_asyncgens())
                loop.close()

    def submit(self, coroutine: Awaitable[Any]) -> concurrent.futures.Future:
        """Schedule ``coroutine`` on the loop and return its thread-safe future."""

        return asyncio.run_coroutine_threadsafe(coroutine, self.start())

    def run(self, coroutine: Awaitable[Any], *, timeout: Optional[float] = None) -> Any:
        """Block the calling thread until ``coroutine`` finishes on the loop."""

        if self.in_loop_thread():
            raise RuntimeError(f"{self.name} cannot wait on itself")
        return self.submit(coroutine).result(timeout)

    def stop(self, *, timeout: float = 5.0) -> None:
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            loop, thread = self._loop, self._thread
        if loop is None or thread is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not threading.current_thread():
            thread.join(timeout)
        logger.debug("loop.stopped", extra={"loop_name": self.name})
