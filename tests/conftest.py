"""Shared fixtures: import path, recording logger and scriptable gateways."""

from __future__ import annotations

import asyncio
import sys
import threading
from pathlib import Path
from typing import Any, List, Optional

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
for path in (PROJECT_ROOT, SRC_PATH):
    value = str(path)
    if value not in sys.path:
        sys.path.insert(0, value)

from donations_app.core.streams import LifecycleStream  # noqa: E402
from donations_app.models.auth import LoginResult, UserProfile  # noqa: E402
from donations_app.models.events import LifecycleEvent  # noqa: E402
from donations_app.services.logging import StructuredLogger  # noqa: E402


class RecordingLogger(StructuredLogger):
    """Structured logger that keeps every record for assertions."""

    def __init__(self, name: str = "test-donations") -> None:
        super().__init__(name)
        self.records: List[dict[str, Any]] = []
        self.add_sink(self.records.append)

    def events(self, name: Optional[str] = None) -> List[str]:
        names = [record["event"] for record in self.records]
        return [event for event in names if name is None or event == name]


class _Gate:
    """Hold a call until ``release`` is set, from any thread or loop."""

    def __init__(self, hold: bool, ignore_cancel: bool) -> None:
        self.release: Optional[threading.Event] = threading.Event() if hold else None
        self.ignore_cancel = ignore_cancel
        self.cancelled = 0

    async def wait(self) -> None:
        while self.release is not None and not self.release.is_set():
            try:
                await asyncio.sleep(0.002)
            except asyncio.CancelledError:
                if not self.ignore_cancel:
                    raise
                self.cancelled += 1


class ScriptedLoginGateway(_Gate):
    """Login gateway whose outcome and timing are controlled by the test."""

    def __init__(
        self,
        result: Any = None,
        *,
        error: Optional[BaseException] = None,
        hold: bool = False,
        ignore_cancel: bool = False,
    ) -> None:
        super().__init__(hold, ignore_cancel)
        self.result = result if result is not None else LoginResult("token", UserProfile.fake())
        self.error = error
        self.calls: List[tuple[str, str]] = []
        self.completed = 0

    async def login(self, email: str, password: str) -> Any:
        self.calls.append((email, password))
        await self.wait()
        self.completed += 1
        if self.error is not None:
            raise self.error
        return self.result


class ScriptedDonationGateway(_Gate):
    def __init__(
        self,
        donations=(),
        *,
        error: Optional[BaseException] = None,
        hold: bool = False,
        ignore_cancel: bool = False,
    ) -> None:
        super().__init__(hold, ignore_cancel)
        self.donations = list(donations)
        self.error = error
        self.tokens: List[Optional[str]] = []
        self.completed = 0

    async def fetch_donations(self, token: Optional[str]):
        self.tokens.append(token)
        await asyncio.sleep(0)
        await self.wait()
        self.completed += 1
        if self.error is not None:
            raise self.error
        return list(self.donations)


async def settle(rounds: int = 5) -> None:
    """Let scheduled tasks run to completion."""

    for _ in range(rounds):
        await asyncio.sleep(0.01)


def wait_for_terminal(stream: LifecycleStream, timeout: float = 5.0) -> LifecycleEvent:
    """Block until ``stream`` holds a ``done`` or ``error`` event."""

    reached = threading.Event()

    def on_event(event: LifecycleEvent) -> None:
        if event.is_terminal:
            reached.set()

    unsubscribe = stream.listen(on_event)
    try:
        assert reached.wait(timeout), f"{stream.name} still {stream.current.state.value}"
    finally:
        unsubscribe()
    return stream.current


@pytest.fixture
def logger(monkeypatch) -> RecordingLogger:
    monkeypatch.setenv("DONATIONS_DISABLE_CONSOLE_LOGS", "1")
    return RecordingLogger()
