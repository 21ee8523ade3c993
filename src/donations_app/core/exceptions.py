"""Error taxonomy shared by gateways, streams and controllers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

TIMEOUT = "timeout"
TRANSPORT = "transport"
HTTP_STATUS = "http_status"
MALFORMED_PAYLOAD = "malformed_payload"
UNEXPECTED = "unexpected"


@dataclass
class GatewayError(Exception):
    """Environment failure reported by a remote collaborator.

    Gateway errors never cross the lifecycle stream boundary as raised
    exceptions; controllers fold them into ``error`` events.
    """

    code: str
    message: str
    status_code: int | None = None
    details: Any = None

    def __str__(self) -> str:
        status = f" status={self.status_code}" if self.status_code is not None else ""
        return f"{self.code}: {self.message}{status}"

    @classmethod
    def from_exception(cls, error: BaseException) -> "GatewayError":
        if isinstance(error, GatewayError):
            return error
        if isinstance(error, TimeoutError):
            return cls(code=TIMEOUT, message="The request timed out")
        return cls(code=UNEXPECTED, message=str(error) or type(error).__name__)


class ControllerDisposedError(RuntimeError):
    """Raised when a disposed controller is asked to do more work."""


class StreamClosedError(RuntimeError):
    """Raised when publishing to a closed lifecycle stream."""
