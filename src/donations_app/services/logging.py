"""Structured logging utilities with optional sinks."""

from __future__ import annotations

import datetime as _dt
import json
import logging
import os
from dataclasses import dataclass
from typing import Any, Callable, Dict, List

Sink = Callable[[Dict[str, Any]], None]

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}
_HEADER_KEYS = ("timestamp", "event", "severity", "component", "message")


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(str(item) for item in value)
    return str(value)


def format_human(record: Dict[str, Any]) -> str:
    """Render ``[ts] LEVEL event (component) - message - k=v ...``."""

    severity = str(record.get("severity", "info")).upper()
    line = f"[{record.get('timestamp', '-')}] {severity} {record.get('event', 'unknown')}"
    if record.get("component"):
        line += f" ({record['component']})"
    if record.get("message"):
        line += f" - {record['message']}"
    extras = sorted((key, value) for key, value in record.items() if key not in _HEADER_KEYS)
    if extras:
        line += " - " + " ".join(f"{key}={_format_value(value)}" for key, value in extras)
    return line


@dataclass(slots=True)
class _LogContext:
    app_name: str
    environment: str
    screen: str
    user_id: str | None = None

    @classmethod
    def from_environment(cls) -> "_LogContext":
        return cls(
            app_name=os.getenv("DONATIONS_APP_NAME", "donations-app"),
            environment=os.getenv("DONATIONS_ENVIRONMENT_KEY", "local").lower(),
            screen="login",
        )

    def as_fields(self) -> Dict[str, Any]:
        fields: Dict[str, Any] = {
            "app_name": self.app_name,
            "environment": self.environment,
            "screen": self.screen,
        }
        if self.user_id:
            fields["user_id"] = self.user_id
        return fields


class _Unset:
    pass


_UNSET = _Unset()


@dataclass
class LogEvent:
    """Structured payload emitted by the application."""

    event: str
    severity: str = "info"
    component: str = "donations-app"
    message: str | None = None
    fields: Dict[str, Any] | None = None

    def to_dict(self) -> Dict[str, Any]:
        timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat(timespec="milliseconds")
        payload: Dict[str, Any] = {
            "timestamp": timestamp.replace("+00:00", "Z"),
            "event": self.event,
            "severity": self.severity,
            "component": self.component,
        }
        if self.message:
            payload["message"] = self.message
        payload.update(self.fields or {})
        return payload


class StructuredLogger:
    """Fan-out structured logger.

    Console output goes through the standard :mod:`logging` tree using the
    format selected by ``DONATIONS_LOG_FORMAT`` (``human``, ``json`` or
    ``both``). Additional sinks receive a copy of every record together with
    the current context (app name, environment, screen and user id).
    """

    def __init__(self, name: str = "donations-app") -> None:
        self._logger = logging.getLogger(name)
        if not self._logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("%(message)s"))
            self._logger.addHandler(handler)
        self._logger.setLevel(logging.INFO)
        self._console_enabled = os.getenv("DONATIONS_DISABLE_CONSOLE_LOGS", "0") != "1"
        console_format = os.getenv("DONATIONS_LOG_FORMAT", "human").lower()
        self._console_formats = ("json", "human") if console_format == "both" else (console_format,)
        self._context = _LogContext.from_environment()
        self._sinks: List[Sink] = []

    def log(self, event: str, *, severity: str = "info", message: str | None = None, **fields: Any) -> None:
        self._emit(LogEvent(event=event, severity=severity, message=message, fields=fields))

    def debug(self, event: str, **fields: Any) -> None:
        self.log(event, severity="debug", **fields)

    def info(self, event: str, **fields: Any) -> None:
        self.log(event, severity="info", **fields)

    def warning(self, event: str, **fields: Any) -> None:
        self.log(event, severity="warning", **fields)

    def error(self, event: str, **fields: Any) -> None:
        self.log(event, severity="error", **fields)

    # ------------------------------------------------------------------ context configuration
    def configure_context(
        self,
        *,
        app_name: str | None = None,
        environment: str | None = None,
        screen: str | None = None,
        user_id: str | None | _Unset = _UNSET,
    ) -> None:
        if app_name is not None:
            self._context.app_name = app_name
        if environment is not None:
            self._context.environment = environment.lower()
        if screen is not None:
            self.set_screen(screen)
        if not isinstance(user_id, _Unset):
            self.set_user_id(user_id)

    def set_screen(self, screen: str) -> None:
        self._context.screen = screen

    def set_user_id(self, user_id: str | None) -> None:
        self._context.user_id = user_id

    def add_sink(self, sink: Sink) -> Callable[[], None]:
        """Register ``sink`` and return a callable that detaches it again."""

        self._sinks.append(sink)

        def remove() -> None:
            if sink in self._sinks:
                self._sinks.remove(sink)

        return remove

    # ------------------------------------------------------------------ internals
    def _emit(self, event: LogEvent) -> None:
        record = event.to_dict()
        if self._console_enabled:
            level = _LEVELS.get(event.severity.lower(), logging.INFO)
            for fmt in self._console_formats:
                text = json.dumps(record, default=str) if fmt == "json" else format_human(record)
                self._logger.log(level, text)
        if not self._sinks:
            return
        enriched = {**self._context.as_fields(), **record}
        for sink in list(self._sinks):
            try:
                sink(dict(enriched))
            except Exception:  # pragma: no cover
                self._logger.exception("structured log sink failed", extra={"sink_event": event.event})
