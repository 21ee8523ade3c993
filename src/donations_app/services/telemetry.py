"""Span helpers wrapping gateway calls with timing events."""

from __future__ import annotations

import contextlib
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator

from .logging import StructuredLogger


@dataclass
class TelemetrySpan:
    name: str
    start_time: float
    metadata: Dict[str, Any] = field(default_factory=dict)

    def elapsed_ms(self) -> int:
        return int((time.perf_counter() - self.start_time) * 1000)


@contextlib.contextmanager
def telemetry_span(logger: StructuredLogger, name: str, **metadata: Any) -> Iterator[TelemetrySpan]:
    """Log start, error and finish events around the wrapped block."""

    span = TelemetrySpan(name=name, start_time=time.perf_counter(), metadata=metadata)
    logger.info("telemetry.span.start", span=name, **metadata)
    try:
        yield span
    except Exception as error:
        logger.error("telemetry.span.error", span=name, error=str(error), **metadata)
        raise
    finally:
        logger.info("telemetry.span.finish", span=name, duration_ms=span.elapsed_ms(), **metadata)
