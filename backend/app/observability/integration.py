"""
Tracing helpers for the lesson scheduling platform.

Provider and exporter setup belongs to the host process; spans created here
go to whatever tracer provider it installed, or to the no-op default.
"""

import time
from typing import Any, Dict, Optional

from opentelemetry import trace

DEFAULT_TRACER_NAME = "scheduling.operations"


def get_tracer(name: str) -> trace.Tracer:
    """Tracer for a component, e.g. "scheduling.dst"."""
    return trace.get_tracer(name)


class TrackedOperation:
    """
    Context manager wrapping an operation in a span.

    The span records `operation.duration_ms` on exit and is marked as an
    error when the block raises. Exceptions are never suppressed.
    """

    def __init__(
        self,
        operation_name: str,
        tracer: Optional[trace.Tracer] = None,
        attributes: Optional[Dict[str, Any]] = None,
    ):
        self.operation_name = operation_name
        self.tracer = tracer or get_tracer(DEFAULT_TRACER_NAME)
        self.attributes = attributes or {}
        self.span = None
        self.start_time = None

    def __enter__(self):
        self.span = self.tracer.start_span(
            self.operation_name,
            attributes=self.attributes,
        )
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.span is None:
            return False

        self.span.set_attribute("operation.duration_ms", self.duration_ms)
        if exc_type is not None:
            self.span.set_status(trace.Status(trace.StatusCode.ERROR, str(exc_val)))
            self.span.record_exception(exc_val)

        self.span.end()
        return False

    @property
    def duration_ms(self) -> float:
        if self.start_time is None:
            return 0.0
        return (time.perf_counter() - self.start_time) * 1000

    def add_attribute(self, key: str, value) -> None:
        if self.span:
            self.span.set_attribute(key, value)

    def add_event(self, name: str, attributes: Optional[Dict[str, Any]] = None) -> None:
        if self.span:
            self.span.add_event(name, attributes or {})
