"""Lightweight span tracer.

A span moves through exactly two states:

    CREATED --(set_attribute | set_status)*--> ENDED

Any mutation after ``end()`` (including a second ``end()``) raises
``SpanStateError``. Spans belong to the call that created them and are
never shared between concurrent operations.

Usage:
    tracer = Tracer(InMemoryEventSink())
    span = tracer.start_span("address_validation")
    span.set_attribute("address.city", "Chicago")
    span.set_status(SpanStatus.OK)
    span.end()
    tracer.log_message("Address validation completed", LogSeverity.INFO)
"""

import time
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from addrsim.telemetry.events import (
    EventSink,
    LoggingEventSink,
    LogRecord,
    LogSeverity,
    PropertyValue,
    SpanEvent,
    SpanEventKind,
    SpanStatus,
    SpanType,
    check_properties,
    check_scalar,
)


class SpanStateError(RuntimeError):
    """Raised when a sealed span is mutated or ended again."""


class Span:
    """Timed instrumentation record for one logical operation."""

    __slots__ = (
        "name",
        "span_type",
        "span_id",
        "started_at",
        "ended_at",
        "_tracer",
        "_attributes",
        "_status",
        "_status_description",
        "_start_tick",
        "_end_tick",
    )

    def __init__(self, tracer: "Tracer", name: str, span_type: SpanType):
        self.name = name
        self.span_type = span_type
        self.span_id = uuid.uuid4().hex
        self.started_at = datetime.now(timezone.utc)
        self.ended_at: datetime | None = None
        self._tracer = tracer
        self._attributes: dict[str, PropertyValue] = {}
        self._status = SpanStatus.UNSET
        self._status_description = ""
        self._start_tick = tracer.clock()
        self._end_tick: float | None = None

    @property
    def is_ended(self) -> bool:
        return self._end_tick is not None

    @property
    def attributes(self) -> dict[str, PropertyValue]:
        """Copy of the current attribute map."""
        return dict(self._attributes)

    @property
    def status(self) -> SpanStatus:
        return self._status

    @property
    def status_description(self) -> str:
        return self._status_description

    @property
    def duration_ms(self) -> float | None:
        if self._end_tick is None:
            return None
        return (self._end_tick - self._start_tick) * 1000.0

    def _ensure_open(self, operation: str) -> None:
        if self._end_tick is not None:
            raise SpanStateError(f"Cannot {operation} on ended span '{self.name}' [{self.span_id[:8]}]")

    def set_attribute(self, key: str, value: PropertyValue) -> None:
        """Upsert an attribute; last write per key wins."""
        self._ensure_open("set attribute")
        self._attributes[key] = check_scalar(key, value)

    def set_status(self, status: SpanStatus, description: str = "") -> None:
        """Record a terminal status; may be called repeatedly before end."""
        self._ensure_open("set status")
        if status == SpanStatus.UNSET:
            raise ValueError("Span status can only be set to ok or error")
        self._status = SpanStatus(status)
        self._status_description = description

    def end(self) -> None:
        """Seal the span and emit its final state."""
        self._ensure_open("end")
        self._end_tick = self._tracer.clock()
        self.ended_at = datetime.now(timezone.utc)
        self._tracer._emit_span(self._to_event(SpanEventKind.ENDED))

    def _to_event(self, kind: SpanEventKind) -> SpanEvent:
        return SpanEvent(
            kind=kind,
            span_id=self.span_id,
            name=self.name,
            span_type=self.span_type,
            started_at=self.started_at,
            attributes=dict(self._attributes),
            status=self._status,
            status_description=self._status_description,
            ended_at=self.ended_at,
            duration_ms=self.duration_ms,
        )

    def to_dict(self) -> dict[str, Any]:
        return self._to_event(
            SpanEventKind.ENDED if self.is_ended else SpanEventKind.STARTED
        ).to_dict()

    def __repr__(self) -> str:
        state = "ended" if self.is_ended else "open"
        return f"Span({self.name!r}, {self.span_type.value}, {state})"


class Tracer:
    """Creates spans and emits structured log records to an event sink.

    One tracer is built at startup and handed to every instrumented
    component; there is no process-wide instance.
    """

    def __init__(
        self,
        sink: EventSink | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the tracer.

        Args:
            sink: Receiver of span events and log records. Defaults to
                forwarding everything to ``logging``.
            clock: Monotonic clock used for span durations.
        """
        self.sink = sink if sink is not None else LoggingEventSink()
        self.clock = clock
        self._session_properties: dict[str, PropertyValue] = {}

    # ------------------------------------------------------------------
    # Spans
    # ------------------------------------------------------------------

    def start_span(self, name: str, span_type: SpanType = SpanType.PERFORMANCE) -> Span:
        span = Span(self, name, SpanType(span_type))
        self._emit_span(span._to_event(SpanEventKind.STARTED))
        return span

    def set_attribute(self, span: Span, key: str, value: PropertyValue) -> None:
        span.set_attribute(key, value)

    def set_status(self, span: Span, status: SpanStatus, description: str = "") -> None:
        span.set_status(status, description)

    def end(self, span: Span) -> None:
        span.end()

    def _emit_span(self, event: SpanEvent) -> None:
        self.sink.emit_span(event)

    # ------------------------------------------------------------------
    # Logs
    # ------------------------------------------------------------------

    @property
    def session_properties(self) -> dict[str, PropertyValue]:
        return dict(self._session_properties)

    def add_session_property(self, key: str, value: PropertyValue) -> None:
        """Attach a property to every subsequent log record."""
        self._session_properties[key] = check_scalar(key, value)

    def remove_session_property(self, key: str) -> None:
        self._session_properties.pop(key, None)

    def log_message(
        self,
        message: str,
        severity: LogSeverity = LogSeverity.INFO,
        properties: Mapping[str, PropertyValue] | None = None,
    ) -> LogRecord:
        """Emit a structured log record immediately.

        Record-level properties override session properties of the same key.
        """
        record = LogRecord(
            message=message,
            severity=LogSeverity(severity),
            properties={**self._session_properties, **check_properties(properties)},
        )
        self.sink.emit_log(record)
        return record
