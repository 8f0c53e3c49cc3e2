"""Structured telemetry events and the sinks that receive them.

Spans and log messages are delivered as plain dataclass records instead of
console text, so tests can assert on exactly what was emitted.
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterable, Mapping, Protocol, Union

# Closed set of scalar types allowed for span attributes and log properties.
PropertyValue = Union[bool, int, float, str]
SCALAR_TYPES: tuple[type, ...] = (bool, int, float, str)


def check_scalar(key: str, value: Any) -> PropertyValue:
    """Reject anything outside the closed scalar set."""
    if not isinstance(key, str) or not key:
        raise TypeError(f"Property key must be a non-empty string, got {key!r}")
    if not isinstance(value, SCALAR_TYPES):
        raise TypeError(
            f"Property '{key}' must be str, int, float or bool, "
            f"got {type(value).__name__}"
        )
    return value


def check_properties(properties: Mapping[str, Any] | None) -> dict[str, PropertyValue]:
    if not properties:
        return {}
    return {key: check_scalar(key, value) for key, value in properties.items()}


class LogSeverity(str, Enum):
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


_SEVERITY_LEVELS: dict[LogSeverity, int] = {
    LogSeverity.INFO: logging.INFO,
    LogSeverity.WARNING: logging.WARNING,
    LogSeverity.ERROR: logging.ERROR,
}


class SpanType(str, Enum):
    PERFORMANCE = "performance"
    NETWORK = "network"


class SpanStatus(str, Enum):
    UNSET = "unset"
    OK = "ok"
    ERROR = "error"


class SpanEventKind(str, Enum):
    STARTED = "span_started"
    ENDED = "span_ended"


@dataclass(slots=True, frozen=True)
class SpanEvent:
    """Span lifecycle record.

    ``attributes``, ``status`` and timing fields reflect the span at the
    moment the event was emitted; started events carry no end data.
    """

    kind: SpanEventKind
    span_id: str
    name: str
    span_type: SpanType
    started_at: datetime
    attributes: dict[str, PropertyValue] = field(default_factory=dict)
    status: SpanStatus = SpanStatus.UNSET
    status_description: str = ""
    ended_at: datetime | None = None
    duration_ms: float | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": self.kind.value,
            "span_id": self.span_id,
            "name": self.name,
            "type": self.span_type.value,
            "started_at": self.started_at.isoformat(),
            "ended_at": self.ended_at.isoformat() if self.ended_at else None,
            "duration_ms": round(self.duration_ms, 3) if self.duration_ms is not None else None,
            "status": self.status.value,
            "status_description": self.status_description,
            "attributes": dict(self.attributes),
        }


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Structured log message with scalar properties."""

    message: str
    severity: LogSeverity
    properties: dict[str, PropertyValue] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        return {
            "event": "log",
            "message": self.message,
            "severity": self.severity.value,
            "properties": dict(self.properties),
            "timestamp": self.timestamp.isoformat(),
        }


class EventSink(Protocol):
    """Consumer of span lifecycle events and log records."""

    def emit_span(self, event: SpanEvent) -> None: ...

    def emit_log(self, record: LogRecord) -> None: ...


class LoggingEventSink:
    """Forwards telemetry to the standard ``logging`` module."""

    __slots__ = ("_logger",)

    def __init__(self, logger_name: str = "addrsim.telemetry"):
        self._logger = logging.getLogger(logger_name)

    def emit_span(self, event: SpanEvent) -> None:
        if event.kind == SpanEventKind.STARTED:
            self._logger.debug(f"Started span: {event.name} [{event.span_id[:8]}]")
            return
        self._logger.debug(
            f"Ended span: {event.name} [{event.span_id[:8]}] "
            f"status={event.status.value} {event.duration_ms or 0:.1f}ms "
            f"attributes={event.attributes}"
        )

    def emit_log(self, record: LogRecord) -> None:
        level = _SEVERITY_LEVELS[record.severity]
        if record.properties:
            self._logger.log(level, f"{record.message} | {record.properties}")
        else:
            self._logger.log(level, record.message)


class InMemoryEventSink:
    """Ring buffer of recent telemetry.

    Keeps the last N span events and the last N log records for tests,
    debugging and the recent-events endpoint.
    """

    def __init__(self, max_entries: int = 1000):
        self._spans: deque[SpanEvent] = deque(maxlen=max_entries)
        self._logs: deque[LogRecord] = deque(maxlen=max_entries)
        # Arrival order across both buffers
        self._timeline: deque[SpanEvent | LogRecord] = deque(maxlen=max_entries)
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> dict[str, Any]:
        return {
            "spans_started": 0,
            "spans_ended": 0,
            "spans_errored": 0,
            "logs": {severity.value: 0 for severity in LogSeverity},
        }

    def emit_span(self, event: SpanEvent) -> None:
        self._spans.append(event)
        self._timeline.append(event)
        if event.kind == SpanEventKind.STARTED:
            self._stats["spans_started"] += 1
        else:
            self._stats["spans_ended"] += 1
            if event.status == SpanStatus.ERROR:
                self._stats["spans_errored"] += 1

    def emit_log(self, record: LogRecord) -> None:
        self._logs.append(record)
        self._timeline.append(record)
        self._stats["logs"][record.severity.value] += 1

    @property
    def events(self) -> list[SpanEvent | LogRecord]:
        """All buffered events in arrival order."""
        return list(self._timeline)

    def spans(
        self,
        name: str | None = None,
        kind: SpanEventKind | None = None,
    ) -> list[SpanEvent]:
        return [
            e for e in self._spans
            if (name is None or e.name == name) and (kind is None or e.kind == kind)
        ]

    def ended_spans(self, name: str | None = None) -> list[SpanEvent]:
        return self.spans(name=name, kind=SpanEventKind.ENDED)

    def logs(self, severity: LogSeverity | None = None) -> list[LogRecord]:
        return [r for r in self._logs if severity is None or r.severity == severity]

    def recent(self, count: int = 10) -> list[dict[str, Any]]:
        """Most recent events, oldest first, as dicts."""
        if count <= 0:
            return []
        return [e.to_dict() for e in list(self._timeline)[-count:]]

    def stats(self) -> dict[str, Any]:
        return {
            **self._stats,
            "logs": dict(self._stats["logs"]),
            "buffered_spans": len(self._spans),
            "buffered_logs": len(self._logs),
        }

    def clear(self) -> None:
        self._spans.clear()
        self._logs.clear()
        self._timeline.clear()
        self._stats = self._empty_stats()


class MultiEventSink:
    """Delivers every event to each wrapped sink in order."""

    __slots__ = ("sinks",)

    def __init__(self, sinks: Iterable[EventSink]):
        self.sinks: tuple[EventSink, ...] = tuple(sinks)

    def emit_span(self, event: SpanEvent) -> None:
        for sink in self.sinks:
            sink.emit_span(event)

    def emit_log(self, record: LogRecord) -> None:
        for sink in self.sinks:
            sink.emit_log(record)
