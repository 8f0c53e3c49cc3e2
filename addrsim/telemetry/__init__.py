"""Span tracing and structured telemetry events."""

from .events import (
    EventSink,
    InMemoryEventSink,
    LoggingEventSink,
    LogRecord,
    LogSeverity,
    MultiEventSink,
    PropertyValue,
    SpanEvent,
    SpanEventKind,
    SpanStatus,
    SpanType,
)
from .tracer import Span, SpanStateError, Tracer

__all__ = [
    # Events
    "EventSink",
    "InMemoryEventSink",
    "LoggingEventSink",
    "LogRecord",
    "LogSeverity",
    "MultiEventSink",
    "PropertyValue",
    "SpanEvent",
    "SpanEventKind",
    "SpanStatus",
    "SpanType",
    # Tracer
    "Span",
    "SpanStateError",
    "Tracer",
]
