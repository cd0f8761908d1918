"""Trace logging helpers for surface rebuilds."""

from mathsurf.trace.event import RebuildEventKind, new_event
from mathsurf.trace.logger import BestEffortTraceLogger, EventSink, TraceLogger, read_trace

__all__ = [
    "BestEffortTraceLogger",
    "EventSink",
    "RebuildEventKind",
    "TraceLogger",
    "new_event",
    "read_trace",
]
