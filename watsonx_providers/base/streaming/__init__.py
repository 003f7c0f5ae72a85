"""Streaming package: typed events, the event channel and stream metrics."""

from .events import (
    TERMINAL_EVENT_TYPES,
    AssistantMessageEvent,
    DoneEvent,
    ErrorEvent,
    StartEvent,
    TextDeltaEvent,
    TextEndEvent,
    TextStartEvent,
    accumulate_text,
    is_terminal,
)
from .event_stream import AssistantMessageEventStream, EventSink
from .streaming_metrics import StreamMetrics

__all__ = [
    "TERMINAL_EVENT_TYPES",
    "AssistantMessageEvent",
    "DoneEvent",
    "ErrorEvent",
    "StartEvent",
    "TextDeltaEvent",
    "TextEndEvent",
    "TextStartEvent",
    "accumulate_text",
    "is_terminal",
    "AssistantMessageEventStream",
    "EventSink",
    "StreamMetrics",
]
