"""Typed events emitted on an assistant message stream.

Consumers dispatch on ``event.type``. Intermediate events carry ``partial``,
the live output message (not a copy). Exactly one terminal event
(``DoneEvent`` or ``ErrorEvent``) ends every stream.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Union

from ..models import AssistantMessage


@dataclass
class StartEvent:
    partial: AssistantMessage
    type: Literal["start"] = field(default="start", init=False)


@dataclass
class TextStartEvent:
    content_index: int
    partial: AssistantMessage
    type: Literal["text_start"] = field(default="text_start", init=False)


@dataclass
class TextDeltaEvent:
    content_index: int
    delta: str
    partial: AssistantMessage
    type: Literal["text_delta"] = field(default="text_delta", init=False)


@dataclass
class TextEndEvent:
    content_index: int
    content: str
    partial: AssistantMessage
    type: Literal["text_end"] = field(default="text_end", init=False)


@dataclass
class DoneEvent:
    reason: Literal["stop"]
    message: AssistantMessage
    type: Literal["done"] = field(default="done", init=False)


@dataclass
class ErrorEvent:
    reason: Literal["error"]
    error: AssistantMessage
    type: Literal["error"] = field(default="error", init=False)


AssistantMessageEvent = Union[
    StartEvent,
    TextStartEvent,
    TextDeltaEvent,
    TextEndEvent,
    DoneEvent,
    ErrorEvent,
]

TERMINAL_EVENT_TYPES = frozenset({"done", "error"})


def is_terminal(event: AssistantMessageEvent) -> bool:
    """Return True for ``done`` and ``error`` events."""
    return event.type in TERMINAL_EVENT_TYPES


def accumulate_text(events: Iterable[AssistantMessageEvent]) -> str:
    """Concatenate the ``text_delta`` values of an event sequence in order."""
    return "".join(e.delta for e in events if isinstance(e, TextDeltaEvent))


__all__ = [
    "StartEvent",
    "TextStartEvent",
    "TextDeltaEvent",
    "TextEndEvent",
    "DoneEvent",
    "ErrorEvent",
    "AssistantMessageEvent",
    "TERMINAL_EVENT_TYPES",
    "is_terminal",
    "accumulate_text",
]
