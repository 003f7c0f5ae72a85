"""Single-producer event channel between a stream worker and its consumer.

The channel has two halves:

* :class:`EventSink` is the sending half, owned exclusively by the worker
  thread. It refuses pushes after the terminal event and is closed on every
  exit path (use it as a context manager).
* :class:`AssistantMessageEventStream` is the receiving half returned to the
  caller. Iterating it yields events until the channel closes; ``result()``
  blocks for the final message; ``cancel()`` trips the invocation's
  :class:`CancellationToken`.

The queue is unbounded, so the producer never blocks on a slow consumer.
"""

from __future__ import annotations

import queue
import threading
from typing import Iterator, Optional

from ..cancellation import CancellationToken
from ..models import AssistantMessage
from .events import AssistantMessageEvent, DoneEvent, ErrorEvent, is_terminal

_CLOSED = object()


class EventSink:
    """Sending half of the channel."""

    def __init__(self, channel: "AssistantMessageEventStream") -> None:
        self._channel = channel
        self._lock = threading.Lock()
        self._closed = False
        self._terminated = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def terminated(self) -> bool:
        """Whether the terminal event has been pushed."""
        return self._terminated

    def push(self, event: AssistantMessageEvent) -> None:
        """Deliver ``event``; a terminal event also closes the channel.

        Raises:
            RuntimeError: when called after the terminal event or after close.
        """
        with self._lock:
            if self._closed or self._terminated:
                raise RuntimeError(f"cannot push {event.type!r} event: stream already finished")
            terminal = is_terminal(event)
            if terminal:
                self._terminated = True
            self._channel._queue.put(event)
        if terminal:
            self._channel._record_terminal(event)
            self.close()

    def close(self) -> None:
        """Close the channel; idempotent."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            self._channel._queue.put(_CLOSED)
        self._channel._mark_closed()

    def __enter__(self) -> "EventSink":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


class AssistantMessageEventStream:
    """Receiving half: iterate for events, or wait for the final message."""

    def __init__(self, token: CancellationToken | None = None) -> None:
        self._queue: "queue.SimpleQueue[object]" = queue.SimpleQueue()
        self._token = token or CancellationToken()
        self._terminal_event: Optional[AssistantMessageEvent] = None
        self._done = threading.Event()
        self._sink = EventSink(self)

    # Producer side ---------------------------------------------------------
    @property
    def sink(self) -> EventSink:
        """Sending half; hand it to exactly one worker."""
        return self._sink

    def _record_terminal(self, event: AssistantMessageEvent) -> None:
        self._terminal_event = event
        self._done.set()

    def _mark_closed(self) -> None:
        self._done.set()

    # Consumer side ---------------------------------------------------------
    def __iter__(self) -> Iterator[AssistantMessageEvent]:
        while True:
            item = self._queue.get()
            if item is _CLOSED:
                return
            yield item  # type: ignore[misc]

    @property
    def token(self) -> CancellationToken:
        return self._token

    def cancel(self, reason: str | None = None) -> None:
        """Request cancellation of the underlying invocation.

        The worker still emits a terminal ``error`` event; safe to call more
        than once or after completion.
        """
        self._token.cancel(reason or "stream cancelled by caller")

    @property
    def finished(self) -> bool:
        return self._terminal_event is not None

    @property
    def terminal_event(self) -> Optional[AssistantMessageEvent]:
        return self._terminal_event

    def result(self, timeout: float | None = None) -> AssistantMessage:
        """Block until the stream finishes and return the final message.

        Returns the ``done`` message or the ``error`` message (whose
        ``stop_reason`` is ``"error"``). Does not consume events, so it can be
        combined with iteration.

        Raises:
            TimeoutError: when ``timeout`` elapses first.
            RuntimeError: when the channel closed without a terminal event.
        """
        if not self._done.wait(timeout):
            raise TimeoutError(f"stream did not finish within {timeout}s")
        evt = self._terminal_event
        if isinstance(evt, DoneEvent):
            return evt.message
        if isinstance(evt, ErrorEvent):
            return evt.error
        raise RuntimeError("stream closed without a terminal event")


__all__ = ["AssistantMessageEventStream", "EventSink"]
