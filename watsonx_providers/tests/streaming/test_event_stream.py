"""Event channel contract: ordering, single terminal event, close semantics."""
from __future__ import annotations

import threading

import pytest

from watsonx_providers.base.cancellation import CancellationToken
from watsonx_providers.base.models import AssistantMessage
from watsonx_providers.base.streaming import (
    AssistantMessageEventStream,
    DoneEvent,
    ErrorEvent,
    StartEvent,
    TextDeltaEvent,
    accumulate_text,
    is_terminal,
)


def _msg() -> AssistantMessage:
    return AssistantMessage(api="watsonx-generation", provider="watsonx", model="m")


def test_events_delivered_in_push_order():
    stream = AssistantMessageEventStream()
    msg = _msg()
    stream.sink.push(StartEvent(partial=msg))
    stream.sink.push(TextDeltaEvent(content_index=0, delta="a", partial=msg))
    stream.sink.push(TextDeltaEvent(content_index=0, delta="b", partial=msg))
    stream.sink.push(DoneEvent(reason="stop", message=msg))

    events = list(stream)

    assert [e.type for e in events] == ["start", "text_delta", "text_delta", "done"]
    assert accumulate_text(events) == "ab"
    assert stream.finished and stream.result(timeout=0) is msg


def test_push_after_terminal_raises():
    stream = AssistantMessageEventStream()
    msg = _msg()
    stream.sink.push(ErrorEvent(reason="error", error=msg))

    with pytest.raises(RuntimeError):
        stream.sink.push(DoneEvent(reason="stop", message=msg))
    assert stream.sink.closed and stream.sink.terminated
    assert [e.type for e in stream] == ["error"]


def test_result_returns_error_message():
    stream = AssistantMessageEventStream()
    msg = _msg()
    msg.stop_reason = "error"
    msg.error_message = "boom"
    stream.sink.push(ErrorEvent(reason="error", error=msg))
    assert stream.result(timeout=1).error_message == "boom"


def test_close_without_terminal_ends_iteration_and_result_raises():
    stream = AssistantMessageEventStream()
    with stream.sink as sink:
        sink.push(StartEvent(partial=_msg()))
    assert [e.type for e in stream] == ["start"]
    with pytest.raises(RuntimeError):
        stream.result(timeout=1)
    with pytest.raises(RuntimeError):
        stream.sink.push(StartEvent(partial=_msg()))


def test_result_times_out_while_running():
    stream = AssistantMessageEventStream()
    with pytest.raises(TimeoutError):
        stream.result(timeout=0.01)


def test_consumer_blocks_until_producer_finishes():
    stream = AssistantMessageEventStream()
    msg = _msg()

    def produce():
        with stream.sink as sink:
            for ch in "xyz":
                sink.push(TextDeltaEvent(content_index=0, delta=ch, partial=msg))
            sink.push(DoneEvent(reason="stop", message=msg))

    worker = threading.Thread(target=produce)
    worker.start()
    events = list(stream)
    worker.join()

    assert accumulate_text(events) == "xyz"
    assert is_terminal(events[-1])


def test_cancel_trips_token():
    token = CancellationToken()
    stream = AssistantMessageEventStream(token)
    stream.cancel()
    stream.cancel("again")
    assert token.cancelled and token.reason == "stream cancelled by caller"
