"""Shared helpers for building fake IAM and watsonx HTTP exchanges.

``FakeWatsonx`` wires an ``httpx.MockTransport`` that answers the IAM token
endpoint and the generation stream endpoint, recording every request so tests
can assert on URLs, headers and bodies without touching the network.
"""
from __future__ import annotations

import json
import threading
from typing import Any, Callable, Iterable, List, Optional
from urllib.parse import parse_qs

import httpx

from watsonx_providers.base.streaming import AssistantMessageEventStream


def sse_frame(**result: Any) -> bytes:
    """Encode one ``data:`` line carrying ``results[0] == result``."""
    return f"data: {json.dumps({'results': [result]})}\n\n".encode("utf-8")


def form_fields(request: httpx.Request) -> dict:
    """Decode a form-encoded request body into single-valued fields."""
    return {k: v[0] for k, v in parse_qs(request.content.decode("utf-8")).items()}


class Gate:
    """Holds a mock handler until released; ``entered`` fires when it is reached."""

    def __init__(self) -> None:
        self.entered = threading.Event()
        self.release = threading.Event()

    def hold(self) -> None:
        self.entered.set()
        self.release.wait(5)


def collect(stream: AssistantMessageEventStream, timeout: float = 5.0) -> list:
    """Wait for the terminal event, then drain all events in order."""
    stream.result(timeout=timeout)
    return list(stream)


class FakeWatsonx:
    """Scriptable fake for both endpoints.

    Attributes:
        iam_requests / generation_requests: recorded requests.
        token_status / token_payload: IAM response.
        generation: callable returning the generation ``httpx.Response``; by
            default streams ``frames``.
        iam_gate: optional :class:`Gate` held before the IAM endpoint answers.
    """

    def __init__(self, frames: Optional[Iterable[bytes]] = None) -> None:
        self.iam_requests: List[httpx.Request] = []
        self.generation_requests: List[httpx.Request] = []
        self.token_status = 200
        self.token_payload: Any = {"access_token": "iam-token-1", "expires_in": 3600}
        self.frames: List[bytes] = list(frames or [])
        self.generation: Optional[Callable[[httpx.Request], httpx.Response]] = None
        self.iam_gate: Optional[Gate] = None

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "iam.cloud.ibm.com":
            self.iam_requests.append(request)
            if self.iam_gate is not None:
                self.iam_gate.hold()
            if self.token_status != 200:
                return httpx.Response(self.token_status, text="invalid apikey")
            return httpx.Response(200, json=self.token_payload)
        self.generation_requests.append(request)
        if self.generation is not None:
            return self.generation(request)
        return httpx.Response(
            200,
            headers={"Content-Type": "text/event-stream"},
            content=iter(self.frames),
        )

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))

    def generation_body(self, index: int = -1) -> dict:
        return json.loads(self.generation_requests[index].content)
