"""Cancellable ``httpx`` send.

``httpx.Client.send`` blocks until response headers arrive, and the pooled
clients carry no timeout, so a cancellation token checked only before and
after the call cannot end a request stuck waiting on a silent server.
:func:`send_cancellable` runs the send on a daemon helper thread and returns
as soon as either the response is ready or the token is cancelled.

On cancellation the helper thread is abandoned: whatever response it later
obtains is closed immediately, and a send that never completes only pins that
one daemon thread.
"""

from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Optional

import httpx

from ..cancellation import CancellationToken


def _close_late(future: "Future[httpx.Response]") -> None:
    if future.exception() is None:
        future.result().close()


def send_cancellable(
    client: httpx.Client,
    request: httpx.Request,
    cancellation: Optional[CancellationToken],
    *,
    stream: bool = True,
) -> httpx.Response:
    """Send ``request``, giving up when ``cancellation`` fires.

    Returns:
        The response (unread when ``stream`` is true).

    Raises:
        CancelledError: the token was cancelled before a response arrived.
        httpx.HTTPError: the send itself failed.
    """
    if cancellation is None:
        return client.send(request, stream=stream)
    cancellation.raise_if_cancelled()

    future: "Future[httpx.Response]" = Future()
    settled = threading.Event()

    def _run() -> None:
        try:
            future.set_result(client.send(request, stream=stream))
        except BaseException as exc:  # handed to the waiting thread
            future.set_exception(exc)
        finally:
            settled.set()

    unregister = cancellation.add_callback(settled.set)
    threading.Thread(target=_run, name="watsonx-http-send", daemon=True).start()
    try:
        settled.wait()
    finally:
        unregister()

    if cancellation.cancelled:
        future.add_done_callback(_close_late)
        cancellation.raise_if_cancelled()
    return future.result()


__all__ = ["send_cancellable"]
