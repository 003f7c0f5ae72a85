"""Shared HTTP client pool.

Purpose:
    Provide a thread-safe pool of reusable ``httpx.Client`` instances so the
    IAM token cache and the generation stream reuse connections across
    invocations instead of allocating a client per call.

Timeout strategy:
    Clients are created with ``timeout=None``. The adapter imposes no internal
    deadline; callers bound an invocation by cancelling its
    ``CancellationToken``.

Lifecycle & cleanup:
    - Clients are cached by ``(base_url, purpose)``; purposes keep separate
      pools (e.g. ``"watsonx.iam"`` vs ``"watsonx.stream"``).
    - All clients are closed at interpreter exit via ``atexit``. Tests may call
      :func:`close_all_clients` explicitly.
"""

from __future__ import annotations

import atexit
import threading
from contextlib import suppress
from typing import Dict, Optional, Tuple

import httpx

_CLIENTS: Dict[Tuple[Optional[str], str], httpx.Client] = {}
_LOCK = threading.RLock()


def get_httpx_client(base_url: Optional[str], purpose: str) -> httpx.Client:
    """Return a pooled ``httpx.Client`` for the given base URL and purpose.

    Parameters:
        base_url: Optional base URL set on the client so callers can use
            relative paths. ``None`` yields a client for absolute URLs.
        purpose: Short stable string discriminating separate pools.

    Returns:
        A reusable ``httpx.Client`` instance (safe for concurrent use).
    """
    key = (base_url, purpose)
    client = _CLIENTS.get(key)
    if client is not None:
        return client

    with _LOCK:
        client = _CLIENTS.get(key)
        if client is not None:
            return client
        if base_url:
            client = httpx.Client(base_url=base_url, timeout=None)
        else:
            client = httpx.Client(timeout=None)
        _CLIENTS[key] = client
        return client


def close_all_clients() -> None:
    """Close and clear all pooled HTTP clients."""
    with _LOCK:
        for c in _CLIENTS.values():
            with suppress(Exception):  # nosec B110 - best-effort shutdown
                c.close()
        _CLIENTS.clear()


atexit.register(close_all_clients)

__all__ = ["get_httpx_client", "close_all_clients"]
