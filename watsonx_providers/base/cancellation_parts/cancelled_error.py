"""Cancellation error type.

Raised when a stream, token exchange or body read observes a cancellation
request.
"""

from __future__ import annotations

from typing import Optional


class CancelledError(RuntimeError):
    """Cooperative cancellation was requested.

    ``reason`` is the string passed to :meth:`CancellationToken.cancel`, or
    ``None`` when the caller gave none.
    """

    def __init__(self, reason: Optional[str] = None) -> None:
        super().__init__(reason or "operation cancelled")
        self.reason = reason


__all__ = ["CancelledError"]
