"""Cooperative cancellation primitives (public API facade).

``CancellationToken`` is what callers pass as the ``signal`` stream option;
cancelling it aborts the token exchange and the HTTP request. Operations that
observe the request raise ``CancelledError``.
"""

from .cancellation_parts.cancelled_error import CancelledError
from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken", "CancelledError"]
