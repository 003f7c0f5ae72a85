"""
Normalized error codes (taxonomy).

Every surfaced failure carries one `ErrorCode`. Values are lowercase
snake_case and appear verbatim in structured logs as ``error_code``.
"""
from __future__ import annotations

import logging
from enum import Enum


class ErrorCode(str, Enum):
    """Failure categories shared by the auth, stream and decode paths."""

    AUTH = "auth"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSIENT = "transient"
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    SERVER_ERROR = "server_error"
    UNAVAILABLE = "unavailable"
    UNKNOWN = "unknown"

    @property
    def log_level(self) -> int:
        """Level for terminal ``stream.error`` events.

        Unclassified failures may be bugs and log at ERROR; everything else is
        an expected runtime outcome and logs at WARNING.
        """
        return logging.ERROR if self is ErrorCode.UNKNOWN else logging.WARNING


__all__ = ["ErrorCode"]
