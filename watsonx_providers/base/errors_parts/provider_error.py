"""
Structured error exception type.

Every failure the stream worker reports is either a ``ProviderError`` or is
classified into an ``ErrorCode`` before becoming the terminal error event.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .error_code import ErrorCode


@dataclass
class ProviderError(Exception):
    """A failure with a normalized code and a human-readable message.

    Attributes:
        code: Normalized :class:`ErrorCode`.
        message: What ends up in ``AssistantMessage.error_message``.
        provider: Provider key (``"watsonx"``).
        model: Model id, when the failure belongs to a stream invocation.
        status: HTTP status returned by the remote service, if any.
        raw: Underlying exception, kept for diagnostics.
    """

    code: ErrorCode
    message: str
    provider: str
    model: Optional[str] = None
    status: Optional[int] = None
    raw: Optional[Exception] = None

    def __str__(self) -> str:
        return f"{self.provider}:{self.model or '-'} {self.code.value}: {self.message}"


__all__ = ["ProviderError"]
