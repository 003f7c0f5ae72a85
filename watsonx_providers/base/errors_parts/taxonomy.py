"""
Concrete failure types raised along the streaming pipeline.

Each type pins its ``ErrorCode`` (or derives it from an HTTP status) so call
sites only supply what they know: the provider, the model and the status/body
returned by the remote service.

- ``ConfigurationError``: credential or project id missing; raised before any
  network call.
- ``AuthExchangeError``: the identity endpoint rejected the credential or could
  not be reached.
- ``UpstreamError``: the generation endpoint answered with a non-2xx status.
- ``TransportError``: sending the request or reading the body failed.
- ``FrameParseError``: one malformed SSE data line. Tolerated by the
  reconstructor and never surfaced to stream consumers.
"""
from __future__ import annotations

from typing import Optional

from .classification import code_for_status
from .error_code import ErrorCode
from .provider_error import ProviderError


class ConfigurationError(ProviderError):
    """Required configuration (credential, project id) is missing."""

    def __init__(self, message: str, *, provider: str, model: Optional[str] = None) -> None:
        super().__init__(code=ErrorCode.VALIDATION, message=message, provider=provider, model=model)


class AuthExchangeError(ProviderError):
    """The IAM token exchange failed.

    ``status`` is ``None`` when the endpoint could not be reached at all.
    """

    def __init__(
        self,
        *,
        status: Optional[int],
        body: str,
        provider: str,
        model: Optional[str] = None,
        raw: Optional[Exception] = None,
    ) -> None:
        self.body = body
        shown = status if status is not None else "unreachable"
        super().__init__(
            code=code_for_status(status, default=ErrorCode.AUTH),
            message=f"IBM IAM token exchange failed: {shown} - {body}",
            provider=provider,
            model=model,
            status=status,
            raw=raw,
        )


class UpstreamError(ProviderError):
    """The generation endpoint returned a non-success status."""

    def __init__(self, *, status: int, body: str, provider: str, model: Optional[str] = None) -> None:
        self.body = body
        super().__init__(
            code=code_for_status(status, default=ErrorCode.UNKNOWN),
            message=f"Watsonx API error: {status} - {body}",
            provider=provider,
            model=model,
            status=status,
        )


class TransportError(ProviderError):
    """Network failure while sending the request or reading the body."""

    def __init__(self, message: str, *, provider: str, model: Optional[str] = None, raw: Optional[Exception] = None) -> None:
        super().__init__(code=ErrorCode.TRANSIENT, message=message, provider=provider, model=model, raw=raw)


class FrameParseError(ProviderError):
    """A single SSE data line could not be decoded into a payload object."""

    def __init__(self, line: str, *, provider: str, model: Optional[str] = None, raw: Optional[Exception] = None) -> None:
        self.line = line
        super().__init__(
            code=ErrorCode.VALIDATION,
            message=f"malformed SSE frame: {line[:120]}",
            provider=provider,
            model=model,
            raw=raw,
        )


__all__ = [
    "ConfigurationError",
    "AuthExchangeError",
    "UpstreamError",
    "TransportError",
    "FrameParseError",
]
