"""Unified provider error taxonomy public surface.

Re-exports the implementations under ``watsonx_providers.base.errors_parts``
so callers have one stable import path for codes, the base error type and the
concrete pipeline failures.
"""

from .errors_parts.error_code import ErrorCode
from .errors_parts.provider_error import ProviderError
from .errors_parts.classification import classify_exception, code_for_status
from .errors_parts.taxonomy import (
    AuthExchangeError,
    ConfigurationError,
    FrameParseError,
    TransportError,
    UpstreamError,
)

__all__ = [
    "ErrorCode",
    "ProviderError",
    "classify_exception",
    "code_for_status",
    "AuthExchangeError",
    "ConfigurationError",
    "FrameParseError",
    "TransportError",
    "UpstreamError",
]
