"""JSON formatter and per-invocation log context used by ``base.logging``."""

from .json_formatter import ISO, JsonFormatter
from .logging_context import LogContext

__all__ = ["ISO", "JsonFormatter", "LogContext"]
