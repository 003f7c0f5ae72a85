"""Focused tests for watsonx_providers.base.logging.

Covers:
- _parse_level string parsing
- normalized_log_event required keys and error_code handling
- JsonFormatter flattening of JSON messages
"""
from __future__ import annotations

import json
import logging

from watsonx_providers.base.log_support import JsonFormatter, LogContext
from watsonx_providers.base.logging import (
    REQUIRED_NORMALIZED_KEYS,
    _parse_level,  # type: ignore[attr-defined]
    configure_logger,
    get_logger,
    log_event,
    normalized_log_event,
)


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


def _capture(name: str) -> tuple[logging.Logger, _ListHandler]:
    logger = get_logger(name)
    handler = _ListHandler()
    logger.handlers[:] = [handler]
    logger.propagate = False
    return logger, handler


def test_parse_level_variants():
    assert _parse_level(None) == logging.INFO  # nosec B101
    assert _parse_level("debug") == logging.DEBUG  # nosec B101
    assert _parse_level("WARN") == logging.WARNING  # nosec B101
    assert _parse_level("unknown", default=logging.ERROR) == logging.ERROR  # nosec B101


def test_normalized_log_event_emits_required_keys():
    logger, handler = _capture("watsonx_providers.test.normalized")

    normalized_log_event(
        logger,
        "stream.end",
        LogContext(provider="watsonx", model="m", extra={"project_id": "p"}),
        phase="finalize",
        error_code="timeout",
        emitted=3,
        tokens={"prompt": 10, "completion": 5},
        metrics={"time_to_first_token_ms": 12.3},
    )

    payload = json.loads(handler.messages[-1])
    for key in REQUIRED_NORMALIZED_KEYS:
        assert key in payload  # nosec B101
    assert payload["event"] == "stream.end"
    assert payload["provider"] == "watsonx" and payload["project_id"] == "p"
    assert payload["tokens"] == {"prompt": 10, "completion": 5}
    assert payload["metrics"]["time_to_first_token_ms"] == 12.3


def test_error_code_omitted_when_none_and_none_extras_dropped():
    logger, handler = _capture("watsonx_providers.test.normalized2")

    normalized_log_event(logger, "auth.exchange", phase="auth", emitted=True, attempt=None, status=None)
    payload = json.loads(handler.messages[-1])
    assert "error_code" not in payload
    assert payload["attempt"] is None
    assert "status" not in payload

    normalized_log_event(logger, "x", phase="auth", emitted=1, tokens=[("a", 1)])
    assert json.loads(handler.messages[-1])["tokens"] == {"a": 1}


def test_log_event_drops_none_by_default():
    logger, handler = _capture("watsonx_providers.test.plain")
    log_event(logger, "evt", None, a=1, b=None)
    assert json.loads(handler.messages[-1]) == {"event": "evt", "a": 1}


def test_child_loggers_propagate_to_base(log_records):
    logger = get_logger("watsonx_providers.test.child")
    logger.info("hello")
    assert any(r.name == "watsonx_providers.test.child" for r in log_records)


def test_json_formatter_hoists_message_keys():
    record = logging.LogRecord("n", logging.INFO, __file__, 1, json.dumps({"event": "e", "k": 2}), None, None)
    out = json.loads(JsonFormatter().format(record))
    assert out["event"] == "e" and out["k"] == 2 and out["level"] == "INFO"
    assert "msg" not in out


def test_configure_logger_attaches_and_removes_file_handler(tmp_path):
    path = tmp_path / "logs" / "adapter.log"
    logger = configure_logger(level="DEBUG", file_path=str(path))
    try:
        assert any(isinstance(h, logging.FileHandler) for h in logger.handlers)
        assert logger.level == logging.DEBUG
    finally:
        configure_logger(level=logging.INFO, file_path=None)
    assert not any(isinstance(h, logging.FileHandler) for h in logger.handlers)
