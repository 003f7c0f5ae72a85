"""Pytest configuration for the watsonx_providers test suite.

Every test runs with the ``WATSONX_*`` environment cleared, no dotenv or
external config file, and a fresh config cache, so credentials on the
developer's machine never leak into assertions.
"""

from __future__ import annotations

import logging
from typing import Iterator, List

import pytest

from watsonx_providers.base.http import close_all_clients
from watsonx_providers.base.logging import BASE_LOGGER_NAME, get_logger
from watsonx_providers.config import reset_config_cache
from watsonx_providers.config.env import ENV_FIELD_MAP


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> Iterator[None]:
    """Clear adapter env vars and point dotenv/config file lookups at nothing."""
    for suffix in ENV_FIELD_MAP.values():
        monkeypatch.delenv(f"WATSONX_{suffix}", raising=False)
    monkeypatch.delenv("PROVIDERS_CONFIG_FILE", raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "missing.env"))
    reset_config_cache()
    yield
    reset_config_cache()
    close_all_clients()


class _ListHandler(logging.Handler):
    """Capture log records into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.records: List[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@pytest.fixture()
def log_records() -> Iterator[List[logging.LogRecord]]:
    """Collect records reaching the package base logger."""
    logger = get_logger(BASE_LOGGER_NAME)
    handler = _ListHandler()
    logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)


@pytest.fixture()
def fake_clock():
    """Mutable epoch clock; ``fake_clock.advance(seconds)`` moves it forward."""

    class Clock:
        def __init__(self) -> None:
            self.now = 1_700_000_000.0

        def __call__(self) -> float:
            return self.now

        def advance(self, seconds: float) -> None:
            self.now += seconds

    return Clock()
