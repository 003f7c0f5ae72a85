"""Layered configuration for the watsonx adapter.

Merge order (later wins):
    1. Built-in defaults (``defaults.py``)
    2. Optional external config file pointed to by ``PROVIDERS_CONFIG_FILE``
       (JSON first, then YAML)
    3. Environment variables ``WATSONX_API_KEY``, ``WATSONX_PROJECT_ID``,
       ``WATSONX_BASE_URL``, ``WATSONX_MODEL``
    4. In-code overrides passed to :func:`get_provider_config`

A ``.env`` file (path from ``DOTENV_FILE``, default ``.env``) is read once
before the first lookup; it fills variables that are unset or hold a
placeholder value.

External config file example::

    watsonx:
      base_url: https://eu-de.ml.cloud.ibm.com
      project_id: 0000-1111
      max_tokens: 1024

Public API
----------
* get_provider_config(provider: str, overrides: dict | None = None) -> dict
* get_model(provider: str) -> str | None
* reset_config_cache() -> None
"""
from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .defaults import (
    WATSONX_DEFAULT_BASE_URL,
    WATSONX_DEFAULT_MAX_TOKENS,
    WATSONX_DEFAULT_MODEL,
    WATSONX_DEFAULT_TEMPERATURE,
)
from .env import is_placeholder, read_env_fields

DEFAULTS: Dict[str, Dict[str, Any]] = {
    "watsonx": {
        "model": WATSONX_DEFAULT_MODEL,
        "base_url": WATSONX_DEFAULT_BASE_URL,
        "max_tokens": WATSONX_DEFAULT_MAX_TOKENS,
        "temperature": WATSONX_DEFAULT_TEMPERATURE,
    },
}

_FILE_CACHE: Optional[Dict[str, Any]] = None
_DOTENV_LOADED = False


def _load_dotenv_once() -> None:
    """Parse KEY=VALUE lines from the dotenv file once per process.

    Comments and blank lines are ignored. Existing variables are overridden
    only when their current value looks like a placeholder.
    """
    global _DOTENV_LOADED
    if _DOTENV_LOADED:
        return
    path = os.getenv("DOTENV_FILE", ".env")
    if not os.path.isfile(path):
        _DOTENV_LOADED = True
        return
    try:
        with open(path, "r", encoding="utf-8") as fh:
            for line in fh:
                line = line.strip()
                if not line or line.startswith("#") or "=" not in line:
                    continue
                k, v = line.split("=", 1)
                k = k.strip()
                v = v.strip().strip('"').strip("'")
                if k and (k not in os.environ or is_placeholder(os.environ.get(k))):
                    os.environ[k] = v
    finally:
        _DOTENV_LOADED = True


def _load_external_config() -> Dict[str, Any]:
    global _FILE_CACHE
    if _FILE_CACHE is not None:
        return _FILE_CACHE
    path = os.getenv("PROVIDERS_CONFIG_FILE")
    if not path or not Path(path).exists():
        _FILE_CACHE = {}
        return _FILE_CACHE
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError:
            data = {}
    _FILE_CACHE = data if isinstance(data, dict) else {}
    return _FILE_CACHE


def reset_config_cache() -> None:
    """Forget the cached config file and dotenv state (used by tests)."""
    global _FILE_CACHE, _DOTENV_LOADED
    _FILE_CACHE = None
    _DOTENV_LOADED = False


def get_provider_config(provider: str, overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Return merged configuration for a provider.

    Environment variables are read on every call so a credential exported
    after import is still picked up. ``None`` values in ``overrides`` are
    ignored.
    """
    _load_dotenv_once()
    name = (provider or "").lower().strip()
    cfg: Dict[str, Any] = {}

    cfg |= DEFAULTS.get(name, {})

    file_cfg = _load_external_config().get(name)
    if isinstance(file_cfg, dict):
        cfg |= file_cfg

    cfg |= read_env_fields(name.upper())

    if overrides:
        cfg |= {k: v for k, v in overrides.items() if v is not None}

    return cfg


def get_model(provider: str) -> Optional[str]:
    return get_provider_config(provider).get("model")


__all__ = [
    "get_provider_config",
    "get_model",
    "reset_config_cache",
    "DEFAULTS",
]
