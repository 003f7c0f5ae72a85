"""watsonx_providers.config.env
============================

Environment variable names for the watsonx adapter and small helpers to read
them.

Conventions
-----------
``WATSONX_<FIELD>`` where field is ``API_KEY``, ``PROJECT_ID``, ``BASE_URL`` or
``MODEL``. Values that look like placeholders (``changeme``, ``placeholder``)
are treated as unset by the ``.env`` loader so a real value can replace them.
"""

from __future__ import annotations

import os
from typing import Dict, Optional

ENV_PREFIX = "WATSONX"

ENV_FIELD_MAP: Dict[str, str] = {
    "api_key": "API_KEY",  # pragma: allowlist secret - env suffix name, not a secret
    "project_id": "PROJECT_ID",
    "base_url": "BASE_URL",
    "model": "MODEL",
}


def env_var_name(field: str, prefix: str = ENV_PREFIX) -> Optional[str]:
    """Return the environment variable name for a config field, or None."""
    suffix = ENV_FIELD_MAP.get(field)
    return f"{prefix}_{suffix}" if suffix else None


def is_placeholder(val: Optional[str]) -> bool:
    """Return True if the value looks like a placeholder/test value.

    Heuristics: contains 'placeholder', 'changeme', 'example', or starts with
    'test_' (case-insensitive, surrounding spaces ignored).
    """
    if val is None:
        return False
    v = str(val).strip().lower()
    return "placeholder" in v or "changeme" in v or "example" in v or v.startswith("test_")


def read_env_fields(prefix: str = ENV_PREFIX) -> Dict[str, str]:
    """Collect non-blank ``<PREFIX>_<FIELD>`` variables keyed by config field."""
    out: Dict[str, str] = {}
    for field, suffix in ENV_FIELD_MAP.items():
        val = os.getenv(f"{prefix}_{suffix}")
        if val is not None and val.strip():
            out[field] = val.strip()
    return out


__all__ = ["ENV_PREFIX", "ENV_FIELD_MAP", "env_var_name", "is_placeholder", "read_env_fields"]
