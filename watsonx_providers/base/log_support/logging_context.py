"""Structured logging context object.

:class:`LogContext` carries the fields shared by every event of one stream
invocation and is flattened into each JSON payload by ``log_event``.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional


@dataclass
class LogContext:
    """Fields repeated on every event of one invocation.

    ``request_id`` is generated per stream so the ``stream.*`` events of one
    invocation can be correlated; ``extra`` holds any further ad-hoc keys.
    """

    provider: Optional[str] = None
    model: Optional[str] = None
    project_id: Optional[str] = None
    request_id: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Flat mapping of the set fields; ``extra`` keys never shadow named ones."""
        out: Dict[str, Any] = {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != "extra" and getattr(self, f.name) is not None
        }
        for k, v in self.extra.items():
            if v is not None and k not in out:
                out[k] = v
        return out


__all__ = ["LogContext"]
