"""Streaming metrics collected per invocation and reported in ``stream.end`` logs."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class StreamMetrics:
    """Timing and emission counters for a single stream invocation.

    ``emitted`` counts ``text_delta`` events. Durations are milliseconds
    measured from construction with ``time.perf_counter``.
    """

    emitted: int = 0
    time_to_first_token_ms: Optional[float] = None
    total_duration_ms: Optional[float] = None
    _t0: float = field(default_factory=time.perf_counter, repr=False)

    def record_delta(self) -> None:
        """Count one emitted delta, stamping time-to-first-token on the first."""
        if self.emitted == 0:
            self.time_to_first_token_ms = (time.perf_counter() - self._t0) * 1000.0
        self.emitted += 1

    def stop(self) -> None:
        self.total_duration_ms = (time.perf_counter() - self._t0) * 1000.0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "time_to_first_token_ms": self.time_to_first_token_ms,
            "total_duration_ms": self.total_duration_ms,
            "emitted_count": self.emitted,
        }


__all__ = ["StreamMetrics"]
