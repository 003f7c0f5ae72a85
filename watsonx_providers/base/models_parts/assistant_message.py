"""
Streaming output message and usage accounting.

The :class:`AssistantMessage` is created once per stream invocation and
mutated in place by the worker. Intermediate events hand out the same object
as ``partial``; consumers must treat it as a read-only view at the moment of
receipt.
"""
from __future__ import annotations

import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional

from .content_part import ContentPart
from .model_spec import ModelCost

StopReason = Literal["stop", "error"]

_PER_MILLION = 1_000_000


@dataclass
class UsageCost:
    """Derived cost breakdown in USD."""

    input: float = 0.0
    output: float = 0.0
    cache_read: float = 0.0
    cache_write: float = 0.0
    total: float = 0.0


@dataclass
class Usage:
    """Token counters reported by the service plus the derived cost."""

    input: int = 0
    output: int = 0
    cache_read: int = 0
    cache_write: int = 0
    total_tokens: int = 0
    cost: UsageCost = field(default_factory=UsageCost)

    def finalize(self, pricing: Optional[ModelCost]) -> None:
        """Compute ``total_tokens`` and ``cost`` from the current counters.

        Missing pricing is treated as zero.
        """
        price = pricing or ModelCost()
        self.total_tokens = self.input + self.output
        input_cost = (self.input / _PER_MILLION) * price.input
        output_cost = (self.output / _PER_MILLION) * price.output
        self.cost = UsageCost(input=input_cost, output=output_cost, total=input_cost + output_cost)

    def as_tokens(self) -> Dict[str, int]:
        """Token mapping in the shape used by normalized log events."""
        return {"prompt": self.input, "completion": self.output, "total": self.total_tokens}


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class AssistantMessage:
    """The assistant turn being built by one stream invocation."""

    api: str
    provider: str
    model: str
    role: Literal["assistant"] = "assistant"
    content: List[ContentPart] = field(default_factory=list)
    usage: Usage = field(default_factory=Usage)
    stop_reason: StopReason = "stop"
    error_message: Optional[str] = None
    timestamp: int = field(default_factory=_now_ms)

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        return "".join(p.text or "" for p in self.content if p.type == "text")

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable dictionary representation."""
        return asdict(self)


__all__ = ["AssistantMessage", "StopReason", "Usage", "UsageCost"]
