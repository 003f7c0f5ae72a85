"""
Model descriptor supplied by the caller for each stream invocation.

The adapter never chooses a model; it reads the id, the optional base URL and
the optional price table from this descriptor.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

WATSONX_API = "watsonx-generation"


@dataclass(frozen=True)
class ModelCost:
    """USD price per one million tokens."""

    input: float = 0.0
    output: float = 0.0


@dataclass
class ModelSpec:
    """A watsonx generation model.

    Attributes:
        id: Model id sent as ``model_id`` (e.g. ``ibm/granite-3-8b-instruct``).
        name: Display name.
        api: API family tag copied onto output messages.
        provider: Provider key copied onto output messages.
        base_url: Regional endpoint; falls back to configuration when ``None``.
        cost: Optional pricing; zero pricing is used when absent.
        context_window: Optional context length, informational.
        max_tokens: Optional model output cap, informational.
    """

    id: str
    name: Optional[str] = None
    api: str = WATSONX_API
    provider: str = "watsonx"
    base_url: Optional[str] = None
    cost: Optional[ModelCost] = None
    context_window: Optional[int] = None
    max_tokens: Optional[int] = None


__all__ = ["ModelCost", "ModelSpec", "WATSONX_API"]
