"""Per-call stream options for the watsonx adapter.

Pydantic models validate bounds at construction time, before a stream is
started. Every field is optional; unset values fall back to the layered
configuration (environment, config file, defaults) when the stream runs.
"""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from ..base.cancellation import CancellationToken


class WatsonxParameters(BaseModel):
    """Optional decoding parameters merged into the request ``parameters``."""

    model_config = ConfigDict(extra="forbid")

    decoding_method: Optional[Literal["greedy", "sample"]] = None
    top_p: Optional[float] = Field(default=None, gt=0.0, le=1.0)
    top_k: Optional[int] = Field(default=None, ge=1)
    repetition_penalty: Optional[float] = Field(default=None, ge=1.0, le=2.0)
    stop_sequences: Optional[List[str]] = None

    def to_payload(self) -> Dict[str, Any]:
        """Set fields only, in wire form."""
        return self.model_dump(exclude_none=True)


class WatsonxStreamOptions(BaseModel):
    """Options for one :meth:`WatsonxProvider.stream` call.

    Attributes:
        api_key: IBM Cloud API key; falls back to ``WATSONX_API_KEY``.
        project_id: watsonx project id; falls back to ``WATSONX_PROJECT_ID``.
        base_url: Regional endpoint; overrides the model's ``base_url``.
        max_tokens: ``max_new_tokens`` (default 4096).
        temperature: Sampling temperature (default 0.7).
        parameters: Extra decoding parameters.
        headers: Extra request headers, applied last.
        signal: Cancellation token aborting the exchange and the request.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    api_key: Optional[str] = None
    project_id: Optional[str] = None
    base_url: Optional[str] = None
    max_tokens: Optional[int] = Field(default=None, gt=0)
    temperature: Optional[float] = Field(default=None, ge=0.0, le=2.0)
    parameters: Optional[WatsonxParameters] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    signal: Optional[CancellationToken] = None


__all__ = ["WatsonxParameters", "WatsonxStreamOptions"]
