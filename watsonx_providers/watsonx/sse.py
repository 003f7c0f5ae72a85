"""Reconstruct text deltas and token usage from the watsonx SSE body.

Protocol notes
--------------
The generation stream is newline-delimited ``data: <json>`` lines. Each JSON
payload carries ``results[0]`` with the *cumulative* ``generated_text`` so far
(not an increment) plus cumulative ``input_token_count`` and
``generated_token_count``. A ``data: [DONE]`` line may appear and carries no
content. Lines without the ``data:`` prefix (``id:``, ``event:``, blank
keep-alives) are ignored.

Reconstruction
--------------
:func:`text_delta` diffs the previously observed text against the new
cumulative text. :class:`SSEDeltaReconstructor` buffers raw bytes, decodes
them incrementally (multi-byte characters may be split across chunks), and
turns complete lines into :class:`ReconstructorSignal` values:

* ``TEXT_START`` once, right before the first non-empty delta;
* ``TEXT_DELTA`` for each non-empty delta.

The concatenation of all emitted deltas always equals ``full_text``.
Malformed lines are logged as ``stream.decode_error`` and skipped.
"""

from __future__ import annotations

import codecs
import json
import logging
from dataclasses import dataclass
from typing import Any, List, Literal, Optional

from ..base.errors import FrameParseError
from ..base.logging import LogContext, get_logger, normalized_log_event

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"

TEXT_START: Literal["text_start"] = "text_start"
TEXT_DELTA: Literal["text_delta"] = "text_delta"


def text_delta(prior_text: str, new_text: str) -> str:
    """Return the suffix of ``new_text`` beyond what ``prior_text`` covered.

    Repeated, stale or shorter frames yield ``""`` (clamped, never negative).
    """
    if len(new_text) <= len(prior_text):
        return ""
    return new_text[len(prior_text):]


@dataclass(frozen=True)
class ReconstructorSignal:
    """One output of the reconstructor: a text-channel open or a delta."""

    kind: Literal["text_start", "text_delta"]
    delta: str = ""


def _as_count(value: Any) -> Optional[int]:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class SSEDeltaReconstructor:
    """Stateful line splitter and delta reducer for one response body."""

    def __init__(
        self,
        *,
        provider: str = "watsonx",
        model: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._provider = provider
        self._model = model
        self._logger = logger or get_logger("watsonx_providers.watsonx.sse")
        self._ctx = ctx or LogContext(provider=provider, model=model)
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._buffer = ""
        self.full_text = ""
        self.text_started = False
        self.input_tokens = 0
        self.output_tokens = 0
        self.stop_reason: Optional[str] = None
        self.skipped_frames = 0
        self.finished = False

    def feed(self, chunk: bytes | str) -> List[ReconstructorSignal]:
        """Consume one body chunk and return signals for its complete lines.

        The trailing partial line stays buffered for the next call.
        """
        if self.finished:
            raise RuntimeError("feed() called after finish()")
        text = chunk if isinstance(chunk, str) else self._decoder.decode(chunk)
        self._buffer += text
        *lines, self._buffer = self._buffer.split("\n")
        signals: List[ReconstructorSignal] = []
        for line in lines:
            self._process_line(line, signals)
        return signals

    def finish(self) -> List[ReconstructorSignal]:
        """Flush the decoder and process a final line left without a newline."""
        if self.finished:
            return []
        self.finished = True
        self._buffer += self._decoder.decode(b"", final=True)
        signals: List[ReconstructorSignal] = []
        if self._buffer:
            line, self._buffer = self._buffer, ""
            self._process_line(line, signals)
        return signals

    # Internal -------------------------------------------------------------
    def _process_line(self, line: str, out: List[ReconstructorSignal]) -> None:
        line = line.rstrip("\r")
        if not line.startswith(DATA_PREFIX):
            return
        data = line[len(DATA_PREFIX):].strip()
        if not data or data == DONE_SENTINEL:
            return
        try:
            payload = json.loads(data)
            if not isinstance(payload, dict):
                raise ValueError(f"expected a JSON object, got {type(payload).__name__}")
        except ValueError as e:
            self._skip(FrameParseError(data, provider=self._provider, model=self._model, raw=e))
            return
        self._apply_payload(payload, out)

    def _apply_payload(self, payload: dict, out: List[ReconstructorSignal]) -> None:
        results = payload.get("results")
        if not isinstance(results, list) or not results or not isinstance(results[0], dict):
            return
        result = results[0]

        generated = result.get("generated_text")
        if isinstance(generated, str) and generated:
            delta = text_delta(self.full_text, generated)
            if delta:
                if not self.text_started:
                    self.text_started = True
                    out.append(ReconstructorSignal(TEXT_START))
                self.full_text += delta
                out.append(ReconstructorSignal(TEXT_DELTA, delta))

        input_count = _as_count(result.get("input_token_count"))
        if input_count is not None:
            self.input_tokens = input_count
        output_count = _as_count(result.get("generated_token_count"))
        if output_count is not None:
            self.output_tokens = output_count
        stop_reason = result.get("stop_reason")
        if isinstance(stop_reason, str) and stop_reason:
            self.stop_reason = stop_reason

    def _skip(self, err: FrameParseError) -> None:
        self.skipped_frames += 1
        normalized_log_event(
            self._logger,
            "stream.decode_error",
            self._ctx,
            phase="mid_stream",
            emitted=None,
            error_code=err.code.value,
            level=logging.WARNING,
            error=err.message,
            detail=str(err.raw) if err.raw else None,
        )


__all__ = [
    "DATA_PREFIX",
    "DONE_SENTINEL",
    "TEXT_START",
    "TEXT_DELTA",
    "ReconstructorSignal",
    "SSEDeltaReconstructor",
    "text_delta",
]
