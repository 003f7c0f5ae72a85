"""Watsonx stream helpers.

Purpose:
- Keep ``client.py`` lean by holding the settings resolution, request
  construction and the worker body that drives one stream invocation.

External dependencies:
- ``httpx`` (pooled or injected client) for the generation request.
- :class:`IamTokenCache` for bearer tokens.

Lifecycle of one invocation (runs on the worker thread):
    start -> resolve settings -> acquire token -> render prompt -> POST
    -> read body through :class:`SSEDeltaReconstructor` -> text_end? -> done

Failure semantics:
- Every failure (configuration, auth, upstream status, transport, cancel or
  an unexpected bug) is converted into exactly one terminal ``error`` event
  carrying the partially built message. Nothing escapes the worker.
- No retries.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

import httpx

from ..base.cancellation import CancellationToken, CancelledError
from ..base.errors import (
    ConfigurationError,
    ProviderError,
    TransportError,
    UpstreamError,
    classify_exception,
)
from ..base.http import send_cancellable
from ..base.logging import LogContext, normalized_log_event
from ..base.models import AssistantMessage, ContentPart, ConversationContext, ModelSpec
from ..base.streaming import (
    DoneEvent,
    ErrorEvent,
    EventSink,
    StartEvent,
    StreamMetrics,
    TextDeltaEvent,
    TextEndEvent,
    TextStartEvent,
)
from ..config import get_provider_config
from ..config.defaults import (
    WATSONX_API_VERSION,
    WATSONX_DEFAULT_MAX_TOKENS,
    WATSONX_DEFAULT_TEMPERATURE,
    WATSONX_GENERATION_STREAM_PATH,
)
from .options import WatsonxStreamOptions
from .prompt import build_watsonx_prompt
from .sse import TEXT_START, ReconstructorSignal, SSEDeltaReconstructor

if TYPE_CHECKING:
    from .client import WatsonxProvider


@dataclass(frozen=True)
class StreamSettings:
    """Resolved per-invocation settings."""

    api_key: str
    project_id: str
    base_url: str
    max_tokens: int
    temperature: float


def resolve_settings(provider: "WatsonxProvider", model: ModelSpec, options: WatsonxStreamOptions) -> StreamSettings:
    """Merge per-call options, provider defaults and layered config.

    Precedence for each field: call options, then the provider constructor
    arguments, then (for ``base_url``) the model, then environment/config
    file/defaults.

    Raises:
        ConfigurationError: no credential or no project id could be found.
    """
    overrides = {
        "api_key": options.api_key or provider.api_key,
        "project_id": options.project_id or provider.project_id,
        "base_url": options.base_url or provider.base_url or model.base_url,
    }
    cfg = get_provider_config(provider.provider_name, overrides=overrides)

    api_key = (cfg.get("api_key") or "").strip()
    if not api_key:
        raise ConfigurationError(
            "Watsonx API key required. Set WATSONX_API_KEY or pass api_key option.",
            provider=provider.provider_name,
            model=model.id,
        )
    project_id = (cfg.get("project_id") or "").strip()
    if not project_id:
        raise ConfigurationError(
            "Watsonx project ID required. Set WATSONX_PROJECT_ID or pass project_id option.",
            provider=provider.provider_name,
            model=model.id,
        )

    max_tokens = options.max_tokens if options.max_tokens is not None else cfg.get("max_tokens", WATSONX_DEFAULT_MAX_TOKENS)
    temperature = options.temperature if options.temperature is not None else cfg.get("temperature", WATSONX_DEFAULT_TEMPERATURE)
    return StreamSettings(
        api_key=api_key,
        project_id=project_id,
        base_url=str(cfg["base_url"]).rstrip("/"),
        max_tokens=int(max_tokens),
        temperature=float(temperature),
    )


def build_generation_url(base_url: str) -> str:
    """Return the streaming generation endpoint for a regional base URL."""
    return f"{base_url.rstrip('/')}{WATSONX_GENERATION_STREAM_PATH}?version={WATSONX_API_VERSION}"


def build_request_body(
    *,
    model_id: str,
    prompt: str,
    settings: StreamSettings,
    options: WatsonxStreamOptions,
) -> Dict[str, Any]:
    """Construct the JSON body for ``generation_stream``.

    Explicit decoding parameters are merged after the defaults, so they win.
    """
    parameters: Dict[str, Any] = {
        "max_new_tokens": settings.max_tokens,
        "temperature": settings.temperature,
    }
    if options.parameters is not None:
        parameters |= options.parameters.to_payload()
    return {
        "model_id": model_id,
        "input": prompt,
        "project_id": settings.project_id,
        "parameters": parameters,
    }


def build_headers(token: str, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Request headers; caller-supplied ``extra`` headers are applied last."""
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
        "Accept": "text/event-stream",
    }
    if extra:
        headers |= extra
    return headers


def describe_failure(exc: BaseException) -> str:
    """Human-readable message stored in ``AssistantMessage.error_message``."""
    if isinstance(exc, ProviderError):
        return exc.message
    if isinstance(exc, CancelledError):
        return f"Request aborted: {exc.reason or 'operation cancelled'}"
    return str(exc) or exc.__class__.__name__


class _StreamRun:
    """State for one invocation; executed on the worker thread by :func:`run_stream`."""

    def __init__(
        self,
        provider: "WatsonxProvider",
        model: ModelSpec,
        context: ConversationContext,
        options: WatsonxStreamOptions,
        output: AssistantMessage,
        sink: EventSink,
        cancellation: CancellationToken,
    ) -> None:
        self.provider = provider
        self.model = model
        self.context = context
        self.options = options
        self.output = output
        self.sink = sink
        self.cancellation = cancellation
        self.ctx = LogContext(provider=provider.provider_name, model=model.id, request_id=uuid.uuid4().hex[:12])
        self.metrics = StreamMetrics()
        self.reconstructor = SSEDeltaReconstructor(
            provider=provider.provider_name,
            model=model.id,
            logger=provider.logger,
            ctx=self.ctx,
        )
        self.content_index: Optional[int] = None

    # Entry point --------------------------------------------------------
    def run(self) -> None:
        with self.sink:
            try:
                self.sink.push(StartEvent(partial=self.output))
                self._execute()
            except Exception as exc:  # converted to the terminal event
                self._fail(exc)
                return
            try:
                self._complete()
            except Exception as exc:
                self._fail(exc)

    # Phases -------------------------------------------------------------
    def _execute(self) -> None:
        settings = resolve_settings(self.provider, self.model, self.options)
        self.ctx.project_id = settings.project_id
        normalized_log_event(
            self.provider.logger,
            "stream.start",
            self.ctx,
            phase="start",
            emitted=None,
            max_tokens=settings.max_tokens,
            temperature=settings.temperature,
            messages=len(self.context.messages),
        )
        self.cancellation.raise_if_cancelled()
        token = self.provider.token_cache.get_token(settings.api_key, cancellation=self.cancellation)
        prompt = build_watsonx_prompt(self.context)
        body = build_request_body(model_id=self.model.id, prompt=prompt, settings=settings, options=self.options)
        self.cancellation.raise_if_cancelled()

        client = self.provider.http_client()
        request = client.build_request(
            "POST",
            build_generation_url(settings.base_url),
            json=body,
            headers=build_headers(token, self.options.headers),
        )
        try:
            response = send_cancellable(client, request, self.cancellation)
        except httpx.HTTPError as e:
            self.cancellation.raise_if_cancelled()
            raise TransportError(
                f"Watsonx request failed: {e}",
                provider=self.provider.provider_name,
                model=self.model.id,
                raw=e,
            ) from e

        unregister = self.cancellation.add_callback(response.close)
        try:
            self._read_body(response)
        finally:
            unregister()
            response.close()

    def _read_body(self, response: httpx.Response) -> None:
        try:
            if not response.is_success:
                detail = response.read().decode("utf-8", errors="replace") or "Unknown error"
                raise UpstreamError(
                    status=response.status_code,
                    body=detail,
                    provider=self.provider.provider_name,
                    model=self.model.id,
                )
            for chunk in response.iter_bytes():
                self.cancellation.raise_if_cancelled()
                self._forward(self.reconstructor.feed(chunk))
            self.cancellation.raise_if_cancelled()
            self._forward(self.reconstructor.finish())
        except (httpx.HTTPError, httpx.StreamError) as e:
            self.cancellation.raise_if_cancelled()
            raise TransportError(
                f"Watsonx stream read failed: {e}",
                provider=self.provider.provider_name,
                model=self.model.id,
                raw=e,
            ) from e

    def _forward(self, signals: list[ReconstructorSignal]) -> None:
        for sig in signals:
            if sig.kind == TEXT_START:
                self.output.content.append(ContentPart(type="text", text=""))
                self.content_index = len(self.output.content) - 1
                self.sink.push(TextStartEvent(content_index=self.content_index, partial=self.output))
                continue
            self.output.content[self.content_index].text = self.reconstructor.full_text
            self.metrics.record_delta()
            self.sink.push(TextDeltaEvent(content_index=self.content_index, delta=sig.delta, partial=self.output))
        self.output.usage.input = self.reconstructor.input_tokens
        self.output.usage.output = self.reconstructor.output_tokens

    def _complete(self) -> None:
        self.output.usage.finalize(self.model.cost)
        self.output.stop_reason = "stop"
        self.metrics.stop()
        if self.content_index is not None:
            self.sink.push(
                TextEndEvent(
                    content_index=self.content_index,
                    content=self.reconstructor.full_text,
                    partial=self.output,
                )
            )
        normalized_log_event(
            self.provider.logger,
            "stream.end",
            self.ctx,
            phase="finalize",
            emitted=self.metrics.emitted,
            tokens=self.output.usage.as_tokens(),
            metrics=self.metrics.as_dict(),
            upstream_stop_reason=self.reconstructor.stop_reason,
            skipped_frames=self.reconstructor.skipped_frames,
            cost_total=self.output.usage.cost.total,
        )
        self.sink.push(DoneEvent(reason="stop", message=self.output))

    def _fail(self, exc: Exception) -> None:
        self.output.stop_reason = "error"
        self.output.error_message = describe_failure(exc)
        self.metrics.stop()
        code = classify_exception(exc)
        normalized_log_event(
            self.provider.logger,
            "stream.error",
            self.ctx,
            phase="finalize",
            emitted=self.metrics.emitted,
            error_code=code.value,
            level=code.log_level,
            tokens={"prompt": self.output.usage.input, "completion": self.output.usage.output},
            metrics=self.metrics.as_dict(),
            error=self.output.error_message[:260],
            status=getattr(exc, "status", None),
        )
        if not self.sink.terminated:
            self.sink.push(ErrorEvent(reason="error", error=self.output))


def run_stream(
    provider: "WatsonxProvider",
    model: ModelSpec,
    context: ConversationContext,
    options: WatsonxStreamOptions,
    output: AssistantMessage,
    sink: EventSink,
    cancellation: CancellationToken,
) -> None:
    """Worker-thread target: drive one invocation to exactly one terminal event."""
    _StreamRun(provider, model, context, options, output, sink, cancellation).run()


__all__ = [
    "StreamSettings",
    "resolve_settings",
    "build_generation_url",
    "build_request_body",
    "build_headers",
    "describe_failure",
    "run_stream",
]
