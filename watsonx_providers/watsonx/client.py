"""IBM watsonx.ai text-generation provider adapter.

Purpose:
        Streams text generation from the watsonx ``generation_stream`` SSE
        endpoint as typed assistant-message events, exchanging the IBM Cloud API
        key for an IAM bearer token through an :class:`IamTokenCache` owned by
        the provider instance.

External dependencies:
        - ``httpx`` only (no IBM SDK). A client may be injected; otherwise the
            shared pool from ``base.http`` is used.

Concurrency:
        - ``stream`` returns immediately. Each call starts one daemon worker
            thread that owns the sending half of the returned channel and always
            finishes it with exactly one ``done`` or ``error`` event.
        - Concurrent calls share only the token cache.

Timeouts and retries:
        - None internally. Callers bound a call via ``options.signal`` or
            ``stream.cancel()`` and own any retry policy.
"""

from __future__ import annotations

import logging
import threading
from typing import Any, Optional

import httpx

from ..base.cancellation import CancellationToken
from ..base.http import get_httpx_client
from ..base.logging import get_logger
from ..base.models import AssistantMessage, ConversationContext, ModelSpec
from ..base.streaming import AssistantMessageEventStream
from ..config import get_provider_config
from ..config.defaults import WATSONX_DEFAULT_MODEL
from .helpers import run_stream
from .options import WatsonxStreamOptions
from .token_cache import IamTokenCache


def _coerce_optional_str(candidate: Any) -> Optional[str]:
    """Return a stripped string or ``None`` when blank/missing."""
    if candidate is None:
        return None
    stripped = str(candidate).strip()
    return stripped or None


class WatsonxProvider:
    def __init__(
        self,
        *,
        api_key: Optional[str] = None,
        project_id: Optional[str] = None,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        token_cache: Optional[IamTokenCache] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the provider.

        Parameters
        ----------
        api_key, project_id, base_url:
            Provider-level defaults. Per-call options take precedence; when
            both are absent the layered configuration (``WATSONX_API_KEY``,
            ``WATSONX_PROJECT_ID``, ``WATSONX_BASE_URL``, config file, built-in
            defaults) is consulted at stream time.
        model:
            Default model id reported by :meth:`default_model`.
        token_cache:
            IAM token cache to use. A fresh cache sharing ``client`` is created
            when omitted; pass one explicitly to share tokens between providers.
        client:
            ``httpx.Client`` for both the IAM exchange and generation calls.
            The pooled client is used when omitted.
        """
        self._api_key = _coerce_optional_str(api_key)
        self._project_id = _coerce_optional_str(project_id)
        self._base_url = _coerce_optional_str(base_url)
        cfg = get_provider_config("watsonx", overrides={"model": model})
        self._model = _coerce_optional_str(cfg.get("model")) or WATSONX_DEFAULT_MODEL
        self._client = client
        self.token_cache = token_cache if token_cache is not None else IamTokenCache(client=client)
        self._logger = get_logger("watsonx_providers.watsonx.stream")

    @property
    def provider_name(self) -> str:
        """Return the stable provider identifier string."""
        return "watsonx"

    @property
    def api_key(self) -> Optional[str]:
        """Constructor-level API key, or ``None`` to defer to configuration."""
        return self._api_key

    @property
    def project_id(self) -> Optional[str]:
        return self._project_id

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def default_model(self) -> str:
        """Return the default model id configured for this provider."""
        return self._model

    def http_client(self) -> httpx.Client:
        """Injected client, or the pooled generation client."""
        return self._client if self._client is not None else get_httpx_client(None, purpose="watsonx.stream")

    def stream(
        self,
        model: ModelSpec,
        context: ConversationContext,
        options: Optional[WatsonxStreamOptions] = None,
    ) -> AssistantMessageEventStream:
        """Start streaming a completion for ``context``.

        Parameters:
            model: Model descriptor (id, optional base URL and pricing).
            context: System prompt and ordered turns.
            options: Per-call options; see :class:`WatsonxStreamOptions`.

        Returns:
            An :class:`AssistantMessageEventStream`. Iterate it for
            ``start``, ``text_start``, ``text_delta``, ``text_end`` and a final
            ``done`` or ``error`` event, or call ``result()``.

        Notes:
            - Never raises for runtime failures; they arrive as the terminal
              ``error`` event.
            - ``stream.cancel()`` and cancelling ``options.signal`` both abort
              the call.
        """
        options = options or WatsonxStreamOptions()
        cancellation = options.signal.child() if options.signal is not None else CancellationToken()
        channel = AssistantMessageEventStream(cancellation)
        output = AssistantMessage(api=model.api, provider=model.provider, model=model.id)
        worker = threading.Thread(
            target=run_stream,
            args=(self, model, context, options, output, channel.sink, cancellation),
            name=f"watsonx-stream-{model.id}",
            daemon=True,
        )
        worker.start()
        return channel


__all__ = ["WatsonxProvider"]
