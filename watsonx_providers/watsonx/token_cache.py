"""IBM Cloud IAM bearer token cache.

Purpose:
    Exchange an IBM Cloud API key for a short-lived IAM bearer token and reuse
    it until it is within :data:`TOKEN_SAFETY_MARGIN_SECONDS` of expiry.

Ownership:
    ``IamTokenCache`` is an explicit object owned by whoever composes the
    adapter (normally one per :class:`WatsonxProvider`). There is no
    module-level cache, so tests and tenants never share tokens implicitly.

Concurrency:
    Map reads and writes are guarded by a lock; entries are immutable and
    replaced whole, so the last writer wins. Exchanges themselves run outside
    the lock: two threads missing the cache for the same credential at the
    same time both call the identity endpoint.

Failure semantics:
    Non-2xx responses raise :class:`AuthExchangeError` with status and body;
    an unreachable endpoint raises it with ``status=None``. Nothing is retried.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import httpx

from ..base.cancellation import CancellationToken
from ..base.errors import AuthExchangeError, ErrorCode, code_for_status
from ..base.http import get_httpx_client, send_cancellable
from ..base.logging import LogContext, get_logger, normalized_log_event
from ..config.defaults import (
    IBM_IAM_APIKEY_GRANT,
    IBM_IAM_TOKEN_URL,
    TOKEN_CACHE_KEY_LENGTH,
    TOKEN_SAFETY_MARGIN_SECONDS,
)

PROVIDER_NAME = "watsonx"


@dataclass(frozen=True)
class TokenCacheEntry:
    """Cached bearer token for one credential fingerprint."""

    key: str
    token: str
    expires_at: float

    def is_usable(self, now: float, margin: float = TOKEN_SAFETY_MARGIN_SECONDS) -> bool:
        """True while ``now`` is more than ``margin`` seconds before expiry."""
        return now < self.expires_at - margin


def cache_key(credential: str) -> str:
    """Fingerprint a credential by its fixed-length prefix."""
    return credential[:TOKEN_CACHE_KEY_LENGTH]


class IamTokenCache:
    """Keyed cache of IAM bearer tokens with on-demand exchange."""

    def __init__(
        self,
        *,
        client: Optional[httpx.Client] = None,
        clock: Callable[[], float] = time.time,
        token_url: str = IBM_IAM_TOKEN_URL,
        safety_margin: float = TOKEN_SAFETY_MARGIN_SECONDS,
    ) -> None:
        """Create an empty cache.

        Parameters:
            client: HTTP client for the exchange; defaults to the pooled client.
            clock: Returns the current time in epoch seconds.
            token_url: Identity endpoint URL.
            safety_margin: Seconds before expiry at which a token is renewed.
        """
        self._client = client
        self._clock = clock
        self._token_url = token_url
        self._margin = safety_margin
        self._entries: Dict[str, TokenCacheEntry] = {}
        self._lock = threading.Lock()
        self._logger = get_logger("watsonx_providers.watsonx.auth")

    def peek(self, credential: str) -> Optional[TokenCacheEntry]:
        """Return the stored entry for ``credential`` without validating it."""
        with self._lock:
            return self._entries.get(cache_key(credential))

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def get_token(self, credential: str, *, cancellation: Optional[CancellationToken] = None) -> str:
        """Return a usable bearer token for ``credential``.

        Parameters:
            credential: Non-empty IBM Cloud API key.
            cancellation: Optional token; checked before the exchange. Cancelling
                abandons a send still waiting for the identity endpoint and
                closes the exchange response if it is already open.

        Returns:
            The bearer token string.

        Raises:
            ValueError: ``credential`` is empty.
            AuthExchangeError: the identity endpoint rejected the key or was
                unreachable.
            CancelledError: cancellation was requested.
        """
        if not credential:
            raise ValueError("credential must be a non-empty string")
        key = cache_key(credential)
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and entry.is_usable(now, self._margin):
            normalized_log_event(
                self._logger,
                "auth.cache_hit",
                LogContext(provider=PROVIDER_NAME),
                phase="auth",
                emitted=None,
                expires_in_s=round(entry.expires_at - now, 1),
            )
            return entry.token

        if cancellation is not None:
            cancellation.raise_if_cancelled()
        token, lifetime = self._exchange(credential, cancellation)
        if cancellation is not None:
            cancellation.raise_if_cancelled()

        fresh = TokenCacheEntry(key=key, token=token, expires_at=now + lifetime)
        with self._lock:
            self._entries[key] = fresh
        normalized_log_event(
            self._logger,
            "auth.exchange",
            LogContext(provider=PROVIDER_NAME),
            phase="auth",
            emitted=True,
            renewed=entry is not None,
            expires_in_s=lifetime,
        )
        return token

    def _exchange(self, credential: str, cancellation: Optional[CancellationToken]) -> tuple[str, float]:
        """POST the API-key grant and return ``(access_token, expires_in)``."""
        client = self._client or get_httpx_client(None, purpose="watsonx.iam")
        request = client.build_request(
            "POST",
            self._token_url,
            data={"grant_type": IBM_IAM_APIKEY_GRANT, "apikey": credential},
            headers={"Accept": "application/json"},
        )
        try:
            response = send_cancellable(client, request, cancellation)
        except httpx.HTTPError as e:
            self._log_failure(None, str(e))
            raise AuthExchangeError(status=None, body=str(e), provider=PROVIDER_NAME, raw=e) from e

        unregister = cancellation.add_callback(response.close) if cancellation is not None else None
        try:
            body = response.read()
        except (httpx.HTTPError, httpx.StreamError) as e:
            if cancellation is not None:
                cancellation.raise_if_cancelled()
            self._log_failure(None, str(e))
            raise AuthExchangeError(status=None, body=str(e), provider=PROVIDER_NAME, raw=e) from e
        finally:
            if unregister is not None:
                unregister()
            response.close()

        text = body.decode("utf-8", errors="replace")
        if not response.is_success:
            self._log_failure(response.status_code, text)
            raise AuthExchangeError(status=response.status_code, body=text or "Unknown error", provider=PROVIDER_NAME)

        try:
            data = response.json()
            return str(data["access_token"]), float(data["expires_in"])
        except (ValueError, KeyError, TypeError) as e:
            self._log_failure(response.status_code, "invalid token response")
            raise AuthExchangeError(
                status=response.status_code,
                body=f"invalid token response: {e}",
                provider=PROVIDER_NAME,
                raw=e,
            ) from e

    def _log_failure(self, status: Optional[int], detail: str) -> None:
        normalized_log_event(
            self._logger,
            "auth.error",
            LogContext(provider=PROVIDER_NAME),
            phase="auth",
            emitted=False,
            error_code=code_for_status(status, default=ErrorCode.AUTH).value,
            status=status,
            error=detail[:260],
        )


__all__ = ["IamTokenCache", "TokenCacheEntry", "cache_key"]
