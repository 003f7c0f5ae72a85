"""IAM token cache: reuse, renewal near expiry, and exchange failures."""
from __future__ import annotations

import json
import threading

import httpx
import pytest

from watsonx_providers.base.cancellation import CancellationToken, CancelledError
from watsonx_providers.base.errors import AuthExchangeError, ErrorCode
from watsonx_providers.config.defaults import IBM_IAM_APIKEY_GRANT, IBM_IAM_TOKEN_URL
from watsonx_providers.watsonx.token_cache import IamTokenCache, TokenCacheEntry, cache_key

from watsonx_providers.tests.utils import FakeWatsonx, Gate, form_fields

API_KEY = "abcdefghijklmnopqrstuvwxyz"


def _cache(fake: FakeWatsonx, clock) -> IamTokenCache:
    return IamTokenCache(client=fake.client(), clock=clock)


def test_cache_key_is_sixteen_char_prefix():
    assert cache_key(API_KEY) == "abcdefghijklmnop"
    assert cache_key("short") == "short"


def test_entry_usable_until_safety_margin():
    entry = TokenCacheEntry(key="k", token="t", expires_at=1000.0)
    assert entry.is_usable(699.0)
    assert not entry.is_usable(700.0)
    assert not entry.is_usable(1000.0)


def test_first_call_exchanges_api_key(fake_clock):
    fake = FakeWatsonx()
    cache = _cache(fake, fake_clock)

    assert cache.get_token(API_KEY) == "iam-token-1"

    assert len(fake.iam_requests) == 1
    req = fake.iam_requests[0]
    assert str(req.url) == IBM_IAM_TOKEN_URL
    assert req.method == "POST"
    assert req.headers["content-type"] == "application/x-www-form-urlencoded"
    assert req.headers["accept"] == "application/json"
    assert form_fields(req) == {"grant_type": IBM_IAM_APIKEY_GRANT, "apikey": API_KEY}
    entry = cache.peek(API_KEY)
    assert entry is not None and entry.expires_at == fake_clock.now + 3600


def test_token_reused_while_outside_margin(fake_clock, log_records):
    fake = FakeWatsonx()
    cache = _cache(fake, fake_clock)
    cache.get_token(API_KEY)

    fake_clock.advance(3600 - 301)
    assert cache.get_token(API_KEY) == "iam-token-1"

    assert len(fake.iam_requests) == 1
    events = [json.loads(r.getMessage())["event"] for r in log_records]
    assert events == ["auth.exchange", "auth.cache_hit"]


def test_token_renewed_once_inside_margin(fake_clock):
    fake = FakeWatsonx()
    cache = _cache(fake, fake_clock)
    cache.get_token(API_KEY)

    fake_clock.advance(3600 - 299)
    fake.token_payload = {"access_token": "iam-token-2", "expires_in": 3600}
    assert cache.get_token(API_KEY) == "iam-token-2"
    assert cache.get_token(API_KEY) == "iam-token-2"

    assert len(fake.iam_requests) == 2
    assert len(cache) == 1
    assert cache.peek(API_KEY).token == "iam-token-2"


def test_short_lived_token_is_never_reused(fake_clock):
    fake = FakeWatsonx()
    fake.token_payload = {"access_token": "brief", "expires_in": 120}
    cache = _cache(fake, fake_clock)

    cache.get_token(API_KEY)
    cache.get_token(API_KEY)

    assert len(fake.iam_requests) == 2


def test_credentials_sharing_a_prefix_share_a_token(fake_clock):
    fake = FakeWatsonx()
    cache = _cache(fake, fake_clock)

    cache.get_token(API_KEY)
    cache.get_token(API_KEY[:16] + "-different-suffix")
    cache.get_token("zzzzzzzzzzzzzzzzzzzz")

    assert len(fake.iam_requests) == 2
    assert len(cache) == 2


def test_rejected_key_raises_with_status_and_body(fake_clock, log_records):
    fake = FakeWatsonx()
    fake.token_status = 400
    cache = _cache(fake, fake_clock)

    with pytest.raises(AuthExchangeError) as excinfo:
        cache.get_token(API_KEY)

    err = excinfo.value
    assert err.status == 400
    assert err.body == "invalid apikey"
    assert err.message == "IBM IAM token exchange failed: 400 - invalid apikey"
    assert err.code is ErrorCode.VALIDATION
    assert cache.peek(API_KEY) is None
    failures = [json.loads(r.getMessage()) for r in log_records]
    assert failures[-1]["event"] == "auth.error"
    assert failures[-1]["status"] == 400


def test_unauthorized_maps_to_auth_code(fake_clock):
    fake = FakeWatsonx()
    fake.token_status = 401
    with pytest.raises(AuthExchangeError) as excinfo:
        _cache(fake, fake_clock).get_token(API_KEY)
    assert excinfo.value.code is ErrorCode.AUTH


def test_unreachable_endpoint_raises_without_status(fake_clock):
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    cache = IamTokenCache(client=httpx.Client(transport=httpx.MockTransport(refuse)), clock=fake_clock)

    with pytest.raises(AuthExchangeError) as excinfo:
        cache.get_token(API_KEY)

    assert excinfo.value.status is None
    assert "unreachable" in excinfo.value.message
    assert excinfo.value.code is ErrorCode.AUTH


def test_invalid_token_payload_raises(fake_clock):
    fake = FakeWatsonx()
    fake.token_payload = {"token_type": "Bearer"}
    with pytest.raises(AuthExchangeError) as excinfo:
        _cache(fake, fake_clock).get_token(API_KEY)
    assert excinfo.value.status == 200
    assert "invalid token response" in excinfo.value.body


def test_empty_credential_rejected(fake_clock):
    fake = FakeWatsonx()
    with pytest.raises(ValueError):
        _cache(fake, fake_clock).get_token("")
    assert fake.iam_requests == []


def test_cancelled_token_skips_exchange(fake_clock):
    fake = FakeWatsonx()
    token = CancellationToken()
    token.cancel("caller went away")

    with pytest.raises(CancelledError):
        _cache(fake, fake_clock).get_token(API_KEY, cancellation=token)

    assert fake.iam_requests == []


def test_cancel_during_pending_exchange_raises(fake_clock):
    fake = FakeWatsonx()
    fake.iam_gate = Gate()
    cache = _cache(fake, fake_clock)
    token = CancellationToken()
    outcome = {}

    def fetch():
        try:
            cache.get_token(API_KEY, cancellation=token)
        except CancelledError as exc:
            outcome["error"] = exc

    worker = threading.Thread(target=fetch, daemon=True)
    worker.start()
    try:
        assert fake.iam_gate.entered.wait(5)
        token.cancel("caller went away")
        worker.join(5)
    finally:
        fake.iam_gate.release.set()

    assert not worker.is_alive()
    assert outcome["error"].reason == "caller went away"
    assert len(cache) == 0


def test_cached_token_returned_even_when_cancelled(fake_clock):
    fake = FakeWatsonx()
    cache = _cache(fake, fake_clock)
    cache.get_token(API_KEY)
    token = CancellationToken()
    token.cancel()
    assert cache.get_token(API_KEY, cancellation=token) == "iam-token-1"


def test_clear_forgets_entries(fake_clock):
    fake = FakeWatsonx()
    cache = _cache(fake, fake_clock)
    cache.get_token(API_KEY)
    cache.clear()
    assert len(cache) == 0
    cache.get_token(API_KEY)
    assert len(fake.iam_requests) == 2
