"""Pooled httpx clients are reused per (base_url, purpose) and carry no timeout."""
from __future__ import annotations

from watsonx_providers.base.http import close_all_clients, get_httpx_client


def test_same_key_returns_same_client():
    a = get_httpx_client(None, purpose="watsonx.iam")
    b = get_httpx_client(None, purpose="watsonx.iam")
    c = get_httpx_client(None, purpose="watsonx.stream")
    assert a is b
    assert a is not c


def test_clients_have_no_internal_deadline():
    client = get_httpx_client("https://us-south.ml.cloud.ibm.com", purpose="watsonx.stream")
    timeout = client.timeout
    assert (timeout.connect, timeout.read, timeout.write, timeout.pool) == (None, None, None, None)


def test_close_all_clients_resets_pool():
    a = get_httpx_client(None, purpose="watsonx.iam")
    close_all_clients()
    assert a.is_closed
    assert get_httpx_client(None, purpose="watsonx.iam") is not a
