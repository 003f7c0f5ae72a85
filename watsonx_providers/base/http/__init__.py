"""HTTP utilities: the shared httpx client pool and a cancellable send."""

from .cancellable import send_cancellable
from .client import close_all_clients, get_httpx_client

__all__ = ["get_httpx_client", "close_all_clients", "send_cancellable"]
