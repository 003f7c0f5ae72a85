"""Cooperative cancellation token.

A ``CancellationToken`` is passed as ``signal`` in stream options. The worker
polls it between steps and registers callbacks that abort blocking I/O
(closing an open HTTP response) when cancellation is requested from another
thread. Tokens form a tree: cancelling a parent cancels every linked child.
"""

from __future__ import annotations

from contextlib import suppress
from threading import Event, Lock
from typing import Callable, List, Optional

from .cancelled_error import CancelledError


class CancellationToken:
    """Thread-safe, one-shot cancellation flag with callbacks and children."""

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._event = Event()
        self._reason: Optional[str] = None
        self._lock = Lock()
        self._children: List[CancellationToken] = []
        self._callbacks: List[Callable[[], None]] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Reason given to the first :meth:`cancel` call."""
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> None:
        """Cancel once: record ``reason``, run callbacks, then cancel children.

        Later calls are no-ops. Callback failures are suppressed so one bad
        callback cannot keep the others (or the children) from running.
        """
        with self._lock:
            if self._event.is_set():
                return
            self._reason = reason
            self._event.set()
            callbacks, self._callbacks = self._callbacks, []
            children = list(self._children)
        for cb in callbacks:
            with suppress(Exception):
                cb()
        for child in children:
            child.cancel(reason)

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        """Attach ``token`` as a child; it is cancelled now if this token already is."""
        with self._lock:
            self._children.append(token)
            already = self._event.is_set()
        if already:
            token.cancel(self._reason)
        return token

    def child(self) -> "CancellationToken":
        return CancellationToken(parent=self)

    def add_callback(self, callback: Callable[[], None]) -> Callable[[], None]:
        """Run ``callback`` once on cancellation (immediately if already cancelled).

        Returns an idempotent function that unregisters the callback.
        """
        with self._lock:
            pending = not self._event.is_set()
            if pending:
                self._callbacks.append(callback)
        if not pending:
            with suppress(Exception):
                callback()

        def _remove() -> None:
            with self._lock:
                if callback in self._callbacks:
                    self._callbacks.remove(callback)

        return _remove

    def raise_if_cancelled(self) -> None:
        """Raise :class:`CancelledError` carrying the reason if cancelled."""
        if self._event.is_set():
            raise CancelledError(self._reason)

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Block until cancelled or ``timeout`` elapses; return ``cancelled``."""
        return self._event.wait(timeout)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self.cancelled}, reason={self._reason!r})"


__all__ = ["CancellationToken"]
