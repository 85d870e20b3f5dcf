"""Cancellation tokens: one-shot stop signals for subscriptions and sources.

A token starts live and can be cancelled exactly once. Cancelling runs every
callback registered through on_cancel(), in registration order, and is
irreversible. Subscriptions use a token to know when to unregister; sources
use the token they are handed to release timers, listeners and connections.
"""

from __future__ import annotations

import itertools
from typing import Callable

Disposer = Callable[[], None]


def _noop() -> None:
    pass


class Cancellation:
    """One-shot stop signal."""

    __slots__ = ("_cancelled", "_callbacks", "_ids")

    def __init__(self) -> None:
        self._cancelled = False
        self._callbacks: dict[int, Callable[[], None]] = {}
        self._ids = itertools.count()

    @classmethod
    def expired(cls) -> Cancellation:
        """Return a token that is already cancelled."""
        token = cls()
        token._cancelled = True
        return token

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        """Cancel the token. Calling it again is a no-op."""
        if self._cancelled:
            return
        self._cancelled = True
        callbacks = list(self._callbacks.values())
        self._callbacks.clear()
        for callback in callbacks:
            callback()

    def on_cancel(self, callback: Callable[[], None]) -> Disposer:
        """Run callback when the token is cancelled. Returns a function that detaches it.

        If the token is already cancelled, callback runs immediately.
        """
        if self._cancelled:
            callback()
            return _noop

        key = next(self._ids)
        self._callbacks[key] = callback

        def _detach() -> None:
            self._callbacks.pop(key, None)

        return _detach

    def child(self) -> Cancellation:
        """Create a token that is cancelled together with this one.

        Cancelling the child on its own detaches it from the parent, so
        short-lived children do not pile up on a long-lived parent.
        """
        token = Cancellation()
        detach = self.on_cancel(token.cancel)
        token.on_cancel(detach)
        return token

    def __enter__(self) -> Cancellation:
        return self

    def __exit__(self, *exc_info) -> None:
        self.cancel()

    def __repr__(self) -> str:
        state = "cancelled" if self._cancelled else "live"
        return f"Cancellation({state})"
