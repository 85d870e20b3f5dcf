"""Containers: reactive values that multicast changes to subscribers.

A Container wraps a source routine. The source runs lazily, when the first
subscriber arrives, and receives the container as a write handle plus a
Cancellation that signals teardown. Every subscriber of an active container
shares that one activation. When only the subscriptions the source made on
the container itself remain, the activation is torn down: the teardown token
is cancelled and the cached value cleared, so the next subscriber runs the
source from scratch.

Propagation is synchronous. set() calls every subscriber in registration
order before returning, and a subscriber may call set() again on this or
another container. There is no cycle guard.
"""

from __future__ import annotations

import functools
import itertools
import logging
from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from rivulet.cancellation import Cancellation
from rivulet.errors import ResolutionError

if TYPE_CHECKING:
    from rivulet.combinators import Combined

T = TypeVar("T")
S = TypeVar("S")

Subscriber = Callable[[T], None]
Source = Callable[["Container[T]", Cancellation], None]

logger = logging.getLogger("rivulet.container")

# Marks "no value yet". Unlike None it can never be a domain value.
_UNSET = object()


class Container(Generic[T]):
    """A reactive value with a lazily activated source."""

    __slots__ = (
        "_source",
        "_subscribers",
        "_ids",
        "_current",
        "_teardown",
        "_quiet_threshold",
    )

    def __init__(self, source: Source[T]) -> None:
        self._source = source
        self._subscribers: dict[int, Subscriber[T]] = {}
        self._ids = itertools.count()
        self._current: object = _UNSET
        self._teardown: Cancellation | None = None
        self._quiet_threshold = 0

    @classmethod
    def of(cls, value: T) -> Container[T]:
        """Create a container that always holds a value, starting with value."""
        from rivulet.combinators import constant

        return constant(value)

    @staticmethod
    def zip(*containers: Container) -> Container[Combined]:
        """Combine the latest values of several containers into tuples."""
        from rivulet.combinators import combine

        return combine(*containers)

    @property
    def active(self) -> bool:
        """Whether a source activation is currently live."""
        return self._teardown is not None

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def get(self) -> T:
        """Return the current value, resolving it synchronously if needed.

        Raises ResolutionError if the source does not produce a value
        before returning. No subscription is left behind either way.
        """
        if self._current is not _UNSET:
            return self._current

        slot: object = _UNSET

        def _capture(value: T) -> None:
            nonlocal slot
            slot = value

        self.subscribe(_capture, Cancellation.expired())

        if slot is _UNSET:
            raise ResolutionError("unable to resolve lazily without a subscriber")
        return slot

    def set(self, value: T) -> None:
        """Store value and notify every subscriber in registration order.

        Exceptions raised by a subscriber propagate to the caller and stop
        the remaining notifications.
        """
        self._current = value
        for key, callback in list(self._subscribers.items()):
            # Skip subscribers removed earlier in this dispatch.
            if key in self._subscribers:
                callback(value)

    def subscribe(
        self,
        callback: Subscriber[T],
        cancellation: Cancellation | None = None,
    ) -> Cancellation:
        """Register callback until cancellation is cancelled.

        A present value is replayed to callback immediately. Otherwise the
        first subscriber activates the source. Returns the token that ends
        the subscription (a new one if none was given).
        """
        if cancellation is None:
            cancellation = Cancellation()

        # The source subscribing to its own container under the teardown token;
        # these registrations only go away with the activation.
        owned = cancellation is self._teardown
        if owned:
            self._quiet_threshold += 1

        key = next(self._ids)
        self._subscribers[key] = callback

        if self._current is not _UNSET:
            try:
                callback(self._current)
            except Exception:
                if owned:
                    self._quiet_threshold -= 1
                self._forget(key)
                raise
        elif self._teardown is None:
            try:
                self._activate()
            except Exception:
                self._subscribers.pop(key, None)
                raise

        # Runs immediately for an already cancelled token.
        cancellation.on_cancel(functools.partial(self._forget, key))
        return cancellation

    def map(self, fn: Callable[[T], S]) -> Container[S]:
        """Create a child container with transformed values."""
        from rivulet.combinators import transform

        return transform(self, fn)

    def filter(self, predicate: Callable[[T], bool]) -> Container[T]:
        """Create a child container with only matching values."""
        from rivulet.combinators import filter as _filter

        return _filter(self, predicate)

    def flat_map(self, fn: Callable[[T], Container[S]]) -> Container[S]:
        """Create a child container following the container fn returns for each value."""
        from rivulet.combinators import chain

        return chain(self, fn)

    def _activate(self) -> None:
        """Run the source under a fresh teardown token."""
        teardown = Cancellation()
        self._teardown = teardown
        self._quiet_threshold = 0
        logger.debug("Activating %r", self)
        try:
            self._source(self, teardown)
        except Exception:
            self._teardown = None
            self._current = _UNSET
            self._quiet_threshold = 0
            teardown.cancel()
            raise

    def _forget(self, key: int) -> None:
        """Remove a subscription and tear down once the container goes quiet."""
        if self._subscribers.pop(key, _UNSET) is _UNSET:
            return
        if len(self._subscribers) == self._quiet_threshold:
            self._deactivate()

    def _deactivate(self) -> None:
        if self._teardown is not None:
            logger.debug("Deactivating %r", self)
        teardown, self._teardown = self._teardown, None
        self._current = _UNSET
        self._quiet_threshold = 0
        if teardown is not None:
            teardown.cancel()

    def __repr__(self) -> str:
        state = "active" if self._teardown is not None else "idle"
        if self._current is not _UNSET:
            state = f"{state}, current={self._current!r}"
        return f"Container({state}, subscribers={len(self._subscribers)})"
