"""Combinators: functions building derived containers.

Each combinator returns a new Container whose source subscribes to its
parent(s) under the activation's teardown token and forwards values with
set(). Only the public Container contract is used here.
"""

from __future__ import annotations

from typing import Any, Callable, TypeVar

from rivulet._merge import MergeTracker
from rivulet.cancellation import Cancellation
from rivulet.container import _UNSET, Container

T = TypeVar("T")
S = TypeVar("S")

Combined = tuple[Any, ...]


def constant(value: T) -> Container[T]:
    """Container that always holds a value, starting with value.

    While active it follows its own updates, so a reactivation replays the
    latest value it saw rather than the initial one.

    Usage:
        name = constant("foo")
        name.get()        # "foo"
        name.set("bar")
        name.get()        # "bar"
    """

    def _source(handle: Container[T], cancellation: Cancellation) -> None:
        nonlocal value
        handle.set(value)

        def _follow(change: T) -> None:
            nonlocal value
            value = change

        handle.subscribe(_follow, cancellation)

    return Container(_source)


def transform(parent: Container[T], fn: Callable[[T], S]) -> Container[S]:
    """Forward fn(value) for every value of parent."""

    def _source(handle: Container[S], cancellation: Cancellation) -> None:
        parent.subscribe(lambda value: handle.set(fn(value)), cancellation)

    return Container(_source)


def filter(parent: Container[T], predicate: Callable[[T], bool]) -> Container[T]:
    """Forward only the values of parent for which predicate holds.

    The result has no value until predicate passes at least once.
    """

    def _source(handle: Container[T], cancellation: Cancellation) -> None:
        def _forward(value: T) -> None:
            if predicate(value):
                handle.set(value)

        parent.subscribe(_forward, cancellation)

    return Container(_source)


def chain(parent: Container[T], fn: Callable[[T], Container[S]]) -> Container[S]:
    """Follow the container fn returns for the latest value of parent.

    Each parent value replaces the previous inner subscription: it is
    cancelled before the next inner container is subscribed, so values
    from a superseded inner container are never forwarded. When fn returns
    the container already followed, the subscription is kept as is.
    """

    def _source(handle: Container[S], cancellation: Cancellation) -> None:
        followed: Container[S] | None = None
        inner: Cancellation | None = None

        def _switch(value: T) -> None:
            nonlocal followed, inner
            target = fn(value)
            if target is followed:
                return
            if inner is not None:
                inner.cancel()
            followed = target
            inner = cancellation.child()
            target.subscribe(handle.set, inner)

        parent.subscribe(_switch, cancellation)

    return Container(_source)


def combine(*containers: Container) -> Container[Combined]:
    """Emit a tuple of every input's latest value whenever one of them changes.

    Nothing is emitted until each input has produced a value at least once.
    Raises CapacityError straight away for more inputs than a MergeTracker
    can address.

    Usage:
        first, second = constant(2), constant(2)
        total = combine(first, second).map(sum)
        total.subscribe(print)   # 4
        first.set(4)             # 6
        second.set(8)            # 12
    """
    MergeTracker.ensure_capacity(len(containers))

    def _source(handle: Container[Combined], cancellation: Cancellation) -> None:
        state: list[Any] = [_UNSET] * len(containers)
        resolved = MergeTracker(len(containers))

        def _slot(index: int) -> Callable[[Any], None]:
            def _update(value: Any) -> None:
                state[index] = value
                resolved.mark(index)
                if resolved.all_observed():
                    handle.set(tuple(state))

            return _update

        for index, source in enumerate(containers):
            source.subscribe(_slot(index), cancellation)

    return Container(_source)
