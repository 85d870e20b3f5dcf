"""Named event dispatch and containers fed by it.

EventTarget is a small in-process dispatcher for collaborators that push
notifications (selection changes, finished games, user-facing notices).
from_event() turns one event name into a Container whose source listens
while the container is active and stops listening on teardown.
"""

from __future__ import annotations

import itertools
from typing import Any, Callable

from rivulet.cancellation import Cancellation
from rivulet.container import _UNSET, Container

Listener = Callable[[Any], None]


class EventTarget:
    """Dispatches named events to listeners in registration order."""

    def __init__(self) -> None:
        self._listeners: dict[str, dict[int, Listener]] = {}
        self._ids = itertools.count()

    def add_listener(
        self,
        name: str,
        listener: Listener,
        cancellation: Cancellation | None = None,
    ) -> Cancellation:
        """Call listener with the detail of every name event until cancelled."""
        if cancellation is None:
            cancellation = Cancellation()
        if cancellation.cancelled:
            return cancellation

        key = next(self._ids)
        self._listeners.setdefault(name, {})[key] = listener

        def _remove() -> None:
            listeners = self._listeners.get(name)
            if listeners is not None:
                listeners.pop(key, None)
                if not listeners:
                    del self._listeners[name]

        cancellation.on_cancel(_remove)
        return cancellation

    def dispatch(self, name: str, detail: Any = None) -> None:
        """Deliver detail to the listeners of name. Listener errors propagate."""
        listeners = self._listeners.get(name)
        if not listeners:
            return
        for key, listener in list(listeners.items()):
            if key in listeners:
                listener(detail)

    def listener_count(self, name: str) -> int:
        return len(self._listeners.get(name, ()))


def from_event(target: EventTarget, name: str, initial: Any = _UNSET) -> Container:
    """Container holding the detail of the latest name event on target.

    With initial given, the container starts out holding it; otherwise it
    has no value until the first event after activation.
    """

    def _source(handle: Container, cancellation: Cancellation) -> None:
        if initial is not _UNSET:
            handle.set(initial)
        target.add_listener(name, handle.set, cancellation)

    return Container(_source)
