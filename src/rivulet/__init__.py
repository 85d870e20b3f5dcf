"""rivulet: a minimal push-based reactive value engine."""

from importlib.metadata import version as _version

__version__ = _version("rivulet")

from rivulet.errors import ReactiveError, ResolutionError, CapacityError, PropagationError
from rivulet.cancellation import Cancellation
from rivulet.container import Container, Source, Subscriber
from rivulet.combinators import constant, transform, chain, combine
from rivulet.events import EventTarget, from_event
# filter stays in rivulet.combinators so star imports don't shadow the builtin

__all__ = [
    "Container",
    "Source",
    "Subscriber",
    "Cancellation",
    "constant",
    "transform",
    "chain",
    "combine",
    "EventTarget",
    "from_event",
    "ReactiveError",
    "ResolutionError",
    "CapacityError",
    "PropagationError",
]
