"""Exceptions raised by the reactive engine."""


class ReactiveError(Exception):
    """Base class for errors raised by rivulet itself."""


class ResolutionError(ReactiveError, LookupError):
    """get() was called on a container that cannot produce a value synchronously."""


class CapacityError(ReactiveError, ValueError):
    """More inputs were requested than a merge tracker can address."""


class PropagationError(ReactiveError):
    """Names the failure of a subscriber during Container.set().

    Never raised: the subscriber's own exception reaches the caller of set()
    unchanged and stops the remaining notifications. Subclass it for errors
    your subscribers raise when callers should be able to tell them apart.
    """
