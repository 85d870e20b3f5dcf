"""Bit accumulator used by combine() to know when every input has emitted."""

from __future__ import annotations

from rivulet.errors import CapacityError


class MergeTracker:
    """Tracks which of a fixed number of slots have been observed.

    Bits are only ever set. A fresh tracker is built for every activation.
    """

    __slots__ = ("_total", "_state", "_mask")

    CAPACITY = 32

    def __init__(self, total: int) -> None:
        self.ensure_capacity(total)
        self._total = total
        self._state = 0
        self._mask = (1 << total) - 1

    @classmethod
    def ensure_capacity(cls, total: int) -> None:
        """Raise if total slots cannot be tracked."""
        if total < 0:
            raise ValueError(f"slot count must not be negative, got {total}")
        if total > cls.CAPACITY:
            raise CapacityError(
                f"trying to track {total} inputs, at most {cls.CAPACITY} are supported"
            )

    def mark(self, index: int) -> None:
        if not 0 <= index < self._total:
            raise IndexError(f"slot {index} out of range for {self._total} inputs")
        self._state |= 1 << index

    def all_observed(self) -> bool:
        return self._state == self._mask

    def __repr__(self) -> str:
        observed = bin(self._state).count("1")
        return f"MergeTracker({observed}/{self._total})"
