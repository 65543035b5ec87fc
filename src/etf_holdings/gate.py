"""Quota-and-timer admission control for EDGAR requests."""

from __future__ import annotations

import time
from typing import Protocol


class Clock(Protocol):
    """Minimal clock interface used by :class:`Gate`."""

    def sleep(self, seconds: float) -> None:
        ...


class SystemClock:
    """Clock backed by the :mod:`time` module."""

    def sleep(self, seconds: float) -> None:
        time.sleep(seconds)


class Gate:
    """Count down a quota of actions, then block for a fixed period.

    A gate is owned by a single actor and is not thread-safe. The first call
    to :meth:`try_advance` on a fresh gate never blocks.
    """

    def __init__(self, period: float, capacity: int, clock: Clock | None = None):
        """
        Initialize the gate.

        Args:
            period: Seconds to block once the quota is exhausted
            capacity: Number of actions allowed per period
            clock: Clock used to sleep (default: :class:`SystemClock`)
        """
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        if period < 0:
            raise ValueError("period cannot be negative")
        self.period = period
        self.capacity = capacity
        self.clock = clock or SystemClock()
        self._remaining = capacity

    @property
    def remaining(self) -> int:
        """Actions left before the next call blocks."""
        return self._remaining

    def try_advance(self) -> bool:
        """Consume one action, blocking for ``period`` when none is left.

        Returns:
            True when the call had to wait, False otherwise
        """
        self._remaining -= 1
        if self._remaining < 0:
            self.clock.sleep(self.period)
            # The call that waited counts against the new window.
            self._remaining = self.capacity - 1
            return True
        return False

    def force_wait(self) -> None:
        """Block for ``period`` and replenish the quota."""
        self.clock.sleep(self.period)
        self._remaining = self.capacity

    def reset(self) -> None:
        """Replenish the quota without blocking."""
        self._remaining = self.capacity

    def __repr__(self) -> str:
        return (
            f"Gate(period={self.period!r}, capacity={self.capacity!r}, "
            f"remaining={self._remaining!r})"
        )
