"""
Time source abstraction.

Domain services take a Clock so tests can pin the current instant.
"""
from abc import ABC, abstractmethod
from datetime import datetime, timedelta

from django.utils import timezone


class Clock(ABC):
    """Supplies the current instant (timezone-aware)."""

    @abstractmethod
    def now(self) -> datetime:
        """Return the current time."""
        pass


class SystemClock(Clock):
    """Clock backed by the server time."""

    def now(self) -> datetime:
        return timezone.now()


class FixedClock(Clock):
    """Clock frozen at a given instant, movable with advance()."""

    def __init__(self, instant: datetime):
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def advance(self, delta: timedelta) -> None:
        self._instant = self._instant + delta


system_clock = SystemClock()
