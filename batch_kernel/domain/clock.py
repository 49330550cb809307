"""
Injectable time source.

Elapsed durations, remaining-time estimates and the one-second worker-count
cache all read "now" from a ``Clock`` handed to them, never from
``datetime.now()``, so tests can pin and step time.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timedelta, timezone

_DEFAULT_START = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


class Clock(ABC):
    @abstractmethod
    def now(self) -> datetime:
        """Current time, timezone-aware."""


class SystemClock(Clock):
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)


class DeterministicClock(Clock):
    """Clock that only moves when told to.

    ``now()`` is stable between calls; ``advance()`` and ``tick()`` step it
    forward, ``set_time()`` jumps to an absolute instant.
    """

    def __init__(self, start: datetime | None = None):
        self._current = start or _DEFAULT_START

    def now(self) -> datetime:
        return self._current

    def set_time(self, when: datetime) -> None:
        self._current = when

    def advance(self, seconds: float = 1) -> None:
        self._current += timedelta(seconds=seconds)

    def tick(self) -> datetime:
        """Step one second and return the new time."""
        self.advance(1)
        return self._current
