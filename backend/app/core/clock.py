"""
Process-wide clock.

Everything in the engine that needs "today" asks a Clock, so tests and
operators can pin the as-of date without touching the system time.
"""

from abc import ABC, abstractmethod
from datetime import date, datetime
from zoneinfo import ZoneInfo

from app.core.config import settings


class Clock(ABC):
    """Supplies the current calendar date."""

    @abstractmethod
    def today(self) -> date:
        """Return the current date in the reference time zone."""
        pass


class SystemClock(Clock):
    """Wall clock read in a fixed reference time zone."""

    def __init__(self, timezone_name: str | None = None) -> None:
        self._zone = ZoneInfo(timezone_name or settings.PM_REFERENCE_TIMEZONE)

    @property
    def zone(self) -> ZoneInfo:
        return self._zone

    def now(self) -> datetime:
        return datetime.now(self._zone)

    def today(self) -> date:
        return self.now().date()


class FixedClock(Clock):
    """Clock pinned to a given date."""

    def __init__(self, fixed: date) -> None:
        self._fixed = fixed

    def today(self) -> date:
        return self._fixed

    def set(self, fixed: date) -> None:
        self._fixed = fixed


_clock: Clock | None = None


def get_clock() -> Clock:
    """Get the global clock instance."""
    global _clock
    if _clock is None:
        _clock = SystemClock()
    return _clock


def configure_clock(clock: Clock | None) -> None:
    """Replace the global clock. ``None`` restores the system clock."""
    global _clock
    _clock = clock
