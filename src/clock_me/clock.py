"""Time sources used by the session service."""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Protocol


class Clock(Protocol):
    """Supplies the current instant."""

    def now(self) -> datetime:
        ...


class SystemClock:
    """Local wall clock, returning timezone-aware datetimes."""

    def now(self) -> datetime:
        return datetime.now().astimezone()


class FixedClock:
    """Test double that always reports the instant it was last given."""

    def __init__(self, instant: datetime) -> None:
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def set(self, instant: datetime) -> None:
        self._instant = instant

    def advance(self, delta: timedelta) -> datetime:
        self._instant = self._instant + delta
        return self._instant


__all__ = ["Clock", "FixedClock", "SystemClock"]
