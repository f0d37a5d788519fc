"""Session and break entities."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field, model_validator

from ..errors import InvalidStateError


class Break(BaseModel):
    """A pause interval nested inside a session."""

    model_config = ConfigDict(extra="ignore")

    start: AwareDatetime = Field(..., description="Instant the break began.")
    end: AwareDatetime | None = Field(default=None, description="Instant the break finished.")

    @model_validator(mode="after")
    def _check_order(self) -> "Break":
        if self.end is not None and self.end < self.start:
            raise ValueError("Break end must not precede its start")
        return self

    @classmethod
    def new(cls, start: datetime) -> "Break":
        return cls(start=start)

    def finish(self, end: datetime) -> None:
        self.end = end

    def duration(self) -> timedelta | None:
        if self.end is None:
            return None
        return self.end - self.start

    def is_active(self) -> bool:
        return self.end is None


class Session(BaseModel):
    """One clock-in to clock-out interval and the breaks closed inside it."""

    model_config = ConfigDict(extra="ignore")

    start: AwareDatetime = Field(..., description="Instant the session was opened.")
    end: AwareDatetime | None = Field(default=None, description="Instant the session was closed.")
    breaks: list[Break] = Field(
        default_factory=list,
        description="Closed breaks in the order they finished.",
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "Session":
        if self.end is not None and self.end < self.start:
            raise ValueError("Session end must not precede its start")
        if any(item.is_active() for item in self.breaks):
            raise ValueError("Session break list must only hold closed breaks")
        return self

    @classmethod
    def new(cls, start: datetime) -> "Session":
        return cls(start=start)

    def finish(self, end: datetime) -> None:
        self.end = end

    def add_break(self, closed_break: Break) -> None:
        if closed_break.is_active():
            raise InvalidStateError("Only finished breaks can be added to a session")
        self.breaks.append(closed_break)

    def duration(self) -> timedelta | None:
        if self.end is None:
            return None
        return self.end - self.start

    def total_break_time(self) -> timedelta:
        total = timedelta()
        for item in self.breaks:
            total += item.duration() or timedelta()
        return total

    def work_time(self) -> timedelta | None:
        """Session duration minus break time; ``None`` while the session is open."""

        duration = self.duration()
        if duration is None:
            return None
        return duration - self.total_break_time()

    def is_active(self) -> bool:
        return self.end is None


__all__ = ["Break", "Session"]
