"""Project aggregate and its session/break state machine."""

from __future__ import annotations

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..errors import InvalidStateError
from .session import Break, Session


def _check_not_before(now: datetime, earliest: datetime, what: str) -> None:
    if now < earliest:
        raise InvalidStateError(
            f"Current time {now:%Y-%m-%d %H:%M:%S} is before the {what} "
            f"({earliest:%Y-%m-%d %H:%M:%S}); check the system clock"
        )


class ProjectState(str, Enum):
    IDLE = "idle"
    WORKING = "working"
    ON_BREAK = "on_break"


class Project(BaseModel):
    """The single tracked work item and all of its session history.

    ``current_break`` lives outside ``current_session`` until it closes, at
    which point it is folded into the session's break list. The validator
    below rejects records that pair a break with no open session, so the
    only reachable combinations are the three :class:`ProjectState` values.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., description="Validated project name.")
    current_session: Session | None = Field(default=None, description="Open session, if any.")
    current_break: Break | None = Field(default=None, description="Open break, if any.")
    sessions: list[Session] = Field(
        default_factory=list,
        description="Closed sessions, oldest first.",
    )

    @field_validator("name")
    @classmethod
    def _normalize_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Project name must not be empty")
        return normalized

    @model_validator(mode="after")
    def _check_state(self) -> "Project":
        if self.current_break is not None:
            if self.current_session is None:
                raise ValueError("A break cannot be open without an open session")
            if not self.current_break.is_active():
                raise ValueError("current_break must be an open break")
        if self.current_session is not None and not self.current_session.is_active():
            raise ValueError("current_session must be an open session")
        if any(session.is_active() for session in self.sessions):
            raise ValueError("Session history must only hold closed sessions")
        return self

    @classmethod
    def new(cls, name: str) -> "Project":
        return cls(name=name)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "Project":
        return cls.model_validate(record)

    def to_record(self) -> dict[str, Any]:
        return self.model_dump(mode="json")

    @property
    def state(self) -> ProjectState:
        if self.current_session is None:
            return ProjectState.IDLE
        if self.current_break is not None:
            return ProjectState.ON_BREAK
        return ProjectState.WORKING

    # ----- Transitions -----
    def start_session(self, now: datetime) -> None:
        self.current_session = Session.new(now)
        self.current_break = None

    def end_session(self, now: datetime) -> timedelta:
        """Close the open session and return its work time.

        An open break is closed first so its duration is kept in the history.
        """

        if self.current_session is None:
            raise InvalidStateError("No active session")

        _check_not_before(now, self.current_session.start, "session start")
        if self.current_break is not None:
            self.end_break(now)

        session = self.current_session
        session.finish(now)
        work_time = session.work_time()
        if work_time is None:
            raise InvalidStateError("Session has no duration")

        self.sessions.append(session)
        self.current_session = None
        return work_time

    def start_break(self, now: datetime) -> None:
        if self.current_session is None:
            raise InvalidStateError("Not clocked in. Use 'clock-me start' first.")
        if self.current_break is not None:
            raise InvalidStateError("Already on break. Use 'clock-me start' to continue working.")
        breaks = self.current_session.breaks
        if breaks and breaks[-1].end is not None:
            _check_not_before(now, breaks[-1].end, "end of the previous break")
        else:
            _check_not_before(now, self.current_session.start, "session start")
        self.current_break = Break.new(now)

    def end_break(self, now: datetime) -> timedelta:
        if self.current_break is None:
            raise InvalidStateError("Not on break")

        _check_not_before(now, self.current_break.start, "break start")
        break_period = self.current_break
        break_period.finish(now)
        duration = break_period.duration()
        if duration is None:
            raise InvalidStateError("Break has no duration")

        if self.current_session is not None:
            self.current_session.add_break(break_period)
        self.current_break = None
        return duration

    # ----- Queries -----
    def is_on_break(self) -> bool:
        return self.current_break is not None

    def total_work_time(self) -> timedelta:
        total = timedelta()
        for session in self.sessions:
            total += session.work_time() or timedelta()
        return total

    def total_break_time(self) -> timedelta:
        total = timedelta()
        for session in self.sessions:
            total += session.total_break_time()
        return total


__all__ = ["Project", "ProjectState"]
