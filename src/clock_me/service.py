"""Session orchestration: load the project, apply a transition, save it back."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from .clock import Clock
from .errors import AlreadyInitializedError, InvalidStateError, NotInitializedError, ProjectNotFoundError
from .models import Project, ProjectState, Session
from .storage import ProjectRepository
from .validators import validate_project_name

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class WindowTotals:
    """Aggregated work and break figures over a time window."""

    work_time: timedelta = field(default_factory=timedelta)
    break_time: timedelta = field(default_factory=timedelta)
    sessions: int = 0
    breaks: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "work_seconds": int(self.work_time.total_seconds()),
            "break_seconds": int(self.break_time.total_seconds()),
            "sessions": self.sessions,
            "breaks": self.breaks,
        }


@dataclass(slots=True)
class StatusInfo:
    """Read-only snapshot returned by :meth:`SessionService.get_status`."""

    project_name: str
    state: ProjectState
    current_session: Session | None
    current_break_start: datetime | None
    last_session: Session | None
    total_sessions: int
    current_time: datetime
    today: WindowTotals
    all_time: WindowTotals

    @property
    def session_work_time(self) -> timedelta | None:
        """Live work time of the open session, if any."""

        if self.current_session is None:
            return None
        return _live_totals(self.current_session, self.current_break_start, self.current_time)[0]

    def to_dict(self) -> dict[str, Any]:
        return {
            "project": self.project_name,
            "state": self.state.value,
            "current_time": self.current_time.isoformat(),
            "current_session": self.current_session.model_dump(mode="json")
            if self.current_session
            else None,
            "current_break_start": self.current_break_start.isoformat()
            if self.current_break_start
            else None,
            "last_session": self.last_session.model_dump(mode="json") if self.last_session else None,
            "total_sessions": self.total_sessions,
            "today": self.today.to_dict(),
            "all_time": self.all_time.to_dict(),
        }


def _live_totals(
    session: Session,
    break_start: datetime | None,
    now: datetime,
) -> tuple[timedelta, timedelta]:
    """Return (work, break) time for an open session as of ``now``."""

    elapsed = now - session.start
    closed_breaks = session.total_break_time()
    open_break = now - break_start if break_start is not None else timedelta()
    return elapsed - closed_breaks - open_break, closed_breaks + open_break


class SessionService:
    """Sequence clock-in, break and clock-out commands over a persisted project.

    The service keeps no state between calls; every operation loads the
    record, asks the clock for a single ``now`` and saves the result.
    """

    def __init__(self, repository: ProjectRepository, clock: Clock) -> None:
        self._repository = repository
        self._clock = clock

    def _load(self) -> Project:
        try:
            project = self._repository.load()
        except ProjectNotFoundError as exc:
            raise NotInitializedError() from exc
        logger.debug("Project loaded", extra={"project": project.name, "state": project.state.value})
        return project

    def init_project(self, name: str) -> Project:
        validate_project_name(name)

        try:
            self._repository.load()
        except ProjectNotFoundError:
            pass
        else:
            raise AlreadyInitializedError(
                "Project already initialized in this directory. "
                "Use a different directory or delete the .clockme folder."
            )

        project = Project.new(name)
        self._repository.save(project)
        logger.info("Project initialized", extra={"project": project.name})
        return project

    def start_session(self) -> Project:
        """Clock in, or resume work when the project is on a break."""

        project = self._load()
        state = project.state

        if state is ProjectState.WORKING:
            raise InvalidStateError("Already clocked in. Use 'clock-me stop' first.")

        now = self._clock.now()
        if state is ProjectState.ON_BREAK:
            duration = project.end_break(now)
            self._repository.save(project)
            logger.info(
                "Break ended",
                extra={"project": project.name, "break_seconds": int(duration.total_seconds())},
            )
            return project

        project.start_session(now)
        self._repository.save(project)
        logger.info("Clocked in", extra={"project": project.name, "started_at": now.isoformat()})
        return project

    def end_session(self) -> tuple[Project, timedelta]:
        project = self._load()

        if project.state is ProjectState.IDLE:
            raise InvalidStateError("Not clocked in. Use 'clock-me start' first.")

        now = self._clock.now()
        work_time = project.end_session(now)
        self._repository.save(project)
        logger.info(
            "Clocked out",
            extra={"project": project.name, "work_seconds": int(work_time.total_seconds())},
        )
        return project, work_time

    def start_break(self) -> tuple[Project, timedelta]:
        """Open a break and return the work time accrued in the session before it."""

        project = self._load()
        now = self._clock.now()
        project.start_break(now)

        session = project.current_session
        work_before = (
            now - session.start - session.total_break_time() if session is not None else timedelta()
        )

        self._repository.save(project)
        logger.info("Break started", extra={"project": project.name, "started_at": now.isoformat()})
        return project, work_before

    def resume(self) -> tuple[Project, timedelta]:
        """End the open break and return its duration."""

        project = self._load()

        if project.state is not ProjectState.ON_BREAK:
            raise InvalidStateError("Not on break. Use 'clock-me break' first.")

        now = self._clock.now()
        duration = project.end_break(now)
        self._repository.save(project)
        logger.info(
            "Break ended",
            extra={"project": project.name, "break_seconds": int(duration.total_seconds())},
        )
        return project, duration

    def get_status(self) -> StatusInfo:
        project = self._load()
        now = self._clock.now()

        today_start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        break_start = project.current_break.start if project.current_break else None

        today = WindowTotals()
        all_time = WindowTotals(
            work_time=project.total_work_time(),
            break_time=project.total_break_time(),
            sessions=len(project.sessions),
            breaks=sum(len(session.breaks) for session in project.sessions),
        )

        for session in project.sessions:
            if session.start < today_start:
                continue
            today.sessions += 1
            today.work_time += session.work_time() or timedelta()
            today.break_time += session.total_break_time()
            today.breaks += len(session.breaks)

        current = project.current_session
        if current is not None:
            live_work, live_break = _live_totals(current, break_start, now)
            live_breaks = len(current.breaks) + (1 if break_start is not None else 0)

            windows = [all_time]
            if current.start >= today_start:
                windows.append(today)
            for window in windows:
                window.sessions += 1
                window.work_time += live_work
                window.break_time += live_break
                window.breaks += live_breaks

        return StatusInfo(
            project_name=project.name,
            state=project.state,
            current_session=current,
            current_break_start=break_start,
            last_session=project.sessions[-1] if project.sessions else None,
            total_sessions=len(project.sessions),
            current_time=now,
            today=today,
            all_time=all_time,
        )


__all__ = ["SessionService", "StatusInfo", "WindowTotals"]
