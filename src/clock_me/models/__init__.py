"""Tracking entities: projects, sessions and breaks."""

from .project import Project, ProjectState
from .session import Break, Session

__all__ = ["Break", "Project", "ProjectState", "Session"]
