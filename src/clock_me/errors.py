"""Exception hierarchy for clock-me."""

from __future__ import annotations


class ClockMeError(RuntimeError):
    """Base class for every error surfaced to the command line."""


class NotInitializedError(ClockMeError):
    """Raised when no project record exists for the working directory."""

    def __init__(self, message: str = "No project found. Run 'clock-me init' first.") -> None:
        super().__init__(message)


class AlreadyInitializedError(ClockMeError):
    """Raised when ``init`` runs where a project record already exists."""


class InvalidStateError(ClockMeError):
    """Raised when an operation is not allowed from the current tracking state."""


class InvalidInputError(ClockMeError):
    """Raised when a project name or duration string fails validation."""


class PersistenceError(ClockMeError):
    """Base class for failures reading or writing the project record."""


class ProjectNotFoundError(PersistenceError):
    """Raised by a repository when no record has been stored yet."""


class ProjectParseError(PersistenceError):
    """Raised when a stored record cannot be decoded or validated."""


class ProjectSaveError(PersistenceError):
    """Raised when a record cannot be encoded or written."""


__all__ = [
    "AlreadyInitializedError",
    "ClockMeError",
    "InvalidInputError",
    "InvalidStateError",
    "NotInitializedError",
    "PersistenceError",
    "ProjectNotFoundError",
    "ProjectParseError",
    "ProjectSaveError",
]
