"""Input validation and duration parsing helpers."""

from __future__ import annotations

import re
from datetime import timedelta

from .errors import InvalidInputError

MAX_NAME_LENGTH = 50

_NAME_PATTERN = re.compile(r"^[a-zA-Z0-9][a-zA-Z0-9_-]*$")
# Optional decimal hours, optional whitespace, optional integer minutes.
_DURATION_PATTERN = re.compile(r"^(?:(\d+(?:\.\d+)?)h)?\s*(?:(\d+)m)?$")
_DURATION_HINT = "Use format like '2h 30m', '1.5h', '1h', or '45m'"


def validate_project_name(name: str) -> str:
    """Return ``name`` unchanged if it is a usable project name."""

    if not name:
        raise InvalidInputError("Project name cannot be empty")

    if len(name) > MAX_NAME_LENGTH:
        raise InvalidInputError(f"Project name must be {MAX_NAME_LENGTH} characters or less")

    if not _NAME_PATTERN.match(name):
        raise InvalidInputError(
            "Project name must start with a letter or number and can only contain "
            "letters, numbers, hyphens, and underscores"
        )

    return name


def parse_duration(text: str) -> timedelta:
    """Parse strings such as ``"2h 30m"``, ``"2h30m"``, ``"1.5h"`` or ``"45m"``.

    Matching is case-insensitive. Minutes must be whole numbers, and the
    fractional minutes produced by decimal hours are truncated. A duration
    that totals zero is rejected.
    """

    normalized = (text or "").strip().lower()
    if not normalized:
        raise InvalidInputError("Duration cannot be empty")

    match = _DURATION_PATTERN.match(normalized)
    if match is None:
        raise InvalidInputError(f"Invalid duration format. {_DURATION_HINT}")

    hours_raw, minutes_raw = match.groups()
    hours = float(hours_raw) if hours_raw else 0.0
    minutes = int(minutes_raw) if minutes_raw else 0

    if hours == 0.0 and minutes == 0:
        raise InvalidInputError(f"Invalid duration format. {_DURATION_HINT}")

    total_minutes = int(hours * 60) + minutes
    if total_minutes <= 0:
        raise InvalidInputError("Duration must be positive")

    return timedelta(minutes=total_minutes)


def format_duration(delta: timedelta) -> str:
    """Render whole minutes as ``"2h 30m"``, ``"2h"`` or ``"45m"``."""

    total_minutes = int(delta.total_seconds() / 60)
    sign = "-" if total_minutes < 0 else ""
    hours, minutes = divmod(abs(total_minutes), 60)

    if hours and minutes:
        return f"{sign}{hours}h {minutes}m"
    if hours:
        return f"{sign}{hours}h"
    return f"{sign}{minutes}m"


__all__ = ["MAX_NAME_LENGTH", "format_duration", "parse_duration", "validate_project_name"]
