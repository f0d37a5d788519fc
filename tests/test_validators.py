from datetime import timedelta

import pytest

from clock_me.errors import InvalidInputError
from clock_me.validators import format_duration, parse_duration, validate_project_name


@pytest.mark.parametrize(
    "name",
    ["my-project", "project_123", "MyProject", "project1", "a", "Project-Name_123", "a" * 50],
)
def test_valid_project_names(name: str) -> None:
    assert validate_project_name(name) == name


@pytest.mark.parametrize(
    "name",
    ["", "my project", "project@home", "project!", "project.name", "-project", "_project", "a" * 51],
)
def test_invalid_project_names(name: str) -> None:
    with pytest.raises(InvalidInputError):
        validate_project_name(name)


def test_project_name_error_messages() -> None:
    with pytest.raises(InvalidInputError, match="cannot be empty"):
        validate_project_name("")
    with pytest.raises(InvalidInputError, match="must start with a letter"):
        validate_project_name("my project")
    with pytest.raises(InvalidInputError, match="50 characters"):
        validate_project_name("a" * 51)


@pytest.mark.parametrize(
    ("text", "minutes"),
    [
        ("2h", 120),
        ("30m", 30),
        ("2h30m", 150),
        ("2h 30m", 150),
        ("1h  15m", 75),
        ("1.5h", 90),
        ("2.25h", 135),
        ("0.5h", 30),
        ("2H 30M", 150),
        ("  2h 30m  ", 150),
    ],
)
def test_parse_duration(text: str, minutes: int) -> None:
    assert parse_duration(text) == timedelta(minutes=minutes)


@pytest.mark.parametrize(
    "text",
    ["", "   ", "abc", "2x", "2h30", "h30m", "2.5m", "0h", "0m", "0h 0m", "0.001h"],
)
def test_parse_duration_rejects(text: str) -> None:
    with pytest.raises(InvalidInputError):
        parse_duration(text)


def test_format_duration() -> None:
    assert format_duration(timedelta(minutes=150)) == "2h 30m"
    assert format_duration(timedelta(minutes=120)) == "2h"
    assert format_duration(timedelta(minutes=45)) == "45m"
    assert format_duration(timedelta(minutes=75)) == "1h 15m"
    assert format_duration(timedelta()) == "0m"
    assert format_duration(timedelta(minutes=5, seconds=59)) == "5m"
    assert format_duration(timedelta(minutes=-90)) == "-1h 30m"
