from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
import io
import json

import pytest

from clock_me import __version__
from clock_me.cli import main
from clock_me.clock import FixedClock
from clock_me.config import get_settings
from clock_me.service import SessionService
from clock_me.models import Project
from clock_me.storage import InMemoryRepository

TZ = timezone.utc


def at(hour: int, minute: int = 0, *, day: int = 13) -> datetime:
    return datetime(2025, 10, day, hour, minute, tzinfo=TZ)


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    for key in ("CLOCKME_DATA_DIR", "CLOCKME_STORE_FORMAT", "CLOCKME_DAILY_TARGET", "CLOCKME_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(at(9))


@pytest.fixture
def service(clock: FixedClock) -> SessionService:
    return SessionService(InMemoryRepository(), clock)


def run(service: SessionService, *argv: str) -> int:
    return main(list(argv), service=service)


def test_init_with_name(service, capsys) -> None:
    assert run(service, "init", "--name", "demo") == 0
    assert "Project initialized successfully" in capsys.readouterr().out


def test_init_prompts_for_name(service, capsys, monkeypatch) -> None:
    monkeypatch.setattr("sys.stdin", io.StringIO("prompted\n"))

    assert run(service, "init") == 0
    out = capsys.readouterr().out
    assert "Enter project name:" in out
    assert service.get_status().project_name == "prompted"


def test_init_rejects_invalid_name(service, capsys) -> None:
    assert run(service, "init", "--name", "bad name") == 1
    assert "must start with a letter" in capsys.readouterr().err


def test_commands_before_init_fail(service, capsys) -> None:
    for command in ("start", "stop", "break", "status"):
        assert run(service, command) == 1
        captured = capsys.readouterr()
        assert "No project found" in captured.err
        assert captured.out == ""


def test_work_day_flow(service, clock, capsys) -> None:
    run(service, "init", "--name", "demo")
    capsys.readouterr()

    assert run(service, "now") == 0
    assert "Clocked in to project: demo" in capsys.readouterr().out

    clock.set(at(12))
    assert run(service, "break") == 0
    out = capsys.readouterr().out
    assert "Break started for project: demo" in out
    assert "Work time before break: 3h" in out

    clock.set(at(12, 30))
    assert run(service, "start") == 0
    out = capsys.readouterr().out
    assert "Break ended, continuing work on: demo" in out
    assert "Break duration: 30m" in out

    clock.set(at(17))
    assert run(service, "out") == 0
    out = capsys.readouterr().out
    assert "Session work time: 7h 30m" in out
    assert "(7.50 hours)" in out
    assert "Breaks taken: 1" in out


def test_double_clock_in_reports_error(service, capsys) -> None:
    run(service, "init", "--name", "demo")
    run(service, "start")
    capsys.readouterr()

    assert run(service, "start") == 1
    assert "Already clocked in" in capsys.readouterr().err


def test_resume_command(service, clock, capsys) -> None:
    run(service, "init", "--name", "demo")
    run(service, "start")
    assert run(service, "resume") == 1
    assert "Not on break" in capsys.readouterr().err

    clock.set(at(10))
    run(service, "break")
    clock.set(at(10, 10))
    capsys.readouterr()
    assert run(service, "resume") == 0
    assert "Break duration: 10m" in capsys.readouterr().out


def test_status_text(service, clock, capsys) -> None:
    run(service, "init", "--name", "demo")
    run(service, "start")
    clock.set(at(11, 15))
    capsys.readouterr()

    assert run(service, "status", "--target", "8h") == 0
    out = capsys.readouterr().out
    assert "Project: demo" in out
    assert "Status: Clocked IN" in out
    assert "Working for: 2h 15m" in out
    assert "Target: 8h (5h 45m remaining)" in out


def test_status_on_break(service, clock, capsys) -> None:
    run(service, "init", "--name", "demo")
    run(service, "start")
    clock.set(at(12))
    run(service, "break")
    clock.set(at(12, 20))
    capsys.readouterr()

    assert run(service, "status") == 0
    out = capsys.readouterr().out
    assert "Status: On BREAK" in out
    assert "Current break duration: 20m" in out


def test_status_json_uses_daily_target_setting(service, clock, capsys, monkeypatch) -> None:
    monkeypatch.setenv("CLOCKME_DAILY_TARGET", "1h")
    run(service, "init", "--name", "demo")
    run(service, "start")
    clock.set(at(10))
    run(service, "stop")
    capsys.readouterr()

    assert run(service, "status", "--json") == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["state"] == "idle"
    assert payload["total_sessions"] == 1
    assert payload["today"]["work_seconds"] == 3600
    assert payload["today"]["target_seconds"] == 3600
    assert payload["last_session"]["end"].startswith("2025-10-13T10:00:00")


def test_invalid_target_reports_error(service, capsys) -> None:
    run(service, "init", "--name", "demo")
    capsys.readouterr()

    assert run(service, "status", "--target", "2.5m") == 1
    assert "Invalid duration format" in capsys.readouterr().err


def test_invalid_configuration_reports_error(service, capsys, monkeypatch) -> None:
    monkeypatch.setenv("CLOCKME_STORE_FORMAT", "xml")

    assert run(service, "status") == 1
    assert "invalid configuration" in capsys.readouterr().err


def test_file_backed_round_trip(tmp_path, capsys, monkeypatch) -> None:
    monkeypatch.setenv("CLOCKME_DATA_DIR", str(tmp_path / "store"))

    assert main(["init", "--name", "file-demo"]) == 0
    assert main(["start"]) == 0
    assert main(["status"]) == 0

    out = capsys.readouterr().out
    assert "Project: file-demo" in out
    record = json.loads((tmp_path / "store" / "data.json").read_text(encoding="utf-8"))
    assert record["name"] == "file-demo"
    assert record["current_session"] is not None


def test_init_uses_working_directory(tmp_path, monkeypatch) -> None:
    (tmp_path / ".clockme").mkdir()
    child = tmp_path / "child"
    child.mkdir()
    monkeypatch.chdir(child)

    assert main(["init", "--name", "nested"]) == 0
    assert (child / ".clockme" / "data.json").is_file()


def test_no_command_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "usage: clock-me" in capsys.readouterr().out


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as excinfo:
        main(["--version"])
    assert excinfo.value.code == 0
    assert __version__ in capsys.readouterr().out


class IdleStartService(SessionService):
    def start_session(self) -> Project:
        return Project.new("demo")


def test_start_reports_error_when_no_session_opened(clock, capsys) -> None:
    service = IdleStartService(InMemoryRepository(), clock)

    assert run(service, "start") == 1
    captured = capsys.readouterr()
    assert "Not clocked in" in captured.err
    assert captured.out == ""


def test_status_while_working_renders_session(service, clock, capsys) -> None:
    run(service, "init", "--name", "demo")
    run(service, "start")
    clock.set(at(10, 15))
    capsys.readouterr()

    assert run(service, "status") == 0
    out = capsys.readouterr().out
    assert "Status: Clocked IN" in out
    assert "1h 15m" in out
