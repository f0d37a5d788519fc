"""Command-line entry point for clock-me."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import timedelta
from pathlib import Path

from pydantic import ValidationError

from . import __version__
from .clock import SystemClock
from .config import ClockMeSettings, get_settings, resolve_data_dir
from .errors import ClockMeError, InvalidStateError
from .models import ProjectState, Session
from .service import SessionService, StatusInfo
from .storage import FileRepository
from .validators import format_duration, parse_duration

RULE = "━" * 40

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    """Configure root logging for the command line."""

    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format="[%(asctime)s] [%(levelname)s] %(name)s: %(message)s",
        stream=sys.stderr,
    )


def build_service(settings: ClockMeSettings, *, discover: bool = True) -> SessionService:
    data_dir = resolve_data_dir(settings, Path.cwd(), discover=discover)
    repository = FileRepository(data_dir, store_format=settings.store_format)
    logger.debug("Using project store", extra={"data_dir": str(data_dir)})
    return SessionService(repository, SystemClock())


def _hours(delta: timedelta) -> float:
    return int(delta.total_seconds() // 60) / 60.0


def cmd_init(args: argparse.Namespace, service: SessionService) -> None:
    name = args.name
    if name is None:
        print("Enter project name: ", end="", flush=True)
        name = sys.stdin.readline().strip()

    service.init_project(name)
    print("✓ Project initialized successfully!")
    print("You can now use 'clock-me start' to start tracking time.")


def cmd_start(args: argparse.Namespace, service: SessionService) -> None:
    project = service.start_session()
    session = project.current_session
    if session is None:
        raise InvalidStateError("Not clocked in. Use 'clock-me start' first.")

    if session.breaks and not project.is_on_break():
        print(f"✓ Break ended, continuing work on: {project.name}")
        last_break = session.breaks[-1].duration()
        if last_break is not None:
            print(f"Break duration: {format_duration(last_break)}")
        total_break = session.total_break_time()
        if total_break >= timedelta(minutes=1):
            print(f"Total break time this session: {format_duration(total_break)}")
        return

    print(f"✓ Clocked in to project: {project.name}")
    print(f"Started tracking time at {session.start:%H:%M:%S}")


def cmd_resume(args: argparse.Namespace, service: SessionService) -> None:
    project, duration = service.resume()
    print(f"✓ Break ended, continuing work on: {project.name}")
    print(f"Break duration: {format_duration(duration)}")


def cmd_stop(args: argparse.Namespace, service: SessionService) -> None:
    project, work_time = service.end_session()
    print(f"✓ Clocked out from project: {project.name}")
    print(f"Session work time: {format_duration(work_time)}")
    print(f"  ({_hours(work_time):.2f} hours)")

    if project.sessions:
        last_session = project.sessions[-1]
        break_time = last_session.total_break_time()
        if break_time >= timedelta(minutes=1):
            print(f"Break time: {format_duration(break_time)}")
            print(f"  (Breaks taken: {len(last_session.breaks)})")


def cmd_break(args: argparse.Namespace, service: SessionService) -> None:
    project, work_before = service.start_break()
    print(f"✓ Break started for project: {project.name}")
    print(f"Work time before break: {format_duration(work_before)}")

    if project.current_session is not None:
        previous = project.current_session.total_break_time()
        if previous >= timedelta(minutes=1):
            print(f"Previous breaks this session: {format_duration(previous)}")

    print("\nUse 'clock-me start' to continue working")


def _render_current(status: StatusInfo, session: Session) -> None:
    break_time = session.total_break_time()

    if status.state is ProjectState.ON_BREAK and status.current_break_start is not None:
        print("Status: On BREAK")
        print(f"Break started at: {status.current_break_start:%H:%M:%S}")
        elapsed = status.current_time - status.current_break_start
        print(f"Current break duration: {format_duration(elapsed)}")
        if break_time >= timedelta(minutes=1):
            print(f"Previous breaks this session: {format_duration(break_time)}")
        return

    print("Status: Clocked IN")
    print(f"Started at: {session.start:%Y-%m-%d %H:%M:%S}")
    print(f"Working for: {format_duration(status.session_work_time or timedelta())}")
    if break_time >= timedelta(minutes=1):
        print(
            f"Break time this session: {format_duration(break_time)} "
            f"({len(session.breaks)} breaks)"
        )


def _render_last(status: StatusInfo) -> None:
    print("Status: Clocked OUT")
    last = status.last_session
    if last is None:
        return

    print("\nLast session:")
    print(f"  Started: {last.start:%Y-%m-%d %H:%M:%S}")
    work_time = last.work_time()
    if last.end is None or work_time is None:
        return
    print(f"  Ended: {last.end:%Y-%m-%d %H:%M:%S}")
    print(f"  Work time: {format_duration(work_time)}")
    break_time = last.total_break_time()
    if break_time >= timedelta(minutes=1):
        print(f"  Break time: {format_duration(break_time)} ({len(last.breaks)} breaks)")


def render_status(status: StatusInfo, target: timedelta | None = None) -> None:
    print(RULE)
    print(f"Project: {status.project_name}")

    if status.current_session is not None:
        _render_current(status, status.current_session)
    else:
        _render_last(status)

    today = status.today
    print("\nToday's Summary:")
    print(f"  Work time: {format_duration(today.work_time)}")
    if today.break_time >= timedelta(minutes=1):
        print(f"  Break time: {format_duration(today.break_time)}")
    print(f"  Sessions: {today.sessions}")
    if today.breaks:
        print(f"  Breaks: {today.breaks}")
    if target is not None:
        remaining = target - today.work_time
        if remaining > timedelta():
            print(f"  Target: {format_duration(target)} ({format_duration(remaining)} remaining)")
        else:
            print(f"  Target: {format_duration(target)} (reached)")

    total = status.all_time
    print("\nTotal (all time):")
    print(f"  Work time: {format_duration(total.work_time)}")
    if total.break_time >= timedelta(minutes=1):
        print(f"  Break time: {format_duration(total.break_time)}")
    print(f"  Sessions: {status.total_sessions}")
    print(RULE)


def cmd_status(args: argparse.Namespace, service: SessionService) -> None:
    status = service.get_status()
    target = parse_duration(args.target) if args.target else args.default_target

    if args.json:
        payload = status.to_dict()
        if target is not None:
            payload["today"]["target_seconds"] = int(target.total_seconds())
        print(json.dumps(payload, indent=2))
        return

    render_status(status, target)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="clock-me", description="A simple CLI time tracker")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="cmd")

    p_init = sub.add_parser("init", help="Initialize a new project")
    p_init.add_argument("-n", "--name", help="Project name (prompted when omitted)")
    p_init.set_defaults(func=cmd_init)

    p_start = sub.add_parser("start", aliases=["now"], help="Clock in (or continue from break)")
    p_start.set_defaults(func=cmd_start)

    p_stop = sub.add_parser("stop", aliases=["out"], help="Clock out")
    p_stop.set_defaults(func=cmd_stop)

    p_break = sub.add_parser("break", help="Take a break")
    p_break.set_defaults(func=cmd_break)

    p_resume = sub.add_parser("resume", help="End the current break")
    p_resume.set_defaults(func=cmd_resume)

    p_status = sub.add_parser("status", help="Show current tracking status")
    p_status.add_argument("--json", action="store_true", help="Output JSON")
    p_status.add_argument(
        "--target",
        default=None,
        help="Daily work target such as '8h' or '7h 30m'",
    )
    p_status.set_defaults(func=cmd_status)

    return parser


def main(argv: list[str] | None = None, *, service: SessionService | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 0

    try:
        settings = get_settings()
        configure_logging("DEBUG" if args.verbose else settings.log_level)
        args.default_target = settings.daily_target
        if service is None:
            service = build_service(settings, discover=args.func is not cmd_init)
        args.func(args, service)
    except ValidationError as exc:
        print(f"Error: invalid configuration: {exc}", file=sys.stderr)
        return 1
    except ClockMeError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


__all__ = ["build_parser", "build_service", "configure_logging", "main", "render_status"]
