"""Persistence of the single project record."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Callable, Protocol

import yaml
from pydantic import ValidationError

from ..errors import ProjectNotFoundError, ProjectParseError, ProjectSaveError
from ..models import Project

logger = logging.getLogger(__name__)

DEFAULT_DIR_NAME = ".clockme"
STORE_FORMATS = ("json", "yaml")


class ProjectRepository(Protocol):
    """Minimal load/save contract consumed by the session service."""

    def load(self) -> Project:
        ...

    def save(self, project: Project) -> None:
        ...


def _dump_json(record: dict[str, Any]) -> str:
    return json.dumps(record, indent=2) + "\n"


def _dump_yaml(record: dict[str, Any]) -> str:
    return yaml.safe_dump(record, sort_keys=False, default_flow_style=False)


_ENCODERS: dict[str, Callable[[dict[str, Any]], str]] = {
    "json": _dump_json,
    "yaml": _dump_yaml,
}
_DECODERS: dict[str, Callable[[str], Any]] = {
    "json": json.loads,
    "yaml": yaml.safe_load,
}


def find_data_dir(start: Path, dirname: str = DEFAULT_DIR_NAME) -> Path:
    """Return the nearest ``dirname`` folder at or above ``start``.

    Falls back to ``start / dirname`` when no ancestor holds one.
    """

    start = Path(start).resolve()
    for candidate in (start, *start.parents):
        marker = candidate / dirname
        if marker.is_dir():
            return marker
    return start / dirname


class FileRepository:
    """Stores the project record as one JSON or YAML document on disk."""

    def __init__(self, data_dir: Path, *, store_format: str = "json") -> None:
        fmt = store_format.strip().lower()
        if fmt not in STORE_FORMATS:
            raise ValueError(f"Unsupported store format '{store_format}'")
        self._data_dir = Path(data_dir)
        self._format = fmt

    @property
    def data_dir(self) -> Path:
        return self._data_dir

    @property
    def data_file(self) -> Path:
        return self._data_dir / f"data.{self._format}"

    def load(self) -> Project:
        path = self.data_file
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError as exc:
            raise ProjectNotFoundError(
                f"No project data at {path}. Has the project been initialized?"
            ) from exc
        except UnicodeDecodeError as exc:
            raise ProjectParseError(f"Project data at {path} is not valid UTF-8: {exc}") from exc
        except OSError as exc:
            raise ProjectParseError(f"Failed to read project data at {path}: {exc}") from exc

        try:
            document = _DECODERS[self._format](content)
        except (ValueError, yaml.YAMLError) as exc:
            raise ProjectParseError(f"Failed to parse project data at {path}: {exc}") from exc

        if not isinstance(document, dict):
            raise ProjectParseError(f"Project data at {path} is not a mapping")

        try:
            project = Project.from_record(document)
        except (ValidationError, TypeError) as exc:
            raise ProjectParseError(f"Project data at {path} is invalid: {exc}") from exc

        logger.debug("Loaded project record", extra={"path": str(path), "format": self._format})
        return project

    def save(self, project: Project) -> None:
        path = self.data_file
        try:
            payload = _ENCODERS[self._format](project.to_record())
        except (TypeError, ValueError, yaml.YAMLError) as exc:
            raise ProjectSaveError(f"Failed to serialize project data: {exc}") from exc

        tmp_name: str | None = None
        try:
            self._data_dir.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._data_dir,
                prefix=".data-",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
            tmp_name = None
        except OSError as exc:
            raise ProjectSaveError(f"Failed to write project data to {path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)

        logger.debug("Saved project record", extra={"path": str(path), "format": self._format})


class InMemoryRepository:
    """Test double keeping the serialized record in memory."""

    def __init__(self, project: Project | None = None) -> None:
        self._record: dict[str, Any] | None = project.to_record() if project else None
        self.save_count = 0

    @property
    def record(self) -> dict[str, Any] | None:
        return self._record

    def load(self) -> Project:
        if self._record is None:
            raise ProjectNotFoundError("No project has been saved")
        return Project.from_record(self._record)

    def save(self, project: Project) -> None:
        self._record = project.to_record()
        self.save_count += 1


__all__ = [
    "DEFAULT_DIR_NAME",
    "FileRepository",
    "InMemoryRepository",
    "ProjectRepository",
    "STORE_FORMATS",
    "find_data_dir",
]
