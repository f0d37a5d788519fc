"""Configuration management for clock-me."""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache
from pathlib import Path
import os

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import InvalidInputError
from .storage import DEFAULT_DIR_NAME, STORE_FORMATS, find_data_dir
from .validators import parse_duration


class ClockMeSettings(BaseSettings):
    """Runtime configuration sourced from environment variables and optional .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    data_dir_name: str = Field(default=DEFAULT_DIR_NAME, validation_alias="CLOCKME_DIR_NAME")
    data_dir: Path | None = Field(default=None, validation_alias="CLOCKME_DATA_DIR")
    store_format: str = Field(default="json", validation_alias="CLOCKME_STORE_FORMAT")
    log_level: str = Field(default="WARNING", validation_alias="CLOCKME_LOG_LEVEL")
    daily_target: timedelta | None = Field(default=None, validation_alias="CLOCKME_DAILY_TARGET")

    @field_validator("data_dir_name")
    @classmethod
    def _validate_dir_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("CLOCKME_DIR_NAME must not be empty")
        if os.sep in normalized or (os.altsep and os.altsep in normalized):
            raise ValueError("CLOCKME_DIR_NAME must be a single directory name")
        return normalized

    @field_validator("data_dir", mode="before")
    @classmethod
    def _parse_data_dir(cls, value):
        if value is None or value == "":
            return None
        return value

    @field_validator("store_format")
    @classmethod
    def _normalize_store_format(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in STORE_FORMATS:
            raise ValueError("CLOCKME_STORE_FORMAT must be one of json, yaml")
        return normalized

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = value.strip().upper()
        if normalized not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(
                "CLOCKME_LOG_LEVEL must be one of CRITICAL, ERROR, WARNING, INFO, DEBUG"
            )
        return normalized

    @field_validator("daily_target", mode="before")
    @classmethod
    def _parse_daily_target(cls, value):
        if value is None or value == "":
            return None
        if isinstance(value, str):
            try:
                return parse_duration(value)
            except InvalidInputError as exc:
                raise ValueError(f"CLOCKME_DAILY_TARGET: {exc}") from exc
        return value


def resolve_data_dir(
    settings: ClockMeSettings,
    cwd: Path | None = None,
    *,
    discover: bool = True,
) -> Path:
    """Return the directory holding the project record.

    An explicit ``data_dir`` wins. Otherwise parent directories are searched
    for the marker folder when ``discover`` is set, and ``cwd`` is used as-is
    when it is not.
    """

    if settings.data_dir is not None:
        return settings.data_dir.expanduser().resolve()

    base = Path(cwd) if cwd is not None else Path.cwd()
    if discover:
        return find_data_dir(base, settings.data_dir_name)
    return base.resolve() / settings.data_dir_name


@lru_cache(maxsize=1)
def get_settings() -> ClockMeSettings:
    """Return cached settings instance."""

    return ClockMeSettings()


__all__ = ["ClockMeSettings", "get_settings", "resolve_data_dir"]
