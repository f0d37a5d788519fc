"""Storage abstractions for clock-me."""

from .repository import (
    DEFAULT_DIR_NAME,
    STORE_FORMATS,
    FileRepository,
    InMemoryRepository,
    ProjectRepository,
    find_data_dir,
)

__all__ = [
    "DEFAULT_DIR_NAME",
    "FileRepository",
    "InMemoryRepository",
    "ProjectRepository",
    "STORE_FORMATS",
    "find_data_dir",
]
