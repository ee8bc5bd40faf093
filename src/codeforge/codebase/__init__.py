"""Codebase snapshots that seed each workflow run's context."""

from .snapshot import (
    CODE_EXTENSIONS,
    IGNORED_DIRS,
    FileSystemSnapshotProvider,
    SnapshotProvider,
    StaticSnapshotProvider,
)

__all__ = [
    "CODE_EXTENSIONS",
    "IGNORED_DIRS",
    "FileSystemSnapshotProvider",
    "SnapshotProvider",
    "StaticSnapshotProvider",
]
