"""Codebase snapshot providers.

A snapshot is the set of source files under a root directory, keyed by
their path relative to the root. No parsing is done here.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

from codeforge.validation.code_validator import CODE_EXTENSIONS
from codeforge.workers.base import CodebaseSnapshot

logger = logging.getLogger(__name__)

IGNORED_DIRS = frozenset(
    {"node_modules", ".git", "dist", "build", "coverage", "__pycache__", ".venv", "venv"}
)


class SnapshotProvider(ABC):
    """Builds the codebase snapshot for a run."""

    @abstractmethod
    def analyze(self, root_dir: str) -> CodebaseSnapshot:
        """Snapshot the codebase under root_dir."""


class FileSystemSnapshotProvider(SnapshotProvider):
    """Reads source files from disk."""

    def __init__(
        self,
        extensions: frozenset[str] = CODE_EXTENSIONS,
        ignored_dirs: frozenset[str] = IGNORED_DIRS,
        max_file_bytes: int = 1024 * 1024,
    ):
        self.extensions = extensions
        self.ignored_dirs = ignored_dirs
        self.max_file_bytes = max_file_bytes

    def analyze(self, root_dir: str) -> CodebaseSnapshot:
        root = Path(root_dir)
        files: dict[str, str] = {}
        logger.info("Analyzing codebase in %s", root)

        if not root.is_dir():
            logger.warning("Codebase directory %s does not exist", root)
            return CodebaseSnapshot(root_dir=str(root), files=files)

        for path in self._iter_code_files(root):
            try:
                if path.stat().st_size > self.max_file_bytes:
                    logger.debug("Skipping large file %s", path)
                    continue
                files[path.relative_to(root).as_posix()] = path.read_text(encoding="utf-8")
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("Failed to read file %s: %s", path, e)

        logger.info("Analyzed %d files", len(files))
        return CodebaseSnapshot(root_dir=str(root), files=files)

    def _iter_code_files(self, root: Path):
        for dirpath, dirnames, filenames in os.walk(root):
            dirnames[:] = sorted(d for d in dirnames if d not in self.ignored_dirs)
            for filename in sorted(filenames):
                if filename.endswith(".min.js"):
                    continue
                if Path(filename).suffix.lower() in self.extensions:
                    yield Path(dirpath) / filename


class StaticSnapshotProvider(SnapshotProvider):
    """Returns a fixed set of files for every run."""

    def __init__(self, files: dict[str, str] | None = None):
        self.files = dict(files or {})

    def analyze(self, root_dir: str) -> CodebaseSnapshot:
        return CodebaseSnapshot(root_dir=str(root_dir), files=dict(self.files))
