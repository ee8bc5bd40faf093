"""Post-run side-effect hooks."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

logger = logging.getLogger(__name__)


class PublishHook(ABC):
    """Commits and publishes the changes a completed run produced.

    ``repo_dir`` is the run's codebase directory; hooks act on that tree
    rather than on the process working directory.
    """

    @abstractmethod
    def commit(self, message: str, repo_dir: str | Path | None = None) -> None:
        """Record the current changes under ``message``."""

    @abstractmethod
    def push(self, repo_dir: str | Path | None = None) -> None:
        """Publish recorded changes."""


class NullHook(PublishHook):
    """Hook that does nothing."""

    def commit(self, message: str, repo_dir: str | Path | None = None) -> None:
        logger.debug("NullHook: skipping commit %r", message)

    def push(self, repo_dir: str | Path | None = None) -> None:
        logger.debug("NullHook: skipping push")
