"""Git commit/push hook."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from codeforge.errors import HookError

from .base import PublishHook

logger = logging.getLogger(__name__)


class GitPublishHook(PublishHook):
    """Stages, commits and pushes through the git command line.

    Commands run in the ``repo_dir`` passed per call, falling back to the
    one given at construction and then to the process working directory.
    A commit on a clean working tree is a no-op.
    """

    def __init__(self, repo_dir: str | Path | None = None, remote: str = "origin"):
        self.repo_dir = Path(repo_dir) if repo_dir else None
        self.remote = remote

    def _git(self, *args: str, action: str, repo_dir: str | Path | None = None) -> str:
        cwd = Path(repo_dir) if repo_dir else self.repo_dir
        try:
            result = subprocess.run(
                ["git", *args],
                capture_output=True,
                text=True,
                cwd=cwd,
            )
        except OSError as e:
            raise HookError(f"Failed to {action}: {e}", command=["git", *args]) from e
        if result.returncode != 0:
            raise HookError(
                f"Failed to {action}: {result.stderr.strip() or result.stdout.strip()}",
                command=["git", *args],
                returncode=result.returncode,
            )
        return result.stdout.strip()

    def is_repository(self, repo_dir: str | Path | None = None) -> bool:
        try:
            self._git(
                "rev-parse", "--is-inside-work-tree", action="check repository", repo_dir=repo_dir
            )
        except HookError:
            return False
        return True

    def current_branch(self, repo_dir: str | Path | None = None) -> str:
        return self._git(
            "rev-parse", "--abbrev-ref", "HEAD", action="get current branch", repo_dir=repo_dir
        )

    def status(self, repo_dir: str | Path | None = None) -> str:
        return self._git("status", "--porcelain", action="get git status", repo_dir=repo_dir)

    def commit(self, message: str, repo_dir: str | Path | None = None) -> None:
        if not self.status(repo_dir):
            logger.info("No changes to commit")
            return
        self._git("add", ".", action="stage changes", repo_dir=repo_dir)
        self._git("commit", "-m", message, action="commit changes", repo_dir=repo_dir)
        logger.info("Committed changes: %s", message)

    def push(self, repo_dir: str | Path | None = None) -> None:
        branch = self.current_branch(repo_dir)
        self._git("push", self.remote, branch, action="push changes", repo_dir=repo_dir)
        logger.info("Pushed %s to %s", branch, self.remote)
