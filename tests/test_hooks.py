"""Tests for the publish hooks."""

import subprocess
from unittest.mock import patch

import pytest

from codeforge.errors import HookError
from codeforge.hooks import GitPublishHook, NullHook


def completed(args, returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(args, returncode, stdout=stdout, stderr=stderr)


class FakeGit:
    """Answers git invocations from a table keyed by subcommand."""

    def __init__(self, answers=None):
        self.answers = answers or {}
        self.commands = []

    def __call__(self, args, **kwargs):
        self.commands.append(args[1:])
        return self.answers.get(args[1], completed(args))


class TestGitPublishHook:
    """Commit and push through the git CLI."""

    def test_commit_stages_and_commits(self, tmp_path):
        git = FakeGit({"status": completed(["git"], stdout=" M app.py\n")})
        hook = GitPublishHook(repo_dir=tmp_path)

        with patch("codeforge.hooks.git.subprocess.run", side_effect=git) as run:
            hook.commit("CodeForge: Run workflow Bug Fixing")

        assert git.commands == [
            ["status", "--porcelain"],
            ["add", "."],
            ["commit", "-m", "CodeForge: Run workflow Bug Fixing"],
        ]
        assert run.call_args.kwargs["cwd"] == tmp_path

    def test_call_repo_dir_overrides_default(self, tmp_path):
        git = FakeGit(
            {
                "status": completed(["git"], stdout="?? new.py\n"),
                "rev-parse": completed(["git"], stdout="main\n"),
            }
        )
        hook = GitPublishHook(repo_dir="/elsewhere")

        with patch("codeforge.hooks.git.subprocess.run", side_effect=git) as run:
            hook.commit("msg", repo_dir=str(tmp_path))
            hook.push(repo_dir=str(tmp_path))

        assert {call.kwargs["cwd"] for call in run.call_args_list} == {tmp_path}
        assert git.commands[-1] == ["push", "origin", "main"]

    def test_commit_clean_tree_is_noop(self):
        git = FakeGit()

        with patch("codeforge.hooks.git.subprocess.run", side_effect=git):
            GitPublishHook().commit("nothing")

        assert git.commands == [["status", "--porcelain"]]

    def test_push_current_branch(self):
        git = FakeGit({"rev-parse": completed(["git"], stdout="feature/x\n")})

        with patch("codeforge.hooks.git.subprocess.run", side_effect=git):
            GitPublishHook(remote="upstream").push()

        assert git.commands[-1] == ["push", "upstream", "feature/x"]

    def test_failed_command_raises(self):
        git = FakeGit(
            {
                "status": completed(["git"], stdout="?? new.py"),
                "commit": completed(["git"], returncode=1, stderr="author identity unknown"),
            }
        )

        with patch("codeforge.hooks.git.subprocess.run", side_effect=git):
            with pytest.raises(HookError, match="Failed to commit changes: author identity"):
                GitPublishHook().commit("msg")

    def test_missing_git_binary(self):
        with patch("codeforge.hooks.git.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(HookError, match="Failed to get git status"):
                GitPublishHook().status()

    def test_is_repository(self):
        with patch(
            "codeforge.hooks.git.subprocess.run",
            return_value=completed(["git"], returncode=128, stderr="not a git repository"),
        ):
            assert not GitPublishHook().is_repository()


class TestNullHook:
    """No-op hook."""

    def test_does_nothing(self):
        hook = NullHook()

        hook.commit("msg")
        hook.push()
