"""Committing and pushing changes."""

from __future__ import annotations

import os
import subprocess
from collections.abc import Iterable
from pathlib import Path

from doplan.git_branches import GitError

AUTHOR_NAME = "DoPlan"
AUTHOR_EMAIL = "doplan@example.com"


def _git(repo_path: Path, *args: str) -> subprocess.CompletedProcess[str]:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=repo_path,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as err:
        raise GitError(str(err)) from err


def _checked(proc: subprocess.CompletedProcess[str]) -> str:
    if proc.returncode != 0:
        raise GitError(proc.stdout.strip() or f"exit status {proc.returncode}")
    return proc.stdout


def format_commit_message(commit_type: str, scope: str, description: str) -> str:
    """Format a conventional-commit style message, parts joined by spaces."""
    parts = []
    if commit_type:
        parts.append(commit_type)
    if scope:
        parts.append(f"({scope})")
    if parts:
        parts.append(":")
    if description:
        parts.append(description)
    return " ".join(parts)


class CommitManager:
    """Commits files and pushes branches of a local repository."""

    def __init__(self, repo_path: str | os.PathLike[str]) -> None:
        self.repo_path = Path(repo_path)
        if not (self.repo_path / ".git").exists():
            raise GitError(f"failed to open repository: no git repository at {self.repo_path}")

    def commit_files(self, message: str, paths: Iterable[str]) -> None:
        """Stage the given paths and commit them as the DoPlan author."""
        for path in paths:
            try:
                _checked(_git(self.repo_path, "add", "--", path))
            except GitError as err:
                raise GitError(f"failed to add file {path}: {err}") from err
        try:
            _checked(
                _git(
                    self.repo_path,
                    "-c", f"user.name={AUTHOR_NAME}",
                    "-c", f"user.email={AUTHOR_EMAIL}",
                    "-c", "commit.gpgsign=false",
                    "commit", "-q", "-m", message,
                )
            )
        except GitError as err:
            raise GitError(f"failed to commit: {err}") from err

    def push_branch(self, branch_name: str) -> None:
        """Push a branch to ``origin``."""
        proc = _git(self.repo_path, "push", "origin", branch_name)
        if proc.returncode != 0:
            raise GitError(
                f"failed to push branch: exit status {proc.returncode}, output: {proc.stdout}"
            )

    def auto_commit_and_push(self, message: str, paths: Iterable[str]) -> None:
        """Commit the paths on the current branch and push it."""
        try:
            branch = _checked(_git(self.repo_path, "rev-parse", "--abbrev-ref", "HEAD")).strip()
        except GitError as err:
            raise GitError(f"failed to get HEAD: {err}") from err
        self.commit_files(message, paths)
        self.push_branch(branch)