"""Git branch operations for feature work."""

from __future__ import annotations

import os
import string
import subprocess
from pathlib import Path

_BRANCH_CHARS = frozenset(string.ascii_lowercase + string.digits + "-")
_HEADS = "refs/heads/"


class GitError(RuntimeError):
    """Raised when a git operation fails."""


def _run_git(repo_path: Path, *args: str) -> str:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=repo_path,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            check=False,
        )
    except OSError as err:
        raise GitError(str(err)) from err
    if proc.returncode != 0:
        raise GitError(proc.stdout.strip() or f"git {args[0]} exited with {proc.returncode}")
    return proc.stdout


def generate_branch_name(phase_id: str, feature_id: str, feature_name: str) -> str:
    """Build ``feature/<phase>-<feature>-<kebab-case name>``."""
    name = feature_name.lower().replace(" ", "-").replace("_", "-")
    clean = "".join(ch for ch in name if ch in _BRANCH_CHARS)
    return f"feature/{phase_id}-{feature_id}-{clean}"


class BranchManager:
    """Creates and inspects branches of a local repository."""

    def __init__(self, repo_path: str | os.PathLike[str]) -> None:
        self.repo_path = Path(repo_path)
        if not (self.repo_path / ".git").exists():
            raise GitError(f"failed to open repository: no git repository at {self.repo_path}")

    def _branches(self) -> list[str]:
        output = _run_git(self.repo_path, "for-each-ref", "--format=%(refname)", _HEADS)
        return [
            line[len(_HEADS):]
            for line in output.splitlines()
            if line.startswith(_HEADS)
        ]

    def branch_exists(self, branch_name: str) -> bool:
        """Return True if a local branch with this name exists."""
        return branch_name in self._branches()

    def create_feature_branch(self, branch_name: str) -> None:
        """Create a branch at HEAD and check it out."""
        try:
            branches = self._branches()
        except GitError as err:
            raise GitError(f"failed to list branches: {err}") from err
        if branch_name in branches:
            raise GitError(f"branch {branch_name} already exists")

        try:
            head = _run_git(self.repo_path, "rev-parse", "--verify", "HEAD").strip()
        except GitError as err:
            raise GitError(f"failed to get HEAD: {err}") from err

        try:
            _run_git(self.repo_path, "update-ref", _HEADS + branch_name, head)
        except GitError as err:
            raise GitError(f"failed to create branch: {err}") from err

        try:
            _run_git(self.repo_path, "checkout", branch_name, "--")
        except GitError as err:
            raise GitError(f"failed to checkout branch: {err}") from err

    def current_branch(self) -> str:
        """Return the short name of the checked-out branch."""
        return _run_git(self.repo_path, "rev-parse", "--abbrev-ref", "HEAD").strip()