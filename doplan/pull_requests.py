"""Pull request creation through the GitHub command-line client."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path


class PullRequestError(RuntimeError):
    """Raised when a pull request cannot be created."""


def generate_pr_body(feature_name: str, plan_path: str, design_path: str, tasks_path: str) -> str:
    """Build the markdown body of a feature pull request."""
    lines = [
        f"## Feature: {feature_name}\n\n",
        "This PR implements the feature as planned.\n\n",
        "### Planning Documents\n\n",
    ]
    for label, path in (("Plan", plan_path), ("Design", design_path), ("Tasks", tasks_path)):
        if path:
            lines.append(f"- [{label}]({path})\n")
    lines.extend(
        [
            "\n### Checklist\n\n",
            "- [ ] Code implemented\n",
            "- [ ] Tests written\n",
            "- [ ] Documentation updated\n",
            "- [ ] Ready for review\n",
        ]
    )
    return "".join(lines)


class PRManager:
    """Creates pull requests for a repository with ``gh``."""

    def __init__(self, repo_path: str | os.PathLike[str]) -> None:
        self.repo_path = Path(repo_path)

    def create_pull_request(
        self, branch_name: str, title: str, body: str, base_branch: str
    ) -> str:
        """Create a pull request and return its URL, or the raw output."""
        command = [
            "gh", "pr", "create",
            "--title", title,
            "--body", body,
            "--base", base_branch,
            "--head", branch_name,
        ]
        try:
            proc = subprocess.run(
                command,
                cwd=self.repo_path,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                check=False,
            )
        except OSError as err:
            raise PullRequestError(f"failed to create PR: {err}, output: ") from err
        if proc.returncode != 0:
            raise PullRequestError(
                f"failed to create PR: exit status {proc.returncode}, output: {proc.stdout}"
            )

        output = proc.stdout
        for line in output.split("\n"):
            if "https://github.com" in line:
                return line.strip()
        return output