import subprocess

import pytest

from doplan.git_branches import GitError
from doplan.git_commits import CommitManager, format_commit_message


def _git(cwd, *args):
    return subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com",
         "-c", "commit.gpgsign=false", "-c", "init.defaultBranch=main", *args],
        cwd=cwd, check=True, capture_output=True, text=True,
    ).stdout


@pytest.fixture
def repo(tmp_path):
    _git(tmp_path, "init", "-q")
    return tmp_path


@pytest.fixture
def committed_repo(repo):
    (repo / "test.txt").write_text("test")
    _git(repo, "add", "test.txt")
    _git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.mark.parametrize(
    "commit_type, scope, description, expected",
    [
        ("feat", "api", "add endpoint", "feat (api) : add endpoint"),
        ("fix", "", "bug fix", "fix : bug fix"),
        ("", "", "simple message", "simple message"),
    ],
)
def test_format_commit_message(commit_type, scope, description, expected):
    assert format_commit_message(commit_type, scope, description) == expected


def test_new_commit_manager_no_repo(tmp_path):
    with pytest.raises(GitError, match="failed to open repository"):
        CommitManager(tmp_path)


def test_commit_files(repo):
    (repo / "test.txt").write_text("test")
    CommitManager(repo).commit_files("Test commit", ["test.txt"])
    log = _git(repo, "log", "-1", "--format=%an|%ae|%s")
    assert log.strip() == "DoPlan|doplan@example.com|Test commit"


def test_commit_files_missing_path(repo):
    with pytest.raises(GitError, match="failed to add file missing.txt"):
        CommitManager(repo).commit_files("msg", ["missing.txt"])


def test_commit_files_nothing_to_commit(committed_repo):
    with pytest.raises(GitError, match="failed to commit"):
        CommitManager(committed_repo).commit_files("empty", [])


def test_push_branch_without_remote(committed_repo):
    with pytest.raises(GitError, match="failed to push branch"):
        CommitManager(committed_repo).push_branch("main")


def test_auto_commit_and_push(committed_repo):
    (committed_repo / "new.txt").write_text("new content")
    with pytest.raises(GitError, match="failed to push branch"):
        CommitManager(committed_repo).auto_commit_and_push("test commit", ["new.txt"])
    assert _git(committed_repo, "log", "-1", "--format=%s").strip() == "test commit"