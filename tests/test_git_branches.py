import subprocess

import pytest

from doplan.git_branches import BranchManager, GitError, generate_branch_name


def _git(cwd, *args):
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com",
         "-c", "commit.gpgsign=false", "-c", "init.defaultBranch=main", *args],
        cwd=cwd, check=True, capture_output=True,
    )


@pytest.fixture
def repo(tmp_path):
    _git(tmp_path, "init", "-q")
    (tmp_path / "README.md").write_text("# Test\n")
    _git(tmp_path, "add", "README.md")
    _git(tmp_path, "commit", "-q", "-m", "Initial commit")
    return tmp_path


@pytest.mark.parametrize(
    "phase_id, feature_id, feature_name, expected",
    [
        ("01-phase", "01-feature", "User Authentication",
         "feature/01-phase-01-feature-user-authentication"),
        ("02-phase", "02-feature", "user_auth", "feature/02-phase-02-feature-user-auth"),
        ("03-phase", "03-feature", "User@Auth#123", "feature/03-phase-03-feature-userauth123"),
        ("01-phase", "01-feature", "test feature", "feature/01-phase-01-feature-test-feature"),
    ],
)
def test_generate_branch_name(phase_id, feature_id, feature_name, expected):
    assert generate_branch_name(phase_id, feature_id, feature_name) == expected


def test_new_branch_manager(tmp_path):
    _git(tmp_path, "init", "-q")
    mgr = BranchManager(tmp_path)
    assert mgr.repo_path == tmp_path


def test_new_branch_manager_no_repo(tmp_path):
    with pytest.raises(GitError, match="failed to open repository"):
        BranchManager(tmp_path)


def test_create_feature_branch(repo):
    mgr = BranchManager(repo)
    mgr.create_feature_branch("feature/test-branch")
    assert mgr.branch_exists("feature/test-branch")
    assert mgr.current_branch() == "feature/test-branch"


def test_create_feature_branch_already_exists(repo):
    mgr = BranchManager(repo)
    mgr.create_feature_branch("feature/test-branch")
    with pytest.raises(GitError, match="already exists"):
        mgr.create_feature_branch("feature/test-branch")


def test_create_feature_branch_without_commits(tmp_path):
    _git(tmp_path, "init", "-q")
    with pytest.raises(GitError, match="failed to get HEAD"):
        BranchManager(tmp_path).create_feature_branch("feature/x")


def test_branch_exists(repo):
    mgr = BranchManager(repo)
    mgr.create_feature_branch("feature/test-branch")
    assert mgr.branch_exists("feature/test-branch") is True
    assert mgr.branch_exists("feature/non-existent") is False


def test_current_branch(repo):
    assert BranchManager(repo).current_branch() in ("main", "master")