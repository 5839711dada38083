"""Pytest fixtures for git-preview-flow tests"""
import logging
import tempfile
from pathlib import Path
from unittest.mock import Mock
import pytest
import git

from git_preview_flow.services.branch_synchronizer import BranchSynchronizer
from git_preview_flow.services.git.plumbing import GitPlumbing, RepositoryStatus


def init_repo(repo_path: Path, initial_branch: str = "main") -> git.Repo:
    """Initialize a repository with one commit on ``initial_branch``."""
    repo_path.mkdir(parents=True, exist_ok=True)
    repo = git.Repo.init(repo_path)

    # Configure git user for commits
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    test_file = repo_path / "README.md"
    test_file.write_text("# Test Repository\n")
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")

    repo.git.branch('-M', initial_branch)
    return repo


def commit_file(repo: git.Repo, name: str, content: str, message: str) -> None:
    """Write ``name`` in the working copy and commit it."""
    path = Path(repo.working_dir) / name
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message)


class StaticTokenProvider:
    """Credential provider returning a fixed token."""

    def __init__(self, token):
        self.token = token
        self.calls = 0

    def get_token(self):
        self.calls += 1
        return self.token


@pytest.fixture(autouse=True)
def no_env_token(monkeypatch):
    """Keep a developer's GITHUB_TOKEN out of the tests."""
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_config(temp_dir):
    """Create a mock configuration dictionary."""
    return {
        'verbose': False,
        'debug': False,
        'github_token': None,
        'data_dir': str(temp_dir / "data"),
    }


@pytest.fixture
def git_repo(temp_dir):
    """Create a real Git repository on 'main' with no remote."""
    repo = init_repo(temp_dir / "test_repo")
    yield repo
    repo.close()


@pytest.fixture
def origin_repo(temp_dir):
    """Create a bare repository to act as 'origin'."""
    repo = git.Repo.init(temp_dir / "origin.git", bare=True)
    repo.git.symbolic_ref("HEAD", "refs/heads/main")
    yield repo
    repo.close()


@pytest.fixture
def git_repo_with_remote(git_repo, origin_repo):
    """Repository whose 'main' is pushed to a local bare 'origin'."""
    git_repo.create_remote('origin', origin_repo.working_dir)
    git_repo.git.push('origin', 'main')
    yield git_repo


@pytest.fixture
def output_lines():
    """Collects narration sent to the output sink."""
    return []


@pytest.fixture
def synchronizer(mock_config, output_lines):
    """BranchSynchronizer over real git, without credentials."""
    return BranchSynchronizer(GitPlumbing(), output=output_lines.append, config=mock_config)


@pytest.fixture
def mock_plumbing():
    """Create a mock GitPlumbing with an empty, remote-less repository."""
    plumbing = Mock(spec=GitPlumbing)
    plumbing.list_branches.return_value = []
    plumbing.current_branch.return_value = "main"
    plumbing.get_config.return_value = None
    plumbing.status.return_value = RepositoryStatus(files=[])
    return plumbing


@pytest.fixture
def mock_synchronizer(mock_plumbing, mock_config):
    """BranchSynchronizer over mocked plumbing."""
    return BranchSynchronizer(mock_plumbing, config=mock_config)


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging's changes to the root logger after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
