"""Shared pytest fixtures for the test suite."""

from collections.abc import Generator
from typing import Any
from unittest.mock import MagicMock, patch

import pytest

from autotag.errors import NoPriorTagError, RepositoryAccessError, TagConflictError
from autotag.repository import RepositoryAccess


class FakeRepository(RepositoryAccess):
    """In-memory repository recording created and pushed tags.

    Args:
        title: Title of the last commit.
        tags: Existing tag names, oldest first. The last one is the last tag.
        fail_push: If True, push_tags() raises RepositoryAccessError.
    """

    def __init__(self, title: str = "", tags: list[str] | None = None, fail_push: bool = False) -> None:
        self.title = title
        self.tags = list(tags or [])
        self.fail_push = fail_push
        self.created: list[str] = []
        self.pushed: list[str] = []
        self.push_calls = 0

    def last_commit_title(self) -> str:
        return self.title

    def last_tag(self) -> str:
        if not self.tags:
            raise NoPriorTagError("No tags")
        return self.tags[-1]

    def create_tag(self, name: str) -> None:
        if name in self.tags:
            raise TagConflictError(name)
        self.tags.append(name)
        self.created.append(name)

    def push_tags(self) -> None:
        self.push_calls += 1
        if self.fail_push:
            raise RepositoryAccessError("remote rejected")
        self.pushed = list(self.tags)


def make_tag(name: str) -> MagicMock:
    """Create a mock GitHub tag object with the given name."""
    tag = MagicMock()
    tag.name = name
    return tag


def make_commit(sha: str, message: str) -> MagicMock:
    """Create a mock GitHub commit object with the given SHA and message."""
    commit = MagicMock()
    commit.sha = sha
    commit.commit.message = message
    return commit


@pytest.fixture
def mock_repository() -> MagicMock:
    """Create a mock RepositoryAccess for unit tests."""
    mock_repo = MagicMock(spec=RepositoryAccess)
    mock_repo.last_commit_title.return_value = "fix: correct rounding"
    mock_repo.last_tag.return_value = "v1.2.3"
    mock_repo.create_tag.return_value = None
    mock_repo.push_tags.return_value = None
    return mock_repo


@pytest.fixture
def mock_github_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Any) -> dict[str, str]:
    """Set up mock GitHub environment variables."""
    env_vars = {
        "GITHUB_REF_NAME": "main",
        "GITHUB_SHA": "abc123def456",
        "GITHUB_REPOSITORY": "owner/repo",
        "GITHUB_OUTPUT": str(tmp_path / "github_output"),
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


@pytest.fixture
def mock_pygithub() -> Generator[dict[str, Any], None, None]:
    """Patch PyGithub for unit tests."""
    with patch("autotag.repository.Github") as mock_github:
        mock_repo = MagicMock()
        mock_github.return_value.get_repo.return_value = mock_repo
        yield {"github": mock_github, "repo": mock_repo}


@pytest.fixture(autouse=True)
def clear_input_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the runner's own environment out of input parsing."""
    for key in (
        "INPUT_TOKEN",
        "GITHUB_TOKEN",
        "INPUT_DEBUG",
        "INPUT_DRY_RUN",
        "INPUT_BACKEND",
        "INPUT_TAG_PREFIX",
        "INPUT_REPO_PATH",
        "INPUT_REMOTE",
        "INPUT_INITIAL_TAG",
        "GITHUB_OUTPUT",
        "GITHUB_REF_NAME",
        "GITHUB_SHA",
        "GITHUB_REPOSITORY",
    ):
        monkeypatch.delenv(key, raising=False)
