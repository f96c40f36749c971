# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Repository access for release tagging.

The release tagger only needs four operations from a repository: read the
last commit title, read the last version tag, create a tag, and push tags.
Two implementations are provided, one driving the local ``git`` CLI and one
using the GitHub REST API.

References:
    - git-describe: https://git-scm.com/docs/git-describe
    - git-tag: https://git-scm.com/docs/git-tag
    - GitHub REST API: https://docs.github.com/en/rest
    - PyGithub Documentation: https://pygithub.readthedocs.io/
"""

from __future__ import annotations

import logging
import os
import subprocess
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from github import Github
from github.GithubException import GithubException

from autotag.errors import NoPriorTagError, RepositoryAccessError, TagConflictError
from autotag.semver import DEFAULT_TAG_PREFIX, is_release_tag, parse_tag

if TYPE_CHECKING:
    from github.Commit import Commit

logger = logging.getLogger(__name__)


class RepositoryAccess(ABC):
    """Abstract interface for the repository operations used by the tagger."""

    @abstractmethod
    def last_commit_title(self) -> str:
        """Return the first line of the most recent commit message.

        Raises:
            RepositoryAccessError: If the commit cannot be read.
        """

    @abstractmethod
    def last_tag(self) -> str:
        """Return the most recent version tag (e.g., 'v1.2.3').

        Raises:
            NoPriorTagError: If the repository has no version tag.
            RepositoryAccessError: If the tags cannot be read.
        """

    @abstractmethod
    def create_tag(self, name: str) -> None:
        """Create a tag at the current commit.

        Raises:
            TagConflictError: If the tag already exists.
            RepositoryAccessError: If the tag cannot be created.
        """

    @abstractmethod
    def push_tags(self) -> None:
        """Publish created tags to the remote.

        Raises:
            TagConflictError: If the remote already holds a tag of the same name.
            RepositoryAccessError: If the push fails.
        """


class GitRepository(RepositoryAccess):
    """Repository access through the local ``git`` command line."""

    def __init__(
        self,
        path: str = ".",
        remote: str = "origin",
        tag_prefix: str = DEFAULT_TAG_PREFIX,
    ) -> None:
        self._path = path
        self._remote = remote
        self._tag_prefix = tag_prefix

    def _git(self, *args: str) -> str:
        """Run a git command in the repository and return its stripped stdout.

        Raises:
            subprocess.CalledProcessError: If git exits non-zero.
        """
        logger.debug("Running git %s", " ".join(args))
        result = subprocess.run(
            ["git", *args],
            cwd=self._path,
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout.strip()

    def last_commit_title(self) -> str:
        try:
            message = self._git("log", "-1", "--format=%B")
        except (OSError, subprocess.CalledProcessError) as e:
            raise RepositoryAccessError(f"Failed to read last commit: {_describe_failure(e)}") from e
        lines = message.splitlines()
        return lines[0].strip() if lines else ""

    def last_tag(self) -> str:
        try:
            return self._git(
                "describe",
                "--tags",
                "--abbrev=0",
                "--match",
                f"{self._tag_prefix}[0-9]*",
                "--exclude",
                f"{self._tag_prefix}*-*",
            )
        except subprocess.CalledProcessError as e:
            stderr = e.stderr or ""
            if "No names found" in stderr or "No tags can describe" in stderr:
                raise NoPriorTagError(f"No '{self._tag_prefix}' tag is reachable from HEAD") from e
            raise RepositoryAccessError(f"Failed to read last tag: {_describe_failure(e)}") from e
        except OSError as e:
            raise RepositoryAccessError(f"Failed to read last tag: {e}") from e

    def create_tag(self, name: str) -> None:
        try:
            self._git("tag", "-a", name, "-m", f"Release {name}")
        except subprocess.CalledProcessError as e:
            if "already exists" in (e.stderr or ""):
                raise TagConflictError(name, f"Tag '{name}' already exists") from e
            raise RepositoryAccessError(f"Failed to create tag '{name}': {_describe_failure(e)}") from e
        except OSError as e:
            raise RepositoryAccessError(f"Failed to create tag '{name}': {e}") from e

    def push_tags(self) -> None:
        try:
            self._git("push", self._remote, "--tags")
        except (OSError, subprocess.CalledProcessError) as e:
            raise RepositoryAccessError(f"Failed to push tags to '{self._remote}': {_describe_failure(e)}") from e


class GitHubRepository(RepositoryAccess):
    """Repository access through the GitHub REST API.

    Created tags are staged locally and only written to GitHub by
    push_tags(), mirroring the create-then-push sequence of a git checkout.

    References:
        - Authentication: https://docs.github.com/en/rest/authentication
        - GITHUB_TOKEN: https://docs.github.com/en/actions/security-for-github-actions/security-guides/automatic-token-authentication
    """

    def __init__(
        self,
        token: str | None = None,
        repository: str | None = None,
        ref: str | None = None,
        sha: str | None = None,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
    ) -> None:
        """Initialize the GitHub API client.

        Args:
            token: GitHub token for authentication. Defaults to GITHUB_TOKEN env var.
            repository: Repository in 'owner/repo' format. Defaults to GITHUB_REPOSITORY env var.
            ref: Branch whose head commit is released. Defaults to GITHUB_REF_NAME env var.
            sha: Explicit commit to release. Takes precedence over ref.
            tag_prefix: The tag prefix to match (default: 'v').

        Raises:
            ValueError: If no token or repository is available.
            RepositoryAccessError: If the repository cannot be opened.
        """
        self._token = token or os.environ.get("GITHUB_TOKEN", "")
        self._repository = repository or os.environ.get("GITHUB_REPOSITORY", "")
        self._ref = ref or os.environ.get("GITHUB_REF_NAME", "")
        self._sha = sha
        self._tag_prefix = tag_prefix
        self._pending: list[str] = []
        self._head: Commit | None = None

        if not self._token:
            raise ValueError("GitHub token is required. Set GITHUB_TOKEN or pass token parameter.")
        if not self._repository:
            raise ValueError("Repository is required. Set GITHUB_REPOSITORY or pass repository parameter.")

        self._github = Github(self._token)
        try:
            self._repo = self._github.get_repo(self._repository)
        except GithubException as e:
            raise RepositoryAccessError(f"Failed to open repository '{self._repository}': {e}") from e

    def _head_commit(self) -> Commit:
        """Return the commit being released.

        References:
            - Get a commit: https://docs.github.com/en/rest/commits/commits#get-a-commit
        """
        if self._head is None:
            target = self._sha or self._ref or self._repo.default_branch
            self._head = self._repo.get_commit(target)
        return self._head

    def last_commit_title(self) -> str:
        try:
            message = self._head_commit().commit.message
        except GithubException as e:
            raise RepositoryAccessError(f"Failed to read last commit: {e}") from e
        lines = message.splitlines()
        return lines[0].strip() if lines else ""

    def last_tag(self) -> str:
        """Return the highest {prefix}X.Y.Z tag in the repository.

        References:
            - List repository tags: https://docs.github.com/en/rest/repos/repos#list-repository-tags
        """
        try:
            names = [tag.name for tag in self._repo.get_tags()]
        except GithubException as e:
            raise RepositoryAccessError(f"Failed to list tags: {e}") from e

        release_tags = [name for name in names if is_release_tag(name, self._tag_prefix)]
        if not release_tags:
            raise NoPriorTagError(f"Repository '{self._repository}' has no '{self._tag_prefix}X.Y.Z' tag")

        return max(release_tags, key=lambda name: parse_tag(name, self._tag_prefix))

    def tag_exists(self, tag_name: str) -> bool:
        """Check if a tag exists in the repository.

        References:
            - Get a reference: https://docs.github.com/en/rest/git/refs#get-a-reference
        """
        try:
            self._repo.get_git_ref(f"tags/{tag_name}")
            return True
        except GithubException as e:
            if e.status == 404:
                return False
            raise RepositoryAccessError(f"Failed to look up tag '{tag_name}': {e}") from e

    def create_tag(self, name: str) -> None:
        if name in self._pending or self.tag_exists(name):
            raise TagConflictError(name, f"Tag '{name}' already exists")
        self._pending.append(name)
        logger.debug("Staged tag '%s'", name)

    def push_tags(self) -> None:
        """Create annotated tags and their refs for every staged tag.

        References:
            - Create a tag object: https://docs.github.com/en/rest/git/tags#create-a-tag-object
            - Create a reference: https://docs.github.com/en/rest/git/refs#create-a-reference
        """
        while self._pending:
            tag_name = self._pending[0]
            try:
                commit_sha = self._head_commit().sha
                tag_object = self._repo.create_git_tag(
                    tag=tag_name,
                    message=f"Release {tag_name}",
                    object=commit_sha,
                    type="commit",
                )
                self._repo.create_git_ref(
                    ref=f"refs/tags/{tag_name}",
                    sha=tag_object.sha,
                )
            except GithubException as e:
                if e.status == 422:
                    self._pending.pop(0)
                    raise TagConflictError(tag_name, f"Tag '{tag_name}' already exists on GitHub") from e
                raise RepositoryAccessError(f"Failed to push tag '{tag_name}': {e}") from e
            self._pending.pop(0)
            logger.info("Pushed tag '%s' at %s", tag_name, commit_sha[:7])


def _describe_failure(error: Exception) -> str:
    """Return the most useful text from a failed git invocation."""
    if isinstance(error, subprocess.CalledProcessError):
        stderr = (error.stderr or "").strip()
        if stderr:
            return stderr
    return str(error)
