# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Error types raised during a release cycle.

Every error is surfaced to the caller of the release tagger unchanged in kind.
Nothing here is retried or swallowed internally.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for release tagging failures."""


class ParseError(ReleaseError, ValueError):
    """A tag could not be parsed as a semantic version."""


class NoPriorTagError(ReleaseError):
    """The repository has no version tag to bump from."""


class RepositoryAccessError(ReleaseError):
    """Reading from or writing to the repository failed."""


class TagConflictError(ReleaseError):
    """The tag could not be created, typically because it already exists."""

    def __init__(self, tag: str, message: str | None = None) -> None:
        self.tag = tag
        super().__init__(message or f"Tag '{tag}' could not be created")


class PushFailedError(ReleaseError):
    """The tag was created locally but publishing it failed.

    The local tag is left in place for manual inspection.
    """

    def __init__(self, tag: str, message: str | None = None) -> None:
        self.tag = tag
        super().__init__(message or f"Tag '{tag}' was created locally but could not be pushed")
