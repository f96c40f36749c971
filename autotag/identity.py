# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Build identity reported by the application.

The identity is constructed once at startup and passed to whatever needs to
report it; it is never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

UNKNOWN_VERSION = "unknown"


@dataclass(frozen=True)
class VersionIdentity:
    """Application version and the commit hash it was built from."""

    version: str = ""
    commit_hash: str = ""

    def with_version(self, version: str) -> VersionIdentity:
        """Return a copy with the given version, or self if version is empty."""
        if not version:
            return self
        return replace(self, version=version)

    def with_commit_hash(self, commit_hash: str) -> VersionIdentity:
        """Return a copy with the given commit hash. Empty values are accepted."""
        return replace(self, commit_hash=commit_hash)

    @property
    def full_version(self) -> str:
        """Return version and commit hash joined by '-'.

        Examples:
            >>> VersionIdentity().full_version
            'unknown'
            >>> VersionIdentity("1.2.3").full_version
            '1.2.3'
            >>> VersionIdentity("", "abc").full_version
            'abc'
            >>> VersionIdentity("0.0.3", "abc").full_version
            '0.0.3-abc'
        """
        if not self.version and not self.commit_hash:
            return UNKNOWN_VERSION
        if not self.version:
            return self.commit_hash
        if not self.commit_hash:
            return self.version
        return f"{self.version}-{self.commit_hash}"

    def __str__(self) -> str:
        return self.full_version
