# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Semantic version values and version tag parsing.

References:
    - Semantic Versioning 2.0.0: https://semver.org/
    - git-check-ref-format: https://git-scm.com/docs/git-check-ref-format
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from autotag.errors import ParseError

logger = logging.getLogger(__name__)

DEFAULT_TAG_PREFIX = "v"

# Characters invalid in git refs
INVALID_PREFIX_CHARS = ["..", "~", "^", ":", "\\", " ", "\t", "\n", "*", "?", "["]


def _create_tag_pattern(tag_prefix: str) -> re.Pattern[str]:
    """Create regex pattern for release tags with given prefix.

    Args:
        tag_prefix: The prefix for tags (e.g., 'v', 'pkg-v').

    Returns:
        Compiled regex pattern matching {prefix}X.Y.Z.
    """
    escaped_prefix = re.escape(tag_prefix)
    return re.compile(f"^{escaped_prefix}([0-9]+)\\.([0-9]+)\\.([0-9]+)$")


@dataclass(frozen=True, order=True)
class SemanticVersion:
    """A major.minor.patch version, ordered numerically field by field."""

    major: int
    minor: int
    patch: int

    def __post_init__(self) -> None:
        if min(self.major, self.minor, self.patch) < 0:
            raise ValueError(f"Version fields must be non-negative: {self.major}.{self.minor}.{self.patch}")

    def __str__(self) -> str:
        """Return the version as a string (e.g., '1.2.3')."""
        return f"{self.major}.{self.minor}.{self.patch}"

    def bump_major(self) -> SemanticVersion:
        return SemanticVersion(self.major + 1, 0, 0)

    def bump_minor(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor + 1, 0)

    def bump_patch(self) -> SemanticVersion:
        return SemanticVersion(self.major, self.minor, self.patch + 1)

    def to_tag(self, tag_prefix: str = DEFAULT_TAG_PREFIX) -> str:
        """Return the tag name for this version (e.g., 'v1.2.3')."""
        return f"{tag_prefix}{self}"


def parse_tag(tag_name: str, tag_prefix: str = DEFAULT_TAG_PREFIX) -> SemanticVersion:
    """Parse a release tag into a SemanticVersion.

    The prefix is stripped before the remainder is interpreted. A tag that
    does not match {prefix}X.Y.Z is rejected rather than defaulted.

    Args:
        tag_name: The tag name to parse (e.g., 'v1.2.3').
        tag_prefix: The tag prefix to match (default: 'v').

    Returns:
        The parsed SemanticVersion.

    Raises:
        ParseError: If the tag is not a valid release tag.

    Examples:
        >>> parse_tag("v1.2.3")
        SemanticVersion(major=1, minor=2, patch=3)
        >>> parse_tag("1.2")
        Traceback (most recent call last):
        ...
        autotag.errors.ParseError: Tag '1.2' does not match v<major>.<minor>.<patch>
    """
    match = _create_tag_pattern(tag_prefix).match(tag_name.strip())
    if not match:
        raise ParseError(f"Tag '{tag_name}' does not match {tag_prefix}<major>.<minor>.<patch>")
    return SemanticVersion(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def is_release_tag(tag_name: str, tag_prefix: str = DEFAULT_TAG_PREFIX) -> bool:
    """Check if a tag is a {prefix}X.Y.Z release tag.

    Examples:
        >>> is_release_tag("v1.2.3")
        True
        >>> is_release_tag("v1.2.0-rc1")
        False
    """
    return _create_tag_pattern(tag_prefix).match(tag_name) is not None


def validate_prefix(prefix: str) -> bool:
    """Validate that a prefix is valid for git tags.

    A valid prefix must be non-empty and must not contain characters that are
    invalid in git refs.

    Examples:
        >>> validate_prefix("v")
        True
        >>> validate_prefix("pkg-v")
        True
        >>> validate_prefix("")
        False
        >>> validate_prefix("bad..prefix")
        False
    """
    if not prefix:
        logger.warning("Empty prefix provided")
        return False

    for invalid_char in INVALID_PREFIX_CHARS:
        if invalid_char in prefix:
            logger.warning(
                "Prefix '%s' contains invalid character '%s'",
                prefix,
                repr(invalid_char),
            )
            return False

    return True
