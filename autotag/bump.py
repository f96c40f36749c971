# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Version bump decisions from conventional commit titles.

Only the commit title (the first line of the message) is inspected. The
recognized grammar is the Angular-style conventional commit header::

    <type>[(<scope>)][!]: <description>

Precedence, highest first:
    - ``!`` before the separator, or a ``BREAKING CHANGE:`` token -> MAJOR
    - ``feat`` -> MINOR
    - ``fix``, ``perf`` -> PATCH
    - anything else -> NONE

References:
    - Conventional Commits 1.0.0: https://www.conventionalcommits.org/en/v1.0.0/
    - Semantic Versioning 2.0.0: https://semver.org/
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from enum import IntEnum

from autotag.semver import DEFAULT_TAG_PREFIX, SemanticVersion, parse_tag

logger = logging.getLogger(__name__)

HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^()]*)\))?(?P<breaking>!)?: ?(?P<description>.*)$"
)

BREAKING_TOKEN_PATTERN = re.compile(r"\bBREAKING[ -]CHANGE:")

MINOR_TYPES = frozenset({"feat"})
PATCH_TYPES = frozenset({"fix", "perf"})


class BumpKind(IntEnum):
    """Semver bump magnitude, ordered by severity."""

    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3

    def __str__(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class BumpDecision:
    """Result of deciding whether a commit warrants a release."""

    kind: BumpKind
    previous: SemanticVersion
    version: SemanticVersion

    @property
    def should_release(self) -> bool:
        return self.kind is not BumpKind.NONE


def classify_title(title: str) -> BumpKind:
    """Classify a commit title into a BumpKind.

    Args:
        title: The commit title. Only the first line is considered.

    Returns:
        The BumpKind signalled by the title. Titles that match no convention
        yield BumpKind.NONE.

    Examples:
        >>> classify_title("feat!: remove legacy endpoint")
        <BumpKind.MAJOR: 3>
        >>> classify_title("feat(api): add search")
        <BumpKind.MINOR: 2>
        >>> classify_title("fix: correct rounding")
        <BumpKind.PATCH: 1>
        >>> classify_title("chore: update deps")
        <BumpKind.NONE: 0>
    """
    lines = title.strip().splitlines()
    header = lines[0].strip() if lines else ""

    if BREAKING_TOKEN_PATTERN.search(header):
        return BumpKind.MAJOR

    match = HEADER_PATTERN.match(header)
    if not match:
        return BumpKind.NONE

    if match.group("breaking"):
        return BumpKind.MAJOR

    commit_type = match.group("type").lower()
    if commit_type in MINOR_TYPES:
        return BumpKind.MINOR
    if commit_type in PATCH_TYPES:
        return BumpKind.PATCH
    return BumpKind.NONE


def next_version(version: SemanticVersion, kind: BumpKind) -> SemanticVersion:
    """Return the version after applying a bump.

    Lower-order fields reset to zero. BumpKind.NONE returns the version as is.

    Examples:
        >>> next_version(SemanticVersion(1, 2, 3), BumpKind.MINOR)
        SemanticVersion(major=1, minor=3, patch=0)
    """
    if kind is BumpKind.MAJOR:
        return version.bump_major()
    if kind is BumpKind.MINOR:
        return version.bump_minor()
    if kind is BumpKind.PATCH:
        return version.bump_patch()
    return version


def decide(last_tag: str, commit_title: str, tag_prefix: str = DEFAULT_TAG_PREFIX) -> BumpDecision:
    """Decide the next release version for a commit.

    Args:
        last_tag: The most recent release tag (e.g., 'v1.2.3').
        commit_title: The title of the commit being released.
        tag_prefix: The tag prefix to strip (default: 'v').

    Returns:
        BumpDecision with the bump kind and the resulting version. When the
        kind is NONE the version is unchanged and no release should be made.

    Raises:
        ParseError: If last_tag is not a valid release tag.

    Examples:
        >>> str(decide("v1.2.3", "fix: correct rounding").version)
        '1.2.4'
        >>> decide("v0.9.0", "chore: update deps").kind
        <BumpKind.NONE: 0>
    """
    previous = parse_tag(last_tag, tag_prefix)
    kind = classify_title(commit_title)
    version = next_version(previous, kind)
    logger.debug("Commit '%s' on %s: %s bump -> %s", commit_title, last_tag, kind, version)
    return BumpDecision(kind=kind, previous=previous, version=version)
