# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Commit-driven semantic version tagging - Core modules."""

__version__ = "0.1.0"

from autotag.bump import BumpDecision, BumpKind, classify_title, decide  # noqa: E402
from autotag.identity import VersionIdentity  # noqa: E402
from autotag.semver import SemanticVersion, parse_tag  # noqa: E402
from autotag.tagger import ReleaseTagger, publish_from_last_commit  # noqa: E402

__all__ = [
    "BumpDecision",
    "BumpKind",
    "ReleaseTagger",
    "SemanticVersion",
    "VersionIdentity",
    "__version__",
    "classify_title",
    "decide",
    "parse_tag",
    "publish_from_last_commit",
]
