# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Property-based tests for bump decisions and release tagging.

Uses hypothesis to generate random inputs and verify invariants hold
across all valid cases.
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from autotag.bump import BumpKind, decide
from autotag.errors import ParseError
from autotag.repository import RepositoryAccess
from autotag.semver import SemanticVersion, parse_tag
from autotag.tagger import ReleaseState, ReleaseTagger

version_number = st.integers(min_value=0, max_value=9999)

scope = st.one_of(st.just(""), st.from_regex(r"\([a-z][a-z0-9-]{0,10}\)", fullmatch=True))

description = st.text(
    alphabet=st.characters(whitelist_categories=("L", "N", "Zs"), blacklist_characters="!"),
    min_size=0,
    max_size=40,
).filter(lambda text: "BREAKING" not in text)


@st.composite
def valid_tag(draw: st.DrawFn) -> tuple[str, SemanticVersion]:
    """Generate v<major>.<minor>.<patch> tags with their expected version."""
    version = SemanticVersion(draw(version_number), draw(version_number), draw(version_number))
    return f"v{version}", version


@st.composite
def breaking_title(draw: st.DrawFn) -> str:
    """Generate titles carrying a breaking-change marker."""
    commit_type = draw(st.sampled_from(["feat", "fix", "chore", "refactor", "docs", "perf"]))
    if draw(st.booleans()):
        return f"{commit_type}{draw(scope)}!: {draw(description)}"
    return f"{commit_type}{draw(scope)}: {draw(description)} BREAKING CHANGE: {draw(description)}"


@st.composite
def typed_title(draw: st.DrawFn, types: list[str]) -> str:
    """Generate non-breaking titles of the given commit types."""
    commit_type = draw(st.sampled_from(types))
    return f"{commit_type}{draw(scope)}: {draw(description)}"


non_release_types = ["chore", "docs", "refactor", "style", "test", "ci", "build", "revert", "wip"]

random_title = st.text(max_size=60)


class TestBumpDecisionProperties:
    """Invariants of decide() across generated tags and titles."""

    @settings(max_examples=100)
    @given(tag=valid_tag(), title=breaking_title())
    def test_breaking_change_bumps_major(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        name, version = tag
        decision = decide(name, title)
        assert decision.kind is BumpKind.MAJOR
        assert decision.version == SemanticVersion(version.major + 1, 0, 0)

    @settings(max_examples=100)
    @given(tag=valid_tag(), title=typed_title(["feat"]))
    def test_feature_bumps_minor(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        name, version = tag
        decision = decide(name, title)
        assert decision.kind is BumpKind.MINOR
        assert decision.version == SemanticVersion(version.major, version.minor + 1, 0)

    @settings(max_examples=100)
    @given(tag=valid_tag(), title=typed_title(["fix", "perf"]))
    def test_fix_bumps_patch(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        name, version = tag
        decision = decide(name, title)
        assert decision.kind is BumpKind.PATCH
        assert decision.version == SemanticVersion(version.major, version.minor, version.patch + 1)

    @settings(max_examples=100)
    @given(tag=valid_tag(), title=typed_title(non_release_types))
    def test_other_types_do_not_bump(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        name, version = tag
        decision = decide(name, title)
        assert decision.kind is BumpKind.NONE
        assert decision.version == version

    @settings(max_examples=100)
    @given(tag=valid_tag(), title=random_title)
    def test_decide_is_deterministic(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        name, _ = tag
        assert decide(name, title) == decide(name, title)

    @settings(max_examples=100)
    @given(tag=valid_tag(), title=random_title)
    def test_next_version_never_decreases(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        name, version = tag
        decision = decide(name, title)
        assert decision.version >= version
        assert (decision.version > version) == decision.should_release


class TestTagParsingProperties:
    """Invariants of tag parsing."""

    @settings(max_examples=100)
    @given(tag=valid_tag())
    def test_tag_round_trips(self, tag: tuple[str, SemanticVersion]) -> None:
        name, version = tag
        assert parse_tag(name) == version
        assert version.to_tag() == name

    @settings(max_examples=100)
    @given(text=random_title)
    def test_random_text_parses_or_raises_parse_error(self, text: str) -> None:
        """Random strings either parse or raise ParseError, never anything else."""
        try:
            version = parse_tag(text)
        except ParseError:
            return
        assert isinstance(version, SemanticVersion)

    @settings(max_examples=100)
    @given(major=version_number, minor=version_number)
    def test_two_part_tags_are_rejected(self, major: int, minor: int) -> None:
        with pytest.raises(ParseError):
            decide(f"v{major}.{minor}", "feat: add")


class TestReleaseTaggerProperties:
    """Invariants of the release tagger against a counting test double."""

    @settings(max_examples=50)
    @given(tag=valid_tag(), title=typed_title(non_release_types))
    def test_non_release_commits_never_tag(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        repo = MagicMock(spec=RepositoryAccess)
        repo.last_tag.return_value = tag[0]
        repo.last_commit_title.return_value = title

        result = ReleaseTagger(repo).publish_from_last_commit()

        assert result.state is ReleaseState.NOOP
        assert repo.create_tag.call_count == 0
        assert repo.push_tags.call_count == 0

    @settings(max_examples=50)
    @given(tag=valid_tag(), title=typed_title(["feat", "fix", "perf"]))
    def test_release_commits_tag_once(self, tag: tuple[str, SemanticVersion], title: str) -> None:
        repo = MagicMock(spec=RepositoryAccess)
        repo.last_tag.return_value = tag[0]
        repo.last_commit_title.return_value = title

        result = ReleaseTagger(repo).publish_from_last_commit()

        assert result.state is ReleaseState.DONE
        repo.create_tag.assert_called_once_with(result.tag)
        assert repo.push_tags.call_count == 1
