# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Release tagging from the last commit.

A release cycle moves through the states::

    IDLE -> READING -> DECIDING -> NOOP
                                -> TAGGING -> PUSHING -> DONE

Any failure moves the cycle to FAILED, keeping the originating error. A push
failure after a successful tag creation is reported as PushFailedError and
the created tag is not rolled back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

from autotag.bump import BumpDecision, decide
from autotag.errors import PushFailedError, ReleaseError, TagConflictError
from autotag.semver import DEFAULT_TAG_PREFIX, parse_tag

if TYPE_CHECKING:
    from autotag.repository import RepositoryAccess

logger = logging.getLogger(__name__)


class ReleaseState(Enum):
    """States of a single release cycle."""

    IDLE = "idle"
    READING = "reading"
    DECIDING = "deciding"
    NOOP = "noop"
    TAGGING = "tagging"
    PUSHING = "pushing"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ReleaseResult:
    """Outcome of a release cycle."""

    state: ReleaseState
    decision: BumpDecision | None = None
    tag: str = ""
    previous_tag: str = ""
    dry_run: bool = False


class ReleaseTagger:
    """Run one release cycle against a repository.

    Args:
        repo: Repository access for reads, tag creation and push.
        tag_prefix: The tag prefix to use (default: 'v').
        dry_run: If True, decide but do not create or push tags.
    """

    def __init__(
        self,
        repo: RepositoryAccess,
        tag_prefix: str = DEFAULT_TAG_PREFIX,
        dry_run: bool = False,
    ) -> None:
        self._repo = repo
        self._tag_prefix = tag_prefix
        self._dry_run = dry_run
        self.state = ReleaseState.IDLE
        self.error: ReleaseError | None = None

    def _transition(self, state: ReleaseState) -> None:
        logger.debug("Release state: %s -> %s", self.state.value, state.value)
        self.state = state

    def _start(self) -> None:
        if self.state is not ReleaseState.IDLE:
            raise RuntimeError(f"Release cycle already ran (state: {self.state.value})")

    def _fail(self, error: ReleaseError) -> None:
        self.error = error
        self._transition(ReleaseState.FAILED)

    def publish_from_last_commit(self) -> ReleaseResult:
        """Tag the last commit with the next version if it warrants a release.

        Returns:
            ReleaseResult in state NOOP when no release is warranted, DONE
            when the tag was created and pushed (or would be, in dry-run).

        Raises:
            RepositoryAccessError: If the commit title or last tag cannot be read.
            NoPriorTagError: If the repository has no version tag yet.
            ParseError: If the last tag is not a valid release tag.
            TagConflictError: If the tag cannot be created.
            PushFailedError: If the tag was created but could not be pushed.
        """
        self._start()
        try:
            self._transition(ReleaseState.READING)
            title = self._repo.last_commit_title()
            last_tag = self._repo.last_tag()
            logger.info("Last tag '%s', last commit '%s'", last_tag, title)

            self._transition(ReleaseState.DECIDING)
            decision = decide(last_tag, title, self._tag_prefix)
        except ReleaseError as e:
            self._fail(e)
            raise

        result = ReleaseResult(state=self.state, decision=decision, previous_tag=last_tag, dry_run=self._dry_run)

        if not decision.should_release:
            logger.info("Commit does not warrant a release, skipping")
            self._transition(ReleaseState.NOOP)
            result.state = self.state
            return result

        result.tag = decision.version.to_tag(self._tag_prefix)
        logger.info("%s bump: %s -> %s", str(decision.kind).capitalize(), last_tag, result.tag)
        self._publish(result.tag)
        result.state = self.state
        return result

    def seed_initial_tag(self, tag_name: str) -> ReleaseResult:
        """Create and push a first version tag for a repository without one.

        Raises:
            ParseError: If tag_name is not a valid release tag.
            TagConflictError: If the tag cannot be created.
            PushFailedError: If the tag was created but could not be pushed.
        """
        self._start()
        try:
            parse_tag(tag_name, self._tag_prefix)
        except ReleaseError as e:
            self._fail(e)
            raise

        logger.info("Seeding initial tag '%s'", tag_name)
        self._publish(tag_name)
        return ReleaseResult(state=self.state, tag=tag_name, dry_run=self._dry_run)

    def _publish(self, tag_name: str) -> None:
        if self._dry_run:
            logger.info("[DRY-RUN] Would create and push tag '%s'", tag_name)
            self._transition(ReleaseState.DONE)
            return

        self._transition(ReleaseState.TAGGING)
        try:
            self._repo.create_tag(tag_name)
        except TagConflictError as e:
            self._fail(e)
            raise
        except ReleaseError as e:
            conflict = TagConflictError(tag_name, f"Failed to create tag '{tag_name}': {e}")
            self._fail(conflict)
            raise conflict from e
        logger.info("Created tag '%s'", tag_name)

        self._transition(ReleaseState.PUSHING)
        try:
            self._repo.push_tags()
        except TagConflictError as e:
            self._fail(e)
            raise
        except ReleaseError as e:
            pushed = PushFailedError(tag_name, f"Tag '{tag_name}' was created locally but push failed: {e}")
            self._fail(pushed)
            raise pushed from e
        logger.info("Pushed tag '%s'", tag_name)

        self._transition(ReleaseState.DONE)


def publish_from_last_commit(
    repo: RepositoryAccess,
    tag_prefix: str = DEFAULT_TAG_PREFIX,
    dry_run: bool = False,
) -> ReleaseResult:
    """Run a single release cycle against repo. See ReleaseTagger."""
    return ReleaseTagger(repo, tag_prefix=tag_prefix, dry_run=dry_run).publish_from_last_commit()
