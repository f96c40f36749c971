# Copyright (c) 2026 Mark Ferrell. MIT License.
"""Main entry point for commit-driven release tagging.

This module reads the action inputs, builds the repository backend, runs one
release cycle and writes the action outputs.

References:
    - GitHub Actions Environment Variables:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/store-information-in-variables#default-environment-variables
    - GitHub Actions Outputs:
      https://docs.github.com/en/actions/writing-workflows/choosing-what-your-workflow-does/passing-information-between-jobs#setting-an-output-parameter
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass

from autotag import __version__
from autotag.errors import (
    NoPriorTagError,
    ParseError,
    PushFailedError,
    ReleaseError,
    RepositoryAccessError,
    TagConflictError,
)
from autotag.identity import VersionIdentity
from autotag.repository import GitHubRepository, GitRepository, RepositoryAccess
from autotag.semver import validate_prefix
from autotag.tagger import ReleaseResult, ReleaseTagger

logger = logging.getLogger(__name__)

BACKENDS = ("git", "github")


@dataclass
class ActionInputs:
    """Parsed action inputs from CLI arguments or environment variables."""

    token: str
    debug: bool
    dry_run: bool
    backend: str = "git"
    tag_prefix: str = "v"
    repo_path: str = "."
    remote: str = "origin"
    initial_tag: str = ""


@dataclass
class GitHubContext:
    """GitHub event context from environment variables."""

    ref_name: str
    sha: str
    repository: str


@dataclass
class ActionOutputs:
    """Action outputs to be written to GITHUB_OUTPUT."""

    tag: str = ""
    bump: str = "none"
    previous_tag: str = ""
    state: str = "idle"


def build_identity(context: GitHubContext | None = None) -> VersionIdentity:
    """Return the identity of this build of the tool."""
    commit_hash = context.sha[:7] if context else ""
    return VersionIdentity().with_version(__version__).with_commit_hash(commit_hash)


def parse_inputs(args: list[str] | None = None) -> ActionInputs:
    """Parse action inputs from CLI arguments or environment variables.

    CLI arguments take precedence over environment variables.

    Args:
        args: Optional list of CLI arguments. If None, uses environment
              variables only (GitHub Actions mode). Pass sys.argv[1:] for
              CLI mode.

    Returns:
        ActionInputs with parsed values.
    """
    parser = argparse.ArgumentParser(
        description="Tag the last commit with the next semantic version",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables (used as defaults when CLI args not provided):
  INPUT_TOKEN, GITHUB_TOKEN    GitHub token (github backend)
  INPUT_DEBUG                  Enable debug logging (true/false)
  INPUT_DRY_RUN                Dry-run mode, don't create tags (true/false)
  INPUT_BACKEND                Repository backend: git or github
  INPUT_TAG_PREFIX             Prefix for version tags
  INPUT_REPO_PATH              Path of the git checkout (git backend)
  INPUT_REMOTE                 Remote to push tags to (git backend)
  INPUT_INITIAL_TAG            Tag to create when no version tag exists yet

Examples:
  # Run with environment variables (GitHub Actions mode)
  python -m autotag.main

  # Run against a local checkout without creating tags
  autotag --dry-run --debug

  # Tag through the GitHub API
  autotag --backend github --token ghp_xxx
        """,
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {build_identity(parse_context()).full_version}",
    )
    parser.add_argument(
        "--token",
        default=os.environ.get("INPUT_TOKEN", os.environ.get("GITHUB_TOKEN", "")),
        help="GitHub token for authentication (default: from INPUT_TOKEN or GITHUB_TOKEN env)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=os.environ.get("INPUT_DEBUG", "false").lower() == "true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        default=os.environ.get("INPUT_DRY_RUN", "false").lower() == "true",
        help="Dry-run mode - don't actually create tags",
    )
    parser.add_argument(
        "--backend",
        default=os.environ.get("INPUT_BACKEND", "git"),
        help="Repository backend: 'git' (local checkout) or 'github' (REST API) (default: git)",
    )
    parser.add_argument(
        "--tag-prefix",
        default=os.environ.get("INPUT_TAG_PREFIX", "v"),
        help="Prefix for version tags (default: v)",
    )
    parser.add_argument(
        "--repo-path",
        default=os.environ.get("INPUT_REPO_PATH", "."),
        help="Path of the git checkout (default: .)",
    )
    parser.add_argument(
        "--remote",
        default=os.environ.get("INPUT_REMOTE", "origin"),
        help="Remote to push tags to (default: origin)",
    )
    parser.add_argument(
        "--initial-tag",
        default=os.environ.get("INPUT_INITIAL_TAG", ""),
        help="Tag to create when the repository has no version tag yet (default: fail)",
    )

    # Use empty list for GitHub Actions mode (env vars only), or provided args for CLI
    parsed = parser.parse_args(args if args is not None else [])

    if parsed.backend not in BACKENDS:
        logger.error("Invalid backend '%s': must be one of %s", parsed.backend, ", ".join(BACKENDS))
        sys.exit(1)

    if not validate_prefix(parsed.tag_prefix):
        logger.error(
            "Invalid tag-prefix '%s': must be non-empty and not contain "
            "invalid git ref characters (.. ~ ^ : \\ space tab newline * ? [)",
            parsed.tag_prefix,
        )
        sys.exit(1)

    return ActionInputs(
        token=parsed.token,
        debug=parsed.debug,
        dry_run=parsed.dry_run,
        backend=parsed.backend,
        tag_prefix=parsed.tag_prefix,
        repo_path=parsed.repo_path,
        remote=parsed.remote,
        initial_tag=parsed.initial_tag,
    )


def parse_context() -> GitHubContext:
    """Parse GitHub context from environment variables."""
    return GitHubContext(
        ref_name=os.environ.get("GITHUB_REF_NAME", ""),
        sha=os.environ.get("GITHUB_SHA", ""),
        repository=os.environ.get("GITHUB_REPOSITORY", ""),
    )


def set_outputs(outputs: ActionOutputs) -> None:
    """Write action outputs to GITHUB_OUTPUT file."""
    output_file = os.environ.get("GITHUB_OUTPUT", "")
    if not output_file:
        logger.warning("GITHUB_OUTPUT not set, outputs will not be written")
        return

    with open(output_file, "a") as f:
        f.write(f"tag={outputs.tag}\n")
        f.write(f"bump={outputs.bump}\n")
        f.write(f"previous-tag={outputs.previous_tag}\n")
        f.write(f"state={outputs.state}\n")

    logger.info("Set outputs: tag=%s, bump=%s", outputs.tag, outputs.bump)


def configure_logging(debug: bool) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def create_repository(inputs: ActionInputs, context: GitHubContext) -> RepositoryAccess:
    """Build the repository backend selected by the inputs.

    Raises:
        ValueError: If the github backend lacks a token or repository.
        RepositoryAccessError: If the GitHub repository cannot be opened.
    """
    if inputs.backend == "github":
        return GitHubRepository(
            token=inputs.token,
            repository=context.repository,
            ref=context.ref_name,
            sha=context.sha or None,
            tag_prefix=inputs.tag_prefix,
        )
    return GitRepository(path=inputs.repo_path, remote=inputs.remote, tag_prefix=inputs.tag_prefix)


def to_outputs(result: ReleaseResult) -> ActionOutputs:
    """Convert a release result into action outputs."""
    outputs = ActionOutputs(tag=result.tag, previous_tag=result.previous_tag, state=result.state.value)
    if result.decision is not None:
        outputs.bump = str(result.decision.kind)
    return outputs


def run_release(repo: RepositoryAccess, inputs: ActionInputs) -> ActionOutputs:
    """Run one release cycle, seeding the first tag if configured.

    Raises:
        ReleaseError: If the release cycle fails.
    """
    tagger = ReleaseTagger(repo, tag_prefix=inputs.tag_prefix, dry_run=inputs.dry_run)
    try:
        result = tagger.publish_from_last_commit()
    except NoPriorTagError:
        if not inputs.initial_tag:
            raise
        logger.info("No prior tag found, seeding '%s'", inputs.initial_tag)
        seeder = ReleaseTagger(repo, tag_prefix=inputs.tag_prefix, dry_run=inputs.dry_run)
        result = seeder.seed_initial_tag(inputs.initial_tag)
    return to_outputs(result)


def report_failure(error: ReleaseError) -> None:
    """Log a release failure with remediation hints."""
    if isinstance(error, PushFailedError):
        logger.error("%s", error)
        logger.error("Local tag '%s' remains and needs manual inspection", error.tag)
    elif isinstance(error, TagConflictError):
        logger.error("Tag conflict: %s", error)
    elif isinstance(error, NoPriorTagError):
        logger.error("%s. Create an initial tag (e.g. v0.1.0) or set INPUT_INITIAL_TAG.", error)
    elif isinstance(error, ParseError):
        logger.error("Invalid version tag: %s", error)
    elif isinstance(error, RepositoryAccessError):
        logger.error("Repository access failed: %s", error)
    else:
        logger.error("Release failed: %s", error)


def main(args: list[str] | None = None) -> None:
    """Main entry point for the action."""
    inputs = parse_inputs(args)
    configure_logging(inputs.debug)

    context = parse_context()
    logger.debug("autotag %s, backend: %s", build_identity(context), inputs.backend)

    try:
        repo = create_repository(inputs, context)
    except ValueError as e:
        logger.error("Failed to initialize repository backend: %s", e)
        sys.exit(1)
    except RepositoryAccessError as e:
        report_failure(e)
        sys.exit(1)

    outputs = ActionOutputs()
    try:
        outputs = run_release(repo, inputs)
    except ReleaseError as e:
        report_failure(e)
        if isinstance(e, PushFailedError):
            outputs.tag = e.tag
        outputs.state = "failed"
        set_outputs(outputs)
        sys.exit(1)

    set_outputs(outputs)


def cli() -> None:  # pragma: no cover
    """Console script entry point reading CLI arguments."""
    main(sys.argv[1:])


if __name__ == "__main__":  # pragma: no cover
    main()
