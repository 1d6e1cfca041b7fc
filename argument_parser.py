#!/usr/bin/env python3
"""Command line argument parsing and configuration building."""

from __future__ import annotations

import argparse
import os
import re
import sys
from typing import List, NoReturn, Optional, Tuple

from config import (CleanupMode, Config, MigrationOptions, SourceConfig,
                    TargetConfig, TeamGrant, TeamPermission, Visibility)
from logging_utils import Logger
from security import SecurityValidator
from utils import build_exclusion_set, split_csv

# Exit codes
EXIT_CONFIG_ERROR = 1

SOURCE_TOKEN_ENV = "GH_SOURCE_PAT"
TARGET_TOKEN_ENV = "GH_PAT"

PROJECT_NUMBER_PATTERN = re.compile(r"^[0-9]+$")


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports usage errors through Logger with exit code 1."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        Logger.error(f"error: {message}")
        Logger.plain(f"Run '{self.prog} --help' for usage.")
        sys.exit(EXIT_CONFIG_ERROR)


def _create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = _ArgumentParser(
        prog="gh-org-migrator",
        description=(
            "Migrate all repositories from one GitHub organization to another "
            "using GitHub Enterprise Importer (gh gei)"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Prerequisites:
  gh CLI (https://cli.github.com) with the gei extension:
    gh extension install github/gh-gei
  Classic PATs:
    source scopes: admin:org, repo
    target scopes: admin:org, repo, workflow, project

Examples:
  %(prog)s --source-org old-org --target-org new-org \\
           --source-pat ghp_xxx --target-pat ghp_yyy --dry-run
  %(prog)s --source-org old-org --target-org new-org --exclude "repo1,repo2"
  %(prog)s --source-org old-org --target-org new-org --archive-source
  %(prog)s --source-org old-org --target-org new-org --target-project 5
  %(prog)s --source-org old-org --target-org new-org --topics "migrated,legacy"
  %(prog)s --source-org old-org --target-org new-org \\
           --team "developers:push" --team "devops:admin"
        """,
    )
    return parser


def _add_organization_arguments(parser: argparse.ArgumentParser) -> None:
    """Add source/target organization and credential arguments to parser."""
    parser.add_argument(
        "--source-org",
        dest="source_org",
        required=True,
        help="Source GitHub organization",
    )
    parser.add_argument(
        "--target-org",
        dest="target_org",
        required=True,
        help="Target GitHub organization",
    )
    parser.add_argument(
        "--source-pat",
        dest="source_pat",
        help=f"Classic PAT for the source org (or set {SOURCE_TOKEN_ENV} env var)",
    )
    parser.add_argument(
        "--target-pat",
        dest="target_pat",
        help=f"Classic PAT for the target org (or set {TARGET_TOKEN_ENV} env var)",
    )


def _add_behavior_arguments(parser: argparse.ArgumentParser) -> None:
    """Add behavior and configuration arguments to parser."""
    parser.add_argument(
        "--exclude",
        dest="exclude",
        help="Comma-separated list of repository names to skip",
    )
    parser.add_argument(
        "--archive-source",
        action="store_true",
        dest="archive_source",
        help="Archive source repos after successful migration (requires confirmation)",
    )
    parser.add_argument(
        "--delete-source",
        action="store_true",
        dest="delete_source",
        help="Delete source repos after successful migration (requires confirmation)",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        dest="dry_run",
        help="List repos that would be migrated without migrating them",
    )
    parser.add_argument(
        "--target-visibility",
        dest="target_visibility",
        help="Target repo visibility: private, public or internal "
        "(default: preserve original visibility)",
    )
    parser.add_argument(
        "--skip-releases",
        action="store_true",
        dest="skip_releases",
        help="Skip releases during migration (use if releases exceed 10GB)",
    )
    parser.add_argument(
        "--target-project",
        dest="target_project",
        help="Link migrated repos to this GitHub Project number in the target org",
    )
    parser.add_argument(
        "--topics",
        dest="topics",
        help="Comma-separated topics to add to migrated repos",
    )
    parser.add_argument(
        "--team",
        dest="teams",
        action="append",
        default=[],
        metavar="SLUG:PERMISSION",
        help="Grant a team access to migrated repos (repeatable). "
        "Permissions: pull, push, admin, maintain, triage",
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        dest="assume_yes",
        help="Skip the migration confirmation prompt "
        "(archive/delete still require typing the org name)",
    )


def _fail(message: str, hint: Optional[str] = None) -> NoReturn:
    Logger.security_event(
        "CONFIG_VALIDATION_FAILED", f"configuration validation failed: {message}"
    )
    Logger.error(message)
    if hint:
        Logger.plain(f"  {hint}")
    sys.exit(EXIT_CONFIG_ERROR)


def _validate_organizations(args) -> Tuple[str, str]:
    """Validate organization names."""
    try:
        source_org = SecurityValidator.validate_org_name(args.source_org.strip())
        target_org = SecurityValidator.validate_org_name(args.target_org.strip())
    except ValueError as e:
        _fail(f"invalid organization: {e}")
    return source_org, target_org


def _get_and_validate_tokens(args) -> Tuple[str, str]:
    """Get authentication tokens from flags or environment."""
    source_token = args.source_pat or os.getenv(SOURCE_TOKEN_ENV)
    target_token = args.target_pat or os.getenv(TARGET_TOKEN_ENV)
    if not source_token:
        _fail(
            "missing required argument: --source-pat "
            f"(or {SOURCE_TOKEN_ENV})",
            "Create a classic PAT with scopes: admin:org, repo",
        )
    if not target_token:
        _fail(
            "missing required argument: --target-pat "
            f"(or {TARGET_TOKEN_ENV})",
            "Create a classic PAT with scopes: admin:org, repo, workflow, project",
        )
    return source_token, target_token


def _resolve_cleanup_mode(args) -> CleanupMode:
    if args.archive_source and args.delete_source:
        _fail(
            "--archive-source and --delete-source are mutually exclusive. "
            "Choose one."
        )
    if args.archive_source:
        return CleanupMode.ARCHIVE
    if args.delete_source:
        return CleanupMode.DELETE
    return CleanupMode.NONE


def _parse_visibility(value: Optional[str]) -> Optional[Visibility]:
    if value is None:
        return None
    try:
        return Visibility(value)
    except ValueError:
        _fail(
            f"invalid value for --target-visibility: {value} "
            "(must be private, public, or internal)"
        )


def _parse_project(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    if not PROJECT_NUMBER_PATTERN.match(value):
        _fail(
            f"invalid --target-project: {value} (must be a project number)",
            "Run: gh project list --owner <target-org>  to find project numbers.",
        )
    return int(value)


def parse_team_entry(entry: str) -> TeamGrant:
    """Parse a 'slug:permission' entry, raising ValueError naming the entry."""
    if ":" not in entry:
        raise ValueError(
            f"invalid --team format: {entry} "
            "(expected team-slug:permission, e.g. developers:push)"
        )
    slug = entry.split(":", 1)[0].strip()
    permission = entry.rsplit(":", 1)[1].strip()
    try:
        SecurityValidator.validate_team_slug(slug)
    except ValueError as e:
        raise ValueError(f"invalid team slug in --team {entry}: {e}") from e
    try:
        level = TeamPermission(permission)
    except ValueError as e:
        raise ValueError(
            f"invalid permission '{permission}' for team '{slug}' "
            "(valid permissions: pull, push, admin, maintain, triage)"
        ) from e
    return TeamGrant(slug=slug, permission=level)


def _parse_teams(entries: List[str]) -> Tuple[TeamGrant, ...]:
    grants = []
    for entry in entries:
        try:
            grants.append(parse_team_entry(entry))
        except ValueError as e:
            _fail(str(e))
    return tuple(grants)


def _parse_exclusions(value: Optional[str]) -> frozenset:
    names = split_csv(value)
    for name in names:
        try:
            SecurityValidator.validate_repo_name(name)
        except ValueError as e:
            _fail(f"invalid --exclude entry: {e}")
    return build_exclusion_set(names)


def _parse_topics(value: Optional[str]) -> Tuple[str, ...]:
    topics = []
    for topic in split_csv(value):
        try:
            topics.append(SecurityValidator.validate_topic(topic))
        except ValueError as e:
            _fail(f"invalid --topics entry: {e}")
    return tuple(topics)


def parse_arguments(argv: Optional[List[str]] = None) -> Config:
    """Parse command line arguments and return configuration object."""
    parser = _create_argument_parser()
    _add_organization_arguments(parser)
    _add_behavior_arguments(parser)

    args = parser.parse_args(argv)

    source_org, target_org = _validate_organizations(args)
    source_token, target_token = _get_and_validate_tokens(args)

    options = MigrationOptions(
        dry_run=args.dry_run,
        assume_yes=args.assume_yes,
        exclude=_parse_exclusions(args.exclude),
        cleanup_mode=_resolve_cleanup_mode(args),
        target_visibility=_parse_visibility(args.target_visibility),
        skip_releases=args.skip_releases,
        target_project=_parse_project(args.target_project),
        topics=_parse_topics(args.topics),
        teams=_parse_teams(args.teams),
    )

    Logger.security_event(
        "CONFIG_VALIDATION", "successfully validated all configuration inputs"
    )

    return Config(
        source=SourceConfig(org=source_org, token=source_token),
        target=TargetConfig(org=target_org, token=target_token),
        options=options,
    )
