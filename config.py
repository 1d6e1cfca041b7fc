#!/usr/bin/env python3
"""Configuration dataclasses for gh-org-migrator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class Visibility(Enum):
    """Enumeration for repository visibility levels."""
    PRIVATE = "private"
    PUBLIC = "public"
    INTERNAL = "internal"


class TeamPermission(Enum):
    """Enumeration for team permission levels on a repository."""
    PULL = "pull"
    PUSH = "push"
    ADMIN = "admin"
    MAINTAIN = "maintain"
    TRIAGE = "triage"


class CleanupMode(Enum):
    """What to do with source repositories after a successful migration."""
    NONE = "none"
    ARCHIVE = "archive"
    DELETE = "delete"


@dataclass(frozen=True)
class TeamGrant:
    """Team slug and the permission it receives on every migrated repo."""
    slug: str
    permission: TeamPermission


@dataclass(frozen=True)
class SourceConfig:
    """Source organization configuration."""
    org: str
    token: str


@dataclass(frozen=True)
class TargetConfig:
    """Target organization configuration."""
    org: str
    token: str


@dataclass(frozen=True)
class MigrationOptions:
    """Migration behavior configuration."""
    dry_run: bool = False
    assume_yes: bool = False
    exclude: frozenset = frozenset()
    cleanup_mode: CleanupMode = CleanupMode.NONE
    target_visibility: Optional[Visibility] = None
    skip_releases: bool = False
    target_project: Optional[int] = None
    topics: Tuple[str, ...] = ()
    teams: Tuple[TeamGrant, ...] = ()


@dataclass(frozen=True)
class Config:
    """Main configuration for an organization-to-organization migration."""
    source: SourceConfig
    target: TargetConfig
    options: MigrationOptions
