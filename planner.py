#!/usr/bin/env python3
"""Migration planning: exclusion filtering and plan display."""

from __future__ import annotations

from typing import Iterable, List, Optional

import colorama

from config import CleanupMode, Config
from logging_utils import Logger
from models import MigrationPlan, RepoDescriptor


def build_plan(repos: Iterable[RepoDescriptor], excluded: Iterable[str]) -> MigrationPlan:
    """Drop excluded repositories, keeping the listing order of the rest.

    Names match exactly (case-sensitive) after trimming the excluded entries.
    """
    exclusion_set = {name.strip() for name in excluded}
    kept: List[RepoDescriptor] = []
    skipped = 0
    for repo in repos:
        if repo.name in exclusion_set:
            skipped += 1
            Logger.debug(f"excluding: {repo.name}")
            continue
        kept.append(repo)
    return MigrationPlan(repos=tuple(kept), skipped=skipped)


def target_visibility_for(repo: RepoDescriptor, cfg: Config) -> str:
    """Visibility passed to the importer: the override, else the observed one."""
    override = cfg.options.target_visibility
    if override is not None:
        return override.value
    return repo.importer_visibility


def print_plan(plan: MigrationPlan, cfg: Config, project_title: Optional[str] = None) -> None:
    """Show what is about to happen, identically for dry and real runs."""
    bold = colorama.Style.BRIGHT
    reset = colorama.Style.RESET_ALL
    options = cfg.options

    Logger.header("Migration plan")
    Logger.plain(f"{bold}Source:{reset}  {cfg.source.org}")
    Logger.plain(f"{bold}Target:{reset}  {cfg.target.org}")
    Logger.plain(f"{bold}Repos:{reset}   {len(plan)} to migrate, {plan.skipped} excluded")
    if options.target_project is not None:
        title = f" - {project_title}" if project_title else ""
        Logger.plain(f"{bold}Project:{reset} #{options.target_project}{title}")
    if options.topics:
        Logger.plain(f"{bold}Topics:{reset}  {','.join(options.topics)}")
    if options.teams:
        Logger.plain(f"{bold}Teams:{reset}")
        for grant in options.teams:
            Logger.plain(f"          {grant.slug} ({grant.permission.value})")
    if options.cleanup_mode == CleanupMode.ARCHIVE:
        Logger.plain(
            f"{bold}Archive:{reset} Source repos will be archived (read-only) "
            "after migration",
            colorama.Fore.YELLOW,
        )
    if options.cleanup_mode == CleanupMode.DELETE:
        Logger.plain(
            f"{bold}Delete:{reset}  Source repos will be deleted after migration",
            colorama.Fore.RED,
        )
    Logger.plain()

    Logger.plain(f"  {'REPOSITORY':<40} VISIBILITY")
    Logger.plain(f"  {'-' * 40} {'-' * 10}")
    for repo in plan:
        Logger.plain(f"  {repo.name:<40} {repo.visibility}")
    Logger.plain()
