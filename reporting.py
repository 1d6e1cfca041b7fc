#!/usr/bin/env python3
"""Final run summary."""

from __future__ import annotations

import colorama

from config import CleanupMode, MigrationOptions
from logging_utils import Logger
from models import RunSummary

EXIT_SUCCESS = 0
EXIT_EXECUTION_ERROR = 1


def print_summary(summary: RunSummary, options: MigrationOptions) -> None:
    green = colorama.Fore.GREEN
    red = colorama.Fore.RED
    yellow = colorama.Fore.YELLOW
    blue = colorama.Fore.BLUE
    reset = colorama.Style.RESET_ALL

    Logger.header("Migration complete")
    Logger.plain(f"  {green}Migrated:{reset}  {summary.migrated}")
    Logger.plain(f"  {red}Failed:{reset}    {summary.failed}")
    Logger.plain(f"  {yellow}Skipped:{reset}   {summary.skipped}")
    if options.target_project is not None:
        Logger.plain(f"  {blue}Linked:{reset}    {summary.linked}")
    if options.topics:
        Logger.plain(f"  {blue}Tagged:{reset}    {summary.tagged}")
    if options.teams:
        Logger.plain(f"  {blue}Teams:{reset}     {summary.team_assigned}")
    if options.cleanup_mode == CleanupMode.ARCHIVE:
        Logger.plain(f"  {yellow}Archived:{reset}  {summary.archived}")
    if options.cleanup_mode == CleanupMode.DELETE:
        Logger.plain(f"  {red}Deleted:{reset}   {summary.deleted}")

    if summary.failed_repos:
        Logger.plain()
        Logger.plain("Failed repos:", red)
        for name in summary.failed_repos:
            Logger.plain(f"  - {name}")


def exit_code_for(summary: RunSummary) -> int:
    """Only migration failures affect the exit status."""
    return EXIT_EXECUTION_ERROR if summary.has_failures else EXIT_SUCCESS
