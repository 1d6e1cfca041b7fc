#!/usr/bin/env python3
"""Environment checks that must pass before any migration starts."""

from __future__ import annotations

import sys
from typing import Optional

import github
import requests

from config import Config
from github_target import GitHubTarget, GraphQLError
from importer import GeiImporter
from logging_utils import Logger

# Exit codes
EXIT_PREREQUISITE_ERROR = 1


class PrerequisiteChecker:
    """Verifies tooling, teams and project before a migration plan is built.

    Every check terminates the run on failure; later checks are not attempted.
    """

    def __init__(self, cfg: Config, target: GitHubTarget, importer: GeiImporter) -> None:
        self.cfg = cfg
        self.target = target
        self.importer = importer
        self.project_title: Optional[str] = None

    def run(self) -> None:
        Logger.header("Checking prerequisites")
        self.check_importer()
        self.check_teams()
        self.check_project()

    def check_importer(self) -> None:
        if not self.importer.gh_available():
            Logger.error("gh CLI is not installed. Install from https://cli.github.com")
            sys.exit(EXIT_PREREQUISITE_ERROR)
        Logger.success("gh CLI found")

        if not self.importer.gei_installed():
            Logger.error(
                "gh gei extension is not installed. "
                "Run: gh extension install github/gh-gei"
            )
            sys.exit(EXIT_PREREQUISITE_ERROR)
        Logger.success("gh gei extension found")

    def check_teams(self) -> None:
        if self.cfg.options.teams:
            self.target.connect()
        for grant in self.cfg.options.teams:
            Logger.info(f"validating team '{grant.slug}' in {self.cfg.target.org}...")
            try:
                team = self.target.get_team(grant.slug)
            except (github.GithubException, requests.RequestException) as e:
                Logger.debug(f"team lookup failed: {e}")
                team = None
            if team is None:
                Logger.error(f"team '{grant.slug}' not found in {self.cfg.target.org}.")
                self._print_available_teams()
                sys.exit(EXIT_PREREQUISITE_ERROR)
            Logger.success(
                f"team validated: {grant.slug} ({grant.permission.value})"
            )

    def _print_available_teams(self) -> None:
        Logger.plain("  Available teams:")
        try:
            slugs = self.target.list_team_slugs()
        except (github.GithubException, requests.RequestException):
            Logger.plain("    (could not list teams)")
            return
        for slug in slugs:
            Logger.plain(f"    {slug}")

    def check_project(self) -> None:
        number = self.cfg.options.target_project
        if number is None:
            return

        Logger.info(f"validating project #{number} in {self.cfg.target.org}...")
        project = self.target.get_project(number)
        if project is None:
            Logger.error(f"project #{number} not found in {self.cfg.target.org}.")
            self._print_available_projects()
            Logger.plain(
                "  Ensure your target PAT has the 'project' scope: "
                "gh auth refresh -s project"
            )
            sys.exit(EXIT_PREREQUISITE_ERROR)

        _, self.project_title = project
        Logger.success(f"target project: #{number} - {self.project_title}")

    def _print_available_projects(self) -> None:
        Logger.plain("  Available projects:")
        try:
            projects = self.target.list_projects()
        except (GraphQLError, requests.RequestException):
            Logger.plain("    (could not list projects)")
            return
        for number, title in projects:
            Logger.plain(f"    #{number} - {title}")
