#!/usr/bin/env python3
"""Main orchestrator for migrating a GitHub organization into another one."""

from __future__ import annotations

import re
from typing import Callable, Optional

from cleanup import BatchCleanup
from config import Config
from github_source import GitHubSource
from github_target import GitHubTarget
from importer import GeiImporter
from logging_utils import Logger
from models import MigrationOutcome, MigrationPlan, RepoDescriptor, RunSummary, StepStatus
from planner import build_plan, print_plan, target_visibility_for
from prerequisites import PrerequisiteChecker
from reporting import EXIT_EXECUTION_ERROR, EXIT_SUCCESS, exit_code_for, print_summary

CONFIRM_PATTERN = re.compile(r"^[Yy]$")


class MigrationOrchestrator:
    def __init__(
        self,
        cfg: Config,
        source: Optional[GitHubSource] = None,
        target: Optional[GitHubTarget] = None,
        importer: Optional[GeiImporter] = None,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.cfg = cfg
        self.source = source or GitHubSource(cfg.source.org, cfg.source.token)
        self.target = target or GitHubTarget(cfg.target.org, cfg.target.token)
        self.importer = importer or GeiImporter(cfg.source.token, cfg.target.token)
        self.prompt = prompt
        self.summary = RunSummary()

    def run(self) -> int:
        try:
            checker = PrerequisiteChecker(self.cfg, self.target, self.importer)
            checker.run()

            plan = self._fetch_plan()
            if plan is None:
                return EXIT_SUCCESS

            print_plan(plan, self.cfg, checker.project_title)

            if self.cfg.options.dry_run:
                Logger.info("Dry run complete. No changes were made.")
                return EXIT_SUCCESS

            if not self.cfg.options.assume_yes and not self._confirm_start():
                Logger.info("Migration cancelled.")
                return EXIT_SUCCESS

            Logger.header("Starting migration")
            self.migrate_all(plan)

            BatchCleanup(self.cfg, self.source, self.prompt).run(self.summary)

            print_summary(self.summary, self.cfg.options)
            return exit_code_for(self.summary)
        except SystemExit as e:
            return int(e.code) if isinstance(e.code, int) else EXIT_EXECUTION_ERROR
        except KeyboardInterrupt:
            Logger.error("interrupted by user")
            return EXIT_EXECUTION_ERROR
        except Exception as e:
            Logger.error(f"unexpected error: {e}")
            return EXIT_EXECUTION_ERROR

    def _fetch_plan(self) -> Optional[MigrationPlan]:
        """List source repos and apply exclusions; None when nothing is left."""
        org = self.cfg.source.org
        Logger.header(f"Fetching repositories from {org}")
        repos = self.source.list_repositories()
        if not repos:
            Logger.warn(f"No repositories found in {org}.")
            return None
        Logger.info(f"Found {len(repos)} repositories in {org}")

        excluded = self.cfg.options.exclude
        if excluded:
            Logger.info(
                f"Excluding {len(excluded)} repos: {', '.join(sorted(excluded))}"
            )

        plan = build_plan(repos, excluded)
        self.summary.skipped = plan.skipped
        if not plan:
            Logger.warn("No repositories to migrate after applying exclusions.")
            return None
        return plan

    def _confirm_start(self) -> bool:
        try:
            answer = self.prompt("Proceed with migration? [y/N]: ")
        except EOFError:
            return False
        return bool(CONFIRM_PATTERN.match(answer.strip()))

    def migrate_all(self, plan: MigrationPlan) -> RunSummary:
        total = len(plan)
        for idx, repo in enumerate(plan, start=1):
            outcome = self.migrate_repo(repo, idx, total)
            self.summary.record(outcome)
        return self.summary

    def migrate_repo(self, repo: RepoDescriptor, idx: int, total: int) -> MigrationOutcome:
        """Import one repository and, on success, run its post-steps."""
        Logger.plain()
        Logger.info(f"[{idx}/{total}] Migrating {repo.name}...")

        result = self.importer.migrate_repo(
            source_org=self.cfg.source.org,
            target_org=self.cfg.target.org,
            repo_name=repo.name,
            visibility=target_visibility_for(repo, self.cfg),
            skip_releases=self.cfg.options.skip_releases,
        )

        if not result.succeeded:
            Logger.error(f"{repo.name} - migration failed (exit code {result.exit_code})")
            hint = result.diagnostic_hint()
            if hint:
                Logger.warn(f"{repo.name} - {hint}")
            return MigrationOutcome(name=repo.name, succeeded=False, hint=hint)

        Logger.success(f"{repo.name} - migrated successfully")
        return MigrationOutcome(
            name=repo.name,
            succeeded=True,
            project_link=self._link_project(repo.name),
            topics=self._add_topics(repo.name),
            teams=self._grant_teams(repo.name),
        )

    def _link_project(self, name: str) -> StepStatus:
        number = self.cfg.options.target_project
        if number is None:
            return StepStatus.NOT_ATTEMPTED
        if self.target.link_project(number, name):
            Logger.success(f"{name} - linked to project #{number}")
            return StepStatus.SUCCEEDED
        Logger.warn(f"{name} - migrated but failed to link to project #{number}")
        return StepStatus.FAILED

    def _add_topics(self, name: str) -> StepStatus:
        topics = self.cfg.options.topics
        if not topics:
            return StepStatus.NOT_ATTEMPTED
        all_ok = True
        for topic in topics:
            if not self.target.add_topic(name, topic):
                all_ok = False
        if all_ok:
            Logger.success(f"{name} - topics added: {','.join(topics)}")
            return StepStatus.SUCCEEDED
        Logger.warn(f"{name} - some topics failed to apply")
        return StepStatus.FAILED

    def _grant_teams(self, name: str) -> StepStatus:
        teams = self.cfg.options.teams
        if not teams:
            return StepStatus.NOT_ATTEMPTED
        all_ok = True
        for grant in teams:
            if self.target.grant_team(grant.slug, name, grant.permission):
                Logger.success(
                    f"{name} - team '{grant.slug}' granted {grant.permission.value} access"
                )
            else:
                Logger.warn(f"{name} - failed to grant '{grant.slug}' access")
                all_ok = False
        return StepStatus.SUCCEEDED if all_ok else StepStatus.FAILED
