#!/usr/bin/env python3
"""Runtime records produced while planning and running a migration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple


class StepStatus(Enum):
    """Result of a single post-migration step."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    NOT_ATTEMPTED = "not-attempted"


@dataclass(frozen=True)
class RepoDescriptor:
    """Repository as reported by the source organization at plan time."""
    name: str
    visibility: str

    @property
    def importer_visibility(self) -> str:
        # gei only accepts lower-case visibility values
        return self.visibility.lower()


@dataclass(frozen=True)
class MigrationPlan:
    """Ordered repositories to migrate and the number excluded."""
    repos: Tuple[RepoDescriptor, ...]
    skipped: int = 0

    def __len__(self) -> int:
        return len(self.repos)

    def __iter__(self):
        return iter(self.repos)

    @property
    def names(self) -> List[str]:
        return [repo.name for repo in self.repos]


@dataclass
class MigrationOutcome:
    """Result of migrating one repository, including its post-steps."""
    name: str
    succeeded: bool
    project_link: StepStatus = StepStatus.NOT_ATTEMPTED
    topics: StepStatus = StepStatus.NOT_ATTEMPTED
    teams: StepStatus = StepStatus.NOT_ATTEMPTED
    hint: Optional[str] = None


@dataclass
class RunSummary:
    """Counters accumulated across all phases of a run."""
    migrated: int = 0
    failed: int = 0
    skipped: int = 0
    linked: int = 0
    tagged: int = 0
    team_assigned: int = 0
    archived: int = 0
    deleted: int = 0
    succeeded_repos: List[str] = field(default_factory=list)
    failed_repos: List[str] = field(default_factory=list)

    def record(self, outcome: MigrationOutcome) -> None:
        """Fold a single repository outcome into the counters."""
        if not outcome.succeeded:
            self.failed += 1
            self.failed_repos.append(outcome.name)
            return

        self.migrated += 1
        self.succeeded_repos.append(outcome.name)
        if outcome.project_link == StepStatus.SUCCEEDED:
            self.linked += 1
        if outcome.topics == StepStatus.SUCCEEDED:
            self.tagged += 1
        if outcome.teams == StepStatus.SUCCEEDED:
            self.team_assigned += 1

    @property
    def has_failures(self) -> bool:
        return self.failed > 0
