#!/usr/bin/env python3
"""
gh-org-migrator - Migrate all repositories from one GitHub organization
to another.

Each repository is migrated with GitHub Enterprise Importer (gh gei),
then optionally linked to a project, tagged with topics and shared with
teams in the target organization. Successfully migrated source
repositories can be archived or deleted afterwards.
"""

from __future__ import annotations

import sys
from typing import NoReturn

from argument_parser import parse_arguments
from migration_orchestrator import MigrationOrchestrator


def main() -> NoReturn:
    cfg = parse_arguments()
    orchestrator = MigrationOrchestrator(cfg)
    sys.exit(orchestrator.run())


if __name__ == "__main__":
    main()
