#!/usr/bin/env python3
"""Archive or delete migrated source repositories after typed confirmation."""

from __future__ import annotations

import sys
from enum import Enum
from typing import Callable, List

import colorama

from config import CleanupMode, Config
from github_source import GitHubSource
from logging_utils import Logger
from models import RunSummary


class CleanupState(Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting-confirmation"
    CANCELLED = "cancelled"
    EXECUTING = "executing"
    DONE = "done"


_WORDING = {
    CleanupMode.ARCHIVE: {
        "title": "Archive source repositories",
        "banner": "This will archive {count} repos in {org} (read-only).",
        "listing": "Repos to archive:",
        "prompt": "Type the source org name ({org}) to confirm archiving: ",
        "cancelled": "Archiving cancelled. Source repos were NOT archived.",
        "progress": "Archiving",
        "color": colorama.Fore.YELLOW,
    },
    CleanupMode.DELETE: {
        "title": "Delete source repositories",
        "banner": "WARNING: This will permanently delete {count} repos from {org}.",
        "listing": "Repos to delete:",
        "prompt": "Type the source org name ({org}) to confirm deletion: ",
        "cancelled": "Deletion cancelled. Source repos were NOT deleted.",
        "progress": "Deleting",
        "color": colorama.Fore.RED,
    },
}


class BatchCleanup:
    """Runs the archive xor delete phase over successfully migrated repos only.

    The operator must type the source org name exactly; `--yes` does not
    apply here.
    """

    def __init__(
        self,
        cfg: Config,
        source: GitHubSource,
        prompt: Callable[[str], str] = input,
    ) -> None:
        self.cfg = cfg
        self.source = source
        self.prompt = prompt
        self.state = CleanupState.IDLE

    def run(self, summary: RunSummary) -> int:
        """Return the number of repositories actually archived or deleted."""
        mode = self.cfg.options.cleanup_mode
        candidates = list(summary.succeeded_repos)
        if mode == CleanupMode.NONE or not candidates:
            return 0

        wording = _WORDING[mode]
        org = self.cfg.source.org

        self.state = CleanupState.AWAITING_CONFIRMATION
        Logger.header(wording["title"])
        Logger.plain(
            wording["banner"].format(count=len(candidates), org=org),
            colorama.Style.BRIGHT + wording["color"],
        )
        Logger.plain(wording["listing"])
        for name in candidates:
            Logger.plain(f"  - {name}")
        Logger.plain()

        if not self._confirmed(wording["prompt"].format(org=org)):
            self.state = CleanupState.CANCELLED
            Logger.security_event(
                "CLEANUP_CANCELLED", f"{mode.value} of {org} repos not confirmed"
            )
            Logger.warn(wording["cancelled"])
            return 0

        Logger.security_event(
            "CLEANUP_CONFIRMED", f"{mode.value} of {len(candidates)} repos in {org}"
        )
        self.state = CleanupState.EXECUTING
        done = self._execute(mode, candidates, wording["progress"])
        if mode == CleanupMode.ARCHIVE:
            summary.archived += done
        else:
            summary.deleted += done
        self.state = CleanupState.DONE
        return done

    def _confirmed(self, prompt_text: str) -> bool:
        try:
            answer = self.prompt(prompt_text)
        except EOFError:
            answer = ""
        return answer == self.cfg.source.org

    def _execute(self, mode: CleanupMode, names: List[str], verb: str) -> int:
        action = (
            self.source.archive_repo if mode == CleanupMode.ARCHIVE
            else self.source.delete_repo
        )
        done = 0
        for name in names:
            sys.stdout.write(f"  {verb} {self.cfg.source.org}/{name}...")
            sys.stdout.flush()
            if action(name):
                sys.stdout.write(f" {colorama.Fore.GREEN}done{colorama.Style.RESET_ALL}\n")
                done += 1
            else:
                sys.stdout.write(f" {colorama.Fore.RED}failed{colorama.Style.RESET_ALL}\n")
        return done
