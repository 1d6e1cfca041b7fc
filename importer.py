#!/usr/bin/env python3
"""GitHub Enterprise Importer (gh gei) integration."""

from __future__ import annotations

import os
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass
from typing import List, Optional, TextIO

from logging_utils import Logger

GH_EXECUTABLE = "gh"
GEI_EXTENSION = "gh-gei"

# Exit code reported when the importer process could not be started
EXIT_NOT_STARTED = 127

_DIAGNOSTIC_HINTS = [
    (
        re.compile(r"already\s+(?:been\s+)?queued", re.IGNORECASE),
        "a migration for this repository is already queued; "
        "wait for it to finish before retrying",
    ),
    (
        re.compile(r"already\s+exists", re.IGNORECASE),
        "the target repository already exists; it was likely migrated by an "
        "earlier run",
    ),
]


@dataclass
class ImportResult:
    """Exit status and captured output of one importer invocation."""
    exit_code: int
    output: str = ""

    @property
    def succeeded(self) -> bool:
        return self.exit_code == 0

    def diagnostic_hint(self) -> Optional[str]:
        """Explain well-known failure messages in the captured output."""
        if self.succeeded:
            return None
        for pattern, hint in _DIAGNOSTIC_HINTS:
            if pattern.search(self.output):
                return hint
        return None


class GeiImporter:
    """Runs `gh gei migrate-repo` once per repository."""

    def __init__(
        self,
        source_token: str,
        target_token: str,
        stream: Optional[TextIO] = None,
    ) -> None:
        self.source_token = source_token
        self.target_token = target_token
        self.stream = stream

    @staticmethod
    def gh_available() -> bool:
        return shutil.which(GH_EXECUTABLE) is not None

    @staticmethod
    def gei_installed() -> bool:
        """Return True if the gei extension is listed by `gh extension list`."""
        try:
            result = subprocess.run(
                [GH_EXECUTABLE, "extension", "list"],
                capture_output=True,
                text=True,
                timeout=60,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            Logger.debug(f"could not list gh extensions: {e}")
            return False
        return GEI_EXTENSION in (result.stdout or "")

    def build_command(
        self,
        source_org: str,
        target_org: str,
        repo_name: str,
        visibility: str,
        skip_releases: bool,
    ) -> List[str]:
        cmd = [
            GH_EXECUTABLE,
            "gei",
            "migrate-repo",
            "--github-source-org",
            source_org,
            "--source-repo",
            repo_name,
            "--github-target-org",
            target_org,
            "--target-repo",
            repo_name,
            "--target-repo-visibility",
            visibility,
        ]
        if skip_releases:
            cmd.append("--skip-releases")
        return cmd

    def _environment(self) -> dict:
        # gei reads both PATs from the environment
        env = os.environ.copy()
        env.update(
            {
                "GH_PAT": self.target_token,
                "GH_SOURCE_PAT": self.source_token,
            }
        )
        return env

    def migrate_repo(
        self,
        source_org: str,
        target_org: str,
        repo_name: str,
        visibility: str,
        skip_releases: bool = False,
    ) -> ImportResult:
        """Run the importer synchronously, relaying its output while capturing it."""
        cmd = self.build_command(
            source_org, target_org, repo_name, visibility, skip_releases
        )
        stream = self.stream or sys.stdout
        captured: List[str] = []
        try:
            proc = subprocess.Popen(
                cmd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                encoding="utf-8",
                errors="replace",
                bufsize=1,
                env=self._environment(),
            )
        except OSError as e:
            Logger.error(f"failed to start importer for '{repo_name}': {e}")
            return ImportResult(exit_code=EXIT_NOT_STARTED, output=str(e))

        with proc:
            for line in proc.stdout:
                stream.write(line)
                stream.flush()
                captured.append(line)
            exit_code = proc.wait()

        return ImportResult(exit_code=exit_code, output="".join(captured))
