#!/usr/bin/env python3
"""GitHub API wrapper for the source organization."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, List, Optional

import github
import requests

if TYPE_CHECKING:
    from github.Organization import Organization

from logging_utils import Logger
from models import RepoDescriptor
from utils import RateLimiter

# Exit codes
EXIT_FETCH_ERROR = 1

GITHUB_API_URL = "https://api.github.com"


class GitHubSource:
    """Wrapper around GitHub API to list, archive and delete source repos."""

    def __init__(self, org_name: str, token: str, api_url: str = GITHUB_API_URL) -> None:
        self.org_name = org_name
        self.token = token
        self.api_url = api_url
        self.api: Optional[github.Github] = None
        self.org: Optional["Organization"] = None
        self.rate_limiter = RateLimiter(max_requests_per_minute=50)

    def connect(self) -> None:
        try:
            self._open_org()
        except github.BadCredentialsException:
            Logger.error("authentication failed (source): invalid token")
            sys.exit(EXIT_FETCH_ERROR)
        except (github.GithubException, requests.RequestException) as e:
            Logger.error(
                f"failed to access source org '{self.org_name}'. "
                "Check your source PAT and org name."
            )
            Logger.plain(str(e))
            sys.exit(EXIT_FETCH_ERROR)

    def _open_org(self) -> None:
        Logger.debug(f"init github API for source org: {self.org_name}")
        auth = github.Auth.Token(self.token)
        if self.api_url != GITHUB_API_URL:
            self.api = github.Github(base_url=self.api_url, auth=auth)
        else:
            self.api = github.Github(auth=auth)
        self.rate_limiter.wait_if_needed("GitHub API")
        self.org = self.api.get_organization(self.org_name)

    def list_repositories(self) -> List[RepoDescriptor]:
        """Return every repository in the source org in API order.

        An empty list means the org really has no repositories; any access
        problem terminates the run instead.
        """
        if self.org is None:
            self.connect()

        repos: List[RepoDescriptor] = []
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            for repo in self.org.get_repos(type="all"):
                visibility = getattr(repo, "visibility", None)
                if not visibility:
                    visibility = "private" if repo.private else "public"
                repos.append(RepoDescriptor(name=repo.name, visibility=visibility))
        except (github.GithubException, requests.RequestException) as e:
            Logger.error(
                f"failed to list repos in {self.org_name}. "
                "Check your source PAT and org name."
            )
            Logger.plain(str(e))
            sys.exit(EXIT_FETCH_ERROR)

        return repos

    def _get_repo(self, name: str):
        if self.org is None:
            self._open_org()
        self.rate_limiter.wait_if_needed("GitHub API")
        return self.org.get_repo(name)

    def archive_repo(self, name: str) -> bool:
        try:
            repo = self._get_repo(name)
            self.rate_limiter.wait_if_needed("GitHub API")
            repo.edit(archived=True)
            return True
        except (github.GithubException, requests.RequestException) as e:
            Logger.warn(f"failed to archive {self.org_name}/{name}: {e}")
            return False

    def delete_repo(self, name: str) -> bool:
        try:
            repo = self._get_repo(name)
            self.rate_limiter.wait_if_needed("GitHub API")
            repo.delete()
            return True
        except (github.GithubException, requests.RequestException) as e:
            Logger.warn(f"failed to delete {self.org_name}/{name}: {e}")
            return False
