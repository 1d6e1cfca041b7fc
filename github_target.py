#!/usr/bin/env python3
"""GitHub API wrapper for target organization bookkeeping."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

import github
import requests

if TYPE_CHECKING:
    from github.Organization import Organization
    from github.Team import Team

from config import TeamPermission
from logging_utils import Logger
from utils import RateLimiter

# Exit codes
EXIT_GITHUB_ERROR = 1

GITHUB_API_URL = "https://api.github.com"

PROJECT_QUERY = """
query($org: String!, $number: Int!) {
  organization(login: $org) {
    projectV2(number: $number) { id title }
  }
}
"""

PROJECTS_LIST_QUERY = """
query($org: String!) {
  organization(login: $org) {
    projectsV2(first: 100) { nodes { number title } }
  }
}
"""

LINK_PROJECT_MUTATION = """
mutation($projectId: ID!, $repositoryId: ID!) {
  linkProjectV2ToRepository(
    input: {projectId: $projectId, repositoryId: $repositoryId}
  ) { repository { id } }
}
"""


class GraphQLError(Exception):
    """Raised when the GraphQL endpoint reports errors for a request."""


class GitHubTarget:
    """Wrapper around GitHub API for teams, projects and topics in the target org."""

    def __init__(self, org_name: str, token: str, api_url: str = GITHUB_API_URL) -> None:
        self.org_name = org_name
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.api: Optional[github.Github] = None
        self.org: Optional["Organization"] = None
        self.rate_limiter = RateLimiter(
            max_requests_per_minute=50
        )  # GitHub's standard rate limit
        self._teams: Dict[str, "Team"] = {}
        self._project_id: Optional[str] = None

    def connect(self) -> None:
        """Open the target org, terminating the run if it is not reachable."""
        try:
            self._open_org()
        except github.BadCredentialsException:
            Logger.error("authentication failed (target): invalid token")
            sys.exit(EXIT_GITHUB_ERROR)
        except (github.GithubException, requests.RequestException) as e:
            Logger.error(f"failed to access target org '{self.org_name}': {e}")
            sys.exit(EXIT_GITHUB_ERROR)

    def _open_org(self) -> None:
        Logger.debug(f"init github API for target org: {self.org_name}")
        auth = github.Auth.Token(self.token)
        if self.api_url != GITHUB_API_URL:
            self.api = github.Github(base_url=self.api_url, auth=auth)
        else:
            self.api = github.Github(auth=auth)
        self.rate_limiter.wait_if_needed("GitHub API")
        self.org = self.api.get_organization(self.org_name)

    def _ensure_connected(self) -> None:
        # errors propagate to the caller, post-steps must not end the run
        if self.org is None:
            self._open_org()

    def _get_api_headers(self) -> dict:
        """Get standard API headers for GitHub requests."""
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self.token}",
            "X-GitHub-Api-Version": "2022-11-28",
        }

    def _graphql_url(self) -> str:
        if self.api_url.endswith("/api/v3"):
            return self.api_url[: -len("/v3")] + "/graphql"
        return f"{self.api_url}/graphql"

    def _graphql(self, query: str, variables: dict) -> dict:
        """Run a GraphQL request and return its `data` payload."""
        self.rate_limiter.wait_if_needed("GitHub GraphQL")
        response = requests.post(
            self._graphql_url(),
            json={"query": query, "variables": variables},
            headers=self._get_api_headers(),
            timeout=30,
        )
        if response.status_code == 401:
            raise GraphQLError("unauthorized (401): token invalid")
        if response.status_code != 200:
            raise GraphQLError(f"unexpected status {response.status_code}")
        payload = response.json()
        if payload.get("errors"):
            messages = "; ".join(
                error.get("message", str(error)) for error in payload["errors"]
            )
            raise GraphQLError(messages)
        return payload.get("data") or {}

    # Teams

    def get_team(self, slug: str) -> Optional["Team"]:
        """Return the team with the given slug, or None if it does not exist."""
        if slug in self._teams:
            return self._teams[slug]
        self._ensure_connected()
        try:
            self.rate_limiter.wait_if_needed("GitHub API")
            team = self.org.get_team_by_slug(slug)
        except github.GithubException as e:
            if e.status == 404:
                return None
            raise
        self._teams[slug] = team
        return team

    def list_team_slugs(self) -> List[str]:
        self._ensure_connected()
        self.rate_limiter.wait_if_needed("GitHub API")
        return [team.slug for team in self.org.get_teams()]

    def grant_team(self, slug: str, repo_name: str, permission: TeamPermission) -> bool:
        """Grant a team permission on a target repo; False on any failure."""
        try:
            team = self.get_team(slug)
            if team is None:
                Logger.warn(f"team '{slug}' not found in {self.org_name}")
                return False
            repo = self._get_repo(repo_name)
            self.rate_limiter.wait_if_needed("GitHub API")
            return bool(team.update_team_repository(repo, permission.value))
        except (github.GithubException, requests.RequestException) as e:
            Logger.debug(f"grant '{slug}' on {repo_name} failed: {e}")
            return False

    # Projects

    def get_project(self, number: int) -> Optional[Tuple[str, str]]:
        """Return (node id, title) of a project in the target org, or None."""
        try:
            data = self._graphql(PROJECT_QUERY, {"org": self.org_name, "number": number})
        except (GraphQLError, requests.RequestException) as e:
            Logger.debug(f"project #{number} lookup failed: {e}")
            return None
        project = (data.get("organization") or {}).get("projectV2")
        if not project:
            return None
        self._project_id = project["id"]
        return project["id"], project["title"]

    def list_projects(self) -> List[Tuple[int, str]]:
        data = self._graphql(PROJECTS_LIST_QUERY, {"org": self.org_name})
        nodes = ((data.get("organization") or {}).get("projectsV2") or {}).get("nodes") or []
        return [(node["number"], node["title"]) for node in nodes if node]

    def link_project(self, number: int, repo_name: str) -> bool:
        """Link a target repo to the project; False on any failure."""
        try:
            if self._project_id is None and self.get_project(number) is None:
                Logger.debug(f"project #{number} not found in {self.org_name}")
                return False
            repo = self._get_repo(repo_name)
            self._graphql(
                LINK_PROJECT_MUTATION,
                {"projectId": self._project_id, "repositoryId": repo.node_id},
            )
            return True
        except (GraphQLError, github.GithubException, requests.RequestException) as e:
            Logger.debug(f"link {repo_name} to project #{number} failed: {e}")
            return False

    # Topics

    def add_topic(self, repo_name: str, topic: str) -> bool:
        """Add one topic to a target repo, keeping its existing topics."""
        try:
            repo = self._get_repo(repo_name)
            self.rate_limiter.wait_if_needed("GitHub API")
            topics = list(repo.get_topics())
            if topic not in topics:
                topics.append(topic)
                self.rate_limiter.wait_if_needed("GitHub API")
                repo.replace_topics(topics)
            return True
        except (github.GithubException, requests.RequestException) as e:
            Logger.debug(f"adding topic '{topic}' to {repo_name} failed: {e}")
            return False

    def _get_repo(self, name: str):
        self._ensure_connected()
        self.rate_limiter.wait_if_needed("GitHub API")
        return self.org.get_repo(name)
