"""Tests for GitHubTarget helper functionality."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import github
import requests

from config import TeamPermission
from github_target import GitHubTarget


def _make_target(api_url: str = 'https://api.github.com') -> GitHubTarget:
    target = GitHubTarget('new-org', 'tgt-token', api_url=api_url)
    target.api = MagicMock()
    target.org = MagicMock()
    target.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None
    return target


def _graphql_response(payload: dict, status: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    return response


def test_graphql_url_public_and_enterprise() -> None:
    assert _make_target()._graphql_url() == 'https://api.github.com/graphql'
    enterprise = _make_target('https://github.acme.com/api/v3')
    assert enterprise._graphql_url() == 'https://github.acme.com/api/graphql'


@patch('github_target.requests.post')
def test_get_project_returns_id_and_title(mock_post: MagicMock) -> None:
    mock_post.return_value = _graphql_response(
        {'data': {'organization': {'projectV2': {'id': 'PVT_1', 'title': 'Roadmap'}}}}
    )
    target = _make_target()

    assert target.get_project(5) == ('PVT_1', 'Roadmap')

    body = mock_post.call_args.kwargs['json']
    assert body['variables'] == {'org': 'new-org', 'number': 5}
    assert mock_post.call_args.kwargs['headers']['Authorization'] == 'Bearer tgt-token'


@patch('github_target.requests.post')
def test_get_project_missing_returns_none(mock_post: MagicMock) -> None:
    mock_post.return_value = _graphql_response(
        {'data': {'organization': {'projectV2': None}},
         'errors': [{'message': 'Could not resolve to a ProjectV2 with the number 9.'}]}
    )

    assert _make_target().get_project(9) is None


@patch('github_target.requests.post')
def test_list_projects(mock_post: MagicMock) -> None:
    mock_post.return_value = _graphql_response(
        {'data': {'organization': {'projectsV2': {'nodes': [
            {'number': 1, 'title': 'Roadmap'},
            {'number': 2, 'title': 'Backlog'},
        ]}}}}
    )

    assert _make_target().list_projects() == [(1, 'Roadmap'), (2, 'Backlog')]


@patch('github_target.requests.post')
def test_link_project_uses_repo_node_id(mock_post: MagicMock) -> None:
    mock_post.side_effect = [
        _graphql_response({'data': {'organization': {'projectV2': {'id': 'PVT_1', 'title': 'R'}}}}),
        _graphql_response({'data': {'linkProjectV2ToRepository': {'repository': {'id': 'R_1'}}}}),
    ]
    target = _make_target()
    target.org.get_repo.return_value = MagicMock(node_id='R_1')

    assert target.link_project(5, 'alpha') is True

    variables = mock_post.call_args.kwargs['json']['variables']
    assert variables == {'projectId': 'PVT_1', 'repositoryId': 'R_1'}


@patch('github_target.requests.post')
def test_link_project_failure_returns_false(mock_post: MagicMock) -> None:
    mock_post.return_value = _graphql_response({}, status=502)
    target = _make_target()
    target._project_id = 'PVT_1'

    assert target.link_project(5, 'alpha') is False


def test_add_topic_merges_with_existing_topics() -> None:
    target = _make_target()
    repo = MagicMock()
    repo.get_topics.return_value = ['legacy']
    target.org.get_repo.return_value = repo

    assert target.add_topic('alpha', 'migrated') is True

    repo.replace_topics.assert_called_once_with(['legacy', 'migrated'])


def test_add_topic_failure_returns_false() -> None:
    target = _make_target()
    repo = MagicMock()
    repo.get_topics.return_value = []
    repo.replace_topics.side_effect = github.GithubException(422, {'message': 'Invalid'}, None)
    target.org.get_repo.return_value = repo

    assert target.add_topic('alpha', 'migrated') is False


def test_get_team_returns_none_for_unknown_slug() -> None:
    target = _make_target()
    target.org.get_team_by_slug.side_effect = github.UnknownObjectException(
        404, {'message': 'Not Found'}, None
    )

    assert target.get_team('ghosts') is None


def test_grant_team_updates_repository_permission() -> None:
    target = _make_target()
    team = MagicMock()
    team.update_team_repository.return_value = True
    target.org.get_team_by_slug.return_value = team
    repo = MagicMock()
    target.org.get_repo.return_value = repo

    assert target.grant_team('developers', 'alpha', TeamPermission.MAINTAIN) is True

    team.update_team_repository.assert_called_once_with(repo, 'maintain')


def test_team_lookup_is_cached() -> None:
    target = _make_target()
    target.org.get_team_by_slug.return_value = MagicMock()

    target.get_team('developers')
    target.get_team('developers')

    target.org.get_team_by_slug.assert_called_once_with('developers')


def test_add_topic_network_error_returns_false() -> None:
    target = _make_target()
    repo = MagicMock()
    repo.get_topics.side_effect = requests.ConnectionError('reset')
    target.org.get_repo.return_value = repo

    assert target.add_topic('alpha', 'migrated') is False


def test_grant_team_network_error_returns_false() -> None:
    target = _make_target()
    team = MagicMock()
    team.update_team_repository.side_effect = requests.Timeout('slow')
    target.org.get_team_by_slug.return_value = team

    assert target.grant_team('developers', 'alpha', TeamPermission.PUSH) is False


@patch('github_target.github.Github')
def test_post_step_connect_failure_returns_false(mock_github: MagicMock) -> None:
    """An unreachable org during a post-step is reported, not fatal."""
    mock_github.return_value.get_organization.side_effect = requests.ConnectionError('reset')
    target = GitHubTarget('new-org', 'tgt-token')
    target.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None

    assert target.add_topic('alpha', 'migrated') is False
