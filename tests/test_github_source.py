"""Tests for GitHubSource listing and cleanup helpers."""

from __future__ import annotations

from types import SimpleNamespace
from unittest.mock import MagicMock

import github
import pytest
import requests

from github_source import GitHubSource


def _make_source() -> GitHubSource:
    source = GitHubSource('old-org', 'src-token')
    source.api = MagicMock()
    source.org = MagicMock()
    source.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None
    return source


def test_list_repositories_keeps_api_order_and_visibility() -> None:
    source = _make_source()
    source.org.get_repos.return_value = [
        SimpleNamespace(name='zeta', visibility='internal', private=True),
        SimpleNamespace(name='alpha', visibility='public', private=False),
    ]

    repos = source.list_repositories()

    assert [(r.name, r.visibility) for r in repos] == [
        ('zeta', 'internal'),
        ('alpha', 'public'),
    ]
    source.org.get_repos.assert_called_once_with(type='all')


def test_visibility_falls_back_to_private_flag() -> None:
    source = _make_source()
    source.org.get_repos.return_value = [
        SimpleNamespace(name='alpha', visibility=None, private=True),
    ]

    assert source.list_repositories()[0].visibility == 'private'


def test_empty_org_returns_empty_list() -> None:
    source = _make_source()
    source.org.get_repos.return_value = []

    assert source.list_repositories() == []


def test_list_failure_is_fatal(capsys: pytest.CaptureFixture) -> None:
    source = _make_source()
    source.org.get_repos.side_effect = github.GithubException(403, {'message': 'Forbidden'}, None)

    with pytest.raises(SystemExit) as excinfo:
        source.list_repositories()

    assert excinfo.value.code == 1
    assert 'failed to list repos in old-org' in capsys.readouterr().err


def test_archive_repo_edits_archived_flag() -> None:
    source = _make_source()
    repo = MagicMock()
    source.org.get_repo.return_value = repo

    assert source.archive_repo('alpha') is True

    source.org.get_repo.assert_called_once_with('alpha')
    repo.edit.assert_called_once_with(archived=True)


def test_delete_failure_returns_false() -> None:
    source = _make_source()
    repo = MagicMock()
    repo.delete.side_effect = github.GithubException(403, {'message': 'Forbidden'}, None)
    source.org.get_repo.return_value = repo

    assert source.delete_repo('alpha') is False


def test_delete_network_error_returns_false() -> None:
    source = _make_source()
    repo = MagicMock()
    repo.delete.side_effect = requests.ConnectionError('reset')
    source.org.get_repo.return_value = repo

    assert source.delete_repo('alpha') is False


def test_list_network_error_is_fatal() -> None:
    source = _make_source()
    source.org.get_repos.side_effect = requests.Timeout('slow')

    with pytest.raises(SystemExit) as excinfo:
        source.list_repositories()

    assert excinfo.value.code == 1
