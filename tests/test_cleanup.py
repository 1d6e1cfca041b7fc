"""Tests for the archive/delete confirmation flow."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import requests

from cleanup import BatchCleanup, CleanupState
from config import CleanupMode, Config, MigrationOptions, SourceConfig, TargetConfig
from github_source import GitHubSource
from models import RunSummary


def _make_config(mode: CleanupMode, assume_yes: bool = False) -> Config:
    return Config(
        source=SourceConfig(org='old-org', token='src-token'),
        target=TargetConfig(org='new-org', token='tgt-token'),
        options=MigrationOptions(cleanup_mode=mode, assume_yes=assume_yes),
    )


def _summary(*succeeded: str) -> RunSummary:
    summary = RunSummary()
    summary.succeeded_repos.extend(succeeded)
    summary.failed_repos.append('broken')
    return summary


def test_wrong_org_name_cancels_archiving(capsys: pytest.CaptureFixture) -> None:
    source = MagicMock()
    cleanup = BatchCleanup(
        _make_config(CleanupMode.ARCHIVE), source, prompt=MagicMock(return_value='other-org')
    )
    summary = _summary('alpha')

    assert cleanup.run(summary) == 0

    source.archive_repo.assert_not_called()
    assert summary.archived == 0
    assert cleanup.state == CleanupState.CANCELLED
    assert 'Archiving cancelled' in capsys.readouterr().out


@pytest.mark.parametrize('answer', ['', 'OLD-ORG', ' old-org', 'y'])
def test_only_exact_org_name_confirms(answer: str) -> None:
    source = MagicMock()
    cleanup = BatchCleanup(
        _make_config(CleanupMode.DELETE), source, prompt=MagicMock(return_value=answer)
    )

    assert cleanup.run(_summary('alpha')) == 0
    source.delete_repo.assert_not_called()


def test_eof_at_prompt_cancels() -> None:
    source = MagicMock()
    cleanup = BatchCleanup(
        _make_config(CleanupMode.DELETE), source, prompt=MagicMock(side_effect=EOFError)
    )

    assert cleanup.run(_summary('alpha')) == 0
    source.delete_repo.assert_not_called()


def test_confirmed_archive_touches_only_migrated_repos() -> None:
    source = MagicMock()
    source.archive_repo.return_value = True
    cleanup = BatchCleanup(
        _make_config(CleanupMode.ARCHIVE), source, prompt=MagicMock(return_value='old-org')
    )
    summary = _summary('alpha', 'beta')

    assert cleanup.run(summary) == 2

    assert [c.args[0] for c in source.archive_repo.call_args_list] == ['alpha', 'beta']
    source.delete_repo.assert_not_called()
    assert summary.archived == 2
    assert cleanup.state == CleanupState.DONE


def test_individual_delete_failure_does_not_stop_others() -> None:
    source = MagicMock()
    source.delete_repo.side_effect = [False, True]
    cleanup = BatchCleanup(
        _make_config(CleanupMode.DELETE), source, prompt=MagicMock(return_value='old-org')
    )
    summary = _summary('alpha', 'beta')

    assert cleanup.run(summary) == 1

    assert source.delete_repo.call_count == 2
    assert summary.deleted == 1


def test_yes_flag_does_not_skip_typed_confirmation() -> None:
    source = MagicMock()
    prompt = MagicMock(return_value='')
    cleanup = BatchCleanup(_make_config(CleanupMode.DELETE, assume_yes=True), source, prompt)

    cleanup.run(_summary('alpha'))

    prompt.assert_called_once()
    source.delete_repo.assert_not_called()


def test_nothing_to_do_without_successful_migrations() -> None:
    source = MagicMock()
    prompt = MagicMock()
    cleanup = BatchCleanup(_make_config(CleanupMode.ARCHIVE), source, prompt)

    assert cleanup.run(_summary()) == 0

    prompt.assert_not_called()
    assert cleanup.state == CleanupState.IDLE


def test_disabled_mode_never_prompts() -> None:
    prompt = MagicMock()
    cleanup = BatchCleanup(_make_config(CleanupMode.NONE), MagicMock(), prompt)

    assert cleanup.run(_summary('alpha')) == 0
    prompt.assert_not_called()


def test_network_error_archiving_one_repo_does_not_stop_others() -> None:
    source = GitHubSource('old-org', 'src-token')
    source.org = MagicMock()
    source.rate_limiter.wait_if_needed = lambda *_args, **_kwargs: None
    repo = MagicMock()
    repo.edit.side_effect = [requests.ConnectionError('reset'), None]
    source.org.get_repo.return_value = repo
    cleanup = BatchCleanup(
        _make_config(CleanupMode.ARCHIVE), source, prompt=MagicMock(return_value='old-org')
    )
    summary = _summary('alpha', 'beta')

    assert cleanup.run(summary) == 1

    assert repo.edit.call_count == 2
    assert summary.archived == 1
    assert cleanup.state == CleanupState.DONE
