"""Tests for the token health check."""

from unittest.mock import MagicMock

import pytest

from anitrack import healthcheck
from anitrack.config import Settings
from anitrack.exceptions import AuthError
from anitrack.tracking import DualWriteCoordinator


@pytest.fixture
def clients(monkeypatch):
    anilist, mal = MagicMock(name="anilist"), MagicMock(name="mal")
    anilist.get_user_identity.return_value = (1, "a-user")
    mal.get_user_identity.return_value = (2, "m-user")
    monkeypatch.setattr(
        healthcheck, "build_coordinator", lambda settings: DualWriteCoordinator(anilist, mal, settings.policy)
    )
    monkeypatch.delenv("ANILIST_ACCESS_TOKEN", raising=False)
    monkeypatch.delenv("MAL_ACCESS_TOKEN", raising=False)
    return anilist, mal


def _settings(tmp_path, body):
    path = tmp_path / "config.yaml"
    path.write_text(body, encoding="utf-8")
    return Settings(path)


def test_healthy_single_service(tmp_path, clients):
    settings = _settings(tmp_path, "anilist:\n  access_token: a-tok\n")
    assert healthcheck.check(settings)


def test_missing_primary_token(tmp_path, clients):
    settings = _settings(tmp_path, "tracking:\n  service: mal\nanilist:\n  access_token: a-tok\n")
    assert not healthcheck.check(settings)


def test_dual_tracking_requires_both(tmp_path, clients):
    anilist, mal = clients
    mal.get_user_identity.side_effect = AuthError("MAL", "failed to get user info", 401, "")
    settings = _settings(
        tmp_path,
        "tracking:\n  dual_tracking: true\nanilist:\n  access_token: a-tok\nmal:\n  access_token: m-tok\n",
    )
    assert not healthcheck.check(settings)
