"""Shared fixtures."""

import json
from unittest.mock import MagicMock

import pytest
import requests

from anitrack.anilist_client import AniListClient
from anitrack.mal_client import MALClient


def build_response(status_code: int = 200, payload=None, text: str = "") -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    body = json.dumps(payload) if payload is not None else text
    response._content = body.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def make_response():
    return build_response


@pytest.fixture
def session():
    """A session whose request() returns queued responses."""
    fake = MagicMock()
    fake.headers = {}
    return fake


@pytest.fixture
def anilist(session):
    return AniListClient(session=session)


@pytest.fixture
def mal(session):
    return MALClient(session=session)
