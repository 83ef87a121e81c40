"""Tests for ID translation."""

from unittest.mock import MagicMock

import pytest

from anitrack.constants import Backend
from anitrack.exceptions import UnsupportedConversionError
from anitrack.translator import IdentityTranslator


@pytest.fixture
def anilist_mock():
    client = MagicMock()
    client.get_mal_id.return_value = 5114
    client.get_id_by_mal_id.return_value = 5114
    return client


@pytest.mark.parametrize("backend", ["anilist", "mal", "MyAnimeList", Backend.MAL, Backend.ANILIST])
def test_same_backend_is_identity_without_network(anilist_mock, backend):
    translator = IdentityTranslator(anilist_mock, "token")
    assert translator.translate(123, backend, backend) == 123
    anilist_mock.get_mal_id.assert_not_called()
    anilist_mock.get_id_by_mal_id.assert_not_called()


def test_mal_aliases_are_the_same_backend(anilist_mock):
    translator = IdentityTranslator(anilist_mock)
    assert translator.translate(7, "mal", "myanimelist") == 7
    anilist_mock.get_id_by_mal_id.assert_not_called()


def test_anilist_to_mal_uses_cross_reference(anilist_mock):
    translator = IdentityTranslator(anilist_mock, "tok")
    assert translator.translate(21, "AniList", "MAL") == 5114
    anilist_mock.get_mal_id.assert_called_once_with(21, "tok")


def test_mal_to_anilist_uses_reverse_lookup(anilist_mock):
    translator = IdentityTranslator(anilist_mock, "tok")
    assert translator.translate(21, Backend.MAL, Backend.ANILIST) == 5114
    anilist_mock.get_id_by_mal_id.assert_called_once_with(21, "tok")


def test_each_call_hits_the_network(anilist_mock):
    translator = IdentityTranslator(anilist_mock)
    translator.translate(21, "anilist", "mal")
    translator.translate(21, "anilist", "mal")
    assert anilist_mock.get_mal_id.call_count == 2


@pytest.mark.parametrize("pair", [("kitsu", "mal"), ("anilist", "simkl"), ("", "mal"), ("foo", "foo")])
def test_unknown_backend_names(anilist_mock, pair):
    with pytest.raises(UnsupportedConversionError) as exc_info:
        IdentityTranslator(anilist_mock).translate(1, *pair)
    assert exc_info.value.from_backend == pair[0]
