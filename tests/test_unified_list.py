"""Tests for list lookups."""

import pytest

from anitrack.constants import Backend
from anitrack.exceptions import InvalidIDError, NotFoundError
from anitrack.models import AnimeList, CanonicalStatus, Entry
from anitrack.unified_list import find_by_id


def _entry(media_id, status, title=""):
    return Entry(media_id=media_id, backend=Backend.ANILIST, status=status, title=title)


def test_find_by_id_returns_matching_entry():
    anime_list = AnimeList()
    anime_list.add(_entry(1, CanonicalStatus.COMPLETED, "One"))
    anime_list.add(_entry(2, CanonicalStatus.PLANNING, "Two"))

    assert find_by_id(anime_list, "2").title == "Two"


def test_watching_wins_over_other_categories():
    """Inconsistent backend data: the same ID in two categories."""
    anime_list = AnimeList()
    anime_list.add(_entry(42, CanonicalStatus.DROPPED, "dropped copy"))
    anime_list.add(_entry(42, CanonicalStatus.WATCHING, "watching copy"))

    found = find_by_id(anime_list, "42")
    assert found.title == "watching copy"
    assert found.status == CanonicalStatus.WATCHING


def test_invalid_id_text():
    with pytest.raises(InvalidIDError):
        find_by_id(AnimeList(), "notanumber")


def test_missing_id():
    with pytest.raises(NotFoundError) as exc_info:
        find_by_id(AnimeList(), "999999")
    assert exc_info.value.media_id == 999999


@pytest.mark.parametrize("id_text", [" 12 ", "1_000", "12.0", ""])
def test_id_text_must_be_plain_digits(id_text):
    with pytest.raises(InvalidIDError):
        find_by_id(AnimeList(), id_text)


def test_signed_id_text_is_accepted():
    anime_list = AnimeList()
    anime_list.add(_entry(5, CanonicalStatus.WATCHING, "Five"))

    assert find_by_id(anime_list, "+5").title == "Five"
