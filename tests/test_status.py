"""Tests for the status vocabulary."""

import pytest

from anitrack.exceptions import ValidationError
from anitrack.models import CanonicalStatus
from anitrack.status import STATUS_TABLE, from_anilist, from_mal, label, parse_status, to_anilist, to_mal


def test_table_covers_every_status():
    assert set(STATUS_TABLE) == set(CanonicalStatus)


@pytest.mark.parametrize("status", list(CanonicalStatus))
def test_anilist_round_trip(status):
    assert from_anilist(to_anilist(status)) == status


@pytest.mark.parametrize("status", list(CanonicalStatus))
def test_anilist_to_mal_to_anilist_round_trip(status):
    native, rewatching = to_mal(from_anilist(to_anilist(status)))
    assert from_anilist(to_anilist(from_mal(native, rewatching))) == status


def test_rewatching_is_watching_plus_flag_on_mal():
    assert to_mal(CanonicalStatus.REWATCHING) == ("watching", True)
    assert to_mal(CanonicalStatus.WATCHING) == ("watching", False)
    assert from_mal("watching", True) == CanonicalStatus.REWATCHING
    assert from_mal("watching") == CanonicalStatus.WATCHING


def test_unknown_native_status_defaults_to_watching():
    assert from_anilist("SOMETHING_NEW") == CanonicalStatus.WATCHING
    assert from_anilist(None) == CanonicalStatus.WATCHING
    assert from_mal("rewatch_later") == CanonicalStatus.WATCHING


def test_labels():
    assert label(CanonicalStatus.PAUSED) == "On Hold"
    assert label(CanonicalStatus.PLANNING) == "Plan to Watch"


def test_parse_status_accepts_native_and_canonical_names():
    assert parse_status("Completed") == CanonicalStatus.COMPLETED
    assert parse_status("CURRENT") == CanonicalStatus.WATCHING
    assert parse_status("on_hold") == CanonicalStatus.PAUSED
    assert parse_status("plan_to_watch") == CanonicalStatus.PLANNING
    assert parse_status("repeating") == CanonicalStatus.REWATCHING

    with pytest.raises(ValidationError):
        parse_status("binging")
