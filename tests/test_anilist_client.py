"""Tests for the AniList client."""

import pytest

from anitrack.constants import Backend
from anitrack.exceptions import AuthError, BackendRequestError, NotFoundError, ValidationError
from anitrack.models import CanonicalStatus


def _sent_variables(session, call_index=-1):
    call = session.request.call_args_list[call_index]
    return call.kwargs["json"].get("variables", {})


def _entry(media_id, status, progress=0, score=0, large="", medium=""):
    return {
        "status": status,
        "score": score,
        "progress": progress,
        "media": {
            "id": media_id,
            "episodes": 12,
            "title": {"romaji": f"Title {media_id}", "english": None},
            "coverImage": {"large": large, "medium": medium},
        },
    }


def test_get_user_identity(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"Viewer": {"id": 5, "name": "neko"}}})

    assert anilist.get_user_identity("tok") == (5, "neko")
    method, url = session.request.call_args.args
    assert method == "POST"
    assert url == "https://graphql.anilist.co"


def test_unauthorized(anilist, session, make_response):
    session.request.return_value = make_response(401, {"errors": [{"message": "Invalid token"}]})

    with pytest.raises(AuthError):
        anilist.get_user_identity("bad")


def test_graphql_errors_on_200(anilist, session, make_response):
    session.request.return_value = make_response(200, {"errors": [{"message": "nope"}], "data": None})

    with pytest.raises(BackendRequestError) as exc_info:
        anilist.update_progress("tok", 1, 2)
    assert "nope" in str(exc_info.value)


def test_list_reads_every_chunk(anilist, session, make_response):
    session.request.side_effect = [
        make_response(200, {"data": {"MediaListCollection": {
            "hasNextChunk": True,
            "lists": [{"entries": [_entry(1, "CURRENT", progress=4, large="l.jpg")]}],
        }}}),
        make_response(200, {"data": {"MediaListCollection": {
            "hasNextChunk": False,
            "lists": [
                {"entries": [_entry(2, "COMPLETED", score=8.5)]},
                {"entries": [_entry(3, "REPEATING", medium="m.jpg"), _entry(4, "WEIRD")]},
            ],
        }}}),
    ]

    anime_list = anilist.get_user_anime_list("tok", 5)

    assert _sent_variables(session, 0)["chunk"] == 1
    assert _sent_variables(session, 1)["chunk"] == 2
    assert _sent_variables(session, 1)["userId"] == 5
    assert [e.media_id for e in anime_list.category(CanonicalStatus.WATCHING)] == [1, 4]
    assert anime_list.category(CanonicalStatus.WATCHING)[0].cover_image == "l.jpg"
    assert anime_list.category(CanonicalStatus.COMPLETED)[0].score == 8.5
    rewatching = anime_list.category(CanonicalStatus.REWATCHING)[0]
    assert rewatching.cover_image == "m.jpg"
    assert rewatching.backend == Backend.ANILIST


def test_search_ranks_closest_first_and_keeps_ties_in_order(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"Page": {"media": [
        {"id": 1, "title": {"romaji": "Monster Musume"}},
        {"id": 2, "title": {"romaji": "Monstar"}},
        {"id": 3, "title": {"romaji": None, "english": "Monster"}},
        {"id": 4, "title": {"romaji": "Monsten"}},
    ]}}})

    results = anilist.search_anime("Monster", "tok")

    assert [r.media_id for r in results] == [3, 2, 4, 1]
    assert results[0].title == "Monster"


def test_search_preview(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"Page": {"media": [
        {"id": 9, "title": {"romaji": "Mushishi"}, "coverImage": {"large": "", "medium": "small.png"}},
    ]}}})

    previews = anilist.search_anime_preview("Mushishi", "tok")

    assert previews[9].title == "Mushishi"
    assert previews[9].cover_image == "small.png"


def test_completed_status_sends_no_completion_date(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"SaveMediaListEntry": {"id": 1}}})

    anilist.update_status("tok", 77, CanonicalStatus.COMPLETED)

    assert _sent_variables(session) == {"mediaId": 77, "status": "COMPLETED"}


def test_rewatching_maps_to_repeating(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"SaveMediaListEntry": {"id": 1}}})

    anilist.update_status("tok", 77, CanonicalStatus.REWATCHING)

    assert _sent_variables(session)["status"] == "REPEATING"


def test_progress_and_watching_list(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"SaveMediaListEntry": {"id": 1}}})

    anilist.update_progress("tok", 77, 12)
    assert _sent_variables(session) == {"mediaId": 77, "progress": 12}

    anilist.add_to_watching_list(77, "tok")
    anilist.add_to_watching_list(77, "tok")
    assert _sent_variables(session) == {"mediaId": 77, "status": "CURRENT"}


def test_rating(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"SaveMediaListEntry": {"id": 1}}})

    with pytest.raises(ValidationError):
        anilist.rate_anime("tok", 77, lambda: 11)
    session.request.assert_not_called()

    assert anilist.rate_anime("tok", 77, lambda: 7) == 7
    assert _sent_variables(session) == {"mediaId": 77, "score": 7.0}


def test_anime_details(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"Media": {
        "id": 21, "idMal": 21, "episodes": None, "status": "RELEASING", "title": {"romaji": "One Piece"},
    }}})

    anime = anilist.get_anime_details(21, "tok")

    assert anime.is_airing
    assert anime.mal_id == 21
    assert anime.total_episodes is None


def test_cross_reference_lookups(anilist, session, make_response):
    session.request.side_effect = [
        make_response(200, {"data": {"Media": {"idMal": 5114}}}),
        make_response(200, {"data": {"Media": {"id": 5114}}}),
        make_response(200, {"data": {"Media": {"idMal": None}}}),
    ]

    assert anilist.get_mal_id(5114) == 5114
    assert _sent_variables(session, 0) == {"id": 5114}
    assert anilist.get_id_by_mal_id(5114) == 5114
    assert _sent_variables(session, 1) == {"malId": 5114}
    with pytest.raises(NotFoundError):
        anilist.get_mal_id(1)


def test_anonymous_lookup_sends_no_authorization(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"Media": {"idMal": 1}}})

    anilist.get_mal_id(1)

    assert "Authorization" not in session.request.call_args.kwargs["headers"]


def test_list_skips_entries_without_media(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"MediaListCollection": {
        "hasNextChunk": False,
        "lists": [{"entries": [
            _entry(1, "CURRENT"),
            {"status": "CURRENT", "score": 0, "progress": 2, "media": None},
            _entry(2, "COMPLETED"),
        ]}],
    }}})

    anime_list = anilist.get_user_anime_list("tok", 5)

    assert len(anime_list) == 2
    assert [e.media_id for e in anime_list.entries()] == [1, 2]


def test_search_skips_results_without_id(anilist, session, make_response):
    session.request.return_value = make_response(200, {"data": {"Page": {"media": [
        {"id": 1, "title": {"romaji": "Trigun"}},
        None,
        {"title": {"romaji": "Trigun Stampede"}},
    ]}}})

    assert [r.media_id for r in anilist.search_anime("Trigun", "tok")] == [1]
