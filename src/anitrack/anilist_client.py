"""AniList API client."""

import logging
from typing import Optional

import pydantic
import requests

from .base_client import BaseAPIClient
from .constants import DEFAULT_TIMEOUT_SECONDS, SEARCH_LIMIT, Backend
from .exceptions import AuthError, BackendRequestError, NotFoundError
from .models import Anime, AnimeList, CanonicalStatus, Entry, SearchPreview, SearchResult
from .scoring import ScoreSource, rank_by_title, read_score
from .status import from_anilist, to_anilist

logger = logging.getLogger(__name__)

LIST_CHUNK_SIZE = 500

SAVE_ENTRY_MUTATION = """
mutation ($mediaId: Int, $progress: Int, $status: MediaListStatus, $score: Float) {
  SaveMediaListEntry(mediaId: $mediaId, progress: $progress, status: $status, score: $score) {
    id
    progress
    status
    score
  }
}
"""


class AniListClient(BaseAPIClient):
    """Client for AniList GraphQL API."""

    BASE_URL = "https://graphql.anilist.co"
    backend = Backend.ANILIST

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize AniList client."""
        super().__init__(
            base_url=self.BASE_URL,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
            },
            timeout=timeout,
            session=session,
        )

    def _query(self, query: str, variables: Optional[dict], token: str, action: str) -> dict:
        """Execute a GraphQL query."""
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        data = self._request("POST", self.base_url, token, action, json=payload)

        if data.get("errors"):
            logger.error(f"GraphQL errors: {data['errors']}")
            raise BackendRequestError(self.name, f"failed to {action}: GraphQL errors: {data['errors']}")

        return data.get("data") or {}

    def _save_entry(self, token: str, variables: dict, action: str) -> dict:
        data = self._query(SAVE_ENTRY_MUTATION, variables, token, action)
        return data.get("SaveMediaListEntry") or {}

    def get_user_identity(self, token: str) -> tuple[int, str]:
        """Return the authenticated viewer's id and name."""
        query = """
        query {
          Viewer {
            id
            name
          }
        }
        """
        data = self._identity_request("POST", self.base_url, token, json={"query": query})
        if data.get("errors"):
            raise AuthError(self.name, f"failed to get user info: GraphQL errors: {data['errors']}")
        data = data.get("data") or {}
        viewer = data.get("Viewer") or {}
        return viewer.get("id", 0), viewer.get("name", "")

    def get_user_anime_list(self, token: str, user_id: int) -> AnimeList:
        """Fetch user's anime list, one chunk at a time."""
        query = """
        query ($userId: Int, $chunk: Int, $perChunk: Int) {
          MediaListCollection(userId: $userId, type: ANIME, chunk: $chunk, perChunk: $perChunk) {
            hasNextChunk
            lists {
              entries {
                status
                score(format: POINT_10_DECIMAL)
                progress
                media {
                  id
                  episodes
                  title { romaji english }
                  coverImage { large medium }
                }
              }
            }
          }
        }
        """

        raw_entries = []
        chunk = 1
        while True:
            variables = {"userId": user_id, "chunk": chunk, "perChunk": LIST_CHUNK_SIZE}
            data = self._query(query, variables, token, "get anime list")
            collection = data.get("MediaListCollection") or {}
            for list_group in collection.get("lists") or []:
                raw_entries.extend(list_group.get("entries") or [])
            if not collection.get("hasNextChunk"):
                break
            chunk += 1

        anime_list = AnimeList()
        for raw in raw_entries:
            try:
                entry = self._parse_entry(raw)
            except pydantic.ValidationError as e:
                # Hidden or deleted media come back as "media": null
                logger.warning(f"Skipping malformed AniList list entry: {e}")
                continue
            anime_list.add(entry)

        logger.info(f"Fetched {len(anime_list)} anime entries from AniList")
        return anime_list

    def _parse_entry(self, entry: dict) -> Entry:
        """Parse AniList entry to common model."""
        media = entry.get("media") or {}
        title_data = media.get("title") or {}
        cover = media.get("coverImage") or {}

        return Entry(
            media_id=media.get("id"),
            backend=self.backend,
            title=title_data.get("romaji") or title_data.get("english") or "",
            total_episodes=media.get("episodes"),
            progress=entry.get("progress") or 0,
            score=entry.get("score") or 0.0,
            cover_image=cover.get("large") or cover.get("medium") or "",
            status=from_anilist(entry.get("status")),
        )

    def _search(self, query: str, token: str) -> list[dict]:
        search_query = """
        query ($search: String, $perPage: Int) {
          Page(perPage: $perPage) {
            media(search: $search, type: ANIME) {
              id
              title { romaji english }
              coverImage { large medium }
            }
          }
        }
        """
        variables = {"search": query, "perPage": SEARCH_LIMIT}
        data = self._query(search_query, variables, token, "search for anime")
        media = []
        for item in (data.get("Page") or {}).get("media") or []:
            if not item or not item.get("id"):
                logger.warning(f"Skipping AniList search result without an id: {item}")
                continue
            media.append(item)
        return rank_by_title(media, query, self._title)

    @staticmethod
    def _title(media: dict) -> str:
        title_data = media.get("title") or {}
        return title_data.get("romaji") or title_data.get("english") or ""

    def search_anime(self, query: str, token: str) -> list[SearchResult]:
        """Search AniList anime by title."""
        return [SearchResult(media_id=m["id"], title=self._title(m)) for m in self._search(query, token)]

    def search_anime_preview(self, query: str, token: str) -> dict[int, SearchPreview]:
        """Search AniList anime by title, with cover art."""
        previews = {}
        for media in self._search(query, token):
            cover = media.get("coverImage") or {}
            previews[media["id"]] = SearchPreview(
                title=self._title(media),
                cover_image=cover.get("large") or cover.get("medium") or "",
            )
        return previews

    def update_progress(self, token: str, media_id: int, episodes: int) -> None:
        self._save_entry(token, {"mediaId": media_id, "progress": episodes}, "update progress")
        logger.info(f"AniList progress for {media_id} set to {episodes}")

    def update_status(self, token: str, media_id: int, status: CanonicalStatus) -> None:
        """Set the list status. AniList has a native REPEATING status and
        stamps completion dates itself, so only the status is sent."""
        variables = {"mediaId": media_id, "status": to_anilist(status)}
        self._save_entry(token, variables, "update status")
        logger.info(f"AniList status for {media_id} set to {status.value}")

    def rate_anime(self, token: str, media_id: int, score_source: ScoreSource) -> int:
        score = read_score(score_source)
        self._save_entry(token, {"mediaId": media_id, "score": float(score)}, "rate anime")
        logger.info(f"AniList score for {media_id} set to {score}")
        return score

    def add_to_watching_list(self, media_id: int, token: str) -> None:
        variables = {"mediaId": media_id, "status": to_anilist(CanonicalStatus.WATCHING)}
        self._save_entry(token, variables, "add anime")
        logger.info(f"Added {media_id} to AniList watching list")

    def get_anime_details(self, media_id: int, token: str) -> Anime:
        query = """
        query ($id: Int) {
          Media(id: $id, type: ANIME) {
            id
            idMal
            episodes
            status
            title { romaji english }
          }
        }
        """
        data = self._query(query, {"id": media_id}, token, "get anime details")
        media = data.get("Media")
        if not media:
            raise NotFoundError(media_id)
        return Anime(
            media_id=media["id"],
            backend=self.backend,
            title=self._title(media),
            total_episodes=media.get("episodes"),
            is_airing=media.get("status") == "RELEASING",
            mal_id=media.get("idMal"),
        )

    def get_mal_id(self, anilist_id: int, token: str = "") -> int:
        """Cross-reference: the MAL id recorded on an AniList media."""
        query = """
        query ($id: Int) {
          Media(id: $id, type: ANIME) {
            idMal
          }
        }
        """
        data = self._query(query, {"id": anilist_id}, token, "look up MAL id")
        mal_id = (data.get("Media") or {}).get("idMal")
        if not mal_id:
            raise NotFoundError(anilist_id)
        return mal_id

    def get_id_by_mal_id(self, mal_id: int, token: str = "") -> int:
        """Cross-reference: the AniList media whose MAL id equals mal_id."""
        query = """
        query ($malId: Int) {
          Media(idMal: $malId, type: ANIME) {
            id
          }
        }
        """
        data = self._query(query, {"malId": mal_id}, token, "look up AniList id")
        anilist_id = (data.get("Media") or {}).get("id")
        if not anilist_id:
            raise NotFoundError(mal_id)
        return anilist_id
