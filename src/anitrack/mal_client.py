"""MyAnimeList API client."""

import logging
from datetime import date
from typing import Callable, Optional

import pydantic
import requests
from pydantic import BaseModel, Field

from .base_client import BaseAPIClient
from .constants import DEFAULT_TIMEOUT_SECONDS, MAL_LIST_PAGE_LIMIT, SEARCH_LIMIT, Backend
from .models import Anime, AnimeList, CanonicalStatus, Entry, SearchPreview, SearchResult
from .scoring import ScoreSource, rank_by_title, read_score
from .status import from_mal, to_mal

logger = logging.getLogger(__name__)

FINISH_DATE_FORMAT = "%Y-%m-%d"


class MALPicture(BaseModel):
    large: str = ""
    medium: str = ""

    def best(self) -> str:
        return self.large or self.medium


class MALNode(BaseModel):
    id: int
    title: str = ""
    main_picture: MALPicture = Field(default_factory=MALPicture)
    num_episodes: Optional[int] = None


class MALListStatus(BaseModel):
    status: str = ""
    score: int = 0
    num_episodes_watched: int = 0
    is_rewatching: bool = False


class MALListItem(BaseModel):
    """One item of the paginated animelist endpoint."""

    node: MALNode
    list_status: MALListStatus = Field(default_factory=MALListStatus)


def _validate_each(model: type[BaseModel], raw_items: list, what: str) -> list:
    """Validate native items one by one, skipping malformed ones."""
    valid = []
    for raw in raw_items:
        try:
            valid.append(model.model_validate(raw))
        except pydantic.ValidationError as e:
            logger.warning(f"Skipping malformed MAL {what}: {e}")
    return valid


def to_anime_list(items: list[MALListItem]) -> AnimeList:
    """Convert MAL's native list items into the unified list."""
    anime_list = AnimeList()
    for item in items:
        anime_list.add(
            Entry(
                media_id=item.node.id,
                backend=Backend.MAL,
                title=item.node.title,
                total_episodes=item.node.num_episodes,
                progress=item.list_status.num_episodes_watched,
                score=float(item.list_status.score),
                cover_image=item.node.main_picture.best(),
                status=from_mal(item.list_status.status, item.list_status.is_rewatching),
            )
        )
    return anime_list


class MALClient(BaseAPIClient):
    """Client for MyAnimeList API v2."""

    BASE_URL = "https://api.myanimelist.net/v2"
    backend = Backend.MAL

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
        today: Callable[[], date] = date.today,
    ):
        """Initialize MAL client."""
        super().__init__(base_url=self.BASE_URL, timeout=timeout, session=session)
        self.today = today

    def _patch_list_status(self, token: str, media_id: int, data: dict, action: str) -> dict:
        """PATCH my_list_status with a form-encoded body."""
        url = f"{self.base_url}/anime/{media_id}/my_list_status"
        return self._request(
            "PATCH",
            url,
            token,
            action,
            data=data,
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )

    def get_user_identity(self, token: str) -> tuple[int, str]:
        data = self._identity_request("GET", f"{self.base_url}/users/@me", token)
        return data.get("id", 0), data.get("name", "")

    def get_user_anime_list(self, token: str, user_id: int = 0) -> AnimeList:
        """Fetch user's anime list from MyAnimeList.

        MAL only exposes the token owner's list here, so user_id is unused.
        """
        items = []
        url = f"{self.base_url}/users/@me/animelist"
        params = {"fields": "list_status,num_episodes", "limit": MAL_LIST_PAGE_LIMIT}

        while url:
            data = self._request("GET", url, token, "get anime list", params=params)
            items.extend(_validate_each(MALListItem, data.get("data") or [], "list entry"))

            # Pagination
            url = (data.get("paging") or {}).get("next")
            params = None  # Next URL already contains params

        logger.info(f"Fetched {len(items)} anime entries from MyAnimeList")
        return to_anime_list(items)

    def _search(self, query: str, token: str, fields: Optional[str] = None) -> list[MALNode]:
        params = {"q": query, "limit": SEARCH_LIMIT}
        if fields:
            params["fields"] = fields
        data = self._request("GET", f"{self.base_url}/anime", token, "search for anime", params=params)
        raw_nodes = [(item or {}).get("node") or {} for item in data.get("data") or []]
        nodes = _validate_each(MALNode, raw_nodes, "search result")
        return rank_by_title(nodes, query, lambda node: node.title)

    def search_anime(self, query: str, token: str) -> list[SearchResult]:
        """Search MAL anime by title."""
        return [SearchResult(media_id=n.id, title=n.title) for n in self._search(query, token)]

    def search_anime_preview(self, query: str, token: str) -> dict[int, SearchPreview]:
        """Search MAL anime by title, with cover art."""
        nodes = self._search(query, token, fields="main_picture")
        return {n.id: SearchPreview(title=n.title, cover_image=n.main_picture.best()) for n in nodes}

    def update_progress(self, token: str, media_id: int, episodes: int) -> None:
        self._patch_list_status(token, media_id, {"num_watched_episodes": episodes}, "update progress")
        logger.info(f"MAL progress for {media_id} set to {episodes}")

    def update_status(self, token: str, media_id: int, status: CanonicalStatus) -> None:
        """Set the list status.

        Completed also stamps today's date as finish_date; Rewatching is
        "watching" plus the is_rewatching flag.
        """
        native, rewatching = to_mal(status)
        data = {"status": native}
        if status == CanonicalStatus.COMPLETED:
            data["finish_date"] = self.today().strftime(FINISH_DATE_FORMAT)
        if rewatching:
            data["is_rewatching"] = "true"
        self._patch_list_status(token, media_id, data, "update status")
        logger.info(f"MAL status for {media_id} set to {status.value}")

    def rate_anime(self, token: str, media_id: int, score_source: ScoreSource) -> int:
        score = read_score(score_source)
        self._patch_list_status(token, media_id, {"score": score}, "rate anime")
        logger.info(f"MAL score for {media_id} set to {score}")
        return score

    def add_to_watching_list(self, media_id: int, token: str) -> None:
        native, _ = to_mal(CanonicalStatus.WATCHING)
        self._patch_list_status(token, media_id, {"status": native}, "add anime")
        logger.info(f"Added {media_id} to MAL watching list")

    def get_anime_details(self, media_id: int, token: str) -> Anime:
        url = f"{self.base_url}/anime/{media_id}"
        params = {"fields": "num_episodes,status,my_list_status"}
        data = self._request("GET", url, token, "get anime details", params=params)
        return Anime(
            media_id=data.get("id", media_id),
            backend=self.backend,
            title=data.get("title", ""),
            total_episodes=data.get("num_episodes"),
            is_airing=data.get("status") == "currently_airing",
            mal_id=data.get("id", media_id),
        )
