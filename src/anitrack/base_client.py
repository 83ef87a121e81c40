"""Base API client with common functionality."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import (
    BACKEND_LABELS,
    DEFAULT_TIMEOUT_SECONDS,
    HTTP_FORBIDDEN,
    HTTP_TOO_MANY_REQUESTS,
    HTTP_UNAUTHORIZED,
    Backend,
)
from .exceptions import AuthError, BackendRequestError
from .models import Anime, AnimeList, CanonicalStatus, SearchPreview, SearchResult
from .scoring import ScoreSource

logger = logging.getLogger(__name__)


class BaseAPIClient(ABC):
    """Base class for backend adapters with common request handling.

    Subclasses implement the same capability set against one backend.
    """

    backend: Backend

    def __init__(
        self,
        base_url: str,
        headers: Optional[dict] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        session: Optional[requests.Session] = None,
    ):
        """Initialize API client; tokens are passed per call."""
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

        if session is None:
            # Configure retry strategy for rate limits (429)
            retry_strategy = Retry(
                total=3,
                backoff_factor=1,
                status_forcelist=[HTTP_TOO_MANY_REQUESTS],
                allowed_methods=["GET", "POST", "PATCH", "PUT", "DELETE"],
            )
            adapter = HTTPAdapter(max_retries=retry_strategy)
            self.session.mount("http://", adapter)
            self.session.mount("https://", adapter)

        if headers:
            self.session.headers.update(headers)

    @property
    def name(self) -> str:
        return BACKEND_LABELS[self.backend]

    @staticmethod
    def _auth_headers(token: str) -> dict:
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _request(self, method: str, url: str, token: str, action: str, **kwargs) -> Any:
        """Send a request and return the decoded JSON body.

        Transport and decoding failures become BackendRequestError; 401/403
        become AuthError. Never raises on a non-2xx response directly.
        """
        headers = {**self._auth_headers(token), **kwargs.pop("headers", {})}
        logger.debug(f"{self.name} {method} {url}")
        try:
            response = self.session.request(
                method, url, headers=headers, timeout=self.timeout, **kwargs
            )
        except requests.RequestException as e:
            raise BackendRequestError(self.name, f"failed to {action}: {e}") from e

        self._handle_error_response(response, action)

        try:
            return response.json()
        except ValueError as e:
            raise BackendRequestError(
                self.name, f"failed to decode response while trying to {action}: {e}"
            ) from e

    def _handle_error_response(self, response: requests.Response, action: str) -> None:
        """Raise a wrapped error for any non-2xx response."""
        if response.ok:
            return
        if response.status_code in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN):
            logger.error(f"{self.name} authentication failed (HTTP {response.status_code})")
            logger.error(f"{self.name} access token is invalid or expired")
            raise AuthError(
                self.name, f"failed to {action}", response.status_code, response.text
            )
        logger.error(f"{self.name} API error: {response.status_code}")
        logger.debug(f"Response: {response.text}")
        raise BackendRequestError(
            self.name, f"failed to {action}", response.status_code, response.text
        )

    def _identity_request(self, method: str, url: str, token: str, **kwargs) -> Any:
        """Like _request, but any failure to identify the user is an AuthError."""
        try:
            return self._request(method, url, token, "get user info", **kwargs)
        except AuthError:
            raise
        except BackendRequestError as e:
            error = AuthError(self.name, str(e))
            error.http_status, error.body = e.http_status, e.body
            raise error from e

    @abstractmethod
    def get_user_identity(self, token: str) -> tuple[int, str]:
        """Return (user_id, user_name) for the token's owner."""

    @abstractmethod
    def get_user_anime_list(self, token: str, user_id: int) -> AnimeList:
        """Fetch every page of the user's list."""

    @abstractmethod
    def search_anime(self, query: str, token: str) -> list[SearchResult]:
        """Search by title, closest match first."""

    @abstractmethod
    def search_anime_preview(self, query: str, token: str) -> dict[int, SearchPreview]:
        """Search by title with cover art, closest match first."""

    @abstractmethod
    def update_progress(self, token: str, media_id: int, episodes: int) -> None:
        """Set the absolute watched-episode count."""

    @abstractmethod
    def update_status(self, token: str, media_id: int, status: CanonicalStatus) -> None:
        """Set the list status."""

    @abstractmethod
    def rate_anime(self, token: str, media_id: int, score_source: ScoreSource) -> int:
        """Read, validate and persist a 0-10 score. Returns the stored score."""

    @abstractmethod
    def add_to_watching_list(self, media_id: int, token: str) -> None:
        """Put the anime on the watching list; safe to repeat."""

    @abstractmethod
    def get_anime_details(self, media_id: int, token: str) -> Anime:
        """Fetch episode count and airing state."""
