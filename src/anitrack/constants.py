"""Constants used throughout the application."""

from enum import Enum


class Backend(str, Enum):
    """Tracking backends."""

    ANILIST = "anilist"
    MAL = "mal"


class RetryPolicy(str, Enum):
    """What a retry after a partial dual write re-attempts."""

    FAILED_ONLY = "failed_only"
    ALL = "all"


# Display names used in confirmations and aggregated errors
BACKEND_LABELS = {
    Backend.ANILIST: "AniList",
    Backend.MAL: "MAL",
}

BACKEND_FULL_NAMES = {
    Backend.ANILIST: "AniList",
    Backend.MAL: "MyAnimeList",
}

# HTTP Status Codes
HTTP_OK = 200
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403
HTTP_TOO_MANY_REQUESTS = 429

# Default values
DEFAULT_TIMEOUT_SECONDS = 30
MAL_LIST_PAGE_LIMIT = 1000
SEARCH_LIMIT = 10
MIN_SCORE = 0
MAX_SCORE = 10
