"""Data models for tracked anime."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from .constants import Backend


class CanonicalStatus(str, Enum):
    """Backend-agnostic watch status."""

    WATCHING = "watching"
    COMPLETED = "completed"
    PAUSED = "paused"
    DROPPED = "dropped"
    PLANNING = "planning"
    REWATCHING = "rewatching"


# Lookup order for list scans; Watching wins if backend data is inconsistent
CATEGORY_ORDER = (
    CanonicalStatus.WATCHING,
    CanonicalStatus.COMPLETED,
    CanonicalStatus.PAUSED,
    CanonicalStatus.DROPPED,
    CanonicalStatus.PLANNING,
    CanonicalStatus.REWATCHING,
)


class Entry(BaseModel):
    """One anime on a user's list, keyed by the primary backend's ID."""

    media_id: int
    backend: Backend
    title: str = ""
    total_episodes: Optional[int] = None
    progress: int = Field(default=0, ge=0)
    score: float = Field(default=0.0, ge=0, le=10)
    cover_image: str = ""
    status: CanonicalStatus = CanonicalStatus.WATCHING


def _empty_categories() -> dict[CanonicalStatus, list[Entry]]:
    return {status: [] for status in CATEGORY_ORDER}


class AnimeList(BaseModel):
    """A user's list partitioned by status, in backend order."""

    categories: dict[CanonicalStatus, list[Entry]] = Field(default_factory=_empty_categories)

    def add(self, entry: Entry) -> None:
        """Append an entry to the category named by its own status."""
        self.categories.setdefault(entry.status, []).append(entry)

    def category(self, status: CanonicalStatus) -> list[Entry]:
        return self.categories.get(status, [])

    def entries(self) -> list[Entry]:
        """All entries in category order."""
        return [entry for status in CATEGORY_ORDER for entry in self.category(status)]

    def __len__(self) -> int:
        return sum(len(entries) for entries in self.categories.values())


class Anime(BaseModel):
    """Anime details as reported by one backend."""

    media_id: int
    backend: Backend
    title: str = ""
    total_episodes: Optional[int] = None
    is_airing: bool = False
    mal_id: Optional[int] = None


class SearchResult(BaseModel):
    """A ranked search hit."""

    media_id: int
    title: str


class SearchPreview(BaseModel):
    """A search hit with cover art."""

    title: str
    cover_image: str = ""


class WriteState(str, Enum):
    """Outcome of one backend write within a dual write."""

    APPLIED = "applied"
    FAILED = "failed"
    SKIPPED = "skipped"


class BackendOutcome(BaseModel):
    """What happened on one backend."""

    backend: Backend
    state: WriteState
    error: Optional[str] = None


class DualWriteResult(BaseModel):
    """Aggregated outcome of a dual write, in evaluation order."""

    operation: str
    outcomes: list[BackendOutcome] = Field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failed_backends()

    def failed_backends(self) -> list[Backend]:
        return [o.backend for o in self.outcomes if o.state == WriteState.FAILED]

    def applied_backends(self) -> list[Backend]:
        return [o.backend for o in self.outcomes if o.state == WriteState.APPLIED]

    def skipped_backends(self) -> list[Backend]:
        return [o.backend for o in self.outcomes if o.state == WriteState.SKIPPED]
