"""Routing of tracking operations to AniList, MyAnimeList, or both."""

import logging
from typing import Callable, Iterable, Optional, Union

import click

from .base_client import BaseAPIClient
from .config import TrackingPolicy
from .constants import BACKEND_FULL_NAMES, BACKEND_LABELS, Backend, RetryPolicy
from .exceptions import PartialDualWriteError
from .models import (
    Anime,
    AnimeList,
    BackendOutcome,
    CanonicalStatus,
    DualWriteResult,
    SearchPreview,
    SearchResult,
    WriteState,
)
from .scoring import ScoreSource
from .status import label

logger = logging.getLogger(__name__)


def resolve_primary_backend(policy: TrackingPolicy) -> Backend:
    """MAL for "mal"/"myanimelist" in any case, AniList otherwise."""
    service = (policy.service or "").strip().lower()
    if service in ("mal", "myanimelist"):
        return Backend.MAL
    return Backend.ANILIST


def get_service_name(policy: TrackingPolicy) -> str:
    """User-friendly name of the primary backend."""
    return BACKEND_FULL_NAMES[resolve_primary_backend(policy)]


def _other(backend: Backend) -> Backend:
    return Backend.ANILIST if backend == Backend.MAL else Backend.MAL


def _ask_once(score_source: ScoreSource) -> ScoreSource:
    """Wrap a score source so both backends get the same answer."""
    answer = []

    def source():
        if not answer:
            answer.append(score_source())
        return answer[0]

    return source


class DualWriteCoordinator:
    """Applies one logical operation to whichever backends are eligible.

    With dual tracking off, only the primary backend is called and its
    error propagates unchanged. With it on, each linked backend is
    attempted in turn (secondary first, then primary); a failure on one
    never stops or undoes the other, and all failures are raised
    together afterwards as PartialDualWriteError.
    """

    def __init__(
        self,
        anilist: BaseAPIClient,
        mal: BaseAPIClient,
        policy: TrackingPolicy,
        echo: Callable[[str], None] = click.echo,
    ):
        self.clients = {Backend.ANILIST: anilist, Backend.MAL: mal}
        self.policy = policy
        self.echo = echo

    @property
    def primary_backend(self) -> Backend:
        return resolve_primary_backend(self.policy)

    @property
    def primary(self) -> BaseAPIClient:
        return self.clients[self.primary_backend]

    def evaluation_order(self) -> list[Backend]:
        primary = self.primary_backend
        return [_other(primary), primary]

    # Single-backend operations, routed to the primary backend

    def get_user_identity(self, token: str) -> tuple[int, str]:
        return self.primary.get_user_identity(token)

    def get_user_anime_list(self, token: str, user_id: int) -> AnimeList:
        return self.primary.get_user_anime_list(token, user_id)

    def search_anime(self, query: str, token: str) -> list[SearchResult]:
        return self.primary.search_anime(query, token)

    def search_anime_preview(self, query: str, token: str) -> dict[int, SearchPreview]:
        return self.primary.search_anime_preview(query, token)

    def add_to_watching_list(self, media_id: int, token: str) -> None:
        self.primary.add_to_watching_list(media_id, token)
        self.echo(f"Anime with ID {media_id} has been added to your {get_service_name(self.policy)} watching list.")

    def get_anime_details(self, media_id: int, token: str) -> Anime:
        return self.primary.get_anime_details(media_id, token)

    # Dual-capable writes

    def update_progress(
        self,
        anilist_token: str,
        mal_token: str,
        anilist_id: int,
        mal_id: int,
        episodes: int,
        only: Optional[Iterable[Backend]] = None,
    ) -> DualWriteResult:
        """Set the absolute watched-episode count."""
        return self._dispatch(
            "update_progress",
            {Backend.ANILIST: (anilist_token, anilist_id), Backend.MAL: (mal_token, mal_id)},
            lambda client, token, media_id: client.update_progress(token, media_id, episodes),
            lambda backend, _: f"{BACKEND_LABELS[backend]} updated: Episode {episodes}",
            only,
        )

    def update_status(
        self,
        anilist_token: str,
        mal_token: str,
        anilist_id: int,
        mal_id: int,
        status: CanonicalStatus,
        only: Optional[Iterable[Backend]] = None,
    ) -> DualWriteResult:
        return self._dispatch(
            "update_status",
            {Backend.ANILIST: (anilist_token, anilist_id), Backend.MAL: (mal_token, mal_id)},
            lambda client, token, media_id: client.update_status(token, media_id, status),
            lambda backend, _: f"{BACKEND_LABELS[backend]} status updated to: {label(status)}",
            only,
        )

    def rate_anime(
        self,
        anilist_token: str,
        mal_token: str,
        anilist_id: int,
        mal_id: int,
        score_source: ScoreSource,
        only: Optional[Iterable[Backend]] = None,
    ) -> DualWriteResult:
        """Rate on each eligible backend; the score is asked for once."""
        source = _ask_once(score_source)
        return self._dispatch(
            "rate_anime",
            {Backend.ANILIST: (anilist_token, anilist_id), Backend.MAL: (mal_token, mal_id)},
            lambda client, token, media_id: client.rate_anime(token, media_id, source),
            lambda backend, score: f"{BACKEND_LABELS[backend]} rated: {score}",
            only,
        )

    def retry_targets(self, result: Union[DualWriteResult, PartialDualWriteError]) -> Optional[list[Backend]]:
        """Backends to pass as ``only`` when retrying a partial failure."""
        if isinstance(result, PartialDualWriteError):
            result = result.result
        if self.policy.retry_policy == RetryPolicy.ALL or result is None:
            return None
        return result.failed_backends()

    def _dispatch(self, operation, targets, call, confirmation, only) -> DualWriteResult:
        result = DualWriteResult(operation=operation)

        if not self.policy.dual_tracking:
            backend = self.primary_backend
            token, media_id = targets[backend]
            logger.debug(f"Dual tracking is disabled, {operation} on {backend.value} only")
            value = call(self.clients[backend], token, media_id)
            result.outcomes.append(BackendOutcome(backend=backend, state=WriteState.APPLIED))
            self.echo(f"✓ {confirmation(backend, value)}")
            return result

        only = set(only) if only is not None else None
        failures = []
        for backend in self.evaluation_order():
            token, media_id = targets[backend]
            name = BACKEND_LABELS[backend]

            if only is not None and backend not in only:
                logger.debug(f"Skipping {name} {operation}: not selected for retry")
                result.outcomes.append(BackendOutcome(backend=backend, state=WriteState.SKIPPED))
                continue
            if not token or media_id is None or media_id <= 0:
                logger.debug(f"Skipping {name} {operation}: token empty={not token}, ID={media_id}")
                result.outcomes.append(BackendOutcome(backend=backend, state=WriteState.SKIPPED))
                continue

            logger.debug(f"{operation} on {name}: ID={media_id}")
            try:
                value = call(self.clients[backend], token, media_id)
            except click.Abort:
                # The user cancelled a prompt; that ends the whole operation
                raise
            except Exception as e:
                logger.error(f"Failed to {operation} on {name}: {e}")
                failures.append((name, e))
                result.outcomes.append(BackendOutcome(backend=backend, state=WriteState.FAILED, error=str(e)))
                continue

            logger.debug(f"Successfully ran {operation} on {name}")
            result.outcomes.append(BackendOutcome(backend=backend, state=WriteState.APPLIED))
            self.echo(f"✓ {confirmation(backend, value)}")

        if failures:
            raise PartialDualWriteError(failures, result)
        return result
