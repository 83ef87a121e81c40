"""Wiring for tracking operations: tokens, clients and result output."""

import logging
from typing import NamedTuple, Optional

import click

from .anilist_client import AniListClient
from .config import Settings
from .constants import BACKEND_LABELS, Backend
from .mal_client import MALClient
from .models import DualWriteResult, WriteState
from .tracking import DualWriteCoordinator
from .translator import IdentityTranslator

logger = logging.getLogger(__name__)


class Tokens(NamedTuple):
    """Bearer tokens; empty text means the backend is not linked."""

    anilist: str
    mal: str

    def for_backend(self, backend: Backend) -> str:
        return self.anilist if backend == Backend.ANILIST else self.mal


def load_tokens(settings: Settings) -> Tokens:
    """Load tokens from environment or config."""
    tokens = Tokens(anilist=settings.anilist_access_token or "", mal=settings.mal_access_token or "")
    if not tokens.anilist:
        logger.debug("No AniList token configured")
    if not tokens.mal:
        logger.debug("No MAL token configured")
    return tokens


def build_coordinator(
    settings: Settings,
    anilist_client: Optional[AniListClient] = None,
    mal_client: Optional[MALClient] = None,
) -> DualWriteCoordinator:
    """Create API clients and the coordinator for these settings."""
    logger.debug("Initializing API clients...")
    anilist_client = anilist_client or AniListClient(timeout=settings.timeout)
    mal_client = mal_client or MALClient(timeout=settings.timeout)
    return DualWriteCoordinator(anilist_client, mal_client, settings.policy)


def build_translator(coordinator: DualWriteCoordinator, tokens: Tokens) -> IdentityTranslator:
    return IdentityTranslator(coordinator.clients[Backend.ANILIST], tokens.anilist)


def print_dual_write_result(result: DualWriteResult) -> None:
    """Print a per-backend summary of a write."""
    click.echo(f"\n=== {result.operation} ===")
    for outcome in result.outcomes:
        line = f"{BACKEND_LABELS[outcome.backend]}: {outcome.state.value}"
        if outcome.state == WriteState.FAILED and outcome.error:
            line += f" ({outcome.error})"
        click.echo(f"  - {line}")
