"""Command-line interface for anitrack."""

import logging
import sys
from typing import Optional

import click

from .config import Settings
from .constants import Backend
from .exceptions import PartialDualWriteError, TrackingError
from .scoring import prompt_score
from .status import label, parse_status
from .sync_service import (
    Tokens,
    build_coordinator,
    build_translator,
    load_tokens,
    print_dual_write_result,
)
from .tracking import get_service_name
from .unified_list import find_by_id

logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def setup_logging(level: str):
    """Configure logging for the application."""
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
        ],
    )


class AppContext:
    """Settings, tokens and coordinator shared by every command."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.tokens = load_tokens(settings)
        self.coordinator = build_coordinator(settings)

    @property
    def primary_token(self) -> str:
        return self.tokens.for_backend(self.coordinator.primary_backend)


def _fail(error: Exception):
    click.echo(f"Error: {error}", err=True)
    sys.exit(1)


def _fill_missing_id(app: AppContext, anilist_id: int, mal_id: int) -> tuple[int, int]:
    """Look up whichever ID was not given using the other one."""
    translator = build_translator(app.coordinator, app.tokens)
    try:
        if anilist_id > 0 and mal_id <= 0:
            mal_id = translator.translate(anilist_id, Backend.ANILIST, Backend.MAL)
        elif mal_id > 0 and anilist_id <= 0:
            anilist_id = translator.translate(mal_id, Backend.MAL, Backend.ANILIST)
    except TrackingError as e:
        logger.warning(f"Could not translate ID, the unlinked backend will be skipped: {e}")
    return anilist_id, mal_id


def _run_dual_write(app: AppContext, write, retry: bool):
    """Run a coordinator write, optionally retrying once after a partial failure."""
    try:
        result = write(None)
    except PartialDualWriteError as e:
        if not retry:
            print_dual_write_result(e.result)
            _fail(e)
        logger.warning(f"Retrying after partial failure: {e}")
        try:
            result = write(app.coordinator.retry_targets(e))
        except PartialDualWriteError as retry_error:
            print_dual_write_result(retry_error.result)
            _fail(retry_error)
    except TrackingError as e:
        _fail(e)
    print_dual_write_result(result)


ids_options = [
    click.option("--anilist-id", type=int, default=0, help="AniList media ID (0 = not linked)"),
    click.option("--mal-id", type=int, default=0, help="MyAnimeList media ID (0 = not linked)"),
    click.option("--translate", is_flag=True, help="Look up a missing ID from the other one"),
    click.option("--retry", is_flag=True, help="Retry once after a partial dual-tracking failure"),
]


def with_ids(func):
    for option in reversed(ids_options):
        func = option(func)
    return func


@click.group()
@click.version_option(version="0.1.0")
@click.option("--config", "config_path", type=click.Path(dir_okay=False), default=None, help="Path to config.yaml")
@click.option("--log-level", type=click.Choice(LOG_LEVELS), default=None, help="Logging level")
@click.pass_context
def main(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """Track anime progress on AniList and/or MyAnimeList."""
    try:
        settings = Settings(config_path)
    except TrackingError as e:
        _fail(e)
    setup_logging(log_level or settings.log_level)
    ctx.obj = AppContext(settings)


@main.command()
@click.pass_obj
def service(app: AppContext):
    """Show the configured tracking service."""
    click.echo(f"Primary service: {get_service_name(app.settings.policy)}")
    click.echo(f"Dual tracking: {'enabled' if app.settings.dual_tracking else 'disabled'}")


@main.command()
@click.pass_obj
def whoami(app: AppContext):
    """Show the user behind the primary service's token."""
    try:
        user_id, user_name = app.coordinator.get_user_identity(app.primary_token)
    except TrackingError as e:
        _fail(e)
    click.echo(f"{user_name} (ID {user_id})")


def _fetch_list(app: AppContext):
    user_id, _ = app.coordinator.get_user_identity(app.primary_token)
    return app.coordinator.get_user_anime_list(app.primary_token, user_id)


@main.command("list")
@click.pass_obj
def list_command(app: AppContext):
    """Print the anime list by category."""
    try:
        anime_list = _fetch_list(app)
    except TrackingError as e:
        _fail(e)
    for status, entries in anime_list.categories.items():
        if not entries:
            continue
        click.echo(f"\n{label(status)} ({len(entries)})")
        for entry in entries:
            total = entry.total_episodes or "?"
            click.echo(f"  [{entry.media_id}] {entry.title} - {entry.progress}/{total}")


@main.command()
@click.argument("media_id")
@click.pass_obj
def find(app: AppContext, media_id: str):
    """Find an anime on the list by ID."""
    try:
        entry = find_by_id(_fetch_list(app), media_id)
    except TrackingError as e:
        _fail(e)
    click.echo(f"[{entry.media_id}] {entry.title}: {label(entry.status)}, episode {entry.progress}, score {entry.score:g}")


@main.command()
@click.argument("query")
@click.option("--preview", is_flag=True, help="Include cover images")
@click.pass_obj
def search(app: AppContext, query: str, preview: bool):
    """Search the primary service by title."""
    try:
        if preview:
            for media_id, hit in app.coordinator.search_anime_preview(query, app.primary_token).items():
                click.echo(f"[{media_id}] {hit.title} {hit.cover_image}")
        else:
            for hit in app.coordinator.search_anime(query, app.primary_token):
                click.echo(f"[{hit.media_id}] {hit.title}")
    except TrackingError as e:
        _fail(e)


@main.command()
@click.argument("media_id", type=int)
@click.pass_obj
def details(app: AppContext, media_id: int):
    """Show episode count and airing state."""
    try:
        anime = app.coordinator.get_anime_details(media_id, app.primary_token)
    except TrackingError as e:
        _fail(e)
    click.echo(f"[{anime.media_id}] {anime.title}")
    click.echo(f"Episodes: {anime.total_episodes or '?'}")
    click.echo(f"Airing: {'yes' if anime.is_airing else 'no'}")


@main.command()
@click.argument("media_id", type=int)
@click.pass_obj
def add(app: AppContext, media_id: int):
    """Add an anime to the primary service's watching list."""
    try:
        app.coordinator.add_to_watching_list(media_id, app.primary_token)
    except TrackingError as e:
        _fail(e)


@main.command()
@click.argument("episodes", type=int)
@with_ids
@click.pass_obj
def progress(app: AppContext, episodes: int, anilist_id: int, mal_id: int, translate: bool, retry: bool):
    """Record EPISODES as the watched episode count."""
    if translate:
        anilist_id, mal_id = _fill_missing_id(app, anilist_id, mal_id)
    tokens: Tokens = app.tokens
    _run_dual_write(
        app,
        lambda only: app.coordinator.update_progress(tokens.anilist, tokens.mal, anilist_id, mal_id, episodes, only=only),
        retry,
    )


@main.command()
@click.argument("status_name")
@with_ids
@click.pass_obj
def status(app: AppContext, status_name: str, anilist_id: int, mal_id: int, translate: bool, retry: bool):
    """Change the list status (watching, completed, paused, dropped, planning, rewatching)."""
    try:
        new_status = parse_status(status_name)
    except TrackingError as e:
        _fail(e)
    if translate:
        anilist_id, mal_id = _fill_missing_id(app, anilist_id, mal_id)
    tokens: Tokens = app.tokens
    _run_dual_write(
        app,
        lambda only: app.coordinator.update_status(tokens.anilist, tokens.mal, anilist_id, mal_id, new_status, only=only),
        retry,
    )


@main.command()
@click.option("--score", type=str, default=None, help="Score 0-10; prompts when omitted")
@with_ids
@click.pass_obj
def rate(app: AppContext, score: Optional[str], anilist_id: int, mal_id: int, translate: bool, retry: bool):
    """Rate an anime from 0 to 10."""
    if translate:
        anilist_id, mal_id = _fill_missing_id(app, anilist_id, mal_id)
    source = (lambda: score) if score is not None else prompt_score
    tokens: Tokens = app.tokens
    _run_dual_write(
        app,
        lambda only: app.coordinator.rate_anime(tokens.anilist, tokens.mal, anilist_id, mal_id, source, only=only),
        retry,
    )


@main.command()
@click.argument("media_id", type=int)
@click.option("--from", "from_backend", required=True, help="Source service (anilist, mal, myanimelist)")
@click.option("--to", "to_backend", required=True, help="Target service (anilist, mal, myanimelist)")
@click.pass_obj
def translate(app: AppContext, media_id: int, from_backend: str, to_backend: str):
    """Convert a media ID between services."""
    try:
        converted = build_translator(app.coordinator, app.tokens).translate(media_id, from_backend, to_backend)
    except TrackingError as e:
        _fail(e)
    click.echo(converted)


if __name__ == "__main__":
    main()
