"""Translate media IDs between AniList and MyAnimeList."""

import logging

from .anilist_client import AniListClient
from .constants import Backend
from .exceptions import UnsupportedConversionError

logger = logging.getLogger(__name__)

BACKEND_ALIASES = {
    "anilist": Backend.ANILIST,
    "mal": Backend.MAL,
    "myanimelist": Backend.MAL,
}


def normalize_backend(name) -> Backend:
    """Resolve a backend name or Backend value; None if unrecognized."""
    if isinstance(name, Backend):
        return name
    return BACKEND_ALIASES.get(str(name or "").strip().lower())


class IdentityTranslator:
    """Converts IDs using AniList's idMal cross-reference.

    Both directions are answered by AniList and each is a network call.
    Nothing is cached here.
    """

    def __init__(self, anilist: AniListClient, anilist_token: str = ""):
        self.anilist = anilist
        self.anilist_token = anilist_token

    def translate(self, media_id: int, from_backend, to_backend) -> int:
        source = normalize_backend(from_backend)
        target = normalize_backend(to_backend)
        if source is None or target is None:
            raise UnsupportedConversionError(str(from_backend), str(to_backend))

        if source == target:
            return media_id

        logger.debug(f"Translating {source.value} ID {media_id} to {target.value}")
        if source == Backend.ANILIST:
            return self.anilist.get_mal_id(media_id, self.anilist_token)
        return self.anilist.get_id_by_mal_id(media_id, self.anilist_token)
