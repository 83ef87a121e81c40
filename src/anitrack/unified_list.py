"""Lookups over the unified anime list."""

import re

from .exceptions import InvalidIDError, NotFoundError
from .models import CATEGORY_ORDER, AnimeList, Entry

# Optional sign and ASCII digits only; no whitespace or underscores
ID_PATTERN = re.compile(r"[+-]?[0-9]+")


def parse_id(id_text: str) -> int:
    text = str(id_text)
    if not ID_PATTERN.fullmatch(text):
        raise InvalidIDError(id_text)
    return int(text)


def find_by_id(anime_list: AnimeList, id_text: str) -> Entry:
    """Return the first entry with this ID, scanning categories in fixed order."""
    media_id = parse_id(id_text)
    for status in CATEGORY_ORDER:
        for entry in anime_list.category(status):
            if entry.media_id == media_id:
                return entry
    raise NotFoundError(media_id)
