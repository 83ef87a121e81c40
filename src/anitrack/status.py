"""Canonical status vocabulary and its mapping to each backend."""

import logging
from typing import NamedTuple

from .exceptions import ValidationError
from .models import CanonicalStatus

logger = logging.getLogger(__name__)


class StatusRow(NamedTuple):
    anilist: str
    mal: str
    mal_rewatching: bool
    label: str


STATUS_TABLE: dict[CanonicalStatus, StatusRow] = {
    CanonicalStatus.WATCHING: StatusRow("CURRENT", "watching", False, "Currently Watching"),
    CanonicalStatus.COMPLETED: StatusRow("COMPLETED", "completed", False, "Completed"),
    CanonicalStatus.PAUSED: StatusRow("PAUSED", "on_hold", False, "On Hold"),
    CanonicalStatus.DROPPED: StatusRow("DROPPED", "dropped", False, "Dropped"),
    CanonicalStatus.PLANNING: StatusRow("PLANNING", "plan_to_watch", False, "Plan to Watch"),
    CanonicalStatus.REWATCHING: StatusRow("REPEATING", "watching", True, "Rewatching"),
}

_FROM_ANILIST = {row.anilist: status for status, row in STATUS_TABLE.items()}
_FROM_MAL = {row.mal: status for status, row in STATUS_TABLE.items() if not row.mal_rewatching}

DEFAULT_STATUS = CanonicalStatus.WATCHING


def to_anilist(status: CanonicalStatus) -> str:
    return STATUS_TABLE[status].anilist


def to_mal(status: CanonicalStatus) -> tuple[str, bool]:
    """Return MAL's native status and its rewatching flag."""
    row = STATUS_TABLE[status]
    return row.mal, row.mal_rewatching


def from_anilist(native: str) -> CanonicalStatus:
    status = _FROM_ANILIST.get(native)
    if status is None:
        logger.warning(f"Unknown AniList status {native!r}, treating as {DEFAULT_STATUS.value}")
        return DEFAULT_STATUS
    return status


def from_mal(native: str, is_rewatching: bool = False) -> CanonicalStatus:
    """Map MAL's status plus rewatching flag back to a canonical status."""
    status = _FROM_MAL.get(native)
    if status is None:
        logger.warning(f"Unknown MAL status {native!r}, treating as {DEFAULT_STATUS.value}")
        status = DEFAULT_STATUS
    if is_rewatching:
        return CanonicalStatus.REWATCHING
    return status


def label(status: CanonicalStatus) -> str:
    return STATUS_TABLE[status].label


def parse_status(text: str) -> CanonicalStatus:
    """Parse user input: a canonical name or either backend's native string."""
    key = text.strip().lower()
    for status, row in STATUS_TABLE.items():
        if key in (status.value, row.anilist.lower(), row.label.lower()):
            return status
        if key == row.mal and not row.mal_rewatching:
            return status
    raise ValidationError(f"unknown status: {text}")
