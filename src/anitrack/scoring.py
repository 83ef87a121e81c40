"""Search ranking and score input helpers."""

from typing import Callable, Iterable, TypeVar, Union

import click
from rapidfuzz.distance import Levenshtein

from .constants import MAX_SCORE, MIN_SCORE
from .exceptions import ValidationError

T = TypeVar("T")

# Supplies a raw score for rating operations (prompt, menu, test stub...)
ScoreSource = Callable[[], Union[str, int]]


def rank_by_title(items: Iterable[T], query: str, title_of: Callable[[T], str]) -> list[T]:
    """Order items by edit distance between their title and the query.

    Closest first; sorted() is stable so ties keep the backend's order.
    """
    return sorted(items, key=lambda item: Levenshtein.distance(title_of(item) or "", query))


def prompt_score() -> str:
    """Ask for a score on the terminal."""
    return click.prompt(f"Rate this anime ({MIN_SCORE}-{MAX_SCORE})", type=str)


def read_score(source: ScoreSource) -> int:
    """Obtain a score from the source and check it is within range."""
    raw = source()
    try:
        score = int(str(raw).strip())
    except ValueError:
        raise ValidationError(f"score must be an integer, got {raw!r}") from None
    if score < MIN_SCORE or score > MAX_SCORE:
        raise ValidationError(f"score must be between {MIN_SCORE} and {MAX_SCORE}")
    return score
