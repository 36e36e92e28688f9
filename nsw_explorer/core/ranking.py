"""Scoring and truncation of candidate places for one interest."""

from __future__ import annotations

import logging
from typing import Iterable, List

from nsw_explorer.schemas import CandidatePlace

MIN_REVIEW_COUNT = 10
DEFAULT_MAX_STOPS = 3

_LOGGER = logging.getLogger(__name__)


def is_eligible(place: CandidatePlace, *, min_reviews: int = MIN_REVIEW_COUNT) -> bool:
    """Return True when a place has a rating backed by enough reviews."""

    return (
        place.rating is not None
        and place.user_ratings_total is not None
        and place.user_ratings_total > min_reviews
    )


def rank(
    candidates: Iterable[CandidatePlace],
    interest: str,
    max_count: int = DEFAULT_MAX_STOPS,
) -> List[CandidatePlace]:
    """Return the top ``max_count`` eligible candidates by ``rating * reviews``.

    Places without a rating, or with ``MIN_REVIEW_COUNT`` reviews or fewer,
    are discarded so a handful of glowing reviews cannot outrank an
    established favourite. Ties keep the provider's order.
    """

    if max_count < 1:
        raise ValueError(f"max_count must be a positive integer, got {max_count}")

    pool = list(candidates)
    eligible = [place for place in pool if is_eligible(place)]
    # sorted() is stable, so equal scores stay in provider order.
    ordered = sorted(eligible, key=lambda place: place.popularity or 0.0, reverse=True)
    selected = ordered[:max_count]

    _LOGGER.debug(
        "Ranked %d/%d eligible candidates for %s, kept %d",
        len(eligible),
        len(pool),
        interest,
        len(selected),
    )
    return selected


__all__ = ["DEFAULT_MAX_STOPS", "MIN_REVIEW_COUNT", "is_eligible", "rank"]
