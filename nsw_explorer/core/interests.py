"""Catalogue of the interest labels a traveller can choose from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from nsw_explorer.schemas import StopType


@dataclass(frozen=True, slots=True)
class InterestProfile:
    """How an interest label is searched for and turned into stops."""

    label: str
    place_types: Tuple[str, ...]
    stop_type: StopType
    dwell_minutes: int


DEFAULT_PROFILE = InterestProfile(
    label="",
    place_types=("tourist_attraction",),
    stop_type=StopType.LANDMARK,
    dwell_minutes=60,
)

_CATALOGUE: Dict[str, InterestProfile] = {
    profile.label.lower(): profile
    for profile in (
        InterestProfile("Beaches", ("beach",), StopType.BEACH, 120),
        InterestProfile("Museums", ("museum",), StopType.MUSEUM, 90),
        InterestProfile("Food & Cafes", ("restaurant", "cafe"), StopType.RESTAURANT, 60),
        InterestProfile("Hiking", ("park", "hiking_area"), StopType.NATURE, 180),
        InterestProfile("Historic Sites", ("historical",), StopType.LANDMARK, 60),
        InterestProfile(
            "Entertainment",
            ("amusement_park", "movie_theater", "night_club"),
            StopType.ENTERTAINMENT,
            120,
        ),
        InterestProfile("Shopping", ("shopping_mall", "store"), StopType.SHOPPING, 90),
        InterestProfile("Parks", ("park",), StopType.NATURE, 90),
    )
}

INTEREST_LABELS: Tuple[str, ...] = tuple(profile.label for profile in _CATALOGUE.values())


def profile_for(interest: str) -> InterestProfile:
    """Return the profile for ``interest``, falling back to a generic attraction."""

    return _CATALOGUE.get(interest.strip().lower(), DEFAULT_PROFILE)


def is_known_interest(interest: str) -> bool:
    return interest.strip().lower() in _CATALOGUE


__all__ = [
    "DEFAULT_PROFILE",
    "INTEREST_LABELS",
    "InterestProfile",
    "is_known_interest",
    "profile_for",
]
