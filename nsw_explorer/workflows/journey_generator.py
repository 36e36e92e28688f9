"""Turns a set of interest labels into a sequenced itinerary."""

from __future__ import annotations

import asyncio
import inspect
import logging
import os
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Protocol, Sequence

from nsw_explorer.core import ranking, routing
from nsw_explorer.core.interests import is_known_interest, profile_for
from nsw_explorer.schemas import CandidatePlace, Coordinate, Itinerary, Stop

_LOGGER = logging.getLogger(__name__)

SYDNEY_CBD = Coordinate(latitude=-33.8688, longitude=151.2093)
MULTI_INTEREST_TITLE = "NSW Multi-Experience Journey"


class PlacesLookup(Protocol):
    """Anything that can search for candidate places by interest."""

    def search(self, interest: str, center: Coordinate) -> List[CandidatePlace]:
        ...


class JourneyGenerationError(RuntimeError):
    """Base class for failures surfaced by :class:`JourneyGenerator`."""


class InvalidInterestSelection(JourneyGenerationError):
    """Raised when no interest labels were supplied."""

    def __init__(self) -> None:
        super().__init__("Please select at least one interest")


class NoPlacesFound(JourneyGenerationError):
    """Raised when no interest produced a usable stop."""

    def __init__(self, failed_interests: Sequence[str] = ()) -> None:
        super().__init__("No places found for your selected interests")
        self.failed_interests = list(failed_interests)


@dataclass(slots=True)
class LookupOutcome:
    """Result of searching for a single interest."""

    interest: str
    places: List[CandidatePlace] = field(default_factory=list)
    error: Optional[BaseException] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


def home_coordinate() -> Coordinate:
    """Return the search centre from the environment, falling back to the CBD."""

    latitude = os.getenv("NSW_HOME_LATITUDE")
    longitude = os.getenv("NSW_HOME_LONGITUDE")
    if not latitude or not longitude:
        return SYDNEY_CBD
    try:
        return Coordinate(latitude=float(latitude), longitude=float(longitude))
    except ValueError:
        _LOGGER.warning("Ignoring invalid home coordinate %r, %r", latitude, longitude)
        return SYDNEY_CBD


def journey_title(interests: Sequence[str]) -> str:
    if len(interests) == 1:
        return f"{interests[0]} Explorer"
    if len(interests) == 2:
        return f"{interests[0]} & {interests[1]} Adventure"
    return MULTI_INTEREST_TITLE


def journey_description(interests: Sequence[str], duration_days: int = 1) -> str:
    return (
        f"A personalized {duration_days}-day adventure through NSW "
        f"featuring the best of {', '.join(interests)}"
    )


def _clean_interests(interests: Iterable[str]) -> List[str]:
    if isinstance(interests, str):
        raise TypeError("interests must be a sequence of labels, not a single string")
    cleaned: List[str] = []
    seen: set[str] = set()
    for interest in interests:
        label = interest.strip() if isinstance(interest, str) else ""
        if not label or label.lower() in seen:
            continue
        seen.add(label.lower())
        cleaned.append(label)
    return cleaned


def _log_stage(stage: str, duration: float, detail: str) -> None:
    _LOGGER.info("%s stage completed in %.2fs [%s]", stage.capitalize(), duration, detail)


class JourneyGenerator:
    """Builds itineraries from a places lookup client.

    Every interest is searched concurrently. A failed search only drops that
    interest; the run fails as a whole only when no interest yields a stop.
    """

    def __init__(
        self,
        lookup: PlacesLookup,
        *,
        center: Optional[Coordinate] = None,
        max_stops_per_interest: int = ranking.DEFAULT_MAX_STOPS,
        lookup_timeout: Optional[float] = None,
    ) -> None:
        if max_stops_per_interest < 1:
            raise ValueError("max_stops_per_interest must be a positive integer")
        self.lookup = lookup
        self.center = center or home_coordinate()
        self.max_stops_per_interest = max_stops_per_interest
        self.lookup_timeout = lookup_timeout

    async def _search(self, interest: str) -> List[CandidatePlace]:
        search = self.lookup.search
        if inspect.iscoroutinefunction(search):
            call = search(interest, self.center)
        else:
            call = asyncio.to_thread(search, interest, self.center)
        if self.lookup_timeout is None:
            return list(await call)
        return list(await asyncio.wait_for(call, timeout=self.lookup_timeout))

    async def _fetch(self, interest: str) -> LookupOutcome:
        try:
            places = await self._search(interest)
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001 - one category must not sink the run
            _LOGGER.warning("Lookup failed for %s: %s", interest, str(exc) or type(exc).__name__)
            return LookupOutcome(interest=interest, error=exc)
        return LookupOutcome(interest=interest, places=places)

    async def fetch_all(self, interests: Sequence[str]) -> List[LookupOutcome]:
        """Search every interest concurrently, returning outcomes in caller order."""

        return list(await asyncio.gather(*(self._fetch(interest) for interest in interests)))

    def build_stops(self, outcomes: Iterable[LookupOutcome]) -> List[Stop]:
        """Rank each successful outcome and convert the winners into stops."""

        pool: List[Stop] = []
        seen_places: set[str] = set()
        for outcome in outcomes:
            if not outcome.succeeded:
                continue
            profile = profile_for(outcome.interest)
            for place in ranking.rank(outcome.places, outcome.interest, self.max_stops_per_interest):
                if place.place_id in seen_places:
                    _LOGGER.debug("Dropping duplicate place %s from %s", place.place_id, outcome.interest)
                    continue
                seen_places.add(place.place_id)
                pool.append(
                    Stop(
                        place_id=place.place_id,
                        name=place.name,
                        description=place.vicinity
                        or f"Explore this amazing {outcome.interest.lower()} destination",
                        latitude=place.latitude,
                        longitude=place.longitude,
                        stop_type=profile.stop_type,
                        estimated_duration_minutes=profile.dwell_minutes,
                        position=len(pool),
                        category=outcome.interest,
                        rating=place.rating,
                    )
                )
        return pool

    async def generate(self, interests: Sequence[str], *, duration_days: int = 1) -> Itinerary:
        """Return a complete itinerary for ``interests``.

        Raises :class:`InvalidInterestSelection` before any lookup when no
        interest is supplied, and :class:`NoPlacesFound` when every interest
        failed or produced no eligible place.
        """

        labels = _clean_interests(interests)
        if not labels:
            raise InvalidInterestSelection()
        for label in labels:
            if not is_known_interest(label):
                _LOGGER.debug("Interest %s is not catalogued, searching generic attractions", label)

        run_start = time.perf_counter()
        _LOGGER.info("Generating journey for interests: %s", ", ".join(labels))

        start = time.perf_counter()
        outcomes = await self.fetch_all(labels)
        failed = [outcome.interest for outcome in outcomes if not outcome.succeeded]
        _log_stage(
            "fetch",
            time.perf_counter() - start,
            f"{len(outcomes) - len(failed)}/{len(outcomes)} interests succeeded",
        )

        pool = self.build_stops(outcomes)
        if not pool:
            _LOGGER.warning("No places found for interests: %s", ", ".join(labels))
            raise NoPlacesFound(failed)

        start = time.perf_counter()
        stops = routing.sequence(pool)
        distance_km = routing.total_distance(stops)
        _log_stage("sequencing", time.perf_counter() - start, f"{len(stops)} stops, {distance_km:.1f} km")

        itinerary = Itinerary(
            title=journey_title(labels),
            description=journey_description(labels, duration_days),
            stops=tuple(stops),
            total_distance_km=distance_km,
            total_duration_minutes=sum(stop.estimated_duration_minutes for stop in stops),
            interests=labels,
            duration_days=duration_days,
        )
        _LOGGER.info("Journey generation completed in %.2fs", time.perf_counter() - run_start)
        return itinerary


async def generate_journey(
    interests: Sequence[str],
    lookup: PlacesLookup,
    *,
    duration_days: int = 1,
    center: Optional[Coordinate] = None,
) -> Itinerary:
    """Convenience wrapper building a one-off :class:`JourneyGenerator`."""

    generator = JourneyGenerator(lookup, center=center)
    return await generator.generate(interests, duration_days=duration_days)


__all__ = [
    "InvalidInterestSelection",
    "JourneyGenerationError",
    "JourneyGenerator",
    "LookupOutcome",
    "MULTI_INTEREST_TITLE",
    "NoPlacesFound",
    "PlacesLookup",
    "SYDNEY_CBD",
    "generate_journey",
    "home_coordinate",
    "journey_description",
    "journey_title",
]
