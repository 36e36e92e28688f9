from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Union

import pytest
from pydantic import ValidationError

from nsw_explorer.core.places_api import PlacesLookupError
from nsw_explorer.core.places_stub import StubPlacesLookup
from nsw_explorer.core.routing import total_distance
from nsw_explorer.schemas import CandidatePlace, Coordinate, StopType
from nsw_explorer.workflows import journey_generator
from nsw_explorer.workflows.journey_generator import (
    InvalidInterestSelection,
    JourneyGenerator,
    LookupOutcome,
    NoPlacesFound,
    journey_description,
    journey_title,
)


def _candidate(
    place_id: str,
    rating: Optional[float],
    reviews: Optional[int],
    *,
    latitude: float = -33.87,
    longitude: float = 151.21,
    vicinity: Optional[str] = None,
) -> CandidatePlace:
    return CandidatePlace(
        place_id=place_id,
        name=place_id.replace("-", " ").title(),
        vicinity=vicinity,
        latitude=latitude,
        longitude=longitude,
        rating=rating,
        user_ratings_total=reviews,
    )


class FakeLookup:
    def __init__(self, responses: Dict[str, Union[List[CandidatePlace], Exception]]):
        self.responses = responses
        self.calls: List[tuple[str, Coordinate]] = []

    def search(self, interest: str, center: Coordinate) -> List[CandidatePlace]:
        self.calls.append((interest, center))
        response = self.responses.get(interest, [])
        if isinstance(response, Exception):
            raise response
        return list(response)


def _beach_candidates() -> List[CandidatePlace]:
    return [
        _candidate("north-beach", 4.8, 100, latitude=-33.80, longitude=151.29),
        _candidate("south-beach", 4.5, 200, latitude=-33.92, longitude=151.26),
        _candidate("hidden-cove", 4.9, 50, latitude=-33.86, longitude=151.27),
        _candidate("harbour-beach", 3.0, 400, latitude=-33.89, longitude=151.28),
        _candidate("secret-beach", 5.0, 2, latitude=-33.85, longitude=151.25),
    ]


def _generate(generator: JourneyGenerator, interests: List[str], **kwargs: object):
    return asyncio.run(generator.generate(interests, **kwargs))


def test_single_interest_end_to_end() -> None:
    lookup = FakeLookup({"Beaches": _beach_candidates()})

    generator = JourneyGenerator(lookup)
    itinerary = _generate(generator, ["Beaches"])

    assert itinerary.title == "Beaches Explorer"
    assert itinerary.stop_count == 3
    assert {stop.place_id for stop in itinerary.stops} == {"harbour-beach", "south-beach", "north-beach"}
    assert itinerary.stops[0].place_id == "harbour-beach"
    assert [stop.position for stop in itinerary.stops] == [0, 1, 2]
    assert all(stop.stop_type is StopType.BEACH for stop in itinerary.stops)
    assert all(stop.category == "Beaches" for stop in itinerary.stops)
    assert all(not stop.is_checked_in and stop.check_in_time is None for stop in itinerary.stops)
    assert itinerary.total_duration_minutes == 3 * 120
    assert itinerary.total_distance_km >= 0
    assert itinerary.total_distance_km == pytest.approx(total_distance(itinerary.stops))
    assert itinerary.interests == ["Beaches"]
    assert lookup.calls == [("Beaches", generator.center)]


def test_failed_interest_is_skipped(caplog: pytest.LogCaptureFixture) -> None:
    lookup = FakeLookup(
        {
            "Beaches": _beach_candidates(),
            "Museums": PlacesLookupError("OVER_QUERY_LIMIT"),
            "Parks": [
                _candidate("botanic-garden", 4.7, 2000, latitude=-33.864, longitude=151.216),
                _candidate("centennial-park", 4.7, 1500, latitude=-33.897, longitude=151.234),
            ],
        }
    )

    with caplog.at_level(logging.WARNING):
        itinerary = _generate(JourneyGenerator(lookup), ["Beaches", "Museums", "Parks"])

    assert {stop.category for stop in itinerary.stops} == {"Beaches", "Parks"}
    assert itinerary.stop_count == 5
    assert itinerary.total_duration_minutes == 3 * 120 + 2 * 90
    assert itinerary.title == journey_generator.MULTI_INTEREST_TITLE
    assert any("Lookup failed for Museums" in record.getMessage() for record in caplog.records)


def test_all_interests_failing_raises_no_places_found() -> None:
    lookup = FakeLookup(
        {
            "Beaches": PlacesLookupError("boom"),
            "Museums": [],
            "Hiking": [_candidate("tiny-track", 5.0, 3)],
        }
    )

    with pytest.raises(NoPlacesFound) as excinfo:
        _generate(JourneyGenerator(lookup), ["Beaches", "Museums", "Hiking"])

    assert excinfo.value.failed_interests == ["Beaches"]


def test_empty_selection_fails_before_any_lookup() -> None:
    lookup = FakeLookup({})

    with pytest.raises(InvalidInterestSelection):
        _generate(JourneyGenerator(lookup), [])
    with pytest.raises(InvalidInterestSelection):
        _generate(JourneyGenerator(lookup), ["  ", ""])

    assert lookup.calls == []


def test_single_string_selection_is_rejected() -> None:
    lookup = FakeLookup({"Beaches": _beach_candidates()})

    with pytest.raises(TypeError):
        asyncio.run(JourneyGenerator(lookup).generate("Beaches"))  # type: ignore[arg-type]

    assert lookup.calls == []


def test_generated_stops_cannot_be_modified() -> None:
    lookup = FakeLookup({"Beaches": _beach_candidates()})
    itinerary = _generate(JourneyGenerator(lookup), ["Beaches"])

    with pytest.raises(ValidationError):
        itinerary.stops[0].position = 7
    with pytest.raises(ValidationError):
        itinerary.stops[1].estimated_duration_minutes = 1
    with pytest.raises(AttributeError):
        itinerary.stops.append(itinerary.stops[0])  # type: ignore[attr-defined]

    assert [stop.position for stop in itinerary.stops] == [0, 1, 2]
    assert itinerary.total_duration_minutes == sum(stop.estimated_duration_minutes for stop in itinerary.stops)


def test_home_coordinate_is_read_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NSW_HOME_LATITUDE", "-33.8003")
    monkeypatch.setenv("NSW_HOME_LONGITUDE", "151.2846")

    generator = JourneyGenerator(FakeLookup({}))

    assert generator.center == Coordinate(latitude=-33.8003, longitude=151.2846)


def test_malformed_home_coordinate_falls_back_to_cbd(
    monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setenv("NSW_HOME_LATITUDE", "north of bondi")
    monkeypatch.setenv("NSW_HOME_LONGITUDE", "151.2846")

    with caplog.at_level(logging.WARNING, logger=journey_generator.__name__):
        assert journey_generator.home_coordinate() == journey_generator.SYDNEY_CBD

    monkeypatch.setenv("NSW_HOME_LATITUDE", "-133.0")
    assert journey_generator.home_coordinate() == journey_generator.SYDNEY_CBD
    assert "Ignoring invalid home coordinate" in caplog.text


def test_duplicate_places_across_interests_are_kept_once() -> None:
    shared = _candidate("coastal-walk", 4.8, 900, latitude=-33.896, longitude=151.274)
    lookup = FakeLookup(
        {
            "Hiking": [shared, _candidate("ridge-track", 4.6, 300, latitude=-33.80, longitude=151.24)],
            "Parks": [shared],
        }
    )

    itinerary = _generate(JourneyGenerator(lookup), ["Hiking", "Parks"])

    assert [stop.place_id for stop in itinerary.stops].count("coastal-walk") == 1
    coastal = next(stop for stop in itinerary.stops if stop.place_id == "coastal-walk")
    assert coastal.category == "Hiking"
    assert itinerary.title == "Hiking & Parks Adventure"
    assert itinerary.total_duration_minutes == 2 * 180


def test_unknown_interest_uses_default_profile() -> None:
    lookup = FakeLookup({"Lighthouses": [_candidate("hornby-light", 4.6, 120)]})

    itinerary = _generate(JourneyGenerator(lookup), ["Lighthouses"])

    stop = itinerary.stops[0]
    assert stop.stop_type is StopType.LANDMARK
    assert stop.estimated_duration_minutes == 60
    assert stop.description == "Explore this amazing lighthouses destination"


def test_slow_lookup_is_treated_as_failure() -> None:
    class SlowLookup:
        async def search(self, interest: str, center: Coordinate) -> List[CandidatePlace]:
            if interest == "Museums":
                await asyncio.sleep(5)
            return [_candidate(f"{interest.lower()}-spot", 4.5, 100)]

    generator = JourneyGenerator(SlowLookup(), lookup_timeout=0.05)

    itinerary = _generate(generator, ["Beaches", "Museums"])

    assert [stop.category for stop in itinerary.stops] == ["Beaches"]


def test_cancelled_generation_cancels_outstanding_lookups() -> None:
    class BlockingLookup:
        def __init__(self) -> None:
            self.started = 0
            self.cancelled = 0

        async def search(self, interest: str, center: Coordinate) -> List[CandidatePlace]:
            self.started += 1
            try:
                await asyncio.sleep(3600)
            except asyncio.CancelledError:
                self.cancelled += 1
                raise
            return []

    lookup = BlockingLookup()
    generator = JourneyGenerator(lookup)

    async def scenario() -> None:
        task = asyncio.create_task(generator.generate(["Beaches", "Parks"]))
        while lookup.started < 2:
            await asyncio.sleep(0)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(scenario())

    assert lookup.cancelled == 2


def test_fetch_all_returns_outcomes_in_caller_order() -> None:
    lookup = FakeLookup({"Museums": PlacesLookupError("denied"), "Beaches": _beach_candidates()})
    generator = JourneyGenerator(lookup)

    outcomes = asyncio.run(generator.fetch_all(["Museums", "Beaches"]))

    assert [outcome.interest for outcome in outcomes] == ["Museums", "Beaches"]
    assert outcomes[0].succeeded is False
    assert isinstance(outcomes[0].error, PlacesLookupError)
    assert outcomes[1].succeeded is True
    assert len(outcomes[1].places) == 5


def test_build_stops_skips_failed_outcomes() -> None:
    generator = JourneyGenerator(FakeLookup({}), max_stops_per_interest=2)
    outcomes = [
        LookupOutcome(interest="Museums", error=PlacesLookupError("denied")),
        LookupOutcome(interest="Beaches", places=_beach_candidates()),
    ]

    stops = generator.build_stops(outcomes)

    assert [stop.place_id for stop in stops] == ["harbour-beach", "south-beach"]
    assert [stop.position for stop in stops] == [0, 1]


def test_titles_and_description() -> None:
    assert journey_title(["Museums"]) == "Museums Explorer"
    assert journey_title(["Museums", "Shopping"]) == "Museums & Shopping Adventure"
    assert journey_title(["Museums", "Shopping", "Parks"]) == "NSW Multi-Experience Journey"
    assert journey_description(["Beaches", "Parks"], 2) == (
        "A personalized 2-day adventure through NSW featuring the best of Beaches, Parks"
    )


def test_offline_stub_generates_sydney_beach_journey() -> None:
    lookup = StubPlacesLookup(failing={"Museums"})

    itinerary = _generate(JourneyGenerator(lookup), ["Beaches", "Museums"], duration_days=2)

    assert [stop.place_id for stop in itinerary.stops][0] == "bondi-beach"
    assert "milk-beach" not in {stop.place_id for stop in itinerary.stops}
    assert itinerary.stop_count == 3
    assert itinerary.duration_days == 2
    assert itinerary.title == "Beaches & Museums Adventure"
    assert sorted(lookup.calls) == ["Beaches", "Museums"]
