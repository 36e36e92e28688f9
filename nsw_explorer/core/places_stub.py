"""Offline-friendly substitute for Google Places search results around Sydney."""

from __future__ import annotations

from typing import AbstractSet, Dict, Iterable, List, Optional

from nsw_explorer.core.interests import profile_for
from nsw_explorer.core.places_api import PlacesLookupError
from nsw_explorer.schemas import CandidatePlace, Coordinate


def _place(
    *,
    place_id: str,
    name: str,
    vicinity: str,
    latitude: float,
    longitude: float,
    types: Iterable[str],
    rating: Optional[float],
    reviews: Optional[int],
) -> CandidatePlace:
    return CandidatePlace(
        place_id=place_id,
        name=name,
        vicinity=vicinity,
        latitude=latitude,
        longitude=longitude,
        rating=rating,
        user_ratings_total=reviews,
        types=list(types),
    )


_PLACES: Dict[str, CandidatePlace] = {
    place.place_id: place
    for place in (
        _place(
            place_id="bondi-beach",
            name="Bondi Beach",
            vicinity="Bondi Beach NSW 2026",
            latitude=-33.8915,
            longitude=151.2767,
            types=["beach", "natural_feature", "point_of_interest"],
            rating=4.7,
            reviews=31250,
        ),
        _place(
            place_id="manly-beach",
            name="Manly Beach",
            vicinity="Manly NSW 2095",
            latitude=-33.7969,
            longitude=151.2873,
            types=["beach", "natural_feature", "point_of_interest"],
            rating=4.7,
            reviews=12840,
        ),
        _place(
            place_id="coogee-beach",
            name="Coogee Beach",
            vicinity="Coogee NSW 2034",
            latitude=-33.9207,
            longitude=151.2577,
            types=["beach", "natural_feature", "point_of_interest"],
            rating=4.6,
            reviews=8120,
        ),
        _place(
            place_id="milk-beach",
            name="Milk Beach",
            vicinity="Vaucluse NSW 2030",
            latitude=-33.8577,
            longitude=151.2686,
            types=["beach", "natural_feature"],
            rating=4.9,
            reviews=7,
        ),
        _place(
            place_id="australian-museum",
            name="Australian Museum",
            vicinity="1 William St, Darlinghurst",
            latitude=-33.8743,
            longitude=151.2131,
            types=["museum", "tourist_attraction", "point_of_interest"],
            rating=4.5,
            reviews=9870,
        ),
        _place(
            place_id="mca-australia",
            name="Museum of Contemporary Art Australia",
            vicinity="140 George St, The Rocks",
            latitude=-33.8599,
            longitude=151.2090,
            types=["museum", "art_gallery", "point_of_interest"],
            rating=4.5,
            reviews=6420,
        ),
        _place(
            place_id="maritime-museum",
            name="Australian National Maritime Museum",
            vicinity="2 Murray St, Sydney",
            latitude=-33.8691,
            longitude=151.1986,
            types=["museum", "tourist_attraction", "point_of_interest"],
            rating=4.6,
            reviews=7310,
        ),
        _place(
            place_id="the-grounds",
            name="The Grounds of Alexandria",
            vicinity="7a/2 Huntley St, Alexandria",
            latitude=-33.9105,
            longitude=151.1945,
            types=["cafe", "restaurant", "food", "point_of_interest"],
            rating=4.4,
            reviews=15230,
        ),
        _place(
            place_id="quay-restaurant",
            name="Quay Restaurant",
            vicinity="Upper Level, Overseas Passenger Terminal, The Rocks",
            latitude=-33.8580,
            longitude=151.2098,
            types=["restaurant", "food", "point_of_interest"],
            rating=4.6,
            reviews=2140,
        ),
        _place(
            place_id="single-o",
            name="Single O Surry Hills",
            vicinity="60-64 Reservoir St, Surry Hills",
            latitude=-33.8815,
            longitude=151.2105,
            types=["cafe", "food", "point_of_interest"],
            rating=4.5,
            reviews=1630,
        ),
        _place(
            place_id="bondi-coogee-walk",
            name="Bondi to Coogee Coastal Walk",
            vicinity="Bondi Beach NSW 2026",
            latitude=-33.8960,
            longitude=151.2745,
            types=["hiking_area", "park", "tourist_attraction"],
            rating=4.8,
            reviews=6890,
        ),
        _place(
            place_id="spit-manly-walk",
            name="Spit Bridge to Manly Walk",
            vicinity="Seaforth NSW 2092",
            latitude=-33.8046,
            longitude=151.2469,
            types=["hiking_area", "park"],
            rating=4.8,
            reviews=2310,
        ),
        _place(
            place_id="royal-national-park",
            name="Royal National Park",
            vicinity="Sutherland Shire NSW",
            latitude=-34.1227,
            longitude=151.0571,
            types=["park", "hiking_area", "tourist_attraction"],
            rating=4.8,
            reviews=9540,
        ),
        _place(
            place_id="the-rocks",
            name="The Rocks",
            vicinity="The Rocks NSW 2000",
            latitude=-33.8599,
            longitude=151.2090,
            types=["historical", "tourist_attraction", "neighborhood"],
            rating=4.6,
            reviews=11200,
        ),
        _place(
            place_id="hyde-park-barracks",
            name="Hyde Park Barracks",
            vicinity="Queens Square, Macquarie St, Sydney",
            latitude=-33.8696,
            longitude=151.2128,
            types=["historical", "museum", "tourist_attraction"],
            rating=4.5,
            reviews=3120,
        ),
        _place(
            place_id="luna-park",
            name="Luna Park Sydney",
            vicinity="1 Olympic Dr, Milsons Point",
            latitude=-33.8476,
            longitude=151.2100,
            types=["amusement_park", "tourist_attraction"],
            rating=4.4,
            reviews=14870,
        ),
        _place(
            place_id="qvb",
            name="Queen Victoria Building",
            vicinity="455 George St, Sydney",
            latitude=-33.8718,
            longitude=151.2067,
            types=["shopping_mall", "tourist_attraction", "point_of_interest"],
            rating=4.6,
            reviews=28410,
        ),
        _place(
            place_id="paddington-markets",
            name="Paddington Markets",
            vicinity="395 Oxford St, Paddington",
            latitude=-33.8846,
            longitude=151.2265,
            types=["store", "point_of_interest"],
            rating=4.3,
            reviews=2980,
        ),
        _place(
            place_id="royal-botanic-garden",
            name="Royal Botanic Garden Sydney",
            vicinity="Mrs Macquaries Rd, Sydney",
            latitude=-33.8642,
            longitude=151.2166,
            types=["park", "tourist_attraction"],
            rating=4.7,
            reviews=25670,
        ),
        _place(
            place_id="centennial-park",
            name="Centennial Park",
            vicinity="Grand Dr, Centennial Park",
            latitude=-33.8974,
            longitude=151.2344,
            types=["park", "point_of_interest"],
            rating=4.7,
            reviews=14520,
        ),
        _place(
            place_id="opera-house",
            name="Sydney Opera House",
            vicinity="Bennelong Point, Sydney",
            latitude=-33.8568,
            longitude=151.2153,
            types=["tourist_attraction", "point_of_interest"],
            rating=4.7,
            reviews=98750,
        ),
    )
}


def _matching_places(interest: str) -> List[CandidatePlace]:
    place_types = set(profile_for(interest).place_types)
    return [place for place in _PLACES.values() if place_types.intersection(place.types)]


class StubPlacesLookup:
    """Deterministic places lookup used when no API key is available."""

    def __init__(self, *, failing: AbstractSet[str] = frozenset()) -> None:
        self._failing = {interest.strip().lower() for interest in failing}
        self.calls: List[str] = []

    def search(self, interest: str, center: Coordinate) -> List[CandidatePlace]:
        """Return stub candidates whose types match ``interest``."""

        self.calls.append(interest)
        if interest.strip().lower() in self._failing:
            raise PlacesLookupError(f"Stub lookup configured to fail for {interest}")
        return _matching_places(interest)


def stub_place(place_id: str) -> CandidatePlace:
    """Return the stub place with ``place_id``."""

    place = _PLACES.get(place_id)
    if place is None:
        raise KeyError(f"Unknown stub place_id: {place_id}")
    return place


__all__ = ["StubPlacesLookup", "stub_place"]
