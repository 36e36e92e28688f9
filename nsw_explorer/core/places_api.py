"""Thin wrapper around the Google Places Nearby Search HTTP API."""

from __future__ import annotations

import logging
import os
from typing import Dict, List, Optional

import requests

from nsw_explorer.core.interests import profile_for
from nsw_explorer.schemas import CandidatePlace, Coordinate

_GOOGLE_PLACES_BASE_URL = "https://maps.googleapis.com/maps/api/place"
_DEFAULT_TIMEOUT = 10.0
DEFAULT_SEARCH_RADIUS_M = 50000

_LOGGER = logging.getLogger(__name__)


class PlacesLookupError(RuntimeError):
    """Raised when a places search cannot return results."""


def _api_key() -> str:
    api_key = os.getenv("GOOGLE_MAPS_API_KEY")
    if not api_key:
        raise PlacesLookupError("GOOGLE_MAPS_API_KEY environment variable is not set")
    return api_key


def _request_timeout() -> float:
    timeout_env = os.getenv("GOOGLE_MAPS_TIMEOUT")
    if not timeout_env:
        return _DEFAULT_TIMEOUT
    try:
        return float(timeout_env)
    except ValueError:
        return _DEFAULT_TIMEOUT


def _search_radius() -> int:
    radius_env = os.getenv("PLACES_SEARCH_RADIUS")
    if not radius_env:
        return DEFAULT_SEARCH_RADIUS_M
    try:
        return int(radius_env)
    except ValueError:
        return DEFAULT_SEARCH_RADIUS_M


def _request(path: str, params: Dict[str, object], *, timeout: Optional[float] = None) -> Dict[str, object]:
    params = {**params, "key": _api_key()}
    try:
        response = requests.get(
            f"{_GOOGLE_PLACES_BASE_URL.rstrip('/')}/{path.lstrip('/')}",
            params=params,
            timeout=timeout if timeout is not None else _request_timeout(),
        )
        response.raise_for_status()
        data = response.json()
    except requests.RequestException as exc:
        raise PlacesLookupError(f"Google Places request failed: {exc}") from exc
    except ValueError as exc:
        raise PlacesLookupError("Google Places returned a non-JSON response") from exc

    status = data.get("status")
    if status and status not in {"OK", "ZERO_RESULTS"}:
        message = data.get("error_message") or status
        raise PlacesLookupError(f"Google Places API error: {message}")
    return data


def _normalise_place(result: Dict[str, object]) -> Optional[CandidatePlace]:
    geometry = result.get("geometry") or {}
    location = geometry.get("location") if isinstance(geometry, dict) else None
    if not isinstance(location, dict) or location.get("lat") is None or location.get("lng") is None:
        return None
    place_id = result.get("place_id")
    if not place_id:
        return None

    raw_types = result.get("types") or []
    if isinstance(raw_types, list):
        types = [str(item) for item in raw_types]
    else:
        types = [str(raw_types)]

    return CandidatePlace(
        place_id=str(place_id),
        name=str(result.get("name") or ""),
        vicinity=result.get("vicinity") or result.get("formatted_address"),
        latitude=float(location["lat"]),
        longitude=float(location["lng"]),
        rating=result.get("rating"),
        user_ratings_total=result.get("user_ratings_total"),
        types=types,
    )


def nearby_search(
    place_type: str,
    center: Coordinate,
    *,
    radius: Optional[int] = None,
    timeout: Optional[float] = None,
) -> List[CandidatePlace]:
    """Search for places of ``place_type`` within ``radius`` metres of ``center``."""

    data = _request(
        "nearbysearch/json",
        {
            "location": f"{center.latitude},{center.longitude}",
            "radius": radius if radius is not None else _search_radius(),
            "type": place_type,
        },
        timeout=timeout,
    )
    places: List[CandidatePlace] = []
    for result in data.get("results", []) or []:
        if not isinstance(result, dict):
            continue
        place = _normalise_place(result)
        if place is None:
            _LOGGER.debug("Skipping place without id or location: %s", result.get("name"))
            continue
        places.append(place)
    return places


class GooglePlacesLookup:
    """Places lookup client backed by the Google Places API."""

    def __init__(self, *, radius: Optional[int] = None, timeout: Optional[float] = None) -> None:
        self.radius = radius if radius is not None else _search_radius()
        self.timeout = timeout if timeout is not None else _request_timeout()

    def search(self, interest: str, center: Coordinate) -> List[CandidatePlace]:
        """Return candidates for ``interest`` around ``center``.

        Interests that map to several provider types are searched once per
        type; results are merged in provider order and deduplicated by id.
        """

        merged: Dict[str, CandidatePlace] = {}
        for place_type in profile_for(interest).place_types:
            for place in nearby_search(place_type, center, radius=self.radius, timeout=self.timeout):
                merged.setdefault(place.place_id, place)
        _LOGGER.info("Google Places returned %d candidates for %s", len(merged), interest)
        return list(merged.values())


__all__ = [
    "DEFAULT_SEARCH_RADIUS_M",
    "GooglePlacesLookup",
    "PlacesLookupError",
    "nearby_search",
]
