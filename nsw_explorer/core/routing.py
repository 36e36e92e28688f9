"""Greedy nearest-neighbour ordering of itinerary stops.

The tour always starts at the first stop handed in and repeatedly walks to
the closest unvisited stop. This is a cheap heuristic, not an optimal
travelling-salesman solve: the result depends on the starting stop, and
distances are straight-line great-circle figures rather than road routes.
"""

from __future__ import annotations

from typing import List, Sequence

from nsw_explorer.core.geo import haversine_km
from nsw_explorer.schemas import Stop


def _distance(a: Stop, b: Stop) -> float:
    return haversine_km(a.latitude, a.longitude, b.latitude, b.longitude)


def sequence(stops: Sequence[Stop]) -> List[Stop]:
    """Return ``stops`` in nearest-neighbour order as renumbered copies."""

    if not stops:
        return []

    remaining = list(stops)
    current = remaining.pop(0)
    ordered = [current.model_copy(update={"position": 0})]

    while remaining:
        nearest_index = 0
        nearest_distance = _distance(current, remaining[0])
        for index in range(1, len(remaining)):
            candidate_distance = _distance(current, remaining[index])
            # Strict comparison keeps the first stop found on ties.
            if candidate_distance < nearest_distance:
                nearest_index = index
                nearest_distance = candidate_distance

        current = remaining.pop(nearest_index)
        ordered.append(current.model_copy(update={"position": len(ordered)}))

    return ordered


def total_distance(ordered_stops: Sequence[Stop]) -> float:
    """Sum the great-circle distance in kilometres between consecutive stops."""

    pairs = zip(ordered_stops, ordered_stops[1:])
    return sum((_distance(first, second) for first, second in pairs), 0.0)


__all__ = ["sequence", "total_distance"]
