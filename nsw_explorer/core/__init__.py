"""Core utilities for NSW Explorer."""

from .geo import haversine_km
from .ranking import rank
from .routing import sequence, total_distance

__all__ = [
    "haversine_km",
    "rank",
    "sequence",
    "total_distance",
]
