"""Data schemas for the NSW Explorer journey generator."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _format_minutes(minutes: int) -> str:
    hours, remainder = divmod(minutes, 60)
    if hours and remainder:
        return f"{hours}h {remainder}m"
    if hours:
        return f"{hours}h"
    return f"{remainder}m"


class Coordinate(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)

    model_config = ConfigDict(frozen=True)


class CandidatePlace(BaseModel):
    """Normalised search result returned by a places lookup."""

    place_id: str
    name: str
    vicinity: Optional[str] = None
    latitude: float
    longitude: float
    rating: Optional[float] = Field(default=None, ge=0.0, le=5.0)
    user_ratings_total: Optional[int] = Field(default=None, ge=0)
    types: List[str] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def popularity(self) -> Optional[float]:
        """Rating weighted by review count, ``None`` when either is unknown."""

        if self.rating is None or self.user_ratings_total is None:
            return None
        return self.rating * self.user_ratings_total


class StopType(str, Enum):
    """Transit mode or activity used to classify a stop."""

    TRAIN = "Train"
    BUS = "Bus"
    FERRY = "Ferry"
    LIGHT_RAIL = "Light Rail"
    WALK = "Walk"
    ATTRACTION = "Attraction"
    FOOD = "Food"
    VIEWPOINT = "Viewpoint"
    BEACH = "Beach"
    MUSEUM = "Museum"
    NATURE = "Nature"
    LANDMARK = "Landmark"
    ENTERTAINMENT = "Entertainment"
    SHOPPING = "Shopping"
    RESTAURANT = "Restaurant"


class Stop(BaseModel):
    """A place promoted into an itinerary.

    Stops are immutable; progress updates produce copies via ``model_copy``.
    """

    id: str = Field(default_factory=_new_id)
    place_id: Optional[str] = None
    name: str
    description: str = ""
    latitude: float
    longitude: float
    stop_type: StopType = StopType.LANDMARK
    estimated_duration_minutes: int = Field(default=60, ge=0)
    position: int = Field(default=0, ge=0)
    category: Optional[str] = None
    rating: Optional[float] = None
    notes: Optional[str] = None
    photo_filename: Optional[str] = None
    is_checked_in: bool = False
    check_in_time: Optional[datetime] = None

    model_config = ConfigDict(frozen=True)

    @property
    def duration_label(self) -> str:
        hours, minutes = divmod(self.estimated_duration_minutes, 60)
        if hours and minutes:
            return f"{hours}h {minutes}m"
        if hours:
            return f"{hours} hour{'s' if hours > 1 else ''}"
        return f"{minutes} min"


class Itinerary(BaseModel):
    """A generated, sequenced trip through a set of stops."""

    id: str = Field(default_factory=_new_id)
    title: str
    description: str = ""
    stops: Tuple[Stop, ...]
    total_distance_km: float = Field(ge=0.0)
    total_duration_minutes: int = Field(ge=0)
    interests: List[str] = Field(default_factory=list)
    duration_days: int = Field(default=1, ge=1)
    created_at: datetime = Field(default_factory=_utcnow)

    model_config = ConfigDict(frozen=True)

    @model_validator(mode="after")
    def _check_sequence(self) -> "Itinerary":
        if not self.stops:
            raise ValueError("An itinerary must contain at least one stop")
        positions = [stop.position for stop in self.stops]
        if positions != list(range(len(self.stops))):
            raise ValueError(f"Stop positions must run 0..{len(self.stops) - 1} in order, got {positions}")
        dwell = sum(stop.estimated_duration_minutes for stop in self.stops)
        if dwell != self.total_duration_minutes:
            raise ValueError(
                f"total_duration_minutes ({self.total_duration_minutes}) must equal the summed dwell time ({dwell})"
            )
        return self

    @property
    def stop_count(self) -> int:
        return len(self.stops)

    @property
    def distance_label(self) -> str:
        return f"{self.total_distance_km:.1f} km"

    @property
    def duration_label(self) -> str:
        return _format_minutes(self.total_duration_minutes)

    def stop(self, stop_id: str) -> Optional[Stop]:
        for stop in self.stops:
            if stop.id == stop_id:
                return stop
        return None


class CheckIn(BaseModel):
    """A visit recorded against one stop of an itinerary."""

    id: str = Field(default_factory=_new_id)
    stop_id: str
    itinerary_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    notes: Optional[str] = None
    photo_filename: Optional[str] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)

    @property
    def has_photo(self) -> bool:
        return self.photo_filename is not None

    @property
    def has_notes(self) -> bool:
        return bool(self.notes)

    @property
    def has_rating(self) -> bool:
        return self.rating is not None


class TripStatistics(BaseModel):
    """Aggregate figures over the trips held in a ledger."""

    total_trips: int = 0
    completed_trips: int = 0
    saved_trips: int = 0
    total_distance_km: float = 0.0
    total_duration_minutes: int = 0
    total_stops_visited: int = 0
    total_check_ins: int = 0
    total_photos: int = 0
    average_rating: Optional[float] = None
    favorite_interests: Dict[str, int] = Field(default_factory=dict)


__all__ = [
    "CandidatePlace",
    "CheckIn",
    "Coordinate",
    "Itinerary",
    "Stop",
    "StopType",
    "TripStatistics",
]
