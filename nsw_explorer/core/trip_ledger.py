"""In-memory storage for saved and completed itineraries."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, MutableMapping, Optional, Set

from nsw_explorer.schemas import CheckIn, Itinerary, Stop, TripStatistics

_LOGGER = logging.getLogger(__name__)


class TripLedgerError(RuntimeError):
    """Raised when a ledger operation references an unknown trip or stop."""


class TripFilter(str, Enum):
    ALL = "all"
    SAVED = "saved"
    COMPLETED = "completed"


@dataclass(slots=True)
class StoredTrip:
    """Itinerary tracked by the ledger together with its progress."""

    itinerary: Itinerary
    saved_at: datetime
    completed_at: Optional[datetime] = None
    check_ins: List[CheckIn] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.itinerary.id

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def sort_key(self) -> datetime:
        return self.completed_at or self.saved_at


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _with_stop_progress(itinerary: Itinerary, stop_ids: Set[str], when: Optional[datetime]) -> Itinerary:
    """Return a copy with ``stop_ids`` checked in at ``when``, or cleared when it is ``None``."""

    stops: List[Stop] = []
    for stop in itinerary.stops:
        if stop.id in stop_ids:
            stop = stop.model_copy(update={"is_checked_in": when is not None, "check_in_time": when})
        stops.append(stop)
    return itinerary.model_copy(update={"stops": tuple(stops)})


class TripLedger:
    """Tracks generated itineraries, favourites and check-in progress.

    Itineraries are treated as values: every change stores a derived copy and
    the instance handed to :meth:`save_trip` is never modified.
    """

    def __init__(self) -> None:
        self._records: MutableMapping[str, StoredTrip] = {}
        self._favorites: Set[str] = set()

    def _require(self, trip_id: str) -> StoredTrip:
        record = self._records.get(trip_id)
        if record is None:
            raise TripLedgerError(f"Unknown trip: {trip_id}")
        return record

    def save_trip(self, itinerary: Itinerary) -> StoredTrip:
        record = StoredTrip(itinerary=itinerary.model_copy(deep=True), saved_at=_utcnow())
        self._records[itinerary.id] = record
        _LOGGER.info("Saved trip %s (%s)", itinerary.id, itinerary.title)
        return record

    def get_trip(self, trip_id: str) -> Optional[StoredTrip]:
        return self._records.get(trip_id)

    def delete_trip(self, trip_id: str) -> bool:
        """Remove a trip and its favourite flag. Returns ``False`` when unknown."""

        self._favorites.discard(trip_id)
        removed = self._records.pop(trip_id, None)
        return removed is not None

    def saved_trips(self) -> List[StoredTrip]:
        return [record for record in self._records.values() if not record.is_completed]

    def completed_trips(self) -> List[StoredTrip]:
        completed = [record for record in self._records.values() if record.is_completed]
        return sorted(completed, key=lambda record: record.sort_key, reverse=True)

    def list_trips(self, trip_filter: TripFilter | str = TripFilter.ALL) -> List[StoredTrip]:
        """Return trips matching ``trip_filter``, newest first."""

        selected = TripFilter(trip_filter)
        if selected is TripFilter.SAVED:
            records = self.saved_trips()
        elif selected is TripFilter.COMPLETED:
            records = self.completed_trips()
        else:
            records = list(self._records.values())
        return sorted(records, key=lambda record: record.sort_key, reverse=True)

    # Favourites

    def add_favorite(self, trip_id: str) -> None:
        self._require(trip_id)
        self._favorites.add(trip_id)

    def remove_favorite(self, trip_id: str) -> None:
        self._favorites.discard(trip_id)

    def is_favorite(self, trip_id: str) -> bool:
        return trip_id in self._favorites

    def favorite_trips(self) -> List[StoredTrip]:
        return [record for record in self._records.values() if record.id in self._favorites]

    # Journey progress

    def check_in(
        self,
        trip_id: str,
        stop_id: str,
        *,
        notes: Optional[str] = None,
        photo_filename: Optional[str] = None,
        rating: Optional[int] = None,
    ) -> CheckIn:
        """Record a visit to ``stop_id`` and complete the trip after the last stop."""

        record = self._require(trip_id)
        if record.itinerary.stop(stop_id) is None:
            raise TripLedgerError(f"Stop {stop_id} is not part of trip {trip_id}")
        if record.is_completed:
            raise TripLedgerError(f"Trip {trip_id} is already completed")

        check_in = CheckIn(
            stop_id=stop_id,
            itinerary_id=trip_id,
            notes=notes,
            photo_filename=photo_filename,
            rating=rating,
        )
        record.check_ins = [item for item in record.check_ins if item.stop_id != stop_id]
        record.check_ins.append(check_in)
        record.itinerary = _with_stop_progress(record.itinerary, {stop_id}, check_in.timestamp)
        _LOGGER.info("Checked in at %s on trip %s", stop_id, trip_id)

        if all(stop.is_checked_in for stop in record.itinerary.stops):
            record.completed_at = _utcnow()
            _LOGGER.info("Completed trip %s", trip_id)
        return check_in

    def check_ins(self, trip_id: str) -> List[CheckIn]:
        return list(self._require(trip_id).check_ins)

    def _require_check_in(self, record: StoredTrip, check_in_id: str) -> CheckIn:
        for item in record.check_ins:
            if item.id == check_in_id:
                return item
        raise TripLedgerError(f"Check-in {check_in_id} is not part of trip {record.id}")

    def update_check_in(
        self,
        trip_id: str,
        check_in_id: str,
        *,
        notes: Optional[str] = None,
        rating: Optional[int] = None,
    ) -> CheckIn:
        """Replace the notes and/or rating of a check-in. ``None`` leaves a field as is."""

        record = self._require(trip_id)
        existing = self._require_check_in(record, check_in_id)
        changes: Dict[str, object] = {}
        if notes is not None:
            changes["notes"] = notes
        if rating is not None:
            changes["rating"] = rating
        updated = CheckIn.model_validate({**existing.model_dump(), **changes})
        record.check_ins = [updated if item.id == check_in_id else item for item in record.check_ins]
        _LOGGER.info("Updated check-in %s on trip %s", check_in_id, trip_id)
        return updated

    def delete_check_in(self, trip_id: str, check_in_id: str) -> None:
        """Remove a check-in and mark its stop as not yet visited."""

        record = self._require(trip_id)
        if record.is_completed:
            raise TripLedgerError(f"Trip {trip_id} is already completed")
        removed = self._require_check_in(record, check_in_id)
        record.check_ins = [item for item in record.check_ins if item.id != check_in_id]
        record.itinerary = _with_stop_progress(record.itinerary, {removed.stop_id}, None)
        _LOGGER.info("Deleted check-in %s on trip %s", check_in_id, trip_id)

    def reset_progress(self, trip_id: str) -> StoredTrip:
        """Cancel a journey: drop its check-ins and return it to the saved trips."""

        record = self._require(trip_id)
        record.check_ins = []
        record.itinerary = _with_stop_progress(record.itinerary, {stop.id for stop in record.itinerary.stops}, None)
        record.completed_at = None
        _LOGGER.info("Reset progress on trip %s", trip_id)
        return record

    def next_stop(self, trip_id: str) -> Optional[Stop]:
        """Return the first stop in sequence that has not been checked in."""

        for stop in self._require(trip_id).itinerary.stops:
            if not stop.is_checked_in:
                return stop
        return None

    def time_remaining_minutes(self, trip_id: str) -> int:
        stops = self._require(trip_id).itinerary.stops
        return sum(stop.estimated_duration_minutes for stop in stops if not stop.is_checked_in)

    def complete_trip(self, trip_id: str) -> StoredTrip:
        """Mark every remaining stop as visited and move the trip to completed."""

        record = self._require(trip_id)
        if record.is_completed:
            return record
        now = _utcnow()
        pending = {stop.id for stop in record.itinerary.stops if not stop.is_checked_in}
        record.itinerary = _with_stop_progress(record.itinerary, pending, now)
        record.completed_at = now
        _LOGGER.info("Completed trip %s", trip_id)
        return record

    def statistics(self) -> TripStatistics:
        completed = self.completed_trips()
        saved = self.saved_trips()
        check_ins = [item for record in completed for item in record.check_ins]
        ratings = [item.rating for item in check_ins if item.rating is not None]

        interests: Counter[str] = Counter()
        for record in self._records.values():
            interests.update(record.itinerary.interests)

        favorite_interests: Dict[str, int] = dict(interests.most_common())
        return TripStatistics(
            total_trips=len(self._records),
            completed_trips=len(completed),
            saved_trips=len(saved),
            total_distance_km=sum((record.itinerary.total_distance_km for record in completed), 0.0),
            total_duration_minutes=sum(record.itinerary.total_duration_minutes for record in completed),
            total_stops_visited=sum(record.itinerary.stop_count for record in completed),
            total_check_ins=len(check_ins),
            total_photos=sum(1 for item in check_ins if item.has_photo),
            average_rating=sum(ratings) / len(ratings) if ratings else None,
            favorite_interests=favorite_interests,
        )


__all__ = ["StoredTrip", "TripFilter", "TripLedger", "TripLedgerError"]
