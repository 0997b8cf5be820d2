"""
Overlap queries against reservations and blackouts.

The repository already filters with strict overlap; results are checked again
with `intervals.overlaps` so the booking path and the availability grid share
one predicate regardless of how the storage layer compares timestamps.
"""

import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, List

from app.domain import Blackout, Reservation, ReservationStatus
from app.intervals import Interval, overlaps
from app.repository import BookingRepository

logger = logging.getLogger(__name__)


class ConflictDetector:
    def __init__(self, repository: BookingRepository):
        self.repository = repository

    def find_overlapping(
        self,
        room_id: str,
        start: datetime,
        end: datetime,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
    ) -> List[Reservation]:
        candidates = self.repository.find_reservations(start, end, status=status, room_id=room_id)
        conflicts = [r for r in candidates if overlaps(start, end, r.start_at, r.end_at)]
        if conflicts:
            logger.debug(
                "Found %d overlapping reservations for room %s between %s-%s",
                len(conflicts), room_id, start, end,
            )
        return conflicts

    def find_overlapping_blackouts(self, room_id: str, start: datetime, end: datetime) -> List[Blackout]:
        candidates = self.repository.find_blackouts(start, end, room_id=room_id)
        return [b for b in candidates if overlaps(start, end, b.start_at, b.end_at)]

    def is_occupied(self, room_id: str, start: datetime, end: datetime) -> bool:
        return bool(
            self.find_overlapping_blackouts(room_id, start, end)
            or self.find_overlapping(room_id, start, end)
        )

    def occupancy_by_room(self, start: datetime, end: datetime) -> Dict[str, List[Interval]]:
        """All CONFIRMED reservations and blackouts touching [start, end), grouped by room and sorted."""
        occupied: Dict[str, List[Interval]] = defaultdict(list)
        for reservation in self.repository.find_reservations(start, end):
            occupied[reservation.room_id].append(reservation.interval)
        for blackout in self.repository.find_blackouts(start, end):
            occupied[blackout.room_id].append(blackout.interval)
        for intervals in occupied.values():
            intervals.sort()
        return occupied
