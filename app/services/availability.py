"""
Availability views over reservations and blackouts.

`build_grid` classifies every (room, slot) pair of a day as free or occupied;
`daily_free_busy` lists the free chunks of one room's opening window. Both
rely on the strict overlap rule from app.intervals, so a slot that merely
touches a reservation is free in either view.
"""

import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from app.clock import Clock
from app.config import Settings
from app.domain import AvailabilityGrid, RoomAvailability, SlotStatus, TimeSlot
from app.exceptions import NotFoundException, ValidationException
from app.intervals import Interval, chop, clip, gaps, merge
from app.repository import BookingRepository
from app.services.conflicts import ConflictDetector
from app.services.opening_hours import OpeningHoursResolver

logger = logging.getLogger(__name__)


class AvailabilityService:
    def __init__(self, repository: BookingRepository, clock: Clock, settings: Settings):
        self.repository = repository
        self.clock = clock
        self.settings = settings
        self.resolver = OpeningHoursResolver(repository, clock)
        self.detector = ConflictDetector(repository)

    def generate_slots(
        self, day: date, slot_minutes: int, day_start_hour: int, day_end_hour: int
    ) -> List[TimeSlot]:
        """Fixed-width slots from day_start_hour:00 while the slot start hour is before day_end_hour."""
        if slot_minutes <= 0:
            raise ValidationException("slot_minutes must be positive", details={"slot_minutes": slot_minutes})
        if not 0 <= day_start_hour < day_end_hour <= 24:
            raise ValidationException(
                "Hours must satisfy 0 <= day_start_hour < day_end_hour <= 24",
                details={"day_start_hour": day_start_hour, "day_end_hour": day_end_hour},
            )

        step = timedelta(minutes=slot_minutes)
        wall = datetime.combine(day, time(day_start_hour, 0))
        slots: List[TimeSlot] = []
        while wall.date() == day and wall.hour < day_end_hour:
            wall_end = wall + step
            slots.append(
                TimeSlot(
                    id=f"{wall:%H:%M}-{wall_end:%H:%M}",
                    label=f"{wall:%H:%M} - {wall_end:%H:%M}",
                    start_at=self.clock.at(day, wall.time()),
                    end_at=self.clock.at(wall_end.date(), wall_end.time()),
                )
            )
            wall = wall_end
        return slots

    def day_slots(
        self,
        day: date,
        slot_minutes: Optional[int] = None,
        day_start_hour: Optional[int] = None,
        day_end_hour: Optional[int] = None,
    ) -> List[TimeSlot]:
        """`generate_slots` with unset arguments taken from the grid settings."""
        return self.generate_slots(
            day,
            self.settings.grid_slot_minutes if slot_minutes is None else slot_minutes,
            self.settings.grid_day_start_hour if day_start_hour is None else day_start_hour,
            self.settings.grid_day_end_hour if day_end_hour is None else day_end_hour,
        )

    def build_grid(
        self,
        day: date,
        slot_minutes: Optional[int] = None,
        day_start_hour: Optional[int] = None,
        day_end_hour: Optional[int] = None,
    ) -> AvailabilityGrid:
        slots = self.day_slots(day, slot_minutes, day_start_hour, day_end_hour)
        rooms = self.repository.list_rooms()
        matrix: List[SlotStatus] = []
        if slots:
            occupied = self.detector.occupancy_by_room(slots[0].start_at, slots[-1].end_at)
            for room in rooms:
                busy = occupied.get(room.id, [])
                for slot in slots:
                    window = Interval(slot.start_at, slot.end_at)
                    taken = any(window.overlaps(interval) for interval in busy)
                    matrix.append(SlotStatus(room_id=room.id, slot_id=slot.id, available=not taken))
        logger.debug("Built availability grid for %s: %d rooms x %d slots", day, len(rooms), len(slots))
        return AvailabilityGrid(date=day, rooms=rooms, slots=slots, matrix=matrix)

    def daily_free_busy(self, room_id: str, day: date, slot_minutes: int) -> RoomAvailability:
        if slot_minutes <= 0:
            raise ValidationException("slot_minutes must be positive", details={"slot_minutes": slot_minutes})
        if self.repository.get_room(room_id) is None:
            raise NotFoundException("Room not found", details={"room_id": room_id})

        window = self.resolver.resolve(room_id, day)
        reservations = self.detector.find_overlapping(room_id, window.open_at, window.close_at)
        blackouts = self.detector.find_overlapping_blackouts(room_id, window.open_at, window.close_at)

        booked = sorted([r.interval for r in reservations] + [b.interval for b in blackouts])
        clipped = [c for c in (clip(i, window.open_at, window.close_at) for i in booked) if c is not None]

        free: List[Interval] = []
        for gap in gaps(window.open_at, window.close_at, merge(clipped)):
            free.extend(chop(gap.start, gap.end, slot_minutes))

        return RoomAvailability(
            room_id=room_id,
            date=day,
            open_time=self.clock.to_local(window.open_at).time(),
            close_time=self.clock.to_local(window.close_at).time(),
            slot_minutes=slot_minutes,
            booked=booked,
            free=free,
        )

    def is_slot_occupied(self, room_id: str, slot: TimeSlot) -> bool:
        return self.detector.is_occupied(room_id, slot.start_at, slot.end_at)
