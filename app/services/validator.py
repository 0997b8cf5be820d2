"""
Booking validation.

Checks run in a fixed order and stop at the first failure so that the same
request always gets the same rejection:

    1. INVALID_RANGE          start must be before end
    2. DURATION_OUT_OF_RANGE  duration within [min_minutes, max_minutes]
    3. MISALIGNED             start/end on slot_minutes boundaries
    4. ROOM_INACTIVE
    5. OUTSIDE_OPENING_HOURS  inside the opening window of start's date
    6. BLACKED_OUT
    7. ROOM_ALREADY_BOOKED
    8. QUOTA_EXCEEDED         active CONFIRMED reservations per user

Steps 5-8 read storage; callers that insert afterwards must hold the room
lock so those reads and the insert form one unit.
"""

from datetime import datetime
from typing import Optional

from app.clock import Clock
from app.config import Settings
from app.domain import Room, User
from app.exceptions import BookingRejected, RejectionReason
from app.repository import BookingRepository
from app.services.conflicts import ConflictDetector
from app.services.opening_hours import OpeningHoursResolver


class BookingValidator:
    def __init__(
        self,
        repository: BookingRepository,
        clock: Clock,
        settings: Settings,
        resolver: Optional[OpeningHoursResolver] = None,
        detector: Optional[ConflictDetector] = None,
    ):
        self.repository = repository
        self.clock = clock
        self.settings = settings
        self.resolver = resolver or OpeningHoursResolver(repository, clock)
        self.detector = detector or ConflictDetector(repository)

    def validate(self, user: User, room: Room, start: datetime, end: datetime) -> None:
        """Raise BookingRejected for the first rule the request breaks."""
        start = self.clock.ensure_aware(start)
        end = self.clock.ensure_aware(end)

        self._check_range(start, end)
        self._check_duration(start, end)
        self._check_alignment(start, end)

        if not room.active:
            raise BookingRejected(RejectionReason.ROOM_INACTIVE, "Room is inactive", {"room_id": room.id})

        local_day = self.clock.to_local(start).date()
        window = self.resolver.resolve(room.id, local_day)
        if not window.contains(start, end):
            raise BookingRejected(
                RejectionReason.OUTSIDE_OPENING_HOURS,
                "Outside opening hours",
                {
                    "open_at": self.clock.to_local(window.open_at).isoformat(),
                    "close_at": self.clock.to_local(window.close_at).isoformat(),
                },
            )

        blackouts = self.detector.find_overlapping_blackouts(room.id, start, end)
        if blackouts:
            raise BookingRejected(
                RejectionReason.BLACKED_OUT,
                "Time range is blocked (maintenance/holiday)",
                {"reason": blackouts[0].reason},
            )

        if self.detector.find_overlapping(room.id, start, end):
            raise BookingRejected(RejectionReason.ROOM_ALREADY_BOOKED, "An overlapping reservation exists")

        active = self.repository.find_user_reservations_ending_after(user.id, self.clock.now())
        if len(active) >= self.settings.user_active_limit:
            raise BookingRejected(
                RejectionReason.QUOTA_EXCEEDED,
                "Maximum number of active reservations reached",
                {"limit": self.settings.user_active_limit},
            )

    def _check_range(self, start: datetime, end: datetime) -> None:
        if not start < end:
            raise BookingRejected(RejectionReason.INVALID_RANGE, "Start must be before end")

    def _check_duration(self, start: datetime, end: datetime) -> None:
        minutes = (end - start).total_seconds() / 60
        if not self.settings.min_minutes <= minutes <= self.settings.max_minutes:
            raise BookingRejected(
                RejectionReason.DURATION_OUT_OF_RANGE,
                "Duration out of range",
                {"min_minutes": self.settings.min_minutes, "max_minutes": self.settings.max_minutes},
            )

    def _check_alignment(self, start: datetime, end: datetime) -> None:
        slot = self.settings.slot_minutes
        for value in (self.clock.to_local(start), self.clock.to_local(end)):
            if value.minute % slot or value.second or value.microsecond:
                raise BookingRejected(
                    RejectionReason.MISALIGNED,
                    f"Must align to {slot}-minute slots",
                    {"slot_minutes": slot},
                )
