from app.services.availability import AvailabilityService
from app.services.calendar_sync import CalendarSync
from app.services.conflicts import ConflictDetector
from app.services.opening_hours import OpeningHoursResolver
from app.services.reservations import ReservationService
from app.services.room_lock import RoomLockRegistry
from app.services.validator import BookingValidator

__all__ = [
    "AvailabilityService",
    "BookingValidator",
    "CalendarSync",
    "ConflictDetector",
    "OpeningHoursResolver",
    "ReservationService",
    "RoomLockRegistry",
]
