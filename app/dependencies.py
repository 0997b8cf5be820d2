from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from app.clock import Clock
from app.config import Settings, get_settings
from app.db import get_db
from app.exceptions import UnauthorizedException
from app.repository import BookingRepository
from app.services import AvailabilityService, CalendarSync, ReservationService, RoomLockRegistry

_settings = get_settings()

# Shared by every request in this process.
room_locks = RoomLockRegistry(
    timeout_s=_settings.room_lock_timeout_seconds,
    retries=_settings.room_lock_retries,
    backoff_s=_settings.room_lock_backoff_seconds,
)
_clock = Clock(_settings.timezone)
_calendar = CalendarSync(_settings.calendar_webhook_url, _settings.calendar_timeout_seconds)


def get_clock() -> Clock:
    return _clock


def get_room_locks() -> RoomLockRegistry:
    return room_locks


def get_calendar() -> CalendarSync:
    return _calendar


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    if not x_user_id:
        raise UnauthorizedException("Not authenticated")
    return x_user_id


def get_reservation_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
    locks: RoomLockRegistry = Depends(get_room_locks),
    calendar: CalendarSync = Depends(get_calendar),
) -> ReservationService:
    return ReservationService(db, clock, settings, locks, calendar)


def get_availability_service(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> AvailabilityService:
    return AvailabilityService(BookingRepository(db), clock, settings)
