"""Plain value objects handed out by the repository."""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import List, Tuple

from app.intervals import Interval


class ReservationStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    CANCELLED = "CANCELLED"


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    role: str = "USER"


@dataclass(frozen=True)
class Room:
    id: str
    name: str
    capacity: int
    active: bool = True
    equipment: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OpeningHour:
    room_id: str
    weekday: int
    open_time: time
    close_time: time


@dataclass(frozen=True)
class OpeningWindow:
    open_at: datetime
    close_at: datetime

    def contains(self, start: datetime, end: datetime) -> bool:
        return start >= self.open_at and end <= self.close_at


@dataclass(frozen=True)
class Blackout:
    id: int
    room_id: str
    start_at: datetime
    end_at: datetime
    reason: str

    @property
    def interval(self) -> Interval:
        return Interval(self.start_at, self.end_at)


@dataclass(frozen=True)
class Reservation:
    id: str
    room_id: str
    user_id: str
    start_at: datetime
    end_at: datetime
    status: ReservationStatus

    @property
    def interval(self) -> Interval:
        return Interval(self.start_at, self.end_at)


@dataclass(frozen=True)
class TimeSlot:
    id: str
    label: str
    start_at: datetime
    end_at: datetime


@dataclass(frozen=True)
class SlotStatus:
    room_id: str
    slot_id: str
    available: bool


@dataclass(frozen=True)
class AvailabilityGrid:
    date: date
    rooms: List[Room]
    slots: List[TimeSlot]
    matrix: List[SlotStatus]


@dataclass(frozen=True)
class RoomAvailability:
    room_id: str
    date: date
    open_time: time
    close_time: time
    slot_minutes: int
    booked: List[Interval] = field(default_factory=list)
    free: List[Interval] = field(default_factory=list)


@dataclass(frozen=True)
class UserReservations:
    current: List[Reservation]
    upcoming: List[Reservation]
    past: List[Reservation]
