from datetime import date, datetime
from typing import List

from pydantic import BaseModel

from app.clock import Clock
from app import domain
from app.intervals import Interval


class CreateReservationBody(BaseModel):
    room_id: str
    start_at: datetime
    end_at: datetime


class ReservationOut(BaseModel):
    reservation_id: str
    room_id: str
    user_id: str
    start_at: datetime
    end_at: datetime
    status: str

    @classmethod
    def build(cls, reservation: domain.Reservation, clock: Clock) -> "ReservationOut":
        return cls(
            reservation_id=reservation.id,
            room_id=reservation.room_id,
            user_id=reservation.user_id,
            start_at=clock.to_local(reservation.start_at),
            end_at=clock.to_local(reservation.end_at),
            status=reservation.status.value,
        )


class CancelOut(BaseModel):
    reservation_id: str
    status: str


class MyReservationsOut(BaseModel):
    current: List[ReservationOut]
    upcoming: List[ReservationOut]
    past: List[ReservationOut]


class RoomOut(BaseModel):
    room_id: str
    name: str
    capacity: int
    equipment: List[str]
    active: bool

    @classmethod
    def build(cls, room: domain.Room) -> "RoomOut":
        return cls(
            room_id=room.id,
            name=room.name,
            capacity=room.capacity,
            equipment=list(room.equipment),
            active=room.active,
        )


class SlotOut(BaseModel):
    slot_id: str
    label: str


class SlotStatusOut(BaseModel):
    room_id: str
    slot_id: str
    available: bool


class AvailabilityGridOut(BaseModel):
    date: date
    rooms: List[RoomOut]
    slots: List[SlotOut]
    matrix: List[SlotStatusOut]


class TimeRangeOut(BaseModel):
    start: str
    end: str

    @classmethod
    def build(cls, interval: Interval, clock: Clock) -> "TimeRangeOut":
        return cls(
            start=clock.to_local(interval.start).strftime("%H:%M"),
            end=clock.to_local(interval.end).strftime("%H:%M"),
        )


class RoomAvailabilityOut(BaseModel):
    room_id: str
    date: date
    open: str
    close: str
    slot_minutes: int
    booked: List[TimeRangeOut]
    free: List[TimeRangeOut]
