"""
Storage access for the booking engine.

Every query returns plain value objects from app.domain; ORM rows never leave
this module. Range queries use strict half-open overlap
(`start < other_end AND end > other_start`).
"""

import logging
import uuid
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from app import domain, models
from app.clock import from_storage, to_storage

logger = logging.getLogger(__name__)


def _room(row: models.Room, equipment: List[str]) -> domain.Room:
    return domain.Room(
        id=row.id,
        name=row.name,
        capacity=row.capacity,
        active=bool(row.active),
        equipment=tuple(sorted(equipment)),
    )


def _user(row: models.User) -> domain.User:
    return domain.User(id=row.id, name=row.name, email=row.email, role=row.role)


def _blackout(row: models.Blackout) -> domain.Blackout:
    return domain.Blackout(
        id=row.id,
        room_id=row.room_id,
        start_at=from_storage(row.start_at),
        end_at=from_storage(row.end_at),
        reason=row.reason,
    )


def _reservation(row: models.Reservation) -> domain.Reservation:
    return domain.Reservation(
        id=row.id,
        room_id=row.room_id,
        user_id=row.user_id,
        start_at=from_storage(row.start_at),
        end_at=from_storage(row.end_at),
        status=domain.ReservationStatus(row.status),
    )


class BookingRepository:
    def __init__(self, db: Session):
        self.db = db

    # Rooms and users

    def get_room(self, room_id: str) -> Optional[domain.Room]:
        row = self.db.get(models.Room, room_id)
        if row is None:
            return None
        return _room(row, self._equipment_for(room_id))

    def lock_room(self, room_id: str) -> Optional[domain.Room]:
        """Load the room row with a write lock held until the transaction ends."""
        stmt = select(models.Room).where(models.Room.id == room_id).with_for_update()
        row = self.db.execute(stmt).scalar_one_or_none()
        if row is None:
            return None
        return _room(row, self._equipment_for(room_id))

    def list_rooms(self) -> List[domain.Room]:
        rows = self.db.execute(select(models.Room).order_by(models.Room.id)).scalars().all()
        tags: Dict[str, List[str]] = defaultdict(list)
        for item in self.db.execute(select(models.RoomEquipment)).scalars():
            tags[item.room_id].append(item.tag)
        return [_room(row, tags[row.id]) for row in rows]

    def _equipment_for(self, room_id: str) -> List[str]:
        stmt = select(models.RoomEquipment.tag).where(models.RoomEquipment.room_id == room_id)
        return list(self.db.execute(stmt).scalars())

    def get_user(self, user_id: str) -> Optional[domain.User]:
        row = self.db.get(models.User, user_id)
        return _user(row) if row is not None else None

    # Schedule

    def get_opening_hour(self, room_id: str, weekday: int) -> Optional[domain.OpeningHour]:
        stmt = select(models.OpeningHour).where(
            models.OpeningHour.room_id == room_id,
            models.OpeningHour.weekday == weekday,
        )
        row = self.db.execute(stmt).scalar_one_or_none()
        if row is None:
            return None
        return domain.OpeningHour(
            room_id=row.room_id,
            weekday=row.weekday,
            open_time=row.open_time,
            close_time=row.close_time,
        )

    def find_blackouts(
        self, start: datetime, end: datetime, room_id: Optional[str] = None
    ) -> List[domain.Blackout]:
        stmt = select(models.Blackout).where(
            models.Blackout.start_at < to_storage(end),
            models.Blackout.end_at > to_storage(start),
        )
        if room_id is not None:
            stmt = stmt.where(models.Blackout.room_id == room_id)
        stmt = stmt.order_by(models.Blackout.start_at)
        return [_blackout(row) for row in self.db.execute(stmt).scalars()]

    # Reservations

    def find_reservations(
        self,
        start: datetime,
        end: datetime,
        status: Optional[domain.ReservationStatus] = domain.ReservationStatus.CONFIRMED,
        room_id: Optional[str] = None,
    ) -> List[domain.Reservation]:
        stmt = select(models.Reservation).where(
            models.Reservation.start_at < to_storage(end),
            models.Reservation.end_at > to_storage(start),
        )
        if room_id is not None:
            stmt = stmt.where(models.Reservation.room_id == room_id)
        if status is not None:
            stmt = stmt.where(models.Reservation.status == status.value)
        stmt = stmt.order_by(models.Reservation.start_at)
        return [_reservation(row) for row in self.db.execute(stmt).scalars()]

    def find_user_reservations_ending_after(
        self,
        user_id: str,
        after: datetime,
        status: Optional[domain.ReservationStatus] = domain.ReservationStatus.CONFIRMED,
    ) -> List[domain.Reservation]:
        stmt = select(models.Reservation).where(
            models.Reservation.user_id == user_id,
            models.Reservation.end_at > to_storage(after),
        )
        if status is not None:
            stmt = stmt.where(models.Reservation.status == status.value)
        stmt = stmt.order_by(models.Reservation.start_at)
        return [_reservation(row) for row in self.db.execute(stmt).scalars()]

    def list_user_reservations(self, user_id: str) -> List[domain.Reservation]:
        stmt = (
            select(models.Reservation)
            .where(models.Reservation.user_id == user_id)
            .order_by(models.Reservation.start_at)
        )
        return [_reservation(row) for row in self.db.execute(stmt).scalars()]

    def get_reservation(self, reservation_id: str, for_update: bool = False) -> Optional[domain.Reservation]:
        row = self._reservation_row(reservation_id, for_update=for_update)
        return _reservation(row) if row is not None else None

    def add_reservation(
        self, room_id: str, user_id: str, start: datetime, end: datetime
    ) -> domain.Reservation:
        row = models.Reservation(
            id=str(uuid.uuid4()),
            room_id=room_id,
            user_id=user_id,
            start_at=to_storage(start),
            end_at=to_storage(end),
            status=models.CONFIRMED,
            created_at=datetime.utcnow(),
        )
        self.db.add(row)
        self.db.flush()
        return _reservation(row)

    def set_reservation_status(
        self, reservation_id: str, status: domain.ReservationStatus
    ) -> domain.Reservation:
        row = self._reservation_row(reservation_id, for_update=True)
        if row is None:
            raise LookupError(reservation_id)
        row.status = status.value
        self.db.flush()
        return _reservation(row)

    def _reservation_row(self, reservation_id: str, for_update: bool = False) -> Optional[models.Reservation]:
        stmt = select(models.Reservation).where(models.Reservation.id == reservation_id)
        if for_update:
            stmt = stmt.with_for_update()
        return self.db.execute(stmt).scalar_one_or_none()
