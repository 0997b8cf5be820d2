"""
Reservation lifecycle: create under the room lock, cancel, and lookups.

A create call moves through
    LOCK_ACQUIRED -> VALIDATED -> PERSISTED -> LOCK_RELEASED
or
    LOCK_ACQUIRED -> REJECTED -> LOCK_RELEASED
and the transaction is rolled back on every path that does not commit.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from app.clock import Clock
from app.config import Settings
from app.domain import Reservation, ReservationStatus, UserReservations
from app.exceptions import BookingRejected, ForbiddenException, NotFoundException
from app.repository import BookingRepository
from app.services.calendar_sync import CalendarSync
from app.services.room_lock import RoomLockRegistry
from app.services.validator import BookingValidator

logger = logging.getLogger(__name__)


class ReservationService:
    def __init__(
        self,
        db: Session,
        clock: Clock,
        settings: Settings,
        room_locks: RoomLockRegistry,
        calendar: Optional[CalendarSync] = None,
    ):
        self.db = db
        self.clock = clock
        self.settings = settings
        self.room_locks = room_locks
        self.calendar = calendar or CalendarSync()
        self.repository = BookingRepository(db)
        self.validator = BookingValidator(self.repository, clock, settings)

    def create(self, user_id: str, room_id: str, start: datetime, end: datetime) -> Reservation:
        start = self.clock.ensure_aware(start)
        end = self.clock.ensure_aware(end)

        # unknown rooms never reach the lock registry
        if self.repository.get_room(room_id) is None:
            self.db.rollback()
            raise NotFoundException("Room not found", details={"room_id": room_id})

        with self.room_locks.hold(room_id):
            try:
                user = self.repository.get_user(user_id)
                if user is None:
                    raise NotFoundException("User not found", details={"user_id": user_id})
                room = self.repository.lock_room(room_id)
                if room is None:
                    raise NotFoundException("Room not found", details={"room_id": room_id})

                self.validator.validate(user, room, start, end)
                reservation = self.repository.add_reservation(room.id, user.id, start, end)
                self.db.commit()
            except BookingRejected as exc:
                self.db.rollback()
                logger.info(
                    "Reservation rejected for user %s on room %s: %s", user_id, room_id, exc.reason.value
                )
                raise
            except Exception:
                self.db.rollback()
                raise

        logger.info("Reservation %s confirmed for user %s on room %s", reservation.id, user_id, room_id)
        self.calendar.reservation_created(reservation, user)
        return reservation

    def cancel(self, reservation_id: str, user_id: str, is_admin: bool = False) -> Reservation:
        """
        Move a reservation to CANCELLED.

        Only the owner or an admin may cancel. A caller whose stored role is
        ADMIN counts as admin even when `is_admin` is not passed. Cancelling an
        already cancelled reservation succeeds and returns it unchanged.
        """
        try:
            if not is_admin:
                actor = self.repository.get_user(user_id)
                is_admin = actor is not None and actor.role == "ADMIN"
            reservation = self.repository.get_reservation(reservation_id, for_update=True)
            if reservation is None:
                raise NotFoundException("Reservation not found", details={"reservation_id": reservation_id})
            if not is_admin and reservation.user_id != user_id:
                raise ForbiddenException(
                    "You cannot cancel another user's reservation",
                    details={"reservation_id": reservation_id},
                )
            if reservation.status == ReservationStatus.CANCELLED:
                self.db.rollback()
                return reservation

            cancelled = self.repository.set_reservation_status(reservation_id, ReservationStatus.CANCELLED)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        logger.info("Reservation %s cancelled by %s (admin=%s)", reservation_id, user_id, is_admin)
        owner = self.repository.get_user(cancelled.user_id)
        if owner is not None:
            self.calendar.reservation_cancelled(cancelled, owner)
        return cancelled

    def get(self, reservation_id: str) -> Reservation:
        reservation = self.repository.get_reservation(reservation_id)
        if reservation is None:
            raise NotFoundException("Reservation not found", details={"reservation_id": reservation_id})
        return reservation

    def for_user(self, user_id: str) -> UserReservations:
        """The user's reservations split into current, upcoming and past."""
        if self.repository.get_user(user_id) is None:
            raise NotFoundException("User not found", details={"user_id": user_id})
        now = self.clock.now()
        current, upcoming, past = [], [], []
        for reservation in self.repository.list_user_reservations(user_id):
            if reservation.end_at <= now:
                past.append(reservation)
            elif reservation.start_at <= now:
                current.append(reservation)
            else:
                upcoming.append(reservation)
        past.reverse()
        return UserReservations(current=current, upcoming=upcoming, past=past)
