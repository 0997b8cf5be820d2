from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Time,
    UniqueConstraint,
)

from app.db import Base

CONFIRMED = "CONFIRMED"
CANCELLED = "CANCELLED"


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, nullable=False)
    role = Column(String, nullable=False, default="USER")
    created_at = Column(DateTime)

    __table_args__ = (
        CheckConstraint("role in ('USER','ADMIN')", name="user_role_valid"),
    )


class Room(Base):
    __tablename__ = "rooms"
    id = Column(String, primary_key=True)
    name = Column(String, nullable=False)
    capacity = Column(Integer, nullable=False)
    active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime)

    __table_args__ = (
        CheckConstraint("capacity >= 1", name="room_capacity_positive"),
    )


class RoomEquipment(Base):
    __tablename__ = "room_equipment"
    room_id = Column(String, ForeignKey("rooms.id"), primary_key=True)
    tag = Column(String, primary_key=True)


class OpeningHour(Base):
    __tablename__ = "opening_hours"
    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False)
    weekday = Column(Integer, nullable=False)  # 0 = Monday
    open_time = Column(Time, nullable=False)
    close_time = Column(Time, nullable=False)

    __table_args__ = (
        UniqueConstraint("room_id", "weekday", name="uniq_room_weekday"),
        CheckConstraint("weekday between 0 and 6", name="opening_weekday_valid"),
        CheckConstraint("close_time > open_time", name="opening_time_valid"),
    )


class Blackout(Base):
    __tablename__ = "blackouts"
    id = Column(Integer, primary_key=True, autoincrement=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    reason = Column(String, nullable=False)

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="blackout_time_valid"),
        Index("ix_blackouts_room_start", "room_id", "start_at"),
    )


class Reservation(Base):
    __tablename__ = "reservations"
    id = Column(String, primary_key=True)
    room_id = Column(String, ForeignKey("rooms.id"), nullable=False)
    user_id = Column(String, ForeignKey("users.id"), nullable=False)
    start_at = Column(DateTime, nullable=False)
    end_at = Column(DateTime, nullable=False)
    status = Column(String, nullable=False, default=CONFIRMED)  # CONFIRMED|CANCELLED
    created_at = Column(DateTime)

    __table_args__ = (
        CheckConstraint("end_at > start_at", name="reservation_time_valid"),
        CheckConstraint("status in ('CONFIRMED','CANCELLED')", name="reservation_status_valid"),
        Index("ix_reservations_room_start", "room_id", "start_at"),
        Index("ix_reservations_user_end", "user_id", "end_at"),
    )
