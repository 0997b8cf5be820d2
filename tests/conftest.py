# tests/conftest.py
import os

os.environ["SKIP_DB_INIT"] = "1"

import tempfile
from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.clock import FixedClock, to_storage
from app.config import Settings, get_settings
from app.db import get_db
from app.dependencies import get_calendar, get_clock, get_room_locks
from app.models import Base, Blackout, OpeningHour, Reservation, Room, RoomEquipment, User
from app.main import app
from app.repository import BookingRepository
from app.services import AvailabilityService, CalendarSync, ReservationService, RoomLockRegistry

ZONE = "America/Santiago"
# Sunday noon, local time; MONDAY is the next day
NOW = datetime(2030, 1, 6, 12, 0)
MONDAY = date(2030, 1, 7)
TUESDAY = date(2030, 1, 8)
SATURDAY = date(2030, 1, 12)


@pytest.fixture(scope="function")
def engine():
    # temp DB
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    engine = create_engine(f"sqlite:///{tmp.name}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()
    os.unlink(tmp.name)


@pytest.fixture(scope="function")
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def test_db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def settings():
    return Settings(_env_file=None, timezone=ZONE)


@pytest.fixture
def clock():
    return FixedClock(NOW, ZONE)


@pytest.fixture
def room_locks():
    return RoomLockRegistry(timeout_s=2.0, retries=2, backoff_s=0.01)


@pytest.fixture
def calendar():
    return CalendarSync()


@pytest.fixture
def at(clock):
    """at(day, "10:30") -> aware instant in the canonical zone."""
    def _at(day, hhmm):
        hour, minute = (int(part) for part in hhmm.split(":"))
        return clock.at(day, time(hour, minute))
    return _at


@pytest.fixture
def service(test_db_session, clock, settings, room_locks, calendar):
    return ReservationService(test_db_session, clock, settings, room_locks, calendar)


@pytest.fixture
def availability(test_db_session, clock, settings):
    return AvailabilityService(BookingRepository(test_db_session), clock, settings)


@pytest.fixture(scope="function")
def client(test_db_session, clock, settings, room_locks, calendar):
    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_clock] = lambda: clock
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_room_locks] = lambda: room_locks
    app.dependency_overrides[get_calendar] = lambda: calendar

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# —— Factories ——
@pytest.fixture
def make_user(test_db_session):
    def _make_user(user_id="u-1", name="User1", email=None, role="USER"):
        u = User(id=user_id, name=name, email=email or f"{user_id}@example.com", role=role)
        test_db_session.add(u)
        test_db_session.commit()
        return u
    return _make_user


@pytest.fixture
def make_room(test_db_session):
    def _make_room(room_id="r-1", name="Room 1", capacity=6, active=True,
                   hours=None, equipment=()):
        r = Room(id=room_id, name=name, capacity=capacity, active=active)
        test_db_session.add(r)
        test_db_session.flush()
        # default: Monday to Friday 09:00-18:00
        if hours is None:
            hours = {day: (time(9, 0), time(18, 0)) for day in range(5)}
        for weekday, (open_time, close_time) in hours.items():
            test_db_session.add(
                OpeningHour(room_id=r.id, weekday=weekday, open_time=open_time, close_time=close_time)
            )
        for tag in equipment:
            test_db_session.add(RoomEquipment(room_id=r.id, tag=tag))
        test_db_session.commit()
        return r
    return _make_room


@pytest.fixture
def make_blackout(test_db_session):
    def _make_blackout(room_id, start, end, reason="maintenance"):
        b = Blackout(room_id=room_id, start_at=to_storage(start), end_at=to_storage(end), reason=reason)
        test_db_session.add(b)
        test_db_session.commit()
        return b
    return _make_blackout


@pytest.fixture
def make_reservation(test_db_session):
    """Insert a reservation row directly, bypassing validation."""
    counter = {"n": 0}

    def _make_reservation(room_id, user_id, start, end, status="CONFIRMED"):
        counter["n"] += 1
        r = Reservation(
            id=f"res-{counter['n']}",
            room_id=room_id,
            user_id=user_id,
            start_at=to_storage(start),
            end_at=to_storage(end),
            status=status,
        )
        test_db_session.add(r)
        test_db_session.commit()
        return r
    return _make_reservation
