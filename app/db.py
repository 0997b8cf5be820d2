import logging
from datetime import datetime, time

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import get_settings

logger = logging.getLogger(__name__)

SQLALCHEMY_DATABASE_URL = get_settings().database_url


def make_engine(url: str):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine = make_engine(SQLALCHEMY_DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    # Import models here to create tables
    from app.models import OpeningHour, Room, RoomEquipment, User

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    # Seed minimal data if empty
    from sqlalchemy.orm import Session

    db: Session = sessionmaker(bind=bind, autoflush=False)()
    try:
        now = datetime.utcnow()
        if not db.query(User).first():
            db.add_all(
                [
                    User(id="u-demo", name="Demo User", email="demo@example.com", role="USER", created_at=now),
                    User(id="u-admin", name="Admin", email="admin@example.com", role="ADMIN", created_at=now),
                ]
            )
        if not db.query(Room).first():
            room = Room(id="r-101", name="Sala Andes", capacity=8, active=True, created_at=now)
            db.add(room)
            db.flush()
            db.add_all(
                [
                    RoomEquipment(room_id=room.id, tag="projector"),
                    RoomEquipment(room_id=room.id, tag="whiteboard"),
                ]
            )
            # Monday to Friday, 09:00-18:00
            db.add_all(
                [
                    OpeningHour(room_id=room.id, weekday=day, open_time=time(9, 0), close_time=time(18, 0))
                    for day in range(5)
                ]
            )
        db.commit()
        logger.info("Database initialised")
    finally:
        db.close()
