from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db import get_db
from app.repository import BookingRepository
from app.schemas import RoomOut

router = APIRouter()


@router.get("", response_model=List[RoomOut])
def list_rooms(db: Session = Depends(get_db)):
    return [RoomOut.build(room) for room in BookingRepository(db).list_rooms()]
