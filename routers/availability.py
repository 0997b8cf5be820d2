from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from app.clock import Clock
from app.dependencies import get_availability_service, get_clock
from app.schemas import (
    AvailabilityGridOut,
    RoomAvailabilityOut,
    RoomOut,
    SlotOut,
    SlotStatusOut,
    TimeRangeOut,
)
from app.services import AvailabilityService

router = APIRouter()


@router.get("", response_model=AvailabilityGridOut)
def availability_grid(
    date: date,
    slot_minutes: Optional[int] = Query(default=None),
    day_start_hour: Optional[int] = Query(default=None),
    day_end_hour: Optional[int] = Query(default=None),
    service: AvailabilityService = Depends(get_availability_service),
):
    """
    Room x slot matrix for one day:
      - available = true when no CONFIRMED reservation or blackout overlaps the slot
      - slots touching a reservation boundary stay available
    """
    grid = service.build_grid(date, slot_minutes, day_start_hour, day_end_hour)
    return AvailabilityGridOut(
        date=grid.date,
        rooms=[RoomOut.build(room) for room in grid.rooms],
        slots=[SlotOut(slot_id=slot.id, label=slot.label) for slot in grid.slots],
        matrix=[SlotStatusOut(room_id=s.room_id, slot_id=s.slot_id, available=s.available) for s in grid.matrix],
    )


@router.get("/slots", response_model=List[SlotOut])
def list_slots(
    date: Optional[date] = Query(default=None),
    slot_minutes: Optional[int] = Query(default=None),
    day_start_hour: Optional[int] = Query(default=None),
    day_end_hour: Optional[int] = Query(default=None),
    service: AvailabilityService = Depends(get_availability_service),
    clock: Clock = Depends(get_clock),
):
    # defaults to today in the canonical zone
    day = date or clock.to_local(clock.now()).date()
    slots = service.day_slots(day, slot_minutes, day_start_hour, day_end_hour)
    return [SlotOut(slot_id=slot.id, label=slot.label) for slot in slots]


@router.get("/rooms/{room_id}", response_model=RoomAvailabilityOut)
def room_availability(
    room_id: str,
    date: date,
    slot_minutes: int = Query(default=60),
    service: AvailabilityService = Depends(get_availability_service),
    clock: Clock = Depends(get_clock),
):
    result = service.daily_free_busy(room_id, date, slot_minutes)
    return RoomAvailabilityOut(
        room_id=result.room_id,
        date=result.date,
        open=result.open_time.strftime("%H:%M"),
        close=result.close_time.strftime("%H:%M"),
        slot_minutes=result.slot_minutes,
        booked=[TimeRangeOut.build(i, clock) for i in result.booked],
        free=[TimeRangeOut.build(i, clock) for i in result.free],
    )
