from fastapi import APIRouter, Depends

from app.clock import Clock
from app.dependencies import get_clock, get_current_user_id, get_reservation_service
from app.schemas import CancelOut, CreateReservationBody, MyReservationsOut, ReservationOut
from app.services import ReservationService

router = APIRouter()


@router.post("", status_code=201, response_model=ReservationOut)
def create_reservation(
    body: CreateReservationBody,
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service),
    clock: Clock = Depends(get_clock),
):
    """
    Book a room for [start_at, end_at).

    Rejections come back as 400 (bad range, duration or alignment) or
    409 (inactive room, outside opening hours, blackout, overlap, quota),
    with the rejection reason in `code`.
    """
    reservation = service.create(user_id, body.room_id, body.start_at, body.end_at)
    return ReservationOut.build(reservation, clock)


@router.get("/mine", response_model=MyReservationsOut)
def my_reservations(
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service),
    clock: Clock = Depends(get_clock),
):
    grouped = service.for_user(user_id)
    return MyReservationsOut(
        current=[ReservationOut.build(r, clock) for r in grouped.current],
        upcoming=[ReservationOut.build(r, clock) for r in grouped.upcoming],
        past=[ReservationOut.build(r, clock) for r in grouped.past],
    )


@router.get("/{reservation_id}", response_model=ReservationOut)
def get_reservation(
    reservation_id: str,
    service: ReservationService = Depends(get_reservation_service),
    clock: Clock = Depends(get_clock),
):
    return ReservationOut.build(service.get(reservation_id), clock)


@router.post("/{reservation_id}/cancel", response_model=CancelOut)
def cancel_reservation(
    reservation_id: str,
    user_id: str = Depends(get_current_user_id),
    service: ReservationService = Depends(get_reservation_service),
):
    """
    Owner or admin only; cancelling twice is a no-op.

    Admin rights come from the caller's stored role, never from a request header.
    """
    reservation = service.cancel(reservation_id, user_id)
    return {"reservation_id": reservation.id, "status": reservation.status.value}
