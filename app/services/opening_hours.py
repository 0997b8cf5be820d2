import calendar
from datetime import date

from app.clock import Clock
from app.domain import OpeningWindow
from app.exceptions import RoomClosedError
from app.repository import BookingRepository


class OpeningHoursResolver:
    """Turns a room's weekday schedule into absolute open/close instants for a date."""

    def __init__(self, repository: BookingRepository, clock: Clock):
        self.repository = repository
        self.clock = clock

    def resolve(self, room_id: str, day: date) -> OpeningWindow:
        hours = self.repository.get_opening_hour(room_id, day.weekday())
        if hours is None:
            raise RoomClosedError(room_id, calendar.day_name[day.weekday()])
        return OpeningWindow(
            open_at=self.clock.at(day, hours.open_time),
            close_at=self.clock.at(day, hours.close_time),
        )
