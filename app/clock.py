"""
Time source for the booking engine.

All instants handled by services are timezone-aware. The database stores
naive UTC values, so conversions in and out of storage go through
`to_storage` / `from_storage`.
"""

from datetime import date, datetime, time

import pytz


def to_storage(value: datetime) -> datetime:
    """Aware instant -> naive UTC for persistence."""
    return value.astimezone(pytz.utc).replace(tzinfo=None)


def from_storage(value: datetime) -> datetime:
    """Naive UTC from the database -> aware UTC instant."""
    if value.tzinfo is None:
        return pytz.utc.localize(value)
    return value.astimezone(pytz.utc)


class Clock:
    def __init__(self, zone_name: str = "America/Santiago"):
        self.zone = pytz.timezone(zone_name)

    def now(self) -> datetime:
        return datetime.now(pytz.utc)

    def at(self, day: date, time_of_day: time) -> datetime:
        """Absolute instant for a wall-clock time on a calendar date in the canonical zone."""
        return self.zone.localize(datetime.combine(day, time_of_day))

    def to_local(self, value: datetime) -> datetime:
        return self.zone.normalize(self.ensure_aware(value).astimezone(self.zone))

    def ensure_aware(self, value: datetime) -> datetime:
        """Naive datetimes are read as wall-clock time in the canonical zone."""
        if value.tzinfo is None:
            return self.zone.localize(value)
        return value


class FixedClock(Clock):
    """Clock pinned to a single instant; used by tests and scripted runs."""

    def __init__(self, instant: datetime, zone_name: str = "America/Santiago"):
        super().__init__(zone_name)
        self._instant = self.ensure_aware(instant)

    def now(self) -> datetime:
        return self._instant.astimezone(pytz.utc)
