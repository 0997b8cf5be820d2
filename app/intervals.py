"""
Half-open interval helpers.

An interval [start, end) contains start and excludes end, so two intervals
that merely touch (one's end equals the other's start) do not overlap.
"""

from datetime import datetime, timedelta
from typing import Iterable, List, NamedTuple, Optional


class Interval(NamedTuple):
    start: datetime
    end: datetime

    def overlaps(self, other: "Interval") -> bool:
        return overlaps(self.start, self.end, other.start, other.end)


def overlaps(a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime) -> bool:
    return a_start < b_end and b_start < a_end


def merge(intervals: Iterable[Interval]) -> List[Interval]:
    """Coalesce intervals sorted by start; touching intervals are joined."""
    merged: List[Interval] = []
    for current in intervals:
        if merged and current.start <= merged[-1].end:
            last = merged[-1]
            merged[-1] = Interval(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def clip(interval: Interval, lo: datetime, hi: datetime) -> Optional[Interval]:
    start = max(interval.start, lo)
    end = min(interval.end, hi)
    if start >= end:
        return None
    return Interval(start, end)


def gaps(lo: datetime, hi: datetime, merged: Iterable[Interval]) -> List[Interval]:
    """Complement of already merged intervals within [lo, hi)."""
    free: List[Interval] = []
    cursor = lo
    for busy in merged:
        if cursor < busy.start:
            free.append(Interval(cursor, min(busy.start, hi)))
        cursor = max(cursor, busy.end)
        if cursor >= hi:
            break
    if cursor < hi:
        free.append(Interval(cursor, hi))
    return free


def chop(start: datetime, end: datetime, minutes: int) -> List[Interval]:
    """Split [start, end) into fixed-width chunks, dropping a trailing partial chunk."""
    if minutes <= 0:
        raise ValueError("chunk width must be positive")
    step = timedelta(minutes=minutes)
    chunks: List[Interval] = []
    cursor = start
    while cursor + step <= end:
        chunks.append(Interval(cursor, cursor + step))
        cursor += step
    return chunks
