from __future__ import annotations

from dataclasses import dataclass

from roombook.core.exceptions import InvalidTimeRange
from roombook.services.conflicts import Interval, find_conflict
from roombook.services.interval_store import IntervalStore
from roombook.services.references import ReferenceDirectory
from roombook.services.time_model import parse_time, validate_day, validate_duration, validate_window


@dataclass
class AvailabilityQuery:
    room_id: int
    day_of_week: int
    start_time: str | None = None
    end_time: str | None = None
    duration_minutes: int | None = None
    time_slot_id: int | None = None
    exclude_booking_id: int | None = None


@dataclass
class AvailabilityResult:
    free: bool
    start: int
    end: int
    conflict: Interval | None = None


class AvailabilityService:
    """Read-only room/day/interval check; the answer may be stale once returned."""

    def __init__(self, interval_store: IntervalStore, references: ReferenceDirectory, *, default_slot_minutes: int = 90) -> None:
        self.interval_store = interval_store
        self.references = references
        self.default_slot_minutes = default_slot_minutes

    def resolve(self, query: AvailabilityQuery) -> tuple[int, int]:
        if query.time_slot_id is not None:
            slot = self.references.time_slot(query.time_slot_id)
            return slot.start_minute, slot.end_minute
        if query.start_time is None:
            raise InvalidTimeRange("Provide startTime or timeSlotId")
        start = parse_time(query.start_time)
        if query.end_time is not None:
            end = parse_time(query.end_time)
        else:
            duration = self.default_slot_minutes if query.duration_minutes is None else query.duration_minutes
            end = start + validate_duration(duration)
        return validate_window(start, end)

    def check(self, query: AvailabilityQuery) -> AvailabilityResult:
        validate_day(query.day_of_week, "dayIndex")
        start, end = self.resolve(query)
        self.references.ensure_exists(roomId=query.room_id)
        intervals = self.interval_store.intervals_for(query.room_id, query.day_of_week)
        conflict = find_conflict(intervals, Interval(start, end), query.exclude_booking_id)
        return AvailabilityResult(free=conflict is None, start=start, end=end, conflict=conflict)
