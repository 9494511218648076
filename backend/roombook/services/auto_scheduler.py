"""First-fit placement of courses into free room/day gaps.

Suggestions are advisory: nothing is written and no locks are held. A client
persists the ones it wants through the booking transaction, which re-checks
every row against live state.
"""

from __future__ import annotations

import logging
from bisect import insort
from dataclasses import dataclass, field

from roombook.core.exceptions import InvalidTimeRange, NoRoomsAvailable
from roombook.services.conflicts import Interval, first_gap
from roombook.services.interval_store import IntervalStore, RoomDayIntervals
from roombook.services.references import RoomDirectory
from roombook.services.time_model import parse_time, validate_day_range, validate_duration

logger = logging.getLogger(__name__)

NO_SLOT_REASON = "No free slot within working window"


@dataclass
class SuggestParams:
    course_ids: list[int]
    day_start: int
    day_end: int
    work_start: str
    work_end: str
    slot_minutes: int = 90
    room_ids: list[int] | None = None
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None


@dataclass
class Placement:
    course_id: int
    room_id: int | None
    day_of_week: int | None
    start: int | None
    end: int | None
    duration_minutes: int
    ok: bool
    reason: str | None = None


@dataclass
class SuggestResult:
    day_start: int
    day_end: int
    work_start: str
    work_end: str
    slot_minutes: int
    room_ids: list[int]
    placements: list[Placement] = field(default_factory=list)


class TentativeReservations:
    """Per-request map of (room, day) to an insertion-sorted interval list."""

    def __init__(self, initial: RoomDayIntervals) -> None:
        self._slots: dict[tuple[int, int], list[Interval]] = {}
        for room_id, days in initial.items():
            for day, intervals in days.items():
                self._slots[(room_id, day)] = list(intervals)

    def intervals(self, room_id: int, day: int) -> list[Interval]:
        return self._slots.setdefault((room_id, day), [])

    def reserve(self, room_id: int, day: int, interval: Interval) -> None:
        insort(self.intervals(room_id, day), interval, key=lambda itv: itv.start)


class AutoScheduler:
    def __init__(self, interval_store: IntervalStore, rooms: RoomDirectory, *, max_slot_minutes: int = 600) -> None:
        self.interval_store = interval_store
        self.rooms = rooms
        self.max_slot_minutes = max_slot_minutes

    def suggest(self, params: SuggestParams) -> SuggestResult:
        validate_day_range(params.day_start, params.day_end)
        work_start = parse_time(params.work_start)
        work_end = parse_time(params.work_end)
        if work_end <= work_start:
            raise InvalidTimeRange("workEnd must be after workStart")
        slot = validate_duration(params.slot_minutes, "slotMinutes", self.max_slot_minutes)

        room_ids = self.rooms.candidate_room_ids(params.room_ids or None)
        if not room_ids:
            raise NoRoomsAvailable()

        booked = self.interval_store.load(room_ids, params.day_start, params.day_end, window=(work_start, work_end))
        reservations = TentativeReservations(booked)

        result = SuggestResult(
            day_start=params.day_start,
            day_end=params.day_end,
            work_start=params.work_start,
            work_end=params.work_end,
            slot_minutes=slot,
            room_ids=room_ids,
        )
        for course_id in params.course_ids:
            result.placements.append(
                self._place(course_id, reservations, room_ids, params.day_start, params.day_end, work_start, work_end, slot)
            )

        placed = sum(1 for item in result.placements if item.ok)
        logger.info(
            "Suggested %d/%d placements | rooms=%s | days=%s..%s | window=%s-%s | slot=%d",
            placed,
            len(result.placements),
            room_ids,
            params.day_start,
            params.day_end,
            params.work_start,
            params.work_end,
            slot,
        )
        return result

    @staticmethod
    def _place(
        course_id: int,
        reservations: TentativeReservations,
        room_ids: list[int],
        day_start: int,
        day_end: int,
        work_start: int,
        work_end: int,
        slot: int,
    ) -> Placement:
        for day in range(day_start, day_end + 1):
            for room_id in room_ids:
                gap = first_gap(reservations.intervals(room_id, day), work_start, work_end, slot)
                if gap is None:
                    continue
                reservations.reserve(room_id, day, gap)
                return Placement(
                    course_id=course_id,
                    room_id=room_id,
                    day_of_week=day,
                    start=gap.start,
                    end=gap.end,
                    duration_minutes=slot,
                    ok=True,
                )
        return Placement(
            course_id=course_id,
            room_id=None,
            day_of_week=None,
            start=None,
            end=None,
            duration_minutes=slot,
            ok=False,
            reason=NO_SLOT_REASON,
        )
