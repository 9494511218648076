from __future__ import annotations

from pydantic import Field

from roombook.schemas.common import CamelModel


class SuggestRequest(CamelModel):
    course_ids: list[int] = Field(min_length=1, max_length=500)
    day_start: int
    day_end: int
    work_start: str
    work_end: str
    slot_minutes: int | None = None
    room_ids: list[int] | None = None
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None


class DayRange(CamelModel):
    start: int
    end: int


class WorkWindow(CamelModel):
    start: str
    end: str


class Suggestion(CamelModel):
    course_id: int
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None
    room_id: int | None = None
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration_minutes: int
    ok: bool
    reason: str | None = None


class SuggestResponse(CamelModel):
    days: DayRange
    work_window: WorkWindow
    slot_minutes: int
    rooms: list[int]
    suggestions: list[Suggestion]


class BookingRowIn(CamelModel):
    course_id: int
    room_id: int
    day_of_week: int
    start_time: str
    end_time: str | None = None
    duration_minutes: int | None = None
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None


class CommitRequest(CamelModel):
    rows: list[BookingRowIn] = Field(min_length=1, max_length=500)


class CommitRowResult(CamelModel):
    ok: bool
    booking_id: int | None = None
    reason: str | None = None
    code: str | None = None
    row: BookingRowIn


class CommitResponse(CamelModel):
    results: list[CommitRowResult]
    created: int
    failed: int


class CheckRequest(CamelModel):
    room_id: int
    day_index: int
    start_time: str | None = None
    end_time: str | None = None
    duration_minutes: int | None = None
    time_slot_id: int | None = None
    exclude_booking_id: int | None = None


class ConflictOut(CamelModel):
    booking_id: int | None = None
    day_index: int
    start: str
    end: str


class CheckResponse(CamelModel):
    free: bool
    conflict: ConflictOut | None = None
