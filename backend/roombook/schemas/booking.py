from __future__ import annotations

from datetime import datetime

from pydantic import ConfigDict, Field

from roombook.schemas.common import CamelModel
from roombook.schemas.scheduler import BookingRowIn


class BookingCreate(BookingRowIn):
    pass


class BookingUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    room_id: int | None = None
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration_minutes: int | None = None
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None


class BookingRef(CamelModel):
    booking_id: int


class BookingOut(CamelModel):
    id: int
    course_id: int
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None
    room_id: int
    day_of_week: int
    start_time: str
    end_time: str
    duration_minutes: int
    created_at: datetime | None = None


class BookingListOut(CamelModel):
    items: list[BookingOut]
    total: int
    page: int
    page_size: int = Field(ge=1)
    pages: int
