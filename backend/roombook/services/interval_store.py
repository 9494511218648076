from __future__ import annotations

import logging
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import Session

from roombook.core.exceptions import StorageUnavailable
from roombook.models.booking import Booking
from roombook.services.conflicts import Interval, clamp

logger = logging.getLogger(__name__)

RoomDayIntervals = dict[int, dict[int, list[Interval]]]


def _by_start(interval: Interval) -> int:
    return interval.start


class IntervalStore:
    """Read-only view of committed bookings as sorted per-room/per-day intervals."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def load(
        self,
        room_ids: Iterable[int],
        day_start: int,
        day_end: int,
        window: tuple[int, int] | None = None,
    ) -> RoomDayIntervals:
        room_ids = list(room_ids)
        result: RoomDayIntervals = {
            room_id: {day: [] for day in range(day_start, day_end + 1)} for room_id in room_ids
        }
        if not room_ids:
            return result

        stmt = (
            select(Booking.id, Booking.room_id, Booking.day_of_week, Booking.start_minute, Booking.end_minute)
            .where(
                Booking.room_id.in_(room_ids),
                Booking.day_of_week.between(day_start, day_end),
            )
            .order_by(Booking.room_id, Booking.day_of_week, Booking.start_minute)
        )
        try:
            rows = self.db.execute(stmt).all()
        except DBAPIError as exc:
            logger.exception(
                "Interval load failed | rooms=%s | days=%s..%s",
                room_ids,
                day_start,
                day_end,
            )
            raise StorageUnavailable() from exc

        for booking_id, room_id, day, start, end in rows:
            interval = Interval(start, end, booking_id)
            if window is not None:
                interval = clamp(interval, window[0], window[1])
                if interval is None:
                    continue
            result[room_id][day].append(interval)

        for days in result.values():
            for intervals in days.values():
                intervals.sort(key=_by_start)
        return result

    def intervals_for(self, room_id: int, day: int) -> list[Interval]:
        return self.load([room_id], day, day)[room_id][day]
