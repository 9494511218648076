"""Conflict-checked booking writes.

Every write that places a booking runs the same sequence inside one
exclusivity scope per (room, day): lock, re-read live intervals, check,
write, commit. The second of two racing writers sees the first one's row
and fails with ``RoomSlotConflict``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from roombook.core.exceptions import (
    AppError,
    BookingNotFound,
    InvalidDuration,
    InvalidReference,
    RoomSlotConflict,
    StorageUnavailable,
)
from roombook.models.booking import Booking
from roombook.models.room_day_lock import RoomDayLock
from roombook.services.audit import log_activity
from roombook.services.conflicts import Interval, find_conflict
from roombook.services.interval_store import IntervalStore
from roombook.services.references import ReferenceDirectory
from roombook.services.slot_locks import RoomDayLocks
from roombook.services.time_model import (
    format_time,
    parse_time,
    resolve_interval,
    validate_day,
    validate_duration,
    validate_window,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BookingDraft:
    course_id: int
    room_id: int
    day_of_week: int
    start_time: str
    end_time: str | None = None
    duration_minutes: int | None = None
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None


@dataclass
class BookingChanges:
    """Partial update; ``None`` means keep the current value."""

    room_id: int | None = None
    day_of_week: int | None = None
    start_time: str | None = None
    end_time: str | None = None
    duration_minutes: int | None = None
    term_id: int | None = None
    section_id: int | None = None
    group_id: int | None = None


@dataclass
class RowOutcome:
    ok: bool
    row: BookingDraft
    booking_id: int | None = None
    reason: str | None = None
    code: str | None = None


@dataclass
class BatchOutcome:
    results: list[RowOutcome] = field(default_factory=list)

    @property
    def created(self) -> int:
        return sum(1 for item in self.results if item.ok)

    @property
    def failed(self) -> int:
        return sum(1 for item in self.results if not item.ok)


def booking_snapshot(booking: Booking) -> dict:
    return {
        "courseId": booking.course_id,
        "roomId": booking.room_id,
        "dayOfWeek": booking.day_of_week,
        "startTime": format_time(booking.start_minute),
        "endTime": format_time(booking.end_minute),
        "durationMinutes": booking.duration_minutes,
    }


class BookingTransaction:
    def __init__(
        self,
        db: Session,
        interval_store: IntervalStore,
        references: ReferenceDirectory,
        locks: RoomDayLocks,
        *,
        actor_id: str | None = None,
    ) -> None:
        self.db = db
        self.interval_store = interval_store
        self.references = references
        self.locks = locks
        self.actor_id = actor_id

    def create(self, draft: BookingDraft) -> Booking:
        validate_day(draft.day_of_week)
        start, end, duration = resolve_interval(draft.start_time, draft.end_time, draft.duration_minutes)
        self.references.ensure_exists(
            courseId=draft.course_id,
            termId=draft.term_id,
            sectionId=draft.section_id,
            groupId=draft.group_id,
            roomId=draft.room_id,
        )

        def write() -> Booking:
            booking = Booking(
                course_id=draft.course_id,
                term_id=draft.term_id,
                section_id=draft.section_id,
                group_id=draft.group_id,
                room_id=draft.room_id,
                day_of_week=draft.day_of_week,
                start_minute=start,
                end_minute=end,
                duration_minutes=duration,
            )
            self.db.add(booking)
            self.db.flush()
            log_activity(
                self.db,
                actor_id=self.actor_id,
                action="booking.created",
                entity_type="booking",
                entity_id=booking.id,
                details=booking_snapshot(booking),
            )
            return booking

        booking = self._run_exclusive("create", draft.room_id, draft.day_of_week, Interval(start, end), None, write)
        self.db.refresh(booking)
        logger.info(
            "Booking %s created | room=%s | day=%s | %s-%s",
            booking.id,
            booking.room_id,
            booking.day_of_week,
            format_time(start),
            format_time(end),
        )
        return booking

    def commit_batch(self, drafts: list[BookingDraft]) -> BatchOutcome:
        outcome = BatchOutcome()
        for draft in drafts:
            try:
                booking = self.create(draft)
            except AppError as exc:
                outcome.results.append(RowOutcome(ok=False, row=draft, reason=exc.message, code=exc.code))
                continue
            outcome.results.append(RowOutcome(ok=True, row=draft, booking_id=booking.id))
        logger.info("Batch commit finished | created=%d | failed=%d", outcome.created, outcome.failed)
        return outcome

    def update(self, booking_id: int, changes: BookingChanges) -> Booking:
        booking = self.db.get(Booking, booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)

        room_id = booking.room_id if changes.room_id is None else changes.room_id
        day = booking.day_of_week if changes.day_of_week is None else validate_day(changes.day_of_week)
        start = booking.start_minute if changes.start_time is None else parse_time(changes.start_time)
        if changes.duration_minutes is not None:
            validate_duration(changes.duration_minutes)
        if changes.end_time is not None:
            end = parse_time(changes.end_time)
        elif changes.duration_minutes is not None:
            end = start + changes.duration_minutes
        else:
            end = booking.end_minute
        validate_window(start, end)
        if changes.duration_minutes is not None and changes.duration_minutes != end - start:
            raise InvalidDuration(
                "durationMinutes must equal endTime - startTime",
                details={"durationMinutes": changes.duration_minutes, "computed": end - start},
            )

        self.references.ensure_exists(
            termId=changes.term_id,
            sectionId=changes.section_id,
            groupId=changes.group_id,
            roomId=changes.room_id,
        )
        before = booking_snapshot(booking)

        def write() -> Booking:
            booking.room_id = room_id
            booking.day_of_week = day
            booking.start_minute = start
            booking.end_minute = end
            booking.duration_minutes = end - start
            if changes.term_id is not None:
                booking.term_id = changes.term_id
            if changes.section_id is not None:
                booking.section_id = changes.section_id
            if changes.group_id is not None:
                booking.group_id = changes.group_id
            log_activity(
                self.db,
                actor_id=self.actor_id,
                action="booking.updated",
                entity_type="booking",
                entity_id=booking.id,
                details={"before": before, "after": booking_snapshot(booking)},
            )
            return booking

        booking = self._run_exclusive("update", room_id, day, Interval(start, end), booking_id, write)
        self.db.refresh(booking)
        logger.info(
            "Booking %s moved | room=%s | day=%s | %s-%s",
            booking.id,
            room_id,
            day,
            format_time(start),
            format_time(end),
        )
        return booking

    def delete(self, booking_id: int) -> None:
        booking = self.db.get(Booking, booking_id)
        if booking is None:
            raise BookingNotFound(booking_id)
        snapshot = booking_snapshot(booking)
        try:
            self.db.delete(booking)
            log_activity(
                self.db,
                actor_id=self.actor_id,
                action="booking.deleted",
                entity_type="booking",
                entity_id=booking_id,
                details=snapshot,
            )
            self.db.commit()
        except DBAPIError as exc:
            self.db.rollback()
            logger.exception("Booking delete failed | booking=%s", booking_id)
            raise StorageUnavailable() from exc
        logger.info("Booking %s deleted", booking_id)

    def _run_exclusive(
        self,
        operation: str,
        room_id: int,
        day: int,
        candidate: Interval,
        exclude_booking_id: int | None,
        write: Callable[[], T],
    ) -> T:
        with self.locks.hold(room_id, day):
            try:
                self.references.ensure_room_present(room_id)
                self._lock_room_day(room_id, day)
                intervals = self.interval_store.intervals_for(room_id, day)
                conflict = find_conflict(intervals, candidate, exclude_booking_id)
                if conflict is not None:
                    self.db.rollback()
                    logger.info(
                        "Room slot conflict | op=%s | room=%s | day=%s | requested=%s-%s | booking=%s",
                        operation,
                        room_id,
                        day,
                        format_time(candidate.start),
                        format_time(candidate.end),
                        conflict.booking_id,
                    )
                    raise RoomSlotConflict(
                        details={
                            "bookingId": conflict.booking_id,
                            "roomId": room_id,
                            "dayOfWeek": day,
                            "start": format_time(conflict.start),
                            "end": format_time(conflict.end),
                        }
                    )
                result = write()
                self.db.commit()
                return result
            except StorageUnavailable:
                self.db.rollback()
                raise
            except IntegrityError as exc:
                self.db.rollback()
                logger.warning(
                    "Booking %s rejected by integrity constraint | room=%s | day=%s | %s-%s",
                    operation,
                    room_id,
                    day,
                    candidate.start,
                    candidate.end,
                )
                raise InvalidReference("reference", None) from exc
            except DBAPIError as exc:
                self.db.rollback()
                logger.exception(
                    "Booking %s failed | room=%s | day=%s | %s-%s",
                    operation,
                    room_id,
                    day,
                    candidate.start,
                    candidate.end,
                )
                raise StorageUnavailable() from exc

    def _lock_room_day(self, room_id: int, day: int) -> None:
        stmt = (
            select(RoomDayLock)
            .where(RoomDayLock.room_id == room_id, RoomDayLock.day_of_week == day)
            .with_for_update()
        )
        if self.db.execute(stmt).scalar_one_or_none() is not None:
            return
        self.db.add(RoomDayLock(room_id=room_id, day_of_week=day))
        try:
            self.db.flush()
        except IntegrityError:
            # Another process created the row first; lock the one it committed.
            self.db.rollback()
        self.db.execute(stmt).scalar_one()
