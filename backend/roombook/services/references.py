from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from roombook.core.exceptions import InvalidReference
from roombook.models.reference import Course, Section, StudentGroup, Term
from roombook.models.room import Room
from roombook.models.time_slot import TimeSlot

REFERENCE_MODELS = {
    "courseId": Course,
    "termId": Term,
    "sectionId": Section,
    "groupId": StudentGroup,
    "roomId": Room,
}


class ReferenceDirectory:
    """Existence checks for the foreign keys a booking carries."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def ensure_exists(self, **references: int | None) -> None:
        # Checked in a fixed order so the reported field is deterministic.
        for field, model in REFERENCE_MODELS.items():
            value = references.get(field)
            if value is None:
                continue
            if self.db.get(model, value) is None:
                raise InvalidReference(field, value)

    def ensure_room_present(self, room_id: int) -> None:
        # Queried rather than db.get so a room deleted since the first check is seen.
        if self.db.execute(select(Room.id).where(Room.id == room_id)).first() is None:
            raise InvalidReference("roomId", room_id)

    def time_slot(self, time_slot_id: int) -> TimeSlot:
        slot = self.db.get(TimeSlot, time_slot_id)
        if slot is None:
            raise InvalidReference("timeSlotId", time_slot_id)
        return slot


class RoomDirectory:
    def __init__(self, db: Session) -> None:
        self.db = db

    def candidate_room_ids(self, room_ids: Iterable[int] | None = None) -> list[int]:
        """Known room ids in ascending order, optionally restricted to ``room_ids``."""
        stmt = select(Room.id).order_by(Room.id.asc())
        if room_ids is not None:
            wanted = set(room_ids)
            if not wanted:
                return []
            stmt = stmt.where(Room.id.in_(wanted))
        return list(self.db.execute(stmt).scalars())
