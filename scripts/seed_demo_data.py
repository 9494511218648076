"""Seed demo rooms, courses and named time slots, then book a first-fit week.

Run:
  PYTHONPATH=backend python scripts/seed_demo_data.py
"""

from __future__ import annotations

import os

from sqlalchemy import select

from roombook.core.config import get_settings
from roombook.core.security import UserRole, create_access_token
from roombook.db.bootstrap import ensure_runtime_schema
from roombook.db.session import SessionLocal, engine
from roombook.models import Building, Course, Room, RoomDayLock, Section, StudentGroup, Term, TimeSlot
from roombook.services.auto_scheduler import AutoScheduler, SuggestParams
from roombook.services.booking_transaction import BookingDraft, BookingTransaction
from roombook.services.interval_store import IntervalStore
from roombook.services.references import ReferenceDirectory, RoomDirectory
from roombook.services.slot_locks import get_room_day_locks
from roombook.services.time_model import format_time, parse_time

BUILDING_NAME = os.getenv("DEMO_BUILDING", "Engineering Block")
ROOM_NAMES = ["E-101", "E-102", "E-201", "E-Lab"]
COURSES = [
    ("CS101", "Programming Fundamentals"),
    ("CS201", "Data Structures"),
    ("CS220", "Databases"),
    ("CS240", "Operating Systems"),
    ("CS310", "Computer Networks"),
    ("MA101", "Calculus I"),
    ("MA210", "Linear Algebra"),
    ("PH101", "Physics I"),
]
TIME_SLOTS = [
    ("Period 1", "08:00", "09:30"),
    ("Period 2", "09:45", "11:15"),
    ("Period 3", "11:30", "13:00"),
    ("Period 4", "14:00", "15:30"),
    ("Period 5", "15:45", "17:15"),
]


def _get_or_create(session, model, lookup: dict, **values):
    existing = session.execute(select(model).filter_by(**lookup)).scalars().first()
    if existing is not None:
        return existing
    record = model(**lookup, **values)
    session.add(record)
    session.flush()
    return record


def _seed_catalog(session) -> tuple[list[int], dict]:
    building = _get_or_create(session, Building, {"name": BUILDING_NAME})
    term = _get_or_create(session, Term, {"name": "Fall"})
    section = _get_or_create(session, Section, {"name": "A", "term_id": term.id})
    group = _get_or_create(session, StudentGroup, {"name": "A-1", "section_id": section.id})

    for name in ROOM_NAMES:
        room = _get_or_create(session, Room, {"name": name, "building_id": building.id})
        for day in range(7):
            _get_or_create(session, RoomDayLock, {"room_id": room.id, "day_of_week": day})

    course_ids = [
        _get_or_create(session, Course, {"code": code}, name=name, credit_hours=3).id for code, name in COURSES
    ]
    for name, start, end in TIME_SLOTS:
        _get_or_create(session, TimeSlot, {"name": name}, start_minute=parse_time(start), end_minute=parse_time(end))
    session.commit()
    return course_ids, {"term_id": term.id, "section_id": section.id, "group_id": group.id}


def main() -> None:
    settings = get_settings()
    ensure_runtime_schema(engine)

    with SessionLocal() as session:
        course_ids, refs = _seed_catalog(session)

        interval_store = IntervalStore(session)
        suggestion = AutoScheduler(interval_store, RoomDirectory(session)).suggest(
            SuggestParams(
                course_ids=course_ids,
                day_start=0,
                day_end=4,
                work_start="08:00",
                work_end="17:00",
                slot_minutes=settings.default_slot_minutes,
                **refs,
            )
        )
        transaction = BookingTransaction(
            session,
            interval_store,
            ReferenceDirectory(session),
            get_room_day_locks(settings.booking_lock_timeout_seconds),
            actor_id="seed-script",
        )
        outcome = transaction.commit_batch(
            [
                BookingDraft(
                    course_id=item.course_id,
                    room_id=item.room_id,
                    day_of_week=item.day_of_week,
                    start_time=format_time(item.start),
                    end_time=format_time(item.end),
                    **refs,
                )
                for item in suggestion.placements
                if item.ok
            ]
        )

    print(f"Seeded {len(ROOM_NAMES)} rooms, {len(course_ids)} courses, {len(TIME_SLOTS)} time slots.")
    print(f"Bookings: created={outcome.created} failed={outcome.failed}")
    for item in outcome.results:
        if not item.ok:
            print(f"  - course {item.row.course_id}: {item.code} ({item.reason})")
    print("\nScheduler token for local testing:")
    print(f"  {create_access_token('demo-scheduler', UserRole.scheduler)}")


if __name__ == "__main__":
    main()
