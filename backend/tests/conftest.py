import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")
os.environ.setdefault("LOG_TO_FILE", "false")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from roombook.api.deps import get_db
from roombook.core.security import UserRole, create_access_token
from roombook.db.base import Base
from roombook.main import app
from roombook.models import Booking, Building, Course, Room, RoomDayLock, Section, StudentGroup, Term
from roombook.services.slot_locks import get_room_day_locks


@pytest.fixture()
def session_factory():
    engine = create_engine(  # isolated in-memory DB shared by every session of the test
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture()
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(session_factory):
    get_room_day_locks().clear()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def auth_headers(role: UserRole, subject: str = "user-1") -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(subject, role)}"}


@pytest.fixture()
def admin_headers():
    return auth_headers(UserRole.admin, "admin-1")


@pytest.fixture()
def student_headers():
    return auth_headers(UserRole.student, "student-1")


def seed_catalog(db, *, rooms: int = 2, courses: int = 4) -> dict:
    """Insert a building, rooms (with their lock rows) and reference rows."""
    building = Building(name="Main Building")
    term = Term(name="Fall")
    db.add_all([building, term])
    db.flush()
    section = Section(name="A", term_id=term.id)
    db.add(section)
    db.flush()
    group = StudentGroup(name="G1", section_id=section.id)
    db.add(group)

    room_rows = [Room(name=f"R{index + 1}", building_id=building.id) for index in range(rooms)]
    course_rows = [Course(code=f"CS{100 + index}", name=f"Course {index + 1}") for index in range(courses)]
    db.add_all(room_rows + course_rows)
    db.flush()
    db.add_all(RoomDayLock(room_id=room.id, day_of_week=day) for room in room_rows for day in range(7))
    db.commit()
    return {
        "building_id": building.id,
        "term_id": term.id,
        "section_id": section.id,
        "group_id": group.id,
        "room_ids": [room.id for room in room_rows],
        "course_ids": [course.id for course in course_rows],
    }


@pytest.fixture()
def catalog(db_session):
    return seed_catalog(db_session)


@pytest.fixture()
def make_booking(db_session, catalog):
    """Insert a committed booking directly, bypassing the conflict check."""

    def _make(room_id: int, day: int, start: int, end: int, course_id: int | None = None) -> Booking:
        booking = Booking(
            course_id=course_id or catalog["course_ids"][0],
            room_id=room_id,
            day_of_week=day,
            start_minute=start,
            end_minute=end,
            duration_minutes=end - start,
        )
        db_session.add(booking)
        db_session.commit()
        return booking

    return _make
