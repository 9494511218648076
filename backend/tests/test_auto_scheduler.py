import pytest
from sqlalchemy import func, select

from roombook.core.exceptions import InvalidDayRange, InvalidDuration, InvalidTimeRange, NoRoomsAvailable
from roombook.models.booking import Booking
from roombook.services.auto_scheduler import NO_SLOT_REASON, AutoScheduler, SuggestParams
from roombook.services.interval_store import IntervalStore
from roombook.services.references import RoomDirectory


def build_scheduler(db):
    return AutoScheduler(IntervalStore(db), RoomDirectory(db))


def params(course_ids, **overrides):
    values = {
        "course_ids": course_ids,
        "day_start": 0,
        "day_end": 0,
        "work_start": "08:00",
        "work_end": "10:00",
        "slot_minutes": 90,
    }
    values.update(overrides)
    return SuggestParams(**values)


def test_second_course_fails_when_only_short_tail_remains(db_session, catalog):
    room_id = catalog["room_ids"][0]
    course_1, course_2 = catalog["course_ids"][:2]

    result = build_scheduler(db_session).suggest(params([course_1, course_2], room_ids=[room_id]))

    first, second = result.placements
    assert first.ok is True
    assert (first.room_id, first.day_of_week, first.start, first.end) == (room_id, 0, 480, 570)
    assert second.ok is False
    assert second.reason == NO_SLOT_REASON
    assert second.room_id is None and second.start is None
    assert result.room_ids == [room_id]


def test_rooms_fill_in_ascending_order_before_next_day(db_session, catalog):
    room_a, room_b = catalog["room_ids"]
    courses = catalog["course_ids"][:3]

    result = build_scheduler(db_session).suggest(params(courses, day_end=1, work_end="09:30"))

    placed = [(item.day_of_week, item.room_id, item.start) for item in result.placements]
    assert placed == [(0, room_a, 480), (0, room_b, 480), (1, room_a, 480)]


def test_existing_bookings_are_avoided(db_session, catalog, make_booking):
    room_id = catalog["room_ids"][0]
    make_booking(room_id, 0, 480, 540)

    result = build_scheduler(db_session).suggest(
        params(catalog["course_ids"][:1], room_ids=[room_id], work_end="12:00", slot_minutes=60)
    )

    assert (result.placements[0].start, result.placements[0].end) == (540, 600)


def test_booking_straddling_window_start_is_clamped(db_session, catalog, make_booking):
    room_id = catalog["room_ids"][0]
    make_booking(room_id, 0, 420, 510)

    result = build_scheduler(db_session).suggest(
        params(catalog["course_ids"][:1], room_ids=[room_id], work_end="12:00", slot_minutes=60)
    )

    assert result.placements[0].start == 510


def test_placements_never_overlap_each_other(db_session, catalog):
    courses = catalog["course_ids"] * 3
    result = build_scheduler(db_session).suggest(
        params(courses, day_end=2, work_end="13:00", slot_minutes=50)
    )

    ok = [item for item in result.placements if item.ok]
    assert len(ok) == len(courses)
    for index, first in enumerate(ok):
        for second in ok[index + 1:]:
            if (first.room_id, first.day_of_week) == (second.room_id, second.day_of_week):
                assert first.end <= second.start or second.end <= first.start


def test_suggest_is_deterministic_and_does_not_persist(db_session, catalog):
    scheduler = build_scheduler(db_session)
    request = params(catalog["course_ids"], day_end=1)

    first = scheduler.suggest(request)
    second = scheduler.suggest(request)

    assert first.placements == second.placements
    assert db_session.execute(select(func.count(Booking.id))).scalar_one() == 0


def test_unknown_room_ids_are_ignored(db_session, catalog):
    room_b = catalog["room_ids"][1]

    result = build_scheduler(db_session).suggest(params(catalog["course_ids"][:1], room_ids=[999, room_b]))

    assert result.room_ids == [room_b]
    assert result.placements[0].room_id == room_b


def test_no_rooms_available_for_unknown_room_ids(db_session, catalog):
    with pytest.raises(NoRoomsAvailable):
        build_scheduler(db_session).suggest(params(catalog["course_ids"][:1], room_ids=[999]))


def test_no_rooms_available_without_rooms(db_session):
    with pytest.raises(NoRoomsAvailable):
        build_scheduler(db_session).suggest(params([1]))


def test_empty_room_ids_means_all_rooms(db_session, catalog):
    result = build_scheduler(db_session).suggest(params(catalog["course_ids"][:1], room_ids=[]))
    assert result.room_ids == catalog["room_ids"]


def test_invalid_inputs_are_rejected(db_session, catalog):
    scheduler = build_scheduler(db_session)
    courses = catalog["course_ids"][:1]

    with pytest.raises(InvalidDayRange):
        scheduler.suggest(params(courses, day_start=3, day_end=1))
    with pytest.raises(InvalidTimeRange):
        scheduler.suggest(params(courses, work_start="10:00", work_end="10:00"))
    with pytest.raises(InvalidDuration):
        scheduler.suggest(params(courses, slot_minutes=0))
    with pytest.raises(InvalidDuration):
        scheduler.suggest(params(courses, slot_minutes=601))


def test_placement_fits_within_work_window(db_session, catalog):
    result = build_scheduler(db_session).suggest(
        params(catalog["course_ids"], work_start="13:00", work_end="15:00", slot_minutes=40)
    )
    placed = [item for item in result.placements if item.ok]
    assert placed
    for item in placed:
        assert 780 <= item.start < item.end <= 900


def test_earlier_placements_do_not_depend_on_later_courses(db_session, catalog, make_booking):
    room_a, room_b = catalog["room_ids"]
    make_booking(room_a, 0, 540, 600)
    courses = catalog["course_ids"] * 3
    scheduler = build_scheduler(db_session)
    request = {"day_end": 1, "work_start": "08:00", "work_end": "11:00", "slot_minutes": 60}

    full = scheduler.suggest(params(courses, **request))

    assert (full.placements[0].room_id, full.placements[0].start) == (room_a, 480)
    assert (full.placements[1].room_id, full.placements[1].start) == (room_a, 600)
    assert full.placements[2].room_id == room_b
    for k in (1, 2, 3, 5, 8):
        prefix = scheduler.suggest(params(courses[:k], **request))
        assert full.placements[:k] == prefix.placements
