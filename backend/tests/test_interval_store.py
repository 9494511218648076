import pytest
from sqlalchemy.exc import OperationalError

from roombook.core.exceptions import StorageUnavailable
from roombook.services.conflicts import Interval
from roombook.services.interval_store import IntervalStore


def test_load_returns_every_room_day_key(db_session, catalog):
    room_a, room_b = catalog["room_ids"]
    loaded = IntervalStore(db_session).load([room_a, room_b], 1, 3)

    assert set(loaded) == {room_a, room_b}
    for days in loaded.values():
        assert days == {1: [], 2: [], 3: []}


def test_load_sorts_by_start_and_filters_days(db_session, catalog, make_booking):
    room_id = catalog["room_ids"][0]
    late = make_booking(room_id, 2, 780, 840)
    early = make_booking(room_id, 2, 480, 540)
    make_booking(room_id, 5, 600, 660)

    loaded = IntervalStore(db_session).load([room_id], 2, 3)

    assert loaded[room_id][2] == [Interval(480, 540, early.id), Interval(780, 840, late.id)]
    assert loaded[room_id][3] == []
    assert 5 not in loaded[room_id]


def test_load_clamps_to_work_window(db_session, catalog, make_booking):
    room_id = catalog["room_ids"][0]
    straddling = make_booking(room_id, 1, 420, 510)
    make_booking(room_id, 1, 300, 420)
    make_booking(room_id, 1, 1020, 1080)

    loaded = IntervalStore(db_session).load([room_id], 1, 1, window=(480, 1020))

    assert loaded[room_id][1] == [Interval(480, 510, straddling.id)]


def test_load_ignores_other_rooms(db_session, catalog, make_booking):
    room_a, room_b = catalog["room_ids"]
    make_booking(room_b, 0, 480, 540)

    assert IntervalStore(db_session).intervals_for(room_a, 0) == []
    assert len(IntervalStore(db_session).intervals_for(room_b, 0)) == 1


def test_load_with_no_rooms_returns_empty_mapping(db_session):
    assert IntervalStore(db_session).load([], 0, 6) == {}


def test_load_failure_is_reported_as_storage_unavailable(db_session, monkeypatch):
    def unavailable(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    monkeypatch.setattr(db_session, "execute", unavailable)

    with pytest.raises(StorageUnavailable):
        IntervalStore(db_session).load([1], 0, 0)
