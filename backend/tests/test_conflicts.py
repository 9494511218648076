import itertools

from roombook.services.conflicts import Interval, clamp, find_conflict, first_gap, overlaps


def test_touching_intervals_do_not_overlap():
    assert not overlaps(Interval(540, 630), Interval(630, 690))
    assert not overlaps(Interval(630, 690), Interval(540, 630))


def test_partial_and_nested_intervals_overlap():
    assert overlaps(Interval(540, 630), Interval(600, 660))
    assert overlaps(Interval(540, 720), Interval(600, 660))
    assert overlaps(Interval(600, 660), Interval(540, 720))


def test_overlap_is_symmetric_and_matches_max_min_rule():
    points = [0, 30, 60, 90, 120]
    intervals = [Interval(a, b) for a, b in itertools.combinations(points, 2)]
    for first, second in itertools.product(intervals, repeat=2):
        assert overlaps(first, second) == overlaps(second, first)
        assert overlaps(first, second) == (max(first.start, second.start) < min(first.end, second.end))


def test_find_conflict_returns_first_overlapping_interval():
    intervals = [Interval(480, 540, 1), Interval(540, 630, 2), Interval(660, 720, 3)]
    assert find_conflict(intervals, Interval(600, 700)) == Interval(540, 630, 2)
    assert find_conflict(intervals, Interval(630, 660)) is None


def test_find_conflict_skips_excluded_booking():
    intervals = [Interval(540, 600, 7), Interval(600, 660, 8)]
    assert find_conflict(intervals, Interval(550, 600), exclude_booking_id=7) is None
    assert find_conflict(intervals, Interval(570, 630), exclude_booking_id=7) == Interval(600, 660, 8)


def test_find_conflict_on_empty_list():
    assert find_conflict([], Interval(0, 1440)) is None


def test_first_gap_uses_window_start_when_room_is_empty():
    assert first_gap([], 480, 600, 90) == Interval(480, 570)


def test_first_gap_finds_interior_gap():
    intervals = [Interval(480, 540), Interval(630, 720)]
    assert first_gap(intervals, 480, 1080, 90) == Interval(540, 630)


def test_first_gap_skips_nested_intervals_when_advancing():
    intervals = [Interval(480, 720), Interval(500, 560), Interval(720, 780)]
    assert first_gap(intervals, 480, 900, 60) == Interval(780, 840)


def test_first_gap_returns_none_when_only_short_tail_remains():
    assert first_gap([Interval(480, 570)], 480, 600, 90) is None


def test_clamp_trims_to_window_and_drops_outside():
    assert clamp(Interval(420, 510, 5), 480, 600) == Interval(480, 510, 5)
    assert clamp(Interval(300, 400, 5), 480, 600) is None
    assert clamp(Interval(600, 660, 5), 480, 600) is None
