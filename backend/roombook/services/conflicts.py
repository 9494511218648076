"""Half-open interval overlap detection for room/day booking lists."""

from __future__ import annotations

from typing import Iterable, NamedTuple, Sequence


class Interval(NamedTuple):
    start: int
    end: int
    booking_id: int | None = None


def overlaps(existing: Interval, candidate: Interval) -> bool:
    return not (existing.end <= candidate.start or existing.start >= candidate.end)


def find_conflict(
    intervals: Iterable[Interval],
    candidate: Interval,
    exclude_booking_id: int | None = None,
) -> Interval | None:
    """Return the first interval overlapping ``candidate``, if any.

    ``intervals`` must be sorted by start. The interval belonging to
    ``exclude_booking_id`` is skipped so a booking never conflicts with itself.
    """
    for existing in intervals:
        if existing.start >= candidate.end:
            break
        if exclude_booking_id is not None and existing.booking_id == exclude_booking_id:
            continue
        if overlaps(existing, candidate):
            return existing
    return None


def first_gap(intervals: Sequence[Interval], window_start: int, window_end: int, length: int) -> Interval | None:
    # First-fit scan from the window start; intervals are sorted by start.
    prev = window_start
    for itv in intervals:
        if itv.start - prev >= length:
            return Interval(prev, prev + length)
        prev = max(prev, itv.end)
    if window_end - prev >= length:
        return Interval(prev, prev + length)
    return None


def clamp(interval: Interval, window_start: int, window_end: int) -> Interval | None:
    start = max(interval.start, window_start)
    end = min(interval.end, window_end)
    if end <= start:
        return None
    return Interval(start, end, interval.booking_id)
