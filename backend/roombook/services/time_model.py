"""Wall-clock <-> minutes-since-midnight conversions and input validation."""

from __future__ import annotations

import re

from roombook.core.exceptions import InvalidDayRange, InvalidDuration, InvalidTimeFormat, InvalidTimeRange

MINUTES_PER_DAY = 24 * 60
FIRST_DAY = 0
LAST_DAY = 6
MAX_DURATION_MINUTES = 600

TIME_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$", re.ASCII)


def parse_time(value: str) -> int:
    """Parse ``HH:MM`` or ``HH:MM:SS`` into minutes since midnight.

    Seconds are validated and then dropped.
    """
    if not isinstance(value, str):
        raise InvalidTimeFormat(value)
    match = TIME_PATTERN.match(value.strip())
    if match is None:
        raise InvalidTimeFormat(value)
    hours, minutes = int(match.group(1)), int(match.group(2))
    seconds = int(match.group(3)) if match.group(3) is not None else 0
    if not 0 <= hours <= 23 or not 0 <= minutes <= 59 or not 0 <= seconds <= 59:
        raise InvalidTimeRange(f"Invalid time range {value!r}", details={"value": value})
    return hours * 60 + minutes


def format_time(minutes: int) -> str:
    hours, rest = divmod(minutes, 60)
    return f"{hours:02d}:{rest:02d}"


def validate_day(day: int, field: str = "dayOfWeek") -> int:
    if isinstance(day, bool) or not isinstance(day, int) or not FIRST_DAY <= day <= LAST_DAY:
        raise InvalidDayRange(f"{field} must be {FIRST_DAY}..{LAST_DAY}", details={field: day})
    return day


def validate_day_range(day_start: int, day_end: int) -> tuple[int, int]:
    validate_day(day_start, "dayStart")
    validate_day(day_end, "dayEnd")
    if day_start > day_end:
        raise InvalidDayRange(
            "Invalid dayStart/dayEnd (0..6 and start <= end)",
            details={"dayStart": day_start, "dayEnd": day_end},
        )
    return day_start, day_end


def validate_duration(minutes: int, field: str = "durationMinutes", maximum: int = MAX_DURATION_MINUTES) -> int:
    if isinstance(minutes, bool) or not isinstance(minutes, int) or not 0 < minutes <= maximum:
        raise InvalidDuration(f"{field} out of range (1..{maximum})", details={field: minutes})
    return minutes


def validate_window(start: int, end: int, start_field: str = "startTime", end_field: str = "endTime") -> tuple[int, int]:
    if end <= start:
        raise InvalidTimeRange(f"{end_field} must be after {start_field}")
    if start < 0 or end > MINUTES_PER_DAY:
        raise InvalidTimeRange(f"{start_field}/{end_field} must fall within one day")
    return start, end


def resolve_interval(
    start_time: str,
    end_time: str | None = None,
    duration_minutes: int | None = None,
) -> tuple[int, int, int]:
    """Resolve a booking interval from a start plus an end time and/or a duration.

    Returns ``(start, end, duration)``. When both end and duration are given they
    must agree.
    """
    start = parse_time(start_time)
    if duration_minutes is not None:
        validate_duration(duration_minutes)
    if end_time is not None:
        end = parse_time(end_time)
        validate_window(start, end)
        if duration_minutes is not None and duration_minutes != end - start:
            raise InvalidDuration(
                "durationMinutes must equal endTime - startTime",
                details={"durationMinutes": duration_minutes, "computed": end - start},
            )
        return start, end, end - start
    if duration_minutes is None:
        raise InvalidTimeRange("Provide endTime or durationMinutes")
    end = start + duration_minutes
    validate_window(start, end)
    return start, end, duration_minutes
