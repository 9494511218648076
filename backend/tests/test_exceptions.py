from roombook.core.exceptions import (
    AppError,
    BookingNotFound,
    InvalidDayRange,
    InvalidDuration,
    InvalidReference,
    InvalidTimeFormat,
    InvalidTimeRange,
    NoRoomsAvailable,
    ResourceNotFoundError,
    RoomSlotConflict,
    StorageUnavailable,
)


def test_error_kinds_map_to_status_and_code():
    cases = [
        (InvalidTimeFormat("9am"), 400, "invalid_time_format"),
        (InvalidTimeRange("bad"), 400, "invalid_time_range"),
        (InvalidDayRange("bad"), 400, "invalid_day_range"),
        (InvalidDuration("bad"), 400, "invalid_duration"),
        (NoRoomsAvailable(), 400, "no_rooms_available"),
        (InvalidReference("courseId", 3), 400, "invalid_reference"),
        (RoomSlotConflict(), 409, "room_slot_conflict"),
        (BookingNotFound(5), 404, "booking_not_found"),
        (StorageUnavailable(), 503, "storage_unavailable"),
        (ResourceNotFoundError("Room", 3), 404, "not_found"),
    ]
    for error, status_code, code in cases:
        assert isinstance(error, AppError)
        assert (error.status_code, error.code) == (status_code, code)


def test_invalid_reference_names_the_field():
    error = InvalidReference("groupId", 12)
    assert error.message == "Unknown groupId"
    assert error.details == {"field": "groupId", "value": 12}


def test_booking_not_found_details_use_camel_case():
    assert BookingNotFound(7).details == {"bookingId": 7}
