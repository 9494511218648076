class AppError(Exception):
    """Base class for all application exceptions."""

    code = "app_error"

    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)


class InvalidTimeFormat(AppError):
    """Raised when a time string is not HH:MM or HH:MM:SS."""

    code = "invalid_time_format"

    def __init__(self, value, details: dict = None):
        super().__init__(
            f"Invalid time format {value!r}; expected HH:MM[:SS]",
            status_code=400,
            details={"value": value, **(details or {})},
        )


class InvalidTimeRange(AppError):
    """Raised when a time is out of range or an interval is empty or inverted."""

    code = "invalid_time_range"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class InvalidDayRange(AppError):
    code = "invalid_day_range"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class InvalidDuration(AppError):
    code = "invalid_duration"

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=400, details=details)


class NoRoomsAvailable(AppError):
    code = "no_rooms_available"

    def __init__(self, message: str = "No rooms found to schedule into", details: dict = None):
        super().__init__(message, status_code=400, details=details)


class InvalidReference(AppError):
    """Raised when a referenced course/term/section/group/room does not exist."""

    code = "invalid_reference"

    def __init__(self, field: str, value):
        super().__init__(f"Unknown {field}", status_code=400, details={"field": field, "value": value})


class RoomSlotConflict(AppError):
    """Raised when a write would overlap an existing booking in the same room and day."""

    code = "room_slot_conflict"

    def __init__(self, message: str = "Room already booked at this day/time", details: dict = None):
        super().__init__(message, status_code=409, details=details)


class BookingNotFound(AppError):
    code = "booking_not_found"

    def __init__(self, booking_id):
        super().__init__(f"Booking with id {booking_id} not found", status_code=404, details={"bookingId": booking_id})


class ResourceNotFoundError(AppError):
    """Raised when a requested resource is not found."""

    code = "not_found"

    def __init__(self, resource_type: str, resource_id):
        super().__init__(f"{resource_type} with id {resource_id} not found", status_code=404, details={"id": resource_id})


class StorageUnavailable(AppError):
    """Raised when the persistence layer fails; safe to retry."""

    code = "storage_unavailable"

    def __init__(self, message: str = "Storage is temporarily unavailable", details: dict = None):
        super().__init__(message, status_code=503, details=details)
