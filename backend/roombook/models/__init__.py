from roombook.models.activity_log import ActivityLog  # noqa: F401
from roombook.models.booking import Booking  # noqa: F401
from roombook.models.reference import Building, Course, Section, StudentGroup, Term  # noqa: F401
from roombook.models.room import Room  # noqa: F401
from roombook.models.room_day_lock import RoomDayLock  # noqa: F401
from roombook.models.time_slot import TimeSlot  # noqa: F401
