from sqlalchemy import ForeignKey, Integer, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from roombook.db.base import Base


class RoomDayLock(Base):
    """Row locked with SELECT ... FOR UPDATE while a booking write checks one room/day."""

    __tablename__ = "room_day_locks"
    __table_args__ = (UniqueConstraint("room_id", "day_of_week", name="uq_room_day_locks_key"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    room_id: Mapped[int] = mapped_column(ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)
