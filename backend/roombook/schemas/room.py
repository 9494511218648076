from pydantic import ConfigDict, Field

from roombook.schemas.common import CamelModel


class RoomBase(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    building_id: int | None = None
    modulation_string: str | None = Field(default=None, max_length=64)


class RoomCreate(RoomBase):
    pass


class RoomUpdate(CamelModel):
    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, min_length=1, max_length=100)
    building_id: int | None = None
    modulation_string: str | None = Field(default=None, max_length=64)


class RoomOut(RoomBase):
    id: int


class OccupiedInterval(CamelModel):
    booking_id: int | None = None
    start: str
    end: str


class DayOccupancy(CamelModel):
    day_of_week: int
    intervals: list[OccupiedInterval]


class RoomOccupancyOut(CamelModel):
    room_id: int
    days: list[DayOccupancy]
