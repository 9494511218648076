from pydantic import Field

from roombook.schemas.common import CamelModel


class TimeSlotCreate(CamelModel):
    name: str = Field(min_length=1, max_length=100)
    start_time: str
    end_time: str


class TimeSlotOut(CamelModel):
    id: int
    name: str
    start_time: str
    end_time: str
