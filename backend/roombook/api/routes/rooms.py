from contextlib import ExitStack

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from roombook.api.deps import (
    Principal,
    get_current_principal,
    get_db,
    get_interval_store,
    get_locks,
    require_scheduler,
)
from roombook.core.exceptions import InvalidReference, ResourceNotFoundError
from roombook.models.booking import Booking
from roombook.models.reference import Building
from roombook.models.room import Room
from roombook.models.room_day_lock import RoomDayLock
from roombook.schemas.room import DayOccupancy, OccupiedInterval, RoomCreate, RoomOccupancyOut, RoomOut, RoomUpdate
from roombook.services.interval_store import IntervalStore
from roombook.services.slot_locks import RoomDayLocks
from roombook.services.time_model import FIRST_DAY, LAST_DAY, format_time, validate_day_range

router = APIRouter()


def to_room_out(room: Room) -> RoomOut:
    return RoomOut(
        id=room.id,
        name=room.name,
        building_id=room.building_id,
        modulation_string=room.modulation_string,
    )


def _get_room_or_404(db: Session, room_id: int) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise ResourceNotFoundError("Room", room_id)
    return room


def _ensure_unique_name(db: Session, name: str, building_id: int | None, exclude_id: int | None = None) -> None:
    same_building = Room.building_id.is_(None) if building_id is None else Room.building_id == building_id
    stmt = select(Room.id).where(Room.name == name, same_building)
    if exclude_id is not None:
        stmt = stmt.where(Room.id != exclude_id)
    if db.execute(stmt).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room already exists in this building")


@router.get("", response_model=list[RoomOut])
def list_rooms(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> list[RoomOut]:
    rooms = db.execute(select(Room).order_by(Room.id.asc())).scalars()
    return [to_room_out(room) for room in rooms]


@router.post("", response_model=RoomOut, status_code=status.HTTP_201_CREATED)
def create_room(
    payload: RoomCreate,
    principal: Principal = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> RoomOut:
    if payload.building_id is not None and db.get(Building, payload.building_id) is None:
        raise InvalidReference("buildingId", payload.building_id)
    _ensure_unique_name(db, payload.name, payload.building_id)
    room = Room(**payload.model_dump())
    db.add(room)
    db.flush()
    db.add_all(RoomDayLock(room_id=room.id, day_of_week=day) for day in range(FIRST_DAY, LAST_DAY + 1))
    db.commit()
    db.refresh(room)
    return to_room_out(room)


@router.patch("/{room_id}", response_model=RoomOut)
def update_room(
    room_id: int,
    payload: RoomUpdate,
    principal: Principal = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> RoomOut:
    room = _get_room_or_404(db, room_id)
    data = payload.model_dump(exclude_unset=True)
    if not data:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No fields to update")
    if data.get("building_id") is not None and db.get(Building, data["building_id"]) is None:
        raise InvalidReference("buildingId", data["building_id"])
    if "name" in data or "building_id" in data:
        _ensure_unique_name(
            db,
            data.get("name", room.name),
            data.get("building_id", room.building_id),
            exclude_id=room_id,
        )
    for key, value in data.items():
        setattr(room, key, value)
    db.commit()
    db.refresh(room)
    return to_room_out(room)


@router.delete("/{room_id}")
def delete_room(
    room_id: int,
    principal: Principal = Depends(require_scheduler),
    db: Session = Depends(get_db),
    locks: RoomDayLocks = Depends(get_locks),
) -> dict:
    room = _get_room_or_404(db, room_id)
    # Same room/day scope as booking writes, taken in ascending day order.
    with ExitStack() as stack:
        for day in range(FIRST_DAY, LAST_DAY + 1):
            stack.enter_context(locks.hold(room_id, day))
        db.execute(select(RoomDayLock.id).where(RoomDayLock.room_id == room_id).with_for_update()).all()
        if db.execute(select(Booking.id).where(Booking.room_id == room_id).limit(1)).first() is not None:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Room has bookings; move or delete them first")
        db.execute(delete(RoomDayLock).where(RoomDayLock.room_id == room_id))
        db.delete(room)
        db.commit()
    return {"success": True}


@router.get("/{room_id}/occupancy", response_model=RoomOccupancyOut)
def room_occupancy(
    room_id: int,
    day_start: int = Query(default=FIRST_DAY, alias="dayStart"),
    day_end: int = Query(default=LAST_DAY, alias="dayEnd"),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
    interval_store: IntervalStore = Depends(get_interval_store),
) -> RoomOccupancyOut:
    _get_room_or_404(db, room_id)
    validate_day_range(day_start, day_end)
    days = interval_store.load([room_id], day_start, day_end)[room_id]
    return RoomOccupancyOut(
        room_id=room_id,
        days=[
            DayOccupancy(
                day_of_week=day,
                intervals=[
                    OccupiedInterval(booking_id=itv.booking_id, start=format_time(itv.start), end=format_time(itv.end))
                    for itv in intervals
                ],
            )
            for day, intervals in sorted(days.items())
        ],
    )
