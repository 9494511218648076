from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from roombook.api.deps import Principal, get_current_principal, get_db, require_scheduler
from roombook.models.time_slot import TimeSlot
from roombook.schemas.time_slot import TimeSlotCreate, TimeSlotOut
from roombook.services.time_model import format_time, parse_time, validate_window

router = APIRouter()


def to_time_slot_out(slot: TimeSlot) -> TimeSlotOut:
    return TimeSlotOut(
        id=slot.id,
        name=slot.name,
        start_time=format_time(slot.start_minute),
        end_time=format_time(slot.end_minute),
    )


@router.get("", response_model=list[TimeSlotOut])
def list_time_slots(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> list[TimeSlotOut]:
    slots = db.execute(select(TimeSlot).order_by(TimeSlot.start_minute, TimeSlot.id)).scalars()
    return [to_time_slot_out(slot) for slot in slots]


@router.post("", response_model=TimeSlotOut, status_code=status.HTTP_201_CREATED)
def create_time_slot(
    payload: TimeSlotCreate,
    principal: Principal = Depends(require_scheduler),
    db: Session = Depends(get_db),
) -> TimeSlotOut:
    start, end = validate_window(parse_time(payload.start_time), parse_time(payload.end_time))
    if db.execute(select(TimeSlot.id).where(TimeSlot.name == payload.name)).first() is not None:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Time slot name already exists")
    slot = TimeSlot(name=payload.name, start_minute=start, end_minute=end)
    db.add(slot)
    db.commit()
    db.refresh(slot)
    return to_time_slot_out(slot)
