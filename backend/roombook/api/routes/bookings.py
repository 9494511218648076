from math import ceil

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from roombook.api.deps import Principal, get_booking_transaction, get_current_principal, get_db
from roombook.core.exceptions import BookingNotFound
from roombook.models.booking import Booking
from roombook.schemas.booking import BookingCreate, BookingListOut, BookingOut, BookingRef, BookingUpdate
from roombook.services.booking_transaction import BookingChanges, BookingDraft, BookingTransaction
from roombook.services.time_model import format_time

router = APIRouter()


def to_booking_out(booking: Booking) -> BookingOut:
    return BookingOut(
        id=booking.id,
        course_id=booking.course_id,
        term_id=booking.term_id,
        section_id=booking.section_id,
        group_id=booking.group_id,
        room_id=booking.room_id,
        day_of_week=booking.day_of_week,
        start_time=format_time(booking.start_minute),
        end_time=format_time(booking.end_minute),
        duration_minutes=booking.duration_minutes,
        created_at=booking.created_at,
    )


@router.get("", response_model=BookingListOut)
def list_bookings(
    room_id: int | None = Query(default=None, alias="roomId"),
    day_of_week: int | None = Query(default=None, alias="dayOfWeek", ge=0, le=6),
    course_id: int | None = Query(default=None, alias="courseId"),
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=20, alias="pageSize", ge=1, le=100),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> BookingListOut:
    filters = []
    if room_id is not None:
        filters.append(Booking.room_id == room_id)
    if day_of_week is not None:
        filters.append(Booking.day_of_week == day_of_week)
    if course_id is not None:
        filters.append(Booking.course_id == course_id)

    total = db.execute(select(func.count(Booking.id)).where(*filters)).scalar_one()
    rows = db.execute(
        select(Booking)
        .where(*filters)
        .order_by(Booking.day_of_week, Booking.start_minute, Booking.room_id, Booking.id)
        .offset((page - 1) * page_size)
        .limit(page_size)
    ).scalars()
    return BookingListOut(
        items=[to_booking_out(item) for item in rows],
        total=total,
        page=page,
        page_size=page_size,
        pages=ceil(total / page_size),
    )


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(
    booking_id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> BookingOut:
    booking = db.get(Booking, booking_id)
    if booking is None:
        raise BookingNotFound(booking_id)
    return to_booking_out(booking)


@router.post("", response_model=BookingRef, status_code=status.HTTP_201_CREATED)
def create_booking(
    payload: BookingCreate,
    transaction: BookingTransaction = Depends(get_booking_transaction),
) -> BookingRef:
    booking = transaction.create(BookingDraft(**payload.model_dump()))
    return BookingRef(booking_id=booking.id)


@router.patch("/{booking_id}", response_model=BookingRef)
def update_booking(
    booking_id: int,
    payload: BookingUpdate,
    transaction: BookingTransaction = Depends(get_booking_transaction),
) -> BookingRef:
    booking = transaction.update(booking_id, BookingChanges(**payload.model_dump()))
    return BookingRef(booking_id=booking.id)


@router.delete("/{booking_id}")
def delete_booking(
    booking_id: int,
    transaction: BookingTransaction = Depends(get_booking_transaction),
) -> dict:
    transaction.delete(booking_id)
    return {"success": True}
