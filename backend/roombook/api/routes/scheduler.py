from dataclasses import asdict

from fastapi import APIRouter, Depends

from roombook.api.deps import (
    Principal,
    get_auto_scheduler,
    get_availability_service,
    get_booking_transaction,
    require_scheduler,
)
from roombook.core.config import get_settings
from roombook.schemas.scheduler import (
    BookingRowIn,
    CheckRequest,
    CheckResponse,
    CommitRequest,
    CommitResponse,
    CommitRowResult,
    ConflictOut,
    DayRange,
    SuggestRequest,
    SuggestResponse,
    Suggestion,
    WorkWindow,
)
from roombook.services.auto_scheduler import AutoScheduler, SuggestParams
from roombook.services.availability import AvailabilityQuery, AvailabilityService
from roombook.services.booking_transaction import BookingDraft, BookingTransaction
from roombook.services.time_model import format_time

router = APIRouter()


@router.post("/suggest", response_model=SuggestResponse)
def suggest_schedule(
    payload: SuggestRequest,
    scheduler: AutoScheduler = Depends(get_auto_scheduler),
    principal: Principal = Depends(require_scheduler),
) -> SuggestResponse:
    slot_minutes = payload.slot_minutes
    if slot_minutes is None:
        slot_minutes = get_settings().default_slot_minutes
    result = scheduler.suggest(
        SuggestParams(
            course_ids=payload.course_ids,
            day_start=payload.day_start,
            day_end=payload.day_end,
            work_start=payload.work_start,
            work_end=payload.work_end,
            slot_minutes=slot_minutes,
            room_ids=payload.room_ids,
            term_id=payload.term_id,
            section_id=payload.section_id,
            group_id=payload.group_id,
        )
    )
    return SuggestResponse(
        days=DayRange(start=result.day_start, end=result.day_end),
        work_window=WorkWindow(start=result.work_start, end=result.work_end),
        slot_minutes=result.slot_minutes,
        rooms=result.room_ids,
        suggestions=[
            Suggestion(
                course_id=item.course_id,
                term_id=payload.term_id,
                section_id=payload.section_id,
                group_id=payload.group_id,
                room_id=item.room_id,
                day_of_week=item.day_of_week,
                start_time=format_time(item.start) if item.ok else None,
                end_time=format_time(item.end) if item.ok else None,
                duration_minutes=item.duration_minutes,
                ok=item.ok,
                reason=item.reason,
            )
            for item in result.placements
        ],
    )


@router.post("/commit", response_model=CommitResponse)
def commit_schedule(
    payload: CommitRequest,
    transaction: BookingTransaction = Depends(get_booking_transaction),
) -> CommitResponse:
    drafts = [BookingDraft(**row.model_dump()) for row in payload.rows]
    outcome = transaction.commit_batch(drafts)
    return CommitResponse(
        results=[
            CommitRowResult(
                ok=item.ok,
                booking_id=item.booking_id,
                reason=item.reason,
                code=item.code,
                row=BookingRowIn(**asdict(item.row)),
            )
            for item in outcome.results
        ],
        created=outcome.created,
        failed=outcome.failed,
    )


@router.post("/check", response_model=CheckResponse, response_model_exclude_none=True)
def check_availability(
    payload: CheckRequest,
    availability: AvailabilityService = Depends(get_availability_service),
    principal: Principal = Depends(require_scheduler),
) -> CheckResponse:
    result = availability.check(
        AvailabilityQuery(
            room_id=payload.room_id,
            day_of_week=payload.day_index,
            start_time=payload.start_time,
            end_time=payload.end_time,
            duration_minutes=payload.duration_minutes,
            time_slot_id=payload.time_slot_id,
            exclude_booking_id=payload.exclude_booking_id,
        )
    )
    if result.conflict is None:
        return CheckResponse(free=True)
    return CheckResponse(
        free=False,
        conflict=ConflictOut(
            booking_id=result.conflict.booking_id,
            day_index=payload.day_index,
            start=format_time(result.conflict.start),
            end=format_time(result.conflict.end),
        ),
    )
