from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from subcover.api.deps import get_db, get_school_context
from subcover.core.context import SchoolContext, ensure_same_school
from subcover.core.exceptions import ResourceNotFoundError
from subcover.models.time_off import TimeOffRequest
from subcover.schemas.time_off import (
    CoverageRequestOut,
    ScheduledShiftOut,
    TimeOffRequestOut,
    TimeOffStatusUpdate,
)
from subcover.services.coverage_requests import (
    derive_scheduled_shifts,
    ensure_coverage_request,
    update_time_off_status,
)

router = APIRouter()


def _get_time_off_request(db: Session, time_off_id: str, context: SchoolContext) -> TimeOffRequest:
    request = db.get(TimeOffRequest, time_off_id)
    if request is None:
        raise ResourceNotFoundError("Time off request", time_off_id)
    ensure_same_school(request.school_id, context)
    return request


@router.post("/time-off/{time_off_id}/coverage-request", response_model=CoverageRequestOut)
def create_coverage_request(
    time_off_id: str,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> CoverageRequestOut:
    request = _get_time_off_request(db, time_off_id, context)
    coverage_request = ensure_coverage_request(db, request, context=context)
    db.commit()
    db.refresh(coverage_request)
    return coverage_request


@router.put("/time-off/{time_off_id}/status", response_model=TimeOffRequestOut)
def update_status(
    time_off_id: str,
    payload: TimeOffStatusUpdate,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> TimeOffRequestOut:
    request = _get_time_off_request(db, time_off_id, context)
    update_time_off_status(db, request, payload.status, context=context)
    db.commit()
    db.refresh(request)
    return request


@router.get("/time-off/{time_off_id}/scheduled-shifts", response_model=list[ScheduledShiftOut])
def scheduled_shifts(
    time_off_id: str,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> list[ScheduledShiftOut]:
    request = _get_time_off_request(db, time_off_id, context)
    return derive_scheduled_shifts(db, request.teacher_id, request.start_date, request.end_date)
