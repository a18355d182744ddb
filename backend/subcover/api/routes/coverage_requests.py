from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from subcover.api.deps import get_db, get_school_context
from subcover.core.context import SchoolContext, ensure_same_school
from subcover.core.exceptions import ResourceNotFoundError
from subcover.models.coverage_request import CoverageRequest, CoverageRequestShift
from subcover.schemas.time_off import (
    CoverageRequestOut,
    CoverageRequestShiftOut,
    CoverageRequestStatusUpdate,
)
from subcover.services.coverage_requests import cancel_coverage_request_shift, update_coverage_request_status

router = APIRouter()


@router.put("/coverage-requests/{coverage_request_id}/status", response_model=CoverageRequestOut)
def update_status(
    coverage_request_id: str,
    payload: CoverageRequestStatusUpdate,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> CoverageRequestOut:
    coverage_request = db.get(CoverageRequest, coverage_request_id)
    if coverage_request is None:
        raise ResourceNotFoundError("Coverage request", coverage_request_id)
    ensure_same_school(coverage_request.school_id, context)

    update_coverage_request_status(db, coverage_request, payload.status, context=context)
    db.commit()
    db.refresh(coverage_request)
    return coverage_request


@router.post("/coverage-requests/shifts/{shift_id}/cancel", response_model=CoverageRequestShiftOut)
def cancel_shift(
    shift_id: str,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> CoverageRequestShiftOut:
    shift = db.get(CoverageRequestShift, shift_id)
    if shift is None:
        raise ResourceNotFoundError("Coverage request shift", shift_id)
    ensure_same_school(shift.school_id, context)

    cancel_coverage_request_shift(db, shift, context=context)
    db.commit()
    db.refresh(shift)
    return shift
