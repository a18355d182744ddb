from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from subcover.api.deps import get_db, get_school_context
from subcover.core.context import SchoolContext
from subcover.schemas.teacher_schedule import (
    ConflictCheckRequest,
    ConflictCheckResponse,
    ResolveConflictRequest,
    ResolveConflictResponse,
    ScheduleConflictOut,
    TeacherScheduleOut,
)
from subcover.services.schedule_conflicts import ConflictCheck, ResolveConflict, ScheduleConflictService

router = APIRouter()


@router.post("/teacher-schedules/check-conflicts", response_model=ConflictCheckResponse)
def check_conflicts(
    payload: ConflictCheckRequest,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> ConflictCheckResponse:
    service = ScheduleConflictService(db, school_id=context.school_id)
    conflicts = service.detect_conflicts(ConflictCheck(**check.model_dump()) for check in payload.checks)
    return ConflictCheckResponse(conflicts=[ScheduleConflictOut.model_validate(item) for item in conflicts])


@router.post("/teacher-schedules/resolve-conflict", response_model=ResolveConflictResponse)
def resolve_conflict(
    payload: ResolveConflictRequest,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> ResolveConflictResponse:
    service = ScheduleConflictService(db, school_id=context.school_id)
    result = service.resolve(ResolveConflict(**payload.model_dump()), context=context)
    db.commit()
    if result.created is not None:
        db.refresh(result.created)
    return ResolveConflictResponse(
        resolution=payload.resolution,
        created=TeacherScheduleOut.model_validate(result.created) if result.created is not None else None,
        deleted_ids=result.deleted,
        updated=[TeacherScheduleOut.model_validate(item) for item in result.updated],
    )
