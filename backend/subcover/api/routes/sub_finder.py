import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from subcover.api.deps import get_db, get_school_context
from subcover.core.config import get_settings
from subcover.core.context import SchoolContext, ensure_same_school
from subcover.core.exceptions import AppError, RequestValidationFailed, ResourceNotFoundError, StaleContactVersionError
from subcover.models.coverage_request import CoverageRequest, CoverageRequestShift
from subcover.models.substitute_contact import SubContactShiftOverride, SubstituteContact
from subcover.models.time_off import TimeOffRequest
from subcover.schemas.sub_finder import (
    AbsenceCoverageOut,
    AssignShiftsRequest,
    AssignShiftsResponse,
    CoverageBadgeOut,
    CoverageSegmentOut,
    CoverageShiftOut,
    ShiftChipOut,
    ShiftChipsRequest,
    ShiftCountsOut,
    ShiftOverrideOut,
    ShiftOverridesResolve,
    ShiftOverridesResolved,
    ShiftOverridesSave,
    SubAssignmentOut,
    SubstituteContactOut,
    UnassignShiftsRequest,
    UnassignShiftsResponse,
)
from subcover.services.absence_status import summarize_absence
from subcover.services.assignments import UnassignScope, assign_shifts, unassign_shifts
from subcover.services.audit import log_activity
from subcover.services.coverage_summary import (
    ShiftCoverage,
    build_shift_summary,
    compute_shift_counts,
    coverage_status_of,
    filter_visible_shifts,
    load_absence_coverage,
)
from subcover.services.shift_chips import ShiftInput, build_shift_chips
from subcover.services.shift_overrides import (
    ShiftOverrideRecord,
    find_conflicting_shift_keys,
    load_shift_id_map,
    resolve_shift_overrides,
    save_shift_overrides,
)

logger = logging.getLogger(__name__)

router = APIRouter()


def _contact_out(db: Session, contact: SubstituteContact) -> SubstituteContactOut:
    rows = db.execute(
        select(SubContactShiftOverride)
        .where(SubContactShiftOverride.substitute_contact_id == contact.id)
        .order_by(SubContactShiftOverride.coverage_request_shift_id)
    ).scalars()
    payload = SubstituteContactOut.model_validate(contact)
    payload.shift_overrides = [
        ShiftOverrideOut(
            coverage_request_shift_id=row.coverage_request_shift_id,
            selected=row.selected,
            override_availability=row.override_availability,
        )
        for row in rows
    ]
    return payload


def _coverage_shift_out(shift: ShiftCoverage) -> CoverageShiftOut:
    return CoverageShiftOut(
        id=shift.id,
        date=shift.date,
        day_name=shift.day_name,
        time_slot_code=shift.time_slot_code,
        classroom_name=shift.classroom_name,
        class_name=shift.class_name,
        sub_name=getattr(shift, "sub_name", None),
        status=coverage_status_of(shift),
    )


@router.post("/sub-finder/shift-overrides", response_model=ShiftOverridesResolved)
def resolve_overrides(
    payload: ShiftOverridesResolve,
    db: Session = Depends(get_db),
) -> ShiftOverridesResolved:
    if not payload.coverage_request_id:
        raise RequestValidationFailed("Missing coverage_request_id")

    conflicting = find_conflicting_shift_keys(payload.available_shift_keys, payload.unavailable_shift_keys)
    if conflicting:
        raise RequestValidationFailed(
            "Shift keys cannot be both available and unavailable",
            details={"shift_keys": conflicting},
        )

    try:
        shift_id_map = load_shift_id_map(db, payload.coverage_request_id)
    except SQLAlchemyError as exc:
        logger.exception("Failed to fetch shifts for coverage request %s", payload.coverage_request_id)
        raise AppError("Failed to fetch coverage request shifts", status_code=500) from exc

    resolution = resolve_shift_overrides(
        selected=payload.selected_shift_keys,
        override=payload.override_shift_keys,
        available=payload.available_shift_keys,
        unavailable=payload.unavailable_shift_keys,
        shift_id_map=shift_id_map,
    )
    return ShiftOverridesResolved(
        shift_overrides=[
            ShiftOverrideOut(
                coverage_request_shift_id=record.shift_id,
                selected=record.selected,
                override_availability=record.override_availability,
            )
            for record in resolution.overrides
        ],
        selected_shift_ids=resolution.selected_shift_ids,
    )


@router.put("/sub-finder/substitute-contacts/{contact_id}/shift-overrides", response_model=SubstituteContactOut)
def save_overrides(
    contact_id: str,
    payload: ShiftOverridesSave,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> SubstituteContactOut:
    contact = db.get(SubstituteContact, contact_id)
    if contact is None:
        raise ResourceNotFoundError("Substitute contact", contact_id)
    coverage_request = db.get(CoverageRequest, contact.coverage_request_id)
    if coverage_request is not None:
        ensure_same_school(coverage_request.school_id, context)

    shift_ids = {item.coverage_request_shift_id for item in payload.shift_overrides}
    if shift_ids:
        known = set(
            db.execute(
                select(CoverageRequestShift.id).where(
                    CoverageRequestShift.coverage_request_id == contact.coverage_request_id,
                    CoverageRequestShift.id.in_(shift_ids),
                )
            ).scalars()
        )
        unknown = sorted(shift_ids - known)
        if unknown:
            raise RequestValidationFailed(
                "Shift overrides reference shifts outside this coverage request",
                details={"shift_ids": unknown},
            )

    if payload.response_status is not None:
        contact.response_status = payload.response_status
        if not contact.is_contacted:
            contact.is_contacted = True
            contact.contacted_at = datetime.now(timezone.utc)
    if payload.notes is not None:
        contact.notes = payload.notes

    expected = payload.expected_version if payload.expected_version is not None else contact.version
    records = [
        ShiftOverrideRecord(
            shift_id=item.coverage_request_shift_id,
            selected=item.selected,
            override_availability=item.override_availability,
        )
        for item in payload.shift_overrides
    ]
    try:
        save_shift_overrides(db, contact, records, expected_version=payload.expected_version)
        log_activity(
            db,
            context=context,
            action="shift_overrides_saved",
            entity_type="substitute_contact",
            entity_id=contact_id,
            details={"override_count": len(records), "version": contact.version},
        )
        db.commit()
    except StaleDataError as exc:
        # Another writer bumped the version between our read and our flush.
        db.rollback()
        current = db.get(SubstituteContact, contact_id)
        raise StaleContactVersionError(contact_id, expected, current.version if current is not None else 0) from exc
    db.refresh(contact)
    return _contact_out(db, contact)


@router.post("/sub-finder/assign-shifts", response_model=AssignShiftsResponse)
def assign(
    payload: AssignShiftsRequest,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> AssignShiftsResponse:
    assignments = assign_shifts(
        db,
        coverage_request_id=payload.coverage_request_id or "",
        sub_id=payload.sub_id or "",
        shift_ids=payload.selected_shift_ids,
        context=context,
        notes=payload.notes,
    )
    db.commit()
    for assignment in assignments:
        db.refresh(assignment)
    return AssignShiftsResponse(
        assignments_created=len(assignments),
        assignments=[SubAssignmentOut.model_validate(item) for item in assignments],
    )


@router.post("/sub-finder/unassign-shifts", response_model=UnassignShiftsResponse)
def unassign(
    payload: UnassignShiftsRequest,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> UnassignShiftsResponse:
    if not payload.absence_id or not payload.sub_id or payload.scope is None:
        raise RequestValidationFailed("absence_id, sub_id, and scope are required")

    cancelled = unassign_shifts(
        db,
        absence_id=payload.absence_id,
        sub_id=payload.sub_id,
        scope=UnassignScope(payload.scope),
        assignment_id=payload.assignment_id,
        context=context,
    )
    assignment_ids = [item.id for item in cancelled]
    db.commit()
    return UnassignShiftsResponse(removed_count=len(assignment_ids), assignment_ids=assignment_ids)


@router.get("/sub-finder/absences/{absence_id}/coverage", response_model=AbsenceCoverageOut)
def absence_coverage(
    absence_id: str,
    include_past: bool | None = Query(default=None),
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> AbsenceCoverageOut:
    absence = db.get(TimeOffRequest, absence_id)
    if absence is None:
        raise ResourceNotFoundError("Time off request", absence_id)
    ensure_same_school(absence.school_id, context)

    if include_past is None:
        include_past = get_settings().include_past_shifts

    records = load_absence_coverage(db, absence)
    summary = build_shift_summary(filter_visible_shifts(records, include_past))
    headline = summarize_absence(summary)
    counts = compute_shift_counts(records)

    return AbsenceCoverageOut(
        absence_id=absence.id,
        status=headline.status,
        badges=[CoverageBadgeOut(label=badge.label, count=badge.count, tone=badge.tone) for badge in headline.badges],
        total=summary.total,
        uncovered=summary.uncovered,
        partially_covered=summary.partially_covered,
        fully_covered=summary.fully_covered,
        shift_counts=ShiftCountsOut(past=counts.past, upcoming=counts.upcoming),
        shift_details_sorted=[_coverage_shift_out(shift) for shift in summary.shift_details_sorted],
        coverage_segments=[
            CoverageSegmentOut(id=segment.id, status=segment.status) for segment in summary.coverage_segments
        ],
    )


@router.post("/sub-finder/shift-chips", response_model=list[ShiftChipOut])
def shift_chips(payload: ShiftChipsRequest) -> list[ShiftChipOut]:
    def _inputs(items):
        return [ShiftInput(**item.model_dump()) for item in items]

    try:
        chips = build_shift_chips(
            assigned=_inputs(payload.assigned),
            can_cover=_inputs(payload.can_cover),
            cannot_cover=_inputs(payload.cannot_cover),
            allowed_shift_keys=payload.allowed_shift_keys,
        )
    except ValueError as exc:
        raise RequestValidationFailed(str(exc)) from exc
    return [ShiftChipOut.model_validate(chip) for chip in chips]
