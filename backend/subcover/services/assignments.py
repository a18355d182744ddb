"""Booking substitutes onto coverage shifts and taking them off again."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from subcover.core.context import SchoolContext, ensure_same_school
from subcover.core.exceptions import AppError, AssignmentConflictError, RequestValidationFailed, ResourceNotFoundError
from subcover.models.coverage_request import (
    CoverageRequest,
    CoverageRequestShift,
    CoverageRequestShiftStatus,
    CoverageRequestStatus,
)
from subcover.models.staff import Staff
from subcover.models.sub_assignment import SubAssignment, SubAssignmentStatus
from subcover.models.substitute_contact import ResponseStatus
from subcover.models.time_off import TimeOffRequest, TimeOffShift, TimeOffStatus
from subcover.services.audit import log_activity
from subcover.services.coverage_requests import refresh_coverage_request
from subcover.services.lifecycle import ensure_transition
from subcover.services.shift_overrides import get_or_create_substitute_contact

logger = logging.getLogger(__name__)


class UnassignScope(str, Enum):
    single = "single"
    all_for_absence = "all_for_absence"


def _double_booked_shift_ids(db: Session, sub_id: str, shifts: list[CoverageRequestShift]) -> list[str]:
    """Ids of ``shifts`` whose date and slot the substitute already covers under another assignment."""
    busy = set(
        db.execute(
            select(SubAssignment.date, SubAssignment.time_slot_id).where(
                SubAssignment.sub_id == sub_id,
                SubAssignment.status == SubAssignmentStatus.active,
                SubAssignment.date.in_(sorted({shift.date for shift in shifts})),
            )
        ).all()
    )
    return sorted(shift.id for shift in shifts if (shift.date, shift.time_slot_id) in busy)


def assign_shifts(
    db: Session,
    *,
    coverage_request_id: str,
    sub_id: str,
    shift_ids: Iterable[str],
    context: SchoolContext | None = None,
    notes: str | None = None,
) -> list[SubAssignment]:
    """Create one active assignment per requested shift and confirm the contact."""
    requested_ids = list(dict.fromkeys(shift_id for shift_id in shift_ids if shift_id))
    if not coverage_request_id or not sub_id or not requested_ids:
        raise RequestValidationFailed("Missing required fields: coverage_request_id, sub_id, selected_shift_ids")

    coverage_request = db.get(CoverageRequest, coverage_request_id)
    if coverage_request is None:
        raise ResourceNotFoundError("Coverage request", coverage_request_id)
    ensure_same_school(coverage_request.school_id, context)
    if coverage_request.status == CoverageRequestStatus.cancelled:
        raise AssignmentConflictError(
            "Cannot assign substitutes to a cancelled coverage request",
            details={"coverage_request_id": coverage_request_id},
        )
    if coverage_request.source_request_id:
        absence = db.get(TimeOffRequest, coverage_request.source_request_id)
        if absence is not None and absence.status == TimeOffStatus.cancelled:
            raise AssignmentConflictError(
                "Cannot assign substitutes for a cancelled time off request",
                details={"time_off_request_id": absence.id},
            )

    sub = db.get(Staff, sub_id)
    if sub is None:
        raise ResourceNotFoundError("Staff", sub_id)

    shifts = list(
        db.execute(
            select(CoverageRequestShift)
            .where(
                CoverageRequestShift.coverage_request_id == coverage_request_id,
                CoverageRequestShift.id.in_(requested_ids),
                CoverageRequestShift.status == CoverageRequestShiftStatus.active,
            )
            .order_by(CoverageRequestShift.date, CoverageRequestShift.time_slot_id)
        ).scalars()
    )
    if not shifts:
        raise AppError("No valid shifts found for assignment", status_code=404, details={"shift_ids": requested_ids})

    taken = list(
        db.execute(
            select(SubAssignment.coverage_request_shift_id).where(
                SubAssignment.coverage_request_shift_id.in_([shift.id for shift in shifts]),
                SubAssignment.status == SubAssignmentStatus.active,
            )
        ).scalars()
    )
    if taken:
        raise AssignmentConflictError(
            "One or more shifts already have an active substitute assignment",
            details={"shift_ids": sorted(taken)},
        )

    double_booked = _double_booked_shift_ids(db, sub_id, shifts)
    if double_booked:
        raise AssignmentConflictError(
            "Substitute is already assigned elsewhere for one or more of these shifts",
            details={"shift_ids": double_booked},
        )

    assignments: list[SubAssignment] = []
    for shift in shifts:
        assignment = SubAssignment(
            school_id=coverage_request.school_id,
            sub_id=sub_id,
            teacher_id=coverage_request.teacher_id,
            coverage_request_shift_id=shift.id,
            date=shift.date,
            day_of_week_id=shift.day_of_week_id,
            time_slot_id=shift.time_slot_id,
            classroom_id=shift.classroom_id,
            is_partial=False,
            status=SubAssignmentStatus.active,
            notes=notes,
        )
        db.add(assignment)
        assignments.append(assignment)

    contact = get_or_create_substitute_contact(db, coverage_request_id, sub_id)
    contact.response_status = ResponseStatus.confirmed
    contact.is_contacted = True
    db.flush()

    refresh_coverage_request(db, coverage_request)
    log_activity(
        db,
        context=context,
        action="assigned",
        entity_type="coverage_request",
        entity_id=coverage_request_id,
        details={"sub_id": sub_id, "shift_ids": [shift.id for shift in shifts]},
    )
    logger.info(
        "Assigned substitute %s to %d shift(s) of coverage request %s",
        sub_id,
        len(assignments),
        coverage_request_id,
    )
    return assignments


def _active_assignments_for_absence(db: Session, absence: TimeOffRequest, sub_id: str) -> list[SubAssignment]:
    slot_keys = {
        (shift_date, time_slot_id)
        for shift_date, time_slot_id in db.execute(
            select(TimeOffShift.date, TimeOffShift.time_slot_id).where(
                TimeOffShift.time_off_request_id == absence.id
            )
        ).all()
    }
    coverage_shift_ids: set[str] = set()
    if absence.coverage_request_id:
        coverage_shift_ids = set(
            db.execute(
                select(CoverageRequestShift.id).where(
                    CoverageRequestShift.coverage_request_id == absence.coverage_request_id
                )
            ).scalars()
        )

    candidates = db.execute(
        select(SubAssignment)
        .where(
            SubAssignment.teacher_id == absence.teacher_id,
            SubAssignment.sub_id == sub_id,
            SubAssignment.status == SubAssignmentStatus.active,
            SubAssignment.date >= absence.start_date,
            SubAssignment.date <= absence.last_date,
        )
        .order_by(SubAssignment.date, SubAssignment.time_slot_id)
    ).scalars()

    return [
        assignment
        for assignment in candidates
        if assignment.coverage_request_shift_id in coverage_shift_ids
        or (assignment.date, assignment.time_slot_id) in slot_keys
    ]


def unassign_shifts(
    db: Session,
    *,
    absence_id: str,
    sub_id: str,
    scope: UnassignScope,
    assignment_id: str | None = None,
    context: SchoolContext | None = None,
) -> list[SubAssignment]:
    """Cancel one or all of a substitute's active assignments for an absence.

    The coverage request keeps its status; its counters are recomputed.
    """
    if not absence_id or not sub_id:
        raise RequestValidationFailed("Missing required fields: absence_id, sub_id")
    if scope == UnassignScope.single and not assignment_id:
        raise RequestValidationFailed("assignment_id is required when scope is single")

    absence = db.get(TimeOffRequest, absence_id)
    if absence is None:
        raise ResourceNotFoundError("Time off request", absence_id)
    ensure_same_school(absence.school_id, context)

    matching = _active_assignments_for_absence(db, absence, sub_id)
    if scope == UnassignScope.single:
        matching = [assignment for assignment in matching if assignment.id == assignment_id]
        if not matching:
            raise AssignmentConflictError(
                "That assignment is no longer active for this time off request",
                details={"assignment_id": assignment_id},
            )

    for assignment in matching:
        ensure_transition("sub_assignment", assignment.status, SubAssignmentStatus.cancelled)
        assignment.status = SubAssignmentStatus.cancelled
    db.flush()

    if absence.coverage_request_id:
        coverage_request = db.get(CoverageRequest, absence.coverage_request_id)
        if coverage_request is not None:
            refresh_coverage_request(db, coverage_request)

    log_activity(
        db,
        context=context,
        action="unassigned",
        entity_type="time_off_request",
        entity_id=absence_id,
        details={"sub_id": sub_id, "scope": scope.value, "assignment_ids": [a.id for a in matching]},
    )
    return matching
