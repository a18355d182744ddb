"""Absence shifts, coverage requests and their status changes."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date, timedelta

from sqlalchemy import select
from sqlalchemy.orm import Session

from subcover.core.context import SchoolContext
from subcover.core.exceptions import AppError
from subcover.models.coverage_request import (
    CoverageRequest,
    CoverageRequestShift,
    CoverageRequestShiftStatus,
    CoverageRequestStatus,
    CoverageRequestType,
)
from subcover.models.schedule import TeacherSchedule
from subcover.models.sub_assignment import SubAssignment, SubAssignmentStatus
from subcover.models.time_off import ShiftSelectionMode, TimeOffRequest, TimeOffShift, TimeOffStatus
from subcover.models.time_slot import DayOfWeek, TimeSlot
from subcover.services.audit import log_activity
from subcover.services.lifecycle import can_transition_coverage_request_status, ensure_transition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScheduledShift:
    date: date
    day_of_week_id: str
    day_name: str
    time_slot_id: str
    time_slot_code: str
    classroom_id: str
    class_group_id: str | None


def _date_range(start: date, end: date):
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def derive_scheduled_shifts(
    db: Session,
    teacher_id: str,
    start_date: date,
    end_date: date | None = None,
) -> list[ScheduledShift]:
    """Expand a teacher's weekly placements over a date range, one shift per date and slot."""
    last_date = end_date or start_date
    rows = db.execute(
        select(TeacherSchedule, DayOfWeek.day_number, DayOfWeek.name, TimeSlot.code, TimeSlot.display_order)
        .join(DayOfWeek, DayOfWeek.id == TeacherSchedule.day_of_week_id)
        .join(TimeSlot, TimeSlot.id == TeacherSchedule.time_slot_id)
        .where(TeacherSchedule.teacher_id == teacher_id)
        # Home-room placements win over floater ones for the same slot.
        .order_by(TimeSlot.display_order, TimeSlot.code, TeacherSchedule.is_floater, TeacherSchedule.id)
    ).all()
    if not rows:
        return []

    by_day_number: dict[int, list[tuple]] = defaultdict(list)
    for schedule, day_number, day_name, code, _order in rows:
        by_day_number[day_number].append((schedule, day_name, code))

    shifts: list[ScheduledShift] = []
    for current in _date_range(start_date, last_date):
        seen_slots: set[str] = set()
        for schedule, day_name, code in by_day_number.get(current.isoweekday(), []):
            if schedule.time_slot_id in seen_slots:
                continue
            seen_slots.add(schedule.time_slot_id)
            shifts.append(
                ScheduledShift(
                    date=current,
                    day_of_week_id=schedule.day_of_week_id,
                    day_name=day_name,
                    time_slot_id=schedule.time_slot_id,
                    time_slot_code=code,
                    classroom_id=schedule.classroom_id,
                    class_group_id=schedule.class_group_id,
                )
            )
    return shifts


def populate_time_off_shifts(db: Session, time_off_request: TimeOffRequest) -> list[TimeOffShift]:
    """Create the absence's shifts from the teacher's schedule when it covers all scheduled shifts."""
    existing = list(
        db.execute(
            select(TimeOffShift).where(TimeOffShift.time_off_request_id == time_off_request.id)
        ).scalars()
    )
    if existing or time_off_request.shift_selection_mode != ShiftSelectionMode.all_scheduled:
        return existing

    created: list[TimeOffShift] = []
    for shift in derive_scheduled_shifts(
        db, time_off_request.teacher_id, time_off_request.start_date, time_off_request.end_date
    ):
        record = TimeOffShift(
            time_off_request_id=time_off_request.id,
            date=shift.date,
            day_of_week_id=shift.day_of_week_id,
            time_slot_id=shift.time_slot_id,
        )
        db.add(record)
        created.append(record)
    db.flush()
    return created


def _active_shift_ids_with_assignment(db: Session, shift_ids: list[str]) -> set[str]:
    if not shift_ids:
        return set()
    return set(
        db.execute(
            select(SubAssignment.coverage_request_shift_id).where(
                SubAssignment.coverage_request_shift_id.in_(shift_ids),
                SubAssignment.status == SubAssignmentStatus.active,
            )
        ).scalars()
    )


def refresh_coverage_request(db: Session, coverage_request: CoverageRequest) -> CoverageRequest:
    """Recount shifts and mark an open request filled once every active shift is covered.

    ``filled`` never moves back to ``open``; uncovered shifts of a filled
    request show up in its coverage summary instead.
    """
    active_ids = list(
        db.execute(
            select(CoverageRequestShift.id).where(
                CoverageRequestShift.coverage_request_id == coverage_request.id,
                CoverageRequestShift.status == CoverageRequestShiftStatus.active,
            )
        ).scalars()
    )
    covered = _active_shift_ids_with_assignment(db, active_ids)
    coverage_request.total_shifts = len(active_ids)
    coverage_request.covered_shifts = len(covered)

    fully_covered = coverage_request.total_shifts > 0 and coverage_request.covered_shifts >= coverage_request.total_shifts
    if (
        fully_covered
        and coverage_request.status == CoverageRequestStatus.open
        and can_transition_coverage_request_status(coverage_request.status, CoverageRequestStatus.filled)
    ):
        coverage_request.status = CoverageRequestStatus.filled
        logger.info("Coverage request %s filled (%d shifts)", coverage_request.id, coverage_request.total_shifts)
    return coverage_request


def _classroom_lookup(db: Session, teacher_id: str) -> dict[tuple[str, str], TeacherSchedule]:
    lookup: dict[tuple[str, str], TeacherSchedule] = {}
    for schedule in db.execute(
        select(TeacherSchedule)
        .where(TeacherSchedule.teacher_id == teacher_id)
        .order_by(TeacherSchedule.is_floater, TeacherSchedule.id)
    ).scalars():
        lookup.setdefault((schedule.day_of_week_id, schedule.time_slot_id), schedule)
    return lookup


def _day_ids_by_number(db: Session) -> dict[int, str]:
    return dict(db.execute(select(DayOfWeek.day_number, DayOfWeek.id)).all())


def ensure_coverage_request(
    db: Session,
    time_off_request: TimeOffRequest,
    *,
    context: SchoolContext | None = None,
) -> CoverageRequest:
    """Return the absence's coverage request, creating it and its shifts on first use."""
    if time_off_request.coverage_request_id:
        existing = db.get(CoverageRequest, time_off_request.coverage_request_id)
        if existing is not None:
            return existing

    if time_off_request.status == TimeOffStatus.cancelled:
        raise AppError(
            "Cannot request coverage for a cancelled time off request",
            status_code=409,
            details={"time_off_request_id": time_off_request.id},
        )

    shifts = populate_time_off_shifts(db, time_off_request)
    coverage_request = CoverageRequest(
        school_id=time_off_request.school_id,
        request_type=CoverageRequestType.time_off,
        source_request_id=time_off_request.id,
        teacher_id=time_off_request.teacher_id,
        start_date=time_off_request.start_date,
        end_date=time_off_request.last_date,
        status=CoverageRequestStatus.open,
    )
    db.add(coverage_request)
    db.flush()

    placements = _classroom_lookup(db, time_off_request.teacher_id)
    day_ids = _day_ids_by_number(db)
    for shift in shifts:
        day_of_week_id = shift.day_of_week_id or day_ids.get(shift.date.isoweekday())
        placement = placements.get((day_of_week_id, shift.time_slot_id)) if day_of_week_id else None
        db.add(
            CoverageRequestShift(
                coverage_request_id=coverage_request.id,
                school_id=time_off_request.school_id,
                date=shift.date,
                day_of_week_id=day_of_week_id,
                time_slot_id=shift.time_slot_id,
                classroom_id=placement.classroom_id if placement is not None else None,
                class_group_id=placement.class_group_id if placement is not None else None,
                time_off_shift_id=shift.id,
            )
        )
    db.flush()

    # Assignments made before the request existed are linked by date and slot.
    for coverage_shift in db.execute(
        select(CoverageRequestShift).where(CoverageRequestShift.coverage_request_id == coverage_request.id)
    ).scalars():
        for assignment in db.execute(
            select(SubAssignment).where(
                SubAssignment.teacher_id == time_off_request.teacher_id,
                SubAssignment.status == SubAssignmentStatus.active,
                SubAssignment.coverage_request_shift_id.is_(None),
                SubAssignment.date == coverage_shift.date,
                SubAssignment.time_slot_id == coverage_shift.time_slot_id,
            )
        ).scalars():
            assignment.coverage_request_shift_id = coverage_shift.id
    db.flush()

    time_off_request.coverage_request_id = coverage_request.id
    refresh_coverage_request(db, coverage_request)
    log_activity(
        db,
        context=context,
        action="created",
        entity_type="coverage_request",
        entity_id=coverage_request.id,
        details={"time_off_request_id": time_off_request.id, "total_shifts": coverage_request.total_shifts},
    )
    return coverage_request


def _cancel_active_assignments(db: Session, shift_ids: list[str]) -> int:
    if not shift_ids:
        return 0
    cancelled = 0
    for assignment in db.execute(
        select(SubAssignment).where(
            SubAssignment.coverage_request_shift_id.in_(shift_ids),
            SubAssignment.status == SubAssignmentStatus.active,
        )
    ).scalars():
        ensure_transition("sub_assignment", assignment.status, SubAssignmentStatus.cancelled)
        assignment.status = SubAssignmentStatus.cancelled
        cancelled += 1
    return cancelled


def cancel_coverage_request_shift(
    db: Session,
    coverage_shift: CoverageRequestShift,
    *,
    context: SchoolContext | None = None,
) -> CoverageRequestShift:
    ensure_transition("coverage_request_shift", coverage_shift.status, CoverageRequestShiftStatus.cancelled)
    if coverage_shift.status == CoverageRequestShiftStatus.cancelled:
        return coverage_shift
    coverage_shift.status = CoverageRequestShiftStatus.cancelled
    cancelled_assignments = _cancel_active_assignments(db, [coverage_shift.id])
    db.flush()

    coverage_request = db.get(CoverageRequest, coverage_shift.coverage_request_id)
    if coverage_request is not None:
        refresh_coverage_request(db, coverage_request)
    log_activity(
        db,
        context=context,
        action="cancelled",
        entity_type="coverage_request_shift",
        entity_id=coverage_shift.id,
        details={"cancelled_assignments": cancelled_assignments},
    )
    return coverage_shift


def update_coverage_request_status(
    db: Session,
    coverage_request: CoverageRequest,
    new_status: CoverageRequestStatus,
    *,
    context: SchoolContext | None = None,
) -> CoverageRequest:
    current = coverage_request.status
    ensure_transition("coverage_request", current, new_status)
    if current == new_status:
        return coverage_request

    coverage_request.status = new_status
    if new_status == CoverageRequestStatus.cancelled:
        shifts = list(
            db.execute(
                select(CoverageRequestShift).where(
                    CoverageRequestShift.coverage_request_id == coverage_request.id,
                    CoverageRequestShift.status == CoverageRequestShiftStatus.active,
                )
            ).scalars()
        )
        for shift in shifts:
            ensure_transition("coverage_request_shift", shift.status, CoverageRequestShiftStatus.cancelled)
            shift.status = CoverageRequestShiftStatus.cancelled
        _cancel_active_assignments(db, [shift.id for shift in shifts])
        coverage_request.total_shifts = 0
        coverage_request.covered_shifts = 0

    log_activity(
        db,
        context=context,
        action="status_changed",
        entity_type="coverage_request",
        entity_id=coverage_request.id,
        details={"from": current.value, "to": new_status.value},
    )
    return coverage_request


def update_time_off_status(
    db: Session,
    time_off_request: TimeOffRequest,
    new_status: TimeOffStatus,
    *,
    context: SchoolContext | None = None,
) -> TimeOffRequest:
    """Move an absence to ``new_status``; cancelling it cancels its coverage too."""
    current = time_off_request.status
    ensure_transition("time_off_request", current, new_status)
    if current == new_status:
        return time_off_request

    time_off_request.status = new_status
    if new_status == TimeOffStatus.cancelled and time_off_request.coverage_request_id:
        coverage_request = db.get(CoverageRequest, time_off_request.coverage_request_id)
        if coverage_request is not None and coverage_request.status != CoverageRequestStatus.cancelled:
            update_coverage_request_status(db, coverage_request, CoverageRequestStatus.cancelled, context=context)

    log_activity(
        db,
        context=context,
        action="status_changed",
        entity_type="time_off_request",
        entity_id=time_off_request.id,
        details={"from": current.value, "to": new_status.value},
    )
    return time_off_request
