import pytest
from sqlalchemy import select

from subcover.core.context import SchoolContext
from subcover.core.exceptions import (
    AppError,
    AssignmentConflictError,
    RequestValidationFailed,
    ResourceNotFoundError,
)
from subcover.models.activity_log import ActivityLog
from subcover.models.coverage_request import CoverageRequestShift, CoverageRequestStatus
from subcover.models.schedule import TeacherSchedule
from subcover.models.staff import Staff
from subcover.models.sub_assignment import SubAssignment, SubAssignmentStatus
from subcover.models.substitute_contact import ResponseStatus, SubstituteContact
from subcover.models.time_off import TimeOffRequest
from subcover.services.assignments import UnassignScope, assign_shifts, unassign_shifts
from subcover.services.coverage_requests import ensure_coverage_request

from conftest import MONDAY


@pytest.fixture()
def coverage(db, absence):
    coverage_request = ensure_coverage_request(db, absence)
    db.commit()
    shifts = (
        db.execute(
            select(CoverageRequestShift)
            .where(CoverageRequestShift.coverage_request_id == coverage_request.id)
            .order_by(CoverageRequestShift.date)
        )
        .scalars()
        .all()
    )
    return coverage_request, shifts


def test_assign_all_shifts_fills_request(db, school, coverage):
    coverage_request, shifts = coverage

    assignments = assign_shifts(
        db,
        coverage_request_id=coverage_request.id,
        sub_id=school.sub_id,
        shift_ids=[shift.id for shift in shifts],
        context=SchoolContext(school_id=school.school_id, actor_id="director-1"),
        notes="Confirmed by phone",
    )
    db.commit()

    assert len(assignments) == 3
    assert {assignment.notes for assignment in assignments} == {"Confirmed by phone"}
    assert {assignment.teacher_id for assignment in assignments} == {school.teacher_id}
    assert coverage_request.status is CoverageRequestStatus.filled
    assert coverage_request.covered_shifts == 3

    contact = db.execute(select(SubstituteContact)).scalar_one()
    assert contact.sub_id == school.sub_id
    assert contact.response_status is ResponseStatus.confirmed
    assert contact.is_contacted is True

    log = db.execute(select(ActivityLog).where(ActivityLog.action == "assigned")).scalar_one()
    assert log.actor_id == "director-1"


def test_partial_assignment_keeps_request_open(db, school, coverage):
    coverage_request, shifts = coverage

    assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[shifts[0].id])
    db.commit()

    assert coverage_request.status is CoverageRequestStatus.open
    assert coverage_request.covered_shifts == 1
    assert coverage_request.total_shifts == 3


def test_second_sub_on_same_shift_conflicts(db, school, coverage):
    coverage_request, shifts = coverage
    assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[shifts[0].id])
    db.commit()

    with pytest.raises(AssignmentConflictError) as excinfo:
        assign_shifts(
            db,
            coverage_request_id=coverage_request.id,
            sub_id=school.other_sub_id,
            shift_ids=[shifts[0].id, shifts[1].id],
        )
    assert excinfo.value.status_code == 409
    assert excinfo.value.details == {"shift_ids": [shifts[0].id]}


def test_assign_validation_errors(db, school, coverage):
    coverage_request, shifts = coverage

    with pytest.raises(RequestValidationFailed):
        assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[])
    with pytest.raises(ResourceNotFoundError):
        assign_shifts(db, coverage_request_id="missing", sub_id=school.sub_id, shift_ids=[shifts[0].id])
    with pytest.raises(ResourceNotFoundError):
        assign_shifts(db, coverage_request_id=coverage_request.id, sub_id="missing", shift_ids=[shifts[0].id])
    with pytest.raises(AppError) as excinfo:
        assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=["unknown"])
    assert excinfo.value.status_code == 404


def test_assign_rejects_other_school(db, school, coverage):
    coverage_request, shifts = coverage
    with pytest.raises(AppError) as excinfo:
        assign_shifts(
            db,
            coverage_request_id=coverage_request.id,
            sub_id=school.sub_id,
            shift_ids=[shifts[0].id],
            context=SchoolContext(school_id="school-2"),
        )
    assert excinfo.value.status_code == 403


def test_unassign_single_keeps_filled_status(db, school, absence, coverage):
    coverage_request, shifts = coverage
    assignments = assign_shifts(
        db,
        coverage_request_id=coverage_request.id,
        sub_id=school.sub_id,
        shift_ids=[shift.id for shift in shifts],
    )
    db.commit()

    removed = unassign_shifts(
        db,
        absence_id=absence.id,
        sub_id=school.sub_id,
        scope=UnassignScope.single,
        assignment_id=assignments[0].id,
    )
    db.commit()

    assert [assignment.id for assignment in removed] == [assignments[0].id]
    assert removed[0].status is SubAssignmentStatus.cancelled
    assert coverage_request.status is CoverageRequestStatus.filled
    assert coverage_request.covered_shifts == 2

    with pytest.raises(AssignmentConflictError, match="no longer active"):
        unassign_shifts(
            db,
            absence_id=absence.id,
            sub_id=school.sub_id,
            scope=UnassignScope.single,
            assignment_id=assignments[0].id,
        )


def test_unassign_all_for_absence(db, school, absence, coverage):
    coverage_request, shifts = coverage
    assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[shifts[0].id])
    assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.other_sub_id, shift_ids=[shifts[1].id])
    db.commit()

    removed = unassign_shifts(db, absence_id=absence.id, sub_id=school.sub_id, scope=UnassignScope.all_for_absence)
    db.commit()

    assert len(removed) == 1
    statuses = dict(db.execute(select(SubAssignment.sub_id, SubAssignment.status)).all())
    assert statuses == {
        school.sub_id: SubAssignmentStatus.cancelled,
        school.other_sub_id: SubAssignmentStatus.active,
    }
    assert coverage_request.covered_shifts == 1

    # Nothing left for that substitute.
    assert unassign_shifts(db, absence_id=absence.id, sub_id=school.sub_id, scope=UnassignScope.all_for_absence) == []


def test_unassign_validation(db, school, absence):
    with pytest.raises(RequestValidationFailed):
        unassign_shifts(db, absence_id=absence.id, sub_id=school.sub_id, scope=UnassignScope.single)
    with pytest.raises(ResourceNotFoundError):
        unassign_shifts(db, absence_id="missing", sub_id=school.sub_id, scope=UnassignScope.all_for_absence)


def test_sub_cannot_cover_two_classrooms_in_the_same_slot(db, school, coverage):
    coverage_request, shifts = coverage
    colleague = Staff(school_id=school.school_id, first_name="Grace", last_name="Hopper", is_teacher=True)
    db.add(colleague)
    db.flush()
    db.add(
        TeacherSchedule(
            school_id=school.school_id,
            teacher_id=colleague.id,
            day_of_week_id=school.day_ids["Monday"],
            time_slot_id=school.am_slot_id,
            classroom_id=school.toddler_room_id,
        )
    )
    colleague_absence = TimeOffRequest(
        school_id=school.school_id,
        teacher_id=colleague.id,
        start_date=MONDAY,
        end_date=MONDAY,
    )
    db.add(colleague_absence)
    db.flush()
    colleague_request = ensure_coverage_request(db, colleague_absence)
    db.commit()
    colleague_shift = db.execute(
        select(CoverageRequestShift).where(CoverageRequestShift.coverage_request_id == colleague_request.id)
    ).scalar_one()

    monday_am = next(shift for shift in shifts if shift.date == MONDAY and shift.time_slot_id == school.am_slot_id)
    assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[monday_am.id])
    db.commit()

    with pytest.raises(AssignmentConflictError) as excinfo:
        assign_shifts(
            db,
            coverage_request_id=colleague_request.id,
            sub_id=school.sub_id,
            shift_ids=[colleague_shift.id],
        )
    assert excinfo.value.details == {"shift_ids": [colleague_shift.id]}

    # Another substitute can still take the slot.
    assign_shifts(db, coverage_request_id=colleague_request.id, sub_id=school.other_sub_id, shift_ids=[colleague_shift.id])
    db.commit()
    active = db.execute(
        select(SubAssignment.sub_id).where(
            SubAssignment.date == MONDAY,
            SubAssignment.time_slot_id == school.am_slot_id,
            SubAssignment.status == SubAssignmentStatus.active,
        )
    ).scalars().all()
    assert sorted(active) == sorted([school.sub_id, school.other_sub_id])


def test_cancelled_assignment_frees_the_slot(db, school, absence, coverage):
    coverage_request, shifts = coverage
    assignments = assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[shifts[0].id])
    db.commit()
    unassign_shifts(
        db,
        absence_id=absence.id,
        sub_id=school.sub_id,
        scope=UnassignScope.single,
        assignment_id=assignments[0].id,
    )
    db.commit()

    again = assign_shifts(db, coverage_request_id=coverage_request.id, sub_id=school.sub_id, shift_ids=[shifts[0].id])
    assert len(again) == 1
