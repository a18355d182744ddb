import pytest

from subcover.core.context import SchoolContext
from subcover.models.schedule import ScheduleCell, ScheduleCellClassGroup
from subcover.services.baseline_usage import (
    BASELINE_USAGE_CHECKS,
    is_class_group_used_in_baseline_schedule,
    is_classroom_used_in_baseline_schedule,
    is_staff_used_in_baseline_schedule,
    is_time_slot_used_in_baseline_schedule,
)


class ExplodingSession:
    def execute(self, *args, **kwargs):
        raise AssertionError("no query expected without a school")


@pytest.mark.parametrize("check", list(BASELINE_USAGE_CHECKS.values()))
def test_unresolved_school_skips_the_query(check):
    assert check(ExplodingSession(), "entity-1") is False
    assert check(ExplodingSession(), "entity-1", context=SchoolContext()) is False


@pytest.fixture()
def infant_cell(db, school):
    cell = ScheduleCell(
        school_id=school.school_id,
        classroom_id=school.infant_room_id,
        day_of_week_id=school.day_ids["Monday"],
        time_slot_id=school.am_slot_id,
    )
    db.add(cell)
    db.flush()
    db.add(
        ScheduleCellClassGroup(
            school_id=school.school_id,
            schedule_cell_id=cell.id,
            class_group_id=school.infants_group_id,
        )
    )
    db.commit()
    return cell


def test_staff_usage(db, school):
    context = SchoolContext(school_id=school.school_id)
    assert is_staff_used_in_baseline_schedule(db, school.teacher_id, context=context) is True
    assert is_staff_used_in_baseline_schedule(db, school.sub_id, context=context) is False


def test_explicit_school_overrides_context(db, school):
    context = SchoolContext(school_id="school-2")
    assert is_staff_used_in_baseline_schedule(db, school.teacher_id, context=context) is False
    assert is_staff_used_in_baseline_schedule(db, school.teacher_id, context=context, school_id=school.school_id)


def test_active_cell_usage(db, school, infant_cell):
    context = SchoolContext(school_id=school.school_id)

    assert is_classroom_used_in_baseline_schedule(db, school.infant_room_id, context=context) is True
    assert is_classroom_used_in_baseline_schedule(db, school.toddler_room_id, context=context) is False
    assert is_time_slot_used_in_baseline_schedule(db, school.am_slot_id, context=context) is True
    assert is_time_slot_used_in_baseline_schedule(db, school.pm_slot_id, context=context) is False
    assert is_class_group_used_in_baseline_schedule(db, school.infants_group_id, context=context) is True


def test_inactive_cell_is_not_usage(db, school, infant_cell):
    infant_cell.is_active = False
    db.commit()
    context = SchoolContext(school_id=school.school_id)

    assert is_classroom_used_in_baseline_schedule(db, school.infant_room_id, context=context) is False
    assert is_time_slot_used_in_baseline_schedule(db, school.am_slot_id, context=context) is False
    assert is_class_group_used_in_baseline_schedule(db, school.infants_group_id, context=context) is False
