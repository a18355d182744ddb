"""Is a master-data entity still referenced by the baseline weekly schedule?

These checks gate deactivation of staff, classrooms, class groups and time
slots. Without a resolvable school they answer ``False`` without querying, so
the caller proceeds without a warning.
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.orm import Session

from subcover.core.config import get_settings
from subcover.core.context import SchoolContext, resolve_school_id
from subcover.models.schedule import ScheduleCell, ScheduleCellClassGroup, TeacherSchedule


def _exists(db: Session, query) -> bool:
    return db.execute(query.limit(1)).first() is not None


def is_staff_used_in_baseline_schedule(
    db: Session,
    staff_id: str,
    *,
    context: SchoolContext | None = None,
    school_id: str | None = None,
) -> bool:
    resolved = resolve_school_id(context, school_id)
    if not resolved:
        return False
    return _exists(
        db,
        select(TeacherSchedule.id).where(
            TeacherSchedule.school_id == resolved,
            TeacherSchedule.teacher_id == staff_id,
        ),
    )


def is_classroom_used_in_baseline_schedule(
    db: Session,
    classroom_id: str,
    *,
    context: SchoolContext | None = None,
    school_id: str | None = None,
) -> bool:
    resolved = resolve_school_id(context, school_id)
    if not resolved:
        return False
    return _exists(
        db,
        select(ScheduleCell.id).where(
            ScheduleCell.school_id == resolved,
            ScheduleCell.classroom_id == classroom_id,
            ScheduleCell.is_active.is_(True),
        ),
    )


def is_class_group_used_in_baseline_schedule(
    db: Session,
    class_group_id: str,
    *,
    context: SchoolContext | None = None,
    school_id: str | None = None,
) -> bool:
    resolved = resolve_school_id(context, school_id)
    if not resolved:
        return False

    # Class groups hang off cells through the join table.
    cell_ids = [
        cell_id
        for cell_id in db.execute(
            select(ScheduleCellClassGroup.schedule_cell_id)
            .where(
                ScheduleCellClassGroup.school_id == resolved,
                ScheduleCellClassGroup.class_group_id == class_group_id,
            )
            .limit(get_settings().class_group_usage_scan_limit)
        ).scalars()
        if cell_id
    ]
    if not cell_ids:
        return False

    return _exists(
        db,
        select(ScheduleCell.id).where(
            ScheduleCell.school_id == resolved,
            ScheduleCell.is_active.is_(True),
            ScheduleCell.id.in_(cell_ids),
        ),
    )


def is_time_slot_used_in_baseline_schedule(
    db: Session,
    time_slot_id: str,
    *,
    context: SchoolContext | None = None,
    school_id: str | None = None,
) -> bool:
    resolved = resolve_school_id(context, school_id)
    if not resolved:
        return False
    return _exists(
        db,
        select(ScheduleCell.id).where(
            ScheduleCell.school_id == resolved,
            ScheduleCell.time_slot_id == time_slot_id,
            ScheduleCell.is_active.is_(True),
        ),
    )


BASELINE_USAGE_CHECKS = {
    "staff": is_staff_used_in_baseline_schedule,
    "classroom": is_classroom_used_in_baseline_schedule,
    "class_group": is_class_group_used_in_baseline_schedule,
    "time_slot": is_time_slot_used_in_baseline_schedule,
}
