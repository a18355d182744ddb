"""Double-booking detection for recurring teacher placements.

A teacher placed in one classroom for a day and time slot conflicts with a
proposed placement in a different classroom for the same day and slot, unless
the existing placement is a floater. Floaters are meant to span classrooms and
never take part in a conflict.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from subcover.core.context import SchoolContext, resolve_school_id
from subcover.core.exceptions import RequestValidationFailed, ResourceNotFoundError
from subcover.models.classroom import Classroom
from subcover.models.schedule import TeacherSchedule
from subcover.models.staff import Staff
from subcover.models.time_slot import DayOfWeek, TimeSlot
from subcover.services.audit import log_activity

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConflictCheck:
    teacher_id: str
    day_of_week_id: str
    time_slot_id: str
    classroom_id: str


@dataclass(frozen=True)
class ScheduleConflict:
    teacher_id: str
    teacher_name: str
    conflicting_schedule_id: str
    conflicting_classroom_id: str
    conflicting_classroom_name: str
    day_of_week_id: str
    day_of_week_name: str
    time_slot_id: str
    time_slot_code: str
    target_classroom_id: str


class ConflictResolution(str, Enum):
    remove_other = "remove_other"
    cancel = "cancel"
    mark_floater = "mark_floater"


@dataclass(frozen=True)
class ResolveConflict:
    teacher_id: str
    day_of_week_id: str
    time_slot_id: str
    resolution: ConflictResolution
    target_classroom_id: str
    target_class_group_id: str | None = None


@dataclass
class ResolutionResult:
    created: TeacherSchedule | None = None
    deleted: list[str] = field(default_factory=list)
    updated: list[TeacherSchedule] = field(default_factory=list)


def _placement_snapshot(schedule: TeacherSchedule) -> dict:
    return {
        "classroom_id": schedule.classroom_id,
        "class_group_id": schedule.class_group_id,
        "is_floater": schedule.is_floater,
    }


class ScheduleConflictService:
    def __init__(self, db: Session, *, school_id: str | None = None):
        self.db = db
        self.school_id = school_id

    def _conflicting_schedules_query(self, check: ConflictCheck):
        query = (
            select(TeacherSchedule, Staff, Classroom.name, DayOfWeek.name, TimeSlot.code)
            .outerjoin(Staff, Staff.id == TeacherSchedule.teacher_id)
            .outerjoin(Classroom, Classroom.id == TeacherSchedule.classroom_id)
            .outerjoin(DayOfWeek, DayOfWeek.id == TeacherSchedule.day_of_week_id)
            .outerjoin(TimeSlot, TimeSlot.id == TeacherSchedule.time_slot_id)
            .where(
                TeacherSchedule.teacher_id == check.teacher_id,
                TeacherSchedule.day_of_week_id == check.day_of_week_id,
                TeacherSchedule.time_slot_id == check.time_slot_id,
                TeacherSchedule.classroom_id != check.classroom_id,
                TeacherSchedule.is_floater.is_(False),
            )
            .order_by(TeacherSchedule.created_at, TeacherSchedule.id)
        )
        if self.school_id:
            query = query.where(TeacherSchedule.school_id == self.school_id)
        return query

    def detect_conflicts(self, checks: Iterable[ConflictCheck]) -> list[ScheduleConflict]:
        # A failing lookup aborts the whole batch; callers never see partial results.
        conflicts: list[ScheduleConflict] = []
        for check in checks:
            rows = self.db.execute(self._conflicting_schedules_query(check)).all()
            for schedule, teacher, classroom_name, day_name, slot_code in rows:
                conflicts.append(
                    ScheduleConflict(
                        teacher_id=check.teacher_id,
                        teacher_name=teacher.full_name if teacher is not None else "Unknown",
                        conflicting_schedule_id=schedule.id,
                        conflicting_classroom_id=schedule.classroom_id,
                        conflicting_classroom_name=classroom_name or "Unknown",
                        day_of_week_id=check.day_of_week_id,
                        day_of_week_name=day_name or "Unknown",
                        time_slot_id=check.time_slot_id,
                        time_slot_code=slot_code or "Unknown",
                        target_classroom_id=check.classroom_id,
                    )
                )
        return conflicts

    def _new_placement(self, request: ResolveConflict, *, school_id: str, is_floater: bool) -> TeacherSchedule:
        schedule = TeacherSchedule(
            school_id=school_id,
            teacher_id=request.teacher_id,
            day_of_week_id=request.day_of_week_id,
            time_slot_id=request.time_slot_id,
            classroom_id=request.target_classroom_id,
            class_group_id=request.target_class_group_id,
            is_floater=is_floater,
        )
        self.db.add(schedule)
        self.db.flush()
        return schedule

    def resolve(self, request: ResolveConflict, *, context: SchoolContext | None = None) -> ResolutionResult:
        check = ConflictCheck(
            teacher_id=request.teacher_id,
            day_of_week_id=request.day_of_week_id,
            time_slot_id=request.time_slot_id,
            classroom_id=request.target_classroom_id,
        )
        conflicting = list(self.db.execute(self._conflicting_schedules_query(check)).scalars())
        if not conflicting:
            raise RequestValidationFailed("No conflicting schedules found")

        school_id = resolve_school_id(context, self.school_id)
        if not school_id:
            teacher = self.db.get(Staff, request.teacher_id)
            if teacher is None:
                raise ResourceNotFoundError("Staff", request.teacher_id)
            school_id = teacher.school_id

        reason = f"conflict_resolution_{request.resolution.value}"
        result = ResolutionResult()
        placement = {
            "added_to_classroom_id": request.target_classroom_id,
            "added_to_day_id": request.day_of_week_id,
            "added_to_time_slot_id": request.time_slot_id,
        }

        if request.resolution is ConflictResolution.remove_other:
            for schedule in conflicting:
                log_activity(
                    self.db,
                    context=context,
                    action="deleted",
                    entity_type="teacher_schedule",
                    entity_id=schedule.id,
                    reason=reason,
                    details={
                        "teacher_id": request.teacher_id,
                        "before": _placement_snapshot(schedule),
                        "removed_from_classroom_id": schedule.classroom_id,
                        "removed_from_day_id": request.day_of_week_id,
                        "removed_from_time_slot_id": request.time_slot_id,
                    },
                )
                result.deleted.append(schedule.id)
                self.db.delete(schedule)
            self.db.flush()
            result.created = self._new_placement(request, school_id=school_id, is_floater=False)

        elif request.resolution is ConflictResolution.mark_floater:
            for schedule in conflicting:
                before = _placement_snapshot(schedule)
                schedule.is_floater = True
                result.updated.append(schedule)
                log_activity(
                    self.db,
                    context=context,
                    action="updated",
                    entity_type="teacher_schedule",
                    entity_id=schedule.id,
                    reason=reason,
                    details={
                        "teacher_id": request.teacher_id,
                        "before": before,
                        "after": _placement_snapshot(schedule),
                    },
                )
            result.created = self._new_placement(request, school_id=school_id, is_floater=True)

        else:
            log_activity(
                self.db,
                context=context,
                action="conflict_resolved",
                entity_type="teacher_schedule",
                reason=reason,
                details={
                    "teacher_id": request.teacher_id,
                    "canceled": True,
                    "would_have_added_to_class_group_id": request.target_class_group_id,
                    **placement,
                },
            )
            return result

        log_activity(
            self.db,
            context=context,
            action="created",
            entity_type="teacher_schedule",
            entity_id=result.created.id,
            reason=reason,
            details={"teacher_id": request.teacher_id, "after": _placement_snapshot(result.created), **placement},
        )
        logger.info(
            "Resolved schedule conflict for teacher %s with %s (%d removed, %d marked floater)",
            request.teacher_id,
            request.resolution.value,
            len(result.deleted),
            len(result.updated),
        )
        return result


def check_schedule_conflicts(
    db: Session,
    checks: Iterable[ConflictCheck],
    *,
    school_id: str | None = None,
) -> list[ScheduleConflict]:
    return ScheduleConflictService(db, school_id=school_id).detect_conflicts(checks)


def resolve_schedule_conflict(
    db: Session,
    request: ResolveConflict,
    *,
    context: SchoolContext | None = None,
    school_id: str | None = None,
) -> ResolutionResult:
    return ScheduleConflictService(db, school_id=resolve_school_id(context, school_id)).resolve(request, context=context)
