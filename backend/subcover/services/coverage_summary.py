"""Per-absence coverage aggregation.

Every shift of an absence is one of three variants: ``UncoveredShift``,
``PartiallyCoveredShift`` or ``FullyCoveredShift``. The aggregator counts them,
orders them for display and produces the compact segment list used to draw a
coverage bar.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import ClassVar, TypeVar, Union

from sqlalchemy import select
from sqlalchemy.orm import Session

from subcover.models.classroom import ClassGroup, Classroom
from subcover.models.coverage_request import CoverageRequestShift, CoverageRequestShiftStatus
from subcover.models.staff import Staff
from subcover.models.sub_assignment import SubAssignment, SubAssignmentStatus
from subcover.models.time_off import TimeOffRequest, TimeOffShift
from subcover.models.time_slot import DayOfWeek, TimeSlot


class ShiftCoverageStatus(str, Enum):
    uncovered = "uncovered"
    partially_covered = "partially_covered"
    fully_covered = "fully_covered"


@dataclass(frozen=True)
class _CoverageShiftBase:
    id: str
    date: date
    time_slot_code: str
    day_name: str = ""
    classroom_name: str | None = None
    class_name: str | None = None


@dataclass(frozen=True)
class UncoveredShift(_CoverageShiftBase):
    status: ClassVar[ShiftCoverageStatus] = ShiftCoverageStatus.uncovered


@dataclass(frozen=True)
class PartiallyCoveredShift(_CoverageShiftBase):
    sub_name: str | None = None
    status: ClassVar[ShiftCoverageStatus] = ShiftCoverageStatus.partially_covered


@dataclass(frozen=True)
class FullyCoveredShift(_CoverageShiftBase):
    sub_name: str | None = None
    status: ClassVar[ShiftCoverageStatus] = ShiftCoverageStatus.fully_covered


ShiftCoverage = Union[UncoveredShift, PartiallyCoveredShift, FullyCoveredShift]


@dataclass(frozen=True)
class CoverageSegment:
    id: str
    status: ShiftCoverageStatus


@dataclass
class ShiftSummary:
    total: int = 0
    uncovered: int = 0
    partially_covered: int = 0
    fully_covered: int = 0
    shift_details: list[ShiftCoverage] = field(default_factory=list)
    shift_details_sorted: list[ShiftCoverage] = field(default_factory=list)
    coverage_segments: list[CoverageSegment] = field(default_factory=list)


@dataclass(frozen=True)
class ShiftCounts:
    past: int
    upcoming: int


_Dated = TypeVar("_Dated")


def coverage_status_of(shift: ShiftCoverage) -> ShiftCoverageStatus:
    if isinstance(shift, UncoveredShift):
        return ShiftCoverageStatus.uncovered
    if isinstance(shift, PartiallyCoveredShift):
        return ShiftCoverageStatus.partially_covered
    if isinstance(shift, FullyCoveredShift):
        return ShiftCoverageStatus.fully_covered
    raise TypeError(f"Not a shift coverage record: {type(shift).__name__}")


def sort_coverage_shifts(shifts: Iterable[ShiftCoverage]) -> list[ShiftCoverage]:
    # Time slot codes are mnemonics (AM, EM, PM), so the tie-break is lexicographic.
    return sorted(shifts, key=lambda shift: (shift.date, shift.time_slot_code))


def build_coverage_segments(shifts: Iterable[ShiftCoverage]) -> list[CoverageSegment]:
    return [CoverageSegment(id=shift.id, status=coverage_status_of(shift)) for shift in shifts]


def build_shift_summary(shifts: Sequence[ShiftCoverage]) -> ShiftSummary:
    summary = ShiftSummary(shift_details=list(shifts))
    for shift in shifts:
        status = coverage_status_of(shift)
        summary.total += 1
        if status is ShiftCoverageStatus.uncovered:
            summary.uncovered += 1
        elif status is ShiftCoverageStatus.partially_covered:
            summary.partially_covered += 1
        else:
            summary.fully_covered += 1

    summary.shift_details_sorted = sort_coverage_shifts(shifts)
    summary.coverage_segments = build_coverage_segments(summary.shift_details_sorted)
    return summary


def filter_visible_shifts(shifts: Iterable[_Dated], include_past: bool, today: date | None = None) -> list[_Dated]:
    if include_past:
        return list(shifts)
    cutoff = today or date.today()
    return [shift for shift in shifts if shift.date >= cutoff]


def compute_shift_counts(shifts: Iterable[ShiftCoverage], today: date | None = None) -> ShiftCounts:
    cutoff = today or date.today()
    past = 0
    upcoming = 0
    for shift in shifts:
        if shift.date < cutoff:
            past += 1
        else:
            upcoming += 1
    return ShiftCounts(past=past, upcoming=upcoming)


@dataclass(frozen=True)
class AssignmentCoverage:
    """What the aggregator needs to know about one active assignment."""

    sub_name: str
    is_partial: bool


def classify_shift(
    *,
    shift_id: str,
    shift_date: date,
    time_slot_code: str,
    assignments: Sequence[AssignmentCoverage],
    day_name: str = "",
    classroom_name: str | None = None,
    class_name: str | None = None,
) -> ShiftCoverage:
    """Pick the variant for a shift from its active assignments.

    A full-shift assignment covers the shift; partial assignments alone only
    partially cover it.
    """
    common = {
        "id": shift_id,
        "date": shift_date,
        "time_slot_code": time_slot_code,
        "day_name": day_name or shift_date.strftime("%A"),
        "classroom_name": classroom_name,
        "class_name": class_name,
    }
    full = [item for item in assignments if not item.is_partial]
    if full:
        return FullyCoveredShift(sub_name=full[0].sub_name, **common)
    if assignments:
        return PartiallyCoveredShift(sub_name=assignments[0].sub_name, **common)
    return UncoveredShift(**common)


def load_absence_coverage(db: Session, time_off_request: TimeOffRequest) -> list[ShiftCoverage]:
    """Build coverage records for every shift of an absence that still needs covering.

    Assignments are matched to a shift through its coverage-request shift when
    one exists, otherwise by date and time slot.
    """
    shift_rows = db.execute(
        select(TimeOffShift, TimeSlot.code, DayOfWeek.name)
        .join(TimeSlot, TimeSlot.id == TimeOffShift.time_slot_id)
        .outerjoin(DayOfWeek, DayOfWeek.id == TimeOffShift.day_of_week_id)
        .where(TimeOffShift.time_off_request_id == time_off_request.id)
    ).all()
    if not shift_rows:
        return []

    coverage_shifts: dict[str, CoverageRequestShift] = {}
    if time_off_request.coverage_request_id:
        for coverage_shift in db.execute(
            select(CoverageRequestShift).where(
                CoverageRequestShift.coverage_request_id == time_off_request.coverage_request_id
            )
        ).scalars():
            if coverage_shift.time_off_shift_id:
                coverage_shifts[coverage_shift.time_off_shift_id] = coverage_shift

    classroom_ids = {item.classroom_id for item in coverage_shifts.values() if item.classroom_id}
    classroom_names: dict[str, str] = {}
    if classroom_ids:
        classroom_names = dict(
            db.execute(select(Classroom.id, Classroom.name).where(Classroom.id.in_(classroom_ids))).all()
        )
    class_group_ids = {item.class_group_id for item in coverage_shifts.values() if item.class_group_id}
    class_names: dict[str, str] = {}
    if class_group_ids:
        class_names = dict(
            db.execute(select(ClassGroup.id, ClassGroup.name).where(ClassGroup.id.in_(sorted(class_group_ids)))).all()
        )

    assignment_rows = db.execute(
        select(SubAssignment, Staff)
        .join(Staff, Staff.id == SubAssignment.sub_id)
        .where(
            SubAssignment.teacher_id == time_off_request.teacher_id,
            SubAssignment.status == SubAssignmentStatus.active,
            SubAssignment.date >= time_off_request.start_date,
            SubAssignment.date <= time_off_request.last_date,
        )
    ).all()
    by_coverage_shift: dict[str, list[tuple[str, AssignmentCoverage]]] = defaultdict(list)
    by_slot: dict[tuple[date, str], list[tuple[str, AssignmentCoverage]]] = defaultdict(list)
    for assignment, sub in assignment_rows:
        entry = (assignment.id, AssignmentCoverage(sub_name=sub.full_name, is_partial=assignment.is_partial))
        if assignment.coverage_request_shift_id:
            by_coverage_shift[assignment.coverage_request_shift_id].append(entry)
        by_slot[(assignment.date, assignment.time_slot_id)].append(entry)

    records: list[ShiftCoverage] = []
    for time_off_shift, code, day_name in shift_rows:
        coverage_shift = coverage_shifts.get(time_off_shift.id)
        if coverage_shift is not None and coverage_shift.status == CoverageRequestShiftStatus.cancelled:
            continue

        matched: dict[str, AssignmentCoverage] = {}
        if coverage_shift is not None:
            matched.update(by_coverage_shift.get(coverage_shift.id, []))
        matched.update(by_slot.get((time_off_shift.date, time_off_shift.time_slot_id), []))

        classroom_name = None
        if coverage_shift is not None and coverage_shift.classroom_id:
            classroom_name = classroom_names.get(coverage_shift.classroom_id)
        class_name = None
        if coverage_shift is not None and coverage_shift.class_group_id:
            class_name = class_names.get(coverage_shift.class_group_id)

        records.append(
            classify_shift(
                shift_id=time_off_shift.id,
                shift_date=time_off_shift.date,
                time_slot_code=code,
                assignments=list(matched.values()),
                day_name=day_name or "",
                classroom_name=classroom_name,
                class_name=class_name,
            )
        )
    return records
