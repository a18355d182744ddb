from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from subcover.models.sub_assignment import SubAssignmentStatus
from subcover.models.substitute_contact import ResponseStatus
from subcover.services.absence_status import BadgeTone, CoverageStatus
from subcover.services.coverage_summary import ShiftCoverageStatus
from subcover.services.shift_chips import ShiftChipStatus


class ShiftOverridesResolve(BaseModel):
    # Optional so that a missing id is reported as 400 by the handler.
    coverage_request_id: str | None = None
    selected_shift_keys: list[str] = Field(default_factory=list)
    override_shift_keys: list[str] = Field(default_factory=list)
    available_shift_keys: list[str] = Field(default_factory=list)
    unavailable_shift_keys: list[str] = Field(default_factory=list)


class ShiftOverrideOut(BaseModel):
    coverage_request_shift_id: str
    selected: bool
    override_availability: bool


class ShiftOverridesResolved(BaseModel):
    shift_overrides: list[ShiftOverrideOut]
    selected_shift_ids: list[str]


class ShiftOverrideItem(BaseModel):
    coverage_request_shift_id: str = Field(min_length=1, max_length=36)
    selected: bool = False
    override_availability: bool = False


class ShiftOverridesSave(BaseModel):
    shift_overrides: list[ShiftOverrideItem] = Field(default_factory=list)
    expected_version: int | None = Field(default=None, ge=1)
    response_status: ResponseStatus | None = None
    notes: str | None = Field(default=None, max_length=2000)


class SubstituteContactOut(BaseModel):
    id: str
    coverage_request_id: str
    sub_id: str
    response_status: ResponseStatus
    is_contacted: bool
    contacted_at: datetime | None = None
    notes: str | None = None
    version: int
    shift_overrides: list[ShiftOverrideOut] = Field(default_factory=list)

    model_config = {"from_attributes": True}


class AssignShiftsRequest(BaseModel):
    coverage_request_id: str | None = None
    sub_id: str | None = None
    selected_shift_ids: list[str] = Field(default_factory=list)
    notes: str | None = Field(default=None, max_length=1000)


class SubAssignmentOut(BaseModel):
    id: str
    sub_id: str
    teacher_id: str
    coverage_request_shift_id: str | None = None
    date: date
    time_slot_id: str
    classroom_id: str | None = None
    is_partial: bool
    status: SubAssignmentStatus

    model_config = {"from_attributes": True}


class AssignShiftsResponse(BaseModel):
    success: bool = True
    assignments_created: int
    assignments: list[SubAssignmentOut]


class UnassignShiftsRequest(BaseModel):
    absence_id: str | None = None
    sub_id: str | None = None
    scope: Literal["single", "all_for_absence"] | None = None
    assignment_id: str | None = None


class UnassignShiftsResponse(BaseModel):
    success: bool = True
    removed_count: int
    assignment_ids: list[str]


class CoverageShiftOut(BaseModel):
    id: str
    date: date
    day_name: str
    time_slot_code: str
    classroom_name: str | None = None
    class_name: str | None = None
    sub_name: str | None = None
    status: ShiftCoverageStatus


class CoverageSegmentOut(BaseModel):
    id: str
    status: ShiftCoverageStatus


class CoverageBadgeOut(BaseModel):
    label: str
    count: int
    tone: BadgeTone


class ShiftCountsOut(BaseModel):
    past: int
    upcoming: int


class AbsenceCoverageOut(BaseModel):
    absence_id: str
    status: CoverageStatus
    badges: list[CoverageBadgeOut]
    total: int
    uncovered: int
    partially_covered: int
    fully_covered: int
    shift_counts: ShiftCountsOut
    shift_details_sorted: list[CoverageShiftOut]
    coverage_segments: list[CoverageSegmentOut]


class ShiftChipInput(BaseModel):
    date: date
    time_slot_code: str = Field(min_length=1, max_length=20)
    reason: str | None = None
    classroom_name: str | None = None
    class_name: str | None = None


class ShiftChipsRequest(BaseModel):
    assigned: list[ShiftChipInput] = Field(default_factory=list)
    can_cover: list[ShiftChipInput] = Field(default_factory=list)
    cannot_cover: list[ShiftChipInput] = Field(default_factory=list)
    allowed_shift_keys: list[str] | None = None


class ShiftChipOut(BaseModel):
    date: date
    time_slot_code: str
    status: ShiftChipStatus
    reason: str | None = None
    classroom_name: str | None = None
    class_name: str | None = None

    model_config = {"from_attributes": True}
