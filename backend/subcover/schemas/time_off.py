from datetime import date

from pydantic import BaseModel

from subcover.models.coverage_request import (
    CoverageRequestShiftStatus,
    CoverageRequestStatus,
    CoverageRequestType,
)
from subcover.models.time_off import ShiftSelectionMode, TimeOffStatus


class TimeOffStatusUpdate(BaseModel):
    status: TimeOffStatus


class TimeOffRequestOut(BaseModel):
    id: str
    teacher_id: str
    start_date: date
    end_date: date | None = None
    reason: str | None = None
    status: TimeOffStatus
    shift_selection_mode: ShiftSelectionMode
    coverage_request_id: str | None = None

    model_config = {"from_attributes": True}


class ScheduledShiftOut(BaseModel):
    date: date
    day_of_week_id: str
    day_name: str
    time_slot_id: str
    time_slot_code: str
    classroom_id: str
    class_group_id: str | None = None

    model_config = {"from_attributes": True}


class CoverageRequestStatusUpdate(BaseModel):
    status: CoverageRequestStatus


class CoverageRequestOut(BaseModel):
    id: str
    request_type: CoverageRequestType
    source_request_id: str | None = None
    teacher_id: str
    start_date: date
    end_date: date
    status: CoverageRequestStatus
    total_shifts: int
    covered_shifts: int

    model_config = {"from_attributes": True}


class CoverageRequestShiftOut(BaseModel):
    id: str
    coverage_request_id: str
    date: date
    time_slot_id: str
    classroom_id: str | None = None
    class_group_id: str | None = None
    status: CoverageRequestShiftStatus

    model_config = {"from_attributes": True}
