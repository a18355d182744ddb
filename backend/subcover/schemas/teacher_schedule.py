from pydantic import BaseModel, Field

from subcover.services.schedule_conflicts import ConflictResolution


class ConflictCheckIn(BaseModel):
    teacher_id: str = Field(min_length=1, max_length=36)
    day_of_week_id: str = Field(min_length=1, max_length=36)
    time_slot_id: str = Field(min_length=1, max_length=36)
    classroom_id: str = Field(min_length=1, max_length=36)


class ConflictCheckRequest(BaseModel):
    checks: list[ConflictCheckIn] = Field(default_factory=list)


class ScheduleConflictOut(BaseModel):
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

    model_config = {"from_attributes": True}


class ConflictCheckResponse(BaseModel):
    conflicts: list[ScheduleConflictOut]


class ResolveConflictRequest(BaseModel):
    teacher_id: str = Field(min_length=1, max_length=36)
    day_of_week_id: str = Field(min_length=1, max_length=36)
    time_slot_id: str = Field(min_length=1, max_length=36)
    resolution: ConflictResolution
    target_classroom_id: str = Field(min_length=1, max_length=36)
    target_class_group_id: str | None = None


class TeacherScheduleOut(BaseModel):
    id: str
    teacher_id: str
    day_of_week_id: str
    time_slot_id: str
    classroom_id: str
    class_group_id: str | None = None
    is_floater: bool

    model_config = {"from_attributes": True}


class ResolveConflictResponse(BaseModel):
    success: bool = True
    resolution: ConflictResolution
    created: TeacherScheduleOut | None = None
    deleted_ids: list[str] = Field(default_factory=list)
    updated: list[TeacherScheduleOut] = Field(default_factory=list)


class BaselineUsageOut(BaseModel):
    kind: str
    entity_id: str
    in_use: bool
