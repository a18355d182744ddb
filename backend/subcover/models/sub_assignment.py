import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from subcover.db.base import Base


class SubAssignmentStatus(str, Enum):
    active = "active"
    cancelled = "cancelled"


class SubAssignment(Base):
    __tablename__ = "sub_assignments"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    sub_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), nullable=False, index=True)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), nullable=False, index=True)
    coverage_request_shift_id: Mapped[str | None] = mapped_column(
        ForeignKey("coverage_request_shifts.id"), nullable=True, index=True
    )
    date: Mapped[date] = mapped_column(Date, nullable=False)
    day_of_week_id: Mapped[str | None] = mapped_column(ForeignKey("days_of_week.id"), nullable=True)
    time_slot_id: Mapped[str] = mapped_column(ForeignKey("time_slots.id"), nullable=False)
    classroom_id: Mapped[str | None] = mapped_column(ForeignKey("classrooms.id"), nullable=True)
    is_partial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    status: Mapped[SubAssignmentStatus] = mapped_column(
        SAEnum(SubAssignmentStatus, name="sub_assignment_status"),
        nullable=False,
        default=SubAssignmentStatus.active,
        index=True,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
