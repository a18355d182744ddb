import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Boolean, Date, DateTime, Enum as SAEnum, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from subcover.db.base import Base


class TimeOffStatus(str, Enum):
    draft = "draft"
    active = "active"
    cancelled = "cancelled"


class ShiftSelectionMode(str, Enum):
    all_scheduled = "all_scheduled"
    select_shifts = "select_shifts"


class TimeOffRequest(Base):
    __tablename__ = "time_off_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    reason: Mapped[str | None] = mapped_column(String(100), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[TimeOffStatus] = mapped_column(
        SAEnum(TimeOffStatus, name="time_off_status"),
        nullable=False,
        default=TimeOffStatus.draft,
    )
    shift_selection_mode: Mapped[ShiftSelectionMode] = mapped_column(
        SAEnum(ShiftSelectionMode, name="shift_selection_mode"),
        nullable=False,
        default=ShiftSelectionMode.all_scheduled,
    )
    coverage_request_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def last_date(self) -> date:
        return self.end_date or self.start_date


class TimeOffShift(Base):
    __tablename__ = "time_off_shifts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    time_off_request_id: Mapped[str] = mapped_column(ForeignKey("time_off_requests.id"), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    day_of_week_id: Mapped[str | None] = mapped_column(ForeignKey("days_of_week.id"), nullable=True)
    time_slot_id: Mapped[str] = mapped_column(ForeignKey("time_slots.id"), nullable=False)
    is_partial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
