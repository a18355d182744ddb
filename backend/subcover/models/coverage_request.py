import uuid
from datetime import date, datetime
from enum import Enum

from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from subcover.db.base import Base


class CoverageRequestStatus(str, Enum):
    open = "open"
    filled = "filled"
    cancelled = "cancelled"


class CoverageRequestShiftStatus(str, Enum):
    active = "active"
    cancelled = "cancelled"


class CoverageRequestType(str, Enum):
    time_off = "time_off"
    manual = "manual"


class CoverageRequest(Base):
    __tablename__ = "coverage_requests"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    request_type: Mapped[CoverageRequestType] = mapped_column(
        SAEnum(CoverageRequestType, name="coverage_request_type"),
        nullable=False,
        default=CoverageRequestType.time_off,
    )
    source_request_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    status: Mapped[CoverageRequestStatus] = mapped_column(
        SAEnum(CoverageRequestStatus, name="coverage_request_status"),
        nullable=False,
        default=CoverageRequestStatus.open,
        index=True,
    )
    total_shifts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    covered_shifts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


class CoverageRequestShift(Base):
    __tablename__ = "coverage_request_shifts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    coverage_request_id: Mapped[str] = mapped_column(ForeignKey("coverage_requests.id"), nullable=False, index=True)
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    day_of_week_id: Mapped[str | None] = mapped_column(ForeignKey("days_of_week.id"), nullable=True)
    time_slot_id: Mapped[str] = mapped_column(ForeignKey("time_slots.id"), nullable=False)
    classroom_id: Mapped[str | None] = mapped_column(ForeignKey("classrooms.id"), nullable=True)
    class_group_id: Mapped[str | None] = mapped_column(ForeignKey("class_groups.id"), nullable=True)
    time_off_shift_id: Mapped[str | None] = mapped_column(ForeignKey("time_off_shifts.id"), nullable=True)
    status: Mapped[CoverageRequestShiftStatus] = mapped_column(
        SAEnum(CoverageRequestShiftStatus, name="coverage_request_shift_status"),
        nullable=False,
        default=CoverageRequestShiftStatus.active,
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
