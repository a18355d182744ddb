import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from subcover.db.base import Base


class ScheduleCell(Base):
    """One classroom x day x time slot cell of the baseline weekly grid."""

    __tablename__ = "schedule_cells"
    __table_args__ = (
        UniqueConstraint("classroom_id", "day_of_week_id", "time_slot_id", name="uq_schedule_cell_slot"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    classroom_id: Mapped[str] = mapped_column(ForeignKey("classrooms.id"), nullable=False, index=True)
    day_of_week_id: Mapped[str] = mapped_column(ForeignKey("days_of_week.id"), nullable=False)
    time_slot_id: Mapped[str] = mapped_column(ForeignKey("time_slots.id"), nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())


class ScheduleCellClassGroup(Base):
    __tablename__ = "schedule_cell_class_groups"
    __table_args__ = (
        UniqueConstraint("schedule_cell_id", "class_group_id", name="uq_schedule_cell_class_group"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    schedule_cell_id: Mapped[str] = mapped_column(ForeignKey("schedule_cells.id"), nullable=False, index=True)
    class_group_id: Mapped[str] = mapped_column(ForeignKey("class_groups.id"), nullable=False, index=True)


class TeacherSchedule(Base):
    """Recurring baseline placement of a teacher in a classroom."""

    __tablename__ = "teacher_schedules"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    school_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    teacher_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), nullable=False, index=True)
    day_of_week_id: Mapped[str] = mapped_column(ForeignKey("days_of_week.id"), nullable=False)
    time_slot_id: Mapped[str] = mapped_column(ForeignKey("time_slots.id"), nullable=False)
    class_group_id: Mapped[str | None] = mapped_column(ForeignKey("class_groups.id"), nullable=True)
    classroom_id: Mapped[str] = mapped_column(ForeignKey("classrooms.id"), nullable=False)
    is_floater: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
