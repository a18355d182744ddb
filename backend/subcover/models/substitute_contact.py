import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from subcover.db.base import Base


class ResponseStatus(str, Enum):
    none = "none"
    pending = "pending"
    confirmed = "confirmed"
    declined_all = "declined_all"


class SubstituteContact(Base):
    __tablename__ = "substitute_contacts"
    __table_args__ = (
        UniqueConstraint("coverage_request_id", "sub_id", name="uq_substitute_contact_identity"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    coverage_request_id: Mapped[str] = mapped_column(ForeignKey("coverage_requests.id"), nullable=False, index=True)
    sub_id: Mapped[str] = mapped_column(ForeignKey("staff.id"), nullable=False, index=True)
    response_status: Mapped[ResponseStatus] = mapped_column(
        SAEnum(ResponseStatus, name="substitute_response_status"),
        nullable=False,
        default=ResponseStatus.none,
    )
    is_contacted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    contacted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    # Concurrent writers of the same contact fail with StaleDataError on flush.
    __mapper_args__ = {"version_id_col": version}


class SubContactShiftOverride(Base):
    __tablename__ = "sub_contact_shift_overrides"
    __table_args__ = (
        UniqueConstraint(
            "substitute_contact_id",
            "coverage_request_shift_id",
            name="uq_sub_contact_shift_override",
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    substitute_contact_id: Mapped[str] = mapped_column(
        ForeignKey("substitute_contacts.id"), nullable=False, index=True
    )
    coverage_request_shift_id: Mapped[str] = mapped_column(
        ForeignKey("coverage_request_shifts.id"), nullable=False, index=True
    )
    selected: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    override_availability: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_partial: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
