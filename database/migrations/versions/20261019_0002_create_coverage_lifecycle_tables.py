"""create coverage lifecycle tables

Revision ID: 20261019_0002
Revises: 20261019_0001
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "20261019_0002"
down_revision = "20261019_0001"
branch_labels = None
depends_on = None


time_off_status = sa.Enum("draft", "active", "cancelled", name="time_off_status")
shift_selection_mode = sa.Enum("all_scheduled", "select_shifts", name="shift_selection_mode")
coverage_request_type = sa.Enum("time_off", "manual", name="coverage_request_type")
coverage_request_status = sa.Enum("open", "filled", "cancelled", name="coverage_request_status")
coverage_request_shift_status = sa.Enum("active", "cancelled", name="coverage_request_shift_status")
substitute_response_status = sa.Enum(
    "none", "pending", "confirmed", "declined_all", name="substitute_response_status"
)
sub_assignment_status = sa.Enum("active", "cancelled", name="sub_assignment_status")


def upgrade() -> None:
    op.create_table(
        "time_off_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=True),
        sa.Column("reason", sa.String(length=100), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("status", time_off_status, nullable=False, server_default="draft"),
        sa.Column("shift_selection_mode", shift_selection_mode, nullable=False, server_default="all_scheduled"),
        sa.Column("coverage_request_id", sa.String(length=36), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_time_off_requests_school_id", "time_off_requests", ["school_id"], unique=False)
    op.create_index("ix_time_off_requests_teacher_id", "time_off_requests", ["teacher_id"], unique=False)
    op.create_index(
        "ix_time_off_requests_coverage_request_id", "time_off_requests", ["coverage_request_id"], unique=False
    )

    op.create_table(
        "time_off_shifts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "time_off_request_id", sa.String(length=36), sa.ForeignKey("time_off_requests.id"), nullable=False
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("day_of_week_id", sa.String(length=36), sa.ForeignKey("days_of_week.id"), nullable=True),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("is_partial", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("start_time", sa.String(length=5), nullable=True),
        sa.Column("end_time", sa.String(length=5), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_time_off_shifts_time_off_request_id", "time_off_shifts", ["time_off_request_id"], unique=False)

    op.create_table(
        "coverage_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("request_type", coverage_request_type, nullable=False, server_default="time_off"),
        sa.Column("source_request_id", sa.String(length=36), nullable=True),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("start_date", sa.Date(), nullable=False),
        sa.Column("end_date", sa.Date(), nullable=False),
        sa.Column("status", coverage_request_status, nullable=False, server_default="open"),
        sa.Column("total_shifts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("covered_shifts", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_coverage_requests_school_id", "coverage_requests", ["school_id"], unique=False)
    op.create_index("ix_coverage_requests_source_request_id", "coverage_requests", ["source_request_id"], unique=False)
    op.create_index("ix_coverage_requests_teacher_id", "coverage_requests", ["teacher_id"], unique=False)
    op.create_index("ix_coverage_requests_status", "coverage_requests", ["status"], unique=False)

    op.create_table(
        "coverage_request_shifts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "coverage_request_id", sa.String(length=36), sa.ForeignKey("coverage_requests.id"), nullable=False
        ),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("day_of_week_id", sa.String(length=36), sa.ForeignKey("days_of_week.id"), nullable=True),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=True),
        sa.Column("class_group_id", sa.String(length=36), sa.ForeignKey("class_groups.id"), nullable=True),
        sa.Column("time_off_shift_id", sa.String(length=36), sa.ForeignKey("time_off_shifts.id"), nullable=True),
        sa.Column("status", coverage_request_shift_status, nullable=False, server_default="active"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_coverage_request_shifts_coverage_request_id",
        "coverage_request_shifts",
        ["coverage_request_id"],
        unique=False,
    )
    op.create_index("ix_coverage_request_shifts_school_id", "coverage_request_shifts", ["school_id"], unique=False)

    op.create_table(
        "substitute_contacts",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "coverage_request_id", sa.String(length=36), sa.ForeignKey("coverage_requests.id"), nullable=False
        ),
        sa.Column("sub_id", sa.String(length=36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("response_status", substitute_response_status, nullable=False, server_default="none"),
        sa.Column("is_contacted", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("contacted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint("coverage_request_id", "sub_id", name="uq_substitute_contact_identity"),
    )
    op.create_index(
        "ix_substitute_contacts_coverage_request_id", "substitute_contacts", ["coverage_request_id"], unique=False
    )
    op.create_index("ix_substitute_contacts_sub_id", "substitute_contacts", ["sub_id"], unique=False)

    op.create_table(
        "sub_contact_shift_overrides",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "substitute_contact_id", sa.String(length=36), sa.ForeignKey("substitute_contacts.id"), nullable=False
        ),
        sa.Column(
            "coverage_request_shift_id",
            sa.String(length=36),
            sa.ForeignKey("coverage_request_shifts.id"),
            nullable=False,
        ),
        sa.Column("selected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("override_availability", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_partial", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.UniqueConstraint(
            "substitute_contact_id", "coverage_request_shift_id", name="uq_sub_contact_shift_override"
        ),
    )
    op.create_index(
        "ix_sub_contact_shift_overrides_substitute_contact_id",
        "sub_contact_shift_overrides",
        ["substitute_contact_id"],
        unique=False,
    )
    op.create_index(
        "ix_sub_contact_shift_overrides_coverage_request_shift_id",
        "sub_contact_shift_overrides",
        ["coverage_request_shift_id"],
        unique=False,
    )

    op.create_table(
        "sub_assignments",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("sub_id", sa.String(length=36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column(
            "coverage_request_shift_id",
            sa.String(length=36),
            sa.ForeignKey("coverage_request_shifts.id"),
            nullable=True,
        ),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("day_of_week_id", sa.String(length=36), sa.ForeignKey("days_of_week.id"), nullable=True),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=True),
        sa.Column("is_partial", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("status", sub_assignment_status, nullable=False, server_default="active"),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_sub_assignments_school_id", "sub_assignments", ["school_id"], unique=False)
    op.create_index("ix_sub_assignments_sub_id", "sub_assignments", ["sub_id"], unique=False)
    op.create_index("ix_sub_assignments_teacher_id", "sub_assignments", ["teacher_id"], unique=False)
    op.create_index(
        "ix_sub_assignments_coverage_request_shift_id",
        "sub_assignments",
        ["coverage_request_shift_id"],
        unique=False,
    )
    op.create_index("ix_sub_assignments_status", "sub_assignments", ["status"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_sub_assignments_status", table_name="sub_assignments")
    op.drop_index("ix_sub_assignments_coverage_request_shift_id", table_name="sub_assignments")
    op.drop_index("ix_sub_assignments_teacher_id", table_name="sub_assignments")
    op.drop_index("ix_sub_assignments_sub_id", table_name="sub_assignments")
    op.drop_index("ix_sub_assignments_school_id", table_name="sub_assignments")
    op.drop_table("sub_assignments")
    op.drop_index(
        "ix_sub_contact_shift_overrides_coverage_request_shift_id", table_name="sub_contact_shift_overrides"
    )
    op.drop_index("ix_sub_contact_shift_overrides_substitute_contact_id", table_name="sub_contact_shift_overrides")
    op.drop_table("sub_contact_shift_overrides")
    op.drop_index("ix_substitute_contacts_sub_id", table_name="substitute_contacts")
    op.drop_index("ix_substitute_contacts_coverage_request_id", table_name="substitute_contacts")
    op.drop_table("substitute_contacts")
    op.drop_index("ix_coverage_request_shifts_school_id", table_name="coverage_request_shifts")
    op.drop_index("ix_coverage_request_shifts_coverage_request_id", table_name="coverage_request_shifts")
    op.drop_table("coverage_request_shifts")
    op.drop_index("ix_coverage_requests_status", table_name="coverage_requests")
    op.drop_index("ix_coverage_requests_teacher_id", table_name="coverage_requests")
    op.drop_index("ix_coverage_requests_source_request_id", table_name="coverage_requests")
    op.drop_index("ix_coverage_requests_school_id", table_name="coverage_requests")
    op.drop_table("coverage_requests")
    op.drop_index("ix_time_off_shifts_time_off_request_id", table_name="time_off_shifts")
    op.drop_table("time_off_shifts")
    op.drop_index("ix_time_off_requests_coverage_request_id", table_name="time_off_requests")
    op.drop_index("ix_time_off_requests_teacher_id", table_name="time_off_requests")
    op.drop_index("ix_time_off_requests_school_id", table_name="time_off_requests")
    op.drop_table("time_off_requests")
    sub_assignment_status.drop(op.get_bind(), checkfirst=True)
    substitute_response_status.drop(op.get_bind(), checkfirst=True)
    coverage_request_shift_status.drop(op.get_bind(), checkfirst=True)
    coverage_request_status.drop(op.get_bind(), checkfirst=True)
    coverage_request_type.drop(op.get_bind(), checkfirst=True)
    shift_selection_mode.drop(op.get_bind(), checkfirst=True)
    time_off_status.drop(op.get_bind(), checkfirst=True)
