"""create school reference tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19 00:00:00.000000

"""

from alembic import op
import sqlalchemy as sa

revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "staff",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("first_name", sa.String(length=100), nullable=False),
        sa.Column("last_name", sa.String(length=100), nullable=False),
        sa.Column("display_name", sa.String(length=200), nullable=True),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("phone", sa.String(length=50), nullable=True),
        sa.Column("is_teacher", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("is_sub", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_staff_school_id", "staff", ["school_id"], unique=False)

    op.create_table(
        "classrooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("capacity", sa.Integer(), nullable=True),
        sa.Column("color", sa.String(length=20), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_classrooms_school_id", "classrooms", ["school_id"], unique=False)

    op.create_table(
        "class_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("min_age", sa.Integer(), nullable=True),
        sa.Column("max_age", sa.Integer(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_class_groups_school_id", "class_groups", ["school_id"], unique=False)

    op.create_table(
        "days_of_week",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=20), nullable=False, unique=True),
        sa.Column("day_number", sa.Integer(), nullable=False, unique=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
    )

    op.create_table(
        "time_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("code", sa.String(length=20), nullable=False),
        sa.Column("name", sa.String(length=100), nullable=True),
        sa.Column("default_start_time", sa.String(length=5), nullable=True),
        sa.Column("default_end_time", sa.String(length=5), nullable=True),
        sa.Column("display_order", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index("ix_time_slots_school_id", "time_slots", ["school_id"], unique=False)

    op.create_table(
        "schedule_cells",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("day_of_week_id", sa.String(length=36), sa.ForeignKey("days_of_week.id"), nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("notes", sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("classroom_id", "day_of_week_id", "time_slot_id", name="uq_schedule_cell_slot"),
    )
    op.create_index("ix_schedule_cells_school_id", "schedule_cells", ["school_id"], unique=False)
    op.create_index("ix_schedule_cells_classroom_id", "schedule_cells", ["classroom_id"], unique=False)
    op.create_index("ix_schedule_cells_time_slot_id", "schedule_cells", ["time_slot_id"], unique=False)

    op.create_table(
        "schedule_cell_class_groups",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("schedule_cell_id", sa.String(length=36), sa.ForeignKey("schedule_cells.id"), nullable=False),
        sa.Column("class_group_id", sa.String(length=36), sa.ForeignKey("class_groups.id"), nullable=False),
        sa.UniqueConstraint("schedule_cell_id", "class_group_id", name="uq_schedule_cell_class_group"),
    )
    op.create_index(
        "ix_schedule_cell_class_groups_school_id", "schedule_cell_class_groups", ["school_id"], unique=False
    )
    op.create_index(
        "ix_schedule_cell_class_groups_schedule_cell_id",
        "schedule_cell_class_groups",
        ["schedule_cell_id"],
        unique=False,
    )
    op.create_index(
        "ix_schedule_cell_class_groups_class_group_id",
        "schedule_cell_class_groups",
        ["class_group_id"],
        unique=False,
    )

    op.create_table(
        "teacher_schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("school_id", sa.String(length=36), nullable=False),
        sa.Column("teacher_id", sa.String(length=36), sa.ForeignKey("staff.id"), nullable=False),
        sa.Column("day_of_week_id", sa.String(length=36), sa.ForeignKey("days_of_week.id"), nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("class_group_id", sa.String(length=36), sa.ForeignKey("class_groups.id"), nullable=True),
        sa.Column("classroom_id", sa.String(length=36), sa.ForeignKey("classrooms.id"), nullable=False),
        sa.Column("is_floater", sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index("ix_teacher_schedules_school_id", "teacher_schedules", ["school_id"], unique=False)
    op.create_index("ix_teacher_schedules_teacher_id", "teacher_schedules", ["teacher_id"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_teacher_schedules_teacher_id", table_name="teacher_schedules")
    op.drop_index("ix_teacher_schedules_school_id", table_name="teacher_schedules")
    op.drop_table("teacher_schedules")
    op.drop_index("ix_schedule_cell_class_groups_class_group_id", table_name="schedule_cell_class_groups")
    op.drop_index("ix_schedule_cell_class_groups_schedule_cell_id", table_name="schedule_cell_class_groups")
    op.drop_index("ix_schedule_cell_class_groups_school_id", table_name="schedule_cell_class_groups")
    op.drop_table("schedule_cell_class_groups")
    op.drop_index("ix_schedule_cells_time_slot_id", table_name="schedule_cells")
    op.drop_index("ix_schedule_cells_classroom_id", table_name="schedule_cells")
    op.drop_index("ix_schedule_cells_school_id", table_name="schedule_cells")
    op.drop_table("schedule_cells")
    op.drop_index("ix_time_slots_school_id", table_name="time_slots")
    op.drop_table("time_slots")
    op.drop_table("days_of_week")
    op.drop_index("ix_class_groups_school_id", table_name="class_groups")
    op.drop_table("class_groups")
    op.drop_index("ix_classrooms_school_id", table_name="classrooms")
    op.drop_table("classrooms")
    op.drop_index("ix_staff_school_id", table_name="staff")
    op.drop_table("staff")
