from __future__ import annotations

import logging
import uuid

from sqlalchemy import inspect, select, text

from subcover.db.base import Base
from subcover.db.session import SessionLocal, engine
from subcover.models.time_slot import DayOfWeek

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "days_of_week": {"id", "name", "day_number"},
    "time_slots": {"id", "school_id", "code"},
    "teacher_schedules": {"id", "teacher_id", "day_of_week_id", "time_slot_id", "classroom_id", "is_floater"},
    "coverage_requests": {"id", "status", "total_shifts", "covered_shifts"},
    "coverage_request_shifts": {"id", "coverage_request_id", "date", "time_slot_id", "status"},
    "substitute_contacts": {"id", "coverage_request_id", "sub_id", "response_status", "version"},
    "sub_assignments": {"id", "coverage_request_shift_id", "status"},
}

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def _ensure_substitute_contact_version_column() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "substitute_contacts" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("substitute_contacts")}
        if "version" in column_names:
            return
        connection.execute(text("ALTER TABLE substitute_contacts ADD COLUMN version INTEGER NOT NULL DEFAULT 1"))


def _ensure_coverage_request_counter_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "coverage_requests" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("coverage_requests")}
        if "total_shifts" not in column_names:
            connection.execute(
                text("ALTER TABLE coverage_requests ADD COLUMN total_shifts INTEGER NOT NULL DEFAULT 0")
            )
        if "covered_shifts" not in column_names:
            connection.execute(
                text("ALTER TABLE coverage_requests ADD COLUMN covered_shifts INTEGER NOT NULL DEFAULT 0")
            )


def seed_days_of_week() -> int:
    """Insert any missing weekday rows, numbered Monday=1 through Sunday=7."""
    with SessionLocal() as db:
        existing = set(db.execute(select(DayOfWeek.day_number)).scalars())
        created = 0
        for index, name in enumerate(WEEKDAYS, start=1):
            if index in existing:
                continue
            db.add(DayOfWeek(id=str(uuid.uuid4()), name=name, day_number=index, display_order=index))
            created += 1
        if created:
            db.commit()
            logger.info("Seeded %d day(s) of week", created)
        return created


def find_schema_gaps(connection) -> tuple[list[str], dict[str, list[str]]]:
    """Tables and per-table columns from ``REQUIRED_COLUMNS`` the database lacks."""
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(required - existing)
        if missing:
            missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        missing_tables, missing_columns = find_schema_gaps(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flattened = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flattened)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_substitute_contact_version_column()
        _ensure_coverage_request_counter_columns()
        _assert_required_columns()
        seed_days_of_week()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
