from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from subcover.db.bootstrap import WEEKDAYS, find_schema_gaps
from subcover.db.session import engine
from subcover.models.time_slot import DayOfWeek

router = APIRouter()


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live() -> dict:
    return {"status": "ok", "timestamp": _now()}


@router.get("/health/ready")
def health_ready() -> JSONResponse:
    """Ready once the lifecycle tables exist and every weekday row is seeded."""
    database = {
        "ok": True,
        "missing_tables": [],
        "missing_columns": {},
        "weekdays_seeded": False,
        "error": None,
    }
    try:
        with engine.connect() as connection:
            database["missing_tables"], database["missing_columns"] = find_schema_gaps(connection)
            if "days_of_week" not in database["missing_tables"]:
                day_count = connection.execute(select(func.count()).select_from(DayOfWeek)).scalar_one()
                database["weekdays_seeded"] = day_count >= len(WEEKDAYS)
    except SQLAlchemyError as exc:
        database["ok"] = False
        database["error"] = str(exc)

    ready = (
        database["ok"]
        and not database["missing_tables"]
        and not database["missing_columns"]
        and database["weekdays_seeded"]
    )
    payload = {"status": "ok" if ready else "degraded", "timestamp": _now(), "database": database}
    return JSONResponse(status_code=200 if ready else 503, content=payload)
