from __future__ import annotations

from sqlalchemy.orm import Session

from subcover.core.context import SchoolContext
from subcover.models.activity_log import ActivityLog


def log_activity(
    db: Session,
    *,
    context: SchoolContext | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    reason: str | None = None,
    details: dict | None = None,
) -> ActivityLog:
    record = ActivityLog(
        school_id=context.school_id if context is not None else None,
        actor_id=context.actor_id if context is not None else None,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        reason=reason,
        details=details or {},
    )
    db.add(record)
    return record
