from collections.abc import Generator

from fastapi import Request
from sqlalchemy.orm import Session

from subcover.core.config import get_settings
from subcover.core.context import SchoolContext
from subcover.db.session import SessionLocal

ACTOR_HEADER_NAME = "X-Actor-Id"


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_school_context(request: Request) -> SchoolContext:
    """Build the acting school from request headers; an absent header leaves it unresolved."""
    school_id = (request.headers.get(get_settings().school_header_name) or "").strip()
    actor_id = (request.headers.get(ACTOR_HEADER_NAME) or "").strip()
    return SchoolContext(school_id=school_id or None, actor_id=actor_id or None)
