from __future__ import annotations

from dataclasses import dataclass

from subcover.core.exceptions import AppError


@dataclass(frozen=True)
class SchoolContext:
    """The acting tenant for a request.

    Built once at the request boundary and passed explicitly into every
    service that filters by school.
    """

    school_id: str | None = None
    actor_id: str | None = None

    @property
    def is_resolved(self) -> bool:
        return bool(self.school_id)


def resolve_school_id(context: SchoolContext | None = None, school_id: str | None = None) -> str | None:
    """Explicit override first, then the request context."""
    if school_id:
        return school_id
    if context is not None and context.is_resolved:
        return context.school_id
    return None


def ensure_same_school(record_school_id: str | None, context: SchoolContext | None) -> None:
    """Reject access to another tenant's record when the request names a school."""
    if context is None or not context.is_resolved:
        return
    if record_school_id != context.school_id:
        raise AppError("Record belongs to another school", status_code=403)
