from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from subcover.api.deps import get_db, get_school_context
from subcover.core.context import SchoolContext
from subcover.core.exceptions import RequestValidationFailed
from subcover.schemas.teacher_schedule import BaselineUsageOut
from subcover.services.baseline_usage import BASELINE_USAGE_CHECKS

router = APIRouter()


@router.get("/baseline-usage/{kind}/{entity_id}", response_model=BaselineUsageOut)
def baseline_usage(
    kind: str,
    entity_id: str,
    db: Session = Depends(get_db),
    context: SchoolContext = Depends(get_school_context),
) -> BaselineUsageOut:
    check = BASELINE_USAGE_CHECKS.get(kind)
    if check is None:
        raise RequestValidationFailed(
            f"Unknown baseline entity kind: {kind}",
            details={"allowed": sorted(BASELINE_USAGE_CHECKS)},
        )
    return BaselineUsageOut(kind=kind, entity_id=entity_id, in_use=check(db, entity_id, context=context))
