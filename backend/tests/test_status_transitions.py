import pytest

from subcover.core.exceptions import InvalidStatusTransitionError
from subcover.models.coverage_request import CoverageRequestShiftStatus, CoverageRequestStatus
from subcover.models.sub_assignment import SubAssignmentStatus
from subcover.models.time_off import TimeOffStatus
from subcover.services import lifecycle
from subcover.services.lifecycle import (
    can_transition_coverage_request_shift_status,
    can_transition_coverage_request_status,
    can_transition_sub_assignment_status,
    can_transition_time_off_status,
    ensure_transition,
    format_transition_error,
)

PREDICATES = [
    (TimeOffStatus, can_transition_time_off_status),
    (CoverageRequestStatus, can_transition_coverage_request_status),
    (CoverageRequestShiftStatus, can_transition_coverage_request_shift_status),
    (SubAssignmentStatus, can_transition_sub_assignment_status),
]


@pytest.mark.parametrize("status_enum,predicate", PREDICATES)
def test_identity_transition_is_always_allowed(status_enum, predicate):
    for status in status_enum:
        assert predicate(status, status) is True
        assert predicate(status.value, status.value) is True


@pytest.mark.parametrize("status_enum,predicate", PREDICATES)
def test_cancelled_is_terminal(status_enum, predicate):
    for status in status_enum:
        if status.value == "cancelled":
            continue
        assert predicate("cancelled", status) is False


def test_time_off_transitions():
    assert can_transition_time_off_status("draft", "active")
    assert can_transition_time_off_status("draft", "cancelled")
    assert can_transition_time_off_status("active", "cancelled")
    assert not can_transition_time_off_status("active", "draft")


def test_coverage_request_cannot_reopen_once_filled():
    assert can_transition_coverage_request_status(CoverageRequestStatus.open, CoverageRequestStatus.filled)
    assert can_transition_coverage_request_status(CoverageRequestStatus.filled, CoverageRequestStatus.cancelled)
    assert not can_transition_coverage_request_status(CoverageRequestStatus.filled, CoverageRequestStatus.open)


def test_unknown_status_value_is_rejected():
    with pytest.raises(ValueError):
        can_transition_time_off_status("draft", "archived")


def test_format_transition_error():
    assert format_transition_error("draft", "active") == "Invalid status transition: draft → active"
    assert (
        format_transition_error(TimeOffStatus.active, TimeOffStatus.draft)
        == "Invalid status transition: active → draft"
    )


def test_ensure_transition_raises_with_details():
    with pytest.raises(InvalidStatusTransitionError) as exc_info:
        ensure_transition("sub_assignment", SubAssignmentStatus.cancelled, SubAssignmentStatus.active)

    error = exc_info.value
    assert error.status_code == 409
    assert error.message == "Invalid status transition: cancelled → active"
    assert error.details == {"entity": "sub_assignment", "current": "cancelled", "requested": "active"}


def test_ensure_transition_allows_legal_move():
    ensure_transition("coverage_request_shift", "active", "cancelled")


def test_exhaustiveness_check_reports_missing_status():
    incomplete = {TimeOffStatus.draft: frozenset(), TimeOffStatus.active: frozenset()}
    with pytest.raises(RuntimeError, match="cancelled"):
        lifecycle._check_exhaustive("time_off_request", TimeOffStatus, incomplete)


def test_every_table_is_exhaustive():
    for kind, (status_enum, table) in lifecycle.TRANSITION_TABLES.items():
        assert set(table) == set(status_enum), kind
