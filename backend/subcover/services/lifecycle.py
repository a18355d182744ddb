"""Status state machines for absence, coverage and assignment records.

Each entity kind owns an adjacency table mapping a status to the statuses it
may move to. Moving to the same status is always allowed so that re-saving an
unchanged record is a no-op. ``cancelled`` is the single terminal status of
every table.
"""

from __future__ import annotations

from enum import Enum
from typing import Mapping

from subcover.core.exceptions import InvalidStatusTransitionError
from subcover.models.coverage_request import CoverageRequestShiftStatus, CoverageRequestStatus
from subcover.models.sub_assignment import SubAssignmentStatus
from subcover.models.time_off import TimeOffStatus

TransitionTable = Mapping[Enum, frozenset]

TIME_OFF_TRANSITIONS: dict[TimeOffStatus, frozenset[TimeOffStatus]] = {
    TimeOffStatus.draft: frozenset({TimeOffStatus.active, TimeOffStatus.cancelled}),
    TimeOffStatus.active: frozenset({TimeOffStatus.cancelled}),
    TimeOffStatus.cancelled: frozenset(),
}

COVERAGE_REQUEST_TRANSITIONS: dict[CoverageRequestStatus, frozenset[CoverageRequestStatus]] = {
    CoverageRequestStatus.open: frozenset({CoverageRequestStatus.filled, CoverageRequestStatus.cancelled}),
    CoverageRequestStatus.filled: frozenset({CoverageRequestStatus.cancelled}),
    CoverageRequestStatus.cancelled: frozenset(),
}

COVERAGE_REQUEST_SHIFT_TRANSITIONS: dict[CoverageRequestShiftStatus, frozenset[CoverageRequestShiftStatus]] = {
    CoverageRequestShiftStatus.active: frozenset({CoverageRequestShiftStatus.cancelled}),
    CoverageRequestShiftStatus.cancelled: frozenset(),
}

SUB_ASSIGNMENT_TRANSITIONS: dict[SubAssignmentStatus, frozenset[SubAssignmentStatus]] = {
    SubAssignmentStatus.active: frozenset({SubAssignmentStatus.cancelled}),
    SubAssignmentStatus.cancelled: frozenset(),
}

# entity kind -> (status enum, table)
TRANSITION_TABLES: dict[str, tuple[type[Enum], TransitionTable]] = {
    "time_off_request": (TimeOffStatus, TIME_OFF_TRANSITIONS),
    "coverage_request": (CoverageRequestStatus, COVERAGE_REQUEST_TRANSITIONS),
    "coverage_request_shift": (CoverageRequestShiftStatus, COVERAGE_REQUEST_SHIFT_TRANSITIONS),
    "sub_assignment": (SubAssignmentStatus, SUB_ASSIGNMENT_TRANSITIONS),
}


def _check_exhaustive(kind: str, status_enum: type[Enum], table: TransitionTable) -> None:
    missing = [member.value for member in status_enum if member not in table]
    if missing:
        raise RuntimeError(f"Transition table for {kind} has no entry for: {', '.join(missing)}")
    for source, targets in table.items():
        unknown = [target for target in targets if not isinstance(target, status_enum)]
        if unknown:
            raise RuntimeError(f"Transition table for {kind} maps {source.value} to foreign statuses")


for _kind, (_status_enum, _table) in TRANSITION_TABLES.items():
    _check_exhaustive(_kind, _status_enum, _table)


def _label(value: Enum | str) -> str:
    return value.value if isinstance(value, Enum) else str(value)


def _can_transition(status_enum: type[Enum], table: TransitionTable, current: Enum | str, next_status: Enum | str) -> bool:
    current_member = status_enum(current)
    next_member = status_enum(next_status)
    if current_member == next_member:
        return True
    return next_member in table[current_member]


def can_transition_time_off_status(current: TimeOffStatus | str, next_status: TimeOffStatus | str) -> bool:
    return _can_transition(TimeOffStatus, TIME_OFF_TRANSITIONS, current, next_status)


def can_transition_coverage_request_status(
    current: CoverageRequestStatus | str,
    next_status: CoverageRequestStatus | str,
) -> bool:
    return _can_transition(CoverageRequestStatus, COVERAGE_REQUEST_TRANSITIONS, current, next_status)


def can_transition_coverage_request_shift_status(
    current: CoverageRequestShiftStatus | str,
    next_status: CoverageRequestShiftStatus | str,
) -> bool:
    return _can_transition(CoverageRequestShiftStatus, COVERAGE_REQUEST_SHIFT_TRANSITIONS, current, next_status)


def can_transition_sub_assignment_status(
    current: SubAssignmentStatus | str,
    next_status: SubAssignmentStatus | str,
) -> bool:
    return _can_transition(SubAssignmentStatus, SUB_ASSIGNMENT_TRANSITIONS, current, next_status)


def format_transition_error(current: Enum | str, next_status: Enum | str) -> str:
    return f"Invalid status transition: {_label(current)} → {_label(next_status)}"


def ensure_transition(kind: str, current: Enum | str, next_status: Enum | str) -> None:
    """Raise ``InvalidStatusTransitionError`` unless ``kind`` may move from ``current`` to ``next_status``."""
    status_enum, table = TRANSITION_TABLES[kind]
    if _can_transition(status_enum, table, current, next_status):
        return
    raise InvalidStatusTransitionError(
        format_transition_error(current, next_status),
        entity=kind,
        current=_label(current),
        requested=_label(next_status),
    )
