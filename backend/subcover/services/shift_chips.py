from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date
from enum import Enum

from subcover.services.shift_keys import shift_key


class ShiftChipStatus(str, Enum):
    assigned = "assigned"
    available = "available"
    unavailable = "unavailable"


@dataclass(frozen=True)
class ShiftInput:
    date: date
    time_slot_code: str
    reason: str | None = None
    classroom_name: str | None = None
    class_name: str | None = None


@dataclass(frozen=True)
class ShiftChip:
    date: date
    time_slot_code: str
    status: ShiftChipStatus
    reason: str | None = None
    classroom_name: str | None = None
    class_name: str | None = None


def build_shift_chips(
    *,
    assigned: Iterable[ShiftInput] = (),
    can_cover: Iterable[ShiftInput] = (),
    cannot_cover: Iterable[ShiftInput] = (),
    allowed_shift_keys: Iterable[str] | None = None,
) -> list[ShiftChip]:
    """One chip per shift key, first by precedence assigned, available, unavailable."""
    allowed = set(allowed_shift_keys) if allowed_shift_keys is not None else None
    chips: dict[str, ShiftChip] = {}

    groups = (
        (ShiftChipStatus.assigned, assigned),
        (ShiftChipStatus.available, can_cover),
        (ShiftChipStatus.unavailable, cannot_cover),
    )
    for status, shifts in groups:
        for shift in shifts:
            key = shift_key(shift.date, shift.time_slot_code)
            if allowed is not None and key not in allowed:
                continue
            if key in chips:
                continue
            chips[key] = ShiftChip(
                date=shift.date,
                time_slot_code=shift.time_slot_code,
                status=status,
                reason=shift.reason if status is ShiftChipStatus.unavailable else None,
                classroom_name=shift.classroom_name or None,
                class_name=shift.class_name or None,
            )

    return sorted(chips.values(), key=lambda chip: (chip.date, chip.time_slot_code))
