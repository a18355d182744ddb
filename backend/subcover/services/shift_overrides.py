"""Turn a substitute's availability response into override rows and bookable shifts."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.orm import Session

from subcover.core.exceptions import StaleContactVersionError
from subcover.models.coverage_request import CoverageRequestShift, CoverageRequestShiftStatus
from subcover.models.substitute_contact import SubContactShiftOverride, SubstituteContact
from subcover.models.time_slot import TimeSlot
from subcover.services.shift_keys import shift_key

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ShiftOverrideRecord:
    shift_id: str
    selected: bool
    override_availability: bool


@dataclass
class ShiftOverrideResolution:
    overrides: list[ShiftOverrideRecord] = field(default_factory=list)
    selected_shift_ids: list[str] = field(default_factory=list)


def _ordered_unique(keys: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(keys))


def find_conflicting_shift_keys(available: Iterable[str], unavailable: Iterable[str]) -> list[str]:
    """Keys a response marks both available and unavailable, in ``available`` order."""
    unavailable_keys = set(unavailable)
    return [key for key in _ordered_unique(available) if key in unavailable_keys]


def resolve_shift_overrides(
    *,
    selected: Iterable[str],
    override: Iterable[str],
    available: Iterable[str],
    unavailable: Iterable[str],
    shift_id_map: Mapping[str, str],
) -> ShiftOverrideResolution:
    """Compute override rows and the shift ids to book.

    An unavailable shift is only selected when the substitute explicitly
    overrode it. Keys with no entry in ``shift_id_map`` are dropped. A key that
    appears in both ``available`` and ``unavailable`` is resolved as
    unavailable, so every shift yields at most one row.
    """
    selected_keys = set(selected)
    override_keys = set(override)
    unavailable_keys = _ordered_unique(unavailable)
    unavailable_set = set(unavailable_keys)

    resolution = ShiftOverrideResolution()

    for key in _ordered_unique(available):
        if key in unavailable_set:
            continue
        shift_id = shift_id_map.get(key)
        if not shift_id:
            continue
        is_selected = key in selected_keys
        resolution.overrides.append(
            ShiftOverrideRecord(shift_id=shift_id, selected=is_selected, override_availability=False)
        )
        if is_selected:
            resolution.selected_shift_ids.append(shift_id)

    for key in unavailable_keys:
        shift_id = shift_id_map.get(key)
        if not shift_id:
            continue
        is_override = key in override_keys
        is_selected = key in selected_keys and is_override
        resolution.overrides.append(
            ShiftOverrideRecord(shift_id=shift_id, selected=is_selected, override_availability=is_override)
        )
        if is_selected:
            resolution.selected_shift_ids.append(shift_id)

    return resolution


def load_shift_id_map(db: Session, coverage_request_id: str) -> dict[str, str]:
    """Map ``date|code`` to the id of each active shift of a coverage request."""
    rows = db.execute(
        select(CoverageRequestShift.id, CoverageRequestShift.date, TimeSlot.code)
        .join(TimeSlot, TimeSlot.id == CoverageRequestShift.time_slot_id)
        .where(
            CoverageRequestShift.coverage_request_id == coverage_request_id,
            CoverageRequestShift.status == CoverageRequestShiftStatus.active,
        )
        .order_by(CoverageRequestShift.date, TimeSlot.code)
    ).all()

    shift_id_map: dict[str, str] = {}
    for shift_id, shift_date, code in rows:
        if shift_date is None or not code:
            continue
        shift_id_map[shift_key(shift_date, code)] = shift_id
    return shift_id_map


def get_or_create_substitute_contact(db: Session, coverage_request_id: str, sub_id: str) -> SubstituteContact:
    contact = db.execute(
        select(SubstituteContact).where(
            SubstituteContact.coverage_request_id == coverage_request_id,
            SubstituteContact.sub_id == sub_id,
        )
    ).scalar_one_or_none()
    if contact is not None:
        return contact
    contact = SubstituteContact(coverage_request_id=coverage_request_id, sub_id=sub_id)
    db.add(contact)
    db.flush()
    return contact


def save_shift_overrides(
    db: Session,
    contact: SubstituteContact,
    overrides: Iterable[ShiftOverrideRecord],
    *,
    expected_version: int | None = None,
) -> list[SubContactShiftOverride]:
    """Replace the contact's override rows with ``overrides``.

    Rows for shifts absent from ``overrides`` are deleted. When
    ``expected_version`` is given it must match the stored contact version.
    """
    if expected_version is not None and contact.version != expected_version:
        raise StaleContactVersionError(contact.id, expected_version, contact.version)

    latest: dict[str, ShiftOverrideRecord] = {}
    for record in overrides:
        latest[record.shift_id] = record

    existing = {
        row.coverage_request_shift_id: row
        for row in db.execute(
            select(SubContactShiftOverride).where(SubContactShiftOverride.substitute_contact_id == contact.id)
        ).scalars()
    }

    for shift_id, row in existing.items():
        if shift_id not in latest:
            db.delete(row)

    saved: list[SubContactShiftOverride] = []
    for shift_id, record in latest.items():
        row = existing.get(shift_id)
        if row is None:
            row = SubContactShiftOverride(
                substitute_contact_id=contact.id,
                coverage_request_shift_id=shift_id,
            )
            db.add(row)
        row.selected = record.selected
        row.override_availability = record.override_availability
        saved.append(row)

    # Dirtying the contact makes the flush bump its version column.
    contact.updated_at = datetime.now(timezone.utc)
    db.flush()
    logger.debug(
        "Saved %d shift override(s) for substitute contact %s (version %s)",
        len(saved),
        contact.id,
        contact.version,
    )
    return saved
