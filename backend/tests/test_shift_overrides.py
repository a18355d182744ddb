import pytest

from subcover.core.exceptions import StaleContactVersionError
from subcover.models.substitute_contact import SubContactShiftOverride
from subcover.models.coverage_request import CoverageRequestShift
from subcover.services.coverage_requests import cancel_coverage_request_shift, ensure_coverage_request
from subcover.services.shift_overrides import (
    ShiftOverrideRecord,
    find_conflicting_shift_keys,
    get_or_create_substitute_contact,
    load_shift_id_map,
    resolve_shift_overrides,
    save_shift_overrides,
)


def resolve(selected=(), override=(), available=(), unavailable=(), shift_id_map=None):
    return resolve_shift_overrides(
        selected=selected,
        override=override,
        available=available,
        unavailable=unavailable,
        shift_id_map=shift_id_map or {},
    )


def test_available_selected_shift_is_booked():
    result = resolve(
        selected=["2026-02-10|EM"],
        available=["2026-02-10|EM"],
        shift_id_map={"2026-02-10|EM": "shift-A"},
    )

    assert result.selected_shift_ids == ["shift-A"]
    assert result.overrides == [ShiftOverrideRecord(shift_id="shift-A", selected=True, override_availability=False)]


def test_unavailable_shift_needs_override_to_be_selected():
    result = resolve(
        selected=["2026-02-10|EM"],
        unavailable=["2026-02-10|EM"],
        shift_id_map={"2026-02-10|EM": "shift-A"},
    )

    assert result.selected_shift_ids == []
    assert result.overrides == [ShiftOverrideRecord(shift_id="shift-A", selected=False, override_availability=False)]


def test_overridden_unavailable_shift_is_booked():
    result = resolve(
        selected=["2026-02-11|AM"],
        override=["2026-02-11|AM"],
        unavailable=["2026-02-11|AM"],
        shift_id_map={"2026-02-11|AM": "shift-B"},
    )

    assert result.selected_shift_ids == ["shift-B"]
    assert result.overrides == [ShiftOverrideRecord(shift_id="shift-B", selected=True, override_availability=True)]


def test_unknown_keys_are_dropped():
    result = resolve(
        selected=["2026-02-10|EM", "2026-02-12|PM"],
        available=["2026-02-10|EM", "2026-02-12|PM"],
        shift_id_map={"2026-02-10|EM": "shift-A"},
    )

    assert result.selected_shift_ids == ["shift-A"]
    assert [record.shift_id for record in result.overrides] == ["shift-A"]


def test_output_follows_input_order_without_duplicates():
    shift_id_map = {"2026-02-10|AM": "a", "2026-02-10|PM": "b", "2026-02-11|AM": "c"}
    result = resolve(
        selected=["2026-02-11|AM", "2026-02-10|AM", "2026-02-10|PM"],
        available=["2026-02-10|PM", "2026-02-10|AM", "2026-02-10|PM"],
        unavailable=["2026-02-11|AM"],
        override=["2026-02-11|AM"],
        shift_id_map=shift_id_map,
    )

    assert [record.shift_id for record in result.overrides] == ["b", "a", "c"]
    assert result.selected_shift_ids == ["b", "a", "c"]


def test_key_in_both_sets_resolves_as_unavailable():
    result = resolve(
        selected=["2026-02-10|AM"],
        available=["2026-02-10|AM"],
        unavailable=["2026-02-10|AM"],
        shift_id_map={"2026-02-10|AM": "shift-A"},
    )

    assert result.overrides == [ShiftOverrideRecord(shift_id="shift-A", selected=False, override_availability=False)]
    assert result.selected_shift_ids == []


def test_find_conflicting_shift_keys():
    assert find_conflicting_shift_keys(["x|AM", "y|PM", "x|AM"], ["x|AM", "z|AM"]) == ["x|AM"]
    assert find_conflicting_shift_keys(["x|AM"], []) == []


def test_load_shift_id_map_skips_cancelled_shifts(db, school, absence):
    coverage_request = ensure_coverage_request(db, absence)
    db.commit()

    shift_id_map = load_shift_id_map(db, coverage_request.id)
    assert sorted(shift_id_map) == ["2030-01-07|AM", "2030-01-07|PM", "2030-01-09|AM"]

    cancel_coverage_request_shift(db, db.get(CoverageRequestShift, shift_id_map["2030-01-07|PM"]))
    db.commit()

    assert sorted(load_shift_id_map(db, coverage_request.id)) == ["2030-01-07|AM", "2030-01-09|AM"]


def test_save_shift_overrides_replaces_rows_and_bumps_version(db, school, absence):
    coverage_request = ensure_coverage_request(db, absence)
    shift_id_map = load_shift_id_map(db, coverage_request.id)
    contact = get_or_create_substitute_contact(db, coverage_request.id, school.sub_id)
    db.commit()
    assert contact.version == 1

    first = [
        ShiftOverrideRecord(shift_id=shift_id_map["2030-01-07|AM"], selected=True, override_availability=False),
        ShiftOverrideRecord(shift_id=shift_id_map["2030-01-07|PM"], selected=False, override_availability=False),
    ]
    save_shift_overrides(db, contact, first, expected_version=1)
    db.commit()
    assert contact.version == 2

    second = [
        ShiftOverrideRecord(shift_id=shift_id_map["2030-01-09|AM"], selected=True, override_availability=True),
    ]
    save_shift_overrides(db, contact, second, expected_version=2)
    db.commit()

    rows = db.query(SubContactShiftOverride).filter_by(substitute_contact_id=contact.id).all()
    assert [(row.coverage_request_shift_id, row.selected, row.override_availability) for row in rows] == [
        (shift_id_map["2030-01-09|AM"], True, True)
    ]
    assert contact.version == 3


def test_save_shift_overrides_rejects_stale_version(db, school, absence):
    coverage_request = ensure_coverage_request(db, absence)
    contact = get_or_create_substitute_contact(db, coverage_request.id, school.sub_id)
    save_shift_overrides(db, contact, [], expected_version=1)
    db.commit()

    with pytest.raises(StaleContactVersionError) as exc_info:
        save_shift_overrides(db, contact, [], expected_version=1)

    assert exc_info.value.status_code == 409
    assert exc_info.value.details["current_version"] == 2


def test_get_or_create_substitute_contact_is_idempotent(db, school, absence):
    coverage_request = ensure_coverage_request(db, absence)
    first = get_or_create_substitute_contact(db, coverage_request.id, school.sub_id)
    second = get_or_create_substitute_contact(db, coverage_request.id, school.sub_id)
    assert first.id == second.id
