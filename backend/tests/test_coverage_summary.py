from datetime import date

import pytest

from subcover.models.sub_assignment import SubAssignment, SubAssignmentStatus
from subcover.services.absence_status import CoverageStatus, get_coverage_status
from subcover.services.coverage_requests import ensure_coverage_request
from subcover.services.coverage_summary import (
    AssignmentCoverage,
    FullyCoveredShift,
    PartiallyCoveredShift,
    ShiftCoverageStatus,
    UncoveredShift,
    build_coverage_segments,
    build_shift_summary,
    classify_shift,
    compute_shift_counts,
    coverage_status_of,
    filter_visible_shifts,
    load_absence_coverage,
    sort_coverage_shifts,
)

from conftest import MONDAY, WEDNESDAY


def make_shifts():
    return [
        UncoveredShift(id="s1", date=date(2026, 2, 11), time_slot_code="PM"),
        FullyCoveredShift(id="s2", date=date(2026, 2, 10), time_slot_code="PM", sub_name="Sam Rivera"),
        PartiallyCoveredShift(id="s3", date=date(2026, 2, 10), time_slot_code="AM", sub_name="Jo P."),
    ]


def test_summary_counts_every_variant_once():
    summary = build_shift_summary(make_shifts())

    assert (summary.total, summary.uncovered, summary.partially_covered, summary.fully_covered) == (3, 1, 1, 1)
    assert get_coverage_status(
        uncovered=summary.uncovered, partially_covered=summary.partially_covered
    ) is CoverageStatus.uncovered


def test_summary_is_independent_of_input_order():
    forward = build_shift_summary(make_shifts())
    backward = build_shift_summary(list(reversed(make_shifts())))

    assert [shift.id for shift in forward.shift_details_sorted] == ["s3", "s2", "s1"]
    assert forward.shift_details_sorted == backward.shift_details_sorted
    assert forward.coverage_segments == backward.coverage_segments


def test_summary_keeps_input_order_in_shift_details():
    shifts = make_shifts()
    assert build_shift_summary(shifts).shift_details == shifts


def test_sort_breaks_ties_by_time_slot_code():
    shifts = [
        UncoveredShift(id="pm", date=date(2026, 2, 10), time_slot_code="PM"),
        UncoveredShift(id="em", date=date(2026, 2, 10), time_slot_code="EM"),
        UncoveredShift(id="am", date=date(2026, 2, 10), time_slot_code="AM"),
    ]
    assert [shift.id for shift in sort_coverage_shifts(shifts)] == ["am", "em", "pm"]


def test_coverage_segments_carry_status():
    segments = build_coverage_segments(sort_coverage_shifts(make_shifts()))
    assert [(segment.id, segment.status) for segment in segments] == [
        ("s3", ShiftCoverageStatus.partially_covered),
        ("s2", ShiftCoverageStatus.fully_covered),
        ("s1", ShiftCoverageStatus.uncovered),
    ]


def test_empty_summary():
    summary = build_shift_summary([])
    assert summary.total == 0
    assert summary.coverage_segments == []


def test_non_coverage_record_is_rejected():
    with pytest.raises(TypeError):
        coverage_status_of({"id": "s1", "status": "uncovered"})


def test_classify_shift_prefers_full_assignment():
    shift = classify_shift(
        shift_id="s1",
        shift_date=date(2026, 2, 10),
        time_slot_code="AM",
        assignments=[
            AssignmentCoverage(sub_name="Partial Pat", is_partial=True),
            AssignmentCoverage(sub_name="Full Fran", is_partial=False),
        ],
    )
    assert isinstance(shift, FullyCoveredShift)
    assert shift.sub_name == "Full Fran"
    assert shift.day_name == "Tuesday"


def test_classify_shift_partial_and_uncovered():
    partial = classify_shift(
        shift_id="s1",
        shift_date=date(2026, 2, 10),
        time_slot_code="AM",
        assignments=[AssignmentCoverage(sub_name="Partial Pat", is_partial=True)],
    )
    uncovered = classify_shift(shift_id="s2", shift_date=date(2026, 2, 10), time_slot_code="PM", assignments=[])

    assert isinstance(partial, PartiallyCoveredShift)
    assert isinstance(uncovered, UncoveredShift)


def test_filter_visible_shifts_and_counts():
    shifts = make_shifts()
    today = date(2026, 2, 11)

    assert [shift.id for shift in filter_visible_shifts(shifts, include_past=False, today=today)] == ["s1"]
    assert len(filter_visible_shifts(shifts, include_past=True, today=today)) == 3

    counts = compute_shift_counts(shifts, today=today)
    assert (counts.past, counts.upcoming) == (2, 1)


def test_load_absence_coverage_matches_assignments(db, school, absence):
    coverage_request = ensure_coverage_request(db, absence)
    db.flush()

    db.add_all(
        [
            SubAssignment(
                school_id=school.school_id,
                sub_id=school.sub_id,
                teacher_id=school.teacher_id,
                date=MONDAY,
                time_slot_id=school.am_slot_id,
                status=SubAssignmentStatus.active,
            ),
            SubAssignment(
                school_id=school.school_id,
                sub_id=school.other_sub_id,
                teacher_id=school.teacher_id,
                date=WEDNESDAY,
                time_slot_id=school.am_slot_id,
                is_partial=True,
                status=SubAssignmentStatus.active,
            ),
            SubAssignment(
                school_id=school.school_id,
                sub_id=school.other_sub_id,
                teacher_id=school.teacher_id,
                date=MONDAY,
                time_slot_id=school.pm_slot_id,
                status=SubAssignmentStatus.cancelled,
            ),
        ]
    )
    db.commit()

    records = sort_coverage_shifts(load_absence_coverage(db, absence))

    assert [(record.date, record.time_slot_code, coverage_status_of(record)) for record in records] == [
        (MONDAY, "AM", ShiftCoverageStatus.fully_covered),
        (MONDAY, "PM", ShiftCoverageStatus.uncovered),
        (WEDNESDAY, "AM", ShiftCoverageStatus.partially_covered),
    ]
    assert records[0].sub_name == "Sam Rivera"
    assert records[0].classroom_name == "Infant Room"
    assert records[0].class_name == "Infants"
    assert records[2].classroom_name == "Toddler Room"
    assert records[2].class_name is None
    assert records[0].day_name == "Monday"
    assert records[2].sub_name == "Jo P."
    assert coverage_request.total_shifts == 3
