from datetime import date

from subcover.services.absence_status import (
    BadgeTone,
    CoverageBadge,
    CoverageStatus,
    build_coverage_badges,
    get_coverage_status,
    summarize_absence,
)
from subcover.services.coverage_summary import FullyCoveredShift, PartiallyCoveredShift, build_shift_summary


def test_coverage_status_precedence():
    assert get_coverage_status(uncovered=1, partially_covered=5) is CoverageStatus.uncovered
    assert get_coverage_status(uncovered=0, partially_covered=1) is CoverageStatus.partially_covered
    assert get_coverage_status(uncovered=0, partially_covered=0) is CoverageStatus.covered


def test_zero_count_badges_are_omitted():
    badges = build_coverage_badges(uncovered=0, partially_covered=0, fully_covered=2)
    assert badges == [CoverageBadge(label="Covered", count=2, tone=BadgeTone.covered)]


def test_badges_keep_fixed_order():
    badges = build_coverage_badges(uncovered=3, partially_covered=1, fully_covered=2)
    assert [(badge.label, badge.count) for badge in badges] == [("Covered", 2), ("Uncovered", 3), ("Partial", 1)]


def test_no_shifts_means_no_badges():
    assert build_coverage_badges(uncovered=0, partially_covered=0, fully_covered=0) == []


def test_summarize_absence():
    summary = build_shift_summary(
        [
            FullyCoveredShift(id="a", date=date(2026, 2, 10), time_slot_code="AM", sub_name="Sam"),
            PartiallyCoveredShift(id="b", date=date(2026, 2, 10), time_slot_code="PM", sub_name="Jo"),
        ]
    )
    headline = summarize_absence(summary)

    assert headline.status is CoverageStatus.partially_covered
    assert [badge.tone for badge in headline.badges] == [BadgeTone.covered, BadgeTone.partial]
