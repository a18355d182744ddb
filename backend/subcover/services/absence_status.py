from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from subcover.services.coverage_summary import ShiftSummary


class CoverageStatus(str, Enum):
    uncovered = "uncovered"
    partially_covered = "partially_covered"
    covered = "covered"


class BadgeTone(str, Enum):
    covered = "covered"
    uncovered = "uncovered"
    partial = "partial"


@dataclass(frozen=True)
class CoverageBadge:
    label: str
    count: int
    tone: BadgeTone


@dataclass(frozen=True)
class AbsenceCoverage:
    status: CoverageStatus
    badges: list[CoverageBadge]


def get_coverage_status(*, uncovered: int, partially_covered: int) -> CoverageStatus:
    # A single uncovered shift outranks any number of covered ones.
    if uncovered > 0:
        return CoverageStatus.uncovered
    if partially_covered > 0:
        return CoverageStatus.partially_covered
    return CoverageStatus.covered


def build_coverage_badges(*, uncovered: int, partially_covered: int, fully_covered: int) -> list[CoverageBadge]:
    badges: list[CoverageBadge] = []
    if fully_covered > 0:
        badges.append(CoverageBadge(label="Covered", count=fully_covered, tone=BadgeTone.covered))
    if uncovered > 0:
        badges.append(CoverageBadge(label="Uncovered", count=uncovered, tone=BadgeTone.uncovered))
    if partially_covered > 0:
        badges.append(CoverageBadge(label="Partial", count=partially_covered, tone=BadgeTone.partial))
    return badges


def summarize_absence(summary: ShiftSummary) -> AbsenceCoverage:
    return AbsenceCoverage(
        status=get_coverage_status(uncovered=summary.uncovered, partially_covered=summary.partially_covered),
        badges=build_coverage_badges(
            uncovered=summary.uncovered,
            partially_covered=summary.partially_covered,
            fully_covered=summary.fully_covered,
        ),
    )
