"""Scorecard builder.

Turns a MetricsResult into the ordered metric -> value table and, when
a row-count denominator is known, grades each metric on an A-F scale.
"""

from __future__ import annotations

from src.quality.config import GradeThresholds
from src.quality.models import (
    MetricsResult,
    QualityGrade,
    ScorecardEntry,
    ScorecardMetric,
)

# Scorecard order is fixed and independent of the caller.
_METRIC_FIELDS: tuple[tuple[ScorecardMetric, str], ...] = (
    (ScorecardMetric.MISSING_VALUES, "total_missing"),
    (ScorecardMetric.DUPLICATES, "total_duplicates"),
    (ScorecardMetric.INVALID_VALUES, "total_invalid"),
    (ScorecardMetric.OUTLIERS, "total_outliers"),
)


def score_to_grade(
    ratio: float,
    thresholds: GradeThresholds | None = None,
) -> QualityGrade:
    """Convert a 0-1 quality ratio to a letter grade."""
    t = thresholds or GradeThresholds()
    if ratio >= t.a_min:
        return QualityGrade.A
    if ratio >= t.b_min:
        return QualityGrade.B
    if ratio >= t.c_min:
        return QualityGrade.C
    if ratio >= t.d_min:
        return QualityGrade.D
    return QualityGrade.F


def build_scorecard(
    metrics: MetricsResult,
    total_rows: int | None = None,
    thresholds: GradeThresholds | None = None,
) -> list[ScorecardEntry]:
    """Build the scorecard entries in the fixed metric order.

    Grades are only assigned when ``total_rows`` is a positive count;
    each metric's quality ratio is ``1 - value / total_rows``.
    """
    if total_rows is not None and total_rows < 0:
        msg = f"total_rows must be non-negative, got {total_rows}."
        raise ValueError(msg)

    entries: list[ScorecardEntry] = []
    for metric, field_name in _METRIC_FIELDS:
        value = getattr(metrics, field_name)
        if not total_rows:
            entries.append(ScorecardEntry(metric=metric, value=value))
            continue
        ratio = 1.0 - value / total_rows
        entries.append(
            ScorecardEntry(
                metric=metric,
                value=value,
                quality_ratio=ratio,
                grade=score_to_grade(ratio, thresholds),
            )
        )
    return entries
