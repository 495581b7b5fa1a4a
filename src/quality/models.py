"""Quality module enums, dataclasses, and Pydantic models.

Defines column typing, the grading scale, the fixed scorecard metrics
and the result snapshots produced by the profiler, the metrics engine
and the scorecard builder.

Every result is a frozen snapshot built fresh per call.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

from pydantic import Field, NonNegativeInt, model_validator

from src.models.common import (
    Scalar,
    ScorecardBase,
    UTCTimestamp,
    UUIDv7,
    new_uuid7,
    utc_now,
)

#: Read-only view of one table row, column name -> cell value.
Row = Mapping[str, Scalar]


# ---------------------------------------------------------------------------
# Enums (all StrEnum)
# ---------------------------------------------------------------------------


class ColumnType(StrEnum):
    """Declared semantic type of a column."""

    NUMERIC = "NUMERIC"
    TEXT = "TEXT"


class QualityGrade(StrEnum):
    """Per-metric quality grades from A (best) to F (worst)."""

    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class ScorecardMetric(StrEnum):
    """The four scorecard metrics, valued by their display name.

    Declaration order is the scorecard order.
    """

    MISSING_VALUES = "Missing Values"
    DUPLICATES = "Duplicates"
    INVALID_VALUES = "Invalid Values"
    OUTLIERS = "Outliers"


class JoinPolicy(StrEnum):
    """How profiling reconciles keys across its three sub-measures."""

    STRICT = "STRICT"  # key must appear in every sub-measure
    INCLUSIVE = "INCLUSIVE"  # every key in the table, zero-filled


class CorrectionMatch(StrEnum):
    """How a correction rule's ``find`` text is matched."""

    SUBSTRING = "SUBSTRING"
    WHOLE = "WHOLE"


# ---------------------------------------------------------------------------
# Frozen dataclass
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Column:
    """A named column and its declared semantic type."""

    name: str
    type: ColumnType = ColumnType.TEXT


# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------


class ProfileResult(ScorecardBase, frozen=True):
    """Per-group diagnostic counts for one grouping key value."""

    key: Scalar
    missing_count: NonNegativeInt
    invalid_count: NonNegativeInt
    duplicate_count: NonNegativeInt


class MetricsResult(ScorecardBase, frozen=True):
    """Dataset-wide quality counts.

    ``total_duplicates`` counts rows belonging to a duplicate group,
    not the number of groups.
    """

    total_missing: NonNegativeInt = 0
    total_duplicates: NonNegativeInt = 0
    total_invalid: NonNegativeInt = 0
    total_outliers: NonNegativeInt = 0
    row_count: NonNegativeInt = 0

    @model_validator(mode="after")
    def _totals_within_row_count(self) -> MetricsResult:
        for name, value in self.totals().items():
            if value > self.row_count:
                msg = f"{name}={value} exceeds row_count={self.row_count}"
                raise ValueError(msg)
        return self

    def totals(self) -> dict[str, int]:
        """The four totals keyed by field name, in scorecard order."""
        return {
            "total_missing": self.total_missing,
            "total_duplicates": self.total_duplicates,
            "total_invalid": self.total_invalid,
            "total_outliers": self.total_outliers,
        }


class ScorecardEntry(ScorecardBase, frozen=True):
    """One scorecard line: metric, value and optional grade."""

    metric: ScorecardMetric
    value: NonNegativeInt
    quality_ratio: float | None = None
    grade: QualityGrade | None = None


class QualityReport(ScorecardBase, frozen=True):
    """Immutable snapshot of a full assessment run."""

    report_id: UUIDv7 = Field(default_factory=new_uuid7)
    row_count: NonNegativeInt
    profile: list[ProfileResult] = Field(default_factory=list)
    metrics: MetricsResult
    scorecard: list[ScorecardEntry] = Field(default_factory=list)
    created_at: UTCTimestamp = Field(default_factory=utc_now)
