"""Dataset-level quality metrics.

Computes the four scorecard counts (missing, duplicate, invalid and
outlier rows) by pushing predicates and aggregates into a
TableAccessor. Every row is counted at most once per metric.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from src.quality.config import QualityScoringConfig
from src.quality.errors import InvalidConfiguration
from src.quality.models import ColumnType, MetricsResult
from src.quality.rules import AnyOf, IsNull, OutsideRange, ValidityRule, any_violation
from src.quality.table import TableAccessor

logger = logging.getLogger(__name__)


class MetricsEngine:
    """Computes missing / duplicate / invalid / outlier totals for a table."""

    def __init__(self, config: QualityScoringConfig | None = None) -> None:
        self._config = config or QualityScoringConfig()

    def compute_metrics(
        self,
        table: TableAccessor,
        required_columns: Sequence[str],
        invalid_rules: Sequence[ValidityRule] = (),
        outlier_columns: Sequence[str] = (),
        *,
        duplicate_columns: Sequence[str] | None = None,
    ) -> MetricsResult:
        """Compute the dataset-wide quality totals.

        Args:
            table: Source accessor.
            required_columns: Columns that must be non-null; a row with
                any of them null counts once toward ``total_missing``.
            invalid_rules: Per-column validity rules; a row breaking any
                of them counts once toward ``total_invalid``.
            outlier_columns: Numeric columns checked against
                ``mean +/- outlier_sigma * stddev``.
            duplicate_columns: Key for duplicate detection; defaults to
                ``required_columns``.

        Raises:
            InvalidConfiguration: On unknown columns, non-numeric outlier
                columns, rules on columns of the wrong type, or an empty
                duplicate key. Raised before any row is scanned.
        """
        dup_key = list(required_columns if duplicate_columns is None else duplicate_columns)
        self._validate(table, required_columns, invalid_rules, outlier_columns, dup_key)

        row_count = table.count()
        if row_count == 0:
            return MetricsResult()

        total_missing = table.count(AnyOf(tuple(IsNull(c) for c in required_columns)))

        total_duplicates = sum(
            n for n in table.grouped_count(dup_key).values() if n > 1
        )

        total_invalid = table.count(any_violation(invalid_rules))

        outlier_checks = [
            check
            for check in (self._outlier_check(table, c) for c in outlier_columns)
            if check is not None
        ]
        total_outliers = table.count(AnyOf(tuple(outlier_checks)))

        logger.debug(
            "metrics over %d rows: missing=%d duplicates=%d invalid=%d outliers=%d",
            row_count,
            total_missing,
            total_duplicates,
            total_invalid,
            total_outliers,
        )
        return MetricsResult(
            total_missing=total_missing,
            total_duplicates=total_duplicates,
            total_invalid=total_invalid,
            total_outliers=total_outliers,
            row_count=row_count,
        )

    def outlier_bounds(
        self, table: TableAccessor, column: str
    ) -> tuple[float, float] | None:
        """``(mean - k*stddev, mean + k*stddev)`` over the whole column.

        None when the column has no variance or too few non-null values,
        in which case no row can be an outlier on it.
        """
        mu = table.mean(column)
        sigma = table.stddev(column, ddof=self._config.stddev_ddof)
        if mu is None or not sigma:
            return None
        spread = self._config.outlier_sigma * sigma
        return mu - spread, mu + spread

    def _outlier_check(self, table: TableAccessor, column: str) -> OutsideRange | None:
        bounds = self.outlier_bounds(table, column)
        if bounds is None:
            logger.debug("column %s has no variance; skipping outlier check", column)
            return None
        return OutsideRange(column, *bounds)

    @staticmethod
    def _validate(
        table: TableAccessor,
        required_columns: Sequence[str],
        invalid_rules: Sequence[ValidityRule],
        outlier_columns: Sequence[str],
        dup_key: Sequence[str],
    ) -> None:
        table.require_columns(required_columns, role="required column")
        table.require_columns(
            outlier_columns, role="outlier column", column_type=ColumnType.NUMERIC
        )
        if not dup_key:
            msg = "Duplicate key must name at least one column."
            raise InvalidConfiguration(msg)
        table.require_columns(dup_key, role="duplicate key column")

        declared = table.columns
        for rule in invalid_rules:
            table.require_columns([rule.column], role="validity rule column")
            if declared[rule.column] not in rule.applies_to:
                msg = (
                    f"{type(rule).__name__} cannot apply to "
                    f"{declared[rule.column].value} column '{rule.column}'."
                )
                raise InvalidConfiguration(msg)
