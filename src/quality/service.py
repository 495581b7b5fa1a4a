"""Quality assessment orchestrator service.

Runs the profiler, the metrics engine and the scorecard builder against
one table and returns a single immutable QualityReport.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import structlog

from src.quality.config import QualityScoringConfig
from src.quality.metrics import MetricsEngine
from src.quality.models import JoinPolicy, ProfileResult, QualityReport
from src.quality.profiler import Profiler
from src.quality.rules import ValidityRule
from src.quality.scorecard import build_scorecard
from src.quality.table import TableAccessor

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProfileRequest:
    """Which column to profile and how to group it."""

    group_key: str
    value_column: str
    valid_range: tuple[float, float] | None = None
    join_policy: JoinPolicy | None = None


class QualityAssessmentService:
    """Orchestrates a full assessment of one table.

    Profiling is optional and runs only when a ProfileRequest is given.
    The scorecard is graded against the table's row count unless
    ``grade`` is false.
    """

    def __init__(self, config: QualityScoringConfig | None = None) -> None:
        self._config = config or QualityScoringConfig()
        self._profiler = Profiler(config=self._config)
        self._metrics = MetricsEngine(config=self._config)

    def assess(
        self,
        table: TableAccessor,
        *,
        required_columns: Sequence[str],
        invalid_rules: Sequence[ValidityRule] = (),
        outlier_columns: Sequence[str] = (),
        duplicate_columns: Sequence[str] | None = None,
        profile_request: ProfileRequest | None = None,
        grade: bool = True,
    ) -> QualityReport:
        """Perform a full quality assessment.

        Steps:
        1. Profile per group if requested.
        2. Compute dataset-wide metrics.
        3. Build the (optionally graded) scorecard.
        """
        profile: list[ProfileResult] = []
        if profile_request is not None:
            profile = self._profiler.profile(
                table,
                profile_request.group_key,
                profile_request.value_column,
                profile_request.valid_range,
                join_policy=profile_request.join_policy,
            )

        metrics = self._metrics.compute_metrics(
            table,
            required_columns,
            invalid_rules,
            outlier_columns,
            duplicate_columns=duplicate_columns,
        )
        scorecard = build_scorecard(
            metrics,
            total_rows=metrics.row_count if grade else None,
            thresholds=self._config.grade_thresholds,
        )

        report = QualityReport(
            row_count=metrics.row_count,
            profile=profile,
            metrics=metrics,
            scorecard=scorecard,
        )
        logger.info(
            "quality_assessment_completed",
            report_id=str(report.report_id),
            row_count=report.row_count,
            profiled_keys=len(profile),
            **metrics.totals(),
        )
        return report
