"""Quality scoring configuration.

Provides the grading bands, outlier threshold, standard-deviation
definition, profiling join policy and the correction-rule schema used
by the cleanser. Defaults can be overridden per call or taken from the
environment through ``QualityScoringConfig.from_settings``.
"""

from __future__ import annotations

from pydantic import Field, model_validator

from src.config.settings import Settings, get_settings
from src.models.common import ScorecardBase
from src.quality.models import CorrectionMatch, JoinPolicy


class GradeThresholds(ScorecardBase, frozen=True):
    """Minimum quality ratio for each passing grade.

    Defaults: A >= 0.9, B >= 0.8, C >= 0.7, D >= 0.6, F below.
    """

    a_min: float = Field(default=0.9, ge=0.0, le=1.0)
    b_min: float = Field(default=0.8, ge=0.0, le=1.0)
    c_min: float = Field(default=0.7, ge=0.0, le=1.0)
    d_min: float = Field(default=0.6, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def _strictly_descending(self) -> GradeThresholds:
        if not self.a_min > self.b_min > self.c_min > self.d_min:
            msg = (
                "grade thresholds must be strictly descending: "
                f"A={self.a_min}, B={self.b_min}, C={self.c_min}, D={self.d_min}"
            )
            raise ValueError(msg)
        return self


class CorrectionRule(ScorecardBase, frozen=True):
    """One known-bad -> corrected text entry of the typo table."""

    find: str = Field(min_length=1)
    replace: str
    match: CorrectionMatch = CorrectionMatch.SUBSTRING


class QualityScoringConfig(ScorecardBase):
    """Configuration for the profiler and the metrics engine."""

    grade_thresholds: GradeThresholds = Field(default_factory=GradeThresholds)
    outlier_sigma: float = Field(default=3.0, gt=0.0)
    stddev_ddof: int = Field(default=0, ge=0, le=1)
    join_policy: JoinPolicy = JoinPolicy.STRICT
    default_valid_range: tuple[float, float] = (0.0, 100.0)

    @model_validator(mode="after")
    def _valid_range_ordered(self) -> QualityScoringConfig:
        low, high = self.default_valid_range
        if low > high:
            msg = f"default_valid_range is inverted: {low} > {high}"
            raise ValueError(msg)
        return self

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> QualityScoringConfig:
        """Build a config from environment-driven settings."""
        s = settings or get_settings()
        return cls(
            outlier_sigma=s.OUTLIER_SIGMA,
            stddev_ddof=s.STDDEV_DDOF,
            join_policy=s.PROFILE_JOIN_POLICY,
        )
