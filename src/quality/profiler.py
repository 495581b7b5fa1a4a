"""Per-group data profiling.

For every value of a grouping column, counts the rows whose tracked
value is missing, outside the valid range, or shared with another row
of the same group, and reconciles the three measures by key.
"""

from __future__ import annotations

import logging
from collections import defaultdict

from src.models.common import Scalar
from src.quality.config import QualityScoringConfig
from src.quality.errors import InvalidConfiguration
from src.quality.models import ColumnType, JoinPolicy, ProfileResult
from src.quality.rules import IsNull, OutsideRange
from src.quality.table import TableAccessor

logger = logging.getLogger(__name__)


class Profiler:
    """Computes missing / invalid / duplicate counts per grouping key."""

    def __init__(self, config: QualityScoringConfig | None = None) -> None:
        self._config = config or QualityScoringConfig()

    def profile(
        self,
        table: TableAccessor,
        group_key: str,
        value_column: str,
        valid_range: tuple[float, float] | None = None,
        *,
        join_policy: JoinPolicy | None = None,
    ) -> list[ProfileResult]:
        """Profile ``value_column`` grouped by ``group_key``.

        Args:
            table: Source accessor.
            group_key: Column whose values identify the groups
                (e.g. competitor name).
            value_column: Numeric column being tracked (e.g. price).
            valid_range: Closed ``(low, high)`` interval of valid values;
                defaults to the configured range.
            join_policy: STRICT drops any key absent from one of the three
                measures; INCLUSIVE reports every key, zero-filled.

        Returns:
            One ProfileResult per reported key, ordered by key (nulls last).

        Raises:
            InvalidConfiguration: On unknown or mistyped columns, or an
                inverted range. Raised before any aggregate is computed.
        """
        low, high = valid_range or self._config.default_valid_range
        policy = join_policy or self._config.join_policy

        table.require_columns([group_key], role="group key")
        table.require_columns(
            [value_column], role="value column", column_type=ColumnType.NUMERIC
        )
        if group_key == value_column:
            msg = f"group key and value column are both '{group_key}'."
            raise InvalidConfiguration(msg)
        out_of_range = OutsideRange(value_column, low, high)

        missing = _by_key(table.grouped_count([group_key], IsNull(value_column)))
        invalid = _by_key(table.grouped_count([group_key], out_of_range))

        duplicate: dict[Scalar, int] = defaultdict(int)
        for (key, _value), n in table.grouped_count([group_key, value_column]).items():
            if n > 1:
                duplicate[key] += n

        if policy == JoinPolicy.STRICT:
            keys = missing.keys() & invalid.keys() & duplicate.keys()
        else:
            keys = _by_key(table.grouped_count([group_key])).keys()

        logger.debug(
            "profiled %s by %s: %d keys (%s)", value_column, group_key, len(keys), policy
        )
        return [
            ProfileResult(
                key=key,
                missing_count=missing.get(key, 0),
                invalid_count=invalid.get(key, 0),
                duplicate_count=duplicate.get(key, 0),
            )
            for key in sorted(keys, key=_null_last)
        ]


def _by_key(counts: dict[tuple[Scalar, ...], int]) -> dict[Scalar, int]:
    return {group[0]: n for group, n in counts.items()}


def _null_last(key: Scalar) -> tuple[bool, bool, Scalar]:
    # Numbers before text so keys of mixed type still order.
    return (key is None, isinstance(key, str), key if key is not None else 0)
