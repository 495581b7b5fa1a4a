"""Tests for Profiler -- per-group missing / invalid / duplicate counts.

Covers: strict and inclusive join policies, null-check missing counts,
inclusive range bounds, duplicate attribution by group, ordering and
configuration errors.
"""

from __future__ import annotations

import pytest

from src.quality.config import QualityScoringConfig
from src.quality.errors import InvalidConfiguration
from src.quality.models import Column, ColumnType, JoinPolicy, ProfileResult
from src.quality.profiler import Profiler
from src.quality.table import InMemoryTable


@pytest.fixture
def profiler() -> Profiler:
    return Profiler()


def _by_key(results: list[ProfileResult]) -> dict:
    return {r.key: r for r in results}


# ===================================================================
# Strict join (default)
# ===================================================================


class TestStrictJoin:
    """Keys must appear under all three measures."""

    def test_only_fully_flagged_keys_reported(
        self, profiler: Profiler, pricing: InMemoryTable
    ) -> None:
        results = profiler.profile(pricing, "competitor_name", "price")
        assert [r.key for r in results] == ["BulbBarn", "GardenCo"]

    def test_counts(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        results = _by_key(profiler.profile(pricing, "competitor_name", "price"))
        assert results["GardenCo"] == ProfileResult(
            key="GardenCo", missing_count=1, invalid_count=1, duplicate_count=2
        )
        assert results["BulbBarn"] == ProfileResult(
            key="BulbBarn", missing_count=1, invalid_count=1, duplicate_count=3
        )

    def test_missing_is_null_check_not_empty_group(
        self, profiler: Profiler, pricing: InMemoryTable
    ) -> None:
        results = profiler.profile(pricing, "competitor_name", "price")
        assert results  # an empty-group predicate would never report anything
        assert all(r.missing_count > 0 for r in results)


# ===================================================================
# Inclusive join
# ===================================================================


class TestInclusiveJoin:
    """Every key in the table is reported, zero-filled."""

    def test_all_keys_reported(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        results = profiler.profile(
            pricing, "competitor_name", "price", join_policy=JoinPolicy.INCLUSIVE
        )
        assert [r.key for r in results] == ["BulbBarn", "FloraMart", "GardenCo", "Petals"]

    def test_zero_filled(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        results = _by_key(
            profiler.profile(
                pricing, "competitor_name", "price", join_policy=JoinPolicy.INCLUSIVE
            )
        )
        assert results["Petals"].missing_count == 0
        assert results["Petals"].invalid_count == 0
        assert results["Petals"].duplicate_count == 0
        assert results["FloraMart"].invalid_count == 1
        assert results["FloraMart"].duplicate_count == 2

    def test_policy_from_config(self, pricing: InMemoryTable) -> None:
        profiler = Profiler(QualityScoringConfig(join_policy=JoinPolicy.INCLUSIVE))
        assert len(profiler.profile(pricing, "competitor_name", "price")) == 4

    def test_null_key_sorted_last(self, profiler: Profiler) -> None:
        table = InMemoryTable(
            [Column("k"), Column("v", ColumnType.NUMERIC)],
            [{"k": None, "v": 1.0}, {"k": "b", "v": 1.0}, {"k": "a", "v": 1.0}],
        )
        results = profiler.profile(table, "k", "v", join_policy=JoinPolicy.INCLUSIVE)
        assert [r.key for r in results] == ["a", "b", None]

    def test_mixed_type_keys_sorted(self, profiler: Profiler) -> None:
        table = InMemoryTable(
            [Column("k"), Column("v", ColumnType.NUMERIC)],
            [{"k": "b", "v": 1.0}, {"k": None, "v": 1.0}, {"k": 2, "v": 1.0}, {"k": "a", "v": 1.0}],
        )
        results = profiler.profile(table, "k", "v", join_policy=JoinPolicy.INCLUSIVE)
        assert [r.key for r in results] == [2, "a", "b", None]


# ===================================================================
# Range and duplicate semantics
# ===================================================================


class TestSemantics:

    def _table(self, prices: list[float | None]) -> InMemoryTable:
        return InMemoryTable(
            [Column("k"), Column("v", ColumnType.NUMERIC)],
            [{"k": "x", "v": p} for p in prices],
        )

    def test_range_bounds_are_valid(self, profiler: Profiler) -> None:
        table = self._table([0.0, 100.0, 50.0])
        result = profiler.profile(table, "k", "v", join_policy=JoinPolicy.INCLUSIVE)
        assert result[0].invalid_count == 0

    def test_custom_valid_range(self, profiler: Profiler) -> None:
        table = self._table([1.0, 5.0, 10.0])
        result = profiler.profile(
            table, "k", "v", (2.0, 8.0), join_policy=JoinPolicy.INCLUSIVE
        )
        assert result[0].invalid_count == 2

    def test_nulls_are_missing_not_invalid(self, profiler: Profiler) -> None:
        table = self._table([None, 5.0])
        result = profiler.profile(table, "k", "v", join_policy=JoinPolicy.INCLUSIVE)
        assert result[0].missing_count == 1
        assert result[0].invalid_count == 0

    def test_duplicates_sum_every_repeated_value(self, profiler: Profiler) -> None:
        table = self._table([1.0, 1.0, 2.0, 2.0, 2.0, 3.0])
        result = profiler.profile(table, "k", "v", join_policy=JoinPolicy.INCLUSIVE)
        assert result[0].duplicate_count == 5

    def test_duplicates_do_not_cross_groups(self, profiler: Profiler) -> None:
        table = InMemoryTable(
            [Column("k"), Column("v", ColumnType.NUMERIC)],
            [{"k": "a", "v": 1.0}, {"k": "b", "v": 1.0}],
        )
        results = profiler.profile(table, "k", "v", join_policy=JoinPolicy.INCLUSIVE)
        assert all(r.duplicate_count == 0 for r in results)

    def test_empty_table(self, profiler: Profiler, inventory_columns) -> None:
        table = InMemoryTable(inventory_columns, [])
        assert profiler.profile(table, "species", "price") == []
        assert (
            profiler.profile(
                table, "species", "price", join_policy=JoinPolicy.INCLUSIVE
            )
            == []
        )


# ===================================================================
# Configuration errors
# ===================================================================


class TestConfigurationErrors:

    def test_unknown_group_key(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        with pytest.raises(InvalidConfiguration, match="group key"):
            profiler.profile(pricing, "store", "price")

    def test_unknown_value_column(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        with pytest.raises(InvalidConfiguration, match="value column"):
            profiler.profile(pricing, "competitor_name", "cost")

    def test_text_value_column(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        with pytest.raises(InvalidConfiguration, match="NUMERIC"):
            profiler.profile(pricing, "price", "competitor_name")

    def test_same_column_twice(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        with pytest.raises(InvalidConfiguration, match="both"):
            profiler.profile(pricing, "price", "price")

    def test_inverted_range(self, profiler: Profiler, pricing: InMemoryTable) -> None:
        with pytest.raises(InvalidConfiguration, match="inverted"):
            profiler.profile(pricing, "competitor_name", "price", (100.0, 0.0))
