"""TableAccessor abstract interface and the in-memory implementation.

The quality engine never opens a connection or manages a schema. It is
handed an accessor and only asks it for counts, grouped counts, means,
standard deviations and filtered rows.
"""

from __future__ import annotations

import numbers
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable, Mapping, Sequence
from types import MappingProxyType

import numpy as np

from src.models.common import Scalar
from src.quality.errors import InvalidConfiguration
from src.quality.models import Column, ColumnType, Row
from src.quality.rules import Predicate


class TableAccessor(ABC):
    """Abstract read-only view over a dataset.

    Implementations should push aggregates down into their native engine
    where one exists rather than materializing rows.
    """

    @property
    @abstractmethod
    def columns(self) -> dict[str, ColumnType]:
        """Declared column name -> semantic type, in table order."""
        ...

    @abstractmethod
    def count(self, where: Predicate | None = None) -> int:
        """Number of rows matching ``where`` (all rows when None)."""
        ...

    @abstractmethod
    def grouped_count(
        self,
        group_columns: Sequence[str],
        where: Predicate | None = None,
    ) -> dict[tuple[Scalar, ...], int]:
        """Row count per distinct value tuple of ``group_columns``.

        Only groups with at least one matching row appear. Nulls group
        together, as with SQL ``GROUP BY``.
        """
        ...

    @abstractmethod
    def mean(self, column: str) -> float | None:
        """Mean of the non-null values, or None when there are none."""
        ...

    @abstractmethod
    def stddev(self, column: str, ddof: int = 0) -> float | None:
        """Standard deviation of the non-null values.

        ``ddof=0`` is the population definition, ``ddof=1`` the sample one.
        Returns None when fewer than ``ddof + 1`` values exist.
        """
        ...

    @abstractmethod
    def rows(self, where: Predicate | None = None) -> list[Row]:
        """Rows matching ``where`` as read-only mappings."""
        ...

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def has_column(self, name: str) -> bool:
        return name in self.columns

    def require_columns(
        self,
        names: Iterable[str],
        *,
        role: str = "column",
        column_type: ColumnType | None = None,
    ) -> None:
        """Raise InvalidConfiguration unless every name exists (with the given type)."""
        names = list(names)
        declared = self.columns
        missing = [n for n in names if n not in declared]
        if missing:
            msg = f"Unknown {role}(s) {missing}; table has {list(declared)}."
            raise InvalidConfiguration(msg)
        if column_type is None:
            return
        mistyped = [n for n in names if declared[n] != column_type]
        if mistyped:
            msg = f"{role}(s) {mistyped} must be {column_type.value} columns."
            raise InvalidConfiguration(msg)


class InMemoryTable(TableAccessor):
    """TableAccessor over a pre-materialized list of records.

    Records are copied on construction; absent keys read as null.
    """

    def __init__(
        self,
        columns: Sequence[Column],
        records: Iterable[Mapping[str, Scalar]],
    ) -> None:
        self._columns = {c.name: c.type for c in columns}
        if len(self._columns) != len(columns):
            msg = "Duplicate column names in table declaration."
            raise InvalidConfiguration(msg)

        rows: list[Row] = []
        for i, record in enumerate(records):
            unknown = set(record) - set(self._columns)
            if unknown:
                msg = f"Record {i} has undeclared column(s) {sorted(unknown)}."
                raise InvalidConfiguration(msg)
            for name, column_type in self._columns.items():
                value = record.get(name)
                if column_type == ColumnType.NUMERIC and not _is_number(value):
                    msg = f"Record {i} has non-numeric value {value!r} in NUMERIC column '{name}'."
                    raise InvalidConfiguration(msg)
            rows.append(
                MappingProxyType({name: record.get(name) for name in self._columns})
            )
        self._rows = tuple(rows)

    @property
    def columns(self) -> dict[str, ColumnType]:
        return dict(self._columns)

    def count(self, where: Predicate | None = None) -> int:
        if where is None:
            return len(self._rows)
        return sum(1 for row in self._rows if where.matches(row))

    def grouped_count(
        self,
        group_columns: Sequence[str],
        where: Predicate | None = None,
    ) -> dict[tuple[Scalar, ...], int]:
        counts = Counter(
            tuple(row[c] for c in group_columns) for row in self.rows(where)
        )
        return dict(counts)

    def mean(self, column: str) -> float | None:
        values = self._numeric_values(column)
        if values.size == 0:
            return None
        return float(values.mean())

    def stddev(self, column: str, ddof: int = 0) -> float | None:
        values = self._numeric_values(column)
        if values.size <= ddof:
            return None
        return float(values.std(ddof=ddof))

    def rows(self, where: Predicate | None = None) -> list[Row]:
        if where is None:
            return list(self._rows)
        return [row for row in self._rows if where.matches(row)]

    def _numeric_values(self, column: str) -> np.ndarray:
        return np.asarray(
            [row[column] for row in self._rows if row[column] is not None],
            dtype=np.float64,
        )


def _is_number(value: object) -> bool:
    if value is None:
        return True
    return isinstance(value, numbers.Real) and not isinstance(value, bool)
