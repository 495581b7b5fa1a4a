"""SQLAlchemy-backed TableAccessor.

Translates predicates into WHERE clauses and answers every aggregate
with a SELECT, so counts, group counts, means and standard deviations
are computed by the database instead of in Python.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from types import MappingProxyType

import sqlalchemy as sa
from sqlalchemy.engine import Engine

from src.models.common import Scalar
from src.quality.errors import InvalidConfiguration
from src.quality.models import ColumnType, Row
from src.quality.rules import AnyOf, IsNull, NotIn, OutsideRange, Predicate
from src.quality.table import TableAccessor

logger = logging.getLogger(__name__)

_NUMERIC_TYPES = (sa.Integer, sa.Numeric, sa.Float)


class SqlTable(TableAccessor):
    """TableAccessor over one table reachable through a SQLAlchemy engine.

    ``table`` is either a ``sa.Table`` or a table name to reflect.
    Column types are inferred from the SQL types (integer, numeric and
    float columns are NUMERIC, everything else TEXT) unless overridden
    through ``column_types``.
    """

    def __init__(
        self,
        engine: Engine,
        table: sa.Table | str,
        *,
        schema: str | None = None,
        column_types: Mapping[str, ColumnType] | None = None,
    ) -> None:
        self._engine = engine
        if isinstance(table, str):
            table = sa.Table(table, sa.MetaData(), schema=schema, autoload_with=engine)
        self._table = table

        overrides = dict(column_types or {})
        unknown = set(overrides) - set(table.c.keys())
        if unknown:
            msg = f"column_types names unknown column(s) {sorted(unknown)}."
            raise InvalidConfiguration(msg)

        self._columns: dict[str, ColumnType] = {}
        for col in table.c:
            if col.key in overrides:
                self._columns[col.key] = overrides[col.key]
            elif isinstance(col.type, _NUMERIC_TYPES):
                self._columns[col.key] = ColumnType.NUMERIC
            else:
                self._columns[col.key] = ColumnType.TEXT

    @property
    def columns(self) -> dict[str, ColumnType]:
        return dict(self._columns)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    def count(self, where: Predicate | None = None) -> int:
        stmt = sa.select(sa.func.count()).select_from(self._table)
        stmt = self._filter(stmt, where)
        return int(self._scalar(stmt) or 0)

    def grouped_count(
        self,
        group_columns: Sequence[str],
        where: Predicate | None = None,
    ) -> dict[tuple[Scalar, ...], int]:
        cols = [self._table.c[name] for name in group_columns]
        stmt = sa.select(*cols, sa.func.count()).select_from(self._table)
        stmt = self._filter(stmt, where).group_by(*cols)
        with self._engine.connect() as conn:
            result = conn.execute(stmt).all()
        return {tuple(row[:-1]): int(row[-1]) for row in result}

    def mean(self, column: str) -> float | None:
        value = self._scalar(sa.select(sa.func.avg(self._table.c[column])))
        return None if value is None else float(value)

    def stddev(self, column: str, ddof: int = 0) -> float | None:
        col = self._table.c[column]
        n = int(self._scalar(sa.select(sa.func.count(col))) or 0)
        if n <= ddof:
            return None
        mu = self.mean(column)
        # Two-pass sum of squared deviations; not every backend ships STDDEV.
        deviation = col - sa.literal(mu, sa.Float)
        ss = self._scalar(
            sa.select(sa.func.sum(deviation * deviation)).where(col.is_not(None))
        )
        variance = float(ss or 0.0) / (n - ddof)
        return math.sqrt(max(variance, 0.0))

    def rows(self, where: Predicate | None = None) -> list[Row]:
        stmt = self._filter(sa.select(self._table), where)
        with self._engine.connect() as conn:
            result = conn.execute(stmt).mappings().all()
        return [MappingProxyType(dict(r)) for r in result]

    # ------------------------------------------------------------------
    # Predicate translation
    # ------------------------------------------------------------------

    def to_clause(self, predicate: Predicate) -> sa.ColumnElement[bool]:
        """Translate a predicate into a SQL boolean expression."""
        if isinstance(predicate, IsNull):
            return self._table.c[predicate.column].is_(None)
        if isinstance(predicate, OutsideRange):
            col = self._table.c[predicate.column]
            parts = []
            if predicate.low is not None:
                parts.append(col < predicate.low)
            if predicate.high is not None:
                parts.append(col > predicate.high)
            return sa.or_(*parts)
        if isinstance(predicate, NotIn):
            col = self._table.c[predicate.column]
            return sa.and_(col.is_not(None), col.not_in(list(predicate.values)))
        if isinstance(predicate, AnyOf):
            if not predicate.predicates:
                return sa.false()
            return sa.or_(*(self.to_clause(p) for p in predicate.predicates))
        msg = f"Unsupported predicate type: {type(predicate).__name__}"
        raise TypeError(msg)

    def _filter(self, stmt, where: Predicate | None):
        if where is None:
            return stmt
        return stmt.where(self.to_clause(where))

    def _scalar(self, stmt):
        logger.debug("sql_table query: %s", stmt)
        with self._engine.connect() as conn:
            return conn.execute(stmt).scalar()
