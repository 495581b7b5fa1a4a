"""Row predicates and per-column validity rules.

Predicates are plain data: in-memory accessors evaluate them with
``matches`` and SQL accessors translate them into WHERE clauses, so the
same rule can be pushed down into a database.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from src.models.common import Scalar
from src.quality.errors import InvalidConfiguration
from src.quality.models import ColumnType, Row

# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IsNull:
    """Matches rows whose ``column`` is null."""

    column: str

    def matches(self, row: Row) -> bool:
        return row.get(self.column) is None

    def columns(self) -> set[str]:
        return {self.column}


@dataclass(frozen=True)
class OutsideRange:
    """Matches rows whose ``column`` lies strictly outside ``[low, high]``.

    A missing bound is open-ended. Nulls never match.
    """

    column: str
    low: float | None = None
    high: float | None = None

    def __post_init__(self) -> None:
        _check_bounds(self.column, self.low, self.high)

    def matches(self, row: Row) -> bool:
        value = row.get(self.column)
        if value is None:
            return False
        if self.low is not None and value < self.low:
            return True
        return self.high is not None and value > self.high

    def columns(self) -> set[str]:
        return {self.column}


@dataclass(frozen=True)
class NotIn:
    """Matches rows whose non-null ``column`` value is not in ``values``."""

    column: str
    values: frozenset[Scalar]

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", frozenset(self.values))

    def matches(self, row: Row) -> bool:
        value = row.get(self.column)
        return value is not None and value not in self.values

    def columns(self) -> set[str]:
        return {self.column}


@dataclass(frozen=True)
class AnyOf:
    """Logical OR of predicates. An empty AnyOf matches nothing."""

    predicates: tuple[Predicate, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "predicates", tuple(self.predicates))

    def matches(self, row: Row) -> bool:
        return any(p.matches(row) for p in self.predicates)

    def columns(self) -> set[str]:
        cols: set[str] = set()
        for p in self.predicates:
            cols |= p.columns()
        return cols


Predicate = IsNull | OutsideRange | NotIn | AnyOf


# ---------------------------------------------------------------------------
# Validity rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidRange:
    """Numeric value must lie in the closed interval ``[low, high]``."""

    column: str
    low: float | None = None
    high: float | None = None

    #: Column types this rule can be applied to.
    applies_to = frozenset({ColumnType.NUMERIC})

    def __post_init__(self) -> None:
        _check_bounds(self.column, self.low, self.high)

    def violation(self) -> OutsideRange:
        return OutsideRange(self.column, self.low, self.high)


@dataclass(frozen=True)
class AllowedValues:
    """Value must be one of an enumerated set."""

    column: str
    values: frozenset[Scalar]

    applies_to = frozenset({ColumnType.NUMERIC, ColumnType.TEXT})

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", frozenset(self.values))
        if not self.values:
            msg = f"AllowedValues for column '{self.column}' lists no values."
            raise InvalidConfiguration(msg)

    def violation(self) -> NotIn:
        return NotIn(self.column, frozenset(self.values))


ValidityRule = ValidRange | AllowedValues


def any_violation(rules: Sequence[ValidityRule]) -> AnyOf:
    """Predicate matching rows that break at least one of ``rules``."""
    return AnyOf(tuple(rule.violation() for rule in rules))


def _check_bounds(column: str, low: float | None, high: float | None) -> None:
    if low is None and high is None:
        msg = f"Range on column '{column}' needs at least one bound."
        raise InvalidConfiguration(msg)
    if low is not None and high is not None and low > high:
        msg = f"Range on column '{column}' is inverted: low={low} > high={high}."
        raise InvalidConfiguration(msg)
