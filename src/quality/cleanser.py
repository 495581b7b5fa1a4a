"""Text cleansing pipeline.

Normalizes free-text values in three fixed steps: whitespace collapse
and trim, whole-string case normalization, then a data-driven table of
typo corrections. Corrections are reapplied until the value stops
changing, so the pipeline is idempotent on its own output. The table is
validated up front to reject chains and casing conflicts.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence
from types import MappingProxyType

from src.quality.config import CorrectionRule
from src.quality.errors import DataQualityError, InvalidConfiguration
from src.quality.models import CorrectionMatch, Row

_WHITESPACE_RUN = re.compile(r"\s+")

# Upper bound on correction passes per value. Every accepted table reaches
# a fixed point long before this.
_MAX_CORRECTION_PASSES = 64


def collapse_whitespace(value: str) -> str:
    """Collapse whitespace runs to a single space and trim both ends."""
    return _WHITESPACE_RUN.sub(" ", value).strip()


def normalize_case(value: str) -> str:
    """Upper-case the first character and lower-case the rest."""
    if not value:
        return value
    head = value[0].upper()
    if len(head) != 1:
        # e.g. "ß".upper() == "SS"; keep the original character.
        head = value[0]
    return head + value[1:].lower()


class Cleanser:
    """Applies the cleansing pipeline to sequences of text values.

    Raises InvalidConfiguration on construction if the correction table
    conflicts with itself or with the normalization steps.
    """

    def __init__(self, corrections: Sequence[CorrectionRule] = ()) -> None:
        _validate_corrections(corrections)
        # Identity entries are no-ops.
        self._corrections = tuple(c for c in corrections if c.find != c.replace)

    def cleanse(self, values: Iterable[str | None]) -> list[str | None]:
        """Return the cleaned values; nulls pass through."""
        return [None if v is None else self.cleanse_value(v) for v in values]

    def cleanse_value(self, value: str) -> str:
        value = normalize_case(collapse_whitespace(value))
        for _ in range(_MAX_CORRECTION_PASSES):
            corrected = self._correct_once(value)
            if corrected == value:
                return value
            value = corrected
        msg = f"Correction table did not settle on a value after {_MAX_CORRECTION_PASSES} passes."
        raise DataQualityError(msg)

    def _correct_once(self, value: str) -> str:
        for rule in self._corrections:
            if rule.match == CorrectionMatch.WHOLE:
                if value == rule.find:
                    value = rule.replace
            else:
                value = value.replace(rule.find, rule.replace)
        return value

    def cleanse_rows(self, rows: Iterable[Row], column: str) -> list[Row]:
        """Cleaned projection of ``column`` over ``rows``; sources are untouched."""
        projected: list[Row] = []
        for row in rows:
            if column not in row:
                msg = f"Row has no column '{column}'."
                raise InvalidConfiguration(msg)
            cleaned = dict(row)
            value = cleaned[column]
            if value is not None:
                cleaned[column] = self.cleanse_value(str(value))
            projected.append(MappingProxyType(cleaned))
        return projected


# ---------------------------------------------------------------------------
# Correction table validation
# ---------------------------------------------------------------------------


def _validate_corrections(corrections: Sequence[CorrectionRule]) -> None:
    seen: set[str] = set()
    for rule in corrections:
        if rule.find in seen:
            msg = f"Correction table lists '{rule.find}' more than once."
            raise InvalidConfiguration(msg)
        seen.add(rule.find)
        _check_rule_shape(rule)

    active = [c for c in corrections if c.find != c.replace]
    for rule in active:
        for other in active:
            chained = (
                rule.replace == other.find
                if other.match == CorrectionMatch.WHOLE
                else other.find in rule.replace
            )
            if chained:
                msg = (
                    f"Correction '{rule.find}' -> '{rule.replace}' produces text "
                    f"matched by '{other.find}'."
                )
                raise InvalidConfiguration(msg)


def _check_rule_shape(rule: CorrectionRule) -> None:
    find, replace = rule.find, rule.replace
    if _WHITESPACE_RUN.sub(" ", find) != find:
        msg = f"Correction find '{find}' contains whitespace that is always collapsed."
        raise InvalidConfiguration(msg)

    if rule.match == CorrectionMatch.WHOLE:
        # Whole-value entries compare against fully normalized values.
        for text in (find, replace):
            if normalize_case(collapse_whitespace(text)) != text:
                msg = f"Whole-value correction text '{text}' is not in normalized form."
                raise InvalidConfiguration(msg)
        return

    if not replace or collapse_whitespace(replace) != replace:
        msg = f"Substring correction replace '{replace}' must be non-empty and trimmed."
        raise InvalidConfiguration(msg)
    for text in (find, replace):
        if text[1:] != text[1:].lower():
            msg = f"Substring correction text '{text}' would be lower-cased."
            raise InvalidConfiguration(msg)
    # Only the leading character of a value keeps an upper-case letter.
    if _casing(find[0]) != _casing(replace[0]):
        msg = (
            f"Substring correction '{find}' -> '{replace}' changes the casing "
            "of its first character."
        )
        raise InvalidConfiguration(msg)


def _casing(char: str) -> str:
    if char.upper() == char.lower():
        return "none"
    return "upper" if char == char.upper() else "lower"
