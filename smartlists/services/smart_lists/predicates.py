# smartlists/services/smart_lists/predicates.py

"""Compiled rule predicates.

A predicate is a frozen instruction holding a resolved field reference, the
operator and a pre-parsed target. ``matches(record, now)`` interprets it with
plain attribute access. Predicates carry no mutable state and can be shared
between threads and reused for every record of a refresh pass.

Absent values (never played, unknown resolution, missing framerate) always
evaluate to False instead of raising.
"""

from __future__ import annotations

import operator as op
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Protocol

from smartlists.core.record import Record
from smartlists.services.smart_lists.fields import (
    FieldRef,
    ParentAggregatedField,
    PlainField,
    ScopedField,
    resolution_height,
)
from smartlists.services.smart_lists.models import Operator
from smartlists.utils.date_utils import relative_cutoff, weekday_sunday_first
from smartlists.utils.name_utils import strip_prefix_and_suffix

__all__ = [
    "AllOf",
    "AnyOf",
    "BooleanTest",
    "DateCompareTest",
    "DateDayTest",
    "FramerateTest",
    "GenericTest",
    "ListTest",
    "NumberTest",
    "Predicate",
    "RelativeDateTest",
    "ResolutionTest",
    "StringTest",
    "WeekdayTest",
    "any_item_contains",
    "any_item_equals",
    "any_item_in_list",
    "any_regex_match",
    "read_field",
    "split_target_list",
    "string_is_in_list",
]

_ORDERING: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQUAL: op.eq,
    Operator.NOT_EQUAL: op.ne,
    Operator.GREATER_THAN: op.gt,
    Operator.LESS_THAN: op.lt,
    Operator.GREATER_THAN_OR_EQUAL: op.ge,
    Operator.LESS_THAN_OR_EQUAL: op.le,
}


class Predicate(Protocol):
    """Anything that can test a record."""

    def matches(self, record: Record, now: float) -> bool: ...


# ========================================================================
# FIELD ACCESS
# ========================================================================


def read_field(ref: FieldRef, record: Record) -> Any:
    """Reads the value a field reference points to.

    Args:
        ref: A PlainField or ScopedField. Parent-aggregated references are
            split into two PlainField predicates at compile time.
        record: The record to read from.

    Returns:
        The raw attribute value.
    """
    if isinstance(ref, ScopedField):
        return getattr(record, ref.attribute).get(ref.user_id, ref.default)
    if isinstance(ref, PlainField):
        return getattr(record, ref.attribute)
    raise TypeError(f"Cannot read {ref!r} directly")


# ========================================================================
# LIST HELPERS
# ========================================================================


def split_target_list(target: str) -> tuple[str, ...]:
    """Splits a ``;``-delimited target into trimmed, non-empty entries."""
    return tuple(part.strip() for part in (target or "").split(";") if part.strip())


def string_is_in_list(value: str | None, items: Iterable[str]) -> bool:
    """True if ``value`` contains any of ``items``, ignoring case.

    An empty value or an empty item list never matches.
    """
    if not value:
        return False
    lowered = value.lower()
    return any(item.lower() in lowered for item in items)


def any_item_equals(values: Iterable[str], target: str) -> bool:
    lowered = target.lower()
    return any(value is not None and value.lower() == lowered for value in values)


def any_item_contains(values: Iterable[str], target: str) -> bool:
    lowered = target.lower()
    return any(value is not None and lowered in value.lower() for value in values)


def any_item_in_list(values: Iterable[str], items: Iterable[str]) -> bool:
    items = tuple(items)
    return any(string_is_in_list(value, items) for value in values)


def any_regex_match(values: list[str], pattern: re.Pattern[str]) -> bool:
    """Searches every value with ``pattern``; an empty list is tested as ``""``."""
    if not values:
        return pattern.search("") is not None
    return any(pattern.search(value or "") is not None for value in values)


# ========================================================================
# INSTRUCTIONS
# ========================================================================


@dataclass(frozen=True)
class StringTest:
    """Single string value (String and Simple families)."""

    ref: FieldRef
    operator: Operator
    target: str
    items: tuple[str, ...] = ()
    pattern: re.Pattern[str] | None = None

    def matches(self, record: Record, now: float) -> bool:
        value = read_field(self.ref, record) or ""
        if self.operator == Operator.EQUAL:
            return value.lower() == self.target.lower()
        if self.operator == Operator.NOT_EQUAL:
            return value.lower() != self.target.lower()
        if self.operator == Operator.CONTAINS:
            return self.target.lower() in value.lower()
        if self.operator == Operator.NOT_CONTAINS:
            return self.target.lower() not in value.lower()
        if self.operator == Operator.IS_IN:
            return string_is_in_list(value, self.items)
        if self.operator == Operator.IS_NOT_IN:
            return not string_is_in_list(value, self.items)
        if self.operator == Operator.MATCH_REGEX and self.pattern is not None:
            return self.pattern.search(value) is not None
        return False


@dataclass(frozen=True)
class BooleanTest:
    ref: FieldRef
    operator: Operator
    expected: bool

    def matches(self, record: Record, now: float) -> bool:
        value = bool(read_field(self.ref, record))
        if self.operator == Operator.NOT_EQUAL:
            return value != self.expected
        return value == self.expected


@dataclass(frozen=True)
class NumberTest:
    ref: FieldRef
    operator: Operator
    target: float

    def matches(self, record: Record, now: float) -> bool:
        value = read_field(self.ref, record)
        if value is None:
            return False
        return _ORDERING[self.operator](value, self.target)


@dataclass(frozen=True)
class FramerateTest:
    """Nullable float comparison; a missing framerate never matches."""

    ref: FieldRef
    operator: Operator
    target: float

    def matches(self, record: Record, now: float) -> bool:
        value = read_field(self.ref, record)
        if value is None:
            return False
        return _ORDERING[self.operator](float(value), self.target)


@dataclass(frozen=True)
class ResolutionTest:
    """Compares the pixel height of the record's resolution bucket."""

    ref: FieldRef
    operator: Operator
    target_height: int

    def matches(self, record: Record, now: float) -> bool:
        height = resolution_height(read_field(self.ref, record) or "")
        if height <= 0:
            return False
        return _ORDERING[self.operator](height, self.target_height)


def _date_value(ref: FieldRef, record: Record, sentinel: float | None) -> float | None:
    value = read_field(ref, record)
    if value is None or (sentinel is not None and value == sentinel):
        return None
    return float(value)


@dataclass(frozen=True)
class DateDayTest:
    """Equal / NotEqual against the half-open UTC day ``[start, end)``."""

    ref: FieldRef
    operator: Operator
    start: float
    end: float
    sentinel: float | None = None

    def matches(self, record: Record, now: float) -> bool:
        value = _date_value(self.ref, record, self.sentinel)
        if value is None:
            return False
        inside = self.start <= value < self.end
        return inside if self.operator == Operator.EQUAL else not inside


@dataclass(frozen=True)
class DateCompareTest:
    """Strict After / Before against an absolute instant."""

    ref: FieldRef
    operator: Operator
    target: float
    sentinel: float | None = None

    def matches(self, record: Record, now: float) -> bool:
        value = _date_value(self.ref, record, self.sentinel)
        if value is None:
            return False
        if self.operator == Operator.AFTER:
            return value > self.target
        return value < self.target


@dataclass(frozen=True)
class RelativeDateTest:
    """NewerThan / OlderThan; the cutoff is computed from ``now`` on every call."""

    ref: FieldRef
    operator: Operator
    amount: int
    unit: str
    sentinel: float | None = None

    def matches(self, record: Record, now: float) -> bool:
        value = _date_value(self.ref, record, self.sentinel)
        if value is None:
            return False
        cutoff = relative_cutoff(now, self.amount, self.unit)
        if self.operator == Operator.NEWER_THAN:
            return value >= cutoff
        return value < cutoff


@dataclass(frozen=True)
class WeekdayTest:
    ref: FieldRef
    day: int
    sentinel: float | None = None

    def matches(self, record: Record, now: float) -> bool:
        value = _date_value(self.ref, record, self.sentinel)
        if value is None:
            return False
        return weekday_sunday_first(value) == self.day


@dataclass(frozen=True)
class ListTest:
    """Multi-valued string fields.

    When ``strip_names`` is set (Collections), Equal also compares each
    value with the configured list-name prefix/suffix removed.
    """

    ref: FieldRef
    operator: Operator
    target: str
    items: tuple[str, ...] = ()
    pattern: re.Pattern[str] | None = None
    strip_names: bool = False
    name_prefix: str = ""
    name_suffix: str = ""

    def matches(self, record: Record, now: float) -> bool:
        values = read_field(self.ref, record) or []
        if self.operator == Operator.EQUAL:
            if any_item_equals(values, self.target):
                return True
            if self.strip_names:
                stripped = [strip_prefix_and_suffix(v, self.name_prefix, self.name_suffix) for v in values]
                return any_item_equals(stripped, self.target)
            return False
        if self.operator == Operator.CONTAINS:
            return any_item_contains(values, self.target)
        if self.operator == Operator.NOT_CONTAINS:
            return not any_item_contains(values, self.target)
        if self.operator == Operator.IS_IN:
            return any_item_in_list(values, self.items)
        if self.operator == Operator.IS_NOT_IN:
            return not any_item_in_list(values, self.items)
        if self.operator == Operator.MATCH_REGEX and self.pattern is not None:
            return any_regex_match(values, self.pattern)
        return False


@dataclass(frozen=True)
class GenericTest:
    """Fallback comparison for fields outside the registry.

    The target was coerced to the attribute's type at compile time.
    """

    ref: FieldRef
    operator: Operator
    target: Any

    def matches(self, record: Record, now: float) -> bool:
        value = read_field(self.ref, record)
        if value is None:
            return False
        if isinstance(value, str):
            value = value.lower()
            target = str(self.target).lower()
            if self.operator == Operator.CONTAINS:
                return target in value
            if self.operator == Operator.NOT_CONTAINS:
                return target not in value
            return _ORDERING[self.operator](value, target)
        if isinstance(value, list):
            hit = any_item_equals(value, str(self.target))
            return not hit if self.operator == Operator.NOT_EQUAL else hit
        return _ORDERING[self.operator](value, self.target)


# ========================================================================
# COMBINATIONS
# ========================================================================


@dataclass(frozen=True)
class AnyOf:
    """True if any part matches (parent aggregation, positive operators)."""

    ref: ParentAggregatedField
    parts: tuple[Predicate, ...]

    def matches(self, record: Record, now: float) -> bool:
        return any(part.matches(record, now) for part in self.parts)


@dataclass(frozen=True)
class AllOf:
    """True if every part matches (parent aggregation, negative operators)."""

    ref: ParentAggregatedField
    parts: tuple[Predicate, ...]

    def matches(self, record: Record, now: float) -> bool:
        return all(part.matches(record, now) for part in self.parts)
