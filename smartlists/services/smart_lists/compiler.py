# smartlists/services/smart_lists/compiler.py

"""Rule compiler: turns a Rule into an executable predicate.

Compilation validates the operator against the field registry, resolves the
field reference (plain, parent-aggregated or user-scoped) and parses the
target once. Every failure surfaces here as a RuleValidationError; the
resulting predicate never raises while testing records.

Relative date rules ("NewerThan 7:days") keep their amount and unit so the
cutoff follows the evaluation time rather than the compile time.
"""

from __future__ import annotations

import dataclasses
import logging
import re
import time
from collections.abc import Callable
from typing import Any

from smartlists.core.record import Record, normalize_user_id
from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.fields import (
    RESOLUTION_HEIGHTS,
    FieldFamily,
    FieldSpec,
    ParentAggregatedField,
    PlainField,
    ScopedField,
    validate,
)
from smartlists.services.smart_lists.models import Operator, Rule
from smartlists.services.smart_lists.patterns import PatternCache
from smartlists.services.smart_lists.predicates import (
    AllOf,
    AnyOf,
    BooleanTest,
    DateCompareTest,
    DateDayTest,
    FramerateTest,
    GenericTest,
    ListTest,
    NumberTest,
    Predicate,
    RelativeDateTest,
    ResolutionTest,
    StringTest,
    WeekdayTest,
    split_target_list,
)
from smartlists.utils.date_utils import day_bounds, parse_iso_day, parse_relative_spec
from smartlists.utils.name_utils import DEFAULT_NAME_SUFFIX

__all__ = ["RuleCompiler", "parse_bool_target"]

logger = logging.getLogger("smartlists.smart_lists.compiler")

_CAMEL_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")

# Record attribute -> default value, used to coerce targets of unregistered fields
_RECORD_DEFAULTS: dict[str, Any] = {
    f.name: (f.default_factory() if f.default_factory is not dataclasses.MISSING else f.default)
    for f in dataclasses.fields(Record)
}

# Operator sets for unregistered fields, by attribute type
_GENERIC_ORDERING_OPS: frozenset[Operator] = frozenset(
    {
        Operator.EQUAL,
        Operator.NOT_EQUAL,
        Operator.GREATER_THAN,
        Operator.LESS_THAN,
        Operator.GREATER_THAN_OR_EQUAL,
        Operator.LESS_THAN_OR_EQUAL,
    }
)
_STRING_ONLY_OPS: frozenset[Operator] = frozenset(
    {Operator.CONTAINS, Operator.NOT_CONTAINS, Operator.IS_IN, Operator.IS_NOT_IN, Operator.MATCH_REGEX}
)
_GENERIC_TEXT_OPS = _GENERIC_ORDERING_OPS | _STRING_ONLY_OPS
_GENERIC_LIST_OPS = _STRING_ONLY_OPS | {Operator.EQUAL, Operator.NOT_EQUAL}
_GENERIC_BOOL_OPS: frozenset[Operator] = frozenset({Operator.EQUAL, Operator.NOT_EQUAL})


def parse_bool_target(target: str, field: str = "", operator: Operator | None = None) -> bool:
    """Parses a boolean target, tolerating whitespace and surrounding quotes.

    Args:
        target: Raw target, e.g. ``"true"``, ``' "False" '``.
        field: Field name for the error message.
        operator: Operator for the error message.

    Returns:
        The parsed boolean.

    Raises:
        RuleValidationError: If the target is not true or false.
    """
    text = (target or "").strip().strip("\"'").strip().lower()
    if text == "true":
        return True
    if text == "false":
        return False
    raise RuleValidationError(
        f"Invalid boolean value '{target}' for field '{field}': expected true or false",
        field=field,
        operator=operator,
    )


class RuleCompiler:
    """Compiles rules into predicates and evaluates them.

    Args:
        pattern_cache: Shared regex cache. A private one is created if omitted.
        clock: Returns the current Unix time; used when ``evaluate`` is
            called without an explicit ``now``.
        name_prefix: List-name prefix stripped from Collections values.
        name_suffix: List-name suffix stripped from Collections values.
    """

    def __init__(
        self,
        pattern_cache: PatternCache | None = None,
        clock: Callable[[], float] = time.time,
        name_prefix: str = "",
        name_suffix: str = DEFAULT_NAME_SUFFIX,
    ) -> None:
        self.pattern_cache = pattern_cache if pattern_cache is not None else PatternCache()
        self._clock = clock
        self.name_prefix = name_prefix
        self.name_suffix = name_suffix

    def now(self) -> float:
        return self._clock()

    def evaluate(self, predicate: Predicate, record: Record, now: float | None = None) -> bool:
        """Tests a record against a compiled predicate.

        Args:
            predicate: Result of ``compile``.
            record: The record to test.
            now: Evaluation time in Unix seconds; defaults to the clock.

        Returns:
            True if the record matches.
        """
        return predicate.matches(record, self._clock() if now is None else now)

    def compile(self, rule: Rule, default_user_id: str | None = None) -> Predicate:
        """Compiles a single rule.

        Args:
            rule: The rule to compile.
            default_user_id: User for user-scoped fields when the rule has
                no explicit user id (usually the list owner).

        Returns:
            A frozen, reusable predicate.

        Raises:
            RuleValidationError: If the rule cannot be compiled.
        """
        spec = validate(rule.field, rule.operator)
        if spec is None:
            return self._compile_generic(rule)

        family = spec.family
        if family == FieldFamily.SIMILARITY:
            raise RuleValidationError(
                "SimilarTo rules are scored by the similarity engine, not compiled",
                field=spec.name,
                operator=rule.operator,
            )

        if spec.user_scoped:
            user_id = rule.user_id or default_user_id
            if not user_id:
                raise RuleValidationError(
                    f"Field '{spec.name}' needs a user id but none was given",
                    field=spec.name,
                    operator=rule.operator,
                )
            ref: Any = ScopedField(spec.attribute, normalize_user_id(user_id), spec.user_default)
        elif rule.only_default_audio_language:
            ref = PlainField("default_audio_languages")
        else:
            ref = PlainField(spec.attribute)

        if family in (FieldFamily.STRING, FieldFamily.SIMPLE):
            predicate: Predicate = self._compile_string(rule, spec, ref)
        elif family == FieldFamily.BOOLEAN:
            predicate = BooleanTest(ref, rule.operator, parse_bool_target(rule.target_value, spec.name, rule.operator))
        elif family == FieldFamily.NUMERIC:
            predicate = NumberTest(ref, rule.operator, self._parse_number(rule, spec))
        elif family == FieldFamily.FRAMERATE:
            predicate = FramerateTest(ref, rule.operator, self._parse_number(rule, spec))
        elif family == FieldFamily.RESOLUTION:
            predicate = self._compile_resolution(rule, spec, ref)
        elif family == FieldFamily.DATE:
            predicate = self._compile_date(rule, spec, ref)
        elif rule.include_parent_series and spec.parent_attribute:
            predicate = self._compile_parent_aggregated(rule, spec)
        else:
            predicate = self._compile_list(rule, spec, ref)

        logger.debug("Compiled rule %s %s '%s'", spec.name, rule.operator.value, rule.target_value)
        return predicate

    # ------------------------------------------------------------------
    # Per-family compilation
    # ------------------------------------------------------------------

    def _pattern(self, rule: Rule, spec_name: str) -> re.Pattern[str] | None:
        if rule.operator != Operator.MATCH_REGEX:
            return None
        return self.pattern_cache.get(rule.target_value, field=spec_name)

    def _compile_string(self, rule: Rule, spec: FieldSpec, ref: Any) -> StringTest:
        return StringTest(
            ref=ref,
            operator=rule.operator,
            target=rule.target_value or "",
            items=split_target_list(rule.target_value),
            pattern=self._pattern(rule, spec.name),
        )

    def _compile_list(self, rule: Rule, spec: FieldSpec, ref: Any) -> ListTest:
        strip_names = spec.family == FieldFamily.MULTI_VALUED_LIMITED
        return ListTest(
            ref=ref,
            operator=rule.operator,
            target=rule.target_value or "",
            items=split_target_list(rule.target_value),
            pattern=self._pattern(rule, spec.name),
            strip_names=strip_names,
            name_prefix=self.name_prefix if strip_names else "",
            name_suffix=self.name_suffix if strip_names else "",
        )

    def _compile_parent_aggregated(self, rule: Rule, spec: FieldSpec) -> Predicate:
        ref = ParentAggregatedField(own=spec.attribute, parent=spec.parent_attribute)
        parts = (
            self._compile_list(rule, spec, PlainField(ref.own)),
            self._compile_list(rule, spec, PlainField(ref.parent)),
        )
        if rule.operator.is_negative:
            return AllOf(ref, parts)
        return AnyOf(ref, parts)

    def _parse_number(self, rule: Rule, spec: FieldSpec) -> float:
        text = (rule.target_value or "").strip()
        try:
            if spec.integer_target:
                return int(text)
            return float(text)
        except ValueError:
            kind = "integer" if spec.integer_target else "number"
            raise RuleValidationError(
                f"Invalid {kind} '{rule.target_value}' for field '{spec.name}'",
                field=spec.name,
                operator=rule.operator,
            ) from None

    def _compile_resolution(self, rule: Rule, spec: FieldSpec, ref: Any) -> ResolutionTest:
        target = (rule.target_value or "").strip()
        if target not in RESOLUTION_HEIGHTS:
            raise RuleValidationError(
                f"Invalid resolution value '{rule.target_value}' for field '{spec.name}'. "
                f"Expected one of: {', '.join(RESOLUTION_HEIGHTS)}",
                field=spec.name,
                operator=rule.operator,
            )
        return ResolutionTest(ref, rule.operator, RESOLUTION_HEIGHTS[target])

    def _compile_date(self, rule: Rule, spec: FieldSpec, ref: Any) -> Predicate:
        sentinel = spec.never_sentinel
        target = rule.target_value or ""
        try:
            if rule.operator in (Operator.EQUAL, Operator.NOT_EQUAL):
                start, end = day_bounds(target)
                return DateDayTest(ref, rule.operator, start, end, sentinel)
            if rule.operator in (Operator.AFTER, Operator.BEFORE):
                return DateCompareTest(ref, rule.operator, parse_iso_day(target).timestamp(), sentinel)
            if rule.operator in (Operator.NEWER_THAN, Operator.OLDER_THAN):
                amount, unit = parse_relative_spec(target)
                return RelativeDateTest(ref, rule.operator, amount, unit, sentinel)
            return WeekdayTest(ref, self._parse_weekday(target, spec.name), sentinel)
        except ValueError as exc:
            if isinstance(exc, RuleValidationError):
                raise
            raise RuleValidationError(
                f"Invalid date value '{target}' for field '{spec.name}': {exc}",
                field=spec.name,
                operator=rule.operator,
            ) from exc

    @staticmethod
    def _parse_weekday(target: str, field: str) -> int:
        text = target.strip()
        if not text.lstrip("-").isdigit() or not 0 <= int(text) <= 6:
            raise RuleValidationError(
                f"Invalid weekday '{target}' for field '{field}': expected 0 (Sunday) to 6 (Saturday)",
                field=field,
                operator=Operator.WEEKDAY,
            )
        return int(text)

    # ------------------------------------------------------------------
    # Unregistered fields
    # ------------------------------------------------------------------

    def _compile_generic(self, rule: Rule) -> Predicate:
        """Compiles a rule on a field outside the registry.

        The field name is mapped to a Record attribute (``SeasonNumber`` ->
        ``season_number``) and the target coerced to that attribute's type.
        String attributes accept the String operators plus ordering; list
        attributes accept the multi-valued operators plus NotEqual; booleans
        accept Equal and NotEqual; numbers accept ordering only.
        """
        attr = _CAMEL_BOUNDARY.sub("_", rule.field.strip()).lower()
        if attr not in _RECORD_DEFAULTS:
            raise RuleValidationError(
                f"Unknown field '{rule.field}'",
                field=rule.field,
                operator=rule.operator,
            )

        default = _RECORD_DEFAULTS[attr]
        if isinstance(default, dict):
            raise RuleValidationError(
                f"Field '{rule.field}' is user-scoped and cannot be compared directly",
                field=rule.field,
                operator=rule.operator,
            )

        text = rule.target_value or ""
        ref = PlainField(attr)
        if isinstance(default, list):
            kind = "list"
            allowed = _GENERIC_LIST_OPS
        elif isinstance(default, str):
            kind = "text"
            allowed = _GENERIC_TEXT_OPS
        elif isinstance(default, bool):
            kind = "boolean"
            allowed = _GENERIC_BOOL_OPS
        else:
            kind = "number"
            allowed = _GENERIC_ORDERING_OPS

        if rule.operator not in allowed:
            raise RuleValidationError(
                f"Operator '{rule.operator.value}' cannot be applied to unregistered {kind} field "
                f"'{rule.field}' (supported: {', '.join(o.value for o in Operator if o in allowed)})",
                field=rule.field,
                operator=rule.operator,
                allowed=[o for o in Operator if o in allowed],
            )

        if kind == "list" and rule.operator != Operator.NOT_EQUAL:
            return ListTest(
                ref=ref,
                operator=rule.operator,
                target=text,
                items=split_target_list(text),
                pattern=self._pattern(rule, rule.field),
            )
        if kind == "text" and rule.operator in _STRING_ONLY_OPS:
            return StringTest(
                ref=ref,
                operator=rule.operator,
                target=text,
                items=split_target_list(text),
                pattern=self._pattern(rule, rule.field),
            )

        if kind == "boolean":
            target: Any = parse_bool_target(text, rule.field, rule.operator)
        elif kind == "number":
            try:
                target = float(text.strip())
            except ValueError:
                raise RuleValidationError(
                    f"Invalid number '{text}' for field '{rule.field}'",
                    field=rule.field,
                    operator=rule.operator,
                ) from None
        else:
            target = text
        return GenericTest(ref, rule.operator, target)
