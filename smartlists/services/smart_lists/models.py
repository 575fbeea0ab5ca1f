# smartlists/services/smart_lists/models.py

"""Data models for smart lists: operators, rules, rule-sets and ordering.

A smart list is a list of rule-sets. Rules inside one rule-set are AND-ed,
the rule-sets themselves are OR-ed. Also provides the JSON helpers that read
and write the persisted definition shape (PascalCase keys such as
``MemberName`` / ``Operator`` / ``TargetValue``).
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from smartlists.services.smart_lists.errors import RuleValidationError

__all__ = [
    "PARENT_SERIES_FIELDS",
    "Operator",
    "Rule",
    "RuleSet",
    "SmartList",
    "SortOption",
    "SortOrder",
    "parse_operator",
    "rule_from_dict",
    "rule_set_from_dict",
    "rule_set_to_dict",
    "rule_to_dict",
    "smart_list_from_dict",
    "smart_list_from_json",
    "smart_list_to_dict",
    "smart_list_to_json",
]

logger = logging.getLogger("smartlists.smart_lists.models")


class Operator(Enum):
    """Comparison operators a rule can use."""

    EQUAL = "Equal"
    NOT_EQUAL = "NotEqual"
    CONTAINS = "Contains"
    NOT_CONTAINS = "NotContains"
    IS_IN = "IsIn"
    IS_NOT_IN = "IsNotIn"
    GREATER_THAN = "GreaterThan"
    LESS_THAN = "LessThan"
    GREATER_THAN_OR_EQUAL = "GreaterThanOrEqual"
    LESS_THAN_OR_EQUAL = "LessThanOrEqual"
    MATCH_REGEX = "MatchRegex"
    AFTER = "After"
    BEFORE = "Before"
    NEWER_THAN = "NewerThan"
    OLDER_THAN = "OlderThan"
    WEEKDAY = "Weekday"

    @property
    def label(self) -> str:
        """Human readable label used in validation messages."""
        return _OPERATOR_LABELS[self]

    @property
    def is_negative(self) -> bool:
        """True for operators that assert the absence of a value."""
        return self in (Operator.NOT_EQUAL, Operator.NOT_CONTAINS, Operator.IS_NOT_IN)


_OPERATOR_LABELS: dict[Operator, str] = {
    Operator.EQUAL: "equals",
    Operator.NOT_EQUAL: "not equals",
    Operator.CONTAINS: "contains",
    Operator.NOT_CONTAINS: "not contains",
    Operator.IS_IN: "is in",
    Operator.IS_NOT_IN: "is not in",
    Operator.GREATER_THAN: "greater than",
    Operator.LESS_THAN: "less than",
    Operator.GREATER_THAN_OR_EQUAL: "greater than or equal",
    Operator.LESS_THAN_OR_EQUAL: "less than or equal",
    Operator.MATCH_REGEX: "matches regex",
    Operator.AFTER: "after",
    Operator.BEFORE: "before",
    Operator.NEWER_THAN: "newer than",
    Operator.OLDER_THAN: "older than",
    Operator.WEEKDAY: "weekday",
}

_OPERATORS_BY_LOWER: dict[str, Operator] = {op.value.lower(): op for op in Operator}

# Fields that may be widened to the values of their parent series
PARENT_SERIES_FIELDS: dict[str, str] = {
    "tags": "IncludeParentSeriesTags",
    "studios": "IncludeParentSeriesStudios",
    "genres": "IncludeParentSeriesGenres",
}


def parse_operator(text: str) -> Operator:
    """Parses an operator name case-insensitively.

    Args:
        text: Operator name, e.g. ``"GreaterThan"`` or ``"greaterthan"``.

    Returns:
        The matching Operator.

    Raises:
        ValueError: If the name is unknown.
    """
    try:
        return _OPERATORS_BY_LOWER[str(text).strip().lower()]
    except KeyError:
        raise ValueError(f"Unknown operator: {text}") from None


class SortOrder(Enum):
    """Direction of a sort option."""

    ASCENDING = "Ascending"
    DESCENDING = "Descending"


@dataclass(frozen=True)
class Rule:
    """A single "field compared-to value" condition.

    Attributes:
        field: Field name, e.g. ``"Genres"`` or ``"LastPlayedDate"``.
        operator: The comparison operator.
        target_value: The raw target payload (date, number, list, regex...).
        user_id: Explicit user for user-scoped fields. Falls back to the
            list owner when None.
        include_unwatched_series: NextUnwatched extraction hint for the host.
        include_parent_series: Also match the parent series' values. Only
            valid on Tags, Studios and Genres.
        only_default_audio_language: Match AudioLanguages against the
            default audio track only.
    """

    field: str
    operator: Operator
    target_value: str = ""
    user_id: str | None = None
    include_unwatched_series: bool | None = None
    include_parent_series: bool = False
    only_default_audio_language: bool = False

    def __post_init__(self) -> None:
        if self.include_parent_series and self.field.lower() not in PARENT_SERIES_FIELDS:
            raise RuleValidationError(
                f"Parent series matching is only available for Tags, Studios and Genres, not '{self.field}'",
                field=self.field,
                operator=self.operator,
            )
        if self.only_default_audio_language and self.field.lower() != "audiolanguages":
            raise RuleValidationError(
                f"Default audio language matching is only available for AudioLanguages, not '{self.field}'",
                field=self.field,
                operator=self.operator,
            )


@dataclass
class RuleSet:
    """Rules that must all match (AND)."""

    rules: list[Rule] = field(default_factory=list)


@dataclass(frozen=True)
class SortOption:
    """One sort key of a smart list.

    Attributes:
        sort_by: Sort field name, e.g. ``"Name"`` or ``"Similarity"``.
        sort_order: Ascending or descending.
    """

    sort_by: str
    sort_order: SortOrder = SortOrder.ASCENDING


@dataclass
class SmartList:
    """A smart list definition.

    Attributes:
        name: Display name of the list.
        user_id: Owner; default user for user-scoped rules and sorts.
        rule_sets: Rule-sets OR-ed together.
        sort_options: Sort keys, most significant first.
        max_items: Optional cap on the number of results.
        max_playtime_minutes: Optional cap on the total runtime.
        similarity_comparison_fields: Fields used by SimilarTo rules. None
            selects the default (Genre, Tags).
        media_types: Item types the list may contain. None allows all.
        list_id: Opaque identifier assigned by the host.
        enabled: Whether the host should refresh the list.
    """

    name: str = ""
    user_id: str | None = None
    rule_sets: list[RuleSet] = field(default_factory=list)
    sort_options: list[SortOption] = field(default_factory=list)
    max_items: int | None = None
    max_playtime_minutes: int | None = None
    similarity_comparison_fields: list[str] | None = None
    media_types: list[str] | None = None
    list_id: str = ""
    enabled: bool = True

    @property
    def all_rules(self) -> list[Rule]:
        """All rules across every rule-set."""
        return [rule for rule_set in self.rule_sets for rule in rule_set.rules]


# ========================================================================
# SERIALIZATION HELPERS
# ========================================================================


def _lookup(data: dict[str, Any], *names: str, default: Any = None) -> Any:
    """Reads the first present key among ``names``, ignoring key case."""
    lowered = {str(key).lower(): value for key, value in data.items()}
    for name in names:
        if name.lower() in lowered:
            return lowered[name.lower()]
    return default


def rule_to_dict(rule: Rule) -> dict[str, Any]:
    """Serializes a Rule to the persisted dict shape.

    Optional flags are only written when set, matching the stored format.

    Args:
        rule: The rule to serialize.

    Returns:
        Dict with MemberName, Operator, TargetValue and optional flags.
    """
    payload: dict[str, Any] = {
        "MemberName": rule.field,
        "Operator": rule.operator.value,
        "TargetValue": rule.target_value,
    }
    if rule.user_id is not None:
        payload["UserId"] = rule.user_id
    if rule.include_unwatched_series is not None:
        payload["IncludeUnwatchedSeries"] = rule.include_unwatched_series
    if rule.include_parent_series:
        payload[PARENT_SERIES_FIELDS[rule.field.lower()]] = True
    if rule.only_default_audio_language:
        payload["OnlyDefaultAudioLanguage"] = True
    return payload


def rule_from_dict(data: dict[str, Any]) -> Rule:
    """Deserializes a Rule from its persisted dict shape.

    Keys are matched case-insensitively; ``field``/``operator``/``targetValue``
    are accepted as aliases. Parent-series flags that do not belong to the
    rule's field are ignored.

    Args:
        data: The persisted rule.

    Returns:
        A Rule instance.

    Raises:
        KeyError: If the field or operator is missing.
        ValueError: If the operator is unknown or a modifier is illegal.
    """
    member = _lookup(data, "MemberName", "field")
    operator = _lookup(data, "Operator")
    if member is None or operator is None:
        raise KeyError("MemberName and Operator are required")

    member = str(member)
    parent_flag = PARENT_SERIES_FIELDS.get(member.lower())
    include_parent = bool(_lookup(data, parent_flag, default=False)) if parent_flag else False

    only_default = bool(_lookup(data, "OnlyDefaultAudioLanguage", default=False))
    if only_default and member.lower() != "audiolanguages":
        logger.debug("Ignoring OnlyDefaultAudioLanguage on field %s", member)
        only_default = False

    target = _lookup(data, "TargetValue", default="")
    return Rule(
        field=member,
        operator=parse_operator(operator),
        target_value="" if target is None else str(target),
        user_id=_lookup(data, "UserId"),
        include_unwatched_series=_lookup(data, "IncludeUnwatchedSeries"),
        include_parent_series=include_parent,
        only_default_audio_language=only_default,
    )


def rule_set_to_dict(rule_set: RuleSet) -> dict[str, Any]:
    return {"Expressions": [rule_to_dict(rule) for rule in rule_set.rules]}


def rule_set_from_dict(data: dict[str, Any]) -> RuleSet:
    """Deserializes a rule-set, skipping (and logging) invalid rules.

    Args:
        data: Dict with an ``Expressions`` list.

    Returns:
        A RuleSet with every rule that could be parsed.
    """
    rules: list[Rule] = []
    for rule_data in _lookup(data, "Expressions", default=None) or []:
        try:
            rules.append(rule_from_dict(rule_data))
        except (ValueError, KeyError, AttributeError) as exc:
            logger.warning("Skipping invalid rule %s: %s", rule_data, exc)
    return RuleSet(rules=rules)


def _sort_option_from_dict(data: dict[str, Any]) -> SortOption:
    order_text = str(_lookup(data, "SortOrder", default=SortOrder.ASCENDING.value))
    order = SortOrder.DESCENDING if order_text.lower() == "descending" else SortOrder.ASCENDING
    return SortOption(sort_by=str(_lookup(data, "SortBy")), sort_order=order)


def smart_list_to_dict(smart_list: SmartList) -> dict[str, Any]:
    """Serializes a SmartList to the persisted dict shape.

    Args:
        smart_list: The list to serialize.

    Returns:
        JSON-compatible dict.
    """
    payload: dict[str, Any] = {
        "Id": smart_list.list_id,
        "Name": smart_list.name,
        "UserId": smart_list.user_id,
        "Enabled": smart_list.enabled,
        "ExpressionSets": [rule_set_to_dict(rule_set) for rule_set in smart_list.rule_sets],
        "Order": {
            "SortOptions": [
                {"SortBy": option.sort_by, "SortOrder": option.sort_order.value}
                for option in smart_list.sort_options
            ]
        },
        "MaxItems": smart_list.max_items,
        "MaxPlayTimeMinutes": smart_list.max_playtime_minutes,
    }
    if smart_list.similarity_comparison_fields is not None:
        payload["SimilarityComparisonFields"] = list(smart_list.similarity_comparison_fields)
    if smart_list.media_types is not None:
        payload["MediaTypes"] = list(smart_list.media_types)
    return payload


def smart_list_from_dict(data: dict[str, Any]) -> SmartList:
    """Deserializes a SmartList, skipping invalid rules and sort options.

    Args:
        data: The persisted list definition.

    Returns:
        A SmartList instance.
    """
    rule_sets = [rule_set_from_dict(item) for item in _lookup(data, "ExpressionSets", default=None) or []]

    sort_options: list[SortOption] = []
    order = _lookup(data, "Order", default=None) or {}
    for option_data in _lookup(order, "SortOptions", default=None) or []:
        try:
            sort_options.append(_sort_option_from_dict(option_data))
        except (ValueError, AttributeError) as exc:
            logger.warning("Skipping invalid sort option %s: %s", option_data, exc)

    comparison_fields = _lookup(data, "SimilarityComparisonFields", default=None)
    media_types = _lookup(data, "MediaTypes", default=None)

    return SmartList(
        name=str(_lookup(data, "Name", default="") or ""),
        user_id=_lookup(data, "UserId"),
        rule_sets=rule_sets,
        sort_options=sort_options,
        max_items=_lookup(data, "MaxItems"),
        max_playtime_minutes=_lookup(data, "MaxPlayTimeMinutes"),
        similarity_comparison_fields=list(comparison_fields) if comparison_fields is not None else None,
        media_types=list(media_types) if media_types is not None else None,
        list_id=str(_lookup(data, "Id", default="") or ""),
        enabled=bool(_lookup(data, "Enabled", default=True)),
    )


def smart_list_to_json(smart_list: SmartList) -> str:
    """Serializes a SmartList to a JSON string."""
    return json.dumps(smart_list_to_dict(smart_list), ensure_ascii=False)


def smart_list_from_json(text: str) -> SmartList | None:
    """Deserializes a SmartList from a JSON string.

    Args:
        text: The JSON document.

    Returns:
        The SmartList, or None when the document is not valid JSON.
    """
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Invalid smart list JSON: %s", text[:100])
        return None
    if not isinstance(data, dict):
        logger.warning("Smart list JSON is not an object: %s", text[:100])
        return None
    return smart_list_from_dict(data)
