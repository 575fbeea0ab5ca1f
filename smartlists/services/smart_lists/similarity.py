# smartlists/services/smart_lists/similarity.py

"""Similarity engine for SimilarTo rules.

SimilarTo rules pick reference items by name. Every value of the selected
comparison fields is collected from those references and counted once into
case-insensitive frequency tables. Candidates are then scored by looking up
each of their distinct values: a hit adds one field match and the value's
frequency to the score. Typical use: "more like these three films".

Thresholds:
    one comparison field   -> at least 1 match
    two or more fields     -> at least 2 matches in total
    Genre selected         -> at least one genre match, always
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from smartlists.core.record import PEOPLE_ROLE_ATTRS, Record
from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.models import Operator, Rule
from smartlists.services.smart_lists.patterns import PatternCache
from smartlists.services.smart_lists.predicates import split_target_list, string_is_in_list

__all__ = [
    "DEFAULT_COMPARISON_FIELDS",
    "ReferenceMetadata",
    "SimilarityResult",
    "build_reference_metadata",
    "find_reference_records",
    "normalize_comparison_fields",
    "score_similarity",
]

logger = logging.getLogger("smartlists.smart_lists.similarity")

DEFAULT_COMPARISON_FIELDS: tuple[str, ...] = ("Genre", "Tags")

# Comparison key -> Record attribute for list-valued fields
_LIST_FIELD_ATTRS: dict[str, str] = {
    "genre": "genres",
    "tags": "tags",
    "studios": "studios",
    "audio languages": "audio_languages",
    **{role.lower(): attr for role, attr in PEOPLE_ROLE_ATTRS.items()},
}

_NAME = "name"
_PRODUCTION_YEAR = "production year"
_PARENTAL_RATING = "parental rating"

_SCALAR_KEYS: frozenset[str] = frozenset({_NAME, _PRODUCTION_YEAR, _PARENTAL_RATING})

_ALIASES: dict[str, str] = {
    "genres": "genre",
    "tag": "tags",
    "studio": "studios",
    "audiolanguages": "audio languages",
    "productionyear": _PRODUCTION_YEAR,
    "year": _PRODUCTION_YEAR,
    "parentalrating": _PARENTAL_RATING,
    "officialrating": _PARENTAL_RATING,
}

_YEAR_WINDOW = 2
_MIN_PARTIAL_NAME_LENGTH = 3

_SUPPORTED_OPERATORS: frozenset[Operator] = frozenset(
    {Operator.EQUAL, Operator.CONTAINS, Operator.IS_IN, Operator.MATCH_REGEX}
)


@dataclass(frozen=True)
class ReferenceMetadata:
    """Values collected from the reference items of one similarity query.

    Attributes:
        comparison_fields: Normalized comparison keys, e.g. ``("genre", "tags")``.
        values: Every collected value per list field, duplicates preserved.
        names: Names of the reference items.
        production_years: Known (> 0) production years of the references.
        parental_ratings: Non-blank official ratings of the references.
        frequencies: Per list field, lower-cased value -> occurrence count.
        reference_ids: Item ids of the de-duplicated references.
    """

    comparison_fields: tuple[str, ...]
    values: Mapping[str, list[str]] = field(default_factory=dict)
    names: list[str] = field(default_factory=list)
    production_years: list[int] = field(default_factory=list)
    parental_ratings: list[str] = field(default_factory=list)
    frequencies: Mapping[str, Mapping[str, int]] = field(default_factory=dict)
    reference_ids: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.reference_ids


@dataclass(frozen=True)
class SimilarityResult:
    """Outcome of scoring one candidate.

    Attributes:
        passes: Whether the candidate clears the thresholds.
        score: Sum of matched frequencies, used for ordering.
        field_matches: Number of matches per comparison key.
    """

    passes: bool
    score: float = 0.0
    field_matches: Mapping[str, int] = field(default_factory=dict)


def _comparison_key(name: str) -> str:
    key = " ".join(name.strip().lower().split())
    if key in _LIST_FIELD_ATTRS or key in _SCALAR_KEYS:
        return key
    compact = key.replace(" ", "")
    if compact in _LIST_FIELD_ATTRS:
        return compact
    return _ALIASES.get(key, _ALIASES.get(compact, key))


def normalize_comparison_fields(fields: Iterable[str] | None) -> tuple[str, ...]:
    """Trims, lower-cases and de-duplicates comparison field names.

    Args:
        fields: Field names as stored on the list. None selects the
            default (Genre, Tags).

    Returns:
        Ordered tuple of comparison keys; unknown names are dropped with a
        warning.
    """
    if fields is None:
        fields = DEFAULT_COMPARISON_FIELDS

    keys: list[str] = []
    for name in fields:
        if not name or not name.strip():
            continue
        key = _comparison_key(name)
        if key not in _LIST_FIELD_ATTRS and key not in _SCALAR_KEYS:
            logger.warning("Ignoring unknown similarity comparison field '%s'", name)
            continue
        if key not in keys:
            keys.append(key)
    return tuple(keys)


def _name_matches(name: str, rule: Rule, items: tuple[str, ...], pattern_cache: PatternCache) -> bool:
    target = rule.target_value
    if rule.operator == Operator.EQUAL:
        return name.lower() == target.lower()
    if rule.operator == Operator.CONTAINS:
        return target.lower() in name.lower()
    if rule.operator == Operator.IS_IN:
        return string_is_in_list(name, items)
    return pattern_cache.get(target, field=rule.field).search(name) is not None


def find_reference_records(
    rules: Iterable[Rule],
    records: Iterable[Record],
    pattern_cache: PatternCache | None = None,
) -> list[Record]:
    """Resolves SimilarTo rules to the reference records they name.

    Negative operators, empty targets and invalid regexes are skipped with a
    warning; the remaining rules still contribute. The union is
    de-duplicated by item id.

    Args:
        rules: SimilarTo rules.
        records: The candidate pool to search by name.
        pattern_cache: Regex cache for MatchRegex rules.

    Returns:
        The reference records in first-seen order.
    """
    cache = pattern_cache if pattern_cache is not None else PatternCache()
    pool = list(records)
    seen: set[str | int] = set()
    references: list[Record] = []

    for rule in rules:
        if rule.operator not in _SUPPORTED_OPERATORS:
            logger.warning(
                "SimilarTo does not support '%s', skipping rule '%s'",
                rule.operator.label,
                rule.target_value,
            )
            continue
        if not rule.target_value or not rule.target_value.strip():
            logger.warning("SimilarTo rule has an empty target, skipping")
            continue
        if rule.operator == Operator.MATCH_REGEX:
            try:
                cache.get(rule.target_value, field=rule.field)
            except RuleValidationError as exc:
                logger.warning("Skipping SimilarTo rule: %s", exc)
                continue

        items = split_target_list(rule.target_value)
        matched = [r for r in pool if r.name and _name_matches(r.name, rule, items, cache)]
        logger.debug("SimilarTo %s '%s' matched %d item(s)", rule.operator.value, rule.target_value, len(matched))

        for record in matched:
            key: str | int = record.item_id or id(record)
            if key not in seen:
                seen.add(key)
                references.append(record)

    return references


def _list_values(record: Record, key: str) -> list[str]:
    return [value for value in getattr(record, _LIST_FIELD_ATTRS[key]) or [] if value and value.strip()]


def build_reference_metadata(
    references: Iterable[Record],
    comparison_fields: Iterable[str] | None = None,
) -> ReferenceMetadata:
    """Collects values and frequency tables from reference records.

    Args:
        references: The reference records (already de-duplicated).
        comparison_fields: Selected comparison field names, None for default.

    Returns:
        Read-only ReferenceMetadata shared by every candidate evaluation.
    """
    keys = normalize_comparison_fields(comparison_fields)
    references = list(references)

    values: dict[str, list[str]] = {key: [] for key in keys if key in _LIST_FIELD_ATTRS}
    names: list[str] = []
    years: list[int] = []
    ratings: list[str] = []

    for record in references:
        for key in values:
            values[key].extend(_list_values(record, key))
        if _NAME in keys and record.name and record.name.strip():
            names.append(record.name)
        if _PRODUCTION_YEAR in keys and record.production_year > 0:
            years.append(record.production_year)
        if _PARENTAL_RATING in keys and record.official_rating and record.official_rating.strip():
            ratings.append(record.official_rating)

    frequencies = {
        key: MappingProxyType(dict(Counter(value.lower() for value in collected)))
        for key, collected in values.items()
    }

    logger.debug(
        "Built similarity metadata from %d reference item(s) for fields %s",
        len(references),
        ", ".join(keys),
    )

    return ReferenceMetadata(
        comparison_fields=keys,
        values=MappingProxyType(values),
        names=names,
        production_years=years,
        parental_ratings=ratings,
        frequencies=MappingProxyType(frequencies),
        reference_ids=tuple(record.item_id for record in references),
    )


def _score_name(name: str, reference_names: list[str]) -> tuple[int, float]:
    if not name or not name.strip() or not reference_names:
        return 0, 0.0

    lowered = name.lower()
    exact = sum(1 for ref in reference_names if ref.lower() == lowered)
    if exact:
        return 1, exact * 2.0

    candidate = name.strip()
    if len(candidate) < _MIN_PARTIAL_NAME_LENGTH:
        return 0, 0.0
    candidate = candidate.lower()
    partial = sum(1 for ref in reference_names if candidate in ref.lower() or ref.lower() in candidate)
    return (1, float(partial)) if partial else (0, 0.0)


def score_similarity(record: Record, metadata: ReferenceMetadata) -> SimilarityResult:
    """Scores a candidate record against reference metadata.

    Args:
        record: The candidate.
        metadata: Output of ``build_reference_metadata``.

    Returns:
        SimilarityResult with the verdict and the score. No references or no
        comparison fields never pass.
    """
    keys = metadata.comparison_fields
    if metadata.is_empty or not keys:
        return SimilarityResult(passes=False)

    score = 0.0
    field_matches: dict[str, int] = {}

    for key in keys:
        matches = 0
        if key in _LIST_FIELD_ATTRS:
            table = metadata.frequencies.get(key) or {}
            if table:
                distinct = {value.lower() for value in _list_values(record, key)}
                for value in distinct:
                    frequency = table.get(value)
                    if frequency:
                        matches += 1
                        score += frequency
        elif key == _NAME:
            matches, gained = _score_name(record.name, metadata.names)
            score += gained
        elif key == _PRODUCTION_YEAR:
            if record.production_year > 0:
                near = sum(1 for year in metadata.production_years if abs(year - record.production_year) <= _YEAR_WINDOW)
                if near:
                    matches = 1
                    score += near
        elif key == _PARENTAL_RATING:
            rating = (record.official_rating or "").strip().lower()
            if rating:
                same = sum(1 for ref in metadata.parental_ratings if ref.strip().lower() == rating)
                if same:
                    matches = 1
                    score += same

        if matches:
            field_matches[key] = matches

    total = sum(field_matches.values())
    required = 1 if len(keys) == 1 else 2
    passes = total >= required
    if "genre" in keys and not field_matches.get("genre"):
        passes = False

    if passes:
        logger.debug("Item '%s' passes similarity with score %s (%s)", record.name, score, field_matches)
    else:
        logger.debug("Item '%s' fails similarity: %d match(es), need %d", record.name, total, required)

    return SimilarityResult(passes=passes, score=score, field_matches=MappingProxyType(field_matches))
