# smartlists/services/smart_lists/fields.py

"""Field type registry: which fields exist and which operators they accept.

Every field name resolves to exactly one FieldFamily through a lookup
table built once at import time. Names outside the table resolve to the
explicit UNKNOWN family, which accepts every operator and is handled by a
generic comparison in the compiler.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any

from smartlists.core.record import NEVER_PLAYED, PEOPLE_ROLE_ATTRS
from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.models import Operator

__all__ = [
    "FieldFamily",
    "FieldRef",
    "FieldSpec",
    "FAMILY_OPERATORS",
    "ParentAggregatedField",
    "PlainField",
    "RESOLUTION_HEIGHTS",
    "ScopedField",
    "all_field_names",
    "describe_legal_operators",
    "family_of",
    "is_people_field",
    "legal_operators",
    "lookup_field",
    "resolution_height",
    "validate",
]

logger = logging.getLogger("smartlists.smart_lists.fields")


class FieldFamily(Enum):
    """Type family of a rule field."""

    STRING = "string"
    SIMPLE = "simple"
    BOOLEAN = "boolean"
    NUMERIC = "numeric"
    DATE = "date"
    RESOLUTION = "resolution"
    FRAMERATE = "framerate"
    MULTI_VALUED = "multi_valued"
    MULTI_VALUED_LIMITED = "multi_valued_limited"
    SIMILARITY = "similarity"
    UNKNOWN = "unknown"


_STRING_OPS: list[Operator] = [
    Operator.EQUAL,
    Operator.NOT_EQUAL,
    Operator.CONTAINS,
    Operator.NOT_CONTAINS,
    Operator.IS_IN,
    Operator.IS_NOT_IN,
    Operator.MATCH_REGEX,
]

_EQUALITY_OPS: list[Operator] = [Operator.EQUAL, Operator.NOT_EQUAL]

_NUMERIC_OPS: list[Operator] = [
    Operator.EQUAL,
    Operator.NOT_EQUAL,
    Operator.GREATER_THAN,
    Operator.LESS_THAN,
    Operator.GREATER_THAN_OR_EQUAL,
    Operator.LESS_THAN_OR_EQUAL,
]

_DATE_OPS: list[Operator] = [
    Operator.EQUAL,
    Operator.NOT_EQUAL,
    Operator.AFTER,
    Operator.BEFORE,
    Operator.NEWER_THAN,
    Operator.OLDER_THAN,
    Operator.WEEKDAY,
]

_MULTI_VALUED_OPS: list[Operator] = [
    Operator.EQUAL,
    Operator.CONTAINS,
    Operator.NOT_CONTAINS,
    Operator.IS_IN,
    Operator.IS_NOT_IN,
    Operator.MATCH_REGEX,
]

_POSITIVE_LIST_OPS: list[Operator] = [
    Operator.EQUAL,
    Operator.CONTAINS,
    Operator.IS_IN,
    Operator.MATCH_REGEX,
]

FAMILY_OPERATORS: dict[FieldFamily, list[Operator]] = {
    FieldFamily.STRING: _STRING_OPS,
    FieldFamily.SIMPLE: _EQUALITY_OPS,
    FieldFamily.BOOLEAN: _EQUALITY_OPS,
    FieldFamily.NUMERIC: _NUMERIC_OPS,
    FieldFamily.DATE: _DATE_OPS,
    FieldFamily.RESOLUTION: _NUMERIC_OPS,
    FieldFamily.FRAMERATE: _NUMERIC_OPS,
    FieldFamily.MULTI_VALUED: _MULTI_VALUED_OPS,
    FieldFamily.MULTI_VALUED_LIMITED: _POSITIVE_LIST_OPS,
    FieldFamily.SIMILARITY: _POSITIVE_LIST_OPS,
    FieldFamily.UNKNOWN: list(Operator),
}

RESOLUTION_HEIGHTS: dict[str, int] = {
    "480p": 480,
    "720p": 720,
    "1080p": 1080,
    "1440p": 1440,
    "4K": 2160,
    "8K": 4320,
}


@dataclass(frozen=True)
class FieldSpec:
    """Registry entry for one field.

    Attributes:
        name: Canonical field name.
        family: The field's type family.
        attribute: Record attribute read by the predicate. For user-scoped
            fields this is the per-user map.
        user_scoped: Value depends on a user id.
        user_default: Value read when the user has no entry in the map.
        parent_attribute: Record attribute holding the parent series values.
        integer_target: Numeric target must be an integer.
        never_sentinel: Values equal to this never match any operator.
    """

    name: str
    family: FieldFamily
    attribute: str = ""
    user_scoped: bool = False
    user_default: Any = None
    parent_attribute: str = ""
    integer_target: bool = False
    never_sentinel: float | None = None


def _spec(name: str, family: FieldFamily, attribute: str, **kwargs: Any) -> FieldSpec:
    return FieldSpec(name=name, family=family, attribute=attribute, **kwargs)


_FIELD_SPECS: list[FieldSpec] = [
    # String
    _spec("Name", FieldFamily.STRING, "name"),
    _spec("Album", FieldFamily.STRING, "album"),
    _spec("SeriesName", FieldFamily.STRING, "series_name"),
    _spec("OfficialRating", FieldFamily.STRING, "official_rating"),
    _spec("Overview", FieldFamily.STRING, "overview"),
    _spec("FileName", FieldFamily.STRING, "file_name"),
    _spec("FolderPath", FieldFamily.STRING, "folder_path"),
    _spec("MediaType", FieldFamily.STRING, "media_type"),
    _spec("AudioCodec", FieldFamily.STRING, "audio_codec"),
    _spec("AudioProfile", FieldFamily.STRING, "audio_profile"),
    _spec("VideoCodec", FieldFamily.STRING, "video_codec"),
    _spec("VideoProfile", FieldFamily.STRING, "video_profile"),
    _spec("VideoRange", FieldFamily.STRING, "video_range"),
    _spec("VideoRangeType", FieldFamily.STRING, "video_range_type"),
    # Simple
    _spec("ItemType", FieldFamily.SIMPLE, "item_type"),
    # Boolean, user-scoped
    _spec("IsPlayed", FieldFamily.BOOLEAN, "is_played_by_user", user_scoped=True, user_default=False),
    _spec("IsFavorite", FieldFamily.BOOLEAN, "is_favorite_by_user", user_scoped=True, user_default=False),
    _spec("NextUnwatched", FieldFamily.BOOLEAN, "next_unwatched_by_user", user_scoped=True, user_default=False),
    # Numeric
    _spec("ProductionYear", FieldFamily.NUMERIC, "production_year"),
    _spec("CommunityRating", FieldFamily.NUMERIC, "community_rating"),
    _spec("CriticRating", FieldFamily.NUMERIC, "critic_rating"),
    _spec("RuntimeMinutes", FieldFamily.NUMERIC, "runtime_minutes"),
    _spec("AudioBitrate", FieldFamily.NUMERIC, "audio_bitrate"),
    _spec("AudioSampleRate", FieldFamily.NUMERIC, "audio_sample_rate"),
    _spec("AudioBitDepth", FieldFamily.NUMERIC, "audio_bit_depth"),
    _spec("AudioChannels", FieldFamily.NUMERIC, "audio_channels"),
    _spec(
        "PlayCount",
        FieldFamily.NUMERIC,
        "play_count_by_user",
        user_scoped=True,
        user_default=0,
        integer_target=True,
    ),
    # Date
    _spec("DateCreated", FieldFamily.DATE, "date_created"),
    _spec("DateLastRefreshed", FieldFamily.DATE, "date_last_refreshed"),
    _spec("DateLastSaved", FieldFamily.DATE, "date_last_saved"),
    _spec("DateModified", FieldFamily.DATE, "date_modified"),
    _spec("ReleaseDate", FieldFamily.DATE, "release_date"),
    _spec(
        "LastPlayedDate",
        FieldFamily.DATE,
        "last_played_date_by_user",
        user_scoped=True,
        user_default=NEVER_PLAYED,
        never_sentinel=NEVER_PLAYED,
    ),
    # Video
    _spec("Resolution", FieldFamily.RESOLUTION, "resolution"),
    _spec("Framerate", FieldFamily.FRAMERATE, "framerate"),
    # Multi-valued
    _spec("Genres", FieldFamily.MULTI_VALUED, "genres", parent_attribute="parent_series_genres"),
    _spec("Studios", FieldFamily.MULTI_VALUED, "studios", parent_attribute="parent_series_studios"),
    _spec("Tags", FieldFamily.MULTI_VALUED, "tags", parent_attribute="parent_series_tags"),
    _spec("Artists", FieldFamily.MULTI_VALUED, "artists"),
    _spec("AlbumArtists", FieldFamily.MULTI_VALUED, "album_artists"),
    _spec("AudioLanguages", FieldFamily.MULTI_VALUED, "audio_languages"),
    *[_spec(role, FieldFamily.MULTI_VALUED, attr) for role, attr in PEOPLE_ROLE_ATTRS.items()],
    _spec("Collections", FieldFamily.MULTI_VALUED_LIMITED, "collections"),
    # Similarity
    _spec("SimilarTo", FieldFamily.SIMILARITY, ""),
]

# Lower-cased name -> spec; legacy role names ("actors") resolve the same way
_REGISTRY: dict[str, FieldSpec] = {spec.name.lower(): spec for spec in _FIELD_SPECS}

_PEOPLE_FIELDS: frozenset[str] = frozenset(role.lower() for role in PEOPLE_ROLE_ATTRS)


# ------------------------------------------------------------------
# Resolved field references
# ------------------------------------------------------------------


@dataclass(frozen=True)
class PlainField:
    """A record attribute read directly."""

    attribute: str


@dataclass(frozen=True)
class ParentAggregatedField:
    """An attribute widened with the parent series' values."""

    own: str
    parent: str


@dataclass(frozen=True)
class ScopedField:
    """A per-user map read with an already normalized user id."""

    attribute: str
    user_id: str
    default: Any = None


FieldRef = PlainField | ParentAggregatedField | ScopedField


# ------------------------------------------------------------------
# Public API
# ------------------------------------------------------------------


def lookup_field(name: str) -> FieldSpec | None:
    """Returns the registry entry for a field name, or None if unknown."""
    return _REGISTRY.get((name or "").strip().lower())


def family_of(name: str) -> FieldFamily:
    spec = lookup_field(name)
    return spec.family if spec else FieldFamily.UNKNOWN


def is_people_field(name: str) -> bool:
    return (name or "").strip().lower() in _PEOPLE_FIELDS


def all_field_names() -> list[str]:
    """Returns the canonical names of every registered field."""
    return [spec.name for spec in _FIELD_SPECS]


def legal_operators(name: str) -> list[Operator]:
    """Returns the operators a field accepts.

    Unknown fields accept every operator here. The compiler then narrows
    them by the type of the Record attribute the name maps to, and rejects
    the rest with the supported operators in the error.

    Args:
        name: Field name, matched case-insensitively.

    Returns:
        A new list of operators in display order.
    """
    return list(FAMILY_OPERATORS[family_of(name)])


def describe_legal_operators(name: str) -> str:
    """Returns the legal operators of a field as a comma-separated string."""
    return ", ".join(op.value for op in legal_operators(name))


def validate(name: str, operator: Operator) -> FieldSpec | None:
    """Checks that an operator is legal for a field.

    Args:
        name: Field name.
        operator: The operator to check.

    Returns:
        The field's registry entry, or None for unknown fields.

    Raises:
        RuleValidationError: If the operator is not legal for the field.
    """
    spec = lookup_field(name)
    if spec is None:
        logger.warning("Field '%s' is not registered, allowing operator %s", name, operator.value)
        return None

    allowed = FAMILY_OPERATORS[spec.family]
    if operator not in allowed:
        raise RuleValidationError(
            f"Operator '{operator.value}' is not valid for field '{spec.name}'. "
            f"Valid operators: {describe_legal_operators(spec.name)}",
            field=spec.name,
            operator=operator,
            allowed=allowed,
        )
    return spec


def resolution_height(value: str) -> int:
    """Maps a resolution bucket ("1080p", "4K") to its pixel height, -1 if unknown."""
    return RESOLUTION_HEIGHTS.get(value, -1)
