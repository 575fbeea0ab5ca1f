# smartlists/services/smart_lists/orders.py

"""Ordering and limits for smart list results.

Sort options are applied as a stable multi-key sort: the last option is
sorted first so the first option ends up most significant. Name-like keys
use natural ordering ("2 Fast" before "10 Things").
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from smartlists.core.record import Record
from smartlists.services.smart_lists.models import SortOption, SortOrder
from smartlists.utils.name_utils import natural_sort_key, strip_leading_articles

__all__ = ["SORT_FIELDS", "SortContext", "apply_limits", "apply_orders"]

logger = logging.getLogger("smartlists.smart_lists.orders")


@dataclass
class SortContext:
    """Per-call inputs some sort keys depend on.

    Attributes:
        user_id: User for PlayCount / LastPlayed sorts.
        scores: Similarity scores by item id.
        random_keys: Shuffle keys by item id, filled lazily.
    """

    user_id: str | None = None
    scores: Mapping[str, float] = field(default_factory=dict)
    random_keys: dict[str, float] = field(default_factory=dict)


SortKey = Callable[[Record, SortContext], Any]


def _name(record: Record, ctx: SortContext) -> Any:
    return natural_sort_key(record.name)


def _play_count(record: Record, ctx: SortContext) -> int:
    return record.play_count(ctx.user_id) if ctx.user_id else 0


def _last_played(record: Record, ctx: SortContext) -> float:
    return record.last_played(ctx.user_id) if ctx.user_id else -1.0


def _first_artist(record: Record, ctx: SortContext) -> Any:
    artists = record.artists or record.album_artists
    return natural_sort_key(artists[0] if artists else "")


# Sort field -> key function
SORT_FIELDS: dict[str, SortKey] = {
    "Name": _name,
    "ProductionYear": lambda r, c: r.production_year,
    "CommunityRating": lambda r, c: r.community_rating,
    "DateCreated": lambda r, c: r.date_created,
    "ReleaseDate": lambda r, c: r.release_date,
    "Runtime": lambda r, c: r.runtime_minutes,
    "PlayCount": _play_count,
    "LastPlayed": _last_played,
    "SeriesName": lambda r, c: natural_sort_key(r.series_name),
    "SeriesName (Ignore Articles)": lambda r, c: natural_sort_key(strip_leading_articles(r.series_name)),
    "SeasonNumber": lambda r, c: (r.season_number, r.episode_number, natural_sort_key(r.name)),
    "EpisodeNumber": lambda r, c: (r.episode_number, r.season_number, natural_sort_key(r.name)),
    "TrackNumber": lambda r, c: (natural_sort_key(r.album), r.disc_number, r.track_number, natural_sort_key(r.name)),
    "AlbumName": lambda r, c: (natural_sort_key(r.album), r.disc_number, r.track_number),
    "Artist": _first_artist,
}

_SORT_FIELDS_LOWER: dict[str, str] = {name.lower(): name for name in SORT_FIELDS}


def _record_key(record: Record) -> str:
    return record.item_id or str(id(record))


def apply_orders(
    records: Iterable[Record],
    sort_options: Iterable[SortOption],
    user_id: str | None = None,
    scores: Mapping[str, float] | None = None,
    seed: int | None = None,
) -> list[Record]:
    """Sorts records by a list of sort options.

    Args:
        records: Records to sort.
        sort_options: Sort options, most significant first. ``Random``
            shuffles; ``NoOrder`` and unknown names leave the order alone.
        user_id: User for PlayCount and LastPlayed.
        scores: Similarity scores by item id for ``Similarity`` sorts.
            Without scores the Similarity option is skipped. A lone
            Similarity sort breaks score ties by name.
        seed: Seed for ``Random``; None shuffles differently every call.

    Returns:
        A new, sorted list.
    """
    result = list(records)
    options = list(sort_options)
    ctx = SortContext(user_id=user_id, scores=scores or {})
    rng = random.Random(seed)

    for option in reversed(options):
        name = option.sort_by.strip()
        descending = option.sort_order == SortOrder.DESCENDING
        lowered = name.lower()

        if lowered in ("noorder", ""):
            continue

        if lowered == "random":
            for record in result:
                ctx.random_keys.setdefault(_record_key(record), rng.random())
            result.sort(key=lambda r: ctx.random_keys[_record_key(r)])
            continue

        if lowered == "similarity":
            if not ctx.scores:
                logger.debug("No similarity scores available, skipping Similarity sort")
                continue
            # As the only sort, ties are broken by name, always ascending
            if len(options) == 1:
                result.sort(key=lambda r: natural_sort_key(r.name))
            result.sort(key=lambda r: ctx.scores.get(r.item_id, 0.0), reverse=descending)
            continue

        canonical = _SORT_FIELDS_LOWER.get(lowered)
        if canonical is None:
            logger.warning("Unknown sort field '%s', ignoring", name)
            continue

        key = SORT_FIELDS[canonical]
        result.sort(key=lambda r: key(r, ctx), reverse=descending)

    return result


def apply_limits(
    records: Iterable[Record],
    max_items: int | None = None,
    max_playtime_minutes: float | None = None,
) -> list[Record]:
    """Truncates an ordered result by item count and total runtime.

    Args:
        records: Ordered records.
        max_items: Maximum number of records; None or 0 for unlimited.
        max_playtime_minutes: Maximum summed ``runtime_minutes``; None or 0
            for unlimited. Stops before the first record that would exceed it.

    Returns:
        The kept prefix of ``records``.
    """
    kept: list[Record] = []
    total_minutes = 0.0

    for record in records:
        if max_items and len(kept) >= max_items:
            logger.debug("Reached item limit (%d)", max_items)
            break
        minutes = record.runtime_minutes or 0.0
        if max_playtime_minutes and total_minutes + minutes > max_playtime_minutes:
            logger.debug(
                "Reached time limit (%s minutes) at %.1f minutes, '%s' would exceed it",
                max_playtime_minutes,
                total_minutes,
                record.name,
            )
            break
        kept.append(record)
        total_minutes += minutes

    return kept
