# smartlists/services/smart_lists/requirements.py

"""Field requirement analysis.

Some record attributes are expensive for the host to populate (media
streams, people, collections, next-unwatched state). FieldRequirements looks
at a list's rules and sort options and tells the host which of them a
refresh actually needs.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from smartlists.core.record import normalize_user_id
from smartlists.services.smart_lists.fields import is_people_field
from smartlists.services.smart_lists.models import Rule, RuleSet, SortOption
from smartlists.services.smart_lists.similarity import normalize_comparison_fields

__all__ = ["ExtractionOptions", "FieldRequirements"]

_AUDIO_QUALITY_FIELDS: frozenset[str] = frozenset(
    {"audiobitrate", "audiosamplerate", "audiobitdepth", "audiocodec", "audioprofile", "audiochannels"}
)

_VIDEO_QUALITY_FIELDS: frozenset[str] = frozenset(
    {"resolution", "framerate", "videocodec", "videoprofile", "videorange", "videorangetype"}
)


@dataclass
class ExtractionOptions:
    """Flags passed to the host's record builder."""

    extract_audio_languages: bool = False
    extract_audio_quality: bool = False
    extract_video_quality: bool = False
    extract_people: bool = False
    extract_collections: bool = False
    extract_next_unwatched: bool = False
    extract_series_name: bool = False
    extract_parent_series_tags: bool = False
    extract_parent_series_studios: bool = False
    extract_parent_series_genres: bool = False
    include_unwatched_series: bool = True
    additional_user_ids: list[str] = field(default_factory=list)


@dataclass
class FieldRequirements:
    """Which expensive record attributes a set of rules depends on."""

    needs_audio_languages: bool = False
    needs_audio_quality: bool = False
    needs_video_quality: bool = False
    needs_people: bool = False
    needs_collections: bool = False
    needs_next_unwatched: bool = False
    needs_series_name: bool = False
    needs_parent_series_tags: bool = False
    needs_parent_series_studios: bool = False
    needs_parent_series_genres: bool = False
    needs_similar_to: bool = False
    include_unwatched_series: bool = True
    additional_user_ids: list[str] = field(default_factory=list)
    similar_to_rules: list[Rule] = field(default_factory=list)

    @classmethod
    def analyze(
        cls,
        rule_sets: Iterable[RuleSet],
        sort_options: Iterable[SortOption] | None = None,
        similarity_comparison_fields: Iterable[str] | None = None,
    ) -> FieldRequirements:
        """Derives the requirements of a smart list.

        Args:
            rule_sets: The list's rule-sets.
            sort_options: The list's sort options; SeriesName sorts need the
                series name.
            similarity_comparison_fields: Comparison fields of SimilarTo
                rules; people and audio language comparisons need those
                attributes on every candidate.

        Returns:
            The populated FieldRequirements.
        """
        rules = [rule for rule_set in rule_sets for rule in rule_set.rules]
        names = [rule.field.strip().lower() for rule in rules]
        req = cls()

        req.needs_audio_languages = "audiolanguages" in names
        req.needs_audio_quality = any(name in _AUDIO_QUALITY_FIELDS for name in names)
        req.needs_video_quality = any(name in _VIDEO_QUALITY_FIELDS for name in names)
        req.needs_people = any(is_people_field(rule.field) for rule in rules)
        req.needs_collections = "collections" in names
        req.needs_next_unwatched = "nextunwatched" in names
        req.needs_series_name = "seriesname" in names

        if not req.needs_series_name and sort_options:
            req.needs_series_name = any("seriesname" in option.sort_by.lower() for option in sort_options)

        for rule, name in zip(rules, names):
            if not rule.include_parent_series:
                continue
            if name == "tags":
                req.needs_parent_series_tags = True
            elif name == "studios":
                req.needs_parent_series_studios = True
            elif name == "genres":
                req.needs_parent_series_genres = True

        req.similar_to_rules = [rule for rule, name in zip(rules, names) if name == "similarto"]
        req.needs_similar_to = bool(req.similar_to_rules)

        if req.needs_similar_to:
            keys = normalize_comparison_fields(similarity_comparison_fields)
            if "audio languages" in keys:
                req.needs_audio_languages = True
            if any(is_people_field(key) for key in keys):
                req.needs_people = True

        req.include_unwatched_series = all(
            rule.include_unwatched_series is not False for rule, name in zip(rules, names) if name == "nextunwatched"
        )

        seen: list[str] = []
        for rule in rules:
            if rule.user_id:
                user_id = normalize_user_id(rule.user_id)
                if user_id not in seen:
                    seen.append(user_id)
        req.additional_user_ids = seen

        return req

    def to_extraction_options(self) -> ExtractionOptions:
        return ExtractionOptions(
            extract_audio_languages=self.needs_audio_languages,
            extract_audio_quality=self.needs_audio_quality,
            extract_video_quality=self.needs_video_quality,
            extract_people=self.needs_people,
            extract_collections=self.needs_collections,
            extract_next_unwatched=self.needs_next_unwatched,
            extract_series_name=self.needs_series_name,
            extract_parent_series_tags=self.needs_parent_series_tags,
            extract_parent_series_studios=self.needs_parent_series_studios,
            extract_parent_series_genres=self.needs_parent_series_genres,
            include_unwatched_series=self.include_unwatched_series,
            additional_user_ids=list(self.additional_user_ids),
        )
