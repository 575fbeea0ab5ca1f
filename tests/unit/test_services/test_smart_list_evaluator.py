# tests/unit/test_services/test_smart_list_evaluator.py

"""Tests for SmartListEvaluator: rule-set combination, similarity, ordering and limits."""

from __future__ import annotations

import pytest

from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.evaluator import SmartListEvaluator
from smartlists.services.smart_lists.models import (
    Operator,
    Rule,
    RuleSet,
    SmartList,
    SortOption,
    SortOrder,
)

OTHER_USER_ID = "0b7f6a1e-3c2d-4e5f-8a9b-1c2d3e4f5a6b"


def _names(result) -> list[str]:
    return [record.name for record in result.records]


def _by_name() -> list[SortOption]:
    return [SortOption("Name")]


# ========================================================================
# TESTS: RULE COMBINATION
# ========================================================================


class TestRuleCombination:
    """Tests for AND within a rule-set and OR across rule-sets."""

    def test_list_without_rules_matches_everything(self, evaluator, library) -> None:
        result = evaluator.filter_records(library, SmartList(name="Everything"))
        assert result.records == library
        assert result.matched_count == 4

    def test_and_within_or_across(self, evaluator, library) -> None:
        smart_list = SmartList(
            name="Mix",
            rule_sets=[
                RuleSet([Rule("Genres", Operator.EQUAL, "Horror"), Rule("ProductionYear", Operator.LESS_THAN, "1980")]),
                RuleSet([Rule("Genres", Operator.EQUAL, "Comedy")]),
            ],
            sort_options=_by_name(),
        )
        assert _names(evaluator.filter_records(library, smart_list)) == ["Airplane!", "Alien"]

    def test_owner_is_default_user(self, evaluator, library, user_id) -> None:
        smart_list = SmartList(
            name="Played",
            user_id=user_id,
            rule_sets=[RuleSet([Rule("IsPlayed", Operator.EQUAL, "true")])],
        )
        assert _names(evaluator.filter_records(library, smart_list)) == ["Alien"]
        assert _names(evaluator.filter_records(library, smart_list, default_user_id=OTHER_USER_ID)) == []

    def test_failing_rule_is_skipped(self, evaluator, library, caplog) -> None:
        smart_list = SmartList(
            name="Sci-Fi",
            rule_sets=[RuleSet([Rule("Genres", Operator.CONTAINS, "Science"), Rule("Name", Operator.MATCH_REGEX, "(")])],
            sort_options=_by_name(),
        )
        compiled = evaluator.compile(smart_list)
        assert len(compiled.errors) == 1
        assert len(compiled.rule_sets[0]) == 1

        with caplog.at_level("WARNING", logger="smartlists.smart_lists.evaluator"):
            result = evaluator.filter_records(library, smart_list)
        assert _names(result) == ["Alien", "Aliens"]
        assert "Skipping rule" in caplog.text

    def test_empty_rule_sets_are_ignored(self, evaluator, library) -> None:
        smart_list = SmartList(
            name="Comedy",
            rule_sets=[
                RuleSet([Rule("IsPlayed", Operator.CONTAINS, "true")]),
                RuleSet([Rule("Genres", Operator.EQUAL, "Comedy")]),
            ],
        )
        assert _names(evaluator.filter_records(library, smart_list)) == ["Airplane!"]

    def test_strict_mode_raises(self, compiler, library) -> None:
        evaluator = SmartListEvaluator(compiler=compiler, strict=True)
        smart_list = SmartList(rule_sets=[RuleSet([Rule("Genres", Operator.NOT_EQUAL, "Horror")])])
        with pytest.raises(RuleValidationError):
            evaluator.filter_records(library, smart_list)

    def test_media_types_filter(self, evaluator, library) -> None:
        smart_list = SmartList(name="Episodes", media_types=["episode"])
        assert _names(evaluator.filter_records(library, smart_list)) == ["Pilot"]

    def test_threaded_evaluation_matches_inline(self, compiler, library) -> None:
        smart_list = SmartList(
            name="Recent",
            rule_sets=[RuleSet([Rule("DateCreated", Operator.NEWER_THAN, "90:days")])],
            sort_options=_by_name(),
        )
        inline = SmartListEvaluator(compiler=compiler).filter_records(library, smart_list)
        threaded = SmartListEvaluator(compiler=compiler, max_workers=4).filter_records(library, smart_list)
        assert _names(threaded) == _names(inline) == ["Alien", "Aliens"]


# ========================================================================
# TESTS: SIMILARITY
# ========================================================================


class TestSimilarToLists:
    """Tests for lists with SimilarTo rules."""

    def test_similar_items_ranked_by_score(self, evaluator, library) -> None:
        smart_list = SmartList(
            name="More like Alien",
            rule_sets=[RuleSet([Rule("SimilarTo", Operator.EQUAL, "Alien")])],
            sort_options=[SortOption("Similarity", SortOrder.DESCENDING)],
        )
        result = evaluator.filter_records(library, smart_list)

        assert _names(result) == ["Alien", "Aliens"]
        assert result.scores == {"m1": 4.0, "m2": 3.0}
        assert result.reference is not None
        assert result.reference.reference_ids == ("m1",)

    def test_similarity_is_and_ed_with_rules(self, evaluator, library) -> None:
        smart_list = SmartList(
            rule_sets=[
                RuleSet([Rule("SimilarTo", Operator.EQUAL, "Alien"), Rule("ProductionYear", Operator.GREATER_THAN, "1980")])
            ],
        )
        assert _names(evaluator.filter_records(library, smart_list)) == ["Aliens"]

    def test_no_reference_matches_nothing(self, evaluator, library) -> None:
        smart_list = SmartList(rule_sets=[RuleSet([Rule("SimilarTo", Operator.EQUAL, "Predator")])])
        result = evaluator.filter_records(library, smart_list)
        assert result.records == []
        assert result.reference is not None and result.reference.is_empty

    def test_list_fields_override_default(self, evaluator, library) -> None:
        smart_list = SmartList(
            rule_sets=[RuleSet([Rule("SimilarTo", Operator.EQUAL, "Alien")])],
            similarity_comparison_fields=["Actors"],
        )
        result = evaluator.filter_records(library, smart_list)
        assert result.reference.comparison_fields == ("actors",)
        assert _names(result) == ["Alien", "Aliens"]

    def test_evaluator_default_fields(self, compiler, library) -> None:
        evaluator = SmartListEvaluator(compiler=compiler, default_comparison_fields=["Parental Rating"])
        smart_list = SmartList(rule_sets=[RuleSet([Rule("SimilarTo", Operator.EQUAL, "Airplane!")])])

        result = evaluator.filter_records(library, smart_list)

        assert result.reference.comparison_fields == ("parental rating",)
        assert _names(result) == ["Airplane!"]


# ========================================================================
# TESTS: ORDER AND LIMITS
# ========================================================================


class TestOrderAndLimits:
    """Tests for ordering and truncation in the pipeline."""

    def test_max_items(self, evaluator, library) -> None:
        smart_list = SmartList(sort_options=_by_name(), max_items=1)
        result = evaluator.filter_records(library, smart_list)
        assert _names(result) == ["Airplane!"]
        assert result.matched_count == 4

    def test_max_playtime_stops_at_first_overflow(self, evaluator, library) -> None:
        """88 + 117 fits in 210 minutes; the next item (137) does not, so nothing after it is kept."""
        smart_list = SmartList(sort_options=_by_name(), max_playtime_minutes=210)
        assert _names(evaluator.filter_records(library, smart_list)) == ["Airplane!", "Alien"]

    def test_result_logged(self, evaluator, library, caplog) -> None:
        with caplog.at_level("INFO", logger="smartlists.smart_lists.evaluator"):
            evaluator.filter_records(library, SmartList(name="Logged"))
        assert "Logged" in caplog.text
