# smartlists/services/smart_lists/evaluator.py

"""Smart list evaluation: combines compiled rules, similarity and ordering.

Rules inside a rule-set are AND-ed, rule-sets are OR-ed. SimilarTo rules are
never compiled; when a list has any, the similarity verdict is AND-ed onto
the rule result. A rule that fails to compile is logged and skipped unless
the evaluator runs in strict mode.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from smartlists.services.smart_lists.compiler import RuleCompiler
from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.fields import FieldFamily, family_of
from smartlists.services.smart_lists.orders import apply_limits, apply_orders
from smartlists.services.smart_lists.predicates import Predicate
from smartlists.services.smart_lists.similarity import (
    ReferenceMetadata,
    build_reference_metadata,
    find_reference_records,
    score_similarity,
)
from smartlists.utils.date_utils import format_timestamp

if TYPE_CHECKING:
    from collections.abc import Iterable

    from smartlists.core.record import Record
    from smartlists.services.smart_lists.models import Rule, SmartList

__all__ = ["CompiledSmartList", "SmartListEvaluator", "SmartListResult"]

logger = logging.getLogger("smartlists.smart_lists.evaluator")


def _is_similar_to(rule: Rule) -> bool:
    return family_of(rule.field) == FieldFamily.SIMILARITY


@dataclass
class CompiledSmartList:
    """Predicates of a smart list, compiled once per refresh pass.

    Attributes:
        rule_sets: One predicate list per rule-set, aligned with the source.
            Sets that only held SimilarTo rules (or only failed rules) are empty.
        similar_to_rules: The SimilarTo rules, scored separately.
        has_rules: Whether the list defines any rule at all.
        errors: Compile errors of skipped rules.
    """

    rule_sets: list[list[Predicate]] = field(default_factory=list)
    similar_to_rules: list[Rule] = field(default_factory=list)
    has_rules: bool = False
    errors: list[RuleValidationError] = field(default_factory=list)


@dataclass
class SmartListResult:
    """Outcome of evaluating a smart list over a library.

    Attributes:
        records: Matching records, ordered and limited.
        scores: Similarity scores by item id (SimilarTo lists only).
        reference: The similarity reference metadata, if any.
        matched_count: Number of matches before limits were applied.
    """

    records: list[Record] = field(default_factory=list)
    scores: dict[str, float] = field(default_factory=dict)
    reference: ReferenceMetadata | None = None
    matched_count: int = 0


class SmartListEvaluator:
    """Evaluates smart lists against records.

    Args:
        compiler: Rule compiler to use. A default one is created if omitted.
        strict: Raise on the first rule that fails to compile instead of
            skipping it.
        max_workers: Threads used to test records; 1 evaluates inline.
        default_comparison_fields: Similarity fields for lists that do not
            choose their own. None keeps the built-in default (Genre, Tags).
    """

    def __init__(
        self,
        compiler: RuleCompiler | None = None,
        strict: bool = False,
        max_workers: int = 1,
        default_comparison_fields: list[str] | None = None,
    ) -> None:
        self.compiler = compiler if compiler is not None else RuleCompiler()
        self.strict = strict
        self.max_workers = max(1, max_workers)
        self.default_comparison_fields = default_comparison_fields

    def compile(self, smart_list: SmartList, default_user_id: str | None = None) -> CompiledSmartList:
        """Compiles every non-SimilarTo rule of a smart list.

        Args:
            smart_list: The list to compile.
            default_user_id: User for user-scoped rules without an explicit
                user; falls back to the list owner.

        Returns:
            The compiled list.

        Raises:
            RuleValidationError: In strict mode, for the first failing rule.
        """
        owner = default_user_id or smart_list.user_id
        compiled = CompiledSmartList()

        for index, rule_set in enumerate(smart_list.rule_sets):
            predicates: list[Predicate] = []
            for rule in rule_set.rules:
                compiled.has_rules = True
                if _is_similar_to(rule):
                    compiled.similar_to_rules.append(rule)
                    continue
                try:
                    predicates.append(self.compiler.compile(rule, owner))
                except RuleValidationError as exc:
                    if self.strict:
                        raise
                    logger.warning(
                        "Skipping rule %s %s '%s' in set %d of '%s': %s",
                        rule.field,
                        rule.operator.value,
                        rule.target_value,
                        index,
                        smart_list.name,
                        exc,
                    )
                    compiled.errors.append(exc)
            compiled.rule_sets.append(predicates)

        return compiled

    def matches_rules(self, record: Record, compiled: CompiledSmartList, now: float) -> bool:
        """Applies the AND-within / OR-across combination of compiled rules.

        Args:
            record: The record to test.
            compiled: Output of ``compile``.
            now: Evaluation time in Unix seconds.

        Returns:
            True if the record matches. Lists without rules, or whose sets
            hold no compiled predicates, match everything.
        """
        if not compiled.has_rules:
            return True

        active = [predicates for predicates in compiled.rule_sets if predicates]
        if not active:
            return True

        return any(all(p.matches(record, now) for p in predicates) for predicates in active)

    def build_reference(
        self,
        smart_list: SmartList,
        compiled: CompiledSmartList,
        records: Iterable[Record],
    ) -> ReferenceMetadata | None:
        """Builds similarity reference metadata for a list with SimilarTo rules.

        Returns:
            The metadata, or None when the list has no SimilarTo rules.
        """
        if not compiled.similar_to_rules:
            return None

        references = find_reference_records(compiled.similar_to_rules, records, self.compiler.pattern_cache)
        if not references:
            logger.warning("No reference items found for SimilarTo rules of '%s'", smart_list.name)
        fields = smart_list.similarity_comparison_fields
        if fields is None:
            fields = self.default_comparison_fields
        return build_reference_metadata(references, fields)

    def evaluate_record(
        self,
        record: Record,
        compiled: CompiledSmartList,
        reference: ReferenceMetadata | None,
        now: float,
    ) -> tuple[bool, float | None]:
        """Tests one record against rules and similarity.

        Returns:
            Tuple of (matches, similarity score). The score is None for
            lists without SimilarTo rules.
        """
        if not self.matches_rules(record, compiled, now):
            return False, None
        if not compiled.similar_to_rules:
            return True, None
        if reference is None:
            return False, None
        result = score_similarity(record, reference)
        return result.passes, result.score

    def filter_records(
        self,
        records: Iterable[Record],
        smart_list: SmartList,
        default_user_id: str | None = None,
        now: float | None = None,
        seed: int | None = None,
    ) -> SmartListResult:
        """Runs the full pipeline: media types, rules, similarity, order, limits.

        Args:
            records: The library, one record per item.
            smart_list: The list definition.
            default_user_id: Overrides the list owner for user-scoped rules
                and user-dependent sorts.
            now: Evaluation time; defaults to the compiler's clock.
            seed: Seed for Random ordering.

        Returns:
            The SmartListResult.
        """
        pool = list(records)
        owner = default_user_id or smart_list.user_id
        now = self.compiler.now() if now is None else now

        candidates = pool
        if smart_list.media_types:
            allowed = {media_type.lower() for media_type in smart_list.media_types}
            candidates = [record for record in pool if (record.item_type or "").lower() in allowed]

        compiled = self.compile(smart_list, owner)
        reference = self.build_reference(smart_list, compiled, pool)

        def _evaluate(record: Record) -> tuple[bool, float | None]:
            return self.evaluate_record(record, compiled, reference, now)

        if self.max_workers > 1 and len(candidates) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers, thread_name_prefix="smartlists_") as executor:
                outcomes = list(executor.map(_evaluate, candidates))
        else:
            outcomes = [_evaluate(record) for record in candidates]

        matched: list[Record] = []
        scores: dict[str, float] = {}
        for record, (is_match, score) in zip(candidates, outcomes):
            if not is_match:
                continue
            matched.append(record)
            if score is not None and record.item_id:
                scores[record.item_id] = score

        ordered = apply_orders(matched, smart_list.sort_options, owner, scores, seed)
        limited = apply_limits(ordered, smart_list.max_items, smart_list.max_playtime_minutes)

        logger.info(
            "Evaluated '%s' at %s: %d of %d item(s) matched, %d kept",
            smart_list.name,
            format_timestamp(now),
            len(matched),
            len(candidates),
            len(limited),
        )
        return SmartListResult(records=limited, scores=scores, reference=reference, matched_count=len(matched))
