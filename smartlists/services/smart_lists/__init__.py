"""Smart lists service: rule-based dynamic media lists.

Provides the rule models, field registry, rule compiler, similarity engine
and the evaluator that filters, orders and limits a library of records.
"""

from __future__ import annotations

from smartlists.services.smart_lists.compiler import RuleCompiler
from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.evaluator import CompiledSmartList, SmartListEvaluator, SmartListResult
from smartlists.services.smart_lists.fields import (
    FieldFamily,
    describe_legal_operators,
    legal_operators,
)
from smartlists.services.smart_lists.models import (
    Operator,
    Rule,
    RuleSet,
    SmartList,
    SortOption,
    SortOrder,
    smart_list_from_json,
    smart_list_to_json,
)
from smartlists.services.smart_lists.orders import apply_limits, apply_orders
from smartlists.services.smart_lists.patterns import PatternCache
from smartlists.services.smart_lists.requirements import ExtractionOptions, FieldRequirements
from smartlists.services.smart_lists.similarity import (
    ReferenceMetadata,
    SimilarityResult,
    build_reference_metadata,
    score_similarity,
)

__all__: list[str] = [
    "CompiledSmartList",
    "ExtractionOptions",
    "FieldFamily",
    "FieldRequirements",
    "Operator",
    "PatternCache",
    "ReferenceMetadata",
    "Rule",
    "RuleCompiler",
    "RuleSet",
    "RuleValidationError",
    "SimilarityResult",
    "SmartList",
    "SmartListEvaluator",
    "SmartListResult",
    "SortOption",
    "SortOrder",
    "apply_limits",
    "apply_orders",
    "build_reference_metadata",
    "describe_legal_operators",
    "legal_operators",
    "score_similarity",
    "smart_list_from_json",
    "smart_list_to_json",
]
