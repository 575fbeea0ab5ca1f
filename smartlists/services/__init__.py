from __future__ import annotations

from smartlists.services.smart_lists import RuleCompiler, SmartListEvaluator

__all__: list[str] = [
    "RuleCompiler",
    "SmartListEvaluator",
]
