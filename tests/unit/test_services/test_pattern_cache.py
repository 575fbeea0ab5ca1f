# tests/unit/test_services/test_pattern_cache.py

"""Tests for the thread-safe regex cache."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from smartlists.services.smart_lists.errors import RuleValidationError
from smartlists.services.smart_lists.patterns import PatternCache


@pytest.fixture
def cache() -> PatternCache:
    return PatternCache()


class TestPatternCache:
    """Tests for PatternCache."""

    def test_same_text_same_instance(self, cache: PatternCache) -> None:
        first = cache.get(r"^The\s")
        assert cache.get(r"^The\s") is first
        assert len(cache) == 1
        assert r"^The\s" in cache

    def test_invalid_pattern_raises_and_is_not_cached(self, cache: PatternCache) -> None:
        with pytest.raises(RuleValidationError) as exc_info:
            cache.get("[unclosed", field="Name")

        assert exc_info.value.field == "Name"
        assert "[unclosed" in str(exc_info.value)
        assert "[unclosed" not in cache
        assert len(cache) == 0

    def test_clear(self, cache: PatternCache) -> None:
        cache.get("a+")
        cache.clear()
        assert len(cache) == 0

    def test_concurrent_lookups_share_one_pattern(self, cache: PatternCache) -> None:
        """Threads racing on the same text end up with a single compiled object."""
        with ThreadPoolExecutor(max_workers=8) as executor:
            patterns = list(executor.map(lambda _: cache.get(r"(?i)alien[s]?"), range(64)))

        assert all(p is patterns[0] for p in patterns)
        assert len(cache) == 1
