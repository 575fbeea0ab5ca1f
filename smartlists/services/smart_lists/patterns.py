# smartlists/services/smart_lists/patterns.py

"""Thread-safe cache of compiled regular expressions.

Compiled patterns are keyed by their source text. Concurrent lookups of the
same text converge on a single compiled instance. Invalid patterns raise a
RuleValidationError and are not remembered, so a later fix of the rule
source is picked up immediately.
"""

from __future__ import annotations

import logging
import re
import threading

from smartlists.services.smart_lists.errors import RuleValidationError

__all__ = ["PatternCache"]

logger = logging.getLogger("smartlists.smart_lists.patterns")


class PatternCache:
    """Get-or-insert cache for compiled regex patterns."""

    def __init__(self) -> None:
        self._patterns: dict[str, re.Pattern[str]] = {}
        self._lock = threading.Lock()

    def get(self, pattern: str, field: str = "") -> re.Pattern[str]:
        """Returns the compiled pattern for ``pattern``, compiling it once.

        Args:
            pattern: Regex source text (Python ``re`` syntax).
            field: Field name used in the error message.

        Returns:
            The shared compiled pattern.

        Raises:
            RuleValidationError: If the pattern does not compile.
        """
        cached = self._patterns.get(pattern)
        if cached is not None:
            return cached

        with self._lock:
            cached = self._patterns.get(pattern)
            if cached is not None:
                return cached
            try:
                compiled = re.compile(pattern)
            except re.error as exc:
                logger.warning("Invalid regex pattern '%s': %s", pattern, exc)
                raise RuleValidationError(
                    f"Invalid regex pattern '{pattern}': {exc}",
                    field=field,
                ) from exc
            self._patterns[pattern] = compiled
            return compiled

    def clear(self) -> None:
        with self._lock:
            self._patterns.clear()

    def __len__(self) -> int:
        return len(self._patterns)

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._patterns
