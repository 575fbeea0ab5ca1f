# smartlists/utils/name_utils.py

"""Name helpers for smart list titles and name-based ordering.

Smart lists are published under a decorated name, e.g. "Favourites [Smart]".
Rules on the Collections field let users type the bare name, so the same
prefix/suffix has to be removable again before comparison.
"""

from __future__ import annotations

import re

__all__ = [
    "DEFAULT_NAME_SUFFIX",
    "format_list_name",
    "natural_sort_key",
    "strip_leading_articles",
    "strip_prefix_and_suffix",
]

DEFAULT_NAME_SUFFIX = "[Smart]"

_LEADING_NUMBER = re.compile(r"^\s*(\d+)")

_ARTICLES: tuple[str, ...] = ("the",)


def format_list_name(base_name: str | None, prefix: str = "", suffix: str = DEFAULT_NAME_SUFFIX) -> str:
    """Decorates a base name with a prefix and suffix, space separated.

    Args:
        base_name: The user-facing base name. None is treated as empty.
        prefix: Optional prefix placed before the name.
        suffix: Optional suffix placed after the name.

    Returns:
        The decorated and trimmed name.
    """
    formatted = base_name or ""
    if prefix:
        formatted = f"{prefix} {formatted}"
    if suffix:
        formatted = f"{formatted} {suffix}"
    return formatted.strip()


def strip_prefix_and_suffix(formatted_name: str | None, prefix: str = "", suffix: str = DEFAULT_NAME_SUFFIX) -> str:
    """Removes a decoration previously added by ``format_list_name``.

    The suffix is removed first, then the prefix. Both are matched
    case-insensitively, with or without the separating space.

    Args:
        formatted_name: A possibly decorated name.
        prefix: The prefix to remove.
        suffix: The suffix to remove.

    Returns:
        The bare, trimmed name.
    """
    if not formatted_name:
        return formatted_name or ""

    result = formatted_name

    if suffix:
        lowered = result.lower()
        spaced = " " + suffix.lower()
        if lowered.endswith(spaced):
            result = result[: -len(spaced)]
        elif lowered.endswith(suffix.lower()):
            result = result[: -len(suffix)]

    if prefix:
        lowered = result.lower()
        spaced = prefix.lower() + " "
        if lowered.startswith(spaced):
            result = result[len(spaced) :]
        elif lowered.startswith(prefix.lower()):
            result = result[len(prefix) :]

    return result.strip()


def natural_sort_key(name: str | None) -> tuple[int, int, str]:
    """Sort key that orders names starting with a number numerically.

    Names with a leading number come first ("2 Fast" before "10 Things"
    before "Alien"); everything else sorts case-insensitively.

    Args:
        name: The name to build a key for.

    Returns:
        A tuple usable as a ``sorted`` key.
    """
    text = name or ""
    match = _LEADING_NUMBER.match(text)
    if match:
        return (0, int(match.group(1)), text[match.end() :].strip().lower())
    return (1, 0, text.lower())


def strip_leading_articles(name: str | None) -> str:
    """Drops a leading article ("The Wire" -> "Wire") for sorting.

    Args:
        name: The name to strip.

    Returns:
        The trimmed name without its leading article.
    """
    if not name or not name.strip():
        return name or ""

    trimmed = name.strip()
    lowered = trimmed.lower()
    for article in _ARTICLES:
        if lowered.startswith(article + " "):
            return trimmed[len(article) + 1 :].lstrip()
    return trimmed
