# tests/unit/test_utils/test_name_utils.py

"""Tests for list name decoration and name-based sort helpers."""

from __future__ import annotations

from smartlists.utils.name_utils import (
    DEFAULT_NAME_SUFFIX,
    format_list_name,
    natural_sort_key,
    strip_leading_articles,
    strip_prefix_and_suffix,
)


class TestFormatListName:
    """Tests for format_list_name."""

    def test_default_suffix(self) -> None:
        assert DEFAULT_NAME_SUFFIX == "[Smart]"
        assert format_list_name("Favourites") == "Favourites [Smart]"

    def test_prefix_only(self) -> None:
        assert format_list_name("Favourites", prefix="[Curated]", suffix="") == "[Curated] Favourites"

    def test_prefix_and_suffix(self) -> None:
        assert format_list_name("Favourites", prefix="My", suffix="(auto)") == "My Favourites (auto)"

    def test_none_base_name(self) -> None:
        """A missing base name leaves only the decoration."""
        assert format_list_name(None) == "[Smart]"


class TestStripPrefixAndSuffix:
    """Tests for strip_prefix_and_suffix."""

    def test_strips_default_suffix(self) -> None:
        assert strip_prefix_and_suffix("Favourites [Smart]") == "Favourites"

    def test_suffix_without_space_and_other_case(self) -> None:
        """The suffix matches case-insensitively, with or without the space."""
        assert strip_prefix_and_suffix("Favourites[smart]") == "Favourites"

    def test_strips_prefix(self) -> None:
        assert strip_prefix_and_suffix("[Curated] Favourites", prefix="[Curated]", suffix="") == "Favourites"
        assert strip_prefix_and_suffix("[curated]Favourites", prefix="[Curated]", suffix="") == "Favourites"

    def test_strips_both(self) -> None:
        assert strip_prefix_and_suffix("My Favourites (auto)", prefix="My", suffix="(auto)") == "Favourites"

    def test_undecorated_name_unchanged(self) -> None:
        assert strip_prefix_and_suffix("Favourites") == "Favourites"

    def test_empty_input(self) -> None:
        assert strip_prefix_and_suffix(None) == ""
        assert strip_prefix_and_suffix("") == ""

    def test_inverts_format_list_name(self) -> None:
        """Stripping a formatted name gives back the base name."""
        formatted = format_list_name("Sci-Fi Nights", prefix="[Curated]")
        assert strip_prefix_and_suffix(formatted, prefix="[Curated]") == "Sci-Fi Nights"


class TestNaturalSortKey:
    """Tests for natural_sort_key."""

    def test_leading_numbers_sort_numerically_and_first(self) -> None:
        names = ["Alien", "10 Things", "aliens", "2 Fast"]
        assert sorted(names, key=natural_sort_key) == ["2 Fast", "10 Things", "Alien", "aliens"]

    def test_case_insensitive(self) -> None:
        assert natural_sort_key("ALIEN") == natural_sort_key("alien")

    def test_none_is_empty(self) -> None:
        assert natural_sort_key(None) == natural_sort_key("")


class TestStripLeadingArticles:
    """Tests for strip_leading_articles."""

    def test_strips_the(self) -> None:
        assert strip_leading_articles("The Wire") == "Wire"
        assert strip_leading_articles("  the   Expanse") == "Expanse"

    def test_article_must_be_a_word(self) -> None:
        assert strip_leading_articles("Theatre") == "Theatre"

    def test_other_articles_kept(self) -> None:
        assert strip_leading_articles("A Team") == "A Team"

    def test_blank(self) -> None:
        assert strip_leading_articles("") == ""
        assert strip_leading_articles(None) == ""
