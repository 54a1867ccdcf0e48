"""Tests for field alias resolution and per-book predicate matching."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from library_catalog.models.book import Book
from library_catalog.search.field_matcher import (
    DEFAULT_FIELD_ALIASES,
    FieldAliasLookup,
    FieldKind,
    FieldMatcher,
    match_number,
    match_string,
)
from library_catalog.search.query_ast import FieldOperator, FieldQuery


@pytest.fixture
def book() -> Book:
    return Book(
        id=1,
        title="Intro to AI",
        author="Alice",
        year=2021,
        total_copies=3,
        available_copies=1,
        isbn="978-0",
        publisher="Tech Press",
        language="English",
        page_count=320,
        synopsis="Search, planning and learning",
        categories=["CS", "AI"],
    )


@pytest.fixture
def matcher() -> FieldMatcher:
    return FieldMatcher()


# =============================================================================
# Alias lookup
# =============================================================================


class TestFieldAliasLookup:
    @pytest.mark.parametrize(
        ("alias", "canonical"),
        [
            ("year", "year"),
            ("YEAR", "year"),
            ("年份", "year"),
            ("作者", "author"),
            ("標籤", "category"),
            ("pagecount", "pageCount"),
            ("copies", "totalCopies"),
            ("可用數量", "availableCopies"),
        ],
    )
    def test_resolves_aliases(self, alias: str, canonical: str) -> None:
        spec = FieldAliasLookup().get(alias)

        assert spec is not None
        assert spec.name == canonical

    def test_unknown_field_is_none(self) -> None:
        lookup = FieldAliasLookup()

        assert lookup.get("shelf") is None
        assert "shelf" not in lookup

    def test_category_kind(self) -> None:
        spec = FieldAliasLookup().get("category")

        assert spec is not None
        assert spec.kind is FieldKind.CATEGORY

    def test_rejects_unknown_canonical_target(self) -> None:
        with pytest.raises(ValueError, match="Unknown canonical fields"):
            FieldAliasLookup({"shelf": "shelfNumber"})

    def test_default_size(self) -> None:
        assert len(FieldAliasLookup()) == len(DEFAULT_FIELD_ALIASES)

    def test_from_json_merges_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({"jahr": "year"}), encoding="utf-8")

        lookup = FieldAliasLookup.from_json(path)

        assert lookup.get("jahr") is not None
        assert lookup.get("年份") is not None

    def test_from_json_without_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({"jahr": "year"}), encoding="utf-8")

        lookup = FieldAliasLookup.from_json(path, merge_defaults=False)

        assert len(lookup) == 1
        assert lookup.get("year") is None


# =============================================================================
# Primitive matchers
# =============================================================================


class TestMatchString:
    def test_equals_ignores_case(self) -> None:
        assert match_string("Alice", FieldOperator.EQUALS, "alice")

    def test_contains(self) -> None:
        assert match_string("Tech Press", FieldOperator.CONTAINS, "press")

    def test_ordering_is_lexicographic(self) -> None:
        assert match_string("bob", FieldOperator.GREATER, "alice")
        assert match_string("alice", FieldOperator.LESS_EQ, "alice")

    def test_case_sensitive_mode(self) -> None:
        assert not match_string("Alice", FieldOperator.EQUALS, "alice", ignore_case=False)


class TestMatchNumber:
    @pytest.mark.parametrize(
        ("operator", "value", "expected"),
        [
            (FieldOperator.EQUALS, "2020", True),
            (FieldOperator.GREATER, "2019", True),
            (FieldOperator.LESS, "2020", False),
            (FieldOperator.GREATER_EQ, "2020", True),
            (FieldOperator.LESS_EQ, "2019", False),
        ],
    )
    def test_comparisons(self, operator: FieldOperator, value: str, expected: bool) -> None:
        assert match_number(2020, operator, value) is expected

    def test_unparseable_value_never_matches(self) -> None:
        assert not match_number(2020, FieldOperator.EQUALS, "20x")

    @pytest.mark.parametrize("value", ["2_020", " 2020", "2020 ", "２０２０", "+", ""])
    def test_only_plain_ascii_integers_parse(self, value: str) -> None:
        assert not match_number(2020, FieldOperator.EQUALS, value)

    def test_signed_values_parse(self) -> None:
        assert match_number(2020, FieldOperator.GREATER, "-1")
        assert match_number(2020, FieldOperator.EQUALS, "+2020")

    def test_contains_never_matches_numbers(self) -> None:
        assert not match_number(2020, FieldOperator.CONTAINS, "20")


# =============================================================================
# FieldMatcher
# =============================================================================


class TestFieldMatcher:
    def test_string_field(self, matcher: FieldMatcher, book: Book) -> None:
        assert matcher.matches(book, FieldQuery("author", FieldOperator.EQUALS, "ALICE"))

    def test_numeric_field_through_localized_alias(self, matcher: FieldMatcher, book: Book) -> None:
        assert matcher.matches(book, FieldQuery("年份", FieldOperator.GREATER_EQ, "2020"))

    def test_page_count(self, matcher: FieldMatcher, book: Book) -> None:
        assert matcher.matches(book, FieldQuery("pageCount", FieldOperator.LESS, "400"))

    def test_available_copies(self, matcher: FieldMatcher, book: Book) -> None:
        assert matcher.matches(book, FieldQuery("availableCopies", FieldOperator.EQUALS, "1"))
        assert matcher.matches(book, FieldQuery("copies", FieldOperator.EQUALS, "3"))

    def test_category_is_case_sensitive(self, matcher: FieldMatcher, book: Book) -> None:
        assert matcher.matches(book, FieldQuery("category", FieldOperator.EQUALS, "AI"))
        assert not matcher.matches(book, FieldQuery("category", FieldOperator.EQUALS, "ai"))

    def test_category_contains_any(self, matcher: FieldMatcher, book: Book) -> None:
        assert matcher.matches(book, FieldQuery("類別", FieldOperator.CONTAINS, "C"))

    def test_unknown_field_never_matches(self, matcher: FieldMatcher, book: Book) -> None:
        assert not matcher.matches(book, FieldQuery("shelf", FieldOperator.EQUALS, "A1"))

    def test_custom_aliases(self, book: Book) -> None:
        matcher = FieldMatcher(FieldAliasLookup({"jahr": "year"}))

        assert matcher.matches(book, FieldQuery("jahr", FieldOperator.EQUALS, "2021"))
        assert not matcher.matches(book, FieldQuery("year", FieldOperator.EQUALS, "2021"))
