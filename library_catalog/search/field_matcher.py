"""
Field Matcher - per-book evaluation of ``field <op> value`` predicates.

Field names are resolved through a case-insensitive alias table: each
canonical field accepts its English name and one or more localized aliases.
An unrecognized field name is not an error; the predicate is simply false
for every book.

Matching rules:
- string fields compare case-insensitively; ``~`` is substring containment,
  ordering operators compare lexicographically
- category compares case-sensitively against each category; any match wins
- numeric fields accept only an optionally signed run of ASCII digits; any
  other value never matches, and ``~`` never matches a number
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Final

from library_catalog.models.book import Book
from library_catalog.search.query_ast import FieldOperator, FieldQuery

INTEGER_PATTERN: Final[re.Pattern[str]] = re.compile(r"[+-]?[0-9]+")


class FieldKind(str, Enum):
    STRING = "string"
    NUMBER = "number"
    CATEGORY = "category"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """A canonical book field and how to read it."""

    name: str
    kind: FieldKind
    attribute: str


# =============================================================================
# Canonical fields and aliases
# =============================================================================

CANONICAL_FIELDS: Final[dict[str, FieldSpec]] = {
    spec.name: spec
    for spec in (
        FieldSpec("title", FieldKind.STRING, "title"),
        FieldSpec("author", FieldKind.STRING, "author"),
        FieldSpec("year", FieldKind.NUMBER, "year"),
        FieldSpec("isbn", FieldKind.STRING, "isbn"),
        FieldSpec("publisher", FieldKind.STRING, "publisher"),
        FieldSpec("language", FieldKind.STRING, "language"),
        FieldSpec("pageCount", FieldKind.NUMBER, "page_count"),
        FieldSpec("category", FieldKind.CATEGORY, "categories"),
        FieldSpec("synopsis", FieldKind.STRING, "synopsis"),
        FieldSpec("totalCopies", FieldKind.NUMBER, "total_copies"),
        FieldSpec("availableCopies", FieldKind.NUMBER, "available_copies"),
    )
}

# alias (any case) -> canonical field name
DEFAULT_FIELD_ALIASES: Final[dict[str, str]] = {
    "title": "title",
    "標題": "title",
    "author": "author",
    "作者": "author",
    "year": "year",
    "年份": "year",
    "isbn": "isbn",
    "publisher": "publisher",
    "出版社": "publisher",
    "language": "language",
    "語言": "language",
    "pagecount": "pageCount",
    "頁數": "pageCount",
    "category": "category",
    "類別": "category",
    "標籤": "category",
    "synopsis": "synopsis",
    "簡介": "synopsis",
    "概要": "synopsis",
    "copies": "totalCopies",
    "totalcopies": "totalCopies",
    "總數量": "totalCopies",
    "availablecopies": "availableCopies",
    "可用數量": "availableCopies",
}


class FieldAliasLookup:
    """O(1) case-insensitive resolution of field names to FieldSpec.

    Example:
        >>> FieldAliasLookup().get("年份").name
        'year'
        >>> FieldAliasLookup().get("shelf") is None
        True
    """

    __slots__ = ("_lookup",)

    def __init__(self, aliases: Mapping[str, str] | None = None) -> None:
        """
        Args:
            aliases: alias -> canonical field name. Defaults to
                DEFAULT_FIELD_ALIASES.

        Raises:
            ValueError: If an alias targets an unknown canonical field.
        """
        source = DEFAULT_FIELD_ALIASES if aliases is None else aliases
        unknown = sorted({c for c in source.values() if c not in CANONICAL_FIELDS})
        if unknown:
            raise ValueError(f"Unknown canonical fields in alias table: {unknown}")
        self._lookup: dict[str, str] = {k.strip().lower(): v for k, v in source.items()}

    @classmethod
    def from_json(cls, path: Path, *, merge_defaults: bool = True) -> FieldAliasLookup:
        """Load aliases from a JSON object of ``{"alias": "canonicalField"}``.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            json.JSONDecodeError: If the file contains invalid JSON.
        """
        with path.open("r", encoding="utf-8") as f:
            raw: dict[str, str] = json.load(f)
        aliases = {**DEFAULT_FIELD_ALIASES, **raw} if merge_defaults else raw
        return cls(aliases)

    def get(self, field: str) -> FieldSpec | None:
        canonical = self._lookup.get(field.strip().lower())
        if canonical is None:
            return None
        return CANONICAL_FIELDS[canonical]

    def __len__(self) -> int:
        return len(self._lookup)

    def __contains__(self, field: str) -> bool:
        return self.get(field) is not None


# =============================================================================
# Primitive matchers
# =============================================================================


def match_string(text: str, operator: FieldOperator, value: str, *, ignore_case: bool = True) -> bool:
    """Compare a string field against a query value."""
    if ignore_case:
        text = text.lower()
        value = value.lower()

    if operator is FieldOperator.EQUALS:
        return text == value
    if operator is FieldOperator.CONTAINS:
        return value in text
    if operator is FieldOperator.GREATER:
        return text > value
    if operator is FieldOperator.LESS:
        return text < value
    if operator is FieldOperator.GREATER_EQ:
        return text >= value
    if operator is FieldOperator.LESS_EQ:
        return text <= value
    return False


def match_number(number: int, operator: FieldOperator, value: str) -> bool:
    """Compare a numeric field; unparseable values and ``~`` never match."""
    if not INTEGER_PATTERN.fullmatch(value):
        return False
    target = int(value)

    if operator is FieldOperator.EQUALS:
        return number == target
    if operator is FieldOperator.GREATER:
        return number > target
    if operator is FieldOperator.LESS:
        return number < target
    if operator is FieldOperator.GREATER_EQ:
        return number >= target
    if operator is FieldOperator.LESS_EQ:
        return number <= target
    return False


# =============================================================================
# FieldMatcher
# =============================================================================


class FieldMatcher:
    """Evaluates FieldQuery nodes against individual books."""

    def __init__(self, aliases: FieldAliasLookup | None = None) -> None:
        self._aliases = aliases if aliases is not None else FieldAliasLookup()

    @property
    def aliases(self) -> FieldAliasLookup:
        return self._aliases

    def matches(self, book: Book, predicate: FieldQuery) -> bool:
        spec = self._aliases.get(predicate.field)
        if spec is None:
            return False

        raw = getattr(book, spec.attribute)
        if spec.kind is FieldKind.CATEGORY:
            return any(
                match_string(category, predicate.operator, predicate.value, ignore_case=False)
                for category in raw
            )
        if spec.kind is FieldKind.NUMBER:
            return match_number(int(raw), predicate.operator, predicate.value)
        return match_string(str(raw), predicate.operator, predicate.value)
