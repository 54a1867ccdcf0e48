"""
Book domain model.

A Book is owned by the BookCatalog. Its id is immutable once the catalog has
assigned it; every other field is mutable, but mutations must go through
BookCatalog.update_book() so the inverted indexes stay consistent.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Final

from library_catalog.core.exceptions import InvalidBookError

# Year comparison operators accepted by matches_year()
YEAR_OPERATORS: Final[frozenset[str]] = frozenset({"=", ">", "<", ">=", "<="})


@dataclass
class Book:
    """A catalog entry.

    Attributes:
        id: Unique identifier; 0 means "let the catalog assign one".
        title: Book title.
        author: Author name(s) as a single string.
        year: Publication year.
        total_copies: Number of copies the library owns.
        available_copies: Copies currently on the shelf.
        isbn: ISBN string (free-form).
        publisher: Publisher name.
        language: Language name.
        page_count: Number of pages (0 if unknown).
        synopsis: Free-text synopsis.
        categories: Insertion-ordered, duplicate-free category names.
    """

    id: int = 0
    title: str = ""
    author: str = ""
    year: int = 0
    total_copies: int = 0
    available_copies: int | None = None
    isbn: str = ""
    publisher: str = ""
    language: str = ""
    page_count: int = 0
    synopsis: str = ""
    categories: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.available_copies is None:
            self.available_copies = self.total_copies
        if self.total_copies < 0:
            raise InvalidBookError(f"total_copies must be >= 0, got {self.total_copies}")
        if not 0 <= self.available_copies <= self.total_copies:
            raise InvalidBookError(
                f"available_copies must be within [0, {self.total_copies}], "
                f"got {self.available_copies}"
            )
        # Dedup while keeping first-seen order
        self.categories = list(dict.fromkeys(self.categories))

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    def add_category(self, category: str) -> None:
        """Append a category unless it is already present."""
        if category not in self.categories:
            self.categories.append(category)

    def remove_category(self, category: str) -> None:
        self.categories = [c for c in self.categories if c != category]

    def set_categories(self, categories: Iterable[str]) -> None:
        self.categories = list(dict.fromkeys(categories))

    # -------------------------------------------------------------------------
    # Copies
    # -------------------------------------------------------------------------

    def borrow(self) -> bool:
        """Take one copy off the shelf.

        Returns:
            True if a copy was available, False otherwise.
        """
        if self.available_copies:
            self.available_copies -= 1
            return True
        return False

    def return_copy(self) -> bool:
        """Put one copy back on the shelf.

        Returns:
            True if the copy count was below total, False otherwise.
        """
        on_shelf = self.available_copies or 0
        if on_shelf < self.total_copies:
            self.available_copies = on_shelf + 1
            return True
        return False

    # -------------------------------------------------------------------------
    # Linear predicates (not index-backed)
    # -------------------------------------------------------------------------

    def matches_keyword(self, keyword: str) -> bool:
        """Case-sensitive substring match over the descriptive fields.

        Checks title, author, synopsis, each category, publisher and isbn.
        An empty keyword never matches.
        """
        if not keyword:
            return False
        if keyword in self.title or keyword in self.author or keyword in self.synopsis:
            return True
        if any(keyword in category for category in self.categories):
            return True
        return keyword in self.publisher or keyword in self.isbn

    def matches_year(self, year: int, operator: str) -> bool:
        """Compare the publication year; unknown operators never match."""
        if operator == "=":
            return self.year == year
        if operator == ">":
            return self.year > year
        if operator == "<":
            return self.year < year
        if operator == ">=":
            return self.year >= year
        if operator == "<=":
            return self.year <= year
        return False

    def matches_category(self, category: str) -> bool:
        """Exact, case-sensitive category membership."""
        return category in self.categories

    def index_fields(self) -> list[str]:
        """Text fields fed to the full inverted index, in indexing order."""
        return [self.title, self.author, *self.categories, self.synopsis]
