"""
Book Catalog - book CRUD with inverted indexes kept in sync.

Patterns Applied:
- Single owner: BookCatalog owns every Book and its CatalogIndex entries
- Reindex on every mutation (add, update, delete)
- Parse failures are logged and turned into an empty result at this boundary

Anti-Patterns Avoided:
- Leaking QueryParseError to interactive callers
- Handing out live Book references whose edits would bypass the index:
  books go in and come out as copies
"""

from __future__ import annotations

import copy
from collections import Counter
from collections.abc import Iterable, Iterator

from library_catalog.core.exceptions import (
    BookNotFoundError,
    DuplicateBookError,
    QueryParseError,
)
from library_catalog.core.logging import get_logger
from library_catalog.models.book import Book
from library_catalog.search.catalog_index import CatalogIndex
from library_catalog.search.field_matcher import FieldMatcher
from library_catalog.search.query_evaluator import QueryEvaluator
from library_catalog.search.query_parser import QueryParser

logger = get_logger(__name__)

ADVANCED_SEARCH_HINT = (
    'Use AND, OR, NOT, parentheses, quoted phrases and field queries such as '
    'year>=2020 or author="Alice".'
)


class BookCatalog:
    """Book storage plus keyword, boolean and field search.

    All id-returning searches return ids sorted ascending.

    Example:
        >>> catalog = BookCatalog()
        >>> book_id = catalog.add_book(Book(title="Intro to AI", author="Alice"))
        >>> catalog.advanced_search('"AI" AND author="Alice"')
        [1]
    """

    def __init__(self, books: Iterable[Book] = (), *, matcher: FieldMatcher | None = None) -> None:
        self._books: dict[int, Book] = {}
        self._next_id = 1
        self._index = CatalogIndex()
        self._matcher = matcher if matcher is not None else FieldMatcher()
        self._parser = QueryParser()
        for book in books:
            self.add_book(book)

    # -------------------------------------------------------------------------
    # CRUD
    # -------------------------------------------------------------------------

    def add_book(self, book: Book) -> int:
        """Store a copy of a book, assigning the next free id when ``book.id`` is 0.

        Returns:
            The id the book is stored under.

        Raises:
            DuplicateBookError: If a book with the same non-zero id exists.
        """
        book = copy.deepcopy(book)
        if book.id == 0:
            book.id = self._next_id
            self._next_id += 1
        elif book.id in self._books:
            raise DuplicateBookError(f"Book {book.id} already exists")
        else:
            self._next_id = max(self._next_id, book.id + 1)

        self._books[book.id] = book
        self._index.index(book)
        logger.debug("catalog_book_added", book_id=book.id, title=book.title)
        return book.id

    def update_book(self, book: Book) -> None:
        """Replace the stored book with the same id and reindex it.

        Raises:
            BookNotFoundError: If no book has ``book.id``.
        """
        if book.id not in self._books:
            raise BookNotFoundError(f"Book {book.id} not found")
        book = copy.deepcopy(book)
        self._books[book.id] = book
        self._index.reindex(book)
        logger.debug("catalog_book_updated", book_id=book.id)

    def delete_book(self, book_id: int) -> Book:
        """Remove a book and drop it from every index.

        Raises:
            BookNotFoundError: If no book has ``book_id``.
        """
        book = self._books.pop(book_id, None)
        if book is None:
            raise BookNotFoundError(f"Book {book_id} not found")
        self._index.deindex(book_id)
        logger.debug("catalog_book_deleted", book_id=book_id)
        return book

    def get_book(self, book_id: int) -> Book | None:
        """A copy of the stored book; edit it and pass it to update_book()."""
        book = self._books.get(book_id)
        return copy.deepcopy(book) if book is not None else None

    def books(self) -> list[Book]:
        """Copies of all books ordered by id."""
        return [copy.deepcopy(self._books[book_id]) for book_id in sorted(self._books)]

    def ids(self) -> set[int]:
        return set(self._books)

    def __len__(self) -> int:
        return len(self._books)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._books

    def __iter__(self) -> Iterator[Book]:
        return iter(self.books())

    @property
    def index(self) -> CatalogIndex:
        return self._index

    # -------------------------------------------------------------------------
    # Copies
    # -------------------------------------------------------------------------

    def borrow_copy(self, book_id: int) -> bool:
        """Take a copy off the shelf; False if unknown or none available."""
        book = self._books.get(book_id)
        return book.borrow() if book is not None else False

    def return_copy(self, book_id: int) -> bool:
        """Put a copy back; False if unknown or already full."""
        book = self._books.get(book_id)
        return book.return_copy() if book is not None else False

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, keyword: str) -> list[int]:
        """Case-sensitive substring search over the descriptive fields."""
        if not keyword:
            return []
        return sorted(book_id for book_id, book in self._books.items() if book.matches_keyword(keyword))

    def advanced_search(self, query: str) -> list[int]:
        """Boolean/field query search.

        Malformed queries are logged with a usage hint and yield ``[]``.
        """
        try:
            tree = self._parser.parse(query)
        except QueryParseError as e:
            logger.warning(
                "advanced_search_parse_failed",
                query=query,
                error=e.message,
                position=e.position,
                hint=ADVANCED_SEARCH_HINT,
            )
            return []

        evaluator = QueryEvaluator(self._index, self._books.values(), matcher=self._matcher)
        return sorted(evaluator.evaluate(tree))

    def filter_by_year(self, year: int, operator: str) -> list[int]:
        return sorted(
            book_id for book_id, book in self._books.items() if book.matches_year(year, operator)
        )

    def filter_by_category(self, category: str) -> list[int]:
        return sorted(
            book_id for book_id, book in self._books.items() if book.matches_category(category)
        )

    def category_stats(self) -> dict[str, int]:
        """Number of books carrying each category."""
        counts: Counter[str] = Counter()
        for book in self._books.values():
            counts.update(book.categories)
        return dict(counts)
