"""
Catalog Index - inverted indexes over the book catalog.

Two indexes are maintained side by side:

- full index: tokens of title, author, every category and the synopsis
- title index: tokens of the title only, used for keyword (TERM) lookups

Both use tokenize_ascii(). A book id is present under token T iff T came
from that book's indexed text at its last index() call; callers must
reindex() on every mutation to keep that true.

Title search is two-tier: token intersection over the title index first,
then a case-insensitive substring scan of raw titles when the intersection
is empty. The second tier recovers recall for unsegmented scripts (CJK)
where a query rarely shares a token with the title.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from library_catalog.models.book import Book
from library_catalog.nlp.tokenizer import tokenize_ascii


class CatalogIndex:
    """Full and title-only inverted indexes plus raw titles for fallback.

    Example:
        >>> index = CatalogIndex()
        >>> index.index(Book(id=1, title="Intro to AI", author="Alice"))
        >>> index.search_in_title("ai")
        {1}
    """

    __slots__ = ("_full", "_title", "_titles")

    def __init__(self) -> None:
        self._full: defaultdict[str, set[int]] = defaultdict(set)
        self._title: defaultdict[str, set[int]] = defaultdict(set)
        self._titles: dict[int, str] = {}

    # -------------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------------

    def index(self, book: Book) -> None:
        """Add a book's tokens to both indexes."""
        for text in book.index_fields():
            for token in tokenize_ascii(text):
                self._full[token].add(book.id)
        for token in tokenize_ascii(book.title):
            self._title[token].add(book.id)
        self._titles[book.id] = book.title

    def deindex(self, book_id: int) -> None:
        """Remove a book id from every bucket of both indexes.

        This is a full scan; buckets left empty are dropped.
        """
        for buckets in (self._full, self._title):
            emptied = []
            for token, ids in buckets.items():
                ids.discard(book_id)
                if not ids:
                    emptied.append(token)
            for token in emptied:
                del buckets[token]
        self._titles.pop(book_id, None)

    def reindex(self, book: Book) -> None:
        self.deindex(book.id)
        self.index(book)

    def clear(self) -> None:
        self._full.clear()
        self._title.clear()
        self._titles.clear()

    def rebuild(self, books: Iterable[Book]) -> None:
        """Drop everything and index the given books from scratch."""
        self.clear()
        for book in books:
            self.index(book)

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def lookup_full(self, token: str) -> set[int]:
        """Book ids whose indexed text produced ``token``."""
        return set(self._full.get(token, ()))

    def lookup_title(self, tokens: Iterable[str]) -> set[int]:
        """Intersection of title-index buckets for all tokens.

        An empty token sequence yields an empty set.
        """
        result: set[int] | None = None
        for token in tokens:
            ids = self._title.get(token, set())
            result = set(ids) if result is None else result & ids
            if not result:
                return set()
        return result or set()

    def search_in_title(self, query: str) -> set[int]:
        """Keyword search against titles with substring fallback."""
        if not query:
            return set()

        result = self.lookup_title(tokenize_ascii(query))
        if result:
            return result

        needle = query.lower()
        return {book_id for book_id, title in self._titles.items() if needle in title.lower()}

    def tokens(self) -> set[str]:
        """All tokens currently in the full index."""
        return set(self._full)

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._titles

    def __len__(self) -> int:
        """Number of indexed books."""
        return len(self._titles)
