"""
Library - facade over catalog, loan history and recommendations.

The facade owns rebuild timing for the recommendation snapshot: it rebuilds
after every book add, update or delete and after every successful borrow.
Returns do not change borrowing history, so they do not trigger a rebuild.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from library_catalog.catalog.book_catalog import BookCatalog
from library_catalog.catalog.loan_history import DEFAULT_LOAN_PERIOD_DAYS, LoanHistory
from library_catalog.catalog.storage import CatalogStorage
from library_catalog.core.config import Settings
from library_catalog.core.exceptions import BookNotFoundError, LoanError, StorageError
from library_catalog.core.logging import get_logger
from library_catalog.models.book import Book
from library_catalog.models.loan import LoanRecord
from library_catalog.recommendation.engine import RecommendationEngine, ScoredBook

logger = get_logger(__name__)


class Library:
    """Catalog + loans + recommendations behind one interface."""

    def __init__(
        self,
        books: Iterable[Book] = (),
        loans: Iterable[LoanRecord] = (),
        *,
        loan_period_days: int = DEFAULT_LOAN_PERIOD_DAYS,
        storage: CatalogStorage | None = None,
    ) -> None:
        self.catalog = BookCatalog(books)
        self.history = LoanHistory(loans, loan_period_days=loan_period_days)
        self.recommender = RecommendationEngine()
        self.storage = storage
        self.rebuild_recommendations()

    @classmethod
    def load(cls, settings: Settings) -> Library:
        """Build a Library from the JSON files named in ``settings``.

        Raises:
            StorageError: If either file is invalid.
        """
        storage = CatalogStorage(settings.books_path, settings.loans_path)
        return cls(
            storage.load_books(),
            storage.load_loans(),
            loan_period_days=settings.loan_period_days,
            storage=storage,
        )

    def save(self) -> None:
        """Write books and loans back through the attached storage.

        Raises:
            StorageError: If no storage is attached or a write fails.
        """
        if self.storage is None:
            raise StorageError("Library has no storage attached")
        self.storage.save_books(self.catalog.books())
        self.storage.save_loans(self.history.loans())

    def rebuild_recommendations(self) -> None:
        self.recommender.initialize(self.catalog.books(), self.history.loans())

    # -------------------------------------------------------------------------
    # Catalog mutations
    # -------------------------------------------------------------------------

    def add_book(self, book: Book) -> int:
        book_id = self.catalog.add_book(book)
        self.rebuild_recommendations()
        return book_id

    def update_book(self, book: Book) -> None:
        self.catalog.update_book(book)
        self.rebuild_recommendations()

    def delete_book(self, book_id: int) -> Book:
        book = self.catalog.delete_book(book_id)
        self.rebuild_recommendations()
        return book

    # -------------------------------------------------------------------------
    # Loans
    # -------------------------------------------------------------------------

    def borrow_book(self, username: str, book_id: int, now: datetime | None = None) -> LoanRecord:
        """Lend one copy to ``username``.

        Raises:
            BookNotFoundError: If the book does not exist.
            LoanError: If no copy is available.
        """
        if book_id not in self.catalog:
            raise BookNotFoundError(f"Book {book_id} not found")
        if not self.catalog.borrow_copy(book_id):
            raise LoanError(f"No copies of book {book_id} available")
        loan = self.history.record_borrow(username, book_id, now)
        self.rebuild_recommendations()
        return loan

    def return_book(self, username: str, book_id: int, now: datetime | None = None) -> LoanRecord:
        """Close an outstanding loan and put the copy back.

        Raises:
            BookNotFoundError: If the book does not exist.
            LoanError: If the user has no outstanding loan of the book.
        """
        if book_id not in self.catalog:
            raise BookNotFoundError(f"Book {book_id} not found")
        loan = self.history.record_return(username, book_id, now)
        self.catalog.return_copy(book_id)
        return loan

    # -------------------------------------------------------------------------
    # Passthroughs
    # -------------------------------------------------------------------------

    def search(self, keyword: str) -> list[int]:
        return self.catalog.search(keyword)

    def advanced_search(self, query: str) -> list[int]:
        return self.catalog.advanced_search(query)

    def recommend_for_user(self, username: str, count: int) -> list[ScoredBook]:
        return self.recommender.get_hybrid_recommendations(username, count)

    def collaborative_recommendations(self, username: str, count: int) -> list[ScoredBook]:
        return self.recommender.get_collaborative_filtering_recommendations(username, count)

    def similar_books(self, book_id: int, count: int) -> list[ScoredBook]:
        return self.recommender.get_content_based_recommendations(book_id, count)
