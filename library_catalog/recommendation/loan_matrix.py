"""
Loan matrix - collaborative filtering inputs derived from loan history.

Built wholesale from loans on every rebuild; there is no incremental path.

- user_books: username -> distinct book ids in first-borrow order
- cooccurrence: book -> (other book -> number of users who borrowed both);
  both directions are stored explicitly
- popularity: book -> number of distinct users who ever borrowed it
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from library_catalog.models.protocols import LoanSourceProtocol


@dataclass(frozen=True)
class LoanMatrix:
    """Immutable user-item and item-item statistics.

    Attributes:
        user_books: Distinct book ids per user, ordered by first borrow.
        cooccurrence: Co-borrow counts keyed by book then other book.
        popularity: Distinct borrower count per book.
    """

    user_books: Mapping[str, tuple[int, ...]] = field(default_factory=dict)
    cooccurrence: Mapping[int, Mapping[int, int]] = field(default_factory=dict)
    popularity: Mapping[int, int] = field(default_factory=dict)

    @property
    def total_users(self) -> int:
        return len(self.user_books)

    def books_for(self, username: str) -> tuple[int, ...]:
        """Books a user has borrowed; empty for unknown users."""
        return self.user_books.get(username, ())

    def cooccurring(self, book_id: int) -> Mapping[int, int]:
        return self.cooccurrence.get(book_id, {})

    def popularity_of(self, book_id: int) -> int:
        return self.popularity.get(book_id, 0)


def build_user_books(loans: Iterable[LoanSourceProtocol]) -> dict[str, tuple[int, ...]]:
    """Group loans by user, keeping each book once in first-borrow order."""
    ordered = sorted(loans, key=lambda loan: loan.borrowed_at)
    grouped: dict[str, dict[int, None]] = defaultdict(dict)
    for loan in ordered:
        grouped[loan.username].setdefault(loan.book_id, None)
    return {user: tuple(books) for user, books in grouped.items()}


def build_cooccurrence(user_books: Mapping[str, Iterable[int]]) -> dict[int, dict[int, int]]:
    """Count, for every ordered pair of distinct books, the users holding both."""
    matrix: defaultdict[int, defaultdict[int, int]] = defaultdict(lambda: defaultdict(int))
    for books in user_books.values():
        distinct = list(dict.fromkeys(books))
        for first in distinct:
            for second in distinct:
                if first != second:
                    matrix[first][second] += 1
    return {book: dict(row) for book, row in matrix.items()}


def build_popularity(user_books: Mapping[str, Iterable[int]]) -> dict[int, int]:
    popularity: defaultdict[int, int] = defaultdict(int)
    for books in user_books.values():
        for book_id in set(books):
            popularity[book_id] += 1
    return dict(popularity)


def build_loan_matrix(loans: Iterable[LoanSourceProtocol]) -> LoanMatrix:
    """Derive the full LoanMatrix from loan history."""
    user_books = build_user_books(loans)
    return LoanMatrix(
        user_books=user_books,
        cooccurrence=build_cooccurrence(user_books),
        popularity=build_popularity(user_books),
    )
