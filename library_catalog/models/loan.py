"""Loan record domain model.

Timestamps are timezone-aware UTC. Naive datetimes are taken to be UTC and
tagged on the way in, so loans built in code compare cleanly with loans
loaded from storage.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone


def as_utc(moment: datetime) -> datetime:
    """Tag a naive datetime as UTC; aware datetimes are converted to UTC."""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


@dataclass
class LoanRecord:
    """One borrow of one copy by one user.

    Attributes:
        username: Borrower.
        book_id: Borrowed book.
        borrowed_at: When the copy left the shelf.
        due_at: When the copy is due back.
        returned_at: When the copy came back, or None while outstanding.
    """

    username: str
    book_id: int
    borrowed_at: datetime
    due_at: datetime
    returned_at: datetime | None = None

    def __post_init__(self) -> None:
        self.borrowed_at = as_utc(self.borrowed_at)
        self.due_at = as_utc(self.due_at)
        if self.returned_at is not None:
            self.returned_at = as_utc(self.returned_at)

    @property
    def is_returned(self) -> bool:
        return self.returned_at is not None

    def mark_returned(self, when: datetime) -> None:
        self.returned_at = as_utc(when)

    def is_overdue(self, now: datetime) -> bool:
        """Outstanding past the due date."""
        return self.returned_at is None and as_utc(now) > self.due_at
