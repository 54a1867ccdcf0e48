"""Append-only loan history with per-user and per-book views."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone

from library_catalog.core.exceptions import LoanError
from library_catalog.core.logging import get_logger
from library_catalog.models.loan import LoanRecord, as_utc

logger = get_logger(__name__)

DEFAULT_LOAN_PERIOD_DAYS = 14


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class LoanHistory:
    """Every loan ever recorded, in insertion order.

    Records are never removed; a return only stamps ``returned_at``.
    """

    def __init__(
        self,
        loans: Iterable[LoanRecord] = (),
        *,
        loan_period_days: int = DEFAULT_LOAN_PERIOD_DAYS,
    ) -> None:
        if loan_period_days < 1:
            raise LoanError(f"loan_period_days must be >= 1, got {loan_period_days}")
        self._loans: list[LoanRecord] = []
        self._by_user: defaultdict[str, list[LoanRecord]] = defaultdict(list)
        self._by_book: defaultdict[int, list[LoanRecord]] = defaultdict(list)
        self.loan_period = timedelta(days=loan_period_days)
        for loan in loans:
            self._append(loan)

    def _append(self, loan: LoanRecord) -> None:
        self._loans.append(loan)
        self._by_user[loan.username].append(loan)
        self._by_book[loan.book_id].append(loan)

    def record_borrow(self, username: str, book_id: int, now: datetime | None = None) -> LoanRecord:
        """Append a new outstanding loan due one loan period from ``now``.

        Raises:
            LoanError: If ``username`` is empty.
        """
        if not username:
            raise LoanError("username must not be empty")
        borrowed_at = as_utc(now) if now is not None else _utcnow()
        loan = LoanRecord(
            username=username,
            book_id=book_id,
            borrowed_at=borrowed_at,
            due_at=borrowed_at + self.loan_period,
        )
        self._append(loan)
        logger.info("loan_recorded", username=username, book_id=book_id)
        return loan

    def record_return(self, username: str, book_id: int, now: datetime | None = None) -> LoanRecord:
        """Close the user's oldest outstanding loan of ``book_id``.

        Raises:
            LoanError: If the user has no outstanding loan of that book.
        """
        for loan in self._by_user.get(username, ()):
            if loan.book_id == book_id and not loan.is_returned:
                loan.mark_returned(now or _utcnow())
                logger.info("loan_returned", username=username, book_id=book_id)
                return loan
        raise LoanError(f"No outstanding loan of book {book_id} for user {username!r}")

    def loans_for_user(self, username: str) -> list[LoanRecord]:
        return list(self._by_user.get(username, ()))

    def loans_for_book(self, book_id: int) -> list[LoanRecord]:
        return list(self._by_book.get(book_id, ()))

    def outstanding(self) -> list[LoanRecord]:
        return [loan for loan in self._loans if not loan.is_returned]

    def overdue(self, now: datetime | None = None) -> list[LoanRecord]:
        moment = now or _utcnow()
        return [loan for loan in self._loans if loan.is_overdue(moment)]

    def loans(self) -> list[LoanRecord]:
        return list(self._loans)

    def __len__(self) -> int:
        return len(self._loans)
