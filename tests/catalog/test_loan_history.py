"""Tests for LoanHistory."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from library_catalog.catalog.loan_history import LoanHistory
from library_catalog.core.exceptions import LoanError

NOW = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def history() -> LoanHistory:
    return LoanHistory(loan_period_days=14)


class TestRecordBorrow:
    def test_due_date_is_one_loan_period_later(self, history: LoanHistory) -> None:
        loan = history.record_borrow("alice", 1, NOW)

        assert loan.borrowed_at == NOW
        assert loan.due_at == NOW + timedelta(days=14)
        assert not loan.is_returned

    def test_indexes_by_user_and_book(self, history: LoanHistory) -> None:
        history.record_borrow("alice", 1, NOW)
        history.record_borrow("bob", 1, NOW)
        history.record_borrow("alice", 2, NOW)

        assert [loan.book_id for loan in history.loans_for_user("alice")] == [1, 2]
        assert [loan.username for loan in history.loans_for_book(1)] == ["alice", "bob"]
        assert len(history) == 3

    def test_empty_username_rejected(self, history: LoanHistory) -> None:
        with pytest.raises(LoanError):
            history.record_borrow("", 1, NOW)

    def test_defaults_to_current_time(self, history: LoanHistory) -> None:
        loan = history.record_borrow("alice", 1)

        assert loan.borrowed_at.tzinfo is not None


class TestRecordReturn:
    def test_closes_oldest_outstanding_loan(self, history: LoanHistory) -> None:
        first = history.record_borrow("alice", 1, NOW)
        second = history.record_borrow("alice", 1, NOW + timedelta(days=1))

        returned = history.record_return("alice", 1, NOW + timedelta(days=2))

        assert returned is first
        assert first.is_returned
        assert not second.is_returned

    def test_no_outstanding_loan_raises(self, history: LoanHistory) -> None:
        history.record_borrow("alice", 1, NOW)
        history.record_return("alice", 1, NOW)

        with pytest.raises(LoanError):
            history.record_return("alice", 1, NOW)

    def test_unknown_user_raises(self, history: LoanHistory) -> None:
        with pytest.raises(LoanError):
            history.record_return("nobody", 1, NOW)


class TestViews:
    def test_outstanding_and_overdue(self, history: LoanHistory) -> None:
        history.record_borrow("alice", 1, NOW)
        history.record_borrow("bob", 2, NOW + timedelta(days=10))
        history.record_borrow("carol", 3, NOW)
        history.record_return("carol", 3, NOW + timedelta(days=1))

        later = NOW + timedelta(days=15)

        assert [loan.username for loan in history.outstanding()] == ["alice", "bob"]
        assert [loan.username for loan in history.overdue(later)] == ["alice"]

    def test_naive_times_mix_with_aware_loans(self, history: LoanHistory) -> None:
        history.record_borrow("alice", 1, NOW)
        naive = history.record_borrow("bob", 2, datetime(2024, 3, 2))
        history.record_return("bob", 2, datetime(2024, 3, 3))

        assert naive.borrowed_at.tzinfo is timezone.utc
        assert naive.returned_at == datetime(2024, 3, 3, tzinfo=timezone.utc)
        assert [loan.username for loan in history.overdue(datetime(2024, 4, 1))] == ["alice"]

    def test_returned_loans_stay_in_history(self, history: LoanHistory) -> None:
        history.record_borrow("alice", 1, NOW)
        history.record_return("alice", 1, NOW)

        assert len(history.loans()) == 1

    def test_invalid_loan_period(self) -> None:
        with pytest.raises(LoanError):
            LoanHistory(loan_period_days=0)
