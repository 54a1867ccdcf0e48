"""
Catalog Storage - JSON persistence for books and loans.

Patterns Applied:
- Pydantic models validate every record before it becomes a domain object
- camelCase JSON keys via field aliases; snake_case in Python
- Timestamps stored as epoch seconds; returnDate 0 means outstanding

Anti-Patterns Avoided:
- Partially loaded state: a file is validated as a whole before use
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from library_catalog.core.exceptions import InvalidBookError, StorageError
from library_catalog.core.logging import get_logger
from library_catalog.models.book import Book
from library_catalog.models.loan import LoanRecord, as_utc

logger = get_logger(__name__)


# =============================================================================
# Record Models
# =============================================================================


class BookRecord(BaseModel):
    """One element of books.json."""

    model_config = ConfigDict(populate_by_name=True)

    id: int = Field(default=0, ge=0)
    title: str = ""
    author: str = ""
    year: int = 0
    total_copies: int = Field(default=0, ge=0, alias="totalCopies")
    available_copies: int | None = Field(default=None, ge=0, alias="availableCopies")
    isbn: str = ""
    publisher: str = ""
    language: str = ""
    page_count: int = Field(default=0, ge=0, alias="pageCount")
    synopsis: str = ""
    categories: list[str] = Field(default_factory=list)

    def to_book(self) -> Book:
        return Book(**self.model_dump())

    @classmethod
    def from_book(cls, book: Book) -> BookRecord:
        return cls(
            id=book.id,
            title=book.title,
            author=book.author,
            year=book.year,
            total_copies=book.total_copies,
            available_copies=book.available_copies,
            isbn=book.isbn,
            publisher=book.publisher,
            language=book.language,
            page_count=book.page_count,
            synopsis=book.synopsis,
            categories=list(book.categories),
        )


class LoanRecordModel(BaseModel):
    """One element of loans.json."""

    model_config = ConfigDict(populate_by_name=True)

    username: str = Field(min_length=1)
    book_id: int = Field(alias="bookId")
    borrow_date: int = Field(ge=0, alias="borrowDate")
    due_date: int = Field(ge=0, alias="dueDate")
    return_date: int = Field(default=0, ge=0, alias="returnDate")

    def to_loan(self) -> LoanRecord:
        return LoanRecord(
            username=self.username,
            book_id=self.book_id,
            borrowed_at=_from_epoch(self.borrow_date),
            due_at=_from_epoch(self.due_date),
            returned_at=_from_epoch(self.return_date) if self.return_date else None,
        )

    @classmethod
    def from_loan(cls, loan: LoanRecord) -> LoanRecordModel:
        return cls(
            username=loan.username,
            book_id=loan.book_id,
            borrow_date=_to_epoch(loan.borrowed_at),
            due_date=_to_epoch(loan.due_at),
            return_date=_to_epoch(loan.returned_at) if loan.returned_at else 0,
        )


_BOOKS_ADAPTER = TypeAdapter(list[BookRecord])
_LOANS_ADAPTER = TypeAdapter(list[LoanRecordModel])


def _from_epoch(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def _to_epoch(moment: datetime) -> int:
    return int(as_utc(moment).timestamp())


# =============================================================================
# CatalogStorage
# =============================================================================


class CatalogStorage:
    """Reads and writes books.json and loans.json.

    A missing file loads as an empty collection. Parent directories are
    created on save.
    """

    def __init__(self, books_path: Path, loans_path: Path) -> None:
        self.books_path = Path(books_path)
        self.loans_path = Path(loans_path)

    def load_books(self) -> list[Book]:
        """
        Raises:
            StorageError: If the file is not a valid array of book records.
        """
        records = self._read(self.books_path, _BOOKS_ADAPTER)
        try:
            books = [record.to_book() for record in records]
        except InvalidBookError as e:
            raise StorageError(f"Invalid book in {self.books_path}: {e}") from e
        logger.info("books_loaded", path=str(self.books_path), count=len(books))
        return books

    def load_loans(self) -> list[LoanRecord]:
        """
        Raises:
            StorageError: If the file is not a valid array of loan records.
        """
        records = self._read(self.loans_path, _LOANS_ADAPTER)
        loans = [record.to_loan() for record in records]
        logger.info("loans_loaded", path=str(self.loans_path), count=len(loans))
        return loans

    def save_books(self, books: list[Book]) -> None:
        payload = [BookRecord.from_book(book).model_dump(by_alias=True) for book in books]
        self._write(self.books_path, payload)
        logger.info("books_saved", path=str(self.books_path), count=len(payload))

    def save_loans(self, loans: list[LoanRecord]) -> None:
        payload = [LoanRecordModel.from_loan(loan).model_dump(by_alias=True) for loan in loans]
        self._write(self.loans_path, payload)
        logger.info("loans_saved", path=str(self.loans_path), count=len(payload))

    @staticmethod
    def _read(path: Path, adapter: TypeAdapter) -> list:
        if not path.exists():
            logger.info("storage_file_missing", path=str(path))
            return []
        try:
            return adapter.validate_json(path.read_bytes())
        except ValidationError as e:
            raise StorageError(f"Invalid data in {path}: {e.error_count()} error(s)") from e
        except OSError as e:
            raise StorageError(f"Cannot read {path}: {e}") from e

    @staticmethod
    def _write(path: Path, payload: list[dict]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Cannot write {path}: {e}") from e
