"""Domain models for the library catalog."""
from library_catalog.models.book import YEAR_OPERATORS, Book
from library_catalog.models.loan import LoanRecord
from library_catalog.models.protocols import BookSourceProtocol, LoanSourceProtocol

__all__ = [
    "YEAR_OPERATORS",
    "Book",
    "BookSourceProtocol",
    "LoanRecord",
    "LoanSourceProtocol",
]
