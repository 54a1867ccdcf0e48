"""
Library Catalog - Custom Exceptions

Anti-Patterns Avoided:
- Exception shadowing: namespaced exceptions instead of builtins like
  LookupError or ValueError leaking out of the package
"""

from __future__ import annotations


class LibraryCatalogError(Exception):
    """Base exception for the library catalog.

    All custom exceptions inherit from this base class.
    """

    pass


class QueryParseError(LibraryCatalogError):
    """Raised when a query string cannot be parsed.

    Attributes:
        message: Human-readable error description.
        position: Cursor offset in the query where parsing failed.
    """

    def __init__(self, message: str, position: int) -> None:
        super().__init__(message)
        self.message = message
        self.position = position

    def __str__(self) -> str:
        return f"{self.message} (at position {self.position})"


class CatalogError(LibraryCatalogError):
    """Base exception for book catalog mutations."""

    pass


class DuplicateBookError(CatalogError):
    """Raised when adding a book whose id is already in the catalog."""

    pass


class BookNotFoundError(CatalogError):
    """Raised when a book id is not present in the catalog."""

    pass


class InvalidBookError(CatalogError):
    """Raised when book fields violate the copy-count invariant."""

    pass


class LoanError(LibraryCatalogError):
    """Raised when a borrow or return cannot be recorded."""

    pass


class StorageError(LibraryCatalogError):
    """Raised when persisted catalog or loan data is unreadable or invalid."""

    pass


class ConfigurationError(LibraryCatalogError):
    """Raised when configuration is invalid or missing."""

    pass
