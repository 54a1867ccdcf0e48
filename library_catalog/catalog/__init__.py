"""Book catalog, loan history, JSON storage and the Library facade."""
from library_catalog.catalog.book_catalog import BookCatalog
from library_catalog.catalog.library import Library
from library_catalog.catalog.loan_history import LoanHistory
from library_catalog.catalog.storage import BookRecord, CatalogStorage, LoanRecordModel

__all__ = [
    "BookCatalog",
    "BookRecord",
    "CatalogStorage",
    "Library",
    "LoanHistory",
    "LoanRecordModel",
]
