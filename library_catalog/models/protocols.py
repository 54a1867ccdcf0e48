"""
Library Catalog - Source Protocols

Defines the read-only boundary the recommendation engine consumes.

Patterns Applied:
- Protocol typing for duck typing
- Structural subtyping (no inheritance required)

Anti-Patterns Avoided:
- Tight coupling of the recommendation engine to BookCatalog / LoanHistory
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol


class BookSourceProtocol(Protocol):
    """Fields of a book that the search and recommendation layers read."""

    @property
    def id(self) -> int: ...

    @property
    def title(self) -> str: ...

    @property
    def author(self) -> str: ...

    @property
    def synopsis(self) -> str: ...

    @property
    def categories(self) -> Sequence[str]: ...


class LoanSourceProtocol(Protocol):
    """Fields of a loan that the recommendation layer reads."""

    @property
    def username(self) -> str: ...

    @property
    def book_id(self) -> int: ...

    @property
    def borrowed_at(self) -> datetime: ...

    @property
    def returned_at(self) -> datetime | None: ...
