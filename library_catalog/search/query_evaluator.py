"""
Query Evaluator - walks a QueryNode tree to a set of book ids.

- Term      -> CatalogIndex.search_in_title (title keyword search)
- And / Or  -> set intersection / union
- Not       -> universe minus the child result; negation is closed-world
               over the ids known at evaluation time
- FieldQuery-> linear scan through FieldMatcher, not the inverted index
"""

from __future__ import annotations

from collections.abc import Iterable, Set

from library_catalog.models.book import Book
from library_catalog.search.catalog_index import CatalogIndex
from library_catalog.search.field_matcher import FieldMatcher
from library_catalog.search.query_ast import And, FieldQuery, Not, Or, QueryNode, Term


class QueryEvaluator:
    """Evaluates parsed queries against a catalog snapshot.

    Attributes:
        index: Catalog index used for Term nodes.
        books: Books scanned for FieldQuery nodes.
        universe: Ids that Not nodes complement against.
    """

    def __init__(
        self,
        index: CatalogIndex,
        books: Iterable[Book],
        universe: Set[int] | None = None,
        *,
        matcher: FieldMatcher | None = None,
    ) -> None:
        self.index = index
        self.books = list(books)
        self.universe = frozenset(universe if universe is not None else (b.id for b in self.books))
        self._matcher = matcher if matcher is not None else FieldMatcher()

    def evaluate(self, node: QueryNode | None) -> set[int]:
        """Evaluate a node; ``None`` (no tree) evaluates to the empty set."""
        if node is None:
            return set()
        if isinstance(node, Term):
            return self.index.search_in_title(node.text)
        if isinstance(node, And):
            return self.evaluate(node.left) & self.evaluate(node.right)
        if isinstance(node, Or):
            return self.evaluate(node.left) | self.evaluate(node.right)
        if isinstance(node, Not):
            return set(self.universe - self.evaluate(node.child))
        if isinstance(node, FieldQuery):
            return self._evaluate_field_query(node)
        raise TypeError(f"Unsupported query node: {type(node).__name__}")

    def _evaluate_field_query(self, node: FieldQuery) -> set[int]:
        return {book.id for book in self.books if self._matcher.matches(book, node)}


def evaluate(
    node: QueryNode | None,
    index: CatalogIndex,
    books: Iterable[Book],
    universe: Set[int] | None = None,
) -> set[int]:
    """Functional wrapper around QueryEvaluator.evaluate()."""
    return QueryEvaluator(index, books, universe).evaluate(node)
