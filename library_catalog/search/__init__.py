"""Boolean / field query engine over the book catalog."""
from library_catalog.search.catalog_index import CatalogIndex
from library_catalog.search.field_matcher import (
    CANONICAL_FIELDS,
    DEFAULT_FIELD_ALIASES,
    FieldAliasLookup,
    FieldKind,
    FieldMatcher,
    FieldSpec,
    match_number,
    match_string,
)
from library_catalog.search.query_ast import (
    And,
    FieldOperator,
    FieldQuery,
    Not,
    Or,
    QueryNode,
    Term,
    format_tree,
)
from library_catalog.search.query_evaluator import QueryEvaluator, evaluate
from library_catalog.search.query_parser import QueryParser, parse_query

__all__ = [
    "CANONICAL_FIELDS",
    "DEFAULT_FIELD_ALIASES",
    "And",
    "CatalogIndex",
    "FieldAliasLookup",
    "FieldKind",
    "FieldMatcher",
    "FieldOperator",
    "FieldQuery",
    "FieldSpec",
    "Not",
    "Or",
    "QueryEvaluator",
    "QueryNode",
    "QueryParser",
    "Term",
    "evaluate",
    "format_tree",
    "match_number",
    "match_string",
    "parse_query",
]
