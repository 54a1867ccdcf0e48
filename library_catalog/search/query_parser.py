"""
Query Parser - recursive descent over the catalog query language.

Grammar (keywords are case-insensitive and must be followed by whitespace or
end of input):

    Expression := Term (OR Term)*
    Term       := Factor (AND Factor)*
    Factor     := [NOT] Atom
    Atom       := '(' Expression ')' | FieldQuery | TERM
    FieldQuery := Identifier FieldOp Value
    Identifier := quoted-string | bare word (alnum, '_', '-', '.', non-ASCII)
    FieldOp    := '>=' | '<=' | '=' | '~' | '>' | '<'
    Value      := quoted-string | bare word (stops at whitespace, '(', ')', '&', '|')

AND binds tighter than OR; both are left-associative. NOT applies to the
single atom that follows it.

An atom is parsed by reading an identifier and peeking for a field operator.
Without one the cursor is restored and the same span is read again as a bare
TERM, so ``title`` on its own is a keyword, not a malformed predicate.

Input after a complete expression is ignored: ``harry potter`` searches for
``harry``.
"""

from __future__ import annotations

from typing import Final

from library_catalog.core.exceptions import QueryParseError
from library_catalog.search.query_ast import (
    And,
    FieldOperator,
    FieldQuery,
    Not,
    Or,
    QueryNode,
    Term,
)

# =============================================================================
# Module Constants
# =============================================================================

KEYWORD_AND: Final[str] = "AND"
KEYWORD_OR: Final[str] = "OR"
KEYWORD_NOT: Final[str] = "NOT"

_WHITESPACE: Final[frozenset[str]] = frozenset(" \t\n\r\v\f")
_QUOTE: Final[str] = '"'
_OPERATOR_START: Final[frozenset[str]] = frozenset("=~><")
_IDENTIFIER_PUNCTUATION: Final[frozenset[str]] = frozenset("_-.")
_VALUE_TERMINATORS: Final[frozenset[str]] = frozenset("()&|")

_SINGLE_CHAR_OPERATORS: Final[dict[str, FieldOperator]] = {
    "=": FieldOperator.EQUALS,
    "~": FieldOperator.CONTAINS,
    ">": FieldOperator.GREATER,
    "<": FieldOperator.LESS,
}
_TWO_CHAR_OPERATORS: Final[dict[str, FieldOperator]] = {
    ">=": FieldOperator.GREATER_EQ,
    "<=": FieldOperator.LESS_EQ,
}


def _is_identifier_char(char: str) -> bool:
    if not char.isascii():
        return True
    return char.isalnum() or char in _IDENTIFIER_PUNCTUATION


class QueryParser:
    """Parses query strings into QueryNode trees.

    A parser instance is reusable; each parse() call resets the cursor.

    Example:
        >>> QueryParser().parse('"AI" AND author="Alice"')
        And(left=Term(text='AI'), right=FieldQuery(field='author', operator=<FieldOperator.EQUALS: '='>, value='Alice'))
    """

    def __init__(self) -> None:
        self._query: str = ""
        self._pos: int = 0

    def parse(self, query: str) -> QueryNode:
        """Parse a query string.

        Args:
            query: Query in the catalog query language.

        Returns:
            Root node of the expression tree.

        Raises:
            QueryParseError: On an unterminated quote, a missing ')',
                a missing identifier or an empty field value.
        """
        self._query = query
        self._pos = 0
        return self._parse_expression()

    # -------------------------------------------------------------------------
    # Grammar rules
    # -------------------------------------------------------------------------

    def _parse_expression(self) -> QueryNode:
        left = self._parse_term()
        self._skip_whitespace()
        while not self._at_end() and self._match(KEYWORD_OR):
            left = Or(left, self._parse_term())
            self._skip_whitespace()
        return left

    def _parse_term(self) -> QueryNode:
        left = self._parse_factor()
        self._skip_whitespace()
        while not self._at_end() and self._match(KEYWORD_AND):
            left = And(left, self._parse_factor())
            self._skip_whitespace()
        return left

    def _parse_factor(self) -> QueryNode:
        self._skip_whitespace()
        if self._match(KEYWORD_NOT):
            return Not(self._parse_atom())
        return self._parse_atom()

    def _parse_atom(self) -> QueryNode:
        self._skip_whitespace()

        if self._peek() == "(":
            self._pos += 1
            node = self._parse_expression()
            self._skip_whitespace()
            if self._peek() != ")":
                raise QueryParseError("Missing closing parenthesis", self._pos)
            self._pos += 1
            return node

        saved = self._pos
        field = self._parse_identifier()
        if field and not self._at_end():
            self._skip_whitespace()
            if self._peek() in _OPERATOR_START:
                return self._parse_field_query(field)

        # Not a field predicate: reread the same span as a keyword
        self._pos = saved
        term = self._parse_identifier()
        if not term:
            raise QueryParseError("Expected identifier", self._pos)
        return Term(term)

    def _parse_field_query(self, field: str) -> FieldQuery:
        operator = self._parse_field_operator()
        value = self._parse_field_value()
        if not value:
            raise QueryParseError("Expected field value", self._pos)
        return FieldQuery(field, operator, value)

    # -------------------------------------------------------------------------
    # Lexical helpers
    # -------------------------------------------------------------------------

    def _parse_field_operator(self) -> FieldOperator:
        self._skip_whitespace()
        pair = self._query[self._pos : self._pos + 2]
        if pair in _TWO_CHAR_OPERATORS:
            self._pos += 2
            return _TWO_CHAR_OPERATORS[pair]

        char = self._peek()
        if char in _SINGLE_CHAR_OPERATORS:
            self._pos += 1
            return _SINGLE_CHAR_OPERATORS[char]
        raise QueryParseError("Expected field operator", self._pos)

    def _parse_field_value(self) -> str:
        self._skip_whitespace()
        if self._at_end():
            return ""
        if self._peek() == _QUOTE:
            return self._parse_quoted()

        start = self._pos
        while not self._at_end():
            char = self._query[self._pos]
            if char in _WHITESPACE or char in _VALUE_TERMINATORS:
                break
            self._pos += 1
        return self._query[start : self._pos]

    def _parse_identifier(self) -> str:
        self._skip_whitespace()
        if self._at_end():
            return ""
        if self._peek() == _QUOTE:
            return self._parse_quoted()

        start = self._pos
        while not self._at_end() and _is_identifier_char(self._query[self._pos]):
            self._pos += 1
        return self._query[start : self._pos]

    def _parse_quoted(self) -> str:
        """Read a double-quoted literal; the cursor sits on the opening quote."""
        start = self._pos + 1
        end = self._query.find(_QUOTE, start)
        if end == -1:
            raise QueryParseError("Unterminated string literal", self._pos)
        self._pos = end + 1
        return self._query[start:end]

    def _match(self, keyword: str) -> bool:
        """Consume ``keyword`` if it appears next as a whole word."""
        self._skip_whitespace()
        end = self._pos + len(keyword)
        if end > len(self._query):
            return False
        candidate = self._query[self._pos : end]
        if candidate.upper() != keyword:
            return False
        if end < len(self._query) and self._query[end] not in _WHITESPACE:
            return False
        self._pos = end
        self._skip_whitespace()
        return True

    def _skip_whitespace(self) -> None:
        while not self._at_end() and self._query[self._pos] in _WHITESPACE:
            self._pos += 1

    def _peek(self) -> str:
        return self._query[self._pos] if not self._at_end() else ""

    def _at_end(self) -> bool:
        return self._pos >= len(self._query)


def parse_query(query: str) -> QueryNode:
    """Parse with a fresh QueryParser."""
    return QueryParser().parse(query)
