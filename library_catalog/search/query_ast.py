"""
Query AST - immutable expression tree for boolean / field queries.

Nodes are frozen dataclasses. A parse produces a tree (never a DAG) that is
discarded after evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class FieldOperator(str, Enum):
    """Relational / containment operators of a field predicate."""

    EQUALS = "="
    CONTAINS = "~"
    GREATER = ">"
    LESS = "<"
    GREATER_EQ = ">="
    LESS_EQ = "<="

    @property
    def symbol(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class Term:
    """Bare keyword; evaluated as a title search."""

    text: str


@dataclass(frozen=True, slots=True)
class And:
    left: QueryNode
    right: QueryNode


@dataclass(frozen=True, slots=True)
class Or:
    left: QueryNode
    right: QueryNode


@dataclass(frozen=True, slots=True)
class Not:
    child: QueryNode


@dataclass(frozen=True, slots=True)
class FieldQuery:
    """``field <op> value`` predicate, evaluated per book."""

    field: str
    operator: FieldOperator
    value: str


QueryNode = Union[Term, And, Or, Not, FieldQuery]


def format_tree(node: QueryNode, indent: int = 0) -> str:
    """Render a tree as indented lines, two spaces per level.

    Example:
        >>> print(format_tree(And(Term("ai"), FieldQuery("year", FieldOperator.GREATER_EQ, "2020"))))
        AND
          TERM: ai
          FIELD QUERY: year >= "2020"
    """
    pad = "  " * indent
    if isinstance(node, Term):
        return f"{pad}TERM: {node.text}"
    if isinstance(node, FieldQuery):
        return f'{pad}FIELD QUERY: {node.field} {node.operator.symbol} "{node.value}"'
    if isinstance(node, Not):
        return f"{pad}NOT\n{format_tree(node.child, indent + 1)}"
    label = "AND" if isinstance(node, And) else "OR"
    return (
        f"{pad}{label}\n"
        f"{format_tree(node.left, indent + 1)}\n"
        f"{format_tree(node.right, indent + 1)}"
    )
