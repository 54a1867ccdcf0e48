"""
TF-IDF Space - content vectors for content-based recommendation.

Vocabulary and document frequencies come from extract_book_terms() over each
book's title, author, synopsis and categories. Weights follow:

    idf[t]      = ln(N / (1 + df[t]))
    tf[t, b]    = 1 / |tokenize(text_b)|     for every t in tokenize(text_b)
    vector[b,t] = tf[t, b] * idf[t]

tokenize() deduplicates, so every present term of a book carries the same
term frequency. idf goes to zero or below for terms in nearly every book;
that is intended, such terms stop contributing or count against similarity.
The vocabulary is sorted so vector layouts are reproducible across rebuilds.
"""

from __future__ import annotations

import math
from collections import Counter
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from library_catalog.models.protocols import BookSourceProtocol
from library_catalog.nlp.tokenizer import extract_book_terms, tokenize

if TYPE_CHECKING:
    from numpy.typing import NDArray


@dataclass(frozen=True, eq=False)
class TfidfSpace:
    """Immutable TF-IDF vector space over a catalog snapshot.

    Attributes:
        vocabulary: Sorted distinct terms.
        word_to_index: Term -> column in every vector.
        idf: Term -> inverse document frequency.
        book_ids: Row order of ``matrix``.
        matrix: One TF-IDF row per book, shape (len(book_ids), len(vocabulary)).
    """

    vocabulary: tuple[str, ...] = ()
    word_to_index: Mapping[str, int] = field(default_factory=dict)
    idf: Mapping[str, float] = field(default_factory=dict)
    book_ids: tuple[int, ...] = ()
    matrix: NDArray[np.float64] = field(default_factory=lambda: np.zeros((0, 0)))
    _rows: Mapping[int, int] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_rows", {book_id: i for i, book_id in enumerate(self.book_ids)})

    def __contains__(self, book_id: object) -> bool:
        return book_id in self._rows

    def __len__(self) -> int:
        return len(self.book_ids)

    def row_of(self, book_id: int) -> int | None:
        return self._rows.get(book_id)

    def vector(self, book_id: int) -> NDArray[np.float64] | None:
        """The book's TF-IDF vector, or None for unknown ids."""
        row = self.row_of(book_id)
        if row is None:
            return None
        return self.matrix[row]


def book_text(book: BookSourceProtocol) -> str:
    """Concatenate the text a book's TF-IDF vector is computed from."""
    parts = [book.title, book.author, book.synopsis, *book.categories]
    return " ".join(parts)


def _book_terms(book: BookSourceProtocol) -> set[str]:
    return extract_book_terms(book.title, book.author, book.synopsis, book.categories)


def compute_idf(document_frequency: Mapping[str, int], total_documents: int) -> dict[str, float]:
    """ln(N / (1 + df)) per term."""
    return {
        term: math.log(total_documents / (1 + df))
        for term, df in document_frequency.items()
    }


def compute_cosine_similarity(v1: NDArray[np.float64], v2: NDArray[np.float64]) -> float:
    """Cosine of the angle between two vectors; 0.0 when either norm is zero."""
    norm1 = float(np.linalg.norm(v1))
    norm2 = float(np.linalg.norm(v2))
    if norm1 == 0.0 or norm2 == 0.0:
        return 0.0
    return float(np.dot(v1, v2) / (norm1 * norm2))


def build_tfidf_space(books: Iterable[BookSourceProtocol]) -> TfidfSpace:
    """Build vocabulary, idf and per-book vectors for a catalog snapshot."""
    catalog = list(books)
    terms_per_book = [_book_terms(book) for book in catalog]

    document_frequency: Counter[str] = Counter()
    for terms in terms_per_book:
        document_frequency.update(terms)

    vocabulary = tuple(sorted(document_frequency))
    word_to_index = {term: i for i, term in enumerate(vocabulary)}
    idf = compute_idf(document_frequency, len(catalog))

    matrix = np.zeros((len(catalog), len(vocabulary)), dtype=np.float64)
    for row, book in enumerate(catalog):
        tokens = tokenize(book_text(book))
        if not tokens:
            continue
        tf = 1.0 / len(tokens)
        for token in tokens:
            column = word_to_index.get(token)
            if column is not None:
                matrix[row, column] = tf * idf[token]

    return TfidfSpace(
        vocabulary=vocabulary,
        word_to_index=word_to_index,
        idf=idf,
        book_ids=tuple(book.id for book in catalog),
        matrix=matrix,
    )
