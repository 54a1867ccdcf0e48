"""
Recommendation Engine - collaborative, content-based and hybrid rankers.

Architecture: build-then-query
- initialize() derives a RecommendationSnapshot (LoanMatrix + TfidfSpace)
  from the catalog and loan history and swaps it in as a whole
- rankers only read the current snapshot, so a stale snapshot is never
  inconsistent, only out of date
- there is no incremental update; callers rebuild after catalog changes and
  successful borrows

All rankers return ``[(book_id, score), ...]`` sorted by descending score.
Scores within 1e-9 of each other are ties and are ordered by ascending id.
"""

from __future__ import annotations

import math
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Final

from sklearn.metrics.pairwise import cosine_similarity

from library_catalog.core.logging import get_logger
from library_catalog.models.protocols import BookSourceProtocol, LoanSourceProtocol
from library_catalog.recommendation.loan_matrix import LoanMatrix, build_loan_matrix
from library_catalog.recommendation.tfidf_space import (
    TfidfSpace,
    build_tfidf_space,
    compute_cosine_similarity,
)

logger = get_logger(__name__)

# =============================================================================
# Module Constants
# =============================================================================

SCORE_TIE_TOLERANCE: Final[float] = 1e-9

# Hybrid candidate pools
HYBRID_CF_POOL_FACTOR: Final[int] = 3
HYBRID_CONTENT_POOL_FACTOR: Final[int] = 2
HYBRID_MAX_REFERENCE_BOOKS: Final[int] = 3

# Hybrid blend weights (cf, content)
DEFAULT_WEIGHTS: Final[tuple[float, float]] = (0.6, 0.4)
SPARSE_CF_WEIGHTS: Final[tuple[float, float]] = (0.3, 0.7)
SPARSE_CONTENT_WEIGHTS: Final[tuple[float, float]] = (0.8, 0.2)

# Amplitude of the per-id sin() perturbation applied to hybrid scores
HYBRID_PERTURBATION: Final[float] = 0.1

ScoredBook = tuple[int, float]


# =============================================================================
# Ranking helpers
# =============================================================================


def _compare_scored(a: ScoredBook, b: ScoredBook) -> int:
    if abs(a[1] - b[1]) < SCORE_TIE_TOLERANCE:
        return (a[0] > b[0]) - (a[0] < b[0])
    return -1 if a[1] > b[1] else 1


def rank_scores(scores: Mapping[int, float] | Iterable[ScoredBook], count: int) -> list[ScoredBook]:
    """Sort by descending score, ties by ascending id, keep the first ``count``."""
    if count <= 0:
        return []
    items = list(scores.items()) if isinstance(scores, Mapping) else list(scores)
    items.sort(key=cmp_to_key(_compare_scored))
    return items[:count]


def diversity_perturbation(book_id: int) -> float:
    """Multiplier ``1 + 0.1 * sin(book_id)`` applied to hybrid scores.

    Deterministic but not principled: it jitters scores by id. Kept as-is
    for compatibility with existing rankings.
    """
    return 1.0 + HYBRID_PERTURBATION * math.sin(book_id)


def _normalize_by_max(scores: Mapping[int, float]) -> dict[int, float]:
    """Divide by the maximum score; empty when the maximum is not positive."""
    if not scores:
        return {}
    peak = max(scores.values())
    if peak <= 0:
        return {}
    return {book_id: score / peak for book_id, score in scores.items()}


def hybrid_weights(cf_candidates: int, content_candidates: int, count: int) -> tuple[float, float]:
    """Pick (cf_weight, content_weight) from candidate availability."""
    cf_weight = DEFAULT_WEIGHTS[0] if cf_candidates else 0.0
    content_weight = DEFAULT_WEIGHTS[1] if content_candidates else 0.0
    threshold = count // 2
    if cf_candidates < threshold:
        cf_weight, content_weight = SPARSE_CF_WEIGHTS
    elif content_candidates < threshold:
        cf_weight, content_weight = SPARSE_CONTENT_WEIGHTS
    return cf_weight, content_weight


# =============================================================================
# Snapshot
# =============================================================================


@dataclass(frozen=True)
class RecommendationSnapshot:
    """Everything the rankers read, derived in one rebuild."""

    loans: LoanMatrix = field(default_factory=LoanMatrix)
    tfidf: TfidfSpace = field(default_factory=TfidfSpace)

    @classmethod
    def build(
        cls,
        books: Iterable[BookSourceProtocol],
        loans: Iterable[LoanSourceProtocol],
    ) -> RecommendationSnapshot:
        return cls(loans=build_loan_matrix(loans), tfidf=build_tfidf_space(books))


# =============================================================================
# RecommendationEngine
# =============================================================================


class RecommendationEngine:
    """Hybrid book recommender over an immutable snapshot.

    Example:
        >>> engine = RecommendationEngine()
        >>> engine.initialize(catalog.books(), history.loans())
        >>> engine.get_hybrid_recommendations("alice", 5)
        [(12, 0.93), (4, 0.71), ...]
    """

    def __init__(self) -> None:
        self._snapshot = RecommendationSnapshot()

    @property
    def snapshot(self) -> RecommendationSnapshot:
        return self._snapshot

    def initialize(
        self,
        books: Iterable[BookSourceProtocol],
        loans: Iterable[LoanSourceProtocol],
    ) -> None:
        """Rebuild all derived state and swap it in."""
        snapshot = RecommendationSnapshot.build(books, loans)
        self._snapshot = snapshot
        logger.info(
            "recommendations_rebuilt",
            books=len(snapshot.tfidf),
            users=snapshot.loans.total_users,
            vocabulary_size=len(snapshot.tfidf.vocabulary),
        )

    # -------------------------------------------------------------------------
    # Collaborative filtering
    # -------------------------------------------------------------------------

    def get_collaborative_filtering_recommendations(
        self, username: str, count: int
    ) -> list[ScoredBook]:
        """Item co-occurrence recommendations for a user.

        For each borrowed book B and each co-borrowed book C the user has not
        borrowed, C accumulates ``cooc(B, C) / pop(B) * ln(users / pop(C))``.
        The totals are scaled by ``ln(|borrowed| + 1)``. Only books still in
        the catalog are candidates; loans of deleted books keep shaping the
        scores of the others.

        Args:
            username: Borrower to recommend for.
            count: Maximum number of results.

        Returns:
            Ranked (book_id, score) pairs; empty for unknown users.
        """
        matrix = self._snapshot.loans
        catalog = self._snapshot.tfidf
        user_books = matrix.books_for(username)
        if not user_books or count <= 0:
            return []

        borrowed = set(user_books)
        total_users = matrix.total_users
        scores: defaultdict[int, float] = defaultdict(float)

        for book_id in user_books:
            cooccurring = matrix.cooccurring(book_id)
            if not cooccurring:
                continue
            popularity = max(matrix.popularity_of(book_id), 1)
            for other_id, together in cooccurring.items():
                if other_id in borrowed or other_id not in catalog:
                    continue
                confidence = together / popularity
                rarity_bonus = math.log(total_users / max(matrix.popularity_of(other_id), 1))
                scores[other_id] += confidence * rarity_bonus

        diversity_factor = math.log(len(user_books) + 1)
        return rank_scores({b: s * diversity_factor for b, s in scores.items()}, count)

    # -------------------------------------------------------------------------
    # Content-based
    # -------------------------------------------------------------------------

    def get_content_based_recommendations(self, book_id: int, count: int) -> list[ScoredBook]:
        """Books most similar to ``book_id`` by TF-IDF cosine similarity.

        Returns:
            Ranked (book_id, similarity) pairs excluding the reference book;
            empty for unknown ids.
        """
        space = self._snapshot.tfidf
        row = space.row_of(book_id)
        if row is None or count <= 0:
            return []

        if space.matrix.shape[1] == 0:
            similarities = [0.0] * len(space.book_ids)
        else:
            similarities = cosine_similarity(space.matrix[row : row + 1], space.matrix)[0].tolist()

        candidates = [
            (other_id, float(similarity))
            for other_id, similarity in zip(space.book_ids, similarities)
            if other_id != book_id
        ]
        return rank_scores(candidates, count)

    def similarity(self, first_id: int, second_id: int) -> float:
        """Pairwise cosine similarity; 0.0 if either book is unknown."""
        space = self._snapshot.tfidf
        first = space.vector(first_id)
        second = space.vector(second_id)
        if first is None or second is None:
            return 0.0
        return compute_cosine_similarity(first, second)

    # -------------------------------------------------------------------------
    # Hybrid
    # -------------------------------------------------------------------------

    def get_hybrid_recommendations(self, username: str, count: int) -> list[ScoredBook]:
        """Blend collaborative and content-based scores for a user.

        Falls back to content-based recommendations seeded from the user's
        first borrowed book when collaborative filtering has no candidates.
        """
        if count <= 0:
            return []

        user_books = self._snapshot.loans.books_for(username)
        cf_recs = self.get_collaborative_filtering_recommendations(
            username, count * HYBRID_CF_POOL_FACTOR
        )
        if not cf_recs:
            if not user_books:
                return []
            logger.debug("hybrid_content_fallback", username=username, seed=user_books[0])
            return self.get_content_based_recommendations(user_books[0], count)

        content_scores: defaultdict[int, float] = defaultdict(float)
        for ref_index, ref_book_id in enumerate(user_books[:HYBRID_MAX_REFERENCE_BOOKS]):
            weight = 1.0 / (ref_index + 1)
            for other_id, similarity in self.get_content_based_recommendations(
                ref_book_id, count * HYBRID_CONTENT_POOL_FACTOR
            ):
                content_scores[other_id] += similarity * weight

        cf_weight, content_weight = hybrid_weights(len(cf_recs), len(content_scores), count)

        final_scores: defaultdict[int, float] = defaultdict(float)
        for other_id, normalized in _normalize_by_max(dict(cf_recs)).items():
            final_scores[other_id] += cf_weight * normalized
        for other_id, normalized in _normalize_by_max(content_scores).items():
            final_scores[other_id] += content_weight * normalized

        perturbed = {
            other_id: score * diversity_perturbation(other_id)
            for other_id, score in final_scores.items()
        }
        return rank_scores(perturbed, count)
