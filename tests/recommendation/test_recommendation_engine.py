"""Tests for RecommendationEngine rankers.

Catalog used throughout:

    1 "alpha beta"   2 "alpha gamma"   3 "delta"   4 "epsilon"

Only books 1 and 2 share a term with positive idf, so every other pair has
similarity 0.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Final

import pytest

from library_catalog.models.book import Book
from library_catalog.models.loan import LoanRecord
from library_catalog.recommendation.engine import (
    RecommendationEngine,
    diversity_perturbation,
    hybrid_weights,
    rank_scores,
)

START = datetime(2024, 1, 1, tzinfo=timezone.utc)

# cos(book1, book2) for the catalog above
ALPHA_WEIGHT: Final[float] = 0.5 * math.log(4 / 3)
BETA_WEIGHT: Final[float] = 0.5 * math.log(2)
SIMILARITY_1_2: Final[float] = ALPHA_WEIGHT**2 / (ALPHA_WEIGHT**2 + BETA_WEIGHT**2)


def _loan(username: str, book_id: int, day: int) -> LoanRecord:
    borrowed_at = START + timedelta(days=day)
    return LoanRecord(username, book_id, borrowed_at, borrowed_at + timedelta(days=14))


@pytest.fixture
def books() -> list[Book]:
    return [
        Book(id=1, title="alpha beta"),
        Book(id=2, title="alpha gamma"),
        Book(id=3, title="delta"),
        Book(id=4, title="epsilon"),
    ]


@pytest.fixture
def engine(books: list[Book]) -> RecommendationEngine:
    loans = [
        _loan("user1", 1, 0),
        _loan("user1", 3, 1),
        _loan("user2", 1, 2),
        _loan("user3", 4, 3),
    ]
    eng = RecommendationEngine()
    eng.initialize(books, loans)
    return eng


# =============================================================================
# Ranking helpers
# =============================================================================


class TestRankScores:
    def test_descending_score(self) -> None:
        assert rank_scores({1: 0.1, 2: 0.9, 3: 0.5}, 3) == [(2, 0.9), (3, 0.5), (1, 0.1)]

    def test_ties_within_tolerance_break_by_ascending_id(self) -> None:
        ranked = rank_scores([(5, 0.5), (2, 0.5 + 1e-12), (9, 0.7)], 3)

        assert [book_id for book_id, _ in ranked] == [9, 2, 5]

    def test_truncates(self) -> None:
        assert len(rank_scores({1: 1.0, 2: 2.0, 3: 3.0}, 2)) == 2

    def test_non_positive_count(self) -> None:
        assert rank_scores({1: 1.0}, 0) == []


class TestHybridWeights:
    @pytest.mark.parametrize(
        ("cf", "content", "count", "expected"),
        [
            (5, 5, 4, (0.6, 0.4)),
            (1, 5, 4, (0.3, 0.7)),
            (5, 1, 4, (0.8, 0.2)),
            (1, 1, 4, (0.3, 0.7)),
            (5, 0, 1, (0.6, 0.0)),
        ],
    )
    def test_weight_selection(
        self, cf: int, content: int, count: int, expected: tuple[float, float]
    ) -> None:
        assert hybrid_weights(cf, content, count) == expected


# =============================================================================
# Collaborative filtering
# =============================================================================


class TestCollaborativeFiltering:
    def test_co_borrowed_book_is_recommended(self) -> None:
        """Two users borrowed books 1 and 2; a third borrowed only book 1."""
        engine = RecommendationEngine()
        engine.initialize(
            [Book(id=1, title="one"), Book(id=2, title="two")],
            [
                _loan("user1", 1, 0),
                _loan("user1", 2, 1),
                _loan("user2", 1, 2),
                _loan("user2", 2, 3),
                _loan("user3", 1, 4),
            ],
        )

        recs = engine.get_collaborative_filtering_recommendations("user3", 5)

        expected = (2 / 3) * math.log(3 / 2) * math.log(2)
        assert recs == [(2, pytest.approx(expected))]
        assert recs[0][1] > 0

    def test_skips_books_missing_from_catalog(self) -> None:
        loans = [
            _loan("user1", 1, 0),
            _loan("user1", 2, 1),
            _loan("user2", 1, 2),
            _loan("user2", 2, 3),
            _loan("user3", 1, 4),
        ]
        engine = RecommendationEngine()

        engine.initialize([Book(id=1, title="one")], loans)
        assert engine.get_collaborative_filtering_recommendations("user3", 5) == []

        engine.initialize([], loans)
        assert engine.get_collaborative_filtering_recommendations("user3", 5) == []
        assert engine.get_hybrid_recommendations("user3", 5) == []

    def test_score_formula(self, engine: RecommendationEngine) -> None:
        recs = engine.get_collaborative_filtering_recommendations("user2", 5)

        assert recs == [(3, pytest.approx(0.5 * math.log(3) * math.log(2)))]

    def test_never_recommends_borrowed_books(self, engine: RecommendationEngine) -> None:
        recs = engine.get_collaborative_filtering_recommendations("user1", 5)

        assert not {book_id for book_id, _ in recs} & {1, 3}

    def test_unknown_user(self, engine: RecommendationEngine) -> None:
        assert engine.get_collaborative_filtering_recommendations("nobody", 5) == []

    def test_no_cooccurrence(self, engine: RecommendationEngine) -> None:
        assert engine.get_collaborative_filtering_recommendations("user3", 5) == []

    def test_zero_count(self, engine: RecommendationEngine) -> None:
        assert engine.get_collaborative_filtering_recommendations("user2", 0) == []


# =============================================================================
# Content-based
# =============================================================================


class TestContentBased:
    def test_most_similar_first(self, engine: RecommendationEngine) -> None:
        recs = engine.get_content_based_recommendations(1, 3)

        assert recs[0] == (2, pytest.approx(SIMILARITY_1_2))

    def test_excludes_reference_book(self, engine: RecommendationEngine) -> None:
        recs = engine.get_content_based_recommendations(1, 10)

        assert 1 not in {book_id for book_id, _ in recs}
        assert len(recs) == 3

    def test_zero_similarity_ties_break_by_id(self, engine: RecommendationEngine) -> None:
        recs = engine.get_content_based_recommendations(3, 3)

        assert [book_id for book_id, _ in recs] == [1, 2, 4]
        assert all(score == pytest.approx(0.0) for _, score in recs)

    def test_unknown_book(self, engine: RecommendationEngine) -> None:
        assert engine.get_content_based_recommendations(99, 3) == []

    def test_single_book_catalog(self) -> None:
        engine = RecommendationEngine()
        engine.initialize([Book(id=1, title="alone")], [])

        assert engine.get_content_based_recommendations(1, 3) == []


class TestSimilarity:
    def test_symmetric(self, engine: RecommendationEngine) -> None:
        assert engine.similarity(1, 2) == pytest.approx(engine.similarity(2, 1))
        assert engine.similarity(1, 2) == pytest.approx(SIMILARITY_1_2)

    def test_self_similarity(self, engine: RecommendationEngine) -> None:
        assert engine.similarity(1, 1) == pytest.approx(1.0)

    def test_unknown_book(self, engine: RecommendationEngine) -> None:
        assert engine.similarity(1, 99) == 0.0


# =============================================================================
# Hybrid
# =============================================================================


class TestHybrid:
    def test_blends_normalized_scores(self, engine: RecommendationEngine) -> None:
        recs = engine.get_hybrid_recommendations("user2", 2)

        assert recs == [
            (3, pytest.approx(0.6 * diversity_perturbation(3))),
            (2, pytest.approx(0.4 * diversity_perturbation(2))),
        ]

    def test_length_and_uniqueness(self, engine: RecommendationEngine) -> None:
        for count in range(1, 6):
            recs = engine.get_hybrid_recommendations("user1", count)
            ids = [book_id for book_id, _ in recs]

            assert len(recs) <= count
            assert len(ids) == len(set(ids))

    def test_falls_back_to_content_from_first_borrow(self, engine: RecommendationEngine) -> None:
        assert engine.get_hybrid_recommendations("user3", 3) == (
            engine.get_content_based_recommendations(4, 3)
        )

    def test_unknown_user(self, engine: RecommendationEngine) -> None:
        assert engine.get_hybrid_recommendations("nobody", 3) == []

    def test_zero_count(self, engine: RecommendationEngine) -> None:
        assert engine.get_hybrid_recommendations("user2", 0) == []


class TestDiversityPerturbationQuirk:
    """Known quirk: hybrid scores are scaled by 1 + 0.1 * sin(book_id).

    The factor depends only on the id, so two books with equal blended
    scores are ordered by sin(id) rather than by id.
    """

    def test_factor(self) -> None:
        assert diversity_perturbation(0) == 1.0
        assert diversity_perturbation(2) == pytest.approx(1 + 0.1 * math.sin(2))

    def test_bounded(self) -> None:
        for book_id in range(1, 200):
            assert 0.9 <= diversity_perturbation(book_id) <= 1.1

    def test_not_monotonic_in_id(self) -> None:
        assert diversity_perturbation(2) > diversity_perturbation(4)
        assert diversity_perturbation(4) < diversity_perturbation(7)


# =============================================================================
# Rebuild
# =============================================================================


class TestInitialize:
    def test_empty_catalog(self) -> None:
        engine = RecommendationEngine()
        engine.initialize([], [])

        assert engine.get_collaborative_filtering_recommendations("user1", 5) == []
        assert engine.get_content_based_recommendations(1, 5) == []
        assert engine.get_hybrid_recommendations("user1", 5) == []

    def test_uninitialized_engine_is_empty(self) -> None:
        assert RecommendationEngine().get_hybrid_recommendations("user1", 5) == []

    def test_rebuild_replaces_snapshot(self, engine: RecommendationEngine, books: list[Book]) -> None:
        before = engine.snapshot

        engine.initialize(books, [])

        assert engine.snapshot is not before
        assert engine.get_collaborative_filtering_recommendations("user2", 5) == []
