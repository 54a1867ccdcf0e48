"""Collaborative, content-based and hybrid book recommendation."""
from library_catalog.recommendation.engine import (
    RecommendationEngine,
    RecommendationSnapshot,
    diversity_perturbation,
    hybrid_weights,
    rank_scores,
)
from library_catalog.recommendation.loan_matrix import (
    LoanMatrix,
    build_cooccurrence,
    build_loan_matrix,
    build_user_books,
)
from library_catalog.recommendation.tfidf_space import (
    TfidfSpace,
    build_tfidf_space,
    compute_cosine_similarity,
    compute_idf,
)

__all__ = [
    "LoanMatrix",
    "RecommendationEngine",
    "RecommendationSnapshot",
    "TfidfSpace",
    "build_cooccurrence",
    "build_loan_matrix",
    "build_tfidf_space",
    "build_user_books",
    "compute_cosine_similarity",
    "compute_idf",
    "diversity_perturbation",
    "hybrid_weights",
    "rank_scores",
]
