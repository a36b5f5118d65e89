"""Pairwise scoring: field scorers and the duplicate classifier.

This module implements the scoring layer that compares two reference
records along several dimensions and renders an explainable verdict.
"""

from refdedupe.scoring.classifier import (
    DEFAULT_THRESHOLD,
    DEFAULT_WEIGHTS,
    DOI_MATCH_REASON,
    SCORER_ERROR_REASON,
    PairwiseClassifier,
)
from refdedupe.scoring.comparators import (
    DIMENSIONS,
    FieldScorer,
    build_scorers,
    dice_similarity,
    score_abstract,
    score_authors,
    score_doi,
    score_title,
    score_year,
    text_similarity,
)
from refdedupe.scoring.models import NEUTRAL_SCORE, DuplicateVerdict, ScorerResult

__all__ = [
    # Models
    "ScorerResult",
    "DuplicateVerdict",
    "NEUTRAL_SCORE",
    # Scorers
    "FieldScorer",
    "DIMENSIONS",
    "build_scorers",
    "score_title",
    "score_authors",
    "score_year",
    "score_doi",
    "score_abstract",
    "text_similarity",
    "dice_similarity",
    # Classifier
    "PairwiseClassifier",
    "DEFAULT_WEIGHTS",
    "DEFAULT_THRESHOLD",
    "DOI_MATCH_REASON",
    "SCORER_ERROR_REASON",
]
