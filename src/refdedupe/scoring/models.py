"""Data models for pairwise scoring.

This module defines the per-dimension scorer result and the pair-level
duplicate verdict produced by the classifier.
"""

from dataclasses import asdict, dataclass
from typing import Any

# Score returned when a field is missing on either side of a pair
NEUTRAL_SCORE = 0.5


@dataclass(frozen=True, slots=True)
class ScorerResult:
    """Similarity of two records along one dimension.

    Attributes
    ----------
    dimension : str
        Dimension name (e.g., 'title', 'doi').
    score : float
        Similarity in [0.0, 1.0].
    reason : str | None
        Short explanation of the score (e.g., 'title Levenshtein ratio 0.92').
    missing : bool
        True when the field was absent on either record and ``score`` is
        the neutral value.
    """

    dimension: str
    score: float
    reason: str | None = None
    missing: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True, slots=True)
class DuplicateVerdict:
    """Duplicate/not-duplicate decision for one candidate pair.

    Attributes
    ----------
    is_duplicate : bool
        Whether the pair is classified as a duplicate.
    reason : str
        Human-readable explanation (e.g., 'DOI match').
    contributing_scores : tuple[ScorerResult, ...]
        Scorer results for the pair, in scorer registry order.
    weighted_score : float | None
        Weighted sum of the scores, or None when the verdict did not
        come from the weighted sum (DOI short-circuit, scorer error).
    """

    is_duplicate: bool
    reason: str
    contributing_scores: tuple[ScorerResult, ...] = ()
    weighted_score: float | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "is_duplicate": self.is_duplicate,
            "reason": self.reason,
            "weighted_score": self.weighted_score,
            "contributing_scores": [s.to_dict() for s in self.contributing_scores],
        }
