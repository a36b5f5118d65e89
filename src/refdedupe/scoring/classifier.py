"""Pairwise classifier combining scorer results into a verdict.

The classifier is the tunable surface of the engine: a weight per
dimension and a duplicate threshold on the weighted sum. A present and
equal DOI overrides the weighted sum.
"""

from collections.abc import Mapping, Sequence

from refdedupe.models import ReferenceRecord
from refdedupe.scoring.models import DuplicateVerdict, ScorerResult

DEFAULT_WEIGHTS: dict[str, float] = {
    "title": 0.4,
    "authors": 0.3,
    "year": 0.1,
    "doi": 0.2,
    "abstract": 0.1,
}
DEFAULT_THRESHOLD = 0.75

DOI_MATCH_REASON = "DOI match"
SCORER_ERROR_REASON = "scorer error"


def _has_text(value: object) -> bool:
    return isinstance(value, str) and bool(value.strip())


class PairwiseClassifier:
    """Weighted-sum duplicate classifier.

    Parameters
    ----------
    weights : Mapping[str, float] | None, optional
        Weight per dimension. Missing dimensions fall back to
        ``DEFAULT_WEIGHTS``; dimensions absent from both weigh 0.
    threshold : float, optional
        Minimum weighted sum for a duplicate, by default 0.75.

    Notes
    -----
    The abstract dimension only counts when both records carry an
    abstract, so its effective weight is 0 otherwise. The sum is not
    normalized: with both abstracts present the default table adds up to
    1.1, and a table whose active weights sum below the threshold can never
    produce a weighted duplicate.
    """

    def __init__(
        self,
        weights: Mapping[str, float] | None = None,
        threshold: float = DEFAULT_THRESHOLD,
    ) -> None:
        self.weights = {**DEFAULT_WEIGHTS, **(weights or {})}
        self.threshold = threshold

    def active_weight(
        self,
        dimension: str,
        record_a: ReferenceRecord,
        record_b: ReferenceRecord,
    ) -> float:
        """Return the weight of *dimension* for this pair."""
        if dimension == "abstract" and not (
            _has_text(record_a.abstract) and _has_text(record_b.abstract)
        ):
            return 0.0
        return self.weights.get(dimension, 0.0)

    def classify(
        self,
        record_a: ReferenceRecord,
        record_b: ReferenceRecord,
        results: Sequence[ScorerResult],
    ) -> DuplicateVerdict:
        """Combine scorer results into a duplicate verdict.

        Parameters
        ----------
        record_a : ReferenceRecord
            Earlier record of the pair.
        record_b : ReferenceRecord
            Later record of the pair.
        results : Sequence[ScorerResult]
            One result per scorer, in registry order.

        Returns
        -------
        DuplicateVerdict
            Verdict with reason and contributing scores.
        """
        scores = tuple(results)

        for result in scores:
            if result.dimension == "doi" and not result.missing and result.score >= 1.0:
                return DuplicateVerdict(
                    is_duplicate=True,
                    reason=DOI_MATCH_REASON,
                    contributing_scores=scores,
                )

        contributions: list[tuple[str, float]] = []
        weighted = 0.0
        for result in scores:
            weight = self.active_weight(result.dimension, record_a, record_b)
            if weight <= 0.0:
                continue
            weighted += weight * result.score
            contributions.append((result.dimension, weight * result.score))

        is_duplicate = weighted >= self.threshold

        return DuplicateVerdict(
            is_duplicate=is_duplicate,
            reason=self._explain(weighted, is_duplicate, contributions),
            contributing_scores=scores,
            weighted_score=weighted,
        )

    def _explain(
        self,
        weighted: float,
        is_duplicate: bool,
        contributions: list[tuple[str, float]],
    ) -> str:
        # Stable sort keeps registry order among equal contributions
        ranked = sorted(contributions, key=lambda c: c[1], reverse=True)
        detail = ", ".join(f"{name} {value:.2f}" for name, value in ranked if value > 0)
        op = ">=" if is_duplicate else "<"
        summary = f"weighted score {weighted:.2f} {op} {self.threshold:.2f}"
        return f"{summary} ({detail})" if detail else summary
