"""Field similarity scorers for pairwise comparison.

This module provides pure, deterministic functions comparing one field of
two reference records. Each scorer returns a ``ScorerResult`` with a score
in [0, 1] and degrades to the neutral score when the field is missing on
either side; a missing field is never a hard mismatch.

All functions are locale-independent and reproducible.
"""

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from rapidfuzz.distance import Levenshtein

from refdedupe.models import ReferenceRecord
from refdedupe.normalize import (
    author_surnames,
    extract_year,
    normalize_doi,
    normalize_text_for_matching,
)
from refdedupe.scoring.models import NEUTRAL_SCORE, ScorerResult

ScoreFn = Callable[[ReferenceRecord, ReferenceRecord], ScorerResult]


@dataclass(frozen=True, slots=True)
class FieldScorer:
    """Registry entry binding a dimension name to its scorer.

    Attributes
    ----------
    name : str
        Dimension name (e.g., 'doi', 'title').
    score : Callable[[ReferenceRecord, ReferenceRecord], ScorerResult]
        Scoring function.
    """

    name: str
    score: ScoreFn

    def __call__(self, record_a: ReferenceRecord, record_b: ReferenceRecord) -> ScorerResult:
        return self.score(record_a, record_b)


def text_similarity(text_a: str, text_b: str) -> float:
    """Normalized Levenshtein similarity of two already-normalized strings.

    Parameters
    ----------
    text_a : str
        First normalized text.
    text_b : str
        Second normalized text.

    Returns
    -------
    float
        1 - edit_distance / max(len), in [0.0, 1.0].
    """
    if text_a == text_b:
        return 1.0
    return float(Levenshtein.normalized_similarity(text_a, text_b))


def dice_similarity(items_a: list[str], items_b: list[str]) -> float:
    """Sørensen-Dice coefficient over multisets.

    Parameters
    ----------
    items_a : list[str]
        First multiset (order ignored).
    items_b : list[str]
        Second multiset (order ignored).

    Returns
    -------
    float
        2·|A ∩ B| / (|A| + |B|), in [0.0, 1.0].

    Notes
    -----
    Order is ignored so that reordered author lists score 1.0. Lists of
    different lengths are penalized in proportion to the unmatched
    entries only.
    """
    if not items_a and not items_b:
        return 1.0
    common = sum((Counter(items_a) & Counter(items_b)).values())
    return 2.0 * common / (len(items_a) + len(items_b))


def _missing(dimension: str) -> ScorerResult:
    return ScorerResult(
        dimension=dimension,
        score=NEUTRAL_SCORE,
        reason=f"{dimension} missing",
        missing=True,
    )


def _score_text(dimension: str, text_a: str | None, text_b: str | None) -> ScorerResult:
    norm_a = normalize_text_for_matching(text_a) if isinstance(text_a, str) else ""
    norm_b = normalize_text_for_matching(text_b) if isinstance(text_b, str) else ""

    if not norm_a or not norm_b:
        return _missing(dimension)

    sim = text_similarity(norm_a, norm_b)
    return ScorerResult(
        dimension=dimension,
        score=sim,
        reason=f"{dimension} Levenshtein ratio {sim:.2f}",
    )


def score_title(record_a: ReferenceRecord, record_b: ReferenceRecord) -> ScorerResult:
    """Compare titles case- and punctuation-insensitively.

    Parameters
    ----------
    record_a : ReferenceRecord
        First record.
    record_b : ReferenceRecord
        Second record.

    Returns
    -------
    ScorerResult
        Normalized Levenshtein similarity of the normalized titles.
    """
    return _score_text("title", record_a.title, record_b.title)


def score_abstract(record_a: ReferenceRecord, record_b: ReferenceRecord) -> ScorerResult:
    """Compare abstracts with the same measure as titles."""
    return _score_text("abstract", record_a.abstract, record_b.abstract)


def score_authors(record_a: ReferenceRecord, record_b: ReferenceRecord) -> ScorerResult:
    """Compare author lists by normalized surname overlap.

    Parameters
    ----------
    record_a : ReferenceRecord
        First record.
    record_b : ReferenceRecord
        Second record.

    Returns
    -------
    ScorerResult
        Dice overlap of surname multisets; neutral when either list
        yields no surnames.
    """
    surnames_a = author_surnames(record_a.authors)
    surnames_b = author_surnames(record_b.authors)

    if not surnames_a or not surnames_b:
        return _missing("authors")

    sim = dice_similarity(surnames_a, surnames_b)
    return ScorerResult(
        dimension="authors",
        score=sim,
        reason=f"authors surname overlap {sim:.2f}",
    )


def score_year(
    record_a: ReferenceRecord,
    record_b: ReferenceRecord,
    tolerance: int = 0,
) -> ScorerResult:
    """Compare publication years.

    Parameters
    ----------
    record_a : ReferenceRecord
        First record.
    record_b : ReferenceRecord
        Second record.
    tolerance : int, optional
        Maximum absolute difference still counted as equal, by default 0.

    Returns
    -------
    ScorerResult
        1.0 within tolerance, 0.0 otherwise, neutral when missing.
    """
    year_a = extract_year(record_a.year)
    year_b = extract_year(record_b.year)

    if year_a is None or year_b is None:
        return _missing("year")

    delta = abs(year_a - year_b)
    if delta <= tolerance:
        return ScorerResult(dimension="year", score=1.0, reason=f"year match (delta {delta})")
    return ScorerResult(dimension="year", score=0.0, reason=f"year mismatch (delta {delta})")


def score_doi(record_a: ReferenceRecord, record_b: ReferenceRecord) -> ScorerResult:
    """Compare normalized DOIs.

    Parameters
    ----------
    record_a : ReferenceRecord
        First record.
    record_b : ReferenceRecord
        Second record.

    Returns
    -------
    ScorerResult
        1.0 when both present and equal, 0.0 when both present and
        different, neutral when either is missing.

    Notes
    -----
    DOI comparison is the strongest signal; the classifier treats a
    present-and-equal DOI as an overriding duplicate.
    """
    doi_a = normalize_doi(record_a.doi) if isinstance(record_a.doi, str) else None
    doi_b = normalize_doi(record_b.doi) if isinstance(record_b.doi, str) else None

    if not doi_a or not doi_b:
        return _missing("doi")

    if doi_a == doi_b:
        return ScorerResult(dimension="doi", score=1.0, reason="doi exact match")

    return ScorerResult(dimension="doi", score=0.0, reason="doi both present mismatch")


# ---------------------------------------------------------------------------
# Scorer registry - ordered tuple for deterministic iteration
# ---------------------------------------------------------------------------

DIMENSIONS: tuple[str, ...] = ("title", "authors", "year", "doi", "abstract")


def build_scorers(year_tolerance: int = 0) -> tuple[FieldScorer, ...]:
    """Build the default scorer registry.

    Parameters
    ----------
    year_tolerance : int, optional
        Year tolerance passed to the year scorer, by default 0.

    Returns
    -------
    tuple[FieldScorer, ...]
        Scorers in ``DIMENSIONS`` order.
    """
    return (
        FieldScorer(name="title", score=score_title),
        FieldScorer(name="authors", score=score_authors),
        FieldScorer(name="year", score=partial(score_year, tolerance=year_tolerance)),
        FieldScorer(name="doi", score=score_doi),
        FieldScorer(name="abstract", score=score_abstract),
    )
