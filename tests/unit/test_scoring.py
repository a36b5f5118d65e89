"""Tests for field scorers and the pairwise classifier."""

from collections.abc import Callable

import pytest

from refdedupe.models import ReferenceRecord
from refdedupe.scoring import (
    DEFAULT_THRESHOLD,
    DEFAULT_WEIGHTS,
    DIMENSIONS,
    DOI_MATCH_REASON,
    NEUTRAL_SCORE,
    PairwiseClassifier,
    ScorerResult,
    build_scorers,
)
from refdedupe.scoring.comparators import (
    dice_similarity,
    score_abstract,
    score_authors,
    score_doi,
    score_title,
    score_year,
    text_similarity,
)

MakeRecord = Callable[..., ReferenceRecord]


def _results(a: ReferenceRecord, b: ReferenceRecord) -> list[ScorerResult]:
    return [scorer(a, b) for scorer in build_scorers()]


# ========== Similarity measures ==========


@pytest.mark.unit
def test_text_similarity_bounds() -> None:
    """Test identical strings score 1.0 and one edit in three scores 2/3."""
    assert text_similarity("deep learning", "deep learning") == 1.0
    assert text_similarity("abc", "abd") == pytest.approx(2 / 3)
    assert text_similarity("abc", "xyz") == 0.0


@pytest.mark.unit
def test_dice_similarity_ignores_order() -> None:
    """Test Dice overlap is order-insensitive and multiset-aware."""
    assert dice_similarity(["smith", "doe"], ["doe", "smith"]) == 1.0
    assert dice_similarity(["smith", "smith", "doe"], ["smith", "doe"]) == pytest.approx(0.8)
    assert dice_similarity(["smith"], ["brown"]) == 0.0


# ========== Field scorers ==========


@pytest.mark.unit
def test_score_title_ignores_case_and_punctuation(make_record: MakeRecord) -> None:
    """Test title scorer treats trailing punctuation and case as equal."""
    a = make_record("Deep Learning for X")
    b = make_record("deep learning for x.")

    result = score_title(a, b)

    assert result.dimension == "title"
    assert result.score == 1.0
    assert not result.missing


@pytest.mark.unit
def test_score_title_unrelated_is_low(make_record: MakeRecord) -> None:
    """Test unrelated titles score well below the threshold."""
    result = score_title(make_record("Deep Learning for X"), make_record("Unrelated Topic"))

    assert result.score < 0.5


@pytest.mark.unit
@pytest.mark.parametrize(
    "scorer",
    [score_title, score_abstract, score_authors, score_year, score_doi],
)
def test_scorers_neutral_when_missing(make_record: MakeRecord, scorer: Callable) -> None:
    """Test every scorer degrades to the neutral score on missing data."""
    full = make_record(
        "Some title",
        authors=["Smith, John"],
        year=2020,
        doi="10.1000/abc",
        abstract="Some abstract",
    )
    empty = make_record()

    for a, b in ((full, empty), (empty, full), (empty, empty)):
        result = scorer(a, b)
        assert result.score == NEUTRAL_SCORE
        assert result.missing


@pytest.mark.unit
def test_score_authors_across_name_conventions(make_record: MakeRecord) -> None:
    """Test author lists match across 'Family, Given' and 'Family Initials'."""
    a = make_record(authors=["Smith, John", "Doe, Jane"])
    b = make_record(authors=["Doe J", "Smith J"])

    assert score_authors(a, b).score == 1.0


@pytest.mark.unit
def test_score_authors_partial_overlap(make_record: MakeRecord) -> None:
    """Test an extra author lowers but does not zero the score."""
    a = make_record(authors=["Smith, John", "Doe, Jane"])
    b = make_record(authors=["Smith, John"])

    assert score_authors(a, b).score == pytest.approx(2 / 3)


@pytest.mark.unit
def test_score_year_tolerance(make_record: MakeRecord) -> None:
    """Test year scoring is exact by default and honors a tolerance."""
    a = make_record(year="2020")
    b = make_record(year="2021/03/01")

    assert score_year(a, b).score == 0.0
    assert score_year(a, b, tolerance=1).score == 1.0
    assert score_year(a, make_record(year=2020)).score == 1.0


@pytest.mark.unit
def test_score_doi(make_record: MakeRecord) -> None:
    """Test DOI scorer: equal after normalization, different, missing."""
    a = make_record(doi="https://doi.org/10.1000/ABC")
    b = make_record(doi="doi:10.1000/abc")
    c = make_record(doi="10.1000/xyz")

    assert score_doi(a, b).score == 1.0
    assert score_doi(a, c).score == 0.0
    assert not score_doi(a, c).missing
    assert score_doi(a, make_record(doi="not a doi")).missing


@pytest.mark.unit
def test_scorers_are_deterministic(make_record: MakeRecord) -> None:
    """Test the same inputs always give the same results."""
    a = make_record("A study of things", authors=["Smith J"], year=2019)
    b = make_record("A study of thing", authors=["Smith, J."], year=2019)

    assert _results(a, b) == _results(a, b)


@pytest.mark.unit
def test_build_scorers_registry_order() -> None:
    """Test the registry follows DIMENSIONS order."""
    assert tuple(s.name for s in build_scorers()) == DIMENSIONS


@pytest.mark.unit
def test_build_scorers_binds_year_tolerance(make_record: MakeRecord) -> None:
    """Test the year tolerance is bound into the registry's year scorer."""
    year_scorer = {s.name: s for s in build_scorers(year_tolerance=2)}["year"]

    assert year_scorer(make_record(year=2018), make_record(year=2020)).score == 1.0


# ========== Classifier ==========


@pytest.mark.unit
def test_default_weight_table() -> None:
    """Test the documented default weights and threshold."""
    assert DEFAULT_WEIGHTS == {
        "title": 0.4,
        "authors": 0.3,
        "year": 0.1,
        "doi": 0.2,
        "abstract": 0.1,
    }
    assert DEFAULT_THRESHOLD == 0.75


@pytest.mark.unit
def test_doi_match_short_circuits(make_record: MakeRecord) -> None:
    """Test equal DOIs make a duplicate whatever the other fields say."""
    a = make_record("Completely different", authors=["Smith J"], year=1990, doi="10.1/x")
    b = make_record("Nothing alike here", authors=["Brown A"], year=2024, doi="DOI:10.1/X")

    verdict = PairwiseClassifier().classify(a, b, _results(a, b))

    assert verdict.is_duplicate
    assert verdict.reason == DOI_MATCH_REASON
    assert verdict.weighted_score is None


@pytest.mark.unit
def test_weighted_verdict_and_reason(make_record: MakeRecord) -> None:
    """Test the weighted sum and the ranked explanation."""
    a = make_record("Deep Learning for X", authors=["Smith, John"], year=2020)
    b = make_record("Deep Learning for X.", authors=["Smith J"], year=2020)

    verdict = PairwiseClassifier().classify(a, b, _results(a, b))

    assert verdict.is_duplicate
    assert verdict.weighted_score == pytest.approx(0.9)
    assert verdict.reason == (
        "weighted score 0.90 >= 0.75 (title 0.40, authors 0.30, year 0.10, doi 0.10)"
    )
    assert len(verdict.contributing_scores) == len(DIMENSIONS)


@pytest.mark.unit
def test_title_alone_is_not_enough(make_record: MakeRecord) -> None:
    """Test an equal title with every other field missing stays below 0.75."""
    a = make_record("Deep Learning for X")
    b = make_record("Deep Learning for X")

    verdict = PairwiseClassifier().classify(a, b, _results(a, b))

    assert not verdict.is_duplicate
    assert verdict.weighted_score == pytest.approx(0.7)
    assert "< 0.75" in verdict.reason


@pytest.mark.unit
def test_abstract_weight_only_when_both_present(make_record: MakeRecord) -> None:
    """Test the abstract dimension is inactive unless both records have one."""
    classifier = PairwiseClassifier()
    with_abstract = make_record(abstract="An abstract")
    without = make_record()

    assert classifier.active_weight("abstract", with_abstract, without) == 0.0
    assert classifier.active_weight("abstract", with_abstract, with_abstract) == 0.1
    assert classifier.active_weight("title", without, without) == 0.4


@pytest.mark.unit
def test_custom_weights_and_threshold(make_record: MakeRecord) -> None:
    """Test a title-only weight table classifies on title similarity alone."""
    classifier = PairwiseClassifier(
        weights={"title": 1.0, "authors": 0.0, "year": 0.0, "doi": 0.0},
        threshold=0.5,
    )
    a = make_record("Deep Learning for X", authors=["Smith J"], year=2000)
    b = make_record("Deep Learning for X", authors=["Brown A"], year=2020)

    verdict = classifier.classify(a, b, _results(a, b))

    assert verdict.is_duplicate
    assert verdict.weighted_score == pytest.approx(1.0)
    assert verdict.reason == "weighted score 1.00 >= 0.50 (title 1.00)"


@pytest.mark.unit
def test_weights_are_summed_not_averaged(make_record: MakeRecord) -> None:
    """Test a zeroed dimension lowers the sum instead of rescaling the rest."""
    classifier = PairwiseClassifier(weights={"doi": 0.0})
    a = make_record("Deep Learning for X", authors=["Smith, John"], year=2019)
    b = make_record("Deep Learning for X", authors=["Smith J"], year=2021)

    verdict = classifier.classify(a, b, _results(a, b))

    # title 0.4 + authors 0.3 + year 0.0
    assert verdict.weighted_score == pytest.approx(0.7)
    assert not verdict.is_duplicate


@pytest.mark.unit
def test_abstract_weight_is_additive(make_record: MakeRecord) -> None:
    """Test matching abstracts push the default sum above 1."""
    a = make_record(
        "Deep Learning for X", authors=["Smith, John"], year=2020, abstract="Same text."
    )
    b = make_record("Deep Learning for X", authors=["Smith J"], year=2020, abstract="Same text")

    verdict = PairwiseClassifier().classify(a, b, _results(a, b))

    # title 0.4 + authors 0.3 + year 0.1 + missing doi 0.1 + abstract 0.1
    assert verdict.weighted_score == pytest.approx(1.0)
    assert verdict.is_duplicate


@pytest.mark.unit
def test_verdict_to_dict(make_record: MakeRecord) -> None:
    """Test verdict serialization includes every contributing score."""
    a = make_record("Title one")
    b = make_record("Title two")

    data = PairwiseClassifier().classify(a, b, _results(a, b)).to_dict()

    assert set(data) == {"is_duplicate", "reason", "weighted_score", "contributing_scores"}
    assert [s["dimension"] for s in data["contributing_scores"]] == list(DIMENSIONS)
