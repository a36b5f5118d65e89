"""Tests for field normalization.

Covers the text, DOI, year and author-name normalizers shared by the
scorers and blocking keys. Tests focus on outcomes, not internals.
"""

import pytest

from refdedupe.normalize import (
    author_surname,
    author_surnames,
    extract_year,
    normalize_doi,
    normalize_text_for_matching,
    strip_accents,
)

# ---------------------------------------------------------------------------
# Text
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_normalize_text_casefolds_and_drops_punctuation() -> None:
    """Test case and trailing punctuation do not survive normalization."""
    assert normalize_text_for_matching("Deep Learning for X.") == "deep learning for x"
    assert normalize_text_for_matching("Deep learning  for X") == "deep learning for x"


@pytest.mark.unit
def test_normalize_text_strips_accents_and_dashes() -> None:
    """Test accents are stripped and dashes act as separators."""
    assert normalize_text_for_matching("Café—Über") == "cafe uber"


@pytest.mark.unit
def test_normalize_text_empty() -> None:
    """Test empty input stays empty."""
    assert normalize_text_for_matching("") == ""
    assert normalize_text_for_matching(" ... ") == ""


@pytest.mark.unit
def test_strip_accents() -> None:
    """Test diacritics removal keeps base letters."""
    assert strip_accents("Müller") == "Muller"
    assert strip_accents("São Paulo") == "Sao Paulo"


# ---------------------------------------------------------------------------
# DOI
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "10.1000/ABC",
        "doi:10.1000/abc",
        "https://doi.org/10.1000/abc",
        "http://dx.doi.org/10.1000/ABC",
        "10.1000/abc.",
        "10.1000/abc [doi]",
        "https://doi.org/10.1000%2Fabc",
    ],
)
def test_normalize_doi_equivalent_forms(raw: str) -> None:
    """Test common DOI spellings normalize to one bare lowercase form."""
    assert normalize_doi(raw) == "10.1000/abc"


@pytest.mark.unit
@pytest.mark.parametrize("raw", [None, "", "   ", "not a doi", "https://example.com/paper"])
def test_normalize_doi_invalid(raw: str | None) -> None:
    """Test values that are not DOIs normalize to None."""
    assert normalize_doi(raw) is None


@pytest.mark.unit
def test_normalize_doi_keeps_parentheses() -> None:
    """Test parentheses inside a DOI are preserved."""
    assert normalize_doi("10.1016/S0140-6736(20)30183-5") == "10.1016/s0140-6736(20)30183-5"


# ---------------------------------------------------------------------------
# Year
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    ("value", "expected"),
    [
        (2020, 2020),
        ("2020", 2020),
        ("2020/05/01", 2020),
        ("May 1999", 1999),
        ("1850", 1850),
        (None, None),
        ("n.d.", None),
        ("", None),
        (True, None),
        (0, None),
    ],
)
def test_extract_year(value: str | int | None, expected: int | None) -> None:
    """Test year extraction from ints and date strings."""
    assert extract_year(value) == expected


# ---------------------------------------------------------------------------
# Authors
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("Smith, John", "smith"),
        ("Smith J", "smith"),
        ("Smith JA", "smith"),
        ("John Smith", "smith"),
        ("Smith, John, Jr.", "smith"),
        ("García Márquez, Gabriel", "garcia marquez"),
        ("Van der Berg AB", "van der berg"),
        ("Müller", "muller"),
    ],
)
def test_author_surname_conventions(name: str, expected: str) -> None:
    """Test family-name extraction across naming conventions."""
    assert author_surname(name) == expected


@pytest.mark.unit
@pytest.mark.parametrize("name", ["", "   ", "et al.", "et al"])
def test_author_surname_placeholder(name: str) -> None:
    """Test empty names and et al. placeholders yield None."""
    assert author_surname(name) is None


@pytest.mark.unit
def test_author_surnames_keeps_order_and_drops_unparseable() -> None:
    """Test list normalization keeps source order and skips placeholders."""
    authors = ["Smith, John", "et al.", "Doe J", ""]

    assert author_surnames(authors) == ["smith", "doe"]
    assert author_surnames(None) == []
    assert author_surnames([]) == []
