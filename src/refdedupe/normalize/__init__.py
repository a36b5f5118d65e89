"""Field normalization used by scorers and blocking keys."""

from refdedupe.normalize._helpers import normalize_text_for_matching, strip_accents
from refdedupe.normalize.fields import (
    author_surname,
    author_surnames,
    extract_year,
    normalize_doi,
)

__all__ = [
    "normalize_text_for_matching",
    "strip_accents",
    "normalize_doi",
    "extract_year",
    "author_surname",
    "author_surnames",
]
