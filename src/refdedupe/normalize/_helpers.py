"""Regex patterns and text folding shared by the field normalizers."""

import re
import unicodedata
from functools import lru_cache

DOI_SUFFIX_RE = re.compile(r"\s*\[doi\]\s*$", re.IGNORECASE)
YEAR_RE = re.compile(r"\b(1[5-9]|20)\d{2}\b")
PUNCT_RE = re.compile(r"[^\w\s]+")
SUFFIX_RE = re.compile(r"[\s,]+(Jr\.?|Sr\.?|II|III|IV|V)$", re.IGNORECASE)
INITIALS_RE = re.compile(r"^(?:[A-Z]\.?-?){1,3}$")
ET_AL_RE = re.compile(r"^et\.?\s*al\.?$", re.IGNORECASE)

_CACHE_SIZE = 65536


def strip_accents(text: str) -> str:
    """Drop combining marks, so "Müller" and "Muller" compare equal."""
    decomposed = unicodedata.normalize("NFD", text)
    base = "".join(ch for ch in decomposed if unicodedata.category(ch) != "Mn")
    return unicodedata.normalize("NFC", base)


@lru_cache(maxsize=_CACHE_SIZE)
def normalize_text_for_matching(text: str) -> str:
    """Fold text into the form used by the similarity scorers.

    Compatibility-normalizes and casefolds, strips accents, turns every run
    of punctuation (underscores included) into a space and collapses
    whitespace. Memoized: a title is folded once per pair it appears in.

    Parameters
    ----------
    text : str
        Title, journal or name as captured.

    Returns
    -------
    str
        Folded text; empty when nothing alphanumeric remains.
    """
    if not text:
        return ""
    folded = strip_accents(unicodedata.normalize("NFKC", text).casefold())
    folded = PUNCT_RE.sub(" ", folded).replace("_", " ")
    return " ".join(folded.split())
