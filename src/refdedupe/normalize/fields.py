"""Field normalizers for DOI, year and author names.

All functions are pure and return ``None`` (or an empty value) when the
input cannot be normalized, never raising on malformed data.
"""

from functools import lru_cache
from urllib.parse import unquote, urlparse

from refdedupe.normalize._helpers import (
    _CACHE_SIZE,
    DOI_SUFFIX_RE,
    ET_AL_RE,
    INITIALS_RE,
    SUFFIX_RE,
    YEAR_RE,
    normalize_text_for_matching,
)

_DOI_PREFIXES = ("doi:", "doi.org/", "dx.doi.org/", "https://doi.org/", "http://doi.org/")


@lru_cache(maxsize=_CACHE_SIZE)
def normalize_doi(doi: str | None) -> str | None:
    """Normalize a DOI string for exact comparison.

    Parameters
    ----------
    doi : str | None
        DOI in any common form (``10.x/y``, ``doi:10.x/y``, DOI URL,
        NBIB ``[doi]`` suffixed).

    Returns
    -------
    str | None
        Casefolded bare DOI starting with ``10.``, or None.

    Examples
    --------
        >>> normalize_doi("https://doi.org/10.1000/ABC.")
        '10.1000/abc'
    """
    if not doi:
        return None

    doi = doi.strip()

    # Strip NBIB [doi] suffix (e.g., "10.1234/test [doi]")
    doi = DOI_SUFFIX_RE.sub("", doi).strip()

    # Extract from URL
    if doi.casefold().startswith(("http://", "https://")):
        doi = urlparse(doi).path.lstrip("/")

    for prefix in _DOI_PREFIXES:
        if doi.casefold().startswith(prefix):
            doi = doi[len(prefix) :].strip()
            break

    # URL-decode encoded characters (%2F -> /, %28 -> (, etc.)
    doi = unquote(doi)

    # Parentheses/brackets are valid DOI characters; only trim citation punctuation
    doi = doi.rstrip(".,;").strip().casefold()

    if not doi.startswith("10."):
        return None

    return doi


def extract_year(value: str | int | None) -> int | None:
    """Extract a four-digit publication year.

    Parameters
    ----------
    value : str | int | None
        Year as an int, a bare year string or a date string
        (e.g. ``"2020/05/01"``, ``"May 2020"``).

    Returns
    -------
    int | None
        The first plausible year found, or None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None

    match = YEAR_RE.search(str(value))
    if not match:
        return None
    return int(match.group(0))


@lru_cache(maxsize=_CACHE_SIZE)
def author_surname(name: str) -> str | None:
    """Extract a normalized family name from an author string.

    Handles ``"Family, Given"``, ``"Family Initials"`` (PubMed style)
    and ``"Given Family"`` conventions.

    Parameters
    ----------
    name : str
        Author name as captured.

    Returns
    -------
    str | None
        Casefolded, accent-stripped family name, or None for empty
        names and ``et al.`` placeholders.
    """
    name = name.strip() if name else ""
    if not name or ET_AL_RE.match(name):
        return None

    name = SUFFIX_RE.sub("", name).strip()

    if "," in name:
        family = name.split(",", 1)[0]
    else:
        tokens = name.split()
        if len(tokens) > 1 and INITIALS_RE.match(tokens[-1]):
            family = " ".join(tokens[:-1])
        else:
            family = tokens[-1]

    surname = normalize_text_for_matching(family)
    return surname or None


def author_surnames(authors: list[str] | None) -> list[str]:
    """Normalize an author list into surnames, dropping unparseable entries.

    Parameters
    ----------
    authors : list[str] | None
        Author names in source order.

    Returns
    -------
    list[str]
        Surnames in source order.
    """
    if not authors:
        return []
    surnames = (author_surname(a) for a in authors if isinstance(a, str))
    return [s for s in surnames if s]
