"""Blocking keys for opt-in candidate pruning.

A blocking key maps a record to a coarse bucket label. When the engine is
given a blocking key, only records sharing a bucket are compared. This
trades recall for speed and is never applied implicitly: duplicates whose
keys differ (a typo in the first author, a year off by one) are not found.

Keys are pure functions returning ``None`` when the record lacks the data
they need; such records fall in no bucket.
"""

from collections.abc import Callable

from refdedupe.models import ReferenceRecord
from refdedupe.normalize import (
    author_surnames,
    extract_year,
    normalize_doi,
    normalize_text_for_matching,
)

BlockingKey = Callable[[ReferenceRecord], str | None]

TITLE_PREFIX_LEN = 32


def first_author_year_key(record: ReferenceRecord) -> str | None:
    """Key on normalized first-author surname plus year.

    Parameters
    ----------
    record : ReferenceRecord
        Record to key.

    Returns
    -------
    str | None
        ``"surname|year"``, or None if either part is missing.
    """
    surnames = author_surnames(record.authors)
    year = extract_year(record.year)
    if not surnames or year is None:
        return None
    return f"{surnames[0]}|{year}"


def title_prefix_key(record: ReferenceRecord) -> str | None:
    """Key on the first characters of the normalized title."""
    if not isinstance(record.title, str):
        return None
    title = normalize_text_for_matching(record.title)
    if not title:
        return None
    return title[:TITLE_PREFIX_LEN]


def doi_key(record: ReferenceRecord) -> str | None:
    """Key on the normalized DOI (finds DOI duplicates only)."""
    if not isinstance(record.doi, str):
        return None
    return normalize_doi(record.doi)


BLOCKING_KEYS: dict[str, BlockingKey] = {
    "first_author_year": first_author_year_key,
    "title_prefix": title_prefix_key,
    "doi": doi_key,
}


def get_blocking_key(name: str) -> BlockingKey:
    """Look up a registered blocking key by name.

    Parameters
    ----------
    name : str
        Registry name (see ``BLOCKING_KEYS``).

    Returns
    -------
    BlockingKey
        The key function.

    Raises
    ------
    ValueError
        If *name* is not registered.
    """
    try:
        return BLOCKING_KEYS[name]
    except KeyError:
        available = ", ".join(sorted(BLOCKING_KEYS))
        raise ValueError(f"Unknown blocking key: {name!r}. Available: {available}") from None
