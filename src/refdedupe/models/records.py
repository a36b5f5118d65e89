"""Reference record data model for refdedupe.

This module defines the in-memory representation of a single bibliographic
reference. Codecs decode files into ``ReferenceRecord`` objects and the
deduplication engine reads (and, under some resolution policies, annotates)
them.
"""

from dataclasses import dataclass, field, fields
from typing import Any

# Fields serialized by ``to_dict`` in this order
_CORE_FIELDS = (
    "rec_number",
    "type",
    "title",
    "authors",
    "year",
    "journal",
    "volume",
    "issue",
    "pages",
    "doi",
    "abstract",
    "keywords",
    "urls",
    "caption",
)


@dataclass(eq=False)
class ReferenceRecord:
    """One bibliographic citation entry.

    Records compare by identity (``eq=False``): two distinct record objects
    are never equal, even when every field matches.

    Attributes
    ----------
    title : str | None
        Title as captured.
    authors : list[str]
        Author names in source order (any of ``"Family, Given"``,
        ``"Given Family"`` or ``"Family Initials"``).
    year : str | int | None
        Publication year or a date string containing it.
    journal : str | None
        Journal or container title.
    doi : str | None
        DOI in any common form (bare, ``doi:`` prefixed or URL).
    abstract : str | None
        Abstract text.
    rec_number : str | None
        Stable identifier from the source library.
    caption : str | None
        Free annotation; the ``mark`` resolution policy writes here.
    deleted : bool
        Deletion flag; the ``remove`` resolution policy sets it.
    type : str
        Reference type (e.g. ``journalArticle``).
    volume, issue, pages : str | None
        Locator fields.
    keywords, urls : list[str]
        Multi-valued fields.
    extra : dict[str, list[str]]
        Codec-specific fields with no dedicated attribute, kept verbatim.
    """

    title: str | None = None
    authors: list[str] = field(default_factory=list)
    year: str | int | None = None
    journal: str | None = None
    doi: str | None = None
    abstract: str | None = None
    rec_number: str | None = None
    caption: str | None = None
    deleted: bool = False
    type: str = "journalArticle"
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    keywords: list[str] = field(default_factory=list)
    urls: list[str] = field(default_factory=list)
    extra: dict[str, list[str]] = field(default_factory=dict)

    def label(self, index: int) -> str:
        """Return the identifier used to refer to this record in a run.

        Parameters
        ----------
        index : int
            0-based position of the record in the run's input sequence.

        Returns
        -------
        str
            ``rec_number`` when assigned, ``"#<index>"`` otherwise.
        """
        if self.rec_number is not None and str(self.rec_number).strip():
            return str(self.rec_number)
        return f"#{index}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization.

        Empty values are omitted; ``deleted`` only appears when set.
        """
        data: dict[str, Any] = {}
        for name in _CORE_FIELDS:
            value = getattr(self, name)
            if value is None or value == [] or value == "":
                continue
            data[name] = list(value) if isinstance(value, list) else value
        if self.deleted:
            data["deleted"] = True
        if self.extra:
            data["extra"] = {k: list(v) for k, v in self.extra.items()}
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReferenceRecord":
        """Build a record from a dictionary produced by ``to_dict``.

        Unknown keys are kept in ``extra`` rather than rejected.

        Parameters
        ----------
        data : dict[str, Any]
            Serialized record.

        Returns
        -------
        ReferenceRecord
            New record instance.
        """
        known = {f.name for f in fields(cls)}
        kwargs: dict[str, Any] = {}
        extra: dict[str, list[str]] = {}

        for key, value in data.items():
            if key == "extra" and isinstance(value, dict):
                for extra_key, extra_value in value.items():
                    extra.setdefault(extra_key, []).extend(_as_list(extra_value))
            elif key in known:
                kwargs[key] = value
            else:
                extra.setdefault(key, []).extend(_as_list(value))

        for list_field in ("authors", "keywords", "urls"):
            if list_field in kwargs:
                kwargs[list_field] = _as_list(kwargs[list_field])

        kwargs["extra"] = extra
        return cls(**kwargs)


def _as_list(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, list | tuple):
        return [str(v) for v in value]
    return [str(value)]
