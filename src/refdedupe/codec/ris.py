"""RIS format reader and writer.

RIS format: Two-letter tags, "TY  - " starts record, "ER  - " ends it.
Reference: https://refdb.sourceforge.net/manual-0.9.6/sect1-ris-format.html
"""

import re

from refdedupe.models import ReferenceRecord

TAG_PATTERN = re.compile(r"^([A-Z][A-Z0-9])  -(?: (.*))?$")

# RIS type code <-> record type
RIS_TYPES: dict[str, str] = {
    "JOUR": "journalArticle",
    "BOOK": "book",
    "CHAP": "bookSection",
    "CONF": "conferencePaper",
    "CPAPER": "conferencePaper",
    "THES": "thesis",
    "RPRT": "report",
    "ELEC": "webPage",
    "GEN": "generic",
}
_TYPE_CODES: dict[str, str] = {}
for _code, _type in RIS_TYPES.items():
    _TYPE_CODES.setdefault(_type, _code)

# Tag priority per single-valued field
_TITLE_TAGS = ("TI", "T1")
_YEAR_TAGS = ("PY", "Y1", "DA")
_JOURNAL_TAGS = ("T2", "JF", "JO", "JA")
_ABSTRACT_TAGS = ("AB", "N2")
_AUTHOR_TAGS = frozenset({"AU", "A1"})
_SINGLE_TAGS: dict[str, str] = {
    "DO": "doi",
    "ID": "rec_number",
    "CA": "caption",
    "VL": "volume",
    "IS": "issue",
}
_HANDLED_TAGS = frozenset(
    {"TY", "ER", "SP", "EP", "UR", "KW"}
    | set(_TITLE_TAGS)
    | set(_YEAR_TAGS)
    | set(_JOURNAL_TAGS)
    | set(_ABSTRACT_TAGS)
    | _AUTHOR_TAGS
    | set(_SINGLE_TAGS)
)


def parse_ris(lines: list[str]) -> tuple[list[ReferenceRecord], list[str]]:
    """Parse RIS lines into reference records.

    Parameters
    ----------
    lines : list[str]
        File content as decoded lines (LF-normalized, no newline chars).

    Returns
    -------
    tuple[list[ReferenceRecord], list[str]]
        (records, warnings). Malformed structure produces warnings, never
        an exception.
    """
    warnings: list[str] = []
    records: list[ReferenceRecord] = []

    in_record = False
    current_tags: list[tuple[str, list[str]]] = []

    for line_num, line in enumerate(lines):
        match = TAG_PATTERN.match(line)

        if match:
            tag, value = match.group(1), (match.group(2) or "").strip()

            if tag == "TY":
                if in_record:
                    warnings.append(
                        f"Line {line_num}: Found TY without closing ER for previous record"
                    )
                    records.append(build_record(current_tags))
                in_record = True
                current_tags = [(tag, [value])]

            elif tag == "ER":
                if not in_record:
                    warnings.append(f"Line {line_num}: Found ER without opening TY")
                else:
                    records.append(build_record(current_tags))
                    in_record = False
                    current_tags = []

            elif in_record:
                current_tags.append((tag, [value]))

        elif in_record:
            if line and line[0].isspace() and current_tags and line.strip():
                current_tags[-1][1].append(line.strip())
            elif line.strip():
                warnings.append(f"Line {line_num}: Unrecognized line in record: {line[:50]}")

    if in_record and current_tags:
        warnings.append("End of file reached without closing ER tag")
        records.append(build_record(current_tags))

    return records, warnings


def _first(tags: dict[str, list[str]], names: tuple[str, ...]) -> str | None:
    for name in names:
        for value in tags.get(name, []):
            if value:
                return value
    return None


def build_record(tags: list[tuple[str, list[str]]]) -> ReferenceRecord:
    """Map RIS tags to a ``ReferenceRecord``.

    Parameters
    ----------
    tags : list[tuple[str, list[str]]]
        (tag, value_lines) in file order; continuation lines joined by a space.

    Returns
    -------
    ReferenceRecord
        Record with unmapped tags kept in ``extra``.
    """
    by_tag: dict[str, list[str]] = {}
    authors: list[str] = []
    extra: dict[str, list[str]] = {}

    for tag, value_lines in tags:
        value = " ".join(v for v in value_lines if v)
        by_tag.setdefault(tag, []).append(value)
        if tag in _AUTHOR_TAGS and value:
            authors.append(value)
        elif tag not in _HANDLED_TAGS:
            extra.setdefault(tag, []).append(value)

    type_code = _first(by_tag, ("TY",)) or "GEN"

    record = ReferenceRecord(
        type=RIS_TYPES.get(type_code, type_code),
        title=_first(by_tag, _TITLE_TAGS),
        authors=authors,
        year=_first(by_tag, _YEAR_TAGS),
        journal=_first(by_tag, _JOURNAL_TAGS),
        abstract=_first(by_tag, _ABSTRACT_TAGS),
        keywords=[v for v in by_tag.get("KW", []) if v],
        urls=[v for v in by_tag.get("UR", []) if v],
        extra=extra,
    )

    for tag, attr in _SINGLE_TAGS.items():
        setattr(record, attr, _first(by_tag, (tag,)))

    start_page = _first(by_tag, ("SP",))
    end_page = _first(by_tag, ("EP",))
    if start_page and end_page:
        record.pages = f"{start_page}-{end_page}"
    else:
        record.pages = start_page or end_page

    return record


_LINE_BREAK = re.compile(r"\r\n|\r|\n")
_CONTINUATION_INDENT = "   "


def _tag_line(tag: str, value: object) -> str:
    """Render one tag, folding embedded line breaks into continuation lines.

    ``parse_ris`` joins indented lines onto the previous tag with a space, so
    multi-line values survive a round trip as one line of text and can never
    be read back as a separate tag.
    """
    first, *rest = _LINE_BREAK.split(str(value).strip())
    continued = [_CONTINUATION_INDENT + part.strip() for part in rest if part.strip()]
    return "\r\n".join([f"{tag}  - {first.strip()}", *continued])


def format_ris_record(record: ReferenceRecord) -> str:
    """Format a record as a single RIS entry.

    Parameters
    ----------
    record : ReferenceRecord
        Record to format.

    Returns
    -------
    str
        RIS-formatted record string (CRLF line endings, no trailing newline).
    """
    type_code = _TYPE_CODES.get(record.type)
    if type_code is None:
        type_code = record.type if re.fullmatch(r"[A-Z]{2,6}", record.type or "") else "GEN"

    fields: list[tuple[str, object]] = [("TY", type_code)]

    if record.rec_number is not None:
        fields.append(("ID", record.rec_number))
    if record.title:
        fields.append(("TI", record.title))
    fields.extend(("AU", author) for author in record.authors)
    if record.year is not None and str(record.year):
        fields.append(("PY", record.year))
    if record.journal:
        fields.append(("T2", record.journal))
    if record.volume:
        fields.append(("VL", record.volume))
    if record.issue:
        fields.append(("IS", record.issue))

    if record.pages:
        start, _, end = record.pages.partition("-")
        fields.append(("SP", start.strip()))
        if end.strip():
            fields.append(("EP", end.strip()))

    if record.doi:
        fields.append(("DO", record.doi))
    if record.abstract:
        fields.append(("AB", record.abstract))
    fields.extend(("KW", keyword) for keyword in record.keywords)
    fields.extend(("UR", url) for url in record.urls)
    if record.caption:
        fields.append(("CA", record.caption))

    for tag in sorted(record.extra):
        if re.fullmatch(r"[A-Z][A-Z0-9]", tag):
            fields.extend((tag, value) for value in record.extra[tag])

    lines = [_tag_line(tag, value) for tag, value in fields]
    lines.append("ER  - ")
    return "\r\n".join(lines)


def format_ris(records: list[ReferenceRecord], line_ending: str = "\r\n") -> str:
    """Format records as an RIS library.

    Parameters
    ----------
    records : list[ReferenceRecord]
        Records to format.
    line_ending : str, optional
        Separator between records, by default "\\r\\n".

    Returns
    -------
    str
        RIS library text, records separated by a blank line.
    """
    body = (line_ending * 2).join(format_ris_record(r) for r in records)
    return body + line_ending if body else ""
