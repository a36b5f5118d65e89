"""JSON library reader and writer.

A JSON library is an array of record objects (the shape produced by
``ReferenceRecord.to_dict``). Input is validated with ``jsonschema``
before any record is built.
"""

import json
from typing import Any

import jsonschema

from refdedupe.codec.base import CodecError
from refdedupe.models import ReferenceRecord

_NULLABLE_STRING = {"type": ["string", "null"]}
_STRING_LIST = {"type": "array", "items": {"type": "string"}}

RECORD_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "rec_number": {"type": ["string", "integer", "null"]},
        "recNumber": {"type": ["string", "integer", "null"]},
        "type": {"type": "string"},
        "title": _NULLABLE_STRING,
        "authors": _STRING_LIST,
        "year": {"type": ["string", "integer", "null"]},
        "journal": _NULLABLE_STRING,
        "volume": {"type": ["string", "integer", "null"]},
        "issue": {"type": ["string", "integer", "null"]},
        "pages": _NULLABLE_STRING,
        "doi": _NULLABLE_STRING,
        "abstract": _NULLABLE_STRING,
        "keywords": _STRING_LIST,
        "urls": _STRING_LIST,
        "caption": _NULLABLE_STRING,
        "deleted": {"type": "boolean"},
        "extra": {"type": "object", "additionalProperties": _STRING_LIST},
    },
}

LIBRARY_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": RECORD_SCHEMA,
}

# Field aliases accepted on input (camelCase exports of other tools)
_ALIASES = {"recNumber": "rec_number"}
_STRINGIFIED = ("rec_number", "volume", "issue")


def parse_json(content: str, file: str | None = None) -> list[ReferenceRecord]:
    """Parse a JSON library.

    Parameters
    ----------
    content : str
        JSON text: an array of record objects, or a single object.
    file : str | None, optional
        Source file name, for error messages.

    Returns
    -------
    list[ReferenceRecord]
        Records in document order.

    Raises
    ------
    CodecError
        If the content is not valid JSON or does not match ``LIBRARY_SCHEMA``.
    """
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise CodecError(f"Invalid JSON: {e}", file=file) from e

    if isinstance(data, dict):
        data = [data]

    try:
        jsonschema.validate(instance=data, schema=LIBRARY_SCHEMA)
    except jsonschema.ValidationError as e:
        location = "/".join(str(p) for p in e.absolute_path) or "<root>"
        raise CodecError(f"Invalid reference library at {location}: {e.message}", file=file) from e

    records = []
    for item in data:
        item = {_ALIASES.get(k, k): v for k, v in item.items()}
        for key in _STRINGIFIED:
            if item.get(key) is not None:
                item[key] = str(item[key])
        records.append(ReferenceRecord.from_dict(item))
    return records


def format_json(records: list[ReferenceRecord]) -> str:
    """Format records as a tab-indented JSON array."""
    return json.dumps([r.to_dict() for r in records], indent="\t", ensure_ascii=False) + "\n"
