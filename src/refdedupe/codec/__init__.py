"""Reference library codecs.

Readers and writers for RIS and JSON libraries, plus format detection.
"""

from refdedupe.codec.base import CodecError, identify_format, sniff_format
from refdedupe.codec.io import (
    FORMATS,
    FileReadResult,
    LibraryFormat,
    format_records,
    load_file,
    read_file,
    write_file,
    write_text,
)
from refdedupe.codec.json_codec import format_json, parse_json
from refdedupe.codec.ris import format_ris, parse_ris

__all__ = [
    "CodecError",
    "FORMATS",
    "FileReadResult",
    "LibraryFormat",
    "identify_format",
    "sniff_format",
    "load_file",
    "read_file",
    "write_file",
    "write_text",
    "format_records",
    "parse_ris",
    "format_ris",
    "parse_json",
    "format_json",
]
