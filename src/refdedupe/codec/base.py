"""Format detection, decoding helpers and the codec error type."""

import re
from pathlib import Path

SUPPORTED_EXTENSIONS: dict[str, str] = {
    ".ris": "ris",
    ".json": "json",
}

# ER may lie past the sampled head; TY alone marks RIS.
_SNIFF_LINES = 100
_RIS_START = re.compile(r"^TY  - ", re.MULTILINE)


class CodecError(Exception):
    """A reference library could not be read or written.

    Parameters
    ----------
    message : str
        Human-readable description.
    file : str | None, optional
        Path of the offending library, when known.
    """

    def __init__(self, message: str, file: str | None = None) -> None:
        super().__init__(message)
        self.file = file


def identify_format(path: str | Path) -> str | None:
    """Map a path's extension to a format id ("ris", "json"), or None."""
    return SUPPORTED_EXTENSIONS.get(Path(path).suffix.lower())


def detect_encoding(raw: bytes) -> str:
    """Pick the codec for a library's bytes.

    A UTF-8 BOM wins, then strict UTF-8; anything else is read as Latin-1,
    which never fails to decode.
    """
    if raw.startswith(b"\xef\xbb\xbf"):
        return "utf-8-sig"
    try:
        raw.decode("utf-8")
    except UnicodeDecodeError:
        return "latin-1"
    return "utf-8"


def normalize_line_endings(content: str) -> str:
    """Convert CRLF and bare CR line breaks to LF."""
    return content.replace("\r\n", "\n").replace("\r", "\n")


def sniff_format(lines: list[str]) -> str:
    """Guess a library format from its first lines.

    Parameters
    ----------
    lines : list[str]
        Decoded lines of the file.

    Returns
    -------
    str
        "ris", "json" or "unknown".
    """
    head = "\n".join(lines[:_SNIFF_LINES])
    if _RIS_START.search(head):
        return "ris"
    if head.lstrip().startswith(("[", "{")):
        return "json"
    return "unknown"
