"""Reading and writing reference library files."""

from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from refdedupe.codec.base import (
    SUPPORTED_EXTENSIONS,
    CodecError,
    detect_encoding,
    identify_format,
    normalize_line_endings,
    sniff_format,
)
from refdedupe.codec.json_codec import format_json, parse_json
from refdedupe.codec.ris import format_ris, parse_ris
from refdedupe.models import ReferenceRecord

FormatterFn = Callable[[list[ReferenceRecord]], str]


@dataclass(frozen=True)
class LibraryFormat:
    """A supported library file format.

    Attributes
    ----------
    id : str
        Format identifier used by ``-o`` and ``format=`` arguments.
    title : str
        Human readable name.
    formatter : FormatterFn
        Serializer for a record list.
    """

    id: str
    title: str
    formatter: FormatterFn

    @property
    def extensions(self) -> tuple[str, ...]:
        """File extensions that ``identify_format`` maps to this format."""
        return tuple(ext for ext, fmt in SUPPORTED_EXTENSIONS.items() if fmt == self.id)


FORMATS: dict[str, LibraryFormat] = {
    "ris": LibraryFormat("ris", "RIS", format_ris),
    "json": LibraryFormat("json", "JSON", format_json),
}


@dataclass(frozen=True)
class FileReadResult:
    """Immutable result of reading a single file.

    Attributes
    ----------
    filename : str
        Name of the file (basename).
    filepath : str
        Full path to the file.
    format_detected : str
        Format used to parse the file (ris|json|unknown).
    encoding_used : str
        Encoding used to decode the file.
    records_read : int
        Number of records read.
    warnings : tuple[str, ...]
        Non-fatal structural problems found while parsing.
    """

    filename: str
    filepath: str
    format_detected: str
    encoding_used: str
    records_read: int
    warnings: tuple[str, ...] = ()


def load_file(path: str | Path) -> tuple[list[ReferenceRecord], FileReadResult]:
    """Read a library file and report how it was read.

    The format is sniffed from content first, then from the extension.

    Parameters
    ----------
    path : str | Path
        File to read.

    Returns
    -------
    tuple[list[ReferenceRecord], FileReadResult]
        Records in file order and the read report.

    Raises
    ------
    CodecError
        If the file cannot be read, decoded or parsed, or its format is
        unknown.
    """
    file_path = Path(path)

    try:
        file_bytes = file_path.read_bytes()
    except OSError as e:
        raise CodecError(f"Failed to read file: {e}", file=str(file_path)) from e

    encoding = detect_encoding(file_bytes)
    content = normalize_line_endings(file_bytes.decode(encoding))
    lines = content.split("\n")

    format_detected = sniff_format(lines)
    if format_detected == "unknown":
        format_detected = identify_format(file_path) or "unknown"

    warnings: list[str] = []
    if format_detected == "ris":
        records, warnings = parse_ris(lines)
    elif format_detected == "json":
        records = parse_json(content, file=str(file_path))
    elif not content.strip():
        records = []
    else:
        raise CodecError(
            f"Unable to determine format of {file_path.name}",
            file=str(file_path),
        )

    result = FileReadResult(
        filename=file_path.name,
        filepath=str(file_path),
        format_detected=format_detected,
        encoding_used=encoding,
        records_read=len(records),
        warnings=tuple(warnings),
    )
    return records, result


def read_file(path: str | Path) -> list[ReferenceRecord]:
    """Read a library file into records.

    Parameters
    ----------
    path : str | Path
        File to read.

    Returns
    -------
    list[ReferenceRecord]
        Records in file order.

    Raises
    ------
    CodecError
        If the file cannot be read or parsed.
    """
    records, _ = load_file(path)
    return records


def format_records(records: list[ReferenceRecord], format: str) -> str:
    """Serialize records in a supported format.

    Raises
    ------
    CodecError
        If the format is not in ``FORMATS``.
    """
    library_format = FORMATS.get(format)
    if library_format is None:
        raise CodecError(f'Unsupported output format "{format}"')
    return library_format.formatter(records)


def write_file(
    path: str | Path,
    records: list[ReferenceRecord],
    format: str | None = None,
) -> Path:
    """Write records to a library file.

    Parameters
    ----------
    path : str | Path
        Output path. Parent directories are created.
    records : list[ReferenceRecord]
        Records to write.
    format : str | None, optional
        Format identifier. If None, derived from the file extension.

    Returns
    -------
    Path
        Path written.

    Raises
    ------
    CodecError
        If the format cannot be determined or the file cannot be written.
    """
    output_path = Path(path)

    if format is None:
        format = identify_format(output_path)
        if format is None:
            raise CodecError(
                f"Unknown output file type: {output_path.name}. Specify the format explicitly",
                file=str(output_path),
            )

    return write_text(output_path, format_records(records, format))


def write_text(path: str | Path, text: str) -> Path:
    """Write already formatted output, creating parent directories.

    Raises
    ------
    CodecError
        If the file cannot be written.
    """
    output_path = Path(path)
    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the RIS writer's CRLF line endings untouched
        with open(output_path, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except OSError as e:
        raise CodecError(f"Failed to write file: {e}", file=str(output_path)) from e
    return output_path
