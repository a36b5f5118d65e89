"""Public API for reading, deduplicating and writing reference libraries.

This module provides the main public API for refdedupe, enabling:
- Reading library files into ReferenceRecord objects
- Writing records back to RIS or JSON
- Running the deduplication engine with keyword configuration
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING, Any

from refdedupe.codec import CodecError, read_file, write_file
from refdedupe.models import ReferenceRecord

if TYPE_CHECKING:
    from refdedupe.engine import RunResult

__all__ = [
    "read_files",
    "write_records",
    "dedupe",
    "CodecError",
]


def read_files(paths: Iterable[str | Path]) -> list[ReferenceRecord]:
    """Read one or more library files.

    Records are concatenated in argument order, each file in file order.

    Parameters
    ----------
    paths : Iterable[str | Path]
        Files to read. Format is detected from content, then extension.

    Returns
    -------
    list[ReferenceRecord]
        All records read.

    Raises
    ------
    FileNotFoundError
        If a file does not exist.
    CodecError
        If a file cannot be parsed.

    Examples
    --------
        >>> from refdedupe import read_files
        >>> records = read_files(["pubmed.ris", "scopus.json"])
        >>> len(records)
        412
    """
    records: list[ReferenceRecord] = []
    for path in paths:
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        records.extend(read_file(file_path))
    return records


def write_records(
    records: list[ReferenceRecord],
    path: str | Path,
    format: str | None = None,
) -> Path:
    """Write records to a library file.

    Parameters
    ----------
    records : list[ReferenceRecord]
        Records to write.
    path : str | Path
        Output file path.
    format : str | None, optional
        'ris' or 'json'. If None, derived from the extension.

    Returns
    -------
    Path
        Path written.

    Raises
    ------
    CodecError
        If the format is unknown or the file cannot be written.
    """
    return write_file(path, records, format)


def dedupe(records: list[ReferenceRecord], **config: Any) -> RunResult:
    """Find duplicate references and apply a resolution policy.

    Parameters
    ----------
    records : list[ReferenceRecord]
        Records in run order. ``mark`` and ``remove`` mutate them in place.
    **config
        ``EngineConfig`` fields (``threshold``, ``weights``,
        ``year_tolerance``, ``blocking_key``, ``batch_size``,
        ``resolution_policy``) plus ``cancel_token``, ``logger`` and
        ``on_event``, forwarded to the engine.

    Returns
    -------
    RunResult
        Terminal result of the run.

    Raises
    ------
    InputError
        If the records or the configuration are invalid.

    Examples
    --------
        >>> from refdedupe import dedupe, read_files
        >>> result = dedupe(read_files(["refs.ris"]), resolution_policy="remove")
        >>> print(result.duplicates_found, len(result.surviving_records))
        3 97
    """
    from refdedupe.engine import EngineConfig, run

    run_kwargs = {
        key: config.pop(key) for key in ("cancel_token", "logger", "on_event") if key in config
    }
    return run(records, EngineConfig(**config), **run_kwargs)
