"""Duplicate detection for bibliographic reference libraries.

This package provides:
- Data models (refdedupe.models): the reference record type
- Codecs (refdedupe.codec): RIS and JSON library reading and writing
- Normalization (refdedupe.normalize): field normalization for matching
- Scoring (refdedupe.scoring): field scorers and the pairwise classifier
- Candidates (refdedupe.candidates): candidate pair planning and blocking
- Resolution (refdedupe.resolution): count, mark and remove policies
- Engine (refdedupe.engine): lazy, cancellable comparison runs
- Audit (refdedupe.audit): JSONL event logging
- CLI (refdedupe.cli): command-line interface
- Public API (refdedupe.api): high-level convenience functions
"""

__version__ = "0.1.0"
__author__ = "Ennio Politi Lopes <enniolopes@gmail.com>"
__license__ = "MIT"

from refdedupe.api import (
    CodecError,
    dedupe,
    read_files,
    write_records,
)
from refdedupe.engine import EngineConfig, InputError, RunResult
from refdedupe.models import ReferenceRecord

__all__ = [
    "__version__",
    "__author__",
    "__license__",
    "ReferenceRecord",
    "EngineConfig",
    "RunResult",
    "read_files",
    "write_records",
    "dedupe",
    "CodecError",
    "InputError",
]
