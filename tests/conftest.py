"""Pytest configuration and fixtures for test suite."""

import sys
from collections.abc import Callable
from pathlib import Path

import pytest

# Add src directory to path for imports
SRC_PATH = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(SRC_PATH))

from refdedupe.models import ReferenceRecord  # noqa: E402

SAMPLE_RIS = (
    "TY  - JOUR\n"
    "ID  - 1\n"
    "TI  - Deep learning for protein structure prediction\n"
    "AU  - Smith, John\n"
    "AU  - Doe, Jane\n"
    "PY  - 2020\n"
    "T2  - Nature\n"
    "DO  - 10.1000/abc123\n"
    "ER  - \n"
    "\n"
    "TY  - JOUR\n"
    "ID  - 2\n"
    "TI  - Deep Learning for Protein Structure Prediction.\n"
    "AU  - Smith J\n"
    "AU  - Doe J\n"
    "PY  - 2020\n"
    "T2  - Nature\n"
    "ER  - \n"
    "\n"
    "TY  - JOUR\n"
    "ID  - 3\n"
    "TI  - Coral reef decline in the Pacific\n"
    "AU  - Brown, Alice\n"
    "PY  - 2018\n"
    "ER  - \n"
)


@pytest.fixture
def make_record() -> Callable[..., ReferenceRecord]:
    """Factory for test records with minimal boilerplate.

    Only the fields a test cares about need to be given; everything else
    takes the ``ReferenceRecord`` defaults.
    """

    def _factory(
        title: str | None = None,
        *,
        authors: list[str] | None = None,
        year: str | int | None = None,
        doi: str | None = None,
        abstract: str | None = None,
        journal: str | None = None,
        rec_number: str | None = None,
        caption: str | None = None,
    ) -> ReferenceRecord:
        return ReferenceRecord(
            title=title,
            authors=list(authors or []),
            year=year,
            doi=doi,
            abstract=abstract,
            journal=journal,
            rec_number=rec_number,
            caption=caption,
        )

    return _factory


@pytest.fixture
def sample_ris_file(tmp_path: Path) -> Path:
    """Three-record RIS library: records 1 and 2 are duplicates."""
    path = tmp_path / "sample.ris"
    path.write_text(SAMPLE_RIS, encoding="utf-8")
    return path
