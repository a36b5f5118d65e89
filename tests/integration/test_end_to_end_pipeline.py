"""End-to-end tests: read libraries, deduplicate, write survivors.

Exercises the CLI and the Python API against the same on-disk libraries
to check they agree.
"""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from refdedupe import dedupe, read_files, write_records
from refdedupe.cli.main import cli
from refdedupe.codec import read_file

PUBMED_EXPORT = (
    "TY  - JOUR\r\n"
    "ID  - pm1\r\n"
    "TI  - Exercise and sleep quality in older adults: a randomized trial\r\n"
    "AU  - García, María\r\n"
    "AU  - Chen, Wei\r\n"
    "PY  - 2019\r\n"
    "JO  - Sleep Med\r\n"
    "DO  - 10.1016/j.sleep.2019.01.001\r\n"
    "ER  - \r\n"
    "\r\n"
    "TY  - JOUR\r\n"
    "ID  - pm2\r\n"
    "TI  - Coffee consumption and cardiovascular risk\r\n"
    "AU  - Okafor, Chidi\r\n"
    "PY  - 2021\r\n"
    "ER  - \r\n"
)

SCOPUS_EXPORT = [
    {
        "rec_number": "sc1",
        "title": "Exercise and Sleep Quality in Older Adults: A Randomized Trial.",
        "authors": ["Garcia M", "Chen W"],
        "year": "2019",
        "journal": "Sleep Medicine",
    },
    {
        "rec_number": "sc2",
        "title": "Some unrelated paper about soil bacteria",
        "authors": ["Novak, Petr"],
        "year": 2020,
        "doi": "10.1000/soil",
    },
    {
        "rec_number": "sc3",
        "title": "A different title entirely",
        "authors": ["Someone, Else"],
        "year": 2005,
        "doi": "https://doi.org/10.1016/J.SLEEP.2019.01.001",
    },
]


@pytest.fixture
def libraries(tmp_path: Path) -> list[Path]:
    """A RIS export and a JSON export sharing one study."""
    ris = tmp_path / "pubmed.ris"
    ris.write_bytes(PUBMED_EXPORT.encode("utf-8"))
    scopus = tmp_path / "scopus.json"
    scopus.write_text(json.dumps(SCOPUS_EXPORT, indent="\t"), encoding="utf-8")
    return [ris, scopus]


@pytest.mark.integration
def test_api_pipeline(libraries: list[Path], tmp_path: Path) -> None:
    """Test read -> dedupe(remove) -> write through the Python API."""
    records = read_files(libraries)
    assert [r.rec_number for r in records] == ["pm1", "pm2", "sc1", "sc2", "sc3"]

    result = dedupe(records, resolution_policy="remove")

    # pm1 ~ sc1 by fields, pm1 ~ sc3 by DOI, sc1 ~ sc3 is neither
    assert result.duplicates_found == 2
    assert [r.rec_number for r in result.surviving_records] == ["pm1", "pm2", "sc2"]
    assert not result.cancelled
    assert result.comparisons_completed == result.comparisons_total == 10

    out = write_records(result.surviving_records, tmp_path / "merged.ris")
    assert [r.rec_number for r in read_file(out)] == ["pm1", "pm2", "sc2"]


@pytest.mark.integration
def test_cli_matches_api(libraries: list[Path], tmp_path: Path) -> None:
    """Test the CLI produces the same survivors as the API."""
    out = tmp_path / "deduped.json"
    log_path = tmp_path / "audit.jsonl"

    result = CliRunner().invoke(
        cli,
        [
            "dedupe",
            *map(str, libraries),
            "--policy",
            "mark",
            "--batch-size",
            "3",
            "-f",
            str(out),
            "--audit-log",
            str(log_path),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "Found 2 duplicates in 5 references (0 scorer errors)" in result.stderr

    data = json.loads(out.read_text(encoding="utf-8"))
    captions = {r["rec_number"]: r.get("caption") for r in data}
    assert captions == {
        "pm1": None,
        "pm2": None,
        "sc1": "DUPE OF pm1",
        "sc2": None,
        "sc3": "DUPE OF pm1",
    }

    events = [json.loads(line) for line in log_path.read_text().splitlines()]
    pairs = [(e["data"]["earlier"], e["rid"]) for e in events if e["event"] == "duplicate_pair"]
    assert pairs == [("pm1", "sc1"), ("pm1", "sc3")]


@pytest.mark.integration
def test_convert_round_trip(libraries: list[Path], tmp_path: Path) -> None:
    """Test read converts JSON to RIS and back without losing records."""
    runner = CliRunner()
    ris_out = tmp_path / "scopus.ris"
    json_out = tmp_path / "scopus_again.json"

    first = runner.invoke(cli, ["read", str(libraries[1]), "-f", str(ris_out)])
    second = runner.invoke(cli, ["read", str(ris_out), "-f", str(json_out)])

    assert first.exit_code == 0
    assert second.exit_code == 0
    original = json.loads(libraries[1].read_text(encoding="utf-8"))
    converted = json.loads(json_out.read_text(encoding="utf-8"))
    assert [r["title"] for r in converted] == [r["title"] for r in original]
    assert [r["rec_number"] for r in converted] == ["sc1", "sc2", "sc3"]
