"""Tests for candidate planning and blocking keys."""

from collections.abc import Callable
from itertools import combinations

import pytest

from refdedupe.candidates import (
    BLOCKING_KEYS,
    doi_key,
    first_author_year_key,
    get_blocking_key,
    plan_candidates,
    title_prefix_key,
)
from refdedupe.candidates.blockers import TITLE_PREFIX_LEN
from refdedupe.models import ReferenceRecord

MakeRecord = Callable[..., ReferenceRecord]


# ---------------------------------------------------------------------------
# Blocking keys
# ---------------------------------------------------------------------------


@pytest.mark.unit
def test_first_author_year_key(make_record: MakeRecord) -> None:
    """Test key combines first surname and year; None when either is missing."""
    record = make_record(authors=["Smith, John", "Doe J"], year="2020/01/05")

    assert first_author_year_key(record) == "smith|2020"
    assert first_author_year_key(make_record(authors=["Smith J"])) is None
    assert first_author_year_key(make_record(year=2020)) is None


@pytest.mark.unit
def test_title_prefix_key_truncates(make_record: MakeRecord) -> None:
    """Test title prefix key uses the normalized title prefix."""
    record = make_record("A Very Long Title, About Deduplication Of References!")

    key = title_prefix_key(record)

    assert key is not None
    assert len(key) == TITLE_PREFIX_LEN
    assert key.startswith("a very long title about")
    assert title_prefix_key(make_record()) is None


@pytest.mark.unit
def test_doi_key(make_record: MakeRecord) -> None:
    """Test DOI key normalizes and ignores invalid DOIs."""
    assert doi_key(make_record(doi="https://doi.org/10.1/ABC")) == "10.1/abc"
    assert doi_key(make_record(doi="n/a")) is None
    assert doi_key(make_record()) is None


@pytest.mark.unit
def test_get_blocking_key_registry() -> None:
    """Test registered names resolve and unknown names raise."""
    for name, key in BLOCKING_KEYS.items():
        assert get_blocking_key(name) is key

    with pytest.raises(ValueError, match="Unknown blocking key"):
        get_blocking_key("soundex")


# ---------------------------------------------------------------------------
# Planning
# ---------------------------------------------------------------------------


@pytest.mark.unit
@pytest.mark.parametrize("n", [2, 3, 7])
def test_plan_all_pairs(make_record: MakeRecord, n: int) -> None:
    """Test without blocking every i < j pair is planned in order."""
    records = [make_record(f"title {i}") for i in range(n)]

    plan = plan_candidates(records)

    assert not plan.blocked
    assert plan.total == n * (n - 1) // 2
    assert list(plan.pairs()) == list(combinations(range(n), 2))
    assert plan.max_bucket == 0


@pytest.mark.unit
def test_plan_blocked_pairs_within_buckets(make_record: MakeRecord) -> None:
    """Test blocking compares only records sharing a key, in i-then-j order."""
    records = [
        make_record(authors=["Smith J"], year=2020),
        make_record(authors=["Brown A"], year=2019),
        make_record(authors=["Smith, John"], year=2020),
        make_record(),
        make_record(authors=["Smith JA"], year=2020),
        make_record(authors=["Brown, Alice"], year=2019),
    ]

    plan = plan_candidates(records, first_author_year_key)

    assert plan.blocked
    assert list(plan.pairs()) == [(0, 2), (0, 4), (1, 5), (2, 4)]
    assert plan.total == 4
    assert plan.unkeyed == 1
    assert plan.max_bucket == 3
    assert set(plan.buckets or {}) == {"smith|2020", "brown|2019"}


@pytest.mark.unit
def test_plan_blocked_total_matches_pairs(make_record: MakeRecord) -> None:
    """Test the planned total equals the number of pairs generated."""
    records = [make_record(f"Shared prefix {i % 3}") for i in range(10)]

    plan = plan_candidates(records, title_prefix_key)

    assert plan.total == len(list(plan.pairs()))
    assert all(i < j for i, j in plan.pairs())
