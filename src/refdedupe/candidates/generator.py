"""Candidate pair planning.

Produces the deterministic sequence of index pairs ``(i, j)``, ``i < j``,
that the engine compares: every pair without a blocking key, or only
within-bucket pairs with one. Pairs are generated lazily in ascending
``i`` then ascending ``j`` order, so memory stays linear in the number of
records.
"""

from collections import defaultdict
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field

from refdedupe.candidates.blockers import BlockingKey
from refdedupe.models import ReferenceRecord


@dataclass
class CandidatePlan:
    """Candidate pairs for one run.

    Attributes
    ----------
    size : int
        Number of records.
    total : int
        Number of pairs ``pairs()`` will yield.
    buckets : dict[str, list[int]] | None
        Record indices per blocking key (ascending), or None when
        comparing all pairs.
    unkeyed : int
        Records for which the blocking key returned no value.
    """

    size: int
    total: int
    buckets: dict[str, list[int]] | None = None
    unkeyed: int = 0
    _bucket_of: list[str | None] = field(default_factory=list, repr=False)

    @property
    def blocked(self) -> bool:
        """Whether candidate pruning is active."""
        return self.buckets is not None

    @property
    def max_bucket(self) -> int:
        """Largest bucket size (0 when not blocked)."""
        if not self.buckets:
            return 0
        return max(len(members) for members in self.buckets.values())

    def pairs(self) -> Iterator[tuple[int, int]]:
        """Yield candidate index pairs in deterministic order."""
        if self.buckets is None:
            for i in range(self.size):
                for j in range(i + 1, self.size):
                    yield i, j
            return

        # Track each bucket's position so later members are found without a scan
        cursor: dict[str, int] = defaultdict(int)
        for i in range(self.size):
            key = self._bucket_of[i]
            if key is None:
                continue
            members = self.buckets[key]
            cursor[key] += 1
            for j in members[cursor[key] :]:
                yield i, j


def plan_candidates(
    records: Sequence[ReferenceRecord],
    blocking_key: BlockingKey | None = None,
) -> CandidatePlan:
    """Build the candidate plan for *records*.

    Parameters
    ----------
    records : Sequence[ReferenceRecord]
        Input records in run order.
    blocking_key : BlockingKey | None, optional
        Opt-in bucketing function. None compares all pairs.

    Returns
    -------
    CandidatePlan
        Plan with a fixed total known before any comparison.
    """
    n = len(records)
    if blocking_key is None:
        return CandidatePlan(size=n, total=n * (n - 1) // 2)

    buckets: dict[str, list[int]] = defaultdict(list)
    bucket_of: list[str | None] = []
    unkeyed = 0

    for index, record in enumerate(records):
        key = blocking_key(record)
        if not key:
            bucket_of.append(None)
            unkeyed += 1
            continue
        bucket_of.append(key)
        buckets[key].append(index)

    total = sum(len(m) * (len(m) - 1) // 2 for m in buckets.values())
    return CandidatePlan(
        size=n,
        total=total,
        buckets=dict(buckets),
        unkeyed=unkeyed,
        _bucket_of=bucket_of,
    )
