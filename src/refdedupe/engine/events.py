"""Events emitted by the deduplication engine.

A run yields a sequence of ``ProgressEvent`` and ``DuplicatePairEvent``
items followed by exactly one terminal ``EndEvent``.
"""

import threading
from dataclasses import dataclass, field
from typing import Any

from refdedupe.models import ReferenceRecord
from refdedupe.resolution import ResolutionPolicy
from refdedupe.scoring import DuplicateVerdict


@dataclass(frozen=True, slots=True)
class ProgressEvent:
    """Progress snapshot.

    Attributes
    ----------
    completed : int
        Comparisons completed so far (non-decreasing within a run).
    total : int
        Comparisons planned for the run (fixed at run start).
    """

    completed: int
    total: int


@dataclass(frozen=True, slots=True)
class DuplicatePairEvent:
    """A confirmed duplicate pair.

    Attributes
    ----------
    earlier_index : int
        Input position of the canonical record (always < later_index).
    later_index : int
        Input position of the duplicate record.
    earlier : ReferenceRecord
        Canonical record.
    later : ReferenceRecord
        Duplicate record.
    verdict : DuplicateVerdict
        Classifier verdict for the pair.
    """

    earlier_index: int
    later_index: int
    earlier: ReferenceRecord
    later: ReferenceRecord
    verdict: DuplicateVerdict

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization (records by label)."""
        return {
            "earlier": self.earlier.label(self.earlier_index),
            "later": self.later.label(self.later_index),
            "earlier_index": self.earlier_index,
            "later_index": self.later_index,
            "verdict": self.verdict.to_dict(),
        }


@dataclass
class RunResult:
    """Terminal, authoritative output of a run.

    Attributes
    ----------
    surviving_records : list[ReferenceRecord]
        Records after applying the resolution policy.
    duplicates_found : int
        Duplicate pairs found.
    comparisons_completed : int
        Pairs actually compared.
    comparisons_total : int
        Pairs planned.
    scorer_errors : int
        Pairs whose scoring raised and were treated as non-duplicates.
    cancelled : bool
        Whether the run stopped on a cancellation request.
    policy : ResolutionPolicy
        Resolution policy applied.
    """

    surviving_records: list[ReferenceRecord]
    duplicates_found: int
    comparisons_completed: int
    comparisons_total: int
    scorer_errors: int = 0
    cancelled: bool = False
    policy: ResolutionPolicy = ResolutionPolicy.COUNT

    def summary(self) -> dict[str, Any]:
        """Counters only (no records), for logs and reports."""
        return {
            "surviving_records": len(self.surviving_records),
            "duplicates_found": self.duplicates_found,
            "comparisons_completed": self.comparisons_completed,
            "comparisons_total": self.comparisons_total,
            "scorer_errors": self.scorer_errors,
            "cancelled": self.cancelled,
            "policy": str(self.policy),
        }


@dataclass(frozen=True, slots=True)
class EndEvent:
    """Terminal event, emitted once and always last.

    Attributes
    ----------
    result : RunResult
        Final (or, when cancelled, partial) result.
    """

    result: RunResult

    @property
    def cancelled(self) -> bool:
        """Whether the run ended on cancellation rather than completion."""
        return self.result.cancelled


Event = ProgressEvent | DuplicatePairEvent | EndEvent


@dataclass
class CancellationToken:
    """Caller-controlled cancellation flag polled by the engine.

    Safe to set from another thread or a signal handler.
    """

    _event: threading.Event = field(default_factory=threading.Event, repr=False)

    def cancel(self) -> None:
        """Request cancellation; observed before the next comparison."""
        self._event.set()

    @property
    def cancelled(self) -> bool:
        """Whether cancellation was requested."""
        return self._event.is_set()
