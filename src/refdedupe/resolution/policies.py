"""Resolution policies applied to confirmed duplicate pairs.

A policy is chosen before a run and receives every duplicate pair in
emission order. It is the only writer of record mutations during a run:

- ``count``: no mutation; survivors are the input unchanged.
- ``mark``: annotate the later record's caption with the earlier
  record's identifier; nothing is removed.
- ``remove``: flag the later record as deleted; survivors are filtered
  in one pass at the end.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol

from refdedupe.models import ReferenceRecord

if TYPE_CHECKING:
    from refdedupe.engine.events import DuplicatePairEvent

DUPE_CAPTION_PREFIX = "DUPE OF"


class ResolutionPolicy(StrEnum):
    """Available resolution policies."""

    COUNT = "count"
    MARK = "mark"
    REMOVE = "remove"


class Resolver(Protocol):
    """Structural protocol every resolution policy satisfies."""

    policy: ResolutionPolicy

    def record(self, event: DuplicatePairEvent) -> None:
        """Apply the policy to one confirmed duplicate pair."""
        ...

    def finalize(self, records: Sequence[ReferenceRecord]) -> list[ReferenceRecord]:
        """Return the surviving records once all pairs are recorded."""
        ...


class CountResolver:
    """Count duplicates without touching the records."""

    policy = ResolutionPolicy.COUNT

    def record(self, event: DuplicatePairEvent) -> None:
        """Nothing to apply; the engine counts pairs itself."""

    def finalize(self, records: Sequence[ReferenceRecord]) -> list[ReferenceRecord]:
        """Return the input unchanged."""
        return list(records)


class MarkResolver:
    """Caption later records with the identifier of their earlier match.

    A record matched by several earlier records keeps the first caption
    written, i.e. the one pointing at the lowest-index match.
    """

    policy = ResolutionPolicy.MARK

    def __init__(self) -> None:
        self._marked: set[int] = set()

    def record(self, event: DuplicatePairEvent) -> None:
        """Caption ``event.later`` as a duplicate of ``event.earlier``."""
        if id(event.later) in self._marked:
            return
        self._marked.add(id(event.later))
        label = event.earlier.label(event.earlier_index)
        event.later.caption = f"{DUPE_CAPTION_PREFIX} {label}"

    def finalize(self, records: Sequence[ReferenceRecord]) -> list[ReferenceRecord]:
        """Return the input with captions applied, same length and order."""
        return list(records)


class RemoveResolver:
    """Flag later records as deleted and filter them at the end.

    The flag is OR'd: flagging twice has no additional effect, and a
    flagged record still takes part in later comparisons so that the set
    of pairs does not depend on the policy. Only records flagged during
    this run are filtered; a ``deleted`` flag carried in by the input
    (e.g. from a JSON library written by an earlier run) is left alone.
    """

    policy = ResolutionPolicy.REMOVE

    def __init__(self) -> None:
        self._flagged: set[int] = set()

    def record(self, event: DuplicatePairEvent) -> None:
        """Flag ``event.later`` as deleted."""
        event.later.deleted = True
        self._flagged.add(id(event.later))

    def finalize(self, records: Sequence[ReferenceRecord]) -> list[ReferenceRecord]:
        """Return records not flagged by this resolver, in original order."""
        return [r for r in records if id(r) not in self._flagged]


_RESOLVERS: dict[ResolutionPolicy, type[CountResolver | MarkResolver | RemoveResolver]] = {
    ResolutionPolicy.COUNT: CountResolver,
    ResolutionPolicy.MARK: MarkResolver,
    ResolutionPolicy.REMOVE: RemoveResolver,
}


def create_resolver(policy: ResolutionPolicy | str) -> Resolver:
    """Create a fresh resolver for one run.

    Parameters
    ----------
    policy : ResolutionPolicy | str
        Policy name.

    Returns
    -------
    Resolver
        New resolver instance (resolvers hold per-run state).

    Raises
    ------
    ValueError
        If *policy* is not a known policy.
    """
    return _RESOLVERS[ResolutionPolicy(policy)]()
