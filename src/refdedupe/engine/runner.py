"""Deduplication engine: lazy, cancellable pairwise comparison.

The engine walks the candidate pairs of a record sequence in a fixed
order (ascending ``i``, then ascending ``j``), scores each pair with every
field scorer, classifies it, and streams events:

    ProgressEvent*  DuplicatePairEvent*  ...  EndEvent

Validation happens eagerly when ``compare`` is called, so an
``InputError`` surfaces before any event. Everything after that is
recoverable: a scorer raising on one pair marks that pair as a
non-duplicate and the run continues.
"""

import asyncio
import time
from collections.abc import AsyncIterator, Callable, Iterable, Iterator, Sequence

from refdedupe.audit.logger import AuditLogger
from refdedupe.candidates import CandidatePlan, plan_candidates
from refdedupe.engine.config import EngineConfig, InputError
from refdedupe.engine.events import (
    CancellationToken,
    DuplicatePairEvent,
    EndEvent,
    Event,
    ProgressEvent,
    RunResult,
)
from refdedupe.models import ReferenceRecord
from refdedupe.resolution import Resolver, create_resolver
from refdedupe.scoring import (
    SCORER_ERROR_REASON,
    DuplicateVerdict,
    FieldScorer,
    PairwiseClassifier,
    build_scorers,
)

STAGE_NAME = "deduplication"


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_records(records: Iterable[ReferenceRecord]) -> list[ReferenceRecord]:
    """Materialize and check the input sequence.

    Raises
    ------
    InputError
        On fewer than 2 records, non-record items or a record object
        appearing twice.
    """
    if isinstance(records, str | bytes) or not isinstance(records, Iterable):
        raise InputError(
            f"records must be a sequence of ReferenceRecord, got {type(records).__name__}"
        )

    records_list = list(records)

    if len(records_list) < 2:
        raise InputError(f"at least 2 records are required, got {len(records_list)}")

    seen: set[int] = set()
    for index, record in enumerate(records_list):
        if not isinstance(record, ReferenceRecord):
            raise InputError(f"item {index} is not a ReferenceRecord: {type(record).__name__}")
        if id(record) in seen:
            raise InputError(f"item {index} is the same object as an earlier record")
        seen.add(id(record))

    return records_list


def _plan(records: list[ReferenceRecord], config: EngineConfig) -> CandidatePlan:
    try:
        return plan_candidates(records, config.blocking_key)  # type: ignore[arg-type]
    except Exception as e:
        raise InputError(f"blocking key failed: {type(e).__name__}: {e}") from e


# ---------------------------------------------------------------------------
# Pair scoring
# ---------------------------------------------------------------------------


def score_pair(
    earlier: ReferenceRecord,
    later: ReferenceRecord,
    scorers: Sequence[FieldScorer],
    classifier: PairwiseClassifier,
) -> DuplicateVerdict:
    """Run every scorer on a pair and classify it.

    Parameters
    ----------
    earlier : ReferenceRecord
        Record with the lower input index.
    later : ReferenceRecord
        Record with the higher input index.
    scorers : Sequence[FieldScorer]
        Scorers in registry order.
    classifier : PairwiseClassifier
        Classifier turning results into a verdict.

    Returns
    -------
    DuplicateVerdict
        Verdict for the pair.

    Raises
    ------
    ValueError
        If a scorer returns a score outside [0, 1]. Any exception raised
        by a scorer propagates.
    """
    results = []
    for scorer in scorers:
        result = scorer(earlier, later)
        if not 0.0 <= result.score <= 1.0:
            raise ValueError(f"{scorer.name} scorer returned {result.score!r} outside [0, 1]")
        results.append(result)
    return classifier.classify(earlier, later, results)


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def compare(
    records: Sequence[ReferenceRecord],
    config: EngineConfig | None = None,
    *,
    cancel_token: CancellationToken | None = None,
    scorers: Sequence[FieldScorer] | None = None,
    logger: AuditLogger | None = None,
) -> Iterator[Event]:
    """Compare all candidate pairs of *records* and stream events.

    Parameters
    ----------
    records : Sequence[ReferenceRecord]
        Records in run order. Owned exclusively by the engine for the
        run: the ``mark`` and ``remove`` policies mutate them in place.
    config : EngineConfig | None, optional
        Run configuration. If None, uses defaults.
    cancel_token : CancellationToken | None, optional
        Polled before every comparison.
    scorers : Sequence[FieldScorer] | None, optional
        Scorer registry override. If None, uses ``build_scorers``.
    logger : AuditLogger | None, optional
        Audit logger for run, pair and error events.

    Returns
    -------
    Iterator[Event]
        Lazy event stream ending with exactly one ``EndEvent``.

    Raises
    ------
    InputError
        Immediately, before any event, on invalid input.

    Examples
    --------
        >>> from refdedupe.engine import EndEvent, EngineConfig, compare
        >>> config = EngineConfig(resolution_policy="remove")
        >>> for event in compare(records, config):
        ...     if isinstance(event, EndEvent):
        ...         print(event.result.duplicates_found)
    """
    if config is None:
        config = EngineConfig()

    records_list = _validate_records(records)
    plan = _plan(records_list, config)

    if scorers is None:
        scorers = build_scorers(config.year_tolerance)

    classifier = PairwiseClassifier(config.weights, config.threshold)
    resolver = create_resolver(config.resolution_policy)

    return _iterate(
        records_list,
        plan,
        tuple(scorers),
        classifier,
        resolver,
        config,
        cancel_token,
        logger,
    )


def _iterate(
    records: list[ReferenceRecord],
    plan: CandidatePlan,
    scorers: tuple[FieldScorer, ...],
    classifier: PairwiseClassifier,
    resolver: Resolver,
    config: EngineConfig,
    cancel_token: CancellationToken | None,
    logger: AuditLogger | None,
) -> Iterator[Event]:
    start = time.perf_counter()
    total = plan.total

    if logger:
        logger.stage_started(STAGE_NAME, expected_records=len(records))
        if plan.blocked:
            logger.blocking_enabled(
                config.blocking_name,
                buckets=len(plan.buckets or {}),
                max_bucket=plan.max_bucket,
                unkeyed_records=plan.unkeyed,
                comparisons_total=total,
                comparisons_all_pairs=plan.size * (plan.size - 1) // 2,
            )

    completed = 0
    pending = 0
    duplicates = 0
    scorer_errors = 0

    def finish(cancelled: bool) -> EndEvent:
        result = RunResult(
            surviving_records=resolver.finalize(records),
            duplicates_found=duplicates,
            comparisons_completed=completed,
            comparisons_total=total,
            scorer_errors=scorer_errors,
            cancelled=cancelled,
            policy=resolver.policy,
        )
        if logger:
            if cancelled:
                logger.run_cancelled(completed, total)
            logger.stage_finished(
                STAGE_NAME,
                duration_seconds=time.perf_counter() - start,
                counters={
                    "comparisons_completed": completed,
                    "comparisons_total": total,
                    "duplicates_found": duplicates,
                    "scorer_errors": scorer_errors,
                    "surviving_records": len(result.surviving_records),
                },
            )
        return EndEvent(result)

    for i, j in plan.pairs():
        if cancel_token is not None and cancel_token.cancelled:
            yield finish(cancelled=True)
            return

        earlier = records[i]
        later = records[j]

        try:
            verdict = score_pair(earlier, later, scorers, classifier)
        except Exception as e:
            scorer_errors += 1
            verdict = DuplicateVerdict(is_duplicate=False, reason=SCORER_ERROR_REASON)
            if logger:
                logger.pair_scorer_error(i, j, e)

        completed += 1
        pending += 1

        if verdict.is_duplicate:
            duplicates += 1
            event = DuplicatePairEvent(
                earlier_index=i,
                later_index=j,
                earlier=earlier,
                later=later,
                verdict=verdict,
            )
            resolver.record(event)
            if logger:
                logger.duplicate_pair(
                    earlier=earlier.label(i),
                    later=later.label(j),
                    reason=verdict.reason,
                    weighted_score=verdict.weighted_score,
                )
            yield event

        if pending >= config.batch_size:
            pending = 0
            yield ProgressEvent(completed=completed, total=total)

    if pending:
        yield ProgressEvent(completed=completed, total=total)

    yield finish(cancelled=False)


def acompare(
    records: Sequence[ReferenceRecord],
    config: EngineConfig | None = None,
    **kwargs: object,
) -> AsyncIterator[Event]:
    """Async variant of ``compare``.

    Yields the same events, handing control back to the event loop after
    every progress batch. Validation is still eager.

    Parameters
    ----------
    records : Sequence[ReferenceRecord]
        Records in run order.
    config : EngineConfig | None, optional
        Run configuration.
    **kwargs
        Forwarded to ``compare`` (``cancel_token``, ``scorers``, ``logger``).

    Returns
    -------
    AsyncIterator[Event]
        Async event stream ending with exactly one ``EndEvent``.
    """
    events = compare(records, config, **kwargs)  # type: ignore[arg-type]
    return _aiterate(events)


async def _aiterate(events: Iterator[Event]) -> AsyncIterator[Event]:
    for event in events:
        yield event
        if isinstance(event, ProgressEvent):
            await asyncio.sleep(0)


def run(
    records: Sequence[ReferenceRecord],
    config: EngineConfig | None = None,
    *,
    on_event: Callable[[Event], None] | None = None,
    **kwargs: object,
) -> RunResult:
    """Run the engine to completion and return the terminal result.

    Parameters
    ----------
    records : Sequence[ReferenceRecord]
        Records in run order.
    config : EngineConfig | None, optional
        Run configuration.
    on_event : Callable[[Event], None] | None, optional
        Callback invoked for every event, terminal one included.
    **kwargs
        Forwarded to ``compare``.

    Returns
    -------
    RunResult
        Result carried by the ``EndEvent`` (partial if cancelled).
    """
    for event in compare(records, config, **kwargs):  # type: ignore[arg-type]
        if on_event is not None:
            on_event(event)
        if isinstance(event, EndEvent):
            return event.result
    raise RuntimeError("engine stopped without an end event")
