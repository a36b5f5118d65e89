"""Deduplication engine.

This package provides the engine entry points (``compare``, ``acompare``,
``run``), their configuration and the event types they emit.
"""

from refdedupe.engine.config import EngineConfig, InputError
from refdedupe.engine.events import (
    CancellationToken,
    DuplicatePairEvent,
    EndEvent,
    Event,
    ProgressEvent,
    RunResult,
)
from refdedupe.engine.runner import acompare, compare, run, score_pair

__all__ = [
    "EngineConfig",
    "InputError",
    "CancellationToken",
    "Event",
    "ProgressEvent",
    "DuplicatePairEvent",
    "EndEvent",
    "RunResult",
    "compare",
    "acompare",
    "run",
    "score_pair",
]
