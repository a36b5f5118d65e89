"""Event record written to the JSONL audit log."""

from dataclasses import dataclass
from typing import Any

__all__ = ["LogEvent", "LOG_LEVELS"]

LOG_LEVELS = ("DEBUG", "INFO", "WARN", "ERROR")


@dataclass
class LogEvent:
    """One line of the audit log.

    Attributes
    ----------
    ts : str
        UTC timestamp, ISO8601 with microseconds.
    run_id : str
        Run the event belongs to.
    level : str
        One of ``LOG_LEVELS``.
    event : str
        Event name, e.g. "duplicate_pair".
    data : dict[str, Any]
        Event payload.
    stage : str | None
        Stage active when the event was written.
    rid : str | None
        Label of the record concerned, for per-record events.
    """

    ts: str
    run_id: str
    level: str
    event: str
    data: dict[str, Any]
    stage: str | None = None
    rid: str | None = None
