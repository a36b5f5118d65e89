"""JSONL audit trail for deduplication runs.

Every event is one JSON object per line, appended and flushed as soon as it
is written, so a run interrupted mid-way still leaves a readable log.
"""

import json
from dataclasses import asdict
from pathlib import Path
from typing import Any

from refdedupe.audit.models import LOG_LEVELS, LogEvent
from refdedupe.utils import get_iso_timestamp

__all__ = ["AuditLogger"]


class AuditLogger:
    """Append-only JSONL event writer for one run.

    The log file stays open for the logger's lifetime; use it as a context
    manager or call ``close()``.

    Attributes
    ----------
    run_id : str
        Identifier copied into every event.
    log_path : Path
        Destination JSONL file (parents are created, content is appended).
    current_stage : str | None
        Stage attached to events that do not name one.
    """

    def __init__(self, run_id: str, log_path: str | Path) -> None:
        self.run_id = run_id
        self.log_path = Path(log_path)
        self.current_stage: str | None = None

        self.log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = self.log_path.open("a", encoding="utf-8")

    def __enter__(self) -> "AuditLogger":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the log file; safe to call twice."""
        if not self._file.closed:
            self._file.flush()
            self._file.close()

    def set_stage(self, stage: str | None) -> None:
        """Attach *stage* to subsequent events (None to clear)."""
        self.current_stage = stage

    def event(
        self,
        event_type: str,
        data: dict[str, Any] | None = None,
        level: str = "INFO",
        stage: str | None = None,
        rid: str | None = None,
    ) -> None:
        """Append one event.

        Parameters
        ----------
        event_type : str
            Event name (e.g. "duplicate_pair").
        data : dict[str, Any] | None, optional
            JSON-serializable payload.
        level : str, optional
            One of ``LOG_LEVELS``, by default "INFO".
        stage : str | None, optional
            Overrides ``current_stage`` for this event.
        rid : str | None, optional
            Label of the record the event is about.

        Raises
        ------
        ValueError
            If *level* is not one of ``LOG_LEVELS``.
        """
        if level not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {level}")

        self._write(
            LogEvent(
                ts=get_iso_timestamp(),
                run_id=self.run_id,
                level=level,
                event=event_type,
                data=data or {},
                stage=self.current_stage if stage is None else stage,
                rid=rid,
            )
        )

    def _write(self, log_event: LogEvent) -> None:
        self._file.write(json.dumps(asdict(log_event), ensure_ascii=False, separators=(",", ":")))
        self._file.write("\n")
        self._file.flush()

    # -----------------------------------------------------------------------
    # Run lifecycle
    # -----------------------------------------------------------------------

    def run_started(self, command: list[str], parameters: dict[str, Any]) -> None:
        """Log the command line and the validated engine configuration."""
        self.event("run_started", data={"command": command, "parameters": parameters})

    def run_finished(
        self,
        status: str,
        duration_seconds: float,
        records_processed: int | None = None,
    ) -> None:
        """Log the end of a run.

        Parameters
        ----------
        status : str
            "success", "cancelled" or "failed".
        duration_seconds : float
            Wall time of the whole run.
        records_processed : int | None, optional
            Number of input records.
        """
        data: dict[str, Any] = {"status": status, "duration_seconds": duration_seconds}
        if records_processed is not None:
            data["records_processed"] = records_processed
        self.event("run_finished", data=data)

    def stage_started(self, stage: str, expected_records: int | None = None) -> None:
        """Enter *stage* and log it."""
        self.set_stage(stage)
        data = {} if expected_records is None else {"expected_records": expected_records}
        self.event("stage_started", data=data, stage=stage)

    def stage_finished(
        self,
        stage: str,
        duration_seconds: float,
        counters: dict[str, int] | None = None,
    ) -> None:
        """Log the end of *stage* with its counters."""
        data: dict[str, Any] = {"duration_seconds": duration_seconds}
        if counters:
            data["counters"] = counters
        self.event("stage_finished", data=data, stage=stage)

    # -----------------------------------------------------------------------
    # Deduplication events
    # -----------------------------------------------------------------------

    def blocking_enabled(self, blocking_key: str | None, **stats: int) -> None:
        """Warn that candidate pruning is active and may lower recall.

        Parameters
        ----------
        blocking_key : str | None
            Name of the blocking key function.
        **stats
            Planning statistics (bucket counts, comparisons saved).
        """
        self.event("blocking_enabled", data={"blocking_key": blocking_key, **stats}, level="WARN")

    def duplicate_pair(
        self,
        earlier: str,
        later: str,
        reason: str,
        weighted_score: float | None = None,
    ) -> None:
        """Log a confirmed duplicate pair.

        Parameters
        ----------
        earlier : str
            Label of the record that is kept as the original.
        later : str
            Label of the duplicate; stored as the event ``rid``.
        reason : str
            Classifier explanation.
        weighted_score : float | None, optional
            Weighted classifier score (absent for DOI matches).
        """
        data: dict[str, Any] = {"earlier": earlier, "reason": reason}
        if weighted_score is not None:
            data["weighted_score"] = round(weighted_score, 6)
        self.event("duplicate_pair", data=data, rid=later)

    def pair_scorer_error(self, earlier_index: int, later_index: int, exc: BaseException) -> None:
        """Warn that scoring one pair failed and the pair was skipped."""
        self.event(
            "pair_scorer_error",
            data={
                "earlier_index": earlier_index,
                "later_index": later_index,
                "exception_class": type(exc).__name__,
                "message": str(exc),
            },
            level="WARN",
        )

    def run_cancelled(self, comparisons_completed: int, comparisons_total: int) -> None:
        """Warn that the run stopped early on request."""
        self.event(
            "run_cancelled",
            data={
                "comparisons_completed": comparisons_completed,
                "comparisons_total": comparisons_total,
            },
            level="WARN",
        )

    def error(
        self,
        exception_class: str,
        message: str,
        stage: str | None = None,
        rid: str | None = None,
        traceback: str | None = None,
    ) -> None:
        """Log a fatal error.

        Parameters
        ----------
        exception_class : str
            Name of the exception class.
        message : str
            Exception message.
        stage : str | None, optional
            Stage where it happened.
        rid : str | None, optional
            Record label, if the error concerns one record.
        traceback : str | None, optional
            Formatted traceback, when available.
        """
        data: dict[str, Any] = {"exception_class": exception_class, "message": message}
        if traceback is not None:
            data["traceback"] = traceback
        self.event("error", data=data, stage=stage, rid=rid, level="ERROR")
