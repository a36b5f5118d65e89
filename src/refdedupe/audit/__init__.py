"""Audit logging subsystem for refdedupe.

Main Components
---------------
- AuditLogger: JSONL event logger
- generate_run_id: unique run identifiers for log correlation
"""

from refdedupe.audit.helpers import generate_run_id, get_package_version
from refdedupe.audit.logger import AuditLogger
from refdedupe.audit.models import LogEvent

__all__ = [
    "AuditLogger",
    "LogEvent",
    "generate_run_id",
    "get_package_version",
]
