"""Run identifiers and version lookup for audit logs."""

import importlib.metadata
import secrets
from datetime import UTC, datetime

__all__ = ["generate_run_id", "get_package_version"]


def generate_run_id() -> str:
    """Return a new run identifier.

    The identifier is ``<UTC ISO8601 timestamp>__<8 hex chars>`` so logs from
    several runs appended to one file sort chronologically.
    """
    started = datetime.now(UTC).isoformat().replace("+00:00", "Z")
    return f"{started}__{secrets.token_hex(4)}"


def get_package_version() -> str:
    """Installed refdedupe version, or "unknown" when running from a checkout."""
    try:
        return importlib.metadata.version("refdedupe")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"
