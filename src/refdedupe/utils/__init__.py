"""Common utility functions for refdedupe."""

from refdedupe.utils.timestamps import get_iso_timestamp

__all__ = ["get_iso_timestamp"]
