"""Core data models for refdedupe."""

from refdedupe.models.records import ReferenceRecord

__all__ = ["ReferenceRecord"]
