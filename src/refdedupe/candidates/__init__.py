"""Candidate pair generation and opt-in blocking."""

from refdedupe.candidates.blockers import (
    BLOCKING_KEYS,
    BlockingKey,
    doi_key,
    first_author_year_key,
    get_blocking_key,
    title_prefix_key,
)
from refdedupe.candidates.generator import CandidatePlan, plan_candidates

__all__ = [
    # Blocking keys
    "BlockingKey",
    "BLOCKING_KEYS",
    "get_blocking_key",
    "first_author_year_key",
    "title_prefix_key",
    "doi_key",
    # Planning
    "CandidatePlan",
    "plan_candidates",
]
