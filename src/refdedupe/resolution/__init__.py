"""Resolution policies for confirmed duplicate pairs."""

from refdedupe.resolution.policies import (
    DUPE_CAPTION_PREFIX,
    CountResolver,
    MarkResolver,
    RemoveResolver,
    ResolutionPolicy,
    Resolver,
    create_resolver,
)

__all__ = [
    "ResolutionPolicy",
    "Resolver",
    "CountResolver",
    "MarkResolver",
    "RemoveResolver",
    "create_resolver",
    "DUPE_CAPTION_PREFIX",
]
