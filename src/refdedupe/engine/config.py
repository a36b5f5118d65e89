"""Engine configuration and input validation."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from refdedupe.candidates import BlockingKey, get_blocking_key
from refdedupe.resolution import ResolutionPolicy
from refdedupe.scoring import DEFAULT_THRESHOLD, DEFAULT_WEIGHTS, DIMENSIONS


class InputError(ValueError):
    """Raised before a run starts when the input or configuration is invalid."""


@dataclass
class EngineConfig:
    """Configuration for one deduplication run.

    Validated once at construction; the engine never re-reads ambient
    state mid-run.

    Attributes
    ----------
    weights : dict[str, float]
        Weight per dimension in [0, 1], merged over ``DEFAULT_WEIGHTS``.
    threshold : float
        Minimum weighted score for a duplicate, in [0, 1] (default: 0.75).
    year_tolerance : int
        Maximum year difference still scored as equal (default: 0).
    blocking_key : Callable | str | None
        Opt-in candidate pruning: a function ``record -> str | None`` or a
        registered key name ('first_author_year', 'title_prefix', 'doi').
        None compares all pairs.
    batch_size : int
        Comparisons between two progress events (default: 1).
    resolution_policy : ResolutionPolicy
        What to do with duplicates: 'count', 'mark' or 'remove'.
    """

    weights: dict[str, float] = field(default_factory=dict)
    threshold: float = DEFAULT_THRESHOLD
    year_tolerance: int = 0
    blocking_key: BlockingKey | str | None = None
    batch_size: int = 1
    resolution_policy: ResolutionPolicy | str = ResolutionPolicy.COUNT

    def __post_init__(self) -> None:
        """Merge defaults and validate."""
        self.weights = _validate_weights(self.weights)

        if not _is_number(self.threshold) or not 0.0 <= self.threshold <= 1.0:
            raise InputError(f"threshold must be in [0, 1], got {self.threshold!r}")

        if not _is_int(self.year_tolerance) or self.year_tolerance < 0:
            raise InputError(f"year_tolerance must be an int >= 0, got {self.year_tolerance!r}")

        if not _is_int(self.batch_size) or self.batch_size < 1:
            raise InputError(f"batch_size must be an int >= 1, got {self.batch_size!r}")

        try:
            self.resolution_policy = ResolutionPolicy(self.resolution_policy)
        except ValueError:
            choices = ", ".join(p.value for p in ResolutionPolicy)
            raise InputError(
                f"resolution_policy must be one of {choices}, got {self.resolution_policy!r}"
            ) from None

        if isinstance(self.blocking_key, str):
            try:
                self.blocking_key = get_blocking_key(self.blocking_key)
            except ValueError as e:
                raise InputError(str(e)) from None
        elif self.blocking_key is not None and not callable(self.blocking_key):
            raise InputError("blocking_key must be callable, a registered name or None")

    @property
    def blocking_name(self) -> str | None:
        """Readable name of the blocking key, for logs."""
        if self.blocking_key is None:
            return None
        return getattr(self.blocking_key, "__name__", type(self.blocking_key).__name__)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "weights": dict(self.weights),
            "threshold": self.threshold,
            "year_tolerance": self.year_tolerance,
            "blocking_key": self.blocking_name,
            "batch_size": self.batch_size,
            "resolution_policy": str(self.resolution_policy),
        }


def _is_number(value: object) -> bool:
    return isinstance(value, int | float) and not isinstance(value, bool)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _validate_weights(weights: Mapping[str, float] | None) -> dict[str, float]:
    if weights is None:
        weights = {}
    if not isinstance(weights, Mapping):
        raise InputError(f"weights must be a mapping, got {type(weights).__name__}")

    for name, value in weights.items():
        if name not in DIMENSIONS:
            raise InputError(f"Unknown weight dimension: {name!r}. Known: {', '.join(DIMENSIONS)}")
        if not _is_number(value) or not 0.0 <= value <= 1.0:
            raise InputError(f"weight for {name} must be in [0, 1], got {value!r}")

    merged = {**DEFAULT_WEIGHTS, **{k: float(v) for k, v in weights.items()}}
    if not any(v > 0 for k, v in merged.items() if k != "abstract"):
        raise InputError("at least one of title, authors, year, doi must have a positive weight")
    return merged
