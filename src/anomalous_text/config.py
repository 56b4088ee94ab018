"""
Scoring configuration: frequency-rank bucket boundaries and worker settings.

The boundaries partition distinct tokens by global frequency rank. Bucket 0
holds the 100 most frequent tokens, bucket 1 ranks 100-299, and so on; the
last boundary is unbounded and catches the long tail.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
import numbers

from anomalous_text.exceptions import InvalidConfigurationError


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_BUCKET_BOUNDARIES: tuple[float, ...] = (
    100,
    300,
    1_000,
    3_000,
    10_000,
    30_000,
    100_000,
    300_000,
    1_000_000,
    3_000_000,
    10_000_000,
    30_000_000,
    math.inf,
)

# Number of workers for the parallel per-document phase
DEFAULT_NUM_WORKERS = 8

# Minimum documents before enabling parallelism
MIN_DOCUMENTS_FOR_PARALLEL = 10_000


def _is_integer(value) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


def validate_bucket_boundaries(boundaries) -> tuple[float, ...]:
    """
    Check a boundary sequence and return it as a tuple.

    Every boundary but the last must be a positive integer, the last must be
    ``math.inf``, and the sequence must be strictly ascending.

    Raises:
        InvalidConfigurationError: If any of the above does not hold.
    """
    if boundaries is None:
        raise InvalidConfigurationError("Bucket boundaries must not be None.")
    try:
        boundaries = tuple(boundaries)
    except TypeError as e:
        raise InvalidConfigurationError(
            f"Bucket boundaries must be a sequence, got {boundaries!r}."
        ) from e
    if not boundaries:
        raise InvalidConfigurationError("At least one bucket boundary is required.")
    if boundaries[-1] != math.inf:
        raise InvalidConfigurationError(
            f"The last bucket boundary must be math.inf, got {boundaries[-1]!r}."
        )

    # Types first, so the ordering checks below only compare numbers
    for position, boundary in enumerate(boundaries[:-1]):
        if not _is_integer(boundary):
            raise InvalidConfigurationError(
                f"Bucket boundary {position} must be an integer, got {boundary!r}."
            )

    for position, boundary in enumerate(boundaries[:-1]):
        if boundary <= 0:
            raise InvalidConfigurationError(
                f"Bucket boundary {position} must be positive, got {boundary}."
            )
        if boundary >= boundaries[position + 1]:
            raise InvalidConfigurationError(
                f"Bucket boundaries must be strictly ascending: "
                f"{boundary} at {position} >= {boundaries[position + 1]}."
            )
    return boundaries


def _validate_positive_count(name: str, value) -> None:
    if not _is_integer(value):
        raise InvalidConfigurationError(f"{name} must be an integer, got {value!r}.")
    if value < 1:
        raise InvalidConfigurationError(f"{name} must be at least 1, got {value}.")


@dataclass(frozen=True)
class ScorerConfig:
    """
    Settings for one scoring call.

    Args:
        bucket_boundaries: Ascending rank thresholds, last one ``math.inf``.
        num_workers: Threads used for the per-document phase.
        min_documents_for_parallel: Corpora smaller than this are scored sequentially.
    """

    bucket_boundaries: tuple[float, ...] = DEFAULT_BUCKET_BOUNDARIES
    num_workers: int = DEFAULT_NUM_WORKERS
    min_documents_for_parallel: int = MIN_DOCUMENTS_FOR_PARALLEL

    def __post_init__(self):
        object.__setattr__(
            self, "bucket_boundaries", validate_bucket_boundaries(self.bucket_boundaries)
        )
        _validate_positive_count("num_workers", self.num_workers)
        _validate_positive_count("min_documents_for_parallel", self.min_documents_for_parallel)

    @property
    def n_buckets(self) -> int:
        return len(self.bucket_boundaries)
