"""
Shared utilities for scoring many documents at once.

The per-document phase runs on a ThreadPoolExecutor over contiguous row
chunks once the shared corpus statistics are built.

Usage:
    from anomalous_text.ranking_utils import score_rows_parallel
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING
import logging

import numpy as np

from anomalous_text.config import DEFAULT_NUM_WORKERS, MIN_DOCUMENTS_FOR_PARALLEL

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = logging.getLogger(__name__)


# =============================================================================
# Parallel Row Scoring
# =============================================================================


def score_rows_parallel(
    matrix: NDArray[np.float64],
    row_scorer: Callable[[NDArray[np.float64]], NDArray[np.float64]],
    num_workers: int = DEFAULT_NUM_WORKERS,
    min_rows_for_parallel: int = MIN_DOCUMENTS_FOR_PARALLEL,
) -> NDArray[np.float64]:
    """
    Score every row of a matrix, splitting the rows across threads.

    Args:
        matrix: Row-per-document matrix. Must not be written to while scoring.
        row_scorer: Maps a block of rows (k, n_cols) to k scores.
        num_workers: Number of parallel workers
        min_rows_for_parallel: Minimum rows before enabling parallelism

    Returns:
        One score per row, in row order.
    """
    n_rows = matrix.shape[0]
    if n_rows == 0:
        return np.array([], dtype=np.float64)

    # For small matrices, run sequentially
    if n_rows < min_rows_for_parallel or num_workers <= 1:
        logger.debug("Scoring %d rows sequentially", n_rows)
        return np.asarray(row_scorer(matrix), dtype=np.float64)

    bounds = [
        (int(chunk[0]), int(chunk[-1]) + 1)
        for chunk in np.array_split(np.arange(n_rows), num_workers)
        if chunk.size
    ]
    logger.debug("Scoring %d rows in %d chunks on %d workers", n_rows, len(bounds), num_workers)

    def score_chunk(bound: tuple[int, int]) -> NDArray[np.float64]:
        start, stop = bound
        return row_scorer(matrix[start:stop])

    # executor.map preserves chunk order
    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        results = list(executor.map(score_chunk, bounds))

    return np.concatenate(results).astype(np.float64, copy=False)


__all__ = [
    "score_rows_parallel",
]
