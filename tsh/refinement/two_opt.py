from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..matrix import MatrixLike, validate
from ..tours import RunResult, Tour, normalize_path


__all__ = (
    "two_opt",
    "two_opt_inplace",
)
logger = logging.getLogger(__name__)


def two_opt_inplace(tour: Tour, /, *, max_iterations: Optional[int] = None) -> int:
    """Apply improving segment reversals to `tour` until none is left

    Both endpoints of the path stay in place, so open paths keep their endpoints and closed tours
    keep their starting city. Each scan walks the first reversal index `i` upward and, for every `i`,
    applies the first reversal `path[i:j + 1]` that lowers the cost by more than the matrix tolerance.
    The search stops after a scan without any reversal, or after `max_iterations` scans.

    Returns
    -----
    The number of scans performed
    """
    matrix = tour.matrix
    rows = matrix.rows
    symmetric = matrix.exactly_symmetric
    epsilon = matrix.epsilon
    path = tour.path
    end = len(path) - 2

    scans = 0
    improved = True
    while improved and (max_iterations is None or scans < max_iterations):
        improved = False
        scans += 1
        for i in range(1, end):
            before, first = path[i - 1], path[i]
            removed = rows[before][first]

            # Interior arcs of path[i:j + 1], walked forward and backward
            forward = backward = 0.0
            for j in range(i + 1, end + 1):
                previous, last, after = path[j - 1], path[j], path[j + 1]
                if not symmetric:
                    forward += rows[previous][last]
                    backward += rows[last][previous]

                delta = rows[before][last] + rows[first][after] - removed - rows[last][after] + backward - forward
                if delta < -epsilon:
                    tour.reverse(i, j, delta=delta)
                    improved = True
                    break

    logger.debug("2-opt finished after %d scan(s) at cost %s", scans, tour.cost())
    return scans


def two_opt(matrix: MatrixLike, path: Sequence[int], /, *, max_iterations: Optional[int] = None) -> RunResult:
    """Improve `path` by 2-opt switches (reversing part of the path) until doing so no longer reduces the cost

    On large instances this refinement can be slow (each scan is quadratic in the number of cities,
    and many scans may be needed), but it is highly recommended on small and medium ones.

    Parameters
    -----
    matrix:
        The distance matrix
    path:
        An open path or a closed tour (first city repeated at the end); its endpoints are kept
    max_iterations:
        The maximum number of scans, or `None` to run until a local optimum

    Returns
    -----
    The improved `(path, cost)`, whose cost never exceeds the cost of the input path
    """
    matrix = validate(matrix)
    tour = Tour(matrix, normalize_path(matrix, path))
    two_opt_inplace(tour, max_iterations=max_iterations)
    return tour.result()
