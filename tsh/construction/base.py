from __future__ import annotations

import logging
import math
import random
from typing import Optional, Tuple

from ..matrix import DistanceMatrix
from ..refinement import two_opt_inplace
from ..tours import RunResult, Tour, normalize_path
from ..utils import resolve_rng


__all__ = (
    "choose_first_city",
    "cheapest_position",
    "finalize",
)
logger = logging.getLogger(__name__)


def choose_first_city(matrix: DistanceMatrix, first_city: Optional[int], rng: Optional[random.Random], /) -> int:
    """Return `first_city` after a range check, or a uniformly random city drawn from `rng`"""
    n = matrix.dimension
    if first_city is None:
        return resolve_rng(rng).randrange(n)

    return normalize_path(matrix, (first_city,))[0]


def cheapest_position(tour: Tour, city: int, /) -> Tuple[int, float]:
    """The interior index where inserting `city` increases the cost the least, ties to the first index"""
    rows = tour.matrix.rows
    path = tour.path
    position, cost = -1, math.inf
    for index in range(1, len(path)):
        before, after = path[index - 1], path[index]
        delta = rows[before][city] + rows[city][after] - rows[before][after]
        if delta < cost:
            position, cost = index, delta

    return position, cost


def finalize(tour: Tour, /, *, do2opt: bool, heuristic: str) -> RunResult:
    if do2opt:
        two_opt_inplace(tour)

    result = tour.result()
    logger.debug("%s built a tour of %d cities with cost %s", heuristic, len(tour.cities), result.cost)
    return result
