from __future__ import annotations

import math
import random
from typing import Optional, Sequence

from .base import choose_first_city, finalize
from ..errors import InvalidPathError
from ..matrix import MatrixLike, validate
from ..tours import RunResult, Tour, normalize_path


__all__ = ("cheapest_insertion",)


def cheapest_insertion(
    matrix: MatrixLike,
    init_path: Optional[Sequence[int]] = None,
    *,
    first_city: Optional[int] = None,
    do2opt: bool = True,
    rng: Optional[random.Random] = None,
) -> RunResult:
    """Complete a tour by repeatedly doing the cheapest insertion

    Every step tests each remaining city at each interior position of the current path and applies
    the cheapest insertion (ties going to the lowest city, then to the first position). This is the
    naive O(n^3) algorithm. Insertions are always in the interior of the current path, so this
    heuristic also completes non-closed paths.

    Parameters
    -----
    matrix:
        The distance matrix
    init_path:
        The initial path, of length at least 2; `[i, i]` corresponds to starting with a loop at city
        `i`. If `None`, start with the loop `[first_city, first_city]`.
    first_city:
        The city of the initial loop when `init_path` is `None`, or `None` to pick it at random
    do2opt:
        Whether to improve the path by 2-opt switches
    rng:
        The random source for the first city

    Returns
    -----
    The `(path, cost)` found

    Raises
    -----
    InvalidPathError:
        `init_path` is shorter than 2, has out-of-range cities or visits a city twice
    """
    matrix = validate(matrix)
    rows = matrix.rows
    if init_path is None:
        first = choose_first_city(matrix, first_city, rng)
        path = [first, first]

    else:
        if len(init_path) < 2:
            raise InvalidPathError(init_path, "initial path must have length at least 2")

        path = normalize_path(matrix, init_path)
        visited = path[:-1] if path[0] == path[-1] else path
        if len(set(visited)) != len(visited):
            raise InvalidPathError(init_path, "a city appears more than once")

    tour = Tour(matrix, path)
    path = tour.path
    remaining = sorted(set(range(matrix.dimension)).difference(path))
    while len(remaining) > 0:
        best_city, best_position, best_delta = -1, -1, math.inf
        for city in remaining:
            for position in range(1, len(path)):
                before, after = path[position - 1], path[position]
                delta = rows[before][city] + rows[city][after] - rows[before][after]
                if delta < best_delta:
                    best_city, best_position, best_delta = city, position, delta

        tour.insert(best_city, best_position, delta=best_delta)
        remaining.remove(best_city)

    return finalize(tour, do2opt=do2opt, heuristic="Cheapest insertion")
