from __future__ import annotations

import math
import random
from typing import Optional

from .base import choose_first_city, finalize
from ..matrix import MatrixLike, validate
from ..tours import RunResult, Tour


__all__ = ("nearest_neighbor",)


def nearest_neighbor(
    matrix: MatrixLike,
    *,
    first_city: Optional[int] = None,
    closepath: bool = True,
    do2opt: bool = True,
    rng: Optional[random.Random] = None,
) -> RunResult:
    """Approximately solve a TSP using the nearest neighbor heuristic

    From the current city, always move to the cheapest unvisited city, ties going to the lowest index.
    The matrix needn't be symmetric and can contain negative values.

    Parameters
    -----
    matrix:
        The distance matrix, `matrix[i][j]` being the cost of travelling from city `i` to city `j`
    first_city:
        The city to begin the path on, or `None` to pick it at random from `rng`
    closepath:
        Whether to return to the first city; if so, the first city appears first and last in the path
        and the closing arc is included in the cost
    do2opt:
        Whether to refine the path by 2-opt switches
    rng:
        The random source for the first city

    Returns
    -----
    The `(path, cost)` found
    """
    matrix = validate(matrix)
    rows = matrix.rows
    n = matrix.dimension
    current = choose_first_city(matrix, first_city, rng)

    path = [current]
    visited = [False] * n
    visited[current] = True
    for _ in range(n - 1):
        row = rows[current]
        current, cost = -1, math.inf
        for city in range(n):
            if not visited[city] and row[city] < cost:
                current, cost = city, row[city]

        path.append(current)
        visited[current] = True

    if closepath:
        path.append(path[0])

    return finalize(Tour(matrix, path), do2opt=do2opt, heuristic="Nearest neighbor")
