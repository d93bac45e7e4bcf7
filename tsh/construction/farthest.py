from __future__ import annotations

import math
import random
from typing import Optional

from .base import cheapest_position, choose_first_city, finalize
from ..matrix import MatrixLike, validate
from ..tours import RunResult, Tour


__all__ = ("farthest_insertion",)


def farthest_insertion(
    matrix: MatrixLike,
    *,
    first_city: Optional[int] = None,
    do2opt: bool = True,
    rng: Optional[random.Random] = None,
) -> RunResult:
    """Generate a closed tour using the farthest insertion strategy

    Starting from the loop `[first_city, first_city]`, repeatedly take the unvisited city farthest
    from the tour and insert it where it increases the cost the least. The distance between two
    cities is the mean of both arc directions, and the distance from a city to the tour is the
    minimum over the cities already in the tour.

    Parameters
    -----
    matrix:
        The distance matrix
    first_city:
        The city to begin the path on, or `None` to pick it at random from `rng`
    do2opt:
        Whether to improve the path by 2-opt switches
    rng:
        The random source for the first city

    Returns
    -----
    The `(path, cost)` found
    """
    matrix = validate(matrix)
    rows = matrix.rows
    n = matrix.dimension
    first = choose_first_city(matrix, first_city, rng)

    tour = Tour(matrix, [first, first])
    in_tour = [False] * n
    in_tour[first] = True
    to_tour = [(rows[first][city] + rows[city][first]) / 2 for city in range(n)]

    for _ in range(n - 1):
        farthest, distance = -1, -math.inf
        for city in range(n):
            if not in_tour[city] and to_tour[city] > distance:
                farthest, distance = city, to_tour[city]

        position, delta = cheapest_position(tour, farthest)
        tour.insert(farthest, position, delta=delta)
        in_tour[farthest] = True

        for city in range(n):
            if not in_tour[city]:
                to_tour[city] = min(to_tour[city], (rows[farthest][city] + rows[city][farthest]) / 2)

    return finalize(tour, do2opt=do2opt, heuristic="Farthest insertion")
