from __future__ import annotations

import itertools
import math
from typing import Callable, List, Sequence

import numpy as np
import pytest

from tsh import RunResult


Matrix = List[List[float]]


@pytest.fixture
def square() -> Matrix:
    # Corners of the unit square, deliberately not listed in cyclic order
    points = [(0.0, 0.0), (1.0, 1.0), (1.0, 0.0), (0.0, 1.0)]
    return [[math.dist(p, q) for q in points] for p in points]


@pytest.fixture
def triangle() -> Matrix:
    return [
        [0.0, 1.0, 1.0],
        [1.0, 0.0, 1.0],
        [1.0, 1.0, 0.0],
    ]


@pytest.fixture
def euclidean() -> Callable[[int, int], Matrix]:
    def generate(n: int, seed: int) -> Matrix:
        points = np.random.default_rng(seed).random((n, 2))
        distances = np.sqrt(((points[:, None, :] - points[None, :, :]) ** 2).sum(axis=-1))
        return distances.tolist()

    return generate


@pytest.fixture
def asymmetric() -> Callable[..., Matrix]:
    def generate(n: int, seed: int, *, low: float = 1.0, high: float = 10.0) -> Matrix:
        distances = np.random.default_rng(seed).uniform(low, high, (n, n))
        np.fill_diagonal(distances, 0.0)
        return distances.tolist()

    return generate


@pytest.fixture
def brute_force() -> Callable[[Matrix], float]:
    def optimum(matrix: Matrix) -> float:
        n = len(matrix)
        best = math.inf
        for permutation in itertools.permutations(range(1, n)):
            path = (0, *permutation, 0)
            best = min(best, sum(matrix[a][b] for a, b in zip(path, path[1:])))

        return best

    return optimum


@pytest.fixture
def check_tour() -> Callable[..., None]:
    def check(result: RunResult, matrix: Sequence[Sequence[float]], *, closed: bool = True) -> None:
        n = len(matrix)
        path = list(result.path)
        if closed:
            assert len(path) == n + 1
            assert path[0] == path[-1]
            path.pop()
        else:
            assert len(path) == n

        assert sorted(path) == list(range(n))
        assert math.isclose(result.cost, sum(matrix[a][b] for a, b in zip(result.path, result.path[1:])), abs_tol=1e-9)

    return check
