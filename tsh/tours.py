from __future__ import annotations

import math
import operator
import random
from typing import Iterable, List, NamedTuple, Optional, Sequence, Tuple, TYPE_CHECKING

from .errors import InvalidPathError, NonFiniteCostError
if TYPE_CHECKING:
    from typing_extensions import Self

    from .matrix import DistanceMatrix


__all__ = (
    "RunResult",
    "Tour",
    "normalize_path",
    "path_cost",
)


class RunResult(NamedTuple):
    """The `(path, cost)` pair returned by every heuristic"""

    path: Tuple[int, ...]
    cost: float

    @property
    def closed(self) -> bool:
        return len(self.path) > 1 and self.path[0] == self.path[-1]


def path_cost(matrix: DistanceMatrix, path: Sequence[int], /) -> float:
    """Sum of the arc costs along `path`, including the closing arc iff the path repeats its first city"""
    rows = matrix.rows
    result = 0.0
    for index in range(len(path) - 1):
        result += rows[path[index]][path[index + 1]]

    if not math.isfinite(result):
        raise NonFiniteCostError(result, where="path cost")

    return result


def normalize_path(matrix: DistanceMatrix, path: Sequence[int], /) -> List[int]:
    """Convert `path` to a list of plain `int` city indices, rejecting anything out of range"""
    result: List[int] = []
    for city in path:
        try:
            index = operator.index(city)
        except TypeError:
            raise InvalidPathError(path, f"city {city!r} is not an integer") from None

        if not 0 <= index < matrix.dimension:
            raise InvalidPathError(path, f"city {city!r} is out of range")

        result.append(index)

    return result


class Tour:
    """A mutable tour with incremental cost bookkeeping

    The path is a permutation of a subset of the cities, optionally closed by repeating its first city
    at the end. Refiners mutate instances in place through `reverse` and `insert`, which keep the
    running cost up to date; `result` recomputes the cost from scratch.
    """

    __slots__ = (
        "_cost",
        "matrix",
        "path",
    )
    if TYPE_CHECKING:
        _cost: float
        matrix: DistanceMatrix
        path: List[int]

    def __init__(self, matrix: DistanceMatrix, path: Iterable[int], /, *, cost: Optional[float] = None) -> None:
        self.matrix = matrix
        self.path = list(path)
        self._cost = path_cost(matrix, self.path) if cost is None else cost

    @property
    def closed(self) -> bool:
        return len(self.path) > 1 and self.path[0] == self.path[-1]

    @property
    def cities(self) -> List[int]:
        """The visited cities in order, without the closing repeat"""
        return self.path[:-1] if self.closed else list(self.path)

    def cost(self) -> float:
        return self._cost

    def copy(self) -> Self:
        return self.__class__(self.matrix, self.path, cost=self._cost)

    def reversal_delta(self, i: int, j: int, /) -> float:
        """Cost change of reversing `path[i:j + 1]`, for `0 < i <= j < len(path) - 1`

        The interior arcs are only skipped when the matrix is exactly symmetric.
        """
        if i >= j:
            return 0.0

        rows = self.matrix.rows
        path = self.path
        before, first, last, after = path[i - 1], path[i], path[j], path[j + 1]
        delta = rows[before][last] + rows[first][after] - rows[before][first] - rows[last][after]
        if not self.matrix.exactly_symmetric:
            for k in range(i, j):
                delta += rows[path[k + 1]][path[k]] - rows[path[k]][path[k + 1]]

        return delta

    def reverse(self, i: int, j: int, /, *, delta: Optional[float] = None) -> None:
        """Reverse `path[i:j + 1]` in place

        `delta` is the precomputed cost change, if the caller already knows it.
        """
        if delta is None:
            delta = self.reversal_delta(i, j)

        self.path[i:j + 1] = self.path[j:i - 1 if i > 0 else None:-1]
        self._cost += delta

    def insertion_delta(self, city: int, position: int, /) -> float:
        """Cost change of inserting `city` between `path[position - 1]` and `path[position]`"""
        rows = self.matrix.rows
        before, after = self.path[position - 1], self.path[position]
        return rows[before][city] + rows[city][after] - rows[before][after]

    def insert(self, city: int, position: int, /, *, delta: Optional[float] = None) -> None:
        """Insert `city` at interior index `position`"""
        if delta is None:
            delta = self.insertion_delta(city, position)

        self.path.insert(position, city)
        self._cost += delta

    def result(self) -> RunResult:
        """Freeze this tour into a `RunResult`, recomputing its cost from the path"""
        return RunResult(tuple(self.path), path_cost(self.matrix, self.path))

    def check(self) -> None:
        """Ensure this tour visits every city of the matrix exactly once

        Raises
        -----
        InvalidPathError:
            The path is not a (possibly closed) permutation of all cities
        """
        cities = self.cities
        if sorted(cities) != list(range(self.matrix.dimension)):
            raise InvalidPathError(self.path, f"expected a permutation of 0..{self.matrix.dimension - 1}")

    @classmethod
    def from_path(cls, matrix: DistanceMatrix, path: Sequence[int], /) -> Self:
        """Build a complete tour from a user supplied path, validating it first"""
        tour = cls(matrix, normalize_path(matrix, path))
        tour.check()
        return tour

    @classmethod
    def random(cls, matrix: DistanceMatrix, rng: random.Random, /, *, closed: bool = True) -> Self:
        """A uniformly shuffled tour drawn from `rng`"""
        path = list(range(matrix.dimension))
        rng.shuffle(path)
        if closed:
            path.append(path[0])

        return cls(matrix, path)

    def __len__(self) -> int:
        return len(self.path)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} cost={self._cost} path={self.path!r}>"
