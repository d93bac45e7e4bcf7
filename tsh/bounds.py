from __future__ import annotations

import logging
from typing import Iterable, Union

import numpy as np
import numpy.typing as npt
from tqdm import tqdm

from .errors import UnsupportedBoundError
from .matrix import MatrixLike, validate


__all__ = (
    "lower_bound",
    "vertexwise_bound",
    "hk_inspired_bound",
)
logger = logging.getLogger(__name__)


def _off_diagonal(array: npt.NDArray[np.float64], /) -> npt.NDArray[np.float64]:
    result = array.copy()
    np.fill_diagonal(result, np.inf)
    return result


def _minimum_spanning_tree_cost(weights: npt.NDArray[np.float64], /) -> float:
    """Total weight of a minimum spanning tree of the complete graph on `weights` (dense Prim)"""
    # scipy.sparse.csgraph reads zero weights as missing edges, which would drop zero-cost arcs
    n = weights.shape[0]
    if n < 2:
        return 0.0

    in_tree = np.zeros(n, dtype=bool)
    in_tree[0] = True
    connection = weights[0].copy()
    total = 0.0
    for _ in range(n - 1):
        candidates = np.where(in_tree, np.inf, connection)
        vertex = int(np.argmin(candidates))
        total += float(candidates[vertex])
        in_tree[vertex] = True
        np.minimum(connection, weights[vertex], out=connection)

    return total


def vertexwise_bound(matrix: MatrixLike) -> float:
    """A fast, typically loose, lower bound on the optimal closed tour cost

    Every city must be left once and entered once, so both the sum of the cheapest outgoing arcs and
    the sum of the cheapest incoming arcs bound the tour cost. On symmetric instances with at least
    3 cities, half the sum over cities of their two cheapest incident edges is a bound as well. The
    largest applicable bound is returned. Valid for any matrix, for closed tours only.
    """
    matrix = validate(matrix)
    n = matrix.dimension
    if n == 1:
        return min(0.0, matrix.rows[0][0])

    arcs = _off_diagonal(matrix.array)
    bound = max(float(arcs.min(axis=1).sum()), float(arcs.min(axis=0).sum()))
    if n >= 3 and matrix.is_symmetric():
        cheapest_two = np.partition(arcs, 1, axis=1)[:, :2]
        bound = max(bound, float(cheapest_two.sum()) / 2)

    return bound


def hk_inspired_bound(matrix: MatrixLike, *, force: bool = False, use_tqdm: bool = False) -> float:
    """A lower bound inspired by Held-Karp 1-trees

    For each city `v`, a tour is a Hamiltonian path through the other cities (no cheaper than their
    minimum spanning tree) plus two edges at `v` (no cheaper than the two cheapest edges at `v`).
    The best such bound over every `v` is returned, or the vertex-wise bound if that is larger. This
    is simpler and less tight than proper Held-Karp bounds, and requires `n` spanning trees.

    Parameters
    -----
    matrix:
        The distance matrix
    force:
        Compute the bound even if the matrix is asymmetric; each edge then weighs the cheaper of its
        two arc directions
    use_tqdm:
        Whether to display the progress bar

    Raises
    -----
    UnsupportedBoundError:
        The matrix is asymmetric and `force` is not set
    """
    matrix = validate(matrix)
    if not force and not matrix.is_symmetric():
        raise UnsupportedBoundError("hk_inspired_bound")

    n = matrix.dimension
    bound = vertexwise_bound(matrix)
    if n < 3:
        return bound

    weights = np.minimum(matrix.array, matrix.array.T)
    everything = np.arange(n)

    vertices: Union[Iterable[int], tqdm[int]] = range(n)
    if use_tqdm:
        vertices = tqdm(vertices, desc="Spanning tree bound", ascii=" █", colour="red")

    for vertex in vertices:
        others = everything[everything != vertex]
        tree = _minimum_spanning_tree_cost(weights[np.ix_(others, others)])
        edges = np.partition(weights[vertex, others], 1)[:2]
        bound = max(bound, tree + float(edges.sum()))

    return bound


def lower_bound(matrix: MatrixLike) -> float:
    """Lower bound the cost of the optimal closed tour

    The bound only holds for closed tours: an open path skips the closing arc and may cost less.

    Uses `hk_inspired_bound` on symmetric instances, where spanning tree bounds apply, and the
    looser `vertexwise_bound` otherwise. To use the spanning tree bound anyway, e.g. on
    near-symmetric instances, call `hk_inspired_bound(matrix, force=True)`.
    """
    matrix = validate(matrix)
    if matrix.is_symmetric():
        return hk_inspired_bound(matrix)

    logger.info("Asymmetric matrix, falling back to the vertex-wise bound")
    return vertexwise_bound(matrix)
