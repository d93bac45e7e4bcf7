from __future__ import annotations

import logging
from multiprocessing import pool as p
from typing import Callable, Final, Generic, Iterable, Optional, Sequence, Tuple, TypeVar, Union, TYPE_CHECKING

from tqdm import tqdm

from .utils import worker_pool
if TYPE_CHECKING:
    from .matrix import DistanceMatrix
    from .tours import RunResult


__all__ = (
    "IPCBundle",
    "run_bundles",
)
_T = TypeVar("_T")
logger = logging.getLogger(__name__)


class IPCBundle(Generic[_T]):
    """Instances holding one independent unit of work for a pool worker

    The distance matrix is shared by reference with thread pools and pickled for process pools;
    `data` holds the run-specific arguments. `index` is the position of the run in enumeration
    order, which breaks ties between equal-cost results.
    """

    __slots__ = (
        "data",
        "index",
        "matrix",
    )
    # https://github.com/python/mypy/issues/8982
    # https://stackoverflow.com/a/75160662

    def __init__(self, index: int, matrix: DistanceMatrix, data: _T) -> None:
        self.index: Final[int] = index
        self.matrix: Final[DistanceMatrix] = matrix
        self.data: Final[_T] = data

    def __repr__(self) -> str:
        return f"<IPCBundle #{self.index} data={self.data!r}>"


def run_bundles(
    function: Callable[[IPCBundle[_T]], Tuple[int, RunResult]],
    bundles: Sequence[IPCBundle[_T]],
    *,
    pool: Optional[p.Pool],
    pool_size: Optional[int],
    use_tqdm: bool,
    desc: str,
) -> RunResult:
    """Run every bundle through `function` and reduce to the cheapest result

    A single bundle runs in the calling thread. Otherwise the bundles are dispatched to `pool`
    (or to a temporary thread pool of `pool_size` workers). Ties are broken by the lowest bundle
    index, so the result does not depend on scheduling order or on the number of workers.

    Parameters
    -----
    function:
        A picklable module-level function mapping a bundle to `(bundle.index, result)`
    bundles:
        The work items, at least one
    pool:
        An existing pool to dispatch to, left open on return
    pool_size:
        The size of the temporary thread pool when `pool` is `None`
    use_tqdm:
        Whether to display the progress bar
    desc:
        The progress bar description

    Returns
    -----
    The result with the lowest `(cost, index)`
    """
    if len(bundles) == 0:
        raise ValueError("Expected at least one bundle")

    if len(bundles) == 1:
        return _reduce(map(function, bundles), total=1, use_tqdm=use_tqdm, desc=desc)

    with worker_pool(pool, pool_size) as workers:
        return _reduce(workers.imap_unordered(function, bundles), total=len(bundles), use_tqdm=use_tqdm, desc=desc)


def _reduce(results: Iterable[Tuple[int, RunResult]], *, total: int, use_tqdm: bool, desc: str) -> RunResult:
    iterations: Union[Iterable[Tuple[int, RunResult]], tqdm[Tuple[int, RunResult]]] = results
    if use_tqdm:
        iterations = tqdm(results, desc=desc, total=total, ascii=" █", colour="blue")

    best: Optional[Tuple[float, int, RunResult]] = None
    for index, result in iterations:
        if best is None or (result.cost, index) < best[:2]:
            best = (result.cost, index, result)

    assert best is not None
    logger.debug("%s: best of %d runs is #%d with cost %s", desc, total, best[1], best[0])
    return best[2]
