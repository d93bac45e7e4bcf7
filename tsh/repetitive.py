from __future__ import annotations

import enum
import logging
from multiprocessing import pool as p
from typing import Any, Callable, Dict, Final, Iterable, Optional, Tuple, Union

from .bundle import IPCBundle, run_bundles
from .construction import cheapest_insertion, farthest_insertion, nearest_neighbor
from .matrix import DistanceMatrix, MatrixLike, validate
from .tours import RunResult


__all__ = (
    "Heuristic",
    "RepetitiveParameter",
    "run_heuristic",
    "repetitive_heuristic",
)
logger = logging.getLogger(__name__)


class Heuristic(enum.Enum):
    """The construction heuristics available to the repetitive driver"""

    NEAREST_NEIGHBOR = "nearest_neighbor"
    FARTHEST_INSERTION = "farthest_insertion"
    CHEAPEST_INSERTION = "cheapest_insertion"


class RepetitiveParameter(enum.Enum):
    """The keyword argument varied across repetitive runs"""

    FIRST_CITY = "first_city"


_HEURISTICS: Final[Dict[Heuristic, Callable[..., RunResult]]] = {
    Heuristic.NEAREST_NEIGHBOR: nearest_neighbor,
    Heuristic.FARTHEST_INSERTION: farthest_insertion,
    Heuristic.CHEAPEST_INSERTION: cheapest_insertion,
}


def run_heuristic(heuristic: Union[Heuristic, str], matrix: MatrixLike, /, **kwargs: Any) -> RunResult:
    """Run a single construction heuristic by its tag, forwarding `kwargs`"""
    return _HEURISTICS[Heuristic(heuristic)](matrix, **kwargs)


def _run_bundle(bundle: IPCBundle[Tuple[Heuristic, Dict[str, Any]]]) -> Tuple[int, RunResult]:
    heuristic, kwargs = bundle.data
    return bundle.index, _HEURISTICS[heuristic](bundle.matrix, **kwargs)


def repetitive_heuristic(
    matrix: MatrixLike,
    heuristic: Union[Heuristic, str],
    parameter: Union[RepetitiveParameter, str] = RepetitiveParameter.FIRST_CITY,
    *,
    values: Optional[Iterable[Any]] = None,
    pool: Optional[p.Pool] = None,
    pool_size: Optional[int] = None,
    use_tqdm: bool = False,
    **kwargs: Any,
) -> RunResult:
    """Run `heuristic` once for each value of `parameter` and keep the cheapest result

    By default `parameter` is the first city and every city is tried, which suits the farthest
    insertion, cheapest insertion and nearest neighbor heuristics. Any other keyword argument is
    passed along to each run; for example `repetitive_heuristic(dm, Heuristic.NEAREST_NEIGHBOR, do2opt=True)`
    performs 2-opt for each of the `n` nearest neighbor paths.

    The runs are independent and are dispatched to a worker pool. Equal costs are resolved in favor
    of the value enumerated first, so the result does not depend on scheduling.

    Parameters
    -----
    matrix:
        The distance matrix
    heuristic:
        The construction heuristic to repeat
    parameter:
        The keyword argument to vary
    values:
        The values of `parameter` to try, in enumeration order; defaults to every city
    pool:
        An existing pool to dispatch the runs to
    pool_size:
        The size of the temporary thread pool when `pool` is `None`
    use_tqdm:
        Whether to display the progress bar

    Returns
    -----
    The cheapest `(path, cost)` over all runs
    """
    matrix = validate(matrix)
    heuristic = Heuristic(heuristic)
    parameter = RepetitiveParameter(parameter)
    if parameter.value in kwargs:
        raise TypeError(f"{parameter.value!r} is the repeated parameter and cannot be passed explicitly")

    if values is None:
        values = range(matrix.dimension)

    bundles = [
        IPCBundle(index, matrix, (heuristic, {**kwargs, parameter.value: value}))
        for index, value in enumerate(values)
    ]
    if len(bundles) == 0:
        raise ValueError("Expected at least one value for the repeated parameter")

    logger.debug("Repeating %s over %d values of %s", heuristic.value, len(bundles), parameter.value)
    return run_bundles(_run_bundle, bundles, pool=pool, pool_size=pool_size, use_tqdm=use_tqdm, desc=f"Repetitive {heuristic.value}")
