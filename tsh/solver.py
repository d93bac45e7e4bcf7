from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from multiprocessing import pool as p
from typing import Final, Optional

from .matrix import MatrixLike, validate
from .refinement import simulated_annealing
from .repetitive import Heuristic, repetitive_heuristic, run_heuristic
from .tours import RunResult
from .utils import resolve_rng, worker_pool


__all__ = (
    "DEFAULT_QUALITY_FACTOR",
    "SolverStrategy",
    "plan_strategy",
    "solve_tsp",
)
DEFAULT_QUALITY_FACTOR: Final[float] = 40.0
logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True, slots=True)
class SolverStrategy:
    """The combination of heuristics `solve_tsp` runs for one instance

    `repetitive_starts == 0` means a single run from a random first city.
    """

    heuristic: Heuristic
    do2opt: bool
    repetitive_starts: int
    annealing_starts: int
    annealing_steps: int


def plan_strategy(n: int, quality_factor: float) -> SolverStrategy:
    """Map an instance size and a quality factor in [0, 100] to a `SolverStrategy`

    The thresholds are arbitrary. Higher quality factors and larger instances lead to more work,
    but neither the running time nor the solution quality is monotonic in the quality factor.
    """
    if n <= 3:
        return SolverStrategy(heuristic=Heuristic.NEAREST_NEIGHBOR, do2opt=True, repetitive_starts=n, annealing_starts=0, annealing_steps=0)

    if quality_factor < 5:
        return SolverStrategy(heuristic=Heuristic.NEAREST_NEIGHBOR, do2opt=False, repetitive_starts=0, annealing_starts=0, annealing_steps=0)

    if quality_factor < 15:
        return SolverStrategy(heuristic=Heuristic.NEAREST_NEIGHBOR, do2opt=True, repetitive_starts=0, annealing_starts=0, annealing_steps=0)

    if quality_factor < 25:
        return SolverStrategy(heuristic=Heuristic.FARTHEST_INSERTION, do2opt=True, repetitive_starts=0, annealing_starts=0, annealing_steps=0)

    repetitive_starts = max(1, min(n, math.ceil(n * (quality_factor - 25) / 75)))
    annealing_starts = annealing_steps = 0
    if quality_factor >= 60:
        annealing_starts = math.ceil((quality_factor - 50) / 10)
        annealing_steps = math.ceil(n * n * quality_factor / 2)

    return SolverStrategy(
        heuristic=Heuristic.FARTHEST_INSERTION,
        do2opt=True,
        repetitive_starts=repetitive_starts,
        annealing_starts=annealing_starts,
        annealing_steps=annealing_steps,
    )


def solve_tsp(
    matrix: MatrixLike,
    *,
    quality_factor: float = DEFAULT_QUALITY_FACTOR,
    rng: Optional[random.Random] = None,
    pool: Optional[p.Pool] = None,
    pool_size: Optional[int] = None,
    use_tqdm: bool = False,
) -> RunResult:
    """Approximately solve a TSP specified by a distance matrix

    Parameters
    -----
    matrix:
        The square distance matrix; it need not be symmetric
    quality_factor:
        A real number in [0, 100] trading computation time for solution quality. Higher values tend
        to find better solutions at the cost of more computation time. It is not guaranteed that a
        higher value always runs slower or returns a better solution, and 100 guarantees neither an
        optimal solution nor the best solution this library can find.
    rng:
        The random source for first cities and annealing
    pool:
        An existing pool for the parallel parts of the search
    pool_size:
        The size of the temporary thread pool when `pool` is `None`
    use_tqdm:
        Whether to display progress bars

    Returns
    -----
    The closed `(path, cost)` found
    """
    matrix = validate(matrix)
    n = matrix.dimension
    if math.isnan(quality_factor):
        raise ValueError("quality_factor must be a number between 0 and 100")

    if not 0 <= quality_factor <= 100:
        logger.warning("quality_factor must be between 0 and 100, got %s", quality_factor)
        quality_factor = min(max(quality_factor, 0.0), 100.0)

    strategy = plan_strategy(n, quality_factor)
    logger.debug("Solving %d cities with quality factor %s: %s", n, quality_factor, strategy)
    rng = resolve_rng(rng)

    if strategy.repetitive_starts == 0:
        return run_heuristic(strategy.heuristic, matrix, do2opt=strategy.do2opt, rng=rng)

    with worker_pool(pool, pool_size) as workers:
        first_cities = sorted(rng.sample(range(n), strategy.repetitive_starts))
        result = repetitive_heuristic(
            matrix,
            strategy.heuristic,
            values=first_cities,
            pool=workers,
            use_tqdm=use_tqdm,
            do2opt=strategy.do2opt,
        )

        if strategy.annealing_starts > 0:
            annealed = simulated_annealing(
                matrix,
                steps=strategy.annealing_steps,
                num_starts=strategy.annealing_starts,
                init_path=result.path,
                rng=rng,
                pool=workers,
                use_tqdm=use_tqdm,
            )
            if annealed.cost < result.cost:
                result = annealed

    return result
