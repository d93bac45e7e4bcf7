from __future__ import annotations

import logging
import math
import random
from dataclasses import dataclass
from multiprocessing import pool as p
from typing import Final, List, Optional, Sequence, Tuple

from ..bundle import IPCBundle, run_bundles
from ..matrix import MatrixLike, validate
from ..tours import RunResult, Tour
from ..utils import resolve_rng, spawn_rngs


__all__ = (
    "DEFAULT_INIT_TEMP",
    "DEFAULT_FINAL_TEMP",
    "TemperatureSchedule",
    "anneal",
    "simulated_annealing",
)
DEFAULT_INIT_TEMP: Final[float] = math.exp(8)
DEFAULT_FINAL_TEMP: Final[float] = math.exp(-6.5)
logger = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True, slots=True)
class TemperatureSchedule:
    """Exponential decay from `init_temp` at step 0 to `final_temp` at step `steps - 1`"""

    init_temp: float
    final_temp: float
    steps: int

    def __post_init__(self) -> None:
        if self.init_temp <= 0 or self.final_temp <= 0:
            raise ValueError(f"Temperatures must be positive, got {self.init_temp} and {self.final_temp}")

        if self.steps < 0:
            raise ValueError(f"Step count must be non-negative, got {self.steps}")

    @property
    def cooling_rate(self) -> float:
        if self.steps < 2:
            return 1.0

        return (self.final_temp / self.init_temp) ** (1 / (self.steps - 1))

    def __call__(self, step: int, /) -> float:
        return self.init_temp * self.cooling_rate ** step


def anneal(tour: Tour, schedule: TemperatureSchedule, rng: random.Random, /) -> Tour:
    """Run one annealing pass over `tour`, mutating it, and return the best tour seen

    Each step proposes the reversal of `path[i:j + 1]` for two random interior positions. Improving
    or neutral proposals are always accepted; worsening ones with probability `exp(-delta / T)`.
    """
    path = tour.path
    end = len(path) - 2
    best_path = list(path)
    best_cost = tour.cost()
    if end < 2:
        return tour.__class__(tour.matrix, best_path, cost=best_cost)

    rate = schedule.cooling_rate
    for step in range(schedule.steps):
        i = rng.randint(1, end)
        j = rng.randint(1, end)
        if i > j:
            i, j = j, i

        delta = tour.reversal_delta(i, j)
        if delta <= 0 or rng.random() < math.exp(-delta / (schedule.init_temp * rate ** step)):
            tour.reverse(i, j, delta=delta)
            if tour.cost() < best_cost:
                best_path = list(path)
                best_cost = tour.cost()

    return tour.__class__(tour.matrix, best_path)


def _anneal_bundle(bundle: IPCBundle[Tuple[Optional[List[int]], TemperatureSchedule, random.Random]]) -> Tuple[int, RunResult]:
    init_path, schedule, rng = bundle.data
    if init_path is None:
        tour = Tour.random(bundle.matrix, rng)
    else:
        tour = Tour(bundle.matrix, init_path)

    result = anneal(tour, schedule, rng).result()
    logger.debug("Annealing start #%d finished with cost %s", bundle.index, result.cost)
    return bundle.index, result


def simulated_annealing(
    matrix: MatrixLike,
    *,
    steps: Optional[int] = None,
    num_starts: int = 1,
    init_temp: float = DEFAULT_INIT_TEMP,
    final_temp: float = DEFAULT_FINAL_TEMP,
    init_path: Optional[Sequence[int]] = None,
    rng: Optional[random.Random] = None,
    pool: Optional[p.Pool] = None,
    pool_size: Optional[int] = None,
    use_tqdm: bool = False,
) -> RunResult:
    """Use a simulated annealing strategy to return a closed tour

    The temperature decays exponentially from `init_temp` to `final_temp`.

    Parameters
    -----
    matrix:
        The distance matrix
    steps:
        The number of steps of each start, defaults to `50 * n ** 2`
    num_starts:
        The number of independent annealing runs, executed concurrently
    init_temp:
        Initial temperature which controls the initial chance of accepting an inferior tour
    final_temp:
        Final temperature which controls the final chance of accepting an inferior tour; lower values
        roughly correspond to a longer period of 2-opt
    init_path:
        The tour every start anneals from, or `None` to give each start its own random closed tour
    rng:
        The random source; each start receives its own generator seeded from it
    pool:
        An existing pool to run the starts on
    pool_size:
        The size of the temporary thread pool when `pool` is `None`
    use_tqdm:
        Whether to display the progress bar

    Returns
    -----
    The best `(path, cost)` seen over every start
    """
    matrix = validate(matrix)
    n = matrix.dimension
    if steps is None:
        steps = 50 * n * n

    if num_starts < 1:
        raise ValueError(f"num_starts must be at least 1, got {num_starts}")

    schedule = TemperatureSchedule(init_temp=init_temp, final_temp=final_temp, steps=steps)
    initial = None if init_path is None else Tour.from_path(matrix, init_path).path

    children = spawn_rngs(resolve_rng(rng), num_starts)
    bundles = [IPCBundle(index, matrix, (initial, schedule, child)) for index, child in enumerate(children)]
    return run_bundles(_anneal_bundle, bundles, pool=pool, pool_size=pool_size, use_tqdm=use_tqdm, desc="Simulated annealing")
