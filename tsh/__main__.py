from __future__ import annotations

import argparse
import json
import logging
import os
import random
from typing import Optional, TYPE_CHECKING

from . import bounds, errors, solver, utils


class Namespace(argparse.Namespace):
    if TYPE_CHECKING:
        matrix: str
        quality_factor: float
        seed: Optional[int]
        pool_size: int
        bound: bool
        verbose: bool
        dump: Optional[str]


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="python -m tsh", description="Heuristic solver for TSP problems given by a distance matrix")
    parser.add_argument("matrix", type=str, help="path to a JSON file holding the square distance matrix")
    parser.add_argument("-q", "--quality-factor", default=solver.DEFAULT_QUALITY_FACTOR, type=float, help=f"the time/quality tradeoff in [0, 100] (default: {solver.DEFAULT_QUALITY_FACTOR})")
    parser.add_argument("-s", "--seed", type=int, help="seed of the random source, for reproducible runs")
    parser.add_argument("-b", "--bound", action="store_true", help="also compute a lower bound on the optimal tour cost")
    parser.add_argument("-v", "--verbose", action="store_true", help="whether to display progress bars and debug logs")
    parser.add_argument("-d", "--dump", type=str, help="dump the solution to a file")

    default_pool_size = os.cpu_count() or 1
    parser.add_argument("--pool-size", default=default_pool_size, type=int, help=f"the size of the worker pool (default: {default_pool_size})")

    namespace = Namespace()
    parser.parse_args(argv, namespace=namespace)

    logging.basicConfig(level=logging.DEBUG if namespace.verbose else logging.WARNING, format="[%(levelname)s] %(name)s: %(message)s")
    utils.display_platform()
    print(namespace)

    with open(namespace.matrix, "r") as file:
        data = json.load(file)

    try:
        result = solver.solve_tsp(
            data,
            quality_factor=namespace.quality_factor,
            rng=random.Random(namespace.seed),
            pool_size=namespace.pool_size,
            use_tqdm=namespace.verbose,
        )
    except errors.TSHException as exc:
        parser.error(str(exc))

    print(f"Solution cost = {result.cost}\nSolution path: {list(result.path)}")

    bound: Optional[float] = None
    if namespace.bound:
        bound = bounds.lower_bound(data)
        gap = format_gap(result.cost, bound)
        print(f"Lower bound = {bound}{gap}")

    if namespace.dump is not None:
        with open(namespace.dump, "w") as f:
            record = {
                "matrix": namespace.matrix,
                "quality-factor": namespace.quality_factor,
                "seed": namespace.seed,
                "cost": result.cost,
                "path": list(result.path),
                "lower-bound": bound,
            }
            json.dump(record, f)

        print(f"Saved solution to {namespace.dump!r}")

    return 0


def format_gap(cost: float, bound: float, /) -> str:
    if bound <= 0:
        return ""

    return f" (gap {100 * (cost - bound) / bound:.2f}%)"


if __name__ == "__main__":
    raise SystemExit(main())
