from __future__ import annotations

import contextlib
import math
import os
import platform
import random
import sys
from multiprocessing import pool as p
from typing import Any, Iterator, List, Optional, Sequence, overload


__all__ = (
    "ngettext",
    "display_platform",
    "isclose",
    "resolve_rng",
    "spawn_rngs",
    "worker_pool",
)


def ngettext(predicate: bool, if_true: str, if_false: str, /) -> str:
    return if_true if predicate else if_false


def display_platform() -> None:
    cpu_count = os.cpu_count() or 1

    display = f"Running on {sys.platform} with {cpu_count} " + ngettext(cpu_count == 1, "CPU", "CPUs") + "\n"
    display += f"Python {sys.version}\n"
    display += ", ".join((platform.platform(), platform.processor())) + "\n"
    display += "-" * 30

    print(display)


@overload
def isclose(
    first: float,
    second: float,
    /,
) -> bool: ...


@overload
def isclose(
    first: Sequence[float],
    second: Sequence[float],
    /,
) -> bool: ...


def isclose(first: Any, second: Any, /) -> bool:
    try:
        return len(first) == len(second) and all(isclose(f, s) for f, s in zip(first, second))
    except TypeError:
        return math.isclose(first, second, rel_tol=1e-9, abs_tol=1e-9)


def resolve_rng(rng: Optional[random.Random], /) -> random.Random:
    """Return `rng`, or a fresh privately seeded generator if it is `None`

    The module-level generator of `random` is never used.
    """
    if rng is None:
        return random.Random()

    return rng


def spawn_rngs(rng: random.Random, count: int, /) -> List[random.Random]:
    """Derive `count` independent generators from `rng`, in order

    Seeding with the same `rng` state always yields the same sequence of children.
    """
    return [random.Random(rng.getrandbits(64)) for _ in range(count)]


@contextlib.contextmanager
def worker_pool(pool: Optional[p.Pool], pool_size: Optional[int], /) -> Iterator[p.Pool]:
    """Yield `pool` unchanged, or a temporary thread pool of `pool_size` workers

    A caller supplied pool is left open; a temporary one is closed and joined on exit.
    """
    if pool is not None:
        yield pool
        return

    with p.ThreadPool(pool_size or os.cpu_count() or 1) as temporary:
        yield temporary

        temporary.close()
        temporary.join()
