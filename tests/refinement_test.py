import math
import random
from multiprocessing.pool import ThreadPool
from typing import Callable, List

import pytest

import tsh
from tsh import utils


def test_two_opt_uncrosses_square(square: List[List[float]]) -> None:
    crossed = [0, 1, 2, 3, 0]
    assert utils.isclose(tsh.path_cost(tsh.validate(square), crossed), 2 + 2 * math.sqrt(2))

    result = tsh.two_opt(square, crossed)
    assert result.path == (0, 2, 1, 3, 0)
    assert utils.isclose(result.cost, 4.0)


@pytest.mark.parametrize("seed", range(5))
def test_two_opt_never_worse_and_idempotent(
    seed: int,
    euclidean: Callable[[int, int], List[List[float]]],
    asymmetric: Callable[..., List[List[float]]],
    check_tour: Callable[..., None],
) -> None:
    for matrix in (euclidean(20, seed), asymmetric(12, seed, low=-3.0)):
        initial = tsh.Tour.random(tsh.validate(matrix), random.Random(seed)).result()

        once = tsh.two_opt(matrix, initial.path)
        check_tour(once, matrix)
        assert once.cost <= initial.cost
        assert once.path[0] == initial.path[0]

        twice = tsh.two_opt(matrix, once.path)
        assert twice == once


def test_two_opt_asymmetric_counts_interior_arcs() -> None:
    # Reversing [1, 2, 3] would save on the endpoint arcs but pay 100 on the reversed interior arcs
    matrix = [
        [0, 5, 9, 1, 1],
        [1, 0, 1, 100, 1],
        [1, 100, 0, 1, 1],
        [1, 1, 1, 0, 5],
        [1, 1, 1, 1, 0],
    ]
    result = tsh.two_opt(matrix, [0, 1, 2, 3, 4, 0])
    assert result.cost <= tsh.path_cost(tsh.validate(matrix), [0, 1, 2, 3, 4, 0])
    assert result.path != (0, 3, 2, 1, 4, 0)


def test_two_opt_open_path_keeps_endpoints(euclidean: Callable[[int, int], List[List[float]]], check_tour: Callable[..., None]) -> None:
    matrix = euclidean(10, 8)
    path = [4, 0, 9, 1, 8, 2, 7, 3, 6, 5]
    result = tsh.two_opt(matrix, path)
    check_tour(result, matrix, closed=False)
    assert result.path[0] == 4
    assert result.path[-1] == 5


def test_two_opt_max_iterations(euclidean: Callable[[int, int], List[List[float]]]) -> None:
    matrix = tsh.validate(euclidean(30, 1))
    initial = tsh.Tour.random(matrix, random.Random(1))

    limited = initial.copy()
    assert tsh.two_opt_inplace(limited, max_iterations=1) == 1

    converged = initial.copy()
    assert tsh.two_opt_inplace(converged) > 1
    assert converged.cost() <= initial.cost()


def test_two_opt_short_paths() -> None:
    assert tsh.two_opt([[0.0]], [0, 0]) == ((0, 0), 0.0)
    assert tsh.two_opt([[0, 2], [3, 0]], [1, 0, 1]) == ((1, 0, 1), 5.0)

    with pytest.raises(tsh.InvalidPathError):
        tsh.two_opt([[0, 2], [3, 0]], [0, 2, 0])


def test_temperature_schedule() -> None:
    schedule = tsh.TemperatureSchedule(init_temp=100.0, final_temp=0.01, steps=50)
    assert schedule(0) == 100.0
    assert utils.isclose(schedule(49), 0.01)

    temperatures = [schedule(step) for step in range(50)]
    assert all(a > b for a, b in zip(temperatures, temperatures[1:]))

    assert tsh.TemperatureSchedule(init_temp=5.0, final_temp=1.0, steps=1)(0) == 5.0

    with pytest.raises(ValueError):
        tsh.TemperatureSchedule(init_temp=0.0, final_temp=1.0, steps=10)

    with pytest.raises(ValueError):
        tsh.TemperatureSchedule(init_temp=1.0, final_temp=1.0, steps=-1)


def test_annealing_zero_steps_keeps_initial_path(euclidean: Callable[[int, int], List[List[float]]]) -> None:
    matrix = euclidean(9, 3)
    init_path = [3, 1, 4, 0, 5, 2, 6, 8, 7, 3]
    result = tsh.simulated_annealing(matrix, steps=0, num_starts=1, init_path=init_path, rng=random.Random(0))
    assert result.path == tuple(init_path)
    assert result.cost == tsh.path_cost(tsh.validate(matrix), init_path)


def test_annealing_zero_steps_random_tour(euclidean: Callable[[int, int], List[List[float]]], check_tour: Callable[..., None]) -> None:
    matrix = euclidean(9, 3)
    result = tsh.simulated_annealing(matrix, steps=0, rng=random.Random(0))
    check_tour(result, matrix)
    assert result.cost == tsh.path_cost(tsh.validate(matrix), result.path)


def test_annealing_never_worse_than_initial(
    euclidean: Callable[[int, int], List[List[float]]],
    asymmetric: Callable[..., List[List[float]]],
    check_tour: Callable[..., None],
) -> None:
    for matrix in (euclidean(12, 4), asymmetric(10, 4)):
        init_path = list(range(len(matrix))) + [0]
        result = tsh.simulated_annealing(matrix, steps=3000, init_path=init_path, rng=random.Random(4))
        check_tour(result, matrix)
        assert result.cost <= tsh.path_cost(tsh.validate(matrix), init_path) + 1e-9


def test_annealing_is_reproducible(euclidean: Callable[[int, int], List[List[float]]]) -> None:
    matrix = euclidean(10, 5)
    first = tsh.simulated_annealing(matrix, steps=2000, num_starts=3, rng=random.Random(9), pool_size=3)
    second = tsh.simulated_annealing(matrix, steps=2000, num_starts=3, rng=random.Random(9), pool_size=1)
    assert first == second


def test_annealing_more_starts_never_worse(euclidean: Callable[[int, int], List[List[float]]]) -> None:
    matrix = euclidean(10, 6)
    init_path = list(range(10)) + [0]
    single = tsh.simulated_annealing(matrix, steps=1000, init_path=init_path, rng=random.Random(2))
    with ThreadPool(2) as pool:
        multiple = tsh.simulated_annealing(matrix, steps=1000, num_starts=4, init_path=init_path, rng=random.Random(2), pool=pool)

    assert multiple.cost <= single.cost


def test_annealing_finds_square_optimum(square: List[List[float]]) -> None:
    result = tsh.simulated_annealing(square, num_starts=3, rng=random.Random(1))
    assert utils.isclose(result.cost, 4.0)


def test_annealing_invalid_arguments(square: List[List[float]]) -> None:
    with pytest.raises(ValueError):
        tsh.simulated_annealing(square, num_starts=0)

    with pytest.raises(ValueError):
        tsh.simulated_annealing(square, steps=-5)

    with pytest.raises(ValueError):
        tsh.simulated_annealing(square, final_temp=-1.0)

    with pytest.raises(tsh.InvalidPathError):
        tsh.simulated_annealing(square, init_path=[0, 1, 2, 0])


def test_annealing_tiny_instances() -> None:
    assert tsh.simulated_annealing([[0.0]], rng=random.Random(0)) == ((0, 0), 0.0)
    result = tsh.simulated_annealing([[0, 1], [2, 0]], rng=random.Random(0))
    assert result.cost == 3.0


NEAR_SYMMETRIC = [
    [0, 1, 1, 1, 1],
    [1, 0, 1, 1, 1],
    [0.99999999991, 1, 0, 0.99999999991, 1],
    [0.99999999995, 1, 1, 0, 0.99999999995],
    [1, 1, 1, 1, 0],
]


def test_two_opt_near_symmetric_never_worse() -> None:
    matrix = tsh.validate(NEAR_SYMMETRIC)
    assert matrix.is_symmetric()
    assert not matrix.exactly_symmetric

    path = [0, 1, 2, 3, 4, 0]
    result = tsh.two_opt(matrix, path)
    assert result.cost <= tsh.path_cost(matrix, path)


def test_annealing_bookkeeping_near_symmetric() -> None:
    matrix = tsh.validate(NEAR_SYMMETRIC)
    tour = tsh.Tour(matrix, [0, 1, 2, 3, 4, 0])
    schedule = tsh.TemperatureSchedule(init_temp=1e6, final_temp=1e6, steps=200)
    tsh.anneal(tour, schedule, random.Random(6))
    assert tour.cost() == pytest.approx(tsh.path_cost(matrix, tour.path), abs=1e-12)


def test_anneal_returns_best_tour_seen() -> None:
    # Cities in convex position, listed in hull order, so the initial tour is optimal
    points = [(math.cos(2 * math.pi * k / 8), math.sin(2 * math.pi * k / 8)) for k in range(8)]
    matrix = tsh.validate([[math.dist(p, q) for q in points] for p in points])
    initial = list(range(8)) + [0]
    optimum = tsh.path_cost(matrix, initial)

    # Hot enough that every proposal is accepted, so the walk leaves the optimum
    schedule = tsh.TemperatureSchedule(init_temp=1e6, final_temp=1e6, steps=500)
    tour = tsh.Tour(matrix, initial)
    best = tsh.anneal(tour, schedule, random.Random(3))

    best.check()
    assert utils.isclose(best.cost(), optimum)
    assert utils.isclose(tsh.path_cost(matrix, best.path), optimum)
    assert tour.cost() >= optimum - 1e-9
