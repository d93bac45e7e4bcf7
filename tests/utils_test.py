import random
from multiprocessing.pool import ThreadPool

from tsh import utils


def test_isclose() -> None:
    assert utils.isclose(0.1 + 0.2, 0.3)
    assert not utils.isclose(1.0, 1.001)
    assert utils.isclose([1.0, 2.0], (1.0, 2.0 + 1e-12))
    assert not utils.isclose([1.0, 2.0], [1.0])


def test_resolve_rng() -> None:
    rng = random.Random(0)
    assert utils.resolve_rng(rng) is rng
    assert isinstance(utils.resolve_rng(None), random.Random)


def test_spawn_rngs() -> None:
    first = [child.random() for child in utils.spawn_rngs(random.Random(5), 4)]
    second = [child.random() for child in utils.spawn_rngs(random.Random(5), 4)]
    assert first == second
    assert len(set(first)) == 4

    # The first children do not depend on how many are spawned
    fewer = [child.random() for child in utils.spawn_rngs(random.Random(5), 2)]
    assert fewer == first[:2]


def test_worker_pool_temporary() -> None:
    with utils.worker_pool(None, 2) as pool:
        assert sorted(pool.imap_unordered(abs, [-1, -2, 3])) == [1, 2, 3]


def test_worker_pool_supplied() -> None:
    with ThreadPool(2) as supplied:
        with utils.worker_pool(supplied, 8) as pool:
            assert pool is supplied

        assert supplied.apply(abs, (-4,)) == 4
