import numpy as np
import pytest

from iotorus.pool import DEFAULT_COLOR, ParticlePool

from conftest import ConstantRng


def test_zero_capacity_is_rejected():
    with pytest.raises(ValueError):
        ParticlePool(0)


def test_new_pool_is_zeroed_with_default_colour():
    pool = ParticlePool(5)
    assert pool.capacity == 5
    assert len(pool) == 5
    assert pool.active_count == 0
    assert not np.any(pool.positions)
    assert not np.any(pool.velocities)
    assert np.all(pool.colors == np.asarray(DEFAULT_COLOR))


def test_slots_grow_in_order_then_recycle_randomly():
    pool = ParticlePool(4)
    rng = ConstantRng(0.0)
    assert [pool.acquire_slot(rng) for _ in range(4)] == [0, 1, 2, 3]
    assert rng.draws == 0
    assert pool.is_saturated

    rng.value = 0.5
    assert pool.acquire_slot(rng) == 2
    rng.value = 0.999999
    assert pool.acquire_slot(rng) == 3
    assert pool.active_count == 4


def test_active_count_never_exceeds_capacity(rng):
    pool = ParticlePool(10)
    previous = 0
    for _ in range(50):
        index = pool.acquire_slot(rng)
        assert 0 <= index < 10
        assert previous <= pool.active_count <= 10
        previous = pool.active_count


def test_buffers_are_flat_interleaved_views():
    pool = ParticlePool(3)
    pool.write(1, (1.0, 2.0, 3.0), (0.1, 0.2, 0.3), (0.5, 0.6, 0.7))
    positions, velocities, colors, active = pool.buffers()
    assert positions.shape == (9,)
    assert list(positions[3:6]) == [1.0, 2.0, 3.0]
    assert list(velocities[3:6]) == pytest.approx([0.1, 0.2, 0.3])
    assert list(colors[3:6]) == pytest.approx([0.5, 0.6, 0.7])
    assert active == 0

    pool.positions[2] = (7.0, 8.0, 9.0)
    assert list(positions[6:9]) == [7.0, 8.0, 9.0]
