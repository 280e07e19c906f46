import numpy as np
import pytest

from iotorus.config import EmissionConfig, EruptionConfig
from iotorus.emitter import ParticleEmitter
from iotorus.eruption import EmissionRegime, EruptionController, EruptionState
from iotorus.pool import ParticlePool

from conftest import ConstantRng, SequenceRng


def test_forced_eruption_fills_small_pool(zero_rng):
    pool = ParticlePool(4)
    state = EruptionController(EruptionConfig()).advance(EruptionState(), zero_rng)
    assert state.regime is EmissionRegime.ERUPTING

    spawned = ParticleEmitter().emit(pool, (12.0, 0.0, 0.0), state, zero_rng)

    # Five successful attempts: four grow the pool, the fifth recycles slot 0
    assert spawned == 5
    assert pool.active_count == 4
    assert np.allclose(pool.colors, [1.0, 0.7, 0.3])
    assert np.allclose(pool.positions, [11.4, -0.6, -0.6])
    speeds = np.linalg.norm(pool.velocities, axis=1)
    assert speeds == pytest.approx([0.04] * 4)


def test_eruption_attempts_can_fail():
    pool = ParticlePool(10)
    state = EruptionState(is_active=True, active_countdown=5, regime=EmissionRegime.ERUPTING)
    spawned = ParticleEmitter().emit(pool, (12.0, 0.0, 0.0), state, ConstantRng(0.9))
    assert spawned == 0
    assert pool.active_count == 0


def test_eruption_launches_radially_outward():
    pool = ParticlePool(10)
    state = EruptionState(is_active=True, active_countdown=5, regime=EmissionRegime.ERUPTING)
    rng = np.random.default_rng(3)
    ParticleEmitter().emit(pool, (0.0, 0.0, 12.0), state, rng)
    count = pool.active_count
    assert count > 0
    pos = pool.positions[:count]
    vel = pool.velocities[:count]
    speeds = np.linalg.norm(vel, axis=1)
    assert np.all((speeds >= 0.04) & (speeds <= 0.06))
    unit_pos = pos / np.linalg.norm(pos, axis=1)[:, None]
    assert vel / speeds[:, None] == pytest.approx(unit_pos)
    assert np.all(np.abs(pos - [0.0, 0.0, 12.0]) <= 0.6)


def test_active_state_erupts_without_recorded_regime(zero_rng):
    pool = ParticlePool(10)
    state = EruptionState(is_active=True, active_countdown=5)
    assert state.regime is EmissionRegime.IDLE
    spawned = ParticleEmitter().emit(pool, (12.0, 0.0, 0.0), state, zero_rng)
    assert spawned == 5
    assert pool.active_count == 5
    assert pool.colors[0] == pytest.approx([1.0, 0.7, 0.3])


def test_background_emission_spawns_one_particle():
    pool = ParticlePool(10)
    state = EruptionState(regime=EmissionRegime.BACKGROUND)
    spawned = ParticleEmitter().emit(pool, (12.0, 0.0, 0.0), state, ConstantRng(0.05))
    assert spawned == 1
    assert pool.active_count == 1
    assert pool.positions[0] == pytest.approx([12.0 - 0.36, -0.36, -0.36])
    assert np.linalg.norm(pool.velocities[0]) == pytest.approx(0.0205)
    assert pool.colors[0] == pytest.approx([1.0, 0.5, 0.2])


def test_background_emission_respects_rate():
    pool = ParticlePool(10)
    state = EruptionState(regime=EmissionRegime.BACKGROUND)
    rng = ConstantRng(0.5)
    assert ParticleEmitter(EmissionConfig(base_rate=0.1)).emit(pool, (12.0, 0.0, 0.0), state, rng) == 0
    assert rng.draws == 1
    assert pool.active_count == 0


def test_idle_regime_emits_nothing():
    pool = ParticlePool(10)
    rng = ConstantRng(0.0)
    state = EruptionState(cooldown_remaining=3, regime=EmissionRegime.IDLE)
    assert ParticleEmitter().emit(pool, (12.0, 0.0, 0.0), state, rng) == 0
    assert rng.draws == 0


def test_particle_at_origin_gets_zero_velocity():
    pool = ParticlePool(2)
    state = EruptionState(regime=EmissionRegime.BACKGROUND)
    rng = SequenceRng([0.0, 0.5, 0.5, 0.5, 0.3])
    ParticleEmitter().emit(pool, (0.0, 0.0, 0.0), state, rng)
    assert pool.active_count == 1
    assert not np.any(pool.velocities[0])
    assert np.all(np.isfinite(pool.velocities))


def test_saturated_pool_recycles_random_slot():
    pool = ParticlePool(3)
    state = EruptionState(regime=EmissionRegime.BACKGROUND)
    emitter = ParticleEmitter()
    for _ in range(3):
        emitter.emit(pool, (12.0, 0.0, 0.0), state, ConstantRng(0.0))
    assert pool.active_count == 3
    # spawn roll, slot roll (0.7 * 3 -> slot 2), three offsets, speed
    rng = SequenceRng([0.0, 0.7, 0.5, 0.5, 0.5, 0.5])
    emitter.emit(pool, (0.0, 0.0, 12.0), state, rng)
    assert pool.active_count == 3
    assert pool.positions[2] == pytest.approx([0.0, 0.0, 12.0])
    assert rng.draws == 6


def test_bad_source_shape_is_rejected():
    with pytest.raises(ValueError):
        ParticleEmitter().emit(ParticlePool(2), (1.0, 2.0), EruptionState(), ConstantRng(0.0))
