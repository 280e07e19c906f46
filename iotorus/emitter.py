"""Particle emission from the volcanic source."""

from __future__ import annotations

import numpy as np
from numpy import ndarray

from iotorus.config import EmissionConfig
from iotorus.eruption import EmissionRegime, EruptionState
from iotorus.pool import ParticlePool


def _as_source(source_position) -> ndarray:
    source = np.asarray(source_position, dtype=float)
    if source.shape != (3,):
        raise ValueError('source_position must be a 3-vector')
    return source


class ParticleEmitter:
    """Spawn particles near the source according to the eruption regime.

    Erupting ticks make several independent attempts with a wide spread
    and fast radial launch; background ticks spawn at most one slower
    particle.  An active eruption always takes the erupting branch;
    otherwise ``regime`` decides between background and idle.
    """

    def __init__(self, config: EmissionConfig | None = None):
        self.config = config or EmissionConfig()

    def emit(self, pool: ParticlePool, source_position, eruption_state: EruptionState, rng) -> int:
        """Write new particles into ``pool`` and return how many were spawned."""
        source = _as_source(source_position)
        cfg = self.config
        if eruption_state.is_active:
            spawned = 0
            for _ in range(int(cfg.eruption_attempts)):
                if float(rng.random()) < cfg.eruption_success:
                    self._spawn(
                        pool, source, rng,
                        spread=cfg.eruption_spread,
                        speed_min=cfg.eruption_speed_min,
                        speed_span=cfg.eruption_speed_span,
                        color=cfg.eruption_color,
                    )
                    spawned += 1
            return spawned

        if eruption_state.regime is EmissionRegime.BACKGROUND and float(rng.random()) < cfg.base_rate:
            self._spawn(
                pool, source, rng,
                spread=cfg.base_spread,
                speed_min=cfg.base_speed_min,
                speed_span=cfg.base_speed_span,
                color=cfg.base_color,
            )
            return 1
        return 0

    @staticmethod
    def _spawn(pool, source, rng, spread, speed_min, speed_span, color) -> int:
        index = pool.acquire_slot(rng)
        offset = np.array([float(rng.random()) - 0.5 for _ in range(3)]) * spread
        position = source + offset

        # Launch radially away from the planet
        norm = float(np.linalg.norm(position))
        direction = position / norm if norm > 0.0 else np.zeros(3)
        speed = speed_min + float(rng.random()) * speed_span

        pool.write(index, position, direction * speed, color)
        return index
