"""
Io plasma torus simulation.

This module defines a Simulation class that owns every piece of mutable
state of the plasma torus model: the particle pool, the eruption state,
the planet's spin angle and the frame counter that drives Io's orbit.
One call to ``Simulation.tick`` runs the full per-frame pipeline

    eruption controller -> emitter -> integrator

and leaves the pool buffers ready for a renderer.  Callers that drive
the orbit or the spin themselves can pass ``source_position`` and
``rotation_angle`` explicitly.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
from numpy import ndarray

from iotorus.config import SimulationConfig
from iotorus.emitter import ParticleEmitter
from iotorus.eruption import EmissionRegime, EruptionController, EruptionState
from iotorus.field import MagneticFieldModel
from iotorus.integrator import ParticleIntegrator
from iotorus.orbit import MoonOrbit
from iotorus.pool import ParticlePool

logger = logging.getLogger(__name__)


@dataclass
class TickResult:
    """Summary of a single simulation tick."""

    frame: int
    rotation_angle: float
    source_position: ndarray
    regime: EmissionRegime
    spawned: int
    active_count: int


################################################################################
# Simulation class
################################################################################

class Simulation:
    """Evolve the Io plasma torus one frame at a time.

    Particle positions, velocities and colours live in fixed-size arrays
    owned by a ``ParticlePool``.  Each tick the eruption controller
    decides the emission regime, the emitter writes new particles near
    Io, and the integrator moves every slot through the rotating dipole
    field and the synthetic torus containment.
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        seed: Optional[int] = None,
        rng=None,
    ):
        """Create a simulation.

        Parameters
        ----------
        config: SimulationConfig, optional
            Constants for every component; defaults reproduce the
            reference scene.
        seed: int, optional
            Seed for the ``numpy.random.Generator`` created when ``rng``
            is not supplied.
        rng: optional
            Random source with a ``random(size=None)`` method returning
            uniforms in ``[0, 1)``.  Overrides ``seed``.
        """
        self._config: SimulationConfig = config or SimulationConfig()
        self._rng = rng if rng is not None else np.random.default_rng(seed)

        cfg = self._config
        self._pool = ParticlePool(cfg.capacity)
        self._field = MagneticFieldModel(cfg.field)
        self._controller = EruptionController(cfg.eruption)
        self._emitter = ParticleEmitter(cfg.emission)
        self._integrator = ParticleIntegrator(self._field, cfg.containment)
        self._orbit = MoonOrbit(cfg.orbit)
        self._eruption = EruptionState()

        self._frame: int = 0
        self._rotation_angle: float = 0.0
        self._source: ndarray = self._orbit.position(0)
        self._eruption_count: int = 0

        logger.info(
            'Simulation created with capacity %d (tilt %.3f rad, torus radius %.1f)',
            cfg.capacity, cfg.field.tilt, cfg.containment.torus_radius,
        )

    # -------------------------------------------------------------------------
    # Properties to expose the state
    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def pool(self) -> ParticlePool:
        return self._pool

    @property
    def field(self) -> MagneticFieldModel:
        return self._field

    @property
    def eruption(self) -> EruptionState:
        return self._eruption

    @property
    def frame(self) -> int:
        """Number of ticks run so far."""
        return self._frame

    @property
    def rotation_angle(self) -> float:
        """Planet spin angle (radians) used by the last tick."""
        return self._rotation_angle

    @property
    def source_position(self) -> ndarray:
        """Source position used by the last tick."""
        return self._source.copy()

    def get_eruption_count(self) -> int:
        """Return how many eruptions have started."""
        return self._eruption_count

    def buffers(self) -> Tuple[ndarray, ndarray, ndarray, int]:
        """Return flat position, velocity and colour buffers plus ``active_count``."""
        return self._pool.buffers()

    def field_lines(self) -> ndarray:
        """Return field-line geometry spun to the current rotation angle."""
        return self._field.field_lines(self._rotation_angle)

    # -------------------------------------------------------------------------
    def tick(self, source_position=None, rotation_angle: Optional[float] = None) -> TickResult:
        """Advance the system by one frame.

        The planet spins by ``rotation_speed`` and Io sits at its orbital
        position for the current frame, unless the caller overrides
        either value.
        """
        if rotation_angle is None:
            self._rotation_angle += self._config.field.rotation_speed
        else:
            self._rotation_angle = float(rotation_angle)
        if source_position is None:
            self._source = self._orbit.position(self._frame)
        else:
            source = np.asarray(source_position, dtype=float)
            if source.shape != (3,):
                raise ValueError('source_position must be a 3-vector')
            self._source = source.copy()

        was_active = self._eruption.is_active
        self._controller.advance(self._eruption, self._rng)
        if self._eruption.is_active and not was_active:
            self._eruption_count += 1
        spawned = self._emitter.emit(self._pool, self._source, self._eruption, self._rng)
        self._integrator.step(self._pool, self._rotation_angle, self._source, self._rng)

        result = TickResult(
            frame=self._frame,
            rotation_angle=self._rotation_angle,
            source_position=self._source.copy(),
            regime=self._eruption.regime,
            spawned=spawned,
            active_count=self._pool.active_count,
        )
        self._frame += 1
        return result

    def run(self, ticks: int) -> Optional[TickResult]:
        """Run ``ticks`` frames and return the last result."""
        if ticks < 0:
            raise ValueError('ticks must be >= 0')
        result = None
        for _ in range(int(ticks)):
            result = self.tick()
        return result

    # -------------------------------------------------------------------------
    def __iter__(self) -> 'Simulation':
        return self

    def __next__(self) -> TickResult:
        """Advance the simulation and return the tick summary."""
        return self.tick()

    # -------------------------------------------------------------------------
    # Diagnostics
    def mean_radius(self) -> float:
        """Mean distance of the active particles from the planet centre."""
        count = self._pool.active_count
        if count == 0:
            return 0.0
        return float(np.mean(np.linalg.norm(self._pool.positions[:count], axis=1)))

    def mean_speed(self) -> float:
        """Mean speed of the active particles."""
        count = self._pool.active_count
        if count == 0:
            return 0.0
        return float(np.mean(np.linalg.norm(self._pool.velocities[:count], axis=1)))

    def mean_color(self) -> ndarray:
        """Mean RGB colour of the active particles."""
        count = self._pool.active_count
        if count == 0:
            return np.zeros(3)
        return np.mean(self._pool.colors[:count], axis=0)
