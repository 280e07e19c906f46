"""
Force composition and integration for the plasma torus particles.

Every slot of the pool is advanced once per tick.  A slot never reads
another slot, so the whole update is written over the slot axis with
numpy.  Each force term is computed by a small pure function and added
only to the rows where it came out finite, so a degenerate term (for
instance the field right at the origin) never wipes out the terms that
were already applied.  Particles whose state becomes unusable are put
back at the source at rest instead of raising.
"""

from __future__ import annotations

import numpy as np
from numpy import ndarray

from iotorus.config import ContainmentConfig, FieldConfig
from iotorus.field import MagneticFieldModel
from iotorus.pool import ParticlePool


def _finite_rows(values: ndarray) -> ndarray:
    return np.all(np.isfinite(values), axis=-1)


def add_finite(velocity: ndarray, term: ndarray) -> ndarray:
    """Add ``term`` to ``velocity`` in place, skipping rows that are not finite."""
    ok = _finite_rows(term)
    velocity[ok] += term[ok]
    return velocity


def lorentz_force(velocity: ndarray, field: ndarray) -> ndarray:
    """Return ``v x B`` (charge and mass are folded into the field strength)."""
    return np.cross(velocity, field)


def corotation_drag(position: ndarray, distance: ndarray, rotation_speed: float, scale: float) -> ndarray:
    """Azimuthal push that drags plasma around with the planet.

    Vanishes close in and saturates at ``rotation_speed`` far out.  Rows on
    the spin axis have no azimuth and come back as NaN.
    """
    speed = rotation_speed * (1.0 - np.exp(-distance / scale))
    tangent = np.stack(
        (-position[:, 2], np.zeros_like(distance), position[:, 0]),
        axis=-1,
    )
    norm = np.linalg.norm(tangent, axis=-1)
    return tangent / norm[:, None] * speed[:, None]


def radial_containment(position: ndarray, distance: ndarray, torus_radius: float, stiffness: float) -> ndarray:
    """Linear spring toward the torus radius, pulling in from outside and out from inside."""
    magnitude = stiffness * (torus_radius - distance)
    return position / distance[:, None] * magnitude[:, None]


def clamp_speed(velocity: ndarray, max_speed: float) -> ndarray:
    """Rescale rows faster than ``max_speed`` to exactly ``max_speed``."""
    speed = np.linalg.norm(velocity, axis=-1)
    fast = speed > max_speed
    if np.any(fast):
        velocity[fast] *= (max_speed / speed[fast])[:, None]
    return velocity


def ionization_color(position: ndarray, source: ndarray, scale: float) -> ndarray:
    """Map distance from the source to a red-to-blue ionization colour."""
    ionization = np.clip(np.linalg.norm(position - source, axis=-1) / scale, 0.0, 1.0)
    return np.stack(
        (
            np.maximum(0.2, 1.0 - ionization),
            0.3 + ionization * 0.2,
            0.2 + ionization * 0.8,
        ),
        axis=-1,
    )


class ParticleIntegrator:
    """Advance every slot of a ``ParticlePool`` by one tick."""

    def __init__(
        self,
        field_model: MagneticFieldModel | None = None,
        config: ContainmentConfig | None = None,
        field_config: FieldConfig | None = None,
    ):
        self.field_model = field_model or MagneticFieldModel(field_config)
        self.config = config or ContainmentConfig()
        self.rotation_speed = float(self.field_model.config.rotation_speed)

    def step(self, pool: ParticlePool, rotation_angle: float, source_position, rng) -> None:
        """Apply guards, forces, integration and colouring to all slots.

        The whole capacity is walked regardless of ``pool.active_count``.
        ``rng`` supplies the jitter for particles pushed back to the source
        by the bounds guard (three draws per reset slot, in slot order).
        """
        source = np.asarray(source_position, dtype=float)
        if source.shape != (3,):
            raise ValueError('source_position must be a 3-vector')
        cfg = self.config
        pos = pool.positions
        vel = pool.velocities
        col = pool.colors

        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            # Non-finite positions go straight back to the source
            broken = ~_finite_rows(pos)
            if np.any(broken):
                pos[broken] = source
                vel[broken] = 0.0

            distance = np.linalg.norm(pos, axis=-1)
            escaped = ~broken & ((distance > cfg.max_distance) | (distance < cfg.min_distance))
            escaped_idx = np.flatnonzero(escaped)
            if escaped_idx.size:
                jitter = (np.asarray(rng.random((escaped_idx.size, 3)), dtype=float) - 0.5) * cfg.reset_spread
                pos[escaped_idx] = source + jitter
                vel[escaped_idx] = 0.0

            live_idx = np.flatnonzero(~(broken | escaped))
            if live_idx.size == 0:
                return
            p = pos[live_idx]
            v = vel[live_idx]
            d = distance[live_idx]

            field = self.field_model.field_at(p, rotation_angle)
            add_finite(v, lorentz_force(v, field))
            add_finite(v, corotation_drag(p, d, self.rotation_speed, cfg.corotation_scale))
            add_finite(v, radial_containment(p, d, cfg.torus_radius, cfg.radial_stiffness))

            # Keep the plasma in the equatorial plane
            v[:, 1] *= cfg.vertical_damping
            v[:, 1] -= p[:, 1] * cfg.equatorial_stiffness

            clamp_speed(v, cfg.max_speed)

            ok = _finite_rows(v)
            moved_idx = live_idx[ok]
            new_pos = p[ok] + v[ok]
            pos[moved_idx] = new_pos
            vel[moved_idx] = v[ok]
            col[moved_idx] = ionization_color(new_pos, source, cfg.ionization_scale)

            lost_idx = live_idx[~ok]
            if lost_idx.size:
                pos[lost_idx] = source
                vel[lost_idx] = 0.0
