"""
Tilted, corotating dipole field of Jupiter.

The field is evaluated in the magnetic frame, where the moment is static:
a world-space position is rotated by the tilt about x and then by
``-rotation_angle`` about y (undoing the planet spin), the textbook dipole
``B = (3 (m.r) r - m r^2) / r^5`` is computed there, and the result is
rotated back.  All functions accept a single ``(3,)`` vector or a batch of
shape ``(N, 3)``.
"""

from __future__ import annotations

import math

import numpy as np
from numpy import ndarray

from iotorus.config import FieldConfig


def rotate_x(v: ndarray, angle: float) -> ndarray:
    """Rotate vectors about the x axis by ``angle`` (right-handed)."""
    c = math.cos(angle)
    s = math.sin(angle)
    x = v[..., 0]
    y = v[..., 1]
    z = v[..., 2]
    return np.stack((x, c * y - s * z, s * y + c * z), axis=-1)


def rotate_y(v: ndarray, angle: float) -> ndarray:
    """Rotate vectors about the y axis by ``angle`` (right-handed)."""
    c = math.cos(angle)
    s = math.sin(angle)
    x = v[..., 0]
    y = v[..., 1]
    z = v[..., 2]
    return np.stack((c * x + s * z, y, -s * x + c * z), axis=-1)


def dipole(r_vec: ndarray, moment: ndarray) -> ndarray:
    """Return the unscaled dipole field of ``moment`` at ``r_vec``.

    No guard against ``r -> 0``: the result is then non-finite and the
    caller is expected to discard it.
    """
    r2 = np.sum(r_vec * r_vec, axis=-1)
    r = np.sqrt(r2)
    r5 = r2 * r2 * r
    m_dot_r = np.sum(r_vec * moment, axis=-1)
    numerator = 3.0 * m_dot_r[..., None] * r_vec - moment * r2[..., None]
    return numerator / r5[..., None]


class MagneticFieldModel:
    """Evaluate the planet's magnetic field for a given spin angle."""

    def __init__(self, config: FieldConfig | None = None):
        self.config = config or FieldConfig()
        moment = np.asarray(self.config.moment, dtype=float)
        if moment.shape != (3,):
            raise ValueError('Magnetic moment must be a 3-vector')
        norm = float(np.linalg.norm(moment))
        if not math.isfinite(norm) or norm == 0.0:
            raise ValueError('Magnetic moment must be a non-zero finite vector')
        self._moment = moment / norm
        self._tilt = float(self.config.tilt)
        self._strength = float(self.config.strength)

    @property
    def moment(self) -> ndarray:
        """Unit magnetic moment in the dipole frame."""
        return self._moment.copy()

    def field_at(self, position, rotation_angle: float) -> ndarray:
        """Return the world-space field vector(s) at ``position``."""
        pos = np.asarray(position, dtype=float)
        with np.errstate(divide='ignore', invalid='ignore', over='ignore'):
            local = rotate_x(pos, self._tilt)
            local = rotate_y(local, -rotation_angle)
            b_local = dipole(local, self._moment)
            world = rotate_y(b_local, rotation_angle)
            world = rotate_x(world, -self._tilt)
            return world * self._strength

    def field_lines(self, rotation_angle: float = 0.0) -> ndarray:
        """Sample dipole-shaped field lines for display.

        Returns an array of shape ``(2 * line_count, line_points, 3)``:
        each line is followed by its mirror image through the equatorial
        plane, and the whole set is spun about y by ``rotation_angle``.
        """
        cfg = self.config
        count = int(cfg.line_count)
        points = int(cfg.line_points)
        if count <= 0 or points <= 0:
            return np.zeros((0, max(points, 0), 3), dtype=float)

        theta = np.arange(count, dtype=float) / count * 2.0 * math.pi
        t = np.linspace(0.0, 1.0, points) if points > 1 else np.zeros(1)
        radius = cfg.line_start_radius + t * cfg.line_length
        phi = math.pi / 2 - (math.pi - self._tilt) * np.cos(t * math.pi)

        x = radius * np.sin(phi) * np.cos(theta)[:, None]
        y = np.broadcast_to(radius * np.cos(phi), x.shape)
        z = radius * np.sin(phi) * np.sin(theta)[:, None]
        lines = np.stack((x, y, z), axis=-1)
        mirrored = lines * np.array([1.0, -1.0, 1.0])

        out = np.empty((2 * count, points, 3), dtype=float)
        out[0::2] = lines
        out[1::2] = mirrored
        if rotation_angle:
            out = rotate_y(out, rotation_angle)
        return out
