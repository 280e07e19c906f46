"""Circular orbit of the emission source in the equatorial plane."""

from __future__ import annotations

import math

import numpy as np
from numpy import ndarray

from iotorus.config import OrbitConfig


class MoonOrbit:
    """Position of a moon on a circular orbit, indexed by frame number."""

    def __init__(self, config: OrbitConfig | None = None):
        self.config = config or OrbitConfig()

    def angle(self, frame: int) -> float:
        """Orbital phase (radians) at ``frame``."""
        return frame * self.config.speed

    def position(self, frame: int) -> ndarray:
        phase = self.angle(frame)
        radius = self.config.radius
        return np.array([radius * math.cos(phase), 0.0, radius * math.sin(phase)])

    def period(self) -> float:
        """Frames per revolution (``inf`` for a stationary source)."""
        if self.config.speed == 0.0:
            return math.inf
        return 2.0 * math.pi / abs(self.config.speed)
