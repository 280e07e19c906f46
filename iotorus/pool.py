"""
Fixed-capacity particle storage.

Positions, velocities and colours are kept as three contiguous ``(capacity,
3)`` float arrays.  Their flat views are interleaved ``x, y, z`` buffers
of length ``capacity * 3`` that a renderer can upload without copying.
"""

from __future__ import annotations

from typing import Tuple

import numpy as np
from numpy import ndarray

from iotorus.config import MAX_PARTICLES

# Colour of a slot that has never been written.
DEFAULT_COLOR: Tuple[float, float, float] = (1.0, 0.5, 0.2)


class ParticlePool:
    """Struct-of-arrays particle pool with a growth cursor.

    Slots ``[0, active_count)`` have been handed out by ``acquire_slot``.
    Once every slot is in use, new particles overwrite a uniformly random
    slot; there is no age or distance priority.
    """

    def __init__(self, capacity: int = MAX_PARTICLES, initial_color=DEFAULT_COLOR):
        capacity = int(capacity)
        if capacity < 1:
            raise ValueError('capacity must be >= 1')
        self._capacity: int = capacity
        self._active_count: int = 0
        self._positions = np.zeros((capacity, 3), dtype=float)
        self._velocities = np.zeros((capacity, 3), dtype=float)
        self._colors = np.empty((capacity, 3), dtype=float)
        self._colors[:] = np.asarray(initial_color, dtype=float)

    # -------------------------------------------------------------------------
    # Properties to expose the state
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def active_count(self) -> int:
        """Number of slots handed out so far (saturates at capacity)."""
        return self._active_count

    @property
    def positions(self) -> ndarray:
        """Return particle positions as a ``(capacity, 3)`` array."""
        return self._positions

    @property
    def velocities(self) -> ndarray:
        """Return particle velocities as a ``(capacity, 3)`` array."""
        return self._velocities

    @property
    def colors(self) -> ndarray:
        """Return RGB colours in ``[0, 1]`` as a ``(capacity, 3)`` array."""
        return self._colors

    @property
    def is_saturated(self) -> bool:
        return self._active_count >= self._capacity

    def __len__(self) -> int:
        return self._capacity

    # -------------------------------------------------------------------------
    def acquire_slot(self, rng) -> int:
        """Return the slot index for a newly emitted particle.

        During growth the next unused slot is taken and ``active_count``
        advances; afterwards one uniform draw picks the slot to recycle.
        """
        if self._active_count < self._capacity:
            index = self._active_count
            self._active_count += 1
            return index
        index = int(float(rng.random()) * self._capacity)
        return min(index, self._capacity - 1)

    def write(self, index: int, position, velocity, color) -> None:
        """Overwrite slot ``index`` with the given state."""
        self._positions[index] = position
        self._velocities[index] = velocity
        self._colors[index] = color

    def buffers(self) -> Tuple[ndarray, ndarray, ndarray, int]:
        """Return flat position, velocity and colour views plus ``active_count``.

        The views share memory with the pool; they are valid until the
        next tick mutates them.
        """
        return (
            self._positions.reshape(-1),
            self._velocities.reshape(-1),
            self._colors.reshape(-1),
            self._active_count,
        )
