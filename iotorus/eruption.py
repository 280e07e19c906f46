"""Volcanic eruption state machine for the emission source."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass

from iotorus.config import EruptionConfig

logger = logging.getLogger(__name__)


class EmissionRegime(enum.Enum):
    """Which emission branch the emitter runs for the current tick."""
    IDLE = 'idle'
    BACKGROUND = 'background'
    ERUPTING = 'erupting'


@dataclass
class EruptionState:
    """Mutable eruption bookkeeping, updated once per tick.

    ``regime`` records the outcome of the last ``advance``: erupting
    whenever an eruption is in progress after the update, background
    only when the source was ready and the eruption roll failed.
    """
    is_active: bool = False
    active_countdown: int = 0
    cooldown_remaining: int = 0
    regime: EmissionRegime = EmissionRegime.IDLE

    @property
    def phase(self) -> str:
        """Return ``'erupting'``, ``'quiescent'`` or ``'ready'``."""
        if self.is_active:
            return 'erupting'
        if self.cooldown_remaining > 0:
            return 'quiescent'
        return 'ready'


class EruptionController:
    """Advance an ``EruptionState`` by one tick.

    Durations are fixed; the only random choice is whether a ready source
    starts erupting.
    """

    def __init__(self, config: EruptionConfig | None = None):
        self.config = config or EruptionConfig()

    def advance(self, state: EruptionState, rng) -> EruptionState:
        cfg = self.config
        if state.is_active:
            state.active_countdown -= 1
            if state.active_countdown <= 0:
                state.is_active = False
                state.cooldown_remaining = int(cfg.cooldown)
                logger.debug('Eruption ended; cooling down for %d ticks', state.cooldown_remaining)
        elif state.cooldown_remaining > 0:
            state.cooldown_remaining -= 1
        else:
            if float(rng.random()) < cfg.chance:
                state.is_active = True
                state.active_countdown = int(cfg.duration)
                logger.debug('Eruption started for %d ticks', state.active_countdown)
            else:
                state.regime = EmissionRegime.BACKGROUND
                return state

        state.regime = EmissionRegime.ERUPTING if state.is_active else EmissionRegime.IDLE
        return state
