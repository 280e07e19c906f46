"""Particle simulation of the Io plasma torus in Jupiter's magnetosphere."""

from iotorus.config import (
    ContainmentConfig,
    EmissionConfig,
    EruptionConfig,
    FieldConfig,
    OrbitConfig,
    SimulationConfig,
    load_config,
)
from iotorus.emitter import ParticleEmitter
from iotorus.eruption import EmissionRegime, EruptionController, EruptionState
from iotorus.field import MagneticFieldModel
from iotorus.integrator import ParticleIntegrator
from iotorus.orbit import MoonOrbit
from iotorus.pool import ParticlePool
from iotorus.simulation import Simulation, TickResult

__all__ = [
    'ContainmentConfig', 'EmissionConfig', 'EruptionConfig', 'FieldConfig',
    'OrbitConfig', 'SimulationConfig', 'load_config',
    'ParticleEmitter',
    'EmissionRegime', 'EruptionController', 'EruptionState',
    'MagneticFieldModel',
    'ParticleIntegrator',
    'MoonOrbit',
    'ParticlePool',
    'Simulation', 'TickResult',
]
