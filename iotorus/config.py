"""
Configuration for the Io plasma torus simulation.

Every tunable constant of the simulation lives in one of the frozen
dataclasses below.  Defaults reproduce the reference scene (Jupiter with
a dipole tilted by pi/10, Io orbiting at radius 12, a torus centred at
radius 10).  Values can be overridden from a ``config.json`` document
whose top level may contain ``capacity`` and the sections ``field``,
``eruption``, ``emission``, ``containment`` and ``orbit``.  Anything
missing or malformed silently keeps its default (a warning is logged for
malformed values).
"""

from __future__ import annotations

import dataclasses
import json
import logging
import math
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Tuple, Union

logger = logging.getLogger(__name__)

Vec3 = Tuple[float, float, float]

# Default simulation capacity (number of particle slots).
MAX_PARTICLES: int = 1000

CONFIG_FILENAME: str = 'config.json'


@dataclass(frozen=True)
class FieldConfig:
    """Dipole field parameters.

    Attributes
    ----------
    tilt: float
        Angle (radians) between the magnetic axis and the spin axis,
        applied as a rotation about x.
    moment: tuple of float
        Direction of the magnetic moment in the dipole frame.  Normalised
        before use.
    strength: float
        Scalar multiplier applied to the evaluated field.  Charge and mass
        are folded into this value (q/m = 1).
    rotation_speed: float
        Planet spin per tick in radians.  Also sets the corotation drag.
    """
    tilt: float = math.pi / 10
    moment: Vec3 = (0.0, 1.0, 0.0)
    strength: float = 0.2
    rotation_speed: float = 0.002
    # Field-line geometry used by ``field_lines``
    line_count: int = 16
    line_points: int = 50
    line_length: float = 20.0
    line_start_radius: float = 1.0


@dataclass(frozen=True)
class EruptionConfig:
    """Timing of the volcanic eruption state machine (all in ticks)."""
    duration: int = 100
    cooldown: int = 200
    chance: float = 0.005


@dataclass(frozen=True)
class EmissionConfig:
    """Spawn rates and initial kinematics for the two emission regimes."""
    eruption_attempts: int = 5
    eruption_success: float = 0.8
    eruption_spread: float = 1.2
    eruption_speed_min: float = 0.04
    eruption_speed_span: float = 0.02
    eruption_color: Vec3 = (1.0, 0.7, 0.3)
    base_rate: float = 0.1
    base_spread: float = 0.8
    base_speed_min: float = 0.02
    base_speed_span: float = 0.01
    base_color: Vec3 = (1.0, 0.5, 0.2)


@dataclass(frozen=True)
class ContainmentConfig:
    """Integrator constants: bounds, synthetic forces and colouring."""
    max_distance: float = 30.0
    min_distance: float = 3.0
    reset_spread: float = 0.8
    corotation_scale: float = 15.0
    torus_radius: float = 10.0
    radial_stiffness: float = 0.01
    vertical_damping: float = 0.95
    equatorial_stiffness: float = 0.02
    max_speed: float = 0.2
    ionization_scale: float = 5.0


@dataclass(frozen=True)
class OrbitConfig:
    """Circular orbit of the emission source (Io)."""
    radius: float = 12.0
    speed: float = 0.005


@dataclass(frozen=True)
class SimulationConfig:
    """Complete, immutable configuration bundle for a ``Simulation``."""
    capacity: int = MAX_PARTICLES
    field: FieldConfig = dataclasses.field(default_factory=FieldConfig)
    eruption: EruptionConfig = dataclasses.field(default_factory=EruptionConfig)
    emission: EmissionConfig = dataclasses.field(default_factory=EmissionConfig)
    containment: ContainmentConfig = dataclasses.field(default_factory=ContainmentConfig)
    orbit: OrbitConfig = dataclasses.field(default_factory=OrbitConfig)


################################################################################
# JSON loading
################################################################################

def _find_config_file() -> Optional[Path]:
    """Return the first existing ``config.json`` (package dir, then cwd)."""
    candidates = [
        Path(__file__).resolve().parent / CONFIG_FILENAME,
        Path.cwd() / CONFIG_FILENAME,
    ]
    for path in candidates:
        if path.is_file():
            return path
    return None


def _read_config_dict(path: Path) -> dict:
    try:
        with path.open('r', encoding='utf-8') as fh:
            data = json.load(fh)
    except (OSError, ValueError) as exc:
        logger.warning('Could not read %s (%s); using defaults', path, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning('%s does not contain a JSON object; using defaults', path)
        return {}
    return data


def _coerce(value, default, label: str):
    """Convert ``value`` to the type of ``default`` or return ``default``."""
    try:
        if isinstance(default, int):
            return int(value)
        if isinstance(default, float):
            result = float(value)
            if not math.isfinite(result):
                raise ValueError('non-finite')
            return result
        if isinstance(default, tuple):
            if not isinstance(value, (list, tuple)) or len(value) != len(default):
                raise ValueError('expected %d components' % len(default))
            return tuple(float(c) for c in value)
    except (TypeError, ValueError, OverflowError):
        logger.warning('Ignoring invalid value %r for %s', value, label)
        return default
    return default


def _apply_section(defaults, section, name: str):
    """Return ``defaults`` with the recognised keys of ``section`` applied."""
    if section is None:
        return defaults
    if not isinstance(section, dict):
        logger.warning('Config section %r is not an object; using defaults', name)
        return defaults
    changes = {}
    for f in fields(defaults):
        if f.name in section:
            current = getattr(defaults, f.name)
            changes[f.name] = _coerce(section[f.name], current, '%s.%s' % (name, f.name))
    return replace(defaults, **changes) if changes else defaults


def config_from_dict(data: dict) -> SimulationConfig:
    """Build a ``SimulationConfig`` from a parsed JSON mapping."""
    defaults = SimulationConfig()
    if not isinstance(data, dict):
        return defaults

    field_section = data.get('field')
    if isinstance(field_section, dict) and 'tilt_deg' in field_section and 'tilt' not in field_section:
        field_section = dict(field_section)
        try:
            field_section['tilt'] = math.radians(float(field_section['tilt_deg']))
        except (TypeError, ValueError):
            logger.warning('Ignoring invalid value %r for field.tilt_deg', field_section['tilt_deg'])

    capacity = _coerce(data.get('capacity', defaults.capacity), defaults.capacity, 'capacity')
    return SimulationConfig(
        capacity=capacity,
        field=_apply_section(defaults.field, field_section, 'field'),
        eruption=_apply_section(defaults.eruption, data.get('eruption'), 'eruption'),
        emission=_apply_section(defaults.emission, data.get('emission'), 'emission'),
        containment=_apply_section(defaults.containment, data.get('containment'), 'containment'),
        orbit=_apply_section(defaults.orbit, data.get('orbit'), 'orbit'),
    )


def load_config(path: Union[str, Path, None] = None) -> SimulationConfig:
    """Load the simulation configuration.

    Parameters
    ----------
    path: str or Path, optional
        Explicit JSON file.  When omitted, ``config.json`` is looked up
        beside the package and then in the working directory.  A missing
        file yields the defaults.
    """
    if path is None:
        found = _find_config_file()
        if found is None:
            return SimulationConfig()
        cfg_path = found
    else:
        cfg_path = Path(path).expanduser()
        if not cfg_path.is_file():
            logger.warning('Config file %s not found; using defaults', cfg_path)
            return SimulationConfig()
    logger.debug('Loading configuration from %s', cfg_path)
    return config_from_dict(_read_config_dict(cfg_path))
