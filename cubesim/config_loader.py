"""
Utilities for loading cube simulations from YAML configuration files.
"""

from __future__ import annotations

from dataclasses import dataclass
import math
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml

from .geometry import Vector
from .particle_group import ParticleGroup
from .settings import (
    DEFAULT_ATOM_SIZE,
    STANDARD_ROTATION,
    BondingSettings,
    EnclosureSettings,
    MoleculeSettings,
    MotionSettings,
    SimulationSettings,
)


@dataclass
class SimulationBundle:
    """Container returned by configuration loader."""

    group: ParticleGroup
    metadata: Dict[str, Any]


def load_simulation_from_yaml(path: Path, *, seed: Optional[int] = None) -> SimulationBundle:
    """Load a ParticleGroup, populated with its initial atoms, from a YAML config."""
    data = load_yaml(path)
    return build_simulation(data, seed=seed)


def build_simulation(data: Dict[str, Any], *, seed: Optional[int] = None) -> SimulationBundle:
    settings = build_settings(data)
    if seed is not None:
        settings.seed = seed
    group = ParticleGroup(settings)

    system = _section(data, "system")
    for atom in _build_atoms(system.get("atoms") or []):
        group.spawn(*atom)
    group.spawn_random_atoms(int(system.get("random_atoms", 0)))

    return SimulationBundle(group=group, metadata=_section(data, "metadata"))


def load_yaml(path: Path) -> Dict[str, Any]:
    with Path(path).open("r", encoding="utf-8") as handle:
        content = yaml.safe_load(handle)
    if not isinstance(content, dict):
        raise ValueError(f"YAML file {path} must contain a mapping at the root.")
    return content


def build_settings(data: Dict[str, Any]) -> SimulationSettings:
    enclosure = _section(data, "enclosure")
    bonding = _section(data, "bonding")
    motion = _section(data, "motion")
    molecules = _section(data, "molecules")
    simulation = _section(data, "simulation")

    seed = simulation.get("seed")
    return SimulationSettings(
        enclosure=EnclosureSettings(
            min_corner=_tuple3(enclosure.get("min", (-100.0, -100.0, -100.0)), "enclosure.min"),
            max_corner=_tuple3(enclosure.get("max", (100.0, 100.0, 100.0)), "enclosure.max"),
            edge_clearance=float(enclosure.get("edge_clearance", 0.1)),
        ),
        bonding=BondingSettings(
            policy=str(bonding.get("policy", "coplanar")).lower(),
            collinear_threshold=float(bonding.get("collinear_threshold", 0.99)),
            plane_distance_threshold=float(bonding.get("plane_distance_threshold", 0.01)),
        ),
        motion=MotionSettings(
            speed=float(motion.get("speed", 0.5)),
            rotation_increment=_tuple3(motion.get("rotation_increment", STANDARD_ROTATION), "motion.rotation_increment"),
        ),
        molecules=MoleculeSettings(
            initial_rotation=str(molecules.get("initial_rotation", "random")).lower(),
        ),
        atom_size=float(simulation.get("atom_size", DEFAULT_ATOM_SIZE)),
        seed=int(seed) if seed is not None else None,
    )


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = data.get(key)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ValueError(f"Section '{key}' must be a mapping.")
    return section


def _build_atoms(atom_list: List[Dict[str, Any]]) -> List[Tuple[Vector, Vector, Vector]]:
    atoms: List[Tuple[Vector, Vector, Vector]] = []
    for index, atom in enumerate(atom_list):
        label = f"system.atoms[{index}]"
        if not isinstance(atom, dict):
            raise ValueError(f"{label} must be a mapping.")
        position = _parse_vector(atom, "position", label=label)
        trajectory = _parse_vector(atom, "trajectory", label=label)
        if position is None or trajectory is None:
            raise ValueError(f"{label} requires position and trajectory.")
        rotation = _parse_vector(
            atom, "rotation", label=label, fallback_key="rotation_degrees", default=(0.0, 0.0, 0.0)
        )
        atoms.append((position, rotation, trajectory))  # type: ignore[arg-type]
    return atoms


def _parse_vector(
    atom: Dict[str, Any],
    key: str,
    *,
    label: str,
    fallback_key: Optional[str] = None,
    default: Optional[Vector] = None,
) -> Optional[Vector]:
    if key in atom and atom[key] is not None:
        return _tuple3(atom[key], f"{label}.{key}")
    if fallback_key and fallback_key in atom and atom[fallback_key] is not None:
        values = _tuple3(atom[fallback_key], f"{label}.{fallback_key}")
        if fallback_key.endswith("degrees"):
            return (math.radians(values[0]), math.radians(values[1]), math.radians(values[2]))
        return values
    return default


def _tuple3(value: Any, name: str) -> Vector:
    if isinstance(value, (str, bytes)) or not isinstance(value, Iterable):
        raise ValueError(f"{name} must be a list of 3 numbers.")
    values = list(value)
    if len(values) != 3:
        raise ValueError(f"{name} must contain exactly 3 entries.")
    try:
        return float(values[0]), float(values[1]), float(values[2])
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must contain only numbers.") from exc
