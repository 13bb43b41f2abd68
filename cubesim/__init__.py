"""
Colored cubes drifting in a glass box and condensing into molecules.
"""

from __future__ import annotations

from .bodies import Body, BodyKind, new_atom, new_molecule
from .bonding import (
    is_atom_atom_bond,
    is_atom_molecule_bond,
    is_bond,
    is_molecule_molecule_bond,
    same_color_touching,
)
from .enclosure import Enclosure
from .particle_group import BodyState, ParticleGroup, PopulationSnapshot
from .settings import (
    BondingSettings,
    EnclosureSettings,
    MoleculeSettings,
    MotionSettings,
    SimulationSettings,
)

__all__ = [
    "Body",
    "BodyKind",
    "BodyState",
    "BondingSettings",
    "Enclosure",
    "EnclosureSettings",
    "MoleculeSettings",
    "MotionSettings",
    "ParticleGroup",
    "PopulationSnapshot",
    "SimulationSettings",
    "is_atom_atom_bond",
    "is_atom_molecule_bond",
    "is_bond",
    "is_molecule_molecule_bond",
    "new_atom",
    "new_molecule",
    "same_color_touching",
]
