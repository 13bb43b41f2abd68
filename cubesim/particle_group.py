"""
Particle group: owns every free body and runs condensation.

Each tick moves and spins every top-level body, bounces it off the enclosure,
and then condenses: bondable pairs are merged one at a time, rescanning the
whole population after each merge, until a full scan finds nothing to bond.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
import random
from typing import Dict, List, Optional

from .bodies import Body, BodyKind, new_atom, new_molecule
from .bonding import is_bond
from .enclosure import Enclosure
from .geometry import (
    Box,
    Vector,
    random_euler,
    random_unit_vector,
    vector_cross,
    vector_is_zero,
    vector_midpoint,
    vector_normalize,
)
from .settings import SimulationSettings


logger = logging.getLogger(__name__)


@dataclass
class BodyState:
    id: str
    kind: BodyKind
    position: Vector
    rotation: Vector
    scale: float
    trajectory: Vector
    atom_count: int
    bounding_box: Box


@dataclass
class PopulationSnapshot:
    tick: int
    bodies: List[BodyState] = field(default_factory=list)

    @property
    def atom_count(self) -> int:
        return sum(state.atom_count for state in self.bodies)

    @property
    def molecule_count(self) -> int:
        return sum(1 for state in self.bodies if state.kind is BodyKind.MOLECULE)


class ParticleGroup:
    """
    Manages all the particles in the simulation.

    The group is the only owner of the population; bodies absorbed into a
    molecule are dropped from it and their ids are never handed out again.
    """

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or SimulationSettings()
        self.random = rng or random.Random(self.settings.seed)
        self.enclosure = Enclosure.from_settings(self.settings.enclosure)
        self.tick: int = 0
        self._particles: Dict[str, Body] = {}
        self._next_id = 0

    def __len__(self) -> int:
        return len(self._particles)

    def __contains__(self, body_id: object) -> bool:
        return body_id in self._particles

    def bodies(self) -> List[Body]:
        """Top-level bodies in the order they joined the population."""
        return list(self._particles.values())

    def get(self, body_id: str) -> Optional[Body]:
        """Look up a body; ids retired by a merge resolve to None."""
        return self._particles.get(body_id)

    def spawn(self, position: Vector, rotation: Vector, trajectory: Vector) -> Body:
        """Introduce a new atom into the population."""
        atom = new_atom(
            self._make_id("atom_"),
            position,
            rotation,
            trajectory,
            size=self.settings.atom_size,
            rotation_increment=self.settings.motion.rotation_increment,
        )
        self._add(atom)
        logger.debug("Spawned %s at %s", atom.id, atom.position)
        return atom

    def spawn_random_atoms(self, count: int = 1) -> List[Body]:
        if count < 0:
            raise ValueError("count must be non-negative.")
        return [
            self.spawn(self.enclosure.random_pos(self.random), random_euler(self.random), self.random_trajectory())
            for _ in range(count)
        ]

    def random_trajectory(self) -> Vector:
        return random_unit_vector(self.random)

    def update(self) -> None:
        """Advance every body by one tick, bounce off walls, then condense."""
        speed = self.settings.motion.speed
        for body in self.bodies():
            body.advance(speed)
            self.enclosure.maybe_bounce(body, speed)
        self.condense()
        self.tick += 1

    def condense(self) -> int:
        """
        Merge bondable pairs until none remain.

        Returns the number of merges; each one shrinks the population by one,
        so at most ``len(self) - 1`` merges can happen.
        """
        merges = 0
        while self._maybe_bond():
            merges += 1
        if merges:
            logger.debug("Condensed %d pair(s); %d bodies remain", merges, len(self._particles))
        return merges

    def snapshot(self) -> PopulationSnapshot:
        states = [
            BodyState(
                id=body.id,
                kind=body.kind,
                position=body.position,
                rotation=body.rotation,
                scale=body.scale,
                trajectory=body.trajectory,
                atom_count=body.atom_count(),
                bounding_box=body.bounding_box(),
            )
            for body in self._particles.values()
        ]
        return PopulationSnapshot(tick=self.tick, bodies=states)

    def _maybe_bond(self) -> bool:
        """Perform the first merge found in an ordered pairwise scan."""
        particles = self.bodies()
        for i, first in enumerate(particles):
            for second in particles[i + 1:]:
                if is_bond(first, second, self.settings.bonding):
                    self._merge(first, second)
                    return True
        return False

    def _merge(self, first: Body, second: Body) -> None:
        if first.is_atom and second.is_atom:
            self._make_new_molecule(first, second)
        elif first.is_atom:
            self._add_atom_to_molecule(first, second)
        elif second.is_atom:
            self._add_atom_to_molecule(second, first)
        else:
            self._merge_molecules(first, second)

    def _make_new_molecule(self, atom1: Body, atom2: Body) -> Body:
        """Replace two atoms with a new molecule that owns them both."""
        self._remove(atom1)
        self._remove(atom2)

        start_pos = vector_midpoint(atom1.position, atom2.position)
        trajectory = vector_cross(atom1.trajectory, atom2.trajectory)
        unit = None if vector_is_zero(trajectory) else vector_normalize(trajectory)
        if unit is None:
            unit = self.random_trajectory()

        molecule = new_molecule(
            self._make_id("molecule_"),
            start_pos,
            self._initial_molecule_rotation(),
            unit,
            atom1,
            atom2,
            rotation_increment=self.settings.motion.rotation_increment,
        )
        self._add(molecule)
        logger.debug("Bonded %s and %s into %s", atom1.id, atom2.id, molecule.id)
        return molecule

    def _add_atom_to_molecule(self, atom: Body, molecule: Body) -> None:
        """Absorb a free atom; the molecule keeps its id and trajectory."""
        self._remove(atom)
        molecule.attach(atom)
        logger.debug("Molecule %s absorbed %s", molecule.id, atom.id)

    def _merge_molecules(self, molecule1: Body, molecule2: Body) -> None:
        """Move every child of ``molecule2`` into ``molecule1`` and retire ``molecule2``."""
        self._remove(molecule2)
        for child in list(molecule2.children):
            molecule1.attach(child)
        logger.debug("Merged %s into %s", molecule2.id, molecule1.id)

    def _initial_molecule_rotation(self) -> Vector:
        if self.settings.molecules.initial_rotation == "random":
            return random_euler(self.random)
        return (0.0, 0.0, 0.0)

    def _make_id(self, prefix: str) -> str:
        body_id = f"{prefix}{self._next_id}"
        self._next_id += 1
        return body_id

    def _add(self, body: Body) -> None:
        self._particles[body.id] = body

    def _remove(self, body: Body) -> None:
        del self._particles[body.id]
