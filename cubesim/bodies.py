"""
Atoms and molecules.

An atom is a cube with six painted sides; a molecule is a group that owns
atoms. Each body keeps its transform relative to its parent (or to the world
when it has none), and world transforms are composed from the ancestors each
time they are asked for.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
from typing import Iterator, List, Optional, Sequence, Tuple

from scipy.spatial.transform import Rotation

from .geometry import (
    Box,
    Transform,
    Vector,
    as_vector,
    is_finite_vector,
    rotation_from_euler,
    rotation_to_euler,
    vector_add,
    vector_normalize,
    vector_reflect,
    vector_scale,
    vector_sub,
)
from .settings import DEFAULT_ATOM_SIZE, STANDARD_ROTATION


logger = logging.getLogger(__name__)

SIDE_COUNT = 6
MARKER_LENGTH = 1.0

# Local footprint of every atom before scaling.
UNIT_CUBE = Box((-0.5, -0.5, -0.5), (0.5, 0.5, 0.5))


class BodyKind(Enum):
    ATOM = "atom"
    MOLECULE = "molecule"


@dataclass(frozen=True)
class Side:
    index: int
    normal: Vector
    color: int


SIDES: Tuple[Side, ...] = (
    Side(0, (1.0, 0.0, 0.0), 0xFF0000),  # red
    Side(1, (-1.0, 0.0, 0.0), 0xFFA500),  # orange
    Side(2, (0.0, 1.0, 0.0), 0xFFFF00),  # yellow
    Side(3, (0.0, -1.0, 0.0), 0x008000),  # green
    Side(4, (0.0, 0.0, 1.0), 0x0000FF),  # blue
    Side(5, (0.0, 0.0, -1.0), 0x800080),  # purple
)


def get_side(index: int) -> Side:
    """Return the side with ``index``; anything outside [0, 6) is a caller bug."""
    if not isinstance(index, int) or not 0 <= index < SIDE_COUNT:
        raise ValueError(f"side must be between 0 and {SIDE_COUNT - 1}, got {index!r}")
    return SIDES[index]


@dataclass(frozen=True)
class Marker:
    """A render-only normal line sticking out of one side of an atom."""

    side: int
    color: int
    tip: Vector


def side_markers() -> Tuple[Marker, ...]:
    return tuple(Marker(side.index, side.color, vector_scale(side.normal, MARKER_LENGTH)) for side in SIDES)


@dataclass(eq=False)
class Body:
    """
    An atom or a molecule.

    ``orientation`` is the local rotation relative to the parent. It is kept
    as a ``Rotation`` rather than Euler angles so reparenting never has to
    pick between equivalent angle triples.
    """

    id: str
    kind: BodyKind
    position: Vector
    orientation: Rotation
    trajectory: Vector
    scale: float = 1.0
    rotation_increment: Vector = STANDARD_ROTATION
    children: List["Body"] = field(default_factory=list)
    parent: Optional["Body"] = field(default=None, repr=False)
    decorations: Tuple[Marker, ...] = ()

    @property
    def is_atom(self) -> bool:
        return self.kind is BodyKind.ATOM

    @property
    def is_molecule(self) -> bool:
        return self.kind is BodyKind.MOLECULE

    @property
    def rotation(self) -> Vector:
        """Local orientation as XYZ Euler angles in radians."""
        return rotation_to_euler(self.orientation)

    @rotation.setter
    def rotation(self, angles: Vector) -> None:
        self.orientation = rotation_from_euler(angles)

    def local_transform(self) -> Transform:
        return Transform.from_components(self.position, self.orientation, self.scale)

    def world_transform(self) -> Transform:
        local = self.local_transform()
        if self.parent is None:
            return local
        return self.parent.world_transform().compose(local)

    def world_position(self) -> Vector:
        return as_vector(self.world_transform().translation)

    def root(self) -> "Body":
        body = self
        while body.parent is not None:
            body = body.parent
        return body

    def atoms(self) -> Iterator["Body"]:
        """Yield every atom in this body, descending into nested molecules."""
        if self.is_atom:
            yield self
            return
        for child in self.children:
            yield from child.atoms()

    def atom_count(self) -> int:
        return sum(1 for _ in self.atoms())

    def bounding_box(self) -> Box:
        """
        World-space box around the renderable cubes.

        Decorations are never visited, so marker lines cannot widen the box.
        """
        if self.is_atom:
            return UNIT_CUBE.transformed(self.world_transform())
        boxes = [child.bounding_box() for child in self.children]
        if not boxes:
            raise ValueError(f"Molecule {self.id} has no children to bound.")
        box = boxes[0]
        for other in boxes[1:]:
            box = box.union(other)
        return box

    def attach(self, child: "Body") -> None:
        """Reparent ``child`` under this molecule without moving it in the world."""
        if not self.is_molecule:
            raise ValueError(f"Only molecules can own children; {self.id} is an atom.")
        if child is self:
            raise ValueError("A body cannot be attached to itself.")
        world = child.world_transform()
        if child.parent is not None:
            child.parent.children.remove(child)
        local = self.world_transform().inverse().compose(world)
        child.position, child.orientation, child.scale = local.decompose()
        child.parent = self
        self.children.append(child)
        logger.debug("Attached %s to %s", child.id, self.id)

    def advance(self, speed: float) -> None:
        """Apply one tick of spin (the increment composed in the body frame) and travel."""
        self.orientation = self.orientation * rotation_from_euler(self.rotation_increment)
        self.position = vector_add(self.position, vector_scale(self.trajectory, speed))

    def reverse_slightly(self, speed: float) -> None:
        self.position = vector_sub(self.position, vector_scale(self.trajectory, speed))

    def reflect(self, normal: Vector) -> None:
        self.set_trajectory(vector_reflect(self.trajectory, normal))

    def set_trajectory(self, trajectory: Vector) -> None:
        unit = vector_normalize(trajectory)
        if unit is None:
            raise ValueError(f"Trajectory for {self.id} must be non-zero, got {trajectory!r}")
        self.trajectory = unit


def _validate_components(position: Sequence[float], rotation: Sequence[float], scale: float) -> None:
    if not is_finite_vector(position):
        raise ValueError(f"position must be three finite numbers, got {position!r}")
    if not is_finite_vector(rotation):
        raise ValueError(f"rotation must be three finite numbers, got {rotation!r}")
    if not math.isfinite(scale) or scale <= 0.0:
        raise ValueError(f"scale must be a positive number, got {scale!r}")


def _unit_trajectory(trajectory: Sequence[float]) -> Vector:
    if not is_finite_vector(trajectory):
        raise ValueError(f"trajectory must be three finite numbers, got {trajectory!r}")
    unit = vector_normalize(as_vector(trajectory))
    if unit is None:
        raise ValueError(f"trajectory must be non-zero, got {trajectory!r}")
    return unit


def new_atom(
    body_id: str,
    position: Vector,
    rotation: Vector,
    trajectory: Vector,
    *,
    size: float = DEFAULT_ATOM_SIZE,
    rotation_increment: Vector = STANDARD_ROTATION,
) -> Body:
    _validate_components(position, rotation, size)
    return Body(
        id=body_id,
        kind=BodyKind.ATOM,
        position=as_vector(position),
        orientation=rotation_from_euler(as_vector(rotation)),
        trajectory=_unit_trajectory(trajectory),
        scale=float(size),
        rotation_increment=rotation_increment,
        decorations=side_markers(),
    )


def new_molecule(
    body_id: str,
    position: Vector,
    rotation: Vector,
    trajectory: Vector,
    *atoms: Body,
    rotation_increment: Vector = STANDARD_ROTATION,
) -> Body:
    _validate_components(position, rotation, 1.0)
    molecule = Body(
        id=body_id,
        kind=BodyKind.MOLECULE,
        position=as_vector(position),
        orientation=rotation_from_euler(as_vector(rotation)),
        trajectory=_unit_trajectory(trajectory),
        rotation_increment=rotation_increment,
    )
    for atom in atoms:
        molecule.attach(atom)
    return molecule
