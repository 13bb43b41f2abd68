"""
Bonding checks: decide when two atoms or molecules should fuse.

Every check runs in two stages. A cheap bounding-box overlap test rejects
most pairs; only overlapping atoms get the per-side normal comparison.

Two atoms bond when, for some side index s, side s of one atom faces side s
of the other: their world normals are nearly anti-parallel, and the
configured policy's extra condition holds (see ``BondingSettings``).
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .bodies import SIDE_COUNT, Body, get_side
from .geometry import Box, Plane, Vector, vector_dot, vector_normalize, vector_scale
from .settings import BondingSettings


logger = logging.getLogger(__name__)

DEFAULT_BONDING = BondingSettings()


def world_normal(atom: Body, side: int) -> Optional[Vector]:
    """
    Outward unit normal of ``side`` in world space.

    Only the rotation and scale of the world transform apply. Returns None for
    a degenerate transform, which callers treat as "never aligned".
    """
    local_normal = get_side(side).normal
    return vector_normalize(atom.world_transform().apply_direction(local_normal))


def face_centre(atom: Body, side: int) -> Vector:
    """World position of the centre of ``side`` on the atom's unit cube."""
    local_centre = vector_scale(get_side(side).normal, 0.5)
    return atom.world_transform().apply_point(local_centre)


def is_side_aligned(side: int, atom1: Body, atom2: Body, settings: BondingSettings = DEFAULT_BONDING) -> bool:
    n1 = world_normal(atom1, side)
    n2 = world_normal(atom2, side)
    if n1 is None or n2 is None:
        logger.debug("Degenerate normal on side %d of %s/%s", side, atom1.id, atom2.id)
        return False

    # Same painted side facing each other: the normals point in opposite directions.
    if vector_dot(n1, n2) > -settings.collinear_threshold:
        return False

    if settings.policy == "coplanar":
        plane = Plane.from_normal_and_point(n1, face_centre(atom1, side))
        distance = plane.distance_to_point(face_centre(atom2, side))
        return abs(distance) <= settings.plane_distance_threshold
    if settings.policy == "trajectory":
        return vector_dot(n1, atom1.root().trajectory) >= settings.collinear_threshold
    return True


def same_color_touching(atom1: Body, atom2: Body, settings: BondingSettings = DEFAULT_BONDING) -> bool:
    for side in range(SIDE_COUNT):
        if is_side_aligned(side, atom1, atom2, settings):
            return True
    return False


def is_atom_atom_bond(atom1: Body, atom2: Body, settings: BondingSettings = DEFAULT_BONDING) -> bool:
    """Check if two atoms should bond."""
    return atom1.bounding_box().intersects(atom2.bounding_box()) and same_color_touching(atom1, atom2, settings)


def is_atom_molecule_bond(atom: Body, molecule: Body, settings: BondingSettings = DEFAULT_BONDING) -> bool:
    """Check if a loose atom should be absorbed by a molecule."""
    atom_box = atom.bounding_box()
    if not atom_box.intersects(molecule.bounding_box()):
        return False

    for member in molecule.atoms():
        if atom_box.intersects(member.bounding_box()) and same_color_touching(atom, member, settings):
            return True
    return False


def is_molecule_molecule_bond(molecule1: Body, molecule2: Body, settings: BondingSettings = DEFAULT_BONDING) -> bool:
    """Check if two molecules should merge."""
    if not molecule1.bounding_box().intersects(molecule2.bounding_box()):
        return False

    members1 = _boxed_atoms(molecule1)
    members2 = _boxed_atoms(molecule2)
    for atom1, box1 in members1:
        for atom2, box2 in members2:
            if box1.intersects(box2) and same_color_touching(atom1, atom2, settings):
                return True
    return False


def is_bond(body1: Body, body2: Body, settings: BondingSettings = DEFAULT_BONDING) -> bool:
    """Dispatch to the check matching the kinds of the two bodies."""
    if body1.is_atom and body2.is_atom:
        return is_atom_atom_bond(body1, body2, settings)
    if body1.is_atom:
        return is_atom_molecule_bond(body1, body2, settings)
    if body2.is_atom:
        return is_atom_molecule_bond(body2, body1, settings)
    return is_molecule_molecule_bond(body1, body2, settings)


def _boxed_atoms(molecule: Body) -> List[Tuple[Body, Box]]:
    return [(atom, atom.bounding_box()) for atom in molecule.atoms()]
