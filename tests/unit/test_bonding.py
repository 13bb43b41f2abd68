"""Tests for the face-alignment bonding checks."""

from __future__ import annotations

import math

import pytest

from cubesim.bodies import Body, new_atom, new_molecule
from cubesim.bonding import (
    is_atom_atom_bond,
    is_atom_molecule_bond,
    is_bond,
    is_molecule_molecule_bond,
    is_side_aligned,
    same_color_touching,
    world_normal,
)
from cubesim.geometry import Vector
from cubesim.settings import BondingSettings

CUBE_SIZE = 5.0
FLIPPED = (0.0, math.pi, 0.0)  # half turn about Y: +X and -X sides trade places
UNROTATED = (0.0, 0.0, 0.0)

NORMALS = BondingSettings(policy="normals")
TRAJECTORY = BondingSettings(policy="trajectory")


def atom(name: str, position: Vector, rotation: Vector = UNROTATED, trajectory: Vector = (1.0, 0.0, 0.0)) -> Body:
    return new_atom(name, position, rotation, trajectory, size=CUBE_SIZE)


def test_should_not_bond_atoms_that_are_far_away() -> None:
    atom1 = atom("a", (-50.0, 0.0, 0.0))
    atom2 = atom("b", (50.0, 0.0, 0.0), FLIPPED)
    assert not is_atom_atom_bond(atom1, atom2)
    # Faces are opposed, so only the box check keeps them apart.
    assert same_color_touching(atom1, atom2, NORMALS)
    assert not is_atom_atom_bond(atom1, atom2, NORMALS)


def test_should_not_bond_atoms_that_touch_different_colours() -> None:
    atom1 = atom("a", (-CUBE_SIZE / 2, 0.0, 0.0))
    atom2 = atom("b", (CUBE_SIZE / 2, 0.0, 0.0))
    assert not is_atom_atom_bond(atom1, atom2)
    assert not is_atom_atom_bond(atom1, atom2, NORMALS)


def test_should_not_bond_when_quarter_turn_brings_other_side_round() -> None:
    atom1 = atom("a", (-CUBE_SIZE / 2, 0.0, 0.0))
    atom2 = atom("b", (CUBE_SIZE / 2, 0.0, 0.0), (0.0, 0.0, math.pi / 2))
    assert not is_atom_atom_bond(atom1, atom2)


def test_should_bond_atoms_that_touch_same_colours() -> None:
    atom1 = atom("a", (-CUBE_SIZE / 2, 0.0, 0.0))
    atom2 = atom("b", (CUBE_SIZE / 2, 0.0, 0.0), FLIPPED)
    assert is_atom_atom_bond(atom1, atom2)
    assert is_atom_atom_bond(atom2, atom1)
    assert is_atom_atom_bond(atom1, atom2, NORMALS)


def test_coplanar_policy_rejects_faces_apart_but_boxes_overlapping() -> None:
    # Overlapping by one unit: the red faces are 1 apart, not on a common plane.
    atom1 = atom("a", (-2.0, 0.0, 0.0))
    atom2 = atom("b", (2.0, 0.0, 0.0), FLIPPED)
    assert not is_atom_atom_bond(atom1, atom2)
    assert is_atom_atom_bond(atom1, atom2, NORMALS)


def test_coplanar_policy_tolerates_small_gap_inside_threshold() -> None:
    atom1 = atom("a", (-2.498, 0.0, 0.0))
    atom2 = atom("b", (2.498, 0.0, 0.0), FLIPPED)
    assert is_atom_atom_bond(atom1, atom2)


def test_trajectory_policy_needs_face_pointing_along_travel() -> None:
    towards = atom("a", (-CUBE_SIZE / 2, 0.0, 0.0), trajectory=(1.0, 0.0, 0.0))
    away = atom("a", (-CUBE_SIZE / 2, 0.0, 0.0), trajectory=(0.0, 1.0, 0.0))
    other = atom("b", (CUBE_SIZE / 2, 0.0, 0.0), FLIPPED, trajectory=(-1.0, 0.0, 0.0))
    assert is_atom_atom_bond(towards, other, TRAJECTORY)
    assert not is_atom_atom_bond(away, other, TRAJECTORY)


def test_world_normal_follows_rotation_not_translation() -> None:
    body = atom("a", (40.0, -30.0, 12.0), FLIPPED)
    assert world_normal(body, 0) == pytest.approx((-1.0, 0.0, 0.0), abs=1e-9)
    assert world_normal(body, 2) == pytest.approx((0.0, 1.0, 0.0), abs=1e-9)


def test_world_normal_of_child_includes_parent_rotation() -> None:
    child = atom("a", (0.0, 0.0, 0.0))
    molecule = new_molecule("m", (10.0, 0.0, 0.0), (0.0, 0.0, math.pi / 2), (1.0, 0.0, 0.0))
    molecule.attach(child)
    assert world_normal(child, 0) == pytest.approx((1.0, 0.0, 0.0), abs=1e-9)
    molecule.rotation = (0.0, 0.0, math.pi)
    assert world_normal(child, 0) == pytest.approx((0.0, 1.0, 0.0), abs=1e-9)


@pytest.mark.parametrize("side", [-1, 6, 42])
def test_side_index_out_of_range_is_rejected(side: int) -> None:
    atom1 = atom("a", (0.0, 0.0, 0.0))
    atom2 = atom("b", (5.0, 0.0, 0.0))
    with pytest.raises(ValueError):
        is_side_aligned(side, atom1, atom2)
    with pytest.raises(ValueError):
        world_normal(atom1, side)


def test_degenerate_transform_never_aligns() -> None:
    atom1 = atom("a", (-CUBE_SIZE / 2, 0.0, 0.0))
    atom2 = atom("b", (CUBE_SIZE / 2, 0.0, 0.0), FLIPPED)
    atom2.scale = 0.0
    assert world_normal(atom2, 0) is None
    assert not same_color_touching(atom1, atom2, NORMALS)


def make_pair_molecule(name: str, x: float) -> Body:
    """Molecule holding a plain atom at x and a flipped atom at x + 5."""
    left = atom(f"{name}_l", (x, 0.0, 0.0))
    right = atom(f"{name}_r", (x + CUBE_SIZE, 0.0, 0.0), FLIPPED)
    return new_molecule(name, (x + CUBE_SIZE / 2, 0.0, 0.0), UNROTATED, (0.0, 1.0, 0.0), left, right)


def test_atom_bonds_to_matching_member_of_molecule() -> None:
    molecule = make_pair_molecule("m", 0.0)
    # The molecule's right atom is flipped, so its orange face points at +X.
    loose = atom("c", (2 * CUBE_SIZE, 0.0, 0.0))
    assert is_atom_molecule_bond(loose, molecule)
    assert is_bond(loose, molecule)
    assert is_bond(molecule, loose)


def test_atom_near_molecule_with_wrong_face_does_not_bond() -> None:
    molecule = make_pair_molecule("m", 0.0)
    loose = atom("c", (2 * CUBE_SIZE, 0.0, 0.0), FLIPPED)
    assert not is_atom_molecule_bond(loose, molecule)


def test_atom_far_from_molecule_does_not_bond() -> None:
    molecule = make_pair_molecule("m", 0.0)
    loose = atom("c", (60.0, 0.0, 0.0))
    assert not is_atom_molecule_bond(loose, molecule)


def test_molecules_bond_through_touching_members() -> None:
    first = make_pair_molecule("m1", 0.0)
    second = make_pair_molecule("m2", 2 * CUBE_SIZE)
    assert is_molecule_molecule_bond(first, second)
    assert is_molecule_molecule_bond(second, first)
    assert is_bond(first, second)


def test_molecules_apart_do_not_bond() -> None:
    first = make_pair_molecule("m1", 0.0)
    second = make_pair_molecule("m2", 30.0)
    assert not is_molecule_molecule_bond(first, second)


def test_markers_do_not_widen_bounding_box() -> None:
    body = atom("a", (0.0, 0.0, 0.0))
    assert len(body.decorations) == 6
    box = body.bounding_box()
    assert box.min == pytest.approx((-2.5, -2.5, -2.5))
    assert box.max == pytest.approx((2.5, 2.5, 2.5))
