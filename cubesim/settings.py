"""
Construction-time settings for a cube simulation.

Units are arbitrary scene units; atoms are ``atom_size`` units wide and move
``MotionSettings.speed`` units per tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
from typing import Optional

from .geometry import Vector, is_finite_vector


ALIGNMENT_POLICIES = ("normals", "coplanar", "trajectory")
INITIAL_ROTATION_POLICIES = ("random", "identity")

DEFAULT_ATOM_SIZE = 5.0
STANDARD_ROTATION: Vector = (0.01, 0.002, 0.004)


@dataclass
class EnclosureSettings:
    min_corner: Vector = (-100.0, -100.0, -100.0)
    max_corner: Vector = (100.0, 100.0, 100.0)
    edge_clearance: float = 0.1

    def __post_init__(self) -> None:
        if not is_finite_vector(self.min_corner) or not is_finite_vector(self.max_corner):
            raise ValueError("Enclosure corners must be three finite numbers.")
        for axis, (low, high) in enumerate(zip(self.min_corner, self.max_corner)):
            if low >= high:
                raise ValueError(f"Enclosure axis {axis} has min {low} >= max {high}.")
        if not 0.0 <= self.edge_clearance < 0.5:
            raise ValueError("edge_clearance must be in [0, 0.5).")


@dataclass
class BondingSettings:
    """
    Thresholds for the face-alignment test.

    ``policy`` selects what must hold besides opposed same-side normals:
      - "normals": nothing else.
      - "coplanar": the two faces lie within ``plane_distance_threshold``.
      - "trajectory": the face normal points along the body's trajectory.
    """

    policy: str = "coplanar"
    collinear_threshold: float = 0.99
    plane_distance_threshold: float = 0.01

    def __post_init__(self) -> None:
        if self.policy not in ALIGNMENT_POLICIES:
            raise ValueError(f"Unknown bonding policy {self.policy!r}; expected one of {ALIGNMENT_POLICIES}.")
        if not 0.0 < self.collinear_threshold <= 1.0:
            raise ValueError("collinear_threshold must be in (0, 1].")
        if self.plane_distance_threshold < 0.0:
            raise ValueError("plane_distance_threshold must be non-negative.")


@dataclass
class MotionSettings:
    speed: float = 0.5
    rotation_increment: Vector = STANDARD_ROTATION

    def __post_init__(self) -> None:
        if not math.isfinite(self.speed) or self.speed < 0.0:
            raise ValueError("speed must be a finite, non-negative number.")
        if not is_finite_vector(self.rotation_increment):
            raise ValueError("rotation_increment must be three finite numbers.")


@dataclass
class MoleculeSettings:
    initial_rotation: str = "random"

    def __post_init__(self) -> None:
        if self.initial_rotation not in INITIAL_ROTATION_POLICIES:
            raise ValueError(
                f"Unknown initial_rotation {self.initial_rotation!r}; expected one of {INITIAL_ROTATION_POLICIES}."
            )


@dataclass
class SimulationSettings:
    enclosure: EnclosureSettings = field(default_factory=EnclosureSettings)
    bonding: BondingSettings = field(default_factory=BondingSettings)
    motion: MotionSettings = field(default_factory=MotionSettings)
    molecules: MoleculeSettings = field(default_factory=MoleculeSettings)
    atom_size: float = DEFAULT_ATOM_SIZE
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.atom_size) or self.atom_size <= 0.0:
            raise ValueError("atom_size must be a positive number.")
