"""
Geometry kernel for the cube simulation.

Vectors are plain ``(x, y, z)`` float tuples so they stay immutable and cheap
to copy between bodies. Affine transforms hold numpy arrays and orientations
are scipy ``Rotation`` objects.

Conventions:
    - Euler angles are in radians and intrinsic XYZ ("XYZ" in scipy), so
      R = Rx * Ry * Rz.
    - A Transform maps local points to the parent space: p' = L @ p + t.
    - Boxes are axis-aligned; intersection is inclusive so touching faces count.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import math
import random
from typing import Iterable, List, Optional, Tuple, Union

import numpy as np
from scipy.spatial.transform import Rotation


Vector = Tuple[float, float, float]

EULER_ORDER = "XYZ"
ZERO_THRESHOLD = 0.001
BOX_TOLERANCE = 1e-9
DETERMINANT_EPSILON = 1e-12


def vector_add(a: Vector, b: Vector) -> Vector:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def vector_sub(a: Vector, b: Vector) -> Vector:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def vector_scale(v: Vector, scalar: float) -> Vector:
    return (v[0] * scalar, v[1] * scalar, v[2] * scalar)


def vector_dot(a: Vector, b: Vector) -> float:
    return a[0] * b[0] + a[1] * b[1] + a[2] * b[2]


def vector_cross(a: Vector, b: Vector) -> Vector:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def vector_length(v: Vector) -> float:
    return math.sqrt(vector_dot(v, v))


def vector_zero() -> Vector:
    return (0.0, 0.0, 0.0)


def vector_midpoint(a: Vector, b: Vector) -> Vector:
    return vector_scale(vector_add(a, b), 0.5)


def vector_is_zero(v: Vector, threshold: float = ZERO_THRESHOLD) -> bool:
    """True when every component is within ``threshold`` of zero."""
    return abs(v[0]) <= threshold and abs(v[1]) <= threshold and abs(v[2]) <= threshold


def vector_normalize(v: Vector) -> Optional[Vector]:
    """Return the unit vector along ``v``, or None if ``v`` has no usable length."""
    length = vector_length(v)
    if length < DETERMINANT_EPSILON or not math.isfinite(length):
        return None
    return vector_scale(v, 1.0 / length)


def vector_reflect(v: Vector, normal: Vector) -> Vector:
    """Mirror ``v`` across the plane whose unit normal is ``normal``."""
    return vector_sub(v, vector_scale(normal, 2.0 * vector_dot(v, normal)))


def is_finite_vector(v: Iterable[float]) -> bool:
    values = list(v)
    return len(values) == 3 and all(math.isfinite(float(value)) for value in values)


def as_vector(values: Iterable[float]) -> Vector:
    x, y, z = (float(v) for v in values)
    return (x, y, z)


def rotation_from_euler(angles: Vector) -> Rotation:
    return Rotation.from_euler(EULER_ORDER, angles)


def rotation_to_euler(rotation: Rotation) -> Vector:
    return as_vector(rotation.as_euler(EULER_ORDER))


@dataclass(frozen=True, eq=False)
class Transform:
    """Affine transform with a 3x3 linear part and a translation."""

    linear: np.ndarray = field(default_factory=lambda: np.eye(3))
    translation: np.ndarray = field(default_factory=lambda: np.zeros(3))

    @classmethod
    def from_components(
        cls, position: Vector, rotation: Union[Rotation, Vector], scale: float
    ) -> "Transform":
        """Build from a position, an orientation (``Rotation`` or XYZ Euler angles) and a uniform scale."""
        if not isinstance(rotation, Rotation):
            rotation = rotation_from_euler(rotation)
        return cls(rotation.as_matrix() * scale, np.asarray(position, dtype=float))

    def compose(self, other: "Transform") -> "Transform":
        """Return the transform that applies ``other`` first, then ``self``."""
        return Transform(self.linear @ other.linear, self.linear @ other.translation + self.translation)

    def inverse(self) -> "Transform":
        if abs(np.linalg.det(self.linear)) < DETERMINANT_EPSILON:
            raise ValueError("Transform is singular and cannot be inverted.")
        inv_linear = np.linalg.inv(self.linear)
        return Transform(inv_linear, -(inv_linear @ self.translation))

    def apply_point(self, point: Vector) -> Vector:
        return as_vector(self.linear @ np.asarray(point, dtype=float) + self.translation)

    def apply_direction(self, direction: Vector) -> Vector:
        """Apply only the linear part, so translation does not leak into normals."""
        return as_vector(self.linear @ np.asarray(direction, dtype=float))

    def decompose(self) -> Tuple[Vector, Rotation, float]:
        """Split into (position, orientation, uniform scale)."""
        scale = float(np.linalg.norm(self.linear[:, 0]))
        if scale < DETERMINANT_EPSILON:
            raise ValueError("Transform has zero scale and cannot be decomposed.")
        return as_vector(self.translation), Rotation.from_matrix(self.linear / scale), scale


@dataclass(frozen=True)
class Box:
    """Axis-aligned bounding box."""

    min: Vector
    max: Vector

    @classmethod
    def from_points(cls, points: Iterable[Vector]) -> "Box":
        pts = np.asarray(list(points), dtype=float)
        if pts.size == 0:
            raise ValueError("Cannot build a bounding box from zero points.")
        return cls(as_vector(pts.min(axis=0)), as_vector(pts.max(axis=0)))

    def corners(self) -> List[Vector]:
        return [
            (x, y, z)
            for x in (self.min[0], self.max[0])
            for y in (self.min[1], self.max[1])
            for z in (self.min[2], self.max[2])
        ]

    def transformed(self, transform: Transform) -> "Box":
        points = np.asarray(self.corners()) @ transform.linear.T + transform.translation
        return Box(as_vector(points.min(axis=0)), as_vector(points.max(axis=0)))

    def union(self, other: "Box") -> "Box":
        return Box(
            (min(self.min[0], other.min[0]), min(self.min[1], other.min[1]), min(self.min[2], other.min[2])),
            (max(self.max[0], other.max[0]), max(self.max[1], other.max[1]), max(self.max[2], other.max[2])),
        )

    def intersects(self, other: "Box") -> bool:
        for axis in range(3):
            if self.max[axis] + BOX_TOLERANCE < other.min[axis]:
                return False
            if other.max[axis] + BOX_TOLERANCE < self.min[axis]:
                return False
        return True

    def center(self) -> Vector:
        return vector_midpoint(self.min, self.max)

    def size(self) -> Vector:
        return vector_sub(self.max, self.min)


@dataclass(frozen=True)
class Plane:
    """
    Plane ``normal . p + constant = 0`` with a unit ``normal``.

    Signed distances are positive on the side the normal points to.
    """

    normal: Vector
    constant: float

    @classmethod
    def from_normal_and_point(cls, normal: Vector, point: Vector) -> "Plane":
        return cls(normal, -vector_dot(point, normal))

    def distance_to_point(self, point: Vector) -> float:
        return vector_dot(self.normal, point) + self.constant

    def intersects_box(self, box: Box) -> bool:
        low = 0.0
        high = 0.0
        for axis in range(3):
            n = self.normal[axis]
            if n > 0:
                low += n * box.min[axis]
                high += n * box.max[axis]
            else:
                low += n * box.max[axis]
                high += n * box.min[axis]
        return low <= -self.constant <= high


def random_vector(rng: random.Random, low: float, high: float) -> Vector:
    return (rng.uniform(low, high), rng.uniform(low, high), rng.uniform(low, high))


def random_unit_vector(rng: random.Random) -> Vector:
    while True:
        unit = vector_normalize(random_vector(rng, -1.0, 1.0))
        if unit is not None:
            return unit


def random_euler(rng: random.Random) -> Vector:
    """Random Euler angles covering the full circle on each axis."""
    return random_vector(rng, -2.0 * math.pi, 2.0 * math.pi)
