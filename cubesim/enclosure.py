"""
The glass box that traps every particle.

The box is represented as six separate planes rather than one volume: a
volume test reports "intersecting" for anything inside it, whereas a plane
test only fires when a body actually touches a wall.
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional

from .bodies import Body
from .geometry import Box, Plane, Vector
from .settings import EnclosureSettings


logger = logging.getLogger(__name__)


class Enclosure:
    def __init__(
        self,
        min_corner: Vector = (-100.0, -100.0, -100.0),
        max_corner: Vector = (100.0, 100.0, 100.0),
        edge_clearance: float = 0.1,
    ):
        settings = EnclosureSettings(
            tuple(float(v) for v in min_corner),  # type: ignore[arg-type]
            tuple(float(v) for v in max_corner),  # type: ignore[arg-type]
            float(edge_clearance),
        )
        self.min_corner = settings.min_corner
        self.max_corner = settings.max_corner
        self.edge_clearance = settings.edge_clearance
        min_x, min_y, min_z = self.min_corner
        max_x, max_y, max_z = self.max_corner
        # Normals face inwards; order decides which wall wins when a corner is hit.
        self.planes: List[Plane] = [
            Plane((1.0, 0.0, 0.0), -min_x),
            Plane((-1.0, 0.0, 0.0), max_x),
            Plane((0.0, 1.0, 0.0), -min_y),
            Plane((0.0, -1.0, 0.0), max_y),
            Plane((0.0, 0.0, 1.0), -min_z),
            Plane((0.0, 0.0, -1.0), max_z),
        ]

    @classmethod
    def from_settings(cls, settings: EnclosureSettings) -> "Enclosure":
        return cls(settings.min_corner, settings.max_corner, settings.edge_clearance)

    @property
    def size(self) -> Vector:
        return (
            self.max_corner[0] - self.min_corner[0],
            self.max_corner[1] - self.min_corner[1],
            self.max_corner[2] - self.min_corner[2],
        )

    def collision(self, box: Box) -> Optional[Plane]:
        """Return the first wall the box touches, if any."""
        for plane in self.planes:
            if plane.intersects_box(box):
                return plane
        return None

    def maybe_bounce(self, body: Body, speed: float) -> Optional[Plane]:
        """
        Bounce ``body`` off a wall it touches by reflecting its trajectory.

        The body is first pulled back by one tick of travel so that it is not
        left embedded in the wall when its direction changes.
        """
        plane = self.collision(body.bounding_box())
        if plane is None:
            return None
        body.reverse_slightly(speed)
        body.reflect(plane.normal)
        logger.debug("%s bounced off wall with normal %s", body.id, plane.normal)
        return plane

    def random_pos(self, rng: random.Random) -> Vector:
        """Random position away from the walls by the edge clearance on each axis."""
        coords = []
        for low, high, extent in zip(self.min_corner, self.max_corner, self.size):
            clear = self.edge_clearance * extent
            coords.append(rng.uniform(low + clear, high - clear))
        return (coords[0], coords[1], coords[2])
