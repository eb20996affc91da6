"""Ray data structure and the intersection result type.

Example:
    >>> from src.minitrace.core.ray import Ray
    >>> from src.minitrace.core.vector import Vector3
    >>> ray = Ray(origin=Vector3(0.0, 0.0, 0.0), direction=Vector3(0.0, 0.0, -1.0))
    >>> ray.at(5.0)  # Point 5 units along the ray
    Vector3(x=0.0, y=0.0, z=-5.0)
"""

from __future__ import annotations

from dataclasses import dataclass

from src.minitrace.core.vector import Vector3


@dataclass(frozen=True)
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray.
        direction: The direction vector of the ray. Cameras always emit unit
            directions, but nothing here requires it; the intersection
            routines use the actual direction length.
    """

    origin: Vector3
    direction: Vector3

    def at(self, t: float) -> Vector3:
        """Compute the point origin + t * direction."""
        return self.origin + self.direction * t


@dataclass(frozen=True)
class Hit:
    """A successful ray-primitive intersection.

    Misses are represented by ``None`` rather than a flagged record.

    Attributes:
        t: The ray parameter of the intersection.
        normal: Unit surface normal at the hit point. It is the geometric
            outward normal and is not flipped to face the ray.
    """

    t: float
    normal: Vector3
