"""Immutable 3D vector type used throughout the tracer.

All geometry, camera and parser code works in double precision on plain
Python floats. Every operation returns a new Vector3; instances are never
mutated.

Example:
    >>> from src.minitrace.core.vector import Vector3
    >>> a = Vector3(1.0, 0.0, 0.0)
    >>> b = Vector3(0.0, 1.0, 0.0)
    >>> a.cross(b)
    Vector3(x=0.0, y=0.0, z=1.0)
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

# Below this magnitude normalized() leaves the vector untouched
NORMALIZE_EPSILON = 1e-12


@dataclass(frozen=True)
class Vector3:
    """A 3D vector (or point, or RGB color) with float64 components.

    Attributes:
        x: First component.
        y: Second component.
        z: Third component.
    """

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def from_iterable(cls, values: Iterable[float]) -> Vector3:
        """Build a vector from exactly three numbers.

        Raises:
            ValueError: If the iterable does not hold three values.
        """
        items = [float(v) for v in values]
        if len(items) != 3:
            raise ValueError(f"expected 3 components, got {len(items)}")
        return cls(items[0], items[1], items[2])

    def __add__(self, other: Vector3) -> Vector3:
        return Vector3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: Vector3) -> Vector3:
        return Vector3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> Vector3:
        return Vector3(self.x * scalar, self.y * scalar, self.z * scalar)

    __rmul__ = __mul__

    def __truediv__(self, scalar: float) -> Vector3:
        return Vector3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> Vector3:
        return Vector3(-self.x, -self.y, -self.z)

    def __iter__(self) -> Iterator[float]:
        yield self.x
        yield self.y
        yield self.z

    def dot(self, other: Vector3) -> float:
        """Dot product."""
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: Vector3) -> Vector3:
        """Cross product (right-handed)."""
        return Vector3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def length_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z

    def magnitude(self) -> float:
        """Euclidean norm."""
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    def normalized(self) -> Vector3:
        """Return the unit vector in the same direction.

        Vectors shorter than NORMALIZE_EPSILON are returned unchanged, so the
        result never contains NaN or Inf. Cylinder axes and sphere normals
        depend on this.
        """
        m = self.magnitude()
        if m < NORMALIZE_EPSILON:
            return self
        return Vector3(self.x / m, self.y / m, self.z / m)

    def near_zero(self, eps: float = 1e-8) -> bool:
        """True if every component is within eps of zero."""
        return abs(self.x) < eps and abs(self.y) < eps and abs(self.z) < eps

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)
