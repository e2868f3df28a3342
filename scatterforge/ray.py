"""
Ray class for representing rays in 3D space.

A ray is defined by an origin point and a direction vector.
Ray(t) = origin + t * direction
"""

from __future__ import annotations
from .vec3 import Vec3, Point3


class Ray:
    """A ray with origin and direction.

    The direction is not required to be normalized; code that needs a unit
    direction normalizes locally.
    """

    __slots__ = ('_origin', '_direction')

    def __init__(self, origin: Point3, direction: Vec3):
        self._origin = origin
        self._direction = direction

    @property
    def origin(self) -> Point3:
        return self._origin

    @property
    def direction(self) -> Vec3:
        return self._direction

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t."""
        return self._origin + self._direction * t

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return self._origin == other._origin and self._direction == other._direction

    def __hash__(self) -> int:
        return hash((self._origin, self._direction))

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
