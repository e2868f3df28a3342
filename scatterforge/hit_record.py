"""
Intersection record handed to materials by the geometry layer.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


@dataclass(frozen=True)
class HitRecord:
    """Stores information about a single ray-object intersection.

    Materials only read ``point`` and ``normal``. The remaining fields are
    carried for the render loop.

    Attributes:
        point: The intersection point in world space
        normal: Unit-length outward surface normal. The geometry layer owns
            both the unit length and the orientation; neither is checked here.
        t: The ray parameter at intersection
        front_face: True if the ray arrived from outside the object
        material: The material at the hit point
    """
    point: Point3
    normal: Vec3
    t: float = 0.0
    front_face: bool = True
    material: Optional[Material] = None

    @classmethod
    def from_outward_normal(cls, ray: Ray, t: float, outward_normal: Vec3,
                            material: Optional[Material] = None) -> HitRecord:
        """Build a record at ``ray.at(t)`` keeping the outward normal.

        ``front_face`` is derived from the ray direction, but the stored
        normal is not flipped: the dielectric needs the outward orientation
        to tell entering rays from exiting ones.
        """
        return cls(
            point=ray.at(t),
            normal=outward_normal,
            t=t,
            front_face=ray.direction.dot(outward_normal) < 0,
            material=material,
        )
