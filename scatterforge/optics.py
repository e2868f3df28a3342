"""
Geometric optics helpers: mirror reflection, Snell refraction and the
Schlick approximation of Fresnel reflectance.

All functions are pure. Normals must be unit length; this is not checked.
"""

from __future__ import annotations
import math
from typing import Optional

from .vec3 import Vec3


def reflect(incident: Vec3, normal: Vec3) -> Vec3:
    """Reflect ``incident`` about the unit ``normal``.

    The incident vector does not need to be normalized; its length is kept.
    """
    return incident - normal * (2.0 * incident.dot(normal))


def refract(incident: Vec3, normal: Vec3, ni_over_nt: float) -> Optional[Vec3]:
    """Refract ``incident`` through a surface using Snell's law.

    Args:
        incident: Incoming direction (any non-zero length)
        normal: Unit normal on the side the ray arrives from
        ni_over_nt: Ratio of the refractive index being left to the one
            being entered

    Returns:
        The refracted direction, or None on total internal reflection
    """
    unit_incident = incident.normalize()
    cos_theta = unit_incident.dot(normal)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1.0 - cos_theta * cos_theta)

    if discriminant <= 0:
        return None

    return (unit_incident - normal * cos_theta) * ni_over_nt - normal * math.sqrt(discriminant)


def schlick(cosine: float, refractive_index: float) -> float:
    """Schlick's approximation for reflectance."""
    r0 = (1.0 - refractive_index) / (1.0 + refractive_index)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * pow(1.0 - cosine, 5)
