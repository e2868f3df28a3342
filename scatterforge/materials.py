"""
Materials and the scatter contract.

Implements:
- Lambertian diffuse
- Metal (perfect specular reflection)
- Dielectric (glass, water - refraction with Schlick-weighted reflection)

The set is closed: these three classes are the only implementors of
``Material``. Every material is an immutable value that can be shared
between threads. Randomness comes from the generator passed to ``scatter``.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple
import math

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .hit_record import HitRecord
from .optics import reflect, refract, schlick
from .sampling import random_in_unit_sphere, thread_rng


@dataclass(frozen=True)
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered_ray: Ray
    is_specular: bool = False


def _check_albedo(albedo: Color, kind: str) -> None:
    if not isinstance(albedo, Vec3):
        raise TypeError(f"{kind} albedo must be a Vec3, got {type(albedo).__name__}")
    for channel in albedo:
        if not 0.0 <= channel <= 1.0:
            raise ValueError(f"{kind} albedo components must lie in [0, 1], got {albedo}")


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        """Compute the scattered ray and attenuation for one bounce.

        Args:
            ray_in: The incoming ray
            hit: Intersection record with the hit point and unit outward normal
            rng: Random generator (default: the calling thread's)

        Returns:
            ScatterResult if the ray scatters, None if it is absorbed
        """


@dataclass(frozen=True)
class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering.

    Attributes:
        albedo: The base color (RGB, each component 0-1)
    """
    albedo: Color

    def __post_init__(self):
        _check_albedo(self.albedo, 'Lambertian')

    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        direction = hit.normal + random_in_unit_sphere(rng)
        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, direction),
            is_specular=False,
        )


@dataclass(frozen=True)
class Metal(Material):
    """Metallic material with mirror reflection.

    Attributes:
        albedo: The reflection color (RGB, each component 0-1). Values
            outside [0, 1] raise ValueError, as for Lambertian.
    """
    albedo: Color

    def __post_init__(self):
        _check_albedo(self.albedo, 'Metal')

    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        reflected = reflect(ray_in.direction.normalize(), hit.normal)

        # Only scatter if reflection leaves the surface
        if reflected.dot(hit.normal) <= 0:
            return None

        return ScatterResult(
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, reflected),
            is_specular=True,
        )


@dataclass(frozen=True)
class Dielectric(Material):
    """Clear dielectric (glass-like) material.

    Each scatter either reflects or refracts, picked at random with the
    Schlick reflectance as the reflection probability. Total internal
    reflection always reflects. Glass does not tint: attenuation is white.

    Attributes:
        refractive_index: Index of refraction relative to the surrounding
            medium (1.0 = no bending, 1.5 = glass, 2.4 = diamond)
    """
    refractive_index: float = 1.5

    def __post_init__(self):
        ri = self.refractive_index
        if isinstance(ri, bool) or not isinstance(ri, (int, float)):
            raise TypeError(f"refractive_index must be a number, got {type(ri).__name__}")
        if not math.isfinite(ri) or ri <= 0:
            raise ValueError(f"refractive_index must be a positive finite number, got {ri}")

    def scatter(self, ray_in: Ray, hit: HitRecord,
                rng: Optional[np.random.Generator] = None) -> Optional[ScatterResult]:
        if rng is None:
            rng = thread_rng()

        refracted, reflect_prob = self._split(ray_in, hit)

        if rng.random() < reflect_prob:
            # Reflection uses the hit normal as given, not the flipped one
            direction = reflect(ray_in.direction, hit.normal)
        else:
            direction = refracted

        return ScatterResult(
            attenuation=Color(1.0, 1.0, 1.0),
            scattered_ray=Ray(hit.point, direction),
            is_specular=True,
        )

    def reflect_probability(self, ray_in: Ray, hit: HitRecord) -> float:
        """Probability that ``scatter`` reflects rather than refracts.

        Returns 1.0 under total internal reflection.
        """
        return self._split(ray_in, hit)[1]

    def _split(self, ray_in: Ray, hit: HitRecord) -> Tuple[Optional[Vec3], float]:
        """Return the refracted direction (or None) and the reflect probability."""
        ri = self.refractive_index
        direction = ray_in.direction
        d_dot_n = direction.dot(hit.normal)

        if d_dot_n > 0:
            # Leaving the medium
            outward_normal = -hit.normal
            ni_over_nt = ri
            cosine = d_dot_n / direction.length()
            cosine = math.sqrt(max(0.0, 1.0 - ri * ri * (1.0 - cosine * cosine)))
        else:
            outward_normal = hit.normal
            ni_over_nt = 1.0 / ri
            cosine = -d_dot_n / direction.length()

        refracted = refract(direction, outward_normal, ni_over_nt)
        if refracted is None:
            return None, 1.0
        return refracted, schlick(cosine, ri)
