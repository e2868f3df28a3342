"""
Scatter statistics for a single material.

Fires many identical rays at a flat surface patch and tallies what the
material does with them. Useful for checking a material definition against
its expected reflectance, and for exercising the scatter contract from
several worker threads at once.
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional
import logging
import math

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray
from .hit_record import HitRecord
from .materials import Material, Dielectric
from .sampling import spawn_rngs

logger = logging.getLogger(__name__)

SURFACE_NORMAL = Vec3(0.0, 1.0, 0.0)


@dataclass
class ProbeSettings:
    """Configuration for a probe run."""
    trials: int = 10000
    angle: float = 0.0  # degrees from the normal
    inside: bool = False  # ray travels from inside the object outwards
    seed: Optional[int] = None
    workers: int = 1

    def __post_init__(self):
        if self.trials < 1:
            raise ValueError(f"trials must be at least 1, got {self.trials}")
        if not 0.0 <= self.angle < 90.0:
            raise ValueError(f"angle must lie in [0, 90) degrees, got {self.angle}")
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")


@dataclass
class ScatterStats:
    """Tallies from a probe run."""

    trials: int = 0
    scattered: int = 0
    reflected: int = 0
    transmitted: int = 0
    direction_sum: np.ndarray = field(default_factory=lambda: np.zeros(3))
    expected_reflectance: Optional[float] = None

    @property
    def absorbed(self) -> int:
        return self.trials - self.scattered

    @property
    def scatter_rate(self) -> float:
        if self.trials == 0:
            return 0.0
        return self.scattered / self.trials

    @property
    def reflect_fraction(self) -> float:
        """Share of scattered rays that stayed on the incident side."""
        if self.scattered == 0:
            return 0.0
        return self.reflected / self.scattered

    @property
    def mean_direction(self) -> Vec3:
        """Mean of the normalized scattered directions."""
        if self.scattered == 0:
            return Vec3(0, 0, 0)
        return Vec3.from_array(self.direction_sum / self.scattered)

    def merge(self, other: ScatterStats) -> ScatterStats:
        """Combine two tallies of the same experiment."""
        return ScatterStats(
            trials=self.trials + other.trials,
            scattered=self.scattered + other.scattered,
            reflected=self.reflected + other.reflected,
            transmitted=self.transmitted + other.transmitted,
            direction_sum=self.direction_sum + other.direction_sum,
            expected_reflectance=self.expected_reflectance,
        )


def incident_ray(angle: float, inside: bool = False) -> Ray:
    """Ray that hits the origin of the probe surface ``angle`` degrees off normal.

    From outside the ray travels against the normal; from inside it travels
    along it.
    """
    theta = math.radians(angle)
    vertical = math.cos(theta) if inside else -math.cos(theta)
    direction = Vec3(math.sin(theta), vertical, 0.0)
    return Ray(Point3(0, 0, 0) - direction, direction)


def _run_trials(material: Material, ray: Ray, hit: HitRecord, trials: int,
                rng: np.random.Generator) -> ScatterStats:
    stats = ScatterStats(trials=trials)
    incident_side = -math.copysign(1.0, ray.direction.dot(hit.normal))

    for _ in range(trials):
        result = material.scatter(ray, hit, rng)
        if result is None:
            continue

        direction = result.scattered_ray.direction
        stats.scattered += 1
        if direction.dot(hit.normal) * incident_side > 0:
            stats.reflected += 1
        else:
            stats.transmitted += 1
        stats.direction_sum += direction.normalize().to_array()

    return stats


def probe_material(material: Material, settings: Optional[ProbeSettings] = None) -> ScatterStats:
    """Scatter ``settings.trials`` identical rays off ``material``.

    Trials are split across ``settings.workers`` threads, each with its own
    generator spawned from ``settings.seed``.

    Args:
        material: Material under test
        settings: Probe configuration (uses defaults if None)

    Returns:
        Combined statistics of every trial
    """
    settings = settings if settings else ProbeSettings()

    ray = incident_ray(settings.angle, settings.inside)
    hit = HitRecord(point=Point3(0, 0, 0), normal=SURFACE_NORMAL, t=1.0,
                    front_face=not settings.inside, material=material)

    workers = min(settings.workers, settings.trials)
    rngs = spawn_rngs(settings.seed, workers)
    base, extra = divmod(settings.trials, workers)
    chunks: List[int] = [base + (1 if i < extra else 0) for i in range(workers)]

    logger.debug("Probing %r with %d trials on %d workers", material, settings.trials, workers)

    if workers > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            parts = list(executor.map(
                lambda args: _run_trials(material, ray, hit, *args),
                zip(chunks, rngs),
            ))
    else:
        parts = [_run_trials(material, ray, hit, chunks[0], rngs[0])]

    stats = parts[0]
    for part in parts[1:]:
        stats = stats.merge(part)

    if isinstance(material, Dielectric):
        stats.expected_reflectance = material.reflect_probability(ray, hit)

    return stats
