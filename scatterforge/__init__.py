"""
scatterforge - Material scatter core for a Python ray tracer

Decides what happens when a ray hits a surface:
- Lambertian diffuse scattering
- Metal mirror reflection
- Dielectric refraction with Schlick-weighted reflection
- Per-thread random generators for concurrent render workers
- YAML/JSON material libraries
"""

__version__ = "0.1.0"
__author__ = "scatterforge contributors"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .hit_record import HitRecord
from .sampling import (
    random_in_unit_sphere, make_rng, spawn_rngs, thread_rng, seed_thread_rng,
    REJECTION_WARNING_THRESHOLD
)
from .optics import reflect, refract, schlick
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric
from .material_parser import (
    MaterialParser, MaterialParseError, load_materials, parse_materials, parse_material
)
from .probe import ProbeSettings, ScatterStats, probe_material, incident_ray
