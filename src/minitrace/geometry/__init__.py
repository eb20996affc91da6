"""Geometry module for ray-primitive intersection.

Components:
    sphere: Ray-sphere intersection
    cylinder: Ray intersection with a finite, capped cylinder

Every routine comes in two forms: a plain-Python function returning
``Hit | None`` and a Taichi function (@ti.func) returning a HitRecord for
use inside kernels. Both apply the same inclusive [t_min, t_max] range.
"""

from .cylinder import hit_cylinder, hit_cylinder_ti
from .sphere import HitRecord, hit_sphere, hit_sphere_ti, vec3d

__all__ = [
    "HitRecord",
    "vec3d",
    "hit_sphere",
    "hit_sphere_ti",
    "hit_cylinder",
    "hit_cylinder_ti",
]
