"""Core rendering module.

Components:
    vector: Immutable 3-vector used by the Python-side code
    ray: Ray and intersection result types
    integrator: Primary-ray shading kernel and image assembly
"""

from .ray import Hit, Ray
from .vector import NORMALIZE_EPSILON, Vector3

# Note: integrator is NOT imported here to avoid circular imports (it depends on
# the scene package, which depends on core). Import it directly:
#   from src.minitrace.core.integrator import render_image

__all__ = [
    "Vector3",
    "NORMALIZE_EPSILON",
    "Ray",
    "Hit",
]
