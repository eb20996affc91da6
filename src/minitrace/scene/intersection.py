"""Scene-level ray intersection.

Finds the closest primitive hit over every sphere and cylinder in a Scene.
The search narrows ``t_max`` to the closest t found so far, the same way the
shading kernel does, so the Python query and the kernel agree on which
primitive is hit (on an exact tie the later primitive wins).

The kernel cannot walk Scene objects, so ``pack_scene`` flattens the scene
into float64 arrays that are passed to it as ndarrays:

    spheres:   (S, 4)  center.x, center.y, center.z, radius
    cylinders: (C, 8)  base.xyz, axis.xyz, height, radius

Both arrays have at least one row so an empty scene still yields valid
kernel arguments; the real counts travel alongside.

Example:
    >>> from src.minitrace.core.ray import Ray
    >>> from src.minitrace.core.vector import Vector3
    >>> from src.minitrace.scene.intersection import intersect_scene
    >>> ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))
    >>> hit = intersect_scene(scene, ray, 1e-6, 1e9)
    >>> hit.object_name if hit else None
    'ball'
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.minitrace.core.ray import Ray
from src.minitrace.core.vector import Vector3
from src.minitrace.geometry.cylinder import hit_cylinder
from src.minitrace.geometry.sphere import hit_sphere
from src.minitrace.scene.manager import Scene

SPHERE_COLUMNS = 4
CYLINDER_COLUMNS = 8


@dataclass(frozen=True)
class SceneHit:
    """The closest intersection between a ray and a scene.

    Attributes:
        t: The ray parameter of the hit.
        normal: Outward unit normal of the hit surface.
        material_ref: Material name of the hit primitive.
        object_name: Name of the hit sphere or cylinder.
    """

    t: float
    normal: Vector3
    material_ref: str
    object_name: str


@dataclass(frozen=True)
class SceneArrays:
    """Kernel-ready copy of a scene's geometry.

    Attributes:
        spheres: float64 array of shape (max(S, 1), 4).
        num_spheres: Number of valid sphere rows.
        cylinders: float64 array of shape (max(C, 1), 8).
        num_cylinders: Number of valid cylinder rows.
    """

    spheres: npt.NDArray[np.float64]
    num_spheres: int
    cylinders: npt.NDArray[np.float64]
    num_cylinders: int


def intersect_scene(scene: Scene, ray: Ray, t_min: float, t_max: float) -> SceneHit | None:
    """Find the closest hit over all primitives in the scene.

    Args:
        scene: The scene to test.
        ray: The ray to trace.
        t_min: Smallest accepted ray parameter (inclusive).
        t_max: Largest accepted ray parameter (inclusive).

    Returns:
        The closest SceneHit, or None if nothing is hit.
    """
    closest_t = t_max
    result: SceneHit | None = None

    for sphere in scene.spheres:
        hit = hit_sphere(ray, sphere.center, sphere.radius, t_min, closest_t)
        if hit is not None:
            closest_t = hit.t
            result = SceneHit(hit.t, hit.normal, sphere.material_ref, sphere.name)

    for cylinder in scene.cylinders:
        hit = hit_cylinder(
            ray, cylinder.base, cylinder.axis, cylinder.height, cylinder.radius, t_min, closest_t
        )
        if hit is not None:
            closest_t = hit.t
            result = SceneHit(hit.t, hit.normal, cylinder.material_ref, cylinder.name)

    return result


def pack_scene(scene: Scene) -> SceneArrays:
    """Flatten the scene geometry into float64 arrays for the shading kernel."""
    spheres = np.zeros((max(len(scene.spheres), 1), SPHERE_COLUMNS), dtype=np.float64)
    for i, sphere in enumerate(scene.spheres):
        spheres[i] = (*sphere.center.as_tuple(), sphere.radius)

    cylinders = np.zeros((max(len(scene.cylinders), 1), CYLINDER_COLUMNS), dtype=np.float64)
    for i, cylinder in enumerate(scene.cylinders):
        cylinders[i] = (
            *cylinder.base.as_tuple(),
            *cylinder.axis.as_tuple(),
            cylinder.height,
            cylinder.radius,
        )

    return SceneArrays(
        spheres=spheres,
        num_spheres=len(scene.spheres),
        cylinders=cylinders,
        num_cylinders=len(scene.cylinders),
    )
