"""Primary-ray shading and image assembly.

Each camera ray is traced once against the scene and shaded without
bounces:

    hit:  color = 0.5 * normal + 0.5        (normal visualisation)
    miss: t = 0.5 * (unit_direction.y + 1)
          color = (1 - t) * white + t * (0.5, 0.7, 1.0)   (sky gradient)

The per-ray work runs in a Taichi kernel over float64 ndarrays, one parallel
iteration per ray. Ray generation stays on the camera's sequential random
stream, so the image only depends on the config and scene, never on the
kernel's thread schedule.

``ray_color`` is the plain-Python version of the kernel body and is used as
the reference in tests.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.minitrace.camera.thin_lens import Camera
    >>> from src.minitrace.core.integrator import render_image
    >>> camera = Camera.from_config(config)
    >>> image = render_image(camera, scene)  # (height, width, 3) in [0, 1]
"""

from collections.abc import Callable

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.minitrace.camera.thin_lens import Camera
from src.minitrace.core.ray import Ray
from src.minitrace.core.vector import Vector3
from src.minitrace.geometry.cylinder import hit_cylinder_ti
from src.minitrace.geometry.sphere import hit_sphere_ti, vec3d
from src.minitrace.scene.intersection import SceneArrays, intersect_scene, pack_scene
from src.minitrace.scene.manager import Scene

# =============================================================================
# Rendering Constants
# =============================================================================

# Accepted ray parameter range for primary rays
T_MIN = 1e-6
T_MAX = 1e9

# Sky gradient endpoints: horizon (t = 0) and zenith (t = 1)
HORIZON_COLOR = (1.0, 1.0, 1.0)
SKY_COLOR = (0.5, 0.7, 1.0)

_HORIZON_COLOR_TI = vec3d(*HORIZON_COLOR)
_SKY_COLOR_TI = vec3d(*SKY_COLOR)

# Image rows generated and shaded per block
DEFAULT_BATCH_ROWS = 16

RayArray = npt.NDArray[np.float64]


# =============================================================================
# Reference Shading
# =============================================================================


def sky_color(direction: Vector3) -> Vector3:
    """Background color seen along a direction that hits nothing."""
    unit = direction.normalized()
    t = 0.5 * (unit.y + 1.0)
    return Vector3(*HORIZON_COLOR) * (1.0 - t) + Vector3(*SKY_COLOR) * t


def ray_color(scene: Scene, ray: Ray) -> Vector3:
    """Shade one primary ray.

    Args:
        scene: The scene to trace against.
        ray: The primary ray.

    Returns:
        The normal-visualisation color on a hit, the sky gradient otherwise.
        Components are in [0, 1] for unit normals.
    """
    hit = intersect_scene(scene, ray, T_MIN, T_MAX)
    if hit is None:
        return sky_color(ray.direction)
    return hit.normal * 0.5 + Vector3(0.5, 0.5, 0.5)


# =============================================================================
# Shading Kernel
# =============================================================================


@ti.kernel
def _shade_kernel(
    origins: ti.types.ndarray(dtype=ti.f64, ndim=2),
    directions: ti.types.ndarray(dtype=ti.f64, ndim=2),
    spheres: ti.types.ndarray(dtype=ti.f64, ndim=2),
    num_spheres: ti.i32,
    cylinders: ti.types.ndarray(dtype=ti.f64, ndim=2),
    num_cylinders: ti.i32,
    colors: ti.types.ndarray(dtype=ti.f64, ndim=2),
):
    """Shade every ray; writes one RGB row per ray into ``colors``."""
    for i in range(origins.shape[0]):
        ray_origin = vec3d(origins[i, 0], origins[i, 1], origins[i, 2])
        ray_direction = vec3d(directions[i, 0], directions[i, 1], directions[i, 2])

        # Closest hit: narrow t_max to the best t so far
        did_hit = 0
        closest_t = T_MAX
        normal = vec3d(0.0, 0.0, 0.0)

        for s in range(num_spheres):
            center = vec3d(spheres[s, 0], spheres[s, 1], spheres[s, 2])
            rec = hit_sphere_ti(ray_origin, ray_direction, center, spheres[s, 3], T_MIN, closest_t)
            if rec.hit == 1:
                did_hit = 1
                closest_t = rec.t
                normal = rec.normal

        for c in range(num_cylinders):
            base = vec3d(cylinders[c, 0], cylinders[c, 1], cylinders[c, 2])
            axis = vec3d(cylinders[c, 3], cylinders[c, 4], cylinders[c, 5])
            rec = hit_cylinder_ti(
                ray_origin,
                ray_direction,
                base,
                axis,
                cylinders[c, 6],
                cylinders[c, 7],
                T_MIN,
                closest_t,
            )
            if rec.hit == 1:
                did_hit = 1
                closest_t = rec.t
                normal = rec.normal

        color = vec3d(0.0, 0.0, 0.0)
        if did_hit == 1:
            color = 0.5 * normal + 0.5
        else:
            unit = ray_direction
            length = tm.length(ray_direction)
            if length > 0.0:
                unit = ray_direction / length
            t = 0.5 * (unit.y + 1.0)
            color = (1.0 - t) * _HORIZON_COLOR_TI + t * _SKY_COLOR_TI

        for k in ti.static(range(3)):
            colors[i, k] = color[k]


def shade_rays(origins: RayArray, directions: RayArray, scene: Scene | SceneArrays) -> RayArray:
    """Shade a batch of rays in parallel.

    Args:
        origins: float64 array of shape (N, 3).
        directions: float64 array of shape (N, 3).
        scene: A Scene, or the SceneArrays already packed from one.

    Returns:
        float64 array of shape (N, 3) with one color per ray.

    Raises:
        ValueError: If the ray arrays do not have matching (N, 3) shapes.
    """
    if origins.ndim != 2 or origins.shape[1] != 3 or origins.shape != directions.shape:
        raise ValueError(
            f"Ray arrays must both have shape (N, 3): {origins.shape} vs {directions.shape}"
        )

    arrays = scene if isinstance(scene, SceneArrays) else pack_scene(scene)
    colors = np.zeros(origins.shape, dtype=np.float64)
    if origins.shape[0] == 0:
        return colors

    _shade_kernel(
        np.ascontiguousarray(origins, dtype=np.float64),
        np.ascontiguousarray(directions, dtype=np.float64),
        arrays.spheres,
        arrays.num_spheres,
        arrays.cylinders,
        arrays.num_cylinders,
        colors,
    )
    return colors


# =============================================================================
# Public Rendering API
# =============================================================================


def render_image(
    camera: Camera,
    scene: Scene,
    *,
    batch_rows: int = DEFAULT_BATCH_ROWS,
    callback: Callable[[int, int], None] | None = None,
) -> npt.NDArray[np.float64]:
    """Render the full image.

    Rays are generated and shaded one block of image rows at a time, top to
    bottom, so only one block of rays is held in memory. The camera stream is
    still consumed exactly as a sequential per-pixel loop would consume it.

    Args:
        camera: The camera; its random stream is advanced.
        scene: The scene to render.
        batch_rows: Image rows generated and shaded per block.
        callback: Optional function called as callback(rows_done, total_rows)
            after each batch.

    Returns:
        float64 array of shape (height, width, 3): the per-pixel average of
        the sample colors, clamped to [0, 1]. Row 0 is the top of the image.
    """
    width = camera.image_width
    height = camera.image_height
    spp = camera.samples_per_pixel
    arrays = pack_scene(scene)
    image = np.empty((height, width, 3), dtype=np.float64)

    batch_rows = max(1, batch_rows)
    for row in range(0, height, batch_rows):
        end = min(row + batch_rows, height)
        origins, directions = camera.generate_rays(row, end)
        colors = shade_rays(origins, directions, arrays)
        image[row:end] = colors.reshape(end - row, width, spp, 3).sum(axis=2) / spp
        if callback is not None:
            callback(end, height)

    return np.clip(image, 0.0, 1.0)
