"""Ray-sphere intersection.

Two versions of the same routine live here:

- ``hit_sphere`` works on Vector3/Ray values and returns ``Hit | None``.
  It is the reference used by the scene query and the tests.
- ``hit_sphere_ti`` is a Taichi function used by the shading kernel. It
  cannot return ``None`` so it returns a HitRecord whose ``hit`` flag must be
  checked before reading ``t`` or ``normal``.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

Using the half-b form:
    a      = dot(direction, direction)
    half_b = dot(origin - center, direction)
    c      = |origin - center|^2 - radius^2
    discriminant = half_b^2 - a*c

The smaller root is tried first; if it falls outside [t_min, t_max] the
larger one is tried. A ray starting inside the sphere therefore reports the
exit point.

Example:
    >>> from src.minitrace.core.ray import Ray
    >>> from src.minitrace.core.vector import Vector3
    >>> ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))
    >>> hit_sphere(ray, Vector3(0.0, 0.0, -5.0), 1.0, 1e-3, 1e9).t
    4.0
"""

import math

import taichi as ti
import taichi.math as tm

from src.minitrace.core.ray import Hit, Ray
from src.minitrace.core.vector import Vector3

# Double-precision 3-vector for kernel code
vec3d = ti.types.vector(3, ti.f64)


@ti.dataclass
class HitRecord:
    """Kernel-side intersection record.

    Attributes:
        hit: 1 if the ray intersected the primitive, 0 on a miss.
        t: The ray parameter of the hit. Only valid if hit == 1.
        normal: The outward unit normal. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f64
    normal: vec3d


def hit_sphere(
    ray: Ray,
    center: Vector3,
    radius: float,
    t_min: float,
    t_max: float,
) -> Hit | None:
    """Intersect a ray with a sphere.

    Args:
        ray: The ray to test. Its direction need not be unit length.
        center: The sphere center.
        radius: The sphere radius. Non-positive radii never hit.
        t_min: Smallest accepted ray parameter (inclusive).
        t_max: Largest accepted ray parameter (inclusive).

    Returns:
        The nearest Hit with t in [t_min, t_max], or None. The normal is
        (hit_point - center) / radius and is not flipped toward the ray.
    """
    if radius <= 0.0:
        return None

    oc = ray.origin - center
    a = ray.direction.dot(ray.direction)
    if a == 0.0:
        return None
    half_b = oc.dot(ray.direction)
    c = oc.dot(oc) - radius * radius

    discriminant = half_b * half_b - a * c
    if discriminant < 0.0:
        return None
    sqrt_d = math.sqrt(discriminant)

    t = (-half_b - sqrt_d) / a
    if t < t_min or t > t_max:
        t = (-half_b + sqrt_d) / a
        if t < t_min or t > t_max:
            return None

    point = ray.at(t)
    return Hit(t=t, normal=(point - center) / radius)


@ti.func
def hit_sphere_ti(
    ray_origin: vec3d,
    ray_direction: vec3d,
    center: vec3d,
    radius: ti.f64,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Kernel version of hit_sphere.

    Follows the same root order and inclusive range test as hit_sphere so
    both agree on every input.
    """
    did_hit = 0
    hit_t = 0.0
    hit_normal = vec3d(0.0, 0.0, 0.0)

    oc = ray_origin - center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(oc, ray_direction)
    c = tm.dot(oc, oc) - radius * radius
    discriminant = half_b * half_b - a * c

    if radius > 0.0 and a > 0.0 and discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        t = (-half_b - sqrt_d) / a
        valid = t >= t_min and t <= t_max
        if not valid:
            t = (-half_b + sqrt_d) / a
            valid = t >= t_min and t <= t_max

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_origin + t * ray_direction
            hit_normal = (hit_point - center) / radius

    return HitRecord(hit=did_hit, t=hit_t, normal=hit_normal)
