"""Ray intersection with a finite, capped right cylinder.

The cylinder starts at ``base`` and extends ``height`` units along the unit
vector ``k = normalize(axis)``. Three surfaces are tested:

- the lateral surface, solved as a 2D circle equation on the components of
  the ray perpendicular to the axis. A root only counts when its axial
  coordinate z = oc_par + t * d_par lies strictly inside (0, height);
- the bottom cap, the disk of the given radius centered at ``base`` with
  outward normal -k;
- the top cap, centered at ``base + height * k`` with outward normal +k.

Of all candidates inside [t_min, t_max] the smallest t wins, whichever
surface it belongs to.

Like the sphere module, a plain-Python ``hit_cylinder`` returning
``Hit | None`` sits next to a Taichi ``hit_cylinder_ti`` for kernels.
"""

import math

import taichi as ti
import taichi.math as tm

from src.minitrace.core.ray import Hit, Ray
from src.minitrace.core.vector import NORMALIZE_EPSILON, Vector3
from src.minitrace.geometry.sphere import HitRecord, vec3d

# Rays whose direction has less than this squared length perpendicular to
# the axis are treated as parallel to it (no lateral hit)
PARALLEL_EPSILON = 1e-12

# |dot(cap_normal, direction)| below this means the ray runs along the cap plane
CAP_PLANE_EPSILON = 1e-12

# Slack on the squared cap radius so points exactly on the rim are kept
CAP_RADIUS_EPSILON = 1e-12


def hit_cylinder(
    ray: Ray,
    base: Vector3,
    axis: Vector3,
    height: float,
    radius: float,
    t_min: float,
    t_max: float,
) -> Hit | None:
    """Intersect a ray with a capped cylinder.

    Args:
        ray: The ray to test. Its direction need not be unit length.
        base: Center of the bottom cap.
        axis: Cylinder axis. Normalized here, so any non-zero length works.
        height: Distance between the caps along the axis.
        radius: Cylinder radius.
        t_min: Smallest accepted ray parameter (inclusive).
        t_max: Largest accepted ray parameter (inclusive).

    Returns:
        The globally nearest Hit over the lateral surface and both caps, or
        None. Degenerate cylinders (zero axis, non-positive height or radius)
        never hit.
    """
    axis_length = axis.magnitude()
    if axis_length < NORMALIZE_EPSILON or height <= 0.0 or radius <= 0.0:
        return None
    k = axis / axis_length

    d = ray.direction
    oc = ray.origin - base
    d_par = d.dot(k)
    d_perp = d - k * d_par
    oc_par = oc.dot(k)
    oc_perp = oc - k * oc_par

    best: Hit | None = None

    def nearer(t: float) -> bool:
        return t_min <= t <= t_max and (best is None or t < best.t)

    # Lateral surface: |oc_perp + t * d_perp|^2 = radius^2
    a = d_perp.dot(d_perp)
    if a > PARALLEL_EPSILON:
        half_b = oc_perp.dot(d_perp)
        c = oc_perp.dot(oc_perp) - radius * radius
        discriminant = half_b * half_b - a * c
        if discriminant >= 0.0:
            sqrt_d = math.sqrt(discriminant)
            for t in ((-half_b - sqrt_d) / a, (-half_b + sqrt_d) / a):
                z = oc_par + t * d_par
                if 0.0 < z < height and nearer(t):
                    on_axis = base + k * z
                    best = Hit(t=t, normal=(ray.at(t) - on_axis).normalized())

    # End caps
    for center, normal in ((base, -k), (base + k * height, k)):
        denom = normal.dot(d)
        if abs(denom) <= CAP_PLANE_EPSILON:
            continue
        t = (center - ray.origin).dot(normal) / denom
        if not nearer(t):
            continue
        v = ray.at(t) - center
        v_perp = v - k * v.dot(k)
        if v_perp.dot(v_perp) <= radius * radius + CAP_RADIUS_EPSILON:
            best = Hit(t=t, normal=normal)

    return best


@ti.func
def _cap_candidate(
    ray_origin: vec3d,
    ray_direction: vec3d,
    center: vec3d,
    normal: vec3d,
    k: vec3d,
    radius: ti.f64,
) -> HitRecord:
    """Intersect the ray with one cap disk, ignoring t_min and t_max.

    ``hit`` is 1 when the plane hit lies on the disk; the normal is the cap normal.
    """
    found = 0
    t = 0.0
    denom = tm.dot(normal, ray_direction)
    if ti.abs(denom) > CAP_PLANE_EPSILON:
        t = tm.dot(center - ray_origin, normal) / denom
        v = ray_origin + t * ray_direction - center
        v_perp = v - tm.dot(v, k) * k
        if tm.dot(v_perp, v_perp) <= radius * radius + CAP_RADIUS_EPSILON:
            found = 1
    return HitRecord(hit=found, t=t, normal=normal)


@ti.func
def hit_cylinder_ti(
    ray_origin: vec3d,
    ray_direction: vec3d,
    base: vec3d,
    axis: vec3d,
    height: ti.f64,
    radius: ti.f64,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Kernel version of hit_cylinder with the same nearest-t rule."""
    did_hit = 0
    best_t = 0.0
    best_normal = vec3d(0.0, 0.0, 0.0)

    axis_length = tm.length(axis)
    if axis_length >= NORMALIZE_EPSILON and height > 0.0 and radius > 0.0:
        k = axis / axis_length
        oc = ray_origin - base
        d_par = tm.dot(ray_direction, k)
        d_perp = ray_direction - d_par * k
        oc_par = tm.dot(oc, k)
        oc_perp = oc - oc_par * k

        a = tm.dot(d_perp, d_perp)
        if a > PARALLEL_EPSILON:
            half_b = tm.dot(oc_perp, d_perp)
            c = tm.dot(oc_perp, oc_perp) - radius * radius
            discriminant = half_b * half_b - a * c
            if discriminant >= 0.0:
                sqrt_d = ti.sqrt(discriminant)
                for root in ti.static(range(2)):
                    # root 0 is the nearer solution, root 1 the farther
                    t = (-half_b + ti.static(2 * root - 1) * sqrt_d) / a
                    z = oc_par + t * d_par
                    in_range = t >= t_min and t <= t_max
                    if in_range and z > 0.0 and z < height and (did_hit == 0 or t < best_t):
                        did_hit = 1
                        best_t = t
                        best_normal = tm.normalize(ray_origin + t * ray_direction - (base + z * k))

        bottom = _cap_candidate(ray_origin, ray_direction, base, -k, k, radius)
        if bottom.hit == 1 and bottom.t >= t_min and bottom.t <= t_max:
            if did_hit == 0 or bottom.t < best_t:
                did_hit = 1
                best_t = bottom.t
                best_normal = bottom.normal

        top = _cap_candidate(ray_origin, ray_direction, base + height * k, k, k, radius)
        if top.hit == 1 and top.t >= t_min and top.t <= t_max:
            if did_hit == 0 or top.t < best_t:
                did_hit = 1
                best_t = top.t
                best_normal = top.normal

    return HitRecord(hit=did_hit, t=best_t, normal=best_normal)
