"""Thin-lens camera model with per-sample jitter.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits ``focus_dist`` units in front of ``lookfrom``. A pinhole
camera is the special case ``aperture == 0`` (every ray starts at
``lookfrom``); with a positive aperture, ray origins are spread over a disk
of radius ``aperture / 2`` in the (u, v) plane and all rays for a pixel
converge on the focal plane.

Each camera owns a private, seeded ``numpy.random.Generator``. Jitter and
lens samples are drawn from it in call order, so two cameras built with the
same parameters produce bit-identical rays for the same call sequence, and
calling ``get_ray`` out of order changes the results.

Precondition: ``vup`` must not be parallel to ``lookfrom - lookat``. A
parallel ``vup`` leaves u as the zero vector and produces degenerate rays.

Example:
    >>> from src.minitrace.camera.thin_lens import Camera
    >>> from src.minitrace.core.vector import Vector3
    >>> camera = Camera(
    ...     image_width=400,
    ...     image_height=225,
    ...     vertical_fov_deg=60.0,
    ...     lookfrom=Vector3(0.0, 0.0, 1.0),
    ...     lookat=Vector3(0.0, 0.0, 0.0),
    ...     vup=Vector3(0.0, 1.0, 0.0),
    ...     samples_per_pixel=4,
    ...     seed=42,
    ... )
    >>> ray = camera.get_ray(200, 112, 0)
"""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

from src.minitrace.core.ray import Ray
from src.minitrace.core.vector import NORMALIZE_EPSILON, Vector3

if TYPE_CHECKING:
    from src.minitrace.parsing.config import Config


class Camera:
    """Primary ray generator for a pinhole or thin-lens camera.

    Attributes:
        image_width: Image width in pixels.
        image_height: Image height in pixels.
        samples_per_pixel: Number of rays generated per pixel.
        origin: Camera position (lookfrom).
        u: Unit vector pointing right in the image plane.
        v: Unit vector pointing up in the image plane.
        w: Unit vector pointing backward (from lookat to lookfrom).
        horizontal: Full width of the image plane in world space.
        vertical: Full height of the image plane in world space.
        lower_left_corner: World position of the image plane's lower-left corner.
        pixel_delta_u: Horizontal world-space step between pixels.
        pixel_delta_v: Vertical world-space step between pixels.
        lens_radius: Half the aperture; 0 for a pinhole camera.
    """

    def __init__(
        self,
        image_width: int,
        image_height: int,
        vertical_fov_deg: float,
        lookfrom: Vector3,
        lookat: Vector3,
        vup: Vector3,
        samples_per_pixel: int,
        seed: int,
        aperture: float = 0.0,
        focus_dist: float = 1.0,
    ) -> None:
        """Build the camera basis and image-plane geometry.

        Args:
            image_width: Image width in pixels (> 0).
            image_height: Image height in pixels (> 0).
            vertical_fov_deg: Vertical field of view in degrees, in (0, 180).
            lookfrom: Camera position.
            lookat: Point the camera looks at.
            vup: Approximate up direction; must not be parallel to the view.
            samples_per_pixel: Rays per pixel (> 0).
            seed: Seed for the camera's private random stream.
            aperture: Lens diameter. 0 gives a pinhole camera.
            focus_dist: Distance from lookfrom to the focal plane (> 0).
        """
        self.image_width = image_width
        self.image_height = image_height
        self.samples_per_pixel = samples_per_pixel
        self.origin = lookfrom

        theta = math.radians(vertical_fov_deg)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h
        viewport_width = viewport_height * (image_width / image_height)

        self.w = (lookfrom - lookat).normalized()
        self.u = vup.cross(self.w).normalized()
        self.v = self.w.cross(self.u)

        self.horizontal = self.u * (focus_dist * viewport_width)
        self.vertical = self.v * (focus_dist * viewport_height)

        # Image plane center is focus_dist units along the forward direction (-w)
        plane_center = lookfrom - self.w * focus_dist
        self.lower_left_corner = plane_center - self.horizontal / 2.0 - self.vertical / 2.0

        self.pixel_delta_u = self.horizontal / image_width
        self.pixel_delta_v = self.vertical / image_height

        self.lens_radius = aperture / 2.0

        self._rng = np.random.Generator(np.random.PCG64(seed))

    @classmethod
    def from_config(cls, config: Config) -> Camera:
        """Create a camera from a parsed Config."""
        return cls(
            image_width=config.width,
            image_height=config.height,
            vertical_fov_deg=config.vertical_fov_deg,
            lookfrom=config.lookfrom,
            lookat=config.lookat,
            vup=config.vup,
            samples_per_pixel=config.samples_per_pixel,
            seed=config.seed,
            aperture=config.aperture,
            focus_dist=config.focus_dist,
        )

    def _random_in_unit_disk(self) -> tuple[float, float]:
        """Rejection-sample a point strictly inside the unit disk."""
        while True:
            dx = 2.0 * self._rng.random() - 1.0
            dy = 2.0 * self._rng.random() - 1.0
            if dx * dx + dy * dy < 1.0:
                return dx, dy

    def get_ray(self, pixel_x: int, pixel_y: int, sample_index: int) -> Ray:
        """Generate a jittered primary ray for one pixel sample.

        Pixel rows count down from the top of the image while v points up, so
        the row index is flipped before mapping onto the image plane.

        Args:
            pixel_x: Column, 0 = left.
            pixel_y: Row, 0 = top.
            sample_index: Index of the sample within the pixel. It does not
                select the random values; those come from the stream in call
                order.

        Returns:
            A Ray with a unit-length direction.
        """
        jitter_x = self._rng.random()
        jitter_y = self._rng.random()

        u_offset = pixel_x + jitter_x
        v_offset = (self.image_height - 1 - pixel_y) + jitter_y

        target = (
            self.lower_left_corner + self.pixel_delta_u * u_offset + self.pixel_delta_v * v_offset
        )

        if self.lens_radius == 0.0:
            return Ray(self.origin, (target - self.origin).normalized())

        dx, dy = self._random_in_unit_disk()
        dx *= self.lens_radius
        dy *= self.lens_radius
        origin = self.origin + self.u * dx + self.v * dy
        return Ray(origin, (target - origin).normalized())

    def generate_rays(
        self, row_start: int = 0, row_end: int | None = None
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """Generate primary rays for image rows [row_start, row_end).

        The order is rows top to bottom, columns left to right, samples
        innermost; it is the same sequence a nested get_ray loop produces.
        For a pinhole camera the work is vectorised with NumPy using the same
        floating-point operations as get_ray, so the arrays are bit-identical
        to the sequential loop. Thin-lens cameras draw a variable number of
        values per ray and are generated sequentially.

        The stream is consumed in call order, so generating the rows in
        consecutive blocks yields the same rays as one call for the whole
        image.

        Args:
            row_start: First image row (0 = top).
            row_end: One past the last row. Defaults to image_height.

        Returns:
            A tuple (origins, directions) of float64 arrays with shape
            ((row_end - row_start) * image_width * samples_per_pixel, 3).
        """
        width = self.image_width
        height = self.image_height
        spp = self.samples_per_pixel
        if row_end is None:
            row_end = height
        if not 0 <= row_start <= row_end <= height:
            raise ValueError(f"Invalid row range [{row_start}, {row_end}) for height {height}")
        count = (row_end - row_start) * width * spp

        if self.lens_radius != 0.0:
            origins = np.empty((count, 3), dtype=np.float64)
            directions = np.empty((count, 3), dtype=np.float64)
            i = 0
            for py in range(row_start, row_end):
                for px in range(width):
                    for s in range(spp):
                        ray = self.get_ray(px, py, s)
                        origins[i] = ray.origin.as_tuple()
                        directions[i] = ray.direction.as_tuple()
                        i += 1
            return origins, directions

        # Two draws per ray: (jitter_x, jitter_y)
        jitter = self._rng.random(2 * count).reshape(count, 2)

        index = np.arange(count)
        px = (index // spp) % width
        py = row_start + index // (spp * width)
        u_offset = px.astype(np.float64) + jitter[:, 0]
        v_offset = (height - 1 - py).astype(np.float64) + jitter[:, 1]

        llc = np.array(self.lower_left_corner.as_tuple())
        du = np.array(self.pixel_delta_u.as_tuple())
        dv = np.array(self.pixel_delta_v.as_tuple())
        eye = np.array(self.origin.as_tuple())

        target = (llc + du * u_offset[:, None]) + dv * v_offset[:, None]
        d = target - eye
        magnitude = np.sqrt(d[:, 0] * d[:, 0] + d[:, 1] * d[:, 1] + d[:, 2] * d[:, 2])
        scale = np.where(magnitude < NORMALIZE_EPSILON, 1.0, magnitude)
        directions = d / scale[:, None]

        origins = np.broadcast_to(eye, (count, 3)).copy()
        return origins, directions

    def get_camera_info(self) -> dict[str, tuple[float, float, float]]:
        """Get camera vectors for debugging.

        Returns:
            Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
        """
        return {
            "origin": self.origin.as_tuple(),
            "u": self.u.as_tuple(),
            "v": self.v.as_tuple(),
            "w": self.w.as_tuple(),
            "horizontal": self.horizontal.as_tuple(),
            "vertical": self.vertical.as_tuple(),
            "lower_left": self.lower_left_corner.as_tuple(),
        }
