"""Unit tests for the thin-lens camera.

Tests cover:
- Camera basis and image-plane setup
- Determinism and order dependence of the random stream
- Row flip and pixel-to-direction mapping
- Thin-lens origin sampling
- Batch ray generation matching a sequential get_ray loop
"""

import numpy as np
import pytest


def _make_camera(**overrides):
    from src.minitrace.camera.thin_lens import Camera
    from src.minitrace.core.vector import Vector3

    params = {
        "image_width": 8,
        "image_height": 6,
        "vertical_fov_deg": 60.0,
        "lookfrom": Vector3(0.0, 0.0, 1.0),
        "lookat": Vector3(0.0, 0.0, 0.0),
        "vup": Vector3(0.0, 1.0, 0.0),
        "samples_per_pixel": 2,
        "seed": 42,
    }
    params.update(overrides)
    return Camera(**params)


def _sequential_rays(camera):
    """Collect rays with a nested get_ray loop in canonical order."""
    origins = []
    directions = []
    for py in range(camera.image_height):
        for px in range(camera.image_width):
            for s in range(camera.samples_per_pixel):
                ray = camera.get_ray(px, py, s)
                origins.append(ray.origin.as_tuple())
                directions.append(ray.direction.as_tuple())
    return np.array(origins, dtype=np.float64), np.array(directions, dtype=np.float64)


class TestCameraSetup:
    """Tests for camera basis construction."""

    def test_basis_for_default_view(self):
        """Test u, v, w for a camera looking down -z with +y up."""
        from src.minitrace.core.vector import Vector3

        camera = _make_camera()
        assert camera.w == Vector3(0.0, 0.0, 1.0)
        assert camera.u == Vector3(1.0, 0.0, 0.0)
        assert camera.v == Vector3(0.0, 1.0, 0.0)

    def test_viewport_matches_fov_and_aspect(self):
        """Test the image-plane size for a 90 degree FOV at focus 1."""
        camera = _make_camera(vertical_fov_deg=90.0, image_width=200, image_height=100)

        # tan(45 deg) = 1, so the viewport is 2 high and 4 wide
        assert abs(camera.vertical.magnitude() - 2.0) < 1e-12
        assert abs(camera.horizontal.magnitude() - 4.0) < 1e-12

    def test_image_plane_scales_with_focus_distance(self):
        """Test that focus_dist scales the image plane and moves its center."""
        near = _make_camera(focus_dist=1.0)
        far = _make_camera(focus_dist=3.0)

        assert abs(far.horizontal.magnitude() - 3.0 * near.horizontal.magnitude()) < 1e-12
        center = far.lower_left_corner + far.horizontal / 2.0 + far.vertical / 2.0
        assert abs(center.z - (1.0 - 3.0)) < 1e-12

    def test_from_config(self):
        """Test building a camera from a Config."""
        from src.minitrace.camera.thin_lens import Camera
        from src.minitrace.parsing.config import Config

        config = Config(width=32, height=16, samples_per_pixel=3, seed=7, aperture=0.2)
        camera = Camera.from_config(config)

        assert camera.image_width == 32
        assert camera.image_height == 16
        assert camera.samples_per_pixel == 3
        assert camera.lens_radius == 0.1

    def test_camera_info(self):
        """Test the debug info dictionary."""
        info = _make_camera().get_camera_info()

        assert set(info) == {"origin", "u", "v", "w", "horizontal", "vertical", "lower_left"}
        assert info["origin"] == (0.0, 0.0, 1.0)


class TestCameraRays:
    """Tests for get_ray."""

    def test_directions_are_unit_length(self):
        """Test that every generated direction is normalized."""
        camera = _make_camera()
        for py in range(camera.image_height):
            for px in range(camera.image_width):
                ray = camera.get_ray(px, py, 0)
                assert abs(ray.direction.magnitude() - 1.0) < 1e-12

    def test_pinhole_origin_is_lookfrom(self):
        """Test that every pinhole ray starts at lookfrom."""
        from src.minitrace.core.vector import Vector3

        camera = _make_camera()
        assert camera.get_ray(3, 2, 0).origin == Vector3(0.0, 0.0, 1.0)

    def test_row_zero_is_top_of_image(self):
        """Test the row flip: row 0 looks up, the last row looks down."""
        camera = _make_camera()
        top = camera.get_ray(4, 0, 0)
        bottom = camera.get_ray(4, camera.image_height - 1, 0)

        assert top.direction.y > 0.0
        assert bottom.direction.y < 0.0

    def test_column_zero_is_left_of_image(self):
        """Test that column 0 looks left and the last column looks right."""
        camera = _make_camera()
        left = camera.get_ray(0, 3, 0)
        right = camera.get_ray(camera.image_width - 1, 3, 0)

        assert left.direction.x < 0.0
        assert right.direction.x > 0.0

    def test_same_seed_is_bit_identical(self):
        """Test two cameras with the same seed produce identical rays."""
        a = _make_camera(seed=1234)
        b = _make_camera(seed=1234)
        for py in range(a.image_height):
            for px in range(a.image_width):
                for s in range(a.samples_per_pixel):
                    assert a.get_ray(px, py, s) == b.get_ray(px, py, s)

    def test_different_seed_changes_rays(self):
        """Test that the seed changes the jitter."""
        a = _make_camera(seed=1)
        b = _make_camera(seed=2)
        assert a.get_ray(0, 0, 0) != b.get_ray(0, 0, 0)

    def test_call_order_changes_results(self):
        """Test that rays depend on the call sequence, not just (pixel, sample)."""
        a = _make_camera()
        b = _make_camera()

        a.get_ray(0, 0, 0)
        second_call = a.get_ray(1, 0, 0)
        first_call = b.get_ray(1, 0, 0)

        assert second_call != first_call


class TestThinLens:
    """Tests for cameras with a positive aperture."""

    def test_origins_lie_on_lens_disk(self):
        """Test lens origins are within lens_radius of lookfrom in the u-v plane."""
        camera = _make_camera(aperture=0.5, focus_dist=2.0)
        moved = 0
        for s in range(40):
            ray = camera.get_ray(3, 3, s)
            offset = ray.origin - camera.origin
            assert offset.magnitude() < camera.lens_radius
            assert abs(offset.dot(camera.w)) < 1e-12
            if offset.magnitude() > 0.0:
                moved += 1
        assert moved > 0

    def test_lens_is_deterministic(self):
        """Test thin-lens rays are reproducible for a fixed seed."""
        a = _make_camera(aperture=0.5, focus_dist=2.0, seed=99)
        b = _make_camera(aperture=0.5, focus_dist=2.0, seed=99)
        for s in range(10):
            assert a.get_ray(1, 1, s) == b.get_ray(1, 1, s)


class TestGenerateRays:
    """Tests for batch ray generation."""

    def test_shapes(self):
        """Test that arrays have one row per ray."""
        camera = _make_camera()
        origins, directions = camera.generate_rays()

        count = camera.image_width * camera.image_height * camera.samples_per_pixel
        assert origins.shape == (count, 3)
        assert directions.shape == (count, 3)
        assert directions.dtype == np.float64

    @pytest.mark.parametrize("seed", [0, 42, 2**63 + 5])
    def test_pinhole_batch_matches_sequential_loop(self, seed):
        """Test the vectorised path is bit-identical to calling get_ray in order."""
        batch_origins, batch_directions = _make_camera(seed=seed).generate_rays()
        loop_origins, loop_directions = _sequential_rays(_make_camera(seed=seed))

        np.testing.assert_array_equal(batch_origins, loop_origins)
        np.testing.assert_array_equal(batch_directions, loop_directions)

    def test_lens_batch_matches_sequential_loop(self):
        """Test the thin-lens batch path follows the same sequence."""
        batch_origins, batch_directions = _make_camera(aperture=0.3, focus_dist=1.5).generate_rays()
        loop_origins, loop_directions = _sequential_rays(_make_camera(aperture=0.3, focus_dist=1.5))

        np.testing.assert_array_equal(batch_origins, loop_origins)
        np.testing.assert_array_equal(batch_directions, loop_directions)

    def test_batch_advances_stream(self):
        """Test that generating twice gives different jitter."""
        camera = _make_camera()
        _, first = camera.generate_rays()
        _, second = camera.generate_rays()
        assert not np.array_equal(first, second)

    @pytest.mark.parametrize("aperture", [0.0, 0.3])
    def test_row_blocks_match_whole_image(self, aperture):
        """Test that generating consecutive row blocks equals one full call."""
        whole_origins, whole_directions = _make_camera(aperture=aperture).generate_rays()

        camera = _make_camera(aperture=aperture)
        blocks = [camera.generate_rays(0, 2), camera.generate_rays(2, 5), camera.generate_rays(5, 6)]
        block_origins = np.concatenate([origins for origins, _ in blocks])
        block_directions = np.concatenate([directions for _, directions in blocks])

        np.testing.assert_array_equal(block_origins, whole_origins)
        np.testing.assert_array_equal(block_directions, whole_directions)

    def test_row_block_shape(self):
        """Test a row block holds width * spp rays per row."""
        origins, directions = _make_camera().generate_rays(1, 4)

        assert origins.shape == (3 * 8 * 2, 3)
        assert directions.shape == (3 * 8 * 2, 3)

    def test_invalid_row_range_raises(self):
        """Test that row ranges outside the image are rejected."""
        camera = _make_camera()
        with pytest.raises(ValueError):
            camera.generate_rays(-1, 2)
        with pytest.raises(ValueError):
            camera.generate_rays(4, 2)
        with pytest.raises(ValueError):
            camera.generate_rays(0, 7)
