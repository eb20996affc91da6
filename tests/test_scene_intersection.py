"""Unit tests for scene-level intersection.

Tests cover:
- Closest hit across spheres and cylinders
- Hit attribution (object name and material)
- Misses and t_max
- Packing a scene into kernel arrays
"""

import numpy as np
import pytest


@pytest.fixture
def scene():
    """Two spheres on the -z axis and a cylinder off to the side."""
    from src.minitrace.core.vector import Vector3
    from src.minitrace.scene.manager import Material, MaterialKind, SceneBuilder

    b = SceneBuilder()
    b.add_material(Material("red", MaterialKind.MATTE))
    b.add_material(Material("chrome", MaterialKind.METAL, fuzz=0.1))
    b.add_sphere("far", Vector3(0.0, 0.0, -10.0), 1.0, "red")
    b.add_sphere("near", Vector3(0.0, 0.0, -4.0), 1.0, "chrome")
    b.add_cylinder("post", Vector3(3.0, -1.0, -6.0), Vector3(0.0, 1.0, 0.0), 2.0, 0.5, "red")
    return b.build()


class TestIntersectScene:
    """Tests for intersect_scene."""

    def test_closest_sphere_wins(self, scene):
        """Test that the nearer sphere is reported regardless of order."""
        from src.minitrace.core.ray import Ray
        from src.minitrace.core.vector import Vector3
        from src.minitrace.scene.intersection import intersect_scene

        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))
        hit = intersect_scene(scene, ray, 1e-6, 1e9)

        assert hit is not None
        assert hit.object_name == "near"
        assert hit.material_ref == "chrome"
        assert hit.t == 3.0
        assert hit.normal == Vector3(0.0, 0.0, 1.0)

    def test_cylinder_hit(self, scene):
        """Test a ray that only meets the cylinder."""
        from src.minitrace.core.ray import Ray
        from src.minitrace.core.vector import Vector3
        from src.minitrace.scene.intersection import intersect_scene

        ray = Ray(Vector3(0.0, 0.0, -6.0), Vector3(1.0, 0.0, 0.0))
        hit = intersect_scene(scene, ray, 1e-6, 1e9)

        assert hit is not None
        assert hit.object_name == "post"
        assert abs(hit.t - 2.5) < 1e-12
        assert (hit.normal - Vector3(-1.0, 0.0, 0.0)).magnitude() < 1e-12

    def test_sphere_in_front_of_cylinder(self):
        """Test that a nearer sphere hides a cylinder declared later."""
        from src.minitrace.core.ray import Ray
        from src.minitrace.core.vector import Vector3
        from src.minitrace.scene.intersection import intersect_scene
        from src.minitrace.scene.manager import Material, MaterialKind, SceneBuilder

        b = SceneBuilder()
        b.add_material(Material("m", MaterialKind.MATTE))
        b.add_sphere("ball", Vector3(0.0, 0.0, -2.0), 0.5, "m")
        b.add_cylinder("wall", Vector3(0.0, 0.0, -6.0), Vector3(0.0, 0.0, 1.0), 1.0, 3.0, "m")
        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))

        hit = intersect_scene(b.build(), ray, 1e-6, 1e9)
        assert hit.object_name == "ball"
        assert hit.t == 1.5

    def test_miss(self, scene):
        """Test a ray that hits nothing."""
        from src.minitrace.core.ray import Ray
        from src.minitrace.core.vector import Vector3
        from src.minitrace.scene.intersection import intersect_scene

        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 1.0, 0.0))
        assert intersect_scene(scene, ray, 1e-6, 1e9) is None

    def test_t_max_limits_search(self, scene):
        """Test that primitives beyond t_max are ignored."""
        from src.minitrace.core.ray import Ray
        from src.minitrace.core.vector import Vector3
        from src.minitrace.scene.intersection import intersect_scene

        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))
        assert intersect_scene(scene, ray, 1e-6, 2.0) is None

    def test_empty_scene(self):
        """Test that an empty scene never hits."""
        from src.minitrace.core.ray import Ray
        from src.minitrace.core.vector import Vector3
        from src.minitrace.scene.intersection import intersect_scene
        from src.minitrace.scene.manager import Scene

        ray = Ray(Vector3(0.0, 0.0, 0.0), Vector3(0.0, 0.0, -1.0))
        assert intersect_scene(Scene(), ray, 1e-6, 1e9) is None


class TestPackScene:
    """Tests for pack_scene."""

    def test_packed_layout(self, scene):
        """Test the sphere and cylinder row layout."""
        from src.minitrace.scene.intersection import pack_scene

        arrays = pack_scene(scene)

        assert arrays.num_spheres == 2
        assert arrays.num_cylinders == 1
        assert arrays.spheres.dtype == np.float64
        np.testing.assert_array_equal(
            arrays.spheres, [[0.0, 0.0, -10.0, 1.0], [0.0, 0.0, -4.0, 1.0]]
        )
        np.testing.assert_array_equal(
            arrays.cylinders, [[3.0, -1.0, -6.0, 0.0, 1.0, 0.0, 2.0, 0.5]]
        )

    def test_empty_scene_is_padded(self):
        """Test that empty collections still produce one row."""
        from src.minitrace.scene.intersection import pack_scene
        from src.minitrace.scene.manager import Scene

        arrays = pack_scene(Scene())

        assert arrays.spheres.shape == (1, 4)
        assert arrays.cylinders.shape == (1, 8)
        assert arrays.num_spheres == 0
        assert arrays.num_cylinders == 0
