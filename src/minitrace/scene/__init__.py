"""Scene module for the scene data model and ray-scene queries.

Components:
    manager: Materials, primitives, the immutable Scene and its builder
    intersection: Closest-hit query and kernel packing
"""

from .intersection import SceneArrays, SceneHit, intersect_scene, pack_scene
from .manager import (
    DEFAULT_MATERIAL_COLOR,
    Cylinder,
    Material,
    MaterialKind,
    Scene,
    SceneBuilder,
    ScenePhase,
    SceneStats,
    Sphere,
)

__all__ = [
    # Manager module
    "Scene",
    "SceneBuilder",
    "ScenePhase",
    "SceneStats",
    "Material",
    "MaterialKind",
    "Sphere",
    "Cylinder",
    "DEFAULT_MATERIAL_COLOR",
    # Intersection module
    "SceneHit",
    "SceneArrays",
    "intersect_scene",
    "pack_scene",
]
