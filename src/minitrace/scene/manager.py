"""Scene data model and the builder that enforces its invariants.

A Scene holds three ordered collections: materials, spheres and cylinders.
It is built once (normally by the scene parser) and is read-only afterwards.

SceneBuilder owns all the construction-time state: the current phase
(materials first, then objects) and one name set per namespace. A new
builder is created for every parse, so parsing is reentrant.

Invariants enforced by the builder:
    - every sphere/cylinder ``material_ref`` names a declared material;
    - names are unique within materials, within spheres and within
      cylinders (three independent namespaces);
    - no object before the first material, no material after the first object;
    - radius > 0, height > 0, non-zero cylinder axis (stored normalized);
    - metal fuzz in [0, 1], refractive ior > 1.

Example:
    >>> from src.minitrace.core.vector import Vector3
    >>> from src.minitrace.scene.manager import Material, MaterialKind, SceneBuilder
    >>> builder = SceneBuilder()
    >>> builder.add_material(Material("red", MaterialKind.MATTE, color=Vector3(0.8, 0.1, 0.1)))
    >>> builder.add_sphere("ball", Vector3(0.0, 0.0, -1.0), 0.5, "red")
    >>> scene = builder.build()
    >>> scene.stats()
    SceneStats(spheres=1, cylinders=0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from src.minitrace.core.vector import NORMALIZE_EPSILON, Vector3
from src.minitrace.parsing.errors import (
    DuplicateNameError,
    OrderError,
    RangeError,
    UnknownReferenceError,
)

DEFAULT_MATERIAL_COLOR = Vector3(0.5, 0.5, 0.5)


class MaterialKind(Enum):
    """Supported material kinds, keyed by their scene-file keyword."""

    MATTE = "matte"
    METAL = "metal"
    REFRACTIVE = "refractive"


class ScenePhase(Enum):
    """Which kind of declaration the scene file may currently contain."""

    MATERIALS = "materials"
    OBJECTS = "objects"


@dataclass(frozen=True)
class Material:
    """A named material.

    Attributes:
        name: Unique material name.
        kind: The material kind.
        color: Surface color (matte and metal only).
        fuzz: Metal roughness in [0, 1] (metal only).
        ior: Index of refraction, > 1 (refractive only).
    """

    name: str
    kind: MaterialKind
    color: Vector3 = DEFAULT_MATERIAL_COLOR
    fuzz: float = 0.0
    ior: float = 1.5


@dataclass(frozen=True)
class Sphere:
    name: str
    center: Vector3
    radius: float
    material_ref: str


@dataclass(frozen=True)
class Cylinder:
    """A capped cylinder. ``axis`` is always unit length."""

    name: str
    base: Vector3
    axis: Vector3
    height: float
    radius: float
    material_ref: str


@dataclass(frozen=True)
class SceneStats:
    spheres: int
    cylinders: int


@dataclass(frozen=True)
class Scene:
    """An immutable scene.

    Attributes:
        materials: Materials in declaration order.
        spheres: Spheres in declaration order.
        cylinders: Cylinders in declaration order.
    """

    materials: tuple[Material, ...] = ()
    spheres: tuple[Sphere, ...] = ()
    cylinders: tuple[Cylinder, ...] = ()

    def material(self, name: str) -> Material | None:
        """Look up a material by name."""
        for mat in self.materials:
            if mat.name == name:
                return mat
        return None

    def stats(self) -> SceneStats:
        return SceneStats(spheres=len(self.spheres), cylinders=len(self.cylinders))

    def summary(self) -> str:
        """One-line description used by the render script."""
        return f"scene: {len(self.spheres)} spheres, {len(self.cylinders)} cylinders"


@dataclass
class SceneBuilder:
    """Accumulates materials and objects while checking scene invariants.

    All methods raise ParseError subclasses without file context; the parser
    attaches the file name and line number.
    """

    phase: ScenePhase = ScenePhase.MATERIALS
    materials: list[Material] = field(default_factory=list)
    spheres: list[Sphere] = field(default_factory=list)
    cylinders: list[Cylinder] = field(default_factory=list)
    _material_names: set[str] = field(default_factory=set, init=False, repr=False)
    _sphere_names: set[str] = field(default_factory=set, init=False, repr=False)
    _cylinder_names: set[str] = field(default_factory=set, init=False, repr=False)

    # =========================================================================
    # Material Management
    # =========================================================================

    def check_material_allowed(self) -> None:
        """Raise OrderError once objects have been declared."""
        if self.phase is ScenePhase.OBJECTS:
            raise OrderError("material declared after objects")

    def add_material(self, material: Material) -> None:
        """Register a material.

        Raises:
            OrderError: If an object was already declared.
            DuplicateNameError: If the name is taken by another material.
            RangeError: If fuzz or ior is out of range for the kind.
        """
        self.check_material_allowed()
        if material.name in self._material_names:
            raise DuplicateNameError(f"duplicated material '{material.name}'")
        if material.kind is MaterialKind.METAL and not 0.0 <= material.fuzz <= 1.0:
            raise RangeError("invalid value for 'fuzz' (must be in [0,1])")
        if material.kind is MaterialKind.REFRACTIVE and not material.ior > 1.0:
            raise RangeError("invalid value for 'ior' (must be > 1)")

        self._material_names.add(material.name)
        self.materials.append(material)

    def has_material(self, name: str) -> bool:
        return name in self._material_names

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def begin_object(self) -> None:
        """Switch to the objects phase.

        Raises:
            OrderError: If no material has been declared yet.
        """
        if not self._material_names:
            raise OrderError("object declared before materials")
        self.phase = ScenePhase.OBJECTS

    def _check_reference(self, material_ref: str) -> None:
        if material_ref not in self._material_names:
            raise UnknownReferenceError(f"unknown material '{material_ref}'")

    def add_sphere(self, name: str, center: Vector3, radius: float, material_ref: str) -> Sphere:
        """Add a sphere.

        Raises:
            OrderError: If no material has been declared yet.
            DuplicateNameError: If another sphere already uses the name.
            RangeError: If radius <= 0.
            UnknownReferenceError: If material_ref is not a declared material.
        """
        self.begin_object()
        if name in self._sphere_names:
            raise DuplicateNameError(f"duplicated object '{name}'")
        if not radius > 0.0:
            raise RangeError("invalid value for 'radius' (must be > 0)")
        self._check_reference(material_ref)

        sphere = Sphere(name=name, center=center, radius=radius, material_ref=material_ref)
        self._sphere_names.add(name)
        self.spheres.append(sphere)
        return sphere

    def add_cylinder(
        self,
        name: str,
        base: Vector3,
        axis: Vector3,
        height: float,
        radius: float,
        material_ref: str,
    ) -> Cylinder:
        """Add a cylinder, normalizing its axis.

        Raises:
            OrderError: If no material has been declared yet.
            DuplicateNameError: If another cylinder already uses the name.
            RangeError: If the axis is zero, or height or radius is <= 0.
            UnknownReferenceError: If material_ref is not a declared material.
        """
        self.begin_object()
        if name in self._cylinder_names:
            raise DuplicateNameError(f"duplicated object '{name}'")
        if axis.magnitude() < NORMALIZE_EPSILON:
            raise RangeError("invalid value for 'axis' (zero vector)")
        if not height > 0.0:
            raise RangeError("invalid value for 'height' (must be > 0)")
        if not radius > 0.0:
            raise RangeError("invalid value for 'radius' (must be > 0)")
        self._check_reference(material_ref)

        cylinder = Cylinder(
            name=name,
            base=base,
            axis=axis.normalized(),
            height=height,
            radius=radius,
            material_ref=material_ref,
        )
        self._cylinder_names.add(name)
        self.cylinders.append(cylinder)
        return cylinder

    def _generated_name(self, prefix: str, count: int, taken: set[str]) -> str:
        name = f"{prefix}_{count + 1}"
        while name in taken:
            name += "_"
        return name

    def next_sphere_name(self) -> str:
        """Name for a sphere declared without one: sphere_<n>."""
        return self._generated_name("sphere", len(self.spheres), self._sphere_names)

    def next_cylinder_name(self) -> str:
        """Name for a cylinder declared without one: cylinder_<n>."""
        return self._generated_name("cylinder", len(self.cylinders), self._cylinder_names)

    def build(self) -> Scene:
        """Freeze the accumulated declarations into a Scene."""
        return Scene(
            materials=tuple(self.materials),
            spheres=tuple(self.spheres),
            cylinders=tuple(self.cylinders),
        )
