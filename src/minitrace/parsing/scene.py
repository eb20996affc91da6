"""Scene file parser.

A scene file has two ordered phases. Materials come first:

    material matte  red   color=0.8,0.2,0.2
    material metal  alu   color=0.8,0.8,0.8 fuzz=0.1
    material refractive glass ior=1.5

then objects, which refer to materials by name:

    sphere ball center=0,0,-1 radius=0.5 mat=red
    cylinder rod base=0,-1,-2 axis=0,1,0 height=2 radius=0.25 mat=alu

The ``material`` keyword may be omitted (``matte red color=...``), and the
compact forms below are accepted too; compact objects get generated names
(``sphere_1``, ``cylinder_1``, ...):

    matte: red 0.8 0.2 0.2
    metal: alu 0.8 0.8 0.8 0.1
    refractive: glass 1.5
    sphere: 0 0 -1 0.5 red
    cylinder: 0 -1 -2 0 1 0 2 0.25 alu

Parsing stops at the first offending line with an error naming the file and
line; see SceneBuilder for the invariants checked.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from src.minitrace.core.vector import Vector3
from src.minitrace.parsing.errors import FormatError, ParseError, UnknownKeyError
from src.minitrace.parsing.tokens import (
    iter_content_lines,
    parse_csv_vector,
    parse_float,
    parse_vector,
    split_key_value,
)
from src.minitrace.scene.manager import Material, MaterialKind, Scene, SceneBuilder

MATERIAL_KINDS: dict[str, MaterialKind] = {kind.value: kind for kind in MaterialKind}

# Options accepted on a long material line, per kind
MATERIAL_OPTIONS: dict[MaterialKind, frozenset[str]] = {
    MaterialKind.MATTE: frozenset({"color"}),
    MaterialKind.METAL: frozenset({"color", "fuzz"}),
    MaterialKind.REFRACTIVE: frozenset({"ior"}),
}

SPHERE_KEYS = ("center", "radius", "mat")
CYLINDER_KEYS = ("base", "axis", "height", "radius", "mat")


def load_scene(path: str | Path) -> Scene:
    """Parse a scene file.

    Args:
        path: The scene file.

    Returns:
        The validated Scene.

    Raises:
        ParseError: A subclass describing the first offending line.
    """
    builder = SceneBuilder()
    for line_number, text in iter_content_lines(path):
        try:
            parse_scene_line(builder, text)
        except ParseError as exc:
            raise exc.at(str(path), line_number) from None
    return builder.build()


def try_parse_scene(path: str | Path) -> tuple[Scene | None, str]:
    """Parse a scene file without raising.

    Returns:
        (scene, "") on success, or (None, error message) on failure.
    """
    try:
        return load_scene(path), ""
    except ParseError as exc:
        return None, str(exc)


def parse_scene_line(builder: SceneBuilder, text: str) -> None:
    """Apply one comment-stripped, non-blank scene line to the builder."""
    head, *tokens = text.split()

    if head == "material":
        builder.check_material_allowed()
        if len(tokens) < 2:
            raise FormatError("invalid material header")
        _parse_material(builder, tokens[0], tokens[1], tokens[2:])
    elif head in MATERIAL_KINDS:
        builder.check_material_allowed()
        if not tokens:
            raise FormatError("invalid material header")
        _parse_material(builder, head, tokens[0], tokens[1:])
    elif head.endswith(":") and head[:-1] in MATERIAL_KINDS:
        builder.check_material_allowed()
        _parse_compact_material(builder, MATERIAL_KINDS[head[:-1]], tokens)
    elif head == "sphere":
        builder.begin_object()
        _parse_sphere(builder, tokens)
    elif head == "cylinder":
        builder.begin_object()
        _parse_cylinder(builder, tokens)
    elif head == "sphere:":
        builder.begin_object()
        _parse_compact_sphere(builder, tokens)
    elif head == "cylinder:":
        builder.begin_object()
        _parse_compact_cylinder(builder, tokens)
    else:
        raise UnknownKeyError(f"unknown directive '{head}'")


# =============================================================================
# Materials
# =============================================================================


def _parse_material(builder: SceneBuilder, kind_word: str, name: str, options: list[str]) -> None:
    kind = MATERIAL_KINDS.get(kind_word)
    if kind is None:
        raise UnknownKeyError(f"unknown material kind '{kind_word}'")
    if "=" in name:
        raise FormatError("invalid material header")

    params: dict[str, Any] = {}
    for token in options:
        key, value = split_key_value(token)
        if key not in MATERIAL_OPTIONS[kind]:
            raise UnknownKeyError(f"unknown key '{key}' for material '{kind_word}'")
        if key == "color":
            params["color"] = parse_csv_vector(value, "color")
        else:
            params[key] = parse_float(value, key)

    if kind is MaterialKind.REFRACTIVE and "ior" not in params:
        raise FormatError("missing required key 'ior' for material 'refractive'")

    builder.add_material(Material(name=name, kind=kind, **params))


def _parse_compact_material(builder: SceneBuilder, kind: MaterialKind, tokens: list[str]) -> None:
    if not tokens:
        raise FormatError("invalid material header")
    name, values = tokens[0], tokens[1:]

    if kind is MaterialKind.REFRACTIVE:
        if len(values) != 1:
            raise FormatError("invalid value for 'ior'")
        material = Material(name=name, kind=kind, ior=parse_float(values[0], "ior"))
    elif kind is MaterialKind.METAL:
        if len(values) not in (3, 4):
            raise FormatError("invalid format for 'color'")
        fuzz = parse_float(values[3], "fuzz") if len(values) == 4 else 0.0
        material = Material(
            name=name, kind=kind, color=parse_vector(values[:3], "color"), fuzz=fuzz
        )
    else:
        if len(values) != 3:
            raise FormatError("invalid format for 'color'")
        material = Material(name=name, kind=kind, color=parse_vector(values, "color"))

    builder.add_material(material)


# =============================================================================
# Objects
# =============================================================================


def _object_name(tokens: list[str], directive: str) -> str:
    if not tokens or "=" in tokens[0]:
        raise FormatError(f"invalid {directive} header")
    return tokens[0]


def _collect_options(tokens: list[str], required: tuple[str, ...], directive: str) -> dict[str, str]:
    """Read key=value tokens, rejecting unknown keys and requiring all of them."""
    options: dict[str, str] = {}
    for token in tokens:
        key, value = split_key_value(token)
        if key not in required:
            raise UnknownKeyError(f"unknown key '{key}' for '{directive}'")
        options[key] = value
    if any(key not in options for key in required):
        raise FormatError(f"missing required keys for '{directive}'")
    if not options["mat"]:
        raise FormatError("invalid value for 'mat'")
    return options


def _parse_sphere(builder: SceneBuilder, tokens: list[str]) -> None:
    name = _object_name(tokens, "sphere")
    options = _collect_options(tokens[1:], SPHERE_KEYS, "sphere")
    builder.add_sphere(
        name=name,
        center=parse_csv_vector(options["center"], "center"),
        radius=parse_float(options["radius"], "radius"),
        material_ref=options["mat"],
    )


def _parse_cylinder(builder: SceneBuilder, tokens: list[str]) -> None:
    name = _object_name(tokens, "cylinder")
    options = _collect_options(tokens[1:], CYLINDER_KEYS, "cylinder")
    builder.add_cylinder(
        name=name,
        base=parse_csv_vector(options["base"], "base"),
        axis=parse_csv_vector(options["axis"], "axis"),
        height=parse_float(options["height"], "height"),
        radius=parse_float(options["radius"], "radius"),
        material_ref=options["mat"],
    )


def _parse_compact_sphere(builder: SceneBuilder, tokens: list[str]) -> None:
    if len(tokens) != 5:
        raise FormatError("invalid 'sphere:' format (cx cy cz r mat)")
    builder.add_sphere(
        name=builder.next_sphere_name(),
        center=parse_vector(tokens[0:3], "center"),
        radius=parse_float(tokens[3], "radius"),
        material_ref=tokens[4],
    )


def _parse_compact_cylinder(builder: SceneBuilder, tokens: list[str]) -> None:
    if len(tokens) != 9:
        raise FormatError("invalid 'cylinder:' format (bx by bz ax ay az h r mat)")
    builder.add_cylinder(
        name=builder.next_cylinder_name(),
        base=parse_vector(tokens[0:3], "base"),
        axis=Vector3(*(parse_float(t, "axis") for t in tokens[3:6])),
        height=parse_float(tokens[6], "height"),
        radius=parse_float(tokens[7], "radius"),
        material_ref=tokens[8],
    )
