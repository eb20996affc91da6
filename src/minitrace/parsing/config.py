"""Render configuration and its text-file parser.

Config file format, one directive per line, ``#`` comments allowed:

    width 800
    height 450
    fov 60
    samples 32
    seed 1234
    lookfrom 0 0 1
    lookat   0 0 0
    vup      0 1 0

Every key may appear under one of several aliases (see CONFIG_KEYS); the last
occurrence in the file wins and missing keys keep their defaults. Unknown
keys, unparsable values, out-of-range values and trailing tokens abort the
parse with an error naming the file and line.

Example:
    >>> from src.minitrace.parsing.config import load_config
    >>> config = load_config("render.cfg")
    >>> config.width, config.height
    (800, 450)
"""

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any

from src.minitrace.core.vector import Vector3
from src.minitrace.parsing.errors import FormatError, ParseError, RangeError, UnknownKeyError
from src.minitrace.parsing.tokens import (
    iter_content_lines,
    parse_float,
    parse_int,
    parse_uint,
    parse_vector,
)

UINT32_LIMIT = 2**32
UINT64_LIMIT = 2**64


@dataclass(frozen=True)
class Config:
    """Image, camera and sampling settings.

    Attributes:
        width: Image width in pixels (> 0).
        height: Image height in pixels (> 0).
        vertical_fov_deg: Vertical field of view in degrees, in (0, 180).
        lookfrom: Camera position.
        lookat: Point the camera looks at.
        vup: Approximate up direction.
        aperture: Lens diameter (>= 0). 0 gives a pinhole camera.
        focus_dist: Distance to the focal plane (> 0).
        max_depth: Maximum path depth (>= 1). Carried for future bounce
            shading; primary-ray shading does not use it.
        samples_per_pixel: Rays per pixel (> 0).
        seed: Seed for the camera's random stream (any uint64).
        gamma: Output gamma used by the image writers (> 0).
    """

    width: int = 400
    height: int = 225
    vertical_fov_deg: float = 60.0
    lookfrom: Vector3 = Vector3(0.0, 0.0, 1.0)
    lookat: Vector3 = Vector3(0.0, 0.0, 0.0)
    vup: Vector3 = Vector3(0.0, 1.0, 0.0)
    aperture: float = 0.0
    focus_dist: float = 1.0
    max_depth: int = 5
    samples_per_pixel: int = 4
    seed: int = 42
    gamma: float = 2.2


# =============================================================================
# Value Parsers
# =============================================================================


def _single(key: str, tokens: list[str]) -> str:
    if not tokens:
        raise FormatError(f"invalid format for '{key}'")
    if len(tokens) > 1:
        raise FormatError(f"trailing data after '{key}'")
    return tokens[0]


def _vector(key: str, tokens: list[str]) -> Vector3:
    if len(tokens) > 3:
        raise FormatError(f"trailing data after '{key}'")
    return parse_vector(tokens, key)


def _dimension(key: str, tokens: list[str]) -> int:
    value = parse_uint(_single(key, tokens), key)
    if value == 0:
        raise RangeError(f"{key} must be > 0")
    if value >= UINT32_LIMIT:
        raise RangeError(f"{key} out of range")
    return value


def _fov(key: str, tokens: list[str]) -> float:
    value = parse_float(_single(key, tokens), key)
    if not 0.0 < value < 180.0:
        raise RangeError(f"{key} out of range")
    return value


def _samples(key: str, tokens: list[str]) -> int:
    value = parse_uint(_single(key, tokens), key)
    if value == 0:
        raise RangeError(f"{key} must be > 0")
    if value >= UINT32_LIMIT:
        raise RangeError(f"{key} out of range")
    return value


def _seed(key: str, tokens: list[str]) -> int:
    value = parse_uint(_single(key, tokens), key)
    if value >= UINT64_LIMIT:
        raise RangeError(f"{key} out of range")
    return value


def _non_negative(key: str, tokens: list[str]) -> float:
    value = parse_float(_single(key, tokens), key)
    if value < 0.0:
        raise RangeError(f"{key} must be >= 0")
    return value


def _positive(key: str, tokens: list[str]) -> float:
    value = parse_float(_single(key, tokens), key)
    if value <= 0.0:
        raise RangeError(f"{key} must be > 0")
    return value


def _depth(key: str, tokens: list[str]) -> int:
    value = parse_int(_single(key, tokens), key)
    if value < 1:
        raise RangeError(f"{key} must be >= 1")
    return value


# Field name -> value parser
_FIELD_PARSERS: dict[str, Callable[[str, list[str]], Any]] = {
    "width": _dimension,
    "height": _dimension,
    "vertical_fov_deg": _fov,
    "samples_per_pixel": _samples,
    "seed": _seed,
    "lookfrom": _vector,
    "lookat": _vector,
    "vup": _vector,
    "aperture": _non_negative,
    "focus_dist": _positive,
    "max_depth": _depth,
    "gamma": _positive,
    "aspect_ratio": _positive,
}

# Accepted key spelling -> field name
CONFIG_KEYS: dict[str, str] = {
    "width": "width",
    "image_width": "width",
    "height": "height",
    "image_height": "height",
    "fov": "vertical_fov_deg",
    "vfov": "vertical_fov_deg",
    "field_of_view": "vertical_fov_deg",
    "samples": "samples_per_pixel",
    "spp": "samples_per_pixel",
    "samples_per_pixel": "samples_per_pixel",
    "seed": "seed",
    "lookfrom": "lookfrom",
    "camera_position": "lookfrom",
    "lookat": "lookat",
    "camera_target": "lookat",
    "vup": "vup",
    "camera_north": "vup",
    "aperture": "aperture",
    "focus_dist": "focus_dist",
    "focusDist": "focus_dist",
    "focus": "focus_dist",
    "max_depth": "max_depth",
    "maxDepth": "max_depth",
    "gamma": "gamma",
    "aspect_ratio": "aspect_ratio",
}

# Environment variable -> field name
ENV_OVERRIDES: dict[str, str] = {
    "RENDER_VFOV": "vertical_fov_deg",
    "RENDER_FROM": "lookfrom",
    "RENDER_AT": "lookat",
    "RENDER_VUP": "vup",
    "RENDER_SPP": "samples_per_pixel",
    "RENDER_SEED": "seed",
    "RENDER_APERTURE": "aperture",
    "RENDER_FOCUS": "focus_dist",
}


# =============================================================================
# Config Loading
# =============================================================================


def load_config(path: str | Path) -> Config:
    """Parse a config file.

    ``aspect_ratio`` is not stored; it sets height = round(width / ratio)
    after the scan, unless a height line comes after it.

    Args:
        path: The config file.

    Returns:
        The parsed Config, with defaults for keys the file does not set.

    Raises:
        ParseError: A subclass describing the first offending line.
    """
    values: dict[str, Any] = {}
    derive_height = False

    for line_number, text in iter_content_lines(path):
        key, *tokens = text.split()
        try:
            field_name = CONFIG_KEYS.get(key)
            if field_name is None:
                raise UnknownKeyError(f"invalid key '{key}'")
            values[field_name] = _FIELD_PARSERS[field_name](key, tokens)
        except ParseError as exc:
            raise exc.at(str(path), line_number) from None

        if field_name == "aspect_ratio":
            derive_height = True
        elif field_name == "height":
            derive_height = False

    aspect_ratio = values.pop("aspect_ratio", None)
    if derive_height and aspect_ratio is not None:
        width = values.get("width", Config.width)
        values["height"] = max(1, int(width / aspect_ratio + 0.5))

    return Config(**values)


def try_parse_config(path: str | Path) -> tuple[Config | None, str]:
    """Parse a config file without raising.

    Returns:
        (config, "") on success, or (None, error message) on failure.
    """
    try:
        return load_config(path), ""
    except ParseError as exc:
        return None, str(exc)


def apply_env_overrides(config: Config, environ: Mapping[str, str] | None = None) -> Config:
    """Override camera and sampling settings from RENDER_* variables.

    Vectors are written ``x,y,z``. Empty variables are ignored. Values go
    through the same checks as the config file.

    Args:
        config: The parsed config.
        environ: Variables to read. Defaults to os.environ.

    Returns:
        A new Config, or ``config`` itself when nothing is overridden.

    Raises:
        ParseError: If a variable holds an invalid value; the variable name
            is reported as the source.
    """
    if environ is None:
        environ = os.environ

    changes: dict[str, Any] = {}
    for variable, field_name in ENV_OVERRIDES.items():
        raw = environ.get(variable, "").strip()
        if not raw:
            continue
        tokens = raw.replace(",", " ").split()
        try:
            changes[field_name] = _FIELD_PARSERS[field_name](variable, tokens)
        except ParseError as exc:
            raise exc.at(variable) from None

    if not changes:
        return config
    return replace(config, **changes)
