"""Parsing module for render configs and scene files.

Components:
    errors: ParseError and its subclasses
    tokens: Comment stripping and shared value parsers
    config: Render config file and RENDER_* environment overrides
    scene: Scene file parser

Both parsers come in a raising form (load_config, load_scene) and a
non-raising form (try_parse_config, try_parse_scene) that returns
``(value, "")`` or ``(None, message)``.
"""

from .errors import (
    DuplicateNameError,
    FileOpenError,
    FormatError,
    OrderError,
    ParseError,
    RangeError,
    UnknownKeyError,
    UnknownReferenceError,
)

# Note: config and scene are NOT imported here to avoid circular imports
# (scene.manager imports the error types from this package). Import directly:
#   from src.minitrace.parsing.config import load_config
#   from src.minitrace.parsing.scene import load_scene

__all__ = [
    "ParseError",
    "FileOpenError",
    "FormatError",
    "RangeError",
    "UnknownKeyError",
    "OrderError",
    "DuplicateNameError",
    "UnknownReferenceError",
]
