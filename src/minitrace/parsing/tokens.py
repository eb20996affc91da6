"""Line and token helpers shared by the config and scene parsers.

Both grammars are line oriented: a ``#`` starts a comment that runs to the
end of the line, surrounding whitespace is trimmed and blank lines are
skipped. The value parsers raise FormatError without location; callers
attach the file name and line number.
"""

from __future__ import annotations

import math
import re
from collections.abc import Iterator
from pathlib import Path

from src.minitrace.core.vector import Vector3
from src.minitrace.parsing.errors import FileOpenError, FormatError

_UINT_RE = re.compile(r"\+?[0-9]+")
_INT_RE = re.compile(r"[+-]?[0-9]+")


def strip_comment(line: str) -> str:
    """Drop a trailing ``#`` comment and surrounding whitespace."""
    hash_index = line.find("#")
    if hash_index != -1:
        line = line[:hash_index]
    return line.strip()


def iter_content_lines(path: str | Path) -> Iterator[tuple[int, str]]:
    """Yield (line_number, text) for every non-blank, non-comment line.

    Args:
        path: File to read.

    Yields:
        1-based line numbers with the comment-stripped, trimmed text.

    Raises:
        FileOpenError: If the file cannot be opened.
        FormatError: If a line is not valid UTF-8.
    """
    try:
        handle = open(path, "rb")
    except OSError:
        raise FileOpenError("cannot open file", path=str(path)) from None

    with handle:
        for line_number, raw in enumerate(handle, start=1):
            try:
                decoded = raw.decode("utf-8")
            except UnicodeDecodeError:
                raise FormatError("invalid encoding", path=str(path), line=line_number) from None
            text = strip_comment(decoded)
            if text:
                yield line_number, text


def parse_float(token: str, what: str) -> float:
    """Parse a finite float.

    Raises:
        FormatError: If the token is not a finite number.
    """
    try:
        value = float(token)
    except ValueError:
        raise FormatError(f"invalid format for '{what}'") from None
    if not math.isfinite(value):
        raise FormatError(f"invalid format for '{what}'")
    return value


def parse_uint(token: str, what: str) -> int:
    """Parse a non-negative base-10 integer."""
    if not _UINT_RE.fullmatch(token):
        raise FormatError(f"invalid format for '{what}'")
    return int(token)


def parse_int(token: str, what: str) -> int:
    """Parse a signed base-10 integer."""
    if not _INT_RE.fullmatch(token):
        raise FormatError(f"invalid format for '{what}'")
    return int(token)


def parse_vector(tokens: list[str], what: str) -> Vector3:
    """Parse exactly three float tokens into a Vector3."""
    if len(tokens) != 3:
        raise FormatError(f"invalid format for '{what}'")
    return Vector3(*(parse_float(t, what) for t in tokens))


def parse_csv_vector(token: str, what: str) -> Vector3:
    """Parse ``x,y,z`` (no spaces) into a Vector3."""
    parts = token.split(",")
    if len(parts) != 3:
        raise FormatError(f"invalid format for '{what}' (x,y,z)")
    return Vector3(*(parse_float(p, what) for p in parts))


def split_key_value(token: str) -> tuple[str, str]:
    """Split ``key=value``.

    Raises:
        FormatError: If there is no ``=`` or the key is empty.
    """
    key, sep, value = token.partition("=")
    if not sep or not key:
        raise FormatError(f"expected key=value, got '{token}'")
    return key, value
