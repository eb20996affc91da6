"""Error hierarchy for the config and scene parsers.

Every failure is a ParseError subclass carrying a human-readable cause and,
when it comes from a file, the file name and 1-based line number:

    Error: width must be > 0 in render.cfg:3

Parsing is fail-fast: the first offending line raises and no partial value
is returned.
"""

from __future__ import annotations


class ParseError(ValueError):
    """Base class for config and scene errors.

    Attributes:
        cause: What went wrong, without location.
        path: Source file name (or environment variable), if known.
        line: 1-based line number, if known.
    """

    def __init__(self, cause: str, path: str | None = None, line: int | None = None) -> None:
        self.cause = cause
        self.path = path
        self.line = line
        super().__init__(self._format())

    def _format(self) -> str:
        if self.path is None:
            return f"Error: {self.cause}"
        if self.line is None:
            return f"Error: {self.cause} in {self.path}"
        return f"Error: {self.cause} in {self.path}:{self.line}"

    def at(self, path: str, line: int | None = None) -> ParseError:
        """Return a copy of this error located at path:line."""
        return type(self)(self.cause, path=path, line=line)


class FileOpenError(ParseError):
    """The input file could not be opened for reading."""

    def _format(self) -> str:
        return f"Error: cannot open file '{self.path}'"


class FormatError(ParseError):
    """A token failed to parse or required tokens are missing or extra."""


class RangeError(ParseError):
    """A parsed value is outside its documented bounds."""


class UnknownKeyError(ParseError):
    """Unrecognized directive, config key, or option name."""


class OrderError(ParseError):
    """Material declared after objects, or object declared before materials."""


class DuplicateNameError(ParseError):
    """A material, sphere or cylinder name was reused within its namespace."""


class UnknownReferenceError(ParseError):
    """An object refers to a material that was never declared."""
