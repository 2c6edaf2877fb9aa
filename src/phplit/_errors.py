"""Exception types raised by phplit."""

from __future__ import annotations

from enum import Enum

from ._positions import SourcePositions

type Position = int
type PathSegment = str | int | MapKey
type Path = tuple[PathSegment, ...]


class PhpLiteralError(ValueError):
    """Base class for every error phplit raises."""


class ErrorKind(Enum):
    """Categories of syntax errors reported by the lexer and parser."""

    UNEXPECTED_EOF = "unexpected_eof"
    UNEXPECTED_CHARACTER = "unexpected_character"
    UNEXPECTED_TOKEN = "unexpected_token"
    UNTERMINATED_STRING = "unterminated_string"
    UNTERMINATED_COMMENT = "unterminated_comment"
    UNTERMINATED_ARRAY = "unterminated_array"
    INVALID_ESCAPE = "invalid_escape"
    INVALID_NUMBER = "invalid_number"
    INVALID_ARRAY_KEY = "invalid_array_key"
    ARRAY_KEY_OVERFLOW = "array_key_overflow"
    MISMATCHED_BRACKET = "mismatched_bracket"
    DEPTH_EXCEEDED = "depth_exceeded"
    TRAILING_CHARACTERS = "trailing_characters"


class ParseError(PhpLiteralError):
    """
    Handles PHP literal syntax failures with precise position information.

    Carries the character span of the offending input, the matching line and
    column numbers and the UTF-8 byte offset, so editors and linters can
    point at the exact location.
    """

    def __init__(
        self,
        msg: str,
        doc: str = "",
        pos: Position = 0,
        end: Position | None = None,
        kind: ErrorKind = ErrorKind.UNEXPECTED_TOKEN,
    ) -> None:
        if not isinstance(msg, str):
            raise TypeError("msg must be a string")
        if not isinstance(pos, int) or pos < 0:
            raise ValueError("pos must be a non-negative integer")

        self.msg = msg
        self.doc = doc
        self.pos = pos
        self.end = max(pos, end if end is not None else pos + 1)
        self.kind = kind

        positions = SourcePositions(doc)
        self.lineno, self.colno = positions.locate(pos)
        self.byte_pos = positions.char_to_byte(pos)

        super().__init__(f"{msg} at line {self.lineno}, column {self.colno}")

    def snippet(self) -> str:
        """Renders the offending source line with the span underlined."""
        return SourcePositions(self.doc).snippet(self.pos, self.end, self.msg)


class ValueTypeError(PhpLiteralError, TypeError):
    """A Value was accessed as a type it does not hold."""

    def __init__(self, msg: str, expected: str = "", found: str = "") -> None:
        super().__init__(msg)
        self.msg = msg
        self.expected = expected
        self.found = found

    @classmethod
    def mismatch(cls, expected: str, found: str) -> ValueTypeError:
        return cls(f"expected {expected}, found {found}", expected, found)


class MapKey:
    """Path segment for an entry of a mapping target."""

    __slots__ = ("key",)

    def __init__(self, key: int | str) -> None:
        self.key = key

    def __eq__(self, other: object) -> bool:
        return isinstance(other, MapKey) and self.key == other.key

    def __hash__(self) -> int:
        return hash((MapKey, self.key))

    def __repr__(self) -> str:
        return f"MapKey({self.key!r})"


def format_path(path: Path) -> str:
    """Formats a path as ``outer.items[2]["name"]``."""
    parts: list[str] = []
    for segment in path:
        if isinstance(segment, MapKey):
            key = segment.key
            parts.append(f'["{key}"]' if isinstance(key, str) else f"[{key}]")
        elif isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f".{segment}" if parts else segment)
    return "".join(parts)


class DeserializeError(PhpLiteralError):
    """
    A Value does not fit the requested target shape.

    The path names the exact location of the mismatch, so a failure deep
    inside a nested structure reads as
    ``field `bars[2]`: expected integer, found string``.
    """

    def __init__(
        self,
        msg: str,
        path: Path = (),
        expected: str = "",
        found: str = "",
    ) -> None:
        self.msg = msg
        self.path = path
        self.expected = expected
        self.found = found
        if path:
            super().__init__(f"field `{format_path(path)}`: {msg}")
        else:
            super().__init__(msg)

    @classmethod
    def mismatch(
        cls, expected: str, found: str, path: Path = ()
    ) -> DeserializeError:
        return cls(f"expected {expected}, found {found}", path, expected, found)
