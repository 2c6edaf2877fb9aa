"""
Parser for PHP literal expressions.

Turns PHP literal syntax (``[]``/``array()`` arrays with ``=>`` pairs, ints,
floats, booleans, ``null`` and quoted strings) into a generic ``Value`` tree,
and optionally maps that tree onto typed Python targets::

    >>> value = parse('["foo" => true, "nested" => ["foo" => false]]')
    >>> value["nested"]["foo"] == False
    True
    >>> from_str('["foo" => true, "bars" => [1, 2, 3, 4,]]', Target)
    Target(foo=True, bars=[1, 2, 3, 4])

Only literals are accepted. Variables, constants, calls and operators are
rejected with a ``ParseError`` pointing at the offending input.
"""

import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any
from typing import Final
from typing import TypeVar
from typing import overload

from ._errors import DeserializeError
from ._errors import ErrorKind
from ._errors import ParseError
from ._errors import PhpLiteralError
from ._errors import Position
from ._errors import ValueTypeError
from ._scalars import ScalarSyntaxError
from ._scalars import FLOAT_LITERAL
from ._scalars import INT64_MAX
from ._scalars import INTEGER_LITERAL
from ._scalars import decode_double_quoted
from ._scalars import decode_single_quoted
from ._scalars import parse_float_literal
from ._scalars import parse_int_literal
from ._shapes import I8
from ._shapes import I16
from ._shapes import I32
from ._shapes import I64
from ._shapes import U8
from ._shapes import U16
from ._shapes import U32
from ._shapes import U64
from ._shapes import AnyShape
from ._shapes import BoolShape
from ._shapes import DeserializeConfig
from ._shapes import EnumShape
from ._shapes import FieldSpec
from ._shapes import FloatShape
from ._shapes import IntRange
from ._shapes import IntShape
from ._shapes import LiteralShape
from ._shapes import MappingShape
from ._shapes import NoneShape
from ._shapes import OptionalShape
from ._shapes import SequenceShape
from ._shapes import Shape
from ._shapes import StrShape
from ._shapes import StructShape
from ._shapes import TupleShape
from ._shapes import UnionShape
from ._shapes import ValueShape
from ._shapes import shape_for
from ._value import Array
from ._value import Bool
from ._value import Float
from ._value import Int
from ._value import Key
from ._value import Null
from ._value import String
from ._value import Value
from ._value import coerce_key

__version__ = "0.1.0"

T = TypeVar("T")

# Profiling infrastructure - zero-cost when disabled
PROFILE_HOT_PATHS = __debug__ and "PHPLIT_PROFILE" in os.environ


@dataclass
class HotPathStats:
    """Statistics for profiling hot paths during parsing."""

    function_name: str
    call_count: int = 0
    total_time_ns: int = 0
    chars_processed: int = 0

    def record_call(self, duration_ns: int, chars: int = 0) -> None:
        """Records a function call with timing and character processing info."""
        self.call_count += 1
        self.total_time_ns += duration_ns
        self.chars_processed += chars


if PROFILE_HOT_PATHS:
    _hot_path_stats: dict[str, HotPathStats] = {}

    class ProfileContext:
        """Context manager for profiling hot paths."""

        def __init__(self, func_name: str, chars_to_process: int = 0):
            self.func_name = func_name
            self.chars = chars_to_process
            self.start_time = 0

        def __enter__(self) -> "ProfileContext":
            self.start_time = time.perf_counter_ns()
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            duration = time.perf_counter_ns() - self.start_time
            if self.func_name not in _hot_path_stats:
                _hot_path_stats[self.func_name] = HotPathStats(self.func_name)
            _hot_path_stats[self.func_name].record_call(duration, self.chars)

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        """Returns current profiling statistics."""
        return _hot_path_stats.copy()

    def clear_hot_path_stats() -> None:
        """Clears profiling statistics."""
        _hot_path_stats.clear()

else:
    # Zero-cost in production - ignore arguments
    class ProfileContext:  # type: ignore[no-redef]
        def __init__(self, func_name: str, chars: int = 0) -> None:
            pass

        def __enter__(self) -> "ProfileContext":
            return self

        def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
            pass

    def get_hot_path_stats() -> dict[str, HotPathStats]:
        return {}

    def clear_hot_path_stats() -> None:
        pass


class TokenType(Enum):
    """Lexical categories of the PHP literal grammar."""

    ARRAY = "array"
    BOOL = "bool"
    NULL = "null"
    ARROW = "=>"
    PAREN_OPEN = "("
    PAREN_CLOSE = ")"
    SQUARE_OPEN = "["
    SQUARE_CLOSE = "]"
    COMMA = ","
    SEMICOLON = ";"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"


_PUNCTUATION: Final = {
    "(": TokenType.PAREN_OPEN,
    ")": TokenType.PAREN_CLOSE,
    "[": TokenType.SQUARE_OPEN,
    "]": TokenType.SQUARE_CLOSE,
    ",": TokenType.COMMA,
    ";": TokenType.SEMICOLON,
}
_KEYWORDS: Final = {
    "array": TokenType.ARRAY,
    "true": TokenType.BOOL,
    "false": TokenType.BOOL,
    "null": TokenType.NULL,
}
_CLOSERS: Final = {
    TokenType.SQUARE_CLOSE: "]",
    TokenType.PAREN_CLOSE: ")",
}
_SCALARS: Final = {
    TokenType.INTEGER,
    TokenType.FLOAT,
    TokenType.STRING,
    TokenType.BOOL,
    TokenType.NULL,
}

_WHITESPACE: Final = " \t\n\r\f\v"
_DIGITS: Final = "0123456789"
_WORD_START: Final = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ_"
_WORD_CHARS: Final = _WORD_START + _DIGITS
_NUMBER_CHARS: Final = _WORD_CHARS + "."


@dataclass(frozen=True)
class PhpToken:
    """
    Represents a PHP literal token with position information.

    ``value`` is the raw source slice; decoding happens in the parser.
    """

    type: TokenType
    value: str
    start: Position
    end: Position


def _describe(token: PhpToken | None) -> str:
    if token is None:
        return "end of input"
    if token.type in _SCALARS:
        return f"{token.type.value} {token.value}"
    return f"'{token.value}'"


class PhpLexer:
    """
    Tokenizes PHP literal source for recursive-descent parsing.

    Character-by-character scanning of whitespace, comments, strings,
    numbers, keywords and punctuation.
    """

    def __init__(self, text: str, allow_comments: bool = True):
        self.text = text
        self.pos = 0
        self.length = len(text)
        self.allow_comments = allow_comments

    def peek(self, offset: int = 0) -> str:
        """Returns the character offset places ahead without advancing."""
        index = self.pos + offset
        return self.text[index] if index < self.length else "\0"

    def advance(self) -> str:
        """Returns current character and advances position."""
        char = self.peek()
        if self.pos < self.length:
            self.pos += 1
        return char

    def error(
        self, msg: str, kind: ErrorKind, start: Position, end: Position | None = None
    ) -> ParseError:
        return ParseError(msg, self.text, start, end, kind)

    def skip_whitespace(self) -> None:
        """Skips whitespace and, when enabled, ``//``, ``#`` and ``/* */`` comments."""
        with ProfileContext("skip_whitespace"):
            while self.pos < self.length:
                char = self.text[self.pos]
                if char in _WHITESPACE:
                    self.pos += 1
                elif not self.allow_comments:
                    return
                elif char == "#" or (char == "/" and self.peek(1) == "/"):
                    newline = self.text.find("\n", self.pos)
                    self.pos = self.length if newline == -1 else newline + 1
                elif char == "/" and self.peek(1) == "*":
                    close = self.text.find("*/", self.pos + 2)
                    if close == -1:
                        raise self.error(
                            "Unterminated comment starting at",
                            ErrorKind.UNTERMINATED_COMMENT,
                            self.pos,
                            self.pos + 2,
                        )
                    self.pos = close + 2
                else:
                    return

    def scan_string(self) -> PhpToken:
        """Scans a single- or double-quoted string token including quotes."""
        with ProfileContext("scan_string"):
            start = self.pos
            quote = self.advance()

            while self.pos < self.length:
                char = self.advance()
                if char == quote:
                    return PhpToken(
                        TokenType.STRING,
                        self.text[start : self.pos],
                        start,
                        self.pos,
                    )
                elif char == "\\":
                    # Skip escaped character
                    if self.pos < self.length:
                        self.advance()

            raise self.error(
                "Unterminated string starting at",
                ErrorKind.UNTERMINATED_STRING,
                start,
            )

    def scan_number(self) -> PhpToken:
        """
        Scans an integer or float token.

        Consumes the longest run that could belong to a numeric literal and
        then classifies it, so ``08`` or ``1_`` fail as a whole instead of
        splitting into several tokens.
        """
        with ProfileContext("scan_number"):
            start = self.pos
            if self.peek() == "-":
                self.advance()

            radix_prefix = self.text[self.pos : self.pos + 2].lower()
            signed_exponent = radix_prefix not in ("0x", "0b")
            while self.pos < self.length:
                char = self.text[self.pos]
                if char in _NUMBER_CHARS:
                    self.pos += 1
                elif (
                    char in "+-"
                    and signed_exponent
                    and self.text[self.pos - 1] in "eE"
                ):
                    self.pos += 1
                else:
                    break

            raw = self.text[start : self.pos]
            if INTEGER_LITERAL.fullmatch(raw):
                return PhpToken(TokenType.INTEGER, raw, start, self.pos)
            if FLOAT_LITERAL.fullmatch(raw):
                return PhpToken(TokenType.FLOAT, raw, start, self.pos)
            raise self.error(
                f"Invalid numeric literal {raw!r}",
                ErrorKind.INVALID_NUMBER,
                start,
                self.pos,
            )

    def scan_word(self) -> PhpToken:
        """Scans keyword tokens: array, true, false, null (case-insensitive)."""
        with ProfileContext("scan_word"):
            start = self.pos
            while self.pos < self.length and self.text[self.pos] in _WORD_CHARS:
                self.pos += 1

            word = self.text[start : self.pos]
            token_type = _KEYWORDS.get(word.lower())
            if token_type is None:
                raise self.error(
                    f"Unexpected identifier {word!r}, "
                    "constants are not supported",
                    ErrorKind.UNEXPECTED_CHARACTER,
                    start,
                    self.pos,
                )
            return PhpToken(token_type, word, start, self.pos)

    def next_token(self) -> PhpToken | None:
        """Returns the next token or None if at end."""
        self.skip_whitespace()

        if self.pos >= self.length:
            return None

        char = self.peek()
        start = self.pos

        if char in _PUNCTUATION:
            self.advance()
            return PhpToken(_PUNCTUATION[char], char, start, self.pos)

        elif char == "=" and self.peek(1) == ">":
            self.pos += 2
            return PhpToken(TokenType.ARROW, "=>", start, self.pos)

        elif char in "'\"":
            return self.scan_string()

        elif (
            char in _DIGITS
            or (char == "-" and (self.peek(1) in _DIGITS or self.peek(1) == "."))
            or (char == "." and self.peek(1) in _DIGITS)
        ):
            return self.scan_number()

        elif char in _WORD_START:
            return self.scan_word()

        else:
            raise self.error(
                f"Unexpected character {char!r}",
                ErrorKind.UNEXPECTED_CHARACTER,
                start,
            )


@dataclass(frozen=True)
class ParseConfig:
    """
    Configures PHP literal parsing with immutable settings.

    ``max_depth`` bounds array nesting so hostile input fails with a
    ``DEPTH_EXCEEDED`` error rather than exhausting the interpreter stack.
    """

    max_depth: int = 256
    allow_comments: bool = True
    allow_trailing_semicolon: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_depth, bool) or not isinstance(self.max_depth, int):
            raise TypeError("max_depth must be an integer")
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")
        if not isinstance(self.allow_comments, bool):
            raise TypeError("allow_comments must be a boolean")
        if not isinstance(self.allow_trailing_semicolon, bool):
            raise TypeError("allow_trailing_semicolon must be a boolean")


class _ArrayBuilder:
    """Collects array entries, tracking the next automatic integer key."""

    __slots__ = ("entries", "next_index", "has_int_key")

    def __init__(self) -> None:
        self.entries: dict[Key, Value] = {}
        self.next_index = 0
        self.has_int_key = False

    def _track(self, key: int) -> None:
        following = key + 1
        if not self.has_int_key or following > self.next_index:
            self.next_index = following
        self.has_int_key = True

    def append(self, value: Value) -> None:
        key = self.next_index
        if key > INT64_MAX:
            raise OverflowError(
                "Cannot add element to the array as the next element is "
                "already occupied"
            )
        self.entries[key] = value
        self._track(key)

    def insert(self, key: Key, value: Value) -> None:
        self.entries[key] = value
        if isinstance(key, int):
            self._track(key)

    def build(self) -> Array:
        return Array(self.entries)


class PhpParser:
    """
    Recursive-descent parser for PHP literals over a token stream.

    The only state carried between calls is the cursor into the token
    stream and the current nesting depth; auto-increment keys are tracked
    per array.
    """

    def __init__(self, lexer: PhpLexer, config: ParseConfig):
        self.lexer = lexer
        self.config = config
        self.current_token: PhpToken | None = None
        self.depth = 0

    def advance_token(self) -> PhpToken | None:
        """Advances to next token and returns it."""
        self.current_token = self.lexer.next_token()
        return self.current_token

    def error(
        self, msg: str, kind: ErrorKind, token: PhpToken | None = None
    ) -> ParseError:
        if token is None:
            return ParseError(msg, self.lexer.text, self.lexer.pos, None, kind)
        return ParseError(msg, self.lexer.text, token.start, token.end, kind)

    def parse_document(self) -> Value:
        """Parses a complete document: one value and an optional ';'."""
        self.advance_token()
        value = self.parse_value()

        token = self.current_token
        if (
            token is not None
            and token.type == TokenType.SEMICOLON
            and self.config.allow_trailing_semicolon
        ):
            token = self.advance_token()

        if token is not None:
            raise self.error("Extra data", ErrorKind.TRAILING_CHARACTERS, token)
        return value

    def parse_value(self) -> Value:
        """Parses any PHP literal based on current token."""
        token = self.current_token
        if token is None:
            raise self.error("Expecting value", ErrorKind.UNEXPECTED_EOF)

        if token.type in _SCALARS:
            self.advance_token()
            return self._decode_scalar(token)
        elif token.type == TokenType.SQUARE_OPEN:
            return self.parse_array(token, TokenType.SQUARE_CLOSE)
        elif token.type == TokenType.ARRAY:
            opener = self.advance_token()
            if opener is None or opener.type != TokenType.PAREN_OPEN:
                raise self.error(
                    f"Expecting '(' after 'array', found {_describe(opener)}",
                    ErrorKind.UNEXPECTED_EOF
                    if opener is None
                    else ErrorKind.UNEXPECTED_TOKEN,
                    opener,
                )
            return self.parse_array(token, TokenType.PAREN_CLOSE)
        else:
            raise self.error(
                f"Expecting value, found {_describe(token)}",
                ErrorKind.UNEXPECTED_TOKEN,
                token,
            )

    def _decode_scalar(self, token: PhpToken) -> Value:
        if token.type == TokenType.NULL:
            return Null()
        if token.type == TokenType.BOOL:
            return Bool(token.value.lower() == "true")
        if token.type == TokenType.STRING:
            return String(self._decode_string(token))

        try:
            if token.type == TokenType.INTEGER:
                return Int(parse_int_literal(token.value))
            return Float(parse_float_literal(token.value))
        except ScalarSyntaxError as e:
            raise self.error(e.msg, ErrorKind.INVALID_NUMBER, token) from e

    def _decode_string(self, token: PhpToken) -> str:
        with ProfileContext("decode_string", len(token.value)):
            body = token.value[1:-1]
            if token.value[0] == "'":
                return decode_single_quoted(body)
            try:
                return decode_double_quoted(body)
            except ScalarSyntaxError as e:
                pos = token.start + 1 + e.offset
                raise ParseError(
                    e.msg, self.lexer.text, pos, pos + 2, ErrorKind.INVALID_ESCAPE
                ) from e

    def _unterminated(self, opener: PhpToken) -> ParseError:
        return self.error(
            "Unterminated array starting at", ErrorKind.UNTERMINATED_ARRAY, opener
        )

    def _check_closer(
        self, token: PhpToken, opener: PhpToken, closer: TokenType
    ) -> None:
        """Rejects a closing bracket of the wrong kind."""
        if token.type in _CLOSERS and token.type != closer:
            raise self.error(
                f"Mismatched '{token.value}', expecting '{_CLOSERS[closer]}' "
                f"to close '{opener.value}' at position {opener.start}",
                ErrorKind.MISMATCHED_BRACKET,
                token,
            )

    def parse_array(self, opener: PhpToken, closer: TokenType) -> Array:
        """Parses the pairs of an array up to and including its closer."""
        with ProfileContext("parse_array"):
            self.depth += 1
            if self.depth > self.config.max_depth:
                raise self.error(
                    f"Maximum nesting depth of {self.config.max_depth} exceeded",
                    ErrorKind.DEPTH_EXCEEDED,
                    opener,
                )

            builder = _ArrayBuilder()
            self.advance_token()

            while True:
                token = self.current_token
                if token is None:
                    raise self._unterminated(opener)
                if token.type == closer:
                    self.advance_token()
                    break
                self._check_closer(token, opener, closer)

                self._parse_pair(builder)

                token = self.current_token
                if token is None:
                    raise self._unterminated(opener)
                if token.type == TokenType.COMMA:
                    self.advance_token()
                elif token.type == closer:
                    self.advance_token()
                    break
                else:
                    self._check_closer(token, opener, closer)
                    raise self.error(
                        f"Expecting ',' or '{_CLOSERS[closer]}' delimiter, "
                        f"found {_describe(token)}",
                        ErrorKind.UNEXPECTED_TOKEN,
                        token,
                    )

            self.depth -= 1
            return builder.build()

    def _parse_pair(self, builder: _ArrayBuilder) -> None:
        """Parses ``value`` or ``key => value`` into builder."""
        key_token = self.current_token
        key_or_value = self.parse_value()

        arrow = self.current_token
        if arrow is None or arrow.type != TokenType.ARROW:
            try:
                builder.append(key_or_value)
            except OverflowError as e:
                raise self.error(
                    str(e), ErrorKind.ARRAY_KEY_OVERFLOW, key_token
                ) from e
            return

        self.advance_token()
        value = self.parse_value()
        try:
            key = coerce_key(key_or_value)
        except (ValueError, OverflowError) as e:
            raise self.error(
                f"Invalid array key: {e}", ErrorKind.INVALID_ARRAY_KEY, key_token
            ) from e
        builder.insert(key, value)


def _parse_document(s: str, config: ParseConfig) -> Value:
    """
    Main parser entry point.

    Interpreter recursion limits below ``max_depth`` surface as the same
    ``DEPTH_EXCEEDED`` error as the configured ceiling.
    """
    with ProfileContext("parse_document", len(s)):
        lexer = PhpLexer(s, allow_comments=config.allow_comments)
        parser = PhpParser(lexer, config)
        try:
            return parser.parse_document()
        except RecursionError as e:
            raise ParseError(
                "Maximum nesting depth exceeded",
                s,
                lexer.pos,
                None,
                ErrorKind.DEPTH_EXCEEDED,
            ) from e


def _check_source(s: Any) -> None:
    if not isinstance(s, str):
        raise TypeError(
            f"the PHP literal must be str, not {type(s).__name__}"
        )


def parse(s: str, **kwargs: Any) -> Value:
    """
    Parses PHP literal source into a Value tree.

    Keyword arguments build the ``ParseConfig``. Raises ``ParseError`` with
    the position of the first syntax error; no partial result is returned.
    """
    _check_source(s)
    config = ParseConfig(**kwargs)
    return _parse_document(s, config)


def loads(s: str, **kwargs: Any) -> Any:
    """
    Parses PHP literal source into plain Python objects.

    Arrays keyed 0..n-1 in order become lists, all other arrays dicts.
    """
    return parse(s, **kwargs).to_python()


@overload
def from_value(
    value: Value, target: type[T], *, config: DeserializeConfig | None = None
) -> T: ...


@overload
def from_value(
    value: Value, target: Any, *, config: DeserializeConfig | None = None
) -> Any: ...


def from_value(
    value: Value, target: Any, *, config: DeserializeConfig | None = None
) -> Any:
    """
    Builds an instance of target from an already parsed Value.

    Raises ``DeserializeError`` naming the path of the first mismatch.
    """
    if not isinstance(value, Value):
        raise TypeError(f"value must be a Value, not {type(value).__name__}")
    shape = shape_for(target)
    return shape.build(value, (), config or DeserializeConfig())


@overload
def from_str(
    s: str,
    target: type[T],
    *,
    config: DeserializeConfig | None = None,
    **kwargs: Any,
) -> T: ...


@overload
def from_str(
    s: str,
    target: Any,
    *,
    config: DeserializeConfig | None = None,
    **kwargs: Any,
) -> Any: ...


def from_str(
    s: str,
    target: Any,
    *,
    config: DeserializeConfig | None = None,
    **kwargs: Any,
) -> Any:
    """
    Parses PHP literal source and deserializes it into target in one step.

    Equivalent to ``from_value(parse(s, **kwargs), target, config=config)``.
    """
    return from_value(parse(s, **kwargs), target, config=config)


__all__ = [
    "I8",
    "I16",
    "I32",
    "I64",
    "U8",
    "U16",
    "U32",
    "U64",
    "AnyShape",
    "Array",
    "Bool",
    "BoolShape",
    "DeserializeConfig",
    "DeserializeError",
    "EnumShape",
    "ErrorKind",
    "FieldSpec",
    "Float",
    "FloatShape",
    "HotPathStats",
    "Int",
    "IntRange",
    "IntShape",
    "LiteralShape",
    "MappingShape",
    "NoneShape",
    "Null",
    "OptionalShape",
    "ParseConfig",
    "ParseError",
    "PhpLexer",
    "PhpLiteralError",
    "PhpParser",
    "PhpToken",
    "SequenceShape",
    "Shape",
    "StrShape",
    "String",
    "StructShape",
    "TokenType",
    "TupleShape",
    "UnionShape",
    "Value",
    "ValueShape",
    "ValueTypeError",
    "clear_hot_path_stats",
    "from_str",
    "from_value",
    "get_hot_path_stats",
    "loads",
    "parse",
    "shape_for",
]
