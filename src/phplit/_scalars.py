"""Decoding of PHP string and number literals.

The lexer only finds token boundaries. Turning the raw source slice of a
string or numeric token into a Python value happens here, following PHP's
own escape and literal rules.
"""

from __future__ import annotations

import re
from typing import Final

INT64_MIN: Final = -(2**63)
INT64_MAX: Final = 2**63 - 1

_LNUM = r"[0-9]+(?:_[0-9]+)*"
_DNUM = rf"(?:(?:{_LNUM})?\.{_LNUM}|{_LNUM}\.(?:{_LNUM})?)"

INTEGER_LITERAL: Final = re.compile(
    r"-?(?:"
    r"0[xX][0-9a-fA-F]+(?:_[0-9a-fA-F]+)*"
    r"|0[bB][01]+(?:_[01]+)*"
    r"|0[oO]?[0-7]+(?:_[0-7]+)*"
    r"|[1-9][0-9]*(?:_[0-9]+)*"
    r"|0"
    r")"
)
FLOAT_LITERAL: Final = re.compile(
    rf"-?(?:(?:{_LNUM}|{_DNUM})[eE][+-]?{_LNUM}|{_DNUM})"
)

# Canonical decimal integers are the only strings PHP turns into int keys
_CANONICAL_INT: Final = re.compile(r"-?[1-9][0-9]*|0")

_SINGLE_ESCAPE: Final = re.compile(r"\\([\\'])")
_OCTAL_ESCAPE: Final = re.compile(r"[0-7]{1,3}")
_HEX_ESCAPE: Final = re.compile(r"[0-9a-fA-F]{1,2}")
_UNICODE_ESCAPE: Final = re.compile(r"\{([0-9a-fA-F]+)\}")

_DOUBLE_ESCAPES: Final = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "v": "\v",
    "e": "\x1b",
    "f": "\f",
    "\\": "\\",
    "$": "$",
    '"': '"',
}

_MAX_CODEPOINT: Final = 0x10FFFF


class ScalarSyntaxError(ValueError):
    """A literal body could not be decoded; offset is relative to the body."""

    def __init__(self, msg: str, offset: int = 0) -> None:
        super().__init__(msg)
        self.msg = msg
        self.offset = offset


def decode_single_quoted(body: str) -> str:
    """Applies PHP single-quote rules: only ``\\\\`` and ``\\'`` are escapes."""
    if "\\" not in body:
        return body
    return _SINGLE_ESCAPE.sub(lambda m: m.group(1), body)


def decode_double_quoted(body: str) -> str:
    """
    Applies PHP double-quote escape rules.

    Unknown escape sequences are kept verbatim, backslash included, as PHP
    does. Variables are never interpolated, so ``$name`` stays literal text.
    """
    if "\\" not in body:
        return body

    result: list[str] = []
    i = 0
    length = len(body)
    while i < length:
        char = body[i]
        if char != "\\" or i + 1 >= length:
            result.append(char)
            i += 1
            continue

        next_char = body[i + 1]
        if next_char in _DOUBLE_ESCAPES:
            result.append(_DOUBLE_ESCAPES[next_char])
            i += 2
        elif next_char in "01234567":
            match = _OCTAL_ESCAPE.match(body, i + 1)
            assert match is not None
            result.append(chr(int(match.group(), 8)))
            i = match.end()
        elif next_char == "x" and (match := _HEX_ESCAPE.match(body, i + 2)):
            result.append(chr(int(match.group(), 16)))
            i = match.end()
        elif next_char == "u" and body.startswith("{", i + 2):
            match = _UNICODE_ESCAPE.match(body, i + 2)
            if match is None:
                raise ScalarSyntaxError(
                    "Invalid UTF-8 codepoint escape sequence", i
                )
            codepoint = int(match.group(1), 16)
            if codepoint > _MAX_CODEPOINT:
                raise ScalarSyntaxError(
                    "Invalid UTF-8 codepoint escape sequence: "
                    "Codepoint too large",
                    i,
                )
            result.append(chr(codepoint))
            i = match.end()
        else:
            result.append("\\")
            i += 1

    return "".join(result)


def parse_int_literal(text: str) -> int:
    """Parses a decimal, hex, octal or binary PHP integer literal."""
    if not INTEGER_LITERAL.fullmatch(text):
        raise ScalarSyntaxError(f"Invalid numeric literal {text!r}")

    negative = text.startswith("-")
    digits = (text[1:] if negative else text).replace("_", "")
    prefix = digits[:2].lower()

    if prefix == "0x":
        number = int(digits[2:], 16)
    elif prefix == "0b":
        number = int(digits[2:], 2)
    elif prefix == "0o":
        number = int(digits[2:], 8)
    elif len(digits) > 1 and digits[0] == "0":
        number = int(digits[1:], 8)
    else:
        number = int(digits)

    if negative:
        number = -number
    if not INT64_MIN <= number <= INT64_MAX:
        raise ScalarSyntaxError(f"Integer literal {text!r} out of range")
    return number


def parse_float_literal(text: str) -> float:
    """Parses a PHP float literal, honouring ``_`` digit separators."""
    if not FLOAT_LITERAL.fullmatch(text):
        raise ScalarSyntaxError(f"Invalid numeric literal {text!r}")
    try:
        return float(text.replace("_", ""))
    except ValueError as e:
        raise ScalarSyntaxError(f"Invalid numeric literal {text!r}") from e


def canonical_int(text: str) -> int | None:
    """
    Returns the integer a string array key stands for, or None.

    PHP stores ``"7"`` and ``7`` under the same key, but leaves ``"07"``,
    ``"7.0"`` and ``"-0"`` as strings.
    """
    if not _CANONICAL_INT.fullmatch(text):
        return None
    number = int(text)
    if not INT64_MIN <= number <= INT64_MAX:
        return None
    return number
