"""
Generic value model for parsed PHP literals.

A parsed literal is a tree of ``Value`` instances. The variant set is closed:
``Null``, ``Bool``, ``Int``, ``Float``, ``String`` and ``Array``. Every variant
is immutable, and scalars compare equal to the matching native Python value
so assertions stay short::

    value = parse('["foo" => true, "nested" => ["foo" => false]]')
    assert value["foo"] == True
    assert value["nested"]["foo"] == False
"""

from __future__ import annotations

import math
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any
from typing import ClassVar

from ._errors import ValueTypeError
from ._scalars import INT64_MAX
from ._scalars import INT64_MIN
from ._scalars import canonical_int

type Key = int | str


class Value:
    """Base class of the parsed literal variants."""

    __slots__ = ()

    type_name: ClassVar[str] = "value"

    def is_null(self) -> bool:
        return isinstance(self, Null)

    def is_bool(self) -> bool:
        return isinstance(self, Bool)

    def is_int(self) -> bool:
        return isinstance(self, Int)

    def is_float(self) -> bool:
        return isinstance(self, Float)

    def is_string(self) -> bool:
        return isinstance(self, String)

    def is_array(self) -> bool:
        return isinstance(self, Array)

    def as_bool(self) -> bool:
        raise ValueTypeError.mismatch("bool", self.type_name)

    def as_int(self) -> int:
        raise ValueTypeError.mismatch("integer", self.type_name)

    def as_float(self) -> float:
        raise ValueTypeError.mismatch("float", self.type_name)

    def as_str(self) -> str:
        raise ValueTypeError.mismatch("string", self.type_name)

    def as_array(self) -> Array:
        raise ValueTypeError.mismatch("array", self.type_name)

    def __getitem__(self, key: Any) -> Value:
        raise ValueTypeError(
            f"cannot index into {self.type_name}", "array", self.type_name
        )

    def get(self, key: Any, default: Any = None) -> Any:
        raise ValueTypeError(
            f"cannot look up keys in {self.type_name}", "array", self.type_name
        )

    def to_python(self) -> Any:
        """Converts the tree into plain Python objects."""
        raise NotImplementedError

    @staticmethod
    def from_python(obj: Any) -> Value:
        """Builds a Value tree from plain Python data."""
        if isinstance(obj, Value):
            return obj
        if obj is None:
            return Null()
        if isinstance(obj, bool):
            return Bool(obj)
        if isinstance(obj, int):
            return Int(obj)
        if isinstance(obj, float):
            return Float(obj)
        if isinstance(obj, str):
            return String(obj)
        if isinstance(obj, Mapping):
            return Array(obj)
        if isinstance(obj, list | tuple):
            return Array(dict(enumerate(obj)))
        raise TypeError(
            f"Object of type {type(obj).__name__} has no PHP literal form"
        )


@dataclass(frozen=True, slots=True, eq=False)
class Null(Value):
    type_name: ClassVar[str] = "null"

    def __eq__(self, other: object) -> bool:
        return other is None or isinstance(other, Null)

    def __hash__(self) -> int:
        return hash(None)

    def __str__(self) -> str:
        return "null"

    def to_python(self) -> None:
        return None


@dataclass(frozen=True, slots=True, eq=False)
class Bool(Value):
    value: bool

    type_name: ClassVar[str] = "bool"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Bool):
            return self.value == other.value
        if isinstance(other, bool):
            return self.value == other
        if isinstance(other, Value):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return "true" if self.value else "false"

    def as_bool(self) -> bool:
        return self.value

    def to_python(self) -> bool:
        return self.value


@dataclass(frozen=True, slots=True, eq=False)
class Int(Value):
    value: int

    type_name: ClassVar[str] = "integer"

    def __post_init__(self) -> None:
        if not INT64_MIN <= self.value <= INT64_MAX:
            raise OverflowError(f"{self.value} does not fit a 64-bit integer")

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Int):
            return self.value == other.value
        if isinstance(other, int) and not isinstance(other, bool):
            return self.value == other
        if isinstance(other, Value):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return str(self.value)

    def as_int(self) -> int:
        return self.value

    def as_float(self) -> float:
        return float(self.value)

    def to_python(self) -> int:
        return self.value


@dataclass(frozen=True, slots=True, eq=False)
class Float(Value):
    value: float

    type_name: ClassVar[str] = "float"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Float):
            return self.value == other.value
        if isinstance(other, int | float) and not isinstance(other, bool):
            return self.value == other
        if isinstance(other, Value):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return repr(self.value)

    def as_float(self) -> float:
        return self.value

    def to_python(self) -> float:
        return self.value


@dataclass(frozen=True, slots=True, eq=False)
class String(Value):
    value: str

    type_name: ClassVar[str] = "string"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, String):
            return self.value == other.value
        if isinstance(other, str):
            return self.value == other
        if isinstance(other, Value):
            return False
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.value)

    def __str__(self) -> str:
        return self.value

    def as_str(self) -> str:
        return self.value

    def to_python(self) -> str:
        return self.value


def coerce_key(key: Any) -> Key:
    """
    Normalises an array key the way PHP does.

    Canonical decimal strings become ints, floats are truncated toward zero,
    booleans become 0/1 and null becomes the empty string. Arrays cannot be
    keys.
    """
    if isinstance(key, Value) and not isinstance(key, Array):
        key = key.to_python()

    if isinstance(key, bool):
        return int(key)
    if isinstance(key, int):
        if not INT64_MIN <= key <= INT64_MAX:
            raise OverflowError(f"array key {key} does not fit a 64-bit integer")
        return key
    if isinstance(key, str):
        number = canonical_int(key)
        return key if number is None else number
    if isinstance(key, float):
        if not math.isfinite(key):
            raise ValueError(f"array key {key!r} is not a finite number")
        return coerce_key(math.trunc(key))
    if key is None:
        return ""

    found = key.type_name if isinstance(key, Value) else type(key).__name__
    raise ValueTypeError(
        f"Illegal offset type: {found} cannot be an array key",
        "integer or string",
        found,
    )


@dataclass(frozen=True, slots=True, eq=False, repr=False)
class Array(Value):
    """
    PHP's ordered associative array.

    Entries keep insertion order. Assigning to an existing key replaces the
    value in place, keeping the position of the first insertion. Two arrays
    are equal when they hold the same entries, whatever their order.
    """

    entries: Mapping[Key, Value]

    type_name: ClassVar[str] = "array"

    def __post_init__(self) -> None:
        entries: dict[Key, Value] = {}
        for key, value in self.entries.items():
            entries[coerce_key(key)] = Value.from_python(value)
        object.__setattr__(self, "entries", MappingProxyType(entries))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Array):
            return dict(self.entries) == dict(other.entries)
        if isinstance(other, Mapping):
            return dict(self.entries) == dict(other)
        if isinstance(other, list):
            return self.is_list() and list(self.entries.values()) == other
        if isinstance(other, Value):
            return False
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Array({dict(self.entries)!r})"

    def __str__(self) -> str:
        body = ", ".join(f"{key} => {value}" for key, value in self.items())
        return f"[{body}]"

    def __getitem__(self, key: Any) -> Value:
        try:
            normalized = coerce_key(key)
        except ValueTypeError:
            raise
        except (ValueError, OverflowError):
            raise KeyError(key) from None
        try:
            return self.entries[normalized]
        except KeyError:
            raise KeyError(key) from None

    def get(self, key: Any, default: Any = None) -> Any:
        try:
            return self[key]
        except KeyError:
            return default

    def __contains__(self, key: object) -> bool:
        try:
            return coerce_key(key) in self.entries
        except (ValueError, OverflowError):
            return False

    def __iter__(self) -> Iterator[Key]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def keys(self) -> Iterator[Key]:
        return iter(self.entries.keys())

    def values(self) -> Iterator[Value]:
        return iter(self.entries.values())

    def items(self) -> Iterator[tuple[Key, Value]]:
        return iter(self.entries.items())

    def pairs(self) -> Iterator[tuple[Int | String, Value]]:
        """Yields entries with their keys wrapped as Int or String values."""
        for key, value in self.entries.items():
            yield (Int(key) if isinstance(key, int) else String(key)), value

    def is_list(self) -> bool:
        """True when the keys are exactly 0..n-1 in insertion order."""
        return all(
            key == index for index, key in enumerate(self.entries.keys())
        )

    def as_array(self) -> Array:
        return self

    def to_python(self) -> list[Any] | dict[Key, Any]:
        if self.is_list():
            return [value.to_python() for value in self.entries.values()]
        return {key: value.to_python() for key, value in self.entries.items()}
