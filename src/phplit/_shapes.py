"""
Deserialization of Value trees into typed Python objects.

A target type is described by a ``Shape``: a small builder object that knows
which Value variants it accepts and how to turn them into a Python object.
Shapes are normally derived from type hints with ``shape_for``::

    @dataclass
    class Target:
        foo: bool
        bars: list[U8]

    shape_for(Target).build(value, (), DeserializeConfig())

but can also be assembled by hand for targets that have no type of their own.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import enum
import functools
import logging
import types
import typing
from collections.abc import Callable
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Annotated
from typing import Any
from typing import ClassVar
from typing import Final
from typing import Literal
from typing import Union

from ._errors import DeserializeError
from ._errors import MapKey
from ._errors import Path
from ._scalars import INT64_MAX
from ._scalars import INT64_MIN
from ._value import Array
from ._value import Int
from ._value import String
from ._value import Value

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeserializeConfig:
    """
    Configures the deserialization walk with immutable settings.

    ``strict_sequences`` requires list-like targets to come from arrays keyed
    0..n-1 in order; when false, values are taken in iteration order and keys
    are ignored. ``deny_unknown_fields`` rejects array keys that name no
    field of a struct target.
    """

    strict_sequences: bool = True
    deny_unknown_fields: bool = False

    def __post_init__(self) -> None:
        if not isinstance(self.strict_sequences, bool):
            raise TypeError("strict_sequences must be a boolean")
        if not isinstance(self.deny_unknown_fields, bool):
            raise TypeError("deny_unknown_fields must be a boolean")


@dataclass(frozen=True)
class IntRange:
    """Annotated metadata restricting an int target to [lo, hi]."""

    lo: int
    hi: int
    name: str = ""

    def __post_init__(self) -> None:
        if self.lo > self.hi:
            raise ValueError("lo must not exceed hi")


I8 = Annotated[int, IntRange(-(2**7), 2**7 - 1, "i8")]
I16 = Annotated[int, IntRange(-(2**15), 2**15 - 1, "i16")]
I32 = Annotated[int, IntRange(-(2**31), 2**31 - 1, "i32")]
I64 = Annotated[int, IntRange(INT64_MIN, INT64_MAX, "i64")]
U8 = Annotated[int, IntRange(0, 2**8 - 1, "u8")]
U16 = Annotated[int, IntRange(0, 2**16 - 1, "u16")]
U32 = Annotated[int, IntRange(0, 2**32 - 1, "u32")]
U64 = Annotated[int, IntRange(0, INT64_MAX, "u64")]


class Shape:
    """Builds a Python object of one target type from a Value."""

    expecting: ClassVar[str] = "value"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        raise NotImplementedError

    def build_key(
        self, key: int | str, path: Path, config: DeserializeConfig
    ) -> Any:
        """Builds a mapping key; keys arrive as native int or str."""
        wrapped = Int(key) if isinstance(key, int) else String(key)
        return self.build(wrapped, path, config)

    def describe(self) -> str:
        return self.expecting

    def mismatch(self, value: Value, path: Path) -> DeserializeError:
        return DeserializeError.mismatch(self.describe(), value.type_name, path)


@dataclass(frozen=True)
class ValueShape(Shape):
    """Hands the Value itself through, optionally checking its variant."""

    variant: type[Value] = Value

    def describe(self) -> str:
        return self.variant.type_name

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Value:
        if not isinstance(value, self.variant):
            raise self.mismatch(value, path)
        return value


@dataclass(frozen=True)
class AnyShape(Shape):
    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        return value.to_python()


@dataclass(frozen=True)
class NoneShape(Shape):
    expecting: ClassVar[str] = "null"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> None:
        if not value.is_null():
            raise self.mismatch(value, path)


@dataclass(frozen=True)
class BoolShape(Shape):
    expecting: ClassVar[str] = "bool"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> bool:
        if not value.is_bool():
            raise self.mismatch(value, path)
        return value.as_bool()


@dataclass(frozen=True)
class IntShape(Shape):
    """
    Integer targets, optionally range-restricted.

    Floats are never narrowed into integers, even when they hold a whole
    number; ``1.0`` for an int field is a type error.
    """

    lo: int = INT64_MIN
    hi: int = INT64_MAX
    name: str = ""

    expecting: ClassVar[str] = "integer"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> int:
        if not value.is_int():
            raise self.mismatch(value, path)
        number = value.as_int()
        if not self.lo <= number <= self.hi:
            label = self.name or f"{self.lo}..{self.hi}"
            raise DeserializeError(
                f"integer {number} out of range for {label}",
                path,
                label,
                str(number),
            )
        return number


@dataclass(frozen=True)
class FloatShape(Shape):
    """Float targets; integers widen to float."""

    expecting: ClassVar[str] = "float"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> float:
        if not (value.is_float() or value.is_int()):
            raise self.mismatch(value, path)
        return value.as_float()


@dataclass(frozen=True)
class StrShape(Shape):
    expecting: ClassVar[str] = "string"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> str:
        if not value.is_string():
            raise self.mismatch(value, path)
        return value.as_str()

    def build_key(
        self, key: int | str, path: Path, config: DeserializeConfig
    ) -> str:
        # PHP stores "1" under the int key 1; give it back as text
        return str(key)


@dataclass(frozen=True)
class OptionalShape(Shape):
    inner: Shape

    def describe(self) -> str:
        return f"{self.inner.describe()} or null"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        if value.is_null():
            return None
        return self.inner.build(value, path, config)

    def build_key(
        self, key: int | str, path: Path, config: DeserializeConfig
    ) -> Any:
        return self.inner.build_key(key, path, config)


def _require_array(shape: Shape, value: Value, path: Path) -> Array:
    if not isinstance(value, Array):
        raise shape.mismatch(value, path)
    return value


def _check_list_keys(array: Array, path: Path) -> None:
    for index, key in enumerate(array.keys()):
        if key != index:
            raise DeserializeError(
                f"expected sequence key {index}, found key {key!r}",
                path,
                str(index),
                repr(key),
            )


@dataclass(frozen=True)
class SequenceShape(Shape):
    """List-like targets: list, tuple[T, ...], set, frozenset."""

    item: Shape
    factory: Callable[[Iterable[Any]], Any] = list

    expecting: ClassVar[str] = "array"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        array = _require_array(self, value, path)
        if config.strict_sequences:
            _check_list_keys(array, path)
        return self.factory(
            self.item.build(item, (*path, index), config)
            for index, item in enumerate(array.values())
        )


@dataclass(frozen=True)
class TupleShape(Shape):
    """Fixed-length heterogeneous tuples."""

    items: tuple[Shape, ...]

    expecting: ClassVar[str] = "array"

    def build(
        self, value: Value, path: Path, config: DeserializeConfig
    ) -> tuple[Any, ...]:
        array = _require_array(self, value, path)
        if len(array) != len(self.items):
            raise DeserializeError(
                f"expected array of length {len(self.items)}, "
                f"found length {len(array)}",
                path,
                str(len(self.items)),
                str(len(array)),
            )
        if config.strict_sequences:
            _check_list_keys(array, path)
        return tuple(
            shape.build(item, (*path, index), config)
            for index, (shape, item) in enumerate(
                zip(self.items, array.values(), strict=True)
            )
        )


@dataclass(frozen=True)
class MappingShape(Shape):
    key: Shape
    value: Shape
    factory: Callable[[Iterable[tuple[Any, Any]]], Any] = dict

    expecting: ClassVar[str] = "array"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        array = _require_array(self, value, path)
        pairs = []
        for key, item in array.items():
            item_path = (*path, MapKey(key))
            pairs.append(
                (
                    self.key.build_key(key, item_path, config),
                    self.value.build(item, item_path, config),
                )
            )
        return self.factory(pairs)


@dataclass(frozen=True)
class FieldSpec:
    """One named field of a struct target."""

    name: str
    shape: Shape
    has_default: bool = False

    @property
    def nullable(self) -> bool:
        return isinstance(self.shape, OptionalShape | NoneShape)


class StructShape(Shape):
    """
    Record targets: dataclasses, NamedTuples and TypedDicts.

    Array keys are matched to field names exactly. Fields with a default may
    be absent, and nullable fields without a default become None. Keys that
    match no field are ignored unless ``deny_unknown_fields`` is set.
    """

    expecting: ClassVar[str] = "array"

    def __init__(
        self,
        target: Any,
        fields: tuple[FieldSpec, ...] = (),
        construct: Callable[..., Any] | None = None,
    ) -> None:
        self.target = target
        self.fields = fields
        self.construct = construct or target

    def __repr__(self) -> str:
        name = getattr(self.target, "__name__", repr(self.target))
        return f"StructShape({name})"

    def describe(self) -> str:
        return getattr(self.target, "__name__", "array")

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        array = _require_array(self, value, path)

        if config.deny_unknown_fields:
            names = [field.name for field in self.fields]
            for key in array.keys():
                if not isinstance(key, str) or key not in names:
                    expected = ", ".join(f"`{name}`" for name in names)
                    raise DeserializeError(
                        f"unknown field `{key}`, expected one of {expected}",
                        path,
                        expected,
                        str(key),
                    )

        kwargs: dict[str, Any] = {}
        for field in self.fields:
            item = array.get(field.name)
            if item is not None:
                kwargs[field.name] = field.shape.build(
                    item, (*path, field.name), config
                )
            elif field.has_default:
                continue
            elif field.nullable:
                kwargs[field.name] = None
            else:
                raise DeserializeError(
                    f"missing field `{field.name}`", path, field.name, "nothing"
                )

        try:
            return self.construct(**kwargs)
        except DeserializeError:
            raise
        except (TypeError, ValueError) as e:
            raise DeserializeError(str(e), path) from e


def _matches_payload(value: Value, option: Any) -> bool:
    """Compares a scalar Value with a native option of the same variant."""
    if option is None:
        return value.is_null()
    if isinstance(option, bool):
        return value.is_bool() and value.as_bool() is option
    if isinstance(option, int):
        return value.is_int() and value.as_int() == option
    if isinstance(option, float):
        return value.is_float() and value.as_float() == option
    if isinstance(option, str):
        return value.is_string() and value.as_str() == option
    return False


@dataclass(frozen=True)
class EnumShape(Shape):
    """Enum targets, matched by member name first and member value second."""

    target: type[enum.Enum]

    def describe(self) -> str:
        names = ", ".join(member.name for member in self.target)
        return f"one of {names}"

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> enum.Enum:
        if value.is_string() and value.as_str() in self.target.__members__:
            return self.target[value.as_str()]
        for member in self.target:
            if _matches_payload(value, member.value):
                return member
        found = value.type_name if value.is_array() else repr(value.to_python())
        raise DeserializeError(
            f"expected {self.describe()}, found {found}",
            path,
            self.describe(),
            found,
        )


@dataclass(frozen=True)
class LiteralShape(Shape):
    options: tuple[Any, ...]

    def describe(self) -> str:
        return "one of " + ", ".join(repr(option) for option in self.options)

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        for option in self.options:
            if _matches_payload(value, option):
                return option
        raise DeserializeError(
            f"expected {self.describe()}, found {value.type_name}",
            path,
            self.describe(),
            value.type_name,
        )


@dataclass(frozen=True)
class UnionShape(Shape):
    """Tries each option in order and keeps the first that builds."""

    options: tuple[Shape, ...]

    def describe(self) -> str:
        return " or ".join(option.describe() for option in self.options)

    def build(self, value: Value, path: Path, config: DeserializeConfig) -> Any:
        errors: list[DeserializeError] = []
        for option in self.options:
            try:
                return option.build(value, path, config)
            except DeserializeError as e:
                errors.append(e)
        raise self._failure(errors, self.mismatch(value, path))

    def build_key(
        self, key: int | str, path: Path, config: DeserializeConfig
    ) -> Any:
        errors: list[DeserializeError] = []
        for option in self.options:
            try:
                return option.build_key(key, path, config)
            except DeserializeError as e:
                errors.append(e)
        found = "integer" if isinstance(key, int) else "string"
        raise self._failure(
            errors, DeserializeError.mismatch(self.describe(), found, path)
        )

    @staticmethod
    def _failure(
        errors: list[DeserializeError], fallback: DeserializeError
    ) -> DeserializeError:
        # An option that got past the top level names the real location
        deepest = max(errors, key=lambda e: len(e.path), default=None)
        if deepest is not None and len(deepest.path) > len(fallback.path):
            return deepest
        return fallback


_SEQUENCE_ORIGINS: Final = {
    list: list,
    collections.abc.Sequence: list,
    collections.abc.MutableSequence: list,
    collections.abc.Collection: list,
    collections.abc.Iterable: list,
    set: set,
    collections.abc.Set: frozenset,
    collections.abc.MutableSet: set,
    frozenset: frozenset,
}
_MAPPING_ORIGINS: Final = {
    dict: dict,
    collections.abc.Mapping: dict,
    collections.abc.MutableMapping: dict,
}
_QUALIFIERS: Final = tuple(
    getattr(typing, name)
    for name in ("Required", "NotRequired", "ReadOnly")
    if hasattr(typing, name)
)


class _ShapeResolver:
    """Turns type hints into shapes, tying recursive records together."""

    def __init__(self) -> None:
        self._in_progress: dict[Any, StructShape] = {}

    def resolve(self, tp: Any) -> Shape:  # noqa: PLR0911, PLR0912
        if isinstance(tp, Shape):
            return tp
        if tp is Any or tp is object:
            return AnyShape()
        if tp is None or tp is type(None):
            return NoneShape()

        origin = typing.get_origin(tp)
        args = typing.get_args(tp)

        if origin is Annotated:
            return self._resolve_annotated(args[0], args[1:])
        if origin in _QUALIFIERS:
            return self.resolve(args[0])
        if origin is Union or origin is types.UnionType:
            return self._resolve_union(args)
        if origin is Literal:
            return LiteralShape(tuple(args))
        if origin is tuple:
            return self._resolve_tuple(args)
        if origin in _SEQUENCE_ORIGINS:
            item = self.resolve(args[0]) if args else AnyShape()
            return SequenceShape(item, _SEQUENCE_ORIGINS[origin])
        if origin in _MAPPING_ORIGINS:
            if not args:
                return MappingShape(AnyShape(), AnyShape(), _MAPPING_ORIGINS[origin])
            return MappingShape(
                self.resolve(args[0]),
                self.resolve(args[1]),
                _MAPPING_ORIGINS[origin],
            )

        if tp is bool:
            return BoolShape()
        if tp is int:
            return IntShape()
        if tp is float:
            return FloatShape()
        if tp is str:
            return StrShape()
        if tp is tuple:
            return SequenceShape(AnyShape(), tuple)
        if tp in _SEQUENCE_ORIGINS:
            return SequenceShape(AnyShape(), _SEQUENCE_ORIGINS[tp])
        if tp in _MAPPING_ORIGINS:
            return MappingShape(AnyShape(), AnyShape(), _MAPPING_ORIGINS[tp])

        if isinstance(tp, type):
            if issubclass(tp, Value):
                return ValueShape(tp)
            if issubclass(tp, enum.Enum):
                return EnumShape(tp)
            if dataclasses.is_dataclass(tp):
                return self._resolve_record(tp, self._dataclass_fields)
            if issubclass(tp, tuple) and hasattr(tp, "_fields"):
                return self._resolve_record(tp, self._namedtuple_fields)
            if typing.is_typeddict(tp):
                return self._resolve_record(tp, self._typeddict_fields)

        raise TypeError(f"Unsupported target type: {tp!r}")

    def _resolve_annotated(self, base: Any, metadata: tuple[Any, ...]) -> Shape:
        for meta in reversed(metadata):
            if isinstance(meta, Shape):
                return meta
            if isinstance(meta, IntRange):
                if base is not int:
                    raise TypeError("IntRange only applies to int targets")
                return IntShape(meta.lo, meta.hi, meta.name)
        return self.resolve(base)

    def _resolve_union(self, args: tuple[Any, ...]) -> Shape:
        present = [arg for arg in args if arg is not type(None)]
        if len(present) == 1:
            inner = self.resolve(present[0])
        else:
            inner = UnionShape(tuple(self.resolve(arg) for arg in present))
        if len(present) < len(args):
            return OptionalShape(inner)
        return inner

    def _resolve_tuple(self, args: tuple[Any, ...]) -> Shape:
        if len(args) == 2 and args[1] is Ellipsis:
            return SequenceShape(self.resolve(args[0]), tuple)
        return TupleShape(tuple(self.resolve(arg) for arg in args))

    def _resolve_record(
        self, tp: type, field_source: Callable[[type], Iterable[tuple[str, Any, bool]]]
    ) -> Shape:
        if tp in self._in_progress:
            return self._in_progress[tp]

        shape = StructShape(tp)
        self._in_progress[tp] = shape
        shape.fields = tuple(
            FieldSpec(name, self.resolve(hint), has_default)
            for name, hint, has_default in field_source(tp)
        )
        return shape

    @staticmethod
    def _hints(tp: type) -> dict[str, Any]:
        try:
            return typing.get_type_hints(tp, include_extras=True)
        except NameError as e:
            raise TypeError(
                f"Cannot resolve type hints of {tp.__name__}: {e}"
            ) from e

    def _dataclass_fields(self, tp: type) -> Iterable[tuple[str, Any, bool]]:
        hints = self._hints(tp)
        for field in dataclasses.fields(tp):
            if not field.init:
                continue
            has_default = (
                field.default is not dataclasses.MISSING
                or field.default_factory is not dataclasses.MISSING
            )
            yield field.name, hints.get(field.name, Any), has_default

    def _namedtuple_fields(self, tp: type) -> Iterable[tuple[str, Any, bool]]:
        hints = self._hints(tp)
        defaults = getattr(tp, "_field_defaults", {})
        for name in tp._fields:  # type: ignore[attr-defined]
            yield name, hints.get(name, Any), name in defaults

    def _typeddict_fields(self, tp: type) -> Iterable[tuple[str, Any, bool]]:
        hints = self._hints(tp)
        required = getattr(tp, "__required_keys__", frozenset(hints))
        for name, hint in hints.items():
            yield name, hint, name not in required


@functools.lru_cache(maxsize=None)
def _cached_shape(tp: Any) -> Shape:
    shape = _ShapeResolver().resolve(tp)
    logger.debug("Resolved shape for %r: %r", tp, shape)
    return shape


def shape_for(tp: Any) -> Shape:
    """
    Returns the shape describing how to build tp from a Value.

    Supported targets are the scalar types, ``None``, ``typing.Any``,
    ``Value`` and its variants, ``Optional``/unions, ``Literal``, enums,
    list/tuple/set/frozenset and dict (plus their abstract counterparts),
    dataclasses, NamedTuples, TypedDicts and ``Annotated[int, IntRange(..)]``.
    """
    if isinstance(tp, Shape):
        return tp
    try:
        hash(tp)
    except TypeError:
        return _ShapeResolver().resolve(tp)
    return _cached_shape(tp)
