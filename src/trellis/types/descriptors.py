"""Structural type descriptors.

A type descriptor describes the shape of a value. The same descriptor drives
both directions of the toolkit: `trellis.types.converters.TypeConverter`
coerces untyped wire input into it, and `trellis.schema.compiler` compiles it
into an OpenAPI schema fragment.

The family is closed. Every consumer dispatches over exactly these classes:

- `Primitive`: a terminal type, resolved through the type registry
- `Optional`: permits ``None`` or absence
- `Default`: supplies a value when absent
- `Constrained`: adds a runtime predicate
- `Union`: exactly two alternatives
- `StructType`: a named `Struct` class
- `Array`: a homogeneous list
- `Hash`: an anonymous object with a fixed set of fields
- `Map`: a homogeneous mapping

Descriptors are frozen and hashed by identity, so a primitive's identity is
its registry key.

Example:
    >>> from trellis import types as T
    >>> T.CoercibleInteger.optional()
    Optional(inner=Primitive('coercible_integer'))
    >>> T.Array(T.String | T.Integer)
    Array(element=Union(left=Primitive('string'), right=Primitive('integer')))
"""

from __future__ import annotations

import datetime as dt
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .struct import Struct


class _Missing:
    """Marker for "no value supplied", distinct from ``None``."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISSING"

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict[int, Any]) -> _Missing:
        return self


MISSING: Any = _Missing()


class TypeDescriptor:
    """Base class of the type descriptor family.

    Concrete descriptors are frozen dataclasses compared by identity.
    """

    def optional(self) -> Optional:
        return Optional(self)

    def default(self, value: Any) -> Default:
        return Default(self, value)

    def constrained(
        self, predicate: Callable[[Any], Any], description: str | None = None
    ) -> Constrained:
        return Constrained(self, predicate, description)

    def __or__(self, other: Any) -> Union:
        return Union(self, as_descriptor(other))

    def __ror__(self, other: Any) -> Union:
        return Union(as_descriptor(other), self)


@dataclass(frozen=True, eq=False)
class Primitive(TypeDescriptor):
    """A terminal type.

    ``converter`` turns a candidate value into the primitive's Python value and
    raises `TypeError` or `ValueError` when it can't.
    """

    name: str
    converter: Callable[[Any], Any] = field(repr=False)

    def __repr__(self) -> str:
        return f"Primitive({self.name!r})"


@dataclass(frozen=True, eq=False)
class Optional(TypeDescriptor):
    inner: TypeDescriptor

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", as_descriptor(self.inner))


@dataclass(frozen=True, eq=False)
class Default(TypeDescriptor):
    inner: TypeDescriptor
    value: Any

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", as_descriptor(self.inner))


@dataclass(frozen=True, eq=False)
class Constrained(TypeDescriptor):
    """Wraps a descriptor with a predicate over the coerced value.

    The predicate is opaque: schema compilation documents only the inner
    descriptor.
    """

    inner: TypeDescriptor
    predicate: Callable[[Any], Any] = field(repr=False)
    description: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", as_descriptor(self.inner))


@dataclass(frozen=True, eq=False)
class Union(TypeDescriptor):
    left: TypeDescriptor
    right: TypeDescriptor

    def __post_init__(self) -> None:
        object.__setattr__(self, "left", as_descriptor(self.left))
        object.__setattr__(self, "right", as_descriptor(self.right))


@dataclass(frozen=True, eq=False)
class StructType(TypeDescriptor):
    """Reference to a `Struct` class.

    ``target`` is either the class or a zero-argument callable returning it,
    which lets a struct refer to itself or to a struct declared later.
    """

    target: type[Struct] | Callable[[], type[Struct]]

    @property
    def struct(self) -> type[Struct]:
        from .struct import Struct

        target = self.target
        if isinstance(target, type) and issubclass(target, Struct):
            return target
        resolved = target()
        if not (isinstance(resolved, type) and issubclass(resolved, Struct)):
            raise TypeError(f"Struct reference resolved to {resolved!r}, not a Struct class")
        return resolved

    def __repr__(self) -> str:
        target = self.target
        name = target.__name__ if isinstance(target, type) else "<lazy>"
        return f"StructType({name})"


@dataclass(frozen=True, eq=False)
class Array(TypeDescriptor):
    element: TypeDescriptor

    def __post_init__(self) -> None:
        object.__setattr__(self, "element", as_descriptor(self.element))


@dataclass(frozen=True, eq=False)
class Hash(TypeDescriptor):
    """An anonymous object with a fixed, ordered set of fields."""

    fields: Mapping[str, TypeDescriptor]

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "fields", {name: as_descriptor(d) for name, d in self.fields.items()}
        )


@dataclass(frozen=True, eq=False)
class Map(TypeDescriptor):
    """A homogeneous mapping. Keys are always compiled as strings."""

    key: TypeDescriptor
    value: TypeDescriptor

    def __post_init__(self) -> None:
        object.__setattr__(self, "key", as_descriptor(self.key))
        object.__setattr__(self, "value", as_descriptor(self.value))


def Instance(target: type[Struct] | Callable[[], type[Struct]]) -> StructType:
    """Reference a struct class, or a callable returning one for lazy references."""
    return StructType(target)


def as_descriptor(value: Any) -> TypeDescriptor:
    """Normalize a descriptor-like value into a `TypeDescriptor`.

    Struct classes become `StructType` references.

    Raises:
        TypeError: If the value can't describe a type
    """
    if isinstance(value, TypeDescriptor):
        return value

    from .struct import Struct

    if isinstance(value, type) and issubclass(value, Struct):
        return StructType(value)
    raise TypeError(f"Expected a type descriptor or Struct class, got {value!r}")


def unwrap(descriptor: TypeDescriptor) -> TypeDescriptor:
    """Strip Optional, Default and Constrained wrappers and nil unions."""
    while True:
        if isinstance(descriptor, (Optional, Default, Constrained)):
            descriptor = descriptor.inner
        elif isinstance(descriptor, Union) and is_nil(descriptor.left):
            descriptor = descriptor.right
        elif isinstance(descriptor, Union) and is_nil(descriptor.right):
            descriptor = descriptor.left
        else:
            return descriptor


def accepts_absence(descriptor: TypeDescriptor) -> bool:
    """Whether a field of this type may be left out of an object."""
    if isinstance(descriptor, (Optional, Default)):
        return True
    if isinstance(descriptor, Constrained):
        return accepts_absence(descriptor.inner)
    if isinstance(descriptor, Union):
        return (
            is_nil(descriptor.left)
            or is_nil(descriptor.right)
            or accepts_absence(descriptor.left)
            or accepts_absence(descriptor.right)
        )
    return False


def is_nil(descriptor: TypeDescriptor) -> bool:
    return descriptor is Nil


# Converters


def _nil(value: Any) -> None:
    if value is not None:
        raise TypeError("expected null")
    return None


def _strict(*types: type, name: str) -> Callable[[Any], Any]:
    def convert(value: Any) -> Any:
        if isinstance(value, bool) and bool not in types:
            raise TypeError(f"expected {name}, got boolean")
        if not isinstance(value, types):
            raise TypeError(f"expected {name}, got {type(value).__name__}")
        return value

    return convert


def _coercible_string(value: Any) -> str:
    if isinstance(value, bool) or not isinstance(value, (str, int, float)):
        raise TypeError(f"expected string, got {type(value).__name__}")
    return str(value)


def _coercible_integer(value: Any) -> int:
    if isinstance(value, bool):
        raise TypeError("expected integer, got boolean")
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected integer, got {value}")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected integer, got {type(value).__name__}")


def _coercible_number(value: Any) -> float:
    if isinstance(value, bool):
        raise TypeError("expected number, got boolean")
    if isinstance(value, (int, float)):
        return float(value)
    if isinstance(value, str):
        result = float(value.strip())
        if math.isnan(result) or math.isinf(result):
            raise ValueError(f"expected a finite number, got {value!r}")
        return result
    raise TypeError(f"expected number, got {type(value).__name__}")


_TRUE_STRINGS = frozenset({"true", "t", "1", "yes", "y", "on"})
_FALSE_STRINGS = frozenset({"false", "f", "0", "no", "n", "off"})


def _coercible_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
        raise ValueError(f"expected boolean, got {value!r}")
    raise TypeError(f"expected boolean, got {type(value).__name__}")


def _date(value: Any) -> dt.date:
    if isinstance(value, dt.datetime):
        raise TypeError("expected date, got datetime")
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        return dt.date.fromisoformat(value.strip())
    raise TypeError(f"expected date, got {type(value).__name__}")


def _datetime(value: Any) -> dt.datetime:
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, str):
        return dt.datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    raise TypeError(f"expected date-time, got {type(value).__name__}")


# Built-in primitives

Nil = Primitive("nil", _nil)
Anything = Primitive("any", lambda value: value)

String = Primitive("string", _strict(str, name="string"))
Integer = Primitive("integer", _strict(int, name="integer"))
Number = Primitive("number", _strict(int, float, name="number"))
Boolean = Primitive("boolean", _strict(bool, name="boolean"))

CoercibleString = Primitive("coercible_string", _coercible_string)
CoercibleInteger = Primitive("coercible_integer", _coercible_integer)
CoercibleNumber = Primitive("coercible_number", _coercible_number)
CoercibleBoolean = Primitive("coercible_boolean", _coercible_boolean)

Date = Primitive("date", _date)
DateTime = Primitive("date_time", _datetime)


# Constraint helpers


def one_of(descriptor: TypeDescriptor, *values: Any) -> Constrained:
    """Restrict a descriptor to a fixed set of values."""
    allowed = tuple(values)
    return descriptor.constrained(
        lambda value: value in allowed, f"must be one of: {', '.join(map(str, allowed))}"
    )


def in_range(
    descriptor: TypeDescriptor, minimum: float | None = None, maximum: float | None = None
) -> Constrained:
    """Restrict a numeric descriptor to an inclusive range."""

    def predicate(value: Any) -> bool:
        if minimum is not None and value < minimum:
            return False
        return maximum is None or value <= maximum

    bounds = []
    if minimum is not None:
        bounds.append(f">= {minimum}")
    if maximum is not None:
        bounds.append(f"<= {maximum}")
    return descriptor.constrained(predicate, f"must be {' and '.join(bounds)}")


def matches(descriptor: TypeDescriptor, pattern: str) -> Constrained:
    """Restrict a string descriptor to values fully matching a regular expression."""
    compiled = re.compile(pattern)
    return descriptor.constrained(
        lambda value: compiled.fullmatch(value) is not None, f"must match {pattern}"
    )


__all__ = [
    "MISSING",
    "Anything",
    "Array",
    "Boolean",
    "CoercibleBoolean",
    "CoercibleInteger",
    "CoercibleNumber",
    "CoercibleString",
    "Constrained",
    "Date",
    "DateTime",
    "Default",
    "Hash",
    "Instance",
    "Integer",
    "Map",
    "Nil",
    "Number",
    "Optional",
    "Primitive",
    "String",
    "StructType",
    "TypeDescriptor",
    "Union",
    "accepts_absence",
    "as_descriptor",
    "in_range",
    "is_nil",
    "matches",
    "one_of",
    "unwrap",
]
