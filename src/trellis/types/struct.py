"""Named object types.

A `Struct` subclass declares its fields as class attributes holding type
descriptors. Field order is declaration order, with inherited fields first.

Example:
    >>> from trellis import types as T
    >>>
    >>> class Pet(T.Struct):
    ...     name = T.String
    ...     tag = T.String.optional()
    >>>
    >>> Pet(name="Rex").to_dict()
    {'name': 'Rex', 'tag': None}

The canonical schema name is the class name without its module. Two structs
with the same class name in different modules can't both be documented;
set ``schema_name`` on one of them::

    class Pet(T.Struct):
        schema_name = "LegacyPet"
        name = T.String
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, ClassVar

from .descriptors import TypeDescriptor, as_descriptor


class Struct:
    """Base class for named object types."""

    schema_name: ClassVar[str | None] = None
    __struct_fields__: ClassVar[dict[str, TypeDescriptor]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)

        fields: dict[str, TypeDescriptor] = {}
        for base in reversed(cls.__mro__[1:]):
            fields.update(base.__dict__.get("__struct_fields__", {}))

        for name, value in list(cls.__dict__.items()):
            if name.startswith("_"):
                continue
            if isinstance(value, TypeDescriptor) or (
                isinstance(value, type) and issubclass(value, Struct)
            ):
                fields[name] = as_descriptor(value)
                delattr(cls, name)

        cls.__struct_fields__ = fields

    def __init__(self, **values: Any):
        from .converters import TypeConverter

        validated = TypeConverter.coerce_struct_values(type(self), values)
        self.__dict__.update(validated)

    @classmethod
    def canonical_name(cls) -> str:
        """Name under which this struct is registered in a schema document."""
        override = cls.__dict__.get("schema_name")
        return override or cls.__name__

    @classmethod
    def fields(cls) -> dict[str, TypeDescriptor]:
        return dict(cls.__struct_fields__)

    @classmethod
    def coerce(cls, data: Any) -> Struct:
        """Coerce a mapping (or an instance) into this struct.

        Raises:
            ValidationError: With every failing field
        """
        from .converters import TypeConverter
        from .descriptors import StructType

        result: Struct = TypeConverter.coerce(StructType(cls), data)
        return result

    @classmethod
    def _from_validated(cls, values: Mapping[str, Any]) -> Struct:
        instance = cls.__new__(cls)
        instance.__dict__.update(values)
        return instance

    def to_dict(self) -> dict[str, Any]:
        return {name: _plain(getattr(self, name)) for name in self.__struct_fields__}

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self.to_dict() == other.to_dict()  # type: ignore[attr-defined]

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        values = ", ".join(f"{name}={getattr(self, name)!r}" for name in self.__struct_fields__)
        return f"{type(self).__name__}({values})"


def _plain(value: Any) -> Any:
    if isinstance(value, Struct):
        return value.to_dict()
    if isinstance(value, list):
        return [_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _plain(item) for key, item in value.items()}
    return value
