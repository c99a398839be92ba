"""Type coercion for trellis type descriptors.

`TypeConverter.coerce` walks a descriptor and the candidate value together,
producing the typed value or raising `ValidationError` with every violation it
found. Objects and arrays are checked field by field so callers get complete
diagnostics instead of the first failure only.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from trellis.errors import ValidationError, Violation

from .descriptors import (
    MISSING,
    Array,
    Constrained,
    Default,
    Hash,
    Map,
    Optional,
    Primitive,
    StructType,
    TypeDescriptor,
    Union,
    accepts_absence,
    as_descriptor,
    is_nil,
)

if TYPE_CHECKING:
    from .struct import Struct

Path = tuple[str | int, ...]


class TypeConverter:
    """Utility class for coercing values to type descriptors."""

    @staticmethod
    def coerce(descriptor: TypeDescriptor | type[Struct], value: Any) -> Any:
        """Coerce a value to a descriptor.

        Args:
            descriptor: The type descriptor (or Struct class)
            value: The candidate value; `MISSING` when nothing was supplied

        Returns:
            The coerced value

        Raises:
            ValidationError: If the value doesn't fit the descriptor
        """
        return TypeConverter._convert(as_descriptor(descriptor), value, ())

    @staticmethod
    def default_for(descriptor: TypeDescriptor) -> Any:
        """The value an absent ``descriptor`` takes, or `MISSING` when it has no default."""
        return _default_for(descriptor)

    @staticmethod
    def coerce_struct_values(struct: type[Struct], values: Mapping[str, Any]) -> dict[str, Any]:
        """Coerce keyword values for a struct's fields, filling absent optionals with None."""
        violations: list[Violation] = []
        result = TypeConverter._convert_fields(struct.fields(), values, (), violations, True)
        if violations:
            raise ValidationError(violations)
        return result

    @staticmethod
    def _convert(descriptor: TypeDescriptor, value: Any, path: Path) -> Any:
        if isinstance(descriptor, Default):
            if value is MISSING:
                return copy.deepcopy(descriptor.value)
            return TypeConverter._convert(descriptor.inner, value, path)

        if isinstance(descriptor, Optional):
            if value is None:
                return None
            if value is MISSING:
                default = _default_for(descriptor.inner)
                return None if default is MISSING else default
            return TypeConverter._convert(descriptor.inner, value, path)

        if value is MISSING:
            raise ValidationError([Violation(path, "is missing")])

        if isinstance(descriptor, Primitive):
            try:
                return descriptor.converter(value)
            except (TypeError, ValueError) as e:
                raise ValidationError([Violation(path, _describe(descriptor, value, e))]) from e

        if isinstance(descriptor, Constrained):
            result = TypeConverter._convert(descriptor.inner, value, path)
            try:
                satisfied = descriptor.predicate(result)
            except (TypeError, ValueError):
                satisfied = False
            if not satisfied:
                message = descriptor.description or "failed constraint"
                raise ValidationError([Violation(path, message)])
            return result

        if isinstance(descriptor, Union):
            return TypeConverter._convert_union(descriptor, value, path)

        if isinstance(descriptor, StructType):
            struct = descriptor.struct
            if isinstance(value, struct):
                return value
            if not isinstance(value, Mapping):
                raise ValidationError(
                    [Violation(path, f"expected object, got {type(value).__name__}")]
                )
            violations: list[Violation] = []
            fields = TypeConverter._convert_fields(struct.fields(), value, path, violations, True)
            if violations:
                raise ValidationError(violations)
            return struct._from_validated(fields)

        if isinstance(descriptor, Hash):
            if not isinstance(value, Mapping):
                raise ValidationError(
                    [Violation(path, f"expected object, got {type(value).__name__}")]
                )
            violations = []
            result = TypeConverter._convert_fields(descriptor.fields, value, path, violations, False)
            if violations:
                raise ValidationError(violations)
            return result

        if isinstance(descriptor, Array):
            if not isinstance(value, (list, tuple)):
                raise ValidationError(
                    [Violation(path, f"expected array, got {type(value).__name__}")]
                )
            violations = []
            items = []
            for index, item in enumerate(value):
                try:
                    items.append(TypeConverter._convert(descriptor.element, item, (*path, index)))
                except ValidationError as e:
                    violations.extend(e.violations)
            if violations:
                raise ValidationError(violations)
            return items

        if isinstance(descriptor, Map):
            if not isinstance(value, Mapping):
                raise ValidationError(
                    [Violation(path, f"expected object, got {type(value).__name__}")]
                )
            violations = []
            entries = {}
            for key, item in value.items():
                try:
                    converted_key = TypeConverter._convert(descriptor.key, key, (*path, str(key)))
                    entries[converted_key] = TypeConverter._convert(
                        descriptor.value, item, (*path, str(key))
                    )
                except ValidationError as e:
                    violations.extend(e.violations)
            if violations:
                raise ValidationError(violations)
            return entries

        raise TypeError(f"Unrecognized type descriptor: {descriptor!r}")

    @staticmethod
    def _convert_union(descriptor: Union, value: Any, path: Path) -> Any:
        if value is None and (is_nil(descriptor.left) or is_nil(descriptor.right)):
            return None

        failures: list[Violation] = []
        for branch in (descriptor.left, descriptor.right):
            if is_nil(branch):
                continue
            try:
                return TypeConverter._convert(branch, value, path)
            except ValidationError as e:
                failures.extend(e.violations)

        messages = "; ".join(v.message for v in failures)
        raise ValidationError(
            [Violation(path, f"does not match any of the allowed types ({messages})")]
        )

    @staticmethod
    def _convert_fields(
        fields: Mapping[str, TypeDescriptor],
        value: Mapping[str, Any],
        path: Path,
        violations: list[Violation],
        fill_absent: bool,
    ) -> dict[str, Any]:
        """Convert every declared field, collecting violations instead of stopping.

        Keys not declared in ``fields`` are ignored. Absent optional fields are
        set to None when ``fill_absent`` is true and left out otherwise.
        """
        result: dict[str, Any] = {}
        for name, field_descriptor in fields.items():
            raw = value.get(name, MISSING)
            if raw is MISSING and accepts_absence(field_descriptor):
                default = _default_for(field_descriptor)
                if default is not MISSING:
                    result[name] = default
                elif fill_absent:
                    result[name] = None
                continue
            try:
                result[name] = TypeConverter._convert(field_descriptor, raw, (*path, name))
            except ValidationError as e:
                violations.extend(e.violations)
        return result


def _default_for(descriptor: TypeDescriptor) -> Any:
    if isinstance(descriptor, Default):
        return copy.deepcopy(descriptor.value)
    if isinstance(descriptor, (Constrained, Optional)):
        return _default_for(descriptor.inner)
    return MISSING


def _describe(descriptor: Primitive, value: Any, error: Exception) -> str:
    message = str(error)
    if message.startswith("expected"):
        return message
    return f"expected {descriptor.name.replace('_', ' ')}, got {value!r}"
