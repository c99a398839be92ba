"""Registry of terminal types and their schema fragments."""

from __future__ import annotations

import copy
import logging
from collections.abc import Mapping
from typing import Any

from trellis.errors import SetupError

from . import descriptors as d

logger = logging.getLogger(__name__)

BUILTIN_FRAGMENTS: tuple[tuple[d.Primitive, dict[str, Any]], ...] = (
    (d.Anything, {}),
    (d.String, {"type": "string"}),
    (d.Integer, {"type": "integer"}),
    (d.Number, {"type": "number"}),
    (d.Boolean, {"type": "boolean"}),
    (d.CoercibleString, {"type": "string"}),
    (d.CoercibleInteger, {"type": "integer"}),
    (d.CoercibleNumber, {"type": "number"}),
    (d.CoercibleBoolean, {"type": "boolean"}),
    (d.Date, {"type": "string", "format": "date"}),
    (d.DateTime, {"type": "string", "format": "date-time"}),
)


class TypeRegistry:
    """Maps terminal type descriptors to their canonical schema fragments.

    Registration happens while an application is assembled. Once `freeze` has
    been called the registry rejects further changes.

    Example:
        >>> registry = default_registry()
        >>> Money = Primitive("money", Decimal)
        >>> registry.register(Money, {"type": "string", "format": "decimal"})
        >>> registry.lookup(Money)
        {'type': 'string', 'format': 'decimal'}
    """

    def __init__(self, entries: Mapping[d.Primitive, Mapping[str, Any]] | None = None):
        self._entries: dict[d.Primitive, dict[str, Any]] = {}
        self._frozen = False
        for leaf_type, fragment in (entries or {}).items():
            self.register(leaf_type, fragment)

    def register(self, leaf_type: d.Primitive, fragment: Mapping[str, Any]) -> None:
        """Associate a terminal type with its schema fragment.

        Raises:
            SetupError: If the key isn't a `Primitive` or the registry is frozen
        """
        if self._frozen:
            raise SetupError("Type registry is frozen; register types during assembly.")
        if not isinstance(leaf_type, d.Primitive):
            raise SetupError(f"`leaf_type` must be a Primitive type descriptor, got {leaf_type!r}.")
        if leaf_type in self._entries:
            logger.debug(f"Replacing schema fragment for {leaf_type!r}")
        self._entries[leaf_type] = copy.deepcopy(dict(fragment))

    def lookup(self, leaf_type: d.TypeDescriptor) -> dict[str, Any] | None:
        """Return a deep copy of the registered fragment, or None if not registered.

        Lookups are stable by value, not identity: repeated lookups of the
        same type return equal fragments that are never the same object.
        """
        fragment = self._entries.get(leaf_type)  # type: ignore[call-overload]
        return copy.deepcopy(fragment) if fragment is not None else None

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, leaf_type: object) -> bool:
        return leaf_type in self._entries

    def __len__(self) -> int:
        return len(self._entries)


def default_registry() -> TypeRegistry:
    """Create a registry seeded with the built-in primitives."""
    return TypeRegistry(dict(BUILTIN_FRAGMENTS))
