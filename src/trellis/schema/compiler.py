"""Compile type descriptors into OpenAPI schema fragments.

Literal types registered in the `TypeRegistry` are the terminals; every other
descriptor is built up from them:

- Optional, or a union with `Nil`, becomes the other branch plus ``nullable``
- any other union becomes ``anyOf`` over both branches
- constrained and default-valued descriptors compile to their inner type;
  predicates and defaults are not reflected in the schema
- arrays become ``{"type": "array", "items": ...}``
- hashes become inline object schemas, maps use ``additionalProperties``
- structs are registered once under their canonical name and referenced with
  ``{"oneOf": [{"$ref": ...}]}``, which leaves room for a ``nullable`` marker

Struct names are global to a document: two different struct classes that
share a canonical name are a `DuplicateSchemaNameError`.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from trellis.errors import DuplicateSchemaNameError, UnrecognizedTypeError
from trellis.telemetry import traced_operation
from trellis.types.descriptors import (
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
from trellis.types.registry import TypeRegistry, default_registry
from trellis.types.struct import Struct

logger = logging.getLogger(__name__)

SCHEMA_REF_PREFIX = "#/components/schemas/"


@dataclass(frozen=True)
class SchemaDocument:
    """Compiled object schemas keyed by canonical name.

    Attributes:
        schemas: Canonical name to object schema, sorted by name
        origins: Canonical name to the Struct class it was compiled from
    """

    schemas: dict[str, dict[str, Any]] = field(default_factory=dict)
    origins: dict[str, type[Struct]] = field(default_factory=dict)

    def __getitem__(self, name: str) -> dict[str, Any]:
        return self.schemas[name]

    def __contains__(self, name: object) -> bool:
        return name in self.schemas

    def __len__(self) -> int:
        return len(self.schemas)

    def __iter__(self):  # type: ignore[no-untyped-def]
        return iter(self.schemas)

    def name_for(self, struct: type[Struct]) -> str | None:
        for name, origin in self.origins.items():
            if origin is struct:
                return name
        return None


class CompilationSession:
    """Accumulates struct schemas across several `schema_for` calls.

    A session is single-use and not shared between threads. The
    `SchemaDocument` is only produced by `document()`, so a failure part way
    through never leaks a partial document.
    """

    def __init__(self, registry: TypeRegistry):
        self._registry = registry
        self._schemas: dict[str, dict[str, Any]] = {}
        self._origins: dict[str, type[Struct]] = {}

    def schema_for(self, descriptor: TypeDescriptor | type[Struct]) -> dict[str, Any]:
        """Compile one descriptor, registering any structs it reaches."""
        return self._build(as_descriptor(descriptor))

    def document(self) -> SchemaDocument:
        names = sorted(self._schemas)
        return SchemaDocument(
            schemas={name: self._schemas[name] for name in names},
            origins={name: self._origins[name] for name in names},
        )

    def _build(self, descriptor: TypeDescriptor) -> dict[str, Any]:
        if isinstance(descriptor, Primitive):
            fragment = self._registry.lookup(descriptor)
            if fragment is None:
                raise UnrecognizedTypeError(
                    f"Unrecognized literal type {descriptor!r}; register it with "
                    "TypeRegistry.register()."
                )
            return fragment

        if isinstance(descriptor, Optional):
            return self._nullable(descriptor.inner)

        if isinstance(descriptor, Union):
            if is_nil(descriptor.left):
                return self._nullable(descriptor.right)
            if is_nil(descriptor.right):
                return self._nullable(descriptor.left)
            return {"anyOf": [self._build(descriptor.left), self._build(descriptor.right)]}

        if isinstance(descriptor, (Constrained, Default)):
            return self._build(descriptor.inner)

        if isinstance(descriptor, StructType):
            name = self._register_struct(descriptor.struct)
            return {"oneOf": [{"$ref": f"{SCHEMA_REF_PREFIX}{name}"}]}

        if isinstance(descriptor, Array):
            return {"type": "array", "items": self._build(descriptor.element)}

        if isinstance(descriptor, Hash):
            return self._object_schema(descriptor.fields)

        if isinstance(descriptor, Map):
            return {"type": "object", "additionalProperties": self._build(descriptor.value)}

        raise UnrecognizedTypeError(f"Unrecognized type descriptor: {descriptor!r}")

    def _nullable(self, descriptor: TypeDescriptor) -> dict[str, Any]:
        return {**self._build(descriptor), "nullable": True}

    def _register_struct(self, struct: type[Struct]) -> str:
        name = struct.canonical_name()
        existing = self._origins.get(name)

        if existing is struct:
            return name
        if existing is not None:
            raise DuplicateSchemaNameError(name, existing, struct)

        # Registered before the fields compile so self references resolve.
        self._origins[name] = struct
        logger.debug(f"Compiling struct schema '{name}'")
        self._schemas[name] = self._object_schema(struct.fields())
        return name

    def _object_schema(self, fields: Mapping[str, TypeDescriptor]) -> dict[str, Any]:
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {name: self._build(d) for name, d in fields.items()},
        }
        required = [name for name, d in fields.items() if not accepts_absence(d)]
        if required:
            schema["required"] = required
        return schema


class SchemaCompiler:
    """Compiles sets of type descriptors into a `SchemaDocument`.

    Example:
        >>> compiler = SchemaCompiler()
        >>> document = compiler.compile([Pet, Owner])
        >>> document["Pet"]["properties"]["name"]
        {'type': 'string'}
    """

    def __init__(self, registry: TypeRegistry | None = None):
        """Initialize the compiler.

        Args:
            registry: Literal type registry; defaults to the built-ins. The
                registry is frozen, ending its assembly phase.
        """
        self.registry = registry if registry is not None else default_registry()
        self.registry.freeze()

    def session(self) -> CompilationSession:
        return CompilationSession(self.registry)

    def compile(self, roots: Iterable[TypeDescriptor | type[Struct]]) -> SchemaDocument:
        """Compile every root descriptor and return the struct catalog.

        Raises:
            UnrecognizedTypeError: If a literal type isn't registered
            DuplicateSchemaNameError: If two structs share a canonical name
        """
        roots = list(roots)
        with traced_operation("trellis.schema.compile", {"trellis.schema.roots": len(roots)}) as span:
            session = self.session()
            for root in roots:
                session.schema_for(root)
            document = session.document()
            span.set_attribute("trellis.schema.count", len(document))
            return document

    def schema_for(self, descriptor: TypeDescriptor | type[Struct]) -> dict[str, Any]:
        """Compile a single descriptor in a throwaway session."""
        return self.session().schema_for(descriptor)
