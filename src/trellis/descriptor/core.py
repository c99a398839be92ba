"""The API descriptor: metadata plus every route of an application."""

from __future__ import annotations

from typing import Any

from pydantic import Field, field_validator, model_validator

from trellis.errors import SetupError
from trellis.models import TrellisBaseModel
from trellis.types.descriptors import TypeDescriptor, as_descriptor

from .route import Route


class Contact(TrellisBaseModel):
    name: str | None = None
    url: str | None = None
    email: str | None = None


class License(TrellisBaseModel):
    name: str
    url: str | None = None


class Info(TrellisBaseModel):
    title: str
    version: str
    description: str | None = None
    contact: Contact | None = None
    license: License | None = None


class ApiDescriptor(TrellisBaseModel):
    """Everything needed to document an API.

    ``root_schemas`` lists types that should be documented even when no route
    mentions them.
    """

    info: Info
    routes: list[Route] = Field(default_factory=list)
    root_schemas: list[TypeDescriptor] = Field(default_factory=list)

    @field_validator("root_schemas", mode="before")
    @classmethod
    def _normalize_roots(cls, value: Any) -> list[TypeDescriptor]:
        try:
            return [as_descriptor(root) for root in value]
        except TypeError as e:
            raise ValueError(str(e)) from e

    @model_validator(mode="after")
    def _check_unique_routes(self) -> ApiDescriptor:
        seen: set[str] = set()
        operations: dict[tuple[str, str], str] = {}
        for route in self.routes:
            if route.id in seen:
                raise SetupError(f"Duplicate route id: '{route.id}'")
            seen.add(route.id)

            key = (route.path, route.http_method)
            if key in operations:
                raise SetupError(
                    f"Routes '{operations[key]}' and '{route.id}' both declare "
                    f"{route.http_method.upper()} {route.path}"
                )
            operations[key] = route.id
        return self

    def route(self, route_id: str) -> Route:
        for route in self.routes:
            if route.id == route_id:
                return route
        raise KeyError(route_id)

    def type_roots(self) -> list[TypeDescriptor]:
        """Every type the API documents, routes first."""
        roots: list[TypeDescriptor] = []
        for route in self.routes:
            roots.extend(route.type_roots())
        roots.extend(self.root_schemas)
        return roots


__all__ = ["ApiDescriptor", "Contact", "Info", "License"]
