"""OpenAPI 3 document generation.

Renders an `ApiDescriptor` as an OpenAPI 3.0 document. Every type descriptor
mentioned by a route (parameters, API-key parameters, request bodies and
responses) and every root schema is compiled in one `CompilationSession`, so
structs land in ``components.schemas`` exactly once.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import yaml

from trellis.descriptor.core import ApiDescriptor, Info
from trellis.descriptor.parameters import ParameterBase
from trellis.descriptor.request_body import RequestBody
from trellis.descriptor.route import Response, Route
from trellis.descriptor.security import ApiKeySecurity, HttpSecurity, SecurityBase
from trellis.errors import SetupError
from trellis.telemetry import traced_operation
from trellis.types.registry import TypeRegistry

from .compiler import CompilationSession, SchemaCompiler

logger = logging.getLogger(__name__)

DEFAULT_OPENAPI_VERSION = "3.0.3"


class OpenApi3Generator:
    """Generates OpenAPI 3 documents from API descriptors.

    Example:
        >>> generator = OpenApi3Generator()
        >>> document = generator.generate(api)
        >>> print(generator.dumps(document, format="yaml"))
    """

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        openapi_version: str = DEFAULT_OPENAPI_VERSION,
    ):
        self.compiler = SchemaCompiler(registry)
        self.openapi_version = openapi_version

    def generate(self, api: ApiDescriptor) -> dict[str, Any]:
        """Generate the OpenAPI document for an API.

        Raises:
            UnrecognizedTypeError: If a literal type isn't registered
            DuplicateSchemaNameError: If two structs share a canonical name
            SetupError: If two security schemes share a name but differ
        """
        with traced_operation(
            "trellis.openapi.generate",
            {"trellis.openapi.title": api.info.title, "trellis.openapi.routes": len(api.routes)},
        ):
            session = self.compiler.session()
            security_schemes: dict[str, dict[str, Any]] = {}
            paths: dict[str, dict[str, Any]] = {}

            for route in api.routes:
                for security in route.security:
                    self._add_security_scheme(security_schemes, security)
                paths.setdefault(route.path, {})[route.http_method] = self._operation(
                    session, route
                )

            for root in api.root_schemas:
                session.schema_for(root)

            components: dict[str, Any] = {"schemas": session.document().schemas}
            if security_schemes:
                components["securitySchemes"] = dict(sorted(security_schemes.items()))

            logger.debug(
                f"Generated OpenAPI document for '{api.info.title}' with "
                f"{len(paths)} path(s) and {len(components['schemas'])} schema(s)"
            )
            return {
                "openapi": self.openapi_version,
                "info": self._info(api.info),
                "paths": paths,
                "components": components,
            }

    @staticmethod
    def dumps(document: dict[str, Any], format: str = "json", indent: int = 2) -> str:
        """Serialize a generated document as JSON or YAML."""
        if format == "json":
            return json.dumps(document, indent=indent)
        if format == "yaml":
            return yaml.safe_dump(document, default_flow_style=False, sort_keys=False)
        raise ValueError(f"Unsupported output format: {format!r}")

    def _info(self, info: Info) -> dict[str, Any]:
        return info.model_dump(exclude_none=True)

    def _operation(self, session: CompilationSession, route: Route) -> dict[str, Any]:
        operation: dict[str, Any] = {"operationId": route.id}
        if route.summary:
            operation["summary"] = route.summary
        if route.description:
            operation["description"] = route.description
        if route.tags:
            operation["tags"] = list(route.tags)
        if route.deprecated:
            operation["deprecated"] = True

        if route.parameters:
            operation["parameters"] = [self._parameter(session, p) for p in route.parameters]
        if route.request_body is not None:
            operation["requestBody"] = self._request_body(session, route.request_body)

        operation["responses"] = self._responses(session, route.responses)

        if route.security:
            operation["security"] = [{s.name: []} for s in route.security]
            # API-key parameters are documented by their scheme, but their
            # types still need compiling.
            for security in route.security:
                if isinstance(security, ApiKeySecurity):
                    session.schema_for(security.parameter.type)
        return operation

    def _parameter(self, session: CompilationSession, parameter: ParameterBase) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": parameter.friendly_name,
            "in": parameter.location,  # type: ignore[attr-defined]
            "required": parameter.required,  # type: ignore[attr-defined]
        }
        if parameter.description:
            result["description"] = parameter.description
        if parameter.deprecated:
            result["deprecated"] = True
        result["style"] = parameter.style  # type: ignore[attr-defined]
        if getattr(parameter, "allow_empty_value", False):
            result["allowEmptyValue"] = True
        if getattr(parameter, "allow_reserved", False):
            result["allowReserved"] = True
        result["schema"] = session.schema_for(parameter.type)
        return result

    def _request_body(self, session: CompilationSession, body: RequestBody) -> dict[str, Any]:
        schema = session.schema_for(body.type)
        result: dict[str, Any] = {
            "required": body.required,
            "content": {media_type: {"schema": schema} for media_type in body.media_types},
        }
        if body.description:
            result["description"] = body.description
        return result

    def _responses(
        self, session: CompilationSession, responses: list[Response]
    ) -> dict[str, Any]:
        if not responses:
            return {"default": {"description": "Default response"}}

        result: dict[str, Any] = {}
        for response in responses:
            entry: dict[str, Any] = {"description": response.resolved_description}
            if response.type is not None:
                entry["content"] = {
                    response.media_type: {"schema": session.schema_for(response.type)}
                }
            result[str(response.status)] = entry
        return result

    def _add_security_scheme(
        self, schemes: dict[str, dict[str, Any]], security: SecurityBase
    ) -> None:
        scheme = self._security_scheme(security)
        existing = schemes.get(security.name)
        if existing is not None and existing != scheme:
            raise SetupError(
                f"Security scheme '{security.name}' is declared twice with different definitions."
            )
        schemes[security.name] = scheme

    def _security_scheme(self, security: SecurityBase) -> dict[str, Any]:
        if isinstance(security, ApiKeySecurity):
            scheme: dict[str, Any] = {
                "type": "apiKey",
                "name": security.parameter.friendly_name,
                "in": security.parameter.location,
            }
        elif isinstance(security, HttpSecurity):
            scheme = {"type": "http", "scheme": security.scheme.lower()}
            if security.bearer_format:
                scheme["bearerFormat"] = security.bearer_format
        else:
            raise SetupError(f"Unsupported security descriptor: {type(security).__name__}")

        if security.description:
            scheme["description"] = security.description
        return scheme


__all__ = ["DEFAULT_OPENAPI_VERSION", "OpenApi3Generator"]
