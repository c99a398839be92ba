"""Route and response descriptors.

A `Route` ties an HTTP method and path template to the parameters, body,
responses and security alternatives that describe it. Besides feeding the
OpenAPI generator, a route can validate a whole request in one go with
`Route.validate_request`.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Literal

from pydantic import Field, field_validator, model_validator

from trellis.config.models import TrellisConfigModel
from trellis.errors import BadRequestError, ClientError, SetupError, UnauthorizedError
from trellis.models import TrellisBaseModel
from trellis.types.converters import TypeConverter
from trellis.types.descriptors import MISSING, TypeDescriptor, as_descriptor

from .parameters import Parameter, PathParameter
from .request import RequestView, SecurityContext, Services
from .request_body import RequestBody
from .security import Security

logger = logging.getLogger(__name__)

HttpMethod = Literal["get", "put", "post", "delete", "options", "head", "patch", "trace"]

PATH_CAPTURE_RE = re.compile(r"\{([^{}]+)\}")


class Response(TrellisBaseModel):
    """One documented response of a route."""

    status: int | Literal["default"] = 200
    description: str | None = None
    type: TypeDescriptor | None = None
    media_type: str = "application/json"

    @field_validator("status")
    @classmethod
    def _check_status(cls, value: int | str) -> int | str:
        if isinstance(value, int) and not 100 <= value <= 599:
            raise ValueError(f"Invalid HTTP status code: {value}")
        return value

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> TypeDescriptor | None:
        if value is None:
            return None
        try:
            return as_descriptor(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @property
    def resolved_description(self) -> str:
        """The description, falling back to the status' reason phrase."""
        if self.description:
            return self.description
        if self.status == "default":
            return "Default response"
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return f"Status {self.status}"


@dataclass
class ValidatedRequest:
    """The outcome of `Route.validate_request`.

    Attributes:
        parameters: Parameter name to coerced value. Absent optional
            parameters are left out unless their type carries a default.
        body: The coerced body, or `MISSING`
        security: Name of the security alternative that accepted the request,
            or None when the route declares no security
    """

    parameters: dict[str, Any] = field(default_factory=dict)
    body: Any = MISSING
    security: str | None = None


class Route(TrellisBaseModel):
    """A single operation: an HTTP method on a path template.

    ``security`` lists alternatives; a request passes when any one of them
    accepts it. An empty list means the route is public.

    Example:
        >>> route = Route(
        ...     id="get_pet",
        ...     http_method="get",
        ...     path="/pets/{id}",
        ...     parameters=[PathParameter(name="id", type=T.CoercibleInteger)],
        ...     responses=[Response(status=200, type=Pet)],
        ... )
    """

    id: str = Field(min_length=1)
    http_method: HttpMethod
    path: str
    summary: str | None = None
    description: str | None = None
    deprecated: bool = False
    tags: list[str] = Field(default_factory=list)
    parameters: list[Parameter] = Field(default_factory=list)
    request_body: RequestBody | None = None
    responses: list[Response] = Field(default_factory=list)
    security: list[Security] = Field(default_factory=list)

    @field_validator("http_method", mode="before")
    @classmethod
    def _lowercase_method(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("path")
    @classmethod
    def _check_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"Route path must start with '/': {value!r}")
        return value

    @model_validator(mode="after")
    def _check_parameters(self) -> Route:
        seen: set[tuple[str, str]] = set()
        for parameter in self.parameters:
            key = (parameter.name, parameter.location)
            if key in seen:
                raise SetupError(
                    f"Route '{self.id}' declares {parameter.location} parameter "
                    f"'{parameter.name}' more than once."
                )
            seen.add(key)

        captures = set(self.path_captures)
        declared = {p.name for p in self.parameters if isinstance(p, PathParameter)}
        if captures != declared:
            undeclared = sorted(captures - declared)
            unused = sorted(declared - captures)
            raise SetupError(
                f"Route '{self.id}' path '{self.path}' doesn't match its path parameters "
                f"(undeclared captures: {undeclared}, parameters not in path: {unused})."
            )

        statuses = [r.status for r in self.responses]
        if len(statuses) != len(set(statuses)):
            raise SetupError(f"Route '{self.id}' documents the same response status twice.")
        return self

    @property
    def path_captures(self) -> list[str]:
        return PATH_CAPTURE_RE.findall(self.path)

    def type_roots(self) -> list[TypeDescriptor]:
        """Every type descriptor this route mentions."""
        roots = [p.type for p in self.parameters]
        for security in self.security:
            if security.kind == "apiKey":
                roots.append(security.parameter.type)
        if self.request_body is not None:
            roots.append(self.request_body.type)
        roots.extend(r.type for r in self.responses if r.type is not None)
        return roots

    def validate_request(
        self,
        request: RequestView,
        route_captures: Mapping[str, str] | None = None,
        services: Services | None = None,
        config: TrellisConfigModel | None = None,
    ) -> ValidatedRequest:
        """Run security, parameter and body validation for one request.

        Security runs first so unauthenticated clients learn nothing about the
        expected parameters. All parameter failures are reported together.

        Args:
            request: The inbound request
            route_captures: Path parameter name to captured string
            services: Application services handed to security predicates
            config: Runtime configuration; defaults apply when omitted

        Returns:
            The coerced parameters and body

        Raises:
            UnauthorizedError: If no security alternative accepts the request
            BadRequestError: If the query string has more fields than
                ``config.max_query_parameters``, or any parameter is missing or
                unparseable
            MissingBodyError: If a required body is absent
            InvalidBodyError: If the body doesn't fit its type
            InfrastructureError: If a security predicate's backing service fails
        """
        config = config or TrellisConfigModel()
        try:
            return self._validate_request(
                request, route_captures or {}, services or Services(), config
            )
        except ClientError as e:
            if config.log_input_converter_errors:
                details = "; ".join(str(v) for v in e.violations)
                logger.info(
                    f"Rejected request for route '{self.id}' ({e.status_code}): {e.message}"
                    + (f" [{details}]" if details else "")
                )
            raise

    def _validate_request(
        self,
        request: RequestView,
        route_captures: Mapping[str, str],
        services: Services,
        config: TrellisConfigModel,
    ) -> ValidatedRequest:
        result = ValidatedRequest()

        # Parse the query string once, at the configured limit, before any
        # parameter (security ones included) reads it.
        request.query_pairs(config.max_query_parameters)

        if self.security:
            context = SecurityContext(request=request, services=services)
            result.security = next(
                (s.name for s in self.security if s.validate(context)), None
            )
            if result.security is None:
                raise UnauthorizedError()

        failures: list[ClientError] = []
        for parameter in self.parameters:
            try:
                value = parameter.retrieve(request, route_captures)
            except ClientError as e:
                failures.append(e)
                continue
            if value is MISSING:
                value = TypeConverter.default_for(parameter.type)
            if value is not MISSING:
                result.parameters[parameter.name] = value

        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise BadRequestError(
                f"{len(failures)} parameters are invalid or missing.",
                [v for failure in failures for v in failure.violations],
            )

        if self.request_body is not None:
            result.body = self.request_body.validate(request.body)

        return result


__all__ = ["HttpMethod", "Response", "Route", "ValidatedRequest"]
