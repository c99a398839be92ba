"""Parameter descriptors.

Each parameter location has its own descriptor with its own retrieval
strategy; all of them share the retrieve/coerce contract in
`ParameterBase.retrieve`:

- absent and required: `MissingParameterError`
- absent and optional: `MISSING`, never ``None``
- present: coerced through the declared type; failure is an
  `UnparseableParameterError`

Header and cookie parameters are reported by their wire name
(``friendly_name``) rather than their logical ``name``.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Annotated, Any, Literal

from pydantic import Field, PrivateAttr, field_validator

from trellis.errors import (
    MissingParameterError,
    UnparseableParameterError,
    ValidationError,
)
from trellis.models import TrellisBaseModel
from trellis.types.converters import TypeConverter
from trellis.types.descriptors import MISSING, Array, TypeDescriptor, as_descriptor, unwrap

from .request import RequestView, header_environ_key

logger = logging.getLogger(__name__)

# High enough for legitimate multi-valued query strings while still bounding
# the cost of parsing a hostile one.
DEFAULT_MAX_QUERY_PARAMETERS = 1000


class ParameterBase(TrellisBaseModel):
    """Fields and behaviour shared by every parameter location."""

    name: str
    type: TypeDescriptor
    description: str | None = None
    deprecated: bool = False

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> TypeDescriptor:
        try:
            return as_descriptor(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @property
    def friendly_name(self) -> str:
        """The name the client uses on the wire."""
        return self.name

    def retrieve(
        self, request: RequestView, route_captures: Mapping[str, str] | None = None
    ) -> Any:
        """Extract and coerce this parameter's value.

        Args:
            request: The inbound request
            route_captures: Path parameter name to captured string

        Returns:
            The coerced value, or `MISSING` when an optional parameter is absent

        Raises:
            MissingParameterError: If a required parameter is absent
            UnparseableParameterError: If the value doesn't fit the declared type
        """
        raw = self._raw_value(request, route_captures or {})

        if raw is MISSING or raw is None:
            if self.required:  # type: ignore[attr-defined]
                raise MissingParameterError(self.friendly_name)
            return MISSING

        try:
            return TypeConverter.coerce(self.type, raw)
        except ValidationError as e:
            # Violation messages echo the raw value, which may be a credential.
            locations = ", ".join(v.location or self.friendly_name for v in e.violations)
            logger.debug(f"Parameter '{self.friendly_name}' failed coercion at {locations}")
            raise UnparseableParameterError(self.friendly_name, e.violations) from e

    def _raw_value(self, request: RequestView, route_captures: Mapping[str, str]) -> Any:
        raise NotImplementedError(f"{type(self).__name__}._raw_value must be implemented.")


class PathParameter(ParameterBase):
    """A capture from the route template. Always required."""

    location: Literal["path"] = "path"
    # TODO: support the 'matrix' and 'label' styles.
    style: Literal["simple"] = "simple"
    required: Literal[True] = True

    def _raw_value(self, request: RequestView, route_captures: Mapping[str, str]) -> Any:
        return route_captures.get(self.name, MISSING)


class QueryParameter(ParameterBase):
    """A query string parameter.

    Repeated keys (``tag=a&tag=b``, or ``tag[]=a&tag[]=b``) produce a list
    when the declared type is an array; otherwise the last value wins. Blank
    values count as absent unless ``allow_empty_value`` is set.

    ``max_parameters`` bounds the query string parse, unless a route has
    already parsed the request at its configured limit.
    """

    location: Literal["query"] = "query"
    style: Literal["form"] = "form"
    required: bool = False
    allow_empty_value: bool = False
    allow_reserved: bool = False
    max_parameters: int = Field(default=DEFAULT_MAX_QUERY_PARAMETERS, gt=0)

    def _raw_value(self, request: RequestView, route_captures: Mapping[str, str]) -> Any:
        keys = (self.name, f"{self.name}[]")
        values = [
            value
            for key, value in request.query_pairs(self.max_parameters)
            if key in keys and (value or self.allow_empty_value)
        ]
        if not values:
            return MISSING
        if isinstance(unwrap(self.type), Array):
            return values
        return values[-1]


class HeaderParameter(ParameterBase):
    """A request header, looked up by its precomputed transport key."""

    location: Literal["header"] = "header"
    header_name: str
    style: Literal["simple"] = "simple"
    required: bool = False

    _environ_key: str = PrivateAttr(default="")

    def model_post_init(self, __context: Any) -> None:
        self._environ_key = header_environ_key(self.header_name)

    @property
    def environ_key(self) -> str:
        return self._environ_key

    @property
    def friendly_name(self) -> str:
        return self.header_name

    def _raw_value(self, request: RequestView, route_captures: Mapping[str, str]) -> Any:
        return request.environ.get(self._environ_key, MISSING)


class CookieParameter(ParameterBase):
    location: Literal["cookie"] = "cookie"
    cookie_name: str
    style: Literal["form"] = "form"
    required: bool = False

    @property
    def friendly_name(self) -> str:
        return self.cookie_name

    def _raw_value(self, request: RequestView, route_captures: Mapping[str, str]) -> Any:
        return request.cookies.get(self.cookie_name, MISSING)


Parameter = Annotated[
    PathParameter | QueryParameter | HeaderParameter | CookieParameter,
    Field(discriminator="location"),
]

CredentialParameter = Annotated[
    QueryParameter | HeaderParameter | CookieParameter,
    Field(discriminator="location"),
]

__all__ = [
    "DEFAULT_MAX_QUERY_PARAMETERS",
    "CookieParameter",
    "CredentialParameter",
    "HeaderParameter",
    "Parameter",
    "ParameterBase",
    "PathParameter",
    "QueryParameter",
]
