"""Descriptors for routes, parameters, security schemes and request bodies."""

from .core import ApiDescriptor, Contact, Info, License
from .parameters import (
    DEFAULT_MAX_QUERY_PARAMETERS,
    CookieParameter,
    CredentialParameter,
    HeaderParameter,
    Parameter,
    ParameterBase,
    PathParameter,
    QueryParameter,
)
from .request import RequestView, SecurityContext, Services, header_environ_key
from .request_body import RequestBody
from .route import HttpMethod, Response, Route, ValidatedRequest
from .security import ApiKeySecurity, HttpSecurity, Security, SecurityBase

__all__ = [
    "DEFAULT_MAX_QUERY_PARAMETERS",
    "ApiDescriptor",
    "ApiKeySecurity",
    "Contact",
    "CookieParameter",
    "CredentialParameter",
    "HeaderParameter",
    "HttpMethod",
    "HttpSecurity",
    "Info",
    "License",
    "Parameter",
    "ParameterBase",
    "PathParameter",
    "QueryParameter",
    "RequestBody",
    "RequestView",
    "Response",
    "Route",
    "Security",
    "SecurityBase",
    "SecurityContext",
    "Services",
    "ValidatedRequest",
    "header_environ_key",
]
