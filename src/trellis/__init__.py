"""trellis - descriptor-driven API toolkit.

Routes, parameters, security schemes and request bodies are declared once as
descriptors. The same declarations validate and coerce inbound requests and
generate the OpenAPI 3 document of the API.

## Packages

- `trellis.types`: type descriptors, structs, coercion and the type registry
- `trellis.schema`: the schema compiler and the OpenAPI generator
- `trellis.descriptor`: parameter, security, body, route and API descriptors
- `trellis.config`: runtime configuration
- `trellis.errors`: setup, validation and client errors
"""

from trellis.config import TrellisConfigModel, load_config
from trellis.descriptor import (
    ApiDescriptor,
    ApiKeySecurity,
    CookieParameter,
    HeaderParameter,
    HttpSecurity,
    Info,
    PathParameter,
    QueryParameter,
    RequestBody,
    RequestView,
    Response,
    Route,
    SecurityContext,
    Services,
    ValidatedRequest,
)
from trellis.errors import (
    ClientError,
    InfrastructureError,
    SetupError,
    TrellisError,
    ValidationError,
)
from trellis.schema import OpenApi3Generator, SchemaCompiler, SchemaDocument
from trellis.version import PACKAGE_VERSION as __version__

__all__ = [
    "ApiDescriptor",
    "ApiKeySecurity",
    "ClientError",
    "CookieParameter",
    "HeaderParameter",
    "HttpSecurity",
    "InfrastructureError",
    "Info",
    "OpenApi3Generator",
    "PathParameter",
    "QueryParameter",
    "RequestBody",
    "RequestView",
    "Response",
    "Route",
    "SchemaCompiler",
    "SchemaDocument",
    "SecurityContext",
    "Services",
    "SetupError",
    "TrellisConfigModel",
    "TrellisError",
    "ValidatedRequest",
    "ValidationError",
    "__version__",
    "load_config",
]
