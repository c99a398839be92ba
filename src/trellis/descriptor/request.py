"""Request-side collaborators consumed by descriptors.

Transport is not part of trellis. Descriptors only need a `RequestView`: the
raw query string, headers folded into CGI-style ``HTTP_*`` keys, the parsed
cookies and the already-decoded body. `RequestView.from_starlette` adapts a
Starlette request.

`Services` is the application-wide service set handed to security
validation. `SecurityContext` bundles a request, the services and the
extracted credential for a validation predicate.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl

from starlette.requests import Request

from trellis.errors import BadRequestError
from trellis.types.descriptors import MISSING

ENVIRON_HEADER_PREFIX = "HTTP_"
AUTHORIZATION_ENVIRON_KEY = "HTTP_AUTHORIZATION"


def header_environ_key(header_name: str) -> str:
    """Map a header name to its transport key, e.g. ``X-Api-Key`` -> ``HTTP_X_API_KEY``."""
    return ENVIRON_HEADER_PREFIX + header_name.upper().replace("-", "_")


@dataclass
class RequestView:
    """What trellis descriptors see of an inbound request.

    Attributes:
        query_string: Raw query string without the leading ``?``
        environ: Headers keyed by `header_environ_key`
        cookies: Parsed cookie name to value mapping
        body: Decoded body, or `MISSING` when none was sent
        local_store: Per-request scratch space. Security validation may stash
            values here (a resolved principal, say) for the handler to read.
    """

    query_string: str = ""
    environ: Mapping[str, str] = field(default_factory=dict)
    cookies: Mapping[str, str] = field(default_factory=dict)
    body: Any = MISSING
    local_store: dict[str, Any] = field(default_factory=dict)
    _query_pairs: list[tuple[str, str]] | None = field(default=None, init=False, repr=False)

    def query_pairs(self, max_fields: int) -> list[tuple[str, str]]:
        """Parse the query string into key/value pairs, blank values included.

        The query string is parsed once per request. The first caller's
        ``max_fields`` bounds that parse; later calls reuse its result.

        Raises:
            BadRequestError: If the query string holds more than ``max_fields`` fields
        """
        if self._query_pairs is None:
            try:
                self._query_pairs = parse_qsl(
                    self.query_string, keep_blank_values=True, max_num_fields=max_fields
                )
            except ValueError as e:
                raise BadRequestError(
                    f"Too many query parameters (at most {max_fields} allowed)."
                ) from e
        return self._query_pairs

    @classmethod
    def from_starlette(cls, request: Request, body: Any = MISSING) -> RequestView:
        """Adapt a Starlette request.

        Repeated headers are joined with a comma, as CGI gateways do.

        Args:
            request: The Starlette request
            body: The body after content negotiation and decoding
        """
        environ: dict[str, str] = {}
        for name, value in request.headers.items():
            key = header_environ_key(name)
            environ[key] = f"{environ[key]},{value}" if key in environ else value

        query_string = request.scope.get("query_string", b"").decode("latin-1")
        return cls(
            query_string=query_string,
            environ=environ,
            cookies=dict(request.cookies),
            body=body,
        )


@dataclass
class Services:
    """Application-wide services available to security validation.

    Example:
        >>> services = Services()
        >>> services.set("users", user_repository)
        >>> services.get("users")
    """

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger("trellis.app"))
    _data: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __contains__(self, key: object) -> bool:
        return key in self._data


@dataclass(frozen=True)
class SecurityContext:
    """Explicit context passed to a security validation predicate.

    Attributes:
        request: The inbound request, including its ``local_store``
        services: The application's service set
        credential: The value extracted by the security descriptor
    """

    request: RequestView
    services: Services = field(default_factory=Services)
    credential: Any = MISSING
