"""Security descriptors.

A security descriptor handles the plumbing of an authentication scheme. If a
route says it uses HTTP authorization with the ``Bearer`` scheme, the
descriptor finds the ``Authorization`` header, checks the scheme and pulls out
the credential. Whether that credential is legitimate is up to the
``validation`` predicate.

The predicate receives a `SecurityContext` carrying the request, the
application's `Services` and the credential, so it can consult a user store or
an introspection endpoint. It may record what it found (a user object, say) in
``context.request.local_store`` for the handler to use.

## Security invariants

- Never log credential values.
- A missing credential fails validation without calling the predicate.
- The predicate's result is always reduced to a strict bool.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace
from typing import Annotated, Any, Literal

from pydantic import Field, model_validator

from trellis.errors import ClientError, InfrastructureError, SetupError
from trellis.models import TrellisBaseModel
from trellis.telemetry import traced_operation
from trellis.types.descriptors import MISSING

from .parameters import CredentialParameter
from .request import AUTHORIZATION_ENVIRON_KEY, RequestView, SecurityContext

logger = logging.getLogger(__name__)

# TODO: add OAuth2 (with flow objects) and OpenID Connect security.


class SecurityBase(TrellisBaseModel):
    name: str
    description: str | None = None
    validation: Callable[[SecurityContext], Any]

    def validate(self, context: SecurityContext) -> bool:  # type: ignore[override]
        """Check the request's credential.

        Args:
            context: The request and the application's services

        Returns:
            True if a credential was supplied and the predicate accepted it

        Raises:
            InfrastructureError: If the predicate reports a backing-service failure
        """
        with traced_operation(
            "trellis.security.validate",
            attributes={"trellis.security.name": self.name, "trellis.security.kind": self.kind},  # type: ignore[attr-defined]
        ) as span:
            credential = self.extract_credential(context.request)
            span.set_attribute("trellis.security.has_credential", credential is not MISSING)

            if credential is MISSING:
                logger.debug(f"No credential supplied for security '{self.name}'")
                return False

            try:
                result = self.validation(replace(context, credential=credential))
            except InfrastructureError:
                raise
            except Exception as e:
                logger.warning(
                    f"Validation for security '{self.name}' raised {type(e).__name__}; "
                    "rejecting credential"
                )
                return False

            accepted = bool(result)
            span.set_attribute("trellis.security.accepted", accepted)
            return accepted

    def extract_credential(self, request: RequestView) -> Any:
        """Return the credential carried by the request, or `MISSING`."""
        raise NotImplementedError(f"{type(self).__name__}.extract_credential must be implemented.")


class ApiKeySecurity(SecurityBase):
    """An API key carried in a query, header or cookie parameter.

    The parameter must not be ``required``: a missing key is a failed
    security check, not a malformed request.
    """

    kind: Literal["apiKey"] = "apiKey"
    parameter: CredentialParameter

    @model_validator(mode="after")
    def _check_parameter_not_required(self) -> ApiKeySecurity:
        if self.parameter.required:
            raise SetupError(
                f"Parameter '{self.parameter.friendly_name}' of security '{self.name}' "
                "must not be 'required'; the security check reports missing credentials."
            )
        return self

    def extract_credential(self, request: RequestView) -> Any:
        try:
            return self.parameter.retrieve(request, {})
        except ClientError:
            logger.debug(f"Unusable credential for security '{self.name}'")
            return MISSING


class HttpSecurity(SecurityBase):
    """HTTP authentication (RFC 7235) with a named scheme such as ``Bearer``.

    The Authorization header is not split on commas; everything after the
    scheme token is the credential.
    """

    kind: Literal["http"] = "http"
    scheme: str = Field(min_length=1)
    bearer_format: str | None = None

    def extract_credential(self, request: RequestView) -> Any:
        header = request.environ.get(AUTHORIZATION_ENVIRON_KEY)
        if not header:
            return MISSING

        scheme, _, credential = header.strip().partition(" ")
        if scheme.lower() != self.scheme.lower():
            return MISSING

        credential = credential.strip()
        return credential if credential else MISSING


Security = Annotated[ApiKeySecurity | HttpSecurity, Field(discriminator="kind")]

__all__ = ["ApiKeySecurity", "HttpSecurity", "Security", "SecurityBase"]
