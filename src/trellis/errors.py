"""Error taxonomy for trellis.

Three families of errors exist:

- Setup errors (`SetupError` and subclasses) are raised while an application
  is being assembled or its documentation compiled. They are configuration
  mistakes and are never recovered.
- Client errors (`ClientError` and subclasses) describe a bad request. They
  carry an HTTP-style ``status_code`` and the individual violations so the
  response layer can render a 4xx answer.
- `ValidationError` is the low-level coercion failure produced by the type
  converter; the descriptor layer turns it into the matching client error.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


class TrellisError(Exception):
    """Root of all trellis errors."""


class SetupError(TrellisError):
    """A descriptor or registry was assembled incorrectly."""


class UnrecognizedTypeError(SetupError):
    """A type descriptor has no schema representation."""


class DuplicateSchemaNameError(SetupError):
    """Two different structs resolved to the same canonical schema name."""

    def __init__(self, name: str, existing: type, duplicate: type):
        super().__init__(
            f"Duplicate schema name: '{name}'. Only one struct, regardless of module, "
            f"can be called this ({_qualified(existing)} and {_qualified(duplicate)}). "
            f"Set `schema_name` on {_qualified(duplicate)} to override it."
        )
        self.name = name
        self.existing = existing
        self.duplicate = duplicate


class InfrastructureError(TrellisError):
    """Raised by a security validation predicate when its backing service fails.

    Any other exception raised by a predicate rejects the credential; this one
    propagates to the caller.
    """


@dataclass(frozen=True)
class Violation:
    """A single coercion failure at a location inside a value."""

    path: tuple[str | int, ...]
    message: str

    @property
    def location(self) -> str:
        """Dotted path to the failing value, e.g. ``items[2].name``."""
        location = ""
        for part in self.path:
            if isinstance(part, int):
                location += f"[{part}]"
            elif location:
                location += f".{part}"
            else:
                location = part
        return location

    def to_dict(self) -> dict[str, str]:
        return {"location": self.location, "message": self.message}

    def __str__(self) -> str:
        return f"{self.location}: {self.message}" if self.path else self.message


class ValidationError(TrellisError, ValueError):
    """Raised when a value can't be coerced to its type descriptor."""

    def __init__(self, violations: Sequence[Violation]):
        self.violations = list(violations)
        super().__init__("; ".join(str(v) for v in self.violations))


class ClientError(TrellisError):
    """A request failed validation. Rendered as a 4xx response."""

    status_code = 400

    def __init__(self, message: str, violations: Sequence[Violation] | None = None):
        super().__init__(message)
        self.message = message
        self.violations = list(violations or [])

    def to_dict(self, show_details: bool = True) -> dict[str, Any]:
        """Render the error for a response body.

        Args:
            show_details: Whether to include individual violations

        Returns:
            Dictionary with the message and, optionally, the violations
        """
        result: dict[str, Any] = {"status": self.status_code, "message": self.message}
        if show_details and self.violations:
            result["violations"] = [v.to_dict() for v in self.violations]
        return result


class BadRequestError(ClientError):
    status_code = 400


class MissingParameterError(BadRequestError):
    def __init__(self, friendly_name: str):
        super().__init__(
            f"Invalid/missing parameter '{friendly_name}'.",
            [Violation((friendly_name,), "is missing")],
        )
        self.friendly_name = friendly_name


class UnparseableParameterError(BadRequestError):
    def __init__(self, friendly_name: str, violations: Sequence[Violation]):
        super().__init__(
            f"Couldn't interpret the value provided for parameter '{friendly_name}'.",
            [Violation((friendly_name, *v.path), v.message) for v in violations],
        )
        self.friendly_name = friendly_name


class MissingBodyError(BadRequestError):
    def __init__(self) -> None:
        super().__init__("A request body is required.")


class InvalidBodyError(ClientError):
    status_code = 422

    def __init__(self, violations: Sequence[Violation]):
        super().__init__("The request body is invalid.", violations)


class UnauthorizedError(ClientError):
    status_code = 401

    def __init__(self, message: str = "Authentication required."):
        super().__init__(message)


def _qualified(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


__all__ = [
    "BadRequestError",
    "ClientError",
    "DuplicateSchemaNameError",
    "InfrastructureError",
    "InvalidBodyError",
    "MissingBodyError",
    "MissingParameterError",
    "SetupError",
    "TrellisError",
    "UnauthorizedError",
    "UnparseableParameterError",
    "UnrecognizedTypeError",
    "ValidationError",
    "Violation",
]
