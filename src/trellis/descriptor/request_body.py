"""Request body descriptor."""

from __future__ import annotations

import logging
from typing import Any

from pydantic import Field, field_validator

from trellis.errors import InvalidBodyError, MissingBodyError, ValidationError
from trellis.models import TrellisBaseModel
from trellis.types.converters import TypeConverter
from trellis.types.descriptors import MISSING, TypeDescriptor, as_descriptor

logger = logging.getLogger(__name__)


class RequestBody(TrellisBaseModel):
    """The body a route accepts.

    The body arrives already decoded (JSON into dicts, lists and scalars);
    this descriptor only coerces it into ``type``.
    """

    type: TypeDescriptor
    required: bool = False
    description: str | None = None
    media_types: list[str] = Field(default_factory=lambda: ["application/json"], min_length=1)

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> TypeDescriptor:
        try:
            return as_descriptor(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    def validate(self, body: Any) -> Any:  # type: ignore[override]
        """Coerce a decoded body.

        Args:
            body: The decoded body, or `MISSING` when none was sent

        Returns:
            The coerced body, or `MISSING` for an absent optional body

        Raises:
            MissingBodyError: If the body is required and absent (400)
            InvalidBodyError: If the body doesn't fit ``type`` (422)
        """
        if body is MISSING:
            if self.required:
                raise MissingBodyError()
            return MISSING

        try:
            return TypeConverter.coerce(self.type, body)
        except ValidationError as e:
            logger.debug(f"Request body failed coercion with {len(e.violations)} violation(s)")
            raise InvalidBodyError(e.violations) from e


__all__ = ["RequestBody"]
