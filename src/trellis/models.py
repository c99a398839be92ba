"""Base Pydantic models for trellis.

This module provides the base model class that all trellis descriptor models
inherit from. It establishes consistent configuration across all models:

- Strict field validation (no extra fields allowed)
- Immutable instances so descriptors can be shared by concurrent requests
- Arbitrary types allowed, since descriptors embed type descriptors and
  validation callables

Example:
    >>> from trellis.models import TrellisBaseModel
    >>>
    >>> class MyDescriptor(TrellisBaseModel):
    ...     name: str
    >>>
    >>> MyDescriptor(name="test").model_dump()
    {'name': 'test'}
"""

from pydantic import BaseModel, ConfigDict


class TrellisBaseModel(BaseModel):
    """Base model for all trellis descriptor models.

    - extra="forbid": Rejects any fields not defined in the model
    - frozen=True: Makes instances immutable once assembled
    - arbitrary_types_allowed=True: Permits type descriptors as field values

    Configuration models that need mutability use their own configuration.
    """

    model_config = ConfigDict(extra="forbid", frozen=True, arbitrary_types_allowed=True)
