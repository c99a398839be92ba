"""Pydantic models for trellis runtime configuration."""

from typing import Literal

from pydantic import ConfigDict, Field

from trellis.models import TrellisBaseModel


class TrellisConfigModel(TrellisBaseModel):
    """Runtime configuration.

    Loaded from the ``trellis:`` section of a YAML file:

    ```yaml
    trellis:
      show_errors: false
      log_input_converter_errors: true
      max_query_parameters: 500
      openapi_version: "3.0.3"
    ```

    Attributes:
        show_errors: Include individual violations in client error bodies
        log_input_converter_errors: Log rejected requests with their violations
        max_query_parameters: Upper bound on query string fields per request
        openapi_version: Version string written to generated documents

    Example:
        >>> config = TrellisConfigModel(show_errors=False)
        >>> config.max_query_parameters
        1000
    """

    # Allow mutability for config merging
    model_config = ConfigDict(extra="forbid", frozen=False)

    show_errors: bool = True
    log_input_converter_errors: bool = True
    max_query_parameters: int = Field(default=1000, gt=0)
    openapi_version: Literal["3.0.0", "3.0.1", "3.0.2", "3.0.3"] = "3.0.3"
