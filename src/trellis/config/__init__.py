"""Runtime configuration for trellis."""

from .loader import CONFIG_ENV_VAR, load_config
from .models import TrellisConfigModel

__all__ = ["CONFIG_ENV_VAR", "TrellisConfigModel", "load_config"]
