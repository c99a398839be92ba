"""Configuration loader for trellis.

Reads the ``trellis:`` section of a YAML file into a `TrellisConfigModel`.
"""

import logging
import os
from pathlib import Path

import yaml
from pydantic import ValidationError

from .models import TrellisConfigModel

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "TRELLIS_CONFIG"
DEFAULT_CONFIG_FILE = "trellis.yml"


def load_config(config_path: Path | None = None) -> TrellisConfigModel:
    """Load trellis configuration.

    Args:
        config_path: Optional path to the YAML file.
                    If not provided, looks for:
                    1. TRELLIS_CONFIG environment variable
                    2. ./trellis.yml

    Returns:
        TrellisConfigModel, with defaults when no file is found

    Raises:
        FileNotFoundError: If an explicitly given config file doesn't exist
        ValueError: If the config is invalid
    """
    if config_path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            config_path = Path(env_path)
        else:
            candidate = Path.cwd() / DEFAULT_CONFIG_FILE
            if not candidate.exists():
                logger.debug("No trellis config file found, using defaults")
                return TrellisConfigModel()
            config_path = candidate

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Trellis config file not found at {config_path}")

    logger.debug(f"Loading trellis config from: {config_path}")

    try:
        with open(config_path) as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ValueError(f"Failed to parse YAML config file {config_path}: {e}") from e

    if not raw_config:
        logger.info("Empty trellis config file, using defaults")
        return TrellisConfigModel()

    if not isinstance(raw_config, dict):
        raise ValueError(f"Invalid trellis config in {config_path}: expected a mapping")

    section = raw_config.get("trellis") or {}
    if not isinstance(section, dict):
        raise ValueError(f"Invalid trellis config in {config_path}: 'trellis' must be a mapping")

    try:
        return TrellisConfigModel.model_validate(section)
    except ValidationError as e:
        raise ValueError(f"Invalid trellis config: {e}") from e
