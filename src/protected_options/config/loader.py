"""
Configuration Loader Module

Loads ProtocolSettings from config/<env>.yaml, applies environment overrides
and installs loguru sinks.
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict

import yaml
from loguru import logger

from protected_options.config.settings import ProtocolSettings

ENV_PREFIX = "PROTECTED_OPTIONS_"

_INT_KEYS = {
    "valuation_max_price_age",
    "stop_loss_max_price_age",
    "min_option_duration",
    "max_option_duration",
    "min_intrinsic_value",
    "max_multiplier",
    "default_multiplier",
    "max_loss_bps_limit",
    "min_time_window",
    "max_log_size_mb",
    "log_retention_days",
}
_STR_KEYS = {"log_level", "log_file"}


def load_settings(env: str = "default", config_dir: str | Path = "config") -> ProtocolSettings:
    """
    Load settings for an environment.

    Args:
        env: Environment name (default, test, production)
        config_dir: Directory holding <env>.yaml files

    Returns:
        ProtocolSettings (defaults when the file is missing)

    Raises:
        ValueError: If the file or an override holds invalid values
    """
    config_file = Path(config_dir) / f"{env}.yaml"

    if config_file.exists():
        with open(config_file, "r") as f:
            config_data = yaml.safe_load(f) or {}
        if not isinstance(config_data, dict):
            raise ValueError(f"Config file {config_file} must contain a mapping")
        logger.info(f"Loaded config from {config_file}")
    else:
        logger.warning(f"Config file not found: {config_file}, using defaults")
        config_data = {}

    config_data = merge_settings_with_env(config_data)

    return ProtocolSettings.from_dict(config_data)


def merge_settings_with_env(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge settings with environment variables.

    Environment variables override file settings, e.g.
        PROTECTED_OPTIONS_STOP_LOSS_MAX_PRICE_AGE=120
        PROTECTED_OPTIONS_LOG_LEVEL=DEBUG
    """
    merged = dict(config_data)

    for key in _INT_KEYS | _STR_KEYS:
        env_var = f"{ENV_PREFIX}{key.upper()}"
        env_value = os.environ.get(env_var)
        if env_value is None:
            continue

        if key in _INT_KEYS:
            try:
                merged[key] = int(env_value)
            except ValueError as e:
                raise ValueError(f"{env_var} must be an integer, got {env_value!r}") from e
        else:
            merged[key] = env_value

        logger.debug(f"Overriding {key} from env: {env_var}")

    return merged


def save_settings(settings: ProtocolSettings, config_path: str | Path) -> None:
    config_path = Path(config_path)
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        yaml.dump(settings.to_dict(), f, default_flow_style=False)

    logger.info(f"Saved settings to {config_path}")


def configure_logging(settings: ProtocolSettings) -> None:
    """Replace loguru sinks with stderr plus the optional rotating file."""
    logger.remove()
    logger.configure(extra={"component": "protocol"})
    logger.add(sys.stderr, level=settings.log_level)

    if settings.log_file:
        Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
        logger.add(settings.log_file, **settings.get_log_config())
