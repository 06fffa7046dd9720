"""
Protocol Configuration Module
"""

from protected_options.config.loader import (
    configure_logging,
    load_settings,
    merge_settings_with_env,
    save_settings,
)
from protected_options.config.settings import ProtocolSettings

__all__ = [
    "ProtocolSettings",
    "configure_logging",
    "load_settings",
    "merge_settings_with_env",
    "save_settings",
]
