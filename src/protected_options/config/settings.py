"""
Protocol Settings

Tunable constants for the valuation, stop-loss and orchestration components,
with validation on construction.

Key patterns:
- dataclass(slots=True) for internal configuration, validated in __post_init__
- Defaults are the protocol's production values
- get_log_config() feeds loguru, same shape as the production logging config
"""

from dataclasses import dataclass, fields
from typing import Any, Optional

ONE_HOUR = 3600
THIRTY_DAYS = 30 * 24 * ONE_HOUR


@dataclass(slots=True)
class ProtocolSettings:
    """
    Protocol-wide settings.

    Attributes:
        valuation_max_price_age: Staleness tolerance of the valuation engine (seconds)
        stop_loss_max_price_age: Staleness tolerance of the stop-loss engine (seconds)
        min_option_duration: Shortest allowed position lifetime (seconds)
        max_option_duration: Longest allowed position lifetime (seconds)
        min_intrinsic_value: In-the-money floor in 8-decimal price units ($0.01)
        max_multiplier: Upper bound of the option multiplier
        default_multiplier: Multiplier used for orchestrator-created options
        max_loss_bps_limit: Upper bound of stop-loss max loss (basis points)
        min_time_window: Shortest stop-loss time window (seconds)
        log_level: Logging level
        log_file: Optional log file path
        max_log_size_mb: Log file size before rotation
        log_retention_days: Days of rotated logs to keep
    """

    valuation_max_price_age: int = ONE_HOUR
    stop_loss_max_price_age: int = 300
    min_option_duration: int = ONE_HOUR
    max_option_duration: int = THIRTY_DAYS
    min_intrinsic_value: int = 1_000_000
    max_multiplier: int = 100
    default_multiplier: int = 1
    max_loss_bps_limit: int = 9000
    min_time_window: int = 60

    # Logging
    log_level: str = "INFO"
    log_file: Optional[str] = None
    max_log_size_mb: int = 50
    log_retention_days: int = 10

    def __post_init__(self):
        """Validate settings."""
        for name in ("valuation_max_price_age", "stop_loss_max_price_age", "min_time_window"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive, got {getattr(self, name)}")

        if self.min_option_duration <= 0:
            raise ValueError(
                f"min_option_duration must be positive, got {self.min_option_duration}"
            )
        if self.max_option_duration < self.min_option_duration:
            raise ValueError(
                f"max_option_duration ({self.max_option_duration}) must be >= "
                f"min_option_duration ({self.min_option_duration})"
            )

        if self.min_intrinsic_value < 0:
            raise ValueError(
                f"min_intrinsic_value must be non-negative, got {self.min_intrinsic_value}"
            )

        if self.max_multiplier < 1:
            raise ValueError(f"max_multiplier must be >= 1, got {self.max_multiplier}")
        if not 1 <= self.default_multiplier <= self.max_multiplier:
            raise ValueError(
                f"default_multiplier must be in [1, {self.max_multiplier}], "
                f"got {self.default_multiplier}"
            )

        if not 1 <= self.max_loss_bps_limit < 10_000:
            raise ValueError(
                f"max_loss_bps_limit must be in [1, 9999], got {self.max_loss_bps_limit}"
            )

        valid_levels = ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() not in valid_levels:
            raise ValueError(f"Invalid log_level: {self.log_level}. Must be one of {valid_levels}")
        self.log_level = self.log_level.upper()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProtocolSettings":
        """Build settings from a mapping, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def get_log_config(self) -> dict:
        """
        Get file logging configuration for loguru.

        Returns:
            Dictionary of logger.add() keyword arguments
        """
        return {
            "rotation": f"{self.max_log_size_mb} MB",
            "retention": f"{self.log_retention_days} days",
            "compression": "zip",
            "level": self.log_level,
            "format": (
                "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
                "<level>{level: <8}</level> | "
                "<cyan>{extra[component]}</cyan> | "
                "<level>{message}</level>"
            ),
        }
