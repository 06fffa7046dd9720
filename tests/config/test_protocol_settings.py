"""
Tests for Protocol Settings

Tests ProtocolSettings validation, YAML loading, environment overrides and
logging setup.
"""

import sys

import pytest
import yaml
from loguru import logger

from protected_options.config import (
    ProtocolSettings,
    configure_logging,
    load_settings,
    merge_settings_with_env,
    save_settings,
)


class TestProtocolSettings:
    """Tests for ProtocolSettings dataclass."""

    def test_defaults(self):
        """Default values are the production constants."""
        settings = ProtocolSettings()

        assert settings.valuation_max_price_age == 3600
        assert settings.stop_loss_max_price_age == 300
        assert settings.min_option_duration == 3600
        assert settings.max_option_duration == 30 * 24 * 3600
        assert settings.min_intrinsic_value == 1_000_000
        assert settings.max_multiplier == 100
        assert settings.default_multiplier == 1
        assert settings.max_loss_bps_limit == 9000
        assert settings.min_time_window == 60

    def test_log_level_normalized(self):
        assert ProtocolSettings(log_level="debug").log_level == "DEBUG"

    def test_invalid_log_level(self):
        with pytest.raises(ValueError, match="Invalid log_level"):
            ProtocolSettings(log_level="VERBOSE")

    def test_non_positive_staleness(self):
        with pytest.raises(ValueError, match="stop_loss_max_price_age must be positive"):
            ProtocolSettings(stop_loss_max_price_age=0)

    def test_duration_bounds_ordered(self):
        with pytest.raises(ValueError, match="max_option_duration"):
            ProtocolSettings(min_option_duration=7200, max_option_duration=3600)

    def test_default_multiplier_in_range(self):
        with pytest.raises(ValueError, match="default_multiplier"):
            ProtocolSettings(default_multiplier=101)

    def test_max_loss_limit_below_full_loss(self):
        with pytest.raises(ValueError, match="max_loss_bps_limit"):
            ProtocolSettings(max_loss_bps_limit=10_000)

    def test_from_dict_ignores_unknown_keys(self):
        settings = ProtocolSettings.from_dict({"min_time_window": 120, "unknown": 1})

        assert settings.min_time_window == 120

    def test_log_config(self):
        config = ProtocolSettings(max_log_size_mb=10, log_retention_days=3).get_log_config()

        assert config["rotation"] == "10 MB"
        assert config["retention"] == "3 days"
        assert "{extra[component]}" in config["format"]


class TestLoadSettings:
    """Tests for YAML loading and environment overrides."""

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_settings("nonexistent", config_dir=tmp_path)

        assert settings == ProtocolSettings()

    def test_load_from_yaml(self, tmp_path):
        (tmp_path / "test.yaml").write_text(
            yaml.dump({"stop_loss_max_price_age": 120, "log_level": "warning"})
        )

        settings = load_settings("test", config_dir=tmp_path)

        assert settings.stop_loss_max_price_age == 120
        assert settings.log_level == "WARNING"

    def test_non_mapping_file_rejected(self, tmp_path):
        (tmp_path / "bad.yaml").write_text("- just\n- a list\n")

        with pytest.raises(ValueError, match="must contain a mapping"):
            load_settings("bad", config_dir=tmp_path)

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        (tmp_path / "test.yaml").write_text(yaml.dump({"min_time_window": 120}))
        monkeypatch.setenv("PROTECTED_OPTIONS_MIN_TIME_WINDOW", "90")
        monkeypatch.setenv("PROTECTED_OPTIONS_LOG_LEVEL", "DEBUG")

        settings = load_settings("test", config_dir=tmp_path)

        assert settings.min_time_window == 90
        assert settings.log_level == "DEBUG"

    def test_bad_env_integer(self, monkeypatch):
        monkeypatch.setenv("PROTECTED_OPTIONS_MAX_MULTIPLIER", "lots")

        with pytest.raises(ValueError, match="must be an integer"):
            merge_settings_with_env({})

    def test_save_and_reload(self, tmp_path):
        original = ProtocolSettings(valuation_max_price_age=1800, default_multiplier=2)

        save_settings(original, tmp_path / "saved.yaml")

        assert load_settings("saved", config_dir=tmp_path) == original

    def test_shipped_default_config(self):
        """config/default.yaml matches the built-in defaults."""
        from pathlib import Path

        config_dir = Path(__file__).parent.parent.parent / "config"

        assert load_settings("default", config_dir=config_dir) == ProtocolSettings()


class TestConfigureLogging:
    """Tests for loguru sink setup."""

    def test_file_sink(self, tmp_path):
        log_file = tmp_path / "logs" / "protocol.log"
        settings = ProtocolSettings(log_file=str(log_file), log_level="INFO")

        try:
            configure_logging(settings)
            logger.bind(component="Test").info("hello from the protocol")
            logger.complete()

            assert log_file.exists()
            content = log_file.read_text()
            assert "hello from the protocol" in content
            assert "Test" in content
        finally:
            logger.remove()
            logger.add(sys.stderr)
