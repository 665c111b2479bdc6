"""Unit tests for settings loading."""

import os
from unittest.mock import patch
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from cadence.config import LoggingConfig, SchedulerConfig, Settings, get_settings, reload_settings
from cadence.scheduler import Scheduler


@pytest.mark.unit
class TestSchedulerConfig:
    def test_defaults(self, env_clean):
        config = SchedulerConfig()
        assert config.tick_interval == 0.2
        assert config.timezone is None
        assert config.release_lock_during_run is False
        assert config.start_timeout is None

    def test_environment_overrides(self, env_clean):
        env = {
            "SCHEDULER_TICK_INTERVAL": "0.5",
            "SCHEDULER_TIMEZONE": "Europe/Prague",
            "SCHEDULER_RELEASE_LOCK_DURING_RUN": "true",
            "SCHEDULER_START_TIMEOUT": "3",
        }
        with patch.dict(os.environ, env):
            config = SchedulerConfig()

        assert config.tick_interval == 0.5
        assert config.timezone == "Europe/Prague"
        assert config.release_lock_during_run is True
        assert config.start_timeout == 3.0

    def test_empty_timezone_means_local(self, env_clean):
        with patch.dict(os.environ, {"SCHEDULER_TIMEZONE": "  "}):
            assert SchedulerConfig().timezone is None

    @pytest.mark.parametrize("tick", [0, 0.001, 61])
    def test_tick_interval_bounds(self, env_clean, tick):
        with pytest.raises(ValidationError):
            SchedulerConfig(tick_interval=tick)

    def test_start_timeout_must_be_positive(self, env_clean):
        with pytest.raises(ValidationError):
            SchedulerConfig(start_timeout=0)


@pytest.mark.unit
class TestLoggingConfig:
    def test_defaults(self, env_clean):
        config = LoggingConfig()
        assert config.log_level == "INFO"
        assert config.json_logs is False
        assert config.log_file is None

    def test_invalid_level(self, env_clean):
        with pytest.raises(ValidationError):
            LoggingConfig(log_level="VERBOSE")

    def test_environment_overrides(self, env_clean):
        with patch.dict(os.environ, {"LOG_LOG_LEVEL": "DEBUG", "LOG_JSON_LOGS": "1"}):
            config = LoggingConfig()
        assert config.log_level == "DEBUG"
        assert config.json_logs is True


@pytest.mark.unit
class TestSettings:
    def test_get_settings_is_singleton(self, env_clean):
        assert get_settings() is get_settings()

    def test_reload_settings_reads_environment(self, env_clean):
        with patch.dict(os.environ, {"SCHEDULER_TICK_INTERVAL": "1.5"}):
            settings = reload_settings()
        assert settings.scheduler.tick_interval == 1.5
        assert get_settings() is settings

    def test_validate_settings_production_warnings(self, env_clean):
        settings = Settings(environment="production")
        messages = settings.validate_settings()
        assert "INFO: JSON logs recommended for production" in messages
        assert any("SCHEDULER_START_TIMEOUT" in message for message in messages)
        assert "INFO: Timezone: local" in messages

    def test_validate_settings_lock_release_warning(self, env_clean):
        settings = Settings(scheduler=SchedulerConfig(release_lock_during_run=True))
        assert "WARNING: job callables run outside the registry lock" in settings.validate_settings()

    def test_scheduler_uses_global_settings(self, env_clean):
        with patch.dict(os.environ, {"SCHEDULER_TIMEZONE": "Asia/Tokyo"}):
            reload_settings()
            scheduler = Scheduler()

        assert scheduler.config.timezone == "Asia/Tokyo"
        assert scheduler.every(1).timezone == ZoneInfo("Asia/Tokyo")
