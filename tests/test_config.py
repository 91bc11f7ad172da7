"""Tests for configuration handling."""

import pytest
import sys
from pathlib import Path

from pydantic import ValidationError

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from config import ModuleConfiguration, ModuleOptions, Settings, StorageOptions, TimezoneOptions


class TestModuleConfiguration:
    """Test module option merging."""

    def test_defaults(self):
        """A new configuration holds the defaults."""
        options = ModuleConfiguration().get_options()
        assert options.server_tasks is True
        assert options.storage.type == "memory"
        assert options.storage.prefix == "cron:"
        assert options.timezone.type == "UTC"
        assert options.timezone.validate_timezone is True
        assert options.timezone.strict is False

    def test_set_options_fills_from_defaults(self):
        """Partial options are completed from the defaults."""
        config = ModuleConfiguration()
        options = config.set_options({"timezone": {"type": "Europe/Paris"}})
        assert options.timezone.type == "Europe/Paris"
        assert options.timezone.validate_timezone is True
        assert options.storage.type == "memory"

    def test_set_options_model(self):
        """Only fields set on a model override the defaults."""
        config = ModuleConfiguration(ModuleOptions(timezone=TimezoneOptions(type="Asia/Tokyo", strict=True)))
        options = config.get_options()
        assert options.timezone.type == "Asia/Tokyo"
        assert options.timezone.strict is True
        assert options.storage.prefix == "cron:"

    def test_update_merges_onto_current(self):
        """update_options keeps earlier changes."""
        config = ModuleConfiguration({"timezone": {"type": "Europe/Paris", "strict": True}})
        options = config.update_options({"storage": {"type": "redis", "redis_url": "redis://cache:6379/1"}})
        assert options.timezone.type == "Europe/Paris"
        assert options.timezone.strict is True
        assert options.storage.type == "redis"
        assert options.storage.prefix == "cron:"

    def test_none_values_do_not_override(self):
        """None in an update keeps the existing value."""
        config = ModuleConfiguration({"tasks_dir": "jobs"})
        assert config.update_options({"tasks_dir": None}).tasks_dir == "jobs"

    def test_validate_alias(self):
        """The timezone flag is accepted under its short name."""
        config = ModuleConfiguration({"timezone": {"validate": False}})
        assert config.get_options().timezone.validate_timezone is False

    def test_reset(self):
        """reset restores the defaults."""
        config = ModuleConfiguration({"server_tasks": False})
        config.reset()
        assert config.get_options().model_dump() == ModuleOptions().model_dump()

    def test_invalid_options_raise(self):
        """Unknown storage types are rejected."""
        with pytest.raises(ValidationError):
            ModuleConfiguration({"storage": {"type": "mongodb"}})

    def test_validate_options(self):
        """Strict options must not switch zones."""
        config = ModuleConfiguration({"timezone": {"type": "UTC"}})
        assert config.validate_options({"timezone": {"type": "UTC", "strict": True}}) is True
        assert config.validate_options({"timezone": {"type": "Europe/Paris", "strict": True}}) is False
        assert config.validate_options({"timezone": {"type": "Europe/Paris", "strict": False}}) is True
        assert config.validate_options({"timezone": {"type": ""}}) is False

    def test_instances_are_independent(self):
        """Two configurations do not share state."""
        first = ModuleConfiguration({"timezone": {"type": "Asia/Tokyo"}})
        second = ModuleConfiguration()
        assert first.get_options().timezone.type == "Asia/Tokyo"
        assert second.get_options().timezone.type == "UTC"


class TestSettings:
    """Test environment settings."""

    def test_defaults(self, monkeypatch):
        """Defaults apply without environment overrides."""
        monkeypatch.delenv("CRONKEEPER_STORAGE_TYPE", raising=False)
        settings = Settings(_env_file=None)
        assert settings.storage_type == "memory"
        assert settings.log_level == "INFO"

    def test_environment(self, monkeypatch):
        """CRONKEEPER_ variables override the defaults."""
        monkeypatch.setenv("CRONKEEPER_STORAGE_TYPE", "redis")
        monkeypatch.setenv("CRONKEEPER_STORAGE_PREFIX", "app:")
        monkeypatch.setenv("CRONKEEPER_TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("CRONKEEPER_TIMEZONE_STRICT", "true")

        options = Settings(_env_file=None).to_module_options()
        assert options.storage.model_dump() == StorageOptions(type="redis", prefix="app:").model_dump()
        assert options.timezone.type == "Europe/Berlin"
        assert options.timezone.strict is True
