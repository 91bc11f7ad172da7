"""Tests for the command-line interface."""

import logging
import pytest
import sys
from pathlib import Path
from unittest.mock import patch

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

import main

# Unpatched reference for the logging tests
configure_logging = main.configure_logging


@pytest.fixture(autouse=True)
def no_logging_setup():
    with patch.object(main, "configure_logging"):
        yield


class TestCommands:
    """Test each subcommand."""

    def test_parse(self, capsys):
        """parse prints one line per field."""
        assert main.main(["parse", "*/15 9-10 * * 1-5"]) == 0
        out = capsys.readouterr().out
        assert "minute: 0, 15, 30, 45" in out
        assert "hour: 9, 10" in out
        assert "day_of_week: 1, 2, 3, 4, 5" in out

    def test_validate(self, capsys):
        """validate prints Valid or the list of errors."""
        assert main.main(["validate", "0 * * * *", "--timezone", "Europe/Paris"]) == 0
        assert capsys.readouterr().out.strip() == "Valid"

        assert main.main(["validate", "60 * * * *", "--timezone", "Mars/Olympus"]) == 1
        out = capsys.readouterr().out
        assert "- Invalid cron expression:" in out
        assert "- Invalid timezone: Mars/Olympus" in out

    def test_next(self, capsys):
        """next lists upcoming runs in UTC and the requested zone."""
        assert main.main(["next", "0 9 * * *", "--timezone", "Asia/Tokyo", "--count", "2"]) == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 2
        assert all("T00:00:00+00:00" in line for line in lines)
        assert all("T09:00:00+09:00 Asia/Tokyo" in line for line in lines)

    def test_next_uses_configured_timezone(self, capsys, monkeypatch):
        """Without --timezone the module timezone from settings is used."""
        monkeypatch.setattr(main.settings, "timezone", "Asia/Tokyo")
        monkeypatch.setattr(main.settings, "timezone_strict", False)

        assert main.main(["next", "0 9 * * *", "--count", "1"]) == 0
        assert "T09:00:00+09:00 Asia/Tokyo" in capsys.readouterr().out

    def test_strict_timezone_overrides_flag(self, capsys, monkeypatch):
        """A strict module timezone wins over --timezone."""
        monkeypatch.setattr(main.settings, "timezone", "Asia/Tokyo")
        monkeypatch.setattr(main.settings, "timezone_strict", True)

        assert main.main(["next", "0 9 * * *", "--timezone", "Europe/Paris", "--count", "1"]) == 0
        out = capsys.readouterr().out
        assert "Asia/Tokyo" in out
        assert "Europe/Paris" not in out

    def test_validate_rejects_zone_conflicting_with_strict(self, capsys, monkeypatch):
        """validate reports zones a strict configuration would override."""
        monkeypatch.setattr(main.settings, "timezone", "UTC")
        monkeypatch.setattr(main.settings, "timezone_strict", True)

        assert main.main(["validate", "0 * * * *", "--timezone", "Europe/Paris"]) == 1
        assert "- Timezone Europe/Paris conflicts with strict module timezone UTC" in capsys.readouterr().out
        assert main.main(["validate", "0 * * * *", "--timezone", "UTC"]) == 0

    def test_describe(self, capsys):
        """describe prints the description."""
        assert main.main(["describe", "* * * * *"]) == 0
        assert capsys.readouterr().out.strip() == "Every minute"


class TestErrors:
    """Test error exits."""

    def test_parse_error(self, capsys):
        """Parse errors go to stderr with exit code 1."""
        assert main.main(["parse", "* * *"]) == 1
        assert capsys.readouterr().err.startswith("Error: Invalid number of fields")

    def test_bad_timezone(self, capsys):
        """Unknown zones exit with 1."""
        assert main.main(["next", "* * * * *", "--timezone", "Nowhere/City"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_impossible_schedule(self):
        """Schedules that never run exit with 1."""
        assert main.main(["next", "0 0 31 2 *"]) == 1

    def test_missing_command(self):
        """A subcommand is required."""
        with pytest.raises(SystemExit):
            main.main([])


class TestConfigureLogging:
    """Test logging setup."""

    def test_file_handler(self, tmp_path, monkeypatch):
        """A log file adds a file handler and creates its directory."""
        log_file = tmp_path / "logs" / "cronkeeper.log"
        monkeypatch.setattr(main.settings, "log_file", str(log_file))

        with patch("logging.basicConfig") as basic_config:
            configure_logging("debug")

        kwargs = basic_config.call_args.kwargs
        assert kwargs["level"] == logging.DEBUG
        assert any(isinstance(h, logging.FileHandler) for h in kwargs["handlers"])
        assert log_file.parent.is_dir()
        for handler in kwargs["handlers"]:
            handler.close()
