"""Tests for settings loading, validation and persistence."""

from pathlib import Path

import pytest
import toml

from dailyledger.core.config import LedgerSettings, LoggingSettings, build_settings
from dailyledger.core.exceptions import ConfigurationError


class TestLedgerSettings:
    """Test LedgerSettings defaults and derived paths."""

    def test_defaults(self):
        """Defaults follow the established output layout."""
        settings = LedgerSettings()

        assert settings.input_dir == Path("data/downloads")
        assert settings.combined_path == Path("data/reports/combined/isx_combined_data.csv")
        assert settings.daily_dir == Path("data/reports/daily")
        assert settings.ticker_dir == Path("data/reports/ticker")
        assert settings.summary_csv_path == Path("data/reports/summary/ticker_summary.csv")
        assert settings.summary_json_path == Path("data/reports/summary/ticker_summary.json")
        assert settings.emit_workers == 1
        assert settings.strict_duplicates is False
        assert settings.write_summary is True

    def test_environment_overrides(self, monkeypatch):
        """DAILYLEDGER_* variables override defaults, including nested logging values."""
        monkeypatch.setenv("DAILYLEDGER_OUTPUT_DIR", "/srv/reports")
        monkeypatch.setenv("DAILYLEDGER_EMIT_WORKERS", "4")
        monkeypatch.setenv("DAILYLEDGER_LOGGING__LEVEL", "DEBUG")

        settings = LedgerSettings()

        assert settings.output_dir == Path("/srv/reports")
        assert settings.emit_workers == 4
        assert settings.logging.level == "DEBUG"

    def test_logging_settings_to_log_config(self):
        """Logging settings translate into a structured log configuration."""
        config = LoggingSettings(level="WARNING", file_path=Path("logs/run.jsonl")).to_log_config()

        assert config.level == "WARNING"
        assert config.file_output is True
        assert config.file_path == str(Path("logs/run.jsonl"))
        assert config.serialize is False


class TestBuildSettings:
    """Test build_settings validation."""

    def test_none_values_are_ignored(self):
        """None means 'not provided' so defaults survive."""
        settings = build_settings(input_dir=None, emit_workers=None, strict_history=True)

        assert settings.input_dir == Path("data/downloads")
        assert settings.strict_history is True

    @pytest.mark.parametrize(
        "values",
        [
            {"emit_workers": 0},
            {"summary_recent_days": -1},
            {"daily_prefix": "  "},
            {"source_suffix": ""},
            {"logging": {"level": "LOUD"}},
        ],
    )
    def test_invalid_values_raise_configuration_error(self, values):
        """Validation failures surface as ConfigurationError."""
        with pytest.raises(ConfigurationError) as excinfo:
            build_settings(**values)

        assert excinfo.value.error_code == "CONFIGURATION_ERROR"
        assert excinfo.value.details["errors"]


class TestSettingsFile:
    """Test TOML persistence."""

    def test_save_and_load_round_trip(self, tmp_path):
        """Saved settings load back unchanged."""
        path = tmp_path / "conf" / "dailyledger.toml"
        saved = LedgerSettings(input_dir=tmp_path / "in", output_dir=tmp_path / "out", emit_workers=3)

        saved.save_to_file(path)
        loaded = LedgerSettings.load_from_file(path)

        assert loaded.input_dir == saved.input_dir
        assert loaded.output_dir == saved.output_dir
        assert loaded.emit_workers == 3

    def test_overrides_take_precedence(self, tmp_path):
        """Keyword overrides win over file values; None overrides are ignored."""
        path = tmp_path / "dailyledger.toml"
        path.write_text(toml.dumps({"output_dir": "from-file", "strict_history": True}), encoding="utf-8")

        loaded = LedgerSettings.load_from_file(path, output_dir=tmp_path / "cli", strict_history=None)

        assert loaded.output_dir == tmp_path / "cli"
        assert loaded.strict_history is True

    def test_missing_file(self, tmp_path):
        """A missing file is a configuration error."""
        with pytest.raises(ConfigurationError, match="not found"):
            LedgerSettings.load_from_file(tmp_path / "absent.toml")

    def test_malformed_file(self, tmp_path):
        """Unparsable TOML is a configuration error."""
        path = tmp_path / "broken.toml"
        path.write_text("output_dir = [unclosed", encoding="utf-8")

        with pytest.raises(ConfigurationError, match="Unable to read"):
            LedgerSettings.load_from_file(path)
