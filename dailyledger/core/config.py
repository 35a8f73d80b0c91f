"""
Configuration management for dailyledger.

Settings are read from ``DAILYLEDGER_*`` environment variables, an optional
``.env`` file and an optional TOML file. The resulting :class:`LedgerSettings`
object is passed explicitly to every engine component.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import toml
from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from dailyledger.core.exceptions import ConfigurationError
from dailyledger.core.logging import LOG_LEVELS, LogConfig


class LoggingSettings(BaseModel):
    """Configuration for logging."""

    level: str = Field("INFO", description="Log level")
    file_path: Path | None = Field(None, description="JSON lines log file")
    serialize: bool = Field(False, description="Emit JSON lines on the console")

    @field_validator("level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"unknown log level {value!r}")
        return level

    def to_log_config(self) -> LogConfig:
        return LogConfig(
            level=self.level,
            serialize=self.serialize,
            file_output=self.file_path is not None,
            file_path=str(self.file_path) if self.file_path else None,
        )


class LedgerSettings(BaseSettings):
    """Main dailyledger configuration."""

    model_config = SettingsConfigDict(
        env_prefix="DAILYLEDGER_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Locations
    input_dir: Path = Field(Path("data/downloads"), description="Directory holding source reports")
    output_dir: Path = Field(Path("data/reports"), description="Root of the emitted views")

    # Source naming
    source_suffix: str = Field(".xlsx", description="Suffix every source report carries")
    excluded_prefix: str = Field("~$", description="Prefix marking transient lock files")

    # Output naming
    combined_dirname: str = Field("combined", description="Sub-directory of the combined view")
    daily_dirname: str = Field("daily", description="Sub-directory of the daily views")
    ticker_dirname: str = Field("ticker", description="Sub-directory of the ticker views")
    summary_dirname: str = Field("summary", description="Sub-directory of the ticker summary")
    combined_filename: str = Field("isx_combined_data.csv", description="Combined view file name")
    daily_prefix: str = Field("isx_daily_", description="Prefix of daily view file names")
    ticker_suffix: str = Field("_trading_history.csv", description="Suffix of ticker view file names")
    summary_filename: str = Field("ticker_summary", description="Ticker summary base name")

    # Behaviour
    strict_duplicates: bool = Field(False, description="Fail on duplicate dates or (symbol, date) keys")
    strict_history: bool = Field(False, description="Reject history rows with unparsable fields")
    emit_workers: int = Field(1, description="Threads used to write daily and ticker files")
    write_summary: bool = Field(True, description="Write the ticker summary after emission")
    summary_recent_days: int = Field(10, description="Number of recent closes in the summary")
    summary_extended: bool = Field(False, description="Include aggregate metrics in the summary")

    logging: LoggingSettings = Field(default_factory=lambda: LoggingSettings(), description="Logging configuration")

    @field_validator("emit_workers", "summary_recent_days")
    @classmethod
    def _positive(cls, value: int) -> int:
        if value < 1:
            raise ValueError("must be at least 1")
        return value

    @field_validator("source_suffix", "combined_filename", "daily_prefix", "ticker_suffix")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value

    @property
    def combined_dir(self) -> Path:
        return self.output_dir / self.combined_dirname

    @property
    def combined_path(self) -> Path:
        return self.combined_dir / self.combined_filename

    @property
    def daily_dir(self) -> Path:
        return self.output_dir / self.daily_dirname

    @property
    def ticker_dir(self) -> Path:
        return self.output_dir / self.ticker_dirname

    @property
    def summary_csv_path(self) -> Path:
        return self.output_dir / self.summary_dirname / f"{self.summary_filename}.csv"

    @property
    def summary_json_path(self) -> Path:
        return self.output_dir / self.summary_dirname / f"{self.summary_filename}.json"

    @classmethod
    def load_from_file(cls, config_path: Path, **overrides: Any) -> LedgerSettings:
        """Load settings from a TOML file, applying keyword overrides on top."""

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}", {"path": str(config_path)})
        try:
            config_data = toml.load(config_path)
        except (toml.TomlDecodeError, OSError) as exc:
            raise ConfigurationError(f"Unable to read configuration file: {exc}", {"path": str(config_path)}) from exc
        config_data.update({key: value for key, value in overrides.items() if value is not None})
        return build_settings(**config_data)

    def save_to_file(self, config_path: Path) -> None:
        """Save settings to a TOML file."""

        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            toml.dump(self.model_dump(mode="json", exclude_none=True), f)


def build_settings(**values: Any) -> LedgerSettings:
    """Instantiate settings, converting validation failures into :class:`ConfigurationError`."""

    try:
        return LedgerSettings(**{key: value for key, value in values.items() if value is not None})
    except ValidationError as exc:
        raise ConfigurationError("Invalid dailyledger settings", {"errors": exc.errors(include_url=False)}) from exc


__all__ = ["LedgerSettings", "LoggingSettings", "build_settings"]
