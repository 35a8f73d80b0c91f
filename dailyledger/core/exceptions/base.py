"""Core exception types raised by the ledger engine."""

from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base error for every failure raised by dailyledger."""

    def __init__(
        self,
        message: str,
        error_code: str = "GENERAL_ERROR",
        details: dict[str, Any] | None = None,
    ):
        """Initialise the error.

        Args:
            message: Human readable description.
            error_code: Stable machine readable code.
            details: Extra context attached to the error.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class ConfigurationError(LedgerError):
    """Raised when settings cannot be loaded or fail validation."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class SourceDirectoryError(LedgerError):
    """Raised when the source directory is missing or cannot be listed."""

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["path"] = path
        super().__init__(message, "SOURCE_DIRECTORY_ERROR", super_details)
        self.path = path


class OutputWriteError(LedgerError):
    """Raised when an output directory or view file cannot be written."""

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["path"] = path
        super().__init__(message, "OUTPUT_WRITE_ERROR", super_details)
        self.path = path


class ReportParseError(LedgerError):
    """Raised by a report parser when a source file cannot be read."""

    def __init__(self, message: str, path: str, details: dict[str, Any] | None = None):
        super_details = details or {}
        super_details["path"] = path
        super().__init__(message, "REPORT_PARSE_ERROR", super_details)
        self.path = path


class HistoryRowError(LedgerError):
    """Raised when a row of the combined view cannot be decoded."""

    def __init__(
        self,
        message: str,
        line_number: int | None = None,
        details: dict[str, Any] | None = None,
    ):
        super_details = details or {}
        if line_number is not None:
            super_details["line_number"] = line_number
        super().__init__(message, "HISTORY_ROW_ERROR", super_details)
        self.line_number = line_number


class DuplicateEntryError(LedgerError):
    """Raised when two real entries claim the same (symbol, date) key."""

    def __init__(self, message: str, symbol: str, date: str):
        super().__init__(message, "DUPLICATE_ENTRY", {"symbol": symbol, "date": date})
        self.symbol = symbol
        self.date = date


class DuplicateSourceDateError(LedgerError):
    """Raised when several source files claim the same trading date."""

    def __init__(self, message: str, date: str, filenames: list[str]):
        super().__init__(message, "DUPLICATE_SOURCE_DATE", {"date": date, "filenames": filenames})
        self.date = date
        self.filenames = filenames


class ProcessingCancelledError(LedgerError):
    """Raised when a run is stopped between two pipeline phases."""

    def __init__(self, phase: str):
        super().__init__(f"processing cancelled before phase '{phase}'", "PROCESSING_CANCELLED", {"phase": phase})
        self.phase = phase


__all__ = [
    "ConfigurationError",
    "DuplicateEntryError",
    "DuplicateSourceDateError",
    "HistoryRowError",
    "LedgerError",
    "OutputWriteError",
    "ProcessingCancelledError",
    "ReportParseError",
    "SourceDirectoryError",
]
