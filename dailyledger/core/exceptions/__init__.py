"""Exception handling module."""

from dailyledger.core.exceptions.base import (
    ConfigurationError,
    DuplicateEntryError,
    DuplicateSourceDateError,
    HistoryRowError,
    LedgerError,
    OutputWriteError,
    ProcessingCancelledError,
    ReportParseError,
    SourceDirectoryError,
)

__all__ = [
    "LedgerError",
    "ConfigurationError",
    "SourceDirectoryError",
    "OutputWriteError",
    "ReportParseError",
    "HistoryRowError",
    "DuplicateEntryError",
    "DuplicateSourceDateError",
    "ProcessingCancelledError",
]
