"""Tests for the LedgerError hierarchy."""

from __future__ import annotations

import pytest

from dailyledger.core.exceptions import (
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


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (ConfigurationError("bad"), "CONFIGURATION_ERROR"),
        (SourceDirectoryError("missing", "/in"), "SOURCE_DIRECTORY_ERROR"),
        (OutputWriteError("denied", "/out"), "OUTPUT_WRITE_ERROR"),
        (ReportParseError("corrupt", "/in/a.xlsx"), "REPORT_PARSE_ERROR"),
        (HistoryRowError("short row", 4), "HISTORY_ROW_ERROR"),
        (DuplicateEntryError("dup", "BBOB", "2024-03-05"), "DUPLICATE_ENTRY"),
        (DuplicateSourceDateError("dup", "2024-03-05", ["a", "b"]), "DUPLICATE_SOURCE_DATE"),
        (ProcessingCancelledError("emit"), "PROCESSING_CANCELLED"),
    ],
)
def test_error_codes(error: LedgerError, code: str) -> None:
    assert isinstance(error, LedgerError)
    assert error.error_code == code
    assert str(error) == error.message


def test_path_errors_record_path_in_details() -> None:
    error = OutputWriteError("denied", "/out/daily", details={"view": "daily"})

    assert error.path == "/out/daily"
    assert error.details == {"view": "daily", "path": "/out/daily"}


def test_history_row_error_line_number_is_optional() -> None:
    assert HistoryRowError("bad").details == {}
    assert HistoryRowError("bad", 9).details == {"line_number": 9}


def test_cancelled_error_names_phase() -> None:
    error = ProcessingCancelledError("ingest")

    assert error.phase == "ingest"
    assert "ingest" in error.message
