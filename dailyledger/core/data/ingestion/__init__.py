"""Source report ingestion."""

from __future__ import annotations

from dailyledger.core.data.ingestion.parser import ReportParser, WorkbookReportParser
from dailyledger.core.data.ingestion.service import (
    FileCallback,
    IngestionFailure,
    IngestionResult,
    ingest_sources,
)

__all__ = [
    "FileCallback",
    "IngestionFailure",
    "IngestionResult",
    "ReportParser",
    "WorkbookReportParser",
    "ingest_sources",
]
