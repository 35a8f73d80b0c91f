"""Ingestion adapter stamping parsed report rows with their source date."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter

from dailyledger.core.exceptions import ReportParseError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import SourceFileRef, TradeEntry

from .parser import ReportParser

FileCallback = Callable[[int, int, SourceFileRef], None]

log = get_logger("ingestion")


@dataclass(slots=True, frozen=True)
class IngestionFailure:
    """A source file the parser could not read."""

    filename: str
    error_code: str
    message: str


@dataclass(slots=True)
class IngestionResult:
    """Entries ingested from one batch of source files."""

    entries: list[TradeEntry] = field(default_factory=list)
    processed: list[str] = field(default_factory=list)
    failures: list[IngestionFailure] = field(default_factory=list)
    duration_ms: float = 0.0


def ingest_sources(
    refs: Sequence[SourceFileRef],
    input_dir: Path,
    parser: ReportParser,
    *,
    on_file: FileCallback | None = None,
) -> IngestionResult:
    """Parse every referenced source file and date-stamp its rows.

    A file the parser rejects is logged and recorded in ``failures``; the
    remaining files are still ingested.
    """

    start = perf_counter()
    result = IngestionResult()
    total = len(refs)
    for index, ref in enumerate(refs, start=1):
        if on_file is not None:
            on_file(index, total, ref)
        file_log = log.bind(filename=ref.filename, current=index, total=total)
        file_log.info("processing file")
        try:
            rows = parser.parse(input_dir / ref.filename)
        except ReportParseError as exc:
            file_log.bind(error_code=exc.error_code).error("error parsing file: {}", exc.message)
            result.failures.append(IngestionFailure(ref.filename, exc.error_code, exc.message))
            continue

        entries = [TradeEntry.from_raw(row, ref.date) for row in rows]
        result.entries.extend(entries)
        result.processed.append(ref.filename)
        file_log.bind(record_count=len(entries)).info("records processed from file")

    result.duration_ms = (perf_counter() - start) * 1000
    return result


__all__ = ["FileCallback", "IngestionFailure", "IngestionResult", "ingest_sources"]
