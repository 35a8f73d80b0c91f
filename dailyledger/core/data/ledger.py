"""Read back previously emitted views: historical entries and covered dates."""

from __future__ import annotations

import csv
import os
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path

from dailyledger.core.exceptions import HistoryRowError, LedgerError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import TradeEntry

from .codec import decode_row

log = get_logger("ledger")


@dataclass(slots=True)
class HistoryLoad:
    """Entries recovered from the combined view plus row-level diagnostics."""

    entries: list[TradeEntry] = field(default_factory=list)
    rejected_rows: int = 0
    degraded_rows: int = 0
    source_exists: bool = False


def load_history(combined_path: Path, *, strict: bool = False) -> HistoryLoad:
    """Parse the combined view at ``combined_path`` back into trade entries.

    A missing file yields an empty result. Rows that cannot be decoded are
    skipped and counted; see :func:`dailyledger.core.data.codec.decode_row` for
    the lossy versus strict cell handling.
    """

    result = HistoryLoad()
    if not combined_path.exists():
        return result
    result.source_exists = True

    try:
        with open(combined_path, encoding="utf-8", newline="") as stream:
            for line_number, row in enumerate(csv.reader(stream), start=1):
                if line_number == 1 or not row:
                    continue
                _collect_row(result, row, strict=strict, line_number=line_number)
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise LedgerError(
            f"Unable to read combined view: {exc}",
            "HISTORY_READ_ERROR",
            {"path": str(combined_path)},
        ) from exc

    log.bind(
        count=len(result.entries),
        rejected=result.rejected_rows,
        degraded=result.degraded_rows,
    ).info("loaded existing combined view")
    return result


def _collect_row(result: HistoryLoad, row: list[str], *, strict: bool, line_number: int) -> None:
    try:
        decoded = decode_row(row, strict=strict, line_number=line_number)
    except HistoryRowError as exc:
        result.rejected_rows += 1
        log.bind(line_number=line_number, error_code=exc.error_code).warning(
            "skipping malformed history row: {}", exc.message
        )
        return
    if decoded.degraded_fields:
        result.degraded_rows += 1
        log.bind(line_number=line_number, columns=list(decoded.degraded_fields)).warning(
            "history row had unparsable cells, defaulted to zero"
        )
    result.entries.append(decoded.entry)


def daily_filename(trade_date: date, prefix: str) -> str:
    """Return the canonical daily view file name for ``trade_date``."""

    return f"{prefix}{trade_date.strftime('%Y_%m_%d')}.csv"


def parse_daily_filename(name: str, prefix: str) -> date | None:
    """Decode the date a daily view file name represents, or ``None``."""

    if not (name.startswith(prefix) and name.endswith(".csv")):
        return None
    token = name[len(prefix) : -len(".csv")]
    try:
        return datetime.strptime(token, "%Y_%m_%d").date()
    except ValueError:
        return None


def scan_coverage(daily_dir: Path, prefix: str) -> set[date]:
    """Collect the dates already materialised as daily views under ``daily_dir``."""

    covered: set[date] = set()
    if not daily_dir.is_dir():
        return covered
    for root, _dirs, files in os.walk(daily_dir):
        for name in files:
            trade_date = parse_daily_filename(name, prefix)
            if trade_date is None:
                if name.startswith(prefix):
                    log.bind(filename=name, directory=root).debug("ignoring undecodable daily file name")
                continue
            covered.add(trade_date)
    log.bind(count=len(covered)).info("found existing daily views")
    return covered


__all__ = [
    "HistoryLoad",
    "daily_filename",
    "load_history",
    "parse_daily_filename",
    "scan_coverage",
]
