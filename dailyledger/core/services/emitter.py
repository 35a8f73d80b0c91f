"""Projection of the reconciled set into combined, daily and ticker views."""

from __future__ import annotations

import contextvars
import re
from collections import defaultdict
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from dailyledger.core.config import LedgerSettings
from dailyledger.core.data.codec import write_view
from dailyledger.core.data.ledger import daily_filename, parse_daily_filename
from dailyledger.core.exceptions import OutputWriteError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import TradeEntry

ViewWriter = Callable[[Path, Sequence[TradeEntry]], int]

log = get_logger("emitter")

_UNSAFE_SYMBOL = re.compile(r"[\\/\x00]|^\.")


@dataclass(slots=True, frozen=True)
class FailedView:
    """A daily or ticker file that could not be written."""

    view: str
    path: Path
    message: str


@dataclass(slots=True)
class EmitReport:
    """Files produced by one emission."""

    combined_path: Path
    combined_rows: int = 0
    daily_files: list[Path] = field(default_factory=list)
    ticker_files: list[Path] = field(default_factory=list)
    failed: list[FailedView] = field(default_factory=list)
    pruned: list[Path] = field(default_factory=list)


def _ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise OutputWriteError(f"Failed to create output directory: {exc}", str(path)) from exc


class ViewEmitter:
    """Write the three views; every file is a pure function of its entry subset."""

    def __init__(self, settings: LedgerSettings, *, writer: ViewWriter | None = None) -> None:
        self._settings = settings
        self._writer: ViewWriter = writer or write_view

    def emit(self, entries: Sequence[TradeEntry]) -> EmitReport:
        """Write all views for ``entries``.

        Raises:
            OutputWriteError: when the output root, a view directory or the
                combined file cannot be written.
        """

        settings = self._settings
        _ensure_directory(settings.output_dir)
        report = EmitReport(combined_path=settings.combined_path)

        _ensure_directory(settings.combined_dir)
        try:
            report.combined_rows = self._writer(settings.combined_path, entries)
        except OSError as exc:
            raise OutputWriteError(f"Failed to write combined view: {exc}", str(settings.combined_path)) from exc
        log.bind(path=str(settings.combined_path), rows=report.combined_rows).info("saved combined view")

        by_date: dict[date, list[TradeEntry]] = defaultdict(list)
        by_symbol: dict[str, list[TradeEntry]] = defaultdict(list)
        for entry in entries:
            by_date[entry.date].append(entry)
            by_symbol[entry.symbol].append(entry)

        _ensure_directory(settings.daily_dir)
        daily_jobs = [
            (settings.daily_dir / daily_filename(trade_date, settings.daily_prefix), sorted(rows, key=lambda e: e.symbol))
            for trade_date, rows in sorted(by_date.items())
        ]
        report.daily_files = self._write_many("daily", daily_jobs, report)
        self._prune(
            "daily",
            settings.daily_dir,
            {path for path, _rows in daily_jobs},
            lambda name: parse_daily_filename(name, settings.daily_prefix) is not None,
            report,
        )

        _ensure_directory(settings.ticker_dir)
        ticker_jobs: list[tuple[Path, list[TradeEntry]]] = []
        for symbol, rows in sorted(by_symbol.items()):
            if not symbol or _UNSAFE_SYMBOL.search(symbol):
                log.bind(view="ticker", symbol=symbol).warning("skipping ticker view for unsafe symbol {!r}", symbol)
                report.failed.append(
                    FailedView(view="ticker", path=settings.ticker_dir, message=f"unsafe ticker symbol {symbol!r}")
                )
                continue
            ticker_jobs.append((settings.ticker_dir / f"{symbol}{settings.ticker_suffix}", sorted(rows, key=lambda e: e.date)))
        report.ticker_files = self._write_many("ticker", ticker_jobs, report)
        self._prune(
            "ticker",
            settings.ticker_dir,
            {path for path, _rows in ticker_jobs},
            lambda name: name.endswith(settings.ticker_suffix) and not name.startswith("."),
            report,
        )

        log.bind(
            daily=len(report.daily_files),
            ticker=len(report.ticker_files),
            pruned=len(report.pruned),
            failed=len(report.failed),
        ).info("views generated")
        return report

    def _prune(
        self,
        view: str,
        directory: Path,
        expected: set[Path],
        matches: Callable[[str], bool],
        report: EmitReport,
    ) -> None:
        """Remove view files in ``directory`` that the current entry set no longer produces."""

        for path in sorted(directory.iterdir()):
            if path in expected or not path.is_file() or not matches(path.name):
                continue
            try:
                path.unlink()
            except OSError as exc:
                log.bind(view=view, path=str(path)).error("error removing stale {} view: {}", view, exc)
                report.failed.append(FailedView(view=view, path=path, message=str(exc)))
                continue
            report.pruned.append(path)
            log.bind(view=view, path=str(path)).info("removed stale view")

    def _write_many(
        self,
        view: str,
        jobs: list[tuple[Path, list[TradeEntry]]],
        report: EmitReport,
    ) -> list[Path]:
        workers = min(self._settings.emit_workers, len(jobs)) if jobs else 1
        if workers > 1:
            parent = contextvars.copy_context()
            with ThreadPoolExecutor(max_workers=workers) as executor:
                outcomes = list(executor.map(lambda job: parent.copy().run(self._write_one, view, *job), jobs))
        else:
            outcomes = [self._write_one(view, path, rows) for path, rows in jobs]

        written: list[Path] = []
        for (path, _rows), failure in zip(jobs, outcomes):
            if failure is None:
                written.append(path)
            else:
                report.failed.append(failure)
        return written

    def _write_one(self, view: str, path: Path, rows: list[TradeEntry]) -> FailedView | None:
        try:
            count = self._writer(path, rows)
        except OSError as exc:
            log.bind(view=view, path=str(path)).error("error saving {} view: {}", view, exc)
            return FailedView(view=view, path=path, message=str(exc))
        log.bind(view=view, path=str(path), record_count=count).debug("saved view")
        return None


__all__ = ["EmitReport", "FailedView", "ViewEmitter", "ViewWriter"]
