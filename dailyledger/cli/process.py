"""``dailyledger process``: run the incremental reconciliation pipeline."""

from __future__ import annotations

import signal
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from pathlib import Path
from typing import TextIO

import typer

from dailyledger.core.config import LedgerSettings
from dailyledger.core.exceptions import LedgerError, ProcessingCancelledError
from dailyledger.core.pipeline import LedgerPipeline, ProgressCallback, ProgressEvent, ProgressKind, RunReport, StopCheck

from .constants import CANCELLED_EXIT_CODE, FATAL_EXIT_CODE
from .formatters import OutputFormatter
from .utils import configure_command_logging, emit_error, prepare_output, resolve_settings

SUMMARY_COLUMNS = ["metric", "value"]
FAILURE_COLUMNS = ["filename", "error_code", "message"]
FAILED_VIEW_COLUMNS = ["view", "path", "message"]


def register(app: typer.Typer) -> None:
    """Register the process command on the provided application."""

    app.command("process")(process_command)


def build_pipeline(
    settings: LedgerSettings,
    *,
    progress: ProgressCallback,
    should_stop: StopCheck,
) -> LedgerPipeline:
    """Factory hook for obtaining a pipeline instance."""

    return LedgerPipeline(settings, progress=progress, should_stop=should_stop)


def process_command(
    ctx: typer.Context,
    input_dir: Path | None = typer.Option(None, "--in", help="Directory holding the source reports."),
    output_dir: Path | None = typer.Option(None, "--out", help="Root directory of the emitted views."),
    full: bool = typer.Option(False, "--full", help="Ignore existing views and reprocess every source file."),
    config: Path | None = typer.Option(None, "--config", help="TOML settings file."),
    workers: int | None = typer.Option(None, "--workers", help="Threads used to write daily and ticker files."),
    no_summary: bool = typer.Option(False, "--no-summary", help="Skip the ticker summary."),
    strict: bool = typer.Option(False, "--strict", help="Fail on duplicates and unparsable history rows."),
) -> None:
    """Ingest new source reports and regenerate the combined, daily and ticker views."""

    settings = resolve_settings(
        config,
        input_dir=input_dir,
        output_dir=output_dir,
        emit_workers=workers,
        write_summary=False if no_summary else None,
        strict_duplicates=True if strict else None,
        strict_history=True if strict else None,
    )
    configure_command_logging(ctx, settings)
    formatter, stream, stack, _ = prepare_output(ctx)

    with stack, _interrupt_flag() as interrupted:
        pipeline = build_pipeline(
            settings,
            progress=_progress_printer(formatter, stream),
            should_stop=interrupted.is_set,
        )
        try:
            report = pipeline.run(force_full=full)
        except ProcessingCancelledError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=CANCELLED_EXIT_CODE) from error
        except LedgerError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=FATAL_EXIT_CODE) from error

        _render_report(formatter, stream, report)


def _progress_printer(formatter: OutputFormatter, stream: TextIO) -> ProgressCallback:
    def _print(event: ProgressEvent) -> None:
        if event.kind is ProgressKind.DISCOVERED:
            formatter.message(f"Found {event.total} files", stream=stream)
        elif event.kind is ProgressKind.FILE:
            formatter.message(f"Processing file {event.index} of {event.total}: {event.filename}", stream=stream)
        elif event.kind is ProgressKind.COMPLETE:
            formatter.message(f"Processing complete: {event.total} files", stream=stream)
            formatter.message("All files processed", stream=stream)

    return _print


@contextmanager
def _interrupt_flag() -> Iterator[threading.Event]:
    """Turn the first Ctrl-C into a cancellation request honoured between phases."""

    flag = threading.Event()
    if threading.current_thread() is not threading.main_thread():
        yield flag
        return

    def _handler(signum: int, frame: object) -> None:
        if flag.is_set():
            raise KeyboardInterrupt
        flag.set()

    previous = signal.signal(signal.SIGINT, _handler)
    try:
        yield flag
    finally:
        signal.signal(signal.SIGINT, previous)


def _render_report(formatter: OutputFormatter, stream: TextIO, report: RunReport) -> None:
    formatter.render(_summary_rows(report), stream=stream, columns=SUMMARY_COLUMNS, title="run")
    if report.failures:
        rows = [
            {"filename": failure.filename, "error_code": failure.error_code, "message": failure.message}
            for failure in report.failures
        ]
        formatter.render(rows, stream=stream, columns=FAILURE_COLUMNS, title="failed sources")
    if report.emit is not None and report.emit.failed:
        rows = [
            {"view": failed.view, "path": str(failed.path), "message": failed.message}
            for failed in report.emit.failed
        ]
        formatter.render(rows, stream=stream, columns=FAILED_VIEW_COLUMNS, title="failed views")


def _summary_rows(report: RunReport) -> list[Mapping[str, object]]:
    rows: list[Mapping[str, object]] = [
        {"metric": "run_id", "value": report.run_id},
        {"metric": "discovered", "value": report.discovered},
        {"metric": "processed", "value": len(report.processed)},
        {"metric": "already_covered", "value": report.already_covered},
        {"metric": "failed", "value": len(report.failures)},
        {"metric": "history_loaded", "value": report.history_loaded},
        {"metric": "history_purged", "value": report.history_purged},
    ]
    if report.stats is not None:
        rows += [
            {"metric": "total_records", "value": report.stats.total_records},
            {"metric": "active_records", "value": report.stats.active_records},
            {"metric": "forward_filled", "value": report.stats.forward_filled},
            {"metric": "symbols", "value": report.stats.symbols},
            {"metric": "dates", "value": report.stats.dates},
        ]
    if report.emit is not None:
        rows += [
            {"metric": "combined_rows", "value": report.emit.combined_rows},
            {"metric": "daily_files", "value": len(report.emit.daily_files)},
            {"metric": "ticker_files", "value": len(report.emit.ticker_files)},
            {"metric": "pruned_views", "value": len(report.emit.pruned)},
            {"metric": "failed_views", "value": len(report.emit.failed)},
        ]
    rows.append({"metric": "summary_written", "value": report.summary_written})
    rows.append({"metric": "duration_ms", "value": round(report.duration_ms, 1)})
    return rows


__all__ = ["FAILURE_COLUMNS", "SUMMARY_COLUMNS", "build_pipeline", "process_command", "register"]
