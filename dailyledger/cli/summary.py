"""``dailyledger summary``: rebuild the ticker summary from the combined view."""

from __future__ import annotations

from pathlib import Path

import typer

from dailyledger.core.data import load_history
from dailyledger.core.exceptions import LedgerError
from dailyledger.core.services import TickerSummarizer

from .constants import FATAL_EXIT_CODE
from .utils import configure_command_logging, emit_error, prepare_output, resolve_settings

TICKER_COLUMNS = [
    "ticker",
    "company_name",
    "last_price",
    "last_date",
    "trading_days",
    "change",
    "change_percent",
    "last_trading_status",
]


def register(app: typer.Typer) -> None:
    """Register the summary command on the provided application."""

    app.command("summary")(summary_command)


def summary_command(
    ctx: typer.Context,
    output_dir: Path | None = typer.Option(None, "--out", help="Root directory of the emitted views."),
    config: Path | None = typer.Option(None, "--config", help="TOML settings file."),
    extended: bool = typer.Option(False, "--extended", help="Include aggregate and 52-week metrics."),
) -> None:
    """Regenerate summary/ticker_summary.csv and .json from the combined view."""

    settings = resolve_settings(config, output_dir=output_dir, summary_extended=True if extended else None)
    configure_command_logging(ctx, settings)
    formatter, stream, stack, _ = prepare_output(ctx)

    with stack:
        if not settings.combined_path.exists():
            emit_error(
                "Combined view not found; run 'dailyledger process' first.",
                "COMBINED_VIEW_MISSING",
                details={"path": str(settings.combined_path)},
            )
            raise typer.Exit(code=FATAL_EXIT_CODE)

        summarizer = TickerSummarizer(
            max_recent=settings.summary_recent_days,
            extended=settings.summary_extended,
        )
        try:
            history = load_history(settings.combined_path, strict=settings.strict_history)
            summaries = summarizer.summarize(history.entries)
            summarizer.write_csv(settings.summary_csv_path, summaries)
            summarizer.write_json(settings.summary_json_path, summaries)
        except LedgerError as error:
            emit_error(error.message, error.error_code, details=error.details)
            raise typer.Exit(code=FATAL_EXIT_CODE) from error

        rows = [{column: getattr(summary, column) for column in TICKER_COLUMNS} for summary in summaries]
        formatter.render(rows, stream=stream, columns=TICKER_COLUMNS, title="ticker summary")


__all__ = ["TICKER_COLUMNS", "register", "summary_command"]
