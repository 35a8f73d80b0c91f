"""Main entry point for the dailyledger command line interface."""

from __future__ import annotations

from pathlib import Path

import typer

from dailyledger.core.logging import LOG_LEVELS

from .constants import VALIDATION_EXIT_CODE
from .formatters import create_formatter
from .process import register as register_process_command
from .summary import register as register_summary_command
from .utils import emit_error


def create_app() -> typer.Typer:
    """Create a Typer application instance for dailyledger."""

    app = typer.Typer(add_completion=False, help="Consolidate daily market reports into reconciled CSV views")

    @app.callback()
    def main(
        ctx: typer.Context,
        format: str = typer.Option(
            "table",
            "--format",
            "-f",
            help="Output format (table or jsonl).",
            show_default=True,
        ),
        output: Path | None = typer.Option(
            None,
            "--output",
            "-o",
            help="Write command output to a file instead of stdout.",
        ),
        log_level: str | None = typer.Option(
            None,
            "--log-level",
            help="Minimum level of log records written to stderr (default: settings, INFO).",
        ),
        log_file: Path | None = typer.Option(
            None,
            "--log-file",
            help="Also append JSON log lines to this file.",
        ),
        no_color: bool = typer.Option(
            False,
            "--no-color",
            help="Disable colorized output for table format.",
        ),
    ) -> None:
        ctx.ensure_object(dict)
        normalized_format = format.strip().lower()
        try:
            create_formatter(normalized_format, no_color=no_color)
        except ValueError as exc:
            emit_error(str(exc), "INVALID_FORMAT", details={"format": format})
            raise typer.Exit(code=VALIDATION_EXIT_CODE) from exc

        level = log_level.strip().upper() if log_level else None
        if level is not None and level not in LOG_LEVELS:
            emit_error(
                f"Unsupported log level '{log_level}'. Available levels: {', '.join(LOG_LEVELS)}.",
                "INVALID_LOG_LEVEL",
                details={"log_level": log_level},
            )
            raise typer.Exit(code=VALIDATION_EXIT_CODE)

        ctx.obj.update(
            {
                "format": normalized_format,
                "output_path": output,
                "log_level": level,
                "log_file": log_file,
                "no_color": no_color,
            }
        )

    register_process_command(app)
    register_summary_command(app)
    return app


app = create_app()
