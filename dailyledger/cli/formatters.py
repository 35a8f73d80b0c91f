"""Output formatters for CLI command results."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import TextIO

from rich.box import SIMPLE
from rich.console import Console
from rich.table import Table


class OutputFormatter:
    """Base class for CLI output formatters."""

    name: str

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        """Render the provided rows to the target stream."""

        raise NotImplementedError

    def message(self, text: str, *, stream: TextIO) -> None:
        """Write a free-form progress line."""

        raise NotImplementedError


@dataclass(slots=True)
class TableFormatter(OutputFormatter):
    """Render rows as a Rich table and progress as plain lines."""

    name: str = "table"
    no_color: bool = False

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        console = self._console(stream)
        resolved = list(columns) if columns else (list(rows[0].keys()) if rows else [])

        table = Table(box=SIMPLE, show_lines=False, title=title)
        header_style = "" if self.no_color else "bold"
        for column in resolved:
            table.add_column(column, header_style=header_style)
        for row in rows:
            table.add_row(*(self._format_cell(row.get(column)) for column in resolved))

        if resolved:
            console.print(table)
        if not rows:
            console.print("No data available.")

    def message(self, text: str, *, stream: TextIO) -> None:
        self._console(stream).print(text, highlight=False, markup=False)

    def _console(self, stream: TextIO) -> Console:
        return Console(
            file=stream,
            color_system=None if self.no_color else "auto",
            no_color=self.no_color,
            width=120,
        )

    @staticmethod
    def _format_cell(value: object) -> str:
        if value is None:
            return "-"
        if isinstance(value, float):
            return f"{value:.3f}"
        return str(value)


@dataclass(slots=True)
class JSONLFormatter(OutputFormatter):
    """Render rows as JSON Lines; progress lines become ``{"event": ...}`` records."""

    name: str = "jsonl"

    def render(
        self,
        rows: Sequence[Mapping[str, object]],
        *,
        stream: TextIO,
        columns: Sequence[str] | None = None,
        title: str | None = None,
    ) -> None:
        for row in rows:
            payload = {column: row.get(column) for column in columns} if columns else dict(row)
            if title:
                payload = {"section": title, **payload}
            json.dump(payload, stream, ensure_ascii=False, default=str)
            stream.write("\n")
        stream.flush()

    def message(self, text: str, *, stream: TextIO) -> None:
        json.dump({"event": text}, stream, ensure_ascii=False)
        stream.write("\n")
        stream.flush()


def create_formatter(name: str, *, no_color: bool = False) -> OutputFormatter:
    """Instantiate a formatter by name."""

    normalized = name.strip().lower()
    if normalized == "table":
        return TableFormatter(no_color=no_color)
    if normalized == "jsonl":
        return JSONLFormatter()
    msg = f"Unsupported format '{name}'. Available formats: table, jsonl."
    raise ValueError(msg)


__all__ = ["JSONLFormatter", "OutputFormatter", "TableFormatter", "create_formatter"]
