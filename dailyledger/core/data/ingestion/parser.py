"""Workbook parser for daily market bulletin reports."""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

import pandas as pd

from dailyledger.core.exceptions import ReportParseError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import RawTradeRow

log = get_logger("parser")

PREFERRED_SHEETS: tuple[str, ...] = ("Bullient  ", "Bullient", "Bulletin", "Bulletin  ", "trading", "Trading")
REQUIRED_COLUMNS: tuple[str, ...] = ("code", "close", "volume", "value")


class ReportParser(Protocol):
    """Turns one source report into date-free trade rows."""

    def parse(self, path: Path) -> list[RawTradeRow]:
        """Parse ``path``; raise :class:`ReportParseError` when it cannot be read."""
        ...


def _cells(row: list[object]) -> list[str]:
    return ["" if pd.isna(cell) else str(cell).strip() for cell in row]


def _looks_like_trading_sheet(rows: list[list[str]]) -> bool:
    for row in rows[:4]:
        text = " ".join(row).lower()
        if "company name" in text and "code" in text and ("price" in text or "volume" in text):
            return True
    return False


def _is_header_row(row: list[str]) -> bool:
    text = " ".join(row).lower()
    return (
        ("company" in text or "name" in text)
        and "code" in text
        and ("closing" in text or "price" in text)
        and "volume" in text
    )


def map_columns(header: list[str]) -> dict[str, int]:
    """Map logical column names to their positions in a bulletin header row."""

    mapping: dict[str, int] = {}
    for index, raw in enumerate(header):
        name = raw.strip().lower()
        if "company" in name or ("name" in name and "code" not in name):
            mapping["company"] = index
        elif name == "code":
            mapping["code"] = index
        elif "opening" in name and "price" in name:
            mapping["open"] = index
        elif "highest" in name and "price" in name:
            mapping["high"] = index
        elif "lowest" in name and "price" in name:
            mapping["low"] = index
        elif "average" in name and "price" in name and "prev" not in name:
            mapping["avg"] = index
        elif "prev" in name and "average" in name:
            mapping["prev_avg"] = index
        elif "closing" in name and "price" in name and "prev" not in name:
            mapping["close"] = index
        elif "prev" in name and "closing" in name:
            mapping["prev_close"] = index
        elif "change" in name and "%" in name:
            mapping["change_pct"] = index
        elif "no" in name and "trades" in name:
            mapping["num_trades"] = index
        elif name == "traded volume":
            mapping["volume"] = index
        elif name == "traded value":
            mapping["value"] = index
    return mapping


def _to_float(raw: str) -> float:
    try:
        return float(raw.replace(",", ""))
    except ValueError:
        return 0.0


def _to_int(raw: str) -> int:
    try:
        return int(float(raw.replace(",", "")))
    except ValueError:
        return 0


class WorkbookReportParser:
    """Parse ``.xlsx`` bulletins whose trading sheet has a header row of named columns."""

    def __init__(self, preferred_sheets: tuple[str, ...] = PREFERRED_SHEETS) -> None:
        self._preferred_sheets = preferred_sheets

    def parse(self, path: Path) -> list[RawTradeRow]:
        try:
            sheets = pd.read_excel(path, sheet_name=None, header=None, dtype=str)
        except Exception as exc:
            raise ReportParseError(f"failed to open workbook: {exc}", str(path)) from exc

        sheet_name, rows = self._select_sheet(sheets, path)
        header_index = next((i for i, row in enumerate(rows) if len(row) >= 5 and _is_header_row(row)), None)
        if header_index is None:
            raise ReportParseError("could not find header row in trading data", str(path), {"sheet": sheet_name})

        columns = map_columns(rows[header_index])
        missing = [name for name in REQUIRED_COLUMNS if name not in columns]
        if missing:
            raise ReportParseError(
                f"could not find required column: {missing[0]}",
                str(path),
                {"sheet": sheet_name, "missing": missing},
            )

        parsed = [
            record
            for record in (self._parse_row(row, columns) for row in rows[header_index + 1 :])
            if record is not None
        ]
        log.bind(filename=path.name, sheet=sheet_name, count=len(parsed)).debug("parsed workbook")
        return parsed

    def _select_sheet(self, sheets: dict[str, pd.DataFrame], path: Path) -> tuple[str, list[list[str]]]:
        for name in self._preferred_sheets:
            if name in sheets:
                return name, [_cells(list(row)) for row in sheets[name].itertuples(index=False)]
        for name, frame in sheets.items():
            rows = [_cells(list(row)) for row in frame.itertuples(index=False)]
            if len(rows) > 3 and _looks_like_trading_sheet(rows):
                return name, rows
        raise ReportParseError("could not find trading data sheet in file", str(path), {"sheets": list(sheets)})

    @staticmethod
    def _parse_row(row: list[str], columns: dict[str, int]) -> RawTradeRow | None:
        if len(row) <= columns["value"]:
            return None
        if all(not row[index] for index in columns.values() if index < len(row)):
            return None
        if row and ("Sector" in row[0] or "Total" in row[0]):
            return None
        code = row[columns["code"]].strip()
        if not code:
            return None

        def text(name: str) -> str:
            index = columns.get(name)
            return row[index] if index is not None and index < len(row) else ""

        close = _to_float(text("close"))
        prev_close = _to_float(text("prev_close"))
        return RawTradeRow(
            symbol=code,
            company_name=text("company"),
            open=_to_float(text("open")),
            high=_to_float(text("high")),
            low=_to_float(text("low")),
            average=_to_float(text("avg")),
            prev_average=_to_float(text("prev_avg")),
            close=close,
            prev_close=prev_close,
            change=close - prev_close,
            change_percent=_to_float(text("change_pct")),
            num_trades=_to_int(text("num_trades")),
            volume=_to_int(text("volume")),
            value=_to_float(text("value")),
        )


__all__ = ["PREFERRED_SHEETS", "ReportParser", "WorkbookReportParser", "map_columns"]
