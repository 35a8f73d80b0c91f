"""Fixed tabular schema shared by the combined, daily and ticker views."""

from __future__ import annotations

import csv
import os
import tempfile
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date
from pathlib import Path

from dailyledger.core.exceptions import HistoryRowError
from dailyledger.core.models import TradeEntry

VIEW_COLUMNS: tuple[str, ...] = (
    "Date",
    "CompanyName",
    "Symbol",
    "OpenPrice",
    "HighPrice",
    "LowPrice",
    "AveragePrice",
    "PrevAveragePrice",
    "ClosePrice",
    "PrevClosePrice",
    "Change",
    "ChangePercent",
    "NumTrades",
    "Volume",
    "Value",
    "TradingStatus",
)

DATE_FORMAT = "%Y-%m-%d"

_PRICE_FIELDS = ("open", "high", "low", "average", "prev_average", "close", "prev_close", "change")


def encode_entry(entry: TradeEntry) -> list[str]:
    """Render an entry as one view row."""

    return [
        entry.date.strftime(DATE_FORMAT),
        entry.company_name,
        entry.symbol,
        *(f"{getattr(entry, name):.3f}" for name in _PRICE_FIELDS),
        f"{entry.change_percent:.2f}",
        str(entry.num_trades),
        str(entry.volume),
        f"{entry.value:.2f}",
        "true" if entry.trading_status else "false",
    ]


@dataclass(slots=True, frozen=True)
class DecodedRow:
    """A decoded view row and whether any field fell back to a zero value."""

    entry: TradeEntry
    degraded_fields: tuple[str, ...] = ()


class _FieldReader:
    """Parses individual cells, remembering which ones had to be degraded."""

    def __init__(self, row: Sequence[str], *, strict: bool, line_number: int | None) -> None:
        self._row = row
        self._strict = strict
        self._line_number = line_number
        self.degraded: list[str] = []

    def _fail(self, column: str, raw: str) -> None:
        if self._strict:
            raise HistoryRowError(
                f"invalid value {raw!r} for column {column}",
                self._line_number,
                {"column": column},
            )
        self.degraded.append(column)

    def number(self, index: int) -> float:
        raw = self._row[index].strip()
        try:
            return float(raw)
        except ValueError:
            self._fail(VIEW_COLUMNS[index], raw)
            return 0.0

    def integer(self, index: int) -> int:
        raw = self._row[index].strip()
        try:
            return int(raw)
        except ValueError:
            self._fail(VIEW_COLUMNS[index], raw)
            return 0

    def boolean(self, index: int) -> bool | None:
        raw = self._row[index].strip().lower()
        if raw in {"true", "1", "t"}:
            return True
        if raw in {"false", "0", "f"}:
            return False
        self._fail(VIEW_COLUMNS[index], raw)
        return None


def decode_row(row: Sequence[str], *, strict: bool = False, line_number: int | None = None) -> DecodedRow:
    """Decode one view row.

    Rows shorter than the schema and rows with an unparsable date always raise
    :class:`HistoryRowError`. Other unparsable cells degrade to zero
    unless ``strict`` is set, in which case they raise as well. An unparsable
    ``TradingStatus`` is inferred from the row's volume and trade count.
    """

    if len(row) < len(VIEW_COLUMNS):
        raise HistoryRowError(
            f"expected {len(VIEW_COLUMNS)} fields, got {len(row)}",
            line_number,
            {"field_count": len(row)},
        )
    try:
        trade_date = date.fromisoformat(row[0].strip())
    except ValueError as exc:
        raise HistoryRowError(f"invalid date {row[0]!r}", line_number, {"column": "Date"}) from exc

    reader = _FieldReader(row, strict=strict, line_number=line_number)
    prices = [reader.number(index) for index in range(3, 12)]
    num_trades = reader.integer(12)
    volume = reader.integer(13)
    value = reader.number(14)
    trading_status = reader.boolean(15)
    if trading_status is None:
        # A real trade must never be mistaken for a synthesized fill.
        trading_status = volume > 0 or num_trades > 0
    open_, high, low, average, prev_average, close, prev_close, change, change_percent = prices
    entry = TradeEntry(
        symbol=row[2].strip(),
        company_name=row[1].strip(),
        date=trade_date,
        open=open_,
        high=high,
        low=low,
        average=average,
        prev_average=prev_average,
        close=close,
        prev_close=prev_close,
        change=change,
        change_percent=change_percent,
        num_trades=num_trades,
        volume=volume,
        value=value,
        trading_status=trading_status,
    )
    return DecodedRow(entry=entry, degraded_fields=tuple(reader.degraded))


def write_view(path: Path, entries: Iterable[TradeEntry]) -> int:
    """Write ``entries`` to ``path`` with the view header, replacing the file atomically.

    Returns the number of data rows written.
    """

    handle, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    count = 0
    try:
        with os.fdopen(handle, "w", encoding="utf-8", newline="") as stream:
            writer = csv.writer(stream)
            writer.writerow(VIEW_COLUMNS)
            for entry in entries:
                writer.writerow(encode_entry(entry))
                count += 1
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise
    return count


__all__ = [
    "DATE_FORMAT",
    "DecodedRow",
    "VIEW_COLUMNS",
    "decode_row",
    "encode_entry",
    "write_view",
]
