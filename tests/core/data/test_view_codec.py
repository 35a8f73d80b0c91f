from __future__ import annotations

import csv
from collections.abc import Callable
from datetime import date
from pathlib import Path

import pytest

from dailyledger.core.data import VIEW_COLUMNS, decode_row, encode_entry, write_view
from dailyledger.core.exceptions import HistoryRowError
from dailyledger.core.models import TradeEntry


def test_encode_entry_formats_fields(make_entry: Callable[..., TradeEntry]) -> None:
    entry = make_entry(
        "BBOB",
        date(2024, 3, 5),
        1.15,
        open=1.1,
        prev_close=1.1,
        change=0.05,
        change_percent=4.55,
        num_trades=12,
        volume=50000,
        value=57500.0,
    )

    assert encode_entry(entry) == [
        "2024-03-05",
        "BBOB Company",
        "BBOB",
        "1.100",
        "1.150",
        "1.150",
        "1.150",
        "1.150",
        "1.150",
        "1.100",
        "0.050",
        "4.55",
        "12",
        "50000",
        "57500.00",
        "true",
    ]


def test_encode_entry_marks_carried_forward_rows(make_entry: Callable[..., TradeEntry]) -> None:
    row = encode_entry(make_entry("BBOB", date(2024, 3, 5)).carried_forward(date(2024, 3, 6)))

    assert row[0] == "2024-03-06"
    assert row[-1] == "false"
    assert row[12:15] == ["0", "0", "0.00"]


def test_decode_row_requires_full_width() -> None:
    with pytest.raises(HistoryRowError) as excinfo:
        decode_row(["2024-03-05", "x", "Y"], line_number=7)

    assert excinfo.value.line_number == 7
    assert excinfo.value.details["field_count"] == 3


def test_decode_row_reports_degraded_columns() -> None:
    row = ["2024-03-05", "Name", "SYM", "x", "1", "1", "1", "1", "1", "1", "0", "0", "3", "10", "5.5", "yes"]

    decoded = decode_row(row)

    assert decoded.degraded_fields == ("OpenPrice", "TradingStatus")
    assert decoded.entry.open == 0.0
    assert decoded.entry.trading_status is True


def test_decode_row_unparsable_status_without_activity_is_not_trading() -> None:
    row = ["2024-03-06", "Name", "SYM", *(["1"] * 7), "0", "0", "0", "0", "0.00", "?"]

    decoded = decode_row(row)

    assert decoded.degraded_fields == ("TradingStatus",)
    assert decoded.entry.trading_status is False


def test_write_view_replaces_existing_file(tmp_path: Path, make_entry: Callable[..., TradeEntry]) -> None:
    path = tmp_path / "view.csv"
    path.write_text("stale\n", encoding="utf-8")

    count = write_view(path, [make_entry("BBOB", date(2024, 3, 5))])

    with open(path, encoding="utf-8", newline="") as stream:
        rows = list(csv.reader(stream))
    assert count == 1
    assert rows[0] == list(VIEW_COLUMNS)
    assert rows[1][2] == "BBOB"
    assert [p.name for p in tmp_path.iterdir()] == ["view.csv"]


def test_write_view_empty_writes_header_only(tmp_path: Path) -> None:
    path = tmp_path / "view.csv"

    assert write_view(path, []) == 0
    assert path.read_text(encoding="utf-8").strip() == ",".join(VIEW_COLUMNS)
