from __future__ import annotations

import csv
import json
from collections.abc import Callable
from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from dailyledger.core.exceptions import OutputWriteError
from dailyledger.core.models import TradeEntry
from dailyledger.core.services import TickerSummarizer, reconcile

D1, D2, D3 = date(2024, 3, 5), date(2024, 3, 6), date(2024, 3, 7)


@pytest.fixture
def entries(make_entry: Callable[..., TradeEntry]) -> tuple[TradeEntry, ...]:
    return reconcile(
        [
            make_entry("BBOB", D1, 1.1, low=1.05, high=1.2),
            make_entry("BBOB", D2, 1.2, change=0.1, change_percent=9.09, low=1.1, high=1.25),
            make_entry("TASC", D1, 7.5),
            make_entry("TASC", D3, 7.6, change=0.1, change_percent=1.33),
        ]
    ).entries


def test_summarize_uses_last_trading_record(entries: tuple[TradeEntry, ...]) -> None:
    bbob, tasc = TickerSummarizer().summarize(entries)

    assert bbob.ticker == "BBOB"
    assert bbob.last_date == "2024-03-06"
    assert bbob.last_price == 1.2
    assert bbob.trading_days == 2
    assert bbob.last_prices == [1.1, 1.2]
    assert bbob.change == pytest.approx(0.1)
    assert bbob.last_trading_status is True
    assert tasc.last_date == "2024-03-07"
    assert tasc.trading_days == 2


def test_summarize_limits_recent_prices(make_entry: Callable[..., TradeEntry]) -> None:
    records = [make_entry("BBOB", date(2024, 3, day), float(day)) for day in range(1, 8)]

    (summary,) = TickerSummarizer(max_recent=3).summarize(records)

    assert summary.last_prices == [5.0, 6.0, 7.0]


def test_summarize_without_activity_falls_back_to_last_entry(make_entry: Callable[..., TradeEntry]) -> None:
    idle = make_entry("IDLE", D1, 2.0, volume=0, num_trades=0).carried_forward(D2)

    (summary,) = TickerSummarizer().summarize([idle])

    assert summary.trading_days == 0
    assert summary.last_date == "2024-03-06"
    assert summary.last_price == 2.0
    assert summary.change == 0.0
    assert summary.last_trading_status is False


def test_extended_metrics(entries: tuple[TradeEntry, ...]) -> None:
    bbob, _ = TickerSummarizer(extended=True).summarize(entries)

    assert bbob.total_volume == 2000
    assert bbob.average_price == pytest.approx(1.15)
    assert bbob.highest_price == 1.25
    assert bbob.lowest_price == 1.05


def test_write_csv(tmp_path: Path, entries: tuple[TradeEntry, ...]) -> None:
    summarizer = TickerSummarizer()
    path = tmp_path / "ticker_summary.csv"

    summarizer.write_csv(path, summarizer.summarize(entries))

    with open(path, encoding="utf-8", newline="") as stream:
        rows = list(csv.reader(stream))
    assert rows[0] == [
        "Ticker",
        "CompanyName",
        "LastPrice",
        "LastDate",
        "TradingDays",
        "Last10Days",
        "Change",
        "ChangePercent",
        "LastTradingStatus",
    ]
    assert rows[1] == ["BBOB", "BBOB Company", "1.200", "2024-03-06", "2", "1.100,1.200", "0.100", "9.09", "true"]


def test_write_json(tmp_path: Path, entries: tuple[TradeEntry, ...]) -> None:
    clock = lambda: datetime(2024, 3, 8, 12, 0, tzinfo=UTC)  # noqa: E731
    summarizer = TickerSummarizer(clock=clock)
    path = tmp_path / "ticker_summary.json"

    summarizer.write_json(path, summarizer.summarize(entries))

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["count"] == 2
    assert payload["format"] == "ticker_summary_v1"
    assert payload["generated_at"] == "2024-03-08T12:00:00+00:00"
    assert payload["tickers"][0]["last_10_days"] == [1.1, 1.2]
    assert "total_volume" not in payload["tickers"][0]


def test_write_csv_failure(tmp_path: Path) -> None:
    (tmp_path / "blocked").write_text("file", encoding="utf-8")

    with pytest.raises(OutputWriteError):
        TickerSummarizer().write_csv(tmp_path / "blocked" / "ticker_summary.csv", [])


def test_max_recent_must_be_positive() -> None:
    with pytest.raises(ValueError):
        TickerSummarizer(max_recent=0)


def test_extended_period_metrics(make_entry: Callable[..., TradeEntry]) -> None:
    closes = [10.0, 11.0, 12.0, 13.0, 14.0, 15.0, 16.0, 17.0, 18.0, 20.0]
    records = [
        make_entry("BBOB", date(2024, 3, day), close, high=close + 0.5, low=close - 0.5, value=close * 100)
        for day, close in enumerate(closes, start=1)
    ]

    (summary,) = TickerSummarizer(extended=True).summarize(reconcile(records).entries)

    assert summary.previous_close == 18.0
    assert summary.daily_change_percent == pytest.approx((20.0 - 18.0) / 18.0 * 100)
    assert summary.weekly_change_percent == pytest.approx((20.0 - 12.0) / 12.0 * 100)
    assert summary.monthly_change_percent == pytest.approx(100.0)
    assert summary.daily_volume == 1000
    assert summary.daily_value == pytest.approx(2000.0)
    assert summary.high_52_week == 20.5
    assert summary.low_52_week == 9.5


def test_extended_year_window_ignores_old_trades(make_entry: Callable[..., TradeEntry]) -> None:
    start = date(2023, 1, 1)
    records = [make_entry("BBOB", start, 99.0, high=99.0, low=0.5)]
    records += [make_entry("BBOB", start + timedelta(days=offset), 5.0) for offset in range(1, 253)]

    (summary,) = TickerSummarizer(extended=True).summarize(records)

    assert summary.high_52_week == 5.0
    assert summary.low_52_week == 5.0
    assert summary.highest_price == 99.0
    assert summary.lowest_price == 0.5


def test_write_json_includes_extended_metrics(tmp_path: Path, entries: tuple[TradeEntry, ...]) -> None:
    summarizer = TickerSummarizer(extended=True)
    path = tmp_path / "summary" / "ticker_summary.json"

    summarizer.write_json(path, summarizer.summarize(entries))

    bbob = json.loads(path.read_text(encoding="utf-8"))["tickers"][0]
    assert bbob["previous_close"] == 1.1
    assert bbob["high_52_week"] == 1.25
    assert bbob["low_52_week"] == 1.05
    assert "weekly_change_percent" in bbob
