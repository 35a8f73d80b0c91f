"""Per-ticker summary derived from the reconciled ledger."""

from __future__ import annotations

import csv
import json
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from dailyledger.core.exceptions import OutputWriteError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import TradeEntry

SUMMARY_FORMAT = "ticker_summary_v1"

# Trading days in a 52-week window.
YEAR_WINDOW = 252

log = get_logger("summary")


@dataclass(slots=True)
class TickerSummary:
    """Latest state and recent trading history of one ticker."""

    ticker: str
    company_name: str
    last_price: float
    last_date: str
    trading_days: int
    last_prices: list[float] = field(default_factory=list)
    change: float = 0.0
    change_percent: float = 0.0
    last_trading_status: bool = False
    total_volume: int | None = None
    total_value: float | None = None
    average_price: float | None = None
    highest_price: float | None = None
    lowest_price: float | None = None
    previous_close: float | None = None
    daily_change_percent: float | None = None
    weekly_change_percent: float | None = None
    monthly_change_percent: float | None = None
    daily_volume: int | None = None
    daily_value: float | None = None
    high_52_week: float | None = None
    low_52_week: float | None = None


def _change_percent(prices: Sequence[float], days: int) -> float:
    """Percent change from ``days`` trading days back, or the earliest price available."""

    if len(prices) < 2:
        return 0.0
    past = prices[max(len(prices) - 1 - days, 0)]
    if past == 0:
        return 0.0
    return (prices[-1] - past) / past * 100


class TickerSummarizer:
    """Build ticker summaries from reconciled entries."""

    def __init__(
        self,
        *,
        max_recent: int = 10,
        extended: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        if max_recent <= 0:
            raise ValueError("max_recent must be positive")
        self._max_recent = max_recent
        self._extended = extended
        self._clock = clock or (lambda: datetime.now(UTC))

    def summarize(self, entries: Iterable[TradeEntry]) -> list[TickerSummary]:
        grouped: dict[str, list[TradeEntry]] = defaultdict(list)
        for entry in entries:
            ticker = entry.symbol.strip()
            if ticker:
                grouped[ticker].append(entry)

        summaries = [self._summarize_ticker(ticker, grouped[ticker]) for ticker in sorted(grouped)]
        log.bind(ticker_count=len(summaries)).info("generated ticker summaries")
        return summaries

    def _summarize_ticker(self, ticker: str, records: list[TradeEntry]) -> TickerSummary:
        records = sorted(records, key=lambda e: e.date)
        active = [record for record in records if record.has_activity]
        summary = TickerSummary(
            ticker=ticker,
            company_name=records[0].company_name,
            last_price=0.0,
            last_date="",
            trading_days=len(active),
            last_prices=[record.close for record in active[-self._max_recent :]],
        )

        if active:
            last = active[-1]
            summary.last_price = last.close
            summary.last_date = last.date.isoformat()
            summary.change = last.change
            summary.change_percent = last.change_percent
            summary.last_trading_status = last.trading_status
        else:
            last = records[-1]
            summary.last_price = last.close
            summary.last_date = last.date.isoformat()

        if self._extended:
            summary.total_volume = sum(record.volume for record in active)
            summary.total_value = sum(record.value for record in active)
            summary.average_price = sum(record.close for record in active) / len(active) if active else 0.0
            summary.highest_price = max((record.high for record in active), default=0.0)
            summary.lowest_price = min((record.low for record in active if record.low > 0), default=0.0)
            self._add_period_metrics(summary, records, last)
        return summary

    @staticmethod
    def _add_period_metrics(summary: TickerSummary, records: list[TradeEntry], last: TradeEntry) -> None:
        prices = summary.last_prices
        summary.previous_close = prices[-2] if len(prices) >= 2 else 0.0
        summary.daily_change_percent = _change_percent(prices, 1)
        summary.weekly_change_percent = _change_percent(prices, 7)
        summary.monthly_change_percent = _change_percent(prices, 30)
        summary.daily_volume = last.volume
        summary.daily_value = last.value

        window = [record for record in records[-YEAR_WINDOW:] if record.has_activity]
        summary.high_52_week = max((record.high for record in window), default=0.0)
        summary.low_52_week = min((record.low for record in window if record.low > 0), default=0.0)

    def header(self) -> list[str]:
        columns = ["Ticker", "CompanyName", "LastPrice", "LastDate", "TradingDays", "Last10Days"]
        if self._extended:
            columns += ["TotalVolume", "TotalValue", "AveragePrice", "HighestPrice", "LowestPrice"]
        return columns + ["Change", "ChangePercent", "LastTradingStatus"]

    def _row(self, summary: TickerSummary) -> list[str]:
        row = [
            summary.ticker,
            summary.company_name,
            f"{summary.last_price:.3f}",
            summary.last_date,
            str(summary.trading_days),
            ",".join(f"{price:.3f}" for price in summary.last_prices),
        ]
        if self._extended:
            row += [
                str(summary.total_volume or 0),
                f"{summary.total_value or 0.0:.3f}",
                f"{summary.average_price or 0.0:.3f}",
                f"{summary.highest_price or 0.0:.3f}",
                f"{summary.lowest_price or 0.0:.3f}",
            ]
        return row + [
            f"{summary.change:.3f}",
            f"{summary.change_percent:.2f}",
            "true" if summary.last_trading_status else "false",
        ]

    def write_csv(self, path: Path, summaries: Sequence[TickerSummary]) -> None:
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as stream:
                writer = csv.writer(stream)
                writer.writerow(self.header())
                writer.writerows(self._row(summary) for summary in summaries)
        except OSError as exc:
            raise OutputWriteError(f"Failed to write ticker summary: {exc}", str(path)) from exc
        log.bind(path=str(path), summary_count=len(summaries)).info("wrote ticker summary csv")

    def write_json(self, path: Path, summaries: Sequence[TickerSummary]) -> None:
        payload = {
            "tickers": [self._json_item(summary) for summary in summaries],
            "count": len(summaries),
            "generated_at": self._clock().isoformat(),
            "format": SUMMARY_FORMAT,
        }
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as exc:
            raise OutputWriteError(f"Failed to write ticker summary: {exc}", str(path)) from exc
        log.bind(path=str(path), summary_count=len(summaries)).info("wrote ticker summary json")

    @staticmethod
    def _json_item(summary: TickerSummary) -> dict[str, object]:
        item = asdict(summary)
        item["last_10_days"] = item.pop("last_prices")
        return {key: value for key, value in item.items() if value is not None}


__all__ = ["SUMMARY_FORMAT", "TickerSummarizer", "TickerSummary"]
