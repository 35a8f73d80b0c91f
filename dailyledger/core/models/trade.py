"""Trade entry models shared by every stage of the ledger pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date as Date  # noqa: N812


@dataclass(slots=True, frozen=True)
class RawTradeRow:
    """One symbol's trading data as read from a report, before a date is assigned."""

    symbol: str
    company_name: str
    open: float = 0.0
    high: float = 0.0
    low: float = 0.0
    average: float = 0.0
    prev_average: float = 0.0
    close: float = 0.0
    prev_close: float = 0.0
    change: float = 0.0
    change_percent: float = 0.0
    num_trades: int = 0
    volume: int = 0
    value: float = 0.0


@dataclass(slots=True, frozen=True)
class TradeEntry:
    """One symbol's trading data for one calendar date.

    ``trading_status`` is ``True`` when the symbol actually traded on ``date`` and
    ``False`` for entries carried forward from the last real trade.
    """

    symbol: str
    company_name: str
    date: Date
    open: float
    high: float
    low: float
    average: float
    prev_average: float
    close: float
    prev_close: float
    change: float
    change_percent: float
    num_trades: int
    volume: int
    value: float
    trading_status: bool = True

    @property
    def key(self) -> tuple[Date, str]:
        return (self.date, self.symbol)

    @classmethod
    def from_raw(cls, row: RawTradeRow, date: Date) -> TradeEntry:
        """Stamp a parsed report row with the trading date of its source file."""

        return cls(
            symbol=row.symbol,
            company_name=row.company_name,
            date=date,
            open=row.open,
            high=row.high,
            low=row.low,
            average=row.average,
            prev_average=row.prev_average,
            close=row.close,
            prev_close=row.prev_close,
            change=row.change,
            change_percent=row.change_percent,
            num_trades=row.num_trades,
            volume=row.volume,
            value=row.value,
            trading_status=True,
        )

    def carried_forward(self, date: Date) -> TradeEntry:
        """Return the synthesized non-trading entry for ``date`` derived from this trade."""

        close = self.close
        return TradeEntry(
            symbol=self.symbol,
            company_name=self.company_name,
            date=date,
            open=close,
            high=close,
            low=close,
            average=close,
            prev_average=self.average,
            close=close,
            prev_close=close,
            change=0.0,
            change_percent=0.0,
            num_trades=0,
            volume=0,
            value=0.0,
            trading_status=False,
        )

    @property
    def has_activity(self) -> bool:
        """Whether the entry reflects real trading, falling back to volume and trade count."""

        return self.trading_status or self.volume > 0 or self.num_trades > 0


@dataclass(slots=True, frozen=True)
class SourceFileRef:
    """A source report and the trading date decoded from its file name."""

    filename: str
    date: Date


__all__ = ["RawTradeRow", "SourceFileRef", "TradeEntry"]
