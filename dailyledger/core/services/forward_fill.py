"""Forward-fill reconciliation across the full date by symbol matrix."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date

from dailyledger.core.exceptions import DuplicateEntryError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import TradeEntry

log = get_logger("forward_fill")


@dataclass(slots=True, frozen=True)
class ForwardFillStats:
    """Counts describing one reconciliation walk."""

    total_records: int
    active_records: int
    forward_filled: int
    symbols: int
    dates: int


@dataclass(slots=True, frozen=True)
class ReconcileResult:
    """Reconciled entries in date-major, symbol-minor order plus statistics."""

    entries: tuple[TradeEntry, ...]
    stats: ForwardFillStats
    duplicates: int = 0


def _index_real_entries(
    records: Iterable[TradeEntry],
    *,
    strict_duplicates: bool,
) -> tuple[dict[tuple[date, str], TradeEntry], int, int]:
    by_key: dict[tuple[date, str], TradeEntry] = {}
    duplicates = 0
    dropped_synthetic = 0
    for record in records:
        if not record.trading_status:
            dropped_synthetic += 1
            continue
        key = record.key
        if key in by_key:
            if strict_duplicates:
                raise DuplicateEntryError(
                    f"duplicate entry for {record.symbol} on {record.date.isoformat()}",
                    record.symbol,
                    record.date.isoformat(),
                )
            duplicates += 1
            log.bind(symbol=record.symbol, date=record.date.isoformat()).warning(
                "duplicate entry for symbol and date, keeping the last one"
            )
        by_key[key] = record
    return by_key, duplicates, dropped_synthetic


def reconcile(records: Iterable[TradeEntry], *, strict_duplicates: bool = False) -> ReconcileResult:
    """Expand real entries over every observed date, carrying forward non-trading days.

    Only entries with ``trading_status`` set count as real. Entries synthesized
    by an earlier run are discarded and regenerated, so a carried-forward entry
    always derives from the last real trade of its symbol. Symbols are never
    filled before their first real trade.
    """

    by_key, duplicates, dropped_synthetic = _index_real_entries(records, strict_duplicates=strict_duplicates)
    dates = sorted({trade_date for trade_date, _ in by_key})
    symbols = sorted({symbol for _, symbol in by_key})

    last_real: dict[str, TradeEntry] = {}
    reconciled: list[TradeEntry] = []
    filled = 0
    for trade_date in dates:
        for symbol in symbols:
            entry = by_key.get((trade_date, symbol))
            if entry is not None:
                reconciled.append(entry)
                last_real[symbol] = entry
                continue
            previous = last_real.get(symbol)
            if previous is not None:
                reconciled.append(previous.carried_forward(trade_date))
                filled += 1

    stats = ForwardFillStats(
        total_records=len(reconciled),
        active_records=len(by_key),
        forward_filled=filled,
        symbols=len(symbols),
        dates=len(dates),
    )
    log.bind(
        total_records=stats.total_records,
        active_trading_records=stats.active_records,
        forward_filled_records=stats.forward_filled,
        regenerated=dropped_synthetic,
    ).info("record processing summary")
    return ReconcileResult(entries=tuple(reconciled), stats=stats, duplicates=duplicates)


__all__ = ["ForwardFillStats", "ReconcileResult", "reconcile"]
