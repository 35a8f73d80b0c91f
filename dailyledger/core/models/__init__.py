"""Domain models."""

from dailyledger.core.models.trade import RawTradeRow, SourceFileRef, TradeEntry

__all__ = ["RawTradeRow", "SourceFileRef", "TradeEntry"]
