"""Pytest configuration for the dailyledger test suite."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from datetime import date
from pathlib import Path

import pytest
from openpyxl import Workbook

from dailyledger.core.config import LedgerSettings
from dailyledger.core.exceptions import ReportParseError
from dailyledger.core.models import RawTradeRow, TradeEntry

BULLETIN_HEADER = [
    "Company Name",
    "Code",
    "Opening Price",
    "Highest Price",
    "Lowest Price",
    "Average Price",
    "Prev Average Price",
    "Closing Price",
    "Prev Closing Price",
    "Change %",
    "No. of Trades",
    "Traded Volume",
    "Traded Value",
]


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register command-line options for controlling integration tests."""

    parser.addoption(
        "--dailyledger-run-integration",
        action="store_true",
        default=False,
        help="Run dailyledger end-to-end tests against real workbooks.",
    )


def pytest_configure(config: pytest.Config) -> None:
    """Register the integration marker for dailyledger tests."""

    config.addinivalue_line(
        "markers",
        "integration: marks dailyledger end-to-end tests over real workbook files",
    )


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    """Skip integration tests unless explicitly requested."""

    if config.getoption("--dailyledger-run-integration"):
        return

    skip_integration = pytest.mark.skip(
        reason="integration tests require --dailyledger-run-integration",
    )
    for item in items:
        if "integration" in item.keywords:
            item.add_marker(skip_integration)


class StubParser:
    """Report parser returning canned rows keyed by source file name."""

    def __init__(self, rows: dict[str, Sequence[RawTradeRow]] | None = None, failing: Iterable[str] = ()) -> None:
        self.rows: dict[str, Sequence[RawTradeRow]] = dict(rows or {})
        self.failing = set(failing)
        self.calls: list[str] = []

    def parse(self, path: Path) -> list[RawTradeRow]:
        self.calls.append(path.name)
        if path.name in self.failing:
            raise ReportParseError("corrupt workbook", str(path))
        return list(self.rows.get(path.name, ()))


def raw_row(symbol: str, close: float = 1.0, **overrides: object) -> RawTradeRow:
    """Build a raw report row with sensible defaults."""

    values: dict[str, object] = {
        "symbol": symbol,
        "company_name": f"{symbol} Company",
        "open": close,
        "high": close,
        "low": close,
        "average": close,
        "prev_average": close,
        "close": close,
        "prev_close": close,
        "num_trades": 3,
        "volume": 1000,
        "value": round(close * 1000, 2),
    }
    values.update(overrides)
    return RawTradeRow(**values)  # type: ignore[arg-type]


def trade_entry(symbol: str, trade_date: date, close: float = 1.0, **overrides: object) -> TradeEntry:
    """Build a real trade entry for ``symbol`` on ``trade_date``."""

    return TradeEntry.from_raw(raw_row(symbol, close, **overrides), trade_date)


def source_name(trade_date: date, suffix: str = "ISX Daily Report.xlsx") -> str:
    return f"{trade_date:%Y %m %d} {suffix}"


@pytest.fixture
def settings(tmp_path: Path) -> LedgerSettings:
    input_dir = tmp_path / "downloads"
    input_dir.mkdir()
    return LedgerSettings(input_dir=input_dir, output_dir=tmp_path / "reports", write_summary=False)


@pytest.fixture
def touch_sources(settings: LedgerSettings) -> Callable[..., list[str]]:
    """Create empty source files for the given dates in the input directory."""

    def _touch(*dates: date) -> list[str]:
        names = []
        for trade_date in dates:
            name = source_name(trade_date)
            (settings.input_dir / name).touch()
            names.append(name)
        return names

    return _touch


@pytest.fixture
def write_workbook() -> Callable[..., Path]:
    """Write a bulletin workbook with a header row followed by ``rows``."""

    def _write(path: Path, rows: Sequence[Sequence[object]], *, sheet: str = "Bulletin", header: Sequence[str] | None = None) -> Path:
        workbook = Workbook()
        worksheet = workbook.active
        worksheet.title = sheet
        worksheet.append(["Iraq Stock Exchange daily bulletin"])
        worksheet.append(list(header or BULLETIN_HEADER))
        for row in rows:
            worksheet.append(list(row))
        workbook.save(path)
        return path

    return _write


@pytest.fixture
def make_raw() -> Callable[..., RawTradeRow]:
    return raw_row


@pytest.fixture
def make_entry() -> Callable[..., TradeEntry]:
    return trade_entry


@pytest.fixture
def make_parser() -> Callable[..., StubParser]:
    return StubParser
