from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path

from dailyledger.core.data.ingestion import ingest_sources
from dailyledger.core.models import SourceFileRef


def test_ingest_sources_stamps_dates_and_reports_progress(
    tmp_path: Path, make_raw: Callable[..., object], make_parser: Callable[..., object]
) -> None:
    refs = [
        SourceFileRef("2024 03 05 a b.xlsx", date(2024, 3, 5)),
        SourceFileRef("2024 03 06 a b.xlsx", date(2024, 3, 6)),
    ]
    parser = make_parser(
        {
            "2024 03 05 a b.xlsx": [make_raw("BBOB"), make_raw("TASC")],
            "2024 03 06 a b.xlsx": [make_raw("BBOB", 1.2)],
        }
    )
    seen: list[tuple[int, int, str]] = []

    result = ingest_sources(refs, tmp_path, parser, on_file=lambda i, n, ref: seen.append((i, n, ref.filename)))

    assert seen == [(1, 2, "2024 03 05 a b.xlsx"), (2, 2, "2024 03 06 a b.xlsx")]
    assert [(e.symbol, e.date) for e in result.entries] == [
        ("BBOB", date(2024, 3, 5)),
        ("TASC", date(2024, 3, 5)),
        ("BBOB", date(2024, 3, 6)),
    ]
    assert all(entry.trading_status for entry in result.entries)
    assert result.processed == ["2024 03 05 a b.xlsx", "2024 03 06 a b.xlsx"]
    assert result.failures == []


def test_ingest_sources_skips_files_that_fail_to_parse(
    tmp_path: Path, make_raw: Callable[..., object], make_parser: Callable[..., object]
) -> None:
    refs = [
        SourceFileRef("bad.xlsx", date(2024, 3, 5)),
        SourceFileRef("good.xlsx", date(2024, 3, 6)),
    ]
    parser = make_parser({"good.xlsx": [make_raw("BBOB")]}, failing=["bad.xlsx"])

    result = ingest_sources(refs, tmp_path, parser)

    assert parser.calls == ["bad.xlsx", "good.xlsx"]
    assert result.processed == ["good.xlsx"]
    assert len(result.entries) == 1
    (failure,) = result.failures
    assert failure.filename == "bad.xlsx"
    assert failure.error_code == "REPORT_PARSE_ERROR"
