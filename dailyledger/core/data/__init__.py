"""Data access: source discovery, view codec and history readers."""

from dailyledger.core.data.codec import VIEW_COLUMNS, decode_row, encode_entry, write_view
from dailyledger.core.data.ledger import (
    HistoryLoad,
    daily_filename,
    load_history,
    parse_daily_filename,
    scan_coverage,
)
from dailyledger.core.data.manifest import Manifest, SkippedSource, build_manifest, parse_source_date

__all__ = [
    "HistoryLoad",
    "Manifest",
    "SkippedSource",
    "VIEW_COLUMNS",
    "build_manifest",
    "daily_filename",
    "decode_row",
    "encode_entry",
    "load_history",
    "parse_daily_filename",
    "parse_source_date",
    "scan_coverage",
    "write_view",
]
