"""Discovery of dated source reports in the input directory."""

from __future__ import annotations

import re
from collections import defaultdict
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

from dailyledger.core.config import LedgerSettings
from dailyledger.core.exceptions import DuplicateSourceDateError, SourceDirectoryError
from dailyledger.core.logging import get_logger
from dailyledger.core.models import SourceFileRef

_TOKEN_SPLIT = re.compile(r"[\s_\-]+")

log = get_logger("manifest")


@dataclass(slots=True, frozen=True)
class SkippedSource:
    """A candidate source file left out of the manifest, with the reason."""

    filename: str
    reason: str


@dataclass(slots=True)
class Manifest:
    """Chronologically ordered source reports discovered for one run."""

    entries: list[SourceFileRef] = field(default_factory=list)
    skipped: list[SkippedSource] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[SourceFileRef]:
        return iter(self.entries)

    @property
    def filenames(self) -> list[str]:
        return [ref.filename for ref in self.entries]

    @property
    def dates(self) -> set[date]:
        return {ref.date for ref in self.entries}


def parse_source_date(filename: str) -> date | None:
    """Decode the leading ``YYYY MM DD`` token of a source file name.

    Returns ``None`` when the name does not follow the convention at all and
    raises :class:`ValueError` when the tokens are present but do not form a
    valid calendar date.
    """

    tokens = _TOKEN_SPLIT.split(filename.strip())
    if len(tokens) < 4:
        return None
    year, month, day = tokens[:3]
    if not (year.isdigit() and month.isdigit() and day.isdigit()):
        raise ValueError(f"non numeric date token in {filename!r}")
    if len(year) != 4:
        raise ValueError(f"year token {year!r} must have four digits")
    return date(int(year), int(month), int(day))


def build_manifest(input_dir: Path, settings: LedgerSettings) -> Manifest:
    """Scan ``input_dir`` and return its dated source reports sorted by date.

    Raises:
        SourceDirectoryError: when the directory is missing or cannot be listed.
        DuplicateSourceDateError: when ``settings.strict_duplicates`` is set and
            two files claim the same date.
    """

    try:
        candidates = sorted(path for path in input_dir.iterdir() if path.is_file())
    except OSError as exc:
        raise SourceDirectoryError(f"Unable to list source directory: {exc}", str(input_dir)) from exc

    manifest = Manifest()
    by_date: dict[date, list[str]] = defaultdict(list)
    for path in candidates:
        name = path.name
        if name.startswith(settings.excluded_prefix) or not name.endswith(settings.source_suffix):
            continue
        try:
            trade_date = parse_source_date(name)
        except ValueError as exc:
            log.bind(filename=name).warning("could not parse date from filename: {}", exc)
            manifest.skipped.append(SkippedSource(name, "invalid date"))
            continue
        if trade_date is None:
            continue
        by_date[trade_date].append(name)

    for trade_date in sorted(by_date):
        names = sorted(by_date[trade_date])
        if len(names) > 1:
            if settings.strict_duplicates:
                raise DuplicateSourceDateError(
                    f"{len(names)} source files claim {trade_date.isoformat()}",
                    trade_date.isoformat(),
                    names,
                )
            log.bind(date=trade_date.isoformat(), kept=names[-1]).warning(
                "several source files claim the same date, keeping the last one: {}", names
            )
            manifest.skipped.extend(SkippedSource(name, "duplicate date") for name in names[:-1])
        manifest.entries.append(SourceFileRef(filename=names[-1], date=trade_date))

    log.bind(count=len(manifest.entries), skipped=len(manifest.skipped)).info("source files discovered")
    return manifest


__all__ = ["Manifest", "SkippedSource", "build_manifest", "parse_source_date"]
