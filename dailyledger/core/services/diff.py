"""Incremental planning: which sources to (re)process and which history to keep."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import date

from dailyledger.core.logging import get_logger
from dailyledger.core.models import SourceFileRef, TradeEntry

log = get_logger("diff")


@dataclass(slots=True, frozen=True)
class IncrementPlan:
    """Outcome of comparing the manifest with the already emitted views."""

    to_process: tuple[SourceFileRef, ...]
    already_covered: tuple[SourceFileRef, ...]
    retained_history: tuple[TradeEntry, ...]
    purged_count: int
    full_rework: bool

    @property
    def reprocess_dates(self) -> frozenset[date]:
        return frozenset(ref.date for ref in self.to_process)


def purge_dates(history: Iterable[TradeEntry], dates: frozenset[date] | set[date]) -> tuple[list[TradeEntry], int]:
    """Split off every history entry dated in ``dates``; return the kept entries and the purge count."""

    kept: list[TradeEntry] = []
    purged = 0
    for entry in history:
        if entry.date in dates:
            purged += 1
        else:
            kept.append(entry)
    return kept, purged


def plan_increment(
    manifest: Sequence[SourceFileRef],
    coverage: set[date] | frozenset[date],
    history: Sequence[TradeEntry],
    *,
    force_full: bool = False,
) -> IncrementPlan:
    """Decide which manifest entries need processing.

    With ``force_full`` every entry is processed and the history is discarded.
    Otherwise only entries whose date has no daily view yet are processed, and
    history entries on those dates are purged so reprocessed dates never appear
    twice after the merge.
    """

    if force_full:
        log.bind(files=len(manifest), discarded=len(history)).info("full rework requested, processing all files")
        return IncrementPlan(
            to_process=tuple(manifest),
            already_covered=(),
            retained_history=(),
            purged_count=len(history),
            full_rework=True,
        )

    to_process: list[SourceFileRef] = []
    covered: list[SourceFileRef] = []
    for ref in manifest:
        if ref.date in coverage:
            covered.append(ref)
            log.bind(filename=ref.filename, date=ref.date.isoformat()).debug("already processed file")
        else:
            to_process.append(ref)
            log.bind(filename=ref.filename, date=ref.date.isoformat()).debug("need to process file")

    reprocess = frozenset(ref.date for ref in to_process)
    kept, purged = purge_dates(history, reprocess)
    log.bind(
        files_to_process=len(to_process),
        already_covered=len(covered),
        retained=len(kept),
        purged=purged,
    ).info("incremental plan ready")
    return IncrementPlan(
        to_process=tuple(to_process),
        already_covered=tuple(covered),
        retained_history=tuple(kept),
        purged_count=purged,
        full_rework=False,
    )


__all__ = ["IncrementPlan", "plan_increment", "purge_dates"]
