"""Top-level driver: manifest, diff, ingest, reconcile, emit."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from time import perf_counter

from dailyledger.core.config import LedgerSettings
from dailyledger.core.data import build_manifest, load_history, scan_coverage
from dailyledger.core.data.ingestion import IngestionFailure, ReportParser, WorkbookReportParser, ingest_sources
from dailyledger.core.exceptions import OutputWriteError, ProcessingCancelledError
from dailyledger.core.logging import get_logger, log_context
from dailyledger.core.models import SourceFileRef, TradeEntry
from dailyledger.core.services import (
    EmitReport,
    ForwardFillStats,
    TickerSummarizer,
    ViewEmitter,
    plan_increment,
    reconcile,
)

log = get_logger("pipeline")


class Phase(str, Enum):
    """Pipeline phases; cancellation is honoured between them."""

    MANIFEST = "manifest"
    DIFF = "diff"
    INGEST = "ingest"
    RECONCILE = "reconcile"
    EMIT = "emit"


class ProgressKind(str, Enum):
    DISCOVERED = "discovered"
    FILE = "file"
    COMPLETE = "complete"


@dataclass(slots=True, frozen=True)
class ProgressEvent:
    """Progress notification for an enclosing orchestrator."""

    kind: ProgressKind
    total: int = 0
    index: int = 0
    filename: str | None = None
    filenames: tuple[str, ...] = ()


ProgressCallback = Callable[[ProgressEvent], None]
StopCheck = Callable[[], bool]


@dataclass(slots=True)
class RunReport:
    """Outcome of one pipeline run."""

    run_id: str
    discovered: int = 0
    processed: list[str] = field(default_factory=list)
    already_covered: int = 0
    failures: list[IngestionFailure] = field(default_factory=list)
    history_loaded: int = 0
    history_purged: int = 0
    stats: ForwardFillStats | None = None
    emit: EmitReport | None = None
    summary_written: bool = False
    duration_ms: float = 0.0


class LedgerPipeline:
    """Run the reconciliation engine over one input directory."""

    def __init__(
        self,
        settings: LedgerSettings,
        *,
        parser: ReportParser | None = None,
        emitter: ViewEmitter | None = None,
        summarizer: TickerSummarizer | None = None,
        progress: ProgressCallback | None = None,
        should_stop: StopCheck | None = None,
    ) -> None:
        self._settings = settings
        self._parser = parser or WorkbookReportParser()
        self._emitter = emitter or ViewEmitter(settings)
        self._summarizer = summarizer or TickerSummarizer(
            max_recent=settings.summary_recent_days,
            extended=settings.summary_extended,
        )
        self._progress = progress
        self._should_stop = should_stop

    def run(self, *, force_full: bool = False, run_id: str | None = None) -> RunReport:
        """Execute one run.

        Raises:
            SourceDirectoryError: the input directory cannot be listed.
            OutputWriteError: the output root or a view directory cannot be written.
            ProcessingCancelledError: ``should_stop`` returned True between phases.
        """

        settings = self._settings
        with log_context(run_id=run_id) as active_run:
            start = perf_counter()
            report = RunReport(run_id=active_run)
            log.bind(
                input_dir=str(settings.input_dir),
                output_dir=str(settings.output_dir),
                full_rework=force_full,
            ).info("starting daily report processing")

            self._checkpoint(Phase.MANIFEST)
            manifest = build_manifest(settings.input_dir, settings)
            report.discovered = len(manifest)
            self._notify(ProgressEvent(ProgressKind.DISCOVERED, total=len(manifest), filenames=tuple(manifest.filenames)))
            if not manifest.entries:
                log.bind(input_dir=str(settings.input_dir)).warning("no source files found, writing empty views")

            self._checkpoint(Phase.DIFF)
            if force_full:
                history: list[TradeEntry] = []
                coverage: set[date] = set()
            else:
                loaded = load_history(settings.combined_path, strict=settings.strict_history)
                history = loaded.entries
                report.history_loaded = len(history)
                coverage = scan_coverage(settings.daily_dir, settings.daily_prefix)
            plan = plan_increment(manifest.entries, coverage, history, force_full=force_full)
            report.already_covered = len(plan.already_covered)
            report.history_purged = plan.purged_count

            self._checkpoint(Phase.INGEST)
            ingested = ingest_sources(
                plan.to_process,
                settings.input_dir,
                self._parser,
                on_file=self._on_file,
            )
            report.processed = ingested.processed
            report.failures = ingested.failures

            self._checkpoint(Phase.RECONCILE)
            result = reconcile(
                [*plan.retained_history, *ingested.entries],
                strict_duplicates=settings.strict_duplicates,
            )
            report.stats = result.stats

            self._checkpoint(Phase.EMIT)
            report.emit = self._emitter.emit(result.entries)
            if settings.write_summary:
                report.summary_written = self._write_summary(result.entries)

            report.duration_ms = (perf_counter() - start) * 1000
            self._notify(ProgressEvent(ProgressKind.COMPLETE, total=len(plan.to_process)))
            log.bind(
                processed=len(report.processed),
                failed=len(report.failures),
                duration_ms=round(report.duration_ms, 1),
            ).info("processing complete")
            return report

    def _write_summary(self, entries: Sequence[TradeEntry]) -> bool:
        settings = self._settings
        summaries = self._summarizer.summarize(entries)
        try:
            self._summarizer.write_csv(settings.summary_csv_path, summaries)
            self._summarizer.write_json(settings.summary_json_path, summaries)
        except OutputWriteError as exc:
            log.bind(error_code=exc.error_code, path=exc.path).warning("failed to write ticker summary: {}", exc.message)
            return False
        return True

    def _checkpoint(self, phase: Phase) -> None:
        if self._should_stop is not None and self._should_stop():
            log.bind(phase=phase.value).warning("processing cancelled")
            raise ProcessingCancelledError(phase.value)

    def _on_file(self, index: int, total: int, ref: SourceFileRef) -> None:
        self._notify(ProgressEvent(ProgressKind.FILE, total=total, index=index, filename=ref.filename))

    def _notify(self, event: ProgressEvent) -> None:
        if self._progress is not None:
            self._progress(event)


__all__ = [
    "LedgerPipeline",
    "Phase",
    "ProgressCallback",
    "ProgressEvent",
    "ProgressKind",
    "RunReport",
    "StopCheck",
]
