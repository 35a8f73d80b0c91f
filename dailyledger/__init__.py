"""dailyledger - consolidate daily market reports into reconciled CSV views.

Source workbooks named ``YYYY MM DD ...xlsx`` are ingested incrementally,
forward-filled across every trading date and written out as a combined view,
one file per date and one file per ticker.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from dailyledger.core.config import LedgerSettings, build_settings
from dailyledger.core.pipeline import LedgerPipeline, ProgressCallback, RunReport

__version__ = "0.1.0"


def process(
    input_dir: str | Path | None = None,
    output_dir: str | Path | None = None,
    *,
    full: bool = False,
    progress: ProgressCallback | None = None,
    **settings: Any,
) -> RunReport:
    """Run one processing pass with ad-hoc settings.

    Example:
        >>> report = dailyledger.process("data/downloads", "data/reports")
        >>> report.stats.forward_filled
    """

    resolved = build_settings(input_dir=input_dir, output_dir=output_dir, **settings)
    return LedgerPipeline(resolved, progress=progress).run(force_full=full)


__all__ = ["LedgerPipeline", "LedgerSettings", "RunReport", "__version__", "build_settings", "process"]
