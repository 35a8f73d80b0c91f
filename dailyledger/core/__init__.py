"""Core engine: configuration, models, data access, services and the pipeline driver."""

from dailyledger.core.config import LedgerSettings, LoggingSettings, build_settings
from dailyledger.core.pipeline import LedgerPipeline, ProgressEvent, ProgressKind, RunReport

__all__ = [
    "LedgerPipeline",
    "LedgerSettings",
    "LoggingSettings",
    "ProgressEvent",
    "ProgressKind",
    "RunReport",
    "build_settings",
]
