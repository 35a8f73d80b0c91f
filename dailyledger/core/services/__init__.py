"""Reconciliation services: incremental planning, forward-fill, emission and summaries."""

from dailyledger.core.services.diff import IncrementPlan, plan_increment, purge_dates
from dailyledger.core.services.emitter import EmitReport, FailedView, ViewEmitter
from dailyledger.core.services.forward_fill import ForwardFillStats, ReconcileResult, reconcile
from dailyledger.core.services.summary import TickerSummarizer, TickerSummary

__all__ = [
    "EmitReport",
    "FailedView",
    "ForwardFillStats",
    "IncrementPlan",
    "ReconcileResult",
    "TickerSummarizer",
    "TickerSummary",
    "ViewEmitter",
    "plan_increment",
    "purge_dates",
    "reconcile",
]
