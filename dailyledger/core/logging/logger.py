"""Structured logging utilities with per-run trace propagation."""

from __future__ import annotations

import json
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import date, datetime
from typing import IO, Any, Iterator
from uuid import uuid4

from loguru import logger

from dailyledger.core.logging.config import LogConfig

_RUN_ID_VAR: ContextVar[str | None] = ContextVar("dailyledger_run_id", default=None)
_CONTEXT_VAR: ContextVar[dict[str, Any]] = ContextVar("dailyledger_log_context", default={})

_RESERVED_KEYS = {"run_id", "component", "error_code"}


def _ensure_run_id() -> str:
    run_id = _RUN_ID_VAR.get()
    if run_id is None:
        run_id = uuid4().hex
        _RUN_ID_VAR.set(run_id)
    return run_id


def _patch_record(record: dict[str, Any]) -> None:
    extra = record.setdefault("extra", {})
    if not extra.get("run_id"):
        extra["run_id"] = _ensure_run_id()

    for key, value in _CONTEXT_VAR.get({}).items():
        if key != "run_id":
            extra.setdefault(key, value)

    extra.setdefault("component", "dailyledger")
    extra.setdefault("error_code", None)


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _format_payload(record: dict[str, Any]) -> dict[str, Any]:
    extra = record.get("extra", {})
    context = {k: v for k, v in extra.items() if k not in _RESERVED_KEYS}
    level_value = record.get("level")
    level_name = getattr(level_value, "name", None) or str(level_value or "INFO")
    payload: dict[str, Any] = {
        "timestamp": record["time"].isoformat() if "time" in record else datetime.now().isoformat(),
        "level": level_name,
        "message": record.get("message"),
        "run_id": extra.get("run_id"),
        "component": extra.get("component"),
        "error_code": extra.get("error_code"),
    }
    if context:
        payload["context"] = context
    exception = record.get("exception")
    if exception:
        payload["exception"] = str(exception)
    return payload


class _StreamJsonSink:
    """Sink writing structured JSON payloads to a text stream (``sys.stderr`` when unset)."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream

    def __call__(self, message: Any) -> None:
        stream = self._stream or sys.stderr
        payload = _format_payload(message.record)
        stream.write(json.dumps(payload, default=_json_default))
        stream.write("\n")
        stream.flush()


class _StreamTextSink:
    """Sink writing pre-formatted lines to a text stream (``sys.stderr`` when unset)."""

    def __init__(self, stream: IO[str] | None = None) -> None:
        self._stream = stream

    def __call__(self, message: Any) -> None:
        stream = self._stream or sys.stderr
        stream.write(str(message))
        stream.flush()


class _FileJsonSink:
    """Sink appending JSON lines to a file path."""

    def __init__(self, path: str) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        self._path = path

    def __call__(self, message: Any) -> None:
        payload = _format_payload(message.record)
        with open(self._path, "a", encoding="utf-8") as file:
            file.write(json.dumps(payload, default=_json_default))
            file.write("\n")


def _configure_from_config(config: LogConfig) -> None:
    handlers: list[dict[str, Any]] = []
    if config.console_output:
        if config.serialize:
            handlers.append({"sink": _StreamJsonSink(config.console_stream), "level": config.level.upper()})
        else:
            handlers.append({"sink": _StreamTextSink(config.console_stream), "level": config.level.upper(), "format": config.format})
    if config.file_output and config.file_path:
        handlers.append({"sink": _FileJsonSink(config.file_path), "level": config.level.upper()})

    configure_kwargs: dict[str, Any] = {"handlers": handlers, "patcher": _patch_record}
    if config.extra:
        configure_kwargs["extra"] = dict(config.extra)
    logger.configure(**configure_kwargs)


def configure_logging(level: str = "INFO", **kwargs: Any) -> None:
    """Configure structured logging with the provided level and options."""

    _configure_from_config(LogConfig(level=level, **kwargs))


class StructuredLogger:
    """Wrapper exposing the configured loguru logger with run-scoped helpers."""

    def __init__(self, config: LogConfig | None = None) -> None:
        self.config = config or LogConfig()
        _configure_from_config(self.config)
        self.logger = logger

    def configure(self, **kwargs: Any) -> None:
        """Update logger configuration at runtime."""

        self.config = self.config.model_copy(update=kwargs)
        _configure_from_config(self.config)

    @contextmanager
    def context(self, *, run_id: str | None = None, **extra: Any) -> Iterator[str]:
        """Context manager ensuring a run id is available for nested log events."""

        with log_context(run_id=run_id, **extra) as active_run:
            yield active_run


def get_logger(component: str | None = None) -> Any:
    """Return the shared logger bound to ``component``."""

    if component:
        return logger.bind(component=component)
    return logger


@contextmanager
def log_context(*, run_id: str | None = None, **extra: Any) -> Iterator[str]:
    """Scope a run id and additional metadata to every nested log event."""

    previous_context = _CONTEXT_VAR.get({})
    context_token = _CONTEXT_VAR.set({**previous_context, **extra})

    active_run = run_id or uuid4().hex
    run_token = _RUN_ID_VAR.set(active_run)

    try:
        yield active_run
    finally:
        _RUN_ID_VAR.reset(run_token)
        _CONTEXT_VAR.reset(context_token)


def current_run_id() -> str:
    """Return the active run id, generating one if required."""

    return _ensure_run_id()


__all__ = [
    "StructuredLogger",
    "configure_logging",
    "current_run_id",
    "get_logger",
    "log_context",
    "logger",
]
