"""Loguru configuration helpers for the blob disk."""

from __future__ import annotations

import logging
import os
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from os import PathLike
from pathlib import Path
from typing import Any, Dict, Optional, Union

from loguru import logger

from blobdisk import __version__

PathLikeArg = Union[str, PathLike]

_LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<8} | "
    "env={extra[environment]} | ver={extra[service_version]} | "
    "disk={extra[disk]} | {name}:{line} | {message}"
)

_ctx_environment: ContextVar[str] = ContextVar("log_environment", default="local")
_ctx_disk: ContextVar[str] = ContextVar("log_disk", default="-")

_CONTEXT_VARS: Dict[str, ContextVar[str]] = {
    "environment": _ctx_environment,
    "disk": _ctx_disk,
}


def _inject_context(record: Dict[str, Any]) -> None:
    extra = record["extra"]
    extra.setdefault("service_version", __version__)
    for key, ctx in _CONTEXT_VARS.items():
        extra.setdefault(key, ctx.get())


def _std_logging_sink(message) -> None:
    record = message.record
    exc = record["exception"]
    exc_info = (exc.type, exc.value, exc.traceback) if exc else None

    log_record = logging.LogRecord(
        name=record["name"],
        level=record["level"].no,
        pathname=record["file"].path,
        lineno=record["line"],
        msg=record["message"],
        args=(),
        exc_info=exc_info,
        func=record["function"],
    )
    for k, v in record["extra"].items():
        setattr(log_record, k, v)

    logging.getLogger(record["name"]).handle(log_record)


def setup_logging(*, force: bool = False, level: str | None = None) -> None:
    """Configure Loguru sinks, bridge to stdlib, and attach contextual metadata."""
    if not force and getattr(setup_logging, "_configured", False):
        return

    logger.remove()

    log_level = (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    environment = os.getenv("ENV", "local")

    _ctx_environment.set(environment)
    logger.configure(extra={"service_version": __version__}, patcher=_inject_context)

    logger.add(
        sys.stdout,
        level=log_level,
        format=_LOG_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )
    logger.add(
        _std_logging_sink,
        level=log_level,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )

    std_level = getattr(logging, log_level, logging.INFO)
    logging.getLogger().setLevel(std_level)
    setup_logging._configured = True  # type: ignore[attr-defined]


def setup_test_logging(
    arg: Optional[PathLikeArg] = None,
    *,
    level: Optional[str] = None,
    filename: str = "pytest.log",
) -> None:
    """
    Lightweight logging setup for tests.

    ``arg`` may be a level name ("DEBUG") or a path. A directory path receives
    ``<dir>/<filename>``; any other path is used as the log file itself.
    """
    inferred_level: Optional[str] = None
    target: Optional[Path] = None
    if arg is not None:
        if hasattr(arg, "__fspath__"):
            target = Path(arg)  # type: ignore[arg-type]
        elif isinstance(arg, str) and ("/" in arg or arg.endswith(".log")):
            target = Path(arg)
        elif isinstance(arg, str):
            inferred_level = arg

    effective_level = (
        level or inferred_level or os.getenv("PYTEST_LOGLEVEL") or "DEBUG"
    ).upper()

    setup_logging(force=True, level=effective_level)

    if target is None:
        return

    if target.suffix != ".log":
        target.mkdir(parents=True, exist_ok=True)
        target = target / filename
    target.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        str(target),
        level=effective_level,
        format=_LOG_FORMAT,
        enqueue=False,
        backtrace=False,
        diagnose=False,
    )


@contextmanager
def logging_context(**values: str):
    """Context manager to set structured logging fields (e.g., disk)."""
    tokens = []
    for key, value in values.items():
        ctx = _CONTEXT_VARS.get(key)
        if ctx is not None:
            tokens.append((ctx, ctx.set(value or "-")))
    try:
        with logger.contextualize(**values):
            yield
    finally:
        for ctx, token in reversed(tokens):
            ctx.reset(token)


__all__ = ["setup_logging", "setup_test_logging", "logging_context"]
