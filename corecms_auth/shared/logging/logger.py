"""Loguru setup with a per-request correlation id."""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_FMT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)
_NO_CORRELATION = "-"
_DEFAULT_LOG_FILE = Path(__file__).resolve().parents[2] / "instance" / "auth.log"

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default=_NO_CORRELATION)

_logger.configure(extra={"correlation_id": _NO_CORRELATION})


def set_correlation_id(value: str | None) -> None:
    _correlation_id.set(value or _NO_CORRELATION)


def get_correlation_id() -> str:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(_NO_CORRELATION)


class ContextualLogger:
    """Loguru proxy that binds the current correlation id on every call.

    Code running on the token reaper thread logs with ``-`` since the
    request context does not follow the deletion there.
    """

    def __getattr__(self, name: str):
        return getattr(_logger.bind(correlation_id=_correlation_id.get()), name)


class _StdlibBridge(logging.Handler):
    """Forward stdlib records (werkzeug, sqlalchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _logger.opt(depth=6, exception=record.exc_info).bind(
            correlation_id=_correlation_id.get()
        ).log(level, record.getMessage())


def _log_file() -> Path:
    path = Path(os.getenv("LOG_FILE") or _DEFAULT_LOG_FILE)
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(level: str | None = None, *, debug_mode: bool = False) -> None:
    """(Re)install the stderr and file sinks. Safe to call more than once."""
    level = "DEBUG" if debug_mode else (level or os.getenv("LOG_LEVEL") or "INFO").upper()
    common = dict(level=level, format=_FMT, filter=sanitize_record, backtrace=False, diagnose=False)

    _logger.remove()
    _logger.add(sys.stderr, colorize=True, **common)
    _logger.add(_log_file(), colorize=False, enqueue=True, encoding="utf-8", **common)

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    logging.getLogger("werkzeug").setLevel(logging.INFO)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


logger = ContextualLogger()

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
