"""
Logging utilities for bezelgen.

Centralizes stdlib logging configuration for the CLI and scripts. Terminal
output is handled by the status writer (`bezelgen.utils.console`), which also
forwards every message to the `bezelgen` logger; this module decides where
those records go: a concise or JSON stream handler and/or a rotated session
log file under `./logs`.

Usage:
    from bezelgen.utils.logging import configure_logging, rotate_log_file

    configure_logging(level="INFO", log_file=rotate_log_file(Path("logs")), stream=False)
"""

from __future__ import annotations

import json
import logging
import logging.config
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

ACTIVE_LOG_NAME = "_console.log"
MAX_LOG_FILES = 14

_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


def _json_formatter(record: logging.LogRecord) -> str:
    """Render a log record as JSON string."""
    payload: Dict[str, Any] = {
        "level": record.levelname,
        "logger": record.name,
        "message": record.getMessage(),
    }
    if record.exc_info:
        payload["exc_info"] = logging.Formatter().formatException(record.exc_info)
    if record.stack_info:
        payload["stack_info"] = record.stack_info
    for key, value in vars(record).items():
        if key in _RESERVED_ATTRS or key == "extra":
            continue
        payload[key] = value
    if hasattr(record, "extra") and isinstance(record.extra, dict):
        payload.update(record.extra)
    return json.dumps(payload, default=str)


class JsonFormatter(logging.Formatter):
    """Minimal JSON formatter for structured logs."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        return _json_formatter(record)


def rotate_log_file(log_dir: Path, keep: int = MAX_LOG_FILES) -> Path:
    """
    Archive the previous session log and purge old ones.

    The active file is `<log_dir>/_console.log`. An existing one is renamed to
    `console_<timestamp>.log`, then only the `keep - 1` newest files are kept
    so the new session brings the total to `keep`. Returns the active path.
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    active = log_dir / ACTIVE_LOG_NAME
    if active.exists():
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%fZ")
        active.rename(log_dir / f"console_{stamp}.log")
        archived = sorted(
            (path for path in log_dir.iterdir() if path.is_file()),
            key=lambda path: path.stat().st_mtime,
            reverse=True,
        )
        for stale in archived[max(keep - 1, 0) :]:
            stale.unlink(missing_ok=True)
    return active


def configure_logging(
    level: str = "INFO",
    json_logs: bool = False,
    force: bool = True,
    log_file: Optional[Path] = None,
    stream: bool = True,
) -> None:
    """
    Configure root logging.

    Parameters
    ----------
    level : str
        Logging level name (e.g., "DEBUG", "INFO", "WARNING").
    json_logs : bool
        Whether to emit logs as JSON. If False, uses a concise human formatter.
    force : bool
        Whether to override existing logging configuration (recommended in CLI apps).
    log_file : Path | None
        Optional file to append records to (see `rotate_log_file`).
    stream : bool
        Whether to attach a stderr handler. The CLI disables it because the
        status writer already prints to the terminal.
    """
    formatter_name = "json" if json_logs else "console"

    handlers: Dict[str, Dict[str, Any]] = {}
    if stream:
        handlers["default"] = {
            "class": "logging.StreamHandler",
            "formatter": formatter_name,
            "level": level,
        }
    if log_file is not None:
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": str(log_file),
            "encoding": "utf-8",
            "formatter": formatter_name,
            "level": level,
        }
    if not handlers:
        handlers["null"] = {"class": "logging.NullHandler"}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "console": {
                    "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "json": {
                    "()": JsonFormatter,
                },
            },
            "handlers": handlers,
            "root": {
                "handlers": list(handlers),
                "level": level,
            },
        }
    )


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger with the given name. If name is None, returns the root logger.
    """
    return logging.getLogger(name)


__all__ = [
    "ACTIVE_LOG_NAME",
    "JsonFormatter",
    "MAX_LOG_FILES",
    "configure_logging",
    "get_logger",
    "rotate_log_file",
]
