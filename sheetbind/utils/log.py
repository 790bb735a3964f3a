"""Logging helpers for the sheetbind package."""

# Module responsibilities:
# - Centralize logging configuration with console + optional rotating file handlers.
# - Provide get_logger() that configures the package root logger exactly once.

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path
from typing import Optional

LOG_DIR_ENV = "SHEETBIND_LOG_DIR"
_LOG_CONFIGURED = False


def _resolve_log_dir(log_dir: Optional[Path] = None) -> Optional[Path]:
    """Resolve the log directory, ensuring existence when one is configured."""
    if log_dir is None:
        env_value = os.environ.get(LOG_DIR_ENV)
        if not env_value:
            return None
        log_dir = Path(env_value)
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _configure_logging(log_dir: Optional[Path] = None) -> None:
    """Configure the package logger once with console + rotating file handlers."""
    global _LOG_CONFIGURED
    if _LOG_CONFIGURED:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    root_logger = logging.getLogger("sheetbind")
    root_logger.setLevel(logging.INFO)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(logging.WARNING)
    root_logger.addHandler(console_handler)

    directory = _resolve_log_dir(log_dir)
    if directory is not None:
        file_handler = logging.handlers.RotatingFileHandler(
            directory / "sheetbind.log", maxBytes=2_000_000, backupCount=3, encoding="utf-8"
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(logging.INFO)
        root_logger.addHandler(file_handler)

    _LOG_CONFIGURED = True


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return a package-scoped logger.

    Args:
        name: Logger name suffix appended to the package root logger namespace.
        log_dir: Optional directory for the rotating log file; falls back to
            ``$SHEETBIND_LOG_DIR`` and to console-only logging when neither is set.

    Returns:
        Configured logger scoped under ``sheetbind``.
    """

    _configure_logging(log_dir)
    return logging.getLogger(f"sheetbind.{name}")
