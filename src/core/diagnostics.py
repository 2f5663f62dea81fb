# src/core/diagnostics.py
"""
Logging / debug helpers shared by the wizard components.

- `get_logger()` returns the `flatmate_wizard` logger. When FLATMATE_DEBUG is
  truthy a rotating file handler is attached at logs/wizard_debug.log.
- `log_exception()` always prints to stderr and best-effort logs to file.
"""

from __future__ import annotations

import logging
import os
import sys
import traceback
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "flatmate_wizard"
LOG_PATH = os.path.join("logs", "wizard_debug.log")

_LOGGER: logging.Logger | None = None


def debug_enabled() -> bool:
    return os.getenv("FLATMATE_DEBUG", "").strip().lower() in {"1", "true", "yes", "on"}


def get_logger() -> logging.Logger:
    """Create/reuse the wizard logger."""
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    logger = logging.getLogger(LOGGER_NAME)

    # Avoid duplicate handlers if reloaded in REPL/tests
    if debug_enabled() and not any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        logger.setLevel(logging.DEBUG)
        try:
            os.makedirs(os.path.dirname(LOG_PATH), exist_ok=True)
            handler = RotatingFileHandler(LOG_PATH, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
            handler.setFormatter(
                logging.Formatter(
                    fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
                    datefmt="(%Y-%m-%d %H:%M:%S)",
                )
            )
            logger.addHandler(handler)
        except OSError:
            # No file log; stderr printing in log_exception keeps working.
            pass

    _LOGGER = logger
    return logger


def log_exception(prefix: str, exc: BaseException) -> None:
    """Print an error with traceback to stderr and log it to file when enabled."""
    tb = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    msg = f"{prefix}: {exc}\n{tb}"

    print(f"[WIZARD ERROR] {msg}", file=sys.stderr, flush=True)

    logger = get_logger()
    if logger.handlers:
        logger.error(msg)


__all__ = ["LOGGER_NAME", "debug_enabled", "get_logger", "log_exception"]
