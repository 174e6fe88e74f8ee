"""
Logging configuration for Nano Exhibition Manager.

Single 'nanoexpo' logger used across all modules; module loggers
(nanoexpo.engine.store, nanoexpo.db.storage, ...) propagate into it.

  Log file : logs/nanoexpo.log
  Rotation : 5 MB × 3 backups
  Level    : LOG_LEVEL env var (DEBUG / INFO / WARNING / ERROR / CRITICAL)
             defaults to INFO when unset
  Console  : optional stderr echo (nanoexpo --verbose)

Usage
-----
    from nanoexpo.logging_config import configure_logging, log_call

    # Once at startup (idempotent, safe to call multiple times):
    configure_logging()

    # On any function you want traced:
    @log_call
    def exhibitors_list(search):
        ...

Log format per line
-------------------
    2026-10-16 09:12:44 | DEBUG    | CALL exhibitors_list | args=(search='nano')
    2026-10-16 09:12:44 | INFO     | OK   exhibitors_list | 3ms
    2026-10-16 09:12:51 | ERROR    | FAIL booths_add | ValueError: Booth code is required | 1ms
"""

import functools
import logging
import logging.handlers
import os
import time
from pathlib import Path

LOGGER_NAME = "nanoexpo"

_LOG_DIR = Path(__file__).parent.parent / "logs"
_LOG_FILE = _LOG_DIR / "nanoexpo.log"
_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3
_MAX_ARG_REPR = 80


def configure_logging(verbose: bool = False) -> logging.Logger:
    """
    Set up the nanoexpo logger. Idempotent, so safe to call on every CLI entry.

    With verbose=True a stderr handler is attached as well (once).
    Returns the configured logger.
    """
    _LOG_DIR.mkdir(exist_ok=True)

    level_name = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger(LOGGER_NAME)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT)

    has_file = any(isinstance(h, logging.handlers.RotatingFileHandler) for h in logger.handlers)
    if not has_file:
        logger.setLevel(level)
        handler = logging.handlers.RotatingFileHandler(
            _LOG_FILE,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    has_console = any(type(h) is logging.StreamHandler for h in logger.handlers)
    if verbose and not has_console:
        console = logging.StreamHandler()
        console.setFormatter(formatter)
        logger.addHandler(console)

    return logger


def _short_repr(value) -> str:
    """repr() clipped so whole aggregates don't flood the log."""
    text = repr(value)
    if len(text) > _MAX_ARG_REPR:
        return text[:_MAX_ARG_REPR - 3] + "..."
    return text


def log_call(func):
    """
    Decorator: logs entry, clean exit, and exceptions for any function.

    - DEBUG on entry   : CALL <name> | args=(...)
    - INFO  on success : OK   <name> | <N>ms
    - ERROR on failure : FAIL <name> | ExcType: message | <N>ms   (then re-raises)
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = logging.getLogger(LOGGER_NAME)
        name = func.__name__
        start = time.perf_counter()

        parts = [_short_repr(a) for a in args] + [f"{k}={_short_repr(v)}" for k, v in kwargs.items()]
        arg_str = ", ".join(parts) if parts else "—"
        logger.debug(f"CALL {name} | args=({arg_str})")

        try:
            result = func(*args, **kwargs)
            ms = int((time.perf_counter() - start) * 1000)
            logger.info(f"OK   {name} | {ms}ms")
            return result
        except Exception as exc:
            ms = int((time.perf_counter() - start) * 1000)
            logger.error(f"FAIL {name} | {type(exc).__name__}: {exc} | {ms}ms")
            raise

    return wrapper
