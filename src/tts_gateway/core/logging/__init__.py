"""
tts-gateway Structured Logging.

A thin layer over the standard logging module that provides:
    - Numeric log levels (1-4) controlled by TTS_GATEWAY_LOG_LEVEL
    - Colored console output
    - Optional rotating JSONL file output (TTS_GATEWAY_LOG_DIR)
    - Request id correlation via contextvars
    - ``key=value`` fields on every call instead of preformatted strings

Usage:
    from tts_gateway.core.logging import get_logger, info, fail

    log = get_logger("tts-gateway.mymodule")
    info(log, "tts_request", provider="standard", chars=42)
    fail(log, "provider_error", status=500, message="backend error")

Module Structure:
    - levels.py: LogLevel enum and level mapping
    - context.py: Request id and configuration state
    - formatters.py: JsonlFormatter, ColoredConsoleFormatter and colors
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from .levels import LEVEL_MAP, LEVEL_NAMES, LogLevel, coerce_level
from .context import (
    get_level,
    get_level_name,
    get_log_config,
    get_request_id,
    is_configured,
    read_logging_config,
    set_configured,
    set_level,
    set_log_config,
    set_request_id,
)
from .formatters import ColoredConsoleFormatter, JsonlFormatter, supports_color

# Marker attribute so reconfiguration only replaces our own handlers
_HANDLER_FLAG = "_tts_gateway_handler"

# Third-party loggers that write request URLs at INFO; the Standard
# adapter's URL carries its API key
_QUIET_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: Optional[int | str | LogLevel] = None, force: bool = False) -> None:
    """
    Configure the logging system.

    Args:
        level: Log level (1-4, level name, or LogLevel enum). Overrides
            the configured level when given.
        force: Reconfigure even if already configured.
    """
    if is_configured() and not force:
        return

    log_config = read_logging_config()
    set_log_config(log_config)

    current_level = coerce_level(level if level is not None else log_config.get("level", LogLevel.NORMAL))
    set_level(current_level)
    python_level = LEVEL_MAP.get(current_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(logging.DEBUG - 10)  # filtering happens in the handlers
    root.handlers = [h for h in root.handlers if not getattr(h, _HANDLER_FLAG, False)]

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(python_level)
    console.setFormatter(ColoredConsoleFormatter())
    setattr(console, _HANDLER_FLAG, True)
    root.addHandler(console)

    log_dir = log_config.get("log_dir")
    if log_dir:
        Path(log_dir).mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            Path(log_dir) / str(log_config.get("jsonl_file", "tts-gateway.jsonl")),
            maxBytes=int(log_config.get("rotate_max_bytes", 10 * 1024 * 1024)),
            backupCount=int(log_config.get("rotate_backup_count", 5)),
            encoding="utf-8",
            delay=True,
        )
        file_handler.setLevel(logging.DEBUG - 10)  # everything goes to the file
        file_handler.setFormatter(JsonlFormatter())
        setattr(file_handler, _HANDLER_FLAG, True)
        root.addHandler(file_handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    set_configured(True)


def _emit(
    logger: logging.Logger,
    python_level: int,
    tag: str,
    numeric_level: LogLevel,
    msg: str,
    fields: Dict[str, Any],
) -> None:
    if numeric_level > get_level():
        return

    logger.log(
        python_level,
        msg,
        extra={
            "tag": tag,
            "numeric_level": int(numeric_level),
            "request_id": get_request_id(),
            "event": fields.pop("event", None),
            "seconds": fields.pop("seconds", None),
            "extra_data": fields or None,
        },
    )


LogFn = Callable[..., None]


def _helper(python_level: int, tag: str, numeric_level: LogLevel, doc: str) -> LogFn:
    def log_fn(logger: logging.Logger, msg: str, **fields: Any) -> None:
        _emit(logger, python_level, tag, numeric_level, msg, fields)

    log_fn.__doc__ = doc
    return log_fn


def get_logger(name: str = "tts-gateway") -> logging.Logger:
    """Get a logger instance, configuring logging if needed."""
    configure_logging()
    return logging.getLogger(name)


# name = (python level, console tag, shown from verbosity)
info = _helper(logging.INFO, "INFO", LogLevel.NORMAL, "Request lifecycle events.")
warn = _helper(logging.WARNING, "WARN", LogLevel.NORMAL, "Recoverable problems, e.g. rejected input.")
error = _helper(logging.ERROR, "ERROR", LogLevel.MINIMAL, "Errors that are always shown.")
success = _helper(logging.INFO, "SUCCESS", LogLevel.NORMAL, "A request or step that completed.")
fail = _helper(logging.ERROR, "FAIL", LogLevel.MINIMAL, "A failed request or provider call.")
verbose = _helper(logging.DEBUG, "INFO", LogLevel.VERBOSE, "Outbound calls and timings.")
debug = _helper(logging.DEBUG - 5, "DEBUG", LogLevel.DEBUG, "Full payloads.")


__all__ = [
    "LogLevel",
    "LEVEL_MAP",
    "LEVEL_NAMES",
    "coerce_level",
    "supports_color",
    "get_request_id",
    "set_request_id",
    "get_level",
    "get_level_name",
    "JsonlFormatter",
    "ColoredConsoleFormatter",
    "configure_logging",
    "get_logger",
    "info",
    "warn",
    "error",
    "success",
    "fail",
    "verbose",
    "debug",
]
