"""
Numeric log levels for tts-gateway.

The gateway exposes four verbosity steps instead of the stdlib names,
which maps naturally onto a single TTS_GATEWAY_LOG_LEVEL knob:

    1 = MINIMAL  - startup, shutdown, failed requests
    2 = NORMAL   - request lifecycle and provider errors (default)
    3 = VERBOSE  - outbound provider calls
    4 = DEBUG    - full outbound payloads

Mapping to Python levels:
    MINIMAL -> WARNING, NORMAL -> INFO, VERBOSE -> DEBUG, DEBUG -> 5 (TRACE)
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any


class LogLevel(IntEnum):
    """Verbosity steps, ordered so that higher means chattier."""
    MINIMAL = 1
    NORMAL = 2
    VERBOSE = 3
    DEBUG = 4


LEVEL_MAP = {
    LogLevel.MINIMAL: logging.WARNING,
    LogLevel.NORMAL: logging.INFO,
    LogLevel.VERBOSE: logging.DEBUG,
    LogLevel.DEBUG: logging.DEBUG - 5,
}

LEVEL_NAMES = {level.value: level.name for level in LogLevel}

# Accepted spellings, including stdlib names for familiarity
_NAME_MAP = {
    "MINIMAL": LogLevel.MINIMAL,
    "NORMAL": LogLevel.NORMAL,
    "VERBOSE": LogLevel.VERBOSE,
    "DEBUG": LogLevel.DEBUG,
    "TRACE": LogLevel.DEBUG,
    "CRITICAL": LogLevel.MINIMAL,
    "ERROR": LogLevel.MINIMAL,
    "WARNING": LogLevel.MINIMAL,
    "WARN": LogLevel.MINIMAL,
    "INFO": LogLevel.NORMAL,
}


def coerce_level(value: Any) -> LogLevel:
    """
    Convert an int, string or LogLevel into a LogLevel.

    Integers 1-4 are taken literally; larger integers are treated as
    stdlib levels (logging.WARNING -> MINIMAL, logging.INFO -> NORMAL).
    Anything unrecognised falls back to NORMAL.

    Examples:
        >>> coerce_level("verbose")
        <LogLevel.VERBOSE: 3>
        >>> coerce_level(logging.WARNING)
        <LogLevel.MINIMAL: 1>
    """
    if isinstance(value, LogLevel):
        return value

    if isinstance(value, int) and not isinstance(value, bool):
        if 1 <= value <= 4:
            return LogLevel(value)
        if value >= logging.WARNING:
            return LogLevel.MINIMAL
        if value >= logging.INFO:
            return LogLevel.NORMAL
        return LogLevel.DEBUG

    if isinstance(value, str):
        text = value.strip().upper()
        if text.isdigit():
            return coerce_level(int(text))
        return _NAME_MAP.get(text, LogLevel.NORMAL)

    return LogLevel.NORMAL
