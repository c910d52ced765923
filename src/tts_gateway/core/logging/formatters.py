"""
Log formatters for console and JSONL output.

    JsonlFormatter: one JSON object per line, for files and log shippers.
    ColoredConsoleFormatter: compact human-readable lines for a terminal.

Console example:
    14:30:05 [ INFO  ] (a1b2c3d4e5f6) tts_request provider=standard chars=42
    14:30:06 [ FAIL  ] (a1b2c3d4e5f6) provider_error status=429 code=QUOTA_EXCEEDED

Colors:
    Tags by severity; HTTP ``status`` fields green (2xx), yellow (4xx) or
    red (5xx); elapsed seconds green (< 1s), yellow (< 5s) or red.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict


class Colors:
    """ANSI escape codes."""
    RESET = "\033[0m"
    DIM = "\033[2m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"
    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


TAG_COLORS = {
    "SUCCESS": Colors.BRIGHT_GREEN,
    "FAIL": Colors.BRIGHT_RED,
    "ERROR": Colors.BRIGHT_RED,
    "WARN": Colors.BRIGHT_YELLOW,
    "INFO": Colors.BRIGHT_CYAN,
    "DEBUG": Colors.GRAY,
    "TRACE": Colors.DIM,
}


def supports_color() -> bool:
    """
    Whether ANSI colors should be written to stdout.

    Disabled by TTS_GATEWAY_NO_COLOR=1, by the NO_COLOR convention, and
    whenever stdout is not a terminal.
    """
    if os.getenv("TTS_GATEWAY_NO_COLOR", "0") == "1":
        return False
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    return bool(isatty and isatty())


def colorize(text: str, color: str, enabled: bool) -> str:
    if not enabled:
        return text
    return f"{color}{text}{Colors.RESET}"


def get_tag_color(tag: str) -> str:
    return TAG_COLORS.get(tag.upper(), Colors.WHITE)


class JsonlFormatter(logging.Formatter):
    """
    Format log records as JSON Lines.

    Output Format:
        {
            "ts": "2026-01-15T14:30:05+07:00",
            "level": 2,
            "tag": "INFO",
            "message": "tts_done",
            "request_id": "a1b2c3d4e5f6",
            "seconds": 0.82,
            "extra": {"provider": "standard", "bytes": 18432}
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created).astimezone().isoformat(),
            "level": getattr(record, "numeric_level", 2),
            "tag": getattr(record, "tag", record.levelname),
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }

        event = getattr(record, "event", None)
        if event:
            payload["event"] = event

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            payload["seconds"] = seconds

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            payload["extra"] = extra_data

        return json.dumps(payload, ensure_ascii=False, default=str)


class ColoredConsoleFormatter(logging.Formatter):
    """
    Format log records as ``HH:MM:SS [ TAG ] (rid) message key=value 0.123s``.

    Colors are decided per formatter instance so tests can build a plain
    formatter regardless of the terminal.
    """

    def __init__(self, use_colors: bool | None = None):
        super().__init__()
        self.use_colors = supports_color() if use_colors is None else use_colors

    def _c(self, text: str, color: str) -> str:
        return colorize(text, color, self.use_colors)

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [self._c(ts, Colors.DIM), self._c(f"[{tag:^7}]", get_tag_color(tag))]
        if rid != "-":
            parts.append(self._c(f"({rid})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        event = getattr(record, "event", None)
        if event:
            parts.append(self._c(f"event={event}", Colors.BLUE))

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            for k, v in extra_data.items():
                parts.append(self._c(f"{k}={v}", self._field_color(k, v)))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            if seconds < 1.0:
                time_color = Colors.GREEN
            elif seconds < 5.0:
                time_color = Colors.YELLOW
            else:
                time_color = Colors.RED
            parts.append(self._c(f"{seconds:.3f}s", time_color))

        return " ".join(parts)

    @staticmethod
    def _field_color(key: str, value: Any) -> str:
        if key == "status" and isinstance(value, int):
            if value < 400:
                return Colors.GREEN
            if value < 500:
                return Colors.YELLOW
            return Colors.RED
        if key == "provider":
            return Colors.CYAN
        return Colors.DIM
