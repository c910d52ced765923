"""
Request context and module-level logging state.

The request id lives in a ContextVar so that every log line emitted while a
request is handled (including from FastAPI's worker threads, which copy the
context) carries the same correlation id.

Environment Variables:
    - TTS_GATEWAY_LOG_LEVEL: Override log level (1-4 or name)
    - TTS_GATEWAY_LOG_DIR: Enable JSONL file output in this directory
    - TTS_GATEWAY_JSONL_FILE: JSONL filename (default tts-gateway.jsonl)
    - TTS_GATEWAY_LOG_ROTATE_BYTES: Max log file size before rotation
    - TTS_GATEWAY_LOG_ROTATE_BACKUP: Number of rotated files to keep
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

import yaml

from .levels import LEVEL_NAMES, LogLevel

# "-" marks log lines emitted outside any request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Request id of the current context, or "-"."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Bind a request id to the current context."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    return LEVEL_NAMES.get(int(_current_level), "NORMAL")


def is_configured() -> bool:
    return _configured


def set_configured(value: bool) -> None:
    global _configured
    _configured = value


def get_log_config() -> Dict[str, Any]:
    return _log_config


def set_log_config(config: Dict[str, Any]) -> None:
    global _log_config
    _log_config = config


def _env_int(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def read_logging_config() -> Dict[str, Any]:
    """
    Resolve logging options from the settings file and the environment.

    Priority (highest first):
        1. TTS_GATEWAY_LOG_* environment variables
        2. The ``logging`` section of the settings file
        3. Built-in defaults (applied by configure_logging)

    Returns:
        Dictionary with keys among level, log_dir, jsonl_file,
        rotate_max_bytes and rotate_backup_count.
    """
    from tts_gateway.core.config import load_settings, settings_path

    cfg: Dict[str, Any] = {}

    try:
        settings = load_settings(settings_path())
    except (OSError, yaml.YAMLError):
        # An unreadable settings file must not prevent logging from starting
        settings = None
    if settings is not None:
        cfg.update(settings.raw.get("logging", {}) or {})

    if os.getenv("TTS_GATEWAY_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_GATEWAY_LOG_LEVEL"]
    if os.getenv("TTS_GATEWAY_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_GATEWAY_LOG_DIR"]
    if os.getenv("TTS_GATEWAY_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_GATEWAY_JSONL_FILE"]

    rotate_bytes = _env_int("TTS_GATEWAY_LOG_ROTATE_BYTES")
    if rotate_bytes is not None:
        cfg["rotate_max_bytes"] = rotate_bytes
    rotate_backup = _env_int("TTS_GATEWAY_LOG_ROTATE_BACKUP")
    if rotate_backup is not None:
        cfg["rotate_backup_count"] = rotate_backup

    return cfg
