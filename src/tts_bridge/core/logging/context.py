"""
Request Context and Configuration State for Logging.

The request id lives in a ContextVar so that every log line emitted while
handling one HTTP request (including lines from the backend coroutine)
carries the same id. Level and file settings are module-level state shared
by the whole process.

Environment Variables:
    - TTS_BRIDGE_LOG_LEVEL: Override log level (1-4 or name)
    - TTS_BRIDGE_LOG_DIR: Directory for the JSONL log file
    - TTS_BRIDGE_JSONL_FILE: JSONL filename
    - TTS_BRIDGE_LOG_ROTATE_BYTES: Max file size before rotation
    - TTS_BRIDGE_LOG_ROTATE_BACKUP: Rotated files to keep
"""
from __future__ import annotations

import os
from contextvars import ContextVar
from typing import Any, Dict

import yaml

from .levels import LEVEL_NAMES, LogLevel

# "-" marks log lines emitted outside of a request
_request_id: ContextVar[str] = ContextVar("request_id", default="-")

_configured: bool = False
_log_config: Dict[str, Any] = {}
_current_level: LogLevel = LogLevel.NORMAL


def get_request_id() -> str:
    """Get current request ID, or "-" if not set."""
    return _request_id.get()


def set_request_id(rid: str) -> None:
    """Set request ID in context for log correlation."""
    _request_id.set(rid)


def get_level() -> LogLevel:
    return _current_level


def set_level(level: LogLevel) -> None:
    global _current_level
    _current_level = level


def get_level_name() -> str:
    """Get current log level as a name ("MINIMAL" ... "DEBUG")."""
    return LEVEL_NAMES.get(_current_level, "NORMAL")


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


def _int_env(name: str) -> int | None:
    value = os.getenv(name)
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        return None


def read_logging_config() -> Dict[str, Any]:
    """
    Read logging configuration from the settings file and environment.

    Priority (highest to lowest):
        1. Environment variables (TTS_BRIDGE_LOG_LEVEL, etc.)
        2. settings.yaml logging section
        3. Default values

    Returns:
        Dictionary with resolved logging configuration.
    """
    from tts_bridge.core.config import ConfigValidationError, load_settings

    cfg: Dict[str, Any] = {}

    try:
        settings = load_settings()
        cfg.update(settings.raw.get("logging", {}) or {})
    except (OSError, yaml.YAMLError, ConfigValidationError):
        # Unreadable settings must not prevent logging from starting
        pass

    if os.getenv("TTS_BRIDGE_LOG_LEVEL"):
        cfg["level"] = os.environ["TTS_BRIDGE_LOG_LEVEL"]
    if os.getenv("TTS_BRIDGE_LOG_DIR"):
        cfg["log_dir"] = os.environ["TTS_BRIDGE_LOG_DIR"]
    if os.getenv("TTS_BRIDGE_JSONL_FILE"):
        cfg["jsonl_file"] = os.environ["TTS_BRIDGE_JSONL_FILE"]

    rotate_bytes = _int_env("TTS_BRIDGE_LOG_ROTATE_BYTES")
    if rotate_bytes is not None:
        cfg["rotate_max_bytes"] = rotate_bytes
    rotate_backup = _int_env("TTS_BRIDGE_LOG_ROTATE_BACKUP")
    if rotate_backup is not None:
        cfg["rotate_backup_count"] = rotate_backup

    return cfg
