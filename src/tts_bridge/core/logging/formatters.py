"""
Log Formatters for JSON and Console Output.

    JsonlFormatter: one JSON object per line, for log files and aggregators.
    ColoredConsoleFormatter: human-readable, ANSI-colored terminal output.

Output Examples:
    JSONL (file):
        {"ts":"2024-01-15T14:30:05+01:00","level":2,"tag":"INFO","message":"speech_request","request_id":"abc123","extra":{"chars":42}}

    Console (colored):
        14:30:05 [ INFO  ] (abc123) speech_request chars=42 voice=nova

Colors are disabled when stdout is not a TTY, when NO_COLOR is set, or
when TTS_BRIDGE_NO_COLOR=1.
"""
from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any, Dict


class Colors:
    """ANSI escape code constants for terminal colors."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    MAGENTA = "\033[35m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    GRAY = "\033[90m"

    BRIGHT_RED = "\033[91m"
    BRIGHT_GREEN = "\033[92m"
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"


def supports_color() -> bool:
    """
    Check whether ANSI colors should be used on stdout.

    Returns:
        False if TTS_BRIDGE_NO_COLOR=1 or NO_COLOR is set, or stdout is
        not a TTY. True otherwise.
    """
    if os.getenv("TTS_BRIDGE_NO_COLOR", "0") == "1":
        return False
    if os.getenv("NO_COLOR"):
        return False
    isatty = getattr(sys.stdout, "isatty", None)
    if isatty is None:
        return False
    return bool(isatty())


_TAG_COLORS = {
    "SUCCESS": Colors.BRIGHT_GREEN,
    "FAIL": Colors.BRIGHT_RED,
    "ERROR": Colors.BRIGHT_RED,
    "WARN": Colors.BRIGHT_YELLOW,
    "WARNING": Colors.BRIGHT_YELLOW,
    "INFO": Colors.BRIGHT_CYAN,
    "DEBUG": Colors.GRAY,
    "TRACE": Colors.DIM,
}


def get_tag_color(tag: str) -> str:
    """Get the color for a log tag (SUCCESS, FAIL, WARN, ...)."""
    return _TAG_COLORS.get(tag.upper(), Colors.WHITE)


def _use_colors() -> bool:
    # Read at format time so tests and configure_logging() can flip it
    import tts_bridge.core.logging as log_module
    return getattr(log_module, "USE_COLORS", False)


def colorize(text: str, color: str) -> str:
    """Wrap text in an ANSI color if colors are enabled."""
    if not _use_colors():
        return text
    return f"{color}{text}{Colors.RESET}"


class JsonlFormatter(logging.Formatter):
    """
    Format log records as JSON Lines for file output.

    Output Format:
        {
            "ts": "2024-01-15T14:30:05+01:00",
            "level": 2,
            "tag": "INFO",
            "message": "speech_request",
            "request_id": "abc123",
            "event": "backend",      # optional
            "seconds": 0.5,          # optional
            "extra": {...}           # optional
        }
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).astimezone().isoformat()

        payload: Dict[str, Any] = {
            "ts": ts,
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
    Format log records with ANSI colors for console output.

    Output Format:
        HH:MM:SS [ TAG   ] (rid) message key=value 0.123s
    """

    def format(self, record: logging.LogRecord) -> str:
        ts = datetime.fromtimestamp(record.created).strftime("%H:%M:%S")
        tag = getattr(record, "tag", record.levelname)
        rid = getattr(record, "request_id", "-")

        parts = [
            colorize(ts, Colors.DIM),
            colorize(f"[{tag:^7}]", get_tag_color(tag)),
        ]
        if rid != "-":
            parts.append(colorize(f"({rid})", Colors.DIM + Colors.CYAN))
        parts.append(record.getMessage())

        event = getattr(record, "event", None)
        if event:
            parts.append(colorize(f"event={event}", Colors.BLUE))

        seconds = getattr(record, "seconds", None)
        if seconds is not None:
            if seconds < 0.5:
                time_color = Colors.GREEN
            elif seconds < 2.0:
                time_color = Colors.YELLOW
            else:
                time_color = Colors.RED
            parts.append(colorize(f"{seconds:.3f}s", time_color))

        extra_data = getattr(record, "extra_data", None)
        if extra_data:
            for k, v in extra_data.items():
                parts.append(colorize(f"{k}={v}", self._field_color(k, v)))

        return " ".join(parts)

    def _field_color(self, key: str, value: Any) -> str:
        """
        Pick a color for an extra field.

        HTTP status codes are colored by class (2xx green, 4xx yellow,
        5xx red); backend voice names are highlighted; the rest is dim.
        """
        if key == "status" and isinstance(value, int):
            if value < 400:
                return Colors.GREEN
            if value < 500:
                return Colors.YELLOW
            return Colors.RED
        if key in ("voice_name", "backend"):
            return Colors.MAGENTA
        return Colors.DIM
