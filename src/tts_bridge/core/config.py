"""
Configuration Management for tts-bridge.

This module provides centralized configuration handling with:
    - Default values (Defaults class)
    - Dataclass-based configuration objects
    - YAML file loading with environment variable overrides
    - Validation with meaningful error messages

Configuration Hierarchy (highest priority first):
    1. Environment variables (TTS_BRIDGE_BACKEND, AZURE_SPEECH_KEY, etc.)
    2. YAML config file (config/settings.yaml or $TTS_BRIDGE_SETTINGS)
    3. Defaults class values

Example settings.yaml:
    backend:
      engine: azure
      azure_region: westeurope
      timeout_s: 20

    speech:
      max_input_chars: 4096
      organization: my-org

    logging:
      level: 3  # VERBOSE
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_SETTINGS_PATH = "config/settings.yaml"


class ConfigValidationError(Exception):
    """
    Raised when configuration validation fails.

    This exception is thrown when a configuration value is outside
    acceptable bounds or of the wrong type.
    """
    pass


class Defaults:
    """
    Centralized default configuration values.

    Sections:
        - Server: Bind address for uvicorn
        - Backend: Which Microsoft speech service to call and how
        - Speech: OpenAI request limits and response header values
        - Logging: Log level and formatting
        - Metrics: Prometheus collection
    """

    # ─────────────────────────────────────────────────────────────────────────
    # Server
    # ─────────────────────────────────────────────────────────────────────────
    SERVER_HOST = "0.0.0.0"
    SERVER_PORT = 8000

    # ─────────────────────────────────────────────────────────────────────────
    # Backend
    # ─────────────────────────────────────────────────────────────────────────
    BACKEND_ENGINE = "edge"             # edge (no credentials) or azure
    BACKEND_TIMEOUT_S = 30.0            # Per-request network timeout
    BACKEND_AZURE_REGION = "eastus"
    BACKEND_USER_AGENT = "tts-bridge"

    # ─────────────────────────────────────────────────────────────────────────
    # Speech endpoint
    # ─────────────────────────────────────────────────────────────────────────
    SPEECH_MAX_INPUT_CHARS = 4096       # OpenAI's documented input cap, 0 = off
    SPEECH_ORGANIZATION = "tts-bridge"  # openai-organization header
    SPEECH_API_VERSION = "2020-10-01"   # openai-version header

    # ─────────────────────────────────────────────────────────────────────────
    # Logging
    # ─────────────────────────────────────────────────────────────────────────
    LOGGING_TEXT_PREVIEW_CHARS = 80
    LOGGING_LEVEL = 2                   # 1=MINIMAL, 2=NORMAL, 3=VERBOSE, 4=DEBUG

    # ─────────────────────────────────────────────────────────────────────────
    # Metrics
    # ─────────────────────────────────────────────────────────────────────────
    METRICS_ENABLED = True


@dataclass
class ServerConfig:
    """Bind address used when the service is started from the command line."""
    host: str = Defaults.SERVER_HOST
    port: int = Defaults.SERVER_PORT


@dataclass
class BackendConfig:
    """
    Synthesis backend configuration.

    The edge backend needs nothing; the azure backend needs a
    subscription key and the region the key was issued for.
    """
    engine: str = Defaults.BACKEND_ENGINE
    timeout_s: float = Defaults.BACKEND_TIMEOUT_S
    azure_key: Optional[str] = None
    azure_region: str = Defaults.BACKEND_AZURE_REGION
    user_agent: str = Defaults.BACKEND_USER_AGENT


@dataclass
class SpeechConfig:
    """Limits and header values for the OpenAI speech endpoint."""
    max_input_chars: int = Defaults.SPEECH_MAX_INPUT_CHARS
    organization: str = Defaults.SPEECH_ORGANIZATION
    api_version: str = Defaults.SPEECH_API_VERSION


@dataclass
class LoggingConfig:
    """
    Logging configuration.

    Log levels:
        1 = MINIMAL: Startup, shutdown, critical errors only
        2 = NORMAL: Request lifecycle (default)
        3 = VERBOSE: Parameter mapping, per-stage timing
        4 = DEBUG: Full request text, internal state
    """
    text_preview_chars: int = Defaults.LOGGING_TEXT_PREVIEW_CHARS
    level: int = Defaults.LOGGING_LEVEL


@dataclass
class MetricsConfig:
    enabled: bool = Defaults.METRICS_ENABLED


@dataclass
class BridgeConfig:
    """
    Validated configuration for the whole service.

    Usage:
        settings = load_settings()
        config = settings.get_config()
        print(config.backend.engine)
    """
    server: ServerConfig = field(default_factory=ServerConfig)
    backend: BackendConfig = field(default_factory=BackendConfig)
    speech: SpeechConfig = field(default_factory=SpeechConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    metrics: MetricsConfig = field(default_factory=MetricsConfig)

    @classmethod
    def from_settings(cls, settings: "Settings") -> "BridgeConfig":
        """
        Create BridgeConfig from Settings with validation.

        Args:
            settings: Raw Settings object loaded from YAML.

        Returns:
            Validated BridgeConfig instance.

        Raises:
            ConfigValidationError: If any value fails validation.
        """
        raw = settings.raw

        server_raw = raw.get("server", {}) or {}
        try:
            server = ServerConfig(
                host=str(server_raw.get("host", Defaults.SERVER_HOST)),
                port=int(server_raw.get("port", Defaults.SERVER_PORT)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"server section is invalid: {e}")
        cls._validate_range("server.port", server.port, 1, 65535)

        backend_raw = raw.get("backend", {}) or {}
        try:
            backend = BackendConfig(
                engine=str(backend_raw.get("engine", Defaults.BACKEND_ENGINE)).strip().lower(),
                timeout_s=float(backend_raw.get("timeout_s", Defaults.BACKEND_TIMEOUT_S)),
                azure_key=backend_raw.get("azure_key") or None,
                azure_region=str(backend_raw.get("azure_region", Defaults.BACKEND_AZURE_REGION)),
                user_agent=str(backend_raw.get("user_agent", Defaults.BACKEND_USER_AGENT)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"backend section is invalid: {e}")
        cls._validate_positive("backend.timeout_s", backend.timeout_s)
        if not backend.engine:
            raise ConfigValidationError("backend.engine must not be empty")

        speech_raw = raw.get("speech", {}) or {}
        try:
            speech = SpeechConfig(
                max_input_chars=int(speech_raw.get("max_input_chars", Defaults.SPEECH_MAX_INPUT_CHARS)),
                organization=str(speech_raw.get("organization", Defaults.SPEECH_ORGANIZATION)),
                api_version=str(speech_raw.get("api_version", Defaults.SPEECH_API_VERSION)),
            )
        except (TypeError, ValueError) as e:
            raise ConfigValidationError(f"speech section is invalid: {e}")
        cls._validate_non_negative("speech.max_input_chars", speech.max_input_chars)

        logging_raw = raw.get("logging", {}) or {}
        log_level_raw = logging_raw.get("level", Defaults.LOGGING_LEVEL)

        # Handle string log levels (e.g., "INFO", "DEBUG")
        if isinstance(log_level_raw, str):
            level_map = {
                "MINIMAL": 1, "1": 1,
                "NORMAL": 2, "INFO": 2, "2": 2,
                "VERBOSE": 3, "3": 3,
                "DEBUG": 4, "TRACE": 4, "4": 4,
            }
            log_level = level_map.get(log_level_raw.upper(), Defaults.LOGGING_LEVEL)
        else:
            log_level = int(log_level_raw)

        logging_cfg = LoggingConfig(
            text_preview_chars=int(logging_raw.get("text_preview_chars", Defaults.LOGGING_TEXT_PREVIEW_CHARS)),
            level=log_level,
        )
        cls._validate_non_negative("logging.text_preview_chars", logging_cfg.text_preview_chars)
        cls._validate_range("logging.level", logging_cfg.level, 1, 4)

        metrics_raw = raw.get("metrics", {}) or {}
        metrics_cfg = MetricsConfig(
            enabled=bool(metrics_raw.get("enabled", Defaults.METRICS_ENABLED)),
        )

        return cls(
            server=server,
            backend=backend,
            speech=speech,
            logging=logging_cfg,
            metrics=metrics_cfg,
        )

    @staticmethod
    def _validate_positive(name: str, value: int | float) -> None:
        """Validate that a value is positive (> 0)."""
        if value <= 0:
            raise ConfigValidationError(f"{name} must be positive, got {value}")

    @staticmethod
    def _validate_non_negative(name: str, value: int | float) -> None:
        """Validate that a value is non-negative (>= 0)."""
        if value < 0:
            raise ConfigValidationError(f"{name} must be non-negative, got {value}")

    @staticmethod
    def _validate_range(name: str, value: int | float, min_val: int | float, max_val: int | float) -> None:
        """Validate that a value is within a range [min_val, max_val]."""
        if not (min_val <= value <= max_val):
            raise ConfigValidationError(f"{name} must be between {min_val} and {max_val}, got {value}")


@dataclass(frozen=True)
class Settings:
    """
    Immutable settings container loaded from YAML.

    This is the raw settings object before validation. Use
    get_config() to get the validated BridgeConfig.

    Attributes:
        raw: Dictionary of raw configuration values.
    """
    raw: Dict[str, Any]

    @property
    def backend_engine(self) -> str:
        """Get the configured backend name (edge, azure)."""
        return str((self.raw.get("backend", {}) or {}).get("engine", Defaults.BACKEND_ENGINE))

    def get_config(self) -> BridgeConfig:
        """
        Get validated BridgeConfig from these settings.

        Raises:
            ConfigValidationError: If validation fails.
        """
        return BridgeConfig.from_settings(self)


# Environment variable -> (section, key, cast)
_ENV_OVERRIDES = {
    "TTS_BRIDGE_BACKEND": ("backend", "engine", str),
    "AZURE_SPEECH_KEY": ("backend", "azure_key", str),
    "AZURE_SPEECH_REGION": ("backend", "azure_region", str),
    "TTS_BRIDGE_HOST": ("server", "host", str),
    "TTS_BRIDGE_PORT": ("server", "port", int),
}


def load_settings(path: Optional[str] = None, required: bool = False) -> Settings:
    """
    Load settings from a YAML configuration file.

    Environment variable overrides:
        - TTS_BRIDGE_BACKEND: backend.engine
        - AZURE_SPEECH_KEY / AZURE_SPEECH_REGION: azure credentials
        - TTS_BRIDGE_HOST / TTS_BRIDGE_PORT: server bind address

    Args:
        path: Path to the YAML file. Defaults to $TTS_BRIDGE_SETTINGS,
            then config/settings.yaml.
        required: Raise if the file does not exist instead of falling
            back to defaults.

    Returns:
        Settings object with loaded configuration.

    Raises:
        FileNotFoundError: If required and the settings file doesn't exist.
        ConfigValidationError: If an environment override cannot be parsed.
    """
    p = Path(path or os.getenv("TTS_BRIDGE_SETTINGS", DEFAULT_SETTINGS_PATH))

    raw: Dict[str, Any] = {}
    if p.exists():
        with p.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
    elif required:
        raise FileNotFoundError(f"settings file not found: {p.resolve()}")

    for env_var, (section, key, cast) in _ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if not value:
            continue
        try:
            section_raw = raw.get(section) or {}
            section_raw[key] = cast(value)
            raw[section] = section_raw
        except ValueError:
            raise ConfigValidationError(f"{env_var} has an invalid value: {value!r}")

    return Settings(raw=raw)
