"""
Speech Backend Base Class and Factory.

This module provides:
    - SynthesisParameters: Backend-facing parameters derived from an OpenAI request
    - BackendCapabilities: What a backend can do
    - BaseSpeechBackend: Abstract base class for Microsoft speech backends
    - BackendError: Raised by backends when the remote service fails
    - get_backend(): Factory returning the process-wide backend instance

Backend Selection:
    The backend is selected via the TTS_BRIDGE_BACKEND environment variable
    or settings.backend.engine. Supported backends:
        - edge: Microsoft Edge read-aloud voices via edge-tts (no key, MP3 only)
        - azure: Azure Cognitive Services Speech REST API (key + region)

Implementing a New Backend:
    1. Create backends/<name>_backend.py
    2. Inherit from BaseSpeechBackend
    3. Implement stream() (synthesize() joins it by default)
    4. Register in _create_backend()
"""
from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field
from typing import AsyncIterator, FrozenSet, Optional

from tts_bridge.core.config import BridgeConfig, Settings
from tts_bridge.core.logging import get_logger, info


@dataclass(frozen=True)
class SynthesisParameters:
    """
    Parameters for one backend synthesis call.

    Attributes:
        voice_name: Microsoft neural voice id (e.g. "en-US-JennyNeural").
        rate: Speaking rate adjustment in percent, within [-50, 100].
        pitch: Pitch adjustment in hertz (always 0 for OpenAI requests).
        output_format: Microsoft output-format profile string.
    """
    voice_name: str
    rate: int
    pitch: int
    output_format: str

    def to_dict(self) -> dict:
        return {
            "voice_name": self.voice_name,
            "rate": self.rate,
            "pitch": self.pitch,
            "output_format": self.output_format,
        }


@dataclass(frozen=True)
class BackendCapabilities:
    """
    Describes what a backend supports.

    Attributes:
        streaming: Audio arrives incrementally from the remote service.
        output_formats: Profiles the backend can produce. Empty means any.
    """
    streaming: bool
    output_formats: FrozenSet[str] = field(default_factory=frozenset)


class BackendError(RuntimeError):
    """Raised when the remote speech service rejects or fails a request."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class BaseSpeechBackend:
    """
    Abstract base class for speech backends.

    Subclasses implement:
        - stream(): yield audio bytes as they arrive
        - synthesize(): return the complete audio (default joins stream())

    Attributes:
        name: Backend identifier ("edge", "azure").
        capabilities: BackendCapabilities describing supported features.
        config: Validated service configuration.
        logger: Logger for this backend.
    """
    name: str = "base"
    capabilities: BackendCapabilities = BackendCapabilities(streaming=False)

    def __init__(self, config: BridgeConfig):
        self.config = config
        self.logger = get_logger(f"tts-bridge.backend.{self.name}")

    def supports_format(self, output_format: str) -> bool:
        formats = self.capabilities.output_formats
        return not formats or output_format in formats

    def resolve_format(self, output_format: str) -> str:
        """
        Return the profile the backend will actually produce.

        Backends with a fixed encoder override this to report their own
        profile when asked for one they can't produce.
        """
        return output_format

    def stream(self, text: str, params: SynthesisParameters) -> AsyncIterator[bytes]:
        """
        Stream synthesized audio.

        Args:
            text: Plain text to speak.
            params: Voice, prosody and output format.

        Yields:
            Non-empty chunks of encoded audio.

        Raises:
            BackendError: If the remote service fails.
        """
        raise NotImplementedError

    async def synthesize(self, text: str, params: SynthesisParameters) -> bytes:
        """
        Synthesize text to a complete audio buffer.

        Raises:
            BackendError: If the remote service fails.
        """
        chunks = []
        async for chunk in self.stream(text, params):
            chunks.append(chunk)
        return b"".join(chunks)

    async def aclose(self) -> None:
        """Release network resources held by the backend."""
        return None


# =============================================================================
# Backend Factory (Singleton Pattern)
# =============================================================================

_BACKEND: Optional[BaseSpeechBackend] = None
_BACKEND_NAME: Optional[str] = None
_BACKEND_LOCK = threading.Lock()


def resolve_backend_name(config: BridgeConfig) -> str:
    """
    Resolve the backend name.

    Priority:
        1. TTS_BRIDGE_BACKEND environment variable
        2. settings backend.engine
    """
    env = os.getenv("TTS_BRIDGE_BACKEND")
    if env:
        return env.strip().lower()
    return config.backend.engine


def _create_backend(name: str, config: BridgeConfig) -> BaseSpeechBackend:
    """
    Create a backend instance.

    Imports lazily so that only the selected backend's library is loaded.

    Raises:
        ValueError: If the name is unknown.
    """
    if name == "edge":
        from tts_bridge.tts.backends.edge_backend import EdgeBackend
        return EdgeBackend(config)

    if name == "azure":
        from tts_bridge.tts.backends.azure_backend import AzureBackend
        return AzureBackend(config)

    raise ValueError(f"Unknown backend: {name}")


def get_backend(settings: Settings) -> BaseSpeechBackend:
    """
    Get or create the global backend instance.

    If the configured backend name changes, a new backend replaces the
    existing one.
    """
    global _BACKEND
    global _BACKEND_NAME

    config = settings.get_config()
    name = resolve_backend_name(config)

    if _BACKEND is None or _BACKEND_NAME != name:
        with _BACKEND_LOCK:
            if _BACKEND is None or _BACKEND_NAME != name:
                _BACKEND = _create_backend(name, config)
                _BACKEND_NAME = name
                info(get_logger("tts-bridge.backend"), "backend_created", backend=name)

    return _BACKEND


def reset_backend() -> None:
    """Drop the global backend (tests)."""
    global _BACKEND
    global _BACKEND_NAME
    with _BACKEND_LOCK:
        _BACKEND = None
        _BACKEND_NAME = None


async def close_backend() -> None:
    """Close the global backend's network resources and drop it."""
    global _BACKEND
    global _BACKEND_NAME
    with _BACKEND_LOCK:
        backend = _BACKEND
        _BACKEND = None
        _BACKEND_NAME = None
    if backend is not None:
        await backend.aclose()
