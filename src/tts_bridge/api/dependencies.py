"""
FastAPI Dependency Injection Providers.

Architecture:
    The dependency system follows this hierarchy:
        1. get_settings() - Loads and caches application configuration
        2. get_speech_service() - Creates/returns singleton SpeechService
        3. resolve_speech_service(request) - Same, resolved inside a handler

    Both are singletons, so the backend (and the Azure HTTP connection
    pool) is shared by all requests.

Usage in Route Handlers:
    from fastapi import Depends
    from tts_bridge.api.dependencies import get_speech_service

    @router.get("/health")
    def health(service: SpeechService = Depends(get_speech_service)):
        ...

    # Inside a handler, only on the paths that need the backend
    service = resolve_speech_service(request)

Testing:
    Override get_speech_service with app.dependency_overrides (both
    Depends and resolve_speech_service honor it) to inject a
    SpeechService built around a fake backend.

See Also:
    - core/config.py: Settings class and load_settings()
    - services/speech_service.py: SpeechService class and get_service()
"""
from __future__ import annotations

from functools import lru_cache

from fastapi import Request

from tts_bridge.core.config import Settings, load_settings
from tts_bridge.services.speech_service import SpeechService, get_service, reset_service
from tts_bridge.tts.backend import close_backend


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    The file is $TTS_BRIDGE_SETTINGS or config/settings.yaml. If it
    doesn't exist, default values are used.
    """
    return load_settings()


def get_speech_service() -> SpeechService:
    """Get the singleton SpeechService instance."""
    return get_service(get_settings())


def resolve_speech_service(request: Request) -> SpeechService:
    """
    Resolve the SpeechService from inside a handler.

    For handlers that must answer some requests (OPTIONS, 405) without a
    backend. Honors app.dependency_overrides like Depends(get_speech_service).

    Raises:
        BackendConfigError: If the configured backend cannot be created.
    """
    provider = request.app.dependency_overrides.get(get_speech_service, get_speech_service)
    return provider()


async def shutdown_service() -> None:
    """Close the backend's network resources and drop the singletons."""
    await close_backend()
    reset_service()
