"""Shared fixtures: an in-memory speech backend and app/client builders."""
from __future__ import annotations

import pytest

from tts_bridge.core.config import Settings
from tts_bridge.tts.backend import (
    BackendCapabilities,
    BackendError,
    BaseSpeechBackend,
    reset_backend,
)


class FakeBackend(BaseSpeechBackend):
    """
    Backend that yields canned chunks.

    fail_at=N raises `error` before yielding chunk N (0 = before any audio,
    len(chunks) = after the last chunk).
    """
    name = "fake"
    capabilities = BackendCapabilities(streaming=True)

    def __init__(self, config, chunks=(b"ID3", b"-audio-", b"-end"), fail_at=None, error=None):
        super().__init__(config)
        self.chunks = list(chunks)
        self.fail_at = fail_at
        self.error = error or BackendError("upstream refused", status_code=503)
        self.calls = []
        self.closed = False

    async def stream(self, text, params):
        self.calls.append((text, params))
        for i, chunk in enumerate(self.chunks):
            if self.fail_at == i:
                raise self.error
            yield chunk
        if self.fail_at == len(self.chunks):
            raise self.error

    async def aclose(self):
        self.closed = True


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep developer environment variables out of the tests."""
    for var in (
        "TTS_BRIDGE_BACKEND",
        "AZURE_SPEECH_KEY",
        "AZURE_SPEECH_REGION",
        "TTS_BRIDGE_HOST",
        "TTS_BRIDGE_PORT",
        "TTS_BRIDGE_LOG_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("TTS_BRIDGE_NO_COLOR", "1")
    yield
    reset_backend()


@pytest.fixture
def settings():
    return Settings(raw={})


@pytest.fixture
def fake_backend(settings):
    return FakeBackend(settings.get_config())


@pytest.fixture
def make_client(settings):
    """
    Build a TestClient whose SpeechService uses the given backend.

    Usage:
        client = make_client(FakeBackend(config, fail_at=0))
    """
    from fastapi.testclient import TestClient

    from tts_bridge.api.dependencies import get_speech_service
    from tts_bridge.main import create_app
    from tts_bridge.services.speech_service import SpeechService

    def _make(backend, app_settings=None):
        app = create_app()
        service = SpeechService(app_settings or settings, backend=backend)
        app.dependency_overrides[get_speech_service] = lambda: service
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client, fake_backend):
    return make_client(fake_backend)
