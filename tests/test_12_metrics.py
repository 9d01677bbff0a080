"""Tests for Prometheus metrics and the operational routes."""
from __future__ import annotations

import pytest


@pytest.fixture
def enabled_metrics():
    from tts_bridge.core.metrics import metrics

    original = metrics.enabled
    metrics.set_enabled(True)
    yield metrics
    metrics.set_enabled(original)


class TestBridgeMetrics:

    def test_records_show_up_in_exposition(self):
        from tts_bridge.core.metrics import BridgeMetrics

        m = BridgeMetrics()
        m.record_request("speech", 200)
        m.record_synthesis("edge", "stream", seconds=0.4, audio_bytes=1200)
        m.record_backend_error("azure")

        content, content_type = m.get_metrics_response()
        text = content.decode("utf-8")
        assert content_type.startswith("text/plain")
        assert 'tts_bridge_requests_total{endpoint="speech",status="200"} 1.0' in text
        assert 'tts_bridge_audio_bytes_total{backend="edge"} 1200.0' in text
        assert 'tts_bridge_backend_errors_total{backend="azure"} 1.0' in text
        assert "tts_bridge_synthesis_seconds_bucket" in text

    def test_instances_are_independent(self):
        from tts_bridge.core.metrics import BridgeMetrics

        first, second = BridgeMetrics(), BridgeMetrics()
        first.record_backend_error("edge")
        assert b"tts_bridge_backend_errors_total{" not in second.get_metrics_response()[0]

    def test_disabled_is_noop(self):
        from tts_bridge.core.metrics import BridgeMetrics

        m = BridgeMetrics(enabled=False)
        m.record_request("models", 200)
        content, _ = m.get_metrics_response()
        assert b"disabled" in content
        assert b"tts_bridge_requests_total" not in content


class TestOperationalRoutes:

    def test_health(self, client):
        from tts_bridge import __version__

        r = client.get("/health")
        assert r.status_code == 200
        assert r.json() == {"ok": True, "backend": "fake", "streaming": True, "version": __version__}

    def test_metrics_endpoint_counts_requests(self, client, enabled_metrics):
        client.get("/v1/models")
        client.post("/v1/audio/speech", json={"model": "tts-1"})

        r = client.get("/metrics")
        assert r.status_code == 200
        text = r.text
        assert 'tts_bridge_requests_total{endpoint="models",status="200"}' in text
        assert 'tts_bridge_requests_total{endpoint="speech",status="400"}' in text


class TestAppWiring:

    def test_unavailable_backend_is_json_500(self, monkeypatch):
        from fastapi.testclient import TestClient

        from tts_bridge.main import create_app
        from tts_bridge.services.speech_service import reset_service

        monkeypatch.setenv("TTS_BRIDGE_BACKEND", "festival")
        reset_service()
        try:
            r = TestClient(create_app()).post("/v1/audio/speech", json={"model": "tts-1", "input": "Hi"})
        finally:
            reset_service()

        assert r.status_code == 500
        error = r.json()["error"]
        assert error["type"] == "server_error"
        assert error["code"] == "backend_unavailable"
        assert r.headers["access-control-allow-origin"] == "*"

    def test_preflight_and_405_without_backend(self, monkeypatch):
        from fastapi.testclient import TestClient

        from tts_bridge.main import create_app
        from tts_bridge.services.speech_service import reset_service

        monkeypatch.setenv("TTS_BRIDGE_BACKEND", "festival")
        reset_service()
        try:
            client = TestClient(create_app())
            preflight = client.options("/v1/audio/speech")
            wrong_method = client.get("/v1/audio/speech")
            health = client.get("/health")
        finally:
            reset_service()

        assert preflight.status_code == 204
        assert preflight.content == b""
        assert preflight.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert wrong_method.status_code == 405
        assert wrong_method.json() == {"error": "Method not allowed"}
        assert health.status_code == 500
        assert health.headers["access-control-allow-origin"] == "*"

    def test_lifespan_closes_backend(self, monkeypatch, fake_backend, settings):
        from fastapi.testclient import TestClient

        import tts_bridge.tts.backend as backend_module
        from tts_bridge.api.dependencies import get_speech_service
        from tts_bridge.main import create_app
        from tts_bridge.services.speech_service import SpeechService

        monkeypatch.setattr(backend_module, "_BACKEND", fake_backend)
        monkeypatch.setattr(backend_module, "_BACKEND_NAME", "fake")

        app = create_app()
        service = SpeechService(settings, backend=fake_backend)
        app.dependency_overrides[get_speech_service] = lambda: service

        with TestClient(app) as client:
            assert client.get("/health").status_code == 200
            assert not fake_backend.closed

        assert fake_backend.closed
        assert backend_module._BACKEND is None
