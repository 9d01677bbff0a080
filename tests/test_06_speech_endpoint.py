"""Tests for POST /v1/audio/speech: validation, methods, buffered responses."""
from __future__ import annotations

import pytest

from tts_bridge.core.config import Settings
from tts_bridge.services.validators import MISSING_PARAMS_MESSAGE
from tts_bridge.tts.formats import MP3_24KHZ_48K, OPUS_24KHZ_48K, WAV_24KHZ_16BIT

from conftest import FakeBackend


def _buffered(client, **fields):
    body = {"model": "tts-1", "input": "Hello world", "stream": False}
    body.update(fields)
    return client.post("/v1/audio/speech", json=body)


class TestSpeechMethods:

    def test_options_preflight(self, client, fake_backend):
        r = client.options("/v1/audio/speech")
        assert r.status_code == 204
        assert r.content == b""
        assert r.headers["access-control-allow-origin"] == "*"
        assert r.headers["access-control-allow-methods"] == "POST, OPTIONS"
        assert r.headers["access-control-allow-headers"] == "Content-Type"
        assert fake_backend.calls == []

    def test_get_not_allowed(self, client):
        r = client.get("/v1/audio/speech")
        assert r.status_code == 405
        assert r.json() == {"error": "Method not allowed"}
        assert r.headers["access-control-allow-origin"] == "*"

    def test_put_not_allowed(self, client):
        r = client.put("/v1/audio/speech", json={"model": "tts-1", "input": "Hi"})
        assert r.status_code == 405


class TestSpeechValidation:
    """Bad requests get a 400 OpenAI envelope and never reach the backend."""

    def test_missing_input(self, client, fake_backend):
        r = client.post("/v1/audio/speech", json={"model": "tts-1"})
        assert r.status_code == 400
        error = r.json()["error"]
        assert error["message"] == MISSING_PARAMS_MESSAGE
        assert error["type"] == "invalid_request_error"
        assert fake_backend.calls == []

    def test_missing_model(self, client):
        r = client.post("/v1/audio/speech", json={"input": "Hello"})
        assert r.status_code == 400
        assert r.json()["error"]["message"] == MISSING_PARAMS_MESSAGE

    def test_input_too_long(self, client, fake_backend):
        r = client.post("/v1/audio/speech", json={"model": "tts-1", "input": "a" * 4097})
        assert r.status_code == 400
        error = r.json()["error"]
        assert error["param"] == "input"
        assert error["type"] == "invalid_request_error"
        assert fake_backend.calls == []

    def test_input_at_limit_accepted(self, client):
        r = _buffered(client, input="a" * 4096)
        assert r.status_code == 200

    def test_length_check_can_be_disabled(self, make_client):
        settings = Settings(raw={"speech": {"max_input_chars": 0}})
        client = make_client(FakeBackend(settings.get_config()), app_settings=settings)
        r = _buffered(client, input="a" * 5000)
        assert r.status_code == 200

    def test_invalid_json(self, client):
        r = client.post(
            "/v1/audio/speech",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert r.status_code == 400
        assert r.json()["error"]["code"] == "invalid_json"

    def test_body_must_be_object(self, client):
        r = client.post("/v1/audio/speech", json=["tts-1", "Hello"])
        assert r.status_code == 400
        assert r.json()["error"]["type"] == "invalid_request_error"

    def test_non_numeric_speed(self, client):
        r = _buffered(client, speed="fast")
        assert r.status_code == 400
        assert r.json()["error"]["param"] == "speed"

    def test_non_boolean_stream(self, client):
        r = client.post("/v1/audio/speech", json={"model": "tts-1", "input": "Hi", "stream": "no"})
        assert r.status_code == 400
        assert r.json()["error"]["param"] == "stream"

    def test_non_string_input(self, client):
        r = client.post("/v1/audio/speech", json={"model": "tts-1", "input": 12345})
        assert r.status_code == 400
        assert r.json()["error"]["param"] == "input"

    def test_unknown_fields_ignored(self, client):
        r = _buffered(client, instructions="speak like a pirate", user="u-1")
        assert r.status_code == 200

    def test_out_of_range_speed_is_clamped_not_rejected(self, client, fake_backend):
        r = _buffered(client, speed=10)
        assert r.status_code == 200
        _, params = fake_backend.calls[0]
        assert params.rate == 100


class TestBufferedSpeech:
    """stream: false returns the whole audio with Content-Length."""

    def test_buffered_response(self, client, fake_backend):
        r = _buffered(client)
        assert r.status_code == 200
        assert r.content == b"ID3-audio--end"
        assert r.headers["content-length"] == str(len(b"ID3-audio--end"))
        assert r.headers["content-type"] == "audio/mpeg"
        assert r.headers["access-control-allow-origin"] == "*"
        assert "x-request-id" in r.headers

    def test_mapped_parameters_reach_backend(self, client, fake_backend):
        _buffered(client, voice="echo", response_format="opus", speed=1.5)
        text, params = fake_backend.calls[0]
        assert text == "Hello world"
        assert params.voice_name == "en-US-GuyNeural"
        assert params.rate == 50
        assert params.pitch == 0
        assert params.output_format == OPUS_24KHZ_48K

    def test_chinese_text_selects_chinese_voice(self, client, fake_backend):
        _buffered(client, input="今天天气很好", voice="nova")
        _, params = fake_backend.calls[0]
        assert params.voice_name == "zh-CN-XiaohanNeural"

    @pytest.mark.parametrize("fmt,content_type", [
        ("mp3", "audio/mpeg"),
        ("aac", "audio/mpeg"),
        ("flac", "audio/mpeg"),
        ("opus", "audio/opus"),
        ("wav", "audio/wav"),
        ("pcm", "audio/wav"),
    ])
    def test_content_type_follows_format(self, client, fmt, content_type):
        r = _buffered(client, response_format=fmt)
        assert r.headers["content-type"] == content_type

    def test_fixed_format_backend_reports_actual_format(self, make_client, settings):
        """A backend that can only do MP3 answers a wav request with audio/mpeg."""

        class Mp3OnlyBackend(FakeBackend):
            def resolve_format(self, output_format):
                return MP3_24KHZ_48K

        backend = Mp3OnlyBackend(settings.get_config())
        client = make_client(backend)
        r = _buffered(client, response_format="wav")

        assert r.headers["content-type"] == "audio/mpeg"
        _, params = backend.calls[0]
        assert params.output_format == MP3_24KHZ_48K
        assert params.output_format != WAV_24KHZ_16BIT


class TestSpeechErrors:

    def test_backend_failure_is_server_error(self, make_client, settings):
        client = make_client(FakeBackend(settings.get_config(), fail_at=1))
        r = _buffered(client)
        assert r.status_code == 500
        error = r.json()["error"]
        assert error["type"] == "server_error"
        assert "upstream refused" in error["message"]
        assert r.headers["access-control-allow-origin"] == "*"

    def test_empty_audio_is_server_error(self, make_client, settings):
        client = make_client(FakeBackend(settings.get_config(), chunks=()))
        r = _buffered(client)
        assert r.status_code == 500
        assert r.json()["error"]["code"] == "synthesis_failed"

    def test_unexpected_error_hides_details(self, make_client, settings):
        backend = FakeBackend(settings.get_config(), fail_at=0, error=KeyError("secret-internal"))
        client = make_client(backend)
        r = _buffered(client)
        assert r.status_code == 500
        assert "secret-internal" not in r.json()["error"]["message"]
