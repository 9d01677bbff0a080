"""Tests for the OpenAI -> Microsoft parameter mapping."""
from __future__ import annotations

import pytest

from tts_bridge.services.mapping import (
    DEFAULT_VOICES,
    VOICE_MAPPING,
    build_synthesis_parameters,
    contains_chinese,
    map_response_format,
    map_voice,
    speed_to_rate,
)
from tts_bridge.tts.formats import (
    MP3_24KHZ_48K,
    OPUS_24KHZ_48K,
    PCM_24KHZ_16BIT,
    WAV_24KHZ_16BIT,
)


class TestLanguageDetection:
    """CJK detection decides between the en-US and zh-CN voice."""

    def test_plain_english(self):
        assert contains_chinese("Hello, world!") is False

    def test_single_ideograph_is_enough(self):
        assert contains_chinese("Order number 42 is 好") is True

    def test_range_bounds(self):
        assert contains_chinese("\u4e00") is True
        assert contains_chinese("\u9fa5") is True
        assert contains_chinese("\u9fa6") is False

    def test_japanese_kana_is_not_chinese(self):
        assert contains_chinese("こんにちは") is False

    def test_empty(self):
        assert contains_chinese("") is False


class TestVoiceMapping:
    """All six OpenAI voices plus the default pair."""

    @pytest.mark.parametrize("voice,english,chinese", [
        ("alloy", "en-US-JennyNeural", "zh-CN-XiaoxiaoNeural"),
        ("echo", "en-US-GuyNeural", "zh-CN-YunxiNeural"),
        ("fable", "en-US-AriaNeural", "zh-CN-XiaochenNeural"),
        ("onyx", "en-US-ChristopherNeural", "zh-CN-YunyangNeural"),
        ("nova", "en-US-SaraNeural", "zh-CN-XiaohanNeural"),
        ("shimmer", "en-US-JennyMultilingualNeural", "zh-CN-XiaoyiNeural"),
    ])
    def test_voice_table(self, voice, english, chinese):
        assert map_voice(voice, "Good morning") == english
        assert map_voice(voice, "早上好") == chinese

    def test_unset_voice_uses_default_pair(self):
        assert map_voice(None, "Hi") == "en-US-JennyMultilingualNeural"
        assert map_voice(None, "你好") == "zh-CN-XiaoxiaoMultilingualNeural"

    def test_unknown_voice_uses_default_pair(self):
        assert map_voice("ash", "Hi") == DEFAULT_VOICES[0]
        assert map_voice("ash", "你好") == DEFAULT_VOICES[1]

    def test_chinese_wins_for_every_voice(self):
        for voice in list(VOICE_MAPPING) + [None, "unknown"]:
            assert map_voice(voice, "mixed text 中文 here").startswith("zh-CN-")


class TestSpeedToRate:
    """speed -> prosody rate percentage."""

    def test_absent_speed(self):
        assert speed_to_rate(None) == 0

    @pytest.mark.parametrize("speed,rate", [
        (1.0, 0),
        (1.5, 50),
        (2.0, 100),
        (0.5, -50),
        (1.25, 25),
        (0.75, -25),
    ])
    def test_linear_region(self, speed, rate):
        assert speed_to_rate(speed) == rate

    def test_rate_is_clamped(self):
        assert speed_to_rate(0.25) == -50
        assert speed_to_rate(4.0) == 100
        assert speed_to_rate(3.0) == 100

    def test_out_of_range_speed_is_clamped(self):
        assert speed_to_rate(0.01) == -50
        assert speed_to_rate(-3) == -50
        assert speed_to_rate(100) == 100

    def test_rounds_to_integer(self):
        assert speed_to_rate(1.234) == 23
        assert speed_to_rate(1.236) == 24

    def test_ties_round_up(self):
        assert speed_to_rate(1.125) == 13
        assert speed_to_rate(0.875) == -12


class TestFormatMapping:

    def test_mp3_family(self):
        for fmt in ("mp3", "aac", "flac", None, "", "vorbis"):
            assert map_response_format(fmt) == MP3_24KHZ_48K

    def test_opus(self):
        assert map_response_format("opus") == OPUS_24KHZ_48K

    def test_wav(self):
        assert map_response_format("wav") == WAV_24KHZ_16BIT

    def test_pcm(self):
        assert map_response_format("pcm") == PCM_24KHZ_16BIT

    def test_case_insensitive(self):
        assert map_response_format("WAV") == WAV_24KHZ_16BIT


class TestBuildParameters:

    def test_full_request(self):
        params = build_synthesis_parameters("Hello", voice="onyx", response_format="opus", speed=1.5)
        assert params.to_dict() == {
            "voice_name": "en-US-ChristopherNeural",
            "rate": 50,
            "pitch": 0,
            "output_format": OPUS_24KHZ_48K,
        }

    def test_minimal_request(self):
        params = build_synthesis_parameters("你好")
        assert params.voice_name == "zh-CN-XiaoxiaoMultilingualNeural"
        assert params.rate == 0
        assert params.pitch == 0
        assert params.output_format == MP3_24KHZ_48K
