"""Tests for output-format helpers and SSML construction."""
from __future__ import annotations

import xml.etree.ElementTree as ET

import pytest

from tts_bridge.tts.formats import (
    MP3_24KHZ_48K,
    OPUS_24KHZ_48K,
    PCM_24KHZ_16BIT,
    WAV_24KHZ_16BIT,
    content_type_for_format,
    extension_for_format,
)
from tts_bridge.tts.ssml import build_ssml, format_pitch, format_rate, locale_of

SSML_NS = "{http://www.w3.org/2001/10/synthesis}"


class TestContentType:

    @pytest.mark.parametrize("fmt,expected", [
        (MP3_24KHZ_48K, "audio/mpeg"),
        (OPUS_24KHZ_48K, "audio/opus"),
        (WAV_24KHZ_16BIT, "audio/wav"),
        (PCM_24KHZ_16BIT, "audio/wav"),
        ("ogg-24khz-16bit-mono-opus", "audio/opus"),
        ("ogg-48khz-16bit-mono-vorbis", "audio/ogg"),
        ("webm-24khz-16bit-mono-opus", "audio/opus"),
        ("amr-wb-16000hz", "audio/mpeg"),
        ("", "audio/mpeg"),
    ])
    def test_substring_rules(self, fmt, expected):
        assert content_type_for_format(fmt) == expected

    def test_mp3_checked_before_opus(self):
        """First matching rule wins."""
        assert content_type_for_format("mp3-opus-hybrid") == "audio/mpeg"


class TestExtension:

    def test_extensions(self):
        assert extension_for_format(MP3_24KHZ_48K) == "mp3"
        assert extension_for_format(OPUS_24KHZ_48K) == "opus"
        assert extension_for_format(WAV_24KHZ_16BIT) == "wav"
        assert extension_for_format(PCM_24KHZ_16BIT) == "pcm"


class TestProsodyStrings:

    def test_rate(self):
        assert format_rate(0) == "+0%"
        assert format_rate(25) == "+25%"
        assert format_rate(-50) == "-50%"

    def test_pitch(self):
        assert format_pitch(0) == "+0Hz"
        assert format_pitch(-3) == "-3Hz"


class TestSsml:

    def test_locale_from_voice(self):
        assert locale_of("en-US-GuyNeural") == "en-US"
        assert locale_of("zh-CN-YunxiNeural") == "zh-CN"
        assert locale_of("weird") == "en-US"

    def test_document_structure(self):
        ssml = build_ssml("Hello", "zh-CN-YunxiNeural", rate=-25, pitch=0)
        root = ET.fromstring(ssml)

        assert root.tag == f"{SSML_NS}speak"
        assert root.attrib["{http://www.w3.org/XML/1998/namespace}lang"] == "zh-CN"
        voice = root.find(f"{SSML_NS}voice")
        assert voice.attrib["name"] == "zh-CN-YunxiNeural"
        prosody = voice.find(f"{SSML_NS}prosody")
        assert prosody.attrib == {"rate": "-25%", "pitch": "+0Hz"}
        assert prosody.text == "Hello"

    def test_text_is_escaped(self):
        text = 'Tom & Jerry <b>"quoted"</b>'
        ssml = build_ssml(text, "en-US-JennyNeural")
        prosody = ET.fromstring(ssml).find(f"{SSML_NS}voice/{SSML_NS}prosody")
        assert prosody.text == text
        assert "<b>" not in ssml
