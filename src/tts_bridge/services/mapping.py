"""
OpenAI to Microsoft Parameter Mapping.

Translates the fields of an OpenAI speech request into the parameters a
Microsoft neural TTS backend understands:

    voice + input text  ->  voice_name     (table keyed on voice x language)
    speed               ->  rate           (linear, clamped to [-50, 100])
    response_format     ->  output_format  (Microsoft profile string)
    (nothing)           ->  pitch = 0

Language Detection:
    Text containing at least one CJK Unified Ideograph (U+4E00-U+9FA5) is
    treated as Chinese and gets the zh-CN voice of the pair; everything
    else gets the en-US voice.

Voice Table:
    OpenAI     English                         Chinese
    alloy      en-US-JennyNeural               zh-CN-XiaoxiaoNeural
    echo       en-US-GuyNeural                 zh-CN-YunxiNeural
    fable      en-US-AriaNeural                zh-CN-XiaochenNeural
    onyx       en-US-ChristopherNeural         zh-CN-YunyangNeural
    nova       en-US-SaraNeural                zh-CN-XiaohanNeural
    shimmer    en-US-JennyMultilingualNeural   zh-CN-XiaoyiNeural
    (other)    en-US-JennyMultilingualNeural   zh-CN-XiaoxiaoMultilingualNeural

Format Table:
    opus -> audio-24khz-48kbitrate-mono-opus
    wav  -> riff-24khz-16bit-mono-pcm
    pcm  -> raw-24khz-16bit-mono-pcm
    mp3, aac, flac, unset, unknown -> audio-24khz-48kbitrate-mono-mp3
    (no AAC/FLAC encoder on the Microsoft side; MP3 is served instead)
"""
from __future__ import annotations

import math
import re
from typing import Dict, Optional, Tuple

from tts_bridge.tts.backend import SynthesisParameters
from tts_bridge.tts.formats import (
    DEFAULT_OUTPUT_FORMAT,
    MP3_24KHZ_48K,
    OPUS_24KHZ_48K,
    PCM_24KHZ_16BIT,
    WAV_24KHZ_16BIT,
)

_CJK_RE = re.compile("[\u4e00-\u9fa5]")

# OpenAI voice -> (English voice, Chinese voice)
VOICE_MAPPING: Dict[str, Tuple[str, str]] = {
    "alloy": ("en-US-JennyNeural", "zh-CN-XiaoxiaoNeural"),
    "echo": ("en-US-GuyNeural", "zh-CN-YunxiNeural"),
    "fable": ("en-US-AriaNeural", "zh-CN-XiaochenNeural"),
    "onyx": ("en-US-ChristopherNeural", "zh-CN-YunyangNeural"),
    "nova": ("en-US-SaraNeural", "zh-CN-XiaohanNeural"),
    "shimmer": ("en-US-JennyMultilingualNeural", "zh-CN-XiaoyiNeural"),
}
DEFAULT_VOICES: Tuple[str, str] = ("en-US-JennyMultilingualNeural", "zh-CN-XiaoxiaoMultilingualNeural")

FORMAT_MAPPING: Dict[str, str] = {
    "opus": OPUS_24KHZ_48K,
    "aac": MP3_24KHZ_48K,
    "flac": MP3_24KHZ_48K,
    "mp3": MP3_24KHZ_48K,
    "wav": WAV_24KHZ_16BIT,
    "pcm": PCM_24KHZ_16BIT,
}

SPEED_MIN = 0.25
SPEED_MAX = 4.0
RATE_MIN = -50
RATE_MAX = 100


def contains_chinese(text: str) -> bool:
    """True if the text has at least one CJK Unified Ideograph."""
    return _CJK_RE.search(text or "") is not None


def map_voice(voice: Optional[str], text: str) -> str:
    """
    Pick the Microsoft voice for an OpenAI voice name and input text.

    Examples:
        >>> map_voice("echo", "Hello")
        'en-US-GuyNeural'
        >>> map_voice("echo", "你好")
        'zh-CN-YunxiNeural'
        >>> map_voice(None, "Hello")
        'en-US-JennyMultilingualNeural'
    """
    english, chinese = VOICE_MAPPING.get(voice or "", DEFAULT_VOICES)
    return chinese if contains_chinese(text) else english


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def speed_to_rate(speed: Optional[float]) -> int:
    """
    Convert an OpenAI speed multiplier to a Microsoft rate percentage.

    The speed is clamped to [0.25, 4.0], shifted so that 1.0 means "no
    change", scaled to percent, and the result clamped to [-50, 100].

    Examples:
        >>> speed_to_rate(1.0)
        0
        >>> speed_to_rate(1.25)
        25
        >>> speed_to_rate(0.25)
        -50
        >>> speed_to_rate(4.0)
        100
    """
    if speed is None:
        return 0
    clamped = min(max(float(speed), SPEED_MIN), SPEED_MAX)
    rate = _round_half_up((clamped - 1.0) * 100)
    return min(max(rate, RATE_MIN), RATE_MAX)


def map_response_format(response_format: Optional[str]) -> str:
    """Map an OpenAI response_format to a Microsoft output-format profile."""
    return FORMAT_MAPPING.get((response_format or "").strip().lower(), DEFAULT_OUTPUT_FORMAT)


def build_synthesis_parameters(
    text: str,
    voice: Optional[str] = None,
    response_format: Optional[str] = None,
    speed: Optional[float] = None,
) -> SynthesisParameters:
    """Derive the full backend parameter set for one request."""
    return SynthesisParameters(
        voice_name=map_voice(voice, text),
        rate=speed_to_rate(speed),
        pitch=0,
        output_format=map_response_format(response_format),
    )
