"""
Microsoft Speech Output Formats.

Microsoft's neural TTS services name their audio encodings with profile
strings such as "audio-24khz-48kbitrate-mono-mp3" (sent as the
X-Microsoft-OutputFormat header). This module lists the profiles the bridge
uses and derives an HTTP Content-Type from a profile.
"""
from __future__ import annotations

MP3_24KHZ_48K = "audio-24khz-48kbitrate-mono-mp3"
OPUS_24KHZ_48K = "audio-24khz-48kbitrate-mono-opus"
WAV_24KHZ_16BIT = "riff-24khz-16bit-mono-pcm"
PCM_24KHZ_16BIT = "raw-24khz-16bit-mono-pcm"

DEFAULT_OUTPUT_FORMAT = MP3_24KHZ_48K

# Checked in order; first substring match wins
_CONTENT_TYPES = (
    ("mp3", "audio/mpeg"),
    ("opus", "audio/opus"),
    ("wav", "audio/wav"),
    ("pcm", "audio/wav"),
    ("ogg", "audio/ogg"),
)

DEFAULT_CONTENT_TYPE = "audio/mpeg"


def content_type_for_format(output_format: str) -> str:
    """
    Derive the response Content-Type from an output-format profile.

    Matching is by substring, so "riff-24khz-16bit-mono-pcm" and
    "raw-16khz-16bit-mono-pcm" both give audio/wav, and
    "ogg-24khz-16bit-mono-opus" gives audio/opus.

    Examples:
        >>> content_type_for_format("audio-24khz-48kbitrate-mono-mp3")
        'audio/mpeg'
        >>> content_type_for_format("webm-24khz-16bit-mono-opus")
        'audio/opus'
        >>> content_type_for_format("amr-wb-16000hz")
        'audio/mpeg'
    """
    fmt = (output_format or "").lower()
    for needle, content_type in _CONTENT_TYPES:
        if needle in fmt:
            return content_type
    return DEFAULT_CONTENT_TYPE


_EXTENSIONS = (
    ("mp3", "mp3"),
    ("riff", "wav"),
    ("raw", "pcm"),
    ("opus", "opus"),
    ("ogg", "ogg"),
)


def extension_for_format(output_format: str) -> str:
    """File extension for a profile, used for the CLI's default output name."""
    fmt = (output_format or "").lower()
    for needle, ext in _EXTENSIONS:
        if needle in fmt:
            return ext
    return "mp3"
