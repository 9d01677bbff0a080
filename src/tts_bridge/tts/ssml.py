"""
SSML Construction.

Both Microsoft services accept the same SSML subset. Prosody is expressed as
signed percentages for rate and signed hertz for pitch, e.g.:

    <speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" xml:lang="en-US">
      <voice name="en-US-JennyNeural">
        <prosody rate="+25%" pitch="+0Hz">Hello</prosody>
      </voice>
    </speak>
"""
from __future__ import annotations

from xml.sax.saxutils import escape, quoteattr


def format_rate(rate: int) -> str:
    """Format a rate percentage as "+N%" / "-N%"."""
    return f"{rate:+d}%"


def format_pitch(pitch: int) -> str:
    """Format a pitch offset as "+NHz" / "-NHz"."""
    return f"{pitch:+d}Hz"


def locale_of(voice_name: str) -> str:
    """
    Extract the locale from a voice name.

    Examples:
        >>> locale_of("zh-CN-XiaoxiaoNeural")
        'zh-CN'
        >>> locale_of("custom")
        'en-US'
    """
    parts = voice_name.split("-")
    if len(parts) >= 3:
        return f"{parts[0]}-{parts[1]}"
    return "en-US"


def build_ssml(text: str, voice_name: str, rate: int = 0, pitch: int = 0) -> str:
    """
    Build an SSML document for one synthesis call.

    The text is XML-escaped; callers pass plain text, never markup.
    """
    return (
        f'<speak version="1.0" xmlns="http://www.w3.org/2001/10/synthesis" '
        f'xml:lang={quoteattr(locale_of(voice_name))}>'
        f"<voice name={quoteattr(voice_name)}>"
        f"<prosody rate={quoteattr(format_rate(rate))} pitch={quoteattr(format_pitch(pitch))}>"
        f"{escape(text)}"
        "</prosody></voice></speak>"
    )
