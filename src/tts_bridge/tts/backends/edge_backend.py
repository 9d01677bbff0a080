"""
Edge read-aloud backend.

Uses the edge-tts library, which speaks the same websocket protocol as the
Microsoft Edge browser's "Read aloud" feature. No credentials are needed,
but the service only produces 24 kHz 48 kbit/s mono MP3: requests for other
profiles are served as MP3 and a warning is logged.
"""
from __future__ import annotations

from typing import AsyncIterator

import edge_tts
from edge_tts.exceptions import EdgeTTSException

from tts_bridge.core.logging import debug, warn
from tts_bridge.tts.backend import (
    BackendCapabilities,
    BackendError,
    BaseSpeechBackend,
    SynthesisParameters,
)
from tts_bridge.tts.formats import MP3_24KHZ_48K
from tts_bridge.tts.ssml import format_pitch, format_rate


class EdgeBackend(BaseSpeechBackend):
    name = "edge"
    capabilities = BackendCapabilities(
        streaming=True,
        output_formats=frozenset({MP3_24KHZ_48K}),
    )

    def resolve_format(self, output_format: str) -> str:
        if not self.supports_format(output_format):
            warn(self.logger, "format_unsupported", requested=output_format, using=MP3_24KHZ_48K)
            return MP3_24KHZ_48K
        return output_format

    def _communicate(self, text: str, params: SynthesisParameters) -> "edge_tts.Communicate":
        return edge_tts.Communicate(
            text,
            params.voice_name,
            rate=format_rate(params.rate),
            pitch=format_pitch(params.pitch),
            receive_timeout=int(self.config.backend.timeout_s),
        )

    async def stream(self, text: str, params: SynthesisParameters) -> AsyncIterator[bytes]:
        communicate = self._communicate(text, params)
        debug(self.logger, "edge_stream_start", voice_name=params.voice_name, rate=params.rate)
        try:
            async for message in communicate.stream():
                if message["type"] == "audio" and message["data"]:
                    yield message["data"]
        except EdgeTTSException as e:
            raise BackendError(f"Edge TTS failed: {e}") from e
