"""
Azure Cognitive Services Speech backend.

Posts SSML to the regional REST endpoint and relays the encoded audio. The
requested output profile is passed through as X-Microsoft-OutputFormat, so
every profile the service knows (mp3, opus, riff/raw pcm, ogg, ...) is
produced natively.

Configuration:
    backend:
      engine: azure
      azure_key: <subscription key>     # or AZURE_SPEECH_KEY
      azure_region: westeurope          # or AZURE_SPEECH_REGION
      timeout_s: 30
"""
from __future__ import annotations

from typing import AsyncIterator, Optional

import httpx

from tts_bridge.core.config import BridgeConfig
from tts_bridge.core.logging import debug
from tts_bridge.tts.backend import (
    BackendCapabilities,
    BackendError,
    BaseSpeechBackend,
    SynthesisParameters,
)
from tts_bridge.tts.ssml import build_ssml

AZURE_TTS_URL = "https://{region}.tts.speech.microsoft.com/cognitiveservices/v1"


class AzureBackend(BaseSpeechBackend):
    name = "azure"
    capabilities = BackendCapabilities(streaming=True)

    def __init__(self, config: BridgeConfig, client: Optional[httpx.AsyncClient] = None):
        super().__init__(config)
        if not config.backend.azure_key:
            raise ValueError("azure backend requires backend.azure_key (or AZURE_SPEECH_KEY)")
        self.url = AZURE_TTS_URL.format(region=config.backend.azure_region)
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        # Created lazily so it binds to the running event loop
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self.config.backend.timeout_s)
        return self._client

    def _headers(self, params: SynthesisParameters) -> dict:
        return {
            "Ocp-Apim-Subscription-Key": self.config.backend.azure_key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": params.output_format,
            "User-Agent": self.config.backend.user_agent,
        }

    async def stream(self, text: str, params: SynthesisParameters) -> AsyncIterator[bytes]:
        ssml = build_ssml(text, params.voice_name, params.rate, params.pitch)
        debug(self.logger, "azure_request", url=self.url, voice_name=params.voice_name,
              output_format=params.output_format)
        try:
            async with self.client.stream(
                "POST", self.url, headers=self._headers(params), content=ssml.encode("utf-8")
            ) as response:
                if response.status_code >= 400:
                    body = (await response.aread()).decode("utf-8", errors="replace")
                    raise BackendError(
                        f"Azure TTS returned {response.status_code}: {body[:200] or response.reason_phrase}",
                        status_code=response.status_code,
                    )
                async for chunk in response.aiter_bytes():
                    if chunk:
                        yield chunk
        except httpx.HTTPError as e:
            raise BackendError(f"Azure TTS request failed: {e}") from e

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None
