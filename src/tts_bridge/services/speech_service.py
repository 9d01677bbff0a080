"""
SpeechService - OpenAI Speech Pipeline.

This module provides the SpeechService class that sits between the HTTP
handlers and the speech backend. The /v1/audio/speech endpoint and the CLI
both go through it.

Architecture:
    SpeechJob → Map (voice, rate, format) → Backend → Result / Stream

Key Components:
    - Mapping: OpenAI fields to Microsoft parameters (services/mapping.py)
    - Backend: edge-tts or Azure REST (tts/backend.py)
    - Metrics: latency, audio bytes and backend errors

Error Handling:
    - BridgeError: Base exception with standardized error codes
    - SynthesisError: The backend failed or returned no audio
    - BackendConfigError: The configured backend cannot be created

Streaming:
    open_stream() waits for the first audio chunk before returning. Any
    failure up to that point is raised to the caller, which can still send
    a JSON error response. Failures after that point end the stream.

Example:
    >>> import asyncio
    >>> from tts_bridge.services.speech_service import SpeechJob, SpeechService
    >>> from tts_bridge.core.config import Settings
    >>>
    >>> service = SpeechService(Settings(raw={"backend": {"engine": "edge"}}))
    >>> result = asyncio.run(service.synthesize(SpeechJob(text="Hello"), "req-1"))
    >>> print(result.content_type, len(result.audio))
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass
from typing import Any, AsyncIterator, Dict, Optional

from tts_bridge.core.config import BridgeConfig, ConfigValidationError, Settings
from tts_bridge.core.logging import debug, fail, get_logger, info, success
from tts_bridge.core.metrics import metrics
from tts_bridge.services.mapping import build_synthesis_parameters
from tts_bridge.tts.backend import BackendError, BaseSpeechBackend, SynthesisParameters, get_backend
from tts_bridge.tts.formats import content_type_for_format
from tts_bridge.utils.timeit import timeit

_LOG = get_logger("tts-bridge.service")


# =============================================================================
# Error Codes and Exceptions
# =============================================================================

class ErrorCode:
    """
    Standardized error codes.

    Carried as the "code" member of OpenAI error envelopes.
    """
    SYNTHESIS_FAILED = "synthesis_failed"          # Backend error or empty audio
    BACKEND_UNAVAILABLE = "backend_unavailable"    # Backend cannot be created
    INTERNAL_ERROR = "internal_error"              # Unexpected error


class BridgeError(Exception):
    """
    Base exception for bridge errors.

    Attributes:
        message: Human-readable error message (safe to show to clients).
        code: Error code from ErrorCode class.
        details: Optional dictionary with additional context (logged only).
    """
    def __init__(self, message: str, code: str = ErrorCode.INTERNAL_ERROR, details: Optional[Dict] = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to an OpenAI server_error envelope."""
        return {
            "error": {
                "message": self.message,
                "type": "server_error",
                "code": self.code,
            }
        }


class SynthesisError(BridgeError):
    """Raised when the backend fails or produces no audio."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.SYNTHESIS_FAILED, details)


class BackendConfigError(BridgeError):
    """Raised when the configured backend cannot be created."""
    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(message, ErrorCode.BACKEND_UNAVAILABLE, details)


# =============================================================================
# Request/Response Dataclasses
# =============================================================================

@dataclass
class SpeechJob:
    """
    One synthesis job in OpenAI terms.

    Attributes:
        text: Text to speak (required).
        voice: OpenAI voice name (optional, unknown names use the default pair).
        response_format: OpenAI format name (optional, defaults to MP3).
        speed: Speed multiplier (optional, 1.0 when absent).
    """
    text: str
    voice: Optional[str] = None
    response_format: Optional[str] = None
    speed: Optional[float] = None


@dataclass
class SpeechResult:
    """
    Result of a buffered synthesis.

    Attributes:
        audio: Encoded audio bytes.
        params: Parameters the backend was called with.
        content_type: MIME type for the produced profile.
        total_seconds: Time spent in the backend.
        request_id: Request ID for tracing.
    """
    audio: bytes
    params: SynthesisParameters
    content_type: str
    total_seconds: float
    request_id: str

    @property
    def output_format(self) -> str:
        return self.params.output_format


class SpeechStream:
    """
    A streaming synthesis whose first chunk has already arrived.

    Iterate chunks() exactly once to relay the audio. The metrics and the
    completion log line are written when the iteration ends.

    Attributes:
        params: Parameters the backend was called with.
        content_type: MIME type for the produced profile.
        first_chunk_ms: Milliseconds until the first audio byte.
        request_id: Request ID for tracing.
    """

    def __init__(
        self,
        backend_name: str,
        params: SynthesisParameters,
        first_chunk: bytes,
        rest: AsyncIterator[bytes],
        started: float,
        first_chunk_ms: int,
        request_id: str,
    ):
        self.backend_name = backend_name
        self.params = params
        self.content_type = content_type_for_format(params.output_format)
        self.first_chunk_ms = first_chunk_ms
        self.request_id = request_id
        self._first_chunk = first_chunk
        self._rest = rest
        self._started = started

    async def chunks(self) -> AsyncIterator[bytes]:
        total = len(self._first_chunk)
        chunk_count = 1
        completed = False
        try:
            yield self._first_chunk
            async for chunk in self._rest:
                total += len(chunk)
                chunk_count += 1
                yield chunk
            completed = True
        except Exception as e:
            metrics.record_backend_error(self.backend_name)
            fail(_LOG, "speech_stream_aborted", backend=self.backend_name,
                 bytes=total, error=str(e), error_type=type(e).__name__)
            raise
        finally:
            seconds = time.perf_counter() - self._started
            if not completed:
                await self.aclose()
            else:
                metrics.record_synthesis(self.backend_name, "stream", seconds, total)
                success(_LOG, "speech_done", mode="stream", backend=self.backend_name,
                        chunks=chunk_count, bytes=total, seconds=round(seconds, 3))

    async def aclose(self) -> None:
        """Stop the backend stream without reading the remaining audio."""
        aclose = getattr(self._rest, "aclose", None)
        if aclose is not None:
            await aclose()


# =============================================================================
# Main Service Class
# =============================================================================

class SpeechService:
    """
    Speech service mapping OpenAI jobs onto a Microsoft speech backend.

    Usage:
        service = SpeechService(settings)

        # Buffered
        result = await service.synthesize(SpeechJob(text="Hi", voice="nova"), "req-1")

        # Streaming
        stream = await service.open_stream(SpeechJob(text="Hi"), "req-2")
        async for chunk in stream.chunks():
            ...
    """

    def __init__(self, settings: Settings, backend: Optional[BaseSpeechBackend] = None):
        """
        Args:
            settings: Application settings loaded from YAML/environment.
            backend: Backend to use. Defaults to the process-wide backend
                selected by configuration.

        Raises:
            BackendConfigError: If the configured backend cannot be created.
        """
        self._settings = settings
        self._config: BridgeConfig = settings.get_config()
        if backend is None:
            try:
                backend = get_backend(settings)
            except (ValueError, ConfigValidationError) as e:
                fail(_LOG, "backend_unavailable", error=str(e))
                raise BackendConfigError(str(e)) from e
        self._backend = backend
        self._text_preview_chars = self._config.logging.text_preview_chars

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def backend(self) -> BaseSpeechBackend:
        return self._backend

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def config(self) -> BridgeConfig:
        return self._config

    def health(self) -> Dict[str, Any]:
        """Backend summary for GET /health."""
        return {
            "backend": self._backend.name,
            "streaming": self._backend.capabilities.streaming,
        }

    # =========================================================================
    # Helpers
    # =========================================================================

    def prepare(self, job: SpeechJob) -> SynthesisParameters:
        """
        Map a job to backend parameters.

        The output format is the one the backend will actually produce,
        which differs from the requested one for fixed-format backends.
        """
        params = build_synthesis_parameters(
            job.text,
            voice=job.voice,
            response_format=job.response_format,
            speed=job.speed,
        )
        resolved = self._backend.resolve_format(params.output_format)
        if resolved != params.output_format:
            params = SynthesisParameters(
                voice_name=params.voice_name,
                rate=params.rate,
                pitch=params.pitch,
                output_format=resolved,
            )
        return params

    def _log_request(self, job: SpeechJob, params: SynthesisParameters, mode: str) -> None:
        preview = job.text[:self._text_preview_chars] if self._text_preview_chars > 0 else ""
        info(_LOG, "speech_request", mode=mode, backend=self._backend.name, chars=len(job.text),
             voice=job.voice, voice_name=params.voice_name, rate=params.rate,
             output_format=params.output_format, text_preview=preview)
        debug(_LOG, "speech_request_full", text=job.text, speed=job.speed,
              response_format=job.response_format)

    def _wrap_failure(self, e: Exception, mode: str) -> BridgeError:
        metrics.record_backend_error(self._backend.name)
        fail(_LOG, "speech_failed", mode=mode, backend=self._backend.name,
             error=str(e), error_type=type(e).__name__)
        if isinstance(e, BridgeError):
            return e
        details = {"error_type": type(e).__name__, "backend": self._backend.name}
        if isinstance(e, BackendError):
            details["status_code"] = e.status_code
            return SynthesisError(f"Synthesis failed: {e}", details)
        # Not a remote service error; keep internals out of the client message
        return SynthesisError("Synthesis failed", details)

    # =========================================================================
    # Public API
    # =========================================================================

    async def synthesize(self, job: SpeechJob, request_id: str) -> SpeechResult:
        """
        Synthesize the whole job into one audio buffer.

        Raises:
            SynthesisError: If the backend fails or returns no audio.
        """
        params = self.prepare(job)
        self._log_request(job, params, "buffered")

        try:
            with timeit("synthesis") as t:
                audio = await self._backend.synthesize(job.text, params)
            if not audio:
                raise SynthesisError("Backend returned no audio", {"backend": self._backend.name})
        except Exception as e:
            wrapped = self._wrap_failure(e, "buffered")
            if wrapped is e:
                raise
            raise wrapped from e

        seconds = t.timing.seconds
        metrics.record_synthesis(self._backend.name, "buffered", seconds, len(audio))
        success(_LOG, "speech_done", mode="buffered", backend=self._backend.name,
                bytes=len(audio), seconds=round(seconds, 3))

        return SpeechResult(
            audio=audio,
            params=params,
            content_type=content_type_for_format(params.output_format),
            total_seconds=seconds,
            request_id=request_id,
        )

    async def open_stream(self, job: SpeechJob, request_id: str) -> SpeechStream:
        """
        Start a streaming synthesis and wait for its first chunk.

        Raises:
            SynthesisError: If the backend fails before producing audio.
        """
        params = self.prepare(job)
        self._log_request(job, params, "stream")

        started = time.perf_counter()
        iterator = self._backend.stream(job.text, params).__aiter__()
        try:
            try:
                first = await iterator.__anext__()
            except StopAsyncIteration:
                raise SynthesisError("Backend returned no audio", {"backend": self._backend.name})
        except Exception as e:
            wrapped = self._wrap_failure(e, "stream")
            if wrapped is e:
                raise
            raise wrapped from e

        first_chunk_ms = int(round((time.perf_counter() - started) * 1000))
        debug(_LOG, "speech_first_chunk", ms=first_chunk_ms, bytes=len(first))

        return SpeechStream(
            backend_name=self._backend.name,
            params=params,
            first_chunk=first,
            rest=iterator,
            started=started,
            first_chunk_ms=first_chunk_ms,
            request_id=request_id,
        )


# =============================================================================
# Global Service Instance (Singleton Pattern)
# =============================================================================

_service: Optional[SpeechService] = None
_service_lock = threading.Lock()


def get_service(settings: Settings) -> SpeechService:
    """
    Get or create the global SpeechService instance.

    Thread-safe lazy singleton.
    """
    global _service
    if _service is None:
        with _service_lock:
            if _service is None:
                _service = SpeechService(settings)
    return _service


def reset_service() -> None:
    """Reset the global service instance (tests)."""
    global _service
    with _service_lock:
        _service = None
