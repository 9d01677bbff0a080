"""
OpenAI-Compatible Speech Endpoint.

This module provides the `/v1/audio/speech` endpoint that matches OpenAI's
TTS API, backed by Microsoft neural voices.

OpenAI Compatibility:
    - model: Required, echoed in the openai-model header
    - input: Text to synthesize (required)
    - voice: Mapped to an en-US or zh-CN voice depending on the text
    - response_format: Mapped to a Microsoft output profile
    - speed: Mapped to an SSML prosody rate
    - stream: Streams unless explicitly false

Request Flow:
    1. Generate request ID for tracing
    2. OPTIONS → 204, non-POST → 405
    3. Decode and validate the JSON body (→ 400)
    4. Map and synthesize through SpeechService
    5. Stream chunks, or return the whole buffer with Content-Length

Error Responses:
    400 {"error": {"message", "type": "invalid_request_error", "param"?, "code"?}}
    405 {"error": "Method not allowed"}
    500 {"error": {"message", "type": "server_error", "code"?}}

Example Usage:
    from openai import OpenAI
    client = OpenAI(base_url="http://localhost:8000/v1", api_key="unused")
    with client.audio.speech.with_streaming_response.create(
        model="tts-1", voice="nova", input="Hello there",
    ) as response:
        response.stream_to_file("hello.mp3")
"""
from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import ValidationError as PydanticValidationError

from tts_bridge.api.dependencies import resolve_speech_service
from tts_bridge.api.responses import (
    ROUTED_METHODS,
    cors_headers,
    openai_error_response,
    preflight_response,
)
from tts_bridge.api.schemas import SpeechRequest
from tts_bridge.core.logging import fail, get_logger, set_request_id, verbose, warn
from tts_bridge.core.metrics import metrics
from tts_bridge.services.speech_service import BridgeError, SpeechJob, SpeechStream
from tts_bridge.services.validators import (
    ValidationError,
    validate_body,
    validate_input_length,
    validate_required_fields,
)

router = APIRouter()

_LOG = get_logger("tts-bridge.speech")

ALLOW_METHODS = "POST, OPTIONS"


def parse_speech_request(body: Any, max_input_chars: int) -> SpeechRequest:
    """
    Validate a decoded JSON body and build a SpeechRequest.

    Order: object check, required fields, field types, length cap.

    Raises:
        ValidationError: With the offending param where there is one.
    """
    validate_body(body)
    validate_required_fields(body)
    try:
        req = SpeechRequest.model_validate(body)
    except PydanticValidationError as e:
        err = e.errors()[0]
        param = str(err["loc"][0]) if err.get("loc") else None
        verbose(_LOG, "validation_failed", reason="invalid_type", param=param)
        raise ValidationError(f"Invalid value for '{param}': {err['msg']}", err["type"], param)
    validate_input_length(req.input, max_input_chars)
    return req


def openai_stream_response(
    stream: SpeechStream,
    model: str,
    organization: str,
    api_version: str,
) -> StreamingResponse:
    """
    Wrap an open SpeechStream as a chunked HTTP response with the headers
    OpenAI's API sends.

    Headers:
        Content-Type: derived from the produced output profile
        openai-model: the requested model id
        openai-organization: configured organization
        openai-processing-ms: time to first audio byte
        openai-version: configured API version
    """
    headers = {
        **cors_headers(ALLOW_METHODS),
        "openai-model": model,
        "openai-organization": organization,
        "openai-processing-ms": str(stream.first_chunk_ms),
        "openai-version": api_version,
        "X-Request-Id": stream.request_id,
    }
    return StreamingResponse(stream.chunks(), media_type=stream.content_type, headers=headers)


@router.api_route("/v1/audio/speech", methods=ROUTED_METHODS)
async def create_speech(request: Request) -> Response:
    """
    OpenAI-compatible text-to-speech endpoint.

    Example:
        curl -X POST http://localhost:8000/v1/audio/speech \\
            -H "Content-Type: application/json" \\
            -d '{"model": "tts-1", "input": "Hello!", "voice": "alloy"}' \\
            --output speech.mp3
    """
    rid = str(uuid.uuid4())[:12]
    set_request_id(rid)

    if request.method == "OPTIONS":
        return preflight_response(ALLOW_METHODS)

    if request.method != "POST":
        metrics.record_request("speech", 405)
        return JSONResponse(
            status_code=405,
            content={"error": "Method not allowed"},
            headers={**cors_headers(ALLOW_METHODS), "Allow": ALLOW_METHODS},
        )

    cors = cors_headers(ALLOW_METHODS)

    # Only POST needs the backend
    try:
        service = resolve_speech_service(request)
    except BridgeError as e:
        metrics.record_request("speech", 500)
        return openai_error_response(e.message, "server_error", 500, code=e.code, headers=cors)
    speech_config = service.config.speech

    try:
        body = await request.json()
    except ValueError:
        metrics.record_request("speech", 400)
        return openai_error_response("Request body must be valid JSON", "invalid_request_error", 400,
                                     code="invalid_json", headers=cors)

    try:
        req = parse_speech_request(body, speech_config.max_input_chars)
    except ValidationError as e:
        warn(_LOG, "bad_request", error=e.message, param=e.param)
        metrics.record_request("speech", 400)
        return openai_error_response(e.message, "invalid_request_error", 400,
                                     param=e.param, code=e.code, headers=cors)

    job = SpeechJob(text=req.input, voice=req.voice, response_format=req.response_format, speed=req.speed)

    try:
        if req.streaming:
            stream = await service.open_stream(job, rid)
            response: Response = openai_stream_response(
                stream,
                model=req.model,
                organization=speech_config.organization,
                api_version=speech_config.api_version,
            )
        else:
            result = await service.synthesize(job, rid)
            response = Response(
                content=result.audio,
                media_type=result.content_type,
                headers={**cors, "X-Request-Id": rid},
            )

    except BridgeError as e:
        metrics.record_request("speech", 500)
        return openai_error_response(e.message, "server_error", 500, code=e.code, headers=cors)

    except Exception as e:
        # Log internally but don't expose details
        fail(_LOG, "speech_unexpected_error", error=str(e), error_type=type(e).__name__)
        metrics.record_request("speech", 500)
        return openai_error_response("Internal server error", "server_error", 500,
                                     code="internal_error", headers=cors)

    metrics.record_request("speech", 200)
    return response
