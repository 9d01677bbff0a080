"""
OpenAI-Compatible Models Endpoint.

GET /v1/models returns a fixed list of the two OpenAI TTS models, so that
OpenAI SDKs and UIs that list models before calling the speech endpoint
keep working. The document never changes between calls.

Responses:
    GET      200  {"object": "list", "data": [tts-1, tts-1-hd]}
    OPTIONS  204  empty body
    other    405  {"error": {"message": "Method not allowed", "type": "invalid_request_error"}}

Every response carries:
    Access-Control-Allow-Origin: *
    Access-Control-Allow-Methods: GET, OPTIONS
    Access-Control-Allow-Headers: Content-Type
"""
from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse

from tts_bridge.api.responses import (
    ROUTED_METHODS,
    cors_headers,
    openai_error_response,
    preflight_response,
)
from tts_bridge.api.schemas import MODELS_DOCUMENT
from tts_bridge.core.logging import fail, get_logger, verbose
from tts_bridge.core.metrics import metrics

router = APIRouter()

_LOG = get_logger("tts-bridge.models")

ALLOW_METHODS = "GET, OPTIONS"


@router.api_route("/v1/models", methods=ROUTED_METHODS)
async def list_models(request: Request) -> Response:
    """
    List the available TTS models (OpenAI format).

    Example:
        curl http://localhost:8000/v1/models
    """
    if request.method == "OPTIONS":
        return preflight_response(ALLOW_METHODS)

    if request.method != "GET":
        metrics.record_request("models", 405)
        return openai_error_response(
            "Method not allowed",
            "invalid_request_error",
            405,
            headers={**cors_headers(ALLOW_METHODS), "Allow": ALLOW_METHODS},
        )

    try:
        response = JSONResponse(content=MODELS_DOCUMENT, headers=cors_headers(ALLOW_METHODS))
    except Exception as e:
        fail(_LOG, "models_failed", error=str(e), error_type=type(e).__name__)
        metrics.record_request("models", 500)
        return openai_error_response(
            str(e) or "Internal server error",
            "server_error",
            500,
            headers=cors_headers(ALLOW_METHODS),
        )

    verbose(_LOG, "models_listed", count=len(MODELS_DOCUMENT["data"]))
    metrics.record_request("models", 200)
    return response
