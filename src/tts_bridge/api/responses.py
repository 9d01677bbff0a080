"""
Shared Response Builders for the OpenAI Endpoints.

Both OpenAI endpoints answer every request themselves (including OPTIONS
and unsupported methods) so that the CORS headers, the 204 preflight and
the 405 bodies are exactly what OpenAI clients and browsers expect.
"""
from __future__ import annotations

from typing import Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from tts_bridge.api.schemas import ErrorDetail, ErrorResponse
from tts_bridge.core.logging import error, get_logger
from tts_bridge.services.speech_service import BridgeError

_LOG = get_logger("tts-bridge.api")

# Methods routed to the OpenAI handlers; anything not handled gets a 405
ROUTED_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def cors_headers(allow_methods: str) -> Dict[str, str]:
    """
    CORS headers sent on every response of an OpenAI endpoint.

    Args:
        allow_methods: Value for Access-Control-Allow-Methods,
            e.g. "POST, OPTIONS".
    """
    return {
        "Access-Control-Allow-Origin": "*",
        "Access-Control-Allow-Methods": allow_methods,
        "Access-Control-Allow-Headers": "Content-Type",
    }


def preflight_response(allow_methods: str) -> Response:
    """204 No Content with CORS headers and an empty body."""
    return Response(status_code=204, headers=cors_headers(allow_methods))


def openai_error_response(
    message: str,
    error_type: str,
    status_code: int,
    param: Optional[str] = None,
    code: Optional[str] = None,
    headers: Optional[Dict[str, str]] = None,
) -> JSONResponse:
    """
    Create an error response in OpenAI's error format.

    Members that are None (param, code) are left out of the body.

    Example Response:
        {
            "error": {
                "message": "Method not allowed",
                "type": "invalid_request_error"
            }
        }
    """
    body = ErrorResponse(error=ErrorDetail(message=message, type=error_type, param=param, code=code))
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
    )


async def bridge_error_handler(request: Request, exc: BridgeError) -> JSONResponse:
    """
    Exception handler for BridgeError raised outside a handler's own
    try block (e.g. while resolving /health's SpeechService dependency).
    """
    error(_LOG, "request_failed", path=request.url.path, error=exc.message, code=exc.code)
    return JSONResponse(status_code=500, content=exc.to_dict(), headers={"Access-Control-Allow-Origin": "*"})
