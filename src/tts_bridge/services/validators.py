"""
Input Validation for the Speech Endpoint.

Checks that run before any backend work so that bad requests get a 400
with an OpenAI error envelope instead of a backend failure.

Validation Rules:
    - Body: must be a JSON object
    - model, input: required, non-empty
    - input: at most max_input_chars characters (0 disables the check)

Error Handling:
    All functions raise ValidationError carrying:
        - message: Human-readable description (returned to the client)
        - code: Machine-readable code (e.g. "string_above_max_length")
        - param: Offending request field, or None

Usage:
    from tts_bridge.services.validators import (
        ValidationError,
        validate_required_fields,
        validate_input_length,
    )

    try:
        validate_required_fields(body)
        validate_input_length(body["input"], 4096)
    except ValidationError as e:
        return openai_error_response(e.message, "invalid_request_error", 400, param=e.param)
"""
from __future__ import annotations

from typing import Any, Optional

from tts_bridge.core.logging import get_logger, verbose

_LOG = get_logger("tts-bridge.validators")

MISSING_PARAMS_MESSAGE = "Missing required parameters: model and input are required"


class ValidationError(Exception):
    """
    Exception raised when input validation fails.

    Attributes:
        message: Human-readable error description.
        code: Machine-readable error code.
        param: Name of the request field at fault, if any.
    """

    def __init__(self, message: str, code: str = "invalid_request", param: Optional[str] = None):
        self.message = message
        self.code = code
        self.param = param
        super().__init__(message)


def validate_body(body: Any) -> dict:
    """
    Ensure the decoded JSON body is an object.

    Raises:
        ValidationError: If the body is a list, string, number or null.
    """
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object", "invalid_body")
    return body


def validate_required_fields(body: dict) -> None:
    """
    Check that model and input are present and non-empty.

    Raises:
        ValidationError: With the OpenAI-style "missing parameters" message.
    """
    if not body.get("model") or not body.get("input"):
        missing = "model" if not body.get("model") else "input"
        verbose(_LOG, "validation_failed", reason="missing_required", param=missing)
        raise ValidationError(MISSING_PARAMS_MESSAGE, "missing_required_parameter", missing)


def input_length(text: str) -> int:
    """
    Length of the input in UTF-16 code units, as OpenAI clients count it.

    Characters outside the Basic Multilingual Plane (most emoji) count as 2.

    Examples:
        >>> input_length("abc")
        3
        >>> input_length("\U0001F600")
        2
    """
    return len(text.encode("utf-16-le")) // 2


def validate_input_length(text: str, max_length: int) -> str:
    """
    Enforce the input length cap, measured with input_length().

    Args:
        text: The request's input text.
        max_length: Maximum characters; 0 disables the check.

    Returns:
        The text unchanged.

    Raises:
        ValidationError: If the text is longer than max_length.
    """
    length = input_length(text)
    if max_length and length > max_length:
        verbose(_LOG, "validation_failed", reason="input_too_long", chars=length, limit=max_length)
        raise ValidationError(
            f"Input is too long ({length} > {max_length} characters)",
            "string_above_max_length",
            "input",
        )
    return text
