"""
API Request/Response Schemas.

Pydantic models for the OpenAI-compatible endpoints. These schemas provide:
    - Request validation with type checking
    - The static /v1/models document
    - The OpenAI error envelope

Models:
    SpeechRequest: Input schema for POST /v1/audio/speech
    ModelPermission, ModelObject, ModelList: GET /v1/models response
    ErrorDetail, ErrorResponse: {"error": {...}} envelope

Example Request:
    {
        "model": "tts-1",
        "input": "Hello world",
        "voice": "alloy",
        "response_format": "mp3",
        "speed": 1.25,
        "stream": false
    }

See Also:
    - api/speech.py: Validation order and 400 mapping
    - services/mapping.py: How voice/speed/response_format are translated
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class SpeechRequest(BaseModel):
    """
    OpenAI speech synthesis request.

    Unknown fields are ignored. Presence of model/input and the length cap
    are checked before this model is built (see api/speech.py), so the
    constraints here only cover field types.

    Attributes:
        model: Model id. Echoed back in the openai-model header; any value
            is accepted.

        input: The text to convert to speech.

        voice: OpenAI voice name (alloy, echo, fable, onyx, nova, shimmer).
            Unknown or missing names use the multilingual default voices.

        response_format: mp3, opus, aac, flac, wav or pcm. aac and flac are
            served as MP3. Unknown values fall back to MP3.

        speed: Speaking speed multiplier. Values outside 0.25-4.0 are
            clamped rather than rejected.

        stream: Anything but an explicit false streams the audio.
    """
    model_config = ConfigDict(extra="ignore")

    model: str
    input: str
    voice: Optional[str] = None
    response_format: Optional[str] = None
    speed: Optional[float] = Field(default=None, allow_inf_nan=False)
    stream: Optional[StrictBool] = None

    @property
    def streaming(self) -> bool:
        return self.stream is not False


# =============================================================================
# /v1/models
# =============================================================================

class ModelPermission(BaseModel):
    id: str
    object: str = "model_permission"
    created: int
    allow_create_engine: bool = False
    allow_sampling: bool = True
    allow_logprobs: bool = True
    allow_search_indices: bool = False
    allow_view: bool = True
    allow_fine_tuning: bool = False
    organization: str = "*"
    group: Optional[str] = None
    is_blocking: bool = False


class ModelObject(BaseModel):
    id: str
    object: str = "model"
    created: int
    owned_by: str
    permission: List[ModelPermission]
    root: str
    parent: Optional[str] = None


class ModelList(BaseModel):
    object: str = "list"
    data: List[ModelObject]


MODEL_IDS = ("tts-1", "tts-1-hd")
MODEL_CREATED = 1677610602
MODEL_OWNER = "openai"
MODEL_PERMISSION_ID = "modelperm-KlsZtTGbGPLEIlya3tj8vKKp"


def _build_model_list() -> ModelList:
    return ModelList(
        data=[
            ModelObject(
                id=model_id,
                created=MODEL_CREATED,
                owned_by=MODEL_OWNER,
                permission=[ModelPermission(id=MODEL_PERMISSION_ID, created=MODEL_CREATED)],
                root=model_id,
            )
            for model_id in MODEL_IDS
        ]
    )


# Serialized once; every GET /v1/models returns this same document
MODELS_DOCUMENT: Dict[str, Any] = _build_model_list().model_dump()


# =============================================================================
# Errors
# =============================================================================

class ErrorDetail(BaseModel):
    message: str
    type: str
    param: Optional[str] = None
    code: Optional[str] = None


class ErrorResponse(BaseModel):
    """
    OpenAI error envelope.

    Example:
        {
            "error": {
                "message": "Missing required parameters: model and input are required",
                "type": "invalid_request_error",
                "param": "input"
            }
        }
    """
    error: ErrorDetail
