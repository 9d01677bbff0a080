"""
Services layer: request validation, OpenAI-to-Microsoft mapping and the
SpeechService pipeline.
"""
from tts_bridge.services.speech_service import (
    BackendConfigError,
    BridgeError,
    ErrorCode,
    SpeechJob,
    SpeechResult,
    SpeechService,
    SpeechStream,
    SynthesisError,
    get_service,
    reset_service,
)

__all__ = [
    "BackendConfigError",
    "BridgeError",
    "ErrorCode",
    "SpeechJob",
    "SpeechResult",
    "SpeechService",
    "SpeechStream",
    "SynthesisError",
    "get_service",
    "reset_service",
]
