"""
FastAPI REST API Layer for tts-bridge.

This package defines all HTTP endpoints:
    - models.py: OpenAI model list (/v1/models)
    - speech.py: OpenAI speech synthesis (/v1/audio/speech)
    - routes.py: Operational endpoints (/health, /metrics)
    - schemas.py: Request/response Pydantic models
    - responses.py: CORS headers and OpenAI error envelopes
    - dependencies.py: FastAPI dependency injection
"""
