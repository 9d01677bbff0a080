"""
tts-bridge: OpenAI-compatible front end for Microsoft neural voices.

Applications written against OpenAI's Audio Speech API can point their
client at this service and receive audio synthesized by Microsoft's
neural TTS voices (Edge read-aloud or Azure Cognitive Services).

Endpoints:
    - GET  /v1/models        - Static OpenAI-style model list (tts-1, tts-1-hd)
    - POST /v1/audio/speech  - Speech synthesis (buffered or chunked)
    - GET  /health           - Liveness and backend info
    - GET  /metrics          - Prometheus metrics

Example Usage:
    >>> from openai import OpenAI
    >>> client = OpenAI(base_url="http://localhost:8000/v1", api_key="unused")
    >>> response = client.audio.speech.create(
    ...     model="tts-1", voice="nova", input="Hello there!"
    ... )
    >>> response.stream_to_file("hello.mp3")
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
