"""
Operational Routes.

Endpoints:
    GET /health   - Liveness check with the active backend
    GET /metrics  - Prometheus metrics
"""
from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from tts_bridge import __version__
from tts_bridge.api.dependencies import get_speech_service
from tts_bridge.core.metrics import metrics
from tts_bridge.services.speech_service import SpeechService

router = APIRouter()


@router.get("/health")
def health(service: SpeechService = Depends(get_speech_service)):
    """
    Health check for load balancers and probes.

    Returns:
        dict: {"ok": true, "backend": "edge", "streaming": true, "version": "..."}
    """
    return {"ok": True, **service.health(), "version": __version__}


@router.get("/metrics")
def prometheus_metrics():
    """Prometheus metrics in text exposition format."""
    content, content_type = metrics.get_metrics_response()
    return Response(content=content, media_type=content_type)
