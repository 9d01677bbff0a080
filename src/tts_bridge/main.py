"""
FastAPI Application Entry Point.

This module creates and configures the FastAPI application instance for
tts-bridge. It sets up routing, logging, metrics and backend shutdown.

The application exposes:
    - OpenAI-compatible API: /v1/models, /v1/audio/speech
    - Operational API: /health, /metrics

Usage:
    # Run with uvicorn
    uvicorn tts_bridge.main:app --host 0.0.0.0 --port 8000

    # Or use the module directly (host/port from settings)
    python -m tts_bridge.main
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from tts_bridge import __version__
from tts_bridge.api.dependencies import get_settings, shutdown_service
from tts_bridge.api.models import router as models_router
from tts_bridge.api.responses import bridge_error_handler
from tts_bridge.api.routes import router
from tts_bridge.api.speech import router as speech_router
from tts_bridge.core.logging import configure_logging, get_level_name, get_log_config, get_logger, info
from tts_bridge.core.metrics import metrics
from tts_bridge.services.speech_service import BridgeError


@asynccontextmanager
async def lifespan(app: FastAPI):
    log = get_logger("tts-bridge")
    info(log, "startup", version=__version__, log_level=get_level_name(),
         log_dir=get_log_config().get("log_dir"))
    yield
    await shutdown_service()
    info(log, "shutdown_complete")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    This factory function:
        1. Configures structured logging (settings + TTS_BRIDGE_LOG_* env vars)
        2. Applies the metrics.enabled setting
        3. Registers the OpenAI and operational routers
        4. Closes the backend's HTTP resources on shutdown

    Returns:
        FastAPI: Configured application instance ready to serve requests.
    """
    configure_logging()

    metrics.set_enabled(get_settings().get_config().metrics.enabled)

    app = FastAPI(title="tts-bridge", version=__version__, lifespan=lifespan)

    app.include_router(models_router)   # /v1/models
    app.include_router(speech_router)   # /v1/audio/speech
    app.include_router(router)          # /health, /metrics

    app.add_exception_handler(BridgeError, bridge_error_handler)

    return app


# Global application instance for ASGI servers (uvicorn, gunicorn, etc.)
app = create_app()


if __name__ == "__main__":
    import uvicorn

    server = get_settings().get_config().server
    uvicorn.run(app, host=server.host, port=server.port)
