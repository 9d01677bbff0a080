"""
Prometheus Metrics for tts-bridge.

Metrics Exposed:
    tts_bridge_requests_total         - Counter of HTTP requests by endpoint and status
    tts_bridge_synthesis_seconds      - Histogram of backend synthesis latency
    tts_bridge_audio_bytes_total      - Counter of audio bytes returned to clients
    tts_bridge_backend_errors_total   - Counter of failed backend calls

Usage:
    from tts_bridge.core.metrics import metrics

    metrics.record_request("speech", 200)
    metrics.record_synthesis("edge", "stream", seconds=0.8, audio_bytes=48000)
    metrics.record_backend_error("azure")

    content, content_type = metrics.get_metrics_response()

Metrics live in a private CollectorRegistry so several app instances in one
process (tests) don't collide on the default registry.
"""
from __future__ import annotations

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)


class BridgeMetrics:
    """
    Metrics collection for the OpenAI bridge.

    When disabled (metrics.enabled: false in settings) every record_* call
    is a no-op and /metrics reports that collection is off.
    """

    def __init__(self, enabled: bool = True):
        self._enabled = enabled
        self._registry = CollectorRegistry()

        self._requests_total = Counter(
            "tts_bridge_requests_total",
            "Total HTTP requests handled by the OpenAI endpoints",
            ["endpoint", "status"],
            registry=self._registry,
        )

        self._synthesis_seconds = Histogram(
            "tts_bridge_synthesis_seconds",
            "Backend synthesis duration in seconds",
            ["backend", "mode"],
            buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=self._registry,
        )

        self._audio_bytes_total = Counter(
            "tts_bridge_audio_bytes_total",
            "Total audio bytes returned to clients",
            ["backend"],
            registry=self._registry,
        )

        self._backend_errors_total = Counter(
            "tts_bridge_backend_errors_total",
            "Total failed backend synthesis calls",
            ["backend"],
            registry=self._registry,
        )

    @property
    def enabled(self) -> bool:
        return self._enabled

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = enabled

    def record_request(self, endpoint: str, status: int) -> None:
        """
        Record a handled HTTP request.

        Args:
            endpoint: "models" or "speech".
            status: HTTP status code sent to the client.
        """
        if not self._enabled:
            return
        self._requests_total.labels(endpoint=endpoint, status=str(status)).inc()

    def record_synthesis(self, backend: str, mode: str, seconds: float, audio_bytes: int = 0) -> None:
        """
        Record a completed synthesis.

        Args:
            backend: Backend name ("edge", "azure").
            mode: "buffered" or "stream".
            seconds: Wall time from request to last audio byte.
            audio_bytes: Audio bytes delivered.
        """
        if not self._enabled:
            return
        self._synthesis_seconds.labels(backend=backend, mode=mode).observe(seconds)
        if audio_bytes > 0:
            self._audio_bytes_total.labels(backend=backend).inc(audio_bytes)

    def record_backend_error(self, backend: str) -> None:
        if not self._enabled:
            return
        self._backend_errors_total.labels(backend=backend).inc()

    def get_metrics_response(self) -> tuple[bytes, str]:
        """
        Get metrics in Prometheus format.

        Returns:
            Tuple of (content_bytes, content_type)
        """
        if not self._enabled:
            return (
                b"# Metrics collection disabled (metrics.enabled: false)\n",
                "text/plain; charset=utf-8",
            )
        return (generate_latest(self._registry), CONTENT_TYPE_LATEST)


# Global singleton: from tts_bridge.core.metrics import metrics
metrics = BridgeMetrics()
