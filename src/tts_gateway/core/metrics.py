"""
Prometheus Metrics for the gateway.

Metrics collection is optional: every operation is a no-op when
prometheus_client is not installed (``pip install tts-gateway[metrics]``).

Metrics Exposed:
    tts_gateway_requests_total{provider,status}    - Completed requests
    tts_gateway_request_duration_seconds{provider} - End-to-end latency
    tts_gateway_audio_bytes_total{provider}        - Audio bytes returned
    tts_gateway_errors_total{provider,code}        - Failures by error code

Usage:
    from tts_gateway.core.metrics import metrics

    metrics.record_request("standard", "success", duration=0.8, audio_bytes=18432)
    metrics.record_error("commercial", "QUOTA_EXCEEDED")
    content, content_type = metrics.get_metrics_response()
"""
from __future__ import annotations

from typing import Optional

try:
    from prometheus_client import (
        CONTENT_TYPE_LATEST,
        CollectorRegistry,
        Counter,
        Histogram,
        generate_latest,
    )
    PROMETHEUS_AVAILABLE = True
except ImportError:
    # Metrics are disabled; record_* calls return immediately
    PROMETHEUS_AVAILABLE = False


class GatewayMetrics:
    """
    Gateway metrics backed by a private CollectorRegistry.

    The registry is private so that several instances (e.g. in tests) never
    collide on metric names.

    Attributes:
        enabled: Whether metrics collection is active.
    """

    def __init__(self):
        self._enabled = PROMETHEUS_AVAILABLE
        self._registry: Optional["CollectorRegistry"] = None

        if self._enabled:
            self._setup_metrics()

    def _setup_metrics(self) -> None:
        self._registry = CollectorRegistry()

        self._requests_total = Counter(
            "tts_gateway_requests_total",
            "Total synthesis requests",
            ["provider", "status"],
            registry=self._registry,
        )
        self._request_duration = Histogram(
            "tts_gateway_request_duration_seconds",
            "Synthesis request duration in seconds",
            ["provider"],
            buckets=(0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
            registry=self._registry,
        )
        self._audio_bytes_total = Counter(
            "tts_gateway_audio_bytes_total",
            "Total audio bytes returned to callers",
            ["provider"],
            registry=self._registry,
        )
        self._errors_total = Counter(
            "tts_gateway_errors_total",
            "Failed synthesis requests by error code",
            ["provider", "code"],
            registry=self._registry,
        )

    @property
    def enabled(self) -> bool:
        """Whether metrics collection is enabled."""
        return self._enabled

    def record_request(
        self,
        provider: str,
        status: str,
        duration: float,
        audio_bytes: int = 0,
    ) -> None:
        """
        Record a finished request.

        Args:
            provider: Adapter name ("standard", "managed-identity", "commercial").
            status: "success" or "error".
            duration: Wall time in seconds.
            audio_bytes: Size of the returned audio.
        """
        if not self._enabled:
            return

        self._requests_total.labels(provider=provider, status=status).inc()
        self._request_duration.labels(provider=provider).observe(duration)
        if audio_bytes > 0:
            self._audio_bytes_total.labels(provider=provider).inc(audio_bytes)

    def record_error(self, provider: str, code: str) -> None:
        """Count a failure by its error code."""
        if not self._enabled:
            return
        self._errors_total.labels(provider=provider, code=code).inc()

    def get_metrics_response(self) -> tuple[bytes, str]:
        """
        Get metrics in Prometheus format.

        Returns:
            Tuple of (content_bytes, content_type)
        """
        if not self._enabled:
            return (
                b"# Metrics not available (prometheus_client not installed)\n",
                "text/plain; charset=utf-8",
            )

        return (generate_latest(self._registry), CONTENT_TYPE_LATEST)


# Process-wide instance
metrics = GatewayMetrics()
