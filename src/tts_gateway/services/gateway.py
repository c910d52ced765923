"""
SynthesisGateway - Request Translation Pipeline.

The single entry point used by both the HTTP route and the CLI.

Architecture:
    Request -> Validate -> Resolve defaults -> Select adapter -> Provider call
            -> Normalize audio (bytes + content type)

Key Components:
    - Validators: reject bad input before any credential or network access
    - Adapters: one per apiMode, created once and reused across requests
    - httpx.Client: one pooled client shared by every adapter
    - Metrics/logging: one tts_request/tts_done pair per request, one
      synthesis_failed event for every failure

Error Handling:
    Adapters raise GatewayError subclasses. The gateway logs and counts them
    and re-raises unchanged; unexpected exceptions are wrapped in
    InternalError so callers only ever see the taxonomy in tts_gateway.errors.

Example:
    >>> from tts_gateway.core.config import Settings
    >>> from tts_gateway.providers import SynthesisRequest
    >>> gateway = SynthesisGateway(Settings(raw={}))
    >>> result = gateway.synthesize(SynthesisRequest(text="Halo"), request_id="abc123")
    >>> result.content_type
    'audio/mpeg'
"""
from __future__ import annotations

import threading
import time
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import httpx

from tts_gateway.core.config import API_MODES, Settings
from tts_gateway.core.logging import debug, fail, get_logger, info, success
from tts_gateway.core.metrics import metrics
from tts_gateway.errors import GatewayError, InternalError
from tts_gateway.providers.base import BaseProvider, SynthesisRequest, create_provider
from tts_gateway.services.validators import (
    validate_api_mode,
    validate_language_code,
    validate_text,
    validate_voice_name,
)

_LOG = get_logger("tts-gateway.service")

WAV_CONTENT_TYPE = "audio/wav"
MP3_CONTENT_TYPE = "audio/mpeg"


def content_type_for(audio_encoding: Optional[str]) -> str:
    """
    Content type for an audio encoding.

    Examples:
        >>> content_type_for("LINEAR16")
        'audio/wav'
        >>> content_type_for("OGG_OPUS")
        'audio/mpeg'
    """
    return WAV_CONTENT_TYPE if audio_encoding == "LINEAR16" else MP3_CONTENT_TYPE


@dataclass
class SynthesisResult:
    """
    Result of a gateway synthesis.

    Attributes:
        audio_bytes: Audio returned by the provider.
        content_type: "audio/wav" or "audio/mpeg", from the requested encoding.
        provider: Adapter that produced the audio.
        audio_encoding: Encoding the provider produced.
        total_seconds: End-to-end processing time.
        request_id: Request ID for tracing.
    """
    audio_bytes: bytes
    content_type: str
    provider: str
    audio_encoding: str
    total_seconds: float
    request_id: str


class SynthesisGateway:
    """
    Dispatches validated synthesis requests to provider adapters.

    Adapters are created lazily, one per apiMode, and share a single
    httpx.Client. Pass ``providers`` to inject adapters (tests) or
    ``client`` to inject a transport.
    """

    def __init__(
        self,
        settings: Settings,
        providers: Optional[Dict[str, BaseProvider]] = None,
        client: Optional[httpx.Client] = None,
    ):
        self._settings = settings
        self._config = settings.get_gateway_config()
        self._providers: Dict[str, BaseProvider] = dict(providers or {})
        self._providers_lock = threading.Lock()
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=httpx.Timeout(self._config.http.timeout_s))
        self._text_preview_chars = self._config.logging.text_preview_chars

    @property
    def settings(self) -> Settings:
        return self._settings

    @property
    def config(self):
        return self._config

    def get_provider(self, api_mode: str) -> BaseProvider:
        """Get (creating on first use) the adapter for a canonical apiMode."""
        provider = self._providers.get(api_mode)
        if provider is None:
            with self._providers_lock:
                provider = self._providers.get(api_mode)
                if provider is None:
                    provider = create_provider(api_mode, self._config, self._client)
                    self._providers[api_mode] = provider
        return provider

    # =========================================================================
    # Request Resolution
    # =========================================================================

    def resolve(self, request: SynthesisRequest) -> SynthesisRequest:
        """
        Validate a request and fill in configured defaults.

        Text is checked first so that a missing text is always reported as
        such, whatever apiMode was asked for.

        Raises:
            ValidationError: If any field is invalid.
        """
        defaults = self._config.defaults
        text = validate_text(request.text, max_length=defaults.max_text_chars)
        api_mode = validate_api_mode(request.api_mode, default=defaults.api_mode)
        language_code = validate_language_code(request.language_code) or defaults.language_code
        voice_name = validate_voice_name(request.voice_name)

        return replace(
            request,
            text=text,
            api_mode=api_mode,
            language_code=language_code,
            voice_name=voice_name,
            model_name=request.model_name or None,
            audio_encoding=request.audio_encoding or defaults.audio_encoding,
        )

    def build_payload(self, request: SynthesisRequest) -> Dict[str, Any]:
        """Resolve a request and return the provider body it would send."""
        resolved = self.resolve(request)
        return self.get_provider(resolved.api_mode).build_payload(resolved)

    # =========================================================================
    # Public API: synthesize()
    # =========================================================================

    def synthesize(self, request: SynthesisRequest, request_id: str) -> SynthesisResult:
        """
        Synthesize speech through the adapter selected by ``request.api_mode``.

        Args:
            request: Raw request; empty fields take configured defaults.
            request_id: Unique ID for request tracing.

        Returns:
            SynthesisResult with audio bytes and content type.

        Raises:
            GatewayError: Any failure, classified by the error taxonomy.
        """
        t0 = time.perf_counter()
        # Metric label until the mode is validated
        provider_name = "unresolved"

        try:
            resolved = self.resolve(request)
            provider_name = resolved.api_mode

            preview = resolved.text[:self._text_preview_chars] if self._text_preview_chars > 0 else ""
            info(_LOG, "tts_request",
                 provider=provider_name,
                 chars=len(resolved.text),
                 encoding=resolved.audio_encoding,
                 text_preview=preview)
            debug(_LOG, "tts_request_full",
                  text=resolved.text,
                  language=resolved.language_code,
                  voice=resolved.voice_name,
                  model=resolved.model_name)

            audio = self.get_provider(provider_name).synthesize(resolved)

        except GatewayError as e:
            self._record_failure(provider_name, e, time.perf_counter() - t0)
            raise
        except Exception as e:
            wrapped = InternalError(details={"error": str(e), "error_type": type(e).__name__})
            self._record_failure(provider_name, wrapped, time.perf_counter() - t0)
            raise wrapped from e

        total_s = time.perf_counter() - t0
        success(_LOG, "tts_done",
                provider=provider_name,
                bytes=len(audio.audio_bytes),
                encoding=audio.audio_encoding,
                seconds=round(total_s, 3))
        metrics.record_request(
            provider=provider_name,
            status="success",
            duration=total_s,
            audio_bytes=len(audio.audio_bytes),
        )

        return SynthesisResult(
            audio_bytes=audio.audio_bytes,
            content_type=content_type_for(resolved.audio_encoding),
            provider=provider_name,
            audio_encoding=audio.audio_encoding,
            total_seconds=total_s,
            request_id=request_id,
        )

    def _record_failure(self, provider: str, err: GatewayError, seconds: float) -> None:
        fail(_LOG, "synthesis_failed",
             provider=provider,
             code=err.code,
             message=err.message,
             seconds=round(seconds, 3),
             **{k: v for k, v in err.details.items() if k != "provider"})
        metrics.record_request(provider=provider, status="error", duration=seconds)
        metrics.record_error(provider=provider, code=err.code)

    # =========================================================================
    # Health Check
    # =========================================================================

    def get_health_info(self) -> Dict[str, Any]:
        """
        Status for GET /health.

        Reports whether each adapter has the credentials it needs. Secrets
        themselves are never included.
        """
        return {
            "ok": True,
            "default_mode": self._config.defaults.api_mode,
            "providers": {mode: self.get_provider(mode).describe() for mode in API_MODES},
        }

    def close(self) -> None:
        """Release adapters and the shared HTTP client."""
        for provider in self._providers.values():
            provider.close()
        if self._owns_client:
            self._client.close()


# =============================================================================
# Global Gateway Singleton
# =============================================================================

_gateway: Optional[SynthesisGateway] = None
_gateway_lock = threading.Lock()


def get_gateway_service(settings: Settings) -> SynthesisGateway:
    """
    Get or create the global SynthesisGateway instance.

    Thread-safe lazy singleton. The gateway is created on first call
    and reused for subsequent calls.
    """
    global _gateway
    if _gateway is None:
        with _gateway_lock:
            if _gateway is None:
                _gateway = SynthesisGateway(settings)
    return _gateway


def shutdown_gateway() -> None:
    """Close and drop the global gateway (application shutdown)."""
    global _gateway
    with _gateway_lock:
        if _gateway is not None:
            _gateway.close()
        _gateway = None


def reset_gateway() -> None:
    """
    Reset the global gateway instance.

    Used primarily for testing to ensure clean state between tests.
    """
    global _gateway
    with _gateway_lock:
        _gateway = None
