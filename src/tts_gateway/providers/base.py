"""
Provider Adapter Base Class and Factory.

This module provides:
    - SynthesisRequest: The normalized request every adapter receives
    - ProviderAudio: Raw audio plus the encoding the provider produced
    - BaseProvider: Shared HTTP plumbing and failure classification
    - create_provider(): Factory keyed on the canonical apiMode

Adapter Selection:
    standard          -> StandardProvider (Google Cloud TTS, API key)
    managed-identity  -> ManagedIdentityProvider (Google Cloud TTS, bearer token)
    commercial        -> CommercialProvider (OpenAI speech endpoint)

Implementing a New Adapter:
    1. Create providers/<name>.py
    2. Inherit from BaseProvider
    3. Implement is_configured(), build_payload() and synthesize()
    4. Register it in create_provider()
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import httpx

from tts_gateway.core.config import Defaults, GatewayConfig
from tts_gateway.core.logging import debug, fail, get_logger, verbose
from tts_gateway.errors import (
    GatewayError,
    ProviderError,
    classify_provider_failure,
)

# Message used when a provider failure carries no usable text
REQUEST_FAILED_MESSAGE = "TTS API request failed"


@dataclass
class SynthesisRequest:
    """
    Normalized synthesis request handed to an adapter.

    Attributes:
        text: Text to synthesize (already validated).
        api_mode: Canonical adapter name.
        language_code: Locale tag, e.g. "id-ID".
        model_name: Optional provider voice model.
        voice_name: Optional provider voice name.
        audio_encoding: "MP3" or "LINEAR16" (other values are passed through).
        pitch: Semitone shift; 0 means provider default.
        speaking_rate: Speed multiplier; 1 means provider default.
    """
    text: str
    api_mode: str = Defaults.API_MODE
    language_code: str = Defaults.LANGUAGE_CODE
    model_name: Optional[str] = None
    voice_name: Optional[str] = None
    audio_encoding: str = Defaults.AUDIO_ENCODING
    pitch: float = Defaults.PITCH
    speaking_rate: float = Defaults.SPEAKING_RATE


@dataclass
class ProviderAudio:
    """
    Audio returned by an adapter.

    Attributes:
        audio_bytes: Raw audio, ready to send to the caller.
        audio_encoding: Encoding the provider actually produced.
        timings_s: Per-stage timing breakdown in seconds.
    """
    audio_bytes: bytes
    audio_encoding: str
    timings_s: Dict[str, float] = field(default_factory=dict)


class BaseProvider:
    """
    Base class for provider adapters.

    Subclasses implement:
        - is_configured(): whether the credentials they need are present
        - build_payload(): the provider-specific JSON body
        - synthesize(): authenticate, call and decode

    Attributes:
        name: Canonical adapter name (the apiMode it serves).
        config: Validated gateway configuration.
        logger: Logger instance for this adapter.
    """
    name: str = "base"

    def __init__(self, config: GatewayConfig, client: Optional[httpx.Client] = None):
        """
        Args:
            config: Validated gateway configuration.
            client: Shared HTTP client. When omitted the adapter creates and
                owns one, closing it in close().
        """
        self.config = config
        self.logger = get_logger(f"tts-gateway.provider.{self.name}")
        self._client = client
        self._owns_client = client is None

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=httpx.Timeout(self.config.http.timeout_s))
        return self._client

    def close(self) -> None:
        """Close the HTTP client if this adapter created it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def is_configured(self) -> bool:
        raise NotImplementedError

    def describe(self) -> Dict[str, Any]:
        """Health information for this adapter."""
        return {"configured": self.is_configured()}

    def build_payload(self, request: SynthesisRequest) -> Dict[str, Any]:
        """
        Build the provider request body.

        Raises:
            NotImplementedError: If not overridden.
        """
        raise NotImplementedError

    def synthesize(self, request: SynthesisRequest) -> ProviderAudio:
        """
        Synthesize speech through the provider.

        Returns:
            ProviderAudio with raw audio bytes.

        Raises:
            GatewayError: Any failure, already classified.
        """
        raise NotImplementedError

    # =========================================================================
    # HTTP Plumbing
    # =========================================================================

    def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        """
        POST a JSON payload and return the successful response.

        Transport failures become ProviderError; non-2xx responses are
        classified by _failure_from_response().
        """
        verbose(self.logger, "provider_call", provider=self.name, url=url)
        debug(self.logger, "provider_payload", provider=self.name, payload=payload)

        try:
            response = self.client.post(url, json=payload, headers=headers, params=params)
        except httpx.HTTPError as e:
            fail(self.logger, "provider_unreachable", provider=self.name, error=str(e))
            raise ProviderError(
                REQUEST_FAILED_MESSAGE,
                details={"provider": self.name, "error": str(e)},
            ) from e

        if response.is_error:
            raise self._failure_from_response(response)
        return response

    def _failure_from_response(self, response: httpx.Response) -> GatewayError:
        """
        Extract the provider's error message and classify it.

        Both Google and OpenAI report failures as
        ``{"error": {"message": "...", ...}}``; Google adds a ``status``
        such as RESOURCE_EXHAUSTED.
        """
        message = REQUEST_FAILED_MESSAGE
        provider_status = None

        try:
            body = response.json()
        except ValueError:
            body = None

        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict):
                message = err.get("message") or REQUEST_FAILED_MESSAGE
                provider_status = err.get("status")
            elif isinstance(err, str) and err:
                message = err

        failure = classify_provider_failure(
            message,
            status_code=response.status_code,
            provider_status=provider_status,
            details={"provider": self.name, "status": response.status_code, "provider_message": message},
        )
        fail(
            self.logger, "provider_error",
            provider=self.name,
            status=response.status_code,
            code=failure.code,
            message=message,
        )
        return failure


def create_provider(
    api_mode: str,
    config: GatewayConfig,
    client: Optional[httpx.Client] = None,
) -> BaseProvider:
    """
    Create the adapter for a canonical apiMode.

    Adapters are imported lazily so google-auth is only loaded when the
    managed-identity adapter is actually used.

    Raises:
        ValueError: If api_mode is unknown.
    """
    if api_mode == "standard":
        from tts_gateway.providers.google_cloud import StandardProvider
        return StandardProvider(config, client)

    if api_mode == "managed-identity":
        from tts_gateway.providers.managed_identity import ManagedIdentityProvider
        return ManagedIdentityProvider(config, client)

    if api_mode == "commercial":
        from tts_gateway.providers.openai_speech import CommercialProvider
        return CommercialProvider(config, client)

    raise ValueError(f"Unknown api mode: {api_mode}")
