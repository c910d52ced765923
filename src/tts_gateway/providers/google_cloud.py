"""
Google Cloud Text-to-Speech adapters.

Both Google adapters talk to ``v1/text:synthesize`` and receive
``{"audioContent": "<base64>"}`` on success; they differ only in how they
authenticate and which voice/audio options they send. This module holds the
shared decoding and the key-authenticated StandardProvider.

Standard Request Shape:
    {
        "input": {"text": "Halo"},
        "voice": {"languageCode": "id-ID", "name": "...", "modelName": "..."},
        "audioConfig": {"audioEncoding": "MP3", "pitch": 2, "speakingRate": 1.2}
    }

    ``pitch`` and ``speakingRate`` are sent only when they differ from 0 and
    1: some voices (e.g. Chirp3 HD) reject the fields even at their defaults.
"""
from __future__ import annotations

import base64
import binascii
import time
from typing import Any, Dict

import httpx

from tts_gateway.core.config import Defaults
from tts_gateway.core.logging import fail
from tts_gateway.errors import ConfigurationError, InternalError, ProviderError
from tts_gateway.providers.base import BaseProvider, ProviderAudio, SynthesisRequest

AUDIO_MISSING_MESSAGE = "Failed to generate audio"


class GoogleCloudProvider(BaseProvider):
    """Shared response handling for Google Cloud TTS adapters."""
    name = "google-cloud"

    def decode_audio_content(self, response: httpx.Response) -> bytes:
        """
        Decode the base64 ``audioContent`` field of a synthesis response.

        Raises:
            ProviderError: If the field is missing or empty.
            InternalError: If the body is not JSON or not valid base64.
        """
        try:
            data = response.json()
        except ValueError as e:
            fail(self.logger, "provider_response_unparsable", provider=self.name, error=str(e))
            raise InternalError(details={"provider": self.name, "error": str(e)}) from e

        content = data.get("audioContent") if isinstance(data, dict) else None
        if not content:
            fail(self.logger, "audio_content_missing", provider=self.name)
            raise ProviderError(AUDIO_MISSING_MESSAGE, details={"provider": self.name})

        try:
            return base64.b64decode(content, validate=True)
        except (binascii.Error, ValueError, TypeError) as e:
            fail(self.logger, "audio_content_invalid", provider=self.name, error=str(e))
            raise InternalError(details={"provider": self.name, "error": str(e)}) from e


class StandardProvider(GoogleCloudProvider):
    """
    Google Cloud TTS authenticated with a static API key.

    The key is passed as the ``key`` query parameter. Every voice option of
    the request is forwarded, including the caller's audioEncoding.
    """
    name = "standard"

    def is_configured(self) -> bool:
        return bool(self.config.standard.api_key)

    def build_payload(self, request: SynthesisRequest) -> Dict[str, Any]:
        voice: Dict[str, Any] = {"languageCode": request.language_code}
        if request.voice_name:
            voice["name"] = request.voice_name
        if request.model_name:
            voice["modelName"] = request.model_name

        audio_config: Dict[str, Any] = {"audioEncoding": request.audio_encoding}
        if request.pitch != Defaults.PITCH:
            audio_config["pitch"] = request.pitch
        if request.speaking_rate != Defaults.SPEAKING_RATE:
            audio_config["speakingRate"] = request.speaking_rate

        return {
            "input": {"text": request.text},
            "voice": voice,
            "audioConfig": audio_config,
        }

    def synthesize(self, request: SynthesisRequest) -> ProviderAudio:
        payload = self.build_payload(request)

        api_key = self.config.standard.api_key
        if not api_key:
            raise ConfigurationError("TTS API key not configured")

        t0 = time.perf_counter()
        response = self._post(self.config.standard.url, payload, params={"key": api_key})
        t_request = time.perf_counter() - t0

        audio = self.decode_audio_content(response)
        return ProviderAudio(
            audio_bytes=audio,
            audio_encoding=request.audio_encoding,
            timings_s={"provider": t_request},
        )
