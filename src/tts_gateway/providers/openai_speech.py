"""
Commercial LLM TTS adapter (OpenAI ``/v1/audio/speech``).

Unlike the Google adapters, the provider answers with the audio bytes
themselves, so there is no JSON envelope to decode on success.

Request Shape:
    {
        "model": "gpt-4o-mini-tts",
        "instructions": "<delivery style guidance>",
        "input": "Halo, apa kabar?",
        "voice": "alloy",
        "response_format": "mp3",   # "wav" when audioEncoding is LINEAR16
        "speed": 1.0
    }

The instructions string steers language and delivery (Indonesian
announcer style by default) and can be replaced through
``providers.commercial.instructions`` in settings.yaml.
"""
from __future__ import annotations

import time
from typing import Any, Dict

from tts_gateway.core.logging import fail
from tts_gateway.errors import ConfigurationError, ProviderError
from tts_gateway.providers.base import BaseProvider, ProviderAudio, SynthesisRequest


def response_format_for(audio_encoding: str) -> str:
    """Map a Google-style audioEncoding onto OpenAI's response_format."""
    return "wav" if audio_encoding == "LINEAR16" else "mp3"


class CommercialProvider(BaseProvider):
    """OpenAI speech synthesis authorized with an API key."""
    name = "commercial"

    def is_configured(self) -> bool:
        return bool(self.config.commercial.api_key)

    def describe(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured(),
            "model": self.config.commercial.model,
            "default_voice": self.config.commercial.default_voice,
        }

    def build_payload(self, request: SynthesisRequest) -> Dict[str, Any]:
        cfg = self.config.commercial
        return {
            "model": cfg.model,
            "instructions": cfg.instructions,
            "input": request.text,
            "voice": request.voice_name or cfg.default_voice,
            "response_format": response_format_for(request.audio_encoding),
            "speed": request.speaking_rate,
        }

    def synthesize(self, request: SynthesisRequest) -> ProviderAudio:
        api_key = self.config.commercial.api_key
        if not api_key:
            raise ConfigurationError("OpenAI API key not configured")

        payload = self.build_payload(request)
        t0 = time.perf_counter()
        response = self._post(
            self.config.commercial.url,
            payload,
            headers={"Authorization": f"Bearer {api_key}"},
        )
        t_request = time.perf_counter() - t0

        if not response.content:
            fail(self.logger, "audio_content_missing", provider=self.name)
            raise ProviderError("Failed to generate audio", details={"provider": self.name})

        encoding = "LINEAR16" if payload["response_format"] == "wav" else "MP3"
        return ProviderAudio(
            audio_bytes=response.content,
            audio_encoding=encoding,
            timings_s={"provider": t_request},
        )
