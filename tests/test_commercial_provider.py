"""Tests for the OpenAI speech adapter."""
import httpx
import pytest

from conftest import RecordingTransport, provider_error_response
from tts_gateway.core.config import Defaults
from tts_gateway.errors import ConfigurationError, ProviderError, QuotaError
from tts_gateway.providers.base import SynthesisRequest
from tts_gateway.providers.openai_speech import CommercialProvider, response_format_for


def _provider(make_config, responder, **kwargs):
    transport = RecordingTransport(responder)
    return CommercialProvider(make_config(**kwargs), transport.client()), transport


class TestResponseFormat:
    """Tests for response_format_for()."""

    def test_linear16_is_wav(self):
        assert response_format_for("LINEAR16") == "wav"

    def test_everything_else_is_mp3(self):
        assert response_format_for("MP3") == "mp3"
        assert response_format_for("OGG_OPUS") == "mp3"


class TestCommercialPayload:
    """Tests for CommercialProvider.build_payload()."""

    def test_default_payload(self, make_config):
        provider = CommercialProvider(make_config())
        payload = provider.build_payload(SynthesisRequest(text="Halo, apa kabar?"))

        assert payload == {
            "model": "gpt-4o-mini-tts",
            "instructions": Defaults.OPENAI_INSTRUCTIONS,
            "input": "Halo, apa kabar?",
            "voice": "alloy",
            "response_format": "mp3",
            "speed": 1.0,
        }

    def test_voice_and_speed(self, make_config):
        provider = CommercialProvider(make_config())
        payload = provider.build_payload(SynthesisRequest(
            text="Halo", voice_name="nova", speaking_rate=1.3, audio_encoding="LINEAR16",
        ))

        assert payload["voice"] == "nova"
        assert payload["speed"] == 1.3
        assert payload["response_format"] == "wav"

    def test_configured_overrides(self, make_config):
        provider = CommercialProvider(make_config(providers={"commercial": {
            "default_voice": "shimmer",
            "instructions": "Speak slowly.",
            "model": "gpt-4o-tts",
        }}))
        payload = provider.build_payload(SynthesisRequest(text="Halo"))

        assert payload["voice"] == "shimmer"
        assert payload["instructions"] == "Speak slowly."
        assert payload["model"] == "gpt-4o-tts"


class TestCommercialSynthesize:
    """Tests for CommercialProvider.synthesize()."""

    def test_missing_key_raises_before_network(self, make_config):
        provider, transport = _provider(make_config, lambda r: httpx.Response(200, content=b"x"))

        with pytest.raises(ConfigurationError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))

        assert exc_info.value.message == "OpenAI API key not configured"
        assert transport.requests == []

    def test_raw_bytes_returned_unchanged(self, make_config):
        audio = b"\xff\xfb\x90\x00raw-mp3-frames"
        provider, transport = _provider(
            make_config,
            lambda r: httpx.Response(200, content=audio, headers={"Content-Type": "audio/mpeg"}),
            openai_key="sk-test",
        )

        result = provider.synthesize(SynthesisRequest(text="Halo"))

        assert result.audio_bytes == audio
        assert result.audio_encoding == "MP3"
        assert transport.last.headers["Authorization"] == "Bearer sk-test"
        assert str(transport.last.url) == "https://api.openai.com/v1/audio/speech"

    def test_wav_request_reports_linear16(self, make_config):
        provider, _ = _provider(
            make_config, lambda r: httpx.Response(200, content=b"RIFF"), openai_key="sk-test",
        )
        result = provider.synthesize(SynthesisRequest(text="Halo", audio_encoding="LINEAR16"))
        assert result.audio_encoding == "LINEAR16"

    def test_quota_failure(self, make_config):
        provider, _ = _provider(
            make_config,
            lambda r: provider_error_response("Rate limit reached for gpt-4o-mini-tts", 429),
            openai_key="sk-test",
        )
        with pytest.raises(QuotaError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Limit exceeded per project per minute"

    def test_provider_failure_message(self, make_config):
        provider, _ = _provider(
            make_config,
            lambda r: provider_error_response("Incorrect API key provided", 401),
            openai_key="sk-bad",
        )
        with pytest.raises(ProviderError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Incorrect API key provided"

    def test_empty_body_is_provider_error(self, make_config):
        provider, _ = _provider(
            make_config, lambda r: httpx.Response(200, content=b""), openai_key="sk-test",
        )
        with pytest.raises(ProviderError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Failed to generate audio"
