"""
Tests for the managed-identity Google Cloud adapter.

Credentials are replaced by FakeCredentials so google-auth never reaches
a metadata server or token endpoint.
"""
import threading

import pytest
from google.auth import exceptions as google_auth_exceptions

from conftest import (
    FakeCredentials,
    RecordingTransport,
    audio_content_response,
    provider_error_response,
)
from tts_gateway.errors import AuthenticationError, ProviderError, QuotaError
from tts_gateway.providers.base import SynthesisRequest
from tts_gateway.providers.managed_identity import ManagedIdentityProvider


def _provider(make_config, responder=None, credentials=None, **kwargs):
    transport = RecordingTransport(responder or (lambda r: audio_content_response(b"RIFF....WAVE")))
    provider = ManagedIdentityProvider(
        make_config(**kwargs),
        transport.client(),
        credentials=credentials if credentials is not None else FakeCredentials(),
    )
    return provider, transport


class TestManagedPayload:
    """Tests for ManagedIdentityProvider.build_payload()."""

    def test_fixed_model_and_linear16(self, make_config):
        provider, _ = _provider(make_config)
        payload = provider.build_payload(SynthesisRequest(
            text="Halo",
            audio_encoding="MP3",
            pitch=3,
            speaking_rate=1.5,
        ))

        assert payload == {
            "input": {"text": "Halo"},
            "voice": {"languageCode": "id-ID", "modelName": "gemini-2.5-flash-tts"},
            "audioConfig": {"audioEncoding": "LINEAR16"},
        }

    def test_voice_name_included_when_given(self, make_config):
        provider, _ = _provider(make_config)
        payload = provider.build_payload(SynthesisRequest(text="Halo", voice_name="Kore"))
        assert payload["voice"]["name"] == "Kore"

    def test_model_name_configurable(self, make_config):
        provider, _ = _provider(
            make_config, providers={"managed_identity": {"model_name": "gemini-2.5-pro-tts"}},
        )
        payload = provider.build_payload(SynthesisRequest(text="Halo"))
        assert payload["voice"]["modelName"] == "gemini-2.5-pro-tts"


class TestManagedSynthesize:
    """Tests for ManagedIdentityProvider.synthesize()."""

    def test_bearer_token_and_no_key(self, make_config):
        provider, transport = _provider(make_config)

        result = provider.synthesize(SynthesisRequest(text="Halo"))

        assert result.audio_bytes == b"RIFF....WAVE"
        assert result.audio_encoding == "LINEAR16"
        assert transport.last.headers["Authorization"] == "Bearer ya29.fake-token"
        assert "key" not in transport.last.url.params

    def test_mp3_request_is_labelled_mpeg(self, make_config, make_settings):
        """Google is asked for LINEAR16; the response label follows the request."""
        from tts_gateway.services.gateway import SynthesisGateway

        settings = make_settings()
        provider, transport = _provider(make_config)
        gateway = SynthesisGateway(settings, providers={"managed-identity": provider})

        result = gateway.synthesize(
            SynthesisRequest(text="Halo", api_mode="managed-identity", audio_encoding="MP3"),
            request_id="rid",
        )

        assert transport.last_json()["audioConfig"] == {"audioEncoding": "LINEAR16"}
        assert result.content_type == "audio/mpeg"

    def test_credentials_refreshed_once_while_valid(self, make_config):
        creds = FakeCredentials()
        provider, _ = _provider(make_config, credentials=creds)

        provider.synthesize(SynthesisRequest(text="one"))
        provider.synthesize(SynthesisRequest(text="two"))

        assert creds.refresh_calls == 1

    def test_expired_credentials_are_refreshed(self, make_config):
        creds = FakeCredentials()
        provider, _ = _provider(make_config, credentials=creds)

        provider.access_token()
        creds.valid = False
        provider.access_token()

        assert creds.refresh_calls == 2

    def test_concurrent_token_requests_refresh_once(self, make_config):
        creds = FakeCredentials()
        provider, _ = _provider(make_config, credentials=creds)
        tokens = []

        threads = [threading.Thread(target=lambda: tokens.append(provider.access_token())) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert tokens == ["ya29.fake-token"] * 8
        assert creds.refresh_calls == 1

    def test_auth_failure(self, make_config):
        creds = FakeCredentials(error=google_auth_exceptions.RefreshError("invalid_grant: account disabled"))
        provider, transport = _provider(make_config, credentials=creds)

        with pytest.raises(AuthenticationError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))

        assert exc_info.value.message == "Service account authentication failed"
        assert transport.requests == []

    def test_auth_quota_failure_is_quota_error(self, make_config):
        creds = FakeCredentials(
            error=google_auth_exceptions.RefreshError("Quota exceeded for requests_per_minute"),
        )
        provider, _ = _provider(make_config, credentials=creds)

        with pytest.raises(QuotaError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Limit exceeded per project per minute"

    def test_empty_token(self, make_config):
        provider, _ = _provider(make_config, credentials=FakeCredentials(token=None))

        with pytest.raises(AuthenticationError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Failed to get service account access token"

    def test_malformed_credentials_json(self, make_config):
        """An unparsable service-account blob is an authentication failure."""
        transport = RecordingTransport(lambda r: audio_content_response())
        provider = ManagedIdentityProvider(
            make_config(providers={"managed_identity": {"credentials_json": "{not json"}}),
            transport.client(),
        )

        with pytest.raises(AuthenticationError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Service account authentication failed"

    @pytest.mark.parametrize("blob", ["[1, 2]", "42", '"service-account"', "null"])
    def test_credentials_json_not_an_object(self, make_config, blob):
        """Valid JSON that is not a key object is an authentication failure."""
        transport = RecordingTransport(lambda r: audio_content_response())
        provider = ManagedIdentityProvider(
            make_config(providers={"managed_identity": {"credentials_json": blob}}),
            transport.client(),
        )

        with pytest.raises(AuthenticationError) as exc_info:
            provider.access_token()
        assert exc_info.value.message == "Service account authentication failed"
        assert transport.requests == []

    def test_refresh_session_reused_and_closed(self, make_config, monkeypatch):
        creds = FakeCredentials()
        provider, _ = _provider(make_config, credentials=creds)

        provider.access_token()
        creds.valid = False
        provider.access_token()

        first, second = creds.refresh_requests
        assert first is second

        closed = []
        monkeypatch.setattr(first.session, "close", lambda: closed.append(True))
        provider.close()
        assert closed == [True]

    def test_provider_quota_failure(self, make_config):
        provider, _ = _provider(
            make_config,
            responder=lambda r: provider_error_response("Quota exceeded for requests_per_minute", 429),
        )
        with pytest.raises(QuotaError):
            provider.synthesize(SynthesisRequest(text="Halo"))

    def test_provider_failure_message(self, make_config):
        provider, _ = _provider(
            make_config,
            responder=lambda r: provider_error_response("Model not found", 404),
        )
        with pytest.raises(ProviderError) as exc_info:
            provider.synthesize(SynthesisRequest(text="Halo"))
        assert exc_info.value.message == "Model not found"


class TestManagedDescribe:
    """Tests for health information."""

    def test_credential_source(self, make_config):
        ambient = ManagedIdentityProvider(make_config(), credentials=FakeCredentials())
        blob = ManagedIdentityProvider(
            make_config(providers={"managed_identity": {"credentials_json": "{}"}}),
            credentials=FakeCredentials(),
        )

        assert ambient.describe()["credential_source"] == "application_default"
        assert blob.describe()["credential_source"] == "service_account_json"
        assert ambient.describe()["configured"] is True
