"""
Managed-Identity Google Cloud TTS adapter.

Authenticates with a short-lived OAuth bearer token instead of a static key.
Credentials come from, in order:
    1. A service-account key blob (GOOGLE_APPLICATION_CREDENTIALS_JSON),
       useful on hosts without a metadata server
    2. Application Default Credentials (metadata server, gcloud login,
       GOOGLE_APPLICATION_CREDENTIALS file)

The credential object is created once and refreshed whenever its token is
no longer valid. Loading and refreshing are serialized by a lock because
the object is shared by all requests.

This path always synthesizes with a fixed high-quality model and LINEAR16
output; the caller's audioEncoding, pitch and speakingRate are not sent.

Failure Mapping:
    - Token fetch fails with a quota/rate-limit message -> QuotaError (429)
    - Token fetch fails otherwise -> AuthenticationError (500)
    - Token fetch returns no token -> AuthenticationError (500)
"""
from __future__ import annotations

import json
import threading
import time
from typing import Any, Dict, Optional

import google.auth
import httpx
from google.auth import exceptions as google_auth_exceptions
from google.auth.transport.requests import Request as GoogleAuthRequest
from google.oauth2 import service_account

from tts_gateway.core.config import GatewayConfig
from tts_gateway.core.logging import fail, verbose
from tts_gateway.errors import AuthenticationError, QuotaError, is_quota_message
from tts_gateway.providers.base import ProviderAudio, SynthesisRequest
from tts_gateway.providers.google_cloud import GoogleCloudProvider

OUTPUT_ENCODING = "LINEAR16"


class ManagedIdentityProvider(GoogleCloudProvider):
    """Google Cloud TTS authorized with a managed-identity bearer token."""
    name = "managed-identity"

    def __init__(
        self,
        config: GatewayConfig,
        client: Optional[httpx.Client] = None,
        credentials: Optional[Any] = None,
    ):
        """
        Args:
            config: Validated gateway configuration.
            client: Shared HTTP client.
            credentials: Pre-built google-auth credentials. Loaded lazily
                from configuration when omitted.
        """
        super().__init__(config, client)
        self._credentials = credentials
        self._credentials_lock = threading.Lock()
        self._auth_request: Optional[GoogleAuthRequest] = None

    @property
    def credential_source(self) -> str:
        if self.config.managed.credentials_json:
            return "service_account_json"
        return "application_default"

    def is_configured(self) -> bool:
        # Ambient credentials can only be discovered by trying; report the
        # adapter as available and let token acquisition decide.
        return True

    def describe(self) -> Dict[str, Any]:
        return {
            "configured": self.is_configured(),
            "credential_source": self.credential_source,
            "model_name": self.config.managed.model_name,
        }

    def close(self) -> None:
        """Close the token refresh session and the HTTP client."""
        super().close()
        if self._auth_request is not None:
            self._auth_request.session.close()
            self._auth_request = None

    def _load_credentials(self) -> Any:
        cfg = self.config.managed
        if cfg.credentials_json:
            info = json.loads(cfg.credentials_json)
            if not isinstance(info, dict):
                raise ValueError("Service account JSON must be an object")
            return service_account.Credentials.from_service_account_info(info, scopes=cfg.scopes)
        credentials, _project = google.auth.default(scopes=cfg.scopes)
        return credentials

    def access_token(self) -> str:
        """
        Return a valid bearer token, refreshing the credentials if needed.

        Raises:
            QuotaError: If the identity provider reports quota exhaustion.
            AuthenticationError: For any other failure, or an empty token.
        """
        with self._credentials_lock:
            try:
                if self._credentials is None:
                    self._credentials = self._load_credentials()
                if not self._credentials.valid:
                    verbose(self.logger, "token_refresh", source=self.credential_source)
                    if self._auth_request is None:
                        self._auth_request = GoogleAuthRequest()
                    self._credentials.refresh(self._auth_request)
            except (google_auth_exceptions.GoogleAuthError, ValueError, TypeError) as e:
                message = str(e)
                fail(self.logger, "service_account_auth_failed", provider=self.name, error=message)
                if is_quota_message(message):
                    raise QuotaError(details={"provider": self.name, "error": message}) from e
                raise AuthenticationError(
                    "Service account authentication failed",
                    details={"provider": self.name, "error": message},
                ) from e
            token = self._credentials.token

        if not token:
            fail(self.logger, "service_account_token_missing", provider=self.name)
            raise AuthenticationError("Failed to get service account access token")
        return token

    def build_payload(self, request: SynthesisRequest) -> Dict[str, Any]:
        voice: Dict[str, Any] = {
            "languageCode": request.language_code,
            "modelName": self.config.managed.model_name,
        }
        if request.voice_name:
            voice["name"] = request.voice_name

        return {
            "input": {"text": request.text},
            "voice": voice,
            "audioConfig": {"audioEncoding": OUTPUT_ENCODING},
        }

    def synthesize(self, request: SynthesisRequest) -> ProviderAudio:
        t0 = time.perf_counter()
        token = self.access_token()
        t_auth = time.perf_counter() - t0

        payload = self.build_payload(request)
        t1 = time.perf_counter()
        response = self._post(
            self.config.managed.url,
            payload,
            headers={"Authorization": f"Bearer {token}"},
        )
        t_request = time.perf_counter() - t1

        audio = self.decode_audio_content(response)
        return ProviderAudio(
            audio_bytes=audio,
            audio_encoding=OUTPUT_ENCODING,
            timings_s={"auth": t_auth, "provider": t_request},
        )
