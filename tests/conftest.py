"""Shared fixtures: provider transports, fake credentials, settings."""
from __future__ import annotations

import base64
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest


class RecordingTransport:
    """
    httpx handler that records requests and answers from a callable.

    Usage:
        transport = RecordingTransport(lambda req: httpx.Response(200, content=b"x"))
        client = transport.client()
    """

    def __init__(self, responder: Callable[[httpx.Request], httpx.Response]):
        self.responder = responder
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.last.content)


class FakeCredentials:
    """Stands in for google-auth credentials at the adapter seam."""

    def __init__(self, token: Optional[str] = "ya29.fake-token", error: Optional[Exception] = None):
        self._token = token
        self.error = error
        self.token: Optional[str] = None
        self.valid = False
        self.refresh_calls = 0
        self.refresh_requests: List[Any] = []

    def refresh(self, request) -> None:
        self.refresh_calls += 1
        self.refresh_requests.append(request)
        if self.error is not None:
            raise self.error
        self.token = self._token
        self.valid = True


def audio_content_response(audio: bytes = b"ID3\x03fake-mp3") -> httpx.Response:
    """Google synthesize success body."""
    return httpx.Response(200, json={"audioContent": base64.b64encode(audio).decode("ascii")})


def provider_error_response(message: str, status_code: int = 400, status: Optional[str] = None) -> httpx.Response:
    """Google/OpenAI style error body."""
    error: Dict[str, Any] = {"message": message}
    if status:
        error["status"] = status
    return httpx.Response(status_code, json={"error": error})


@pytest.fixture
def make_settings():
    """Build Settings directly from a dict (never reads the environment)."""
    from tts_gateway.core.config import Settings

    def _make(
        standard_key: Optional[str] = None,
        openai_key: Optional[str] = None,
        **sections: Any,
    ) -> Settings:
        raw: Dict[str, Any] = {k: dict(v) for k, v in sections.items()}
        providers = raw.setdefault("providers", {})
        if standard_key:
            providers.setdefault("standard", {})["api_key"] = standard_key
        if openai_key:
            providers.setdefault("commercial", {})["api_key"] = openai_key
        return Settings(raw=raw)

    return _make


@pytest.fixture
def make_config(make_settings):
    """Build a validated GatewayConfig."""
    def _make(**kwargs: Any):
        return make_settings(**kwargs).get_gateway_config()
    return _make
