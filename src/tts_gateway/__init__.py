"""
tts-gateway: Multi-provider Text-to-Speech Gateway.

A small HTTP gateway that accepts one normalized JSON request and forwards
it to one of three hosted text-to-speech providers, returning audio bytes
with the right content type.

Supported Providers (apiMode):
    - standard: Google Cloud Text-to-Speech with an API key
    - managed-identity: Google Cloud Text-to-Speech with a service account
      or Application Default Credentials bearer token
    - commercial: OpenAI speech synthesis (gpt-4o-mini-tts)

Key Features:
    - Single endpoint (POST /api/tts) for all providers
    - Uniform {"error": message} failures with quota errors surfaced as 429
    - Structured logging with request ids
    - Prometheus metrics support

Example Usage:
    >>> from tts_gateway.core.config import Settings
    >>> from tts_gateway.providers import SynthesisRequest
    >>> from tts_gateway.services import SynthesisGateway
    >>>
    >>> gateway = SynthesisGateway(Settings(raw={}))
    >>> result = gateway.synthesize(SynthesisRequest(text="Halo"), request_id="demo")
    >>> with open("halo.mp3", "wb") as f:
    ...     f.write(result.audio_bytes)
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
