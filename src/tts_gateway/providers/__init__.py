"""
Provider Adapters.

One adapter per apiMode. Each adapter is a BaseProvider subclass that turns
a SynthesisRequest into a provider call and returns raw audio bytes.

Available Adapters:
    - StandardProvider: Google Cloud TTS with a static API key
    - ManagedIdentityProvider: Google Cloud TTS with a bearer token from
      a service account or Application Default Credentials
    - CommercialProvider: OpenAI speech synthesis

Lazy Loading:
    Adapter classes are imported on first access so google-auth is only
    loaded when the managed-identity path is used.

Usage:
    from tts_gateway.providers import create_provider
    provider = create_provider("standard", config)
    audio = provider.synthesize(SynthesisRequest(text="Halo"))
"""
from __future__ import annotations

from typing import TYPE_CHECKING

from tts_gateway.providers.base import (
    BaseProvider,
    ProviderAudio,
    SynthesisRequest,
    create_provider,
)

__all__ = [
    "BaseProvider",
    "ProviderAudio",
    "SynthesisRequest",
    "create_provider",
    "StandardProvider",
    "ManagedIdentityProvider",
    "CommercialProvider",
]


def __getattr__(name: str):
    """Lazy import adapter classes on first access."""
    if name == "StandardProvider":
        from tts_gateway.providers.google_cloud import StandardProvider
        return StandardProvider
    if name == "ManagedIdentityProvider":
        from tts_gateway.providers.managed_identity import ManagedIdentityProvider
        return ManagedIdentityProvider
    if name == "CommercialProvider":
        from tts_gateway.providers.openai_speech import CommercialProvider
        return CommercialProvider
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


if TYPE_CHECKING:
    from tts_gateway.providers.google_cloud import StandardProvider
    from tts_gateway.providers.managed_identity import ManagedIdentityProvider
    from tts_gateway.providers.openai_speech import CommercialProvider
