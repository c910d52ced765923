"""
FastAPI Dependency Injection Providers.

Architecture:
    1. get_settings() - Loads and caches application configuration
    2. get_gateway() - Creates/returns the singleton SynthesisGateway

    Both are singletons: settings are immutable once loaded and the gateway
    owns the pooled HTTP client and the managed-identity credentials.

Usage in Route Handlers:
    from fastapi import Depends
    from tts_gateway.api.dependencies import get_gateway

    @router.post("/api/tts")
    def tts(req: TTSRequest, gateway: SynthesisGateway = Depends(get_gateway)):
        ...

Testing:
    Override the dependency instead of touching the global singleton:

        app.dependency_overrides[get_gateway] = lambda: my_gateway

Lifecycle:
    startup  -> initialize_gateway() validates configuration eagerly
    shutdown -> close_gateway() closes the HTTP client
"""
from __future__ import annotations

from functools import lru_cache

from tts_gateway.core.config import Settings, load_settings, settings_path
from tts_gateway.services.gateway import (
    SynthesisGateway,
    get_gateway_service,
    shutdown_gateway,
)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load and cache application settings.

    The file path comes from TTS_GATEWAY_SETTINGS (default
    config/settings.yaml). A missing file means built-in defaults;
    credentials are read from the environment at this point.
    """
    return load_settings(settings_path())


def get_gateway() -> SynthesisGateway:
    """Get the singleton SynthesisGateway instance."""
    return get_gateway_service(get_settings())


def initialize_gateway() -> None:
    """
    Build the gateway on startup.

    Invalid configuration (ConfigValidationError) fails the startup instead
    of the first request. Missing credentials do not: they are reported per
    request by the adapter that needs them.
    """
    get_gateway()


def close_gateway() -> None:
    """Release the gateway's HTTP resources on shutdown."""
    shutdown_gateway()
